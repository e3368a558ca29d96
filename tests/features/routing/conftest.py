"""BDD step definitions for tag-based routing features."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from logrouter.adapters.sinks.file import RollingFileWriter
from logrouter.core.context import push_property
from logrouter.core.filters import (
    FilterPredicate,
    by_excluding_property,
    by_including_only_property,
)
from logrouter.core.models import LogEvent, LogLevel
from logrouter.core.rotation import BucketPath, RollingInterval
from logrouter.core.routing import LevelGate, LogRouter, Sink

SCENARIO_TIME = datetime(2024, 1, 15, 12, 0, 0)
LINE_TEMPLATE = "{timestamp:%H:%M:%S} [{level}] [{source_context}] {message}{newline}"


class AlwaysFailingWriter:
    """Sink writer standing in for a disk that rejects every write."""

    name = "failing"

    def write(self, event: LogEvent) -> None:
        raise OSError(28, "No space left on device")

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


@dataclass
class FileSinkSpec:
    file_name: str
    predicate: FilterPredicate


@dataclass
class RoutingScenarioContext:
    """State shared between the steps of one scenario."""

    log_dir: Path
    file_sinks: list[FileSinkSpec] = field(default_factory=list)
    extra_writers: list[Any] = field(default_factory=list)
    gate: LevelGate | None = None
    buffered: bool = False
    router: LogRouter | None = None
    reports: list[logging.LogRecord] = field(default_factory=list)

    def get_router(self) -> LogRouter:
        """Build the router on first use so later Given steps can add sinks."""
        if self.router is None:
            sinks = [
                Sink(
                    RollingFileWriter(
                        self.log_dir / spec.file_name,
                        name=spec.file_name,
                        template=LINE_TEMPLATE,
                        buffered=self.buffered,
                        clock=lambda: SCENARIO_TIME,
                    ),
                    LogLevel.INFORMATION,
                    spec.predicate,
                )
                for spec in self.file_sinks
            ]
            sinks.extend(Sink(writer) for writer in self.extra_writers)
            self.router = LogRouter(sinks, self.gate)
        return self.router

    def lines_of(self, file_name: str) -> list[str]:
        bucket = RollingInterval.DAY.bucket_start(SCENARIO_TIME)
        path = BucketPath(self.log_dir / file_name, RollingInterval.DAY).path_for(bucket)
        if not path.exists():
            return []
        return path.read_text(encoding="utf-8").splitlines()


@pytest.fixture
def ctx(tmp_path: Path) -> Iterator[RoutingScenarioContext]:
    """Fresh scenario context for each test."""
    context = RoutingScenarioContext(log_dir=tmp_path / "logs")
    yield context
    if context.router is not None:
        context.router.close_and_flush()


# === Background Steps ===
@given(parsers.parse('a main sink at "{file_name}" excluding the "{key}" property'))
def step_main_sink(ctx: RoutingScenarioContext, file_name: str, key: str) -> None:
    ctx.file_sinks.append(FileSinkSpec(file_name, by_excluding_property(key)))


@given(parsers.parse('a tagged sink at "{file_name}" including only the "{key}" property'))
def step_tagged_sink(ctx: RoutingScenarioContext, file_name: str, key: str) -> None:
    ctx.file_sinks.append(FileSinkSpec(file_name, by_including_only_property(key)))


@given(
    parsers.parse(
        'a router with minimum level "{level}" and "{prefix}" raised to "{override}"'
    )
)
def step_router(ctx: RoutingScenarioContext, level: str, prefix: str, override: str) -> None:
    ctx.gate = LevelGate(LogLevel.parse(level), {prefix: LogLevel.parse(override)})


@given("an extra sink that always fails")
def step_failing_sink(
    ctx: RoutingScenarioContext, selflog_records: list[logging.LogRecord]
) -> None:
    ctx.reports = selflog_records
    ctx.extra_writers.insert(0, AlwaysFailingWriter())


@given("the sinks buffer their output")
def step_buffered(ctx: RoutingScenarioContext) -> None:
    ctx.buffered = True


# === Action Steps ===
@when(parsers.parse('"{source}" logs "{message}" with the "{key}" property pushed'))
def step_log_tagged(ctx: RoutingScenarioContext, source: str, message: str, key: str) -> None:
    router = ctx.get_router()
    with push_property(key, 1):
        router.for_context(source).info(message)


@when(parsers.parse('"{source}" logs "{message}" without tags'))
def step_log_untagged(ctx: RoutingScenarioContext, source: str, message: str) -> None:
    ctx.get_router().for_context(source).info(message)


@when(parsers.parse('"{source}" warns "{message}" without tags'))
def step_warn_untagged(ctx: RoutingScenarioContext, source: str, message: str) -> None:
    ctx.get_router().for_context(source).warning(message)


@when("the router is closed")
def step_close(ctx: RoutingScenarioContext) -> None:
    ctx.get_router().close_and_flush()


# === Assertion Steps ===
@then(parsers.parse('the file "{file_name}" contains the line ending "{suffix}"'))
def step_file_contains(ctx: RoutingScenarioContext, file_name: str, suffix: str) -> None:
    lines = ctx.lines_of(file_name)
    assert any(line.endswith(suffix) for line in lines), lines


@then(parsers.parse('the file "{file_name}" has no lines'))
def step_file_empty(ctx: RoutingScenarioContext, file_name: str) -> None:
    assert ctx.lines_of(file_name) == []


@then(parsers.parse('the file "{file_name}" has {count:d} line'))
def step_file_count(ctx: RoutingScenarioContext, file_name: str, count: int) -> None:
    assert len(ctx.lines_of(file_name)) == count


@then("a write failure is reported for the failing sink")
def step_failure_reported(ctx: RoutingScenarioContext) -> None:
    messages = [r.getMessage() for r in ctx.reports]
    assert any("'failing'" in m and "No space left on device" in m for m in messages), messages


@then("events logged after closing are ignored")
def step_after_close(ctx: RoutingScenarioContext) -> None:
    before = ctx.lines_of("log.txt")
    ctx.get_router().for_context("Worker").info("too late")
    assert ctx.lines_of("log.txt") == before
