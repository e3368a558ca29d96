"""Shared test fixtures for all test modules."""

import logging
from collections.abc import Iterator
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from logrouter.core.context import clear_log_context
from logrouter.core.diagnostics import selflog


class FakeClock:
    """Settable local-time clock for rotation tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


class _RecordCapture(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture(autouse=True)
def _fresh_log_context() -> Iterator[None]:
    """Every test starts and ends with an empty ambient context."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for sink files."""
    return tmp_path / "logs"


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at noon on 2024-01-15, advanced explicitly by tests."""
    return FakeClock(datetime(2024, 1, 15, 12, 0, 0))


@pytest.fixture
def selflog_records() -> Iterator[list[logging.LogRecord]]:
    """Capture what the router reports on its fallback channel."""
    capture = _RecordCapture()
    selflog.addHandler(capture)
    try:
        yield capture.records
    finally:
        selflog.removeHandler(capture)
