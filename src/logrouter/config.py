"""Router configuration: frozen dataclasses, YAML loading and router assembly."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from logrouter.adapters.sinks.file import (
    DEFAULT_RETAINED_FILE_COUNT_LIMIT,
    RollingFileWriter,
)
from logrouter.core.errors import ConfigurationError
from logrouter.core.filters import (
    FilterPredicate,
    accept_all,
    by_excluding_property,
    by_including_only_property,
)
from logrouter.core.formatting import DEFAULT_OUTPUT_TEMPLATE
from logrouter.core.models import LogLevel
from logrouter.core.rotation import RollingInterval
from logrouter.core.routing import LevelGate, LogRouter, Sink

TAG_PROPERTY = "foobar"
DEFAULT_RETAINED_FILES = 366

_SINK_KEYS = frozenset(
    {
        "path",
        "name",
        "minimum_level",
        "filter",
        "template",
        "rolling_interval",
        "retained_file_count_limit",
        "buffered",
    }
)
_ROUTER_KEYS = frozenset({"minimum_level", "overrides", "sinks"})
_FILTER_KEYS = frozenset({"include_only_property", "exclude_property"})


@dataclass(frozen=True)
class FilterSpec:
    """Declarative form of a sink's filter predicate.

    At most one of the two keys may be set; neither means accept all.
    """

    include_only_property: str | None = None
    exclude_property: str | None = None

    def __post_init__(self) -> None:
        if self.include_only_property and self.exclude_property:
            raise ConfigurationError(
                "A sink filter may set include_only_property or exclude_property, not both"
            )

    def build(self) -> FilterPredicate:
        if self.include_only_property:
            return by_including_only_property(self.include_only_property)
        if self.exclude_property:
            return by_excluding_property(self.exclude_property)
        return accept_all()


@dataclass(frozen=True)
class SinkConfig:
    """One rolling file sink."""

    path: str
    name: str | None = None
    minimum_level: LogLevel = LogLevel.TRACE
    filter: FilterSpec = field(default_factory=FilterSpec)
    template: str = DEFAULT_OUTPUT_TEMPLATE
    rolling_interval: RollingInterval = RollingInterval.DAY
    retained_file_count_limit: int | None = DEFAULT_RETAINED_FILE_COUNT_LIMIT
    buffered: bool = False


@dataclass(frozen=True)
class RouterConfig:
    """Global level floor, per-source overrides and the ordered sinks."""

    minimum_level: LogLevel = LogLevel.INFORMATION
    overrides: Mapping[str, LogLevel] = field(default_factory=dict)
    sinks: tuple[SinkConfig, ...] = ()


def _parse_level(value: Any, where: str) -> LogLevel:
    try:
        return LogLevel.parse(value)
    except ValueError as e:
        raise ConfigurationError(f"{where}: {e}") from e


def _check_keys(data: Mapping[str, Any], allowed: frozenset[str], where: str) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ConfigurationError(f"{where}: unknown option(s) {', '.join(unknown)}")


def _parse_filter(data: Any, where: str) -> FilterSpec:
    if data is None:
        return FilterSpec()
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{where}.filter must be a mapping")
    _check_keys(data, _FILTER_KEYS, f"{where}.filter")
    return FilterSpec(
        include_only_property=data.get("include_only_property"),
        exclude_property=data.get("exclude_property"),
    )


def _parse_sink(data: Any, index: int, base_dir: Path | None) -> SinkConfig:
    where = f"sinks[{index}]"
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{where} must be a mapping")
    _check_keys(data, _SINK_KEYS, where)
    raw_path = data.get("path")
    if not isinstance(raw_path, str) or not raw_path.strip():
        raise ConfigurationError(f"{where}.path is required")
    path = Path(raw_path)
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path

    try:
        interval = RollingInterval.parse(data.get("rolling_interval", "day"))
    except ValueError as e:
        raise ConfigurationError(f"{where}.rolling_interval: {e}") from e

    limit = data.get("retained_file_count_limit", DEFAULT_RETAINED_FILE_COUNT_LIMIT)
    if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int)):
        raise ConfigurationError(f"{where}.retained_file_count_limit must be an integer")

    buffered = data.get("buffered", False)
    if not isinstance(buffered, bool):
        raise ConfigurationError(f"{where}.buffered must be true or false")

    return SinkConfig(
        path=str(path),
        name=data.get("name"),
        minimum_level=_parse_level(data.get("minimum_level", "trace"), f"{where}.minimum_level"),
        filter=_parse_filter(data.get("filter"), where),
        template=str(data.get("template", DEFAULT_OUTPUT_TEMPLATE)),
        rolling_interval=interval,
        retained_file_count_limit=limit,
        buffered=buffered,
    )


def config_from_mapping(data: Mapping[str, Any], base_dir: Path | None = None) -> RouterConfig:
    """Build a RouterConfig from plain data.

    Args:
        data: Mapping with ``minimum_level``, ``overrides`` and ``sinks``.
        base_dir: Directory that relative sink paths resolve against.

    Raises:
        ConfigurationError: On any missing or invalid option.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError("Configuration must be a mapping")
    _check_keys(data, _ROUTER_KEYS, "router")

    overrides_data = data.get("overrides") or {}
    if not isinstance(overrides_data, Mapping):
        raise ConfigurationError("overrides must be a mapping of source prefix to level")
    overrides = {
        str(prefix): _parse_level(level, f"overrides[{prefix}]")
        for prefix, level in overrides_data.items()
    }

    sinks_data = data.get("sinks") or []
    if not isinstance(sinks_data, list):
        raise ConfigurationError("sinks must be a list")

    return RouterConfig(
        minimum_level=_parse_level(data.get("minimum_level", "information"), "minimum_level"),
        overrides=overrides,
        sinks=tuple(_parse_sink(s, i, base_dir) for i, s in enumerate(sinks_data)),
    )


def load_config(path: str | Path) -> RouterConfig:
    """Load a RouterConfig from a YAML file.

    Relative sink paths resolve against the file's directory.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid.
    """
    config_file = Path(path)
    try:
        with open(config_file, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Configuration file not found: {config_file}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration {config_file}: {e}") from e
    return config_from_mapping(data or {}, base_dir=config_file.resolve().parent)


def default_config(base_dir: str | Path = ".") -> RouterConfig:
    """The host's built-in setup: tagged events split from the main log.

    Events carrying the ``foobar`` property go to ``foobar.txt``, all
    others to ``log.txt``; both roll daily and keep a year of files.
    """
    log_dir = Path(base_dir) / "App_Data" / "logs"
    return RouterConfig(
        minimum_level=LogLevel.INFORMATION,
        overrides={"asyncio": LogLevel.WARNING},
        sinks=(
            SinkConfig(
                path=str(log_dir / "log.txt"),
                name="main",
                minimum_level=LogLevel.INFORMATION,
                filter=FilterSpec(exclude_property=TAG_PROPERTY),
                retained_file_count_limit=DEFAULT_RETAINED_FILES,
            ),
            SinkConfig(
                path=str(log_dir / "foobar.txt"),
                name=TAG_PROPERTY,
                minimum_level=LogLevel.INFORMATION,
                filter=FilterSpec(include_only_property=TAG_PROPERTY),
                retained_file_count_limit=DEFAULT_RETAINED_FILES,
            ),
        ),
    )


def build_sink(config: SinkConfig, clock: Callable[[], datetime] | None = None) -> Sink:
    writer = RollingFileWriter(
        config.path,
        name=config.name,
        template=config.template,
        rolling_interval=config.rolling_interval,
        retained_file_count_limit=config.retained_file_count_limit,
        buffered=config.buffered,
        clock=clock,
    )
    return Sink(writer=writer, minimum_level=config.minimum_level, predicate=config.filter.build())


def build_router(
    config: RouterConfig, clock: Callable[[], datetime] | None = None
) -> LogRouter:
    """Construct every sink and the router; fail fast on bad configuration.

    Raises:
        ConfigurationError: If any sink cannot be constructed.
    """
    sinks: list[Sink] = []
    try:
        for sink_config in config.sinks:
            sinks.append(build_sink(sink_config, clock))
    except ConfigurationError:
        for sink in sinks:
            sink.writer.close()
        raise
    gate = LevelGate(config.minimum_level, config.overrides)
    return LogRouter(sinks, gate)
