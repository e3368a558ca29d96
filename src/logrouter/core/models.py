"""Core domain models for routed log events."""

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from types import MappingProxyType
from typing import Any


class LogLevel(IntEnum):
    """Ordered event severity.

    Ordering: TRACE < DEBUG < INFORMATION < WARNING < ERROR < FATAL
    """

    TRACE = 0
    DEBUG = 1
    INFORMATION = 2
    WARNING = 3
    ERROR = 4
    FATAL = 5

    @property
    def abbreviation(self) -> str:
        """Four character uppercase form used in formatted output."""
        return _ABBREVIATIONS[self]

    @classmethod
    def parse(cls, value: "str | int | LogLevel") -> "LogLevel":
        """Parse a level from its name, a common alias, or an existing level.

        Args:
            value: Level name (case-insensitive), alias, or LogLevel.

        Returns:
            The matching LogLevel.

        Raises:
            ValueError: If the value names no known level.
        """
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if not isinstance(value, str):
            raise ValueError(f"Invalid log level: {value!r}")
        key = value.strip().upper()
        if key in cls.__members__:
            return cls[key]
        if key in _ALIASES:
            return _ALIASES[key]
        raise ValueError(f"Invalid log level: {value!r}")

    @classmethod
    def from_stdlib(cls, levelno: int) -> "LogLevel":
        """Map a stdlib ``logging`` numeric level onto a LogLevel."""
        if levelno >= logging.CRITICAL:
            return cls.FATAL
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARNING
        if levelno >= logging.INFO:
            return cls.INFORMATION
        if levelno >= logging.DEBUG:
            return cls.DEBUG
        return cls.TRACE


_ABBREVIATIONS = {
    LogLevel.TRACE: "VERB",
    LogLevel.DEBUG: "DBUG",
    LogLevel.INFORMATION: "INFO",
    LogLevel.WARNING: "WARN",
    LogLevel.ERROR: "EROR",
    LogLevel.FATAL: "FATL",
}

_ALIASES = {
    "VERBOSE": LogLevel.TRACE,
    "INFO": LogLevel.INFORMATION,
    "WARN": LogLevel.WARNING,
    "CRITICAL": LogLevel.FATAL,
}


@dataclass(frozen=True)
class LogEvent:
    """A structured log event.

    Attributes:
        timestamp: Unix timestamp in seconds, assigned at creation.
        level: Event severity.
        source_context: Logical emitter, e.g. a component name.
        message_template: Message with named ``{placeholder}`` holes.
        args: Values for the message template placeholders.
        properties: Contextual properties used for routing decisions.
        exception: Optional error attached to the event.
        thread_id: Native id of the producing thread.
    """

    timestamp: float
    level: LogLevel
    source_context: str
    message_template: str
    args: Mapping[str, Any] = field(default_factory=dict)
    properties: Mapping[str, Any] = field(default_factory=dict)
    exception: BaseException | None = None
    thread_id: int = 0

    def __post_init__(self) -> None:
        # Sinks share one event; copy the mappings and expose them read-only
        object.__setattr__(self, "args", MappingProxyType(dict(self.args)))
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @property
    def local_time(self) -> datetime:
        """The event timestamp as a naive local-time datetime."""
        return datetime.fromtimestamp(self.timestamp)

    @classmethod
    def create(
        cls,
        level: LogLevel,
        source_context: str,
        message_template: str,
        args: Mapping[str, Any] | None = None,
        properties: Mapping[str, Any] | None = None,
        exception: BaseException | None = None,
        thread_id: int = 0,
    ) -> "LogEvent":
        """Create an event stamped with the current time."""
        return cls(
            timestamp=time.time(),
            level=level,
            source_context=source_context,
            message_template=message_template,
            args=args or {},
            properties=properties or {},
            exception=exception,
            thread_id=thread_id,
        )
