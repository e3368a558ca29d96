"""Event routing: global level gate, per-sink selection and dispatch."""

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any

from logrouter.core.context import get_log_context
from logrouter.core.diagnostics import report
from logrouter.core.errors import WriteError
from logrouter.core.filters import FilterPredicate, accept_all
from logrouter.core.logger import Logger, source_context_for
from logrouter.core.models import LogEvent, LogLevel
from logrouter.core.ports import SinkWriterPort


class LevelGate:
    """Coarse level floor applied before any sink sees an event.

    Source overrides floor whole namespaces: an override for ``"asyncio"``
    applies to ``"asyncio"`` and ``"asyncio.events"`` but not to
    ``"asyncio_extras"``. The longest matching prefix wins.

    Args:
        minimum_level: Floor for sources without an override.
        overrides: Mapping of source-context prefix to floor level.
    """

    def __init__(
        self,
        minimum_level: LogLevel = LogLevel.INFORMATION,
        overrides: Mapping[str, LogLevel | str] | None = None,
    ) -> None:
        self.minimum_level = LogLevel.parse(minimum_level)
        self._overrides = sorted(
            ((prefix, LogLevel.parse(level)) for prefix, level in (overrides or {}).items()),
            key=lambda item: len(item[0]),
            reverse=True,
        )

    @property
    def overrides(self) -> dict[str, LogLevel]:
        return dict(self._overrides)

    def floor_for(self, source_context: str) -> LogLevel:
        """Return the effective minimum level for a source context."""
        for prefix, level in self._overrides:
            if source_context == prefix or source_context.startswith(prefix + "."):
                return level
        return self.minimum_level

    def allows(self, level: LogLevel, source_context: str) -> bool:
        return level >= self.floor_for(source_context)


@dataclass
class Sink:
    """A writer guarded by a level floor and a property filter.

    The router evaluates every sink independently; nothing stops two sinks
    from accepting the same event, or neither from accepting it.
    """

    writer: SinkWriterPort
    minimum_level: LogLevel = LogLevel.TRACE
    predicate: FilterPredicate = field(default_factory=accept_all)

    @property
    def name(self) -> str:
        return self.writer.name

    def accepts(self, event: LogEvent) -> bool:
        """Level floor first, then the filter predicate."""
        if event.level < self.minimum_level:
            return False
        return self.predicate(event.properties)


class LogRouter:
    """Distributes log events to every sink that accepts them.

    Construct one router at startup and pass it (or loggers derived from
    it with ``for_context``) to the components that log. Close it exactly
    once at shutdown with ``close_and_flush``, or use it as a context
    manager.

    Example:
        ```python
        router = LogRouter([Sink(InMemoryWriter("memory"))])
        with router:
            router.for_context("Worker").info("Started {job}", job="sync")
        ```
    """

    def __init__(self, sinks: Iterable[Sink], gate: LevelGate | None = None) -> None:
        self._sinks = tuple(sinks)
        self._gate = gate or LevelGate()
        self._closed = False
        self._close_lock = threading.Lock()

    @property
    def sinks(self) -> tuple[Sink, ...]:
        return self._sinks

    @property
    def gate(self) -> LevelGate:
        return self._gate

    @property
    def closed(self) -> bool:
        return self._closed

    def is_enabled(self, level: LogLevel, source_context: str = "") -> bool:
        """Return True if an event would pass the global gate."""
        return not self._closed and self._gate.allows(level, source_context)

    def for_context(self, source_context: str) -> Logger:
        """Return a logger emitting under the given source context."""
        return Logger(self, source_context)

    def for_type(self, target: type | object) -> Logger:
        """Return a logger whose source context names a class."""
        return Logger(self, source_context_for(target))

    def emit(
        self,
        level: LogLevel,
        source_context: str,
        message_template: str,
        args: Mapping[str, Any] | None = None,
        properties: Mapping[str, Any] | None = None,
        exception: BaseException | None = None,
    ) -> None:
        """Create an event and deliver it to every accepting sink.

        Ambient context properties are merged under the explicit
        ``properties``. Never raises: sink failures are reported on the
        fallback channel and do not affect other sinks.
        """
        if not self.is_enabled(level, source_context):
            return
        merged = get_log_context()
        if properties:
            merged.update(properties)
        event = LogEvent.create(
            level=level,
            source_context=source_context,
            message_template=message_template,
            args=dict(args or {}),
            properties=merged,
            exception=exception,
            thread_id=threading.get_native_id(),
        )
        self.dispatch(event)

    def dispatch(self, event: LogEvent) -> None:
        """Deliver an already-built event, bypassing the global gate."""
        if self._closed:
            return
        for sink in self._sinks:
            try:
                if sink.accepts(event):
                    sink.writer.write(event)
            except Exception as e:
                report(WriteError(sink.name, e))

    def flush(self) -> None:
        """Flush every sink without closing it."""
        for sink in self._sinks:
            try:
                sink.writer.flush()
            except Exception as e:
                report(WriteError(sink.name, e))

    def close_and_flush(self) -> None:
        """Flush and close every sink. Later calls and events are ignored."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        for sink in self._sinks:
            try:
                sink.writer.close()
            except Exception as e:
                report(WriteError(sink.name, e))

    def __enter__(self) -> "LogRouter":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close_and_flush()
