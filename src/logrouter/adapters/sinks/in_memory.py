"""In-memory sink writer."""

from logrouter.core.formatting import DEFAULT_OUTPUT_TEMPLATE, format_event
from logrouter.core.models import LogEvent


class InMemoryWriter:
    """In-memory implementation of SinkWriterPort.

    Keeps accepted events and their formatted text in lists. Suitable for
    testing and for embedding the router where persistence is not required.
    """

    def __init__(self, name: str = "memory", template: str = DEFAULT_OUTPUT_TEMPLATE) -> None:
        self.name = name
        self._template = template
        self._events: list[LogEvent] = []
        self._lines: list[str] = []
        self.closed = False

    @property
    def events(self) -> list[LogEvent]:
        return list(self._events)

    @property
    def lines(self) -> list[str]:
        """Formatted output, one entry per event."""
        return list(self._lines)

    def write(self, event: LogEvent) -> None:
        """Record an event and its formatted text."""
        self._lines.append(format_event(event, self._template))
        self._events.append(event)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True
