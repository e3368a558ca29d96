"""Port interfaces for sink writers.

The router depends only on this protocol, not on concrete destinations.
"""

from typing import Protocol, runtime_checkable

from logrouter.core.models import LogEvent


@runtime_checkable
class SinkWriterPort(Protocol):
    """Port for a destination that persists accepted events.

    Adapters implementing this protocol receive every event their sink
    accepted. Examples: RollingFileWriter, InMemoryWriter.
    """

    name: str

    def write(self, event: LogEvent) -> None:
        """Format and persist one event. May raise on I/O failure."""
        ...

    def flush(self) -> None:
        """Push buffered output to the underlying storage."""
        ...

    def close(self) -> None:
        """Flush and release resources. Safe to call more than once."""
        ...
