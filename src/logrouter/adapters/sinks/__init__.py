"""Sink writers implementing the core writer port."""

from logrouter.adapters.sinks.file import RollingFileWriter
from logrouter.adapters.sinks.in_memory import InMemoryWriter

__all__ = [
    "InMemoryWriter",
    "RollingFileWriter",
]
