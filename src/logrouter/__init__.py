"""Tag-based log routing to rolling files, and the host process that uses it."""

from importlib.metadata import PackageNotFoundError, version

from logrouter.adapters.logging import RouterHandler, install_router_handler
from logrouter.adapters.sinks import InMemoryWriter, RollingFileWriter
from logrouter.core.context import (
    clear_log_context,
    get_log_context,
    push_properties,
    push_property,
    set_log_context,
    update_log_context,
)
from logrouter.core.errors import (
    ConfigurationError,
    LogRouterError,
    RetentionCleanupError,
    WriteError,
)
from logrouter.core.filters import (
    accept_all,
    by_excluding_property,
    by_including_only_property,
)
from logrouter.core.logger import Logger
from logrouter.core.models import LogEvent, LogLevel
from logrouter.core.rotation import RollingInterval
from logrouter.core.routing import LevelGate, LogRouter, Sink

try:
    __version__ = version("logrouter")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "ConfigurationError",
    "InMemoryWriter",
    "LevelGate",
    "LogEvent",
    "LogLevel",
    "LogRouter",
    "LogRouterError",
    "Logger",
    "RetentionCleanupError",
    "RollingFileWriter",
    "RollingInterval",
    "RouterHandler",
    "Sink",
    "WriteError",
    "__version__",
    "accept_all",
    "by_excluding_property",
    "by_including_only_property",
    "clear_log_context",
    "get_log_context",
    "install_router_handler",
    "push_properties",
    "push_property",
    "set_log_context",
    "update_log_context",
]
