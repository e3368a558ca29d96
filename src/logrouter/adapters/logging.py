"""Python logging handler adapter for the log router.

This adapter bridges Python's standard library logging module to a
LogRouter, so records from libraries and frameworks pass through the same
level gate, filters and sinks as events emitted directly.
"""

import logging
from typing import Any

from logrouter.core.formatting import escape_template
from logrouter.core.models import LogLevel
from logrouter.core.routing import LogRouter

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


class RouterHandler(logging.Handler):
    """Logging handler that forwards records to a LogRouter.

    The logger name becomes the source context, ``extra`` fields become
    event properties, and ``exc_info`` becomes the event exception.

    Example:
        ```python
        handler = RouterHandler(router)
        logging.getLogger().addHandler(handler)
        logging.getLogger("asyncio").warning("slow callback")
        ```
    """

    def __init__(self, router: LogRouter) -> None:
        """Initialize the handler with the router it forwards to.

        Args:
            router: Router receiving the converted records.
        """
        super().__init__()
        self._router = router

    @property
    def router(self) -> LogRouter:
        return self._router

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record through the router.

        Args:
            record: The log record to emit.
        """
        try:
            message = record.getMessage()
        except Exception:
            self.handleError(record)
            return

        # Add any extra attributes passed via logging call
        properties: dict[str, Any] = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_LOGRECORD_ATTRS and not key.startswith("_")
        }

        exception = None
        if record.exc_info and record.exc_info[1] is not None:
            exception = record.exc_info[1]

        self._router.emit(
            LogLevel.from_stdlib(record.levelno),
            record.name,
            escape_template(message),
            properties=properties,
            exception=exception,
        )


def install_router_handler(
    router: LogRouter,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
) -> RouterHandler:
    """Attach a RouterHandler to a logger (the root logger by default).

    Installing twice for the same router returns the existing handler.

    Args:
        router: Router receiving the records.
        logger: Logger to attach to.
        level: Level set on the logger; the router's own gate still applies.

    Returns:
        The attached handler.
    """
    target = logger or logging.getLogger()
    for existing in target.handlers:
        if isinstance(existing, RouterHandler) and existing.router is router:
            return existing
    handler = RouterHandler(router)
    target.addHandler(handler)
    target.setLevel(level)
    return handler
