"""Logger facade bound to a source context."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from logrouter.core.models import LogLevel

if TYPE_CHECKING:
    from logrouter.core.routing import LogRouter


def source_context_for(target: type | object) -> str:
    """Derive a source context from a class or an instance of it."""
    cls = target if isinstance(target, type) else type(target)
    return f"{cls.__module__}.{cls.__qualname__}"


class Logger:
    """Emits events to a router under a fixed source context.

    Keyword arguments fill the message template's placeholders; contextual
    properties used for routing go in ``properties``.

    Example:
        ```python
        logger = router.for_context("Worker")
        logger.info("Processed {count} items", count=3)
        logger.info("Tagged", properties={"foobar": 1})
        ```
    """

    def __init__(self, router: "LogRouter", source_context: str) -> None:
        self._router = router
        self._source_context = source_context

    @property
    def source_context(self) -> str:
        return self._source_context

    def for_context(self, source_context: str) -> "Logger":
        """Return a logger on the same router under another source context."""
        return Logger(self._router, source_context)

    def for_type(self, target: type | object) -> "Logger":
        """Return a logger whose source context names a class."""
        return Logger(self._router, source_context_for(target))

    def is_enabled(self, level: LogLevel) -> bool:
        return self._router.is_enabled(level, self._source_context)

    def log(
        self,
        level: LogLevel,
        message_template: str,
        /,
        *,
        exception: BaseException | None = None,
        properties: Mapping[str, Any] | None = None,
        **args: Any,
    ) -> None:
        self._router.emit(
            level,
            self._source_context,
            message_template,
            args=args,
            properties=properties,
            exception=exception,
        )

    def trace(self, message_template: str, /, **kwargs: Any) -> None:
        self.log(LogLevel.TRACE, message_template, **kwargs)

    def debug(self, message_template: str, /, **kwargs: Any) -> None:
        self.log(LogLevel.DEBUG, message_template, **kwargs)

    def info(self, message_template: str, /, **kwargs: Any) -> None:
        self.log(LogLevel.INFORMATION, message_template, **kwargs)

    def warning(self, message_template: str, /, **kwargs: Any) -> None:
        self.log(LogLevel.WARNING, message_template, **kwargs)

    def error(self, message_template: str, /, **kwargs: Any) -> None:
        self.log(LogLevel.ERROR, message_template, **kwargs)

    def fatal(self, message_template: str, /, **kwargs: Any) -> None:
        self.log(LogLevel.FATAL, message_template, **kwargs)
