"""Error taxonomy for the log router."""


class LogRouterError(Exception):
    """Base class for log router errors."""


class ConfigurationError(LogRouterError):
    """Invalid router or sink configuration.

    Raised at startup. The process is expected to abort before any
    worker runs.
    """


class WriteError(LogRouterError):
    """A sink failed to accept or persist an event.

    The event is dropped for that sink only.
    """

    def __init__(self, sink_name: str, cause: BaseException) -> None:
        self.sink_name = sink_name
        self.cause = cause
        super().__init__(
            f"Sink {sink_name!r} failed to write event: {type(cause).__name__}: {cause}"
        )


class RetentionCleanupError(LogRouterError):
    """An old rotated file could not be deleted."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(
            f"Failed to delete rotated file {path}: {type(cause).__name__}: {cause}"
        )
