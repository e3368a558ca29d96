"""Fallback diagnostic channel for failures inside the router itself.

Sink failures cannot be logged through the sinks that failed, so they are
reported on a dedicated stdlib logger that writes to the process's standard
error stream. The logger does not propagate: when the root logger is bridged
into a router, a failing sink must not feed its own failure back into it.
"""

import logging
import sys

from logrouter.core.errors import LogRouterError

SELFLOG_NAME = "logrouter.selflog"


class _StderrHandler(logging.StreamHandler):
    """Stream handler bound to whatever ``sys.stderr`` is at emit time."""

    def __init__(self) -> None:
        super().__init__(sys.stderr)

    def emit(self, record: logging.LogRecord) -> None:
        self.stream = sys.stderr
        super().emit(record)


def _build_selflog() -> logging.Logger:
    logger = logging.getLogger(SELFLOG_NAME)
    logger.propagate = False
    logger.setLevel(logging.WARNING)
    if not any(isinstance(h, _StderrHandler) for h in logger.handlers):
        handler = _StderrHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s [logrouter] %(levelname)s %(message)s")
        )
        logger.addHandler(handler)
    return logger


selflog = _build_selflog()


def report(error: LogRouterError) -> None:
    """Report a recovered router error on the fallback channel.

    Args:
        error: The error; its ``cause`` (if any) supplies the traceback.
    """
    cause = getattr(error, "cause", None)
    if isinstance(cause, BaseException):
        exc_info = (type(cause), cause, cause.__traceback__)
        selflog.error("%s", error, exc_info=exc_info)
    else:
        selflog.error("%s", error)
