"""Greeter service used by the worker."""

from typing import Protocol, runtime_checkable

from logrouter.core.logger import Logger


@runtime_checkable
class GreeterService(Protocol):
    def bar(self) -> None: ...


class Greeter:
    """Logs a single line whenever it is asked to greet."""

    def __init__(self, logger: Logger) -> None:
        self._logger = logger

    def bar(self) -> None:
        self._logger.info("bar")
