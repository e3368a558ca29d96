"""Background services run by the host."""

import asyncio
from abc import ABC, abstractmethod

from logrouter.config import TAG_PROPERTY
from logrouter.core.context import push_property
from logrouter.core.logger import Logger
from logrouter.host.services import GreeterService


class BackgroundService(ABC):
    """A long-running unit of work started by the host."""

    @abstractmethod
    async def execute(self, stopping: asyncio.Event) -> None:
        """Run until done or until ``stopping`` is set."""


class Worker(BackgroundService):
    """Emits its log lines under the ``foobar`` tag, then finishes.

    Everything logged inside the tagged scope, including the greeter's
    output, is routed to the tagged sink.
    """

    def __init__(self, logger: Logger, greeter: GreeterService) -> None:
        self._logger = logger
        self._greeter = greeter

    async def execute(self, stopping: asyncio.Event) -> None:
        with push_property(TAG_PROPERTY, 1):
            self._foo()
            await asyncio.sleep(0)

    def _foo(self) -> None:
        self._logger.info("foo")
        self._greeter.bar()
