"""Host loop: runs background services until shutdown is requested."""

import asyncio
import signal

from logrouter.core.logger import Logger
from logrouter.host.container import ServiceContainer

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class Host:
    """Runs the container's hosted services as asyncio tasks.

    The host keeps running after its services finish, until ``stop()`` is
    called or SIGINT/SIGTERM arrives, unless ``stop_when_idle`` is set. A
    service that raises stops the host and the error is re-raised from
    ``run()``.

    Args:
        container: Container holding the hosted services.
        logger: Logger for lifetime events.
        environment: Hosting environment name, logged at startup.
        stop_when_idle: Stop once every hosted service has returned.
    """

    def __init__(
        self,
        container: ServiceContainer,
        logger: Logger,
        environment: str = "Production",
        stop_when_idle: bool = False,
    ) -> None:
        self._container = container
        self._logger = logger
        self._environment = environment
        self._stop_when_idle = stop_when_idle
        self._stopping = asyncio.Event()

    @property
    def stopping(self) -> asyncio.Event:
        return self._stopping

    def stop(self) -> None:
        """Request shutdown."""
        self._stopping.set()

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> list[int]:
        installed = []
        for sig in _SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(sig, self.stop)
            except (NotImplementedError, RuntimeError, ValueError):
                # Not on the main thread, or no loop signal support on this platform
                continue
            installed.append(sig)
        return installed

    async def run(self) -> None:
        """Start services, wait for shutdown, then cancel what is still running."""
        loop = asyncio.get_running_loop()
        installed = self._install_signal_handlers(loop)

        services = self._container.hosted_services()
        pending: set[asyncio.Task[None]] = {
            asyncio.create_task(service.execute(self._stopping), name=type(service).__name__)
            for service in services
        }
        self._logger.info(
            "Application started. Hosting environment: {environment}",
            environment=self._environment,
        )
        waiter = asyncio.create_task(self._stopping.wait())
        failure: BaseException | None = None
        try:
            while not self._stopping.is_set():
                if not pending and self._stop_when_idle:
                    self.stop()
                    break
                done, pending = await asyncio.wait(
                    pending | {waiter}, return_when=asyncio.FIRST_COMPLETED
                )
                pending.discard(waiter)
                for task in done:
                    if task is waiter or task.cancelled():
                        continue
                    exc = task.exception()
                    if exc is not None and failure is None:
                        failure = exc
                        self._logger.error(
                            "Background service {service} failed",
                            service=task.get_name(),
                            exception=exc,
                        )
                        self.stop()
        finally:
            self._logger.info("Application is shutting down...")
            waiter.cancel()
            for task in pending:
                task.cancel()
            await asyncio.gather(waiter, *pending, return_exceptions=True)
            for sig in installed:
                loop.remove_signal_handler(sig)

        if failure is not None:
            raise failure
