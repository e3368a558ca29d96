"""Minimal service container for the host process."""

import threading
from collections.abc import Callable
from typing import Any

Factory = Callable[["ServiceContainer"], Any]


class ServiceContainer:
    """Registers service factories and builds each singleton once.

    Factories receive the container, so a service resolves its own
    dependencies (including its logger) at construction instead of reaching
    for global state.

    Example:
        ```python
        container = ServiceContainer()
        container.add_instance(LogRouter, router)
        container.add_singleton(
            GreeterService,
            lambda c: Greeter(c.resolve(LogRouter).for_type(Greeter)),
        )
        greeter = container.resolve(GreeterService)
        ```
    """

    def __init__(self) -> None:
        self._factories: dict[Any, Factory] = {}
        self._instances: dict[Any, Any] = {}
        self._hosted: list[Factory] = []
        self._hosted_instances: list[Any] | None = None
        self._lock = threading.RLock()

    def add_singleton(self, key: Any, factory: Factory) -> "ServiceContainer":
        """Register a lazily built singleton.

        Raises:
            TypeError: If factory is not callable.
            ValueError: If key is already registered.
        """
        if not callable(factory):
            raise TypeError("factory must be callable")
        with self._lock:
            if key in self._factories or key in self._instances:
                raise ValueError(f"Service {key!r} already registered")
            self._factories[key] = factory
        return self

    def add_instance(self, key: Any, instance: Any) -> "ServiceContainer":
        """Register an already constructed singleton."""
        with self._lock:
            if key in self._factories or key in self._instances:
                raise ValueError(f"Service {key!r} already registered")
            self._instances[key] = instance
        return self

    def add_hosted_service(self, factory: Factory) -> "ServiceContainer":
        """Register a background service started by the host."""
        if not callable(factory):
            raise TypeError("factory must be callable")
        with self._lock:
            self._hosted.append(factory)
        return self

    def resolve(self, key: Any) -> Any:
        """Return the singleton registered under key, building it on first use.

        Raises:
            KeyError: If nothing is registered under key.
        """
        with self._lock:
            if key in self._instances:
                return self._instances[key]
            factory = self._factories.get(key)
            if factory is None:
                raise KeyError(f"No service registered for {key!r}")
            instance = factory(self)
            self._instances[key] = instance
            return instance

    def hosted_services(self) -> list[Any]:
        """Build (once) and return the hosted services in registration order."""
        with self._lock:
            if self._hosted_instances is None:
                self._hosted_instances = [factory(self) for factory in self._hosted]
            return list(self._hosted_instances)
