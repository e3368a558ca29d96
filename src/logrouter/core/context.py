"""Ambient log context propagated through the current call chain.

Properties placed here are attached to every event emitted from the same
thread or asyncio task. Context variables give each thread its own context
and each task a copy of its creator's, so properties never leak into
unrelated concurrent work.
"""

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Any

_EMPTY: MappingProxyType[str, Any] = MappingProxyType({})

_log_context: ContextVar[MappingProxyType[str, Any]] = ContextVar(
    "logrouter_log_context", default=_EMPTY
)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the ambient properties."""
    return dict(_log_context.get())


def set_log_context(**properties: Any) -> None:
    """Replace the ambient properties."""
    _log_context.set(MappingProxyType(dict(properties)))


def update_log_context(**properties: Any) -> None:
    """Merge properties into the ambient context; new values win."""
    _log_context.set(MappingProxyType({**_log_context.get(), **properties}))


def clear_log_context() -> None:
    """Remove all ambient properties."""
    _log_context.set(_EMPTY)


@contextmanager
def push_properties(**properties: Any) -> Iterator[None]:
    """Attach properties to every event emitted inside the block.

    Nested scopes merge, the innermost value winning on a key collision.
    The previous context is restored on exit, including when the block
    raises.

    Example:
        ```python
        with push_properties(foobar=1):
            logger.info("tagged")
        ```
    """
    token = _log_context.set(MappingProxyType({**_log_context.get(), **properties}))
    try:
        yield
    finally:
        _log_context.reset(token)


def push_property(name: str, value: Any) -> AbstractContextManager[None]:
    """Attach a single property for the duration of a ``with`` block."""
    return push_properties(**{name: value})
