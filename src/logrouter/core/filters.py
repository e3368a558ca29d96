"""Filter predicates deciding which events a sink accepts.

Predicates are pure functions over an event's properties. A pair built
from ``by_excluding_property(key)`` and ``by_including_only_property(key)``
on the same key partitions events: each one is accepted by exactly one of
the two.
"""

from collections.abc import Callable, Mapping
from typing import Any

FilterPredicate = Callable[[Mapping[str, Any]], bool]


def accept_all() -> FilterPredicate:
    """Predicate accepting every event."""

    def predicate(properties: Mapping[str, Any]) -> bool:
        return True

    return predicate


def by_excluding_property(key: str) -> FilterPredicate:
    """Reject events carrying property ``key``."""

    def predicate(properties: Mapping[str, Any]) -> bool:
        return key not in properties

    predicate.__qualname__ = f"by_excluding_property({key!r})"
    return predicate


def by_including_only_property(key: str) -> FilterPredicate:
    """Reject events that do not carry property ``key``."""

    def predicate(properties: Mapping[str, Any]) -> bool:
        return key in properties

    predicate.__qualname__ = f"by_including_only_property({key!r})"
    return predicate
