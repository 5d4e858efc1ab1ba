"""Structural Type Inspection

Answers three structural questions about a runtime value's type:

- is it a container (sized collection of elements)?
- is it a key/value mapping?
- is it a raisable error type?

The type's ancestry is computed with an explicit walk over ``__bases__``
guarded by an identity-keyed seen set, so diamond hierarchies are visited
once and foreign objects with cyclic ``__bases__`` still terminate. Values
reaching the rules arrive from arbitrary callers (including JSON bodies on
the HTTP surface), so the walk stays dynamic rather than relying on static
annotations.
"""
from __future__ import annotations

from collections.abc import Collection, Mapping
from enum import Enum
from typing import Any


class Capability(str, Enum):
    """Structural capability a type may satisfy."""
    CONTAINER = "container"
    MAPPING = "mapping"
    ERROR = "error"


_MARKERS: dict[Capability, type] = {
    Capability.CONTAINER: Collection,
    Capability.MAPPING: Mapping,
    Capability.ERROR: Exception,
}


def compute_ancestry(cls: Any) -> frozenset:
    """Collect ``cls`` and every class reachable through its bases.

    Order-insensitive and deduplicated. No caching across calls.
    """
    seen: dict[int, Any] = {}
    stack = [cls]
    while stack:
        current = stack.pop()
        if current is None or id(current) in seen:
            continue
        seen[id(current)] = current
        stack.extend(getattr(current, "__bases__", ()) or ())
    return frozenset(seen.values())


def _conforms(ancestor: Any, marker: type) -> bool:
    # ABC markers also accept virtually registered classes (list, dict, ...)
    if not isinstance(ancestor, type):
        return False
    try:
        return issubclass(ancestor, marker)
    except TypeError:
        return False


def type_includes(cls: Any, capability: Capability) -> bool:
    """Whether the ancestry of ``cls`` contains the capability's marker type."""
    marker = _MARKERS[capability]
    ancestry = compute_ancestry(cls)
    if marker in ancestry:
        return True
    return any(_conforms(ancestor, marker) for ancestor in ancestry)


def ancestry_includes(value: Any, capability: Capability) -> bool:
    """Whether the concrete type of ``value`` satisfies ``capability``."""
    return type_includes(type(value), capability)


def is_container(value: Any) -> bool:
    return ancestry_includes(value, Capability.CONTAINER)


def is_mapping(value: Any) -> bool:
    return ancestry_includes(value, Capability.MAPPING)


def is_error_type(cls: Any) -> bool:
    """Whether ``cls`` is a class whose instances can be raised as errors."""
    return isinstance(cls, type) and type_includes(cls, Capability.ERROR)
