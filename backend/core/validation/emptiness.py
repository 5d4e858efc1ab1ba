"""Emptiness policy.

Emptiness is only defined for containers, mappings and text. Any other value
that is merely present (numbers, booleans, arbitrary objects) is not empty.
"""
from __future__ import annotations

from typing import Any, Final, final

from .ancestry import is_container, is_mapping


@final
class NullPayload:
    """Sentinel for "no payload", distinct from a value that happens to be falsy."""

    _instance: "NullPayload | None" = None

    def __new__(cls) -> "NullPayload":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NULL_PAYLOAD"

    def __bool__(self) -> bool:
        return False


NULL_PAYLOAD: Final = NullPayload()


def is_empty(value: Any) -> bool:
    """Classify ``value`` as empty.

    - ``None`` / ``NULL_PAYLOAD``: empty
    - container or mapping: empty iff it has no elements
    - ``str``: empty iff it has no characters
    - anything else: never empty
    """
    if value is None or isinstance(value, NullPayload):
        return True
    if is_container(value):
        return len(value) == 0
    if is_mapping(value):
        return len(value) == 0
    if isinstance(value, str):
        return len(value) == 0
    return False
