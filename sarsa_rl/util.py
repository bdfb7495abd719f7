from __future__ import annotations

import copy
from typing import Any, TypeVar

T = TypeVar("T")


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


def deep_copy(obj: T) -> T:
    """
    Copy a value so that no mutable container is shared with the original.

    Dicts, lists, tuples and sets are rebuilt recursively; scalars and
    callables are returned as-is. Anything else goes through copy.deepcopy.
    """
    if obj is None or isinstance(obj, (bool, int, float, str, bytes)) or callable(obj):
        return obj
    if isinstance(obj, dict):
        return {k: deep_copy(v) for k, v in obj.items()}  # type: ignore[return-value]
    if isinstance(obj, list):
        return [deep_copy(v) for v in obj]  # type: ignore[return-value]
    if isinstance(obj, tuple):
        return tuple(deep_copy(v) for v in obj)  # type: ignore[return-value]
    if isinstance(obj, (set, frozenset)):
        return type(obj)(deep_copy(v) for v in obj)  # type: ignore[return-value]
    return copy.deepcopy(obj)
