"""
Canonical key encoding for value table lookups.

States are arbitrary values (numbers, strings, nested dicts/lists,
dataclasses, numpy values). They are normalized into plain JSON data and
serialized with sorted object keys, so two structurally equal states always
produce the same key regardless of dict insertion order.

Mapping keys keep their type: {1: "a"} and {"1": "a"} are different states.

Actions are primitives and are keyed by their string form (their "label").
"""
from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from typing import Any, Callable, Hashable

import numpy as np

KeyEncoder = Callable[[Any], Hashable]


def _dumps(data: Any) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def _normalize(value: Any) -> Any:
    """Reduce a value to JSON-serializable data with a canonical layout."""
    if value is None or isinstance(value, (bool, str, int)):
        return value
    if isinstance(value, float):
        # 2.0 == 2, so both must share a key
        return int(value) if value.is_integer() else value

    if isinstance(value, np.ndarray):
        return _normalize(value.tolist())
    if isinstance(value, np.generic):
        return _normalize(value.item())

    if is_dataclass(value) and not isinstance(value, type):
        return _normalize({f.name: getattr(value, f.name) for f in fields(value)})

    if isinstance(value, Mapping):
        # Keys are stored in encoded form so "1" and 1 stay distinct
        return {_dumps(_normalize(k)): _normalize(v) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]

    if isinstance(value, (set, frozenset)):
        members = [_normalize(v) for v in value]
        return sorted(members, key=_dumps)

    raise TypeError(
        f"Cannot encode state of type {type(value).__name__}; "
        "use primitives, mappings, sequences, sets or dataclasses"
    )


def encode_state(value: Any) -> str:
    """
    Encode a state into a canonical string key.

    Equal mappings encode identically whatever their key order.
    Tuples encode like lists and sets like sorted lists.

    Raises:
        TypeError: If the value (or something nested in it) has no
            canonical form.
    """
    return _dumps(_normalize(value))


def encode_action(action: Any) -> str:
    """
    Return the label used to key an action.

    Integral floats are labelled like ints, so 1.0 and 1 are one action.
    """
    if isinstance(action, float) and action.is_integer():
        return str(int(action))
    return str(action)


def digest_state(value: Any) -> str:
    """
    Encode a state into a fixed-length SHA-256 hex digest.

    Drop-in alternative to encode_state for large structured states
    where memory per key matters more than readable keys.
    """
    return hashlib.sha256(encode_state(value).encode("utf-8")).hexdigest()
