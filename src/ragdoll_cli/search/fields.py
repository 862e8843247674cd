"""Defensive field access for loosely-typed backend responses.

Backend payloads arrive as mappings or as attribute-bearing objects, and the
same value can sit under different keys depending on the strategy. Every
lookup here is an ordered precedence list: first present value wins, and
nothing in this module raises on malformed input.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Optional, Sequence


def lookup(obj: Any, key: str) -> Any:
    """Read `key` from a mapping or an object attribute, None when missing."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(key)
    if isinstance(obj, (str, bytes, int, float, bool, list, tuple)):
        return None
    try:
        return getattr(obj, key, None)
    except Exception:
        return None


def first_present(obj: Any, keys: Sequence[str]) -> Any:
    """Return the first non-None value found under `keys`, in order."""
    for key in keys:
        value = lookup(obj, key)
        if value is not None:
            return value
    return None


def as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def as_str_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value if item is not None)
    return ()
