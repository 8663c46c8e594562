"""Helpers for reading loosely-typed JSON artifact content.

Artifact content is an arbitrary JSON document. Everything that reads it goes
through these accessors so a missing key, a ``None`` or a value of the wrong
type all collapse into the same "no value" answer instead of an exception.
"""
from __future__ import annotations

import json
import math
from typing import Any, Mapping, Sequence, Union

JSONValue = Union[str, int, float, bool, None, Sequence["JSONValue"], Mapping[str, "JSONValue"]]

_MISSING = object()


def as_mapping(value: JSONValue) -> Mapping[str, JSONValue]:
    """Return ``value`` if it is a mapping, otherwise an empty one."""
    return value if isinstance(value, Mapping) else {}


def as_list(value: JSONValue) -> list[JSONValue]:
    """Return ``value`` as a list if it is a JSON array, otherwise ``[]``."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def as_str(value: Any) -> str | None:
    """Return non-empty strings unchanged; anything else is ``None``."""
    if isinstance(value, str) and value:
        return value
    return None


def as_number(value: Any) -> int | float | None:
    # bool is an int subclass but never a meaningful score or price
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def as_index(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def get_path(value: JSONValue, path: str | Sequence[str], default: JSONValue = None) -> JSONValue:
    """Walk a dotted path through nested mappings.

    Any missing key or non-mapping link along the way yields ``default``.
    """
    keys = path.split(".") if isinstance(path, str) else list(path)
    current: JSONValue = value
    for key in keys:
        if not isinstance(current, Mapping):
            return default
        current = current.get(key, _MISSING)
        if current is _MISSING:
            return default
    return current


def first_str(mapping: JSONValue, *keys: str) -> str | None:
    """First non-empty string among ``mapping[key]`` for ``keys``, in order."""
    source = as_mapping(mapping)
    for key in keys:
        text = as_str(source.get(key))
        if text is not None:
            return text
    return None


def str_items(value: JSONValue) -> list[str]:
    """String elements of a JSON array; other elements are dropped."""
    return [item for item in as_list(value) if isinstance(item, str)]


def stringify(value: JSONValue) -> str:
    """Render a resolved value for display: strings verbatim, everything else as compact JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage(part: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(part * 100 / total)


__all__ = [
    "JSONValue",
    "as_index",
    "as_list",
    "as_mapping",
    "as_number",
    "as_str",
    "first_str",
    "get_path",
    "percentage",
    "round_half_up",
    "str_items",
    "stringify",
]
