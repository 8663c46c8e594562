"""Conversion of domain dataclasses into JSON-ready documents."""
from __future__ import annotations

import enum
from dataclasses import fields, is_dataclass
from typing import Any, Mapping


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_document(value: Any) -> Any:
    """Recursively convert dataclasses, enums and containers into plain JSON values.

    Dataclass fields become camelCase keys unless the field declares an
    ``alias`` in its metadata. ``None`` fields are omitted unless marked
    ``nullable``, in which case they are emitted as ``null``.
    """
    if is_dataclass(value) and not isinstance(value, type):
        document: dict[str, Any] = {}
        for item in fields(value):
            raw = getattr(value, item.name)
            if raw is None and not item.metadata.get("nullable"):
                continue
            key = item.metadata.get("alias") or camel_case(item.name)
            document[key] = to_document(raw)
        return document
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(key): to_document(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_document(item) for item in value]
    return value


__all__ = ["camel_case", "to_document"]
