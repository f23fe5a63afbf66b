"""Codec contract and value normalization.

This module defines the ``ValueCodec`` protocol shared by the JSON and
YAML codecs, plus helpers that normalize values on the way in and
rebuild typed values on the way out.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, fields, is_dataclass
from typing import Any, Protocol

from core.types import SerializerName


class ValueCodec(Protocol):
    """Serialize a value to bytes and back."""

    name: SerializerName

    def encode(self, value: object) -> bytes: ...

    def decode(self, data: bytes, into: type | None = None) -> Any: ...


def to_plain(value: object) -> object:
    """Convert dataclass instances into plain mappings before encoding."""
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return value


def from_plain(payload: object, into: type | None) -> Any:
    """Rebuild a decoded payload as ``into``.

    Returns ``None`` when the payload does not fit the requested type.
    Dataclass targets are built from mappings, ignoring unknown keys.
    """
    if into is None:
        return payload
    if is_dataclass(into):
        if not isinstance(payload, Mapping):
            return None
        names = {item.name for item in fields(into)}
        try:
            return into(**{key: item for key, item in payload.items() if key in names})
        except TypeError:
            return None
    if into is float and isinstance(payload, int) and not isinstance(payload, bool):
        return float(payload)
    return payload if isinstance(payload, into) else None
