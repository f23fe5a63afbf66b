"""Codec selection by serializer name or numeric code."""

from __future__ import annotations

from core.errors import LemonConfigError
from core.types import SerializerName
from serializer.base import ValueCodec
from serializer.json_codec import JsonCodec
from serializer.yaml_codec import YamlCodec

_SERIALIZER_CODES: dict[int, SerializerName] = {0: "json", 1: "yaml"}


def build_codec(name: str) -> ValueCodec:
    """Return the codec registered for a serializer name.

    Args:
        name: Serializer name, ``json`` or ``yaml``.

    Returns:
        Codec instance.

    Raises:
        LemonConfigError: If no codec exists for the name.
    """
    if name == "json":
        return JsonCodec()
    if name == "yaml":
        return YamlCodec()
    raise LemonConfigError(f"No codec registered for serializer '{name}'. Use json or yaml.")


def serializer_from_code(code: int) -> SerializerName:
    """Map a numeric serializer code to its name; unknown codes fall back to json."""
    return _SERIALIZER_CODES.get(code, "json")
