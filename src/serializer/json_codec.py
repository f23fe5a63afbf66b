"""JSON value codec backed by the standard library."""

from __future__ import annotations

import json
from typing import Any

from core.errors import LemonEncodeError
from core.types import SerializerName
from serializer.base import from_plain, to_plain


class JsonCodec:
    """UTF-8 JSON codec with compact separators."""

    name: SerializerName = "json"

    def encode(self, value: object) -> bytes:
        """Encode a value as JSON bytes.

        Args:
            value: JSON-compatible value or dataclass instance.

        Returns:
            UTF-8 encoded JSON document.

        Raises:
            LemonEncodeError: If the value has no JSON representation.
        """
        try:
            text = json.dumps(to_plain(value), separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as error:
            raise LemonEncodeError(
                f"Failed to encode {type(value).__name__} as JSON: {error}. "
                "Store JSON-compatible values or dataclasses."
            ) from error
        return text.encode("utf-8")

    def decode(self, data: bytes, into: type | None = None) -> Any:
        """Decode JSON bytes, returning ``None`` when they are not valid."""
        try:
            payload = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        return from_plain(payload, into)
