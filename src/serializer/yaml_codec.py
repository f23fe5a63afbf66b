"""YAML value codec backed by PyYAML safe dump/load."""

from __future__ import annotations

from typing import Any

import yaml

from core.errors import LemonEncodeError
from core.types import SerializerName
from serializer.base import from_plain, to_plain


class YamlCodec:
    """UTF-8 YAML codec preserving mapping order."""

    name: SerializerName = "yaml"

    def encode(self, value: object) -> bytes:
        """Encode a value as YAML bytes.

        Args:
            value: YAML-safe value or dataclass instance.

        Returns:
            UTF-8 encoded YAML document.

        Raises:
            LemonEncodeError: If PyYAML cannot represent the value.
        """
        try:
            text = yaml.safe_dump(to_plain(value), sort_keys=False, allow_unicode=True)
        except yaml.YAMLError as error:
            raise LemonEncodeError(
                f"Failed to encode {type(value).__name__} as YAML: {error}. "
                "Store YAML-safe values or dataclasses."
            ) from error
        return text.encode("utf-8")

    def decode(self, data: bytes, into: type | None = None) -> Any:
        """Decode YAML bytes, returning ``None`` when they are not valid."""
        try:
            payload = yaml.safe_load(data.decode("utf-8"))
        except (UnicodeDecodeError, yaml.YAMLError):
            return None
        return from_plain(payload, into)
