"""Construction-time configuration for LemonDB.

This module owns option parsing and validation, including the
environment variable overrides. Other modules consume a typed option
object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import cast

from core.constants import (
    DEFAULT_SERIALIZER,
    DEFAULT_TABLE_NAME,
    ENV_DUMP_RULE,
    ENV_SERIALIZER,
    ENV_TABLE_NAME,
)
from core.errors import LemonConfigError
from core.types import SUPPORTED_SERIALIZERS, DumpRule, SerializerName


@dataclass(frozen=True)
class LemonOption:
    """Validated database options.

    Attributes:
        table_name: Active table selected on construction; ``_table`` when omitted.
        dump_rule: Policy deciding when mutations are flushed to disk.
        serializer: Codec used for values and for the database file.
    """

    table_name: str | None = None
    dump_rule: DumpRule = field(default_factory=DumpRule.immediate)
    serializer: SerializerName = cast(SerializerName, DEFAULT_SERIALIZER)

    def __post_init__(self) -> None:
        if self.serializer not in SUPPORTED_SERIALIZERS:
            raise LemonConfigError(
                f"Unsupported serializer '{self.serializer}'. "
                f"Use one of: {', '.join(SUPPORTED_SERIALIZERS)}."
            )
        if self.table_name is not None and not self.table_name:
            raise LemonConfigError("Table name must not be empty. Omit it to use the default.")

    @property
    def resolved_table_name(self) -> str:
        """Return the configured table name or the default table."""
        return self.table_name or DEFAULT_TABLE_NAME

    @classmethod
    def from_env(cls) -> "LemonOption":
        """Build options from process environment variables.

        Returns:
            A validated option object.

        Raises:
            LemonConfigError: If environment values are invalid.
        """
        table_name = os.getenv(ENV_TABLE_NAME) or None
        dump_rule = parse_dump_rule(os.getenv(ENV_DUMP_RULE, "immediate"))
        serializer = parse_serializer(os.getenv(ENV_SERIALIZER, DEFAULT_SERIALIZER))
        return cls(table_name=table_name, dump_rule=dump_rule, serializer=serializer)


def parse_dump_rule(raw_value: str) -> DumpRule:
    """Parse a dump rule from its text form.

    Args:
        raw_value: ``immediate``, ``never`` or ``periodic:<seconds>``.

    Returns:
        Parsed dump rule.

    Raises:
        LemonConfigError: If the value is not a recognized rule.
    """
    normalized = raw_value.strip().lower()
    if normalized in ("immediate", "auto"):
        return DumpRule.immediate()
    if normalized == "never":
        return DumpRule.never()
    kind, _, interval = normalized.partition(":")
    if kind != "periodic" or not interval:
        raise LemonConfigError(
            f"Invalid dump rule '{raw_value}': expected immediate, never "
            "or periodic:<seconds>."
        )
    try:
        seconds = float(interval)
    except ValueError as error:
        raise LemonConfigError(
            f"Invalid dump rule '{raw_value}': periodic interval must be numeric."
        ) from error
    return DumpRule.periodic(seconds)


def parse_serializer(raw_value: str) -> SerializerName:
    """Parse and validate a serializer name."""
    normalized = raw_value.strip().lower()
    if normalized not in SUPPORTED_SERIALIZERS:
        raise LemonConfigError(
            f"Invalid serializer '{raw_value}': expected one of "
            f"{', '.join(SUPPORTED_SERIALIZERS)}."
        )
    return cast(SerializerName, normalized)
