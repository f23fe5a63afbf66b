"""Shared typed models.

This module defines the table/document/value hierarchy and the small
value objects shared by the store, serializer and CLI layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Literal

from core.errors import LemonConfigError

Data = dict[str, bytes]
Document = dict[str, Data]
Table = dict[str, Document]

SerializerName = Literal["json", "yaml"]
DumpRuleKind = Literal["immediate", "never", "periodic"]
SUPPORTED_SERIALIZERS: tuple[SerializerName, ...] = ("json", "yaml")


@dataclass
class Snapshot:
    """Full in-memory database state.

    Attributes:
        tables: Table name mapped to its documents. The store owns this
            mapping; table handles read and mutate it in place.
    """

    tables: Table = field(default_factory=dict)

    def ensure_table(self, name: str) -> Document:
        """Return documents for a table, creating an empty table if absent."""
        return self.tables.setdefault(name, {})


@dataclass(frozen=True)
class DumpRule:
    """Policy deciding when the snapshot is written after a mutation.

    Attributes:
        kind: ``immediate`` writes on every mutation, ``never`` keeps data
            in memory only, ``periodic`` writes once ``interval_seconds``
            have elapsed since the last write.
        interval_seconds: Periodic threshold; unused for other kinds.
    """

    kind: DumpRuleKind
    interval_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.kind == "periodic":
            if (
                self.interval_seconds is None
                or not math.isfinite(self.interval_seconds)
                or self.interval_seconds <= 0
            ):
                raise LemonConfigError(
                    "Periodic dump rule requires a finite positive interval in seconds, "
                    f"got {self.interval_seconds!r}."
                )
        elif self.kind not in ("immediate", "never"):
            raise LemonConfigError(
                f"Unsupported dump rule '{self.kind}'. Use immediate, never or periodic."
            )

    @classmethod
    def immediate(cls) -> "DumpRule":
        return cls(kind="immediate")

    @classmethod
    def never(cls) -> "DumpRule":
        return cls(kind="never")

    @classmethod
    def periodic(cls, interval_seconds: float) -> "DumpRule":
        return cls(kind="periodic", interval_seconds=float(interval_seconds))


@dataclass(frozen=True)
class DecodedSnowflake:
    """Components recovered from a raw snowflake value.

    Attributes:
        id: Raw numeric snowflake.
        timestamp: Absolute timestamp in seconds.
        sequence: Per-timestamp sequence number.
        epoch: Epoch the snowflake was generated against.
    """

    id: int
    timestamp: int
    sequence: int
    epoch: int
