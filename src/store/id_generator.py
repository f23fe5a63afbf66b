"""Snowflake-style document identifiers.

This module issues short, roughly time-ordered identifiers. A raw
snowflake packs seconds since a fixed epoch above a 22-bit shift with a
per-timestamp sequence in the low bits; ``LemonId`` renders the raw value
as unpadded base64 behind a caller-supplied prefix.
"""

from __future__ import annotations

import base64
import binascii
import time
from typing import Callable

from core.constants import (
    DEFAULT_EPOCH,
    MAX_SEQUENCE,
    SEQUENCE_MASK,
    SEQUENCE_WAIT_SECONDS,
    TIMESTAMP_SHIFT,
)
from core.errors import LemonIdError
from core.types import DecodedSnowflake


def now_timestamp() -> int:
    """Return the current wall-clock time in whole seconds."""
    return int(time.time())


class Snowflake:
    """Raw snowflake generator.

    The sequence counter is not reset per timestamp. Once it reaches its
    maximum within one timestamp, the next call waits for the clock to
    advance so a wrapped sequence never repeats a (timestamp, sequence) pair.
    """

    def __init__(
        self,
        epoch: int | None = None,
        clock: Callable[[], int] = now_timestamp,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._epoch = DEFAULT_EPOCH if epoch is None else epoch
        self._clock = clock
        self._sleep = sleep
        self._sequence = 0
        self._last_sequence_exhaustion = 0

    @property
    def epoch(self) -> int:
        return self._epoch

    def generate(self) -> str:
        """Generate a raw snowflake for the current time."""
        return self.generate_with_timestamp(self._clock())

    def generate_with_timestamp(self, timestamp: int) -> str:
        """Generate a raw snowflake for an explicit timestamp.

        Args:
            timestamp: Seconds since the Unix epoch.

        Returns:
            Decimal string of the raw snowflake.

        Raises:
            LemonIdError: If the timestamp precedes the generator epoch.
        """
        if timestamp < self._epoch:
            raise LemonIdError(
                f"Timestamp {timestamp} precedes snowflake epoch {self._epoch}. "
                "Check the system clock or use an earlier epoch."
            )
        if self._sequence >= MAX_SEQUENCE and timestamp == self._last_sequence_exhaustion:
            self._wait_for_next_timestamp(timestamp)
        raw = ((timestamp - self._epoch) << TIMESTAMP_SHIFT) | self._sequence
        self._sequence = 0 if self._sequence >= MAX_SEQUENCE else self._sequence + 1
        if self._sequence == MAX_SEQUENCE:
            self._last_sequence_exhaustion = timestamp
        return str(raw)

    def decode(self, raw: str | int) -> DecodedSnowflake:
        """Split a raw snowflake into timestamp and sequence.

        Args:
            raw: Raw snowflake as produced by ``generate`` (not the base64 form).

        Returns:
            Decoded components.

        Raises:
            LemonIdError: If ``raw`` is not a non-negative integer.
        """
        value = _parse_raw(raw)
        return DecodedSnowflake(
            id=value,
            timestamp=(value >> TIMESTAMP_SHIFT) + self._epoch,
            sequence=value & SEQUENCE_MASK,
            epoch=self._epoch,
        )

    def _wait_for_next_timestamp(self, timestamp: int) -> None:
        while self._clock() <= timestamp:
            self._sleep(SEQUENCE_WAIT_SECONDS)


class LemonId:
    """Prefixed identifier generator used to name documents."""

    def __init__(self, prefix: str, snowflake: Snowflake | None = None) -> None:
        self._prefix = prefix
        self._snowflake = snowflake or Snowflake()

    @property
    def prefix(self) -> str:
        return self._prefix

    def generate(self) -> str:
        """Return ``<prefix>_<unpadded base64 of the raw snowflake>``."""
        raw = self._snowflake.generate()
        encoded = base64.b64encode(raw.encode("ascii")).decode("ascii")
        return f"{self._prefix}_{encoded.replace('=', '')}"

    def decode(self, identifier: str) -> DecodedSnowflake:
        """Recover snowflake components from a generated identifier.

        Raises:
            LemonIdError: If the prefix or the base64 body is malformed.
        """
        marker = f"{self._prefix}_"
        if not identifier.startswith(marker):
            raise LemonIdError(
                f"Identifier '{identifier}' does not start with prefix '{marker}'."
            )
        body = identifier[len(marker):]
        padded = body + "=" * (-len(body) % 4)
        try:
            raw = base64.b64decode(padded, validate=True).decode("ascii")
        except (binascii.Error, UnicodeDecodeError) as error:
            raise LemonIdError(
                f"Identifier '{identifier}' has a malformed base64 body: {error}."
            ) from error
        return self._snowflake.decode(raw)


def _parse_raw(raw: str | int) -> int:
    """Parse a raw snowflake value from text or int."""
    if isinstance(raw, bool):
        raise LemonIdError("Raw snowflake must be an integer, got bool.")
    if isinstance(raw, int):
        value = raw
    else:
        try:
            value = int(str(raw).strip())
        except ValueError as error:
            raise LemonIdError(
                f"Raw snowflake '{raw}' is not a decimal integer."
            ) from error
    if value < 0:
        raise LemonIdError(f"Raw snowflake must be non-negative, got {value}.")
    return value
