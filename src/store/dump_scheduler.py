"""Dump policy evaluation.

This module decides after each mutation whether the snapshot is
written. The last-flush time lives on the scheduler instance so
separate databases never share flush state.
"""

from __future__ import annotations

import time
from typing import Callable

from core.types import DumpRule


class DumpScheduler:
    """Apply a static dump rule and track flush bookkeeping."""

    def __init__(self, rule: DumpRule, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize scheduler state.

        Args:
            rule: Dump rule fixed for the scheduler lifetime.
            clock: Monotonic clock in seconds.
        """
        self._rule = rule
        self._clock = clock
        self._last_flush = clock()
        self._flush_count = 0

    @property
    def rule(self) -> DumpRule:
        return self._rule

    @property
    def last_flush(self) -> float:
        return self._last_flush

    @property
    def flush_count(self) -> int:
        return self._flush_count

    def should_flush(self, now: float | None = None) -> bool:
        """Return whether the rule calls for a flush at ``now``."""
        if self._rule.kind == "immediate":
            return True
        if self._rule.kind == "never":
            return False
        current = self._clock() if now is None else now
        return current - self._last_flush > float(self._rule.interval_seconds or 0.0)

    def maybe_flush(self, persist: Callable[[], object]) -> bool:
        """Persist when the rule allows it.

        Args:
            persist: Callable writing the current snapshot.

        Returns:
            Whether ``persist`` ran.

        Raises:
            Exception: Whatever ``persist`` raises; bookkeeping is left
                unchanged so the next mutation retries.
        """
        if not self.should_flush():
            return False
        self.force_flush(persist)
        return True

    def force_flush(self, persist: Callable[[], object]) -> None:
        """Persist regardless of the rule and record the flush."""
        persist()
        self._last_flush = self._clock()
        self._flush_count += 1
