"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_ENV_NAMES = ("LEMONDB_TABLE_NAME", "LEMONDB_DUMP_RULE", "LEMONDB_SERIALIZER")


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


class FakeClock:
    """Manually advanced clock whose ``sleep`` moves time forward one second."""

    def __init__(self, start: int = 1_700_000_000) -> None:
        self.now = start
        self.sleep_calls = 0

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int = 1) -> None:
        self.now += seconds

    def sleep(self, _seconds: float) -> None:
        self.sleep_calls += 1
        self.now += 1


@pytest.fixture
def fake_clock() -> FakeClock:
    """Return a deterministic clock starting well after the snowflake epoch."""
    return FakeClock()


@pytest.fixture(autouse=True)
def _clear_lemondb_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep LEMONDB_* variables from the host shell out of tests."""
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
