"""Shared fixtures for the unit tests."""

from __future__ import annotations

import typing as typ

import pytest

from tests.helpers.fakes import FakeLedgerGateway, RecordingLogger, SleepRecorder

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def recording_logger() -> RecordingLogger:
    """Return a logger that records every call."""
    return RecordingLogger()


@pytest.fixture
def sleeper() -> SleepRecorder:
    """Return an awaitable sleep stand-in that never blocks."""
    return SleepRecorder()


@pytest.fixture
def gateway() -> FakeLedgerGateway:
    """Return an in-memory ledger with no epoch created yet."""
    return FakeLedgerGateway()


@pytest.fixture
def oracle_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> dict[str, str]:
    """Populate a minimal, valid ``REWARDS_ORACLE_*`` environment."""
    values = {
        "REWARDS_ORACLE_LEDGER_URL": "http://ledger.test/rpc",
        "REWARDS_ORACLE_LEADERBOARD_FILE": str(tmp_path / "leaderboard.json"),
        "REWARDS_ORACLE_INDEX_PATH": str(tmp_path / "index.json"),
    }
    for name, value in values.items():
        monkeypatch.setenv(name, value)
    for name in (
        "REWARDS_ORACLE_LEADERBOARD_URL",
        "REWARDS_ORACLE_ALERT_WEBHOOK_URL",
        "REWARDS_ORACLE_LEDGER_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    return values
