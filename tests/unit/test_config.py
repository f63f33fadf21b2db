"""Unit tests for environment configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from rewards_oracle.config import (
    DEFAULT_CONVERSION_RATIO,
    DEFAULT_EPOCH_REWARD_AMOUNT,
    DEFAULT_INDEX_PATH,
    ConfigError,
    OracleConfig,
)

LEDGER_URL = "http://ledger.test/rpc"


def test_defaults_with_only_ledger_url() -> None:
    """Everything except the ledger URL has a default."""
    config = OracleConfig.from_env({"REWARDS_ORACLE_LEDGER_URL": LEDGER_URL})

    assert config.ledger_url == LEDGER_URL
    assert config.conversion_ratio == DEFAULT_CONVERSION_RATIO
    assert config.epoch_reward_amount == DEFAULT_EPOCH_REWARD_AMOUNT
    assert config.index_path == DEFAULT_INDEX_PATH
    assert config.leaderboard_url is None
    assert config.leaderboard_file is None
    assert config.port == 8080


def test_reads_every_variable() -> None:
    """Every variable maps onto its field."""
    config = OracleConfig.from_env(
        {
            "REWARDS_ORACLE_LEDGER_URL": LEDGER_URL,
            "REWARDS_ORACLE_LEDGER_TOKEN": "t",
            "REWARDS_ORACLE_LEADERBOARD_URL": "http://board.test",
            "REWARDS_ORACLE_LEADERBOARD_FILE": "board.json",
            "REWARDS_ORACLE_EPOCH_REWARD_AMOUNT": "500",
            "REWARDS_ORACLE_CONVERSION_RATIO": "3",
            "REWARDS_ORACLE_SYNC_INTERVAL_S": "60",
            "REWARDS_ORACLE_EPOCH_INTERVAL_S": "3600",
            "REWARDS_ORACLE_HTTP_TIMEOUT_S": "2.5",
            "REWARDS_ORACLE_INDEX_PATH": "idx.json",
            "REWARDS_ORACLE_ALERT_WEBHOOK_URL": "http://hook.test",
            "REWARDS_ORACLE_LOG_LEVEL": "debug",
            "REWARDS_ORACLE_HOST": "127.0.0.1",
            "REWARDS_ORACLE_PORT": "9000",
        }
    )

    assert config == OracleConfig(
        ledger_url=LEDGER_URL,
        ledger_token="t",
        leaderboard_url="http://board.test",
        leaderboard_file=Path("board.json"),
        epoch_reward_amount=500,
        conversion_ratio=3,
        sync_interval_s=60,
        epoch_interval_s=3600,
        http_timeout_s=2.5,
        index_path=Path("idx.json"),
        alert_webhook_url="http://hook.test",
        log_level="debug",
        host="127.0.0.1",
        port=9000,
    )


@pytest.mark.parametrize("ledger_url", [None, "", "   "])
def test_missing_ledger_url(ledger_url: str | None) -> None:
    """The ledger URL is required; blank counts as unset."""
    env = {} if ledger_url is None else {"REWARDS_ORACLE_LEDGER_URL": ledger_url}

    with pytest.raises(ConfigError, match="REWARDS_ORACLE_LEDGER_URL must be set"):
        OracleConfig.from_env(env)


@pytest.mark.parametrize(
    ("name", "raw", "match"),
    [
        ("CONVERSION_RATIO", "ten", "must be an integer"),
        ("CONVERSION_RATIO", "0", "must be positive"),
        ("SYNC_INTERVAL_S", "-5", "must be positive"),
        ("HTTP_TIMEOUT_S", "fast", "must be a number"),
        ("HTTP_TIMEOUT_S", "0", "must be positive"),
    ],
)
def test_malformed_numbers(name: str, raw: str, match: str) -> None:
    """Malformed or non-positive numbers are configuration errors."""
    env = {"REWARDS_ORACLE_LEDGER_URL": LEDGER_URL, f"REWARDS_ORACLE_{name}": raw}

    with pytest.raises(ConfigError, match=match):
        OracleConfig.from_env(env)


def test_reads_process_environment(oracle_env: dict[str, str]) -> None:
    """Without a mapping, os.environ is read."""
    config = OracleConfig.from_env()

    assert config.ledger_url == oracle_env["REWARDS_ORACLE_LEDGER_URL"]
    assert config.leaderboard_file == Path(
        oracle_env["REWARDS_ORACLE_LEADERBOARD_FILE"]
    )


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("", False),
        ("1", True),
        (" TRUE ", True),
        ("yes", True),
        ("0", False),
        ("No", False),
    ],
)
def test_allow_stub_broker_flag(raw: str, expected: bool) -> None:  # noqa: FBT001
    """The stub-broker opt-in accepts common boolean spellings."""
    config = OracleConfig.from_env(
        {
            "REWARDS_ORACLE_LEDGER_URL": LEDGER_URL,
            "REWARDS_ORACLE_ALLOW_STUB_BROKER": raw,
        }
    )

    assert config.allow_stub_broker is expected


def test_allow_stub_broker_rejects_unknown_values() -> None:
    """An unrecognised flag value is a configuration error."""
    env = {
        "REWARDS_ORACLE_LEDGER_URL": LEDGER_URL,
        "REWARDS_ORACLE_ALLOW_STUB_BROKER": "maybe",
    }

    with pytest.raises(ConfigError, match="ALLOW_STUB_BROKER must be one of"):
        OracleConfig.from_env(env)
