"""Environment configuration for the rewards oracle.

Usage
-----
Load the configuration once at process start:

>>> import os
>>> os.environ["REWARDS_ORACLE_LEDGER_URL"] = "http://localhost:8899/rpc"
>>> config = OracleConfig.from_env()
>>> config.conversion_ratio
100

"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ
from pathlib import Path

if typ.TYPE_CHECKING:
    import collections.abc as cabc

ENV_PREFIX = "REWARDS_ORACLE_"

DEFAULT_EPOCH_REWARD_AMOUNT = 100_000_000_000_000
DEFAULT_CONVERSION_RATIO = 100
DEFAULT_SYNC_INTERVAL_S = 24 * 60 * 60
DEFAULT_EPOCH_INTERVAL_S = 7 * 24 * 60 * 60
DEFAULT_HTTP_TIMEOUT_S = 30.0
DEFAULT_INDEX_PATH = Path("data/indexed-events.json")

_TRUE_VALUES = frozenset({"1", "true", "yes"})
_FALSE_VALUES = frozenset({"0", "false", "no"})


class ConfigError(ValueError):
    """Raised when the oracle environment is missing or malformed."""

    @classmethod
    def missing(cls, env_var: str) -> ConfigError:
        """Return an error for a required variable that is unset."""
        return cls(f"{env_var} must be set")

    @classmethod
    def invalid_int(cls, env_var: str, raw: str) -> ConfigError:
        """Return an error for a value that is not an integer."""
        return cls(f"{env_var} must be an integer, got: {raw!r}")

    @classmethod
    def invalid_float(cls, env_var: str, raw: str) -> ConfigError:
        """Return an error for a value that is not a number."""
        return cls(f"{env_var} must be a number, got: {raw!r}")

    @classmethod
    def not_positive(cls, env_var: str, value: object) -> ConfigError:
        """Return an error for a value that must be strictly positive."""
        return cls(f"{env_var} must be positive, got: {value}")

    @classmethod
    def invalid_flag(cls, env_var: str, raw: str) -> ConfigError:
        """Return an error for a value that is not a recognised boolean."""
        return cls(f"{env_var} must be one of 1/0, true/false, yes/no, got: {raw!r}")


@dc.dataclass(frozen=True, slots=True)
class OracleConfig:
    """Runtime settings shared by the CLI, the ASGI runtime, and actors.

    Attributes
    ----------
    ledger_url
        JSON-RPC endpoint of the ledger gateway.
    ledger_token
        Optional bearer token sent with every ledger request.
    leaderboard_url
        HTTP leaderboard source; takes precedence over ``leaderboard_file``.
    leaderboard_file
        Local JSON leaderboard source.
    epoch_reward_amount
        Reward pool passed to every epoch creation.
    conversion_ratio
        Credit earned per XP point of delta; negative deltas are not clamped.
    sync_interval_s
        Cadence of the fetch-and-sync timer.
    epoch_interval_s
        Cadence of the epoch finalize-and-create timer.
    http_timeout_s
        Network timeout applied to every remote call.
    index_path
        Durable buffer written by the event indexer.
    alert_webhook_url
        Optional webhook receiving error and critical alerts.
    allow_stub_broker
        Let queue-triggered cycles run on an in-memory Dramatiq stub broker.

    """

    ledger_url: str
    ledger_token: str | None = None
    leaderboard_url: str | None = None
    leaderboard_file: Path | None = None
    epoch_reward_amount: int = DEFAULT_EPOCH_REWARD_AMOUNT
    conversion_ratio: int = DEFAULT_CONVERSION_RATIO
    sync_interval_s: int = DEFAULT_SYNC_INTERVAL_S
    epoch_interval_s: int = DEFAULT_EPOCH_INTERVAL_S
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    index_path: Path = DEFAULT_INDEX_PATH
    alert_webhook_url: str | None = None
    log_level: str = "INFO"
    host: str = "0.0.0.0"  # noqa: S104 - container bind address
    port: int = 8080
    allow_stub_broker: bool = False

    @staticmethod
    def _optional(env: cabc.Mapping[str, str], name: str) -> str | None:
        raw = env.get(f"{ENV_PREFIX}{name}", "")
        return raw.strip() or None

    @staticmethod
    def _parse_positive_int(
        env: cabc.Mapping[str, str], name: str, default: int
    ) -> int:
        """Read a positive integer env var, falling back to a default."""
        env_var = f"{ENV_PREFIX}{name}"
        raw = env.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            raise ConfigError.invalid_int(env_var, raw) from exc
        if value < 1:
            raise ConfigError.not_positive(env_var, value)
        return value

    @staticmethod
    def _parse_positive_float(
        env: cabc.Mapping[str, str], name: str, default: float
    ) -> float:
        """Read a positive number env var, falling back to a default."""
        env_var = f"{ENV_PREFIX}{name}"
        raw = env.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = float(raw)
        except ValueError as exc:
            raise ConfigError.invalid_float(env_var, raw) from exc
        if not value > 0:
            raise ConfigError.not_positive(env_var, value)
        return value

    @staticmethod
    def _parse_flag(env: cabc.Mapping[str, str], name: str) -> bool:
        env_var = f"{ENV_PREFIX}{name}"
        raw = env.get(env_var, "")
        normalized = raw.strip().lower()
        if not normalized:
            return False
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        raise ConfigError.invalid_flag(env_var, raw)

    @classmethod
    def from_env(cls, env: cabc.Mapping[str, str] | None = None) -> OracleConfig:
        """Create configuration from ``REWARDS_ORACLE_*`` environment variables.

        Parameters
        ----------
        env
            Mapping to read instead of ``os.environ``.

        Returns
        -------
        OracleConfig
            Configuration with values from the environment or defaults.

        Raises
        ------
        ConfigError
            If the ledger URL is unset or a numeric variable is malformed.

        """
        source = os.environ if env is None else env

        ledger_url = cls._optional(source, "LEDGER_URL")
        if ledger_url is None:
            raise ConfigError.missing(f"{ENV_PREFIX}LEDGER_URL")

        leaderboard_file = cls._optional(source, "LEADERBOARD_FILE")
        index_path = cls._optional(source, "INDEX_PATH")

        return cls(
            ledger_url=ledger_url,
            ledger_token=cls._optional(source, "LEDGER_TOKEN"),
            leaderboard_url=cls._optional(source, "LEADERBOARD_URL"),
            leaderboard_file=Path(leaderboard_file) if leaderboard_file else None,
            epoch_reward_amount=cls._parse_positive_int(
                source, "EPOCH_REWARD_AMOUNT", DEFAULT_EPOCH_REWARD_AMOUNT
            ),
            conversion_ratio=cls._parse_positive_int(
                source, "CONVERSION_RATIO", DEFAULT_CONVERSION_RATIO
            ),
            sync_interval_s=cls._parse_positive_int(
                source, "SYNC_INTERVAL_S", DEFAULT_SYNC_INTERVAL_S
            ),
            epoch_interval_s=cls._parse_positive_int(
                source, "EPOCH_INTERVAL_S", DEFAULT_EPOCH_INTERVAL_S
            ),
            http_timeout_s=cls._parse_positive_float(
                source, "HTTP_TIMEOUT_S", DEFAULT_HTTP_TIMEOUT_S
            ),
            index_path=Path(index_path) if index_path else DEFAULT_INDEX_PATH,
            alert_webhook_url=cls._optional(source, "ALERT_WEBHOOK_URL"),
            log_level=cls._optional(source, "LOG_LEVEL") or "INFO",
            host=cls._optional(source, "HOST") or "0.0.0.0",  # noqa: S104
            port=cls._parse_positive_int(source, "PORT", 8080),
            allow_stub_broker=cls._parse_flag(source, "ALLOW_STUB_BROKER"),
        )
