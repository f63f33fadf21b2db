"""Unit tests for the femtologging helpers used across the oracle."""

from __future__ import annotations

import typing as typ

import pytest

from rewards_oracle.logging import (
    LogLevel,
    configure_logging,
    format_log_message,
    log_debug,
    log_error,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)
from tests.helpers.fakes import RecordingLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class TestNormalizeLogLevel:
    """Tests for normalize_log_level."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("debug", "DEBUG"),
            (" Warn ", "WARN"),
            ("CRITICAL", "CRITICAL"),
            ("trace", "TRACE"),
        ],
    )
    def test_accepts_known_levels(self, raw: str, expected: str) -> None:
        """Known levels are upper-cased and stripped."""
        assert normalize_log_level(raw) == (expected, False)

    @pytest.mark.parametrize("raw", [None, "", "verbose", "20"])
    def test_falls_back_to_info(self, raw: str | None) -> None:
        """Missing or unknown levels fall back to INFO and are flagged."""
        assert normalize_log_level(raw) == ("INFO", True), (
            f"Expected {raw!r} to be rejected"
        )

    def test_every_enum_member_is_accepted(self) -> None:
        """Each LogLevel member normalizes to itself."""
        for member in LogLevel:
            assert normalize_log_level(member.value.lower()) == (member.value, False)


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.fixture
    def basic_config_calls(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> list[dict[str, object]]:
        calls: list[dict[str, object]] = []
        monkeypatch.setattr(
            "rewards_oracle.logging.basicConfig",
            lambda **kwargs: calls.append(kwargs),
        )
        return calls

    def test_configures_normalized_level(
        self, basic_config_calls: list[dict[str, object]]
    ) -> None:
        """The normalized level is handed to femtologging."""
        assert configure_logging("error") == ("ERROR", False)
        assert basic_config_calls == [{"level": "ERROR", "force": False}]

    def test_invalid_level_still_configures_info(
        self, basic_config_calls: list[dict[str, object]]
    ) -> None:
        """An unknown level configures INFO and reports the problem."""
        assert configure_logging("chatty") == ("INFO", True)
        assert basic_config_calls[0]["level"] == "INFO"

    def test_force_replaces_handlers(
        self, basic_config_calls: list[dict[str, object]]
    ) -> None:
        """The force flag is forwarded unchanged."""
        configure_logging("INFO", force=True)
        assert basic_config_calls[0]["force"] is True


def test_format_log_message_escapes_percent() -> None:
    """Literal percent signs survive interpolation."""
    message = format_log_message("synced %d/%d (%d%%)", 3, 4, 75)
    assert message == "synced 3/4 (75%)"


_Helper = typ.Callable[..., None]


@pytest.mark.parametrize(
    ("helper", "level"),
    [
        (log_debug, "DEBUG"),
        (log_info, "INFO"),
        (log_warning, "WARNING"),
        (log_error, "ERROR"),
    ],
)
def test_level_helpers_format_before_logging(helper: _Helper, level: str) -> None:
    """Every helper emits one pre-formatted record at its own level."""
    logger = RecordingLogger()

    helper(logger, "epoch %d rotated for %s", 4, "alice")

    assert logger.calls == [(level, "epoch 4 rotated for alice", None, False)]


@pytest.mark.parametrize("helper", [log_warning, log_error])
def test_exc_info_is_forwarded(helper: _Helper) -> None:
    """Warning and error helpers attach exception information."""
    logger = RecordingLogger()
    exc = TimeoutError("ledger slow")

    helper(logger, "sync retry for %s", "bob", exc_info=exc)

    assert logger.calls[0][2] is exc


def test_log_exception_logs_at_error() -> None:
    """log_exception logs the message verbatim with the exception attached."""
    logger = RecordingLogger()
    exc = RuntimeError("rpc exploded")

    log_exception(logger, "Periodic task sync failed", exc)

    assert logger.calls == [("ERROR", "Periodic task sync failed", exc, False)]


def test_helpers_never_request_stack_info() -> None:
    """Stack capture is always disabled."""
    logger = RecordingLogger()
    helpers: cabc.Sequence[_Helper] = (log_debug, log_info, log_warning, log_error)

    for helper in helpers:
        helper(logger, "tick")

    assert {call[3] for call in logger.calls} == {False}
