"""Structured log events for epoch rotation."""

from __future__ import annotations

import enum
import typing as typ

from rewards_oracle.logging import get_logger, log_error, log_info, log_warning
from rewards_oracle.observability import categorize_error

if typ.TYPE_CHECKING:
    from rewards_oracle.logging import SupportsLog

logger = get_logger(__name__)


class EpochEventType(enum.StrEnum):
    """Structured log event types for the epoch lifecycle."""

    NO_EPOCH = "epoch.check.no_epoch"
    ALREADY_FINALIZED = "epoch.check.already_finalized"
    NOT_DUE = "epoch.check.not_due"
    FINALIZED = "epoch.finalized"
    CREATED = "epoch.created"
    CREATE_SKIPPED = "epoch.create.skipped"
    CREATE_FAILED = "epoch.create.failed"


class EpochEventLogger:
    """Emit structured epoch events via femtologging."""

    def __init__(self, logger: SupportsLog | None = None) -> None:
        """Bind the event logger to ``logger`` or the module logger."""
        self._logger = logger or get_logger(__name__)

    def log_no_epoch(self) -> None:
        """Log that no epoch has been created yet."""
        log_info(self._logger, "[%s] current_epoch=0", EpochEventType.NO_EPOCH)

    def log_already_finalized(self, epoch_number: int) -> None:
        """Log that the current epoch needs no finalization."""
        log_info(
            self._logger,
            "[%s] epoch=%d",
            EpochEventType.ALREADY_FINALIZED,
            epoch_number,
        )

    def log_not_due(self, epoch_number: int, remaining_s: int) -> None:
        """Log that the current epoch has not reached its end time."""
        log_info(
            self._logger,
            "[%s] epoch=%d remaining_hours=%.1f",
            EpochEventType.NOT_DUE,
            epoch_number,
            remaining_s / 3600,
        )

    def log_finalized(self, epoch_number: int, transaction_id: str) -> None:
        """Log a successful finalization."""
        log_info(
            self._logger,
            "[%s] epoch=%d transaction_id=%s",
            EpochEventType.FINALIZED,
            epoch_number,
            transaction_id,
        )

    def log_created(
        self, epoch_number: int, reward_amount: int, transaction_id: str
    ) -> None:
        """Log a successful epoch creation."""
        log_info(
            self._logger,
            "[%s] epoch=%d reward_amount=%d transaction_id=%s",
            EpochEventType.CREATED,
            epoch_number,
            reward_amount,
            transaction_id,
        )

    def log_create_skipped(self, open_epoch: int) -> None:
        """Log a creation refused because an epoch is still open."""
        log_warning(
            self._logger,
            "[%s] open_epoch=%d",
            EpochEventType.CREATE_SKIPPED,
            open_epoch,
        )

    def log_create_failed(self, epoch_number: int, error: BaseException) -> None:
        """Log a creation the ledger did not accept."""
        log_error(
            self._logger,
            "[%s] epoch=%d error_type=%s error_category=%s error_message=%s",
            EpochEventType.CREATE_FAILED,
            epoch_number,
            type(error).__name__,
            categorize_error(error),
            str(error),
            exc_info=error,
        )
