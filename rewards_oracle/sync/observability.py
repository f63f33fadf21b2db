"""Structured log events for contributor synchronization.

Events are emitted as ``[event.type] key=value`` lines so log aggregators can
parse per-contributor outcomes and cycle summaries without extra tooling.
"""

from __future__ import annotations

import enum
import typing as typ

from rewards_oracle.logging import get_logger, log_error, log_info, log_warning
from rewards_oracle.observability import categorize_error

if typ.TYPE_CHECKING:
    from rewards_oracle.logging import SupportsLog

    from .models import BatchResult, SyncDelta

logger = get_logger(__name__)


class SyncEventType(enum.StrEnum):
    """Structured log event types for sync cycles."""

    ATTEMPT_FAILED = "sync.attempt.failed"
    CONTRIBUTOR_SYNCED = "sync.contributor.synced"
    CONTRIBUTOR_FAILED = "sync.contributor.failed"
    BATCH_STARTED = "sync.batch.started"
    CYCLE_COMPLETED = "sync.cycle.completed"


class SyncEventLogger:
    """Emit structured sync events via femtologging."""

    def __init__(self, logger: SupportsLog | None = None) -> None:
        """Bind the event logger to ``logger`` or the module logger."""
        self._logger = logger or get_logger(__name__)

    def log_attempt_failed(
        self,
        *,
        username: str,
        attempt: int,
        max_attempts: int,
        error: BaseException,
        retry_in_s: float | None,
    ) -> None:
        """Log one failed submission attempt and the scheduled backoff."""
        log_warning(
            self._logger,
            "[%s] username=%s attempt=%d max_attempts=%d retry_in_s=%s "
            "error_type=%s error_category=%s error_message=%s",
            SyncEventType.ATTEMPT_FAILED,
            username,
            attempt,
            max_attempts,
            "None" if retry_in_s is None else f"{retry_in_s:.3f}",
            type(error).__name__,
            categorize_error(error),
            str(error),
        )

    def log_contributor_synced(
        self,
        *,
        username: str,
        epoch: int,
        delta: SyncDelta,
        transaction_id: str,
    ) -> None:
        """Log an accepted sync write."""
        log_info(
            self._logger,
            "[%s] username=%s epoch=%d total_xp=%d xp_delta=%d "
            "credit_earned=%d transaction_id=%s",
            SyncEventType.CONTRIBUTOR_SYNCED,
            username,
            epoch,
            delta.new_xp,
            delta.xp_delta,
            delta.credit_earned,
            transaction_id,
        )

    def log_contributor_failed(
        self, *, username: str, message: str, error: BaseException | None = None
    ) -> None:
        """Log a contributor the cycle gave up on."""
        log_error(
            self._logger,
            "[%s] username=%s error_type=%s error_category=%s error_message=%s",
            SyncEventType.CONTRIBUTOR_FAILED,
            username,
            "None" if error is None else type(error).__name__,
            "None" if error is None else categorize_error(error),
            message,
            exc_info=error,
        )

    def log_batch_started(self, *, index: int, batch_count: int, size: int) -> None:
        """Log the start of one concurrent batch."""
        log_info(
            self._logger,
            "[%s] batch=%d batch_count=%d size=%d",
            SyncEventType.BATCH_STARTED,
            index,
            batch_count,
            size,
        )

    def log_cycle_completed(self, result: BatchResult) -> None:
        """Log the cycle summary, including every per-contributor error."""
        log_info(
            self._logger,
            "[%s] successful=%d failed=%d total_xp_synced=%d "
            "total_credit_earned=%d",
            SyncEventType.CYCLE_COMPLETED,
            result.successful,
            result.failed,
            result.total_xp_synced,
            result.total_credit_earned,
        )
        for error in result.errors:
            log_warning(
                self._logger,
                "[%s] username=%s error_message=%s",
                SyncEventType.CYCLE_COMPLETED,
                error.username,
                error.message,
            )
