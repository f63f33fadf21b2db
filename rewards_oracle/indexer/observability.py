"""Structured log events for the ledger event indexer."""

from __future__ import annotations

import enum
import typing as typ

from rewards_oracle.logging import get_logger, log_info, log_warning
from rewards_oracle.observability import categorize_error

if typ.TYPE_CHECKING:
    from pathlib import Path

    from rewards_oracle.ledger.models import XpSyncedEvent
    from rewards_oracle.logging import SupportsLog

logger = get_logger(__name__)


class IndexerEventType(enum.StrEnum):
    """Structured log event types for event indexing."""

    EVENT_INDEXED = "indexer.event.indexed"
    SAVED = "indexer.saved"
    POLL_FAILED = "indexer.poll.failed"
    BACKFILL_COMPLETED = "indexer.backfill.completed"


class IndexerEventLogger:
    """Emit structured indexer events via femtologging."""

    def __init__(self, logger: SupportsLog | None = None) -> None:
        """Bind the event logger to ``logger`` or the module logger."""
        self._logger = logger or get_logger(__name__)

    def log_event_indexed(self, event: XpSyncedEvent, slot: int) -> None:
        """Log one indexed sync event."""
        log_info(
            self._logger,
            "[%s] slot=%d username=%s epoch=%d total_xp=%d credit_earned=%d "
            "registered=%s",
            IndexerEventType.EVENT_INDEXED,
            slot,
            event.github_username,
            event.epoch,
            event.total_xp,
            event.credit_earned,
            event.is_registered,
        )

    def log_saved(self, path: Path, event_count: int, last_slot: int) -> None:
        """Log a flush of the durable buffer."""
        log_info(
            self._logger,
            "[%s] path=%s event_count=%d last_processed_slot=%d",
            IndexerEventType.SAVED,
            path,
            event_count,
            last_slot,
        )

    def log_poll_failed(self, after_slot: int, error: BaseException) -> None:
        """Log a failed read of new ledger events."""
        log_warning(
            self._logger,
            "[%s] after_slot=%d error_type=%s error_category=%s error_message=%s",
            IndexerEventType.POLL_FAILED,
            after_slot,
            type(error).__name__,
            categorize_error(error),
            str(error),
        )

    def log_backfill_completed(self, processed: int, last_slot: int) -> None:
        """Log the end of a historical replay."""
        log_info(
            self._logger,
            "[%s] processed=%d last_processed_slot=%d",
            IndexerEventType.BACKFILL_COMPLETED,
            processed,
            last_slot,
        )
