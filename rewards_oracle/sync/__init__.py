"""Contributor synchronization: retry, batching, and reporting."""

from __future__ import annotations

from .batch import (
    DEFAULT_BATCH_DELAY_S,
    DEFAULT_BATCH_SIZE,
    RETRIES_EXHAUSTED_MESSAGE,
    BatchScheduler,
    SupportsContributorSync,
    partition,
)
from .models import BatchResult, BatchResultBuilder, SyncDelta, SyncError, SyncReceipt
from .observability import SyncEventLogger, SyncEventType
from .orchestrator import ContributorSyncer
from .retry import RetryPolicy

__all__ = [
    "DEFAULT_BATCH_DELAY_S",
    "DEFAULT_BATCH_SIZE",
    "RETRIES_EXHAUSTED_MESSAGE",
    "BatchResult",
    "BatchResultBuilder",
    "BatchScheduler",
    "ContributorSyncer",
    "RetryPolicy",
    "SupportsContributorSync",
    "SyncDelta",
    "SyncError",
    "SyncEventLogger",
    "SyncEventType",
    "SyncReceipt",
    "partition",
]
