"""Epoch lifecycle management and ledger statistics."""

from __future__ import annotations

from .errors import EpochError, EpochStillOpenError
from .manager import SETTLE_DELAY_S, EpochLifecycleManager, EpochRotationResult
from .observability import EpochEventLogger, EpochEventType
from .stats import ContributorStats, EpochStats, LedgerStatsService

__all__ = [
    "SETTLE_DELAY_S",
    "ContributorStats",
    "EpochError",
    "EpochEventLogger",
    "EpochEventType",
    "EpochLifecycleManager",
    "EpochRotationResult",
    "EpochStats",
    "EpochStillOpenError",
    "LedgerStatsService",
]
