"""Durable indexing of ledger contributor sync events."""

from __future__ import annotations

from .indexer import UNCLAIMED_WINDOW_S, EventIndexer
from .models import IndexedEventLog
from .observability import IndexerEventLogger, IndexerEventType
from .store import IndexedEventStore

__all__ = [
    "UNCLAIMED_WINDOW_S",
    "EventIndexer",
    "IndexedEventLog",
    "IndexedEventStore",
    "IndexerEventLogger",
    "IndexerEventType",
]
