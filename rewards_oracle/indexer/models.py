"""Persistent shape of the indexer's durable buffer."""

from __future__ import annotations

import datetime as dt  # noqa: TC003

import msgspec

from rewards_oracle.ledger.models import XpSyncedEvent  # noqa: TC001


class IndexedEventLog(msgspec.Struct, kw_only=True, rename="camel"):
    """Append-only log of sync events and the highest slot processed.

    ``last_processed_slot`` only ever increases; resuming reads events
    strictly after it.
    """

    events: list[XpSyncedEvent] = msgspec.field(default_factory=list)
    last_processed_slot: int = 0
    last_updated: dt.datetime | None = None
