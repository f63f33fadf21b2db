"""Follow ledger sync events into a durable, slot-keyed local log."""

from __future__ import annotations

import asyncio
import contextlib
import typing as typ

from rewards_oracle.ledger.errors import LedgerError

from .observability import IndexerEventLogger

if typ.TYPE_CHECKING:
    from rewards_oracle.ledger.models import SlotEvent, XpSyncedEvent
    from rewards_oracle.ledger.protocol import LedgerEventSource

    from .models import IndexedEventLog
    from .store import IndexedEventStore

DEFAULT_SAVE_EVERY = 10
DEFAULT_PAGE_SIZE = 100
DEFAULT_POLL_INTERVAL_S = 5.0
UNCLAIMED_WINDOW_S = 90 * 24 * 60 * 60


class EventIndexer:
    """Index contributor sync events and answer wallet queries.

    The buffer is flushed every ``save_every`` events, at the end of a
    backfill, and on :meth:`close`; a restarted indexer resumes after the
    last recorded slot.
    """

    def __init__(
        self,
        store: IndexedEventStore,
        source: LedgerEventSource | None = None,
        *,
        save_every: int = DEFAULT_SAVE_EVERY,
        page_size: int = DEFAULT_PAGE_SIZE,
        event_logger: IndexerEventLogger | None = None,
    ) -> None:
        """Load the persisted log and bind the indexer to its source."""
        if save_every < 1:
            msg = f"save_every must be positive, got: {save_every}"
            raise ValueError(msg)
        self._store = store
        self._source = source
        self._save_every = save_every
        self._page_size = page_size
        self._events = event_logger or IndexerEventLogger()
        self._log = store.load()

    @property
    def log(self) -> IndexedEventLog:
        """Return the in-memory event log."""
        return self._log

    @property
    def last_processed_slot(self) -> int:
        """Return the highest slot recorded so far."""
        return self._log.last_processed_slot

    def handle_event(self, event: XpSyncedEvent, slot: int) -> None:
        """Append ``event`` observed at ``slot``, saving periodically."""
        self._log.events.append(event)
        self._log.last_processed_slot = max(self._log.last_processed_slot, slot)
        self._events.log_event_indexed(event, slot)
        if len(self._log.events) % self._save_every == 0:
            self.save()

    def save(self) -> None:
        """Persist the buffer now."""
        self._store.save(self._log)
        self._events.log_saved(
            self._store.path, len(self._log.events), self._log.last_processed_slot
        )

    def close(self) -> None:
        """Persist the buffer before shutdown."""
        self.save()

    def _require_source(self) -> LedgerEventSource:
        if self._source is None:
            msg = "EventIndexer was created without an event source"
            raise RuntimeError(msg)
        return self._source

    def _apply(self, page: list[SlotEvent], *, floor: int, start_slot: int) -> int:
        applied = 0
        for item in page:
            if item.slot <= floor or item.slot < start_slot:
                continue
            self.handle_event(item.event, item.slot)
            applied += 1
        return applied

    async def poll_once(self) -> int:
        """Index events newer than the last processed slot.

        Returns
        -------
        int
            Number of events appended to the log.

        """
        floor = self._log.last_processed_slot
        page = await self._require_source().fetch_sync_events(
            after_slot=floor, limit=self._page_size
        )
        return self._apply(page, floor=floor, start_slot=0)

    async def run(
        self,
        stop_event: asyncio.Event,
        *,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    ) -> None:
        """Poll for new events until ``stop_event`` is set, then save."""
        try:
            while not stop_event.is_set():
                try:
                    await self.poll_once()
                except LedgerError as exc:
                    self._events.log_poll_failed(self._log.last_processed_slot, exc)
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(stop_event.wait(), timeout=poll_interval_s)
        finally:
            self.close()

    async def backfill(self, start_slot: int | None = None) -> int:
        """Replay historical events, skipping slots already processed.

        Parameters
        ----------
        start_slot
            Ignore events observed before this slot.

        Returns
        -------
        int
            Number of events appended to the log.

        """
        source = self._require_source()
        floor = self._log.last_processed_slot
        cursor = floor
        processed = 0
        while True:
            page = await source.fetch_sync_events(
                after_slot=cursor, limit=self._page_size
            )
            if not page:
                break
            processed += self._apply(page, floor=floor, start_slot=start_slot or 0)
            next_cursor = max(item.slot for item in page)
            if next_cursor <= cursor or len(page) < self._page_size:
                break
            cursor = next_cursor

        self.save()
        self._events.log_backfill_completed(processed, self._log.last_processed_slot)
        return processed

    def events_for_wallet(self, wallet: str) -> list[XpSyncedEvent]:
        """Return every indexed event for ``wallet`` in arrival order."""
        return [event for event in self._log.events if event.wallet == wallet]

    def unclaimed_epochs(self, wallet: str, registration_time: int) -> list[int]:
        """Return epochs with events no older than 90 days before registration."""
        cutoff = registration_time - UNCLAIMED_WINDOW_S
        return sorted(
            {
                event.epoch
                for event in self._log.events
                if event.wallet == wallet and event.timestamp >= cutoff
            }
        )
