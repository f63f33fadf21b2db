"""Batched fan-out of contributor syncs."""

from __future__ import annotations

import asyncio
import typing as typ

from .models import BatchResult, BatchResultBuilder, SyncReceipt
from .observability import SyncEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from rewards_oracle.leaderboard.models import ContributorRecord

DEFAULT_BATCH_SIZE = 20
DEFAULT_BATCH_DELAY_S = 0.1

RETRIES_EXHAUSTED_MESSAGE = "Transaction failed after retries"
UNKNOWN_ERROR_MESSAGE = "Unknown error"


class SupportsContributorSync(typ.Protocol):
    """Anything that can sync a single contributor record."""

    async def sync_contributor(
        self, record: ContributorRecord
    ) -> SyncReceipt | None: ...


def partition(
    records: cabc.Sequence[ContributorRecord], size: int
) -> list[cabc.Sequence[ContributorRecord]]:
    """Split ``records`` into consecutive chunks of at most ``size``."""
    return [records[start : start + size] for start in range(0, len(records), size)]


class BatchScheduler:
    """Sync a whole leaderboard in fixed-size concurrent batches.

    Members of one batch run concurrently; batch ``i + 1`` starts only after
    every member of batch ``i`` has settled, with ``batch_delay_s`` between
    batches to bound the request rate against the ledger.
    """

    def __init__(
        self,
        syncer: SupportsContributorSync,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay_s: float = DEFAULT_BATCH_DELAY_S,
        event_logger: SyncEventLogger | None = None,
        sleep: cabc.Callable[[float], cabc.Awaitable[object]] = asyncio.sleep,
    ) -> None:
        """Bind the scheduler to a syncer and its pacing settings."""
        if batch_size < 1:
            msg = f"batch_size must be positive, got: {batch_size}"
            raise ValueError(msg)
        self._syncer = syncer
        self._batch_size = batch_size
        self._batch_delay_s = batch_delay_s
        self._events = event_logger or SyncEventLogger()
        self._sleep = sleep

    async def sync_all(self, records: cabc.Sequence[ContributorRecord]) -> BatchResult:
        """Sync every record and return the aggregated report.

        Parameters
        ----------
        records
            Canonical records in leaderboard order.

        Returns
        -------
        BatchResult
            Counts, success-only totals, and per-contributor errors. Its
            ``successful + failed`` always equals ``len(records)``.

        Raises
        ------
        BaseException
            Re-raised immediately for system-level exceptions (e.g.
            cancellation or KeyboardInterrupt) surfacing from a member.

        """
        builder = BatchResultBuilder()
        batches = partition(records, self._batch_size)
        for index, batch in enumerate(batches):
            if index:
                await self._sleep(self._batch_delay_s)
            self._events.log_batch_started(
                index=index + 1, batch_count=len(batches), size=len(batch)
            )
            gathered = await asyncio.gather(
                *(self._syncer.sync_contributor(record) for record in batch),
                return_exceptions=True,
            )
            self._fold(builder, batch, gathered)

        result = builder.build()
        self._events.log_cycle_completed(result)
        return result

    def _fold(
        self,
        builder: BatchResultBuilder,
        batch: cabc.Sequence[ContributorRecord],
        gathered: list[SyncReceipt | None | BaseException],
    ) -> None:
        """Fold one settled batch into ``builder``, preserving record order."""
        for record, outcome in zip(batch, gathered, strict=True):
            if isinstance(outcome, Exception):
                message = str(outcome) or UNKNOWN_ERROR_MESSAGE
                self._events.log_contributor_failed(
                    username=record.username, message=message, error=outcome
                )
                builder.record_failure(record.username, message)
            elif isinstance(outcome, BaseException):
                # Re-raise system-level exceptions (e.g., KeyboardInterrupt) immediately
                raise outcome
            elif outcome is None:
                builder.record_failure(record.username, RETRIES_EXHAUSTED_MESSAGE)
            else:
                builder.record_success(outcome)
