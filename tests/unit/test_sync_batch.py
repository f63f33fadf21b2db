"""Unit tests for batched contributor sync.

Run with:
    pytest tests/unit/test_sync_batch.py
"""

from __future__ import annotations

import asyncio
import typing as typ

import pytest

from rewards_oracle.ledger import LedgerTransportError
from rewards_oracle.sync import (
    DEFAULT_BATCH_DELAY_S,
    RETRIES_EXHAUSTED_MESSAGE,
    BatchScheduler,
    ContributorSyncer,
    SupportsContributorSync,
    SyncDelta,
    SyncEventLogger,
    SyncReceipt,
    partition,
)
from tests.helpers.fakes import (
    FakeLedgerGateway,
    RecordingLogger,
    SleepRecorder,
    make_record,
)

if typ.TYPE_CHECKING:
    from rewards_oracle.leaderboard import ContributorRecord

Outcome = typ.Literal["ok", "none"]


class _Abort(BaseException):
    """Stands in for a system-level exception raised by a member."""


class _ScriptedSyncer:
    """Syncer whose per-user outcome is scripted and whose timeline is logged."""

    def __init__(
        self, outcomes: dict[str, Outcome | BaseException] | None = None
    ) -> None:
        self.outcomes = outcomes or {}
        self.timeline: list[str] = []

    async def sync_contributor(self, record: ContributorRecord) -> SyncReceipt | None:
        self.timeline.append(f"start:{record.username}")
        await asyncio.sleep(0)
        self.timeline.append(f"end:{record.username}")
        outcome = self.outcomes.get(record.username, "ok")
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome == "none":
            return None
        return SyncReceipt(
            username=record.username,
            transaction_id=f"tx-{record.username}",
            delta=SyncDelta.compute(0, record.total_xp, 10),
        )


def _records(count: int) -> list[ContributorRecord]:
    return [make_record(f"user{i}", i % 256, total_xp=100) for i in range(count)]


def _scheduler(
    syncer: SupportsContributorSync, sleeper: SleepRecorder, **kwargs: typ.Any
) -> BatchScheduler:
    return BatchScheduler(
        syncer,
        event_logger=SyncEventLogger(RecordingLogger()),
        sleep=sleeper,
        **kwargs,
    )


def test_partition_sizes() -> None:
    """Records split into consecutive chunks of at most the batch size."""
    chunks = partition(_records(45), 20)
    assert [len(chunk) for chunk in chunks] == [20, 20, 5]
    assert chunks[1][0].username == "user20"


def test_rejects_non_positive_batch_size(sleeper: SleepRecorder) -> None:
    """A batch size below one is refused."""
    with pytest.raises(ValueError, match="batch_size"):
        _scheduler(_ScriptedSyncer(), sleeper, batch_size=0)


class TestBatchScheduler:
    """Tests for BatchScheduler.sync_all."""

    @pytest.mark.asyncio
    async def test_twenty_five_records_run_in_two_settled_chunks(
        self, sleeper: SleepRecorder
    ) -> None:
        """The second chunk starts only after the first fully settles."""
        syncer = _ScriptedSyncer()

        result = await _scheduler(syncer, sleeper).sync_all(_records(25))

        assert result.successful == 25
        first_chunk_end = max(
            syncer.timeline.index(f"end:user{i}") for i in range(20)
        )
        second_chunk_start = min(
            syncer.timeline.index(f"start:user{i}") for i in range(20, 25)
        )
        assert first_chunk_end < second_chunk_start
        assert syncer.timeline[:20] == [f"start:user{i}" for i in range(20)], (
            "Expected every member of the first chunk to start concurrently."
        )
        assert sleeper.delays == [DEFAULT_BATCH_DELAY_S], (
            "Expected one inter-batch pause and none after the last batch."
        )

    @pytest.mark.asyncio
    async def test_every_record_is_counted_once(self, sleeper: SleepRecorder) -> None:
        """Successes plus failures equal the number of records."""
        outcomes: dict[str, Outcome | BaseException] = {
            "user1": "none",
            "user3": RuntimeError("rpc exploded"),
            "user4": RuntimeError(""),
        }
        syncer = _ScriptedSyncer(outcomes)

        result = await _scheduler(syncer, sleeper, batch_size=2).sync_all(_records(6))

        assert result.successful + result.failed == 6
        assert result.failed == 3
        assert [(e.username, e.message) for e in result.errors] == [
            ("user1", RETRIES_EXHAUSTED_MESSAGE),
            ("user3", "rpc exploded"),
            ("user4", "Unknown error"),
        ]

    @pytest.mark.asyncio
    async def test_totals_count_successes_only(self, sleeper: SleepRecorder) -> None:
        """Failed members contribute nothing to the totals."""
        syncer = _ScriptedSyncer({"user0": "none"})

        result = await _scheduler(syncer, sleeper).sync_all(_records(3))

        assert result.total_xp_synced == 200
        assert result.total_credit_earned == 2000

    @pytest.mark.asyncio
    async def test_system_exceptions_are_reraised(self, sleeper: SleepRecorder) -> None:
        """BaseExceptions that are not Exceptions abort the cycle."""
        syncer = _ScriptedSyncer({"user1": _Abort()})

        with pytest.raises(_Abort):
            await _scheduler(syncer, sleeper).sync_all(_records(3))

    @pytest.mark.asyncio
    async def test_empty_input(self, sleeper: SleepRecorder) -> None:
        """No records yields an empty result and no pauses."""
        result = await _scheduler(_ScriptedSyncer(), sleeper).sync_all([])

        assert result.total == 0
        assert sleeper.delays == []

    @pytest.mark.asyncio
    async def test_one_contributor_failure_does_not_affect_others(
        self, gateway: FakeLedgerGateway, sleeper: SleepRecorder
    ) -> None:
        """Exhausted retries for one wallet leave its batch mates synced."""
        records = _records(3)
        gateway.fail_sync(records[1].wallet_address, LedgerTransportError("down"))
        syncer = ContributorSyncer(
            gateway,
            event_logger=SyncEventLogger(RecordingLogger()),
            sleep=sleeper,
            rng=lambda: 0.0,
        )

        result = await _scheduler(syncer, sleeper).sync_all(records)

        assert result.successful == 2
        assert [e.username for e in result.errors] == ["user1"]
        assert {w for w, *_ in gateway.synced} == {
            records[0].wallet_address,
            records[2].wallet_address,
        }
