"""Oracle cycles: fetch-and-sync and epoch rotation.

``OracleService`` is what every invocation surface drives: the CLI one-shot
commands, the timer loops, the ASGI runtime, and the Dramatiq actors. Each
cycle either completes with a summary or raises; fatal failures are alerted
and re-raised so the caller decides between a non-zero exit and waiting for
the next tick.
"""

from __future__ import annotations

import dataclasses as dc
import time
import typing as typ

from rewards_oracle.common.time import utcnow
from rewards_oracle.ledger.errors import LedgerStateError
from rewards_oracle.logging import get_logger, log_info
from rewards_oracle.monitoring import AlertLevel
from rewards_oracle.observability import categorize_error
from rewards_oracle.sync import BatchResult

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from rewards_oracle.epochs import EpochLifecycleManager, EpochRotationResult
    from rewards_oracle.leaderboard import LeaderboardFetcher
    from rewards_oracle.ledger import LedgerGateway
    from rewards_oracle.monitoring import MonitoringService
    from rewards_oracle.sync import BatchScheduler

logger = get_logger(__name__)


@dc.dataclass(frozen=True, slots=True)
class OracleServiceDependencies:
    """Collaborators wired into :class:`OracleService`."""

    gateway: LedgerGateway
    fetcher: LeaderboardFetcher
    scheduler: BatchScheduler
    epochs: EpochLifecycleManager
    monitoring: MonitoringService


@dc.dataclass(frozen=True, slots=True)
class SyncSummary:
    """Last completed sync cycle, as exposed on ``/stats``."""

    completed_at: dt.datetime
    duration_s: float
    result: BatchResult


class OracleService:
    """Run sync and epoch cycles and keep their latest outcomes."""

    def __init__(
        self,
        dependencies: OracleServiceDependencies,
        *,
        epoch_reward_amount: int,
        clock: cabc.Callable[[], dt.datetime] = utcnow,
    ) -> None:
        """Bind the service to its collaborators."""
        self._deps = dependencies
        self._epoch_reward_amount = epoch_reward_amount
        self._clock = clock
        self._last_sync: SyncSummary | None = None
        self._last_rotation: EpochRotationResult | None = None

    @property
    def last_sync(self) -> SyncSummary | None:
        """Return the most recent successful sync summary."""
        return self._last_sync

    @property
    def last_rotation(self) -> EpochRotationResult | None:
        """Return the most recent epoch rotation outcome."""
        return self._last_rotation

    async def run_sync_cycle(self) -> BatchResult:
        """Fetch the leaderboard and sync every valid contributor.

        Returns
        -------
        BatchResult
            Per-cycle summary; empty when the leaderboard has no valid entry.

        Raises
        ------
        LeaderboardError
            If the leaderboard cannot be retrieved.
        LedgerError
            If the ledger config cannot be read before syncing.

        """
        started_at = time.monotonic()
        monitoring = self._deps.monitoring
        try:
            result = await self._sync()
        except Exception as exc:
            await monitoring.alert(
                AlertLevel.ERROR,
                "Sync cycle failed",
                {"error": str(exc), "error_category": categorize_error(exc)},
            )
            raise

        duration_s = time.monotonic() - started_at
        monitoring.record_metric("sync.successful", result.successful)
        monitoring.record_metric("sync.failed", result.failed)
        monitoring.record_metric("sync.xp_synced", result.total_xp_synced)
        monitoring.record_metric("sync.credit_earned", result.total_credit_earned)
        monitoring.record_metric("sync.duration_s", duration_s)
        if result.failed:
            await monitoring.alert(
                AlertLevel.WARNING,
                f"{result.failed} contributors failed to sync",
                {"errors": [f"{e.username}: {e.message}" for e in result.errors]},
            )

        self._last_sync = SyncSummary(
            completed_at=self._clock(), duration_s=duration_s, result=result
        )
        return result

    async def _sync(self) -> BatchResult:
        contributors = await self._deps.fetcher.fetch_contributors()
        if not contributors:
            log_info(logger, "Leaderboard has no valid contributors; nothing to sync")
            return BatchResult()

        config = await self._deps.gateway.get_config()
        if config is None:
            raise LedgerStateError.missing_config()
        log_info(
            logger,
            "Syncing %d contributors into epoch %d",
            len(contributors),
            config.current_epoch,
        )
        return await self._deps.scheduler.sync_all(contributors)

    async def run_epoch_cycle(self) -> EpochRotationResult:
        """Finalize the expired epoch and open the next one."""
        monitoring = self._deps.monitoring
        try:
            rotation = await self._deps.epochs.run_weekly(self._epoch_reward_amount)
        except Exception as exc:
            await monitoring.alert(
                AlertLevel.CRITICAL,
                "Epoch rotation failed",
                {"error": str(exc), "error_category": categorize_error(exc)},
            )
            raise

        monitoring.record_metric("epoch.rotated", 1 if rotation.rotated else 0)
        if rotation.created_epoch is not None:
            await monitoring.alert(
                AlertLevel.INFO,
                f"Epoch {rotation.created_epoch} created",
                {"transaction_id": rotation.transaction_id},
            )
        self._last_rotation = rotation
        return rotation
