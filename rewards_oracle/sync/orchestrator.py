"""Reconcile one contributor record against ledger state."""

from __future__ import annotations

import asyncio
import random
import typing as typ

from rewards_oracle.config import DEFAULT_CONVERSION_RATIO
from rewards_oracle.ledger.errors import LedgerStateError

from .models import SyncDelta, SyncReceipt
from .observability import SyncEventLogger
from .retry import RetryPolicy

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from rewards_oracle.leaderboard.models import ContributorRecord
    from rewards_oracle.ledger.protocol import LedgerGateway


class ContributorSyncer:
    """Submit a contributor's leaderboard XP to the ledger with retries.

    Every attempt re-reads the ledger: the epoch number and the contributor's
    previous XP are never cached across attempts, so a retry after a write
    that did land reports the delta the ledger actually saw.

    Every ``Exception`` raised by an attempt is retried, timeouts and client
    errors outside the ledger hierarchy included. Cancellation and other
    ``BaseException``s propagate immediately.
    """

    def __init__(  # noqa: PLR0913
        self,
        gateway: LedgerGateway,
        *,
        conversion_ratio: int = DEFAULT_CONVERSION_RATIO,
        retry_policy: RetryPolicy | None = None,
        event_logger: SyncEventLogger | None = None,
        sleep: cabc.Callable[[float], cabc.Awaitable[object]] = asyncio.sleep,
        rng: cabc.Callable[[], float] = random.random,
    ) -> None:
        """Bind the syncer to a gateway and its retry collaborators."""
        self._gateway = gateway
        self._conversion_ratio = conversion_ratio
        self._retry_policy = retry_policy or RetryPolicy()
        self._events = event_logger or SyncEventLogger()
        self._sleep = sleep
        self._rng = rng

    async def sync_one(self, record: ContributorRecord) -> str | None:
        """Return the transaction id of the accepted write, or ``None``."""
        receipt = await self.sync_contributor(record)
        return None if receipt is None else receipt.transaction_id

    async def sync_contributor(self, record: ContributorRecord) -> SyncReceipt | None:
        """Sync ``record`` and return a receipt, or ``None`` after exhaustion.

        Parameters
        ----------
        record
            Canonical contributor record from the current leaderboard.

        Returns
        -------
        SyncReceipt | None
            Transaction id and delta of the successful attempt; ``None`` once
            every attempt allowed by the retry policy has failed.

        """
        policy = self._retry_policy
        last_error: Exception | None = None
        for attempt in range(1, policy.max_attempts + 1):
            try:
                return await self._attempt(record)
            except Exception as exc:  # noqa: BLE001 - any failed submission retries
                last_error = exc
                retry_in = (
                    policy.delay_for(attempt, self._rng)
                    if attempt < policy.max_attempts
                    else None
                )
                self._events.log_attempt_failed(
                    username=record.username,
                    attempt=attempt,
                    max_attempts=policy.max_attempts,
                    error=exc,
                    retry_in_s=retry_in,
                )
                if retry_in is not None:
                    await self._sleep(retry_in)

        self._events.log_contributor_failed(
            username=record.username,
            message=f"gave up after {policy.max_attempts} attempts",
            error=last_error,
        )
        return None

    async def _attempt(self, record: ContributorRecord) -> SyncReceipt:
        config = await self._gateway.get_config()
        if config is None:
            raise LedgerStateError.missing_config()

        previous = await self._gateway.get_contributor(record.wallet_address)
        delta = SyncDelta.compute(
            previous.total_xp if previous is not None else 0,
            record.total_xp,
            self._conversion_ratio,
        )
        transaction_id = await self._gateway.submit_sync(
            record.wallet_address,
            record.username,
            record.total_xp,
            record.categories,
        )
        self._events.log_contributor_synced(
            username=record.username,
            epoch=config.current_epoch,
            delta=delta,
            transaction_id=transaction_id,
        )
        return SyncReceipt(
            username=record.username,
            transaction_id=transaction_id,
            delta=delta,
        )
