"""Epoch lifecycle: finalize the expired epoch, then open the next one."""

from __future__ import annotations

import asyncio
import dataclasses
import typing as typ

from rewards_oracle.common.time import to_unix, utcnow
from rewards_oracle.ledger.errors import LedgerError, LedgerStateError

from .errors import EpochStillOpenError
from .observability import EpochEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from rewards_oracle.ledger.models import LedgerConfig
    from rewards_oracle.ledger.protocol import LedgerGateway

SETTLE_DELAY_S = 5.0


@dataclasses.dataclass(frozen=True, slots=True)
class EpochRotationResult:
    """Outcome of one weekly rotation.

    Attributes
    ----------
    finalized_epoch
        Epoch finalized during this rotation, if any.
    created_epoch
        Number of the epoch opened, or ``None`` when creation was skipped.
    transaction_id
        Transaction id of the creation write.
    skipped_reason
        Why no epoch was opened.

    """

    finalized_epoch: int | None = None
    created_epoch: int | None = None
    transaction_id: str | None = None
    skipped_reason: str | None = None

    @property
    def rotated(self) -> bool:
        """Return True when a new epoch was opened."""
        return self.transaction_id is not None


class EpochLifecycleManager:
    """Drive the ledger's single current-epoch pointer forward.

    At most one epoch is open at a time. The ledger itself does not enforce
    this, so creation re-reads the current epoch and refuses while it is
    still open.
    """

    def __init__(  # noqa: PLR0913
        self,
        gateway: LedgerGateway,
        *,
        event_logger: EpochEventLogger | None = None,
        clock: cabc.Callable[[], dt.datetime] = utcnow,
        sleep: cabc.Callable[[float], cabc.Awaitable[object]] = asyncio.sleep,
        settle_delay_s: float = SETTLE_DELAY_S,
        enforce_single_open_epoch: bool = True,
    ) -> None:
        """Bind the manager to a gateway, clock, and sleep function."""
        self._gateway = gateway
        self._events = event_logger or EpochEventLogger()
        self._clock = clock
        self._sleep = sleep
        self._settle_delay_s = settle_delay_s
        self._enforce_single_open_epoch = enforce_single_open_epoch

    async def check_and_finalize(self) -> bool:
        """Finalize the current epoch if it is open and has ended.

        Returns
        -------
        bool
            True only when an open, expired epoch was finalized by this call.

        Raises
        ------
        LedgerError
            If the config or current epoch cannot be read, or the finalize
            write is rejected.

        """
        return await self._finalize_if_due() is not None

    async def create_epoch(self, reward_amount: int) -> str:
        """Open the epoch after the current one and return its transaction id.

        Raises
        ------
        EpochStillOpenError
            If the current epoch exists and has not been finalized.
        LedgerError
            If the ledger cannot be read or rejects the creation.

        """
        _, transaction_id = await self._create(reward_amount)
        return transaction_id

    async def run_weekly(self, reward_amount: int) -> EpochRotationResult:
        """Finalize the expired epoch, settle, and open the next one."""
        finalized_epoch = await self._finalize_if_due()
        if finalized_epoch is not None:
            await self._sleep(self._settle_delay_s)

        try:
            created_epoch, transaction_id = await self._create(reward_amount)
        except EpochStillOpenError as exc:
            self._events.log_create_skipped(exc.epoch_number)
            return EpochRotationResult(
                finalized_epoch=finalized_epoch,
                skipped_reason=str(exc),
            )

        return EpochRotationResult(
            finalized_epoch=finalized_epoch,
            created_epoch=created_epoch,
            transaction_id=transaction_id,
        )

    async def _require_config(self) -> LedgerConfig:
        config = await self._gateway.get_config()
        if config is None:
            raise LedgerStateError.missing_config()
        return config

    async def _finalize_if_due(self) -> int | None:
        config = await self._require_config()
        current = config.current_epoch
        if current == 0:
            self._events.log_no_epoch()
            return None

        epoch = await self._gateway.get_epoch(current)
        if epoch is None:
            raise LedgerStateError.missing_epoch(current)
        if epoch.finalized:
            self._events.log_already_finalized(current)
            return None

        now = to_unix(self._clock())
        if now < epoch.end_time:
            self._events.log_not_due(current, epoch.end_time - now)
            return None

        transaction_id = await self._gateway.submit_finalize_epoch(current)
        self._events.log_finalized(current, transaction_id)
        return current

    async def _create(self, reward_amount: int) -> tuple[int, str]:
        config = await self._require_config()
        current = config.current_epoch
        if self._enforce_single_open_epoch and current > 0:
            epoch = await self._gateway.get_epoch(current)
            if epoch is None:
                raise LedgerStateError.missing_epoch(current)
            if not epoch.finalized:
                raise EpochStillOpenError(current)

        next_epoch = current + 1
        try:
            transaction_id = await self._gateway.submit_create_epoch(reward_amount)
        except LedgerError as exc:
            self._events.log_create_failed(next_epoch, exc)
            raise
        self._events.log_created(next_epoch, reward_amount, transaction_id)
        return next_epoch, transaction_id
