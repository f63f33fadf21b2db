"""Capability surfaces the oracle consumes from the remote ledger."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from rewards_oracle.leaderboard.models import XpBreakdown

    from .models import ContributorState, EpochState, LedgerConfig, SlotEvent


@typ.runtime_checkable
class LedgerGateway(typ.Protocol):
    """Fetch/submit contract for ledger-resident state.

    Reads return ``None`` when the account does not exist; that is never an
    error. Writes either return a transaction identifier or raise a
    :class:`~rewards_oracle.ledger.errors.LedgerError`. Implementations hold
    no cache: every call reflects the ledger at call time.
    """

    async def get_config(self) -> LedgerConfig | None:
        """Return the program configuration account."""
        ...

    async def get_epoch(self, epoch_number: int) -> EpochState | None:
        """Return the epoch account for ``epoch_number``."""
        ...

    async def get_contributor(self, wallet: str) -> ContributorState | None:
        """Return the contributor account for ``wallet``."""
        ...

    async def submit_sync(
        self,
        wallet: str,
        username: str,
        total_xp: int,
        categories: XpBreakdown,
    ) -> str:
        """Record ``total_xp`` and its breakdown in the current epoch."""
        ...

    async def submit_create_epoch(self, reward_amount: int) -> str:
        """Open the next epoch with ``reward_amount`` in its reward pool."""
        ...

    async def submit_finalize_epoch(self, epoch_number: int) -> str:
        """Finalize ``epoch_number`` once its end time has passed."""
        ...


@typ.runtime_checkable
class LedgerEventSource(typ.Protocol):
    """Ordered feed of contributor sync events keyed by ledger slot."""

    async def fetch_sync_events(
        self, *, after_slot: int, limit: int
    ) -> list[SlotEvent]:
        """Return up to ``limit`` events observed strictly after ``after_slot``."""
        ...
