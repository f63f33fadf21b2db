"""Typed views of ledger-resident accounts and events.

The ledger speaks camelCase JSON; these structs decode it with
``msgspec.convert`` so field names stay Pythonic on this side.
"""

from __future__ import annotations

import typing as typ

import msgspec

from rewards_oracle.common.time import from_unix

if typ.TYPE_CHECKING:
    import datetime as dt


class CategoryAmount(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """A named XP amount as stored on the ledger."""

    name: str
    amount: int


class LedgerConfig(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Program-wide configuration account.

    Attributes
    ----------
    current_epoch : int
        Number of the most recently created epoch; ``0`` before the first.
    total_epochs : int
        Count of epochs ever created.
    conversion_ratio : int
        XP to credit ratio the program applies to registered contributors.

    """

    current_epoch: int
    total_epochs: int = 0
    conversion_ratio: int | None = None


class EpochState(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Reward epoch account.

    ``start_time`` and ``end_time`` are Unix seconds as recorded by the
    ledger clock.
    """

    epoch_number: int
    start_time: int
    end_time: int
    total_xp: int = 0
    reward_amount: int = 0
    contributor_count: int = 0
    finalized: bool = False

    @property
    def starts_at(self) -> dt.datetime:
        """Return the epoch start as an aware datetime."""
        return from_unix(self.start_time)

    @property
    def ends_at(self) -> dt.datetime:
        """Return the epoch end as an aware datetime."""
        return from_unix(self.end_time)


class ContributorState(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Contributor account as tracked by the ledger."""

    wallet: str
    github_username: str
    total_xp: int
    role_xp: list[CategoryAmount] = msgspec.field(default_factory=list)
    domain_xp: list[CategoryAmount] = msgspec.field(default_factory=list)
    skill_xp: list[CategoryAmount] = msgspec.field(default_factory=list)
    lifetime_reward_earned: int = 0
    credit_claimable: int = 0
    credit_claimed: int = 0

    @property
    def credit_unclaimed(self) -> int:
        """Return credit the contributor has earned but not yet claimed."""
        return self.credit_claimable - self.credit_claimed


class XpSyncedEvent(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """Event emitted by the ledger for every contributor sync."""

    wallet: str
    github_username: str
    epoch: int
    total_xp: int
    role_xp: list[CategoryAmount] = msgspec.field(default_factory=list)
    domain_xp: list[CategoryAmount] = msgspec.field(default_factory=list)
    skill_xp: list[CategoryAmount] = msgspec.field(default_factory=list)
    credit_earned: int = 0
    timestamp: int = 0
    is_registered: bool = False


class SlotEvent(msgspec.Struct, kw_only=True, frozen=True):
    """A sync event paired with the ledger slot it was observed at."""

    slot: int
    event: XpSyncedEvent
