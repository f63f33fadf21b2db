"""Read-only ledger summaries for operators."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    from rewards_oracle.ledger.models import CategoryAmount
    from rewards_oracle.ledger.protocol import LedgerGateway


@dataclasses.dataclass(frozen=True, slots=True)
class EpochStats:
    """Display-ready view of one epoch."""

    epoch_number: int
    start_time: str
    end_time: str
    total_xp: int
    reward_amount: int
    contributor_count: int
    finalized: bool


@dataclasses.dataclass(frozen=True, slots=True)
class ContributorStats:
    """Display-ready view of one contributor account."""

    wallet: str
    github_username: str
    total_xp: int
    role_xp: dict[str, int]
    domain_xp: dict[str, int]
    skill_xp: dict[str, int]
    lifetime_reward_earned: int
    credit_claimable: int
    credit_claimed: int
    credit_unclaimed: int


def _as_mapping(amounts: list[CategoryAmount]) -> dict[str, int]:
    return {amount.name: amount.amount for amount in amounts}


class LedgerStatsService:
    """Query epoch and contributor accounts for the CLI and the API."""

    def __init__(self, gateway: LedgerGateway) -> None:
        """Bind the service to a ledger gateway."""
        self._gateway = gateway

    async def epoch_stats(self, epoch_number: int) -> EpochStats | None:
        """Return the summary of ``epoch_number`` or ``None`` if absent."""
        epoch = await self._gateway.get_epoch(epoch_number)
        if epoch is None:
            return None
        return EpochStats(
            epoch_number=epoch.epoch_number,
            start_time=epoch.starts_at.isoformat(),
            end_time=epoch.ends_at.isoformat(),
            total_xp=epoch.total_xp,
            reward_amount=epoch.reward_amount,
            contributor_count=epoch.contributor_count,
            finalized=epoch.finalized,
        )

    async def contributor_stats(self, wallet: str) -> ContributorStats | None:
        """Return the summary of ``wallet`` or ``None`` if unknown."""
        contributor = await self._gateway.get_contributor(wallet)
        if contributor is None:
            return None
        return ContributorStats(
            wallet=wallet,
            github_username=contributor.github_username,
            total_xp=contributor.total_xp,
            role_xp=_as_mapping(contributor.role_xp),
            domain_xp=_as_mapping(contributor.domain_xp),
            skill_xp=_as_mapping(contributor.skill_xp),
            lifetime_reward_earned=contributor.lifetime_reward_earned,
            credit_claimable=contributor.credit_claimable,
            credit_claimed=contributor.credit_claimed,
            credit_unclaimed=contributor.credit_unclaimed,
        )
