"""Canonical contributor records produced by leaderboard normalization."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

FALLBACK_CATEGORY = "contributor"


@dataclasses.dataclass(frozen=True, slots=True)
class XpCategory:
    """A named, strictly positive XP amount."""

    name: str
    amount: int


@dataclasses.dataclass(frozen=True, slots=True)
class XpBreakdown:
    """XP grouped by role, domain, and skill in source order."""

    role: tuple[XpCategory, ...] = ()
    domain: tuple[XpCategory, ...] = ()
    skill: tuple[XpCategory, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Return True when no grouping carries a category."""
        return not (self.role or self.domain or self.skill)

    def groups(self) -> cabc.Iterator[tuple[str, tuple[XpCategory, ...]]]:
        """Yield ``(group_name, categories)`` pairs in a stable order."""
        yield ("role", self.role)
        yield ("domain", self.domain)
        yield ("skill", self.skill)


@dataclasses.dataclass(frozen=True, slots=True)
class ContributorRecord:
    """Alias-resolved contributor snapshot for one sync cycle.

    Attributes
    ----------
    username
        Non-empty contributor identifier (usually a GitHub login).
    wallet_address
        Ledger address satisfying the base58 address grammar.
    total_xp
        Authoritative, strictly positive score for this cycle.
    categories
        Role, domain, and skill breakdown. Never empty: records without a
        breakdown carry a single ``contributor`` role worth ``total_xp``.

    """

    username: str
    wallet_address: str
    total_xp: int
    categories: XpBreakdown = dataclasses.field(default_factory=XpBreakdown)
