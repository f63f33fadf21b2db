"""Random but valid contributor records for local dry runs."""

from __future__ import annotations

import random
import secrets

import base58

from rewards_oracle.ledger.address import ADDRESS_BYTES

from .models import ContributorRecord, XpBreakdown, XpCategory

_ROLES = ("developer", "designer", "pm", "architect", "reviewer")
_DOMAINS = ("core", "ui", "docs", "infrastructure", "api")
_SKILLS = ("typescript", "rust", "react", "solana", "anchor", "nodejs")


def random_address(rng: random.Random | None = None) -> str:
    """Return a random, well-formed ledger address."""
    raw = (
        rng.randbytes(ADDRESS_BYTES)
        if rng is not None
        else secrets.token_bytes(ADDRESS_BYTES)
    )
    return base58.b58encode(raw).decode("ascii")


def _sample(
    rng: random.Random, names: tuple[str, ...], extra: int, total_xp: int
) -> tuple[XpCategory, ...]:
    count = rng.randint(1, extra) + 1
    return tuple(
        XpCategory(name=name, amount=rng.randint(1, max(1, total_xp // 2)))
        for name in names[:count]
    )


def generate_mock_contributors(
    count: int = 10, *, rng: random.Random | None = None
) -> list[ContributorRecord]:
    """Return ``count`` contributors named ``contributor1`` onwards."""
    generator = rng or random.Random()  # noqa: S311
    records: list[ContributorRecord] = []
    for index in range(count):
        total_xp = generator.randint(100, 10_099)
        records.append(
            ContributorRecord(
                username=f"contributor{index + 1}",
                wallet_address=random_address(generator),
                total_xp=total_xp,
                categories=XpBreakdown(
                    role=_sample(generator, _ROLES, 3, total_xp),
                    domain=_sample(generator, _DOMAINS, 3, total_xp),
                    skill=_sample(generator, _SKILLS, 4, total_xp),
                ),
            )
        )
    return records
