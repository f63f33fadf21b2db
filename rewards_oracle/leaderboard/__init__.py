"""Leaderboard retrieval and contributor normalization."""

from __future__ import annotations

from .errors import LeaderboardError, LeaderboardSourceError
from .mock import generate_mock_contributors
from .models import FALLBACK_CATEGORY, ContributorRecord, XpBreakdown, XpCategory
from .normalizer import ContributorNormalizer, normalize_leaderboard
from .source import (
    FileLeaderboardSource,
    HttpLeaderboardSource,
    LeaderboardFetcher,
    LeaderboardSource,
    build_leaderboard_source,
)

__all__ = [
    "FALLBACK_CATEGORY",
    "ContributorNormalizer",
    "ContributorRecord",
    "FileLeaderboardSource",
    "HttpLeaderboardSource",
    "LeaderboardError",
    "LeaderboardFetcher",
    "LeaderboardSource",
    "LeaderboardSourceError",
    "XpBreakdown",
    "XpCategory",
    "build_leaderboard_source",
    "generate_mock_contributors",
    "normalize_leaderboard",
]
