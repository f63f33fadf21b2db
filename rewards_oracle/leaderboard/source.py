"""Leaderboard snapshot sources.

A source returns the raw decoded JSON of one leaderboard snapshot; the
:class:`LeaderboardFetcher` feeds it through the normalizer. Retrieval
failures (HTTP status >= 400, unreadable files, invalid JSON) are hard
failures for the cycle: no partial data is ever returned.
"""

from __future__ import annotations

import asyncio
import typing as typ
from pathlib import Path

import httpx
import msgspec

from rewards_oracle.logging import get_logger, log_info

from .errors import LeaderboardSourceError
from .normalizer import ContributorNormalizer

if typ.TYPE_CHECKING:
    from rewards_oracle.config import OracleConfig

    from .models import ContributorRecord

logger = get_logger(__name__)

_HTTP_ERROR_STATUS_THRESHOLD = 400


class LeaderboardSource(typ.Protocol):
    """Interface for retrieving a raw leaderboard snapshot."""

    async def fetch(self) -> object:
        """Return the decoded JSON payload of the current snapshot."""
        ...


class HttpLeaderboardSource:
    """Fetch leaderboard snapshots with an HTTP GET."""

    def __init__(
        self,
        url: str,
        *,
        timeout_s: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the source for ``url``."""
        self._url = url
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout_s,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self) -> object:
        """GET the leaderboard and decode its JSON body."""
        log_info(logger, "Fetching leaderboard from %s", self._url)
        try:
            response = await self._client.get(self._url)
        except httpx.HTTPError as exc:
            raise LeaderboardSourceError.request_failed(self._url, exc) from exc
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise LeaderboardSourceError.http_error(response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise LeaderboardSourceError.invalid_json(self._url, exc) from exc


class FileLeaderboardSource:
    """Read leaderboard snapshots from a local JSON file."""

    def __init__(self, path: Path) -> None:
        """Initialise the source for ``path``."""
        self._path = Path(path)

    async def fetch(self) -> object:
        """Read and decode the file without blocking the event loop."""
        log_info(logger, "Reading leaderboard from %s", self._path)
        try:
            content = await asyncio.to_thread(self._path.read_bytes)
        except OSError as exc:
            raise LeaderboardSourceError.unreadable(self._path, exc) from exc
        try:
            return msgspec.json.decode(content)
        except msgspec.DecodeError as exc:
            raise LeaderboardSourceError.invalid_json(self._path, exc) from exc


def build_leaderboard_source(
    config: OracleConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> HttpLeaderboardSource | FileLeaderboardSource:
    """Select the configured source; a URL takes precedence over a file."""
    if config.leaderboard_url:
        return HttpLeaderboardSource(
            config.leaderboard_url,
            timeout_s=config.http_timeout_s,
            http_client=http_client,
        )
    if config.leaderboard_file is not None:
        return FileLeaderboardSource(config.leaderboard_file)
    raise LeaderboardSourceError.not_configured()


class LeaderboardFetcher:
    """Fetch a snapshot and normalize it into contributor records."""

    def __init__(
        self,
        source: LeaderboardSource | None,
        *,
        normalizer: ContributorNormalizer | None = None,
    ) -> None:
        """Bind the fetcher to a source and normalizer."""
        self._source = source
        self._normalizer = normalizer or ContributorNormalizer()

    async def fetch_contributors(self) -> list[ContributorRecord]:
        """Return the canonical records of the current snapshot."""
        if self._source is None:
            raise LeaderboardSourceError.not_configured()
        payload = await self._source.fetch()
        return self._normalizer.normalize(payload)
