"""Leaderboard source errors."""

from __future__ import annotations


class LeaderboardError(RuntimeError):
    """Base class for leaderboard retrieval failures."""


class LeaderboardSourceError(LeaderboardError):
    """Raised when a leaderboard snapshot cannot be retrieved."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> LeaderboardSourceError:
        """Return an error for non-2xx leaderboard responses."""
        return cls(f"Leaderboard HTTP {status_code}", status_code=status_code)

    @classmethod
    def request_failed(cls, url: str, reason: object) -> LeaderboardSourceError:
        """Return an error for a request that produced no response."""
        return cls(f"Leaderboard request to {url} failed: {reason}")

    @classmethod
    def unreadable(cls, path: object, reason: object) -> LeaderboardSourceError:
        """Return an error for a leaderboard file that cannot be read."""
        return cls(f"Leaderboard file {path} could not be read: {reason}")

    @classmethod
    def invalid_json(cls, origin: object, reason: object) -> LeaderboardSourceError:
        """Return an error for a payload that is not valid JSON."""
        return cls(f"Leaderboard payload from {origin} is not valid JSON: {reason}")

    @classmethod
    def not_configured(cls) -> LeaderboardSourceError:
        """Return an error when neither a URL nor a file is configured."""
        return cls("No leaderboard data source configured")
