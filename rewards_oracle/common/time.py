"""Common time utilities."""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def to_unix(value: dt.datetime) -> int:
    """Return whole Unix seconds for an aware datetime."""
    if value.tzinfo is None:
        msg = "timestamp must be timezone-aware"
        raise ValueError(msg)
    return int(value.timestamp())


def from_unix(seconds: int) -> dt.datetime:
    """Return an aware UTC datetime for Unix seconds."""
    return dt.datetime.fromtimestamp(seconds, dt.UTC)
