"""Error categorization shared by the structured event loggers.

Categories let log aggregators route failures: transient ledger trouble is
expected to clear on the next attempt, while schema drift or configuration
problems need an operator.
"""

from __future__ import annotations

import enum

from rewards_oracle.config import ConfigError
from rewards_oracle.leaderboard.errors import LeaderboardSourceError
from rewards_oracle.ledger.errors import (
    LedgerAPIError,
    LedgerResponseShapeError,
    LedgerStateError,
    LedgerTransportError,
)

# HTTP status code threshold for server errors (5xx)
_HTTP_SERVER_ERROR_THRESHOLD = 500
_HTTP_TOO_MANY_REQUESTS = 429


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    LEDGER_STATE = "ledger_state"
    CONFIGURATION = "configuration"
    INPUT = "input"
    UNKNOWN = "unknown"


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (LedgerTransportError, ErrorCategory.TRANSIENT),
    (LedgerResponseShapeError, ErrorCategory.SCHEMA_DRIFT),
    (LedgerStateError, ErrorCategory.LEDGER_STATE),
    (ConfigError, ErrorCategory.CONFIGURATION),
    (TimeoutError, ErrorCategory.TRANSIENT),
    (ConnectionError, ErrorCategory.TRANSIENT),
)


def _categorize_status(status_code: int | None) -> ErrorCategory:
    if status_code is None:
        return ErrorCategory.CLIENT_ERROR
    if (
        status_code >= _HTTP_SERVER_ERROR_THRESHOLD
        or status_code == _HTTP_TOO_MANY_REQUESTS
    ):
        return ErrorCategory.TRANSIENT
    return ErrorCategory.CLIENT_ERROR


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception for alerting purposes.

    Returns:
        ErrorCategory indicating the type of failure for alert routing.

    """
    # Status-bearing errors distinguish server trouble from rejected requests
    if isinstance(exc, LedgerAPIError):
        return _categorize_status(exc.status_code)
    if isinstance(exc, LeaderboardSourceError):
        if exc.status_code is None:
            return ErrorCategory.INPUT
        return _categorize_status(exc.status_code)

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    return ErrorCategory.UNKNOWN


__all__ = ["ErrorCategory", "categorize_error"]
