"""femtologging helpers shared by every oracle component.

Components log pre-formatted, percent-interpolated messages through the
``log_*`` helpers, so any object with a femtologging-style ``log`` method
(including the recorders used in tests) can stand in for a real logger.

Example:
>>> from rewards_oracle.logging import get_logger, log_info
>>> log_info(get_logger(__name__), "Synced %s", "alice")

"""

from __future__ import annotations

import enum
import typing as typ

from femtologging import basicConfig, get_logger

DEFAULT_LOG_LEVEL = "INFO"


class LogLevel(enum.StrEnum):
    """Values accepted by ``REWARDS_ORACLE_LOG_LEVEL``."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SupportsLog(typ.Protocol):
    """Protocol for femtologging-compatible loggers."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Return ``(level, invalid)`` for a raw level string.

    Blank or unknown input falls back to INFO with ``invalid`` set, so the
    caller can warn once at startup.
    """
    candidate = (level or "").strip().upper()
    if candidate in LogLevel.__members__:
        return (candidate, False)
    return (DEFAULT_LOG_LEVEL, True)


def configure_logging(level: str, *, force: bool = False) -> tuple[str, bool]:
    """Configure femtologging once at process start.

    Returns the normalized level and whether ``level`` was invalid.
    """
    normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


def format_log_message(template: str, *args: object) -> str:
    """Format a log message using percent-style interpolation."""
    return template % args


def _emit(
    logger: SupportsLog, level: str, message: str, exc_info: object | None = None
) -> None:
    logger.log(level, message, exc_info=exc_info, stack_info=False)


def log_debug(logger: SupportsLog, template: str, *args: object) -> None:
    """Log a DEBUG message."""
    _emit(logger, "DEBUG", format_log_message(template, *args))


def log_info(logger: SupportsLog, template: str, *args: object) -> None:
    """Log an INFO message."""
    _emit(logger, "INFO", format_log_message(template, *args))


def log_warning(
    logger: SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log a WARNING message, optionally with exception information."""
    _emit(logger, "WARNING", format_log_message(template, *args), exc_info)


def log_error(
    logger: SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an ERROR message, optionally with exception information."""
    _emit(logger, "ERROR", format_log_message(template, *args), exc_info)


def log_exception(logger: SupportsLog, message: str, exc: BaseException) -> None:
    """Log a pre-formatted ERROR message with ``exc`` attached as exc_info."""
    _emit(logger, "ERROR", message, exc)


__all__ = [
    "DEFAULT_LOG_LEVEL",
    "LogLevel",
    "SupportsLog",
    "configure_logging",
    "format_log_message",
    "get_logger",
    "log_debug",
    "log_error",
    "log_exception",
    "log_info",
    "log_warning",
    "normalize_log_level",
]
