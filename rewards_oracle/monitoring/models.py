"""Metric, alert, and summary records kept by the monitoring service."""

from __future__ import annotations

import datetime as dt  # noqa: TC003
import enum

import msgspec


class AlertLevel(enum.StrEnum):
    """Severity of an operator alert."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


WEBHOOK_LEVELS = frozenset({AlertLevel.ERROR, AlertLevel.CRITICAL})


class MetricEvent(msgspec.Struct, kw_only=True, frozen=True):
    """A named numeric sample."""

    name: str
    value: float
    timestamp: dt.datetime
    tags: dict[str, str] = msgspec.field(default_factory=dict)


class AlertEvent(msgspec.Struct, kw_only=True, frozen=True):
    """An operator-facing alert."""

    level: AlertLevel
    message: str
    timestamp: dt.datetime
    context: dict[str, object] = msgspec.field(default_factory=dict)


class MonitoringStats(msgspec.Struct, kw_only=True, frozen=True):
    """Counts over the retained history and the last 24 hours."""

    total_metrics: int
    metrics_last_24h: int
    total_alerts: int
    alerts_last_24h: int
    alerts_by_level: dict[str, int]
