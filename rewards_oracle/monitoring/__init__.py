"""In-process monitoring: metrics, alerts, and webhook escalation."""

from __future__ import annotations

from .models import AlertEvent, AlertLevel, MetricEvent, MonitoringStats
from .service import MAX_ALERTS_HISTORY, MAX_METRICS_HISTORY, MonitoringService

__all__ = [
    "MAX_ALERTS_HISTORY",
    "MAX_METRICS_HISTORY",
    "AlertEvent",
    "AlertLevel",
    "MetricEvent",
    "MonitoringService",
    "MonitoringStats",
]
