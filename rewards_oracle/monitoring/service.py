"""Bounded in-process metric and alert history with webhook escalation."""

from __future__ import annotations

import collections
import datetime as dt
import typing as typ

import httpx
import msgspec

from rewards_oracle.common.time import utcnow
from rewards_oracle.logging import (
    get_logger,
    log_debug,
    log_error,
    log_info,
    log_warning,
)

from .models import (
    WEBHOOK_LEVELS,
    AlertEvent,
    AlertLevel,
    MetricEvent,
    MonitoringStats,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from rewards_oracle.logging import SupportsLog

logger = get_logger(__name__)

MAX_METRICS_HISTORY = 1000
MAX_ALERTS_HISTORY = 100
STATS_WINDOW = dt.timedelta(hours=24)

_HTTP_ERROR_STATUS_THRESHOLD = 400

_LEVEL_LOGGERS: dict[AlertLevel, cabc.Callable[..., None]] = {
    AlertLevel.INFO: log_info,
    AlertLevel.WARNING: log_warning,
    AlertLevel.ERROR: log_error,
    AlertLevel.CRITICAL: log_error,
}


class MonitoringService:
    """Record metrics and alerts; post error and critical alerts to a webhook.

    Histories are bounded: the oldest entries are discarded first. Webhook
    delivery failures are logged and never raised to the caller.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        webhook_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout_s: float = 10.0,
        clock: cabc.Callable[[], dt.datetime] = utcnow,
        logger: SupportsLog | None = None,
        max_metrics: int = MAX_METRICS_HISTORY,
        max_alerts: int = MAX_ALERTS_HISTORY,
    ) -> None:
        """Initialise empty histories and the optional webhook client."""
        self._webhook_url = webhook_url
        self._owns_client = http_client is None and webhook_url is not None
        self._client = http_client
        if self._owns_client:
            self._client = httpx.AsyncClient(timeout=timeout_s)
        self._clock = clock
        self._logger = logger or get_logger(__name__)
        self._metrics: collections.deque[MetricEvent] = collections.deque(
            maxlen=max_metrics
        )
        self._alerts: collections.deque[AlertEvent] = collections.deque(
            maxlen=max_alerts
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()

    def record_metric(
        self,
        name: str,
        value: float,
        tags: cabc.Mapping[str, str] | None = None,
    ) -> MetricEvent:
        """Store a metric sample and return it."""
        event = MetricEvent(
            name=name,
            value=value,
            timestamp=self._clock(),
            tags=dict(tags or {}),
        )
        self._metrics.append(event)
        log_debug(self._logger, "Metric: %s=%s tags=%s", name, value, event.tags)
        return event

    async def alert(
        self,
        level: AlertLevel | str,
        message: str,
        context: cabc.Mapping[str, object] | None = None,
    ) -> AlertEvent:
        """Store an alert, log it, and escalate error/critical ones."""
        event = AlertEvent(
            level=AlertLevel(level),
            message=message,
            timestamp=self._clock(),
            context=dict(context or {}),
        )
        self._alerts.append(event)
        _LEVEL_LOGGERS[event.level](
            self._logger, "Alert %s: %s %s", event.level, message, event.context
        )
        if event.level in WEBHOOK_LEVELS:
            await self._send_webhook(event)
        return event

    async def _send_webhook(self, event: AlertEvent) -> None:
        if self._webhook_url is None or self._client is None:
            return
        payload = {
            "text": f"{event.level.upper()}: {event.message}",
            "timestamp": event.timestamp,
            "context": event.context,
        }
        try:
            response = await self._client.post(
                self._webhook_url,
                content=msgspec.json.encode(payload, enc_hook=str),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            log_error(self._logger, "Failed to send webhook alert: %s", exc)
            return
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            log_error(
                self._logger,
                "Webhook alert rejected with HTTP %d",
                response.status_code,
            )

    def get_metrics(
        self, name: str | None = None, since: dt.datetime | None = None
    ) -> list[MetricEvent]:
        """Return retained metrics, optionally filtered by name and age."""
        return [
            metric
            for metric in self._metrics
            if (name is None or metric.name == name)
            and (since is None or metric.timestamp >= since)
        ]

    def get_alerts(
        self,
        level: AlertLevel | str | None = None,
        since: dt.datetime | None = None,
    ) -> list[AlertEvent]:
        """Return retained alerts, optionally filtered by level and age."""
        return [
            alert
            for alert in self._alerts
            if (level is None or alert.level == level)
            and (since is None or alert.timestamp >= since)
        ]

    def get_stats(self, now: dt.datetime | None = None) -> MonitoringStats:
        """Summarize retained history and activity in the last 24 hours."""
        cutoff = (now or self._clock()) - STATS_WINDOW
        by_level = collections.Counter(alert.level for alert in self._alerts)
        return MonitoringStats(
            total_metrics=len(self._metrics),
            metrics_last_24h=sum(1 for m in self._metrics if m.timestamp >= cutoff),
            total_alerts=len(self._alerts),
            alerts_last_24h=sum(1 for a in self._alerts if a.timestamp >= cutoff),
            alerts_by_level={str(level): by_level[level] for level in AlertLevel},
        )

    def reset(self) -> None:
        """Drop all retained metrics and alerts."""
        self._metrics.clear()
        self._alerts.clear()
