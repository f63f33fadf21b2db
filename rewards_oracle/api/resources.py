"""HTTP resources for probes and operational statistics.

Usage
-----
Register the resources on the Falcon app::

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource())
    app.add_route("/stats", StatsResource(monitoring, service))

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import msgspec

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from rewards_oracle.monitoring import MonitoringService
    from rewards_oracle.service import OracleService

__all__ = ["HealthResource", "ReadyResource", "StatsResource"]


class HealthResource:
    """Liveness probe resource returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe resource returning ``{"status": "ready"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests."""
        resp.media = {"status": "ready"}
        resp.status = HTTPStatus.OK


class StatsResource:
    """Monitoring counters plus the outcome of the latest cycles."""

    def __init__(
        self,
        monitoring: MonitoringService,
        service: OracleService | None = None,
    ) -> None:
        """Bind the resource to the monitoring service and oracle service."""
        self._monitoring = monitoring
        self._service = service

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /stats requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with monitoring stats, the last sync
            summary, and the last epoch rotation (``null`` until each has
            run).

        """
        last_sync = self._service.last_sync if self._service else None
        last_rotation = self._service.last_rotation if self._service else None
        resp.media = msgspec.to_builtins(
            {
                "monitoring": self._monitoring.get_stats(),
                "last_sync": last_sync,
                "last_rotation": last_rotation,
            }
        )
        resp.status = HTTPStatus.OK
