"""Application factory for the rewards oracle Falcon ASGI application.

Usage
-----
Create a probes-only app::

    app = create_app()

Create the full app, with ``/stats`` and timers driven by the ASGI
lifespan::

    runtime = build_runtime(OracleConfig.from_env())
    app = create_app(AppDependencies.from_runtime(runtime))

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from rewards_oracle.api.middleware import TimerLifespan
from rewards_oracle.api.resources import HealthResource, ReadyResource, StatsResource

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from rewards_oracle.factory import OracleRuntime
    from rewards_oracle.monitoring import MonitoringService
    from rewards_oracle.periodic import PeriodicTask
    from rewards_oracle.service import OracleService

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    monitoring
        Monitoring service backing ``/stats``.
    service
        Oracle service whose latest cycle outcomes ``/stats`` reports.
    timers
        Periodic tasks started and stopped with the ASGI lifespan.
    on_shutdown
        Callback run after the timers stop, typically closing clients.

    """

    monitoring: MonitoringService
    service: OracleService | None = None
    timers: tuple[PeriodicTask, ...] = ()
    on_shutdown: cabc.Callable[[], cabc.Awaitable[object]] | None = None

    @classmethod
    def from_runtime(cls, runtime: OracleRuntime) -> AppDependencies:
        """Return dependencies serving ``runtime`` with both timers."""
        return cls(
            monitoring=runtime.monitoring,
            service=runtime.service,
            timers=runtime.timers(),
            on_shutdown=runtime.aclose,
        )


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    ``/health`` and ``/ready`` are always registered. With *dependencies*,
    the app also serves ``/stats`` and runs the timers in its lifespan.

    Parameters
    ----------
    dependencies
        Optional application dependencies.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    middleware: list[object] = []
    if dependencies is not None and dependencies.timers:
        middleware.append(
            TimerLifespan(dependencies.timers, on_shutdown=dependencies.on_shutdown)
        )

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource())

    if dependencies is not None:
        app.add_route(
            "/stats",
            StatsResource(dependencies.monitoring, dependencies.service),
        )

    return app
