"""ASGI lifespan middleware that runs the oracle timers."""

from __future__ import annotations

import typing as typ

from rewards_oracle.logging import get_logger, log_info

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from rewards_oracle.periodic import PeriodicTask

__all__ = ["TimerLifespan"]

logger = get_logger(__name__)


class TimerLifespan:
    """Start periodic tasks on ASGI startup and stop them on shutdown.

    ``on_shutdown`` callbacks run after every timer has stopped, so they can
    close clients the timers were using.
    """

    def __init__(
        self,
        timers: cabc.Sequence[PeriodicTask],
        *,
        on_shutdown: cabc.Callable[[], cabc.Awaitable[object]] | None = None,
    ) -> None:
        """Initialise the middleware with the timers it owns."""
        self._timers = tuple(timers)
        self._on_shutdown = on_shutdown

    async def process_startup(self, _scope: object, _event: object) -> None:
        """Start every timer on the server's event loop."""
        for timer in self._timers:
            timer.start()
        log_info(logger, "Started %d oracle timers", len(self._timers))

    async def process_shutdown(self, _scope: object, _event: object) -> None:
        """Stop every timer, then run the shutdown callback."""
        for timer in self._timers:
            await timer.stop()
        if self._on_shutdown is not None:
            await self._on_shutdown()
        log_info(logger, "Stopped oracle timers")
