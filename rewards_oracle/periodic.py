"""Interval timers that drive oracle cycles."""

from __future__ import annotations

import asyncio
import contextlib
import typing as typ

from rewards_oracle.logging import get_logger, log_exception, log_info

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from rewards_oracle.logging import SupportsLog

logger = get_logger(__name__)


class PeriodicTask:
    """Run ``job`` every ``interval_s`` seconds until stopped.

    The first run happens immediately. A failing run is logged and the loop
    waits for the next tick, which starts the cycle from scratch.
    """

    def __init__(
        self,
        name: str,
        interval_s: float,
        job: cabc.Callable[[], cabc.Awaitable[object]],
        *,
        logger: SupportsLog | None = None,
    ) -> None:
        """Describe the timer; call :meth:`start` or :meth:`run` to begin."""
        if interval_s <= 0:
            msg = f"interval_s must be positive, got: {interval_s}"
            raise ValueError(msg)
        self.name = name
        self._interval_s = interval_s
        self._job = job
        self._logger = logger or get_logger(__name__)
        self._stop = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self.runs = 0
        self.failures = 0

    async def run_once(self) -> bool:
        """Run the job a single time; return False if it raised."""
        self.runs += 1
        try:
            await self._job()
        except Exception as exc:  # noqa: BLE001 - the next tick retries
            self.failures += 1
            log_exception(self._logger, f"Periodic task {self.name} failed", exc)
            return False
        return True

    async def run(self) -> None:
        """Loop until :meth:`stop` is called."""
        log_info(
            self._logger,
            "Periodic task %s started (interval_s=%s)",
            self.name,
            self._interval_s,
        )
        while not self._stop.is_set():
            await self.run_once()
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._stop.wait(), timeout=self._interval_s)
        log_info(self._logger, "Periodic task %s stopped", self.name)

    def start(self) -> asyncio.Task[None]:
        """Schedule :meth:`run` on the running loop and return the task."""
        if self._task is None or self._task.done():
            self._stop.clear()
            self._task = asyncio.create_task(self.run(), name=self.name)
        return self._task

    async def stop(self) -> None:
        """Signal the loop to exit and wait for the in-flight run to finish."""
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None
