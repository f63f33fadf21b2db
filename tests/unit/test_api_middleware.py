"""Unit tests for rewards_oracle.api.middleware.TimerLifespan.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_middleware.py

"""

from __future__ import annotations

import asyncio

import pytest

from rewards_oracle.api.middleware import TimerLifespan
from rewards_oracle.periodic import PeriodicTask
from tests.helpers.fakes import RecordingLogger


class _CountingJob:
    """Job that records how often it ran."""

    def __init__(self) -> None:
        self.runs = 0
        self.ran = asyncio.Event()

    async def __call__(self) -> None:
        self.runs += 1
        self.ran.set()


class TestTimerLifespan:
    """Startup and shutdown hooks."""

    @pytest.mark.asyncio
    async def test_startup_starts_and_shutdown_stops_timers(self) -> None:
        """Timers run between startup and shutdown, then stop."""
        job = _CountingJob()
        timer = PeriodicTask("sync", 3600, job, logger=RecordingLogger())
        middleware = TimerLifespan([timer])

        await middleware.process_startup(None, None)
        await asyncio.wait_for(job.ran.wait(), timeout=1)
        await middleware.process_shutdown(None, None)

        assert job.runs == 1, "Expected one immediate run before the long interval."
        assert timer._task is None, "Expected the timer task to be awaited."

    @pytest.mark.asyncio
    async def test_shutdown_callback_runs_after_timers(self) -> None:
        """The shutdown callback observes every timer already stopped."""
        timer = PeriodicTask("epoch", 3600, _CountingJob(), logger=RecordingLogger())
        order: list[str] = []

        async def on_shutdown() -> None:
            order.append("closed" if timer._task is None else "still-running")

        middleware = TimerLifespan([timer], on_shutdown=on_shutdown)

        await middleware.process_startup(None, None)
        await middleware.process_shutdown(None, None)

        assert order == ["closed"]

    @pytest.mark.asyncio
    async def test_no_timers(self) -> None:
        """A middleware without timers still runs its callback."""
        calls: list[str] = []

        async def on_shutdown() -> None:
            calls.append("shutdown")

        middleware = TimerLifespan([], on_shutdown=on_shutdown)

        await middleware.process_startup(None, None)
        await middleware.process_shutdown(None, None)

        assert calls == ["shutdown"]
