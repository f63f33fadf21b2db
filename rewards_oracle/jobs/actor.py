"""Dramatiq actors for queue-triggered oracle cycles.

Deployments that drive cycles from an external scheduler enqueue these
actors instead of running the in-process timers.

Usage
-----
Queue one sync cycle and one epoch rotation:

>>> sync_leaderboard_job.send()
>>> rotate_epoch_job.send()

"""

from __future__ import annotations

import asyncio
import typing as typ

import dramatiq
import msgspec

from rewards_oracle.config import OracleConfig
from rewards_oracle.factory import build_runtime
from rewards_oracle.jobs._broker import require_broker

if typ.TYPE_CHECKING:
    from rewards_oracle.factory import OracleRuntime

T = typ.TypeVar("T")


def _run_actor_async(
    actor: dramatiq.Actor[typ.Any, typ.Any],
    async_fn: typ.Callable[[OracleRuntime], typ.Awaitable[T]],
) -> T:
    """Execute common async scaffolding for Dramatiq actors.

    Each invocation builds a fresh runtime on its own event loop and closes
    its HTTP clients before returning.

    Parameters
    ----------
    actor
        The running actor; its broker must be allowed by the configuration.
    async_fn
        Async function to execute with the wired runtime.

    Returns
    -------
    T
        The result of async_fn.

    """
    config = OracleConfig.from_env()
    require_broker(actor, config)

    async def run() -> T:
        runtime = build_runtime(config)
        try:
            return await async_fn(runtime)
        finally:
            await runtime.aclose()

    return asyncio.run(run())


@dramatiq.actor
def sync_leaderboard_job() -> dict[str, typ.Any]:
    """Dramatiq actor running one fetch-and-sync cycle.

    Returns
    -------
    dict[str, Any]
        The cycle's ``BatchResult`` as plain JSON-compatible data.

    """

    async def execute(runtime: OracleRuntime) -> dict[str, typ.Any]:
        result = await runtime.service.run_sync_cycle()
        return msgspec.to_builtins(result)

    return _run_actor_async(sync_leaderboard_job, execute)


@dramatiq.actor
def rotate_epoch_job() -> dict[str, typ.Any]:
    """Dramatiq actor running one epoch finalize-and-create cycle.

    Returns
    -------
    dict[str, Any]
        The ``EpochRotationResult`` as plain JSON-compatible data.

    """

    async def execute(runtime: OracleRuntime) -> dict[str, typ.Any]:
        rotation = await runtime.service.run_epoch_cycle()
        return msgspec.to_builtins(rotation)

    return _run_actor_async(rotate_epoch_job, execute)
