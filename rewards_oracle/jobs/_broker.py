"""Broker checks run before a queue-triggered oracle cycle.

``@dramatiq.actor`` binds each actor to whatever broker is global when the
module is imported. A :class:`~dramatiq.brokers.stub.StubBroker` keeps
messages in process memory, so cycles enqueued by an external scheduler
would never reach a worker. Actors therefore refuse to run on a stub unless
the configuration opts in with ``REWARDS_ORACLE_ALLOW_STUB_BROKER``.
"""

from __future__ import annotations

import typing as typ

import dramatiq
from dramatiq.brokers.stub import StubBroker

from rewards_oracle.logging import get_logger, log_debug

if typ.TYPE_CHECKING:
    from rewards_oracle.config import OracleConfig
    from rewards_oracle.logging import SupportsLog

logger = get_logger(__name__)


class StubBrokerNotAllowedError(RuntimeError):
    """Raised when an actor runs on a stub broker without permission."""

    @classmethod
    def for_actor(cls, actor_name: str) -> StubBrokerNotAllowedError:
        """Return the error naming the actor that refused to run."""
        return cls(
            f"{actor_name} is bound to an in-memory StubBroker; configure a "
            "real Dramatiq broker or set REWARDS_ORACLE_ALLOW_STUB_BROKER=1 "
            "for local runs"
        )


def require_broker(
    actor: dramatiq.Actor[typ.Any, typ.Any],
    config: OracleConfig,
    *,
    log: SupportsLog = logger,
) -> dramatiq.Broker:
    """Return the broker ``actor`` publishes to, rejecting a disallowed stub.

    Raises
    ------
    StubBrokerNotAllowedError
        If the actor's broker is a ``StubBroker`` and
        ``config.allow_stub_broker`` is false.

    """
    broker = actor.broker
    if isinstance(broker, StubBroker) and not config.allow_stub_broker:
        raise StubBrokerNotAllowedError.for_actor(actor.actor_name)
    log_debug(log, "Running %s on %s", actor.actor_name, type(broker).__name__)
    return broker
