"""Rewards oracle runtime entrypoint for container deployments.

This module provides the ASGI application factory served by Granian. The
app exposes ``/health``, ``/ready`` and ``/stats``, and its lifespan runs the
sync and epoch timers.

Configuration is driven by the ``REWARDS_ORACLE_*`` environment variables
read by :class:`~rewards_oracle.config.OracleConfig`; the server itself
uses:

- ``REWARDS_ORACLE_HOST``: Bind address (default ``0.0.0.0``)
- ``REWARDS_ORACLE_PORT``: Listen port (default ``8080``)
- ``REWARDS_ORACLE_LOG_LEVEL``: Log level (default ``INFO``)

Run the service directly with ``python -m rewards_oracle.runtime``.
"""

from __future__ import annotations

import typing as typ

from rewards_oracle.config import OracleConfig
from rewards_oracle.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _validate_port(port: int) -> int:
    """Validate a port number.

    Raises
    ------
    SystemExit
        If port is outside 1-65535.

    """
    if not (_MIN_PORT <= port <= _MAX_PORT):
        # Use error() not exception() - validation failures need no traceback
        log_error(
            logger,
            "Invalid REWARDS_ORACLE_PORT value: %d (must be %d-%d)",
            port,
            _MIN_PORT,
            _MAX_PORT,
        )
        raise SystemExit(1)
    return port


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application with the full oracle runtime.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    from rewards_oracle.api.app import AppDependencies
    from rewards_oracle.api.app import create_app as _create_api_app
    from rewards_oracle.factory import build_runtime

    runtime = build_runtime(OracleConfig.from_env())
    return _create_api_app(AppDependencies.from_runtime(runtime))


def main(config: OracleConfig | None = None) -> None:
    """Start the rewards oracle runtime server using Granian."""
    from granian import Granian
    from granian.constants import Interfaces

    config = config or OracleConfig.from_env()
    port = _validate_port(config.port)

    # Configure logging - validate log level and warn on invalid values
    normalized_level, invalid_level = configure_logging(config.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid REWARDS_ORACLE_LOG_LEVEL %r, falling back to %s",
            config.log_level,
            normalized_level,
        )

    log_info(
        logger,
        "Starting rewards oracle runtime on %s:%d (log_level=%s)",
        config.host,
        port,
        normalized_level,
    )

    server = Granian(
        "rewards_oracle.runtime:create_app",
        address=config.host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
