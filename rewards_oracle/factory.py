"""Wire the oracle runtime from :class:`OracleConfig`.

Usage
-----
Build the runtime once per process and close it on shutdown::

    runtime = build_runtime(OracleConfig.from_env())
    try:
        await runtime.service.run_sync_cycle()
    finally:
        await runtime.aclose()

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from rewards_oracle.epochs import EpochLifecycleManager, LedgerStatsService
from rewards_oracle.indexer import EventIndexer, IndexedEventStore
from rewards_oracle.leaderboard import (
    ContributorNormalizer,
    HttpLeaderboardSource,
    LeaderboardFetcher,
    build_leaderboard_source,
)
from rewards_oracle.ledger import JsonRpcLedgerGateway, LedgerRPCConfig
from rewards_oracle.monitoring import MonitoringService
from rewards_oracle.periodic import PeriodicTask
from rewards_oracle.service import OracleService, OracleServiceDependencies
from rewards_oracle.sync import BatchScheduler, ContributorSyncer

if typ.TYPE_CHECKING:
    from rewards_oracle.config import OracleConfig
    from rewards_oracle.leaderboard import LeaderboardSource
    from rewards_oracle.ledger import LedgerGateway

__all__ = ["OracleRuntime", "build_gateway", "build_indexer", "build_runtime"]


class _SupportsAclose(typ.Protocol):
    async def aclose(self) -> None: ...


@dc.dataclass(slots=True)
class OracleRuntime:
    """Fully wired oracle components sharing one ledger gateway."""

    config: OracleConfig
    gateway: LedgerGateway
    service: OracleService
    monitoring: MonitoringService
    stats: LedgerStatsService
    closeables: list[_SupportsAclose] = dc.field(default_factory=list)

    def timers(self) -> tuple[PeriodicTask, PeriodicTask]:
        """Return the sync and epoch timers for this runtime."""
        return (
            PeriodicTask(
                "sync", self.config.sync_interval_s, self.service.run_sync_cycle
            ),
            PeriodicTask(
                "epoch", self.config.epoch_interval_s, self.service.run_epoch_cycle
            ),
        )

    async def aclose(self) -> None:
        """Close every owned HTTP client."""
        for closeable in self.closeables:
            await closeable.aclose()


def build_gateway(config: OracleConfig) -> JsonRpcLedgerGateway:
    """Return a JSON-RPC gateway for the configured ledger endpoint."""
    return JsonRpcLedgerGateway(
        LedgerRPCConfig(
            endpoint=config.ledger_url,
            token=config.ledger_token,
            timeout_s=config.http_timeout_s,
        )
    )


def build_runtime(
    config: OracleConfig,
    *,
    gateway: LedgerGateway | None = None,
    source: LeaderboardSource | None = None,
    monitoring: MonitoringService | None = None,
) -> OracleRuntime:
    """Assemble the oracle service and its collaborators.

    Collaborators passed in are used as-is and are not closed by the
    runtime; those built here are.
    """
    closeables: list[_SupportsAclose] = []

    if gateway is None:
        rpc_gateway = build_gateway(config)
        closeables.append(rpc_gateway)
        gateway = rpc_gateway
    if source is None and (config.leaderboard_url or config.leaderboard_file):
        built_source = build_leaderboard_source(config)
        if isinstance(built_source, HttpLeaderboardSource):
            closeables.append(built_source)
        source = built_source
    if monitoring is None:
        monitoring = MonitoringService(
            webhook_url=config.alert_webhook_url,
            timeout_s=config.http_timeout_s,
        )
        closeables.append(monitoring)

    syncer = ContributorSyncer(gateway, conversion_ratio=config.conversion_ratio)
    service = OracleService(
        OracleServiceDependencies(
            gateway=gateway,
            fetcher=LeaderboardFetcher(source, normalizer=ContributorNormalizer()),
            scheduler=BatchScheduler(syncer),
            epochs=EpochLifecycleManager(gateway),
            monitoring=monitoring,
        ),
        epoch_reward_amount=config.epoch_reward_amount,
    )
    return OracleRuntime(
        config=config,
        gateway=gateway,
        service=service,
        monitoring=monitoring,
        stats=LedgerStatsService(gateway),
        closeables=closeables,
    )


def build_indexer(config: OracleConfig, gateway: JsonRpcLedgerGateway) -> EventIndexer:
    """Return an indexer persisting to ``config.index_path``."""
    return EventIndexer(IndexedEventStore(config.index_path), gateway)
