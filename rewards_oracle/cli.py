"""Command-line entry point for the rewards oracle."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import random
import signal
import sys
import typing as typ

import msgspec

from rewards_oracle.config import ConfigError, OracleConfig
from rewards_oracle.factory import build_gateway, build_indexer, build_runtime
from rewards_oracle.leaderboard import LeaderboardError, generate_mock_contributors
from rewards_oracle.ledger import LedgerError
from rewards_oracle.logging import (
    configure_logging,
    get_logger,
    log_exception,
    log_warning,
)

if typ.TYPE_CHECKING:
    from rewards_oracle.factory import OracleRuntime
    from rewards_oracle.leaderboard import ContributorRecord

logger = get_logger(__name__)

_FATAL_CYCLE_ERRORS = (LeaderboardError, LedgerError)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rewards-oracle",
        description="Sync leaderboard XP to the rewards ledger and rotate epochs.",
    )
    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("sync", help="Run one fetch-and-sync cycle")
    commands.add_parser("epoch", help="Run one epoch finalize-and-create cycle")
    commands.add_parser("run", help="Run both cycles on their timers")
    commands.add_parser("serve", help="Serve /health and /stats with the timers")
    commands.add_parser("index", help="Follow ledger sync events until signalled")

    backfill = commands.add_parser("backfill", help="Replay historical sync events")
    backfill.add_argument("--start-slot", type=int, default=None)

    stats = commands.add_parser("stats", help="Show ledger statistics")
    stats_kinds = stats.add_subparsers(dest="kind", required=True)
    epoch_stats = stats_kinds.add_parser("epoch", help="Show one epoch")
    epoch_stats.add_argument("epoch_number", type=int)
    contributor_stats = stats_kinds.add_parser("contributor", help="Show a wallet")
    contributor_stats.add_argument("wallet")

    mock = commands.add_parser("mock", help="Print a mock leaderboard payload")
    mock.add_argument("--count", type=int, default=10)
    mock.add_argument("--seed", type=int, default=None)
    return parser


def _mock_payload(records: list[ContributorRecord]) -> dict[str, object]:
    return {
        "contributors": [
            {
                "username": record.username,
                "wallet": record.wallet_address,
                "score": record.total_xp,
                **{
                    f"{group}Xp": {cat.name: cat.amount for cat in categories}
                    for group, categories in record.categories.groups()
                },
            }
            for record in records
        ]
    }


def _print_json(value: object) -> None:
    encoded = msgspec.json.encode(msgspec.to_builtins(value))
    print(msgspec.json.format(encoded).decode())


def _install_stop_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        # add_signal_handler is unavailable on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signum, stop.set)


async def _run_sync(runtime: OracleRuntime) -> int:
    result = await runtime.service.run_sync_cycle()
    print(
        f"synced {result.successful}/{result.total} contributors "
        f"(xp={result.total_xp_synced}, credit={result.total_credit_earned})"
    )
    for error in result.errors:
        print(f"  - {error.username}: {error.message}")
    return 0


async def _run_epoch(runtime: OracleRuntime) -> int:
    rotation = await runtime.service.run_epoch_cycle()
    if rotation.rotated:
        print(f"epoch {rotation.created_epoch} created ({rotation.transaction_id})")
    else:
        print(f"no epoch created: {rotation.skipped_reason}")
    return 0


async def _run_timers(runtime: OracleRuntime) -> int:
    stop = asyncio.Event()
    _install_stop_handlers(stop)
    timers = runtime.timers()
    for timer in timers:
        timer.start()
    await stop.wait()
    for timer in timers:
        await timer.stop()
    return 0


async def _run_stats(runtime: OracleRuntime, args: argparse.Namespace) -> int:
    if args.kind == "epoch":
        stats: object = await runtime.stats.epoch_stats(args.epoch_number)
        subject = f"epoch {args.epoch_number}"
    else:
        stats = await runtime.stats.contributor_stats(args.wallet)
        subject = f"contributor {args.wallet}"
    if stats is None:
        print(f"{subject} not found")
        return 1
    _print_json(stats)
    return 0


async def _run_with_runtime(config: OracleConfig, args: argparse.Namespace) -> int:
    runtime = build_runtime(config)
    try:
        match args.command:
            case "sync":
                return await _run_sync(runtime)
            case "epoch":
                return await _run_epoch(runtime)
            case "run":
                return await _run_timers(runtime)
            case _:
                return await _run_stats(runtime, args)
    finally:
        await runtime.aclose()


async def _run_indexer(config: OracleConfig, args: argparse.Namespace) -> int:
    gateway = build_gateway(config)
    indexer = build_indexer(config, gateway)
    try:
        if args.command == "backfill":
            processed = await indexer.backfill(args.start_slot)
            print(
                f"backfilled {processed} events "
                f"(last slot {indexer.last_processed_slot})"
            )
        else:
            stop = asyncio.Event()
            _install_stop_handlers(stop)
            await indexer.run(stop)
    finally:
        await gateway.aclose()
    return 0


async def _dispatch(config: OracleConfig, args: argparse.Namespace) -> int:
    try:
        if args.command in {"index", "backfill"}:
            return await _run_indexer(config, args)
        return await _run_with_runtime(config, args)
    except _FATAL_CYCLE_ERRORS as exc:
        log_exception(logger, f"{args.command} failed: {exc}", exc)
        return 1


def main(argv: list[str] | None = None) -> int:
    """Run one oracle command.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code: 0 on success, 1 when configuration is invalid, a cycle
        fails, or a queried account does not exist.

    """
    args = _build_parser().parse_args(argv)

    if args.command == "mock":
        rng = random.Random(args.seed)  # noqa: S311
        _print_json(_mock_payload(generate_mock_contributors(args.count, rng=rng)))
        return 0

    try:
        config = OracleConfig.from_env()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    normalized_level, invalid_level = configure_logging(config.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid REWARDS_ORACLE_LOG_LEVEL %r, falling back to %s",
            config.log_level,
            normalized_level,
        )

    if args.command == "serve":
        from rewards_oracle.runtime import main as serve

        serve(config)
        return 0

    return asyncio.run(_dispatch(config, args))


if __name__ == "__main__":
    raise SystemExit(main())
