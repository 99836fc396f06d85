"""Command line entry point.

Subcommands::

    regionsync tick                 run one tick and print the outcome log
    regionsync run                  tick every REGIONSYNC_TICK_INTERVAL seconds
    regionsync serve                run ticks plus the admin HTTP surface
    regionsync state [REG]          show stored state
    regionsync clear-state [REG]    delete stored state
    regionsync fleet                show fleet configuration
    regionsync audit [--repair]     compare stored state with Gateway lists
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import signal
import sys
from collections.abc import Sequence
from typing import Any

from aiohttp import web

from regionsync.config import (
    DEFAULT_FLEET,
    DEFAULT_REGION_LISTS,
    RegionSyncConfig,
    load_fleet,
    load_region_lists,
)
from regionsync.exceptions import RegionSyncError
from regionsync.tracker import FleetTracker
from regionsync.web import create_app

_logger = logging.getLogger("regionsync")


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, default=str))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="regionsync", description="Aircraft region -> Gateway list tracker")
    parser.add_argument("--fleet", help="JSON file with the fleet (default: built-in fleet)")
    parser.add_argument("--lists", help="JSON file with the region -> Gateway list table")
    parser.add_argument("--state-path", help="JSON state file (overrides REGIONSYNC_STATE_PATH)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("tick", help="Run one tick")
    run = sub.add_parser("run", help="Run ticks periodically")
    run.add_argument("--interval", type=float, help="Seconds between ticks")
    serve = sub.add_parser("serve", help="Run ticks and the admin HTTP surface")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8787)
    serve.add_argument("--interval", type=float, help="Seconds between ticks")
    state = sub.add_parser("state", help="Show stored state")
    state.add_argument("registration", nargs="?")
    clear = sub.add_parser("clear-state", help="Delete stored state")
    clear.add_argument("registration", nargs="?")
    sub.add_parser("fleet", help="Show fleet configuration")
    audit = sub.add_parser("audit", help="Compare stored state with Gateway list contents")
    audit.add_argument("--repair", action="store_true", help="Issue partial updates to fix drift")
    return parser


def _install_stop_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)


async def _serve(tracker: FleetTracker, host: str, port: int, interval: float | None) -> None:
    runner = web.AppRunner(create_app(tracker))
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    _logger.info("Admin surface listening on http://%s:%d", host, port)

    stop_event = asyncio.Event()
    _install_stop_handlers(stop_event)
    try:
        await tracker.run_forever(interval=interval, stop_event=stop_event)
    finally:
        await runner.cleanup()


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.state_path:
        overrides["state_path"] = args.state_path
    config = RegionSyncConfig.from_env(**overrides)
    fleet = load_fleet(args.fleet) if args.fleet else DEFAULT_FLEET
    region_lists = load_region_lists(args.lists) if args.lists else DEFAULT_REGION_LISTS

    async with FleetTracker(config, fleet=fleet, region_lists=region_lists) as tracker:
        if args.command == "tick":
            outcomes = await tracker.run_tick(cron_label="manual")
            _print_json([o.model_dump(mode="json") for o in outcomes])
            return 1 if any(o.error for o in outcomes) else 0
        if args.command == "run":
            stop_event = asyncio.Event()
            _install_stop_handlers(stop_event)
            await tracker.run_forever(interval=args.interval, stop_event=stop_event)
            return 0
        if args.command == "serve":
            await _serve(tracker, args.host, args.port, args.interval)
            return 0
        if args.command == "state":
            if args.registration:
                state = await tracker.get_state(args.registration)
                _print_json(state.model_dump(mode="json") if state else {"message": "No state found"})
            else:
                _print_json([s.model_dump(mode="json") for s in await tracker.get_all_states()])
            return 0
        if args.command == "clear-state":
            if args.registration:
                await tracker.clear_state(args.registration)
                _print_json({"cleared": args.registration})
            else:
                await tracker.clear_all_states()
                _print_json({"cleared": "all"})
            return 0
        if args.command == "fleet":
            _print_json(tracker.fleet.to_list())
            return 0
        if args.command == "audit":
            report = await tracker.audit_memberships(repair=args.repair)
            _print_json(report.model_dump(mode="json"))
            return 0 if report.is_consistent else 1
    return 2


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    try:
        return asyncio.run(_run(args))
    except RegionSyncError as exc:
        _logger.error("%s", exc)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
