"""Command line entry point for the warehouse fleet controller."""

from __future__ import annotations

import argparse
import asyncio
from typing import Optional, Sequence

import structlog
import uvicorn

from warehouse_fleet.enterprise.config.settings import AppSettings, get_settings
from warehouse_fleet.observability import bind_global_context, configure_logging, configure_tracer, flush_traces
from warehouse_fleet.persistence import InMemoryEntityStore
from warehouse_fleet.services import FleetController, build_overview

logger = structlog.get_logger(__name__)


async def run_headless(settings: AppSettings, duration_s: float) -> None:
    """Run the fleet against a seeded in-memory store for ``duration_s`` seconds."""

    store = InMemoryEntityStore.seeded(settings.fleet)
    controller = FleetController(store, settings)
    await controller.start()
    try:
        await asyncio.sleep(duration_s)
    finally:
        await controller.pause()
        await controller.shutdown()

    overview = await build_overview(store, controller.state)
    logger.info(
        "simulation_finished",
        duration_s=duration_s,
        robots=overview.robots,
        packages=overview.packages,
        bins=overview.bins,
        active_robots=overview.active_robots,
        robot_health=overview.robot_health,
    )


def _simulation_settings(seed: Optional[int], tick_interval: Optional[float]) -> AppSettings:
    settings = get_settings()
    update = {}
    if seed is not None:
        update["simulation"] = settings.simulation.model_copy(update={"seed": seed})
    if tick_interval is not None:
        update["timing"] = settings.timing.model_copy(update={"tick_interval_s": tick_interval})
    return settings.model_copy(update=update) if update else settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Warehouse fleet simulation controller.")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the REST API.")
    serve.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve.add_argument("--port", type=int, default=8000, help="Port to bind.")

    simulate = commands.add_parser("simulate", help="Run the fleet headless and log a summary.")
    simulate.add_argument("--duration", type=float, default=30.0, help="Seconds to run.")
    simulate.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs.")
    simulate.add_argument("--tick-interval", type=float, default=None, help="Override the tick period in seconds.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.logging)

    if args.command == "serve":
        uvicorn.run("warehouse_fleet.server.app:app", host=args.host, port=args.port)
        return

    configure_tracer("warehouse-fleet-cli", settings.telemetry, settings.environment)
    bind_global_context(service="warehouse-fleet-cli", environment=settings.environment)
    try:
        asyncio.run(run_headless(_simulation_settings(args.seed, args.tick_interval), args.duration))
    finally:
        flush_traces()


if __name__ == "__main__":
    main()
