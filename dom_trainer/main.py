#!/usr/bin/env python3
"""
DOM Trainer - educational Depth of Market simulator.

Usage:
    python -m dom_trainer.main --interval 1.5 --price 0.5818

    Headless (JSON lines on stdout):
    python -m dom_trainer.main --headless --ticks 20 --interval 0.1

Controls:
    space - Start/Pause simulation
    n     - Single step while paused
    1-6   - Explain ask / bid / spread / liquidity / clusters / tape
    q     - Quit
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import numpy as np
import orjson

from .config import SimulationConfig

logger = logging.getLogger(__name__)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by the TUI and the GUI entry points."""
    parser.add_argument(
        "--config",
        default=None,
        help="YAML file with simulation settings (default: built-in settings)"
    )

    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between ticks (default: 1.5)"
    )

    parser.add_argument(
        "--price",
        type=float,
        default=None,
        help="Starting reference price (default: 0.5818)"
    )

    parser.add_argument(
        "--spread",
        type=float,
        default=None,
        help="Gap between reference price and best ask (default: 0.0001)"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for a reproducible session"
    )

    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: WARNING)"
    )

    parser.add_argument(
        "--log-file",
        default=None,
        help="Write logs to this file instead of stderr"
    )


def build_config(args: argparse.Namespace) -> SimulationConfig:
    """Load the YAML config (if any) and apply command-line overrides."""
    config = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    return config.replace(
        interval_sec=args.interval,
        initial_price=args.price,
        spread=args.spread,
    )


def setup_logging(level: str, log_file: str | None) -> None:
    handler: logging.Handler = (
        logging.FileHandler(log_file, encoding="utf-8") if log_file
        else logging.StreamHandler(sys.stderr)
    )
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[handler],
    )


async def run_headless(simulator, ticks: int, out=None) -> None:
    """Write the initial snapshot, then one JSON line per tick until `ticks` is reached."""
    out = out if out is not None else sys.stdout.buffer
    done = asyncio.Event()

    def write(snapshot) -> None:
        out.write(orjson.dumps(snapshot.to_dict()) + b"\n")
        out.flush()
        if snapshot.tick_count >= ticks:
            done.set()

    write(simulator.snapshot())
    simulator.subscribe(write)
    async with simulator:
        await done.wait()
    logger.info("Headless run finished after %d ticks", simulator.snapshot().tick_count)


async def main(config: SimulationConfig, seed: int | None = None, headless_ticks: int | None = None) -> None:
    """Main entry point - runs the simulator and UI concurrently."""

    # Import here to avoid slow startup for --help
    from .datafeed.simulator import MarketSimulator

    simulator = MarketSimulator(config, rng=np.random.default_rng(seed))

    if headless_ticks is not None:
        await run_headless(simulator, headless_ticks)
        return

    from .ui.dom_view import run_ui

    print("Starting DOM Trainer...")
    print(f"  Price: {config.initial_price}")
    print(f"  Interval: {config.interval_sec}s")
    print()

    feed_task = asyncio.create_task(simulator.run())

    try:
        # Run UI (blocks until quit)
        await run_ui(simulator)
    finally:
        # Cleanup
        simulator.dispose()
        await feed_task


def cli() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="DOM Trainer - synthetic order book, clusters and tape for learning",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m dom_trainer.main
    python -m dom_trainer.main --interval 0.5 --seed 42
    python -m dom_trainer.main --config trainer.yaml
    python -m dom_trainer.main --headless --ticks 10 --interval 0.1
        """
    )

    add_common_arguments(parser)

    parser.add_argument(
        "--headless",
        action="store_true",
        help="No UI: print snapshots as JSON lines"
    )

    parser.add_argument(
        "--ticks",
        type=int,
        default=10,
        help="Number of ticks to print in headless mode (default: 10)"
    )

    args = parser.parse_args()

    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(str(e))

    setup_logging(args.log_level, args.log_file)

    # Run
    try:
        asyncio.run(main(config, seed=args.seed, headless_ticks=args.ticks if args.headless else None))
    except KeyboardInterrupt:
        print("\nShutdown requested.")
        sys.exit(0)


if __name__ == "__main__":
    cli()
