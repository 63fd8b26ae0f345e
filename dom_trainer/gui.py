#!/usr/bin/env python3
"""
DOM Trainer GUI - Standalone window version.

Usage:
    python -m dom_trainer.gui --interval 1.5 --seed 42
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import threading

import numpy as np

from .datafeed.simulator import post_threadsafe
from .main import add_common_arguments, build_config, setup_logging

logger = logging.getLogger(__name__)


def run_async_feed(simulator, loop: asyncio.AbstractEventLoop) -> None:
    """Run the simulator loop in a separate thread."""
    logger.info("Starting simulator thread")
    asyncio.set_event_loop(loop)
    try:
        loop.run_until_complete(simulator.run())
    except Exception:
        logger.exception("Simulator thread crashed")
    finally:
        loop.close()


def main(config, seed: int | None = None) -> None:
    """Main entry point - runs the simulator in background, GUI in main thread."""

    from .datafeed.simulator import MarketSimulator
    from .ui.dom_window import run_gui

    print("Starting DOM Trainer GUI...")
    print(f"  Price: {config.initial_price}")
    print(f"  Interval: {config.interval_sec}s")
    print()

    simulator = MarketSimulator(config, rng=np.random.default_rng(seed))

    # Event loop owned by the simulator thread
    loop = asyncio.new_event_loop()

    feed_thread = threading.Thread(
        target=run_async_feed,
        args=(simulator, loop),
        daemon=True
    )
    feed_thread.start()

    # Run GUI in main thread (required by Qt)
    try:
        run_gui(simulator, loop)
    finally:
        post_threadsafe(loop, simulator.dispose)
        feed_thread.join(timeout=2.0)


def cli() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="DOM Trainer GUI - standalone window",
    )

    add_common_arguments(parser)

    args = parser.parse_args()

    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(str(e))

    setup_logging(args.log_level, args.log_file)

    try:
        main(config, seed=args.seed)
    except KeyboardInterrupt:
        print("\nShutdown requested.")
        sys.exit(0)


if __name__ == "__main__":
    cli()
