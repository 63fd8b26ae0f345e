#!/usr/bin/env python3
"""
Micro-benchmark for DOM Trainer performance.

Tests:
1. Price walk throughput
2. Order book ladder generation speed
3. Cluster generation speed
4. Full tick (walk + book + clusters + trade) speed

Usage:
    python -m dom_trainer.benchmark
"""

from __future__ import annotations

import time
from statistics import mean, stdev

import numpy as np

from .config import SimulationConfig
from .datafeed.simulator import MarketSimulator
from .engine.clusters import ClusterGenerator
from .engine.orderbook import OrderBookGenerator
from .engine.walker import PriceWalker


def benchmark_price_walk(iterations: int = 100000) -> None:
    """Benchmark reference price walk throughput."""
    print("\n=== Price Walk Benchmark ===")

    walker = PriceWalker(rng=np.random.default_rng(0))
    price = 0.5818

    start = time.perf_counter()
    for _ in range(iterations):
        price = walker.advance(price)
    elapsed = time.perf_counter() - start

    rate = iterations / elapsed
    print(f"  Steps: {iterations:,}")
    print(f"  Time: {elapsed*1000:.1f}ms")
    print(f"  Rate: {rate:,.0f} steps/sec")
    print(f"  Final price: {price:.4f}")


def benchmark_orderbook(iterations: int = 5000) -> None:
    """Benchmark ladder generation."""
    print("\n=== Order Book Generation Benchmark ===")

    book = OrderBookGenerator(rng=np.random.default_rng(0))

    # Warm up
    for _ in range(10):
        book.generate(0.5818, 0.0001)

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        book.generate(0.5818, 0.0001)
        times.append(time.perf_counter() - start)

    avg_time = mean(times) * 1000
    std_time = stdev(times) * 1000

    print(f"  Iterations: {iterations}")
    print(f"  Avg time: {avg_time:.3f}ms")
    print(f"  Std dev: {std_time:.3f}ms")
    print(f"  Rate: {1000/avg_time:,.0f} calls/sec")


def benchmark_clusters(iterations: int = 5000) -> None:
    """Benchmark footprint cluster generation."""
    print("\n=== Cluster Generation Benchmark ===")

    clusters = ClusterGenerator(rng=np.random.default_rng(0))

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        clusters.generate(0.5818)
        times.append(time.perf_counter() - start)

    avg_time = mean(times) * 1000
    std_time = stdev(times) * 1000

    print(f"  Iterations: {iterations}")
    print(f"  Avg time: {avg_time:.3f}ms")
    print(f"  Std dev: {std_time:.3f}ms")
    print(f"  Rate: {1000/avg_time:,.0f} calls/sec")


def benchmark_full_tick(iterations: int = 2000) -> None:
    """Benchmark a complete simulator tick (what the UI waits for)."""
    print("\n=== Full Tick Benchmark ===")

    simulator = MarketSimulator(SimulationConfig(), rng=np.random.default_rng(0))

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        simulator.tick()
        times.append(time.perf_counter() - start)
    simulator.dispose()

    avg_time = mean(times) * 1000
    std_time = stdev(times) * 1000

    print(f"  Iterations: {iterations}")
    print(f"  Avg time: {avg_time:.3f}ms")
    print(f"  Std dev: {std_time:.3f}ms")
    print(f"  Max ticks/sec possible: {1000/avg_time:,.0f}")


def main() -> None:
    """Run all benchmarks."""
    print("=" * 60)
    print("DOM Trainer Performance Benchmark")
    print("=" * 60)

    benchmark_price_walk()
    benchmark_orderbook()
    benchmark_clusters()
    benchmark_full_tick()

    print("\n" + "=" * 60)
    print("Benchmark complete.")
    print("=" * 60)


if __name__ == "__main__":
    main()
