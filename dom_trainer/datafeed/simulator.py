"""
Synthetic market feed with async orchestration.

Handles:
1. Ownership of the mutable market state (reference price, book, clusters, tape)
2. A single periodic driver task that advances the state while active
3. Pause/resume and teardown of that driver
4. Snapshot publishing for the UI (thread-safe queue + listeners)

Concurrency notes:
- One asyncio task drives ticks; tick() is synchronous so a tick always completes
  before the next sleep starts (never re-entrant)
- Control calls (toggle, dispose) must run on the simulator's loop; other threads
  go through post_threadsafe (loop.call_soon_threadsafe, tolerant of a closed loop)
"""

from __future__ import annotations

import asyncio
import logging
import queue
import time
from typing import Callable

import numpy as np

from ..config import SimulationConfig
from ..engine.clusters import ClusterGenerator
from ..engine.orderbook import OrderBookGenerator
from ..engine.tape import TradeEmitter
from ..engine.walker import PriceWalker
from ..types import SimulationSnapshot

logger = logging.getLogger(__name__)

Listener = Callable[[SimulationSnapshot], None]


class SimulationError(Exception):
    """Base error for the market simulator."""


class SimulatorDisposedError(SimulationError):
    """Raised when a disposed simulator is used again."""


class MarketSimulator:
    """
    Owns the synthetic market state and advances it on a fixed cadence.

    Usage:
        async with MarketSimulator() as sim:
            sim.toggle()             # pause
            snap = sim.snapshot()

    or, from an owner that controls the lifetime:
        sim = MarketSimulator(config)
        task = asyncio.create_task(sim.run())
        ...
        sim.dispose()
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        rng: np.random.Generator | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config if config is not None else SimulationConfig()
        cfg = self.config
        rng = rng if rng is not None else np.random.default_rng()
        self._clock = clock

        # Core components (share one random source)
        self.walker = PriceWalker(step=cfg.walk_step, precision=cfg.price_precision, rng=rng)
        self.book = OrderBookGenerator(
            levels=cfg.book_levels,
            tick_size=cfg.tick_size,
            precision=cfg.price_precision,
            base_volume=cfg.base_volume,
            max_volume=cfg.max_volume,
            high_volume_threshold=cfg.high_volume_threshold,
            rng=rng,
        )
        self.clusters = ClusterGenerator(
            half_width=cfg.cluster_half_width,
            tick_size=cfg.tick_size,
            precision=cfg.price_precision,
            min_volume=cfg.cluster_min_volume,
            max_volume=cfg.cluster_max_volume,
            important_threshold=cfg.important_threshold,
            rng=rng,
        )
        self.tape = TradeEmitter(
            jitter=cfg.trade_jitter,
            min_volume=cfg.trade_min_volume,
            max_volume=cfg.trade_max_volume,
            history_length=cfg.history_length,
            precision=cfg.price_precision + 1,
            rng=rng,
            clock=clock,
        )

        # State
        self._reference_price: float = round(cfg.initial_price, cfg.price_precision)
        self._spread: float = cfg.spread
        self._order_book = self.book.generate(self._reference_price, self._spread)
        self._cluster_cells = self.clusters.generate(self._reference_price)
        self._tick_count: int = 0
        self._last_tick_ms: int = int(clock() * 1000)
        self._active: bool = True
        self._disposed: bool = False

        # Driver
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task | None = None
        self._stopped: asyncio.Event | None = None

        # Output queue for UI - thread-safe for cross-thread access
        self.snapshot_queue: queue.Queue[SimulationSnapshot] = queue.Queue(maxsize=5)
        self._listeners: list[Listener] = []

        self._publish(self.snapshot())

    # ── read interface ──

    @property
    def active(self) -> bool:
        return self._active

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def reference_price(self) -> float:
        return self._reference_price

    @property
    def driver_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def snapshot(self) -> SimulationSnapshot:
        """Current market state. Stable between ticks."""
        return SimulationSnapshot(
            reference_price=self._reference_price,
            spread=self._spread,
            order_book=self._order_book,
            clusters=self._cluster_cells,
            trades=self.tape.history,
            active=self._active,
            tick_count=self._tick_count,
            timestamp_ms=self._last_tick_ms,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback for every published snapshot. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ── state transitions ──

    def tick(self) -> SimulationSnapshot:
        """
        Advance the market by one step and publish the result.

        Order: price walk -> order book -> clusters -> trade.
        """
        self._check_alive()

        self._reference_price = self.walker.advance(self._reference_price)
        self._order_book = self.book.generate(self._reference_price, self._spread)
        self._cluster_cells = self.clusters.generate(self._reference_price)
        self.tape.emit(self._reference_price)

        self._tick_count += 1
        self._last_tick_ms = int(self._clock() * 1000)

        snap = self.snapshot()
        logger.debug("tick #%d price=%.4f", self._tick_count, self._reference_price)
        self._publish(snap)
        return snap

    def toggle(self) -> bool:
        """Flip Active/Paused. Returns the new active flag."""
        self._check_alive()
        if self._active:
            self.pause()
        else:
            self.resume()
        return self._active

    def pause(self) -> None:
        """Stop the driver and freeze the last snapshot. No-op for the driver if already paused."""
        self._check_alive()
        was_active = self._active
        self._active = False
        self._stop_driver()
        if was_active:
            logger.info("Simulation paused at tick #%d", self._tick_count)
            self._publish(self.snapshot())

    def resume(self) -> None:
        """Mark active and (re)start the driver if bound to a loop."""
        self._check_alive()
        was_active = self._active
        self._active = True
        if self._loop is not None:
            self._start_driver()
        if not was_active:
            logger.info("Simulation resumed at tick #%d", self._tick_count)
            self._publish(self.snapshot())

    async def run(self) -> None:
        """
        Bind to the running loop and drive ticks until dispose() is called.

        Cancelling this coroutine also stops the driver and unbinds the loop,
        so a later resume() does not schedule onto it and run() can be
        called again from a fresh loop.
        """
        self._bind()
        assert self._stopped is not None
        try:
            await self._stopped.wait()
        finally:
            self._stop_driver()
            self._loop = None
            self._stopped = None

    def dispose(self) -> None:
        """Cancel the driver and tear down. Safe to call more than once."""
        if self._disposed:
            return
        self._disposed = True
        self._stop_driver()
        if self._stopped is not None:
            self._stopped.set()
        self._listeners.clear()
        logger.info("Simulator disposed after %d ticks", self._tick_count)

    async def __aenter__(self) -> "MarketSimulator":
        self._bind()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.dispose()

    # ── internals ──

    def _check_alive(self) -> None:
        if self._disposed:
            raise SimulatorDisposedError("simulator has been disposed")

    def _bind(self) -> None:
        self._check_alive()
        loop = asyncio.get_running_loop()
        if self._loop is not None and self._loop is not loop:
            raise SimulationError("simulator is already bound to another event loop")
        self._loop = loop
        if self._stopped is None:
            self._stopped = asyncio.Event()
        if self._active:
            self._start_driver()

    def _start_driver(self) -> None:
        if self.driver_running:
            return
        assert self._loop is not None
        self._task = self._loop.create_task(self._drive())
        self._task.add_done_callback(self._on_driver_done)
        logger.info("Driver started (interval %.3fs)", self.config.interval_sec)

    def _stop_driver(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            logger.info("Driver stopped")

    async def _drive(self) -> None:
        interval = self.config.interval_sec
        while True:
            await asyncio.sleep(interval)
            self.tick()

    def _on_driver_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Driver crashed: %r", exc, exc_info=exc)

    def _publish(self, snap: SimulationSnapshot) -> None:
        # Non-blocking put: drop the oldest snapshot when the UI falls behind
        try:
            self.snapshot_queue.put_nowait(snap)
        except queue.Full:
            try:
                self.snapshot_queue.get_nowait()
            except queue.Empty:
                pass
            self.snapshot_queue.put_nowait(snap)

        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("Snapshot listener failed")


def post_threadsafe(loop: asyncio.AbstractEventLoop, callback: Callable[[], object]) -> bool:
    """
    Schedule a control call on the simulator loop from another thread.

    Returns False (and drops the call) if the loop has already closed, e.g.
    because the simulator thread crashed or finished shutting down.
    """
    name = getattr(callback, "__name__", repr(callback))
    if loop.is_closed():
        logger.warning("Simulator loop is closed, dropping %s", name)
        return False
    try:
        loop.call_soon_threadsafe(callback)
    except RuntimeError:
        # Closed between the check and the call
        logger.warning("Simulator loop is closed, dropping %s", name)
        return False
    return True
