"""
Synthetic two-sided order book ladder.

HOT PATH: generate() is called once per tick and builds both sides from scratch.

Performance strategy:
1. Draw all volumes for a side in one vectorized numpy call
2. Build immutable NamedTuple levels once, never mutate them afterwards
3. No state carried between ticks (each call is an independent draw)

Levels are not an evolving queue: every tick is a fresh, independent draw
conditioned only on the reference price and spread.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

from ..types import OrderBookLevel, OrderBookSnapshot

DEFAULT_LEVELS = 20
DEFAULT_TICK_SIZE = 0.0001


class OrderBookGenerator:
    """
    Builds a fresh ask/bid ladder around the reference price.

    Thread-safety: NOT thread-safe (shares the simulator's random generator).
    """

    __slots__ = (
        'levels', 'tick_size', 'precision',
        'base_volume', 'max_volume', 'high_volume_threshold',
        '_rng',
    )

    def __init__(
        self,
        levels: int = DEFAULT_LEVELS,
        tick_size: float = DEFAULT_TICK_SIZE,
        precision: int = 4,
        base_volume: int = 1000,
        max_volume: int = 10000,
        high_volume_threshold: int = 5000,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.levels = levels
        self.tick_size = tick_size
        self.precision = precision
        self.base_volume = base_volume
        self.max_volume = max_volume
        self.high_volume_threshold = high_volume_threshold
        self._rng = rng if rng is not None else np.random.default_rng()

    def _draw_volumes(self) -> NDArray[np.int64]:
        """Independent volumes in [base_volume, base_volume + max_volume)."""
        return self._rng.integers(
            self.base_volume, self.base_volume + self.max_volume, size=self.levels
        )

    def _make_level(self, price: float, volume: int) -> OrderBookLevel:
        # base_volume pushes raw intensity past 100 for the biggest draws
        intensity = min(100.0, volume / self.max_volume * 100)
        return OrderBookLevel(
            price=price,
            volume=volume,
            is_high_volume=volume > self.high_volume_threshold,
            intensity=intensity,
        )

    def generate(self, reference_price: float, spread: float) -> OrderBookSnapshot:
        """
        Build both sides of the ladder.

        Ask i = reference + spread + i * tick_size (ascending, index 0 is best).
        Bid i = reference - i * tick_size (descending, index 0 is best).

        The reference is snapped to display precision first. If the rounded
        best ask does not clear the best bid (zero or sub-tick spread), it is
        widened to one tick.
        """
        if spread < 0:
            raise ValueError(f"spread must be non-negative, got {spread}")

        reference_price = round(reference_price, self.precision)
        best_ask = round(reference_price + spread, self.precision)
        if best_ask <= reference_price:
            best_ask = round(reference_price + self.tick_size, self.precision)

        ask_volumes = self._draw_volumes()
        bid_volumes = self._draw_volumes()

        asks = tuple(
            self._make_level(
                round(best_ask + i * self.tick_size, self.precision),
                int(ask_volumes[i]),
            )
            for i in range(self.levels)
        )
        bids = tuple(
            self._make_level(
                round(reference_price - i * self.tick_size, self.precision),
                int(bid_volumes[i]),
            )
            for i in range(self.levels)
        )

        assert len(asks) == len(bids) == self.levels
        return OrderBookSnapshot(asks=asks, bids=bids)
