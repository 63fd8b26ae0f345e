"""
Synthetic footprint clusters.

A fixed band of 2K+1 price cells centred on the reference price, each with an
independent buy/sell volume pair and the signed delta between them.

These cells are NOT aggregated from the trade tape: every tick draws a fresh
snapshot.
"""

from __future__ import annotations

import numpy as np

from ..types import ClusterCell

DEFAULT_HALF_WIDTH = 10
DEFAULT_IMPORTANT_THRESHOLD = 300


class ClusterGenerator:
    """
    Footprint snapshot generator.

    Thread-safety: NOT thread-safe. Designed for single-threaded async use.
    """

    __slots__ = (
        'half_width', 'tick_size', 'precision',
        'min_volume', 'max_volume', 'important_threshold',
        '_rng',
    )

    def __init__(
        self,
        half_width: int = DEFAULT_HALF_WIDTH,
        tick_size: float = 0.0001,
        precision: int = 4,
        min_volume: int = 50,
        max_volume: int = 550,
        important_threshold: int = DEFAULT_IMPORTANT_THRESHOLD,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.half_width = half_width
        self.tick_size = tick_size
        self.precision = precision
        self.min_volume = min_volume
        self.max_volume = max_volume
        self.important_threshold = important_threshold
        self._rng = rng if rng is not None else np.random.default_rng()

    @property
    def size(self) -> int:
        return 2 * self.half_width + 1

    def generate(self, reference_price: float) -> tuple[ClusterCell, ...]:
        """
        Build cells for offsets -K..K (ascending price).

        Returns 2K+1 ClusterCell with delta = buy - sell.
        """
        reference_price = round(reference_price, self.precision)
        buys = self._rng.integers(self.min_volume, self.max_volume, size=self.size)
        sells = self._rng.integers(self.min_volume, self.max_volume, size=self.size)

        cells = []
        for idx, offset in enumerate(range(-self.half_width, self.half_width + 1)):
            buy = int(buys[idx])
            sell = int(sells[idx])
            delta = buy - sell
            cells.append(ClusterCell(
                price=round(reference_price + offset * self.tick_size, self.precision),
                buy_volume=buy,
                sell_volume=sell,
                delta=delta,
                is_important=abs(delta) > self.important_threshold,
            ))

        assert len(cells) == self.size
        return tuple(cells)
