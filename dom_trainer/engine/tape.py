"""
Trade tape emitter.

HOT PATH: emit() is called once per tick.

Performance strategy:
1. Bounded deque (maxlen) so trimming the oldest trade is O(1)
2. appendleft() keeps the history newest-first without re-sorting
"""

from __future__ import annotations

import itertools
import time
from collections import deque
from typing import Callable

import numpy as np

from ..types import Side, Trade

DEFAULT_HISTORY_LENGTH = 8


class TradeEmitter:
    """
    Synthesizes one trade per call and keeps a bounded recent history.

    The emitter is the only writer of its history. Readers get tuple copies.
    """

    __slots__ = (
        'jitter', 'min_volume', 'max_volume', 'precision',
        '_history', '_seq', '_rng', '_clock',
    )

    def __init__(
        self,
        jitter: float = 0.0001,
        min_volume: int = 20,
        max_volume: int = 170,
        history_length: int = DEFAULT_HISTORY_LENGTH,
        precision: int = 5,
        rng: np.random.Generator | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.jitter = jitter
        self.min_volume = min_volume
        self.max_volume = max_volume
        self.precision = precision

        # Newest at index 0
        self._history: deque[Trade] = deque(maxlen=history_length)
        self._seq = itertools.count(1)
        self._rng = rng if rng is not None else np.random.default_rng()
        self._clock = clock

    @property
    def history(self) -> tuple[Trade, ...]:
        """Recent trades, newest first."""
        return tuple(self._history)

    @property
    def history_length(self) -> int:
        return self._history.maxlen or 0

    def emit(self, reference_price: float) -> Trade:
        """
        Create one trade near the reference price and push it onto the tape.

        The oldest trade drops off once the history is full.
        """
        timestamp_ms = int(self._clock() * 1000)
        price = reference_price + float(self._rng.uniform(-self.jitter, self.jitter))
        trade = Trade(
            # Sequence suffix keeps ids unique within one millisecond
            id=f"{timestamp_ms}-{next(self._seq)}",
            price=round(price, self.precision),
            volume=int(self._rng.integers(self.min_volume, self.max_volume)),
            side=Side.BUY if self._rng.random() < 0.5 else Side.SELL,
            timestamp_ms=timestamp_ms,
        )
        self._history.appendleft(trade)
        return trade

    def clear(self) -> None:
        """Drop all trades from the tape."""
        self._history.clear()
