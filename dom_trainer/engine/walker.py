"""
Reference price random walk.

Each step moves the price by a uniform delta in [-walk_step, +walk_step) and rounds
to display precision. Rounding every step keeps float drift from accumulating.
"""

from __future__ import annotations

import numpy as np

DEFAULT_WALK_STEP = 0.00025
DEFAULT_PRECISION = 4


class PriceWalker:
    """Bounded random walk for the reference price."""

    __slots__ = ('step', 'precision', '_rng')

    def __init__(
        self,
        step: float = DEFAULT_WALK_STEP,
        precision: int = DEFAULT_PRECISION,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.step = step
        self.precision = precision
        self._rng = rng if rng is not None else np.random.default_rng()

    def advance(self, current: float) -> float:
        """Return the next reference price. Caller persists it."""
        delta = float(self._rng.uniform(-self.step, self.step))
        nxt = round(current + delta, self.precision)
        if nxt <= 0:
            # Reflect instead of crossing zero
            nxt = round(current - delta, self.precision)
        if nxt <= 0:
            nxt = current
        return nxt


_default_walker = PriceWalker()


def advance(current: float) -> float:
    """Advance with the module default walker."""
    return _default_walker.advance(current)
