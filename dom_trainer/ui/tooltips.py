"""
Teaching tooltips and area highlighting.

UI-only state: which explanation is open and which screen area is pulsing.
Nothing here reads from or writes to the simulator beyond the values the views
already render.
"""

from __future__ import annotations

import time
from typing import Callable, NamedTuple

DEFAULT_HIGHLIGHT_SEC = 3.0


class Tooltip(NamedTuple):
    title: str
    description: str
    target: str  # Screen area to highlight


TOOLTIPS: dict[str, Tooltip] = {
    'ask': Tooltip(
        'Ask (sellers)',
        'Resting sell orders. The higher the row, the more the seller wants for it.',
        'ask',
    ),
    'bid': Tooltip(
        'Bid (buyers)',
        'Resting buy orders. The lower the row, the less the buyer is willing to pay.',
        'bid',
    ),
    'spread': Tooltip(
        'Spread',
        'Gap between the best ask and the best bid. A tight spread means a liquid instrument.',
        'spread',
    ),
    'liquidity': Tooltip(
        'Density (large volume)',
        'Highlighted rows hold unusually large resting volume, the so-called walls.',
        'liquidity',
    ),
    'clusters': Tooltip(
        'Clusters (footprint)',
        'Traded volume per price. Green delta = buyers dominated, red delta = sellers.',
        'clusters',
    ),
    'tape': Tooltip(
        'Time & sales (tape)',
        'Individual trades, newest on top. Green = aggressive buy, red = aggressive sell.',
        'tape',
    ),
}

# Keyboard order used by both UIs (keys 1-6)
TOOLTIP_KEYS: tuple[str, ...] = tuple(TOOLTIPS)


class TooltipCoordinator:
    """Active tooltip + timed highlight."""

    __slots__ = ('highlight_sec', '_clock', '_active', '_area', '_area_until')

    def __init__(
        self,
        highlight_sec: float = DEFAULT_HIGHLIGHT_SEC,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.highlight_sec = highlight_sec
        self._clock = clock
        self._active: str | None = None
        self._area: str | None = None
        self._area_until: float = 0.0

    def toggle(self, key: str) -> str | None:
        """
        Open the tooltip for key, or close it if it is already open.

        Every click restarts the highlight of the tooltip's target area.
        Returns the active key afterwards.
        """
        tooltip = TOOLTIPS[key]
        self._active = None if self._active == key else key
        self._area = tooltip.target
        self._area_until = self._clock() + self.highlight_sec
        return self._active

    def clear(self) -> None:
        self._active = None
        self._area = None

    @property
    def active_key(self) -> str | None:
        return self._active

    @property
    def active_tooltip(self) -> Tooltip | None:
        return TOOLTIPS[self._active] if self._active is not None else None

    @property
    def highlighted_area(self) -> str | None:
        if self._area is not None and self._clock() >= self._area_until:
            self._area = None
        return self._area

    def is_highlighted(self, area: str) -> bool:
        return self.highlighted_area == area


def cell_shade(intensity: float, is_high_volume: bool) -> str:
    """Shade bucket for an order book row: wall, strong, medium or weak."""
    if is_high_volume:
        return "wall"
    if intensity > 70:
        return "strong"
    if intensity > 40:
        return "medium"
    return "weak"
