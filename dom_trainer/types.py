"""
Data types for DOM Trainer.

Performance notes:
- Using NamedTuple for immutable, memory-efficient structures
- Snapshots are shared between the simulator and UI threads, so nothing here is mutable
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class Side(str, Enum):
    """Aggressor side of a synthetic trade."""
    BUY = "buy"
    SELL = "sell"


class OrderBookLevel(NamedTuple):
    """Single synthetic order book level."""
    price: float
    volume: int
    is_high_volume: bool  # volume > high volume threshold ("wall")
    intensity: float      # 0-100, used for visual weighting only


class OrderBookSnapshot(NamedTuple):
    """
    Two-sided ladder.

    asks[0] is the best (lowest) ask, bids[0] is the best (highest) bid.
    """
    asks: tuple[OrderBookLevel, ...]
    bids: tuple[OrderBookLevel, ...]

    @property
    def best_ask(self) -> float:
        return self.asks[0].price if self.asks else 0.0

    @property
    def best_bid(self) -> float:
        return self.bids[0].price if self.bids else 0.0

    @property
    def spread(self) -> float:
        """Displayed spread band between best ask and best bid."""
        if not self.asks or not self.bids:
            return 0.0
        return self.best_ask - self.best_bid


class ClusterCell(NamedTuple):
    """One footprint cell: buy/sell volume pair at a price."""
    price: float
    buy_volume: int
    sell_volume: int
    delta: int            # buy_volume - sell_volume
    is_important: bool    # abs(delta) > important threshold


class Trade(NamedTuple):
    """Single synthetic trade printed on the tape."""
    id: str
    price: float
    volume: int
    side: Side
    timestamp_ms: int


class SimulationSnapshot(NamedTuple):
    """
    Complete market state for UI rendering.

    Published once per tick. This is the whole read interface of the engine.
    """
    reference_price: float
    spread: float
    order_book: OrderBookSnapshot
    clusters: tuple[ClusterCell, ...]  # Sorted by price ascending
    trades: tuple[Trade, ...]          # Newest first
    active: bool
    tick_count: int
    timestamp_ms: int

    def to_dict(self) -> dict:
        """JSON-ready representation (used by headless mode)."""
        return {
            'reference_price': self.reference_price,
            'spread': self.spread,
            'order_book': {
                'asks': [level._asdict() for level in self.order_book.asks],
                'bids': [level._asdict() for level in self.order_book.bids],
            },
            'clusters': [cell._asdict() for cell in self.clusters],
            'trades': [
                {**trade._asdict(), 'side': trade.side.value}
                for trade in self.trades
            ],
            'active': self.active,
            'tick_count': self.tick_count,
            'timestamp_ms': self.timestamp_ms,
        }
