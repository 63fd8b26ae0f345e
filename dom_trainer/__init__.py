"""
DOM Trainer - Educational Depth of Market simulator.

Architecture:
- engine/: Synthetic generators (price walk, order book, clusters, trade tape)
- datafeed/: MarketSimulator, the periodic driver that owns the market state
- ui/: Ladder + clusters + tape views (Textual TUI, PyQt6 window) and teaching tooltips
"""

__version__ = "0.1.0"
