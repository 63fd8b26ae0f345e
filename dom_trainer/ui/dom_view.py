"""
DOM Trainer TUI using Textual.

Displays:
- Left: Order book ladder (asks on top, bids below) with heat bars
- Middle: Footprint clusters (buy, sell, delta per price)
- Right: Trade tape, newest on top
- Bottom: Teaching tooltip for the selected term

Performance notes:
- Polls the snapshot queue at ~10 FPS, keeps only the latest snapshot
- Reuses Rich Text objects where possible
- Minimal widget tree updates
"""

from __future__ import annotations

import queue
from datetime import datetime
from typing import TYPE_CHECKING

from rich.console import RenderableType
from rich.style import Style
from rich.table import Table
from rich.text import Text

from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.widgets import Footer, Static

from .tooltips import TOOLTIP_KEYS, TooltipCoordinator, cell_shade

if TYPE_CHECKING:
    from ..datafeed.simulator import MarketSimulator
    from ..types import SimulationSnapshot

# Color scheme (dark theme)
BID_COLOR = "#22c55e"      # Green
ASK_COLOR = "#ef4444"      # Red
DELTA_POS_COLOR = "#22c55e"
DELTA_NEG_COLOR = "#ef4444"
PRICE_COLOR = "#f8fafc"
HEADER_COLOR = "#94a3b8"
BAR_BG = "#1e293b"
WALL_COLOR = "#facc15"     # Yellow
HIGHLIGHT_BG = "#1e40af"

# Shade -> (ask color, bid color)
SHADE_COLORS = {
    "wall": (WALL_COLOR, WALL_COLOR),
    "strong": ("#f87171", "#4ade80"),
    "medium": ("#b91c1c", "#15803d"),
    "weak": ("#7f1d1d", "#14532d"),
}


def format_price(price: float) -> str:
    return f"{price:.4f}"


def format_volume(volume: int) -> str:
    """Format volume for display."""
    if volume >= 1000:
        return f"{volume/1000:.1f}K"
    return str(volume)


def make_bar(value: float, max_value: float, width: int, color: str) -> Text:
    """Create a horizontal bar using block characters."""
    if max_value <= 0:
        return Text(" " * width)

    fill_ratio = min(1.0, value / max_value)
    fill_width = int(fill_ratio * width)

    bar = "█" * fill_width + " " * (width - fill_width)
    return Text(bar, style=Style(color=color, bgcolor=BAR_BG))


def _title(label: str, highlighted: bool) -> Text:
    style = f"bold white on {HIGHLIGHT_BG}" if highlighted else f"bold {HEADER_COLOR}"
    return Text(f" {label} ", style=style)


class SnapshotView(Static):
    """Base widget holding the latest snapshot and the tooltip coordinator."""

    def __init__(self, tooltips: TooltipCoordinator) -> None:
        super().__init__()
        self._snapshot: SimulationSnapshot | None = None
        self._tooltips = tooltips

    def update_snapshot(self, snapshot: SimulationSnapshot) -> None:
        self._snapshot = snapshot
        self.refresh()


class LadderTable(SnapshotView):
    """Order book ladder widget."""

    DEFAULT_CSS = """
    LadderTable {
        width: 2fr;
        height: 100%;
    }
    """

    def render(self) -> RenderableType:
        if self._snapshot is None:
            return Text("Waiting for data...", style="dim")

        book = self._snapshot.order_book
        area = self._tooltips.highlighted_area

        table = Table(
            title=_title("Order book", area in ("ask", "bid", "spread", "liquidity")),
            show_header=True,
            header_style=HEADER_COLOR,
            box=None,
            padding=(0, 1),
            collapse_padding=True,
        )
        table.add_column("Ask Vol", justify="right", width=8)
        table.add_column("Ask Bar", justify="left", width=10, no_wrap=True)
        table.add_column("Price", justify="center", width=8)
        table.add_column("Bid Bar", justify="left", width=10, no_wrap=True)
        table.add_column("Bid Vol", justify="left", width=8)

        # Asks on top: furthest first so the best ask sits next to the spread
        for level in reversed(book.asks):
            shade = cell_shade(level.intensity, level.is_high_volume)
            color = SHADE_COLORS[shade][0]
            row_style = f"on {HIGHLIGHT_BG}" if area == "ask" or (
                area == "liquidity" and level.is_high_volume) else None
            table.add_row(
                Text(format_volume(level.volume), style=color),
                make_bar(level.intensity, 100, 10, color),
                Text(format_price(level.price), style=ASK_COLOR),
                Text(""),
                Text(""),
                style=row_style,
            )

        spread_style = f"bold yellow on {HIGHLIGHT_BG}" if area == "spread" else "yellow"
        table.add_row(
            Text(""), Text(""),
            Text(f"{book.spread:.4f}", style=spread_style),
            Text(""), Text(""),
        )

        for level in book.bids:
            shade = cell_shade(level.intensity, level.is_high_volume)
            color = SHADE_COLORS[shade][1]
            row_style = f"on {HIGHLIGHT_BG}" if area == "bid" or (
                area == "liquidity" and level.is_high_volume) else None
            table.add_row(
                Text(""),
                Text(""),
                Text(format_price(level.price), style=BID_COLOR),
                make_bar(level.intensity, 100, 10, color),
                Text(format_volume(level.volume), style=color),
                style=row_style,
            )

        return table


class ClusterTable(SnapshotView):
    """Footprint clusters widget."""

    DEFAULT_CSS = """
    ClusterTable {
        width: 1fr;
        height: 100%;
    }
    """

    def render(self) -> RenderableType:
        if self._snapshot is None:
            return Text("")

        table = Table(
            title=_title("Clusters", self._tooltips.is_highlighted("clusters")),
            show_header=True,
            header_style=HEADER_COLOR,
            box=None,
            padding=(0, 1),
            collapse_padding=True,
        )
        table.add_column("Price", justify="center", width=8)
        table.add_column("Buy", justify="right", width=5)
        table.add_column("Sell", justify="right", width=5)
        table.add_column("Delta", justify="right", width=6)

        # Highest price on top, like the ladder
        for cell in reversed(self._snapshot.clusters):
            if cell.delta > 0:
                delta_text = Text(f"+{cell.delta}", style=DELTA_POS_COLOR)
            elif cell.delta < 0:
                delta_text = Text(str(cell.delta), style=DELTA_NEG_COLOR)
            else:
                delta_text = Text("0", style="dim")
            if cell.is_important:
                delta_text.stylize("bold reverse")

            table.add_row(
                Text(format_price(cell.price), style=PRICE_COLOR),
                Text(str(cell.buy_volume), style=BID_COLOR),
                Text(str(cell.sell_volume), style=ASK_COLOR),
                delta_text,
            )

        return table


class TapeTable(SnapshotView):
    """Time & sales widget."""

    DEFAULT_CSS = """
    TapeTable {
        width: 1fr;
        height: 100%;
    }
    """

    def render(self) -> RenderableType:
        if self._snapshot is None:
            return Text("")

        table = Table(
            title=_title("Tape", self._tooltips.is_highlighted("tape")),
            show_header=True,
            header_style=HEADER_COLOR,
            box=None,
            padding=(0, 1),
            collapse_padding=True,
        )
        table.add_column("Time", justify="left", width=8)
        table.add_column("Price", justify="center", width=8)
        table.add_column("Vol", justify="right", width=4)

        for trade in self._snapshot.trades:
            color = BID_COLOR if trade.side.value == "buy" else ASK_COLOR
            stamp = datetime.fromtimestamp(trade.timestamp_ms / 1000).strftime("%H:%M:%S")
            table.add_row(
                Text(stamp, style="dim"),
                Text(format_price(trade.price), style=color),
                Text(str(trade.volume), style=f"bold {color}"),
            )

        return table


class StatusBar(Static):
    """Status bar showing price, spread and simulation state."""

    DEFAULT_CSS = """
    StatusBar {
        dock: top;
        height: 3;
        padding: 0 2;
        background: #0f172a;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._snapshot: SimulationSnapshot | None = None

    def update_snapshot(self, snapshot: SimulationSnapshot) -> None:
        self._snapshot = snapshot
        self.refresh()

    def render(self) -> RenderableType:
        if self._snapshot is None:
            return Text("Starting...", style="dim")

        snap = self._snapshot
        book = snap.order_book
        state = Text(" LIVE ", style="bold black on #22c55e") if snap.active else \
            Text(" PAUSED ", style="bold white on #475569")

        parts = [
            Text(" DOM Trainer ", style="bold white on #1e40af"),
            Text("  "),
            state,
            Text("  Price: ", style="dim"),
            Text(format_price(snap.reference_price), style=PRICE_COLOR),
            Text("  Bid: ", style="dim"),
            Text(format_price(book.best_bid), style=BID_COLOR),
            Text("  Ask: ", style="dim"),
            Text(format_price(book.best_ask), style=ASK_COLOR),
            Text("  Spread: ", style="dim"),
            Text(f"{book.spread:.4f}", style="yellow"),
            Text("  │  ", style="dim"),
            Text("Tick: ", style="dim"),
            Text(str(snap.tick_count), style="cyan"),
        ]

        result = Text()
        for p in parts:
            result.append(p)
        return result


class TooltipPanel(Static):
    """Explanation of the selected term."""

    DEFAULT_CSS = """
    TooltipPanel {
        dock: bottom;
        height: 4;
        padding: 0 2;
        background: #1e293b;
    }
    """

    def __init__(self, tooltips: TooltipCoordinator) -> None:
        super().__init__()
        self._tooltips = tooltips

    def render(self) -> RenderableType:
        tooltip = self._tooltips.active_tooltip
        if tooltip is None:
            hints = "  ".join(f"{i}:{key}" for i, key in enumerate(TOOLTIP_KEYS, start=1))
            return Text(f"Press a number to learn a term - {hints}", style="dim")

        result = Text()
        result.append(tooltip.title, style="bold yellow")
        result.append("\n")
        result.append(tooltip.description, style=PRICE_COLOR)
        return result


class DOMTrainerApp(App):
    """Main DOM Trainer application."""

    CSS = """
    Screen {
        background: #0f172a;
    }

    #main-container {
        width: 100%;
        height: 100%;
        padding: 1 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("space", "toggle_simulation", "Start/Pause"),
        ("n", "step", "Step"),
    ] + [
        (str(i), f"tooltip('{key}')", key.capitalize())
        for i, key in enumerate(TOOLTIP_KEYS, start=1)
    ]

    def __init__(self, simulator: MarketSimulator, poll_interval: float = 0.1) -> None:
        super().__init__()
        self.simulator = simulator
        self.snapshot_queue: queue.Queue[SimulationSnapshot] = simulator.snapshot_queue
        self.poll_interval = poll_interval
        self.tooltips = TooltipCoordinator(highlight_sec=simulator.config.highlight_sec)

        self._status_bar = StatusBar()
        self._ladder = LadderTable(self.tooltips)
        self._clusters = ClusterTable(self.tooltips)
        self._tape = TapeTable(self.tooltips)
        self._tooltip_panel = TooltipPanel(self.tooltips)

    def compose(self) -> ComposeResult:
        yield self._status_bar
        yield Horizontal(self._ladder, self._clusters, self._tape, id="main-container")
        yield self._tooltip_panel
        yield Footer()

    def on_mount(self) -> None:
        """Start polling the snapshot queue."""
        self._show(self.simulator.snapshot())
        self.set_interval(self.poll_interval, self._poll_snapshots)

    def _poll_snapshots(self) -> None:
        """Drain the queue, keep only the latest snapshot."""
        latest = None
        while True:
            try:
                latest = self.snapshot_queue.get_nowait()
            except queue.Empty:
                break

        if latest is not None:
            self._show(latest)
        # Highlights expire on their own, so repaint every poll
        self._refresh_views()

    def _show(self, snapshot: SimulationSnapshot) -> None:
        for view in (self._status_bar, self._ladder, self._clusters, self._tape):
            view.update_snapshot(snapshot)

    def _refresh_views(self) -> None:
        for view in (self._ladder, self._clusters, self._tape, self._tooltip_panel):
            view.refresh()

    def action_toggle_simulation(self) -> None:
        """Pause or resume the simulation (bound to space)."""
        self.simulator.toggle()

    def action_step(self) -> None:
        """Advance one tick by hand while paused (bound to 'n')."""
        if not self.simulator.active:
            self.simulator.tick()

    def action_tooltip(self, key: str) -> None:
        """Toggle the explanation for one term (bound to 1-6)."""
        self.tooltips.toggle(key)
        self._refresh_views()


async def run_ui(simulator: MarketSimulator) -> None:
    """Run the TUI application."""
    app = DOMTrainerApp(simulator)
    await app.run_async()
