"""
DOM Trainer GUI using PyQt6 - pops out as a standalone window.

Layout:
- Header with price/spread and the Start/Pause button
- Order book ladder, footprint clusters and trade tape side by side
- Tooltip buttons and the explanation of the selected term

The simulator runs on an asyncio loop in a background thread. This window only
reads snapshots from the thread-safe queue and posts control calls back with
loop.call_soon_threadsafe.
"""

from __future__ import annotations

import asyncio
import queue
import sys
from datetime import datetime
from typing import TYPE_CHECKING

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QColor, QFont
from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QTableWidget, QTableWidgetItem, QHeaderView
)

from ..datafeed.simulator import post_threadsafe
from .tooltips import TOOLTIP_KEYS, TOOLTIPS, TooltipCoordinator, cell_shade

if TYPE_CHECKING:
    from ..datafeed.simulator import MarketSimulator
    from ..types import SimulationSnapshot

# Colors
BID_COLOR = QColor(34, 197, 94)      # Green
ASK_COLOR = QColor(239, 68, 68)      # Red
BG_COLOR = QColor(15, 23, 42)        # Dark blue-gray
HEADER_BG = QColor(30, 41, 59)
TEXT_COLOR = QColor(248, 250, 252)
HIGHLIGHT_BG = QColor(30, 64, 175)

# Shade -> (ask background, bid background)
SHADE_BG = {
    "wall": (QColor(253, 224, 71), QColor(254, 240, 138)),
    "strong": (QColor(127, 29, 29), QColor(20, 83, 45)),
    "medium": (QColor(69, 10, 10), QColor(5, 46, 22)),
    "weak": (BG_COLOR, BG_COLOR),
}

TABLE_STYLE = f"""
    QTableWidget {{
        background-color: {BG_COLOR.name()};
        gridline-color: {HEADER_BG.name()};
        font-family: Consolas;
        font-size: 12px;
    }}
    QHeaderView::section {{
        background-color: {HEADER_BG.name()};
        color: {TEXT_COLOR.name()};
        padding: 5px;
        border: none;
    }}
"""


def _make_table(headers: list[str], rows: int) -> tuple[QTableWidget, list[list[QTableWidgetItem]]]:
    """Build a read-only table with cached, reusable items."""
    table = QTableWidget()
    table.setColumnCount(len(headers))
    table.setHorizontalHeaderLabels(headers)
    table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
    table.verticalHeader().setVisible(False)
    table.setShowGrid(False)
    table.setStyleSheet(TABLE_STYLE)
    table.setRowCount(rows)

    items: list[list[QTableWidgetItem]] = []
    for row in range(rows):
        row_items = []
        for col in range(len(headers)):
            item = QTableWidgetItem("")
            item.setFlags(item.flags() & ~Qt.ItemFlag.ItemIsEditable)
            item.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
            table.setItem(row, col, item)
            row_items.append(item)
        items.append(row_items)
    return table, items


class DOMWindow(QMainWindow):
    """Main DOM Trainer window."""

    def __init__(self, simulator: MarketSimulator, loop: asyncio.AbstractEventLoop) -> None:
        super().__init__()
        self.simulator = simulator
        self.loop = loop
        self.snapshot_queue: queue.Queue[SimulationSnapshot] = simulator.snapshot_queue
        self.tooltips = TooltipCoordinator(highlight_sec=simulator.config.highlight_sec)
        self._last_snapshot: SimulationSnapshot | None = None

        cfg = simulator.config
        self._book_rows = 2 * cfg.book_levels + 1   # asks + spread row + bids
        self._cluster_rows = 2 * cfg.cluster_half_width + 1
        self._tape_rows = cfg.history_length

        self.setWindowTitle("DOM Trainer")
        self.setMinimumSize(1000, 760)
        self.setStyleSheet(f"background-color: {BG_COLOR.name()}; color: {TEXT_COLOR.name()};")

        self._setup_ui()
        self._setup_timer()

    def _setup_ui(self) -> None:
        """Build the UI."""
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(10, 10, 10, 10)

        # Header
        header_row = QHBoxLayout()
        self.header = QLabel("Starting...")
        self.header.setFont(QFont("Consolas", 14, QFont.Weight.Bold))
        self.header.setStyleSheet(f"background-color: {HEADER_BG.name()}; padding: 10px;")
        header_row.addWidget(self.header, stretch=1)

        self.toggle_button = QPushButton("Pause")
        self.toggle_button.clicked.connect(self._on_toggle_clicked)
        header_row.addWidget(self.toggle_button)
        layout.addLayout(header_row)

        # Tables
        tables_row = QHBoxLayout()
        self.book_table, self._book_items = _make_table(
            ["Ask Vol", "Price", "Bid Vol"], self._book_rows)
        self.cluster_table, self._cluster_items = _make_table(
            ["Price", "Buy", "Sell", "Delta"], self._cluster_rows)
        self.tape_table, self._tape_items = _make_table(
            ["Time", "Price", "Vol"], self._tape_rows)
        tables_row.addWidget(self.book_table, stretch=2)
        tables_row.addWidget(self.cluster_table, stretch=2)
        tables_row.addWidget(self.tape_table, stretch=1)
        layout.addLayout(tables_row, stretch=1)

        # Tooltip buttons
        buttons_row = QHBoxLayout()
        for key in TOOLTIP_KEYS:
            button = QPushButton(TOOLTIPS[key].title)
            button.clicked.connect(lambda _checked=False, k=key: self._on_tooltip_clicked(k))
            buttons_row.addWidget(button)
        layout.addLayout(buttons_row)

        self.tooltip_label = QLabel("")
        self.tooltip_label.setWordWrap(True)
        self.tooltip_label.setStyleSheet(f"background-color: {HEADER_BG.name()}; padding: 8px;")
        layout.addWidget(self.tooltip_label)

    def _setup_timer(self) -> None:
        """Setup timer to poll snapshot queue."""
        self.timer = QTimer()
        self.timer.timeout.connect(self._poll_snapshots)
        self.timer.start(50)

    def _poll_snapshots(self) -> None:
        """Poll for new snapshots from the thread-safe queue."""
        latest = None
        while True:
            try:
                latest = self.snapshot_queue.get_nowait()
            except queue.Empty:
                break

        if latest is not None:
            self._last_snapshot = latest
        if self._last_snapshot is not None:
            self._update_display(self._last_snapshot)

    def _on_toggle_clicked(self) -> None:
        if post_threadsafe(self.loop, self.simulator.toggle):
            return
        # Simulator thread is gone
        self.toggle_button.setEnabled(False)
        self.statusBar().showMessage("Simulator stopped")

    def _on_tooltip_clicked(self, key: str) -> None:
        self.tooltips.toggle(key)
        tooltip = self.tooltips.active_tooltip
        self.tooltip_label.setText(
            f"<b>{tooltip.title}</b><br>{tooltip.description}" if tooltip else "")

    def _update_display(self, snap: SimulationSnapshot) -> None:
        """Update the display with a snapshot. Optimized for speed."""
        book = snap.order_book
        self.header.setText(
            f"  {'LIVE' if snap.active else 'PAUSED'}  │  Price: {snap.reference_price:.4f}  │  "
            f"Bid: {book.best_bid:.4f}  │  Ask: {book.best_ask:.4f}  │  "
            f"Spread: {book.spread:.4f}  │  Tick: {snap.tick_count}"
        )
        self.toggle_button.setText("Pause" if snap.active else "Start")

        area = self.tooltips.highlighted_area

        # Block signals during bulk update for performance
        for table in (self.book_table, self.cluster_table, self.tape_table):
            table.blockSignals(True)

        self._update_book(snap, area)
        self._update_clusters(snap, area)
        self._update_tape(snap, area)

        for table in (self.book_table, self.cluster_table, self.tape_table):
            table.blockSignals(False)
            table.viewport().update()

    def _update_book(self, snap: SimulationSnapshot, area: str | None) -> None:
        book = snap.order_book
        row = 0

        # Asks (furthest on top)
        for level in reversed(book.asks):
            items = self._book_items[row]
            bg = SHADE_BG[cell_shade(level.intensity, level.is_high_volume)][0]
            if area == "ask" or (area == "liquidity" and level.is_high_volume):
                bg = HIGHLIGHT_BG
            items[0].setText(str(level.volume))
            items[0].setBackground(bg)
            items[1].setText(f"{level.price:.4f}")
            items[1].setForeground(ASK_COLOR)
            items[2].setText("")
            items[2].setBackground(BG_COLOR)
            row += 1

        # Spread row
        items = self._book_items[row]
        items[0].setText("")
        items[1].setText(f"spread {book.spread:.4f}")
        items[1].setBackground(HIGHLIGHT_BG if area == "spread" else HEADER_BG)
        items[2].setText("")
        row += 1

        for level in book.bids:
            items = self._book_items[row]
            bg = SHADE_BG[cell_shade(level.intensity, level.is_high_volume)][1]
            if area == "bid" or (area == "liquidity" and level.is_high_volume):
                bg = HIGHLIGHT_BG
            items[0].setText("")
            items[0].setBackground(BG_COLOR)
            items[1].setText(f"{level.price:.4f}")
            items[1].setForeground(BID_COLOR)
            items[2].setText(str(level.volume))
            items[2].setBackground(bg)
            row += 1

    def _update_clusters(self, snap: SimulationSnapshot, area: str | None) -> None:
        for row, cell in enumerate(reversed(snap.clusters)):
            items = self._cluster_items[row]
            items[0].setText(f"{cell.price:.4f}")
            items[1].setText(str(cell.buy_volume))
            items[1].setForeground(BID_COLOR)
            items[2].setText(str(cell.sell_volume))
            items[2].setForeground(ASK_COLOR)
            items[3].setText(f"+{cell.delta}" if cell.delta > 0 else str(cell.delta))
            items[3].setForeground(BID_COLOR if cell.delta >= 0 else ASK_COLOR)
            font = items[3].font()
            font.setBold(cell.is_important)
            items[3].setFont(font)
            items[0].setBackground(HIGHLIGHT_BG if area == "clusters" else BG_COLOR)

    def _update_tape(self, snap: SimulationSnapshot, area: str | None) -> None:
        for row in range(self._tape_rows):
            items = self._tape_items[row]
            if row >= len(snap.trades):
                for item in items:
                    item.setText("")
                continue
            trade = snap.trades[row]
            color = BID_COLOR if trade.side.value == "buy" else ASK_COLOR
            items[0].setText(datetime.fromtimestamp(trade.timestamp_ms / 1000).strftime("%H:%M:%S"))
            items[0].setBackground(HIGHLIGHT_BG if area == "tape" else BG_COLOR)
            items[1].setText(f"{trade.price:.4f}")
            items[1].setForeground(color)
            items[2].setText(str(trade.volume))
            items[2].setForeground(color)


def run_gui(simulator: MarketSimulator, loop: asyncio.AbstractEventLoop) -> None:
    """Run the GUI application (blocking)."""
    app = QApplication(sys.argv)
    app.setStyle("Fusion")  # Modern look

    window = DOMWindow(simulator, loop)
    window.show()

    app.exec()
