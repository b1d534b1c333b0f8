"""Terminal chart dashboard.

Layout (rich.Layout):
    +-----------------------------------------+
    | chart: price + normalized open interest |
    +--------------------+--------------------+
    | legend & controls  | statistics         |
    +--------------------+--------------------+

The chart body is drawn with plotext and wrapped in a rich Panel.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import plotext as plt
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from oichart.core.frame import Frame

logger = logging.getLogger(__name__)

_BOTTOM_ROWS = 10

LEGEND_TEXT = (
    "Green Line: Price\n"
    "Red Line: Open Interest (normalized)\n"
    "\n"
    "q: quit    r: refresh data\n"
    "Left/Right (a/d): manual scroll\n"
    "+/-: grow/shrink window"
)


class TerminalDashboard:
    """
    Full-screen rich dashboard.

    Use as a context manager; frames presented outside of it are only kept
    until the screen opens.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self._live: Live | None = None
        self._suspended: list[logging.Handler] = []
        self._last_frame: Frame | None = None

    def __enter__(self) -> TerminalDashboard:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def start(self) -> None:
        """Open the screen and mute console log handlers while it is shown."""
        root = logging.getLogger()
        for h in root.handlers[:]:
            if isinstance(h, logging.StreamHandler) and h.stream in (sys.stdout, sys.stderr):
                root.removeHandler(h)
                self._suspended.append(h)

        initial = self._render(self._last_frame) if self._last_frame else Text("Loading data...")
        self._live = Live(initial, console=self.console, screen=True, auto_refresh=False)
        self._live.start()

    def stop(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None
        root = logging.getLogger()
        for h in self._suspended:
            root.addHandler(h)
        self._suspended.clear()

    def present(self, frame: Frame) -> None:
        self._last_frame = frame
        if self._live is not None:
            self._live.update(self._render(frame), refresh=True)

    # ── Layout construction ───────────────────────────────────────

    def _render(self, frame: Frame) -> Layout:
        layout = Layout()
        layout.split_column(
            Layout(name="chart", ratio=1),
            Layout(name="bottom", size=_BOTTOM_ROWS),
        )
        layout["bottom"].split_row(
            Layout(name="legend", ratio=1),
            Layout(name="stats", ratio=1),
        )
        layout["chart"].update(self._build_chart_panel(frame))
        layout["legend"].update(Panel(Text(LEGEND_TEXT), title="Legend & Controls", border_style="cyan"))
        layout["stats"].update(self._build_stats_panel(frame))
        return layout

    def chart_title(self, frame: Frame) -> str:
        stats = frame.stats
        return (
            f"{frame.symbol.upper()} - Records {stats.start + 1}-{stats.end} of "
            f"{stats.total_records} (Window: {stats.data_points} points)"
        )

    def _build_chart_panel(self, frame: Frame) -> Panel:
        width, height = self.console.size
        chart_w = max(20, width - 4)
        chart_h = max(5, height - _BOTTOM_ROWS - 2)

        xs = list(range(frame.stats.start + 1, frame.stats.end + 1))
        plt.clf()
        plt.clt()
        plt.plotsize(chart_w, chart_h)
        plt.theme("dark")
        plt.plot(xs, list(frame.prices), color="green", label="Price")
        plt.plot(xs, list(frame.normalized_oi), color="red", label="Open Interest")
        return Panel(
            Text.from_ansi(plt.build()),
            title=self.chart_title(frame),
            title_align="left",
            border_style="green",
            padding=(0, 0),
        )

    def _build_stats_panel(self, frame: Frame) -> Panel:
        stats = frame.stats
        table = Table.grid(padding=(0, 2))
        table.add_column(style="dim")
        table.add_column(justify="right")
        table.add_row("Time Range", stats.time_range or "---")
        table.add_row("Avg Price", f"{stats.avg_price:.2f}")
        table.add_row("Max Price", f"{stats.max_price:.2f}")
        table.add_row("Min Price", f"{stats.min_price:.2f}")
        table.add_row("Avg Open Interest", f"{stats.avg_oi:.0f}")
        table.add_row("Window", f"{stats.page}/{stats.page_count}")
        return Panel(table, title="Statistics", title_align="left", border_style="cyan")
