"""Raw ANSI/ASCII chart.

Redraws the whole screen on every frame with plain escape codes: price as
``*``, open interest as ``#``, ``@`` where both land on the same cell.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, TextIO

from oichart.core.normalize import scale_to_rows

if TYPE_CHECKING:
    from oichart.config_loader import AsciiConfig
    from oichart.core.frame import Frame

logger = logging.getLogger(__name__)

CLEAR_SCREEN = "\033[2J\033[H"

PRICE_MARK = "*"
OI_MARK = "#"
BOTH_MARK = "@"


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    CYAN = "\033[96m"
    DIM = "\033[2m"


def build_grid(prices: list[int], oi: list[int], width: int, height: int) -> list[list[str]]:
    """Place both row-scaled series on a ``height`` x ``width`` character grid."""
    grid = [[" "] * width for _ in range(height)]
    n = len(prices)
    for i in range(n):
        x = min(i * width // n, width - 1)

        price_y = height - 1 - prices[i]
        if 0 <= price_y < height:
            grid[price_y][x] = PRICE_MARK

        oi_y = height - 1 - oi[i]
        if 0 <= oi_y < height:
            grid[oi_y][x] = BOTH_MARK if grid[oi_y][x] in (PRICE_MARK, BOTH_MARK) else OI_MARK
    return grid


def _colorize(cell: str) -> str:
    if cell == PRICE_MARK:
        return f"{Colors.GREEN}{cell}{Colors.RESET}"
    if cell == OI_MARK:
        return f"{Colors.RED}{cell}{Colors.RESET}"
    if cell == BOTH_MARK:
        return f"{Colors.BOLD}{cell}{Colors.RESET}"
    return cell


class AsciiChartRenderer:
    """Full-screen ASCII chart written to a text stream."""

    def __init__(self, config: AsciiConfig, stream: TextIO | None = None, color: bool = True):
        self.width = config.width
        self.height = config.height
        self.stream = stream or sys.stdout
        self.color = color

    def render_lines(self, frame: Frame) -> list[str]:
        stats = frame.stats
        price_rows = scale_to_rows(frame.prices, self.height)
        oi_rows = scale_to_rows(frame.normalized_oi, self.height)
        grid = build_grid(price_rows, oi_rows, self.width, self.height)
        rule = "=" * (self.width + 10)

        lines = [
            f"{frame.symbol.upper()} - Price and Open Interest Chart (Window: {stats.data_points} points)",
            f"Legend: {PRICE_MARK} = Price, {OI_MARK} = Open Interest, {BOTH_MARK} = Both",
            rule,
        ]
        for row_index, row in enumerate(grid):
            cells = "".join(_colorize(c) for c in row) if self.color else "".join(row)
            lines.append(f"{self.height - row_index - 1:2d} |{cells}|")
        lines.append("   +" + "-" * self.width + "+")
        if stats.time_range:
            lines.append(f"   Time: {stats.time_range.replace(' - ', ' -> ')}")

        lines.extend(
            [
                rule,
                f"Statistics - Records {stats.start + 1}-{stats.end} of {stats.total_records}",
                f"Avg Price: {stats.avg_price:.2f} | Max Price: {stats.max_price:.2f} | "
                f"Min Price: {stats.min_price:.2f}",
                f"Avg Open Interest: {stats.avg_oi:.0f} | Data Points: {stats.data_points}",
                f"Window: {stats.page}/{stats.page_count}",
                rule,
                f"{Colors.DIM if self.color else ''}q: quit  r: refresh  a/d or arrows: scroll  "
                f"+/-: resize{Colors.RESET if self.color else ''}",
            ]
        )
        return lines

    def present(self, frame: Frame) -> None:
        output = "\n".join(self.render_lines(frame))
        print(CLEAR_SCREEN + output, file=self.stream, flush=True)
