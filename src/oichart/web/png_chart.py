"""PNG rendering of a frame with matplotlib.

Price on the left axis, raw open interest on the right axis, window
statistics in the title. Figures are built with the object API on the Agg
canvas; pyplot is never used.
"""

from __future__ import annotations

import io
import logging

import matplotlib.dates as mdates
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from oichart.core.frame import Frame

logger = logging.getLogger(__name__)

CHART_SIZE_INCHES = (14, 8)
CHART_DPI = 100


def chart_title(frame: Frame) -> str:
    stats = frame.stats
    return (
        f"{frame.symbol.upper()} - {stats.data_points} points, records {stats.start + 1}-{stats.end} "
        f"of {stats.total_records}\n"
        f"Avg Price: {stats.avg_price:.2f} | Max: {stats.max_price:.2f} | "
        f"Min: {stats.min_price:.2f} | Avg Open Interest: {stats.avg_oi:.0f}"
    )


def render_png(frame: Frame) -> bytes:
    """Render the frame's window as a two-axis line chart."""
    records = frame.window.records
    times = [r.time for r in records]

    fig = Figure(figsize=CHART_SIZE_INCHES, dpi=CHART_DPI)
    FigureCanvasAgg(fig)
    ax_price = fig.add_subplot(1, 1, 1)
    ax_oi = ax_price.twinx()

    price_line = ax_price.plot(times, list(frame.prices), color="green", linewidth=2, label="Price")
    oi_line = ax_oi.plot(times, [r.open_interest for r in records], color="red", linewidth=2, label="Open Interest")

    ax_price.set_xlabel("Time")
    ax_price.set_ylabel("Price")
    ax_oi.set_ylabel("Open Interest")
    ax_price.xaxis.set_major_formatter(mdates.DateFormatter("%m-%d %H:%M"))
    ax_price.legend(handles=price_line + oi_line, loc="upper left")
    ax_price.set_title(chart_title(frame), fontsize=14)
    fig.autofmt_xdate()

    buf = io.BytesIO()
    fig.savefig(buf, format="png")
    logger.debug(f"Rendered PNG chart for {frame.window.info}")
    return buf.getvalue()
