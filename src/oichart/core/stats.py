"""Window statistics.

All helpers skip infinities and NaN, and return 0.0 when nothing finite is
left. Accumulation is plain double precision, which is ample for prices in
the 1e2-1e4 range and open interest up to ~1e6.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from oichart.constants import CLOCK_FORMAT
from oichart.core.window import Window


def finite_values(data: Sequence[float]) -> list[float]:
    return [v for v in data if math.isfinite(v)]


def mean(data: Sequence[float]) -> float:
    values = finite_values(data)
    if not values:
        return 0.0
    return sum(values) / len(values)


def maximum(data: Sequence[float]) -> float:
    values = finite_values(data)
    if not values:
        return 0.0
    result = values[0]
    for v in values:
        if v > result:
            result = v
    return result


def minimum(data: Sequence[float]) -> float:
    values = finite_values(data)
    if not values:
        return 0.0
    result = values[0]
    for v in values:
        if v < result:
            result = v
    return result


@dataclass(frozen=True)
class WindowStats:
    """Aggregates shown next to the chart."""

    avg_price: float
    max_price: float
    min_price: float
    avg_oi: float
    data_points: int
    start: int
    end: int
    total_records: int
    page: int
    page_count: int
    time_range: str = ""

    def to_dict(self) -> dict:
        return {
            "avg_price": self.avg_price,
            "max_price": self.max_price,
            "min_price": self.min_price,
            "avg_oi": self.avg_oi,
            "data_points": self.data_points,
            "total_records": self.total_records,
        }

    def summary(self) -> str:
        return (
            f"Window {self.start + 1}-{self.end} of {self.total_records} | "
            f"Avg Price: {self.avg_price:.2f} | Max: {self.max_price:.2f} | "
            f"Min: {self.min_price:.2f} | Avg OI: {self.avg_oi:.0f}"
        )


def time_range(window: Window) -> str:
    if not window.records:
        return ""
    first = window.records[0].time.strftime(CLOCK_FORMAT)
    last = window.records[-1].time.strftime(CLOCK_FORMAT)
    return f"{first} - {last}"


def compute_window_stats(window: Window) -> WindowStats:
    prices = window.prices()
    oi = window.open_interest()
    return WindowStats(
        avg_price=mean(prices),
        max_price=maximum(prices),
        min_price=minimum(prices),
        avg_oi=mean(oi),
        data_points=len(window),
        start=window.start,
        end=window.end,
        total_records=window.total,
        page=window.page,
        page_count=window.page_count,
        time_range=time_range(window),
    )
