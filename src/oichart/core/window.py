"""Sliding window over the series.

Boundary policy is wrap: once auto-advance moves the start past the last
full window (``length - window_size``), the view restarts at offset 0.
Manual scrolling is bounded to ``[0, length - window_size]`` instead.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from oichart.constants import MIN_WINDOW_POINTS
from oichart.data.market_data import MarketRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Window:
    """Contiguous half-open slice [start, end) of a series."""

    start: int
    end: int
    total: int
    size: int
    records: tuple[MarketRecord, ...]

    def __len__(self) -> int:
        return self.end - self.start

    @property
    def is_drawable(self) -> bool:
        return len(self) >= MIN_WINDOW_POINTS

    @property
    def page(self) -> int:
        """1-based page index of the window start."""
        return self.start // self.size + 1

    @property
    def page_count(self) -> int:
        return max(1, (self.total + self.size - 1) // self.size)

    @property
    def info(self) -> str:
        """Human readable position, e.g. ``1-200 of 5000``."""
        return f"{self.start + 1}-{self.end} of {self.total}"

    def prices(self) -> list[float]:
        return [r.price for r in self.records]

    def open_interest(self) -> list[float]:
        return [float(r.open_interest) for r in self.records]


def downsample(records: Sequence[MarketRecord], sample_size: int) -> tuple[MarketRecord, ...]:
    """Keep every ``len(records) // sample_size``-th record for an overview."""
    if sample_size < 1:
        raise ValueError(f"sample_size must be positive, got: {sample_size}")
    if len(records) <= sample_size:
        return tuple(records)
    step = len(records) // sample_size
    return tuple(records[::step])


def overview_window(records: Sequence[MarketRecord], sample_size: int) -> Window:
    """Whole-series window built from a uniform sample."""
    sampled = downsample(records, sample_size)
    return Window(
        start=0,
        end=len(sampled),
        total=len(records),
        size=max(len(sampled), 1),
        records=sampled,
    )


class WindowCursor:
    """
    Tracks the window start offset.

    Not thread-safe on its own; the refresh loop serializes access.
    """

    def __init__(self, window_size: int, step: int = 1, scroll_step: int | None = None):
        if window_size < MIN_WINDOW_POINTS:
            raise ValueError(f"window_size must be at least {MIN_WINDOW_POINTS}, got: {window_size}")
        if step < 1:
            raise ValueError(f"step must be positive, got: {step}")
        self.window_size = window_size
        self.step = step
        self._scroll_step = scroll_step
        self.start = 0

    @property
    def scroll_step(self) -> int:
        if self._scroll_step:
            return self._scroll_step
        return max(1, self.window_size // 4)

    def last_start(self, length: int) -> int:
        """Largest start offset that still yields a full window."""
        return max(0, length - self.window_size)

    def _wrap(self, length: int) -> None:
        if self.start < 0:
            self.start = 0
        elif self.start > self.last_start(length):
            logger.debug(f"Window start {self.start} past tail of {length} records, wrapping to 0")
            self.start = 0

    def select(self, records: Sequence[MarketRecord]) -> Window:
        """
        Slice the current window out of ``records``.

        The start offset is re-validated against ``len(records)`` first, so a
        series replaced by a shorter one never produces an out-of-range slice.
        """
        length = len(records)
        self._wrap(length)
        end = min(self.start + self.window_size, length)
        return Window(
            start=self.start,
            end=end,
            total=length,
            size=self.window_size,
            records=tuple(records[self.start:end]),
        )

    def advance(self, length: int, step: int | None = None) -> int:
        """Auto-advance by ``step`` (default: the configured step) and apply wrap."""
        self.start += step if step is not None else self.step
        self._wrap(length)
        return self.start

    def scroll_left(self) -> int:
        self.start = max(0, self.start - self.scroll_step)
        return self.start

    def scroll_right(self, length: int) -> int:
        self.start = min(self.start + self.scroll_step, self.last_start(length))
        return self.start

    def reset(self) -> None:
        self.start = 0

    def resize(self, window_size: int, length: int) -> None:
        """Change the window size and keep the start inside the series."""
        if window_size < MIN_WINDOW_POINTS:
            raise ValueError(f"window_size must be at least {MIN_WINDOW_POINTS}, got: {window_size}")
        self.window_size = window_size
        self.start = min(self.start, self.last_start(length))
