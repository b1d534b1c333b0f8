"""Per-tick display snapshot and the renderer interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from oichart.core.normalize import normalize, sanitize
from oichart.core.stats import WindowStats, compute_window_stats
from oichart.core.window import Window


@dataclass(frozen=True)
class Frame:
    """Everything a renderer needs for one tick. Built fresh every tick."""

    window: Window
    prices: tuple[float, ...]
    normalized_oi: tuple[float, ...]
    stats: WindowStats
    produced_at: datetime = field(default_factory=datetime.now)

    @property
    def symbol(self) -> str:
        return self.window.records[0].symbol if self.window.records else ""


def build_frame(window: Window) -> Frame:
    prices = window.prices()
    return Frame(
        window=window,
        prices=tuple(sanitize(prices)),
        normalized_oi=tuple(normalize(window.open_interest(), prices)),
        stats=compute_window_stats(window),
    )


class Renderer(Protocol):
    """Presents frames. Implementations own their output device."""

    def present(self, frame: Frame) -> None: ...
