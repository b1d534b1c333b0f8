"""Linear rescaling of one series into another's value range."""

from __future__ import annotations

import math
from collections.abc import Sequence

from oichart.core.stats import finite_values, maximum, minimum


def sanitize(values: Sequence[float]) -> list[float]:
    """Replace non-finite values with 0.0."""
    return [v if math.isfinite(v) else 0.0 for v in values]


def normalize(source: Sequence[float], target: Sequence[float]) -> list[float]:
    """
    Map ``source`` from [min(source), max(source)] onto [min(target), max(target)].

    Non-finite inputs are left out of min/max and come back as 0.0. An empty
    input, or a source with a single distinct finite value, is returned
    unscaled: the line then does not line up with the target range.
    """
    if not source or not target or not finite_values(source) or not finite_values(target):
        return sanitize(source)

    source_min = minimum(source)
    source_max = maximum(source)
    if source_max == source_min:
        return sanitize(source)

    target_min = minimum(target)
    target_max = maximum(target)
    scale = (target_max - target_min) / (source_max - source_min)

    return [
        target_min + (v - source_min) * scale if math.isfinite(v) else 0.0
        for v in source
    ]


def scale_to_rows(values: Sequence[float], rows: int) -> list[int]:
    """
    Scale values onto integer rows 0..rows-1 for character-cell charts.

    A constant series sits on the middle row.
    """
    if not values:
        return []
    low, high = 0, rows - 1
    data_min = minimum(values)
    data_max = maximum(values)
    if data_max == data_min:
        return [(low + high) // 2] * len(values)
    span = data_max - data_min
    return [
        int(low + (v - data_min) * (high - low) / span) if math.isfinite(v) else low
        for v in values
    ]
