"""Tests for the sliding window cursor."""

from __future__ import annotations

import pytest

from conftest import make_records
from oichart.core.window import WindowCursor, downsample, overview_window


class TestAutoAdvance:
    """Tests for tick-driven advancement and wrap."""

    def test_initial_window(self) -> None:
        window = WindowCursor(window_size=4).select(make_records(10))
        assert (window.start, window.end, len(window)) == (0, 4, 4)
        assert window.info == "1-4 of 10"

    def test_advances_by_step(self) -> None:
        cursor = WindowCursor(window_size=4, step=2)
        assert cursor.advance(10) == 2
        assert cursor.advance(10) == 4

    def test_last_full_window_is_shown_before_wrap(self) -> None:
        cursor = WindowCursor(window_size=4)
        for _ in range(6):
            cursor.advance(10)
        window = cursor.select(make_records(10))
        assert (window.start, window.end) == (6, 10)

    def test_wraps_to_zero_past_last_full_window(self) -> None:
        cursor = WindowCursor(window_size=4)
        for _ in range(7):
            cursor.advance(10)
        assert cursor.start == 0

        window = cursor.select(make_records(10))
        assert (window.start, window.end) == (0, 4)

    def test_large_step_wraps(self) -> None:
        cursor = WindowCursor(window_size=4, step=50)
        assert cursor.advance(10) == 0

    def test_windows_always_in_bounds(self) -> None:
        records = make_records(23)
        cursor = WindowCursor(window_size=5, step=3)
        for _ in range(40):
            cursor.advance(len(records))
            window = cursor.select(records)
            assert 0 <= window.start < window.end <= len(records)
            assert len(window) == 5


class TestManualScroll:
    """Tests for bounded manual scrolling."""

    def test_default_scroll_step_is_quarter_window(self) -> None:
        assert WindowCursor(window_size=200).scroll_step == 50
        assert WindowCursor(window_size=3).scroll_step == 1

    def test_scroll_right_stops_at_last_full_window(self) -> None:
        cursor = WindowCursor(window_size=4, scroll_step=3)
        assert cursor.scroll_right(10) == 3
        assert cursor.scroll_right(10) == 6
        assert cursor.scroll_right(10) == 6

    def test_scroll_left_stops_at_zero(self) -> None:
        cursor = WindowCursor(window_size=4, scroll_step=3)
        cursor.start = 6
        assert cursor.scroll_left() == 3
        assert cursor.scroll_left() == 0
        assert cursor.scroll_left() == 0


class TestResizeAndShrink:
    """Tests for window size changes and shrinking series."""

    def test_resize_clamps_start(self) -> None:
        cursor = WindowCursor(window_size=4)
        cursor.start = 6
        cursor.resize(8, 10)
        assert (cursor.window_size, cursor.start) == (8, 2)

    def test_resize_rejects_tiny_window(self) -> None:
        with pytest.raises(ValueError):
            WindowCursor(window_size=4).resize(1, 10)

    def test_shrunk_series_restarts_at_zero(self) -> None:
        cursor = WindowCursor(window_size=4)
        cursor.start = 6
        window = cursor.select(make_records(5))
        assert (window.start, window.end) == (0, 4)

    def test_series_shorter_than_window(self) -> None:
        window = WindowCursor(window_size=4).select(make_records(3))
        assert (window.start, window.end) == (0, 3)
        assert window.is_drawable

    def test_single_point_not_drawable(self) -> None:
        window = WindowCursor(window_size=4).select(make_records(1))
        assert len(window) == 1
        assert not window.is_drawable

    def test_invalid_construction(self) -> None:
        with pytest.raises(ValueError):
            WindowCursor(window_size=1)
        with pytest.raises(ValueError):
            WindowCursor(window_size=4, step=0)


class TestOverview:
    """Tests for downsampled overview windows."""

    def test_downsample_every_nth(self) -> None:
        sampled = downsample(make_records(1000), 100)
        assert len(sampled) == 100
        assert sampled[1].vol - sampled[0].vol == 10

    def test_downsample_uneven(self) -> None:
        assert len(downsample(make_records(250), 100)) == 125

    def test_downsample_small_series_unchanged(self) -> None:
        assert len(downsample(make_records(30), 100)) == 30

    def test_downsample_rejects_zero(self) -> None:
        with pytest.raises(ValueError):
            downsample(make_records(10), 0)

    def test_overview_window(self) -> None:
        window = overview_window(make_records(1000), 100)
        assert len(window) == 100
        assert window.total == 1000
        assert window.info == "1-100 of 1000"
