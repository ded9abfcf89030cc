"""Tests for plot geometry and shared chart helpers."""

import math

import pytest

from usagemon.charts.layout import (
    DEFAULT_MARGINS,
    Margins,
    PlotArea,
    clean_series,
    clean_value,
    format_bar_value,
    label_step,
    truncate_label,
    visible_label_indices,
)


class TestPlotArea:
    """Tests for PlotArea."""

    def test_default_plot_area(self, plot_area):
        """800x400 minus default margins."""
        assert plot_area.left == 60
        assert plot_area.top == 50
        assert plot_area.width == 660
        assert plot_area.height == 290
        assert plot_area.right == 720
        assert plot_area.bottom == 340

    def test_widened_right_margin(self):
        """Legend space shrinks the plot width."""
        plot = PlotArea.from_margins(800, 400, DEFAULT_MARGINS.widen_right(140))
        assert plot.width == 520
        assert plot.right == 580

    def test_no_room_raises(self):
        with pytest.raises(ValueError):
            PlotArea.from_margins(100, 100, Margins(left=60, right=80))

    def test_center(self, plot_area):
        assert plot_area.center_x == 390
        assert plot_area.center_y == 195


class TestLabelDecimation:
    """Tests for x-axis label decimation."""

    @pytest.mark.parametrize("count, step", [(1, 1), (12, 1), (13, 2), (24, 2), (25, 3), (100, 9)])
    def test_label_step(self, count, step):
        assert label_step(count) == step

    def test_short_series_shows_all(self):
        assert visible_label_indices(7) == list(range(7))

    def test_24_hours(self):
        """Every other hour plus the last one."""
        assert visible_label_indices(24) == [0, 2, 4, 6, 8, 10, 12, 14, 16, 18, 20, 22, 23]

    def test_last_always_visible(self):
        for count in (13, 25, 31, 100):
            assert visible_label_indices(count)[-1] == count - 1

    def test_bounded_count(self):
        """Roughly 12 labels at most (the forced last one can add one)."""
        for count in range(1, 200):
            assert len(visible_label_indices(count)) <= 13


class TestTruncateLabel:
    """Tests for truncate_label."""

    def test_short_unchanged(self):
        assert truncate_label("YouTube", 15) == "YouTube"

    def test_exact_length_unchanged(self):
        assert truncate_label("a" * 15, 15) == "a" * 15

    def test_long_truncated(self):
        assert truncate_label("abcdefghijklmnopq", 15) == "abcdefghijkl..."

    def test_none_disables(self):
        assert truncate_label("x" * 40, None) == "x" * 40


class TestCleanValues:
    """Tests for clean_value and clean_series."""

    @pytest.mark.parametrize(
        "raw, expected",
        [(None, 0.0), ("abc", 0.0), (math.nan, 0.0), (math.inf, 0.0), (True, 0.0), ("2.5", 2.5), (3, 3.0)],
    )
    def test_clean_value(self, raw, expected):
        assert clean_value(raw) == expected

    def test_zip_to_shorter(self):
        """Mismatched lengths pair up to the shorter one."""
        labels, values = clean_series(["a", "b", "c"], [1, 2])
        assert labels == ["a", "b"]
        assert values == [1.0, 2.0]

    def test_labels_stringified(self):
        labels, _ = clean_series([1, 2], [1, 2])
        assert labels == ["1", "2"]


class TestFormatBarValue:
    def test_integer(self):
        assert format_bar_value(42.0) == "42"

    def test_fraction(self):
        assert format_bar_value(42.25) == "42.2"
