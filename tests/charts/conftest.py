"""Fixtures for chart rendering tests."""

import pytest
from PIL import Image

from usagemon.charts.layout import DEFAULT_MARGINS, PlotArea


@pytest.fixture
def chart_dir(tmp_path):
    """Output directory for rendered PNGs (not created up front)."""
    return tmp_path / "charts"


@pytest.fixture
def plot_area():
    """Default 800x400 plot area."""
    return PlotArea.from_margins(800, 400, DEFAULT_MARGINS)


@pytest.fixture
def open_png():
    """Open a rendered PNG fully decoded, returning an RGB image."""

    def _open(path):
        with Image.open(path) as img:
            assert img.format == "PNG"
            img.load()
            return img.convert("RGB")

    return _open


@pytest.fixture
def sample_stacks():
    """Three apps over four buckets."""
    from usagemon.charts.stacked import NamedStack

    return [
        NamedStack("YouTube", [30.0, 10.0, 0.0, 45.0]),
        NamedStack("LINE", [10.0, 20.0, 5.0, 0.0]),
        NamedStack("Chrome", [5.0, 0.0, 0.0, 15.0]),
    ]
