"""Gridlines, axes, tick labels and titles for Cartesian charts."""

from typing import Sequence

from .canvas import Canvas
from .colors import AXIS, GRID, TEXT
from .layout import PlotArea, format_one_decimal, visible_label_indices
from .scales import BandScale, LinearScale

GRID_TICKS = 5


def draw_axes(
    canvas: Canvas,
    plot: PlotArea,
    x_scale: BandScale,
    y_scale: LinearScale,
    x_title: str,
    y_title: str,
) -> None:
    """Draw gridlines, both baselines, tick labels and axis titles.

    X-axis labels are decimated for dense label sets; see
    layout.visible_label_indices.
    """
    ticks = y_scale.ticks(GRID_TICKS)

    for tick in ticks:
        y = y_scale.map(tick)
        canvas.line([(plot.left, y), (plot.right, y)], GRID)

    # X axis
    canvas.line([(plot.left, plot.bottom), (plot.right, plot.bottom)], AXIS)
    labels = x_scale.labels
    for i in visible_label_indices(len(labels)):
        canvas.text(
            x_scale.center_at(i),
            plot.bottom + 10,
            labels[i],
            align="center",
            baseline="top",
        )
    canvas.text(plot.center_x, plot.bottom + 40, x_title, size=14, align="center")

    # Y axis
    canvas.line([(plot.left, plot.top), (plot.left, plot.bottom)], AXIS)
    for tick in ticks:
        canvas.text(
            plot.left - 10,
            y_scale.map(tick),
            format_one_decimal(tick),
            align="right",
            baseline="middle",
        )
    canvas.text(plot.left - 40, plot.center_y, y_title, size=14, rotate=90)


def draw_title(canvas: Canvas, plot: PlotArea, title: str) -> None:
    """Chart title centered over the plot area."""
    canvas.text(plot.center_x, plot.top - 30, title, size=18, bold=True, color=TEXT, align="center")


def draw_value_labels(
    canvas: Canvas,
    points: Sequence[tuple[float, float, str]],
    *,
    offset: float = 5,
    bold: bool = False,
) -> None:
    """Draw (x, y, text) labels just above each point."""
    for x, y, text in points:
        canvas.text(x, y - offset, text, bold=bold, align="center", baseline="bottom")
