"""Line chart with a filled area and labelled data points."""

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .axes import draw_axes, draw_title, draw_value_labels
from .bar import DEFAULT_X_LABEL, DEFAULT_Y_LABEL
from .canvas import Canvas
from .colors import LINE, WHITE
from .fallback import NO_DATA_MESSAGE, render_fallback
from .layout import (
    DEFAULT_MARGINS,
    MAX_X_LABELS,
    PlotArea,
    clean_series,
    format_one_decimal,
    label_step,
)
from .scales import BandScale, LinearScale, scaled_max
from .sink import write_png

LINE_PADDING = 0.1
HEADROOM = 1.1
LINE_WIDTH = 3
AREA_ALPHA = 0.2
MARKER_RADIUS = 5
MARKER_STROKE = 2


@dataclass(frozen=True)
class LinePoint:
    index: int
    label: str
    value: float
    x: float
    y: float
    labelled: bool


def labelled_indices(values: Sequence[float]) -> set[int]:
    """Deterministic choice of points that get a value label.

    Short series label every point. Longer ones label the first and last
    points, every local maximum or minimum, and every k-th point.
    """
    n = len(values)
    if n <= MAX_X_LABELS:
        return set(range(n))

    step = label_step(n)
    chosen = {0, n - 1}
    chosen.update(range(0, n, step))
    for i in range(1, n - 1):
        prev, cur, nxt = values[i - 1], values[i], values[i + 1]
        if (cur > prev and cur >= nxt) or (cur < prev and cur <= nxt):
            chosen.add(i)
    return chosen


def line_points(
    labels: Sequence[str], values: Sequence[float], plot: PlotArea
) -> tuple[list[LinePoint], BandScale, LinearScale]:
    """Place each value at its band center; labels must be non-empty."""
    x_scale = BandScale(tuple(labels), plot.left, plot.right, LINE_PADDING)
    y_scale = LinearScale(scaled_max(values, HEADROOM), plot.bottom, plot.top).nice()
    chosen = labelled_indices(values)

    points = [
        LinePoint(
            index=i,
            label=label,
            value=value,
            x=x_scale.center_at(i),
            y=y_scale.map(value),
            labelled=i in chosen,
        )
        for i, (label, value) in enumerate(zip(labels, values))
    ]
    return points, x_scale, y_scale


def render_line_chart(
    labels: Sequence[str],
    values: Sequence[float],
    title: str,
    y_axis_label: str = DEFAULT_Y_LABEL,
    x_axis_label: str = DEFAULT_X_LABEL,
    *,
    out_dir: Path,
) -> Path:
    """Render a line/area chart PNG and return its path."""
    labels, values = clean_series(labels, values)
    if not values:
        return render_fallback(title, NO_DATA_MESSAGE, out_dir=out_dir, prefix="empty_line_chart")

    canvas = Canvas()
    plot = PlotArea.from_margins(canvas.width, canvas.height, DEFAULT_MARGINS)
    points, x_scale, y_scale = line_points(labels, values, plot)

    draw_axes(canvas, plot, x_scale, y_scale, x_axis_label, y_axis_label)

    path = [(p.x, p.y) for p in points]
    area = path + [(points[-1].x, plot.bottom), (points[0].x, plot.bottom)]
    canvas.polygon(area, LINE.with_alpha(AREA_ALPHA))
    canvas.line(path, LINE, width=LINE_WIDTH)

    for p in points:
        canvas.circle(p.x, p.y, MARKER_RADIUS, LINE, outline=WHITE, outline_width=MARKER_STROKE)

    draw_value_labels(
        canvas,
        [(p.x, p.y, format_one_decimal(p.value)) for p in points if p.labelled],
        offset=10,
        bold=True,
    )
    draw_title(canvas, plot, title)

    return write_png(canvas, out_dir, "line_chart")
