"""Bar chart: one colored bar per label."""

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .axes import draw_axes, draw_title, draw_value_labels
from .canvas import Canvas
from .colors import BAR_PALETTE, palette_color
from .fallback import NO_DATA_MESSAGE, render_fallback
from .layout import DEFAULT_MARGINS, PlotArea, clean_series, format_bar_value
from .scales import BandScale, LinearScale, scaled_max
from .sink import write_png

BAR_PADDING = 0.2

DEFAULT_Y_LABEL = "使用時間 (分)"
DEFAULT_X_LABEL = "日付"


@dataclass(frozen=True)
class BarRect:
    index: int
    label: str
    value: float
    x: float
    y: float
    width: float
    height: float


def bar_rects(
    labels: Sequence[str], values: Sequence[float], plot: PlotArea
) -> tuple[list[BarRect], BandScale, LinearScale]:
    """Lay out one bar per label; labels must be non-empty."""
    x_scale = BandScale(tuple(labels), plot.left, plot.right, BAR_PADDING)
    y_scale = LinearScale(scaled_max(values), plot.bottom, plot.top).nice()

    rects = []
    for i, (label, value) in enumerate(zip(labels, values)):
        height = max(0.0, y_scale.height_of(value))
        rects.append(
            BarRect(
                index=i,
                label=label,
                value=value,
                x=x_scale.position_at(i),
                y=plot.bottom - height,
                width=x_scale.bandwidth(),
                height=height,
            )
        )
    return rects, x_scale, y_scale


def render_bar_chart(
    labels: Sequence[str],
    values: Sequence[float],
    title: str,
    y_axis_label: str = DEFAULT_Y_LABEL,
    x_axis_label: str = DEFAULT_X_LABEL,
    *,
    out_dir: Path,
) -> Path:
    """Render a bar chart PNG and return its path.

    Empty input yields the fallback image instead.
    """
    labels, values = clean_series(labels, values)
    if not values:
        return render_fallback(title, NO_DATA_MESSAGE, out_dir=out_dir, prefix="empty_bar_chart")

    canvas = Canvas()
    plot = PlotArea.from_margins(canvas.width, canvas.height, DEFAULT_MARGINS)
    rects, x_scale, y_scale = bar_rects(labels, values, plot)

    draw_axes(canvas, plot, x_scale, y_scale, x_axis_label, y_axis_label)

    for rect in rects:
        color = palette_color(BAR_PALETTE, rect.index)
        canvas.fill_rect(rect.x, rect.y, rect.width, rect.height, color.fill)
        canvas.stroke_rect(rect.x, rect.y, rect.width, rect.height, color.stroke)

    draw_value_labels(
        canvas,
        [(r.x + r.width / 2, r.y, format_bar_value(r.value)) for r in rects if r.value > 0],
    )
    draw_title(canvas, plot, title)

    return write_png(canvas, out_dir, "bar_chart")
