"""Pie chart with a value/percentage legend."""

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .canvas import Canvas
from .colors import MUTED_TEXT, SERIES_PALETTE, SeriesColor, palette_color
from .fallback import NO_DATA_MESSAGE, render_fallback
from .legend import LegendEntry, ROW_HEIGHT, TITLE_GAP, draw_legend
from .layout import clean_series, truncate_label
from .sink import write_png

VALUE_UNIT = "分"
LEGEND_TITLE = "凡例"
LEGEND_GAP = 20
# Legend names are cut to this many characters before the value suffix.
LEGEND_LABEL_MAX_CHARS = 12
# Keeps the legend title clear of the chart title.
LEGEND_MIN_TOP = 40
LEGEND_BOTTOM_PAD = 10
OVERFLOW_COLOR = SeriesColor(base=MUTED_TEXT)


@dataclass(frozen=True)
class PieSlice:
    index: int
    label: str
    value: float
    start_angle: float
    end_angle: float
    percentage: float

    @property
    def legend_text(self) -> str:
        label = truncate_label(self.label, LEGEND_LABEL_MAX_CHARS)
        return f"{label}: {self.value:.1f}{VALUE_UNIT} ({self.percentage:.1f}%)"


def pie_slices(labels: Sequence[str], values: Sequence[float]) -> list[PieSlice]:
    """Angular layout of the positive values, in input order from angle 0.

    Pairs with a non-positive value are dropped; the result is empty when
    nothing positive remains.
    """
    labels, values = clean_series(labels, values)
    kept = [(label, value) for label, value in zip(labels, values) if value > 0]
    total = sum(value for _, value in kept)
    if not kept or total <= 0:
        return []

    slices = []
    angle = 0.0
    for i, (label, value) in enumerate(kept):
        span = 2 * math.pi * value / total
        slices.append(
            PieSlice(
                index=i,
                label=label,
                value=value,
                start_angle=angle,
                end_angle=angle + span,
                percentage=value / total * 100,
            )
        )
        angle += span
    return slices


def pie_legend(slices: Sequence[PieSlice], canvas_height: int) -> tuple[float, list[LegendEntry]]:
    """Top y and entries of a legend centered beside the pie.

    The legend stays inside the canvas: when there are more slices than
    rows, the last visible row summarises the rest as "他N件".
    """
    max_rows = max(1, int((canvas_height - LEGEND_MIN_TOP - TITLE_GAP - LEGEND_BOTTOM_PAD) // ROW_HEIGHT))
    entries = [
        LegendEntry(label=s.legend_text, color=palette_color(SERIES_PALETTE, s.index))
        for s in slices
    ]
    if len(entries) > max_rows:
        hidden = len(entries) - (max_rows - 1)
        entries = entries[: max_rows - 1] + [LegendEntry(label=f"他{hidden}件", color=OVERFLOW_COLOR)]

    top = canvas_height / 2 - len(entries) * ROW_HEIGHT / 2 - TITLE_GAP
    return max(top, LEGEND_MIN_TOP), entries


def render_pie_chart(
    labels: Sequence[str],
    values: Sequence[float],
    title: str,
    *,
    out_dir: Path,
) -> Path:
    """Render a pie chart PNG and return its path.

    Falls back to the placeholder image when no value is positive.
    """
    slices = pie_slices(labels, values)
    if not slices:
        return render_fallback(title, NO_DATA_MESSAGE, out_dir=out_dir, prefix="empty_pie_chart")

    canvas = Canvas()
    radius = min(canvas.width, canvas.height) / 2.8
    cx = canvas.width / 2
    cy = canvas.height / 2

    canvas.text(cx, 20, title, size=18, bold=True, align="center")

    for s in slices:
        color = palette_color(SERIES_PALETTE, s.index)
        canvas.wedge(cx, cy, radius, s.start_angle, s.end_angle, color.fill, outline=color.stroke)

    legend_y, entries = pie_legend(slices, canvas.height)
    draw_legend(canvas, cx + radius + LEGEND_GAP, legend_y, entries, title=LEGEND_TITLE)

    return write_png(canvas, out_dir, "pie_chart")
