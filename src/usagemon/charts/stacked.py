"""Stacked bar charts bucketed by day or by hour.

The two public entry points differ on purpose: the daily chart scales to
the unpadded maximum bucket total, while the hourly chart adds 10%
headroom, uses stricter segment-label thresholds and truncates long
legend names. Each has its own StackStyle so neither inherits a silent
default from the other.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from .axes import draw_axes, draw_title
from .bar import DEFAULT_X_LABEL, DEFAULT_Y_LABEL
from .canvas import Canvas
from .colors import SERIES_PALETTE, WHITE, palette_color
from .fallback import (
    MALFORMED_DATA_MESSAGE,
    NO_DATA_MESSAGE,
    NO_HOURLY_DATA_MESSAGE,
    render_fallback,
)
from .layout import DEFAULT_MARGINS, PlotArea, clean_value, format_one_decimal
from .legend import LegendEntry, draw_legend
from .scales import BandScale, LinearScale, scaled_max
from .sink import write_png

DEFAULT_HOUR_X_LABEL = "時間帯"
LEGEND_TITLE = "アプリ"


@dataclass(frozen=True)
class NamedStack:
    """One breakdown category with a value per bucket."""

    name: str
    values: Sequence[float]


@dataclass(frozen=True)
class StackStyle:
    band_padding: float
    headroom: float
    label_fraction: float
    min_label_height: float
    legend_width: int
    legend_max_chars: Optional[int]
    no_data_message: str
    filename_prefix: str


DAILY_STYLE = StackStyle(
    band_padding=0.2,
    headroom=1.0,
    label_fraction=0.10,
    min_label_height=20,
    legend_width=100,
    legend_max_chars=None,
    no_data_message=NO_DATA_MESSAGE,
    filename_prefix="stacked_bar_chart",
)

HOURLY_STYLE = StackStyle(
    band_padding=0.1,
    headroom=1.1,
    label_fraction=0.15,
    min_label_height=25,
    legend_width=140,
    legend_max_chars=15,
    no_data_message=NO_HOURLY_DATA_MESSAGE,
    filename_prefix="hourly_stacked_chart",
)


@dataclass(frozen=True)
class StackSegment:
    stack_index: int
    name: str
    value: float
    x: float
    y: float
    width: float
    height: float
    labelled: bool


@dataclass(frozen=True)
class StackedBucket:
    index: int
    label: str
    total: float
    x: float
    width: float
    top: float
    segments: list[StackSegment]


def _stack_fields(stack: Any) -> Optional[tuple[str, Sequence[Any]]]:
    """(name, values) of a NamedStack, a mapping or a name/values object."""
    if isinstance(stack, Mapping):
        name, values = stack.get("name"), stack.get("values")
    else:
        name, values = getattr(stack, "name", None), getattr(stack, "values", None)
    if name is None:
        return None
    if not isinstance(values, Sequence) or isinstance(values, (str, bytes)):
        return None
    return str(name), values


def valid_stacks(labels: Sequence[str], stacks: Sequence[Any]) -> list[NamedStack]:
    """Stacks whose value count matches the label count, values cleaned.

    Stacks may be NamedStack instances, {"name", "values"} mappings or any
    object with name and values attributes; anything else is dropped.
    """
    valid = []
    for stack in stacks:
        fields = _stack_fields(stack)
        if fields is None:
            continue
        name, values = fields
        if len(values) != len(labels):
            continue
        valid.append(NamedStack(name=name, values=[clean_value(v) for v in values]))
    return valid


def bucket_totals(labels: Sequence[str], stacks: Sequence[NamedStack]) -> list[float]:
    """Sum of the positive stack values at each bucket."""
    return [
        sum(v for v in (stack.values[i] for stack in stacks) if v > 0)
        for i in range(len(labels))
    ]


def stack_segments(
    labels: Sequence[str],
    stacks: Sequence[NamedStack],
    plot: PlotArea,
    style: StackStyle,
) -> tuple[list[StackedBucket], BandScale, LinearScale]:
    """Lay out the segments of every bucket, bottom-up in stack order.

    Segment edges come from the scaled cumulative sum, so the segment
    heights of a bucket add up to the pixel height of its total.
    """
    totals = bucket_totals(labels, stacks)
    x_scale = BandScale(tuple(labels), plot.left, plot.right, style.band_padding)
    y_scale = LinearScale(scaled_max(totals, style.headroom), plot.bottom, plot.top).nice()
    width = x_scale.bandwidth()

    buckets = []
    for i, label in enumerate(labels):
        x = x_scale.position_at(i)
        total = totals[i]
        offset = plot.bottom
        cumulative = 0.0
        segments = []
        for s, stack in enumerate(stacks):
            value = stack.values[i]
            if value <= 0:
                continue
            cumulative += value
            top = y_scale.map(cumulative)
            height = offset - top
            segments.append(
                StackSegment(
                    stack_index=s,
                    name=stack.name,
                    value=value,
                    x=x,
                    y=top,
                    width=width,
                    height=height,
                    labelled=(
                        value > total * style.label_fraction
                        and height > style.min_label_height
                    ),
                )
            )
            offset = top
        buckets.append(
            StackedBucket(
                index=i, label=label, total=total, x=x, width=width, top=offset, segments=segments
            )
        )
    return buckets, x_scale, y_scale


def _render_stacked(
    labels: Sequence[str],
    stacks: Sequence[NamedStack],
    title: str,
    y_axis_label: str,
    x_axis_label: str,
    style: StackStyle,
    out_dir: Path,
) -> Path:
    if not labels or not stacks:
        return render_fallback(
            title, style.no_data_message, out_dir=out_dir, prefix="empty_bar_chart"
        )

    labels = [str(label) for label in labels]
    stacks = valid_stacks(labels, stacks)
    if not stacks:
        return render_fallback(
            title, MALFORMED_DATA_MESSAGE, out_dir=out_dir, prefix="empty_bar_chart"
        )

    canvas = Canvas()
    margins = DEFAULT_MARGINS.widen_right(style.legend_width)
    plot = PlotArea.from_margins(canvas.width, canvas.height, margins)
    buckets, x_scale, y_scale = stack_segments(labels, stacks, plot, style)

    draw_axes(canvas, plot, x_scale, y_scale, x_axis_label, y_axis_label)

    colors = [palette_color(SERIES_PALETTE, i) for i in range(len(stacks))]
    for bucket in buckets:
        for seg in bucket.segments:
            color = colors[seg.stack_index]
            canvas.fill_rect(seg.x, seg.y, seg.width, seg.height, color.fill)
            canvas.stroke_rect(seg.x, seg.y, seg.width, seg.height, color.stroke)
            if seg.labelled:
                canvas.text(
                    seg.x + seg.width / 2,
                    seg.y + seg.height / 2,
                    format_one_decimal(seg.value),
                    size=11,
                    bold=True,
                    color=WHITE,
                    align="center",
                    baseline="middle",
                )
        if bucket.total > 0:
            canvas.text(
                bucket.x + bucket.width / 2,
                bucket.top - 5,
                format_one_decimal(bucket.total),
                bold=True,
                align="center",
                baseline="bottom",
            )

    draw_title(canvas, plot, title)
    draw_legend(
        canvas,
        plot.right + 10,
        plot.top,
        [LegendEntry(label=stack.name, color=colors[i]) for i, stack in enumerate(stacks)],
        title=LEGEND_TITLE,
        max_chars=style.legend_max_chars,
    )

    return write_png(canvas, out_dir, style.filename_prefix)


def render_stacked_bar_chart(
    labels: Sequence[str],
    stacks: Sequence[NamedStack],
    title: str,
    y_axis_label: str = DEFAULT_Y_LABEL,
    x_axis_label: str = DEFAULT_X_LABEL,
    *,
    out_dir: Path,
) -> Path:
    """Day-bucketed stacked bars scaled to the largest daily total."""
    return _render_stacked(
        labels, stacks, title, y_axis_label, x_axis_label, DAILY_STYLE, out_dir
    )


def render_hourly_stacked_bar_chart(
    hour_labels: Sequence[str],
    stacks: Sequence[NamedStack],
    title: str,
    y_axis_label: str = DEFAULT_Y_LABEL,
    x_axis_label: str = DEFAULT_HOUR_X_LABEL,
    *,
    out_dir: Path,
) -> Path:
    """Hour-bucketed stacked bars with 10% headroom above the largest total."""
    return _render_stacked(
        hour_labels, stacks, title, y_axis_label, x_axis_label, HOURLY_STYLE, out_dir
    )
