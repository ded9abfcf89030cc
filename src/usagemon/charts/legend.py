"""Color-key legends drawn beside a chart."""

from dataclasses import dataclass
from typing import Optional, Sequence

from .canvas import Canvas
from .colors import SeriesColor
from .layout import truncate_label

SWATCH_SIZE = 15
ROW_HEIGHT = 20
TITLE_GAP = 25
TEXT_INDENT = 25


@dataclass(frozen=True)
class LegendEntry:
    label: str
    color: SeriesColor


def legend_height(count: int, has_title: bool = True) -> int:
    """Vertical space a legend with `count` entries occupies."""
    return (TITLE_GAP if has_title else 0) + count * ROW_HEIGHT


def draw_legend(
    canvas: Canvas,
    x: float,
    y: float,
    entries: Sequence[LegendEntry],
    *,
    title: Optional[str] = None,
    max_chars: Optional[int] = None,
) -> None:
    """Draw a vertical list of swatches and names starting at (x, y).

    The optional title takes the first row; names longer than max_chars are
    shortened with an ellipsis.
    """
    if title:
        canvas.text(x, y, title, size=14, bold=True)
        y += TITLE_GAP

    for i, entry in enumerate(entries):
        row_y = y + i * ROW_HEIGHT
        canvas.fill_rect(x, row_y, SWATCH_SIZE, SWATCH_SIZE, entry.color.fill)
        canvas.stroke_rect(x, row_y, SWATCH_SIZE, SWATCH_SIZE, entry.color.stroke)
        canvas.text(
            x + TEXT_INDENT,
            row_y + SWATCH_SIZE / 2,
            truncate_label(entry.label, max_chars),
            baseline="middle",
        )
