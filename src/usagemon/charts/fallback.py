"""Placeholder image for empty or unusable chart input."""

from pathlib import Path

from .canvas import Canvas
from .colors import MUTED_TEXT
from .sink import write_png

NO_DATA_MESSAGE = "データがありません"
NO_HOURLY_DATA_MESSAGE = "時間帯別データがありません"
MALFORMED_DATA_MESSAGE = "データの形式が正しくありません"


def render_fallback(
    title: str,
    message: str = NO_DATA_MESSAGE,
    *,
    out_dir: Path,
    prefix: str = "empty_chart",
) -> Path:
    """Render only the title and a centered gray message."""
    canvas = Canvas()
    canvas.text(canvas.width / 2, 20, title, size=18, bold=True, align="center")
    canvas.text(
        canvas.width / 2,
        canvas.height / 2,
        message,
        size=16,
        color=MUTED_TEXT,
        align="center",
        baseline="middle",
    )
    return write_png(canvas, out_dir, prefix)
