"""Plot-area geometry and small helpers shared by every chart kind."""

import math
from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence

# At most this many x-axis labels are drawn before decimation kicks in.
MAX_X_LABELS = 12


@dataclass(frozen=True)
class Margins:
    """Space reserved around the plot for titles, axes and legends."""

    top: int = 50
    right: int = 80
    bottom: int = 60
    left: int = 60

    def widen_right(self, extra: int) -> "Margins":
        return replace(self, right=self.right + extra)


DEFAULT_MARGINS = Margins()


@dataclass(frozen=True)
class PlotArea:
    """Pixel rectangle the data is drawn into."""

    left: float
    top: float
    width: float
    height: float

    @classmethod
    def from_margins(cls, canvas_width: int, canvas_height: int, margins: Margins) -> "PlotArea":
        width = canvas_width - margins.left - margins.right
        height = canvas_height - margins.top - margins.bottom
        if width <= 0 or height <= 0:
            raise ValueError(
                f"margins {margins} leave no plot area on a {canvas_width}x{canvas_height} canvas"
            )
        return cls(left=margins.left, top=margins.top, width=width, height=height)

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2


def label_step(count: int) -> int:
    """Draw every k-th x-axis label so no more than about 12 appear."""
    return max(1, math.ceil(count / MAX_X_LABELS))


def visible_label_indices(count: int) -> list[int]:
    """Indices of the x-axis labels that get drawn; the last is always kept."""
    step = label_step(count)
    return [i for i in range(count) if i % step == 0 or i == count - 1]


def truncate_label(name: str, max_chars: Optional[int]) -> str:
    """Shorten names longer than max_chars to max_chars - 3 chars plus '...'."""
    if max_chars is None or len(name) <= max_chars:
        return name
    return name[: max(0, max_chars - 3)] + "..."


def clean_value(value: Any) -> float:
    """Coerce one data value to a finite float; missing or bad values become 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def clean_series(labels: Sequence[Any], values: Sequence[Any]) -> tuple[list[str], list[float]]:
    """Zip labels with values (to the shorter length) and clean both."""
    pairs = list(zip(labels, values))
    return [str(label) for label, _ in pairs], [clean_value(v) for _, v in pairs]


def format_one_decimal(value: float) -> str:
    return f"{value:.1f}"


def format_bar_value(value: float) -> str:
    """Whole numbers without a decimal point, others with one decimal."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"
