"""Public chart rendering entry points bound to one output directory."""

from pathlib import Path
from typing import Sequence, Union

from .bar import DEFAULT_X_LABEL, DEFAULT_Y_LABEL, render_bar_chart
from .line import render_line_chart
from .pie import render_pie_chart
from .stacked import (
    DEFAULT_HOUR_X_LABEL,
    NamedStack,
    render_hourly_stacked_bar_chart,
    render_stacked_bar_chart,
)


class ChartEngine:
    """Renders charts as PNG files under a fixed directory.

    Every method returns the absolute path of a newly written PNG. Empty or
    unusable input produces a placeholder image rather than an exception;
    encoding and file system errors propagate.
    """

    def __init__(self, out_dir: Union[str, Path]):
        self.out_dir = Path(out_dir)

    def render_bar_chart(
        self,
        labels: Sequence[str],
        values: Sequence[float],
        title: str,
        y_axis_label: str = DEFAULT_Y_LABEL,
        x_axis_label: str = DEFAULT_X_LABEL,
    ) -> Path:
        return render_bar_chart(
            labels, values, title, y_axis_label, x_axis_label, out_dir=self.out_dir
        )

    def render_pie_chart(
        self, labels: Sequence[str], values: Sequence[float], title: str
    ) -> Path:
        return render_pie_chart(labels, values, title, out_dir=self.out_dir)

    def render_line_chart(
        self,
        labels: Sequence[str],
        values: Sequence[float],
        title: str,
        y_axis_label: str = DEFAULT_Y_LABEL,
        x_axis_label: str = DEFAULT_X_LABEL,
    ) -> Path:
        return render_line_chart(
            labels, values, title, y_axis_label, x_axis_label, out_dir=self.out_dir
        )

    def render_stacked_bar_chart(
        self,
        labels: Sequence[str],
        stacks: Sequence[NamedStack],
        title: str,
        y_axis_label: str = DEFAULT_Y_LABEL,
        x_axis_label: str = DEFAULT_X_LABEL,
    ) -> Path:
        return render_stacked_bar_chart(
            labels, stacks, title, y_axis_label, x_axis_label, out_dir=self.out_dir
        )

    def render_hourly_stacked_bar_chart(
        self,
        hour_labels: Sequence[str],
        stacks: Sequence[NamedStack],
        title: str,
        y_axis_label: str = DEFAULT_Y_LABEL,
        x_axis_label: str = DEFAULT_HOUR_X_LABEL,
    ) -> Path:
        return render_hourly_stacked_bar_chart(
            hour_labels, stacks, title, y_axis_label, x_axis_label, out_dir=self.out_dir
        )
