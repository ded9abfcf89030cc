#!/usr/bin/env python3
"""
Render every chart kind from fixed sample data.

Writes PNGs to $OUT_DIR/samples (or the directory given as the first
argument) for eyeballing fonts, colors and layout after changes.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from usagemon.charts import ChartEngine, NamedStack
from usagemon.env import get_config
from usagemon import log

APPS = ["YouTube", "LINE", "Chrome", "Instagram", "とても長い名前のアプリケーション"]
WEEK_LABELS = ["5/1", "5/2", "5/3", "5/4", "5/5", "5/6", "5/7"]
WEEK_TOTALS = [182.5, 140.0, 221.3, 96.8, 130.2, 305.7, 250.0]


def sample_hourly_stacks() -> list[NamedStack]:
    """Deterministic 24-hour usage per app, busiest in the evening."""
    stacks = []
    for i, name in enumerate(APPS):
        values = []
        for hour in range(24):
            base = 12 if 18 <= hour <= 23 else (4 if 7 <= hour <= 17 else 0)
            values.append(max(0.0, base - 2 * i + (hour * (i + 3)) % 5))
        stacks.append(NamedStack(name=name, values=values))
    return stacks


def render_samples(out_dir: Path) -> list[Path]:
    """Render one chart of each kind plus a fallback image."""
    engine = ChartEngine(out_dir)
    hourly = sample_hourly_stacks()
    hours = [f"{h}時" for h in range(24)]

    return [
        engine.render_bar_chart(WEEK_LABELS, WEEK_TOTALS, "日別使用時間"),
        engine.render_pie_chart(APPS, [sum(s.values) for s in hourly], "アプリ使用分布"),
        engine.render_line_chart(WEEK_LABELS, WEEK_TOTALS, "過去7日間の使用時間推移"),
        engine.render_stacked_bar_chart(
            WEEK_LABELS,
            [NamedStack(s.name, s.values[:7]) for s in hourly],
            "日別アプリ使用",
        ),
        engine.render_hourly_stacked_bar_chart(hours, hourly, "時間帯別アプリ使用"),
        engine.render_pie_chart([], [], "データなし"),
    ]


def main():
    """Main entry point."""
    if len(sys.argv) > 1:
        out_dir = Path(sys.argv[1])
    else:
        out_dir = get_config().out_dir / "samples"

    paths = render_samples(out_dir)
    for path in paths:
        log.info(f"Rendered {path}")


if __name__ == "__main__":
    main()
