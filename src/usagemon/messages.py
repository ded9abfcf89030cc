"""Slack Block Kit messages for usage reports.

Summary text is rendered from Jinja2 templates in src/usagemon/templates/
(Slack mrkdwn, not HTML); the block structure is assembled here.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from jinja2 import Environment, PackageLoader, StrictUndefined

from .formatters import format_clock, format_minutes, format_percentage
from .reports import AppUsage, DailyReportData, HourlyReportData, WeeklyReportData

Block = dict[str, Any]

NO_APPS_THIS_HOUR = "この時間帯のアプリ使用データはありません"
NO_APPS_THIS_WEEK = "この期間のアプリ使用データはありません"

# Singleton Jinja2 environment
_jinja_env: Optional[Environment] = None


def escape_mrkdwn(text: Any) -> str:
    """Escape the three characters Slack treats as control sequences."""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def get_jinja_env() -> Environment:
    """Get or create the singleton Jinja2 environment."""
    global _jinja_env
    if _jinja_env is not None:
        return _jinja_env

    env = Environment(
        loader=PackageLoader("usagemon", "templates"),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )
    env.filters["minutes"] = format_minutes
    env.filters["percentage"] = format_percentage
    env.filters["mrkdwn"] = escape_mrkdwn

    _jinja_env = env
    return env


def _render(template: str, **context: Any) -> str:
    return get_jinja_env().get_template(template).render(**context).strip()


# =============================================================================
# Change descriptions
# =============================================================================


@dataclass(frozen=True)
class ChangeText:
    icon: str
    message: str


def describe_hour_change(pct: float) -> ChangeText:
    """Compare this hour with the previous one."""
    if pct > 20:
        return ChangeText(":arrow_double_up:", f"前の時間から {pct:.1f}% 大幅に増加しました")
    if pct > 0:
        return ChangeText(":arrow_up:", f"前の時間から {pct:.1f}% 増加しました")
    if pct < -20:
        return ChangeText(":arrow_double_down:", f"前の時間から {abs(pct):.1f}% 大幅に減少しました")
    if pct < 0:
        return ChangeText(":arrow_down:", f"前の時間から {abs(pct):.1f}% 減少しました")
    return ChangeText(":left_right_arrow:", "前の時間から変化はありません")


def describe_day_change(pct: float) -> ChangeText:
    """Compare today's running total with yesterday at the same hour."""
    if pct > 20:
        return ChangeText(":chart_with_upwards_trend:", f"昨日の同時刻より {pct:.1f}% 多く利用しています")
    if pct > 0:
        return ChangeText(":small_red_triangle:", f"昨日の同時刻より {pct:.1f}% 多く利用しています")
    if pct < -20:
        return ChangeText(
            ":chart_with_downwards_trend:", f"昨日の同時刻より {abs(pct):.1f}% 少なく利用しています"
        )
    if pct < 0:
        return ChangeText(
            ":small_red_triangle_down:", f"昨日の同時刻より {abs(pct):.1f}% 少なく利用しています"
        )
    return ChangeText(":scales:", "昨日の同時刻と同じ使用状況です")


def describe_week_change(pct: float) -> ChangeText:
    if pct > 0:
        return ChangeText(":arrow_up:", f"前週から {pct:.1f}% 増加しました")
    if pct < 0:
        return ChangeText(":arrow_down:", f"前週から {abs(pct):.1f}% 減少しました")
    return ChangeText(":left_right_arrow:", "前週から変化はありません")


# =============================================================================
# Block helpers
# =============================================================================


def header_block(text: str) -> Block:
    return {"type": "header", "text": {"type": "plain_text", "text": text, "emoji": True}}


def section_block(text: str) -> Block:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def image_block(image_url: str, title: str, alt_text: Optional[str] = None) -> Block:
    return {
        "type": "image",
        "title": {"type": "plain_text", "text": title, "emoji": True},
        "image_url": image_url,
        "alt_text": alt_text or title,
    }


def context_block(generated_at: datetime) -> Block:
    return {
        "type": "context",
        "elements": [
            {"type": "mrkdwn", "text": f"*レポート生成時刻:* {format_clock(generated_at)}"}
        ],
    }


def app_list_text(apps: Sequence[AppUsage], empty_message: str) -> str:
    """Numbered '*name*: minutes (opens)' lines, or the empty message."""
    return _render("app_list.md.j2", apps=apps, empty_message=empty_message)


def usage_change_text(heading: str, value: float, change: ChangeText, unit_suffix: str = "") -> str:
    return _render(
        "usage_change.md.j2", heading=heading, value=value, change=change, unit_suffix=unit_suffix
    )


# =============================================================================
# Report messages
# =============================================================================


def build_daily_blocks(
    report: DailyReportData,
    stacked_url: str,
    pie_url: str,
    generated_at: datetime,
) -> list[Block]:
    return [
        header_block(f"📅 {report.formatted_date} の日次スマホ使用レポート"),
        section_block(_render("daily_summary.md.j2", report=report)),
        image_block(
            stacked_url,
            "時間帯別アプリ使用（積み上げ棒グラフ）",
            "時間帯別アプリ使用積み上げ棒グラフ",
        ),
        image_block(pie_url, "アプリ使用分布（円グラフ）", "アプリ使用分布円グラフ"),
        context_block(generated_at),
    ]


def build_hourly_blocks(
    report: HourlyReportData,
    trend_url: str,
    pie_url: str,
    generated_at: datetime,
) -> list[Block]:
    hour = report.current_hour
    return [
        header_block(f"⏰ {hour}時台のスマホ使用レポート"),
        section_block(
            usage_change_text(
                "現在の時間の使用時間",
                report.current_hour_usage,
                describe_hour_change(report.change_percentage),
            )
        ),
        section_block(
            usage_change_text(
                "今日の累積使用時間",
                report.daily_accumulated,
                describe_day_change(report.daily_change_percentage),
            )
        ),
        image_block(trend_url, "直近の使用時間推移"),
        image_block(pie_url, f"{hour}時台のアプリ使用分布", "現在の時間のアプリ使用分布"),
        section_block("*この時間に最もよく使ったアプリ:*"),
        section_block(app_list_text(report.top_apps, NO_APPS_THIS_HOUR)),
        context_block(generated_at),
    ]


def build_weekly_blocks(
    report: WeeklyReportData,
    hourly_url: str,
    line_url: str,
    generated_at: datetime,
) -> list[Block]:
    return [
        header_block("📱 スマホ使用時間レポート"),
        section_block(
            usage_change_text(
                "今週の平均使用時間",
                report.weekly_average,
                describe_week_change(report.change_percentage),
                unit_suffix="/日",
            )
        ),
        image_block(hourly_url, "直近24時間のアプリ使用履歴"),
        image_block(line_url, "過去7日間の使用時間推移"),
        section_block("*最もよく使ったアプリ:*"),
        section_block(app_list_text(report.top_apps, NO_APPS_THIS_WEEK)),
        context_block(generated_at),
    ]
