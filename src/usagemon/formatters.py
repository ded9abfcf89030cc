"""Shared formatting functions for display values."""

from datetime import date, datetime
from typing import Optional, Union


def format_minutes(value: Optional[float]) -> str:
    """Minutes with one decimal and the 分 unit."""
    if value is None:
        return "N/A"
    return f"{value:.1f}分"


def format_percentage(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return f"{value:.1f}%"


def format_report_date(d: Union[date, str]) -> str:
    """Long Japanese date, e.g. 2024年5月1日."""
    if isinstance(d, str):
        d = date.fromisoformat(d)
    return f"{d.year}年{d.month}月{d.day}日"


def format_month_day(d: Union[date, str]) -> str:
    """Short axis label, e.g. 5/1."""
    if isinstance(d, str):
        d = date.fromisoformat(d)
    return f"{d.month}/{d.day}"


def format_hour(hour: int) -> str:
    return f"{hour}時"


def format_clock(dt: Optional[datetime]) -> str:
    """Wall-clock time of day (HH:MM:SS)."""
    if dt is None:
        return "N/A"
    return dt.strftime("%H:%M:%S")
