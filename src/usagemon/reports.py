"""Usage aggregation for daily, hourly and weekly reports.

Rows are the dicts returned by db.get_usage_rows (user_id, date, hour,
app_name, usage_time, open_count). The pure helpers at the top turn rows
into per-hour totals, per-app totals and per-app stacks; the build_*
functions query the database and assemble one report's data.

Hours are addressed as slots: (ISO date, hour) pairs. A day is 24 slots of
the same date; a trailing window ending at "now" may span midnight.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from .charts.layout import clean_value
from .charts.stacked import NamedStack
from .db import get_daily_totals, get_day_total, get_usage_rows
from .env import get_config
from .formatters import format_hour, format_month_day, format_report_date
from . import log

HourSlot = tuple[str, int]

# Apps shown in the daily pie chart
DAILY_TOP_APPS = 10
NO_APP_LABEL = "データなし"


@dataclass(frozen=True)
class AppUsage:
    """Total minutes and opens of one app over a window."""

    name: str
    time: float
    open_count: int = 0


@dataclass
class DailyReportData:
    user_id: str
    date: str
    formatted_date: str
    total_usage_time: float
    previous_day_total: float
    change_percentage: float
    hourly_usage: list[float]
    hour_labels: list[str]
    app_usage: list[AppUsage]
    hourly_app_stacks: list[NamedStack]
    most_active_hour: int
    most_used_app: str

    @property
    def app_count(self) -> int:
        return len(self.app_usage)


@dataclass
class HourlyReportData:
    user_id: str
    current_hour: int
    current_hour_usage: float
    previous_hour_usage: float
    change_percentage: float
    top_apps: list[AppUsage]
    daily_accumulated: float
    yesterday_accumulated: float
    daily_change_percentage: float
    trend_labels: list[str] = field(default_factory=list)
    trend_values: list[float] = field(default_factory=list)
    trend_stacks: list[NamedStack] = field(default_factory=list)


@dataclass
class WeeklyReportData:
    user_id: str
    dates: list[str]
    usage_times: list[float]
    top_apps: list[AppUsage]
    weekly_average: float
    previous_week_average: float
    change_percentage: float
    hour_labels: list[str] = field(default_factory=list)
    hourly_stacks: list[NamedStack] = field(default_factory=list)


# =============================================================================
# Pure aggregation helpers
# =============================================================================


def hour_labels(hours: Iterable[int]) -> list[str]:
    """'{h}時' label for each hour."""
    return [format_hour(h) for h in hours]


def day_slots(day: date) -> list[HourSlot]:
    """The 24 hour slots of one calendar day."""
    iso = day.isoformat()
    return [(iso, h) for h in range(24)]


def window_slots(now: datetime, count: int) -> list[HourSlot]:
    """The `count` hour slots ending with the hour containing `now`, oldest first."""
    if count <= 0:
        raise ValueError(f"count must be > 0, got {count}")
    slots = []
    for offset in range(count - 1, -1, -1):
        t = now - timedelta(hours=offset)
        slots.append((t.date().isoformat(), t.hour))
    return slots


def _slot_of(row: dict[str, Any]) -> Optional[HourSlot]:
    hour = row.get("hour")
    if not isinstance(hour, int) or not 0 <= hour <= 23:
        return None
    return (str(row.get("date")), hour)


def hourly_totals(rows: Iterable[dict[str, Any]]) -> list[float]:
    """Minutes per hour of day (24 values); rows outside 0..23 are skipped."""
    totals = [0.0] * 24
    for row in rows:
        slot = _slot_of(row)
        if slot is None:
            log.debug("Skipping usage row with invalid hour", hour=row.get("hour"))
            continue
        totals[slot[1]] += clean_value(row.get("usage_time"))
    return totals


def slot_totals(rows: Iterable[dict[str, Any]], slots: Sequence[HourSlot]) -> list[float]:
    """Minutes per slot, in slot order; rows outside the slots are ignored."""
    index = {slot: i for i, slot in enumerate(slots)}
    totals = [0.0] * len(slots)
    for row in rows:
        i = index.get(_slot_of(row))
        if i is not None:
            totals[i] += clean_value(row.get("usage_time"))
    return totals


def app_totals(rows: Iterable[dict[str, Any]]) -> list[AppUsage]:
    """Per-app totals sorted by time descending, then by name.

    Rows without an app name are skipped.
    """
    times: dict[str, float] = {}
    opens: dict[str, int] = {}
    for row in rows:
        name = row.get("app_name")
        if not name:
            continue
        times[name] = times.get(name, 0.0) + clean_value(row.get("usage_time"))
        opens[name] = opens.get(name, 0) + int(clean_value(row.get("open_count")))

    apps = [AppUsage(name=name, time=times[name], open_count=opens[name]) for name in times]
    return sorted(apps, key=lambda app: (-app.time, app.name))


def top_apps(rows: Iterable[dict[str, Any]], n: int) -> list[AppUsage]:
    """The n apps with the most usage time."""
    return app_totals(rows)[:n]


def hourly_app_stacks(
    rows: Iterable[dict[str, Any]],
    slots: Sequence[HourSlot],
    apps: Optional[Sequence[str]] = None,
) -> list[NamedStack]:
    """One stack per app with its minutes in each slot.

    Args:
        rows: Usage rows
        slots: Hour slots, one stack value per slot
        apps: App names in stack order; defaults to every app seen in the
            slots with usage > 0, largest first

    Returns:
        NamedStack list; each stack has exactly len(slots) values
    """
    index = {slot: i for i, slot in enumerate(slots)}
    per_app: dict[str, list[float]] = {}
    for row in rows:
        name = row.get("app_name")
        i = index.get(_slot_of(row))
        if not name or i is None:
            continue
        values = per_app.setdefault(name, [0.0] * len(slots))
        values[i] += clean_value(row.get("usage_time"))

    if apps is None:
        totals = {name: sum(values) for name, values in per_app.items()}
        apps = sorted(
            (name for name, total in totals.items() if total > 0),
            key=lambda name: (-totals[name], name),
        )

    return [
        NamedStack(name=name, values=per_app.get(name, [0.0] * len(slots)))
        for name in apps
    ]


def change_percentage(current: float, previous: float) -> float:
    """Relative change in percent; 100 when growing from zero, 0 when both are zero."""
    if previous > 0:
        return (current - previous) / previous * 100
    return 100.0 if current > 0 else 0.0


# =============================================================================
# Report builders
# =============================================================================


def build_daily_report(
    user_id: str,
    day: date,
    db_path: Optional[Path] = None,
) -> DailyReportData:
    """Collect one user's usage for a full day, compared with the day before."""
    rows = get_usage_rows(user_id, day, day, db_path=db_path)
    if not rows:
        log.warn("No usage rows for daily report", user=user_id, date=day.isoformat())

    hourly = hourly_totals(rows)
    total = sum(hourly)
    previous = get_day_total(user_id, day - timedelta(days=1), db_path=db_path)
    apps = top_apps(rows, DAILY_TOP_APPS)

    return DailyReportData(
        user_id=user_id,
        date=day.isoformat(),
        formatted_date=format_report_date(day),
        total_usage_time=total,
        previous_day_total=previous,
        change_percentage=change_percentage(total, previous),
        hourly_usage=hourly,
        hour_labels=hour_labels(range(24)),
        app_usage=apps,
        hourly_app_stacks=hourly_app_stacks(rows, day_slots(day)),
        most_active_hour=hourly.index(max(hourly)),
        most_used_app=apps[0].name if apps else NO_APP_LABEL,
    )


def build_hourly_report(
    user_id: str,
    now: datetime,
    db_path: Optional[Path] = None,
) -> HourlyReportData:
    """Collect the current hour, the hour before and the recent trend."""
    cfg = get_config()
    today = now.date()
    yesterday = today - timedelta(days=1)
    hour = now.hour

    current_rows = get_usage_rows(user_id, today, today, hour=hour, db_path=db_path)
    prev_slot = now - timedelta(hours=1)
    previous_rows = get_usage_rows(
        user_id, prev_slot.date(), prev_slot.date(), hour=prev_slot.hour, db_path=db_path
    )
    current_usage = sum(clean_value(r.get("usage_time")) for r in current_rows)
    previous_usage = sum(clean_value(r.get("usage_time")) for r in previous_rows)

    accumulated = sum(
        clean_value(r.get("usage_time"))
        for r in get_usage_rows(user_id, today, today, until_hour=hour, db_path=db_path)
    )
    yesterday_accumulated = sum(
        clean_value(r.get("usage_time"))
        for r in get_usage_rows(user_id, yesterday, yesterday, until_hour=hour, db_path=db_path)
    )

    slots = window_slots(now, cfg.report_trend_hours)
    window_rows = get_usage_rows(user_id, slots[0][0], slots[-1][0], db_path=db_path)
    top = top_apps(current_rows, cfg.report_top_apps)
    if not top:
        log.warn("No app usage in current hour", user=user_id, hour=hour)

    trend_stacks = hourly_app_stacks(window_rows, slots)[: cfg.report_top_apps]

    return HourlyReportData(
        user_id=user_id,
        current_hour=hour,
        current_hour_usage=current_usage,
        previous_hour_usage=previous_usage,
        change_percentage=change_percentage(current_usage, previous_usage),
        top_apps=top,
        daily_accumulated=accumulated,
        yesterday_accumulated=yesterday_accumulated,
        daily_change_percentage=change_percentage(accumulated, yesterday_accumulated),
        trend_labels=hour_labels(h for _, h in slots),
        trend_values=slot_totals(window_rows, slots),
        trend_stacks=trend_stacks,
    )


def build_weekly_report(
    user_id: str,
    now: datetime,
    db_path: Optional[Path] = None,
) -> WeeklyReportData:
    """Collect the last 7 days of totals and the last 24 hours by app."""
    cfg = get_config()
    today = now.date()
    week_start = today - timedelta(days=6)
    prev_start = week_start - timedelta(days=7)
    prev_end = week_start - timedelta(days=1)

    daily = get_daily_totals(user_id, week_start, today, db_path=db_path)
    previous = get_daily_totals(user_id, prev_start, prev_end, db_path=db_path)

    usage_times = [total for _, total in daily]
    weekly_average = sum(usage_times) / len(usage_times) if usage_times else 0.0
    previous_average = (
        sum(total for _, total in previous) / len(previous) if previous else 0.0
    )

    week_rows = get_usage_rows(user_id, week_start, today, db_path=db_path)
    top = top_apps(week_rows, cfg.report_top_apps)

    slots = window_slots(now, 24)
    day_rows = [r for r in week_rows if r["date"] >= slots[0][0]]
    stacks = hourly_app_stacks(day_rows, slots, apps=[app.name for app in top])

    return WeeklyReportData(
        user_id=user_id,
        dates=[format_month_day(d) for d, _ in daily],
        usage_times=usage_times,
        top_apps=top,
        weekly_average=weekly_average,
        previous_week_average=previous_average,
        change_percentage=change_percentage(weekly_average, previous_average),
        hour_labels=hour_labels(h for _, h in slots),
        hourly_stacks=stacks,
    )
