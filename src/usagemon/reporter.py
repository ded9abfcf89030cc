"""Report delivery: aggregate, render, upload, post, clean up.

Each send_* function handles one user and propagates failures.
send_to_all_users fans out over every active user on worker threads and
turns per-user failures into a ReportRunResult count.
"""

import asyncio
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

import httpx

from .charts import ChartEngine
from .db import get_active_users
from .env import get_config
from .messages import build_daily_blocks, build_hourly_blocks, build_weekly_blocks
from .reports import build_daily_report, build_hourly_report, build_weekly_report
from .slack import post_blocks
from .storage import LocalDirectoryUploader, Uploader, cleanup_files, upload_images
from . import log

REPORT_KINDS = ("hourly", "daily", "weekly")

USAGE_AXIS_LABEL = "使用時間 (分)"
HOUR_AXIS_LABEL = "時間帯"
DATE_AXIS_LABEL = "日付"


@dataclass(frozen=True)
class ReportRunResult:
    total: int
    success: int
    failed: int


@dataclass
class ReportContext:
    """Collaborators shared by the report senders."""

    engine: ChartEngine
    uploader: Uploader
    webhook_url: Optional[str] = None
    client: Optional[httpx.Client] = None
    db_path: Optional[Path] = None

    @classmethod
    def from_config(cls) -> "ReportContext":
        cfg = get_config()
        return cls(
            engine=ChartEngine(cfg.chart_tmp_dir),
            uploader=LocalDirectoryUploader(cfg.public_dir, cfg.public_base_url),
            webhook_url=cfg.slack_webhook_url,
        )


def _base_key(user_id: str, now: datetime) -> str:
    return f"reports/{user_id}/{int(now.timestamp() * 1000)}"


def send_daily_report(
    user_id: str,
    now: Optional[datetime] = None,
    ctx: Optional[ReportContext] = None,
    day: Optional[date] = None,
) -> None:
    """Send the report for one full day (yesterday unless `day` is given)."""
    now = now or datetime.now()
    ctx = ctx or ReportContext.from_config()
    day = day or (now - timedelta(days=1)).date()
    log.info("Building daily report", user=user_id, date=day.isoformat())

    report = build_daily_report(user_id, day, db_path=ctx.db_path)

    charts: dict[str, Path] = {}
    try:
        charts["stacked"] = ctx.engine.render_hourly_stacked_bar_chart(
            report.hour_labels,
            report.hourly_app_stacks,
            f"時間帯別アプリ使用（{report.formatted_date}）",
            USAGE_AXIS_LABEL,
            HOUR_AXIS_LABEL,
        )
        charts["pie"] = ctx.engine.render_pie_chart(
            [app.name for app in report.app_usage],
            [app.time for app in report.app_usage],
            f"アプリ使用分布（{report.formatted_date}）",
        )
        urls = upload_images(ctx.uploader, charts, _base_key(user_id, now))
        blocks = build_daily_blocks(report, urls["stacked"], urls["pie"], now)
        post_blocks(blocks, webhook_url=ctx.webhook_url, client=ctx.client)
    finally:
        cleanup_files(charts.values())

    log.info("Sent daily report", user=user_id)


def send_hourly_report(
    user_id: str,
    now: Optional[datetime] = None,
    ctx: Optional[ReportContext] = None,
) -> None:
    """Send the report for the hour containing `now`."""
    now = now or datetime.now()
    ctx = ctx or ReportContext.from_config()
    log.info("Building hourly report", user=user_id, hour=now.hour)

    report = build_hourly_report(user_id, now, db_path=ctx.db_path)

    charts: dict[str, Path] = {}
    try:
        charts["trend"] = ctx.engine.render_hourly_stacked_bar_chart(
            report.trend_labels,
            report.trend_stacks,
            f"直近{len(report.trend_labels)}時間のアプリ使用履歴",
            USAGE_AXIS_LABEL,
            HOUR_AXIS_LABEL,
        )
        charts["pie"] = ctx.engine.render_pie_chart(
            [app.name for app in report.top_apps],
            [app.time for app in report.top_apps],
            f"{report.current_hour}時台のアプリ使用分布",
        )
        urls = upload_images(ctx.uploader, charts, _base_key(user_id, now))
        blocks = build_hourly_blocks(report, urls["trend"], urls["pie"], now)
        post_blocks(blocks, webhook_url=ctx.webhook_url, client=ctx.client)
    finally:
        cleanup_files(charts.values())

    log.info("Sent hourly report", user=user_id)


def send_weekly_report(
    user_id: str,
    now: Optional[datetime] = None,
    ctx: Optional[ReportContext] = None,
) -> None:
    """Send the 7-day report ending today."""
    now = now or datetime.now()
    ctx = ctx or ReportContext.from_config()
    log.info("Building weekly report", user=user_id)

    report = build_weekly_report(user_id, now, db_path=ctx.db_path)

    charts: dict[str, Path] = {}
    try:
        charts["hourly"] = ctx.engine.render_hourly_stacked_bar_chart(
            report.hour_labels,
            report.hourly_stacks,
            "直近24時間のアプリ使用履歴",
            USAGE_AXIS_LABEL,
            HOUR_AXIS_LABEL,
        )
        charts["line"] = ctx.engine.render_line_chart(
            report.dates,
            report.usage_times,
            "過去7日間の使用時間推移",
            USAGE_AXIS_LABEL,
            DATE_AXIS_LABEL,
        )
        urls = upload_images(ctx.uploader, charts, _base_key(user_id, now))
        blocks = build_weekly_blocks(report, urls["hourly"], urls["line"], now)
        post_blocks(blocks, webhook_url=ctx.webhook_url, client=ctx.client)
    finally:
        cleanup_files(charts.values())

    log.info("Sent weekly report", user=user_id)


_SENDERS: dict[str, Callable[..., None]] = {
    "hourly": send_hourly_report,
    "daily": send_daily_report,
    "weekly": send_weekly_report,
}


def active_window(kind: str, now: datetime) -> tuple[date, date]:
    """Date range whose users receive a report of this kind."""
    today = now.date()
    if kind == "hourly":
        return today - timedelta(days=1), today
    if kind == "daily":
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday
    if kind == "weekly":
        return today - timedelta(days=6), today
    raise ValueError(f"Unknown report kind: {kind!r}. Must be one of {REPORT_KINDS}")


async def send_to_all_users(
    kind: str,
    now: Optional[datetime] = None,
    ctx: Optional[ReportContext] = None,
) -> ReportRunResult:
    """Send one report kind to every active user concurrently.

    A failure for one user is logged and counted; it never stops the
    others. Errors listing the active users propagate.
    """
    if kind not in _SENDERS:
        raise ValueError(f"Unknown report kind: {kind!r}. Must be one of {REPORT_KINDS}")

    now = now or datetime.now()
    ctx = ctx or ReportContext.from_config()
    send = _SENDERS[kind]

    start, end = active_window(kind, now)
    users = get_active_users(start, end, db_path=ctx.db_path)
    log.info(f"Sending {kind} reports", users=len(users))

    results = await asyncio.gather(
        *(asyncio.to_thread(send, user_id, now, ctx) for user_id in users),
        return_exceptions=True,
    )

    failed = 0
    for user_id, result in zip(users, results):
        if isinstance(result, BaseException):
            failed += 1
            log.error(f"{kind} report failed: {result}", user=user_id)

    outcome = ReportRunResult(total=len(users), success=len(users) - failed, failed=failed)
    log.info(
        f"Finished {kind} reports",
        total=outcome.total,
        success=outcome.success,
        failed=outcome.failed,
    )
    return outcome
