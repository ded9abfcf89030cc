"""Tests for report delivery."""

import asyncio
from datetime import date, datetime

import httpx
import pytest

from usagemon.reporter import (
    REPORT_KINDS,
    ReportRunResult,
    active_window,
    send_daily_report,
    send_hourly_report,
    send_to_all_users,
    send_weekly_report,
)

from tests.reporter.conftest import RecordingUploader, WebhookRecorder


def leftover_pngs(directory):
    if not directory.exists():
        return []
    return list(directory.glob("*.png*"))


class TestSendDailyReport:
    """Tests for send_daily_report."""

    def test_reports_previous_day_by_default(self, ctx, webhook, uploader, chart_tmp):
        send_daily_report("alice", now=datetime(2024, 5, 15, 7, 0), ctx=ctx)

        assert len(webhook.payloads) == 1
        blocks = webhook.payloads[0]["blocks"]
        assert "2024年5月14日" in blocks[0]["text"]["text"]
        assert "*総使用時間:* 105.0分" in blocks[1]["text"]["text"]

    def test_uploads_both_charts(self, ctx, webhook, uploader):
        send_daily_report("alice", now=datetime(2024, 5, 15, 7, 0), ctx=ctx)

        assert len(uploader.uploads) == 2
        assert all(key.startswith("reports/alice/") for key in uploader.uploads)
        assert {key.rsplit("/", 1)[1] for key in uploader.uploads} == {"stacked.png", "pie.png"}

        images = [b for b in webhook.payloads[0]["blocks"] if b["type"] == "image"]
        assert [b["image_url"] for b in images] == [
            f"https://img.example.com/{key}" for key in uploader.uploads
        ]

    def test_explicit_day(self, ctx, webhook, report_day):
        send_daily_report("alice", now=datetime(2024, 6, 1), ctx=ctx, day=report_day)
        assert "2024年5月14日" in webhook.payloads[0]["blocks"][0]["text"]["text"]

    def test_temp_files_removed(self, ctx, chart_tmp):
        send_daily_report("alice", now=datetime(2024, 5, 15, 7, 0), ctx=ctx)
        assert leftover_pngs(chart_tmp) == []

    def test_upload_failure_propagates_and_cleans_up(self, make_ctx, webhook, chart_tmp):
        ctx = make_ctx(RecordingUploader(fail_for="alice"), webhook)

        with pytest.raises(RuntimeError):
            send_daily_report("alice", now=datetime(2024, 5, 15, 7, 0), ctx=ctx)

        assert webhook.payloads == []
        assert leftover_pngs(chart_tmp) == []

    def test_webhook_error_propagates_and_cleans_up(self, make_ctx, uploader, chart_tmp):
        ctx = make_ctx(uploader, WebhookRecorder(status_code=500))

        with pytest.raises(httpx.HTTPStatusError):
            send_daily_report("alice", now=datetime(2024, 5, 15, 7, 0), ctx=ctx)

        assert leftover_pngs(chart_tmp) == []


class TestSendHourlyReport:
    """Tests for send_hourly_report."""

    def test_posts_hour_report(self, ctx, webhook, uploader, report_now):
        send_hourly_report("alice", now=report_now, ctx=ctx)

        blocks = webhook.payloads[0]["blocks"]
        assert blocks[0]["text"]["text"] == "⏰ 10時台のスマホ使用レポート"
        assert {key.rsplit("/", 1)[1] for key in uploader.uploads} == {"trend.png", "pie.png"}

    def test_user_without_data_still_posts(self, ctx, webhook, report_now, chart_tmp):
        """Empty charts fall back to placeholders and the message still goes out."""
        send_hourly_report("nobody", now=report_now, ctx=ctx)

        blocks = webhook.payloads[0]["blocks"]
        assert blocks[6]["text"]["text"] == "この時間帯のアプリ使用データはありません"
        assert leftover_pngs(chart_tmp) == []


class TestSendWeeklyReport:
    """Tests for send_weekly_report."""

    def test_posts_weekly_report(self, ctx, webhook, uploader, report_now):
        send_weekly_report("alice", now=report_now, ctx=ctx)

        blocks = webhook.payloads[0]["blocks"]
        assert blocks[0]["text"]["text"] == "📱 スマホ使用時間レポート"
        assert blocks[1]["text"]["text"].startswith("*今週の平均使用時間:* 90.0分/日")
        assert {key.rsplit("/", 1)[1] for key in uploader.uploads} == {"hourly.png", "line.png"}


class TestActiveWindow:
    """Tests for active_window."""

    def test_hourly(self, report_now):
        assert active_window("hourly", report_now) == (date(2024, 5, 13), date(2024, 5, 14))

    def test_daily(self, report_now):
        assert active_window("daily", report_now) == (date(2024, 5, 13), date(2024, 5, 13))

    def test_weekly(self, report_now):
        assert active_window("weekly", report_now) == (date(2024, 5, 8), date(2024, 5, 14))

    def test_unknown(self, report_now):
        with pytest.raises(ValueError):
            active_window("monthly", report_now)


class TestSendToAllUsers:
    """Tests for the concurrent fan-out."""

    def test_all_kinds_known(self):
        assert set(REPORT_KINDS) == {"hourly", "daily", "weekly"}

    def test_weekly_reaches_every_active_user(self, ctx, webhook, report_now):
        result = asyncio.run(send_to_all_users("weekly", now=report_now, ctx=ctx))

        assert result == ReportRunResult(total=2, success=2, failed=0)
        assert len(webhook.payloads) == 2

    def test_daily_only_yesterdays_users(self, ctx, webhook, report_now):
        result = asyncio.run(send_to_all_users("daily", now=report_now, ctx=ctx))
        assert result == ReportRunResult(total=1, success=1, failed=0)

    def test_one_failure_does_not_stop_others(self, make_ctx, webhook, report_now, chart_tmp):
        ctx = make_ctx(RecordingUploader(fail_for="reports/bob/"), webhook)

        result = asyncio.run(send_to_all_users("weekly", now=report_now, ctx=ctx))

        assert result == ReportRunResult(total=2, success=1, failed=1)
        assert len(webhook.payloads) == 1
        assert leftover_pngs(chart_tmp) == []

    def test_failure_logged(self, make_ctx, webhook, report_now, capsys):
        ctx = make_ctx(RecordingUploader(fail_for="reports/bob/"), webhook)

        asyncio.run(send_to_all_users("weekly", now=report_now, ctx=ctx))

        err = capsys.readouterr().err
        assert "weekly report failed" in err
        assert "user=bob" in err

    def test_no_active_users(self, ctx, webhook):
        result = asyncio.run(send_to_all_users("daily", now=datetime(2030, 1, 1), ctx=ctx))
        assert result == ReportRunResult(total=0, success=0, failed=0)
        assert webhook.payloads == []

    def test_unknown_kind(self, ctx):
        with pytest.raises(ValueError):
            asyncio.run(send_to_all_users("monthly", ctx=ctx))
