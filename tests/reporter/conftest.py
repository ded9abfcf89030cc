"""Fixtures for report delivery tests."""

import json
import threading

import httpx
import pytest

from usagemon.charts import ChartEngine
from usagemon.reporter import ReportContext


class RecordingUploader:
    """Uploader that records keys and checks the file exists at upload time."""

    def __init__(self, fail_for=None):
        self.fail_for = fail_for
        self.uploads = []
        self._lock = threading.Lock()

    def upload(self, local_path, destination_key):
        if self.fail_for and self.fail_for in destination_key:
            raise RuntimeError(f"upload refused for {destination_key}")
        assert local_path.exists()
        with self._lock:
            self.uploads.append(destination_key)
        return f"https://img.example.com/{destination_key}"


class WebhookRecorder:
    """httpx MockTransport handler collecting posted payloads."""

    def __init__(self, status_code=200):
        self.status_code = status_code
        self.payloads = []

    def __call__(self, request):
        self.payloads.append(json.loads(request.content))
        return httpx.Response(self.status_code, text="ok")


@pytest.fixture
def uploader():
    return RecordingUploader()


@pytest.fixture
def webhook():
    return WebhookRecorder()


@pytest.fixture
def chart_tmp(tmp_path):
    return tmp_path / "chart_tmp"


@pytest.fixture
def make_ctx(populated_db, chart_tmp):
    """Build a ReportContext around a given uploader and webhook handler."""
    clients = []

    def _make(uploader, webhook):
        client = httpx.Client(transport=httpx.MockTransport(webhook))
        clients.append(client)
        return ReportContext(
            engine=ChartEngine(chart_tmp),
            uploader=uploader,
            webhook_url="https://hooks.example.com/services/T/B/X",
            client=client,
            db_path=populated_db,
        )

    yield _make

    for client in clients:
        client.close()


@pytest.fixture
def ctx(make_ctx, uploader, webhook):
    return make_ctx(uploader, webhook)
