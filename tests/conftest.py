"""Root fixtures for all tests."""

import os
from datetime import date, datetime
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Clear usagemon env vars and reset config singleton before each test."""
    env_prefixes = (
        "USAGE_",
        "STATE_DIR",
        "OUT_DIR",
        "CHART_",
        "PUBLIC_",
        "SLACK_",
        "REPORT_",
    )

    for key in list(os.environ.keys()):
        for prefix in env_prefixes:
            if key.startswith(prefix):
                monkeypatch.delenv(key, raising=False)
                break

    # Reset config singleton
    import usagemon.env

    usagemon.env._config = None

    yield

    # Reset again after test
    usagemon.env._config = None


@pytest.fixture
def tmp_state_dir(tmp_path):
    """Create temp directory for the database."""
    state_dir = tmp_path / "state"
    state_dir.mkdir()
    return state_dir


@pytest.fixture
def tmp_out_dir(tmp_path):
    """Create temp directory for rendered output."""
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    return out_dir


@pytest.fixture
def configured_env(tmp_state_dir, tmp_out_dir, monkeypatch):
    """Set up test environment with temp directories."""
    monkeypatch.setenv("STATE_DIR", str(tmp_state_dir))
    monkeypatch.setenv("OUT_DIR", str(tmp_out_dir))
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://img.example.com/")
    monkeypatch.setenv("SLACK_WEBHOOK_URL", "https://hooks.example.com/services/T/B/X")
    # Reset config to pick up new values
    import usagemon.env

    usagemon.env._config = None
    return {"state_dir": tmp_state_dir, "out_dir": tmp_out_dir}


@pytest.fixture
def project_root():
    """Path to the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def db_path(tmp_state_dir):
    """Database path in temp state directory."""
    return tmp_state_dir / "usage.db"


@pytest.fixture
def initialized_db(db_path, configured_env):
    """Fresh database with migrations applied."""
    from usagemon.db import init_db

    init_db(db_path)
    return db_path


@pytest.fixture
def report_day():
    """Fixed report day so date arithmetic is reproducible."""
    return date(2024, 5, 14)


@pytest.fixture
def report_now(report_day):
    """10:30 on the report day."""
    return datetime(report_day.year, report_day.month, report_day.day, 10, 30)


@pytest.fixture
def populated_db(initialized_db, report_day):
    """Database with two users and a known usage pattern.

    alice on the report day:
      9時:  YouTube 30, LINE 10
      10時: YouTube 20, Chrome 5
      21時: LINE 40
    alice the day before:
      9時:  YouTube 15
      10時: LINE 10
    alice daily summaries for the previous 13 days (60 min each for the
    older week, 90 min each for the recent one).
    bob only has one row 3 days before the report day.
    """
    from datetime import timedelta

    from usagemon.db import insert_usage, upsert_daily_summary

    db = initialized_db
    day = report_day
    prev = day - timedelta(days=1)

    insert_usage("alice", day, 9, "YouTube", 30, 3, db_path=db)
    insert_usage("alice", day, 9, "LINE", 10, 5, db_path=db)
    insert_usage("alice", day, 10, "YouTube", 20, 1, db_path=db)
    insert_usage("alice", day, 10, "Chrome", 5, 2, db_path=db)
    insert_usage("alice", day, 21, "LINE", 40, 8, db_path=db)

    insert_usage("alice", prev, 9, "YouTube", 15, 1, db_path=db)
    insert_usage("alice", prev, 10, "LINE", 10, 2, db_path=db)

    for offset in range(1, 14):
        total = 90.0 if offset <= 6 else 60.0
        upsert_daily_summary("alice", day - timedelta(days=offset), total, db_path=db)

    insert_usage("bob", day - timedelta(days=3), 12, "Maps", 12, 1, db_path=db)

    return db
