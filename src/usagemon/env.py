"""Environment variable parsing and configuration."""

import os
from pathlib import Path
from typing import Optional


def get_str(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get string env var."""
    return os.environ.get(key, default)


def get_int(key: str, default: int) -> int:
    """Get integer env var."""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


def get_bool(key: str, default: bool = False) -> bool:
    """Get boolean env var (0/1, true/false, yes/no)."""
    val = os.environ.get(key, "").lower()
    if not val:
        return default
    return val in ("1", "true", "yes", "on")


def get_float(key: str, default: float) -> float:
    """Get float env var."""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        return default


def get_path(key: str, default: str) -> Path:
    """Get path env var, expanding user and making absolute."""
    val = os.environ.get(key, default)
    return Path(val).expanduser().resolve()


class Config:
    """Configuration loaded from environment variables."""

    def __init__(self):
        self.usage_debug = get_bool("USAGE_DEBUG", False)

        # Paths
        self.state_dir = get_path("STATE_DIR", "./data/state")
        self.out_dir = get_path("OUT_DIR", "./out")
        self.chart_tmp_dir = get_path("CHART_TMP_DIR", str(self.out_dir / "tmp"))
        self.public_dir = get_path("PUBLIC_DIR", str(self.out_dir / "public"))

        # Publishing
        self.public_base_url = get_str("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")
        self.slack_webhook_url = get_str("SLACK_WEBHOOK_URL")
        self.slack_timeout_s = get_float("SLACK_TIMEOUT_S", 10.0)

        # Report shape
        self.report_top_apps = get_int("REPORT_TOP_APPS", 5)
        self.report_trend_hours = get_int("REPORT_TREND_HOURS", 6)


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
