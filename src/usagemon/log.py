"""Timestamped print logging with optional key=value context."""

import sys
from datetime import datetime
from typing import Any

from .env import get_config


def _ts() -> str:
    """Get current timestamp string."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def _line(level: str, msg: str, fields: dict[str, Any]) -> str:
    """Build one log line: timestamp, optional level tag, message, context."""
    prefix = f"[{_ts()}] {level}: " if level else f"[{_ts()}] "
    if not fields:
        return prefix + msg
    context = " ".join(f"{key}={value}" for key, value in fields.items())
    return f"{prefix}{msg} ({context})"


def info(msg: str, **fields: Any) -> None:
    """Print info message to stdout."""
    print(_line("", msg, fields))


def debug(msg: str, **fields: Any) -> None:
    """Print debug message if USAGE_DEBUG is enabled."""
    if get_config().usage_debug:
        print(_line("DEBUG", msg, fields))


def error(msg: str, **fields: Any) -> None:
    """Print error message to stderr."""
    print(_line("ERROR", msg, fields), file=sys.stderr)


def warn(msg: str, **fields: Any) -> None:
    """Print warning message to stderr."""
    print(_line("WARN", msg, fields), file=sys.stderr)
