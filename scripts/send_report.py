#!/usr/bin/env python3
"""
Send phone usage reports to every active user.

Run from cron, one invocation per report kind:

    0 * * * *   send_report.py hourly
    5 0 * * *   send_report.py daily
    10 0 * * 1  send_report.py weekly

Exits non-zero when any user's report fails.
"""

import asyncio
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from usagemon.db import init_db
from usagemon.reporter import REPORT_KINDS, send_to_all_users
from usagemon import log


def main() -> int:
    """Main entry point."""
    if len(sys.argv) != 2 or sys.argv[1].lower() not in REPORT_KINDS:
        print(f"Usage: {sys.argv[0]} [{'|'.join(REPORT_KINDS)}]")
        return 2

    kind = sys.argv[1].lower()
    init_db()

    result = asyncio.run(send_to_all_users(kind))
    if result.total == 0:
        log.warn(f"No active users for {kind} report")

    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
