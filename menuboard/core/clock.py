"""
Menu Board — Time helpers

All persisted timestamps are integer epoch milliseconds (UTC).
"""
import time
from datetime import datetime, timezone


def now_ms() -> int:
    return int(time.time() * 1000)


def today_utc() -> str:
    """Current UTC calendar date as YYYY-MM-DD."""
    return datetime.now(tz=timezone.utc).strftime("%Y-%m-%d")
