"""
Time-related utilities for the application.

All timestamps are generated in UTC. Human-readable values use ISO-8601
with timezone information; token expiries use integer epoch milliseconds.
"""

from datetime import datetime, timedelta, timezone
import time


def utc_now_iso() -> str:
    """Return current UTC time in ISO-8601 format.

    Example:
        2024-01-15T10:42:31.123456+00:00
    """
    return datetime.now(timezone.utc).isoformat()


def now_ms() -> int:
    """Return current wall-clock time as epoch milliseconds."""
    return time.time_ns() // 1_000_000


def ms_to_iso(epoch_ms: int) -> str:
    """Format epoch milliseconds as an ISO-8601 UTC timestamp.

    Example:
        1700000000000 -> 2023-11-14T22:13:20.000Z
    """
    seconds, millis = divmod(epoch_ms, 1000)
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc) + timedelta(
        milliseconds=millis
    )
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
