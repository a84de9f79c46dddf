"""Exchange-local clock: trading day key and entry window."""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

EXCHANGE_TZ = "America/New_York"


def exchange_time_info(now: Optional[datetime] = None, tz: str = EXCHANGE_TZ) -> Tuple[int, str]:
    """
    Return (minutes past local midnight, 'YYYY-MM-DD' day key) in the
    exchange time zone. Naive datetimes are taken as UTC.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(ZoneInfo(tz))
    return local.hour * 60 + local.minute, local.strftime("%Y-%m-%d")


def trading_day(now: Optional[datetime] = None, tz: str = EXCHANGE_TZ) -> str:
    return exchange_time_info(now, tz)[1]


def entry_window_status(minutes: int, start: int, end: int) -> Optional[str]:
    """None inside [start, end], else 'too-early' / 'too-late'."""
    if minutes < start:
        return "too-early"
    if minutes > end:
        return "too-late"
    return None


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
