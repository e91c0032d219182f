"""Time helpers shared by dispatch and reporting."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from console.core.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime.

    SQLite drops tzinfo on read, so naive values coming back from the
    database are treated as UTC, which is how they were written.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def business_tz() -> tzinfo:
    return ZoneInfo(settings.business_timezone)


def local_day_window(start: date, end: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return inclusive ``[start 00:00:00, end 23:59:59.999999]`` bounds in ``tz``."""
    window_start = datetime.combine(start, time.min, tzinfo=tz)
    window_end = datetime.combine(end, time.max, tzinfo=tz)
    return window_start, window_end


def default_report_range(today: date) -> tuple[date, date]:
    """Reporting range used when the operator has not picked one: last 7 days through today."""
    return today - timedelta(days=7), today
