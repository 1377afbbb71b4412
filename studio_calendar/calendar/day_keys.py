"""Day-key helpers for studio-local calendar arithmetic.

Every grouping in the calendar uses the same rule: a day key is the
`YYYY-MM-DD` of the instant's local date in the studio timezone.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger

from studio_calendar.config.settings import settings


def resolve_timezone(name: str | None) -> ZoneInfo:
    """Get a ZoneInfo for an IANA timezone name.

    Args:
        name: IANA timezone identifier (e.g. "America/New_York")

    Returns:
        ZoneInfo for the name, or for the configured default if the name is
        empty or unknown
    """
    if not name:
        return ZoneInfo(settings.default_timezone)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"[CALENDAR] Unknown timezone '{name}', falling back to {settings.default_timezone}")
        return ZoneInfo(settings.default_timezone)


def to_local(instant: datetime, tz: ZoneInfo) -> datetime:
    """Convert an instant to studio-local time (naive inputs are UTC)."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(tz)


def format_day_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def day_key(instant: datetime, tz: ZoneInfo) -> str:
    """Get the local calendar-day key of an instant."""
    return format_day_key(to_local(instant, tz).date())


def date_from_key(key: str) -> date:
    return date.fromisoformat(key)


def minutes_since_local_midnight(instant: datetime, tz: ZoneInfo) -> int:
    """Minutes elapsed since local midnight, seconds truncated."""
    local = to_local(instant, tz)
    return local.hour * 60 + local.minute


def local_midnight(d: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(d, time.min, tzinfo=tz)


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)
