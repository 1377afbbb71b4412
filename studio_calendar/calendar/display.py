"""Session display formatting.

Consistent labels for sessions across the calendar views, agenda and CLI.
Names are fixed English abbreviations so output does not depend on the
process locale.
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from studio_calendar.calendar.day_keys import add_days, to_local
from studio_calendar.calendar.types import Session, SessionStatus

WEEKDAY_ABBR = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

STATUS_LABELS = {
    SessionStatus.SCHEDULED: "Scheduled",
    SessionStatus.IN_PROGRESS: "In Progress",
    SessionStatus.COMPLETED: "Completed",
    SessionStatus.CANCELLED: "Cancelled",
}

UNKNOWN_CLIENT = "Unknown Client"
NO_ROOM = "No Room"
UNKNOWN_ENGINEER = "Unknown Engineer"


def _localize(instant: datetime, tz: ZoneInfo | None) -> datetime:
    return to_local(instant, tz) if tz is not None else instant


def format_clock(instant: datetime, use_24_hour: bool = False, with_period: bool = True) -> str:
    """Format a wall-clock time as "2:05 PM", "14:05" or "2:05"."""
    if use_24_hour:
        return f"{instant.hour:02d}:{instant.minute:02d}"
    hour12 = instant.hour % 12 or 12
    label = f"{hour12}:{instant.minute:02d}"
    if not with_period:
        return label
    period = "AM" if instant.hour < 12 else "PM"
    return f"{label} {period}"


def format_hour_label(hour: int) -> str:
    """Label of an hour row, e.g. "12 AM" or "3 PM"."""
    hour12 = hour % 12 or 12
    period = "AM" if hour < 12 else "PM"
    return f"{hour12} {period}"


def format_day_label(d: date, include_year: bool = False) -> str:
    """Format a date as "Tue, Mar 12" (optionally ", 2025")."""
    label = f"{WEEKDAY_ABBR[d.weekday()]}, {MONTH_ABBR[d.month - 1]} {d.day}"
    if include_year:
        label = f"{label}, {d.year}"
    return label


def client_name(session: Session) -> str:
    return session.client.name if session.client and session.client.name else UNKNOWN_CLIENT


def room_name(session: Session) -> str | None:
    return session.room.name if session.room and session.room.name else None


def format_session_title(session: Session) -> str:
    """Format a session title as "Client Name - Room Name"."""
    return f"{client_name(session)} - {room_name(session) or NO_ROOM}"


def format_session_time(
    session: Session,
    tz: ZoneInfo | None = None,
    use_24_hour: bool = False,
    include_date: bool = False,
) -> str:
    """Format a session time range.

    Args:
        session: Session to format
        tz: Timezone to display in; the stored offset is used when omitted
        use_24_hour: Use "14:00" instead of "2:00 PM"
        include_date: Prefix with the start date, e.g. "Mar 12 • "

    Returns:
        Formatted range, e.g. "2:00 PM - 4:00 PM"
    """
    start = _localize(session.start_time, tz)
    end = _localize(session.end_time, tz)
    time_range = f"{format_clock(start, use_24_hour)} - {format_clock(end, use_24_hour)}"
    if include_date:
        return f"{MONTH_ABBR[start.month - 1]} {start.day} • {time_range}"
    return time_range


def format_start_time(session: Session, tz: ZoneInfo | None = None) -> str:
    return format_clock(_localize(session.start_time, tz))


def format_session_day(session: Session, tz: ZoneInfo | None = None, include_year: bool = False) -> str:
    """Format the local start day of a session, e.g. "Tue, Mar 12"."""
    return format_day_label(_localize(session.start_time, tz).date(), include_year=include_year)


def format_session_compact(session: Session, tz: ZoneInfo | None = None) -> str:
    """Format as "Client Name\\nRoom | Time Range" for narrow cells."""
    return f"{client_name(session)}\n{room_name(session) or NO_ROOM} | {format_session_time(session, tz)}"


def format_session_with_engineer(session: Session, tz: ZoneInfo | None = None) -> str:
    """Format title, engineer and time range on two lines."""
    title = format_session_title(session)
    time_range = format_session_time(session, tz)
    if session.engineer:
        engineer = session.engineer.full_name or session.engineer.email or UNKNOWN_ENGINEER
        return f"{title}\n{engineer} | {time_range}"
    return f"{title}\n{time_range}"


def format_session_date(session: Session, today: date, tz: ZoneInfo | None = None) -> str:
    """Format the start day relative to today: "Today", "Tomorrow" or "Mon, Jan 15"."""
    start_date = _localize(session.start_time, tz).date()
    if start_date == today:
        return "Today"
    if start_date == add_days(today, 1):
        return "Tomorrow"
    return format_day_label(start_date)


def status_label(status: SessionStatus) -> str:
    return STATUS_LABELS.get(status, "Scheduled")
