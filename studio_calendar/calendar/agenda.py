"""Chronological grouping for the sessions (agenda) view."""

from __future__ import annotations

from collections.abc import Iterable
from zoneinfo import ZoneInfo

from studio_calendar.calendar.day_keys import day_key
from studio_calendar.calendar.display import format_session_day
from studio_calendar.calendar.types import DayGroup, Session


def sort_sessions(sessions: Iterable[Session]) -> list[Session]:
    """Stable sort by start time, earliest first."""
    return sorted(sessions, key=lambda s: s.start_time)


def group_sessions_by_day(
    sessions: Iterable[Session],
    tz: ZoneInfo | None = None,
    include_year: bool = False,
) -> list[DayGroup]:
    """Group sorted sessions into consecutive same-day buckets.

    Multi-day sessions are listed once, under their start day.

    Args:
        sessions: Sessions in any order
        tz: Timezone for day labels; stored offsets are used when omitted
        include_year: Add the year to day labels

    Returns:
        Day groups in chronological order
    """
    groups: list[DayGroup] = []
    current_label: str | None = None
    current_key = ""
    bucket: list[Session] = []

    for session in sort_sessions(sessions):
        label = format_session_day(session, tz, include_year=include_year)
        if label != current_label:
            if current_label is not None:
                groups.append(DayGroup(day_label=current_label, date_key=current_key, sessions=tuple(bucket)))
            current_label = label
            current_key = day_key(session.start_time, tz) if tz is not None else session.start_time.date().isoformat()
            bucket = []
        bucket.append(session)

    if current_label is not None:
        groups.append(DayGroup(day_label=current_label, date_key=current_key, sessions=tuple(bucket)))
    return groups
