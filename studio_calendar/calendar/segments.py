"""Split sessions into per-day segments for the week grid.

A session from 23:00 to 01:00 the next day becomes two segments:
`[1380, 1440)` on the first day and `[0, 60)` on the second. Segments of one
session never overlap and leave no gap between consecutive days.
"""

from __future__ import annotations

from collections.abc import Iterable
from zoneinfo import ZoneInfo

from studio_calendar.calendar.day_keys import add_days, format_day_key, minutes_since_local_midnight, to_local
from studio_calendar.calendar.types import MINUTES_PER_DAY, Session, SessionSegment


def segment_session(session: Session, tz: ZoneInfo) -> list[SessionSegment]:
    """Split a session into one segment per local calendar day it touches.

    Args:
        session: Session to split
        tz: Studio timezone defining local days

    Returns:
        Segments ordered by day. Empty for zero-length or inverted sessions.
    """
    if session.end_time <= session.start_time:
        return []

    start_local = to_local(session.start_time, tz)
    end_local = to_local(session.end_time, tz)
    start_day = format_day_key(start_local.date())
    end_day = format_day_key(end_local.date())

    segments: list[SessionSegment] = []
    cursor = start_local.date()
    while True:
        cursor_key = format_day_key(cursor)
        is_start_day = cursor_key == start_day
        is_end_day = cursor_key == end_day

        start_minutes = minutes_since_local_midnight(session.start_time, tz) if is_start_day else 0
        end_minutes = minutes_since_local_midnight(session.end_time, tz) if is_end_day else MINUTES_PER_DAY

        # A session ending exactly at local midnight yields an empty trailing slice
        if end_minutes > start_minutes:
            segments.append(
                SessionSegment(
                    session=session,
                    date_key=cursor_key,
                    start_minutes=start_minutes,
                    end_minutes=end_minutes,
                    is_start_day=is_start_day,
                )
            )

        if is_end_day:
            break
        cursor = add_days(cursor, 1)

    return segments


def segments_by_day(sessions: Iterable[Session], tz: ZoneInfo) -> dict[str, list[SessionSegment]]:
    """Group the segments of all sessions by day key, keeping input order."""
    grouped: dict[str, list[SessionSegment]] = {}
    for session in sessions:
        for segment in segment_session(session, tz):
            grouped.setdefault(segment.date_key, []).append(segment)
    return grouped
