"""Month grid builder.

The grid is seven columns wide with Sunday first. Leading cells from the
previous month align day 1 with its weekday; the last week is not padded.
Sessions are placed in the cell of their start day only.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from zoneinfo import ZoneInfo

from loguru import logger

from studio_calendar.calendar.day_keys import add_days, day_key, format_day_key
from studio_calendar.calendar.types import CalendarCell, Session

WEEKDAY_HEADERS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass(frozen=True)
class MonthGrid:
    year: int
    month: int
    leading_padding: int
    cells: tuple[CalendarCell, ...]

    @property
    def weeks(self) -> list[tuple[CalendarCell, ...]]:
        """Cells chunked into rows of seven (the last row may be short)."""
        return [self.cells[i : i + 7] for i in range(0, len(self.cells), 7)]


def sunday_first_weekday(d: date) -> int:
    """Weekday index with Sunday = 0 and Saturday = 6."""
    return (d.weekday() + 1) % 7


def bucket_sessions_by_day(sessions: Iterable[Session], tz: ZoneInfo) -> dict[str, list[Session]]:
    """Group sessions by the day key of their start, keeping input order."""
    grouped: dict[str, list[Session]] = {}
    for session in sessions:
        grouped.setdefault(day_key(session.start_time, tz), []).append(session)
    return grouped


def build_month_grid(
    year: int,
    month: int,
    sessions: Iterable[Session],
    tz: ZoneInfo,
    today: date | None = None,
    max_visible: int = 3,
) -> MonthGrid:
    """Build the month view grid.

    Args:
        year: Calendar year
        month: Month number, 1-12
        sessions: Sessions to place; not filtered by date range
        tz: Studio timezone used for day keys
        today: Local date flagged as today (optional)
        max_visible: Sessions shown per cell before the overflow count

    Returns:
        MonthGrid with leading padding cells followed by one cell per day

    Raises:
        ValueError: If month is outside 1-12
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}. Expected 1-12")

    first_day = date(year, month, 1)
    days_in_month = calendar.monthrange(year, month)[1]
    leading = sunday_first_weekday(first_day)
    by_day = bucket_sessions_by_day(sessions, tz)

    cells: list[CalendarCell] = []
    for offset in range(leading, 0, -1):
        padding_date = add_days(first_day, -offset)
        cells.append(
            CalendarCell(
                date=padding_date,
                date_key=format_day_key(padding_date),
                is_current_month=False,
                is_today=padding_date == today,
                is_padding=True,
            )
        )

    for day in range(1, days_in_month + 1):
        cell_date = date(year, month, day)
        key = format_day_key(cell_date)
        day_sessions = tuple(by_day.get(key, ()))
        cells.append(
            CalendarCell(
                date=cell_date,
                date_key=key,
                sessions=day_sessions,
                visible_sessions=day_sessions[:max_visible],
                overflow_count=max(0, len(day_sessions) - max_visible),
                is_today=cell_date == today,
            )
        )

    logger.debug(
        f"[CALENDAR] Built month grid {year}-{month:02d}: {len(cells)} cells, "
        f"{sum(len(c.sessions) for c in cells)} sessions placed"
    )
    return MonthGrid(year=year, month=month, leading_padding=leading, cells=tuple(cells))
