"""Week grid builder.

Seven day columns (Sunday first) by 24 hour rows. Every session segment is
positioned absolutely inside its day column:

    top    = start_minutes * px_per_minute
    height = (end_minutes - start_minutes) * px_per_minute - 1

where px_per_minute = row_height_px / 60. The 1px is the gap between
stacked blocks.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from zoneinfo import ZoneInfo

from loguru import logger

from studio_calendar.calendar.clock import Clock, NowIndicator, NowIndicatorTicker, SystemClock
from studio_calendar.calendar.day_keys import add_days, format_day_key, to_local
from studio_calendar.calendar.display import (
    WEEKDAY_ABBR,
    client_name,
    format_hour_label,
    format_session_time,
    format_session_title,
    room_name,
)
from studio_calendar.calendar.month_grid import sunday_first_weekday
from studio_calendar.calendar.segments import segments_by_day
from studio_calendar.calendar.types import Session, SessionSegment

HOURS_PER_DAY = 24
REMEASURE_THRESHOLD_PX = 0.5


@dataclass(frozen=True)
class PixelScale:
    """Vertical scale of the week grid derived from the hour row height."""

    row_height_px: float = 80.0

    @property
    def px_per_minute(self) -> float:
        return self.row_height_px / 60

    def remeasure(self, measured_px: float) -> PixelScale:
        """Return a scale for a newly measured row height.

        Changes below half a pixel, and non-positive measurements, keep the
        current scale so layout is not recomputed for rounding noise.
        """
        if measured_px <= 0 or abs(self.row_height_px - measured_px) < REMEASURE_THRESHOLD_PX:
            return self
        logger.debug(f"[CALENDAR] Row height changed {self.row_height_px} -> {measured_px}")
        return PixelScale(row_height_px=measured_px)


@dataclass(frozen=True)
class TimeSlot:
    hour: int
    label: str


@dataclass(frozen=True)
class SegmentBlock:
    """An absolutely positioned session block within one day column."""

    session_id: str
    date_key: str
    start_minutes: int
    end_minutes: int
    top_px: float
    height_px: float
    is_continuation: bool
    title: str
    client_label: str
    room_label: str | None
    time_label: str | None
    highlighted: bool = False


@dataclass(frozen=True)
class WeekDayColumn:
    date: date
    date_key: str
    weekday_label: str
    day_number: int
    is_today: bool
    blocks: tuple[SegmentBlock, ...]


@dataclass(frozen=True)
class WeekGrid:
    week_start: date
    week_end: date
    days: tuple[WeekDayColumn, ...]
    time_slots: tuple[TimeSlot, ...]
    scale: PixelScale
    now_indicator: NowIndicator

    @property
    def px_per_minute(self) -> float:
        return self.scale.px_per_minute


def week_start_for(d: date) -> date:
    """Return the Sunday on or before d."""
    return add_days(d, -sunday_first_weekday(d))


def build_time_slots() -> tuple[TimeSlot, ...]:
    return tuple(TimeSlot(hour=hour, label=format_hour_label(hour)) for hour in range(HOURS_PER_DAY))


def block_geometry(start_minutes: int, end_minutes: int, scale: PixelScale) -> tuple[float, float]:
    """Compute (top_px, height_px) of a segment."""
    ppm = scale.px_per_minute
    top = start_minutes * ppm
    height = max(0.0, (end_minutes - start_minutes) * ppm - 1)
    return top, height


def build_segment_block(
    segment: SessionSegment,
    scale: PixelScale,
    tz: ZoneInfo,
    highlight_session_id: str | None = None,
) -> SegmentBlock:
    """Position a segment and pick its labels.

    Continuation days (not the session's start day) only carry the client
    label so a multi-day block is not labelled twice.
    """
    session = segment.session
    top, height = block_geometry(segment.start_minutes, segment.end_minutes, scale)
    is_continuation = not segment.is_start_day
    return SegmentBlock(
        session_id=session.id,
        date_key=segment.date_key,
        start_minutes=segment.start_minutes,
        end_minutes=segment.end_minutes,
        top_px=top,
        height_px=height,
        is_continuation=is_continuation,
        title=format_session_title(session),
        client_label=client_name(session),
        room_label=None if is_continuation else room_name(session),
        time_label=None if is_continuation else format_session_time(session, tz),
        highlighted=highlight_session_id is not None and session.id == highlight_session_id,
    )


def build_week_grid(
    week_start: date,
    sessions: Iterable[Session],
    tz: ZoneInfo,
    scale: PixelScale | None = None,
    clock: Clock | None = None,
    ticker: NowIndicatorTicker | None = None,
    highlight_session_id: str | None = None,
) -> WeekGrid:
    """Build the week view grid.

    Args:
        week_start: Local Sunday starting the week (normalized by the caller)
        sessions: Sessions to place; not filtered by date range
        tz: Studio timezone defining local days
        scale: Pixel scale (defaults to an 80px hour row)
        clock: Clock used for "today" and the now indicator
        ticker: Shared now-indicator ticker; one is created from clock if omitted
        highlight_session_id: Session to flag as highlighted

    Returns:
        WeekGrid with seven day columns and 24 time slots
    """
    scale = scale or PixelScale()
    if ticker is None:
        ticker = NowIndicatorTicker(clock or SystemClock())
    now_indicator = ticker.current(tz, scale.px_per_minute)
    today = to_local(ticker.clock.now(), tz).date()

    grouped = segments_by_day(sessions, tz)

    days: list[WeekDayColumn] = []
    for offset in range(7):
        day = add_days(week_start, offset)
        key = format_day_key(day)
        blocks = tuple(
            build_segment_block(segment, scale, tz, highlight_session_id)
            for segment in grouped.get(key, ())
        )
        days.append(
            WeekDayColumn(
                date=day,
                date_key=key,
                weekday_label=WEEKDAY_ABBR[day.weekday()],
                day_number=day.day,
                is_today=day == today,
                blocks=blocks,
            )
        )

    logger.debug(
        f"[CALENDAR] Built week grid from {week_start}: {sum(len(d.blocks) for d in days)} blocks, "
        f"px_per_minute={scale.px_per_minute:.3f}"
    )
    return WeekGrid(
        week_start=week_start,
        week_end=add_days(week_start, 6),
        days=tuple(days),
        time_slots=build_time_slots(),
        scale=scale,
        now_indicator=now_indicator,
    )
