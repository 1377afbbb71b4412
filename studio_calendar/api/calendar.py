"""Calendar API endpoints.

Month, week and sessions (agenda) views of the selected studio. Sessions
are loaded for the standard fetch window (widened to cover the requested
period), validated, and rendered by the calendar engine in the studio's
timezone.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from sqlalchemy.orm import Session as DbSession

from studio_calendar.api.dependencies.studio import get_calendar_engine, get_current_studio_id, get_current_user_id
from studio_calendar.api.schemas.calendar import (
    CalendarMonthResponse,
    CalendarSessionOut,
    CalendarSessionsResponse,
    CalendarWeekResponse,
    DayGroupOut,
    MonthCellOut,
    MonthCellSessionOut,
    NowIndicatorOut,
    RejectedSessionOut,
    TimeSlotOut,
    WeekBlockOut,
    WeekDayOut,
)
from studio_calendar.calendar.day_keys import resolve_timezone, to_local
from studio_calendar.calendar.display import (
    client_name,
    format_session_time,
    format_session_title,
    format_start_time,
    room_name,
    status_label,
)
from studio_calendar.calendar.engine import CalendarEngine, MonthViewModel, SessionsViewModel, WeekViewModel
from studio_calendar.calendar.errors import CalendarError, ErrorKind
from studio_calendar.calendar.ingest import IngestResult
from studio_calendar.calendar.month_grid import WEEKDAY_HEADERS
from studio_calendar.calendar.navigation import MonthAnchor, WeekAnchor
from studio_calendar.calendar.repository import ensure_membership, fetch_window, get_sessions, get_studio_timezone
from studio_calendar.calendar.types import Session, ViewMode
from studio_calendar.db.session import get_db

router = APIRouter(prefix="/calendar", tags=["calendar"])


@contextmanager
def _calendar_errors(endpoint: str, studio_id: str | None) -> Iterator[None]:
    """Map calendar errors to HTTP responses with a flat {error, message} detail.

    Log records inside the block are tagged with the requested studio.
    """
    try:
        with logger.contextualize(studio=studio_id or "-"):
            yield
    except HTTPException:
        raise
    except CalendarError as e:
        logger.info(f"[CALENDAR] {endpoint} rejected: {e.kind} {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.to_dict()) from e
    except Exception as e:
        logger.exception(f"[CALENDAR] Error in {endpoint}: {e!r}")
        raise HTTPException(
            status_code=500,
            detail={"error": str(ErrorKind.DATABASE_ERROR), "message": f"Failed to load calendar: {e!s}"},
        ) from e


def _load(
    db: DbSession,
    engine: CalendarEngine,
    studio_id: str | None,
    user_id: str | None,
    period: tuple[date, date] | None = None,
) -> tuple[IngestResult, str]:
    """Load sessions for the fetch window (widened to cover period) and the studio timezone."""
    studio_id = ensure_membership(db, studio_id, user_id)
    start, end = fetch_window(engine.clock.now().date())
    if period is not None:
        # Sessions are selected by start time; reach back far enough to catch
        # sessions that began before the period and run into it
        start = min(start, period[0] - timedelta(days=engine.config.max_session_days))
        end = max(end, period[1] + timedelta(days=1))
    result = get_sessions(db, studio_id, user_id, start.isoformat(), end.isoformat())
    return result, get_studio_timezone(db, studio_id)


def _rejected_out(result: IngestResult) -> list[RejectedSessionOut]:
    return [RejectedSessionOut(session_id=r.session_id, reason=r.reason) for r in result.rejected]


def _session_out(session: Session, timezone: str, highlight_session_id: str | None) -> CalendarSessionOut:
    tz = resolve_timezone(timezone)
    engineer = None
    if session.engineer:
        engineer = session.engineer.full_name or session.engineer.email
    return CalendarSessionOut(
        id=session.id,
        start_time=session.start_time,
        end_time=session.end_time,
        status=str(session.status),
        status_label=status_label(session.status),
        title=format_session_title(session),
        time_label=format_session_time(session, tz),
        client_name=client_name(session) if session.client else None,
        room_name=room_name(session),
        engineer_name=engineer,
        highlighted=session.id == highlight_session_id,
    )


def _parse_week_start(value: str | None) -> WeekAnchor | None:
    if value is None:
        return None
    try:
        return WeekAnchor.containing(date.fromisoformat(value))
    except ValueError as e:
        raise CalendarError(ErrorKind.VALIDATION_ERROR, "Invalid week_start. Expected YYYY-MM-DD") from e


def _month_response(model: MonthViewModel, timezone: str, result: IngestResult) -> CalendarMonthResponse:
    tz = resolve_timezone(timezone)
    highlight = model.highlight_session_id
    cells = [
        MonthCellOut(
            date=cell.date_key,
            day_number=cell.date.day,
            is_current_month=cell.is_current_month,
            is_today=cell.is_today,
            is_padding=cell.is_padding,
            sessions=[
                MonthCellSessionOut(
                    id=s.id,
                    start_label=format_start_time(s, tz),
                    title=format_session_title(s),
                    tooltip=f"{format_session_title(s)} • {format_session_time(s, tz)}",
                    highlighted=s.id == highlight,
                )
                for s in cell.visible_sessions
            ],
            total_sessions=len(cell.sessions),
            overflow_count=cell.overflow_count,
            more_label=f"+{cell.overflow_count} more" if cell.overflow_count else None,
        )
        for cell in model.grid.cells
    ]
    return CalendarMonthResponse(
        month_label=model.month_label,
        year=model.year,
        month=model.anchor.month,
        timezone=timezone,
        weekday_headers=list(WEEKDAY_HEADERS),
        leading_padding=model.grid.leading_padding,
        cells=cells,
        highlight_session_id=highlight,
        rejected=_rejected_out(result),
    )


def _week_response(model: WeekViewModel, timezone: str, result: IngestResult) -> CalendarWeekResponse:
    grid = model.grid
    days = [
        WeekDayOut(
            date=day.date_key,
            weekday_label=day.weekday_label,
            day_number=day.day_number,
            is_today=day.is_today,
            blocks=[
                WeekBlockOut(
                    session_id=b.session_id,
                    start_minutes=b.start_minutes,
                    end_minutes=b.end_minutes,
                    top_px=b.top_px,
                    height_px=b.height_px,
                    is_continuation=b.is_continuation,
                    title=b.title,
                    client_label=b.client_label,
                    room_label=b.room_label,
                    time_label=b.time_label,
                    highlighted=b.highlighted,
                )
                for b in day.blocks
            ],
        )
        for day in grid.days
    ]
    now = grid.now_indicator
    return CalendarWeekResponse(
        month_label=model.month_label,
        year=model.year,
        week_start=grid.week_start.isoformat(),
        week_end=grid.week_end.isoformat(),
        timezone=timezone,
        row_height_px=grid.scale.row_height_px,
        px_per_minute=grid.px_per_minute,
        time_slots=[TimeSlotOut(hour=slot.hour, label=slot.label) for slot in grid.time_slots],
        days=days,
        now_indicator=NowIndicatorOut(
            date=now.date_key,
            total_minutes=now.total_minutes,
            top_px=now.top_px,
            time_label=now.time_label,
        ),
        highlight_session_id=model.highlight_session_id,
        rejected=_rejected_out(result),
    )


def _sessions_response(model: SessionsViewModel, timezone: str, result: IngestResult) -> CalendarSessionsResponse:
    return CalendarSessionsResponse(
        timezone=timezone,
        groups=[
            DayGroupOut(
                day_label=group.day_label,
                date=group.date_key,
                sessions=[_session_out(s, timezone, model.highlight_session_id) for s in group.sessions],
            )
            for group in model.groups
        ],
        total=model.total,
        highlight_session_id=model.highlight_session_id,
        rejected=_rejected_out(result),
    )


@router.get("/month", response_model=CalendarMonthResponse)
def get_month(
    year: int | None = Query(default=None, ge=1, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    highlight_session_id: str | None = None,
    db: DbSession = Depends(get_db),
    engine: CalendarEngine = Depends(get_calendar_engine),
    user_id: str | None = Depends(get_current_user_id),
    studio_id: str | None = Depends(get_current_studio_id),
):
    """Get the month grid of the selected studio.

    Defaults to the current month in the studio timezone when year or month
    is omitted.
    """
    logger.info(f"[CALENDAR] GET /calendar/month studio={studio_id} year={year} month={month}")
    with _calendar_errors("/calendar/month", studio_id):
        anchor = MonthAnchor(year, month) if year is not None and month is not None else None
        period = None
        if anchor is not None:
            period = (date(anchor.year, anchor.month, 1), date(anchor.next().year, anchor.next().month, 1))
        result, timezone = _load(db, engine, studio_id, user_id, period)
        model = engine.render(result.accepted, ViewMode.MONTH, timezone, anchor, highlight_session_id)
        return _month_response(model, timezone, result)


@router.get("/week", response_model=CalendarWeekResponse)
def get_week(
    week_start: str | None = Query(default=None, description="Any date in the week (YYYY-MM-DD)"),
    highlight_session_id: str | None = None,
    db: DbSession = Depends(get_db),
    engine: CalendarEngine = Depends(get_calendar_engine),
    user_id: str | None = Depends(get_current_user_id),
    studio_id: str | None = Depends(get_current_studio_id),
):
    """Get the week grid (Sunday to Saturday) of the selected studio.

    week_start may be any date; it is normalized to the Sunday on or before
    it. Defaults to the current week in the studio timezone.
    """
    logger.info(f"[CALENDAR] GET /calendar/week studio={studio_id} week_start={week_start}")
    with _calendar_errors("/calendar/week", studio_id):
        anchor = _parse_week_start(week_start)
        period = (anchor.week_start, anchor.week_start + timedelta(days=6)) if anchor else None
        result, timezone = _load(db, engine, studio_id, user_id, period)
        if anchor is None:
            anchor = WeekAnchor.today(to_local(engine.clock.now(), resolve_timezone(timezone)).date())
        model = engine.render(result.accepted, ViewMode.WEEK, timezone, anchor, highlight_session_id)
        return _week_response(model, timezone, result)


@router.get("/sessions", response_model=CalendarSessionsResponse)
def get_sessions_view(
    highlight_session_id: str | None = None,
    db: DbSession = Depends(get_db),
    engine: CalendarEngine = Depends(get_calendar_engine),
    user_id: str | None = Depends(get_current_user_id),
    studio_id: str | None = Depends(get_current_studio_id),
):
    """Get the chronological session list of the selected studio, grouped by day."""
    logger.info(f"[CALENDAR] GET /calendar/sessions studio={studio_id}")
    with _calendar_errors("/calendar/sessions", studio_id):
        result, timezone = _load(db, engine, studio_id, user_id)
        model = engine.render(result.accepted, ViewMode.SESSIONS, timezone, None, highlight_session_id)
        return _sessions_response(model, timezone, result)
