"""Studio-scoped session loading for the calendar.

Loads the sessions of one studio for a date window, after checking that the
requesting user is a member, and validates them for the calendar engine.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Any

from dateutil.relativedelta import relativedelta
from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from studio_calendar.calendar.errors import CalendarError, ErrorKind
from studio_calendar.calendar.ingest import IngestResult, ingest_sessions
from studio_calendar.config.settings import settings
from studio_calendar.db.models import Studio, StudioSession, StudioUser

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def fetch_window(
    today: date,
    months_back: int | None = None,
    months_forward: int | None = None,
) -> tuple[date, date]:
    """Get the (start, end) date range of sessions loaded for the calendar.

    Args:
        today: Reference date
        months_back: Months before today (defaults to FETCH_MONTHS_BACK)
        months_forward: Months after today (defaults to FETCH_MONTHS_FORWARD)

    Returns:
        Inclusive date range
    """
    back = settings.fetch_months_back if months_back is None else months_back
    forward = settings.fetch_months_forward if months_forward is None else months_forward
    return today - relativedelta(months=back), today + relativedelta(months=forward)


def _parse_date_param(value: str | None, name: str) -> date | None:
    if value is None:
        return None
    if not DATE_PATTERN.match(value):
        raise CalendarError(ErrorKind.VALIDATION_ERROR, f"Invalid {name} date format. Expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise CalendarError(ErrorKind.VALIDATION_ERROR, f"Invalid {name} date: {value}") from e


def _session_row(row: StudioSession) -> dict[str, Any]:
    return {
        "id": row.id,
        "studio_id": row.studio_id,
        "room_id": row.room_id,
        "client_id": row.client_id,
        "engineer_id": row.engineer_id,
        "start_time": row.start_time,
        "end_time": row.end_time,
        "status": row.status,
        "notes": row.notes,
        "room": {"id": row.room.id, "name": row.room.name} if row.room else None,
        "client": {"id": row.client.id, "name": row.client.name} if row.client else None,
        "engineer": (
            {"id": row.engineer.id, "full_name": row.engineer.full_name, "email": row.engineer.email}
            if row.engineer
            else None
        ),
    }


def ensure_membership(db: Session, studio_id: str | None, user_id: str | None) -> str:
    """Check the request identity and studio membership.

    Returns:
        The studio ID

    Raises:
        CalendarError: AUTHENTICATION_REQUIRED, NO_STUDIO or NOT_A_MEMBER
    """
    if not user_id:
        raise CalendarError(ErrorKind.AUTHENTICATION_REQUIRED, "You must be logged in to view sessions")
    if not studio_id:
        raise CalendarError(ErrorKind.NO_STUDIO, "No studio selected")

    membership = db.execute(
        select(StudioUser.id).where(StudioUser.studio_id == studio_id, StudioUser.user_id == user_id)
    ).first()
    if membership is None:
        raise CalendarError(ErrorKind.NOT_A_MEMBER, "You are not a member of this studio")
    return studio_id


def get_sessions(
    db: Session,
    studio_id: str | None,
    user_id: str | None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> IngestResult:
    """Load and validate a studio's sessions.

    Sessions are selected by start time: from start_date 00:00 UTC through
    end_date 23:59:59 UTC, ordered by start.

    Args:
        db: Database session
        studio_id: Selected studio
        user_id: Authenticated user
        start_date: Optional inclusive start (YYYY-MM-DD)
        end_date: Optional inclusive end (YYYY-MM-DD)

    Returns:
        IngestResult with accepted and rejected sessions

    Raises:
        CalendarError: On missing identity, membership or malformed dates,
            or if the query fails
    """
    studio_id = ensure_membership(db, studio_id, user_id)
    start = _parse_date_param(start_date, "start")
    end = _parse_date_param(end_date, "end")

    query = select(StudioSession).where(StudioSession.studio_id == studio_id)
    if start is not None:
        query = query.where(StudioSession.start_time >= datetime.combine(start, time.min, tzinfo=timezone.utc))
    if end is not None:
        query = query.where(
            StudioSession.start_time <= datetime.combine(end, time(23, 59, 59), tzinfo=timezone.utc)
        )
    query = query.order_by(StudioSession.start_time.asc())

    try:
        rows = db.execute(query).unique().scalars().all()
    except SQLAlchemyError as e:
        logger.exception(f"[CALENDAR] Failed to fetch sessions for studio={studio_id}: {e!r}")
        raise CalendarError(ErrorKind.DATABASE_ERROR, f"Failed to fetch sessions: {e}") from e

    logger.info(f"[CALENDAR] studio={studio_id} user={user_id} window={start_date}..{end_date} rows={len(rows)}")
    return ingest_sessions(_session_row(row) for row in rows)


def get_studio_timezone(db: Session, studio_id: str) -> str:
    """Get the studio's IANA timezone, or the configured default when unset."""
    result = db.execute(select(Studio.timezone).where(Studio.id == studio_id)).first()
    if result is None or not result[0]:
        return settings.default_timezone
    return result[0]
