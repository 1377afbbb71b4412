from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# ============================================================================
# Shared Schemas
# ============================================================================


class CalendarSessionOut(BaseModel):
    """A studio session with its display labels."""

    id: str = Field(description="Unique session identifier")
    start_time: datetime = Field(description="Session start (ISO 8601, UTC offset)")
    end_time: datetime = Field(description="Session end (ISO 8601, UTC offset)")
    status: str = Field(description="Session status: scheduled | in_progress | completed | cancelled")
    status_label: str = Field(description="Human readable status")
    title: str = Field(description="'Client - Room' title")
    time_label: str = Field(description="Local time range, e.g. '2:00 PM - 4:00 PM'")
    client_name: str | None = Field(default=None, description="Client name, if any")
    room_name: str | None = Field(default=None, description="Room name, if any")
    engineer_name: str | None = Field(default=None, description="Engineer full name or email, if any")
    highlighted: bool = Field(default=False, description="Whether this session is highlighted")


class RejectedSessionOut(BaseModel):
    session_id: str | None = Field(default=None, description="ID of the rejected row, when readable")
    reason: str = Field(description="Why the row was not rendered")


# ============================================================================
# Month View
# ============================================================================


class MonthCellSessionOut(BaseModel):
    id: str
    start_label: str = Field(description="Local start time, e.g. '2:00 PM'")
    title: str
    tooltip: str = Field(description="Title and time range")
    highlighted: bool = False


class MonthCellOut(BaseModel):
    date: str = Field(description="ISO 8601 date (YYYY-MM-DD)")
    day_number: int
    is_current_month: bool
    is_today: bool
    is_padding: bool
    sessions: list[MonthCellSessionOut] = Field(description="Visible sessions (at most the configured maximum)")
    total_sessions: int
    overflow_count: int
    more_label: str | None = Field(default=None, description="'+N more' when sessions overflow")


class CalendarMonthResponse(BaseModel):
    """Response for GET /calendar/month."""

    view: str = "month"
    month_label: str
    year: int
    month: int
    timezone: str
    weekday_headers: list[str]
    leading_padding: int
    cells: list[MonthCellOut]
    highlight_session_id: str | None = None
    rejected: list[RejectedSessionOut] = Field(default_factory=list)


# ============================================================================
# Week View
# ============================================================================


class WeekBlockOut(BaseModel):
    session_id: str
    start_minutes: int
    end_minutes: int
    top_px: float
    height_px: float
    is_continuation: bool = Field(description="Segment on a day after the session's start day")
    title: str
    client_label: str
    room_label: str | None = None
    time_label: str | None = None
    highlighted: bool = False


class WeekDayOut(BaseModel):
    date: str = Field(description="ISO 8601 date (YYYY-MM-DD)")
    weekday_label: str
    day_number: int
    is_today: bool
    blocks: list[WeekBlockOut]


class TimeSlotOut(BaseModel):
    hour: int
    label: str


class NowIndicatorOut(BaseModel):
    date: str
    total_minutes: int
    top_px: float
    time_label: str


class CalendarWeekResponse(BaseModel):
    """Response for GET /calendar/week."""

    view: str = "week"
    month_label: str
    year: int
    week_start: str = Field(description="ISO 8601 date of week start (Sunday)")
    week_end: str = Field(description="ISO 8601 date of week end (Saturday)")
    timezone: str
    row_height_px: float
    px_per_minute: float
    time_slots: list[TimeSlotOut]
    days: list[WeekDayOut]
    now_indicator: NowIndicatorOut
    highlight_session_id: str | None = None
    rejected: list[RejectedSessionOut] = Field(default_factory=list)


# ============================================================================
# Sessions (Agenda) View
# ============================================================================


class DayGroupOut(BaseModel):
    day_label: str = Field(description="Day header, e.g. 'Tue, Mar 12'")
    date: str
    sessions: list[CalendarSessionOut]


class CalendarSessionsResponse(BaseModel):
    """Response for GET /calendar/sessions."""

    view: str = "sessions"
    timezone: str
    groups: list[DayGroupOut]
    total: int
    highlight_session_id: str | None = None
    rejected: list[RejectedSessionOut] = Field(default_factory=list)
