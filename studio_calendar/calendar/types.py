"""Types shared by the calendar view engine.

`Session` is the validated input record (pydantic, frozen so a tuple of
sessions can key a render cache). Everything else in this module is derived
per render and modelled as frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

MINUTES_PER_DAY = 24 * 60


class SessionStatus(StrEnum):
    """Lifecycle status of a studio session."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ViewMode(StrEnum):
    """Calendar view selecting which grid builder runs."""

    MONTH = "month"
    WEEK = "week"
    SESSIONS = "sessions"


class RoomRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class ClientRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class EngineerRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    full_name: str | None = None
    email: str | None = None


class Session(BaseModel):
    """A scheduled studio session as consumed by the calendar engine."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique session identifier")
    studio_id: str | None = Field(default=None, description="Owning studio")
    room_id: str | None = None
    client_id: str | None = None
    engineer_id: str | None = None
    start_time: datetime = Field(description="Session start (timezone-aware, UTC-anchored)")
    end_time: datetime = Field(description="Session end (timezone-aware, UTC-anchored)")
    status: SessionStatus = Field(default=SessionStatus.SCHEDULED)
    notes: str | None = None
    room: RoomRef | None = None
    client: ClientRef | None = None
    engineer: EngineerRef | None = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: object) -> object:
        """Read the database-only `live` status as in progress."""
        if value == "live":
            return SessionStatus.IN_PROGRESS
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def ensure_aware(cls, value: datetime) -> datetime:
        """Interpret naive timestamps as UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def duration_minutes(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 60.0


@dataclass(frozen=True)
class SessionSegment:
    """The slice of one session that falls within one local calendar day."""

    session: Session
    date_key: str
    start_minutes: int
    end_minutes: int
    is_start_day: bool = True

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes


@dataclass(frozen=True)
class CalendarCell:
    """One cell of the month grid."""

    date: date
    date_key: str
    sessions: tuple[Session, ...] = ()
    visible_sessions: tuple[Session, ...] = ()
    overflow_count: int = 0
    is_current_month: bool = True
    is_today: bool = False
    is_padding: bool = False


@dataclass(frozen=True)
class DayGroup:
    """Sessions sharing one display day in the agenda view."""

    day_label: str
    date_key: str
    sessions: tuple[Session, ...] = field(default_factory=tuple)
