"""Root conftest for all tests.

This file makes shared fixtures available across all test modules.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import UTC, datetime
from typing import Any

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session as DbSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from studio_calendar.calendar.types import ClientRef, EngineerRef, RoomRef, Session, SessionStatus
from studio_calendar.db.models import Base


# Enable foreign key constraints for SQLite
@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints in SQLite connections."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _parse(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def make_session() -> Callable[..., Session]:
    """Factory for engine-level Session objects.

    Timestamps may be datetimes or ISO strings ("Z" allowed).
    """

    def _make(
        session_id: str,
        start: datetime | str,
        end: datetime | str,
        client: str | None = "Nova",
        room: str | None = "Studio A",
        engineer: str | None = None,
        status: SessionStatus = SessionStatus.SCHEDULED,
        **extra: Any,
    ) -> Session:
        return Session(
            id=session_id,
            studio_id="studio-1",
            start_time=_parse(start),
            end_time=_parse(end),
            status=status,
            client=ClientRef(id=f"client-{client}", name=client) if client else None,
            room=RoomRef(id=f"room-{room}", name=room) if room else None,
            engineer=EngineerRef(id=f"eng-{engineer}", full_name=engineer) if engineer else None,
            **extra,
        )

    return _make


@pytest.fixture
def fixed_now() -> datetime:
    """Wednesday 2024-03-13 14:30 UTC."""
    return datetime(2024, 3, 13, 14, 30, tzinfo=UTC)


@pytest.fixture
def db_engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine shared across threads (TestClient runs handlers in a threadpool)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine: Engine) -> Generator[DbSession, None, None]:
    """Database session bound to the in-memory engine."""
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_db(db_session: DbSession) -> DbSession:
    """Two studios with rooms, clients and sessions.

    studio-1 (no timezone set, user-1 is a member):
      s1    Sun 2024-03-10 22:30 -> Mon 00:30 UTC, Nova in Studio A
      bad   Tue 2024-03-12 10:00 -> 09:00 UTC (ends before it starts)
      s2    Tue 2024-03-12 14:00 -> 16:00 UTC, Nova in Studio B with Alex
      s3    Wed 2024-05-01 10:00 -> 11:00 UTC, no client or room
    studio-2 (Europe/Berlin, user-2 is a member):
      other Tue 2024-03-12 09:00 -> 10:00 UTC
    """
    from studio_calendar.db.models import Client, Profile, Room, Studio, StudioSession, StudioUser

    def utc(*args: int) -> datetime:
        return datetime(*args, tzinfo=UTC)

    db_session.add_all(
        [
            Studio(id="studio-1", name="Northside"),
            Studio(id="studio-2", name="Southside", timezone="Europe/Berlin"),
        ]
    )
    db_session.flush()
    db_session.add_all(
        [
            StudioUser(studio_id="studio-1", user_id="user-1", role="owner"),
            StudioUser(studio_id="studio-2", user_id="user-2"),
            Room(id="room-a", studio_id="studio-1", name="Studio A"),
            Room(id="room-b", studio_id="studio-1", name="Studio B"),
            Client(id="client-nova", studio_id="studio-1", name="Nova"),
            Profile(id="eng-alex", full_name="Alex", email="alex@example.com"),
        ]
    )
    db_session.flush()
    db_session.add_all(
        [
            StudioSession(
                id="s1",
                studio_id="studio-1",
                room_id="room-a",
                client_id="client-nova",
                start_time=utc(2024, 3, 10, 22, 30),
                end_time=utc(2024, 3, 11, 0, 30),
            ),
            StudioSession(
                id="bad",
                studio_id="studio-1",
                room_id="room-a",
                start_time=utc(2024, 3, 12, 10, 0),
                end_time=utc(2024, 3, 12, 9, 0),
            ),
            StudioSession(
                id="s2",
                studio_id="studio-1",
                room_id="room-b",
                client_id="client-nova",
                engineer_id="eng-alex",
                start_time=utc(2024, 3, 12, 14, 0),
                end_time=utc(2024, 3, 12, 16, 0),
                status="live",
                notes="Vocal tracking",
            ),
            StudioSession(
                id="s3",
                studio_id="studio-1",
                start_time=utc(2024, 5, 1, 10, 0),
                end_time=utc(2024, 5, 1, 11, 0),
            ),
            StudioSession(
                id="other",
                studio_id="studio-2",
                start_time=utc(2024, 3, 12, 9, 0),
                end_time=utc(2024, 3, 12, 10, 0),
            ),
        ]
    )
    db_session.commit()
    return db_session
