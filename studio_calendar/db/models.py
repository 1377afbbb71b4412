from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""


class Studio(Base):
    """Studio tenant.

    Stores:
    - id: Studio ID (string UUID format)
    - name: Display name
    - timezone: IANA timezone used for all calendar day boundaries (nullable, UTC when unset)
    """

    __tablename__ = "studios"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String, nullable=False)
    timezone: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)


class StudioUser(Base):
    """Membership of a user in a studio."""

    __tablename__ = "studio_users"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    studio_id: Mapped[str] = mapped_column(String, ForeignKey("studios.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    role: Mapped[str] = mapped_column(String, nullable=False, default="member")

    __table_args__ = (UniqueConstraint("studio_id", "user_id", name="uq_studio_users_studio_user"),)


class Profile(Base):
    """User profile; engineers on sessions reference it."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    full_name: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    studio_id: Mapped[str] = mapped_column(String, ForeignKey("studios.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)


class Client(Base):
    """Client (artist) of a studio."""

    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    studio_id: Mapped[str] = mapped_column(String, ForeignKey("studios.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)


class StudioSession(Base):
    """Booked studio session.

    start_time and end_time are stored as timezone-aware instants. SQLite
    drops the offset, so readers must treat naive values as UTC.
    """

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    studio_id: Mapped[str] = mapped_column(String, ForeignKey("studios.id", ondelete="CASCADE"), nullable=False)
    room_id: Mapped[str | None] = mapped_column(String, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True)
    client_id: Mapped[str | None] = mapped_column(String, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True)
    engineer_id: Mapped[str | None] = mapped_column(String, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="scheduled")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    room: Mapped[Room | None] = relationship(lazy="joined")
    client: Mapped[Client | None] = relationship(lazy="joined")
    engineer: Mapped[Profile | None] = relationship(lazy="joined")

    __table_args__ = (
        Index("idx_sessions_studio_id", "studio_id"),
        Index("idx_sessions_start_time", "start_time"),
        Index("idx_sessions_status", "status"),
    )
