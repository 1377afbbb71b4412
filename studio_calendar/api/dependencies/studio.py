"""FastAPI dependencies for the request's user, studio and calendar engine.

Authentication happens upstream; the resolved user ID arrives in the
X-User-Id header. The selected studio comes from the `current_studio_id`
cookie (web) or the X-Studio-Id header (API clients).
"""

from __future__ import annotations

from fastapi import Cookie, Header

from studio_calendar.calendar.engine import CalendarEngine

CURRENT_STUDIO_COOKIE = "current_studio_id"

_engine: CalendarEngine | None = None


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str | None:
    return x_user_id or None


def get_current_studio_id(
    current_studio_id: str | None = Cookie(default=None),
    x_studio_id: str | None = Header(default=None),
) -> str | None:
    """Get the selected studio, preferring the header over the cookie."""
    return x_studio_id or current_studio_id or None


def get_calendar_engine() -> CalendarEngine:
    """Get the process-wide calendar engine (shares the now-indicator ticker)."""
    global _engine
    if _engine is None:
        _engine = CalendarEngine()
    return _engine
