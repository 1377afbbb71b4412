"""Clock sources and the week view current-time indicator.

The indicator is refreshed on a fixed interval rather than on every render.
The clock is injected so tests can advance time deterministically.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Protocol
from zoneinfo import ZoneInfo

from studio_calendar.calendar.day_keys import format_day_key, to_local
from studio_calendar.calendar.display import format_clock


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Manually driven clock for tests and offline rendering."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    def advance(self, **kwargs: float) -> None:
        self._instant += timedelta(**kwargs)


@dataclass(frozen=True)
class NowIndicator:
    """Horizontal current-time line across the week grid."""

    date_key: str
    total_minutes: int
    top_px: float
    time_label: str


def compute_now_indicator(now: datetime, tz: ZoneInfo, px_per_minute: float) -> NowIndicator:
    local = to_local(now, tz)
    total_minutes = local.hour * 60 + local.minute
    return NowIndicator(
        date_key=format_day_key(local.date()),
        total_minutes=total_minutes,
        top_px=total_minutes * px_per_minute,
        time_label=format_clock(local, with_period=False),
    )


class NowIndicatorTicker:
    """Current-time reading refreshed every `interval_seconds`.

    The cached reading is replaced when the clock has advanced by at least
    the interval since the last refresh, or when the pixel scale changes.

    Thread-safe: one ticker is shared by all requests of a process.
    """

    def __init__(self, clock: Clock, interval_seconds: int = 60):
        self.clock = clock
        self.interval = timedelta(seconds=interval_seconds)
        self._read_at: datetime | None = None
        self._reading: datetime | None = None
        self._px_per_minute: float | None = None
        self._tz: ZoneInfo | None = None
        self._indicator: NowIndicator | None = None
        self._lock = Lock()

    def current(self, tz: ZoneInfo, px_per_minute: float) -> NowIndicator:
        with self._lock:
            now = self.clock.now()
            stale = self._read_at is None or now - self._read_at >= self.interval or now < self._read_at
            if stale:
                self._read_at = now
                self._reading = now

            if stale or self._indicator is None or px_per_minute != self._px_per_minute or tz != self._tz:
                self._px_per_minute = px_per_minute
                self._tz = tz
                self._indicator = compute_now_indicator(self._reading, tz, px_per_minute)
            return self._indicator
