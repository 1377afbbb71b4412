"""Calendar view engine facade.

Turns a session list, a view mode and a navigation anchor into the render
model of that view. The engine only buckets what it is given; callers pick
the fetch window.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Sequence
from dataclasses import dataclass
from threading import Lock
from typing import Any

from loguru import logger

from studio_calendar.calendar.agenda import group_sessions_by_day
from studio_calendar.calendar.clock import Clock, NowIndicatorTicker, SystemClock
from studio_calendar.calendar.day_keys import resolve_timezone, to_local
from studio_calendar.calendar.month_grid import MonthGrid, build_month_grid
from studio_calendar.calendar.navigation import MonthAnchor, WeekAnchor, header_label
from studio_calendar.calendar.types import DayGroup, Session, ViewMode
from studio_calendar.calendar.week_grid import PixelScale, WeekGrid, build_week_grid
from studio_calendar.config.settings import Settings
from studio_calendar.config.settings import settings as default_settings

CACHE_SIZE = 32


@dataclass(frozen=True)
class MonthViewModel:
    month_label: str
    year: int
    anchor: MonthAnchor
    grid: MonthGrid
    highlight_session_id: str | None = None
    view: ViewMode = ViewMode.MONTH


@dataclass(frozen=True)
class WeekViewModel:
    month_label: str
    year: int
    anchor: WeekAnchor
    grid: WeekGrid
    highlight_session_id: str | None = None
    view: ViewMode = ViewMode.WEEK


@dataclass(frozen=True)
class SessionsViewModel:
    groups: tuple[DayGroup, ...]
    total: int
    highlight_session_id: str | None = None
    view: ViewMode = ViewMode.SESSIONS


ViewModel = MonthViewModel | WeekViewModel | SessionsViewModel


class CalendarEngine:
    """Render calendar views for one studio.

    Month and sessions renders are memoized on their inputs. Week renders
    are not, since the now indicator follows the clock.

    One engine is shared by concurrent requests. The cache and the scale are
    only touched under `_lock`; views are built outside it.
    """

    def __init__(
        self,
        config: Settings | None = None,
        clock: Clock | None = None,
        scale: PixelScale | None = None,
    ):
        self.config = config or default_settings
        self.clock = clock or SystemClock()
        self.scale = scale or PixelScale(row_height_px=self.config.week_row_height_px)
        self.ticker = NowIndicatorTicker(self.clock, interval_seconds=self.config.now_refresh_seconds)
        self._cache: OrderedDict[tuple[Any, ...], ViewModel] = OrderedDict()
        self._lock = Lock()

    def remeasure(self, measured_row_height_px: float) -> bool:
        """Apply a measured hour-row height; returns True if the layout scale changed."""
        with self._lock:
            new_scale = self.scale.remeasure(measured_row_height_px)
            changed = new_scale is not self.scale
            self.scale = new_scale
        return changed

    def render(
        self,
        sessions: Sequence[Session],
        view: ViewMode | str,
        timezone: str | None = None,
        anchor: WeekAnchor | MonthAnchor | None = None,
        highlight_session_id: str | None = None,
    ) -> ViewModel:
        """Render one view.

        Args:
            sessions: Validated sessions (see ingest_sessions)
            view: "month", "week" or "sessions"
            timezone: Studio IANA timezone; defaults to the configured default
            anchor: WeekAnchor for week view, MonthAnchor for month view;
                defaults to the period containing today
            highlight_session_id: Session to flag in the render model

        Returns:
            The view model for the requested view

        Raises:
            ValueError: If the view is unknown or the anchor does not match it
        """
        view = ViewMode(view)
        tz = resolve_timezone(timezone)
        today = to_local(self.clock.now(), tz).date()

        if view == ViewMode.WEEK:
            with self._lock:
                scale = self.scale
            if anchor is None:
                anchor = WeekAnchor.today(today)
            if not isinstance(anchor, WeekAnchor):
                raise ValueError("Week view requires a WeekAnchor")
            grid = build_week_grid(
                anchor.week_start,
                sessions,
                tz,
                scale=scale,
                ticker=self.ticker,
                highlight_session_id=highlight_session_id,
            )
            month_label, year = header_label(view, anchor)
            return WeekViewModel(
                month_label=month_label,
                year=year or anchor.week_start.year,
                anchor=anchor,
                grid=grid,
                highlight_session_id=highlight_session_id,
            )

        if view == ViewMode.MONTH:
            if anchor is None:
                anchor = MonthAnchor.today(today)
            if not isinstance(anchor, MonthAnchor):
                raise ValueError("Month view requires a MonthAnchor")
        else:
            anchor = None

        key = (tuple(sessions), view, anchor, tz.key, highlight_session_id, today)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
        if cached is not None:
            logger.debug(f"[CALENDAR] Render cache hit view={view}")
            return cached

        model: ViewModel
        if view == ViewMode.MONTH:
            grid = build_month_grid(
                anchor.year,
                anchor.month,
                sessions,
                tz,
                today=today,
                max_visible=self.config.month_max_visible_sessions,
            )
            month_label, year = header_label(view, anchor)
            model = MonthViewModel(
                month_label=month_label,
                year=year or anchor.year,
                anchor=anchor,
                grid=grid,
                highlight_session_id=highlight_session_id,
            )
        else:
            groups = tuple(group_sessions_by_day(sessions, tz))
            model = SessionsViewModel(groups=groups, total=len(sessions), highlight_session_id=highlight_session_id)

        with self._lock:
            self._cache[key] = model
            self._cache.move_to_end(key)
            while len(self._cache) > CACHE_SIZE:
                self._cache.popitem(last=False)
        logger.debug(f"[CALENDAR] Rendered view={view} sessions={len(sessions)} tz={tz.key}")
        return model
