"""Navigation anchors for the week and month views."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from studio_calendar.calendar.day_keys import add_days
from studio_calendar.calendar.display import MONTH_NAMES
from studio_calendar.calendar.types import ViewMode
from studio_calendar.calendar.week_grid import week_start_for


@dataclass(frozen=True)
class WeekAnchor:
    """Sunday starting the displayed week."""

    week_start: date

    def __post_init__(self) -> None:
        if week_start_for(self.week_start) != self.week_start:
            raise ValueError(f"Week anchor must be a Sunday, got {self.week_start}")

    @classmethod
    def containing(cls, d: date) -> WeekAnchor:
        return cls(week_start=week_start_for(d))

    def previous(self) -> WeekAnchor:
        return WeekAnchor(add_days(self.week_start, -7))

    def next(self) -> WeekAnchor:
        return WeekAnchor(add_days(self.week_start, 7))

    @staticmethod
    def today(today: date) -> WeekAnchor:
        return WeekAnchor.containing(today)


@dataclass(frozen=True)
class MonthAnchor:
    """Displayed month (1-12) and year."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Invalid month: {self.month}. Expected 1-12")

    def previous(self) -> MonthAnchor:
        if self.month == 1:
            return MonthAnchor(self.year - 1, 12)
        return MonthAnchor(self.year, self.month - 1)

    def next(self) -> MonthAnchor:
        if self.month == 12:
            return MonthAnchor(self.year + 1, 1)
        return MonthAnchor(self.year, self.month + 1)

    @staticmethod
    def today(today: date) -> MonthAnchor:
        return MonthAnchor(today.year, today.month)


def header_label(view: ViewMode, anchor: WeekAnchor | MonthAnchor | None = None) -> tuple[str, int | None]:
    """Get the (month name, year) shown above the calendar.

    The week view is labelled by the month of its Sunday. The sessions view
    has no date range and shows ("Calendar", None).
    """
    if view == ViewMode.WEEK and isinstance(anchor, WeekAnchor):
        return MONTH_NAMES[anchor.week_start.month - 1], anchor.week_start.year
    if view == ViewMode.MONTH and isinstance(anchor, MonthAnchor):
        return MONTH_NAMES[anchor.month - 1], anchor.year
    return "Calendar", None
