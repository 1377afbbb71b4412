"""Tests for the month grid builder."""

from datetime import date
from zoneinfo import ZoneInfo

import pytest

from studio_calendar.calendar.month_grid import bucket_sessions_by_day, build_month_grid, sunday_first_weekday

UTC_TZ = ZoneInfo("UTC")


class TestMonthGridLayout:
    def test_leap_february_2024(self):
        """Feb 2024 starts on Thursday: 4 leading cells, then 29 days."""
        grid = build_month_grid(2024, 2, [], UTC_TZ)
        assert grid.leading_padding == 4
        assert len(grid.cells) == 33

        padding = grid.cells[:4]
        assert [c.date for c in padding] == [date(2024, 1, 28), date(2024, 1, 29), date(2024, 1, 30), date(2024, 1, 31)]
        assert all(c.is_padding and not c.is_current_month for c in padding)

        days = grid.cells[4:]
        assert [c.date.day for c in days] == list(range(1, 30))
        assert all(c.is_current_month and not c.is_padding for c in days)

    def test_month_starting_on_sunday_has_no_padding(self):
        """September 2024 starts on a Sunday."""
        grid = build_month_grid(2024, 9, [], UTC_TZ)
        assert grid.leading_padding == 0
        assert grid.cells[0].date == date(2024, 9, 1)
        assert len(grid.cells) == 30

    def test_last_week_is_not_padded(self):
        grid = build_month_grid(2024, 2, [], UTC_TZ)
        assert grid.cells[-1].date == date(2024, 2, 29)
        weeks = grid.weeks
        assert len(weeks) == 5
        assert len(weeks[-1]) == 5

    def test_january_padding_comes_from_previous_year(self):
        """Jan 2025 starts on Wednesday."""
        grid = build_month_grid(2025, 1, [], UTC_TZ)
        assert [c.date for c in grid.cells[:3]] == [date(2024, 12, 29), date(2024, 12, 30), date(2024, 12, 31)]

    def test_today_is_flagged(self):
        grid = build_month_grid(2024, 2, [], UTC_TZ, today=date(2024, 2, 14))
        flagged = [c.date for c in grid.cells if c.is_today]
        assert flagged == [date(2024, 2, 14)]

    @pytest.mark.parametrize("month", [0, 13])
    def test_invalid_month_raises(self, month):
        with pytest.raises(ValueError, match="Invalid month"):
            build_month_grid(2024, month, [], UTC_TZ)

    def test_sunday_first_weekday(self):
        assert sunday_first_weekday(date(2024, 3, 10)) == 0  # Sunday
        assert sunday_first_weekday(date(2024, 3, 16)) == 6  # Saturday


class TestMonthGridBucketing:
    def test_session_lands_in_start_day_cell(self, make_session):
        session = make_session("s1", "2024-02-10T15:00:00Z", "2024-02-10T17:00:00Z")
        grid = build_month_grid(2024, 2, [session], UTC_TZ)
        cell = next(c for c in grid.cells if c.date_key == "2024-02-10")
        assert cell.sessions == (session,)

    def test_multi_day_session_appears_once(self, make_session):
        session = make_session("s1", "2024-02-10T22:00:00Z", "2024-02-12T02:00:00Z")
        grid = build_month_grid(2024, 2, [session], UTC_TZ)
        holders = [c.date_key for c in grid.cells if session in c.sessions]
        assert holders == ["2024-02-10"]

    def test_every_session_in_exactly_one_cell(self, make_session):
        sessions = [
            make_session(f"s{day}", f"2024-02-{day:02d}T10:00:00Z", f"2024-02-{day:02d}T11:00:00Z")
            for day in (1, 5, 5, 29)
        ]
        grid = build_month_grid(2024, 2, sessions, UTC_TZ)
        placed = [s for c in grid.cells for s in c.sessions]
        assert len(placed) == len(sessions)

    def test_bucketing_uses_studio_timezone(self, make_session):
        """03:00 UTC on Feb 10 is the evening of Feb 9 in New York."""
        session = make_session("s1", "2024-02-10T03:00:00Z", "2024-02-10T04:00:00Z")
        grid = build_month_grid(2024, 2, [session], ZoneInfo("America/New_York"))
        cell = next(c for c in grid.cells if c.sessions)
        assert cell.date_key == "2024-02-09"

    def test_padding_cells_have_no_sessions(self, make_session):
        session = make_session("s1", "2024-01-30T10:00:00Z", "2024-01-30T11:00:00Z")
        grid = build_month_grid(2024, 2, [session], UTC_TZ)
        assert all(not c.sessions for c in grid.cells)

    def test_overflow_after_three_visible(self, make_session):
        sessions = [
            make_session(f"s{i}", f"2024-02-10T{10 + i:02d}:00:00Z", f"2024-02-10T{10 + i:02d}:30:00Z") for i in range(5)
        ]
        grid = build_month_grid(2024, 2, sessions, UTC_TZ)
        cell = next(c for c in grid.cells if c.date_key == "2024-02-10")
        assert [s.id for s in cell.visible_sessions] == ["s0", "s1", "s2"]
        assert cell.overflow_count == 2
        assert len(cell.sessions) == 5

    def test_custom_visible_limit(self, make_session):
        sessions = [make_session(f"s{i}", "2024-02-10T10:00:00Z", "2024-02-10T11:00:00Z") for i in range(2)]
        grid = build_month_grid(2024, 2, sessions, UTC_TZ, max_visible=1)
        cell = next(c for c in grid.cells if c.date_key == "2024-02-10")
        assert len(cell.visible_sessions) == 1
        assert cell.overflow_count == 1

    def test_bucket_sessions_by_day_keeps_order(self, make_session):
        first = make_session("b", "2024-02-10T18:00:00Z", "2024-02-10T19:00:00Z")
        second = make_session("a", "2024-02-10T08:00:00Z", "2024-02-10T09:00:00Z")
        assert [s.id for s in bucket_sessions_by_day([first, second], UTC_TZ)["2024-02-10"]] == ["b", "a"]
