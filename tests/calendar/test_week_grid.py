"""Tests for the week grid builder and its pixel geometry."""

from datetime import date
from zoneinfo import ZoneInfo

import pytest

from studio_calendar.calendar.clock import FixedClock
from studio_calendar.calendar.week_grid import (
    PixelScale,
    block_geometry,
    build_time_slots,
    build_week_grid,
    week_start_for,
)

UTC_TZ = ZoneInfo("UTC")


class TestPixelScale:
    def test_default_row_height(self):
        scale = PixelScale()
        assert scale.row_height_px == 80.0
        assert scale.px_per_minute == pytest.approx(4 / 3)

    def test_small_change_keeps_scale(self):
        scale = PixelScale(80.0)
        assert scale.remeasure(80.4) is scale

    def test_change_above_threshold_rescales(self):
        scale = PixelScale(80.0).remeasure(96.0)
        assert scale.row_height_px == 96.0
        assert scale.px_per_minute == pytest.approx(1.6)

    @pytest.mark.parametrize("measured", [0.0, -10.0])
    def test_non_positive_measurement_is_ignored(self, measured):
        scale = PixelScale(80.0)
        assert scale.remeasure(measured) is scale


class TestBlockGeometry:
    def test_top_and_height(self):
        top, height = block_geometry(60, 120, PixelScale(60.0))
        assert top == 60
        assert height == 59

    def test_height_never_negative(self):
        _, height = block_geometry(100, 100, PixelScale(60.0))
        assert height == 0

    def test_one_minute_block_at_small_scale(self):
        _, height = block_geometry(0, 1, PixelScale(30.0))
        assert height == 0


class TestWeekHelpers:
    @pytest.mark.parametrize(
        ("day", "expected"),
        [
            (date(2024, 3, 10), date(2024, 3, 10)),
            (date(2024, 3, 13), date(2024, 3, 10)),
            (date(2024, 3, 16), date(2024, 3, 10)),
            (date(2024, 3, 1), date(2024, 2, 25)),
        ],
    )
    def test_week_start_for(self, day, expected):
        assert week_start_for(day) == expected

    def test_time_slots(self):
        slots = build_time_slots()
        assert len(slots) == 24
        assert [slots[0].label, slots[11].label, slots[12].label, slots[23].label] == ["12 AM", "11 AM", "12 PM", "11 PM"]


class TestBuildWeekGrid:
    def test_seven_sunday_first_columns(self, fixed_now):
        grid = build_week_grid(date(2024, 3, 10), [], UTC_TZ, clock=FixedClock(fixed_now))
        assert grid.week_end == date(2024, 3, 16)
        assert [d.weekday_label for d in grid.days] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        assert [d.day_number for d in grid.days] == list(range(10, 17))
        assert [d.date_key for d in grid.days if d.is_today] == ["2024-03-13"]
        assert len(grid.time_slots) == 24

    def test_cross_midnight_session_renders_two_blocks(self, make_session, fixed_now):
        """A session 22:30 to 00:30 UTC splits at midnight into two positioned blocks."""
        session = make_session("a", "2024-03-10T22:30:00Z", "2024-03-11T00:30:00Z")
        grid = build_week_grid(date(2024, 3, 10), [session], UTC_TZ, clock=FixedClock(fixed_now))
        sunday, monday = grid.days[0], grid.days[1]

        assert len(sunday.blocks) == 1
        first = sunday.blocks[0]
        assert (first.start_minutes, first.end_minutes) == (1350, 1440)
        assert first.top_px == pytest.approx(1800)
        assert first.height_px == pytest.approx(119)
        assert first.is_continuation is False
        assert first.room_label == "Studio A"
        assert first.time_label == "10:30 PM - 12:30 AM"
        assert first.title == "Nova - Studio A"

        assert len(monday.blocks) == 1
        second = monday.blocks[0]
        assert (second.start_minutes, second.end_minutes) == (0, 30)
        assert second.top_px == 0
        assert second.height_px == pytest.approx(39)
        assert second.is_continuation is True
        assert second.client_label == "Nova"
        assert second.room_label is None
        assert second.time_label is None

        assert all(not d.blocks for d in grid.days[2:])

    def test_sessions_outside_week_are_ignored(self, make_session, fixed_now):
        session = make_session("s1", "2024-03-20T10:00:00Z", "2024-03-20T11:00:00Z")
        grid = build_week_grid(date(2024, 3, 10), [session], UTC_TZ, clock=FixedClock(fixed_now))
        assert all(not d.blocks for d in grid.days)

    def test_multiple_sessions_same_day_keep_input_order(self, make_session, fixed_now):
        later = make_session("later", "2024-03-12T15:00:00Z", "2024-03-12T16:00:00Z")
        earlier = make_session("earlier", "2024-03-12T09:00:00Z", "2024-03-12T10:00:00Z")
        grid = build_week_grid(date(2024, 3, 10), [later, earlier], UTC_TZ, clock=FixedClock(fixed_now))
        assert [b.session_id for b in grid.days[2].blocks] == ["later", "earlier"]

    def test_scale_changes_geometry(self, make_session, fixed_now):
        session = make_session("s1", "2024-03-12T01:00:00Z", "2024-03-12T02:00:00Z")
        grid = build_week_grid(date(2024, 3, 10), [session], UTC_TZ, scale=PixelScale(60.0), clock=FixedClock(fixed_now))
        block = grid.days[2].blocks[0]
        assert block.top_px == 60
        assert block.height_px == 59
        assert grid.px_per_minute == 1

    def test_highlight_flag(self, make_session, fixed_now):
        one = make_session("one", "2024-03-12T09:00:00Z", "2024-03-12T10:00:00Z")
        two = make_session("two", "2024-03-12T11:00:00Z", "2024-03-12T12:00:00Z")
        grid = build_week_grid(
            date(2024, 3, 10), [one, two], UTC_TZ, clock=FixedClock(fixed_now), highlight_session_id="two"
        )
        assert {b.session_id: b.highlighted for b in grid.days[2].blocks} == {"one": False, "two": True}

    def test_missing_client_and_room_labels(self, make_session, fixed_now):
        session = make_session("s1", "2024-03-12T09:00:00Z", "2024-03-12T10:00:00Z", client=None, room=None)
        grid = build_week_grid(date(2024, 3, 10), [session], UTC_TZ, clock=FixedClock(fixed_now))
        block = grid.days[2].blocks[0]
        assert block.client_label == "Unknown Client"
        assert block.room_label is None
        assert block.title == "Unknown Client - No Room"

    def test_studio_timezone_shifts_columns(self, make_session, fixed_now):
        """02:00 UTC Tuesday is 22:00 Monday in New York (EDT, UTC-4)."""
        session = make_session("s1", "2024-03-12T02:00:00Z", "2024-03-12T03:00:00Z")
        grid = build_week_grid(
            date(2024, 3, 10), [session], ZoneInfo("America/New_York"), clock=FixedClock(fixed_now)
        )
        monday = grid.days[1]
        assert [(b.start_minutes, b.end_minutes) for b in monday.blocks] == [(22 * 60, 23 * 60)]

    def test_now_indicator(self, fixed_now):
        grid = build_week_grid(date(2024, 3, 10), [], UTC_TZ, clock=FixedClock(fixed_now))
        indicator = grid.now_indicator
        assert indicator.date_key == "2024-03-13"
        assert indicator.total_minutes == 14 * 60 + 30
        assert indicator.top_px == pytest.approx(870 * 4 / 3)
        assert indicator.time_label == "2:30"
