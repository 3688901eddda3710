"""
Tests for calendar-day normalization.

A transition hour of 3 means 02:59 still belongs to yesterday's workout.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from repcycle.core.clock import FixedClock
from repcycle.core.dates import (
    add_days,
    days_between,
    is_same_day,
    is_same_workout_day,
    normalized_calendar_day,
    start_of_month,
    start_of_week,
    today_workout_date,
    validate_transition_hour,
    weekday_index,
)


class TestTransitionHour:
    """Boundary behavior around the transition hour."""

    def test_before_transition_hour_is_previous_day(self):
        assert normalized_calendar_day(datetime(2026, 3, 10, 2, 0), 3) == date(2026, 3, 9)

    def test_after_transition_hour_is_same_day(self):
        assert normalized_calendar_day(datetime(2026, 3, 10, 4, 0), 3) == date(2026, 3, 10)

    def test_exactly_at_transition_hour_is_same_day(self):
        assert normalized_calendar_day(datetime(2026, 3, 10, 3, 0), 3) == date(2026, 3, 10)

    def test_one_minute_before_transition_hour(self):
        assert normalized_calendar_day(datetime(2026, 3, 10, 2, 59), 3) == date(2026, 3, 9)

    @pytest.mark.parametrize("hour", range(24))
    def test_zero_transition_hour_keeps_every_hour_on_its_day(self, hour):
        ts = datetime(2026, 3, 10, hour, 30)
        assert normalized_calendar_day(ts, 0) == date(2026, 3, 10)

    def test_crosses_month_and_year_boundary(self):
        assert normalized_calendar_day(datetime(2027, 1, 1, 1, 0), 3) == date(2026, 12, 31)

    def test_plain_date_passes_through(self):
        assert normalized_calendar_day(date(2026, 3, 10), 5) == date(2026, 3, 10)

    def test_aware_timestamp_is_converted_to_local(self):
        ts = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
        assert normalized_calendar_day(ts, 0) == ts.astimezone().date()

    def test_same_input_same_output(self):
        ts = datetime(2026, 3, 10, 2, 15)
        assert normalized_calendar_day(ts, 3) == normalized_calendar_day(ts, 3)

    @pytest.mark.parametrize("hour", [-1, 24, 100])
    def test_invalid_transition_hour_rejected(self, hour):
        with pytest.raises(ValueError):
            validate_transition_hour(hour)

    def test_today_workout_date_uses_clock(self):
        clock = FixedClock(datetime(2026, 3, 10, 1, 0))
        assert today_workout_date(clock, 3) == date(2026, 3, 9)
        clock.advance(hours=3)
        assert today_workout_date(clock, 3) == date(2026, 3, 10)


class TestDayArithmetic:
    """Day equality, differences and offsets."""

    def test_is_same_day(self):
        assert is_same_day(datetime(2026, 3, 10, 0, 1), datetime(2026, 3, 10, 23, 59))
        assert not is_same_day(datetime(2026, 3, 10, 23, 59), datetime(2026, 3, 11, 0, 0))

    def test_is_same_workout_day_across_midnight(self):
        late = datetime(2026, 3, 10, 23, 0)
        after_midnight = datetime(2026, 3, 11, 2, 0)
        assert is_same_workout_day(late, after_midnight, 3)
        assert not is_same_workout_day(late, after_midnight, 0)

    def test_days_between_is_signed(self):
        assert days_between(date(2026, 3, 10), date(2026, 3, 13)) == 3
        assert days_between(date(2026, 3, 13), date(2026, 3, 10)) == -3
        assert days_between(date(2026, 3, 10), date(2026, 3, 10)) == 0

    def test_days_between_ignores_time_of_day(self):
        assert days_between(datetime(2026, 3, 10, 23, 0), datetime(2026, 3, 11, 1, 0)) == 1

    def test_add_days(self):
        assert add_days(date(2026, 2, 27), 2) == date(2026, 3, 1)
        assert add_days(date(2026, 3, 1), -1) == date(2026, 2, 28)


class TestWeekHelpers:
    """Weekday index (Monday = 0) and period starts."""

    def test_weekday_index_monday_is_zero(self):
        # 2026-03-09 is a Monday
        assert weekday_index(date(2026, 3, 9)) == 0

    def test_weekday_index_sunday_is_six(self):
        assert weekday_index(date(2026, 3, 15)) == 6

    def test_weekday_index_matches_python_weekday(self):
        start = date(2026, 3, 1)
        for offset in range(14):
            d = start + timedelta(days=offset)
            assert weekday_index(d) == d.weekday()

    def test_start_of_week_is_monday(self):
        assert start_of_week(date(2026, 3, 12)) == date(2026, 3, 9)
        assert start_of_week(date(2026, 3, 9)) == date(2026, 3, 9)
        assert start_of_week(date(2026, 3, 15)) == date(2026, 3, 9)

    def test_start_of_month(self):
        assert start_of_month(date(2026, 3, 17)) == date(2026, 3, 1)
