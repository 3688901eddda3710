"""
Calendar-day normalization.

A workout "day" does not end at midnight: with a transition hour of 3, a set
logged at 02:00 still belongs to the previous calendar day.  Everything here
is a pure function of (timestamp, transition_hour); aware datetimes are first
converted to local time, naive ones are taken as local wall-clock.
"""

from datetime import date, datetime, timedelta

from .clock import Clock
from .config import MAX_TRANSITION_HOUR, MIN_TRANSITION_HOUR

CalendarDay = date


def validate_transition_hour(transition_hour: int) -> int:
    """Return *transition_hour* if it lies in 0..23, else raise ValueError."""
    if not MIN_TRANSITION_HOUR <= transition_hour <= MAX_TRANSITION_HOUR:
        raise ValueError(
            f"transition_hour must be between {MIN_TRANSITION_HOUR} and "
            f"{MAX_TRANSITION_HOUR}, got {transition_hour}"
        )
    return transition_hour


def _local(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is not None:
        return timestamp.astimezone()
    return timestamp


def normalized_calendar_day(
    timestamp: datetime | date, transition_hour: int = 0
) -> CalendarDay:
    """
    Map a timestamp to the calendar day it counts towards.

    Args:
        timestamp: Wall-clock instant (a plain date is returned unchanged)
        transition_hour: Hour (0-23) at which the workout day rolls over

    Returns:
        The previous calendar day if the local hour is before
        ``transition_hour``, otherwise the timestamp's own date.
    """
    if not isinstance(timestamp, datetime):
        return timestamp
    local = _local(timestamp)
    if local.hour < transition_hour:
        return local.date() - timedelta(days=1)
    return local.date()


def today_workout_date(clock: Clock, transition_hour: int) -> CalendarDay:
    """The workout day that "now" belongs to."""
    return normalized_calendar_day(clock.now(), transition_hour)


def is_same_day(a: datetime | date, b: datetime | date) -> bool:
    return normalized_calendar_day(a) == normalized_calendar_day(b)


def is_same_workout_day(a: datetime, b: datetime, transition_hour: int) -> bool:
    return normalized_calendar_day(a, transition_hour) == normalized_calendar_day(
        b, transition_hour
    )


def days_between(start: datetime | date, end: datetime | date) -> int:
    """Signed number of whole calendar days from *start* to *end*."""
    return (normalized_calendar_day(end) - normalized_calendar_day(start)).days


def add_days(day: CalendarDay, days: int) -> CalendarDay:
    return day + timedelta(days=days)


def weekday_index(day: datetime | date) -> int:
    """
    Weekday index with Monday = 0 … Sunday = 6.

    Computed from the Sunday = 1 … Saturday = 7 numbering as
    ``(weekday + 5) % 7``.
    """
    sunday_first = normalized_calendar_day(day).isoweekday() % 7 + 1
    return (sunday_first + 5) % 7


def start_of_week(day: datetime | date) -> CalendarDay:
    """Monday of the ISO week containing *day*."""
    d = normalized_calendar_day(day)
    return d - timedelta(days=weekday_index(d))


def start_of_month(day: datetime | date) -> CalendarDay:
    return normalized_calendar_day(day).replace(day=1)
