"""Clock collaborator: supplies "now" so date-dependent logic stays testable."""

from datetime import datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Local wall-clock time."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """
    A clock frozen at a given instant.

    ``advance`` moves it forward, which is how tests walk across calendar days.
    """

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.instant = self.instant + timedelta(days=days, hours=hours)
