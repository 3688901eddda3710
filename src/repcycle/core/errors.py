"""
Error kinds raised by the progression engine.

Every mutation validates its preconditions before touching state, so when
one of these is raised the caller can assume nothing was changed.
"""


class ProgressionError(Exception):
    """Base class for all progression failures surfaced to the caller."""

    pass


class EmptyCycleOrPlan(ProgressionError):
    """Advancement attempted with zero valid cycle items or plan days."""

    pass


class HasCompletedSets(ProgressionError):
    """Day change refused because the workout already has completed sets."""

    pass


class DayIndexOutOfRange(ProgressionError):
    """Requested plan day does not exist in the resolved plan."""

    def __init__(self, day_index: int, total_days: int):
        super().__init__(
            f"Day {day_index} is out of range (plan has {total_days} day(s))"
        )
        self.day_index = day_index
        self.total_days = total_days


class DanglingPlanReference(ProgressionError):
    """A referenced plan no longer exists and could not be skipped."""

    pass


class StorageFailure(ProgressionError):
    """Wraps an error from the storage collaborator."""

    pass
