"""
Direct logging operations on a workout day.

One WorkoutDay exists per (profile, calendar day); it is looked up before one
is created.  Sets are soft-deleted so they can be restored.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime

from .models import (
    PlanExercise,
    PlannedSet,
    SetMetricType,
    WorkoutDay,
    WorkoutExerciseEntry,
    WorkoutSet,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkoutStatistics:
    completed_sets: int
    exercises_with_sets: int
    total_volume: float


def get_workout_day(store, profile_id: str, day: date) -> WorkoutDay | None:
    return store.find_workout_day(profile_id, day)


def get_or_create_workout_day(store, profile_id: str, day: date) -> WorkoutDay:
    """Return the workout for *day*, creating an empty free-mode one if absent."""
    workout_day = store.find_workout_day(profile_id, day)
    if workout_day is None:
        workout_day = WorkoutDay(profile_id=profile_id, date=day)
        store.insert(workout_day)
        logger.debug("Created workout day %s", day)
    return workout_day


def _entry(workout_day: WorkoutDay, entry_id: str) -> WorkoutExerciseEntry:
    entry = workout_day.find_entry(entry_id)
    if entry is None:
        raise KeyError(f"No exercise entry {entry_id} on {workout_day.date}")
    return entry


def _set(workout_day: WorkoutDay, set_id: str) -> WorkoutSet:
    workout_set = workout_day.find_set(set_id)
    if workout_set is None:
        raise KeyError(f"No set {set_id} on {workout_day.date}")
    return workout_set


def add_entry(
    workout_day: WorkoutDay,
    exercise_id: str,
    metric_type: SetMetricType = "weight_reps",
    planned_set_count: int = 0,
) -> WorkoutExerciseEntry:
    """Append a free (not plan-derived) exercise to the workout."""
    entry = WorkoutExerciseEntry(
        exercise_id=exercise_id,
        order_index=workout_day.next_order_index,
        planned_set_count=planned_set_count,
        source="free",
        metric_type=metric_type,
    )
    if planned_set_count > 0:
        entry.create_placeholder_sets()
    workout_day.add_entry(entry)
    return entry


def remove_entry(workout_day: WorkoutDay, entry_id: str) -> None:
    _entry(workout_day, entry_id)
    workout_day.remove_entry(entry_id)
    for index, entry in enumerate(workout_day.sorted_entries):
        entry.order_index = index


def reorder_entries(workout_day: WorkoutDay, entry_ids: list[str]) -> None:
    """
    Put entries in the order given by *entry_ids*.

    Raises:
        ValueError: If *entry_ids* is not exactly the workout's entry ids
    """
    current = {e.id for e in workout_day.entries}
    if len(entry_ids) != len(current) or set(entry_ids) != current:
        raise ValueError("Entry order must list every entry exactly once")
    for index, entry_id in enumerate(entry_ids):
        workout_day.find_entry(entry_id).order_index = index


def validate_set_input(
    metric_type: SetMetricType,
    weight: float | None = None,
    reps: int | None = None,
    duration_seconds: int | None = None,
    distance_meters: float | None = None,
) -> bool:
    """
    Whether the values are enough to log a set of *metric_type*.

    weight_reps needs weight > 0 and reps > 0, bodyweight_reps needs
    reps > 0, time_distance needs a positive duration.  A completion set is
    always valid.
    """
    if metric_type == "weight_reps":
        return weight is not None and weight > 0 and reps is not None and reps > 0
    if metric_type == "bodyweight_reps":
        return reps is not None and reps > 0
    if metric_type == "time_distance":
        return duration_seconds is not None and duration_seconds > 0
    return True


def log_set(
    workout_day: WorkoutDay,
    entry_id: str,
    weight: float | None = None,
    reps: int | None = None,
    duration_seconds: int | None = None,
    distance_meters: float | None = None,
    at: datetime | None = None,
) -> WorkoutSet:
    """
    Record a completed set on an entry.

    The first pending (uncompleted) set is filled in when there is one, so
    pre-filled plan sets are logged in order; otherwise a new set is added.

    Raises:
        KeyError: If the entry does not exist
        ValueError: If the values are not valid for the entry's metric type
    """
    entry = _entry(workout_day, entry_id)
    if not validate_set_input(entry.metric_type, weight, reps, duration_seconds, distance_meters):
        raise ValueError(f"Invalid values for a {entry.metric_type} set")

    pending = [s for s in entry.sorted_sets if not s.is_completed]
    if pending:
        workout_set = pending[0]
        workout_set.update(weight, reps, duration_seconds, distance_meters)
    else:
        workout_set = entry.create_set(weight, reps, duration_seconds, distance_meters)
    workout_set.complete(at)
    return workout_set


def complete_set(workout_day: WorkoutDay, set_id: str, at: datetime | None = None) -> WorkoutSet:
    workout_set = _set(workout_day, set_id)
    workout_set.complete(at)
    return workout_set


def uncomplete_set(workout_day: WorkoutDay, set_id: str) -> WorkoutSet:
    workout_set = _set(workout_day, set_id)
    workout_set.uncomplete()
    return workout_set


def delete_set(workout_day: WorkoutDay, set_id: str) -> WorkoutSet:
    """Hide a set; it stays stored and can be brought back with ``restore_set``."""
    workout_set = _set(workout_day, set_id)
    workout_set.soft_delete()
    return workout_set


def restore_set(workout_day: WorkoutDay, set_id: str) -> WorkoutSet:
    workout_set = _set(workout_day, set_id)
    workout_set.restore()
    return workout_set


def update_set(
    workout_day: WorkoutDay,
    set_id: str,
    weight: float | None = None,
    reps: int | None = None,
    duration_seconds: int | None = None,
    distance_meters: float | None = None,
) -> WorkoutSet:
    workout_set = _set(workout_day, set_id)
    workout_set.update(weight, reps, duration_seconds, distance_meters)
    return workout_set


def get_statistics(workout_day: WorkoutDay) -> WorkoutStatistics:
    return WorkoutStatistics(
        completed_sets=workout_day.total_completed_sets,
        exercises_with_sets=workout_day.total_exercises_with_sets,
        total_volume=workout_day.total_volume,
    )


def update_plan_exercise_from_entry(
    plan_exercise: PlanExercise, entry: WorkoutExerciseEntry
) -> None:
    """Replace the plan exercise's targets with what was actually logged."""
    planned = [
        PlannedSet(
            order_index=index,
            target_weight=s.weight,
            target_reps=s.reps,
            metric_type=s.metric_type,
            target_duration_seconds=s.duration_seconds,
            target_distance_meters=s.distance_meters,
            rest_time_seconds=s.rest_time_seconds,
        )
        for index, s in enumerate(entry.sorted_sets)
    ]
    plan_exercise.replace_planned_sets(planned)
    plan_exercise.metric_type = entry.metric_type
