"""
Manual day change ("rescue").

Rebuilds a workout day from a different plan day.  The rebuild deletes the
workout's entries, so it is refused once any set has been completed.  With
``skip_and_advance`` the progress pointer jumps to the chosen day as well,
bypassing the completion-gated advancement.

Every check runs before the first mutation; a raised error means the workout
and the pointers are untouched.
"""

import logging
from datetime import datetime

from .activation import get_active_cycle
from .cycle_progress import get_current_plan_day, peek_current_plan
from .errors import DanglingPlanReference, DayIndexOutOfRange, EmptyCycleOrPlan, HasCompletedSets
from .materialize import expand_plan_to_workout
from .models import Cycle, Plan, PlanDay, Profile, WorkoutDay
from .plan_progress import get_or_create_progress

logger = logging.getLogger(__name__)


def _guard_no_completed_sets(workout_day: WorkoutDay) -> None:
    if workout_day.has_completed_sets:
        raise HasCompletedSets(
            f"Workout on {workout_day.date} already has "
            f"{workout_day.total_completed_sets} completed set(s)"
        )


def _target_day(plan: Plan, target_day_index: int) -> PlanDay:
    total_days = plan.day_count
    if not 1 <= target_day_index <= total_days:
        raise DayIndexOutOfRange(target_day_index, total_days)
    return plan.sorted_days[target_day_index - 1]


def _rebuild(store, workout_day: WorkoutDay, plan: Plan, plan_day: PlanDay) -> None:
    workout_day.clear_entries()
    workout_day.mode = "routine"
    workout_day.routine_plan_id = plan.id
    workout_day.routine_day_id = plan_day.id
    expand_plan_to_workout(plan_day, workout_day)
    store.insert(workout_day)


def change_cycle_day(
    store,
    cycle: Cycle,
    workout_day: WorkoutDay,
    target_day_index: int,
    skip_and_advance: bool = False,
    now: datetime | None = None,
) -> PlanDay:
    """
    Rebuild *workout_day* from day *target_day_index* of the cycle's current plan.

    Args:
        target_day_index: 1-based day within the current plan
        skip_and_advance: Also move the cycle pointer to that day

    Returns:
        The plan day the workout now reflects

    Raises:
        HasCompletedSets: If the workout has any completed set
        EmptyCycleOrPlan, DanglingPlanReference: If no current plan resolves
        DayIndexOutOfRange: If the plan has no such day
    """
    _guard_no_completed_sets(workout_day)
    plan_day = _target_day(peek_current_plan(store, cycle), target_day_index)
    plan, _ = get_current_plan_day(store, cycle, now)

    _rebuild(store, workout_day, plan, plan_day)

    if skip_and_advance:
        progress = cycle.progress
        progress.current_day_index = target_day_index - 1
        if now is not None:
            progress.last_advanced_at = now

    logger.info(
        "Workout on %s switched to '%s' day %d%s",
        workout_day.date,
        plan.name,
        target_day_index,
        " (pointer moved)" if skip_and_advance else "",
    )
    return plan_day


def change_plan_day(
    store,
    profile: Profile,
    workout_day: WorkoutDay,
    plan_id: str,
    target_day_index: int,
    skip_and_advance: bool = False,
) -> PlanDay:
    """
    Rebuild *workout_day* from day *target_day_index* of a single plan.

    Raises:
        HasCompletedSets: If the workout has any completed set
        DanglingPlanReference: If the plan does not exist
        EmptyCycleOrPlan: If the plan has no days
        DayIndexOutOfRange: If the plan has no such day
    """
    _guard_no_completed_sets(workout_day)
    plan = store.get_plan(plan_id)
    if plan is None:
        raise DanglingPlanReference(f"Plan {plan_id} no longer exists")
    if plan.day_count == 0:
        raise EmptyCycleOrPlan(f"Plan '{plan.name}' has no days")
    plan_day = _target_day(plan, target_day_index)

    _rebuild(store, workout_day, plan, plan_day)

    if skip_and_advance:
        progress = get_or_create_progress(store, profile.id, plan.id)
        progress.current_day_index = target_day_index

    logger.info(
        "Workout on %s switched to '%s' day %d%s",
        workout_day.date,
        plan.name,
        target_day_index,
        " (pointer moved)" if skip_and_advance else "",
    )
    return plan_day


def change_day(
    store,
    profile: Profile,
    workout_day: WorkoutDay,
    target_day_index: int,
    skip_and_advance: bool = False,
    now: datetime | None = None,
) -> PlanDay:
    """Change day using the active cycle or the active plan, per execution mode."""
    _guard_no_completed_sets(workout_day)
    if profile.execution_mode == "cycle":
        cycle = get_active_cycle(store, profile.id)
        if cycle is None:
            raise EmptyCycleOrPlan("No active cycle")
        return change_cycle_day(
            store, cycle, workout_day, target_day_index, skip_and_advance, now
        )

    plan_id = profile.active_plan_id or workout_day.routine_plan_id
    if plan_id is None:
        raise EmptyCycleOrPlan("No active plan")
    return change_plan_day(
        store, profile, workout_day, plan_id, target_day_index, skip_and_advance
    )
