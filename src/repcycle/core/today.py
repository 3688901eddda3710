"""
Today's workout: tie the progress trackers to materialization.

``setup_today_workout`` is what the UI calls on open; ``complete_workout_day``
is what it calls once a plan-derived workout has been fully logged.
"""

import logging

from .activation import get_active_cycle, set_active_plan
from .clock import Clock
from .cycle_progress import get_current_plan_day, mark_cycle_day_completed
from .dates import today_workout_date
from .day_change import change_plan_day
from .errors import EmptyCycleOrPlan
from .materialize import expand_plan_to_workout
from .models import Plan, PlanDay, Profile, WorkoutDay
from .plan_progress import (
    get_or_create_progress,
    handle_app_open,
    mark_plan_day_completed,
    sync_current_day_after_reindex,
)
from .workout import get_or_create_workout_day

logger = logging.getLogger(__name__)


def _is_fresh(workout_day: WorkoutDay) -> bool:
    return workout_day.mode == "free" and not workout_day.entries


def _materialize(store, workout_day: WorkoutDay, plan: Plan, plan_day: PlanDay) -> None:
    workout_day.mode = "routine"
    workout_day.routine_plan_id = plan.id
    workout_day.routine_day_id = plan_day.id
    expand_plan_to_workout(plan_day, workout_day)
    store.insert(workout_day)
    logger.info("Built workout for %s from '%s' %s", workout_day.date, plan.name, plan_day.display_name)


def setup_today_workout(store, profile: Profile, clock: Clock) -> WorkoutDay:
    """
    Return today's workout, building it from the current plan day if new.

    In cycle mode the active cycle's pointer picks the plan day.  In single
    mode the plan is opened for today first, which may advance its pointer.
    Without an active cycle or plan an empty free workout is returned.  An
    existing workout for today is never rebuilt.
    """
    today = today_workout_date(clock, profile.day_transition_hour)

    if profile.execution_mode == "cycle":
        cycle = get_active_cycle(store, profile.id)
        if cycle is None:
            return get_or_create_workout_day(store, profile.id, today)
        plan, plan_day = get_current_plan_day(store, cycle, clock.now())
        workout_day = get_or_create_workout_day(store, profile.id, today)
        if _is_fresh(workout_day):
            _materialize(store, workout_day, plan, plan_day)
        return workout_day

    if profile.active_plan_id is None:
        return get_or_create_workout_day(store, profile.id, today)

    plan_id = profile.active_plan_id
    handle_app_open(store, profile.id, plan_id, today)
    plan = store.get_plan(plan_id)
    progress = get_or_create_progress(store, profile.id, plan_id)
    current = plan.day(progress.current_day_index)
    plan.reindex_days()
    sync_current_day_after_reindex(store, profile.id, plan, current.id if current else None)
    plan_day = plan.day(progress.current_day_index)

    workout_day = get_or_create_workout_day(store, profile.id, today)
    if _is_fresh(workout_day):
        _materialize(store, workout_day, plan, plan_day)
    return workout_day


def apply_plan_today(
    store, profile: Profile, plan: Plan, day_index: int, clock: Clock
) -> WorkoutDay:
    """
    Switch to *plan* and rebuild today's workout from its day *day_index*.

    The plan becomes the active plan and its pointer is set to that day.

    Raises:
        HasCompletedSets: If today's workout already has completed sets
        EmptyCycleOrPlan, DayIndexOutOfRange: If the day cannot be resolved
    """
    today = today_workout_date(clock, profile.day_transition_hour)
    workout_day = get_or_create_workout_day(store, profile.id, today)
    change_plan_day(store, profile, workout_day, plan.id, day_index, skip_and_advance=True)
    set_active_plan(store, profile, plan.id)
    progress = get_or_create_progress(store, profile.id, plan.id)
    progress.last_opened_date = today
    return workout_day


def complete_workout_day(store, profile: Profile, workout_day: WorkoutDay, clock: Clock) -> bool:
    """
    Report a fully logged plan-derived workout to the progress trackers.

    Returns:
        True if a progress pointer moved

    Raises:
        ValueError: If the workout is not plan-derived or not fully logged
        EmptyCycleOrPlan: If cycle mode is on but no cycle is active
    """
    if workout_day.mode != "routine":
        raise ValueError("Only plan-based workouts can be completed")
    if not workout_day.is_routine_completed:
        raise ValueError("Not every planned set has been logged yet")

    if profile.execution_mode == "cycle":
        cycle = get_active_cycle(store, profile.id)
        if cycle is None:
            raise EmptyCycleOrPlan("No active cycle")
        return mark_cycle_day_completed(store, cycle, workout_day.date, clock.now())

    return mark_plan_day_completed(
        store, profile.id, workout_day.routine_plan_id, workout_day.date
    )
