"""
Single-plan progress tracking.

The pointer (``PlanProgress.current_day_index``, 1-based) moves when a new
calendar day is opened and the previous day's workout was fully completed.
Missing a day never skips content: the user comes back to where they left off.
"""

import logging
from datetime import date

from .dates import days_between
from .errors import DanglingPlanReference, EmptyCycleOrPlan
from .models import DayPreview, Plan, PlanProgress

logger = logging.getLogger(__name__)


def _resolve_plan(store, plan_id: str) -> Plan:
    plan = store.get_plan(plan_id)
    if plan is None:
        raise DanglingPlanReference(f"Plan {plan_id} no longer exists")
    if plan.day_count == 0:
        raise EmptyCycleOrPlan(f"Plan '{plan.name}' has no days")
    return plan


def get_or_create_progress(store, profile_id: str, plan_id: str) -> PlanProgress:
    """Return the progress row for (profile, plan), creating it at day 1."""
    progress = store.find_plan_progress(profile_id, plan_id)
    if progress is None:
        progress = PlanProgress(profile_id=profile_id, plan_id=plan_id)
        store.insert(progress)
        logger.debug("Created plan progress for plan %s", plan_id)
    return progress


def _clamp_pointer(progress: PlanProgress, total_days: int) -> None:
    if not 1 <= progress.current_day_index <= total_days:
        logger.warning(
            "Plan pointer %d outside 1..%d; resetting to day 1",
            progress.current_day_index,
            total_days,
        )
        progress.current_day_index = 1


def handle_app_open(store, profile_id: str, plan_id: str, today: date) -> int:
    """
    Record that the plan was opened on *today* and return the current day.

    On the first open of a new calendar day the pointer advances by one
    (wrapping after the last day) when the workout left on the previously
    opened day is fully completed, or when that plan day is a rest day.  An
    untouched routine workout left on that day is removed so the same plan
    day can be done today instead.

    Args:
        store: Storage collaborator
        profile_id: Owning profile
        plan_id: Plan being opened
        today: Normalized calendar day of the open

    Returns:
        The (possibly advanced) 1-based day index

    Raises:
        DanglingPlanReference: If the plan does not exist
        EmptyCycleOrPlan: If the plan has no days
    """
    plan = _resolve_plan(store, plan_id)
    total_days = plan.day_count
    progress = get_or_create_progress(store, profile_id, plan_id)
    _clamp_pointer(progress, total_days)

    last_opened = progress.last_opened_date
    if last_opened is None:
        progress.last_opened_date = today
        return progress.current_day_index

    if last_opened == today:
        return progress.current_day_index

    current_day = plan.day(progress.current_day_index)
    if current_day is not None and current_day.is_rest_day:
        progress.advance_to_next_day(total_days)
        progress.last_counted_date = last_opened
        logger.debug("Rest day passed; plan %s now on day %d", plan_id, progress.current_day_index)
    else:
        previous = store.find_workout_day(profile_id, last_opened)
        if (
            previous is not None
            and previous.mode == "routine"
            and previous.routine_plan_id == plan_id
        ):
            if previous.is_routine_completed:
                progress.advance_to_next_day(total_days)
                progress.last_counted_date = last_opened
                logger.debug(
                    "Previous workout completed; plan %s now on day %d",
                    plan_id,
                    progress.current_day_index,
                )
            elif not previous.has_completed_sets:
                store.delete(previous)
                logger.debug("Removed untouched workout of %s", last_opened)

    progress.last_opened_date = today
    return progress.current_day_index


def mark_plan_day_completed(
    store, profile_id: str, plan_id: str, completion_date: date
) -> bool:
    """
    Record a completed workout for the plan on *completion_date*.

    Dates not strictly after the last recorded completion are ignored.  The
    pointer is moved only for a completion that lands before the last opened
    day and after the last day already counted, since the open-time check
    for that day has run without counting it.  Completions of the currently
    opened day are picked up by the next ``handle_app_open``.

    Returns:
        True if the pointer advanced
    """
    plan = _resolve_plan(store, plan_id)
    progress = get_or_create_progress(store, profile_id, plan_id)

    if progress.last_completed_date is not None and completion_date <= progress.last_completed_date:
        return False
    progress.last_completed_date = completion_date

    if progress.last_opened_date is None or completion_date >= progress.last_opened_date:
        return False
    if progress.last_counted_date is None or completion_date > progress.last_counted_date:
        progress.advance_to_next_day(plan.day_count)
        progress.last_counted_date = completion_date
        logger.info(
            "Backfilled completion on %s; plan %s now on day %d",
            completion_date,
            plan_id,
            progress.current_day_index,
        )
        return True
    return False


def get_preview_day_info(
    store, profile_id: str, plan_id: str, target: date, today: date
) -> DayPreview:
    """
    Which plan day *target* would fall on, assuming no further completions.

    Pure read: nothing is created or moved.
    """
    plan = _resolve_plan(store, plan_id)
    total_days = plan.day_count
    progress = store.find_plan_progress(profile_id, plan_id)
    current = progress.current_day_index if progress is not None else 1

    offset = days_between(today, target)
    day_index = (current - 1 + offset) % total_days + 1
    plan_day = plan.day(day_index)
    return DayPreview(
        day_index=day_index,
        total_days=total_days,
        day_name=plan_day.name if plan_day else None,
        plan_name=plan.name,
    )


def get_day_info(plan: Plan, plan_day_id: str | None) -> DayPreview | None:
    """Position of a plan day (e.g. the one a workout was built from)."""
    if plan_day_id is None:
        return None
    plan_day = plan.day_by_id(plan_day_id)
    if plan_day is None:
        return None
    return DayPreview(
        day_index=plan_day.day_index,
        total_days=plan.day_count,
        day_name=plan_day.name,
        plan_name=plan.name,
    )


def sync_current_day_after_reindex(
    store, profile_id: str, plan: Plan, tracked_day_id: str | None
) -> int:
    """
    Keep the pointer on the same plan day after days were moved or removed.

    Args:
        tracked_day_id: Id of the plan day the pointer was on before the edit

    Returns:
        The updated 1-based day index
    """
    progress = get_or_create_progress(store, profile_id, plan.id)
    total_days = plan.day_count
    if total_days == 0:
        progress.current_day_index = 1
        return 1

    tracked = plan.day_by_id(tracked_day_id) if tracked_day_id else None
    if tracked is not None:
        progress.current_day_index = tracked.day_index
    else:
        # Tracked day was deleted: stay at the same position, or the new last day.
        progress.current_day_index = max(1, min(progress.current_day_index, total_days))
    return progress.current_day_index
