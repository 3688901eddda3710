"""
Cycle progress tracking.

A cycle is a rotation of plans.  ``CycleProgress`` points at an item
(0-based, into ``cycle.sorted_items``) and a day within that item's plan
(0-based).  Items whose plan was deleted or has no days are skipped when the
pointer moves onto them.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime

from .dates import days_between, normalized_calendar_day
from .errors import DanglingPlanReference, EmptyCycleOrPlan, ProgressionError
from .models import Cycle, CycleItem, CycleProgress, DayPreview, Plan, PlanDay

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleState:
    """Human-facing summary of where a cycle currently is."""

    cycle_name: str
    plan_name: str
    item_index: int
    item_count: int
    day_index: int
    total_days: int
    day_name: str | None = None

    def __str__(self) -> str:
        text = (
            f"{self.cycle_name}: plan {self.item_index + 1}/{self.item_count} "
            f"'{self.plan_name}', day {self.day_index}/{self.total_days}"
        )
        if self.day_name:
            text += f" ({self.day_name})"
        return text


def _plan_for_item(store, item: CycleItem) -> Plan | None:
    return store.get_plan(item.plan_id)


def _is_usable(plan: Plan | None) -> bool:
    return plan is not None and plan.day_count > 0


def ensure_progress_exists(cycle: Cycle) -> CycleProgress:
    """Return the cycle's progress, creating it at (0, 0) if absent."""
    if cycle.progress is None:
        cycle.progress = CycleProgress()
        logger.debug("Created progress for cycle %s", cycle.id)
    return cycle.progress


def reset_progress(cycle: Cycle) -> None:
    """Move the pointer back to the first day of the first plan."""
    ensure_progress_exists(cycle).reset()
    logger.info("Reset progress of cycle '%s'", cycle.name)


def _no_usable_item_error(store, items: list[CycleItem]) -> ProgressionError:
    if all(_plan_for_item(store, item) is None for item in items):
        return DanglingPlanReference("Every plan in this cycle has been deleted")
    return EmptyCycleOrPlan("No plan in this cycle has any days")


def _skip_unusable_items(
    store, items: list[CycleItem], progress: CycleProgress, now: datetime | None
) -> None:
    """Advance the item pointer until it rests on a usable plan."""
    for _ in range(len(items)):
        item = items[progress.current_item_index]
        if _is_usable(_plan_for_item(store, item)):
            return
        logger.warning("Skipping cycle item %s: plan %s missing or empty", item.id, item.plan_id)
        progress.advance_plan(len(items), now)
    if not _is_usable(_plan_for_item(store, items[progress.current_item_index])):
        raise _no_usable_item_error(store, items)


def _items_or_raise(cycle: Cycle) -> list[CycleItem]:
    items = cycle.sorted_items
    if not items:
        raise EmptyCycleOrPlan(f"Cycle '{cycle.name}' has no plans")
    return items


def _repair(
    store, items: list[CycleItem], progress: CycleProgress, now: datetime | None
) -> Plan:
    if not 0 <= progress.current_item_index < len(items):
        progress.current_item_index = 0
        progress.current_day_index = 0
    if not _is_usable(_plan_for_item(store, items[progress.current_item_index])):
        progress.current_day_index = 0
        _skip_unusable_items(store, items, progress, now)
    plan = _plan_for_item(store, items[progress.current_item_index])
    if not 0 <= progress.current_day_index < plan.day_count:
        progress.current_day_index = 0
    return plan


def normalize_progress(store, cycle: Cycle, now: datetime | None = None) -> CycleProgress:
    """
    Repair the pointer so it references a usable plan and an existing day.

    An out-of-range item index restarts the cycle; an out-of-range day index
    restarts the current plan.  ``last_advanced_at`` is only stamped when
    *now* is given.

    Raises:
        EmptyCycleOrPlan: If the cycle has no items, or no item has days
        DanglingPlanReference: If every item's plan was deleted
    """
    items = _items_or_raise(cycle)
    progress = ensure_progress_exists(cycle)
    snapshot = progress.snapshot()
    try:
        _repair(store, items, progress, now)
    except ProgressionError:
        progress.restore(snapshot)
        raise
    return progress


def peek_current_plan(store, cycle: Cycle) -> Plan:
    """
    The plan the pointer would rest on after normalization, without moving it.

    Raises:
        EmptyCycleOrPlan, DanglingPlanReference: If nothing can be resolved
    """
    items = _items_or_raise(cycle)
    progress = CycleProgress()
    if cycle.progress is not None:
        progress.restore(cycle.progress.snapshot())
    return _repair(store, items, progress, None)


def advance_plan(store, cycle: Cycle, now: datetime | None = None) -> None:
    """
    Move to the first day of the next usable plan in the rotation.

    Raises:
        EmptyCycleOrPlan, DanglingPlanReference: If no usable plan exists;
            the pointer is left unchanged.
    """
    items = _items_or_raise(cycle)
    progress = ensure_progress_exists(cycle)
    snapshot = progress.snapshot()
    try:
        if not 0 <= progress.current_item_index < len(items):
            progress.current_item_index = len(items) - 1
        progress.advance_plan(len(items), now)
        _skip_unusable_items(store, items, progress, now)
    except ProgressionError:
        progress.restore(snapshot)
        raise
    logger.debug("Cycle '%s' moved to item %d", cycle.name, progress.current_item_index)


def advance(store, cycle: Cycle, now: datetime | None = None) -> bool:
    """
    Step the cycle forward by one plan day.

    Passing the last day of the current plan moves on to the first day of the
    next usable plan, wrapping at the end of the cycle.

    Returns:
        True if the pointer switched to another plan

    Raises:
        EmptyCycleOrPlan: If the cycle has no items or all plans are empty
        DanglingPlanReference: If every plan in the cycle was deleted
    """
    items = _items_or_raise(cycle)
    progress = ensure_progress_exists(cycle)
    snapshot = progress.snapshot()
    try:
        if not 0 <= progress.current_item_index < len(items):
            progress.current_item_index = 0
            progress.current_day_index = 0

        plan = _plan_for_item(store, items[progress.current_item_index])
        if not _is_usable(plan):
            progress.advance_plan(len(items), now)
            _skip_unusable_items(store, items, progress, now)
            switched = True
        else:
            switched = progress.advance_day(plan.day_count, now)
            if switched:
                progress.advance_plan(len(items), now)
                _skip_unusable_items(store, items, progress, now)
    except ProgressionError:
        progress.restore(snapshot)
        raise

    logger.debug(
        "Cycle '%s' advanced to item %d day %d",
        cycle.name,
        progress.current_item_index,
        progress.current_day_index,
    )
    return switched


def mark_cycle_day_completed(
    store, cycle: Cycle, completion_date: date | datetime, now: datetime | None = None
) -> bool:
    """
    Advance once for a workout completed on *completion_date*.

    Only a completion strictly after the last recorded one moves the pointer;
    a repeat on the same day or a backfill of an earlier day is ignored.

    Returns:
        True if the pointer advanced
    """
    completion_day = normalized_calendar_day(completion_date)
    progress = ensure_progress_exists(cycle)
    last = progress.last_completed_at
    if last is not None and completion_day <= last:
        logger.debug(
            "Ignoring completion on %s for cycle '%s' (last completion %s)",
            completion_day,
            cycle.name,
            last,
        )
        return False

    advance(store, cycle, now)
    progress.last_completed_at = completion_day
    return True


def get_current_plan_day(
    store, cycle: Cycle, now: datetime | None = None
) -> tuple[Plan, PlanDay]:
    """
    Resolve the plan and plan day the pointer is on, repairing it if needed.

    Raises:
        EmptyCycleOrPlan, DanglingPlanReference: If nothing can be resolved
    """
    progress = normalize_progress(store, cycle, now)
    plan = _plan_for_item(store, cycle.sorted_items[progress.current_item_index])
    plan_day = plan.sorted_days[progress.current_day_index]
    return plan, plan_day


def get_current_state_info(store, cycle: Cycle, now: datetime | None = None) -> CycleState:
    plan, plan_day = get_current_plan_day(store, cycle, now)
    progress = cycle.progress
    return CycleState(
        cycle_name=cycle.name,
        plan_name=plan.name,
        item_index=progress.current_item_index,
        item_count=cycle.plan_count,
        day_index=progress.current_day_index + 1,
        total_days=plan.day_count,
        day_name=plan_day.name,
    )


def get_preview_day_info(
    store, cycle: Cycle, target: date, today: date
) -> DayPreview | None:
    """
    Estimate which day of the current plan *target* falls on.

    Wraps within the current plan only and never crosses into the next plan
    of the cycle.  Read-only; returns None when the current item cannot be
    resolved.
    """
    items = cycle.sorted_items
    progress = cycle.progress
    if not items or progress is None or not 0 <= progress.current_item_index < len(items):
        return None
    plan = _plan_for_item(store, items[progress.current_item_index])
    if not _is_usable(plan):
        return None

    total_days = plan.day_count
    offset = days_between(today, target)
    day_index = (progress.current_day_index + offset) % total_days
    plan_day = plan.sorted_days[day_index]
    return DayPreview(
        day_index=day_index + 1,
        total_days=total_days,
        day_name=plan_day.name,
        plan_name=plan.name,
    )


def get_day_info(store, cycle: Cycle, plan_day_id: str | None) -> DayPreview | None:
    """Locate a plan day among the cycle's plans."""
    if plan_day_id is None:
        return None
    for item in cycle.sorted_items:
        plan = _plan_for_item(store, item)
        if plan is None:
            continue
        plan_day = plan.day_by_id(plan_day_id)
        if plan_day is not None:
            return DayPreview(
                day_index=plan_day.day_index,
                total_days=plan.day_count,
                day_name=plan_day.name,
                plan_name=plan.name,
            )
    return None
