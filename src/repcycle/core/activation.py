"""
Plan and cycle activation.

At most one cycle per profile may be active.  Nothing in storage enforces
that, so every activation goes through ``set_active_cycle``.
"""

import logging

from .cycle_progress import ensure_progress_exists
from .errors import DanglingPlanReference
from .models import Cycle, Profile
from .plan_progress import get_or_create_progress

logger = logging.getLogger(__name__)


def _cycles_of(store, profile_id: str) -> list[Cycle]:
    return store.query("cycle", lambda c: c.profile_id == profile_id)


def set_active_cycle(store, profile: Profile, cycle: Cycle) -> Cycle:
    """
    Make *cycle* the profile's only active cycle and switch to cycle mode.

    Progress is created at the first day of the first plan when missing;
    existing progress is kept.
    """
    if cycle.profile_id != profile.id:
        raise ValueError(f"Cycle '{cycle.name}' belongs to another profile")

    for other in _cycles_of(store, profile.id):
        if other.id != cycle.id and other.is_active:
            other.is_active = False
            logger.debug("Deactivated cycle '%s'", other.name)

    cycle.is_active = True
    ensure_progress_exists(cycle)
    store.insert(cycle)
    profile.execution_mode = "cycle"
    logger.info("Activated cycle '%s'", cycle.name)
    return cycle


def deactivate_cycle(store, profile: Profile, cycle: Cycle) -> None:
    """Deactivate *cycle*; the profile falls back to single-plan mode."""
    cycle.is_active = False
    if get_active_cycle(store, profile.id) is None:
        profile.execution_mode = "single"
    logger.info("Deactivated cycle '%s'", cycle.name)


def get_active_cycle(store, profile_id: str) -> Cycle | None:
    active = [c for c in _cycles_of(store, profile_id) if c.is_active]
    if not active:
        return None
    if len(active) > 1:
        logger.warning(
            "%d cycles flagged active for profile %s; using '%s'",
            len(active),
            profile_id,
            active[0].name,
        )
    return active[0]


def set_active_plan(store, profile: Profile, plan_id: str) -> None:
    """
    Switch to single-plan mode on *plan_id*, deactivating any active cycle.

    Raises:
        DanglingPlanReference: If the plan does not exist
    """
    plan = store.get_plan(plan_id)
    if plan is None:
        raise DanglingPlanReference(f"Plan {plan_id} no longer exists")

    for cycle in _cycles_of(store, profile.id):
        cycle.is_active = False
    profile.active_plan_id = plan.id
    profile.execution_mode = "single"
    get_or_create_progress(store, profile.id, plan.id)
    logger.info("Activated plan '%s'", plan.name)


def clear_active_plan(profile: Profile) -> None:
    profile.active_plan_id = None
