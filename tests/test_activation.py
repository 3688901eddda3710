"""
Tests for plan/cycle activation and the one-active-cycle rule.
"""

import pytest

from repcycle.core.activation import (
    clear_active_plan,
    deactivate_cycle,
    get_active_cycle,
    set_active_cycle,
    set_active_plan,
)
from repcycle.core.errors import DanglingPlanReference
from repcycle.core.models import Cycle, CycleProgress, Plan, Profile
from repcycle.io.store import Store


def _make_store(n_cycles: int = 3) -> tuple[Store, Profile, list[Cycle]]:
    store = Store()
    profile = Profile()
    store.insert(profile)
    cycles = []
    for i in range(n_cycles):
        cycle = Cycle(profile_id=profile.id, name=f"Cycle {i}")
        store.insert(cycle)
        cycles.append(cycle)
    return store, profile, cycles


def _active_names(store: Store, profile: Profile) -> list[str]:
    return sorted(c.name for c in store.query("cycle", lambda c: c.profile_id == profile.id and c.is_active))


class TestSetActiveCycle:
    """set_active_cycle is the only way to activate a cycle."""

    def test_activates_target_only(self):
        store, profile, cycles = _make_store()
        set_active_cycle(store, profile, cycles[1])
        assert _active_names(store, profile) == ["Cycle 1"]
        assert profile.execution_mode == "cycle"

    def test_switching_deactivates_previous(self):
        store, profile, cycles = _make_store()
        set_active_cycle(store, profile, cycles[0])
        set_active_cycle(store, profile, cycles[2])
        assert _active_names(store, profile) == ["Cycle 2"]
        assert get_active_cycle(store, profile.id) is cycles[2]

    def test_repairs_multiple_active_flags(self):
        store, profile, cycles = _make_store()
        for cycle in cycles:
            cycle.is_active = True
        set_active_cycle(store, profile, cycles[0])
        assert _active_names(store, profile) == ["Cycle 0"]

    def test_creates_progress_at_start(self):
        store, profile, cycles = _make_store(1)
        set_active_cycle(store, profile, cycles[0])
        progress = cycles[0].progress
        assert (progress.current_item_index, progress.current_day_index) == (0, 0)

    def test_keeps_existing_progress(self):
        store, profile, cycles = _make_store(1)
        cycles[0].progress = CycleProgress(current_item_index=1, current_day_index=2)
        set_active_cycle(store, profile, cycles[0])
        assert cycles[0].progress.current_day_index == 2

    def test_other_profiles_untouched(self):
        store, profile, cycles = _make_store(1)
        foreign = Cycle(profile_id="someone-else", name="Theirs", is_active=True)
        store.insert(foreign)
        set_active_cycle(store, profile, cycles[0])
        assert foreign.is_active

    def test_rejects_cycle_of_other_profile(self):
        store, profile, _ = _make_store(0)
        with pytest.raises(ValueError):
            set_active_cycle(store, profile, Cycle(profile_id="other", name="X"))


class TestDeactivate:
    def test_deactivate_falls_back_to_single(self):
        store, profile, cycles = _make_store(1)
        set_active_cycle(store, profile, cycles[0])
        deactivate_cycle(store, profile, cycles[0])
        assert get_active_cycle(store, profile.id) is None
        assert profile.execution_mode == "single"


class TestActivePlan:
    def test_set_active_plan_clears_cycles(self):
        store, profile, cycles = _make_store(2)
        plan = Plan(profile_id=profile.id, name="P")
        plan.create_day()
        store.insert(plan)
        set_active_cycle(store, profile, cycles[0])

        set_active_plan(store, profile, plan.id)

        assert profile.active_plan_id == plan.id
        assert profile.execution_mode == "single"
        assert get_active_cycle(store, profile.id) is None
        assert store.find_plan_progress(profile.id, plan.id) is not None

    def test_set_active_plan_missing(self):
        store, profile, _ = _make_store(0)
        with pytest.raises(DanglingPlanReference):
            set_active_plan(store, profile, "missing")

    def test_clear_active_plan(self):
        profile = Profile(active_plan_id="x")
        clear_active_plan(profile)
        assert profile.active_plan_id is None
