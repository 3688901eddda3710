"""
Tests for plan, cycle and workout data models.
"""

from datetime import date, datetime

import pytest

from repcycle.core.models import (
    Cycle,
    CycleProgress,
    Plan,
    PlannedSet,
    PlanProgress,
    Profile,
    WorkoutDay,
    WorkoutExerciseEntry,
    WorkoutSet,
)


def _make_plan(day_names: list[str]) -> Plan:
    plan = Plan(profile_id="p1", name="Test plan")
    for name in day_names:
        plan.create_day(name=name)
    return plan


def _indices(plan: Plan) -> list[int]:
    return [d.day_index for d in plan.sorted_days]


def _names(plan: Plan) -> list[str]:
    return [d.name for d in plan.sorted_days]


class TestPlanStructure:
    """day_index stays contiguous 1..N after every structural edit."""

    def test_create_day_appends_with_next_index(self):
        plan = _make_plan(["A", "B", "C"])
        assert _indices(plan) == [1, 2, 3]
        assert plan.day_count == 3

    def test_remove_day_reindexes(self):
        plan = _make_plan(["A", "B", "C", "D"])
        plan.remove_day(plan.day(2).id)
        assert _indices(plan) == [1, 2, 3]
        assert _names(plan) == ["A", "C", "D"]

    def test_move_day_forward(self):
        plan = _make_plan(["A", "B", "C", "D"])
        plan.move_day(1, 3)
        assert _names(plan) == ["B", "C", "A", "D"]
        assert _indices(plan) == [1, 2, 3, 4]

    def test_move_day_backward(self):
        plan = _make_plan(["A", "B", "C", "D"])
        plan.move_day(4, 1)
        assert _names(plan) == ["D", "A", "B", "C"]

    def test_move_day_out_of_range(self):
        plan = _make_plan(["A", "B"])
        with pytest.raises(IndexError):
            plan.move_day(1, 3)

    def test_duplicate_day_copies_exercises_with_new_ids(self):
        plan = _make_plan(["A"])
        source = plan.day(1)
        exercise = source.create_exercise("squat", planned_set_count=2)
        exercise.add_planned_set(PlannedSet(order_index=0, target_weight=100, target_reps=5))

        copy = plan.duplicate_day(source.id)

        assert copy.day_index == 2
        assert copy.id != source.id
        assert copy.exercises[0].id != exercise.id
        assert copy.exercises[0].exercise_id == "squat"
        assert copy.exercises[0].planned_sets[0].target_weight == 100
        # Editing the copy leaves the source alone
        copy.exercises[0].planned_sets[0].target_weight = 50
        assert exercise.planned_sets[0].target_weight == 100

    def test_reindex_days_closes_gaps(self):
        plan = _make_plan(["A", "B", "C"])
        plan.days[1].day_index = 7
        plan.days[2].day_index = 9
        plan.reindex_days()
        assert _indices(plan) == [1, 2, 3]
        assert _names(plan) == ["A", "B", "C"]

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            Plan(profile_id="p1", name="   ")

    def test_archive_roundtrip(self):
        plan = _make_plan([])
        plan.archive()
        assert plan.is_archived
        plan.unarchive()
        assert not plan.is_archived


class TestPlanExercise:
    """Explicit planned sets win over the legacy count."""

    def test_effective_set_count_uses_planned_sets(self):
        plan = _make_plan(["A"])
        exercise = plan.day(1).create_exercise("bench", planned_set_count=5)
        assert exercise.effective_set_count == 5
        exercise.replace_planned_sets([PlannedSet(order_index=0), PlannedSet(order_index=1)])
        assert exercise.effective_set_count == 2
        assert exercise.planned_set_count == 2

    def test_remove_exercise_reindexes(self):
        plan = _make_plan(["A"])
        day = plan.day(1)
        first = day.create_exercise("a")
        day.create_exercise("b")
        day.create_exercise("c")
        day.remove_exercise(first.id)
        assert [(e.exercise_id, e.order_index) for e in day.sorted_exercises] == [("b", 0), ("c", 1)]

    def test_negative_targets_rejected(self):
        with pytest.raises(ValueError):
            PlannedSet(order_index=0, target_weight=-5)

    def test_unknown_metric_rejected(self):
        with pytest.raises(ValueError):
            PlannedSet(order_index=0, metric_type="furlongs")


class TestCycleModel:
    """Cycle item ordering and the progress primitives."""

    def test_add_and_remove_items_reindex(self):
        cycle = Cycle(profile_id="p1", name="C")
        a = cycle.add_plan("plan-a")
        cycle.add_plan("plan-b")
        cycle.add_plan("plan-c")
        cycle.remove_item(a.id)
        assert [(i.plan_id, i.order) for i in cycle.sorted_items] == [("plan-b", 0), ("plan-c", 1)]

    def test_move_item(self):
        cycle = Cycle(profile_id="p1", name="C")
        for plan_id in ("a", "b", "c"):
            cycle.add_plan(plan_id)
        cycle.move_item(2, 0)
        assert [i.plan_id for i in cycle.sorted_items] == ["c", "a", "b"]

    def test_advance_day_reports_wrap(self):
        progress = CycleProgress()
        now = datetime(2026, 3, 10, 9, 0)
        assert progress.advance_day(2, now) is False
        assert progress.current_day_index == 1
        assert progress.advance_day(2, now) is True
        assert progress.current_day_index == 0
        assert progress.last_advanced_at == now

    def test_advance_plan_wraps_items(self):
        progress = CycleProgress(current_item_index=1, current_day_index=2)
        progress.advance_plan(2)
        assert (progress.current_item_index, progress.current_day_index) == (0, 0)
        assert progress.last_advanced_at is None

    def test_snapshot_restore(self):
        progress = CycleProgress(current_item_index=1, current_day_index=1)
        snap = progress.snapshot()
        progress.advance_plan(3)
        progress.restore(snap)
        assert (progress.current_item_index, progress.current_day_index) == (1, 1)


class TestPlanProgress:
    """1-based pointer wrapping."""

    def test_advance_wraps_to_one(self):
        progress = PlanProgress(profile_id="p1", plan_id="x", current_day_index=3)
        progress.advance_to_next_day(3)
        assert progress.current_day_index == 1

    def test_advance_with_no_days_is_noop(self):
        progress = PlanProgress(profile_id="p1", plan_id="x")
        progress.advance_to_next_day(0)
        assert progress.current_day_index == 1


class TestProfile:
    def test_invalid_execution_mode(self):
        with pytest.raises(ValueError):
            Profile(execution_mode="parallel")

    def test_invalid_transition_hour(self):
        with pytest.raises(ValueError):
            Profile(day_transition_hour=24)


class TestWorkoutDay:
    """Completion and soft-delete semantics of the concrete log."""

    def _make_entry(self, planned: int, completed: int) -> WorkoutExerciseEntry:
        entry = WorkoutExerciseEntry(exercise_id="bench", order_index=0, planned_set_count=planned)
        entry.create_placeholder_sets()
        for s in entry.sorted_sets[:completed]:
            s.complete(datetime(2026, 3, 10, 10, 0))
        return entry

    def test_soft_deleted_sets_are_not_active(self):
        entry = self._make_entry(planned=3, completed=3)
        entry.sets[0].soft_delete()
        assert len(entry.active_sets) == 2
        assert entry.completed_sets_count == 2
        entry.sets[0].restore()
        assert entry.completed_sets_count == 3

    def test_routine_completed_requires_all_planned_sets(self):
        day = WorkoutDay(profile_id="p1", date=date(2026, 3, 10), mode="routine")
        day.add_entry(self._make_entry(planned=3, completed=2))
        assert not day.is_routine_completed
        day.entries[0].sorted_sets[-1].complete()
        assert day.is_routine_completed

    def test_entries_without_planned_sets_do_not_block_completion(self):
        day = WorkoutDay(profile_id="p1", date=date(2026, 3, 10), mode="routine")
        day.add_entry(self._make_entry(planned=2, completed=2))
        day.add_entry(WorkoutExerciseEntry(exercise_id="extra", order_index=1))
        assert day.is_routine_completed

    def test_free_workout_is_never_routine_completed(self):
        day = WorkoutDay(profile_id="p1", date=date(2026, 3, 10))
        day.add_entry(self._make_entry(planned=1, completed=1))
        assert not day.is_routine_completed

    def test_has_completed_sets(self):
        day = WorkoutDay(profile_id="p1", date=date(2026, 3, 10))
        day.add_entry(self._make_entry(planned=2, completed=0))
        assert not day.has_completed_sets
        day.entries[0].sets[0].complete()
        assert day.has_completed_sets
        assert day.total_completed_sets == 1

    def test_datetime_date_is_truncated(self):
        day = WorkoutDay(profile_id="p1", date=datetime(2026, 3, 10, 18, 0))
        assert day.date == date(2026, 3, 10)

    def test_volume_counts_completed_weight_reps_only(self):
        entry = WorkoutExerciseEntry(exercise_id="bench", order_index=0)
        entry.create_set(weight=60, reps=8, is_completed=True)
        entry.create_set(weight=60, reps=8)
        assert entry.total_volume == 480

    def test_set_update_ignores_none(self):
        s = WorkoutSet(set_index=1, weight=50, reps=5)
        s.update(reps=6)
        assert (s.weight, s.reps) == (50, 6)
