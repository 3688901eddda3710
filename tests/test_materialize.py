"""
Tests for plan-day expansion into a concrete workout.
"""

from datetime import date

from repcycle.core.materialize import expand_exercise_to_entry, expand_plan_to_workout
from repcycle.core.models import PlanDay, PlannedSet, WorkoutDay


def _make_day() -> PlanDay:
    """Day with A (3 targeted planned sets) and B (2 placeholder sets)."""
    plan_day = PlanDay(day_index=1, name="Upper")
    a = plan_day.create_exercise("bench_press", planned_set_count=0)
    a.replace_planned_sets(
        [
            PlannedSet(order_index=0, target_weight=60, target_reps=8),
            PlannedSet(order_index=1, target_weight=60, target_reps=8),
            PlannedSet(order_index=2, target_weight=55, target_reps=10),
        ]
    )
    plan_day.create_exercise("row", planned_set_count=2)
    return plan_day


def _make_workout() -> WorkoutDay:
    return WorkoutDay(profile_id="p1", date=date(2026, 3, 10), mode="routine")


class TestExpandPlanToWorkout:
    """Expansion mirrors the plan day exactly."""

    def test_entries_in_plan_order_with_set_counts(self):
        workout = _make_workout()
        created = expand_plan_to_workout(_make_day(), workout)

        assert len(created) == 2
        entries = workout.sorted_entries
        assert [e.exercise_id for e in entries] == ["bench_press", "row"]
        assert [len(e.sets) for e in entries] == [3, 2]

    def test_targets_only_on_planned_sets(self):
        workout = _make_workout()
        expand_plan_to_workout(_make_day(), workout)
        a, b = workout.sorted_entries

        assert [(s.weight, s.reps) for s in a.sorted_sets] == [(60, 8), (60, 8), (55, 10)]
        assert all(s.weight is None and s.reps is None for s in b.sorted_sets)

    def test_all_sets_uncompleted(self):
        workout = _make_workout()
        expand_plan_to_workout(_make_day(), workout)
        assert workout.total_completed_sets == 0
        assert all(not s.is_completed for e in workout.entries for s in e.sets)

    def test_entries_marked_as_routine(self):
        workout = _make_workout()
        expand_plan_to_workout(_make_day(), workout)
        assert {e.source for e in workout.entries} == {"routine"}
        assert [e.planned_set_count for e in workout.sorted_entries] == [3, 2]

    def test_set_indices_start_at_one(self):
        workout = _make_workout()
        expand_plan_to_workout(_make_day(), workout)
        for entry in workout.entries:
            assert [s.set_index for s in entry.sorted_sets] == list(range(1, len(entry.sets) + 1))

    def test_rest_day_creates_nothing(self):
        plan_day = _make_day()
        plan_day.is_rest_day = True
        workout = _make_workout()
        assert expand_plan_to_workout(plan_day, workout) == []
        assert workout.entries == []

    def test_appends_after_existing_entries(self):
        workout = _make_workout()
        expand_plan_to_workout(_make_day(), workout)
        expand_plan_to_workout(_make_day(), workout)
        assert [e.order_index for e in workout.sorted_entries] == [0, 1, 2, 3]

    def test_plan_day_is_not_modified(self):
        plan_day = _make_day()
        before = [(e.exercise_id, e.effective_set_count) for e in plan_day.sorted_exercises]
        expand_plan_to_workout(plan_day, _make_workout())
        assert [(e.exercise_id, e.effective_set_count) for e in plan_day.sorted_exercises] == before


class TestExpandExercise:
    def test_zero_count_without_planned_sets_has_no_sets(self):
        plan_day = PlanDay(day_index=1)
        exercise = plan_day.create_exercise("plank", planned_set_count=0, metric_type="completion")
        entry = expand_exercise_to_entry(exercise, order_index=4)
        assert entry.sets == []
        assert entry.order_index == 4
        assert entry.metric_type == "completion"
