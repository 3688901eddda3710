"""
Plan-day → workout expansion.

Turns a template PlanDay into concrete WorkoutExerciseEntry / WorkoutSet
records on a WorkoutDay.  This is a pure expansion: it never reads or moves a
progress pointer, so trackers and the day-change engine can both call it.
"""

from .models import PlanDay, PlanExercise, WorkoutDay, WorkoutExerciseEntry, WorkoutSet


def expand_exercise_to_entry(plan_exercise: PlanExercise, order_index: int) -> WorkoutExerciseEntry:
    """
    Build one entry for a plan exercise.

    Explicit planned sets become uncompleted sets pre-filled with their target
    values.  With only a legacy ``planned_set_count``, that many empty
    placeholder sets are created instead.
    """
    planned_sets = plan_exercise.sorted_planned_sets
    entry = WorkoutExerciseEntry(
        exercise_id=plan_exercise.exercise_id,
        order_index=order_index,
        planned_set_count=plan_exercise.effective_set_count,
        source="routine",
        metric_type=plan_exercise.metric_type,
    )

    if planned_sets:
        for index, planned in enumerate(planned_sets, start=1):
            entry.sets.append(
                WorkoutSet(
                    set_index=index,
                    metric_type=planned.metric_type,
                    weight=planned.target_weight,
                    reps=planned.target_reps,
                    duration_seconds=planned.target_duration_seconds,
                    distance_meters=planned.target_distance_meters,
                    rest_time_seconds=planned.rest_time_seconds,
                    is_completed=False,
                )
            )
    elif entry.planned_set_count > 0:
        entry.create_placeholder_sets()

    return entry


def expand_plan_to_workout(plan_day: PlanDay, workout_day: WorkoutDay) -> list[WorkoutExerciseEntry]:
    """
    Append one entry per plan exercise, in plan order.

    Rest days expand to nothing.  Entries are placed after whatever the
    workout day already holds.

    Returns:
        The entries that were created
    """
    if plan_day.is_rest_day:
        return []

    created: list[WorkoutExerciseEntry] = []
    order_index = workout_day.next_order_index
    for plan_exercise in plan_day.sorted_exercises:
        entry = expand_exercise_to_entry(plan_exercise, order_index)
        workout_day.add_entry(entry)
        created.append(entry)
        order_index += 1
    return created
