"""
JSON serialization for repcycle data models.

Handles conversion between dataclasses and JSON-compatible dicts, plus the
small text formats the CLI accepts for set input.
"""

import json
import re
from datetime import date, datetime
from typing import Any

from ..core.config import DEFAULT_TRANSITION_HOUR
from ..core.models import (
    METRIC_TYPES,
    Cycle,
    CycleItem,
    CycleProgress,
    Plan,
    PlanDay,
    PlanExercise,
    PlannedSet,
    PlanProgress,
    Profile,
    WorkoutDay,
    WorkoutExerciseEntry,
    WorkoutSet,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> date:
    """
    Parse an ISO ``YYYY-MM-DD`` string.

    Raises:
        ValidationError: If the format or the date itself is invalid
    """
    if not isinstance(date_str, str) or not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_metric_type(metric_type: str) -> str:
    if metric_type not in METRIC_TYPES:
        raise ValidationError(
            f"Invalid metric_type: {metric_type}. Must be one of {METRIC_TYPES}"
        )
    return metric_type


def _opt_date(value: str | None) -> date | None:
    return validate_date(value) if value else None


def _opt_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp: {value}") from e


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _require(data: dict[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError as e:
        raise ValidationError(f"Missing required field: {key}") from e


# =============================================================================
# PLANS
# =============================================================================


def planned_set_to_dict(planned_set: PlannedSet) -> dict[str, Any]:
    return {
        "order_index": planned_set.order_index,
        "target_weight": planned_set.target_weight,
        "target_reps": planned_set.target_reps,
        "metric_type": planned_set.metric_type,
        "target_duration_seconds": planned_set.target_duration_seconds,
        "target_distance_meters": planned_set.target_distance_meters,
        "rest_time_seconds": planned_set.rest_time_seconds,
    }


def dict_to_planned_set(data: dict[str, Any]) -> PlannedSet:
    weight = data.get("target_weight")
    reps = data.get("target_reps")
    if weight is not None:
        validate_non_negative(weight, "target_weight")
    if reps is not None:
        validate_non_negative(reps, "target_reps")
    return PlannedSet(
        order_index=int(data.get("order_index", 0)),
        target_weight=float(weight) if weight is not None else None,
        target_reps=int(reps) if reps is not None else None,
        metric_type=validate_metric_type(data.get("metric_type", "weight_reps")),
        target_duration_seconds=data.get("target_duration_seconds"),
        target_distance_meters=data.get("target_distance_meters"),
        rest_time_seconds=data.get("rest_time_seconds"),
    )


def plan_exercise_to_dict(exercise: PlanExercise) -> dict[str, Any]:
    return {
        "id": exercise.id,
        "exercise_id": exercise.exercise_id,
        "order_index": exercise.order_index,
        "planned_set_count": exercise.planned_set_count,
        "metric_type": exercise.metric_type,
        "planned_sets": [planned_set_to_dict(s) for s in exercise.sorted_planned_sets],
    }


def dict_to_plan_exercise(data: dict[str, Any]) -> PlanExercise:
    count = int(data.get("planned_set_count", 0))
    validate_non_negative(count, "planned_set_count")
    return PlanExercise(
        id=_require(data, "id"),
        exercise_id=_require(data, "exercise_id"),
        order_index=int(data.get("order_index", 0)),
        planned_set_count=count,
        metric_type=validate_metric_type(data.get("metric_type", "weight_reps")),
        planned_sets=[dict_to_planned_set(s) for s in data.get("planned_sets", [])],
    )


def plan_day_to_dict(plan_day: PlanDay) -> dict[str, Any]:
    return {
        "id": plan_day.id,
        "day_index": plan_day.day_index,
        "name": plan_day.name,
        "note": plan_day.note,
        "is_rest_day": plan_day.is_rest_day,
        "exercises": [plan_exercise_to_dict(e) for e in plan_day.sorted_exercises],
    }


def dict_to_plan_day(data: dict[str, Any]) -> PlanDay:
    return PlanDay(
        id=_require(data, "id"),
        day_index=int(_require(data, "day_index")),
        name=data.get("name"),
        note=data.get("note"),
        is_rest_day=bool(data.get("is_rest_day", False)),
        exercises=[dict_to_plan_exercise(e) for e in data.get("exercises", [])],
    )


def plan_to_dict(plan: Plan) -> dict[str, Any]:
    return {
        "id": plan.id,
        "profile_id": plan.profile_id,
        "name": plan.name,
        "note": plan.note,
        "is_archived": plan.is_archived,
        "days": [plan_day_to_dict(d) for d in plan.sorted_days],
    }


def dict_to_plan(data: dict[str, Any]) -> Plan:
    try:
        return Plan(
            id=_require(data, "id"),
            profile_id=_require(data, "profile_id"),
            name=_require(data, "name"),
            note=data.get("note"),
            is_archived=bool(data.get("is_archived", False)),
            days=[dict_to_plan_day(d) for d in data.get("days", [])],
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


# =============================================================================
# CYCLES AND PROGRESS
# =============================================================================


def cycle_progress_to_dict(progress: CycleProgress) -> dict[str, Any]:
    return {
        "current_item_index": progress.current_item_index,
        "current_day_index": progress.current_day_index,
        "last_advanced_at": _iso(progress.last_advanced_at),
        "last_completed_at": _iso(progress.last_completed_at),
    }


def dict_to_cycle_progress(data: dict[str, Any]) -> CycleProgress:
    item_index = int(data.get("current_item_index", 0))
    day_index = int(data.get("current_day_index", 0))
    validate_non_negative(item_index, "current_item_index")
    validate_non_negative(day_index, "current_day_index")
    return CycleProgress(
        current_item_index=item_index,
        current_day_index=day_index,
        last_advanced_at=_opt_datetime(data.get("last_advanced_at")),
        last_completed_at=_opt_date(data.get("last_completed_at")),
    )


def cycle_to_dict(cycle: Cycle) -> dict[str, Any]:
    return {
        "id": cycle.id,
        "profile_id": cycle.profile_id,
        "name": cycle.name,
        "is_active": cycle.is_active,
        "items": [
            {"id": i.id, "plan_id": i.plan_id, "order": i.order, "note": i.note}
            for i in cycle.sorted_items
        ],
        "progress": cycle_progress_to_dict(cycle.progress) if cycle.progress else None,
    }


def dict_to_cycle(data: dict[str, Any]) -> Cycle:
    progress = data.get("progress")
    return Cycle(
        id=_require(data, "id"),
        profile_id=_require(data, "profile_id"),
        name=_require(data, "name"),
        is_active=bool(data.get("is_active", False)),
        items=[
            CycleItem(
                id=_require(i, "id"),
                plan_id=_require(i, "plan_id"),
                order=int(i.get("order", 0)),
                note=i.get("note"),
            )
            for i in data.get("items", [])
        ],
        progress=dict_to_cycle_progress(progress) if progress else None,
    )


def plan_progress_to_dict(progress: PlanProgress) -> dict[str, Any]:
    return {
        "id": progress.id,
        "profile_id": progress.profile_id,
        "plan_id": progress.plan_id,
        "current_day_index": progress.current_day_index,
        "last_opened_date": _iso(progress.last_opened_date),
        "last_completed_date": _iso(progress.last_completed_date),
        "last_counted_date": _iso(progress.last_counted_date),
    }


def dict_to_plan_progress(data: dict[str, Any]) -> PlanProgress:
    day_index = int(data.get("current_day_index", 1))
    if day_index < 1:
        raise ValidationError(f"current_day_index must be >= 1, got {day_index}")
    return PlanProgress(
        id=_require(data, "id"),
        profile_id=_require(data, "profile_id"),
        plan_id=_require(data, "plan_id"),
        current_day_index=day_index,
        last_opened_date=_opt_date(data.get("last_opened_date")),
        last_completed_date=_opt_date(data.get("last_completed_date")),
        last_counted_date=_opt_date(data.get("last_counted_date")),
    )


def profile_to_dict(profile: Profile) -> dict[str, Any]:
    return {
        "id": profile.id,
        "execution_mode": profile.execution_mode,
        "active_plan_id": profile.active_plan_id,
        "day_transition_hour": profile.day_transition_hour,
    }


def dict_to_profile(data: dict[str, Any]) -> Profile:
    try:
        return Profile(
            id=_require(data, "id"),
            execution_mode=data.get("execution_mode", "single"),
            active_plan_id=data.get("active_plan_id"),
            day_transition_hour=int(data.get("day_transition_hour", DEFAULT_TRANSITION_HOUR)),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


# =============================================================================
# WORKOUT LOG
# =============================================================================


def workout_set_to_dict(workout_set: WorkoutSet) -> dict[str, Any]:
    return {
        "id": workout_set.id,
        "set_index": workout_set.set_index,
        "metric_type": workout_set.metric_type,
        "weight": workout_set.weight,
        "reps": workout_set.reps,
        "duration_seconds": workout_set.duration_seconds,
        "distance_meters": workout_set.distance_meters,
        "rest_time_seconds": workout_set.rest_time_seconds,
        "is_completed": workout_set.is_completed,
        "completed_at": _iso(workout_set.completed_at),
        "is_soft_deleted": workout_set.is_soft_deleted,
    }


def dict_to_workout_set(data: dict[str, Any]) -> WorkoutSet:
    return WorkoutSet(
        id=_require(data, "id"),
        set_index=int(_require(data, "set_index")),
        metric_type=validate_metric_type(data.get("metric_type", "weight_reps")),
        weight=data.get("weight"),
        reps=data.get("reps"),
        duration_seconds=data.get("duration_seconds"),
        distance_meters=data.get("distance_meters"),
        rest_time_seconds=data.get("rest_time_seconds"),
        is_completed=bool(data.get("is_completed", False)),
        completed_at=_opt_datetime(data.get("completed_at")),
        is_soft_deleted=bool(data.get("is_soft_deleted", False)),
    )


def entry_to_dict(entry: WorkoutExerciseEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "exercise_id": entry.exercise_id,
        "order_index": entry.order_index,
        "planned_set_count": entry.planned_set_count,
        "source": entry.source,
        "metric_type": entry.metric_type,
        # Soft-deleted sets are kept so they can be restored later.
        "sets": [workout_set_to_dict(s) for s in sorted(entry.sets, key=lambda s: s.set_index)],
    }


def dict_to_entry(data: dict[str, Any]) -> WorkoutExerciseEntry:
    try:
        return WorkoutExerciseEntry(
            id=_require(data, "id"),
            exercise_id=_require(data, "exercise_id"),
            order_index=int(data.get("order_index", 0)),
            planned_set_count=int(data.get("planned_set_count", 0)),
            source=data.get("source", "free"),
            metric_type=validate_metric_type(data.get("metric_type", "weight_reps")),
            sets=[dict_to_workout_set(s) for s in data.get("sets", [])],
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def workout_day_to_dict(workout_day: WorkoutDay) -> dict[str, Any]:
    return {
        "id": workout_day.id,
        "profile_id": workout_day.profile_id,
        "date": workout_day.date.isoformat(),
        "mode": workout_day.mode,
        "routine_plan_id": workout_day.routine_plan_id,
        "routine_day_id": workout_day.routine_day_id,
        "entries": [entry_to_dict(e) for e in workout_day.sorted_entries],
    }


def dict_to_workout_day(data: dict[str, Any]) -> WorkoutDay:
    try:
        return WorkoutDay(
            id=_require(data, "id"),
            profile_id=_require(data, "profile_id"),
            date=validate_date(_require(data, "date")),
            mode=data.get("mode", "free"),
            routine_plan_id=data.get("routine_plan_id"),
            routine_day_id=data.get("routine_day_id"),
            entries=[dict_to_entry(e) for e in data.get("entries", [])],
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def workout_day_to_json_line(workout_day: WorkoutDay) -> str:
    return json.dumps(workout_day_to_dict(workout_day), separators=(",", ":"))


def json_line_to_workout_day(line: str) -> WorkoutDay:
    """
    Parse one JSONL line into a WorkoutDay.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e
    return dict_to_workout_day(data)


# =============================================================================
# CLI SET INPUT
# =============================================================================


def parse_set_string(set_str: str) -> tuple[float | None, int]:
    """
    Parse a single logged set.

    Accepted forms:
        60x8      60 kg for 8 reps
        60 x 8    same, with spaces
        8         8 reps, no weight (bodyweight)

    Returns:
        (weight or None, reps)

    Raises:
        ValidationError: If format is invalid
    """
    s = set_str.strip().lower()
    if not s:
        raise ValidationError("Set cannot be empty")

    m = re.match(r"^(\d+(?:\.\d+)?)\s*[x×*]\s*(\d+)$", s)
    if m:
        weight = float(m.group(1))
        reps = int(m.group(2))
        return weight, reps

    if re.match(r"^\d+$", s):
        return None, int(s)

    raise ValidationError(
        f"Invalid set format: {set_str!r}. Expected 'WEIGHTxREPS' (e.g. 60x8) or 'REPS'"
    )


def parse_planned_sets_string(sets_str: str) -> list[PlannedSet]:
    """
    Parse planned set targets, comma separated.

    Each item is ``WEIGHTxREPS``, ``REPS`` or ``-`` (no targets), e.g.
    ``"60x8, 60x8, 55x10"``.  A leading ``Nx`` multiplier expands one
    target to N sets: ``"3x(60x8)"``.

    Raises:
        ValidationError: If any part is invalid
    """
    if not sets_str or not sets_str.strip():
        raise ValidationError("Planned sets string cannot be empty")

    m = re.match(r"^\s*(\d+)\s*x\s*\((.+)\)\s*$", sets_str)
    if m:
        count = int(m.group(1))
        if count <= 0:
            raise ValidationError("Set multiplier must be positive")
        parts = [m.group(2)] * count
    else:
        parts = [p for p in sets_str.split(",") if p.strip()]

    result: list[PlannedSet] = []
    for index, part in enumerate(parts):
        if part.strip() == "-":
            result.append(PlannedSet(order_index=index))
            continue
        weight, reps = parse_set_string(part)
        result.append(PlannedSet(order_index=index, target_weight=weight, target_reps=reps))
    return result
