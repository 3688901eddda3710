"""
Data models for repcycle.

Plans and cycles are templates; PlanProgress / CycleProgress are the pointers
into them; WorkoutDay / WorkoutExerciseEntry / WorkoutSet are the concrete log.
Cross-entity references (cycle item -> plan, workout day -> plan day) are held
as identifiers, never as object references, so a deleted plan shows up as an
unresolvable id rather than a dangling object.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

from .config import DEFAULT_PLANNED_SET_COUNT, DEFAULT_TRANSITION_HOUR, FIRST_PLAN_DAY_INDEX
from .dates import validate_transition_hour

ExecutionMode = Literal["single", "cycle"]
WorkoutMode = Literal["free", "routine"]
EntrySource = Literal["routine", "free"]
SetMetricType = Literal["weight_reps", "bodyweight_reps", "time_distance", "completion"]

EXECUTION_MODES: tuple[str, ...] = ("single", "cycle")
WORKOUT_MODES: tuple[str, ...] = ("free", "routine")
ENTRY_SOURCES: tuple[str, ...] = ("routine", "free")
METRIC_TYPES: tuple[str, ...] = ("weight_reps", "bodyweight_reps", "time_distance", "completion")


def new_id() -> str:
    """Fresh opaque identifier for a stored entity."""
    return uuid.uuid4().hex


def _check_metric_type(metric_type: str) -> None:
    if metric_type not in METRIC_TYPES:
        raise ValueError(f"Invalid metric_type: {metric_type!r}")


# =============================================================================
# PLAN TEMPLATES
# =============================================================================


@dataclass
class PlannedSet:
    """
    Target values for one set of a plan exercise.

    ``None`` targets mean "use previous value" / "unspecified".
    """

    order_index: int
    target_weight: float | None = None
    target_reps: int | None = None
    metric_type: SetMetricType = "weight_reps"
    target_duration_seconds: int | None = None
    target_distance_meters: float | None = None
    rest_time_seconds: int | None = None

    def __post_init__(self) -> None:
        _check_metric_type(self.metric_type)
        if self.target_weight is not None and self.target_weight < 0:
            raise ValueError("target_weight must be non-negative")
        if self.target_reps is not None and self.target_reps < 0:
            raise ValueError("target_reps must be non-negative")

    def __str__(self) -> str:
        weight = "-" if self.target_weight is None else f"{self.target_weight:g}kg"
        reps = "-" if self.target_reps is None else str(self.target_reps)
        return f"{weight} × {reps}"


@dataclass
class PlanExercise:
    """
    An exercise slot within a plan day.

    Either carries explicit ``planned_sets`` or only the legacy
    ``planned_set_count``; explicit sets win when present.
    """

    exercise_id: str
    order_index: int
    planned_set_count: int = DEFAULT_PLANNED_SET_COUNT
    planned_sets: list[PlannedSet] = field(default_factory=list)
    metric_type: SetMetricType = "weight_reps"
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        _check_metric_type(self.metric_type)
        if self.planned_set_count < 0:
            raise ValueError("planned_set_count must be non-negative")

    @property
    def sorted_planned_sets(self) -> list[PlannedSet]:
        return sorted(self.planned_sets, key=lambda s: s.order_index)

    @property
    def effective_set_count(self) -> int:
        return len(self.planned_sets) if self.planned_sets else self.planned_set_count

    def add_planned_set(self, planned_set: PlannedSet) -> None:
        self.planned_sets.append(planned_set)

    def replace_planned_sets(self, planned_sets: list[PlannedSet]) -> None:
        """Swap in a new set list, keeping ``planned_set_count`` in step."""
        self.planned_sets = list(planned_sets)
        self.planned_set_count = len(planned_sets)


@dataclass
class PlanDay:
    """A single day within a plan. ``day_index`` is 1-based."""

    day_index: int
    name: str | None = None
    note: str | None = None
    is_rest_day: bool = False
    exercises: list[PlanExercise] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    @property
    def sorted_exercises(self) -> list[PlanExercise]:
        return sorted(self.exercises, key=lambda e: e.order_index)

    @property
    def total_planned_sets(self) -> int:
        return sum(e.effective_set_count for e in self.exercises)

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return f"Day {self.day_index}"

    def create_exercise(
        self,
        exercise_id: str,
        planned_set_count: int = DEFAULT_PLANNED_SET_COUNT,
        metric_type: SetMetricType = "weight_reps",
    ) -> PlanExercise:
        """Append a new exercise after the current last one."""
        next_order = max((e.order_index for e in self.exercises), default=-1) + 1
        exercise = PlanExercise(
            exercise_id=exercise_id,
            order_index=next_order,
            planned_set_count=planned_set_count,
            metric_type=metric_type,
        )
        self.exercises.append(exercise)
        return exercise

    def remove_exercise(self, exercise_id: str) -> None:
        self.exercises = [e for e in self.exercises if e.id != exercise_id]
        self.reindex_exercises()

    def reindex_exercises(self) -> None:
        for index, exercise in enumerate(self.sorted_exercises):
            exercise.order_index = index

    def duplicate(self, new_day_index: int) -> "PlanDay":
        """Deep copy with fresh ids, placed at *new_day_index*."""
        copy = PlanDay(
            day_index=new_day_index,
            name=self.name,
            note=self.note,
            is_rest_day=self.is_rest_day,
        )
        for exercise in self.sorted_exercises:
            copy.exercises.append(
                PlanExercise(
                    exercise_id=exercise.exercise_id,
                    order_index=exercise.order_index,
                    planned_set_count=exercise.planned_set_count,
                    metric_type=exercise.metric_type,
                    planned_sets=[
                        PlannedSet(
                            order_index=s.order_index,
                            target_weight=s.target_weight,
                            target_reps=s.target_reps,
                            metric_type=s.metric_type,
                            target_duration_seconds=s.target_duration_seconds,
                            target_distance_meters=s.target_distance_meters,
                            rest_time_seconds=s.rest_time_seconds,
                        )
                        for s in exercise.sorted_planned_sets
                    ],
                )
            )
        return copy


@dataclass
class Plan:
    """
    A named multi-day training template.

    Invariant: after any structural edit made through these methods the
    days' ``day_index`` values are exactly 1..N.
    """

    profile_id: str
    name: str
    note: str | None = None
    is_archived: bool = False
    days: list[PlanDay] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Plan name must not be empty")

    @property
    def sorted_days(self) -> list[PlanDay]:
        return sorted(self.days, key=lambda d: d.day_index)

    @property
    def day_count(self) -> int:
        return len(self.days)

    @property
    def total_exercise_count(self) -> int:
        return sum(len(d.exercises) for d in self.days)

    def day(self, day_index: int) -> PlanDay | None:
        """Look up a day by its 1-based index."""
        for d in self.days:
            if d.day_index == day_index:
                return d
        return None

    def day_by_id(self, day_id: str) -> PlanDay | None:
        for d in self.days:
            if d.id == day_id:
                return d
        return None

    def create_day(
        self, name: str | None = None, note: str | None = None, is_rest_day: bool = False
    ) -> PlanDay:
        next_index = max((d.day_index for d in self.days), default=0) + 1
        plan_day = PlanDay(day_index=next_index, name=name, note=note, is_rest_day=is_rest_day)
        self.days.append(plan_day)
        return plan_day

    def remove_day(self, day_id: str) -> None:
        self.days = [d for d in self.days if d.id != day_id]
        self.reindex_days()

    def move_day(self, from_index: int, to_index: int) -> None:
        """Move the day at 1-based *from_index* to 1-based *to_index*."""
        days = self.sorted_days
        if not (1 <= from_index <= len(days) and 1 <= to_index <= len(days)):
            raise IndexError(f"Day index out of range (1–{len(days)})")
        moved = days.pop(from_index - 1)
        days.insert(to_index - 1, moved)
        for index, d in enumerate(days, start=FIRST_PLAN_DAY_INDEX):
            d.day_index = index

    def duplicate_day(self, day_id: str) -> PlanDay:
        source = self.day_by_id(day_id)
        if source is None:
            raise KeyError(day_id)
        next_index = max((d.day_index for d in self.days), default=0) + 1
        copy = source.duplicate(next_index)
        self.days.append(copy)
        return copy

    def reindex_days(self) -> None:
        """Renumber days 1..N in their current order."""
        for index, d in enumerate(self.sorted_days, start=FIRST_PLAN_DAY_INDEX):
            d.day_index = index

    def archive(self) -> None:
        self.is_archived = True

    def unarchive(self) -> None:
        self.is_archived = False


# =============================================================================
# PROGRESS POINTERS
# =============================================================================


@dataclass
class PlanProgress:
    """
    Single-plan pointer, one per (profile, plan).

    ``current_day_index`` is 1-based.  ``last_opened_date`` is None until the
    plan is first opened.  ``last_counted_date`` is the most recent workout
    day whose completion has already moved the pointer.
    """

    profile_id: str
    plan_id: str
    current_day_index: int = FIRST_PLAN_DAY_INDEX
    last_opened_date: date | None = None
    last_completed_date: date | None = None
    last_counted_date: date | None = None
    id: str = field(default_factory=new_id)

    def advance_to_next_day(self, total_days: int) -> None:
        """Move to the next day, wrapping from ``total_days`` back to 1."""
        if total_days <= 0:
            return
        self.current_day_index = (self.current_day_index % total_days) + 1


@dataclass
class CycleProgress:
    """
    Pointer into a cycle: 0-based item index and 0-based day index.

    ``last_completed_at`` holds the workout day (calendar day) of the most
    recent completion; ``last_advanced_at`` the instant of the last move.
    """

    current_item_index: int = 0
    current_day_index: int = 0
    last_advanced_at: datetime | None = None
    last_completed_at: date | None = None

    def advance_day(self, total_days: int, now: datetime | None = None) -> bool:
        """
        Step one day forward within the current plan.

        Returns:
            True if the plan's last day was passed (caller must advance plan)
        """
        self.current_day_index += 1
        if now is not None:
            self.last_advanced_at = now
        if self.current_day_index >= total_days:
            self.current_day_index = 0
            return True
        return False

    def advance_plan(self, total_items: int, now: datetime | None = None) -> None:
        self.current_item_index += 1
        self.current_day_index = 0
        if now is not None:
            self.last_advanced_at = now
        if self.current_item_index >= total_items:
            self.current_item_index = 0

    def reset(self) -> None:
        self.current_item_index = 0
        self.current_day_index = 0
        self.last_advanced_at = None
        self.last_completed_at = None

    def snapshot(self) -> tuple:
        return (
            self.current_item_index,
            self.current_day_index,
            self.last_advanced_at,
            self.last_completed_at,
        )

    def restore(self, snapshot: tuple) -> None:
        (
            self.current_item_index,
            self.current_day_index,
            self.last_advanced_at,
            self.last_completed_at,
        ) = snapshot


@dataclass(frozen=True)
class DayPreview:
    """Read-only answer to "which plan day is/was/will be this?" (1-based)."""

    day_index: int
    total_days: int
    day_name: str | None = None
    plan_name: str | None = None

    def __str__(self) -> str:
        label = f"Day {self.day_index}/{self.total_days}"
        if self.day_name:
            label += f" ({self.day_name})"
        return label


@dataclass
class CycleItem:
    """A slot in a cycle referencing a plan by id (not ownership)."""

    plan_id: str
    order: int
    note: str | None = None
    id: str = field(default_factory=new_id)


@dataclass
class Cycle:
    """
    An ordered rotation of plans.

    At most one cycle per profile is active; that is enforced by
    ``activation.set_active_cycle``, not here.
    """

    profile_id: str
    name: str
    is_active: bool = False
    items: list[CycleItem] = field(default_factory=list)
    progress: CycleProgress | None = None
    id: str = field(default_factory=new_id)

    @property
    def sorted_items(self) -> list[CycleItem]:
        return sorted(self.items, key=lambda i: i.order)

    @property
    def plan_count(self) -> int:
        return len(self.items)

    def add_plan(self, plan_id: str, note: str | None = None) -> CycleItem:
        next_order = max((i.order for i in self.items), default=-1) + 1
        item = CycleItem(plan_id=plan_id, order=next_order, note=note)
        self.items.append(item)
        return item

    def remove_item(self, item_id: str) -> None:
        self.items = [i for i in self.items if i.id != item_id]
        self.reindex_items()

    def move_item(self, from_index: int, to_index: int) -> None:
        """Move the item at 0-based *from_index* to 0-based *to_index*."""
        items = self.sorted_items
        if not (0 <= from_index < len(items) and 0 <= to_index < len(items)):
            raise IndexError(f"Item index out of range (0–{len(items) - 1})")
        moved = items.pop(from_index)
        items.insert(to_index, moved)
        for index, item in enumerate(items):
            item.order = index

    def reindex_items(self) -> None:
        for index, item in enumerate(self.sorted_items):
            item.order = index


@dataclass
class Profile:
    """The single local profile. No authentication exists."""

    execution_mode: ExecutionMode = "single"
    active_plan_id: str | None = None
    day_transition_hour: int = DEFAULT_TRANSITION_HOUR
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if self.execution_mode not in EXECUTION_MODES:
            raise ValueError(f"Invalid execution_mode: {self.execution_mode!r}")
        validate_transition_hour(self.day_transition_hour)


# =============================================================================
# CONCRETE WORKOUT LOG
# =============================================================================


@dataclass
class WorkoutSet:
    """
    One logged (or pre-filled, not yet logged) set.

    Sets are never physically removed once created by a user action;
    ``is_soft_deleted`` hides them and ``restore`` brings them back.
    """

    set_index: int
    metric_type: SetMetricType = "weight_reps"
    weight: float | None = None
    reps: int | None = None
    duration_seconds: int | None = None
    distance_meters: float | None = None
    rest_time_seconds: int | None = None
    is_completed: bool = False
    completed_at: datetime | None = None
    is_soft_deleted: bool = False
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        _check_metric_type(self.metric_type)

    @property
    def volume(self) -> float:
        if self.metric_type != "weight_reps" or self.weight is None or self.reps is None:
            return 0.0
        return self.weight * self.reps

    def complete(self, at: datetime | None = None) -> None:
        self.is_completed = True
        self.completed_at = at

    def uncomplete(self) -> None:
        self.is_completed = False
        self.completed_at = None

    def soft_delete(self) -> None:
        self.is_soft_deleted = True

    def restore(self) -> None:
        self.is_soft_deleted = False

    def update(
        self,
        weight: float | None = None,
        reps: int | None = None,
        duration_seconds: int | None = None,
        distance_meters: float | None = None,
    ) -> None:
        if weight is not None:
            self.weight = weight
        if reps is not None:
            self.reps = reps
        if duration_seconds is not None:
            self.duration_seconds = duration_seconds
        if distance_meters is not None:
            self.distance_meters = distance_meters


@dataclass
class WorkoutExerciseEntry:
    """An exercise performed on a workout day, owning its sets."""

    exercise_id: str
    order_index: int
    planned_set_count: int = 0
    source: EntrySource = "free"
    metric_type: SetMetricType = "weight_reps"
    sets: list[WorkoutSet] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        _check_metric_type(self.metric_type)
        if self.source not in ENTRY_SOURCES:
            raise ValueError(f"Invalid source: {self.source!r}")

    @property
    def active_sets(self) -> list[WorkoutSet]:
        return [s for s in self.sets if not s.is_soft_deleted]

    @property
    def sorted_sets(self) -> list[WorkoutSet]:
        return sorted(self.active_sets, key=lambda s: s.set_index)

    @property
    def completed_sets_count(self) -> int:
        return sum(1 for s in self.active_sets if s.is_completed)

    @property
    def has_completed_sets(self) -> bool:
        return self.completed_sets_count > 0

    @property
    def is_planned_sets_completed(self) -> bool:
        active = self.active_sets
        return bool(active) and all(s.is_completed for s in active)

    @property
    def total_volume(self) -> float:
        return sum(s.volume for s in self.active_sets if s.is_completed)

    @property
    def next_set_index(self) -> int:
        return max((s.set_index for s in self.active_sets), default=0) + 1

    def create_set(
        self,
        weight: float | None = None,
        reps: int | None = None,
        duration_seconds: int | None = None,
        distance_meters: float | None = None,
        is_completed: bool = False,
    ) -> WorkoutSet:
        workout_set = WorkoutSet(
            set_index=self.next_set_index,
            metric_type=self.metric_type,
            weight=weight,
            reps=reps,
            duration_seconds=duration_seconds,
            distance_meters=distance_meters,
            is_completed=is_completed,
        )
        self.sets.append(workout_set)
        return workout_set

    def create_placeholder_sets(self) -> None:
        """Top up to ``planned_set_count`` empty, uncompleted sets."""
        while len(self.active_sets) < self.planned_set_count:
            self.sets.append(
                WorkoutSet(set_index=self.next_set_index, metric_type=self.metric_type)
            )

    def find_set(self, set_id: str) -> WorkoutSet | None:
        for s in self.sets:
            if s.id == set_id:
                return s
        return None


@dataclass
class WorkoutDay:
    """
    The workout for one (profile, calendar day) pair.

    ``routine_plan_id`` / ``routine_day_id`` record which plan day this was
    expanded from; they are informational and never drive progression.
    """

    profile_id: str
    date: date
    mode: WorkoutMode = "free"
    routine_plan_id: str | None = None
    routine_day_id: str | None = None
    entries: list[WorkoutExerciseEntry] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if self.mode not in WORKOUT_MODES:
            raise ValueError(f"Invalid mode: {self.mode!r}")
        if isinstance(self.date, datetime):
            self.date = self.date.date()

    @property
    def sorted_entries(self) -> list[WorkoutExerciseEntry]:
        return sorted(self.entries, key=lambda e: e.order_index)

    @property
    def total_completed_sets(self) -> int:
        return sum(e.completed_sets_count for e in self.entries)

    @property
    def has_completed_sets(self) -> bool:
        return self.total_completed_sets > 0

    @property
    def total_exercises_with_sets(self) -> int:
        return sum(1 for e in self.entries if e.completed_sets_count > 0)

    @property
    def total_volume(self) -> float:
        return sum(e.total_volume for e in self.entries)

    @property
    def is_routine_completed(self) -> bool:
        """True when every planned exercise of a plan-derived day is fully logged."""
        if self.mode != "routine":
            return False
        return all(
            e.planned_set_count == 0 or e.is_planned_sets_completed for e in self.entries
        )

    @property
    def next_order_index(self) -> int:
        return max((e.order_index for e in self.entries), default=-1) + 1

    def add_entry(self, entry: WorkoutExerciseEntry) -> None:
        self.entries.append(entry)

    def remove_entry(self, entry_id: str) -> None:
        self.entries = [e for e in self.entries if e.id != entry_id]

    def clear_entries(self) -> None:
        self.entries = []

    def find_entry(self, entry_id: str) -> WorkoutExerciseEntry | None:
        for e in self.entries:
            if e.id == entry_id:
                return e
        return None

    def find_set(self, set_id: str) -> WorkoutSet | None:
        for e in self.entries:
            found = e.find_set(set_id)
            if found is not None:
                return found
        return None
