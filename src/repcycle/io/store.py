"""
JSON-file storage for profile, plans, cycles, progress and workout days.

Entities are held in an in-memory arena keyed by id; ``save`` writes the whole
arena back to the data directory.  Cross references stay as ids, so a plan
deleted while a cycle still points at it simply fails to resolve.
"""

import json
import logging
from datetime import date
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Callable, Literal

from ..core.config import (
    CYCLES_FILENAME,
    PLAN_PROGRESS_FILENAME,
    PLANS_FILENAME,
    PROFILE_FILENAME,
    WORKOUTS_FILENAME,
)
from ..core.engine.config_loader import data_dir_setting, transition_hour_setting
from ..core.errors import StorageFailure
from ..core.models import Cycle, Plan, PlanProgress, Profile, WorkoutDay
from .serializers import (
    ValidationError,
    cycle_to_dict,
    dict_to_cycle,
    dict_to_plan,
    dict_to_plan_progress,
    dict_to_profile,
    json_line_to_workout_day,
    plan_progress_to_dict,
    plan_to_dict,
    profile_to_dict,
    workout_day_to_json_line,
)

logger = logging.getLogger(__name__)

EntityKind = Literal["plan", "cycle", "plan_progress", "workout_day"]
Entity = Profile | Plan | Cycle | PlanProgress | WorkoutDay


def get_default_data_dir() -> Path:
    """Data directory from ``REPCYCLE_HOME``, settings, or ``~/.repcycle``."""
    return data_dir_setting()


class Store:
    """
    Arena of all persisted entities.

    With ``data_dir=None`` the store is in-memory only: ``save`` and ``load``
    do nothing.  Mutations made by the engine are not written until ``save``
    is called.
    """

    def __init__(self, data_dir: str | Path | None = None):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding the JSON files, or None for in-memory
        """
        self.data_dir = Path(data_dir) if data_dir is not None else None
        self.profile: Profile | None = None
        self.plans: dict[str, Plan] = {}
        self.cycles: dict[str, Cycle] = {}
        self.plan_progress: dict[str, PlanProgress] = {}
        self.workout_days: dict[str, WorkoutDay] = {}

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def _path(self, filename: str) -> Path:
        if self.data_dir is None:
            raise ValueError("In-memory store has no data directory")
        return self.data_dir / filename

    def exists(self) -> bool:
        """Check if the data directory has been initialized."""
        return self.data_dir is not None and self._path(PROFILE_FILENAME).exists()

    def init(self) -> Profile:
        """
        Create the data directory and a fresh profile if none exists.

        Returns:
            The (possibly pre-existing) profile
        """
        if self.exists():
            self.load()
        profile = self.get_or_create_profile()
        self.save()
        return profile

    def load(self) -> None:
        """
        Read every file into the arena, replacing what is in memory.

        Missing files load as empty collections.

        Raises:
            FileNotFoundError: If the data directory was never initialized
            ValidationError: If any file holds malformed data
        """
        if self.data_dir is None:
            return
        if not self.exists():
            raise FileNotFoundError(
                f"No data found at {self.data_dir}. Run 'init' first."
            )

        self.profile = dict_to_profile(self._read_json(PROFILE_FILENAME))
        self.plans = {p.id: p for p in map(dict_to_plan, self._read_json_list(PLANS_FILENAME))}
        self.cycles = {c.id: c for c in map(dict_to_cycle, self._read_json_list(CYCLES_FILENAME))}
        self.plan_progress = {
            p.id: p
            for p in map(dict_to_plan_progress, self._read_json_list(PLAN_PROGRESS_FILENAME))
        }

        self.workout_days = {}
        workouts_path = self._path(WORKOUTS_FILENAME)
        if workouts_path.exists():
            with open(workouts_path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        workout_day = json_line_to_workout_day(line)
                    except ValidationError as e:
                        raise ValidationError(f"{WORKOUTS_FILENAME} line {line_num}: {e}") from e
                    self.workout_days[workout_day.id] = workout_day

        logger.debug(
            "Loaded %d plans, %d cycles, %d workout days from %s",
            len(self.plans),
            len(self.cycles),
            len(self.workout_days),
            self.data_dir,
        )

    def _read_json(self, filename: str) -> Any:
        try:
            with open(self._path(filename), "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {filename}: {e}") from e

    def _read_json_list(self, filename: str) -> list[dict[str, Any]]:
        if not self._path(filename).exists():
            return []
        data = self._read_json(filename)
        if not isinstance(data, list):
            raise ValidationError(f"{filename} must contain a JSON list")
        return data

    def _write_atomic(self, filename: str, payload: str) -> None:
        target = self._path(filename)
        with NamedTemporaryFile("w", dir=target.parent, delete=False, encoding="utf-8") as tmp:
            tmp.write(payload)
            temp_path = Path(tmp.name)
        try:
            temp_path.replace(target)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    def save(self) -> None:
        """
        Write the whole arena to disk.

        Each file is written to a temporary sibling and then renamed over the
        original, so a crash never leaves a half-written file.

        Raises:
            StorageFailure: If any filesystem operation fails
        """
        if self.data_dir is None:
            return
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            if self.profile is not None:
                self._write_atomic(
                    PROFILE_FILENAME, json.dumps(profile_to_dict(self.profile), indent=2) + "\n"
                )
            self._write_atomic(
                PLANS_FILENAME,
                json.dumps([plan_to_dict(p) for p in self.plans.values()], indent=2) + "\n",
            )
            self._write_atomic(
                CYCLES_FILENAME,
                json.dumps([cycle_to_dict(c) for c in self.cycles.values()], indent=2) + "\n",
            )
            self._write_atomic(
                PLAN_PROGRESS_FILENAME,
                json.dumps(
                    [plan_progress_to_dict(p) for p in self.plan_progress.values()], indent=2
                )
                + "\n",
            )
            workout_days = sorted(self.workout_days.values(), key=lambda w: w.date)
            self._write_atomic(
                WORKOUTS_FILENAME,
                "".join(workout_day_to_json_line(w) + "\n" for w in workout_days),
            )
        except OSError as e:
            logger.error("Saving to %s failed: %s", self.data_dir, e)
            raise StorageFailure(f"Could not save data to {self.data_dir}: {e}") from e

    # ------------------------------------------------------------------
    # Arena
    # ------------------------------------------------------------------

    def _table(self, entity: Entity) -> dict[str, Any]:
        if isinstance(entity, Plan):
            return self.plans
        if isinstance(entity, Cycle):
            return self.cycles
        if isinstance(entity, PlanProgress):
            return self.plan_progress
        if isinstance(entity, WorkoutDay):
            return self.workout_days
        raise TypeError(f"Unsupported entity type: {type(entity).__name__}")

    def insert(self, entity: Entity) -> None:
        """Add (or replace) an entity in the arena."""
        if isinstance(entity, Profile):
            self.profile = entity
            return
        self._table(entity)[entity.id] = entity

    def delete(self, entity: Entity) -> None:
        """Remove an entity.  Deleting something absent is a no-op."""
        if isinstance(entity, Profile):
            if self.profile is not None and self.profile.id == entity.id:
                self.profile = None
            return
        self._table(entity).pop(entity.id, None)

    def query(
        self, kind: EntityKind, predicate: Callable[[Any], bool] | None = None
    ) -> list[Any]:
        """All entities of *kind* matching *predicate* (all when None)."""
        tables: dict[str, dict[str, Any]] = {
            "plan": self.plans,
            "cycle": self.cycles,
            "plan_progress": self.plan_progress,
            "workout_day": self.workout_days,
        }
        if kind not in tables:
            raise ValueError(f"Unknown entity kind: {kind!r}")
        values = list(tables[kind].values())
        if predicate is None:
            return values
        return [v for v in values if predicate(v)]

    def get_plan(self, plan_id: str | None) -> Plan | None:
        if plan_id is None:
            return None
        return self.plans.get(plan_id)

    def get_cycle(self, cycle_id: str | None) -> Cycle | None:
        if cycle_id is None:
            return None
        return self.cycles.get(cycle_id)

    def get_workout_day_by_id(self, workout_day_id: str) -> WorkoutDay | None:
        return self.workout_days.get(workout_day_id)

    def find_plan_progress(self, profile_id: str, plan_id: str) -> PlanProgress | None:
        for progress in self.plan_progress.values():
            if progress.profile_id == profile_id and progress.plan_id == plan_id:
                return progress
        return None

    def find_workout_day(self, profile_id: str, day: date) -> WorkoutDay | None:
        for workout_day in self.workout_days.values():
            if workout_day.profile_id == profile_id and workout_day.date == day:
                return workout_day
        return None

    def get_or_create_profile(self) -> Profile:
        """Return the single local profile, creating it from settings if absent."""
        if self.profile is None:
            self.profile = Profile(day_transition_hour=transition_hour_setting())
            logger.info("Created profile %s", self.profile.id)
        return self.profile
