"""
Configuration constants for the progression engine.

All adjustable defaults are centralized here. Values that users may want to
override at runtime are also exposed through settings.yaml (see
core/engine/config_loader.py); the constants below are the fallbacks.
"""

from typing import Final

# =============================================================================
# DAY BOUNDARY
# =============================================================================

DEFAULT_TRANSITION_HOUR: Final[int] = 3  # Sets logged before 03:00 count for the previous day
MIN_TRANSITION_HOUR: Final[int] = 0
MAX_TRANSITION_HOUR: Final[int] = 23

# =============================================================================
# PLAN DEFAULTS
# =============================================================================

DEFAULT_PLANNED_SET_COUNT: Final[int] = 3  # Legacy placeholder count for a new plan exercise
FIRST_PLAN_DAY_INDEX: Final[int] = 1  # PlanDay.day_index and PlanProgress are 1-based

# =============================================================================
# STORAGE
# =============================================================================

DEFAULT_DATA_DIR_NAME: Final[str] = ".repcycle"
DATA_DIR_ENV_VAR: Final[str] = "REPCYCLE_HOME"
SETTINGS_FILENAME: Final[str] = "settings.yaml"

PROFILE_FILENAME: Final[str] = "profile.json"
PLANS_FILENAME: Final[str] = "plans.json"
CYCLES_FILENAME: Final[str] = "cycles.json"
PLAN_PROGRESS_FILENAME: Final[str] = "plan_progress.json"
WORKOUTS_FILENAME: Final[str] = "workouts.jsonl"
