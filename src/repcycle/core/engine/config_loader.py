"""
YAML → typed settings loader.

Loads defaults from settings.yaml (bundled with the package) and optionally
merges user overrides from ~/.repcycle/settings.yaml.

Usage:
    from repcycle.core.engine.config_loader import load_settings
    settings = load_settings()
    hour = settings.get("day_transition_hour", 3)

If the bundled YAML cannot be read, lookups fall back to the Python defaults
in config.py.  If the user override file exists but has parse errors, a
warning is emitted and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..config import (
    DATA_DIR_ENV_VAR,
    DEFAULT_DATA_DIR_NAME,
    DEFAULT_PLANNED_SET_COUNT,
    DEFAULT_TRANSITION_HOUR,
    MAX_TRANSITION_HOUR,
    MIN_TRANSITION_HOUR,
    SETTINGS_FILENAME,
)

_DEFAULTS: dict[str, Any] = {
    "day_transition_hour": DEFAULT_TRANSITION_HOUR,
    "default_planned_set_count": DEFAULT_PLANNED_SET_COUNT,
    "data_dir": "",
}

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; non-mapping documents yield {}."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _home_dir() -> Path:
    return Path(os.environ.get("HOME", "~")).expanduser()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled settings.yaml, or None if not found."""
    ref = importlib.resources.files("repcycle").joinpath(SETTINGS_FILENAME)
    if ref.is_file():
        return Path(str(ref))
    return None


def get_user_yaml_path() -> Path | None:
    """Return ~/.repcycle/settings.yaml if it exists, else None."""
    p = _home_dir() / DEFAULT_DATA_DIR_NAME / SETTINGS_FILENAME
    return p if p.exists() else None


def load_settings() -> dict[str, Any]:
    """
    Load and merge settings from YAML sources.

    Load order (later overrides earlier):
    1. Python defaults from config.py
    2. Bundled src/repcycle/settings.yaml
    3. User override at ~/.repcycle/settings.yaml

    Returns:
        Merged settings dict.
    """
    settings: dict[str, Any] = dict(_DEFAULTS)

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        settings = _deep_merge(settings, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        try:
            settings = _deep_merge(settings, _load_yaml_file(user))
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(
                f"repcycle: ignoring unreadable settings file {user} ({exc})",
                stacklevel=2,
            )

    return settings


def transition_hour_setting(settings: dict[str, Any] | None = None) -> int:
    """Return the configured day transition hour, clamped to 0..23."""
    if settings is None:
        settings = load_settings()
    try:
        hour = int(settings.get("day_transition_hour", DEFAULT_TRANSITION_HOUR))
    except (TypeError, ValueError):
        warnings.warn(
            "repcycle: day_transition_hour is not an integer; using default",
            stacklevel=2,
        )
        return DEFAULT_TRANSITION_HOUR
    return max(MIN_TRANSITION_HOUR, min(MAX_TRANSITION_HOUR, hour))


def data_dir_setting(settings: dict[str, Any] | None = None) -> Path:
    """
    Resolve the data directory.

    ``$REPCYCLE_HOME`` wins, then the ``data_dir`` setting, then ~/.repcycle.
    """
    env = os.environ.get(DATA_DIR_ENV_VAR)
    if env:
        return Path(env).expanduser()
    if settings is None:
        settings = load_settings()
    configured = settings.get("data_dir") or ""
    if configured:
        return Path(str(configured)).expanduser()
    return _home_dir() / DEFAULT_DATA_DIR_NAME
