"""Shared Typer app object, shared option types, and store utility."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.clock import Clock, SystemClock
from ..core.errors import ProgressionError
from ..core.models import Cycle, Plan
from ..io.serializers import ValidationError
from ..io.store import Store, get_default_data_dir
from . import views

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-p", help="Data directory (default: ~/.repcycle)"),
]

app = typer.Typer(
    name="repcycle",
    help="Workout log with plan and cycle progression.",
    no_args_is_help=True,
)

# Replaced in tests to freeze "now".
clock: Clock = SystemClock()


def get_store(data_dir: Path | None) -> Store:
    """Get store from path or default location."""
    if data_dir is None:
        data_dir = get_default_data_dir()
    return Store(data_dir)


def open_store(data_dir: Path | None) -> Store:
    """Load an initialized store, or print an error and exit."""
    store = get_store(data_dir)
    if not store.exists():
        views.print_error(f"No data found at {store.data_dir}")
        views.print_info("Run 'init' first.")
        raise typer.Exit(1)
    try:
        store.load()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    return store


def save_store(store: Store) -> None:
    try:
        store.save()
    except ProgressionError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def get_clock() -> Clock:
    return clock


def _match(kind: str, candidates: list, ref: str):
    exact = [c for c in candidates if c.id == ref]
    if exact:
        return exact[0]
    matches = [c for c in candidates if c.id.startswith(ref) or c.name.lower() == ref.lower()]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        views.print_error(f"No {kind} matches '{ref}'")
    else:
        views.print_error(f"'{ref}' matches {len(matches)} {kind}s; use a longer id")
    raise typer.Exit(1)


def find_plan(store: Store, ref: str) -> Plan:
    """Resolve a plan by id, id prefix, or name."""
    return _match("plan", store.query("plan"), ref)


def find_cycle(store: Store, ref: str) -> Cycle:
    """Resolve a cycle by id, id prefix, or name."""
    return _match("cycle", store.query("cycle"), ref)
