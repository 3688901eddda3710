"""
CLI entry point using Typer.

Provides commands for plan/cycle based workout logging:
- init: Create the data directory and profile
- plan-*: Build and follow single plans
- cycle-*: Build and follow rotations of plans
- today / log-set / complete: Log today's workout
- change-day / preview: Rescue a day or look ahead
"""

import logging
from typing import Annotated, Optional

import typer

from ..core.dates import validate_transition_hour
from ..core.errors import ProgressionError
from ..io.serializers import ValidationError
from . import views
from .app import DataDirOption, app, get_store, save_store
from .commands import cycles, plans, workout  # noqa: F401  (registers commands)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show engine debug logging"),
    ] = False,
) -> None:
    """
    Workout log with plan and cycle progression.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def init(
    transition_hour: Annotated[
        Optional[int],
        typer.Option(
            "--transition-hour",
            "-t",
            help="Hour (0-23) at which a new workout day starts",
        ),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Create the data directory and local profile."""
    store = get_store(data_dir)
    existed = store.exists()

    if transition_hour is not None:
        try:
            validate_transition_hour(transition_hour)
        except ValueError as e:
            views.print_error(str(e))
            raise typer.Exit(1)

    try:
        profile = store.init()
    except (ValidationError, ProgressionError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if transition_hour is not None:
        profile.day_transition_hour = transition_hour
    save_store(store)

    if existed:
        views.print_success(f"Profile updated in {store.data_dir}")
    else:
        views.print_success(f"Initialized repcycle in {store.data_dir}")
    views.print_info(f"Day transition hour: {profile.day_transition_hour}:00")


if __name__ == "__main__":
    app()
