"""Cycle commands: cycle-create, cycle-add-plan, cycle-activate, cycle-show."""

from typing import Annotated, Optional

import typer

from ...core.activation import get_active_cycle, set_active_cycle
from ...core.cycle_progress import get_current_state_info
from ...core.errors import ProgressionError
from ...core.models import Cycle
from .. import views
from ..app import DataDirOption, app, find_cycle, find_plan, get_clock, open_store, save_store


@app.command("cycle-create")
def cycle_create(
    name: Annotated[str, typer.Argument(help="Cycle name")],
    data_dir: DataDirOption = None,
) -> None:
    """Create an empty cycle (a rotation of plans)."""
    store = open_store(data_dir)
    profile = store.get_or_create_profile()

    if not name.strip():
        views.print_error("Cycle name must not be empty")
        raise typer.Exit(1)

    cycle = Cycle(profile_id=profile.id, name=name.strip())
    store.insert(cycle)
    save_store(store)

    views.print_success(f"Created cycle '{cycle.name}' ({views.short_id(cycle.id)})")


@app.command("cycle-add-plan")
def cycle_add_plan(
    cycle_ref: Annotated[str, typer.Argument(help="Cycle name or id")],
    plan_ref: Annotated[str, typer.Argument(help="Plan name or id")],
    note: Annotated[
        Optional[str],
        typer.Option("--note", "-n", help="Note for this slot"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Append a plan to a cycle's rotation."""
    store = open_store(data_dir)
    cycle = find_cycle(store, cycle_ref)
    plan = find_plan(store, plan_ref)

    cycle.add_plan(plan.id, note=note)
    save_store(store)

    views.print_success(f"Added '{plan.name}' to cycle '{cycle.name}' (slot {cycle.plan_count})")


@app.command("cycle-activate")
def cycle_activate(
    cycle_ref: Annotated[str, typer.Argument(help="Cycle name or id")],
    data_dir: DataDirOption = None,
) -> None:
    """Make a cycle the active one and switch to cycle mode."""
    store = open_store(data_dir)
    profile = store.get_or_create_profile()
    cycle = find_cycle(store, cycle_ref)

    set_active_cycle(store, profile, cycle)
    save_store(store)

    views.print_success(f"Cycle '{cycle.name}' is now active")
    if not cycle.items:
        views.print_warning("This cycle has no plans yet. Add some with 'cycle-add-plan'.")


@app.command("cycle-show")
def cycle_show(
    cycle_ref: Annotated[
        Optional[str],
        typer.Argument(help="Cycle name or id (default: the active cycle)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Show a cycle's rotation and where it currently is."""
    store = open_store(data_dir)
    profile = store.get_or_create_profile()

    if cycle_ref is None:
        cycle = get_active_cycle(store, profile.id)
        if cycle is None:
            views.print_error("No active cycle")
            raise typer.Exit(1)
    else:
        cycle = find_cycle(store, cycle_ref)

    views.console.print(views.format_cycle_table(cycle, store.plans))

    try:
        state = get_current_state_info(store, cycle, get_clock().now())
    except ProgressionError as e:
        views.print_warning(str(e))
        return
    views.print_cycle_state(state)
    # Reading the state may have repaired a stale pointer.
    save_store(store)
