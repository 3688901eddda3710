"""Plan commands: plan-create, plan-add-day, plan-add-exercise, plan-show, plan-list, plan-activate."""

from typing import Annotated, Optional

import typer

from ...core.activation import set_active_plan
from ...core.engine.config_loader import load_settings
from ...core.errors import ProgressionError
from ...core.models import METRIC_TYPES, Plan
from ...io.serializers import ValidationError, parse_planned_sets_string
from .. import views
from ..app import DataDirOption, app, find_plan, open_store, save_store


@app.command("plan-create")
def plan_create(
    name: Annotated[str, typer.Argument(help="Plan name")],
    days: Annotated[
        int,
        typer.Option("--days", "-d", help="Number of empty days to create"),
    ] = 0,
    note: Annotated[
        Optional[str],
        typer.Option("--note", "-n", help="Plan note"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Create a new training plan."""
    store = open_store(data_dir)
    profile = store.get_or_create_profile()

    if not name.strip():
        views.print_error("Plan name must not be empty")
        raise typer.Exit(1)
    if days < 0:
        views.print_error("--days must be non-negative")
        raise typer.Exit(1)

    plan = Plan(profile_id=profile.id, name=name.strip(), note=note)
    for _ in range(days):
        plan.create_day()
    store.insert(plan)
    save_store(store)

    views.print_success(f"Created plan '{plan.name}' ({views.short_id(plan.id)}) with {days} day(s)")


@app.command("plan-add-day")
def plan_add_day(
    plan_ref: Annotated[str, typer.Argument(help="Plan name or id")],
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Day name, e.g. 'Push'"),
    ] = None,
    rest: Annotated[
        bool,
        typer.Option("--rest", help="Mark as a rest day"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """Append a day to a plan."""
    store = open_store(data_dir)
    plan = find_plan(store, plan_ref)
    plan_day = plan.create_day(name=name, is_rest_day=rest)
    save_store(store)

    views.print_success(f"Added {plan_day.display_name} to '{plan.name}'")


@app.command("plan-add-exercise")
def plan_add_exercise(
    plan_ref: Annotated[str, typer.Argument(help="Plan name or id")],
    day: Annotated[int, typer.Argument(help="Day number (1-based)")],
    exercise_id: Annotated[str, typer.Argument(help="Exercise identifier, e.g. bench_press")],
    sets: Annotated[
        Optional[int],
        typer.Option("--sets", "-s", help="Number of placeholder sets"),
    ] = None,
    targets: Annotated[
        Optional[str],
        typer.Option("--targets", "-t", help="Planned sets, e.g. '60x8,60x8,55x10' or '3x(60x8)'"),
    ] = None,
    metric: Annotated[
        str,
        typer.Option("--metric", "-m", help=f"Metric type: {' | '.join(METRIC_TYPES)}"),
    ] = "weight_reps",
    data_dir: DataDirOption = None,
) -> None:
    """Add an exercise to a plan day."""
    store = open_store(data_dir)
    plan = find_plan(store, plan_ref)

    plan_day = plan.day(day)
    if plan_day is None:
        views.print_error(f"Plan '{plan.name}' has no day {day} (1-{plan.day_count})")
        raise typer.Exit(1)
    if metric not in METRIC_TYPES:
        views.print_error(f"Unknown metric type '{metric}'")
        raise typer.Exit(1)

    if sets is None:
        sets = int(load_settings().get("default_planned_set_count", 3))

    try:
        planned = parse_planned_sets_string(targets) if targets else []
        exercise = plan_day.create_exercise(exercise_id, planned_set_count=sets, metric_type=metric)
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    if planned:
        for planned_set in planned:
            planned_set.metric_type = metric
        exercise.replace_planned_sets(planned)

    save_store(store)
    views.print_success(
        f"Added {exercise_id} ({exercise.effective_set_count} sets) to {plan_day.display_name}"
    )


@app.command("plan-show")
def plan_show(
    plan_ref: Annotated[str, typer.Argument(help="Plan name or id")],
    data_dir: DataDirOption = None,
) -> None:
    """Show a plan's days and exercises."""
    store = open_store(data_dir)
    profile = store.get_or_create_profile()
    plan = find_plan(store, plan_ref)
    progress = store.find_plan_progress(profile.id, plan.id)

    views.console.print(views.format_plan_table(plan, progress.current_day_index if progress else None))
    if plan.note:
        views.console.print(f"[dim]{plan.note}[/dim]")


@app.command("plan-list")
def plan_list(
    data_dir: DataDirOption = None,
) -> None:
    """List all plans."""
    store = open_store(data_dir)
    profile = store.get_or_create_profile()
    plans = store.query("plan", lambda p: p.profile_id == profile.id)

    if not plans:
        views.print_info("No plans yet. Create one with 'plan-create'.")
        return

    progress = {
        p.plan_id: p for p in store.query("plan_progress", lambda p: p.profile_id == profile.id)
    }
    views.console.print(views.format_plans_list(plans, profile.active_plan_id, progress))


@app.command("plan-activate")
def plan_activate(
    plan_ref: Annotated[str, typer.Argument(help="Plan name or id")],
    data_dir: DataDirOption = None,
) -> None:
    """Follow a single plan (deactivates any active cycle)."""
    store = open_store(data_dir)
    profile = store.get_or_create_profile()
    plan = find_plan(store, plan_ref)

    try:
        set_active_plan(store, profile, plan.id)
    except ProgressionError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    save_store(store)
    views.print_success(f"Now following plan '{plan.name}'")
