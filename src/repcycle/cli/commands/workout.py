"""Workout commands: today, log-set, delete-set, restore-set, complete, change-day, preview."""

from typing import Annotated, Optional

import typer

from ...core import cycle_progress, plan_progress
from ...core.activation import get_active_cycle
from ...core.dates import today_workout_date
from ...core.day_change import change_day
from ...core.errors import HasCompletedSets, ProgressionError
from ...core.models import Profile, WorkoutDay, WorkoutSet
from ...core.today import complete_workout_day, setup_today_workout
from ...core.workout import delete_set, get_statistics, get_workout_day, log_set, restore_set
from ...io.serializers import ValidationError, parse_set_string, validate_date
from ...io.store import Store
from .. import views
from ..app import DataDirOption, app, get_clock, open_store, save_store


def _today_workout(store: Store, profile: Profile) -> WorkoutDay:
    try:
        return setup_today_workout(store, profile, get_clock())
    except ProgressionError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def _find_set(workout_day: WorkoutDay, ref: str) -> WorkoutSet:
    matches = [
        s for e in workout_day.entries for s in e.sets if s.id == ref or s.id.startswith(ref)
    ]
    if len(matches) != 1:
        views.print_error(
            f"No set matches '{ref}'" if not matches else f"'{ref}' matches {len(matches)} sets"
        )
        raise typer.Exit(1)
    return matches[0]


def _position_header(store: Store, profile: Profile, workout_day: WorkoutDay) -> str | None:
    if workout_day.mode != "routine":
        return None
    if profile.execution_mode == "cycle":
        cycle = get_active_cycle(store, profile.id)
        info = cycle_progress.get_day_info(store, cycle, workout_day.routine_day_id) if cycle else None
    else:
        plan = store.get_plan(workout_day.routine_plan_id)
        info = plan_progress.get_day_info(plan, workout_day.routine_day_id) if plan else None
    if info is None:
        return None
    return f"{info.plan_name}: {info}"


@app.command()
def today(
    data_dir: DataDirOption = None,
) -> None:
    """Show today's workout, building it from the current plan day if needed."""
    store = open_store(data_dir)
    profile = store.get_or_create_profile()
    workout_day = _today_workout(store, profile)
    save_store(store)

    views.print_workout(
        workout_day,
        header=_position_header(store, profile, workout_day),
        statistics=get_statistics(workout_day),
    )


@app.command("log-set")
def log_set_cmd(
    exercise: Annotated[int, typer.Argument(help="Exercise number as shown by 'today'")],
    value: Annotated[
        Optional[str],
        typer.Argument(help="Set as WEIGHTxREPS (60x8) or REPS (12)"),
    ] = None,
    duration: Annotated[
        Optional[int],
        typer.Option("--duration", help="Duration in seconds (time/distance sets)"),
    ] = None,
    distance: Annotated[
        Optional[float],
        typer.Option("--distance", help="Distance in meters (time/distance sets)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Log a completed set on today's workout.

    Pre-filled planned sets are filled in order before new sets are added:

      repcycle log-set 1 60x8
    """
    store = open_store(data_dir)
    profile = store.get_or_create_profile()
    workout_day = _today_workout(store, profile)

    entries = workout_day.sorted_entries
    if not 1 <= exercise <= len(entries):
        views.print_error(f"Exercise number must be between 1 and {len(entries)}")
        raise typer.Exit(1)
    entry = entries[exercise - 1]

    weight: float | None = None
    reps: int | None = None
    try:
        if value is not None:
            weight, reps = parse_set_string(value)
        workout_set = log_set(
            workout_day,
            entry.id,
            weight=weight,
            reps=reps,
            duration_seconds=duration,
            distance_meters=distance,
            at=get_clock().now(),
        )
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    save_store(store)
    views.print_success(f"Logged set {workout_set.set_index} of {entry.exercise_id}")
    if workout_day.is_routine_completed:
        views.print_info("All planned sets done. Run 'complete' to finish the workout.")


@app.command("delete-set")
def delete_set_cmd(
    set_ref: Annotated[str, typer.Argument(help="Set id (or prefix) as shown by 'today'")],
    data_dir: DataDirOption = None,
) -> None:
    """Delete a set from today's workout (can be undone with 'restore-set')."""
    store = open_store(data_dir)
    profile = store.get_or_create_profile()
    workout_day = _today_workout(store, profile)

    workout_set = _find_set(workout_day, set_ref)
    delete_set(workout_day, workout_set.id)
    save_store(store)

    views.print_success(f"Deleted set {views.short_id(workout_set.id)}")
    views.print_info(f"Undo with: repcycle restore-set {views.short_id(workout_set.id)}")


@app.command("restore-set")
def restore_set_cmd(
    set_ref: Annotated[str, typer.Argument(help="Set id (or prefix)")],
    data_dir: DataDirOption = None,
) -> None:
    """Bring back a deleted set."""
    store = open_store(data_dir)
    profile = store.get_or_create_profile()
    workout_day = _today_workout(store, profile)

    workout_set = _find_set(workout_day, set_ref)
    restore_set(workout_day, workout_set.id)
    save_store(store)

    views.print_success(f"Restored set {views.short_id(workout_set.id)}")


@app.command()
def complete(
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Complete an earlier workout instead (YYYY-MM-DD)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Finish a plan workout and let progress move on.

    Defaults to today's workout.  Use --date to record a workout from an
    earlier day that was logged but never completed:

      repcycle complete --date 2026-03-09
    """
    store = open_store(data_dir)
    profile = store.get_or_create_profile()
    workout_day = _today_workout(store, profile)

    if date is not None:
        try:
            target = validate_date(date)
        except ValidationError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
        if target > workout_day.date:
            views.print_error(f"{target} is in the future")
            raise typer.Exit(1)
        if target != workout_day.date:
            workout_day = get_workout_day(store, profile.id, target)
            if workout_day is None:
                views.print_error(f"No workout on {target}")
                raise typer.Exit(1)

    try:
        advanced = complete_workout_day(store, profile, workout_day, get_clock())
    except (ProgressionError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    save_store(store)
    views.print_success(f"Workout of {workout_day.date} completed")
    if advanced and profile.execution_mode == "cycle":
        cycle = get_active_cycle(store, profile.id)
        state = cycle_progress.get_current_state_info(store, cycle, get_clock().now())
        views.print_cycle_state(state)


@app.command("change-day")
def change_day_cmd(
    day: Annotated[int, typer.Argument(help="Plan day to switch to (1-based)")],
    skip: Annotated[
        bool,
        typer.Option("--skip", help="Also move progress to this day (skip the days in between)"),
    ] = False,
    data_dir: DataDirOption = None,
) -> None:
    """Rebuild today's workout from a different plan day."""
    store = open_store(data_dir)
    profile = store.get_or_create_profile()
    workout_day = _today_workout(store, profile)

    try:
        plan_day = change_day(store, profile, workout_day, day, skip, get_clock().now())
    except HasCompletedSets as e:
        views.print_error(str(e))
        views.print_info("Delete the completed sets first if you really want to switch.")
        raise typer.Exit(1)
    except ProgressionError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    save_store(store)
    views.print_success(f"Today is now {plan_day.display_name}")
    views.print_workout(workout_day)


@app.command()
def preview(
    date: Annotated[str, typer.Argument(help="Date to preview (YYYY-MM-DD)")],
    data_dir: DataDirOption = None,
) -> None:
    """Estimate which plan day falls on a date, assuming nothing else is completed."""
    store = open_store(data_dir)
    profile = store.get_or_create_profile()

    try:
        target = validate_date(date)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    today_day = today_workout_date(get_clock(), profile.day_transition_hour)

    try:
        if profile.execution_mode == "cycle":
            cycle = get_active_cycle(store, profile.id)
            result = (
                cycle_progress.get_preview_day_info(store, cycle, target, today_day)
                if cycle
                else None
            )
        elif profile.active_plan_id is not None:
            result = plan_progress.get_preview_day_info(
                store, profile.id, profile.active_plan_id, target, today_day
            )
        else:
            result = None
    except ProgressionError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if result is None:
        views.print_info("Nothing to preview: no active plan or cycle.")
        return
    views.print_preview(result, target.isoformat())
