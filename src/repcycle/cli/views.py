"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of plans, cycles and workouts.
"""

from rich.console import Console
from rich.table import Table

from ..core.cycle_progress import CycleState
from ..core.models import Cycle, DayPreview, Plan, PlanProgress, WorkoutDay, WorkoutSet
from ..core.workout import WorkoutStatistics

console = Console()

SHORT_ID_LENGTH = 8


def short_id(entity_id: str) -> str:
    return entity_id[:SHORT_ID_LENGTH]


def _fmt_set_values(workout_set: WorkoutSet) -> str:
    if workout_set.metric_type == "time_distance":
        parts = []
        if workout_set.duration_seconds is not None:
            parts.append(f"{workout_set.duration_seconds}s")
        if workout_set.distance_meters is not None:
            parts.append(f"{workout_set.distance_meters:g}m")
        return " / ".join(parts) or "-"
    if workout_set.metric_type == "completion":
        return "done" if workout_set.is_completed else "-"
    weight = "-" if workout_set.weight is None else f"{workout_set.weight:g}kg"
    reps = "-" if workout_set.reps is None else str(workout_set.reps)
    if workout_set.metric_type == "bodyweight_reps":
        return f"BW × {reps}"
    return f"{weight} × {reps}"


def format_plan_table(plan: Plan, current_day_index: int | None = None) -> Table:
    """
    Create a Rich table showing each plan day and its exercises.

    Args:
        plan: Plan to display
        current_day_index: 1-based day to highlight, if any

    Returns:
        Rich Table object
    """
    table = Table(title=f"Plan: {plan.name}")

    table.add_column("Day", justify="right", style="cyan", width=4)
    table.add_column("Name", style="magenta")
    table.add_column("Exercises")
    table.add_column("Sets", justify="right")

    for plan_day in plan.sorted_days:
        marker = "▶ " if plan_day.day_index == current_day_index else ""
        if plan_day.is_rest_day:
            exercises = "[dim]rest[/dim]"
        else:
            exercises = ", ".join(
                f"{e.exercise_id}"
                + (
                    f" ({', '.join(str(s) for s in e.sorted_planned_sets)})"
                    if e.planned_sets
                    else f" ×{e.planned_set_count}"
                )
                for e in plan_day.sorted_exercises
            ) or "-"
        table.add_row(
            f"{marker}{plan_day.day_index}",
            plan_day.display_name,
            exercises,
            str(plan_day.total_planned_sets),
        )

    return table


def format_plans_list(
    plans: list[Plan], active_plan_id: str | None, progress: dict[str, PlanProgress]
) -> Table:
    table = Table(title="Plans")

    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Days", justify="right")
    table.add_column("Exercises", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Active", justify="center")

    for plan in sorted(plans, key=lambda p: p.name.lower()):
        p = progress.get(plan.id)
        table.add_row(
            short_id(plan.id),
            plan.name + (" [dim](archived)[/dim]" if plan.is_archived else ""),
            str(plan.day_count),
            str(plan.total_exercise_count),
            str(p.current_day_index) if p else "-",
            "✓" if plan.id == active_plan_id else "",
        )

    return table


def format_cycle_table(cycle: Cycle, plans: dict[str, Plan]) -> Table:
    """Rich table listing the cycle's plans in rotation order."""
    table = Table(title=f"Cycle: {cycle.name}" + (" (active)" if cycle.is_active else ""))

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Plan", style="cyan")
    table.add_column("Days", justify="right")
    table.add_column("Position")

    progress = cycle.progress
    for position, item in enumerate(cycle.sorted_items):
        plan = plans.get(item.plan_id)
        if plan is None:
            name, days = "[red](deleted)[/red]", "-"
        else:
            name, days = plan.name, str(plan.day_count)
        here = ""
        if progress is not None and progress.current_item_index == position:
            here = f"▶ day {progress.current_day_index + 1}"
        table.add_row(str(position + 1), name, days, here)

    return table


def format_workout_table(workout_day: WorkoutDay) -> Table:
    """Rich table of the workout's exercises and sets, soft-deleted sets hidden."""
    table = Table(title=f"Workout {workout_day.date.isoformat()}")

    table.add_column("Ex", justify="right", style="dim", width=3)
    table.add_column("Exercise", style="cyan")
    table.add_column("Set", justify="right")
    table.add_column("Value")
    table.add_column("Done", justify="center")
    table.add_column("ID", style="dim")

    for number, entry in enumerate(workout_day.sorted_entries, 1):
        sets = entry.sorted_sets
        if not sets:
            table.add_row(str(number), entry.exercise_id, "-", "-", "", "")
            continue
        for i, workout_set in enumerate(sets):
            table.add_row(
                str(number) if i == 0 else "",
                entry.exercise_id if i == 0 else "",
                str(workout_set.set_index),
                _fmt_set_values(workout_set),
                "[green]✓[/green]" if workout_set.is_completed else "",
                short_id(workout_set.id),
            )

    return table


def print_workout(
    workout_day: WorkoutDay,
    header: str | None = None,
    statistics: WorkoutStatistics | None = None,
) -> None:
    if header:
        console.print(f"[bold]{header}[/bold]")
    if workout_day.mode == "free" and not workout_day.entries:
        print_info("Free workout, nothing planned for today.")
        return
    if workout_day.mode == "routine" and not workout_day.entries:
        print_info("Rest day.")
        return
    console.print(format_workout_table(workout_day))
    if statistics is not None:
        console.print(
            f"[dim]{statistics.completed_sets} sets done across "
            f"{statistics.exercises_with_sets} exercise(s), "
            f"volume {statistics.total_volume:g} kg[/dim]"
        )


def print_cycle_state(state: CycleState) -> None:
    console.print(f"[bold cyan]{state}[/bold cyan]")


def print_preview(preview: DayPreview, target: str) -> None:
    plan = f"{preview.plan_name}: " if preview.plan_name else ""
    console.print(f"{target}: [bold]{plan}{preview}[/bold]")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
