"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of engine results.
"""

from rich.console import Console
from rich.table import Table

from ..core.models import (
    ExerciseTargets,
    SeriesTarget,
    VolumeDecision,
    WeekCloseResult,
    WeeklyFeedback,
)

console = Console()
err_console = Console(stderr=True)


def _fmt_delta(delta: int) -> str:
    if delta > 0:
        return f"[green]+{delta}[/green]"
    if delta < 0:
        return f"[red]{delta}[/red]"
    return "[dim]0[/dim]"


def _fmt_reps(reps: int | None) -> str:
    return str(reps) if reps is not None else "[yellow]manual[/yellow]"


def print_series_target(target: SeriesTarget) -> None:
    """Print a projected series target with its active flags."""
    console.print(f"Weight target: [bold]{target.weight_target:g} kg[/bold]")
    console.print(f"Reps target:   [bold]{_fmt_reps(target.reps_target)}[/bold]")
    active = target.flags.active()
    if active:
        console.print(f"[dim]Flags: {', '.join(active)}[/dim]")
    if target.reps_target is None:
        print_warning("No safe rep target within bounds; choose reps manually.")


def print_exercise_targets(targets: ExerciseTargets) -> None:
    """Print session-level targets and the suggestion, if any."""
    console.print(f"Load target:      [bold]{targets.load_target:g} kg[/bold]")
    console.print(f"Reps target hint: [bold]{targets.reps_target_hint}[/bold]")
    if targets.suggestion:
        print_warning(targets.suggestion)


def format_feedback_table(feedback: WeeklyFeedback) -> Table:
    """Create a one-row table of weekly scores."""
    table = Table(title="Weekly feedback")
    for column in ("Fatigue", "DOMS", "Pump", "Pain", "Fatigue eff."):
        table.add_column(column, justify="right")
    table.add_row(
        str(feedback.fatigue_week),
        str(feedback.doms_week),
        str(feedback.pump_week),
        str(feedback.pain_week),
        str(feedback.fatigue_eff),
    )
    return table


def _decision_note(decision: VolumeDecision) -> str:
    notes: list[str] = []
    if decision.pain.pain_override:
        notes.append("pain override")
    if decision.smoothing.smoothing_blocked:
        notes.append(f"waiting ({decision.smoothing.state.consecutive_count}/2 weeks)")
    if decision.no_candidate:
        notes.append("no eligible exercise")
    return ", ".join(notes)


def format_week_close_table(result: WeekCloseResult) -> Table:
    """Create a table with one row per muscle group decision."""
    table = Table(title=f"Week {result.week_index} close ({result.mesocycle_id})")
    table.add_column("Muscle group", style="cyan")
    table.add_column("F/D/P/Pain", justify="center")
    table.add_column("Matrix", justify="right")
    table.add_column("Final", justify="right")
    table.add_column("Exercise")
    table.add_column("Notes", style="dim")

    adjustments = {a.muscle_group_id: a for a in result.adjustments}
    for mg_id, decision in result.decisions.items():
        fb = decision.feedback
        adj = adjustments.get(mg_id)
        exercise = (
            f"{adj.candidate_id}: {adj.prev_sets_target} → {adj.new_sets_target} sets"
            if adj is not None
            else "-"
        )
        table.add_row(
            mg_id,
            f"{fb.fatigue_eff}/{fb.doms_week}/{fb.pump_week}/{fb.pain_week}",
            _fmt_delta(decision.delta_matrix),
            _fmt_delta(decision.delta_sets),
            exercise,
            _decision_note(decision),
        )
    return table


def print_week_close(result: WeekCloseResult) -> None:
    """Print the week-close table and a propagation summary."""
    console.print(format_week_close_table(result))
    for adj in result.adjustments:
        if adj.propagated_ids:
            print_info(
                f"{adj.candidate_id}: mirrored to {len(adj.propagated_ids)} future session(s)"
            )


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
