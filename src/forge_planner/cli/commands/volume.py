"""Weekly volume commands: aggregate, close-week, classify, rir."""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.adaptation import (
    aggregate_weekly_feedback,
    apply_pain_override,
    apply_smoothing,
    compute_delta_from_matrix,
)
from ...core.config import MAX_SETS_BY_ROLE
from ...core.exercise_defaults import derive_exercise_role, derive_joint_stress, derive_max_sets
from ...core.metrics import get_rir_target
from ...core.models import AutoVolumeState
from ...core.planner import close_week
from ...io.serializers import (
    ValidationError,
    dict_to_weekly_entry,
    load_week_snapshot,
    state_to_dict,
    week_close_result_to_dict,
)
from .. import views
from ..app import JsonOption, app


@app.command()
def aggregate(
    feedback_file: Annotated[
        Path,
        typer.Argument(help="JSON list of session feedback entries for one muscle group"),
    ],
    last_sign: Annotated[
        int,
        typer.Option("--last-sign", help="Sign of the previous week's delta (-1, 0, 1)"),
    ] = 0,
    streak: Annotated[
        int,
        typer.Option("--streak", help="Consecutive weeks with that sign"),
    ] = 0,
    json_out: JsonOption = False,
) -> None:
    """
    Aggregate one muscle group's week and show the resulting set delta.
    """
    try:
        with open(feedback_file, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, list):
            raise ValidationError("feedback file must contain a JSON list")
        entries = [dict_to_weekly_entry(e) for e in raw]
        state = AutoVolumeState(last_delta_sign=last_sign, consecutive_count=streak)
    except FileNotFoundError:
        views.print_error(f"File not found: {feedback_file}")
        raise typer.Exit(1)
    except (json.JSONDecodeError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    weekly = aggregate_weekly_feedback(entries)
    delta_matrix = compute_delta_from_matrix(weekly.fatigue_eff, weekly.pump_week)
    pain = apply_pain_override(delta_matrix, weekly.pain_week)
    smoothing = apply_smoothing(pain.delta, state)

    if json_out:
        print(json.dumps({
            "fatigue_week": weekly.fatigue_week,
            "doms_week": weekly.doms_week,
            "pump_week": weekly.pump_week,
            "pain_week": weekly.pain_week,
            "fatigue_eff": weekly.fatigue_eff,
            "delta_matrix": delta_matrix,
            "delta_after_pain": pain.delta,
            "pain_override": pain.pain_override,
            "delta_final": smoothing.delta_final,
            "smoothing_blocked": smoothing.smoothing_blocked,
            "state": state_to_dict(smoothing.state),
        }, indent=2))
        return

    views.console.print(views.format_feedback_table(weekly))
    views.console.print(f"Matrix delta: {delta_matrix:+d}")
    if pain.pain_override:
        views.print_warning(f"Tendon pain {weekly.pain_week}: delta forced to {pain.delta:+d}")
    if smoothing.smoothing_blocked:
        views.print_info(
            f"Delta {pain.delta:+d} held back: "
            f"{smoothing.state.consecutive_count} of 2 consecutive weeks"
        )
    views.console.print(f"Final set delta: [bold]{smoothing.delta_final:+d}[/bold]")


@app.command("close-week")
def close_week_cmd(
    snapshot_file: Annotated[
        Path,
        typer.Argument(help="Week snapshot JSON (feedback, states, candidates, exercises)"),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the result JSON to this file"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Close a training week and compute auto-volume set changes.

    Nothing is modified in place: the result (new smoothing states, the
    chosen set changes and their propagation) is printed or written to
    --output for the caller to apply.
    """
    try:
        snapshot = load_week_snapshot(snapshot_file)
    except FileNotFoundError:
        views.print_error(f"File not found: {snapshot_file}")
        raise typer.Exit(1)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not snapshot.feedback:
        views.print_warning("Snapshot has no feedback; nothing to close.")

    result = close_week(snapshot)
    data = week_close_result_to_dict(result)

    if output is not None:
        with open(output, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    if json_out:
        print(json.dumps(data, indent=2))
        return

    views.print_week_close(result)
    if output is not None:
        views.print_success(f"Result written to {output}")


@app.command()
def classify(
    tool: Annotated[str, typer.Argument(help="DUMBBELL, BARBELL or MACHINE")],
    muscle_group: Annotated[str, typer.Argument(help="Primary muscle group (English or Italian)")],
    sets: Annotated[
        int,
        typer.Option("--sets", "-s", help="Current target sets"),
    ] = 3,
    json_out: JsonOption = False,
) -> None:
    """
    Show the default auto-volume role, joint stress and max sets of an exercise.
    """
    tool_type = tool.upper()
    role = derive_exercise_role(tool_type, muscle_group)
    stress = derive_joint_stress(tool_type, muscle_group, role)
    max_sets = derive_max_sets(role, sets)

    if json_out:
        print(json.dumps({
            "exercise_role": role,
            "joint_stress": stress,
            "max_sets": max_sets,
        }, indent=2))
        return

    views.console.print(f"Role:         [bold]{role}[/bold]")
    views.console.print(f"Joint stress: [bold]{stress}[/bold]")
    views.console.print(f"Max sets:     [bold]{max_sets}[/bold] (role default {MAX_SETS_BY_ROLE[role]})")


@app.command()
def rir(
    structure: Annotated[str, typer.Argument(help="THREE_ONE, FOUR_ONE or FIVE_ONE")],
    week: Annotated[int, typer.Argument(help="Week of the mesocycle (1-based)")],
    deload: Annotated[
        bool,
        typer.Option("--deload", help="Deload week"),
    ] = False,
) -> None:
    """
    Reps-in-reserve target for a mesocycle week.
    """
    try:
        target = get_rir_target(structure.upper(), week, deload)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.console.print(f"RIR target: [bold]{target}[/bold]")
