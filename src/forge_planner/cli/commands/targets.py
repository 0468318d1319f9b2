"""Load/rep projection commands: e1rm, series-target, reps-for-weight, exercise-targets."""

import json
from typing import Annotated, Optional

import typer

from ...core.max_estimator import estimate_e1rm_strength_level
from ...core.models import PreviousSet
from ...core.targets import compute_exercise_targets, compute_series_target, find_reps_for_weight
from ...io.serializers import series_target_to_dict
from .. import views
from ..app import ConfigOption, JsonOption, ToolOption, app, get_series_config


@app.command()
def e1rm(
    weight: Annotated[float, typer.Argument(help="Load lifted (kg)")],
    reps: Annotated[int, typer.Argument(help="Repetitions completed")],
    json_out: JsonOption = False,
) -> None:
    """
    Estimate the one-rep max of a set (Brzycki/Epley blend).
    """
    value = estimate_e1rm_strength_level(weight, reps)

    if json_out:
        print(json.dumps({"weight": weight, "reps": reps, "e1rm": round(value, 2)}, indent=2))
        return

    views.console.print(f"e1RM for {weight:g} kg × {reps}: [bold]{value:.1f} kg[/bold]")


@app.command("series-target")
def series_target(
    prev_weight: Annotated[
        float,
        typer.Option("--prev-weight", "-w", help="Weight of the reference set (kg)"),
    ],
    prev_reps: Annotated[
        int,
        typer.Option("--prev-reps", "-r", help="Reps of the reference set"),
    ],
    desired: Annotated[
        Optional[float],
        typer.Option("--desired", "-d", help="Weight you want to use; omit for auto progression"),
    ] = None,
    tool: ToolOption = "BARBELL",
    config_path: ConfigOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Project the next weight and rep target for a working set.
    """
    if prev_weight <= 0 or prev_reps < 1:
        views.print_error("Reference set needs a positive weight and at least 1 rep")
        raise typer.Exit(1)

    config = get_series_config(tool, config_path)
    target = compute_series_target(PreviousSet(prev_weight, prev_reps), desired, config)

    if json_out:
        print(json.dumps(series_target_to_dict(target), indent=2))
        return

    views.print_series_target(target)


@app.command("reps-for-weight")
def reps_for_weight(
    anchor_weight: Annotated[float, typer.Argument(help="Reference weight (kg)")],
    anchor_reps: Annotated[int, typer.Argument(help="Reps at the reference weight")],
    weight: Annotated[float, typer.Argument(help="Weight to find equivalent reps for (kg)")],
    tool: ToolOption = "BARBELL",
    config_path: ConfigOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Find the reps at WEIGHT that match ANCHOR_WEIGHT × ANCHOR_REPS.
    """
    config = get_series_config(tool, config_path)
    result = find_reps_for_weight(anchor_weight, anchor_reps, weight, config)

    if json_out:
        print(json.dumps({
            "reps_target": result.reps_target,
            "e_target": round(result.e_target, 2),
            "flags": result.flags.active(),
        }, indent=2))
        return

    views.console.print(f"Anchor e1RM: {result.e_target:.1f} kg")
    if result.reps_target is None:
        views.print_warning("No safe rep target within bounds.")
    else:
        views.console.print(f"Equivalent reps at {weight:g} kg: [bold]{result.reps_target}[/bold]")
    active = result.flags.active()
    if active:
        views.console.print(f"[dim]Flags: {', '.join(active)}[/dim]")


@app.command("exercise-targets")
def exercise_targets(
    load_prev: Annotated[
        float,
        typer.Option("--load", "-l", help="Reference load of the last session (kg)"),
    ],
    reps_ref: Annotated[
        int,
        typer.Option("--reps", "-r", help="Minimum reps of the last session"),
    ],
    sets: Annotated[
        int,
        typer.Option("--sets", "-s", help="Target sets"),
    ],
    load_chosen: Annotated[
        Optional[float],
        typer.Option("--chosen", help="Load you plan to use next time (kg)"),
    ] = None,
    tool: ToolOption = "BARBELL",
    json_out: JsonOption = False,
) -> None:
    """
    Next-session load target and rep hint for an exercise.
    """
    try:
        targets = compute_exercise_targets(tool.upper(), load_prev, reps_ref, sets, load_chosen)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps({
            "load_target": targets.load_target,
            "reps_target_hint": targets.reps_target_hint,
            "suggestion": targets.suggestion,
        }, indent=2))
        return

    views.print_exercise_targets(targets)
