"""Shared Typer app object, shared option types, and logging setup."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from ..core.config import SeriesTargetConfig
from ..core.engine.config_loader import load_model_config, series_target_config
from . import views

# Shared --tool option type used by the projection commands
ToolOption = Annotated[
    str,
    typer.Option("--tool", "-t", help="Equipment class: DUMBBELL, BARBELL (default), MACHINE"),
]

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Extra progression.yaml merged over the defaults"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="forge-planner",
    help="Auto-regulated hypertrophy planner: weekly volume and load/rep targets.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log engine decisions"),
    ] = False,
) -> None:
    """
    Resistance-training autoregulation engine.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=views.err_console, show_path=False)],
        force=True,
    )


def get_series_config(tool_type: str, config_path: Path | None) -> SeriesTargetConfig:
    """Resolve the projection config for a tool, exiting with an error if invalid."""
    try:
        return series_target_config(tool_type.upper(), load_model_config(config_path))
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
