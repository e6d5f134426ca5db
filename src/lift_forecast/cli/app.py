"""Shared Typer app object, shared option types, and store utility."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from ..core.config import ForecastSettings
from ..core.engine.config_loader import load_settings
from ..io.history_store import HistoryStore, get_default_history_path
from . import views

# Shared options used across commands
HistoryPathOption = Annotated[
    Optional[Path],
    typer.Option("--history-path", "-p", help="Path to workout history JSONL file"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

ExerciseOption = Annotated[
    str,
    typer.Option("--exercise", "-e", help="Exercise ID, e.g. bench_press"),
]

app = typer.Typer(
    name="lift-forecast",
    help="Strength-training progress forecasts: 1RM estimates, predictions and goal timelines.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
) -> None:
    """
    Log workouts and forecast where your lifts are heading.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=views.err_console, rich_tracebacks=True)],
        force=True,
    )


def get_store(history_path: Path | None) -> HistoryStore:
    """Get history store from path or default location."""
    if history_path is None:
        history_path = get_default_history_path()
    return HistoryStore(history_path)


def get_settings() -> ForecastSettings:
    """Forecast settings from the bundled and user YAML files."""
    return load_settings()
