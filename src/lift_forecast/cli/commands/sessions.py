"""Session commands: init, log-workout, show-history."""

import json
import logging
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.models import ExerciseEntry, WorkoutRecord
from ...io.serializers import (
    ValidationError,
    parse_sets_string,
    validate_date,
    workout_record_to_dict,
)
from .. import views
from ..app import HistoryPathOption, JsonOption, app, get_store

log = logging.getLogger(__name__)


def _exercise_name_from_id(exercise_id: str) -> str:
    """bench_press -> Bench Press"""
    return exercise_id.replace("_", " ").replace("-", " ").title()


@app.command()
def init(
    history_path: HistoryPathOption = None,
) -> None:
    """
    Create an empty workout history file.
    """
    store = get_store(history_path)

    if store.exists():
        views.print_info(f"History already exists: {store.history_path}")
        return

    try:
        store.init()
    except OSError as e:
        views.print_error(f"Could not create history: {e}")
        raise typer.Exit(1)

    views.print_success(f"Created {store.history_path}")


@app.command("log-workout")
def log_workout(
    exercise_id: Annotated[
        str,
        typer.Option("--exercise", "-e", help="Exercise ID, e.g. bench_press"),
    ],
    sets: Annotated[
        str,
        typer.Option("--sets", "-s", help="Sets: 185x5,185x5 or 135x10x3 (weight x reps [x sets])"),
    ],
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Exercise display name (default: from ID)"),
    ] = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="Workout date (YYYY-MM-DD, default: today)"),
    ] = None,
    duration: Annotated[
        int,
        typer.Option("--duration", help="Workout duration in minutes"),
    ] = 0,
    template: Annotated[
        Optional[str],
        typer.Option("--template", "-t", help="Workout template name"),
    ] = None,
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Log sets of one exercise.

    Logging again on the same date adds the exercise to that day's workout
    (or replaces it if it was already logged):

      lift-forecast log-workout -e bench_press -s "185x5,185x5,175x8" -d 2026-03-02
    """
    store = get_store(history_path)

    if not store.exists():
        views.print_error(f"History file not found: {store.history_path}")
        views.print_info("Run 'init' first to create the history file.")
        raise typer.Exit(1)

    if date is None:
        date = datetime.now().strftime("%Y-%m-%d")

    try:
        validate_date(date)
        parsed_sets = parse_sets_string(sets)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if duration < 0:
        views.print_error("Duration must be non-negative")
        raise typer.Exit(1)

    record = WorkoutRecord(
        date=date,
        exercises=[
            ExerciseEntry(
                exercise_id=exercise_id,
                exercise_name=name or _exercise_name_from_id(exercise_id),
                sets=parsed_sets,
            )
        ],
        duration_minutes=duration,
        template_name=template,
    )

    try:
        store.append_workout(record)
    except ValidationError as e:
        views.print_error(f"Invalid history data: {e}")
        raise typer.Exit(1)

    log.debug("Logged %d sets of %s on %s", len(parsed_sets), exercise_id, date)

    if json_out:
        print(json.dumps(workout_record_to_dict(record), indent=2))
        return

    entry = record.exercises[0]
    views.print_success(
        f"Logged {len(parsed_sets)} sets of {entry.exercise_name} on {date} "
        f"(top weight {entry.top_weight:g})"
    )


@app.command("show-history")
def show_history(
    exercise_id: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Only show workouts containing this exercise"),
    ] = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Show only the last N workouts"),
    ] = None,
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Display logged workouts.
    """
    store = get_store(history_path)

    try:
        records = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if exercise_id is not None:
        records = [r for r in records if r.has_exercise(exercise_id)]
    if limit is not None and limit > 0:
        records = records[-limit:]

    if json_out:
        print(json.dumps([workout_record_to_dict(r) for r in records], indent=2))
        return

    views.print_history(records, exercise_id)
