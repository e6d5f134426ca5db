"""Analysis commands: 1rm, predict, add-goal, goals."""

import json
from dataclasses import asdict
from datetime import date as date_cls
from typing import Annotated, Optional

import typer

from ...core.forecast import predict_performance, process_goal
from ...core.max_estimator import best_set, brzycki_1rm, round_half_up
from ...core.metrics import one_rep_max_change
from ...core.models import Goal, WorkoutRecord
from ...core.projection import limiting_returns_band
from ...core.rep_ranges import rep_range_predictions
from ...io.serializers import (
    ValidationError,
    goal_to_dict,
    prediction_to_dict,
    validate_date,
)
from .. import views
from ..app import ExerciseOption, HistoryPathOption, JsonOption, app, get_settings, get_store


def _load_history_or_exit(store) -> list[WorkoutRecord]:
    if not store.exists():
        views.print_error(f"History file not found: {store.history_path}")
        views.print_info("Run 'init' first to create the history file.")
        raise typer.Exit(1)
    try:
        return store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def _exercise_label(history: list[WorkoutRecord], exercise_id: str) -> str:
    """Most recently logged display name for an exercise, else its ID."""
    for record in reversed(history):
        entry = record.entry_for(exercise_id)
        if entry is not None and entry.exercise_name:
            return entry.exercise_name
    return exercise_id


@app.command("1rm")
def onerepmax(
    exercise_id: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Exercise ID to estimate from history"),
    ] = None,
    weight: Annotated[
        Optional[float],
        typer.Option("--weight", "-w", help="Estimate from a single set: weight lifted"),
    ] = None,
    reps: Annotated[
        Optional[int],
        typer.Option("--reps", "-r", help="Estimate from a single set: reps performed"),
    ] = None,
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Estimate 1-rep max using the Brzycki formula.

    With --weight and --reps, estimates from that one set and shows the
    matching rep-range maxes.  With --exercise, shows each workout's best
    set from history; sets of 36+ reps are ignored.
    """
    settings = get_settings()
    unit = settings.unit

    if weight is not None or reps is not None:
        if weight is None or reps is None:
            views.print_error("--weight and --reps must be given together")
            raise typer.Exit(1)
        if weight <= 0 or reps < 1:
            views.print_error("Weight must be positive and reps at least 1")
            raise typer.Exit(1)
        _print_single_set_estimate(weight, reps, unit, json_out)
        return

    if exercise_id is None:
        views.print_error("Give --exercise, or --weight and --reps")
        raise typer.Exit(1)

    store = get_store(history_path)
    history = _load_history_or_exit(store)
    today = date_cls.today()

    rows = []
    for record in history:
        best = best_set(record.entry_for(exercise_id))
        if best.one_rep_max > 0:
            rows.append((record.date, best))

    if not rows:
        views.print_error(f"No qualifying sets for '{exercise_id}'. Log some workouts first.")
        raise typer.Exit(1)

    change = one_rep_max_change(exercise_id, history, today)

    if json_out:
        print(json.dumps({
            "exercise_id": exercise_id,
            "current_1rm": rows[-1][1].one_rep_max,
            "change_1m": change,
            "workouts": [{"date": d, **asdict(b)} for d, b in rows],
        }, indent=2))
        return

    views.console.print()
    views.console.print(f"[bold cyan]1RM Estimate — {_exercise_label(history, exercise_id)}[/bold cyan]")
    sep = "  " + "─" * 40
    views.console.print(f"  {'Date':<12}{'Best set':>12}{'e1RM':>12}")
    views.console.print(sep)
    for d, b in rows:
        views.console.print(f"  {d:<12}{f'{b.weight:g}x{b.reps}':>12}{b.one_rep_max:>12}")
    views.console.print(sep)
    views.console.print(f"  Current: [bold green]{rows[-1][1].one_rep_max} {unit}[/bold green]")
    if change is not None:
        views.console.print(f"  vs. a month ago: {change:+d} {unit}")
    views.console.print()


def _print_single_set_estimate(weight: float, reps: int, unit: str, json_out: bool) -> None:
    one_rm = round_half_up(brzycki_1rm(weight, reps))
    ranges = rep_range_predictions(one_rm, one_rm, None, date_cls.today())

    if json_out:
        print(json.dumps({
            "weight": weight,
            "reps": reps,
            "one_rep_max": one_rm,
            "rep_ranges": {r.label: r.current_max for r in ranges},
        }, indent=2))
        return

    views.console.print()
    views.console.print(f"[bold cyan]1RM Estimate — {weight:g} {unit} × {reps}[/bold cyan]")
    if reps >= 36:
        views.print_warning("36+ reps: the estimate is just the weight lifted")
    views.console.print(f"  Brzycki 1RM: [bold green]{one_rm} {unit}[/bold green]")
    for r in ranges[1:]:
        views.console.print(f"  {r.label:<5} {r.current_max} {unit}")
    views.console.print()


@app.command()
def predict(
    exercise_id: ExerciseOption,
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Display name used in insights (default: last logged name)"),
    ] = None,
    lookback_months: Annotated[
        Optional[int],
        typer.Option("--lookback-months", "-m", help="Only use workouts from the last N months"),
    ] = None,
    band: Annotated[
        bool,
        typer.Option("--band", "-b", help="Also show the projection band"),
    ] = False,
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Predict an exercise's 1RM over the coming months.
    """
    store = get_store(history_path)
    history = _load_history_or_exit(store)
    settings = get_settings()
    today = date_cls.today()

    if lookback_months is not None and lookback_months < 1:
        views.print_error("--lookback-months must be at least 1")
        raise typer.Exit(1)

    label = name or _exercise_label(history, exercise_id)
    result = predict_performance(
        exercise_id, label, history, lookback_months, today=today, settings=settings
    )

    if result is None:
        views.print_error(f"No qualifying sets for '{exercise_id}'. Log some workouts first.")
        raise typer.Exit(1)

    change = one_rep_max_change(exercise_id, history, today)
    band_points = []
    if band and result.predicted_date is not None:
        band_points = limiting_returns_band(
            result.current_value, settings.horizon_days, result.confidence, settings
        )

    if json_out:
        out = prediction_to_dict(result)
        out["change_1m"] = change
        if band:
            out["band"] = [asdict(p) for p in band_points]
        print(json.dumps(out, indent=2))
        return

    views.print_prediction(label, result, settings.unit, change)
    if band_points:
        views.console.print(views.format_band_table(band_points, settings.unit))


@app.command("add-goal")
def add_goal(
    start: Annotated[float, typer.Option("--start", help="Starting value")],
    target: Annotated[float, typer.Option("--target", help="Target value")],
    exercise_id: Annotated[
        Optional[str],
        typer.Option("--exercise", "-e", help="Exercise ID the goal tracks"),
    ] = None,
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Goal display name"),
    ] = None,
    start_date: Annotated[
        Optional[str],
        typer.Option("--start-date", help="Start date (YYYY-MM-DD, default: today)"),
    ] = None,
    by: Annotated[
        Optional[str],
        typer.Option("--by", help="Target date (YYYY-MM-DD)"),
    ] = None,
    goal_type: Annotated[
        str,
        typer.Option("--type", help="Goal type: exercise | weight | other"),
    ] = "exercise",
    unit: Annotated[
        Optional[str],
        typer.Option("--unit", "-u", help="Unit (default from settings)"),
    ] = None,
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Add a goal, e.g. bench press 185 -> 225 by a date.

      lift-forecast add-goal -e bench_press --start 185 --target 225 --by 2027-03-01
    """
    store = get_store(history_path)

    if start_date is None:
        start_date = date_cls.today().strftime("%Y-%m-%d")

    try:
        validate_date(start_date)
        if by is not None:
            validate_date(by)
        existing = store.load_goals()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if by is not None and by <= start_date:
        views.print_error("Target date must be after the start date")
        raise typer.Exit(1)

    if goal_type not in ("exercise", "weight", "other"):
        views.print_error("Goal type must be exercise, weight, or other")
        raise typer.Exit(1)

    if goal_type == "exercise" and exercise_id is None:
        views.print_error("Exercise goals need --exercise")
        raise typer.Exit(1)

    goal = Goal(
        start_value=start,
        target_value=target,
        start_date=start_date,
        user_target_date=by,
        unit=unit or get_settings().unit,
        exercise_id=exercise_id,
        exercise_name=name,
        goal_type=goal_type,  # type: ignore[arg-type]
    )
    existing.append(goal)
    store.save_goals(existing)

    if json_out:
        print(json.dumps(goal_to_dict(goal), indent=2))
        return

    views.print_success(
        f"Added goal #{len(existing)}: {goal.label} {start:g} → {target:g} {goal.unit}"
    )


@app.command()
def goals(
    save: Annotated[
        bool,
        typer.Option("--save", help="Write projections and milestones back to the goals file"),
    ] = False,
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show goals with projected completion dates, milestones and recommendations.
    """
    store = get_store(history_path)
    history = _load_history_or_exit(store)
    settings = get_settings()
    today = date_cls.today()

    try:
        stored = store.load_goals()
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not stored:
        views.print_info("No goals yet. Add one with 'add-goal'.")
        return

    processed = [process_goal(g, history, today=today, settings=settings) for g in stored]

    if save:
        store.save_goals([goal for goal, _ in processed])

    if json_out:
        print(json.dumps([
            {"goal": goal_to_dict(goal), "recommendations": recs}
            for goal, recs in processed
        ], indent=2))
        return

    for i, (goal, recs) in enumerate(processed, 1):
        views.print_goal(i, goal, recs)

    if save:
        views.print_success(f"Saved {len(processed)} goals to {store.goals_path}")
