"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of workouts, predictions and goals.
"""

from rich.console import Console
from rich.table import Table

from ..core.max_estimator import best_set
from ..core.models import (
    ConfidenceBandPoint,
    Goal,
    Milestone,
    PredictionResult,
    RepRangePrediction,
    WorkoutRecord,
)

console = Console()
err_console = Console(stderr=True)


def _fmt_weight(value: float) -> str:
    return f"{value:g}"


def _fmt_sets(record: WorkoutRecord) -> str:
    parts = []
    for entry in record.exercises:
        sets = ", ".join(f"{_fmt_weight(s.weight)}x{s.reps}" for s in entry.sets)
        parts.append(f"{entry.exercise_name or entry.exercise_id}: {sets}")
    return "\n".join(parts)


def format_history_table(records: list[WorkoutRecord], exercise_id: str | None = None) -> Table:
    """
    Create a Rich table displaying workout history.

    Args:
        records: Workouts to display
        exercise_id: When given, add a best-set 1RM column for this exercise

    Returns:
        Rich Table object
    """
    table = Table(title="Workout History")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Template", style="magenta")
    table.add_column("Min", justify="right")
    table.add_column("Sets")
    if exercise_id is not None:
        table.add_column("e1RM", justify="right", style="bold green")

    for i, record in enumerate(records, 1):
        row = [
            str(i),
            record.date,
            record.template_name or "-",
            str(record.duration_minutes) if record.duration_minutes else "-",
            _fmt_sets(record),
        ]
        if exercise_id is not None:
            one_rm = best_set(record.entry_for(exercise_id)).one_rep_max
            row.append(str(one_rm) if one_rm > 0 else "-")
        table.add_row(*row)

    return table


def print_history(records: list[WorkoutRecord], exercise_id: str | None = None) -> None:
    """
    Print workout history to console.

    Args:
        records: Workouts to display
        exercise_id: Optional exercise to show 1RM estimates for
    """
    if not records:
        console.print("[yellow]No workouts recorded yet.[/yellow]")
        return

    console.print(format_history_table(records, exercise_id))


def format_rep_range_table(predictions: list[RepRangePrediction], unit: str) -> Table:
    """
    Create a Rich table of rep-range maxes.

    Args:
        predictions: One row per rep range
        unit: Load unit for the column headers

    Returns:
        Rich Table object
    """
    table = Table(title="Rep Ranges")

    table.add_column("Range", style="cyan")
    table.add_column(f"Current ({unit})", justify="right")
    table.add_column(f"Predicted ({unit})", justify="right", style="bold green")
    table.add_column("By", no_wrap=True)
    table.add_column("Progress", justify="right")

    for p in predictions:
        table.add_row(
            p.label,
            str(p.current_max),
            str(p.predicted_max),
            p.estimated_achievement_date or "-",
            f"{p.progress_percentage}%",
        )

    return table


def print_prediction(
    exercise_name: str,
    result: PredictionResult,
    unit: str,
    monthly_change: int | None = None,
) -> None:
    """
    Print a performance prediction with rep ranges and insights.

    Args:
        exercise_name: Display name
        result: Prediction to show
        unit: Load unit
        monthly_change: 1RM change vs. about a month ago, if known
    """
    console.print()
    console.print(f"[bold cyan]Prediction: {exercise_name}[/bold cyan]")
    console.print(f"  Current 1RM:    {result.current_value} {unit}")
    if monthly_change is not None:
        console.print(f"  Last month:     {monthly_change:+d} {unit}")
    if result.predicted_date is not None:
        console.print(
            f"  Predicted 1RM:  {result.predicted_value} {unit} by {result.predicted_date}"
        )
    console.print(f"  Confidence:     {result.confidence:.0%}")
    meta = result.metadata
    console.print(
        f"  [dim]{meta.workout_count} workouts, {meta.data_points} data points, "
        f"{meta.frequency:g}/week, {meta.model_type}[/dim]"
    )
    console.print()
    console.print(format_rep_range_table(result.rep_range_predictions, unit))
    print_insights(result.insights)


def format_band_table(band: list[ConfidenceBandPoint], unit: str) -> Table:
    """
    Create a Rich table of the projection envelope.

    Args:
        band: Weekly lower/upper points
        unit: Load unit

    Returns:
        Rich Table object
    """
    table = Table(title="Projection Band")

    table.add_column("Day", justify="right", style="dim")
    table.add_column(f"Low ({unit})", justify="right")
    table.add_column(f"High ({unit})", justify="right")

    for point in band:
        table.add_row(str(point.day), f"{point.lower:.1f}", f"{point.upper:.1f}")

    return table


def print_insights(insights: list[str]) -> None:
    """Print a bulleted list of insights or recommendations."""
    if not insights:
        return
    console.print()
    console.print("[bold]Insights[/bold]")
    for line in insights:
        console.print(f"  • {line}")
    console.print()


def format_milestone_table(milestones: list[Milestone], unit: str) -> Table:
    """
    Create a Rich table of goal milestones.

    Args:
        milestones: Milestones sorted by value
        unit: Goal unit

    Returns:
        Rich Table object
    """
    table = Table(show_header=True, header_style="dim")

    table.add_column(f"Value ({unit})", justify="right")
    table.add_column("Target date", style="cyan", no_wrap=True)
    table.add_column("Achieved", style="green", no_wrap=True)

    for m in milestones:
        table.add_row(
            _fmt_weight(m.value),
            m.target_date,
            f"✓ {m.achieved_date}" if m.achieved_date else "-",
        )

    return table


def print_goal(index: int, goal: Goal, recommendations: list[str]) -> None:
    """
    Print one processed goal with its milestones and recommendations.

    Args:
        index: 1-based position in the goals file
        goal: Goal as returned by process_goal
        recommendations: Goal recommendations
    """
    status = "[green]completed[/green]" if goal.completed else "[yellow]in progress[/yellow]"
    console.print()
    console.print(
        f"[bold cyan]#{index} {goal.label}[/bold cyan]: "
        f"{_fmt_weight(goal.start_value)} → {_fmt_weight(goal.target_value)} {goal.unit}  ({status})"
    )
    if goal.current_value is not None:
        console.print(f"  Current:    {_fmt_weight(goal.current_value)} {goal.unit}")
    if goal.user_target_date:
        console.print(f"  Target by:  {goal.user_target_date}")
    console.print(f"  Projected:  {goal.projected_date or '-'}")
    if goal.confidence is not None:
        console.print(f"  Confidence: {goal.confidence:.0%}")
    console.print(format_milestone_table(goal.milestones, goal.unit))
    print_insights(recommendations)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓ {message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
