"""
Observation extraction: workout records -> metric time series.

All functions are pure and typed for testability.  None of them read the
clock; ``today`` is always passed in.
"""

from datetime import date
from typing import Iterable

from .config import CHANGE_MIN_GAP_DAYS
from .dates import add_months, days_between, format_date, parse_date
from .max_estimator import best_set
from .models import Observation, ObservationSeries, WorkoutRecord


def relevant_records(
    metric_id: str,
    history: Iterable[WorkoutRecord],
    today: date,
    lookback_months: int | None = None,
) -> list[WorkoutRecord]:
    """
    Select the records that can contribute to a metric's series.

    Drops future-dated records, records outside the lookback window and
    records that do not contain the metric, then sorts by date.

    Args:
        metric_id: Exercise identifier
        history: Caller's workout records, any order
        today: Reference date; records after it are ignored
        lookback_months: Only keep records strictly after today − N months

    Returns:
        Records sorted ascending by date
    """
    today_str = format_date(today)
    records = [r for r in history if r.date <= today_str]

    if lookback_months is not None:
        cutoff = format_date(add_months(today, -lookback_months))
        records = [r for r in records if r.date > cutoff]

    records = [r for r in records if r.has_exercise(metric_id)]
    # sorted() is stable, so same-day records keep the caller's order
    return sorted(records, key=lambda r: r.date)


def _merge_point(points: dict[int, float], day: int, value: float) -> None:
    """Keep the highest value seen for a day."""
    if value > points.get(day, 0.0):
        points[day] = value


def extract_observations(
    metric_id: str,
    history: Iterable[WorkoutRecord],
    today: date,
    lookback_months: int | None = None,
) -> ObservationSeries:
    """
    Build the estimated-1RM series for one metric.

    x = days since the first record containing the metric,
    y = best Brzycki 1RM of that record.  Records whose sets yield no
    estimate are skipped; same-day records keep the maximum.

    Args:
        metric_id: Exercise identifier
        history: Caller's workout records
        today: Reference date
        lookback_months: Optional lookback window in months

    Returns:
        ObservationSeries (empty when no record qualifies)
    """
    records = relevant_records(metric_id, history, today, lookback_months)
    if not records:
        return ObservationSeries(start_date=format_date(today))

    first_date = records[0].date
    points: dict[int, float] = {}

    for record in records:
        one_rm = best_set(record.entry_for(metric_id)).one_rep_max
        if one_rm > 0:
            _merge_point(points, days_between(first_date, record.date), float(one_rm))

    return ObservationSeries(
        start_date=first_date,
        points=tuple(Observation(day, value) for day, value in sorted(points.items())),
    )


def extract_goal_series(
    exercise_id: str | None,
    start_date: str,
    start_value: float,
    history: Iterable[WorkoutRecord],
    today: date,
) -> ObservationSeries:
    """
    Build the heaviest-weight series used to track a goal.

    x = days since the goal's start date, y = top set weight of each
    record on or after it.  The goal's start value is always present at
    day 0 (it raises a lower day-0 observation).

    Args:
        exercise_id: Exercise the goal tracks; None for non-exercise goals
        start_date: Goal start date
        start_value: Goal start value
        history: Caller's workout records
        today: Reference date

    Returns:
        ObservationSeries anchored at ``start_date``; empty for goals
        without an exercise
    """
    if not exercise_id:
        return ObservationSeries(start_date=start_date)

    points: dict[int, float] = {}
    for record in relevant_records(exercise_id, history, today):
        if record.date < start_date:
            continue
        top = record.entry_for(exercise_id).top_weight  # type: ignore[union-attr]
        if top > 0:
            _merge_point(points, days_between(start_date, record.date), top)

    _merge_point(points, 0, start_value)
    points.setdefault(0, start_value)

    return ObservationSeries(
        start_date=start_date,
        points=tuple(Observation(day, value) for day, value in sorted(points.items())),
    )


def workout_frequency(records: list[WorkoutRecord]) -> float:
    """
    Average workouts per week between the first and last record.

    The span counts as at least one week.  Fewer than two records → 0.0.

    Args:
        records: Records sorted by date

    Returns:
        Workouts per week, rounded to 1 decimal
    """
    if len(records) < 2:
        return 0.0
    weeks = max(1, days_between(records[0].date, records[-1].date) // 7)
    return round(len(records) / weeks, 1)


def one_rep_max_change(
    metric_id: str,
    history: Iterable[WorkoutRecord],
    today: date,
    months: int = 1,
) -> int | None:
    """
    Change in best 1RM compared with roughly ``months`` ago.

    Compares the latest record's best 1RM with the record closest to
    (latest date − months).  The comparison record must be at least a week
    older than the latest record to count.

    Args:
        metric_id: Exercise identifier
        history: Caller's workout records
        today: Reference date
        months: Comparison period

    Returns:
        Difference in whole units, or None if there is nothing to compare
    """
    records = relevant_records(metric_id, history, today)
    if not records:
        return None

    latest = records[-1]
    current = best_set(latest.entry_for(metric_id)).one_rep_max
    if current <= 0:
        return None

    target = add_months(parse_date(latest.date), -months)
    closest: WorkoutRecord | None = None
    smallest_gap: int | None = None
    # Newest first, so ties go to the more recent record
    for record in reversed(records[:-1]):
        gap = abs(days_between(target, record.date))
        if smallest_gap is None or gap < smallest_gap:
            smallest_gap = gap
            closest = record

    if closest is None or days_between(closest.date, latest.date) < CHANGE_MIN_GAP_DAYS:
        return None

    previous = best_set(closest.entry_for(metric_id)).one_rep_max
    if previous <= 0:
        return None

    return current - previous
