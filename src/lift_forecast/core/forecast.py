"""
Forecast entry points.

predict_performance: workout history -> PredictionResult for one exercise.
process_goal:        goal + history -> (enriched goal, recommendations).

Both are pure: they read a snapshot of the caller's records, never mutate
it, and take the reference date explicitly (``today=None`` means the
current date, resolved once here).
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable

from .config import DEFAULT_SETTINGS, ForecastSettings
from .confidence import goal_confidence, performance_confidence
from .dates import days_between, format_date
from .fitting import fit_linear, fit_logarithmic
from .metrics import extract_goal_series, extract_observations, relevant_records, workout_frequency
from .milestones import normalize_milestones, update_achievements
from .models import Goal, PredictionMetadata, PredictionResult, WorkoutRecord
from .projection import project_goal_date, project_performance
from .recommendations import NOT_ENOUGH_HISTORY, goal_recommendations, performance_insights
from .rep_ranges import rep_range_predictions

log = logging.getLogger(__name__)

MODEL_DESCRIPTION = "Limiting returns projection with linear-trend confidence"
INSUFFICIENT_DESCRIPTION = "Insufficient data for a trend"


def predict_performance(
    metric_id: str,
    metric_label: str,
    history: Iterable[WorkoutRecord],
    lookback_months: int | None = None,
    *,
    today: date | None = None,
    settings: ForecastSettings = DEFAULT_SETTINGS,
) -> PredictionResult | None:
    """
    Predict where an exercise's 1RM is heading.

    Args:
        metric_id: Exercise identifier
        metric_label: Display name used in insights
        history: Caller's workout records, any order
        lookback_months: Only use records from the last N months
        today: Reference date (defaults to the current date)
        settings: Model parameters

    Returns:
        PredictionResult, or None when the exercise has no usable
        observation in the window
    """
    today = today or date.today()
    history = list(history)

    records = relevant_records(metric_id, history, today, lookback_months)
    series = extract_observations(metric_id, history, today, lookback_months)
    if not series:
        log.debug("No observations for %s", metric_id)
        return None

    current = int(series.points[-1].value)
    frequency = workout_frequency(records)
    model = fit_linear(series.as_pairs())

    metadata = PredictionMetadata(
        workout_count=len(records),
        data_points=len(series),
        frequency=frequency,
        last_updated=format_date(today),
        model_type=MODEL_DESCRIPTION if model is not None else INSUFFICIENT_DESCRIPTION,
    )

    if model is None:
        log.debug("Only %d observation(s) for %s; no projection", len(series), metric_id)
        return PredictionResult(
            current_value=current,
            predicted_value=current,
            predicted_date=None,
            confidence=0.0,
            rep_range_predictions=rep_range_predictions(current, current, None, today),
            insights=[NOT_ENOUGH_HISTORY],
            metadata=metadata,
        )

    predicted, predicted_date, _ = project_performance(current, series.last_date, settings)  # type: ignore[arg-type]
    confidence = performance_confidence(model, settings.horizon_days) or 0.0

    insights = performance_insights(
        metric_label,
        current,
        predicted,
        model,
        confidence,
        elapsed_days=days_between(series.start_date, today),
        frequency=frequency,
        settings=settings,
    )

    return PredictionResult(
        current_value=current,
        predicted_value=predicted,
        predicted_date=predicted_date,
        confidence=confidence,
        rep_range_predictions=rep_range_predictions(current, predicted, predicted_date, today),
        insights=insights,
        metadata=metadata,
    )


def _current_goal_value(goal: Goal, values: list[float]) -> float:
    """Best value reached so far, capped at the target for exercise goals."""
    if goal.goal_type == "exercise" and goal.exercise_id:
        best = max([goal.start_value, *values])
        return min(best, goal.target_value)
    return goal.current_value if goal.current_value is not None else goal.start_value


def process_goal(
    goal: Goal,
    history: Iterable[WorkoutRecord],
    *,
    today: date | None = None,
    settings: ForecastSettings = DEFAULT_SETTINGS,
) -> tuple[Goal, list[str]]:
    """
    Project a goal's completion date and refresh its milestones.

    Args:
        goal: Caller's goal (not modified)
        history: Caller's workout records
        today: Reference date (defaults to the current date)
        settings: Model parameters

    Returns:
        Tuple (enriched copy of the goal, recommendations).  When the
        history cannot be fitted, projected_date and confidence are None.
    """
    today = today or date.today()

    series = extract_goal_series(
        goal.exercise_id, goal.start_date, goal.start_value, history, today
    )
    model = fit_logarithmic(series.as_pairs())
    projected_date = project_goal_date(model, goal.target_value, goal.start_date)
    confidence = goal_confidence(model)

    milestones = update_achievements(normalize_milestones(goal, projected_date, settings), series)
    recommendations = goal_recommendations(
        goal, model, projected_date, confidence, format_date(today), settings
    )

    current_value = _current_goal_value(goal, series.values)
    enriched = replace(
        goal,
        current_value=current_value,
        projected_date=projected_date,
        confidence=confidence,
        milestones=milestones,
        completed=_reached(goal, current_value),
    )
    return enriched, recommendations


def _reached(goal: Goal, value: float) -> bool:
    """Target reached in the goal's direction (a lower target means decrease)."""
    if goal.target_value < goal.start_value:
        return value <= goal.target_value
    return value >= goal.target_value
