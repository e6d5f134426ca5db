"""
Confidence scoring for fitted models.

Goal tracking:
    confidence = clip(R², 0.1, 1.0); 0.1 when the curve does not rise.

Performance prediction:
    confidence = R² × F_data × F_residual × F_horizon, clipped to
    [0.05, 0.98]; 0.99 only for a perfect fit (R² = 1, σ = 0, n ≥ 10);
    0.05 when the trend does not rise.

The factor tables live in config.py.
"""

import math

from .config import (
    DATA_VOLUME_FACTORS,
    GOAL_CONFIDENCE_MAX,
    GOAL_CONFIDENCE_MIN,
    HORIZON_FACTORS,
    PERF_CONFIDENCE_MAX,
    PERF_CONFIDENCE_MIN,
    PERF_CONFIDENCE_PERFECT,
    PERFECT_FIT_MIN_POINTS,
    PROJECTION_HORIZON_DAYS,
    RESIDUAL_RATIO_FACTORS,
    RESIDUAL_ZERO_MEAN_FACTOR,
)
from .fitting import LinearModel, LogarithmicModel


def goal_confidence(model: LogarithmicModel | None) -> float | None:
    """
    Confidence for a goal-timeline projection.

    Args:
        model: Logarithmic fit of the goal series

    Returns:
        Confidence in [0.1, 1.0], or None when there is no fit
    """
    if model is None:
        return None
    if not model.is_progressing:
        return GOAL_CONFIDENCE_MIN
    return max(GOAL_CONFIDENCE_MIN, min(GOAL_CONFIDENCE_MAX, model.r_squared))


def data_volume_factor(n_points: int) -> float:
    """Penalty for small samples: 0.3 (<3), 0.5 (<5), 0.8 (<10), else 1.0."""
    for upper, factor in DATA_VOLUME_FACTORS:
        if n_points < upper:
            return factor
    return 1.0


def residual_std(model: LinearModel) -> float:
    """Population standard deviation of the residuals y − ŷ over the fit points."""
    residuals = [y - model.predict(x) for x, y in model.points]
    mean = sum(residuals) / len(residuals)
    return math.sqrt(sum((r - mean) ** 2 for r in residuals) / len(residuals))


def residual_factor(model: LinearModel) -> float:
    """
    Penalty for noisy data, from σ(residuals) / mean(y).

    Ratio > 0.5 → 0.3, > 0.2 → 0.6, > 0.1 → 0.8, else 1.0.
    A zero (or negative) mean scores 0.3.
    """
    ys = [y for _, y in model.points]
    mean_y = sum(ys) / len(ys)
    if mean_y <= 0:
        return RESIDUAL_ZERO_MEAN_FACTOR

    ratio = residual_std(model) / mean_y
    for lower, factor in RESIDUAL_RATIO_FACTORS:
        if ratio > lower:
            return factor
    return 1.0


def horizon_factor(last_x: float, horizon_days: float) -> float:
    """
    Penalty for projecting far beyond the data.

    0.7 beyond 60 days past the last observation, 0.5 beyond 120.
    """
    for beyond, factor in HORIZON_FACTORS:
        if horizon_days > last_x + beyond:
            return factor
    return 1.0


def performance_confidence(
    model: LinearModel | None,
    horizon_days: float = PROJECTION_HORIZON_DAYS,
) -> float | None:
    """
    Confidence for a performance prediction, judged on the linear trend.

    Args:
        model: Linear fit of the 1RM series
        horizon_days: How far ahead the prediction reaches, in day offsets

    Returns:
        Confidence in [0.05, 0.99], or None when there is no fit
    """
    if model is None or len(model.points) < 2:
        return None

    if not model.is_progressing:
        return PERF_CONFIDENCE_MIN

    n_points = len(model.points)
    last_x = model.points[-1][0]

    confidence = (
        model.r_squared
        * data_volume_factor(n_points)
        * residual_factor(model)
        * horizon_factor(last_x, horizon_days)
    )
    confidence = max(PERF_CONFIDENCE_MIN, min(PERF_CONFIDENCE_MAX, confidence))

    if model.r_squared == 1 and residual_std(model) == 0 and n_points >= PERFECT_FIT_MIN_POINTS:
        confidence = PERF_CONFIDENCE_PERFECT

    return confidence
