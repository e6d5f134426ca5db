"""
Projection solver: fitted model -> date a value is reached.

Goal tracking inverts the logarithmic curve:
    y = a + b·ln(x)  =>  x = e^((target − a) / b)

Performance prediction evaluates the limiting-returns curve at the fixed
horizon and dates it from the last observation.
"""

from __future__ import annotations

import logging
import math
from datetime import date

from .config import BAND_MAX_VARIATION, BAND_STEP_DAYS, DEFAULT_SETTINGS, ForecastSettings
from .dates import add_days, days_between
from .fitting import LogarithmicModel, LogisticModel, limiting_returns_model
from .max_estimator import round_half_up
from .models import ConfidenceBandPoint

log = logging.getLogger(__name__)


def solve_days_to_target(model: LogarithmicModel | None, target: float) -> float | None:
    """
    Day offset at which the logarithmic curve reaches ``target``.

    Args:
        model: Logarithmic fit
        target: Value to reach

    Returns:
        Positive, finite day offset, or None when the curve cannot get there
        (no fit, b ≤ 0, target ≤ a, or a degenerate solve)
    """
    if model is None:
        return None
    if not model.is_progressing:
        log.debug("No projection: logarithmic coefficient b=%.4f is not positive", model.b)
        return None
    if target <= model.a:
        log.debug("No projection: target %.2f is not above intercept a=%.2f", target, model.a)
        return None

    try:
        days = math.exp((target - model.a) / model.b)
    except OverflowError:
        log.debug("No projection: solve for target %.2f overflowed", target)
        return None

    if not math.isfinite(days) or days <= 0:
        return None
    return days


def project_goal_date(
    model: LogarithmicModel | None,
    target: float,
    start_date: str,
) -> str | None:
    """
    Projected calendar date for reaching a goal target.

    Returns:
        start_date + ceil(days) as YYYY-MM-DD, or None (also when the date
        would fall past the last representable calendar day)
    """
    days = solve_days_to_target(model, target)
    if days is None:
        return None
    if days > days_between(start_date, date.max):
        log.debug("No projection: %.3g days from %s is past the calendar range", days, start_date)
        return None
    return add_days(start_date, math.ceil(days))


def project_performance(
    current_1rm: float,
    last_observation_date: str,
    settings: ForecastSettings = DEFAULT_SETTINGS,
) -> tuple[int, str, LogisticModel]:
    """
    Limiting-returns projection from the current 1RM.

    Args:
        current_1rm: Latest estimated 1RM
        last_observation_date: Date of the latest observation
        settings: Horizon and curve parameters

    Returns:
        Tuple (predicted 1RM rounded, projected date, model used)
    """
    model = limiting_returns_model(current_1rm, settings)
    predicted = round_half_up(model.predict(settings.horizon_days))
    return predicted, add_days(last_observation_date, settings.horizon_days), model


def limiting_returns_band(
    current_1rm: float,
    projection_days: int,
    confidence: float,
    settings: ForecastSettings = DEFAULT_SETTINGS,
) -> list[ConfidenceBandPoint]:
    """
    Weekly envelope around the limiting-returns curve.

    Half-width = 0.2 × current × (1 − confidence), so a confident
    prediction draws a narrow band.

    Args:
        current_1rm: Latest estimated 1RM
        projection_days: Last day to include
        confidence: Prediction confidence in [0, 1]
        settings: Curve parameters

    Returns:
        One point per week from day 0 through ``projection_days``
    """
    model = limiting_returns_model(current_1rm, settings)
    spread = current_1rm * BAND_MAX_VARIATION * (1 - confidence)

    band: list[ConfidenceBandPoint] = []
    for day in range(0, projection_days + 1, BAND_STEP_DAYS):
        y = model.predict(day)
        band.append(ConfidenceBandPoint(day=day, lower=y - spread, upper=y + spread))
    return band
