"""
Rep-range extrapolation.

Maps a 1RM projection onto 3RM/5RM/10RM using fixed %1RM factors.
Higher rep ranges are assumed to reach their projected max sooner.
"""

from datetime import date, timedelta

from .config import REP_RANGE_FACTORS, REP_RANGE_TIME_SCALES
from .dates import days_between, format_date
from .max_estimator import round_half_up
from .models import RepRangePrediction


def rep_range_predictions(
    current_1rm: float,
    predicted_1rm: float,
    projected_date: str | None,
    today: date,
) -> list[RepRangePrediction]:
    """
    Current and predicted max for each tracked rep range.

    Args:
        current_1rm: Current estimated 1RM
        predicted_1rm: Projected 1RM
        projected_date: Date the 1RM projection is reached, if any
        today: Reference date for achievement estimates

    Returns:
        One RepRangePrediction per entry of REP_RANGE_FACTORS, in order
    """
    days_until = None
    if projected_date is not None:
        days_until = max(1, days_between(today, projected_date))

    predictions: list[RepRangePrediction] = []
    for label, factor in REP_RANGE_FACTORS.items():
        exact_current = current_1rm * factor
        current_max = round_half_up(exact_current)
        predicted_max = round_half_up(predicted_1rm * factor)

        achievement: str | None = None
        if days_until is not None:
            offset = round_half_up(days_until * REP_RANGE_TIME_SCALES[label])
            achievement = format_date(today + timedelta(days=offset))

        # Progress from the unrounded current max towards the predicted max
        span = (predicted_max - exact_current) or 1
        progress = round_half_up((current_max - exact_current) / span * 100)

        predictions.append(
            RepRangePrediction(
                label=label,
                current_max=current_max,
                predicted_max=predicted_max,
                estimated_achievement_date=achievement,
                progress_percentage=max(0, min(100, progress)),
            )
        )

    return predictions
