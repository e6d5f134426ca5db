"""
Rule-based training recommendations.

Messages are emitted in a fixed order and the list is cut to
``settings.max_insights`` entries:

  1. baseline consistency message
  2. progression message (rate / projection) or a "stalled" warning
  3. confidence remark
  4. mode-specific extras (projected gain, frequency tips, goal-type tips)
"""

from .config import (
    CONSISTENT_CONFIDENCE,
    DEFAULT_SETTINGS,
    INCONSISTENT_CONFIDENCE,
    LOW_FREQUENCY_PER_WEEK,
    VOLUME_ZONE_HIGH,
    VOLUME_ZONE_LOW,
    ForecastSettings,
)
from .dates import days_between
from .fitting import LinearModel, LogarithmicModel
from .max_estimator import round_half_up
from .models import Goal

NOT_ENOUGH_HISTORY = "Not enough workout history to generate predictions yet. Keep logging your workouts!"
NOT_ENOUGH_DATA = "Not enough data for detailed recommendations yet. Keep logging your workouts!"


def monthly_growth_percent(model: LinearModel) -> float:
    """
    Trend growth per 30 days as a percentage of the fitted starting strength.

    The fitted intercept is the baseline; a non-positive one is replaced
    by 1 to keep the ratio finite.
    """
    baseline = model.intercept if model.intercept > 0 else 1.0
    return model.slope * 30 / baseline * 100


def performance_insights(
    exercise_name: str,
    current_1rm: int,
    predicted_1rm: int,
    model: LinearModel,
    confidence: float,
    elapsed_days: int,
    frequency: float,
    settings: ForecastSettings = DEFAULT_SETTINGS,
) -> list[str]:
    """
    Insights for a performance prediction.

    Args:
        exercise_name: Display name
        current_1rm: Current estimated 1RM
        predicted_1rm: Projected 1RM at the horizon
        model: Linear trend of the 1RM series
        confidence: Prediction confidence
        elapsed_days: Days from the first observation to today
        frequency: Workouts per week
        settings: Unit, stall threshold and list limit

    Returns:
        Up to ``settings.max_insights`` messages
    """
    insights = [f"Stay consistent with your {exercise_name} training to keep improving."]

    if model.is_progressing:
        growth = monthly_growth_percent(model)
        insights.append(
            f"Your {exercise_name} strength is increasing at an average rate of {growth:.1f}% per month."
        )
    elif elapsed_days > settings.stall_days:
        insights.append(
            f"Your {exercise_name} progress has stalled. Review your training plan, nutrition, or recovery."
        )

    if confidence > CONSISTENT_CONFIDENCE:
        insights.append(f"Your {exercise_name} progress is quite consistent.")
    elif confidence < INCONSISTENT_CONFIDENCE and elapsed_days >= settings.stall_days:
        insights.append(
            f"Your {exercise_name} results are inconsistent. Sticking to a regular schedule will sharpen this prediction."
        )

    if predicted_1rm > current_1rm:
        insights.append(
            f"You're on track to add {predicted_1rm - current_1rm} {settings.unit} "
            f"to your {exercise_name} one-rep max in the coming months."
        )

    if frequency < LOW_FREQUENCY_PER_WEEK:
        insights.append("Consider increasing your training frequency to accelerate strength gains.")
    else:
        low = round_half_up(current_1rm * VOLUME_ZONE_LOW)
        high = round_half_up(current_1rm * VOLUME_ZONE_HIGH)
        insights.append(
            f"Consider adding more volume in the 70-80% of 1RM range ({low}-{high} {settings.unit}) "
            "to potentially accelerate your strength gains."
        )

    return insights[: settings.max_insights]


def goal_recommendations(
    goal: Goal,
    model: LogarithmicModel | None,
    projected_date: str | None,
    confidence: float | None,
    today_str: str,
    settings: ForecastSettings = DEFAULT_SETTINGS,
) -> list[str]:
    """
    Recommendations for a goal timeline.

    Args:
        goal: The goal being tracked
        model: Logarithmic fit of the goal series, if any
        projected_date: Projected completion date, if any
        confidence: Goal confidence, if any
        today_str: Reference date (YYYY-MM-DD)
        settings: Stall threshold and list limit

    Returns:
        Up to ``settings.max_insights`` messages
    """
    recommendations = [f"Focus on consistent training for your {goal.label}."]
    days_passed = days_between(goal.start_date, today_str)

    if model is not None:
        if model.is_progressing:
            if projected_date is None:
                recommendations.append("Could not calculate a projected date based on the current trend.")
            elif goal.user_target_date:
                if projected_date > goal.user_target_date:
                    recommendations.append(
                        "Projection exceeds target date. Increase intensity/frequency or adjust target date."
                    )
                else:
                    recommendations.append("You're on track to meet your target date based on the current curve!")
            else:
                days_remaining = days_between(today_str, projected_date)
                if days_remaining > 0:
                    recommendations.append(
                        f"Projected completion in ~{days_remaining} days, "
                        "assuming current progression curve continues."
                    )
        elif days_passed > settings.stall_days:
            recommendations.append(
                "Progression seems stalled or negative. Review training plan, nutrition, or recovery."
            )

        if confidence is not None:
            if confidence < INCONSISTENT_CONFIDENCE and days_passed >= settings.stall_days:
                recommendations.append("Progress is inconsistent. Focus on sticking to your plan regularly.")
            elif confidence > CONSISTENT_CONFIDENCE:
                recommendations.append("Your progress is quite consistent!")
    else:
        recommendations.append(NOT_ENOUGH_DATA)

    if goal.goal_type == "exercise":
        recommendations.append("Ensure proper form to maximize gains and prevent injury.")
        recommendations.append("Consider accessory exercises to support your main lifts.")
    elif goal.goal_type == "weight":
        recommendations.append("Monitor your nutrition and caloric intake closely.")

    return recommendations[: settings.max_insights]
