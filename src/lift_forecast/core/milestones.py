"""
Milestone management for goals.

A goal's milestones always include its start value (achieved on the start
date) and its target value, plus waypoints at 25/50/75 % of the way.
Waypoint dates are spread linearly along the start -> target timeline.
"""

from dataclasses import replace

from .config import (
    DEFAULT_SETTINGS,
    MILESTONE_FALLBACK_SPAN_DAYS,
    MILESTONE_FRACTIONS,
    MILESTONE_VALUE_TOLERANCE,
    ForecastSettings,
)
from .dates import add_days, add_months, days_between, format_date, parse_date
from .max_estimator import round_half_up
from .models import Goal, Milestone, ObservationSeries


def _same_value(a: float, b: float) -> bool:
    return abs(a - b) < MILESTONE_VALUE_TOLERANCE


def _find(milestones: list[Milestone], value: float) -> int | None:
    for i, m in enumerate(milestones):
        if _same_value(m.value, value):
            return i
    return None


def _dedupe(milestones: list[Milestone]) -> list[Milestone]:
    """One milestone per value; the earliest achievement wins."""
    result: list[Milestone] = []
    for m in milestones:
        i = _find(result, m.value)
        if i is None:
            result.append(m)
            continue
        kept = result[i]
        if m.achieved_date is not None and (
            kept.achieved_date is None or m.achieved_date < kept.achieved_date
        ):
            result[i] = m
    return result


def target_milestone_date(
    goal: Goal,
    projected_date: str | None,
    settings: ForecastSettings = DEFAULT_SETTINGS,
) -> str:
    """User target date, else projected date, else start + fallback months."""
    if goal.user_target_date:
        return goal.user_target_date
    if projected_date:
        return projected_date
    return format_date(add_months(parse_date(goal.start_date), settings.goal_fallback_months))


def _waypoint_date(goal: Goal, projected_date: str | None, fraction: float) -> str:
    end = goal.user_target_date or projected_date
    if end:
        span = days_between(goal.start_date, end)
    else:
        span = MILESTONE_FALLBACK_SPAN_DAYS
    return add_days(goal.start_date, round_half_up(span * fraction))


def normalize_milestones(
    goal: Goal,
    projected_date: str | None,
    settings: ForecastSettings = DEFAULT_SETTINGS,
) -> list[Milestone]:
    """
    Ensure start, target and waypoint milestones exist, sorted by value.

    The goal's own list is not modified.

    Args:
        goal: Goal with zero or more caller-defined milestones
        projected_date: Projected completion date, if any
        settings: Fallback horizon for undated targets

    Returns:
        New milestone list, ascending by value
    """
    milestones = _dedupe([replace(m) for m in goal.milestones])

    i = _find(milestones, goal.start_value)
    if i is None:
        milestones.insert(
            0,
            Milestone(
                value=goal.start_value,
                target_date=goal.start_date,
                achieved_date=goal.start_date,
            ),
        )
    elif milestones[i].achieved_date is None:
        milestones[i] = replace(milestones[i], achieved_date=goal.start_date)

    if _find(milestones, goal.target_value) is None:
        milestones.append(
            Milestone(
                value=goal.target_value,
                target_date=target_milestone_date(goal, projected_date, settings),
            )
        )

    for fraction in MILESTONE_FRACTIONS:
        exact = goal.start_value + (goal.target_value - goal.start_value) * fraction
        value = round(exact, 2)
        if _same_value(exact, goal.start_value) or _same_value(exact, goal.target_value):
            continue
        if _find(milestones, exact) is not None or _find(milestones, value) is not None:
            continue
        milestones.append(
            Milestone(value=value, target_date=_waypoint_date(goal, projected_date, fraction))
        )

    milestones.sort(key=lambda m: m.value)
    return milestones


def update_achievements(
    milestones: list[Milestone],
    series: ObservationSeries,
) -> list[Milestone]:
    """
    Date each unachieved milestone by the first observation that reaches it.

    Already-achieved milestones are kept as they are.

    Args:
        milestones: Milestones sorted by value
        series: Chronological observation series for the goal

    Returns:
        New milestone list
    """
    updated: list[Milestone] = []
    for m in milestones:
        if m.achieved_date is None:
            for point in series:
                if point.value >= m.value:
                    m = replace(m, achieved_date=series.date_of(point))
                    break
        updated.append(m)
    return updated
