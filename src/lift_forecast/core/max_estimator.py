"""
One-rep-max estimation from submaximal sets.

  Brzycki — Brzycki 1993 (JOPERD 64(1):88-90):
    1RM = weight × 36 / (37 − reps)
    Accurate for low to moderate rep counts; undefined at 37 reps and
    unstable just below it, so sets at or above 36 reps are ignored.

A session's strength value is the best Brzycki estimate across its sets.
"""

from __future__ import annotations

import math

from .config import BRZYCKI_DENOMINATOR, BRZYCKI_MAX_REPS, BRZYCKI_NUMERATOR
from .models import BestSet, ExerciseEntry


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (182.5 -> 183)."""
    return math.floor(value + 0.5)


def brzycki_1rm(weight: float, reps: int) -> float:
    """
    Estimate 1RM using the Brzycki formula.

    1RM = weight * 36 / (37 - reps)

    Args:
        weight: Load lifted
        reps: Reps performed (≥ 1)

    Returns:
        Estimated 1RM; ``weight`` unchanged when reps ≥ 36
    """
    if reps >= BRZYCKI_MAX_REPS:
        return weight
    return weight * BRZYCKI_NUMERATOR / (BRZYCKI_DENOMINATOR - reps)


def best_set(entry: ExerciseEntry | None) -> BestSet:
    """
    Find the set with the highest estimated 1RM.

    Sets with no reps, no load, or reps ≥ 36 do not qualify.

    Args:
        entry: One exercise's sets from a workout

    Returns:
        BestSet with the 1RM rounded to a whole number.
        BestSet(0, 0, 0) when no set qualifies — treat as "no observation".
    """
    best_weight = 0.0
    best_reps = 0
    best_1rm = 0.0

    if entry is not None:
        for s in entry.sets:
            if s.reps < 1 or s.reps >= BRZYCKI_MAX_REPS or s.weight <= 0:
                continue
            est = brzycki_1rm(s.weight, s.reps)
            if est > best_1rm:
                best_1rm = est
                best_weight = s.weight
                best_reps = s.reps

    return BestSet(weight=best_weight, reps=best_reps, one_rep_max=round_half_up(best_1rm))
