"""
Configuration constants for the performance-forecasting engine.

All adjustable parameters are centralized here for easy tuning.
The thresholds below are empirical and kept as-is for behavioural
compatibility with existing predictions; they are not derived from a
statistical model.
"""

from dataclasses import dataclass
from typing import Final

# =============================================================================
# ONE-REP-MAX ESTIMATION (Brzycki)
# =============================================================================

BRZYCKI_NUMERATOR: Final[float] = 36.0
BRZYCKI_DENOMINATOR: Final[float] = 37.0
BRZYCKI_MAX_REPS: Final[int] = 36  # At or above this the formula is unstable

# =============================================================================
# CURVE FITTING
# =============================================================================

MIN_FIT_POINTS: Final[int] = 2  # Least squares needs two distinct x values

# Limiting-returns (logistic) projection: y = L / (1 + e^(-k(x - x0))) + b
LOGISTIC_GAIN_FRACTION: Final[float] = 0.25  # L as a fraction of current 1RM
LOGISTIC_RATE: Final[float] = 0.03  # k
LOGISTIC_INFLECTION_DAYS: Final[float] = 90.0  # x0
PROJECTION_HORIZON_DAYS: Final[int] = 180

# =============================================================================
# CONFIDENCE (goal tracking)
# =============================================================================

GOAL_CONFIDENCE_MIN: Final[float] = 0.1
GOAL_CONFIDENCE_MAX: Final[float] = 1.0

# =============================================================================
# CONFIDENCE (performance prediction)
# =============================================================================

PERF_CONFIDENCE_MIN: Final[float] = 0.05
PERF_CONFIDENCE_MAX: Final[float] = 0.98
PERF_CONFIDENCE_PERFECT: Final[float] = 0.99
PERFECT_FIT_MIN_POINTS: Final[int] = 10

# (point count upper bound, factor); first matching row wins, else 1.0
DATA_VOLUME_FACTORS: Final[list[tuple[int, float]]] = [
    (3, 0.3),
    (5, 0.5),
    (10, 0.8),
]

# (residual sd / mean(y) lower bound, factor); first matching row wins, else 1.0
RESIDUAL_RATIO_FACTORS: Final[list[tuple[float, float]]] = [
    (0.5, 0.3),
    (0.2, 0.6),
    (0.1, 0.8),
]
RESIDUAL_ZERO_MEAN_FACTOR: Final[float] = 0.3

# (days beyond last observation, factor); the largest exceeded row wins
HORIZON_FACTORS: Final[list[tuple[int, float]]] = [
    (120, 0.5),
    (60, 0.7),
]

# =============================================================================
# REP-RANGE EXTRAPOLATION
# =============================================================================

# label -> fraction of 1RM liftable for that many reps
REP_RANGE_FACTORS: Final[dict[str, float]] = {
    "1RM": 1.00,
    "3RM": 0.94,
    "5RM": 0.89,
    "10RM": 0.75,
}

# label -> fraction of the days-until-projection (higher reps improve sooner)
REP_RANGE_TIME_SCALES: Final[dict[str, float]] = {
    "1RM": 1.0,
    "3RM": 0.85,
    "5RM": 0.7,
    "10RM": 0.55,
}

# =============================================================================
# MILESTONES
# =============================================================================

MILESTONE_FRACTIONS: Final[list[float]] = [0.25, 0.5, 0.75]
MILESTONE_VALUE_TOLERANCE: Final[float] = 1e-6
GOAL_FALLBACK_MONTHS: Final[int] = 6
MILESTONE_FALLBACK_SPAN_DAYS: Final[int] = 180

# =============================================================================
# RECOMMENDATIONS
# =============================================================================

STALL_MIN_DAYS: Final[int] = 14  # Elapsed days before "stalled" advice
CONSISTENT_CONFIDENCE: Final[float] = 0.8
INCONSISTENT_CONFIDENCE: Final[float] = 0.5
MAX_INSIGHTS: Final[int] = 4
LOW_FREQUENCY_PER_WEEK: Final[float] = 2.0
VOLUME_ZONE_LOW: Final[float] = 0.70  # Fraction of 1RM
VOLUME_ZONE_HIGH: Final[float] = 0.80

# =============================================================================
# CONFIDENCE BAND / 1RM CHANGE
# =============================================================================

BAND_MAX_VARIATION: Final[float] = 0.2  # Fraction of current 1RM at zero confidence
BAND_STEP_DAYS: Final[int] = 7
CHANGE_MIN_GAP_DAYS: Final[int] = 7

DEFAULT_UNIT: Final[str] = "lbs"


# =============================================================================
# CALLER-TUNABLE SETTINGS
# =============================================================================

@dataclass(frozen=True)
class ForecastSettings:
    """Subset of the model constants a caller may override (see forecast.yaml)."""

    horizon_days: int = PROJECTION_HORIZON_DAYS
    gain_fraction: float = LOGISTIC_GAIN_FRACTION
    logistic_rate: float = LOGISTIC_RATE
    inflection_days: float = LOGISTIC_INFLECTION_DAYS
    goal_fallback_months: int = GOAL_FALLBACK_MONTHS
    stall_days: int = STALL_MIN_DAYS
    max_insights: int = MAX_INSIGHTS
    unit: str = DEFAULT_UNIT

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.horizon_days <= 0:
            raise ValueError("horizon_days must be positive")
        if self.gain_fraction < 0:
            raise ValueError("gain_fraction must be non-negative")
        if self.goal_fallback_months <= 0:
            raise ValueError("goal_fallback_months must be positive")
        if self.max_insights < 1:
            raise ValueError("max_insights must be at least 1")


DEFAULT_SETTINGS: Final[ForecastSettings] = ForecastSettings()
