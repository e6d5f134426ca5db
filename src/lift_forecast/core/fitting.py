"""
Curve fitting over sparse, irregularly sampled strength series.

Three model families, each a frozen dataclass:

  LinearModel       y = m·x + c            (least squares)
  LogarithmicModel  y = a + b·ln(x)        (least squares on (ln x, y), x > 0)
  LogisticModel     y = L / (1 + e^(−k(x − x0))) + b
                    (not fitted: derived from the current 1RM, models
                     diminishing returns over the projection horizon)

``FittedModel`` is the union of the three; callers dispatch with
isinstance().
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence, Union

from .config import DEFAULT_SETTINGS, MIN_FIT_POINTS, ForecastSettings

log = logging.getLogger(__name__)

Point = tuple[float, float]


@dataclass(frozen=True)
class LinearModel:
    """y = slope·x + intercept."""

    slope: float
    intercept: float
    r_squared: float
    points: tuple[Point, ...]

    @property
    def is_progressing(self) -> bool:
        return self.slope > 0

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


@dataclass(frozen=True)
class LogarithmicModel:
    """y = a + b·ln(x), defined for x > 0."""

    a: float
    b: float
    r_squared: float
    points: tuple[Point, ...]

    @property
    def is_progressing(self) -> bool:
        return self.b > 0

    def predict(self, x: float) -> float:
        return self.a + self.b * math.log(x)


@dataclass(frozen=True)
class LogisticModel:
    """
    Limiting-returns curve: y = L / (1 + e^(−k(x − x0))) + baseline.

    x is days after the last observation.  The curve starts just above
    ``baseline`` and saturates at ``baseline + ceiling_gain``.
    """

    ceiling_gain: float  # L
    rate: float  # k
    midpoint: float  # x0
    baseline: float  # b
    r_squared: float | None = None
    points: tuple[Point, ...] = ()

    @property
    def is_progressing(self) -> bool:
        return self.ceiling_gain > 0

    def predict(self, x: float) -> float:
        return self.ceiling_gain / (1 + math.exp(-self.rate * (x - self.midpoint))) + self.baseline


FittedModel = Union[LinearModel, LogarithmicModel, LogisticModel]


def _least_squares(points: Sequence[Point]) -> tuple[float, float] | None:
    """
    Ordinary least squares for y = a + b*x.

    Returns:
        Tuple (intercept a, slope b), or None when all x are equal
    """
    n = len(points)
    sum_x = sum(p[0] for p in points)
    sum_y = sum(p[1] for p in points)
    sum_xy = sum(p[0] * p[1] for p in points)
    sum_x2 = sum(p[0] ** 2 for p in points)

    denominator = n * sum_x2 - sum_x**2
    if abs(denominator) < 1e-10:
        return None

    b = (n * sum_xy - sum_x * sum_y) / denominator
    a = (sum_y - b * sum_x) / n
    return (a, b)


def r_squared(points: Sequence[Point], predicted: Sequence[float]) -> float:
    """
    Coefficient of determination, 1 − SSE/SST.

    A constant series has SST = 0; it scores 1.0 when the model reproduces
    it exactly and 0.0 otherwise, so the result is never NaN.
    """
    ys = [p[1] for p in points]
    mean_y = sum(ys) / len(ys)
    sse = sum((y - y_hat) ** 2 for y, y_hat in zip(ys, predicted))
    sst = sum((y - mean_y) ** 2 for y in ys)
    if sst < 1e-12:
        return 1.0 if sse < 1e-12 else 0.0
    return max(0.0, 1.0 - sse / sst)


def fit_linear(points: Sequence[Point]) -> LinearModel | None:
    """
    Fit y = m·x + c by least squares.

    A non-positive slope is a valid result (flagged via is_progressing).

    Args:
        points: (day_offset, value) pairs

    Returns:
        LinearModel, or None with fewer than two distinct x values
    """
    if len(points) < MIN_FIT_POINTS:
        return None

    coeffs = _least_squares(points)
    if coeffs is None:
        return None
    intercept, slope = coeffs

    if slope <= 0:
        log.debug("Linear fit shows no progression (slope=%.4f)", slope)

    predicted = [slope * x + intercept for x, _ in points]
    return LinearModel(
        slope=slope,
        intercept=intercept,
        r_squared=r_squared(points, predicted),
        points=tuple(points),
    )


def fit_logarithmic(points: Sequence[Point]) -> LogarithmicModel | None:
    """
    Fit y = a + b·ln(x) by least squares on (ln x, y).

    Points with x ≤ 0 are dropped first since ln is undefined there.

    Args:
        points: (day_offset, value) pairs

    Returns:
        LogarithmicModel, or None with fewer than two usable points
    """
    usable = [(x, y) for x, y in points if x > 0]
    if len(usable) < MIN_FIT_POINTS:
        log.debug("Not enough points (x > 0) for logarithmic fit: %d", len(usable))
        return None

    coeffs = _least_squares([(math.log(x), y) for x, y in usable])
    if coeffs is None:
        return None
    a, b = coeffs

    if b <= 0:
        log.debug("Logarithmic fit shows no progression (b=%.4f)", b)

    predicted = [a + b * math.log(x) for x, _ in usable]
    return LogarithmicModel(
        a=a,
        b=b,
        r_squared=r_squared(usable, predicted),
        points=tuple(usable),
    )


def limiting_returns_model(
    current_1rm: float,
    settings: ForecastSettings = DEFAULT_SETTINGS,
) -> LogisticModel:
    """
    Derive the limiting-returns curve from the current 1RM.

    L = gain_fraction × current, k and x0 from settings, baseline = current.
    Never fails.
    """
    return LogisticModel(
        ceiling_gain=current_1rm * settings.gain_fraction,
        rate=settings.logistic_rate,
        midpoint=settings.inflection_days,
        baseline=current_1rm,
    )
