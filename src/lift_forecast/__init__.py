"""
lift-forecast: strength-training performance forecasting.

The engine lives in ``lift_forecast.core``; ``io`` and ``cli`` are the
storage and command-line layers built on top of it.
"""

from .core.forecast import predict_performance, process_goal
from .core.max_estimator import best_set, brzycki_1rm
from .core.metrics import one_rep_max_change
from .core.projection import limiting_returns_band

__all__ = [
    "predict_performance",
    "process_goal",
    "best_set",
    "brzycki_1rm",
    "one_rep_max_change",
    "limiting_returns_band",
]
