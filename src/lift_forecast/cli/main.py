"""
CLI entry point using Typer.

Provides commands for logging workouts and forecasting progress:
- init: Create the workout history file
- log-workout: Log sets of one exercise
- show-history: Display logged workouts
- 1rm: Per-workout 1RM estimates
- predict: 1RM prediction with rep ranges and insights
- add-goal: Add a goal
- goals: Goal projections, milestones and recommendations
"""

from .app import app
from .commands import analysis, sessions  # noqa: F401  registers commands

__all__ = ["app"]


if __name__ == "__main__":
    app()
