"""
Data models for lift-forecast.

Input records (what the caller's workout log looks like), the derived
observation series, goal/milestone state, and prediction results.
Dates are ISO strings (YYYY-MM-DD) throughout.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Literal

from .dates import format_date, parse_date, validate_iso_date

GoalType = Literal["exercise", "weight", "other"]


@dataclass
class SetEntry:
    """A single logged set: load and repetitions."""

    weight: float
    reps: int

    def __post_init__(self) -> None:
        """Validate set data."""
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if self.reps < 0:
            raise ValueError("reps must be non-negative")


@dataclass
class ExerciseEntry:
    """
    All sets performed for one exercise (metric) within a workout.
    """

    exercise_id: str
    exercise_name: str = ""
    sets: list[SetEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.exercise_id:
            raise ValueError("exercise_id must be non-empty")

    @property
    def top_weight(self) -> float:
        """Heaviest weight lifted in any set, or 0 if there are no sets."""
        if not self.sets:
            return 0.0
        return max(s.weight for s in self.sets)


@dataclass
class WorkoutRecord:
    """
    A completed workout as supplied by the caller.

    The engine never mutates records; it reads ``date`` and ``exercises``.
    """

    date: str  # ISO format: YYYY-MM-DD
    exercises: list[ExerciseEntry] = field(default_factory=list)
    duration_minutes: int = 0
    template_name: str | None = None

    def __post_init__(self) -> None:
        """Validate workout data."""
        validate_iso_date(self.date)
        if self.duration_minutes < 0:
            raise ValueError("duration_minutes must be non-negative")

    def entry_for(self, exercise_id: str) -> ExerciseEntry | None:
        """Return the entry for ``exercise_id`` or None if it was not trained."""
        for entry in self.exercises:
            if entry.exercise_id == exercise_id:
                return entry
        return None

    def has_exercise(self, exercise_id: str) -> bool:
        return self.entry_for(exercise_id) is not None


@dataclass(frozen=True)
class BestSet:
    """The set with the highest estimated 1RM in a session."""

    weight: float
    reps: int
    one_rep_max: int


@dataclass(frozen=True)
class Observation:
    """One point of a metric time series: days since series start, value."""

    day_offset: int
    value: float


@dataclass(frozen=True)
class ObservationSeries:
    """
    A metric time series together with the date its day offsets count from.

    Points are sorted by day offset with at most one point per day.
    """

    start_date: str
    points: tuple[Observation, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    @property
    def values(self) -> list[float]:
        return [p.value for p in self.points]

    def as_pairs(self) -> list[tuple[float, float]]:
        """Points as (x, y) tuples for fitting."""
        return [(float(p.day_offset), p.value) for p in self.points]

    def date_of(self, point: Observation) -> str:
        """Calendar date of an observation."""
        return format_date(parse_date(self.start_date) + timedelta(days=point.day_offset))

    @property
    def last_date(self) -> str | None:
        if not self.points:
            return None
        return self.date_of(self.points[-1])


@dataclass
class Milestone:
    """
    An intermediate value between a goal's start and target.

    ``achieved_date`` stays None until history first reaches ``value``.
    """

    value: float
    target_date: str
    achieved_date: str | None = None

    def __post_init__(self) -> None:
        validate_iso_date(self.target_date)
        if self.achieved_date is not None:
            validate_iso_date(self.achieved_date)


@dataclass
class Goal:
    """
    A user goal, e.g. "bench press 185 -> 225 lbs".

    The first block of fields is caller input.  ``current_value``,
    ``projected_date``, ``confidence`` and ``completed`` are filled in by
    ``process_goal`` on the returned copy.
    """

    start_value: float
    target_value: float
    start_date: str
    user_target_date: str | None = None
    unit: str = "lbs"
    exercise_id: str | None = None
    exercise_name: str | None = None
    goal_type: GoalType = "exercise"
    milestones: list[Milestone] = field(default_factory=list)
    current_value: float | None = None
    projected_date: str | None = None
    confidence: float | None = None
    completed: bool = False

    def __post_init__(self) -> None:
        """Validate goal data."""
        validate_iso_date(self.start_date)
        if self.user_target_date is not None:
            validate_iso_date(self.user_target_date)
        if self.projected_date is not None:
            validate_iso_date(self.projected_date)
        if self.goal_type not in ("exercise", "weight", "other"):
            raise ValueError(f"Invalid goal_type: {self.goal_type}")
        if self.confidence is not None and not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be within [0, 1]")

    @property
    def label(self) -> str:
        return self.exercise_name or "goal"


@dataclass(frozen=True)
class RepRangePrediction:
    """Current and projected max for one rep range (1RM, 3RM, ...)."""

    label: str
    current_max: int
    predicted_max: int
    estimated_achievement_date: str | None
    progress_percentage: int


@dataclass(frozen=True)
class PredictionMetadata:
    """Context about the data behind a prediction."""

    workout_count: int
    data_points: int
    frequency: float  # workouts per week
    last_updated: str
    model_type: str


@dataclass(frozen=True)
class PredictionResult:
    """
    Output of ``predict_performance``.

    ``confidence`` is 0.0 when there was not enough data to fit a trend.
    """

    current_value: int
    predicted_value: int
    predicted_date: str | None
    confidence: float
    rep_range_predictions: list[RepRangePrediction]
    insights: list[str]
    metadata: PredictionMetadata


@dataclass(frozen=True)
class ConfidenceBandPoint:
    """Lower/upper envelope of the limiting-returns curve on one day."""

    day: int
    lower: float
    upper: float
