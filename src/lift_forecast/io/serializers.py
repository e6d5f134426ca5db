"""
JSON serialization for lift-forecast data models.

Handles conversion between dataclasses and JSON-compatible dicts.
"""

import json
import re
from dataclasses import asdict
from typing import Any

from ..core.dates import validate_iso_date
from ..core.models import (
    ExerciseEntry,
    Goal,
    Milestone,
    PredictionResult,
    SetEntry,
    WorkoutRecord,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate and normalize date string to ISO format.

    Args:
        date_str: Date string to validate

    Returns:
        Normalized YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    try:
        validate_iso_date(date_str)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    return date_str


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def _require(data: dict[str, Any], key: str, context: str) -> Any:
    if key not in data:
        raise ValidationError(f"{context}: missing required field '{key}'")
    return data[key]


# ---------------------------------------------------------------------------
# Workout records
# ---------------------------------------------------------------------------


def set_entry_to_dict(s: SetEntry) -> dict[str, Any]:
    return {"weight": s.weight, "reps": s.reps}


def dict_to_set_entry(data: dict[str, Any]) -> SetEntry:
    """
    Convert dict to SetEntry.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        weight = float(_require(data, "weight", "set"))
        reps = int(_require(data, "reps", "set"))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid set {data!r}: {e}") from e
    weight = validate_non_negative(weight, "weight")
    reps = validate_non_negative(reps, "reps")
    return SetEntry(weight=float(weight), reps=int(reps))


def exercise_entry_to_dict(entry: ExerciseEntry) -> dict[str, Any]:
    return {
        "exercise_id": entry.exercise_id,
        "exercise_name": entry.exercise_name,
        "sets": [set_entry_to_dict(s) for s in entry.sets],
    }


def dict_to_exercise_entry(data: dict[str, Any]) -> ExerciseEntry:
    exercise_id = _require(data, "exercise_id", "exercise")
    if not isinstance(exercise_id, str) or not exercise_id.strip():
        raise ValidationError(f"Invalid exercise_id: {exercise_id!r}")
    return ExerciseEntry(
        exercise_id=exercise_id,
        exercise_name=data.get("exercise_name") or "",
        sets=[dict_to_set_entry(s) for s in data.get("sets", [])],
    )


def workout_record_to_dict(record: WorkoutRecord) -> dict[str, Any]:
    """
    Convert WorkoutRecord to JSON-compatible dict.

    Optional fields are only written when set.
    """
    d: dict[str, Any] = {
        "date": record.date,
        "exercises": [exercise_entry_to_dict(e) for e in record.exercises],
    }
    if record.duration_minutes:
        d["duration_minutes"] = record.duration_minutes
    if record.template_name:
        d["template_name"] = record.template_name
    return d


def dict_to_workout_record(data: dict[str, Any]) -> WorkoutRecord:
    """
    Convert dict to WorkoutRecord.

    Raises:
        ValidationError: If data is invalid
    """
    validate_date(_require(data, "date", "workout"))
    try:
        duration = int(data.get("duration_minutes") or 0)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid duration_minutes: {e}") from e
    duration = validate_non_negative(duration, "duration_minutes")

    return WorkoutRecord(
        date=data["date"],
        exercises=[dict_to_exercise_entry(e) for e in data.get("exercises", [])],
        duration_minutes=int(duration),
        template_name=data.get("template_name"),
    )


def record_to_json_line(record: WorkoutRecord) -> str:
    """Serialize a record to a single JSON line (no trailing newline)."""
    return json.dumps(workout_record_to_dict(record), separators=(",", ":"))


def json_line_to_record(line: str) -> WorkoutRecord:
    """
    Deserialize a JSON line to a WorkoutRecord.

    Raises:
        ValidationError: If JSON is invalid or data validation fails
    """
    try:
        data = json.loads(line.strip())
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON: {e}") from e

    return dict_to_workout_record(data)


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


def milestone_to_dict(m: Milestone) -> dict[str, Any]:
    return {
        "value": m.value,
        "target_date": m.target_date,
        "achieved_date": m.achieved_date,
    }


def dict_to_milestone(data: dict[str, Any]) -> Milestone:
    validate_date(_require(data, "target_date", "milestone"))
    achieved = data.get("achieved_date")
    if achieved is not None:
        validate_date(achieved)
    return Milestone(
        value=float(_require(data, "value", "milestone")),
        target_date=data["target_date"],
        achieved_date=achieved,
    )


def goal_to_dict(goal: Goal) -> dict[str, Any]:
    """Convert Goal (including enrichment fields) to JSON-compatible dict."""
    return {
        "start_value": goal.start_value,
        "target_value": goal.target_value,
        "start_date": goal.start_date,
        "user_target_date": goal.user_target_date,
        "unit": goal.unit,
        "exercise_id": goal.exercise_id,
        "exercise_name": goal.exercise_name,
        "goal_type": goal.goal_type,
        "milestones": [milestone_to_dict(m) for m in goal.milestones],
        "current_value": goal.current_value,
        "projected_date": goal.projected_date,
        "confidence": goal.confidence,
        "completed": goal.completed,
    }


def dict_to_goal(data: dict[str, Any]) -> Goal:
    """
    Convert dict to Goal.

    Raises:
        ValidationError: If data is invalid
    """
    validate_date(_require(data, "start_date", "goal"))
    for key in ("user_target_date", "projected_date"):
        if data.get(key) is not None:
            validate_date(data[key])

    goal_type = data.get("goal_type", "exercise")
    if goal_type not in ("exercise", "weight", "other"):
        raise ValidationError(
            f"Invalid goal_type: {goal_type}. Must be one of ('exercise', 'weight', 'other')"
        )

    current = data.get("current_value")
    confidence = data.get("confidence")
    try:
        return Goal(
            start_value=float(_require(data, "start_value", "goal")),
            target_value=float(_require(data, "target_value", "goal")),
            start_date=data["start_date"],
            user_target_date=data.get("user_target_date"),
            unit=data.get("unit") or "lbs",
            exercise_id=data.get("exercise_id"),
            exercise_name=data.get("exercise_name"),
            goal_type=goal_type,
            milestones=[dict_to_milestone(m) for m in data.get("milestones") or []],
            current_value=float(current) if current is not None else None,
            projected_date=data.get("projected_date"),
            confidence=float(confidence) if confidence is not None else None,
            completed=bool(data.get("completed", False)),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid goal: {e}") from e


# ---------------------------------------------------------------------------
# Predictions
# ---------------------------------------------------------------------------


def prediction_to_dict(result: PredictionResult) -> dict[str, Any]:
    """Convert PredictionResult to JSON-compatible dict."""
    d = asdict(result)
    d["confidence"] = round(result.confidence, 4)
    return d


# ---------------------------------------------------------------------------
# Set string parsing
# ---------------------------------------------------------------------------

_SET_PATTERN = re.compile(
    r"^(?P<weight>\d+(?:\.\d+)?)\s*(?:[xX×@])\s*(?P<reps>\d+)(?:\s*[xX×]\s*(?P<count>\d+))?$"
)


def parse_sets_string(sets_str: str) -> list[SetEntry]:
    """
    Parse a sets string.

    Comma-separated tokens, each one of:
        WEIGHTxREPS        e.g. "185x5"       one set
        WEIGHT@REPS        e.g. "185@5"       one set
        WEIGHTxREPSxSETS   e.g. "135x10x3"    three identical sets

    Args:
        sets_str: Sets string to parse

    Returns:
        List of SetEntry

    Raises:
        ValidationError: If format is invalid
    """
    if not sets_str or not sets_str.strip():
        raise ValidationError("Sets string cannot be empty")

    sets: list[SetEntry] = []
    for part in (p.strip() for p in sets_str.split(",")):
        if not part:
            continue
        match = _SET_PATTERN.match(part)
        if not match:
            raise ValidationError(
                f"Invalid set format: '{part}'.\n"
                "Use: weightxreps (e.g. 185x5), weight@reps (e.g. 185@5),\n"
                "     or weightxrepsxsets (e.g. 135x10x3)."
            )
        weight = float(match.group("weight"))
        reps = int(match.group("reps"))
        count = int(match.group("count") or 1)
        if count < 1:
            raise ValidationError(f"Set count must be at least 1: '{part}'")
        sets.extend(SetEntry(weight=weight, reps=reps) for _ in range(count))

    if not sets:
        raise ValidationError("No valid sets found in sets string")

    return sets
