"""
JSONL-based history storage for workouts, plus a JSON goals file.

Handles reading, writing, and managing the workout history file.
"""

import json
import logging
from pathlib import Path

from ..core.models import ExerciseEntry, Goal, WorkoutRecord
from .serializers import (
    ValidationError,
    dict_to_goal,
    goal_to_dict,
    json_line_to_record,
    record_to_json_line,
)

log = logging.getLogger(__name__)


class HistoryStore:
    """
    Manages workout history stored in JSONL format.

    The history file contains one workout record per line.
    A separate goals.json file next to it stores the user's goals.
    """

    def __init__(self, history_path: str | Path):
        """
        Initialize the history store.

        Args:
            history_path: Path to the JSONL history file
        """
        self.history_path = Path(history_path)
        self.goals_path = self.history_path.parent / "goals.json"

    def exists(self) -> bool:
        """Check if the history file exists."""
        return self.history_path.exists()

    def init(self) -> None:
        """
        Initialize empty history and goals files if they don't exist.

        Creates parent directories if needed.
        """
        self.history_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.history_path.exists():
            self.history_path.touch()
            log.info("Created history file %s", self.history_path)

        if not self.goals_path.exists():
            self.save_goals([])

    def load_history(self) -> list[WorkoutRecord]:
        """
        Load all workouts from the history file.

        Returns:
            List of WorkoutRecord, sorted by date

        Raises:
            FileNotFoundError: If history file doesn't exist
            ValidationError: If a line cannot be parsed
        """
        if not self.history_path.exists():
            raise FileNotFoundError(
                f"History file not found: {self.history_path}. Run 'init' first."
            )

        records: list[WorkoutRecord] = []

        with open(self.history_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                if not line.strip():
                    continue
                try:
                    records.append(json_line_to_record(line))
                except ValidationError as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.history_path}: {e}"
                    ) from e

        records.sort(key=lambda r: r.date)
        log.debug("Loaded %d workouts from %s", len(records), self.history_path)
        return records

    def append_workout(self, record: WorkoutRecord) -> None:
        """
        Add a workout to the history file.

        A workout on a date that already has one is merged into it: each
        exercise replaces the same exercise logged earlier that day, and
        new exercises are added.  Chronological order is maintained.

        Args:
            record: Workout to add
        """
        if not self.history_path.exists():
            raise FileNotFoundError(
                f"History file not found: {self.history_path}. Run 'init' first."
            )

        records = self.load_history()

        for i, existing in enumerate(records):
            if existing.date == record.date:
                records[i] = _merge_workouts(existing, record)
                break
        else:
            records.append(record)
            records.sort(key=lambda r: r.date)

        self._write_records(records)

    def _write_records(self, records: list[WorkoutRecord]) -> None:
        """
        Write all workouts to the history file.

        Args:
            records: Workouts to write
        """
        with open(self.history_path, "w", encoding="utf-8") as f:
            for record in records:
                f.write(record_to_json_line(record) + "\n")

    def load_goals(self) -> list[Goal]:
        """
        Load goals from goals.json.

        Returns:
            List of goals (empty if the file doesn't exist)

        Raises:
            ValidationError: If the file is not valid JSON or a goal is invalid
        """
        if not self.goals_path.exists():
            return []

        try:
            with open(self.goals_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid goals file {self.goals_path}: {e}") from e

        if not isinstance(data, list):
            raise ValidationError(f"Invalid goals file {self.goals_path}: expected a list")

        return [dict_to_goal(item) for item in data]

    def save_goals(self, goals: list[Goal]) -> None:
        """
        Save goals to goals.json, replacing its contents.

        Args:
            goals: Goals to save
        """
        self.goals_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.goals_path, "w", encoding="utf-8") as f:
            json.dump([goal_to_dict(g) for g in goals], f, indent=2)


def _merge_workouts(existing: WorkoutRecord, new: WorkoutRecord) -> WorkoutRecord:
    by_id: dict[str, ExerciseEntry] = {e.exercise_id: e for e in existing.exercises}
    for entry in new.exercises:
        by_id[entry.exercise_id] = entry
    return WorkoutRecord(
        date=existing.date,
        exercises=list(by_id.values()),
        duration_minutes=new.duration_minutes or existing.duration_minutes,
        template_name=new.template_name or existing.template_name,
    )


def get_default_history_path() -> Path:
    """
    Get the default history file path.

    Returns:
        ~/.lift-forecast/workouts.jsonl
    """
    return Path.home() / ".lift-forecast" / "workouts.jsonl"
