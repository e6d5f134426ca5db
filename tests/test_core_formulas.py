"""
Formula-focused unit tests for the core forecasting engine.

Each test verifies one formula or rule:
- Brzycki 1RM estimate and best-set selection
- observation extraction (same-day max, future / lookback filtering)
- least-squares fits and R²
- confidence factors and bounds
- projection solver, rep-range extrapolation, milestones, recommendations

Values are hand-computed from the formulas so the tests act as a reference.
"""

import math
from datetime import date

import pytest

from lift_forecast.core.config import (
    DEFAULT_SETTINGS,
    PERF_CONFIDENCE_MAX,
    PERF_CONFIDENCE_MIN,
    PERF_CONFIDENCE_PERFECT,
    ForecastSettings,
)
from lift_forecast.core.confidence import (
    data_volume_factor,
    goal_confidence,
    horizon_factor,
    performance_confidence,
    residual_factor,
)
from lift_forecast.core.dates import add_days, add_months, days_between
from lift_forecast.core.engine.config_loader import load_settings, settings_from_dict
from lift_forecast.core.fitting import (
    LinearModel,
    LogarithmicModel,
    fit_linear,
    fit_logarithmic,
    limiting_returns_model,
    r_squared,
)
from lift_forecast.core.max_estimator import best_set, brzycki_1rm, round_half_up
from lift_forecast.core.metrics import (
    extract_goal_series,
    extract_observations,
    one_rep_max_change,
    workout_frequency,
)
from lift_forecast.core.milestones import normalize_milestones, update_achievements
from lift_forecast.core.models import (
    ExerciseEntry,
    Goal,
    Milestone,
    SetEntry,
    WorkoutRecord,
)
from lift_forecast.core.projection import (
    limiting_returns_band,
    project_goal_date,
    solve_days_to_target,
)
from lift_forecast.core.recommendations import (
    NOT_ENOUGH_DATA,
    goal_recommendations,
    monthly_growth_percent,
    performance_insights,
)
from lift_forecast.core.rep_ranges import rep_range_predictions

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

BENCH = "bench_press"


def _entry(*sets: tuple[float, int], exercise_id: str = BENCH) -> ExerciseEntry:
    return ExerciseEntry(
        exercise_id=exercise_id,
        exercise_name="Bench Press",
        sets=[SetEntry(weight=w, reps=r) for w, r in sets],
    )


def _workout(date_str: str, *sets: tuple[float, int], exercise_id: str = BENCH) -> WorkoutRecord:
    return WorkoutRecord(date=date_str, exercises=[_entry(*sets, exercise_id=exercise_id)])


def _linear(points: list[tuple[float, float]]) -> LinearModel:
    model = fit_linear(points)
    assert model is not None
    return model


# =============================================================================
# Brzycki 1RM
# =============================================================================


class TestBrzycki:
    """1RM = weight × 36 / (37 − reps)."""

    def test_ten_reps(self):
        """135 × 10 → 135 × 36 / 27 = 180."""
        assert brzycki_1rm(135, 10) == pytest.approx(180.0)

    def test_single_rep_is_weight(self):
        assert brzycki_1rm(200, 1) == pytest.approx(200.0)

    def test_guard_at_36_reps(self):
        """At 36+ reps the formula is unstable; weight is returned unchanged."""
        assert brzycki_1rm(50, 36) == 50
        assert brzycki_1rm(50, 40) == 50

    def test_never_below_weight(self):
        for reps in range(1, 36):
            assert brzycki_1rm(100, reps) >= 100

    def test_monotonic_in_reps(self):
        values = [brzycki_1rm(100, r) for r in range(1, 36)]
        assert values == sorted(values)

    def test_round_half_up(self):
        assert round_half_up(182.5) == 183
        assert round_half_up(208.125) == 208
        assert round_half_up(-0.5) == 0


class TestBestSet:
    """Best set = highest Brzycki estimate among qualifying sets."""

    def test_picks_highest_estimate(self):
        """185×5 → 208.1 beats 200×1 → 200."""
        best = best_set(_entry((200, 1), (185, 5), (135, 10)))
        assert (best.weight, best.reps, best.one_rep_max) == (185, 5, 208)

    def test_no_qualifying_sets(self):
        best = best_set(_entry((0, 10), (100, 0), (50, 40)))
        assert best.one_rep_max == 0

    def test_none_entry(self):
        assert best_set(None).one_rep_max == 0


# =============================================================================
# Observation extraction
# =============================================================================


class TestExtractObservations:
    """x = days since first record with the metric, y = best 1RM."""

    def test_offsets_and_values(self):
        history = [
            _workout("2026-01-31", (200, 1)),
            _workout("2026-01-01", (135, 10)),
        ]
        series = extract_observations(BENCH, history, date(2026, 2, 10))
        assert series.start_date == "2026-01-01"
        assert series.as_pairs() == [(0.0, 180.0), (30.0, 200.0)]
        assert series.last_date == "2026-01-31"

    def test_same_day_keeps_max(self):
        history = [
            _workout("2026-01-01", (135, 10)),
            _workout("2026-01-01", (185, 5)),
        ]
        series = extract_observations(BENCH, history, date(2026, 1, 2))
        assert series.values == [208.0]

    def test_future_records_ignored(self):
        history = [
            _workout("2026-01-01", (135, 10)),
            _workout("2026-03-01", (300, 1)),
        ]
        series = extract_observations(BENCH, history, date(2026, 2, 1))
        assert series.values == [180.0]

    def test_lookback_window_is_exclusive(self):
        """Lookback keeps records strictly after today − N months."""
        history = [
            _workout("2026-05-15", (100, 1)),
            _workout("2026-05-16", (110, 1)),
        ]
        series = extract_observations(BENCH, history, date(2026, 6, 15), lookback_months=1)
        assert series.values == [110.0]
        assert series.start_date == "2026-05-16"

    def test_offsets_count_from_first_record_with_metric(self):
        """A first record with no valid set still anchors day 0."""
        history = [
            _workout("2026-01-01", (50, 40)),
            _workout("2026-01-11", (185, 5)),
        ]
        series = extract_observations(BENCH, history, date(2026, 2, 1))
        assert series.as_pairs() == [(10.0, 208.0)]

    def test_other_exercises_ignored(self):
        history = [_workout("2026-01-01", (300, 1), exercise_id="squat")]
        series = extract_observations(BENCH, history, date(2026, 2, 1))
        assert len(series) == 0
        assert series.start_date == "2026-02-01"

    def test_history_not_mutated(self):
        history = [_workout("2026-01-05", (135, 10)), _workout("2026-01-01", (100, 5))]
        before = [r.date for r in history]
        extract_observations(BENCH, history, date(2026, 2, 1))
        assert [r.date for r in history] == before


class TestGoalSeries:
    """Goal series: top weight per record, start value at day 0."""

    def test_start_value_at_day_zero(self):
        history = [
            _workout("2025-12-20", (300, 1)),
            _workout("2026-01-11", (195, 3), (185, 5)),
        ]
        series = extract_goal_series(BENCH, "2026-01-01", 185, history, date(2026, 2, 1))
        assert series.as_pairs() == [(0.0, 185.0), (10.0, 195.0)]

    def test_higher_day_zero_observation_kept(self):
        history = [_workout("2026-01-01", (190, 1))]
        series = extract_goal_series(BENCH, "2026-01-01", 185, history, date(2026, 2, 1))
        assert series.values == [190.0]

    def test_no_exercise_id(self):
        series = extract_goal_series(None, "2026-01-01", 70, [], date(2026, 2, 1))
        assert len(series) == 0


class TestFrequencyAndChange:
    """Workouts per week and 1RM change vs. a month ago."""

    def test_frequency(self):
        """8 workouts over 28 days → 4 weeks → 2.0/week."""
        dates = [add_days("2026-01-01", d) for d in (0, 4, 8, 12, 16, 20, 24, 28)]
        records = [_workout(d, (100, 5)) for d in dates]
        assert workout_frequency(records) == 2.0

    def test_frequency_single_record(self):
        assert workout_frequency([_workout("2026-01-01", (100, 5))]) == 0.0

    def test_change_vs_month_ago(self):
        """A workout exactly one month before the latest is the comparison."""
        history = [
            _workout("2026-01-01", (135, 10)),  # 180
            _workout("2026-01-20", (190, 1)),
            _workout("2026-02-01", (200, 1)),
        ]
        assert one_rep_max_change(BENCH, history, date(2026, 2, 5)) == 20

    def test_change_needs_a_week_gap(self):
        history = [
            _workout("2026-01-27", (135, 10)),
            _workout("2026-02-01", (200, 1)),
        ]
        assert one_rep_max_change(BENCH, history, date(2026, 2, 5)) is None

    def test_change_single_record(self):
        history = [_workout("2026-02-01", (200, 1))]
        assert one_rep_max_change(BENCH, history, date(2026, 2, 5)) is None


# =============================================================================
# Curve fitting
# =============================================================================


class TestFitting:
    """Least squares fits and R²."""

    def test_linear_two_points(self):
        """(0,180), (30,200) → slope 20/30, intercept 180, R² 1."""
        model = _linear([(0, 180), (30, 200)])
        assert model.slope == pytest.approx(2 / 3)
        assert model.intercept == pytest.approx(180)
        assert model.r_squared == pytest.approx(1.0)
        assert model.is_progressing

    def test_linear_needs_two_distinct_x(self):
        assert fit_linear([(0, 180)]) is None
        assert fit_linear([(5, 180), (5, 190)]) is None

    def test_linear_negative_slope_is_valid(self):
        model = _linear([(0, 200), (10, 190)])
        assert not model.is_progressing

    def test_logarithmic_drops_day_zero(self):
        """Only x > 0 points are usable."""
        assert fit_logarithmic([(0, 185), (10, 195)]) is None

    def test_logarithmic_exact(self):
        """y = 100 + 10·ln x is recovered exactly."""
        points = [(x, 100 + 10 * math.log(x)) for x in (1, 5, 20, 60)]
        model = fit_logarithmic(points)
        assert model is not None
        assert model.a == pytest.approx(100)
        assert model.b == pytest.approx(10)
        assert model.r_squared == pytest.approx(1.0)

    def test_r_squared_constant_series(self):
        points = [(0, 5.0), (1, 5.0)]
        assert r_squared(points, [5.0, 5.0]) == 1.0
        assert r_squared(points, [4.0, 6.0]) == 0.0

    def test_limiting_returns_curve(self):
        """L = 0.25 × 200, at x0 = 90 the curve is half way."""
        model = limiting_returns_model(200)
        assert model.predict(90) == pytest.approx(225)
        assert model.predict(180) == pytest.approx(50 / (1 + math.exp(-2.7)) + 200)


# =============================================================================
# Confidence
# =============================================================================


class TestConfidence:
    """Goal and performance confidence."""

    def test_goal_confidence_none_without_fit(self):
        assert goal_confidence(None) is None

    def test_goal_confidence_non_progressing(self):
        model = LogarithmicModel(a=200, b=-5, r_squared=0.9, points=((1, 200), (10, 190)))
        assert goal_confidence(model) == 0.1

    def test_goal_confidence_clipped(self):
        model = LogarithmicModel(a=200, b=5, r_squared=0.02, points=((1, 200), (10, 210)))
        assert goal_confidence(model) == 0.1
        model = LogarithmicModel(a=200, b=5, r_squared=0.7, points=((1, 200), (10, 210)))
        assert goal_confidence(model) == pytest.approx(0.7)

    @pytest.mark.parametrize("n,expected", [(2, 0.3), (4, 0.5), (9, 0.8), (10, 1.0)])
    def test_data_volume_factor(self, n, expected):
        assert data_volume_factor(n) == expected

    @pytest.mark.parametrize("last_x,expected", [(30, 0.5), (100, 0.7), (150, 1.0)])
    def test_horizon_factor(self, last_x, expected):
        assert horizon_factor(last_x, 180) == expected

    def test_residual_factor_clean_data(self):
        assert residual_factor(_linear([(0, 180), (30, 200)])) == 1.0

    def test_two_point_scenario(self):
        """R² 1 × data 0.3 × residual 1.0 × horizon 0.5 = 0.15."""
        model = _linear([(0, 180), (30, 200)])
        assert performance_confidence(model) == pytest.approx(0.15)

    def test_non_progressing_is_floor(self):
        model = _linear([(0, 200), (30, 180)])
        assert performance_confidence(model) == PERF_CONFIDENCE_MIN

    def test_no_fit(self):
        assert performance_confidence(None) is None

    def test_perfect_fit_special_case(self):
        """Ten exact points on y = 100 + 2x → 0.99."""
        points = [(float(x), 100.0 + 2 * x) for x in range(0, 70, 7)]
        assert performance_confidence(_linear(points)) == PERF_CONFIDENCE_PERFECT

    def test_bounds(self):
        points = [(0, 100), (7, 140), (14, 90), (21, 150), (28, 95)]
        conf = performance_confidence(_linear(points))
        assert PERF_CONFIDENCE_MIN <= conf <= PERF_CONFIDENCE_MAX


# =============================================================================
# Projection
# =============================================================================


class TestProjection:
    """x = e^((target − a) / b)."""

    def test_solve(self):
        model = LogarithmicModel(a=100, b=10, r_squared=1, points=())
        assert solve_days_to_target(model, 120) == pytest.approx(math.exp(2))

    def test_goal_date_rounds_up(self):
        """e² ≈ 7.39 days → start + 8."""
        model = LogarithmicModel(a=100, b=10, r_squared=1, points=())
        assert project_goal_date(model, 120, "2026-01-01") == "2026-01-09"

    def test_not_progressing(self):
        model = LogarithmicModel(a=100, b=0, r_squared=1, points=())
        assert solve_days_to_target(model, 120) is None

    def test_target_not_above_intercept(self):
        model = LogarithmicModel(a=100, b=10, r_squared=1, points=())
        assert solve_days_to_target(model, 100) is None

    def test_overflow(self):
        model = LogarithmicModel(a=0, b=1e-3, r_squared=1, points=())
        assert solve_days_to_target(model, 1e6) is None

    def test_goal_date_past_calendar_range(self):
        """e^700 is a finite float but no calendar date."""
        model = LogarithmicModel(a=0, b=1, r_squared=1, points=())
        assert solve_days_to_target(model, 700) is not None
        assert project_goal_date(model, 700, "2026-01-01") is None

    def test_band_width_shrinks_with_confidence(self):
        """Half-width = 0.2 × 200 × (1 − 0.5) = 20."""
        band = limiting_returns_band(200, 14, 0.5)
        assert [p.day for p in band] == [0, 7, 14]
        for p in band:
            assert p.upper - p.lower == pytest.approx(40)
        tight = limiting_returns_band(200, 14, 1.0)
        assert all(p.upper == pytest.approx(p.lower) for p in tight)


# =============================================================================
# Rep ranges
# =============================================================================


class TestRepRanges:
    """%1RM factors and achievement time scales."""

    def test_five_rep_max(self):
        """200 → 220: 5RM 178 → 196."""
        rows = rep_range_predictions(200, 220, None, date(2026, 1, 1))
        five = next(r for r in rows if r.label == "5RM")
        assert (five.current_max, five.predicted_max) == (178, 196)
        assert five.estimated_achievement_date is None

    def test_labels_in_order(self):
        rows = rep_range_predictions(200, 220, None, date(2026, 1, 1))
        assert [r.label for r in rows] == ["1RM", "3RM", "5RM", "10RM"]

    def test_achievement_dates_scale(self):
        """100 days out: 1RM +100, 3RM +85, 5RM +70, 10RM +55."""
        today = date(2026, 1, 1)
        rows = rep_range_predictions(200, 220, add_days("2026-01-01", 100), today)
        offsets = [days_between(today, r.estimated_achievement_date) for r in rows]
        assert offsets == [100, 85, 70, 55]

    def test_progress_clamped(self):
        rows = rep_range_predictions(180, 180, None, date(2026, 1, 1))
        assert all(0 <= r.progress_percentage <= 100 for r in rows)


# =============================================================================
# Milestones
# =============================================================================


class TestMilestones:
    """Start, target and 25/50/75 % waypoints."""

    def _goal(self, **kwargs) -> Goal:
        defaults = dict(
            start_value=100,
            target_value=200,
            start_date="2026-01-01",
            exercise_id=BENCH,
            exercise_name="Bench Press",
        )
        defaults.update(kwargs)
        return Goal(**defaults)

    def test_waypoints_interpolated(self):
        """100-day timeline → waypoints at +25, +50, +75 days."""
        goal = self._goal(user_target_date="2026-04-11")
        ms = normalize_milestones(goal, None)
        assert [m.value for m in ms] == [100, 125, 150, 175, 200]
        assert [m.target_date for m in ms] == [
            "2026-01-01",
            "2026-01-26",
            "2026-02-20",
            "2026-03-17",
            "2026-04-11",
        ]
        assert ms[0].achieved_date == "2026-01-01"

    def test_target_date_fallback(self):
        """No user or projected date → start + 6 months."""
        ms = normalize_milestones(self._goal(), None)
        assert ms[-1].target_date == "2026-07-01"

    def test_target_date_uses_projection(self):
        ms = normalize_milestones(self._goal(), "2026-05-01")
        assert ms[-1].target_date == "2026-05-01"

    def test_existing_milestones_kept(self):
        goal = self._goal(
            milestones=[
                Milestone(value=150, target_date="2026-02-01", achieved_date="2026-01-20"),
                Milestone(value=100, target_date="2026-01-01"),
            ]
        )
        ms = normalize_milestones(goal, None)
        assert [m.value for m in ms] == [100, 125, 150, 175, 200]
        assert ms[0].achieved_date == "2026-01-01"
        assert ms[2].achieved_date == "2026-01-20"
        # Caller's list untouched
        assert goal.milestones[1].achieved_date is None

    def test_duplicate_milestones_collapse(self):
        """One start and one target milestone; the earliest achievement wins."""
        goal = self._goal(
            milestones=[
                Milestone(value=100, target_date="2026-01-01", achieved_date="2026-01-10"),
                Milestone(value=200, target_date="2026-05-01"),
                Milestone(value=100, target_date="2026-01-01", achieved_date="2026-01-05"),
                Milestone(value=200, target_date="2026-06-01"),
            ]
        )
        ms = normalize_milestones(goal, None)
        values = [m.value for m in ms]
        assert values == [100, 125, 150, 175, 200]
        assert values.count(goal.start_value) == 1
        assert values.count(goal.target_value) == 1
        assert ms[0].achieved_date == "2026-01-05"
        assert ms[-1].target_date == "2026-05-01"

    def test_achievements_from_series(self):
        history = [
            _workout("2026-01-11", (130, 3)),
            _workout("2026-01-21", (160, 1)),
        ]
        goal = self._goal()
        series = extract_goal_series(BENCH, goal.start_date, goal.start_value, history, date(2026, 2, 1))
        ms = update_achievements(normalize_milestones(goal, None), series)
        achieved = {m.value: m.achieved_date for m in ms}
        assert achieved[125] == "2026-01-11"
        assert achieved[150] == "2026-01-21"
        assert achieved[175] is None
        assert achieved[200] is None


# =============================================================================
# Recommendations
# =============================================================================


class TestRecommendations:
    """Rule-based insight text and ordering."""

    def test_monthly_growth_scenario(self):
        """slope 0.667/day × 30 / 180 × 100 ≈ 11.1 %."""
        model = _linear([(0, 180), (30, 200)])
        assert monthly_growth_percent(model) == pytest.approx(11.11, abs=0.01)

    def test_performance_insight_order(self):
        model = _linear([(0, 180), (30, 200)])
        insights = performance_insights(
            "Bench Press", 200, 247, model, 0.15, elapsed_days=36, frequency=0.5
        )
        assert insights == [
            "Stay consistent with your Bench Press training to keep improving.",
            "Your Bench Press strength is increasing at an average rate of 11.1% per month.",
            "Your Bench Press results are inconsistent. Sticking to a regular schedule will sharpen this prediction.",
            "You're on track to add 47 lbs to your Bench Press one-rep max in the coming months.",
        ]

    def test_max_insights_setting(self):
        model = _linear([(0, 180), (30, 200)])
        settings = ForecastSettings(max_insights=2)
        insights = performance_insights(
            "Bench Press", 200, 247, model, 0.15, 36, 0.5, settings
        )
        assert len(insights) == 2

    def test_stalled_performance(self):
        model = _linear([(0, 200), (30, 190)])
        insights = performance_insights("Squat", 190, 190, model, 0.05, 30, 3.0)
        assert any("has stalled" in s for s in insights)

    def test_volume_tip_for_frequent_training(self):
        """70-80 % of 200 → 140-160."""
        model = _linear([(0, 180), (30, 200)])
        insights = performance_insights(
            "Bench Press", 200, 200, model, 0.9, 36, 3.0, ForecastSettings(max_insights=10)
        )
        assert any("(140-160 lbs)" in s for s in insights)

    def test_goal_without_fit(self):
        goal = Goal(start_value=185, target_value=225, start_date="2026-01-01", exercise_id=BENCH)
        recs = goal_recommendations(goal, None, None, None, "2026-01-03")
        assert recs[0] == "Focus on consistent training for your goal."
        assert NOT_ENOUGH_DATA in recs

    def test_goal_behind_target_date(self):
        goal = Goal(
            start_value=185,
            target_value=225,
            start_date="2026-01-01",
            user_target_date="2026-03-01",
            exercise_id=BENCH,
            exercise_name="Bench Press",
        )
        model = LogarithmicModel(a=180, b=8, r_squared=0.9, points=((10, 198), (30, 207)))
        recs = goal_recommendations(goal, model, "2026-06-01", 0.9, "2026-02-01")
        assert recs[1].startswith("Projection exceeds target date")
        assert recs[2] == "Your progress is quite consistent!"


# =============================================================================
# Dates and settings
# =============================================================================


class TestDatesAndSettings:
    """Calendar arithmetic and YAML settings."""

    def test_add_months_clamps(self):
        assert add_months(date(2024, 8, 31), 6) == date(2025, 2, 28)
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2026, 3, 15), -1) == date(2026, 2, 15)

    def test_settings_from_dict(self):
        settings = settings_from_dict(
            {"projection": {"horizon_days": 90}, "display": {"unit": "kg"}, "other": {"x": 1}}
        )
        assert settings.horizon_days == 90
        assert settings.unit == "kg"
        assert settings.gain_fraction == DEFAULT_SETTINGS.gain_fraction

    def test_settings_from_dict_rejects_bad_value(self):
        with pytest.raises(ValueError):
            settings_from_dict({"projection": {"horizon_days": "soon"}})

    def test_settings_validation(self):
        with pytest.raises(ValueError):
            ForecastSettings(horizon_days=0)

    def test_load_user_override(self, tmp_path):
        path = tmp_path / "forecast.yaml"
        path.write_text("recommendations:\n  max_insights: 6\n")
        assert load_settings(path).max_insights == 6

    def test_invalid_override_falls_back(self, tmp_path):
        path = tmp_path / "forecast.yaml"
        path.write_text("recommendations:\n  max_insights: 0\n")
        assert load_settings(path) == DEFAULT_SETTINGS

    def test_unparseable_override_ignored(self, tmp_path):
        path = tmp_path / "forecast.yaml"
        path.write_text("projection: [unclosed\n")
        assert load_settings(path).horizon_days == DEFAULT_SETTINGS.horizon_days
