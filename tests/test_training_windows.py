"""Tests for training window prediction."""

from datetime import timedelta

import pytest

from workout_insights.analysis.training_windows import (
    DAY_NAMES,
    TrainingWindowAnalyzer,
    optimal_duration,
    timing_advice,
    timing_preferences,
)


class TestTimingHelpers:
    """Test duration, advice and preference tables."""

    @pytest.mark.parametrize("score, minutes", [(90, 90), (80, 75), (70, 60), (50, 45)])
    def test_optimal_duration(self, score, minutes):
        assert optimal_duration(score) == minutes

    def test_timing_advice(self):
        assert timing_advice(90, 3, 2) == "prioritize_sleep"
        assert timing_advice(90, 0, 8) == "light_activity_only"
        assert timing_advice(40, 0, 2) == "active_recovery"
        assert timing_advice(90, 0, 2) == "high_intensity_ok"
        assert timing_advice(70, 0, 2) == "moderate_intensity"

    def test_timing_preferences_cover_the_day(self):
        for chronotype in ("morning", "evening", "neutral"):
            preferences = timing_preferences(chronotype)
            assert sorted(preferences) == list(range(24))

        assert timing_preferences("morning")[7] == 85
        assert timing_preferences("evening")[18] == 85
        assert timing_preferences("neutral")[3] == 40


class TestTrainingWindowAnalyzer:
    """Test chronotype inference and window selection."""

    def setup_method(self):
        self.analyzer = TrainingWindowAnalyzer()

    def test_default_without_metrics(self):
        report = self.analyzer.analyze([])

        assert report.primary.time_of_day == 18
        assert report.primary.day_of_week == 1
        assert report.primary.optimality_score == 70
        assert report.primary.confidence == 0.5
        assert report.primary.duration == 60
        assert report.primary.reasoning == ["Default evening window for general population"]

    def test_chronotype_needs_a_week(self, metric_factory, as_of):
        metrics = [metric_factory(as_of.date() - timedelta(days=i)) for i in range(6)]
        assert self.analyzer.infer_chronotype(metrics) == "neutral"

    def test_morning_chronotype_from_recovery(self, steady_metrics):
        # energy 8, soreness 1
        assert self.analyzer.infer_chronotype(steady_metrics) == "morning"

    def test_evening_chronotype_from_workout_hours(self, metric_factory, workout_factory, as_of):
        metrics = [metric_factory(as_of.date() - timedelta(days=i), energy=6, soreness=4) for i in range(14)]
        workouts = [workout_factory((as_of - timedelta(days=i)).replace(hour=19)) for i in range(10)]

        assert self.analyzer.infer_chronotype(metrics, workouts) == "evening"
        assert self.analyzer.infer_chronotype(metrics, []) == "neutral"

    def test_morning_report(self, steady_metrics):
        report = self.analyzer.analyze(steady_metrics)

        assert report.personalized_factors.chronotype == "morning"
        assert 6 <= report.primary.time_of_day <= 10
        assert report.primary.day_of_week == 1
        assert len(report.hourly_scores) == 24
        assert report.personalized_factors.recovery_pattern == "fast"
        assert report.timing_advice == "high_intensity_ok"

    def test_evening_report(self, metric_factory, workout_factory, as_of):
        metrics = [metric_factory(as_of.date() - timedelta(days=i), energy=6, soreness=4) for i in range(14)]
        workouts = [workout_factory((as_of - timedelta(days=i)).replace(hour=19)) for i in range(10)]
        report = self.analyzer.analyze(metrics, workouts)

        assert report.personalized_factors.chronotype == "evening"
        assert report.primary.time_of_day == 18
        assert report.personalized_factors.peak_performance_time == 18

    def test_avoid_windows_apply_to_any_day(self, steady_metrics):
        report = self.analyzer.analyze(steady_metrics)

        assert report.avoid
        for window in report.avoid:
            assert window.day_of_week is None
            assert window.optimality_score == 20

    def test_secondary_window_is_separated(self, steady_metrics):
        report = self.analyzer.analyze(steady_metrics)

        if report.secondary is not None:
            assert abs(report.secondary.time_of_day - report.primary.time_of_day) >= 4

    def test_weekly_pattern(self, steady_metrics):
        pattern = self.analyzer.analyze(steady_metrics).weekly_pattern

        assert list(pattern) == list(DAY_NAMES)
        for day, name in enumerate(DAY_NAMES):
            for window in pattern[name]:
                assert window.day_of_week == day
                assert window.optimality_score >= 70

    def test_recovery_pattern(self, metric_factory, as_of):
        slow = [metric_factory(as_of.date() - timedelta(days=i), sleep=5.5, soreness=7) for i in range(7)]
        moderate = [metric_factory(as_of.date() - timedelta(days=i), sleep=7, soreness=4) for i in range(7)]

        assert self.analyzer.recovery_pattern(slow) == "slow"
        assert self.analyzer.recovery_pattern(moderate) == "moderate"
        assert self.analyzer.recovery_pattern(slow[:3]) == "moderate"
