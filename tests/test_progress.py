"""Tests for the progress analyzer."""

from datetime import timedelta

import pytest

from workout_insights.analysis.progress import ProgressAnalyzer
from workout_insights.models import ExerciseRecord, SetRecord, WorkoutSession


class TestProgressAnalyzer:
    """Test strength, volume and weight projections."""

    def setup_method(self):
        self.analyzer = ProgressAnalyzer()

    def test_default_without_workouts(self, steady_metrics):
        report = self.analyzer.analyze([], steady_metrics)

        assert report.strength is None
        assert report.confidence == pytest.approx(0.3)
        assert report.readiness_score == 70

    def test_default_without_metrics(self, steady_workouts):
        assert self.analyzer.analyze(steady_workouts, []) == ProgressAnalyzer.default_report()

    def test_strength_and_volume_projection(self, steady_workouts, steady_metrics):
        report = self.analyzer.analyze(steady_workouts, steady_metrics)
        one_rep_max = 100 * (1 + 10 / 30)

        assert report.strength is not None
        assert report.strength.value > one_rep_max
        assert report.volume is not None
        assert report.weight_loss is None
        assert 0 < report.confidence <= 1
        assert len(report.recommendations) <= 3

    def test_strength_projection_grows_with_time(self, steady_workouts, steady_metrics):
        projection = self.analyzer.analyze(steady_workouts, steady_metrics).strength_projection

        assert sorted(projection) == [1, 4, 12]
        assert projection[1] < projection[4] < projection[12]

    def test_volume_forecast_for_steady_training(self, steady_workouts, steady_metrics):
        forecast = self.analyzer.analyze(steady_workouts, steady_metrics).volume_forecast

        assert len(forecast) == 7
        assert forecast == pytest.approx([3000.0] * 7)

    def test_readiness_score_from_latest_metric(self, steady_workouts, steady_metrics):
        report = self.analyzer.analyze(steady_workouts, steady_metrics)

        # sleep 8, energy 8, soreness 1, stress 1
        assert report.readiness_score == pytest.approx((8 * .35 + 8 * .25 + 9 * .20 + 9 * .15) / .95 * 10)

    def test_weight_loss_with_body_weight(self, steady_workouts, metric_factory, as_of):
        metrics = [
            metric_factory(as_of.date() - timedelta(days=i), body_weight=80 + i * 0.1)
            for i in range(21)
        ]
        report = self.analyzer.analyze(steady_workouts, metrics, target_weight=78)

        assert report.weight_loss is not None
        assert 78 <= report.weight_loss.value <= 80

    def test_unknown_exercise_has_no_projection(self, steady_workouts, steady_metrics):
        report = self.analyzer.analyze(steady_workouts, steady_metrics, exercise_id="deadlift")
        assert report.strength_projection == {}

    def test_corrupted_sets(self, steady_metrics, as_of):
        workouts = [
            WorkoutSession(
                id=f"corrupt-{i}",
                started_at=as_of - timedelta(days=i),
                exercises=[ExerciseRecord(id="bench_press", name="Bench Press", sets=[
                    SetRecord(weight=None, reps=None, rpe=None),
                    SetRecord(weight=60, reps=None),
                ])],
            )
            for i in range(5)
        ]
        report = self.analyzer.analyze(workouts, steady_metrics)

        assert report.volume_forecast == pytest.approx([0.0] * 7)
        assert report.strength_projection == {}
