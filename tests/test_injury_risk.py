"""Tests for injury risk assessment."""

import random
from datetime import datetime, timedelta, timezone

import pytest

from workout_insights.analysis.features import feature_map
from workout_insights.analysis.injury_risk import InjuryRiskAnalyzer, daily_volume
from workout_insights.models import RiskLevel


class TestDailyVolume:
    """Test the calendar-day volume series."""

    def test_gaps_are_zero_filled(self, workout_factory):
        start = datetime(2024, 3, 1, 7, 0, tzinfo=timezone.utc)
        workouts = [workout_factory(start), workout_factory(start + timedelta(days=3))]
        series = daily_volume(workouts)

        assert len(series) == 4
        assert list(series) == [3000, 0, 0, 3000]

    def test_same_day_sessions_are_summed(self, workout_factory):
        start = datetime(2024, 3, 1, 7, 0, tzinfo=timezone.utc)
        workouts = [workout_factory(start), workout_factory(start + timedelta(hours=10), exercise_id="squat")]

        assert list(daily_volume(workouts)) == [6000]

    def test_empty(self):
        assert daily_volume([]).empty


class TestInjuryRiskAnalyzer:
    """Test the combined injury risk model."""

    def setup_method(self):
        self.analyzer = InjuryRiskAnalyzer()

    def test_default_without_data(self, steady_workouts, steady_metrics):
        for workouts, metrics in (([], steady_metrics), (steady_workouts, []), ([], [])):
            assessment = self.analyzer.assess(workouts, metrics)
            assert assessment.overall_risk == 25
            assert assessment.risk_level is RiskLevel.LOW
            assert assessment.confidence == 0.5

    def test_steady_training_is_low_risk(self, steady_workouts, steady_metrics):
        assessment = self.analyzer.assess(steady_workouts, steady_metrics)

        assert assessment.factors.training_load.acute_chronic_ratio == pytest.approx(1.0)
        assert assessment.factors.training_load.load_spike == pytest.approx(0.0)
        # 10 * .40 + 7.5 * .35 + 10 * .25
        assert assessment.overall_risk == 9
        assert assessment.risk_level is RiskLevel.LOW
        assert assessment.warnings == []
        assert [a.title for a in assessment.recommendations] == ["Movement Screen"]

    def test_training_load_features(self, steady_workouts):
        values = feature_map(self.analyzer.extract_training_load_features(steady_workouts))

        assert values["acute_load"] == 7 * 3000
        assert values["chronic_load"] == pytest.approx(7 * 3000)
        assert values["acwr"] == pytest.approx(1.0)
        assert values["intensity_spike"] == 0

    def test_acute_spike(self, workout_factory, steady_metrics, as_of):
        workouts = [
            workout_factory(as_of - timedelta(days=offset),
                            sets=[(100, 10, 7)] * (12 if offset < 7 else 3))
            for offset in range(28)
        ]
        assessment = self.analyzer.assess(workouts, steady_metrics)
        load = assessment.factors.training_load

        # acute 7 * 12000 against chronic (21 * 3000 + 7 * 12000) / 4
        assert load.acute_chronic_ratio == pytest.approx(84000 / 36750)
        assert load.load_spike == pytest.approx(3.0)
        assert load.risk_level is RiskLevel.CRITICAL

        spike = next(w for w in assessment.warnings if w.type == "acute_spike")
        assert spike.severity is RiskLevel.CRITICAL
        assert spike.urgency == "immediate"
        assert assessment.recommendations[0].title == "Reduce Training Load"

    def test_short_history_uses_full_chronic_window(self, workout_factory, steady_metrics, as_of):
        workouts = [workout_factory(as_of - timedelta(days=offset)) for offset in range(7)]
        load = self.analyzer.assess(workouts, steady_metrics).factors.training_load

        # A single week of history: chronic load is a quarter of the 28-day sum
        assert load.acute_chronic_ratio == pytest.approx(4.0)

    @pytest.mark.parametrize("sleep, severity", [(5, RiskLevel.HIGH), (4, RiskLevel.CRITICAL)])
    def test_sleep_deficit_warning(self, steady_workouts, metric_factory, as_of, sleep, severity):
        metrics = [metric_factory(as_of.date(), sleep=sleep)]
        assessment = self.analyzer.assess(steady_workouts, metrics)

        warning = next(w for w in assessment.warnings if w.type == "poor_recovery")
        assert warning.severity is severity
        assert "Prioritize Recovery" in [a.title for a in assessment.recommendations]

    def test_high_soreness_warning(self, steady_workouts, metric_factory, as_of):
        metrics = [metric_factory(as_of.date(), soreness=8)]
        assessment = self.analyzer.assess(steady_workouts, metrics)

        assert "chronic_fatigue" in [w.type for w in assessment.warnings]

    def test_form_breakdown(self, workout_factory, steady_metrics, as_of):
        workouts = [
            workout_factory(as_of - timedelta(days=offset), sets=[(100, 10, 6), (100, 6, 10)])
            for offset in range(5)
        ]
        values = feature_map(self.analyzer.extract_movement_features(workouts))

        assert values["form_breakdown_frequency"] == 1.0
        assert values["rpe_inconsistency"] > 1.5

        assessment = self.analyzer.assess(workouts, steady_metrics)
        assert "movement_quality" in [w.type for w in assessment.warnings]

    def test_weight_progression_rate(self, workout_factory, as_of):
        workouts = [
            workout_factory(as_of - timedelta(days=offset), sets=[(110 if offset < 7 else 100, 5, 8)])
            for offset in range(14)
        ]
        values = feature_map(self.analyzer.extract_movement_features(workouts))

        assert values["weight_progression_rate"] == pytest.approx(0.1)

    def test_risk_is_bounded(self, workout_factory, metric_factory, as_of):
        workouts = [
            workout_factory(as_of - timedelta(days=offset), sets=[(200, 10, 10), (200, 2, 5)] * (4 if offset < 7 else 1))
            for offset in range(28)
        ]
        metrics = [metric_factory(as_of.date(), sleep=3, energy=1, soreness=10, stress=10)]
        assessment = self.analyzer.assess(workouts, metrics)

        assert 0 <= assessment.overall_risk <= 100
        assert assessment.risk_level is RiskLevel.from_score(assessment.overall_risk)
        assert len(assessment.recommendations) <= 3

    def test_input_order_does_not_matter(self, steady_workouts, steady_metrics):
        workouts = list(steady_workouts)
        metrics = list(steady_metrics)
        random.Random(3).shuffle(workouts)
        random.Random(5).shuffle(metrics)

        assert self.analyzer.assess(workouts, metrics) == self.analyzer.assess(steady_workouts, steady_metrics)
