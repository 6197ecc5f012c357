"""Tests for the readiness analyzer."""

from datetime import date, timedelta

import pytest

from workout_insights.analysis.readiness import (
    ReadinessAnalyzer,
    ReadinessLevel,
    readiness_level,
)


class TestReadinessAnalyzer:
    """Test composite readiness scoring."""

    def setup_method(self):
        self.analyzer = ReadinessAnalyzer()
        self.today = date(2024, 3, 29)

    def test_default_without_metrics(self):
        analysis = self.analyzer.analyze([])

        assert analysis.overall_score == 70
        assert analysis.level is ReadinessLevel.GOOD
        assert analysis.confidence == pytest.approx(0.1)
        assert analysis.recommendations[0] == "Start tracking daily metrics for personalized insights"

    def test_excellent_readiness(self, metric_factory):
        metric = metric_factory(self.today, sleep=9, energy=9, soreness=1, stress=1)
        analysis = self.analyzer.analyze([metric], as_of=self.today)

        assert analysis.overall_score == 90
        assert analysis.level is ReadinessLevel.EXCELLENT
        assert "Excellent readiness - consider progressive overload" in analysis.recommendations

    def test_poor_readiness(self, metric_factory):
        metric = metric_factory(self.today, sleep=4, energy=3, soreness=8, stress=8)
        analysis = self.analyzer.analyze([metric], as_of=self.today)

        # (40 * .35 + 30 * .25 + 20 * .20 + 20 * .15) / .95
        assert analysis.overall_score == 30
        assert analysis.level is ReadinessLevel.POOR
        assert analysis.recommendations[0] == "Consider a rest day or light recovery session"
        assert len(analysis.recommendations) <= 4

    def test_declining_sleep_trend(self, metric_factory):
        sleep = [9, 8.5, 8, 7.5, 7, 6.5, 6]
        metrics = [
            metric_factory(self.today - timedelta(days=6 - i), sleep=hours)
            for i, hours in enumerate(sleep)
        ]
        analysis = self.analyzer.analyze(metrics, as_of=self.today)

        assert analysis.factors["sleep"].trend == "declining"
        assert analysis.factors["energy"].trend == "stable"

    def test_rising_soreness_is_declining(self, metric_factory):
        soreness = [4, 4.5, 5, 5.5, 6, 6.5, 7]
        metrics = [
            metric_factory(self.today - timedelta(days=6 - i), soreness=value)
            for i, value in enumerate(soreness)
        ]
        analysis = self.analyzer.analyze(metrics, as_of=self.today)

        assert analysis.factors["soreness"].trend == "declining"

    def test_explicit_baseline(self, metric_factory):
        metric = metric_factory(self.today, sleep=9, energy=9, soreness=1, stress=1)
        analysis = self.analyzer.analyze([metric], baseline=65, as_of=self.today)

        assert analysis.baseline == 65
        assert analysis.deviation == 25

    def test_short_history_uses_default_baseline(self, metric_factory):
        metrics = [metric_factory(self.today - timedelta(days=i)) for i in range(3)]
        assert self.analyzer.analyze(metrics, as_of=self.today).baseline == 60

    def test_baseline_from_older_history(self, metric_factory):
        metrics = [
            metric_factory(self.today - timedelta(days=i), sleep=6, energy=6, soreness=4, stress=4)
            for i in range(15, 30)
        ]
        metrics.append(metric_factory(self.today, sleep=9, energy=9, soreness=1, stress=1))
        analysis = self.analyzer.analyze(metrics, as_of=self.today)

        assert analysis.baseline == 60
        assert analysis.deviation == 30
        assert "Above baseline - great time for challenging workouts" in analysis.recommendations

    def test_stale_data_lowers_confidence(self, metric_factory):
        metrics = [metric_factory(self.today - timedelta(days=i)) for i in range(7)]

        fresh = self.analyzer.analyze(metrics, as_of=self.today)
        stale = self.analyzer.analyze(metrics, as_of=self.today + timedelta(days=10))

        assert 0 <= stale.confidence < fresh.confidence <= 1


class TestReadinessLevel:
    """Test readiness level bands."""

    @pytest.mark.parametrize("score, level", [
        (95, ReadinessLevel.EXCELLENT),
        (85, ReadinessLevel.EXCELLENT),
        (70, ReadinessLevel.GOOD),
        (50, ReadinessLevel.FAIR),
        (49, ReadinessLevel.POOR),
    ])
    def test_bands(self, score, level):
        assert readiness_level(score) is level
