"""Tests for the insight service."""

import asyncio
import random
from dataclasses import replace
from datetime import timedelta

import pytest

from workout_insights.analysis.injury_risk import InjuryRiskAnalyzer
from workout_insights.analysis.plateau import PlateauAnalyzer
from workout_insights.analysis.progress import ProgressAnalyzer
from workout_insights.analysis.training_windows import TrainingWindowAnalyzer
from workout_insights.generator import WorkoutGenerator
from workout_insights.models import (
    ExerciseRecord,
    Prediction,
    Priority,
    SetRecord,
    WorkoutRequest,
    WorkoutSession,
    WorkoutType,
)
from workout_insights.orchestrator import START_TRACKING, InsightService, SystemState


class FailingPlateauAnalyzer(PlateauAnalyzer):
    def analyze(self, *args, **kwargs):
        raise RuntimeError("plateau model unavailable")


class FailingGenerator(WorkoutGenerator):
    def generate(self, *args, **kwargs):
        raise RuntimeError("catalog unavailable")


class FixedInjuryRiskAnalyzer(InjuryRiskAnalyzer):
    def __init__(self, risk):
        super().__init__()
        self.risk = risk

    def assess(self, workouts, metrics):
        return replace(self.default_assessment(), overall_risk=self.risk)


class FixedPlateauAnalyzer(PlateauAnalyzer):
    def __init__(self, risk):
        super().__init__()
        self.risk = risk

    def analyze(self, *args, **kwargs):
        return replace(self.default_analysis(), overall_risk=self.risk)


class TestAnalyzeUser:
    """Test the concurrent user analysis."""

    def setup_method(self):
        self.service = InsightService()

    def test_empty_data(self, as_of):
        report = asyncio.run(self.service.analyze_user("user-1", [], [], as_of=as_of))

        assert report.user_id == "user-1"
        assert report.recommendations.immediate == [START_TRACKING]
        assert report.recommendations.short_term == ["Optimal training time: 18:00-20:00"]
        assert report.recommendations.priority is Priority.LOW
        # progress 0.3, injury 0.5, windows 0.5, plateau 0.5
        assert report.confidence == pytest.approx(0.45)
        assert report.last_analyzed == as_of

    def test_steady_training(self, steady_workouts, steady_metrics, as_of):
        report = asyncio.run(self.service.analyze_user("user-1", steady_workouts, steady_metrics, as_of=as_of))

        assert report.injury_risk.overall_risk == 9
        assert report.recommendations.immediate == []
        assert report.progress.strength is not None
        assert 0 <= report.confidence <= 1

    def test_failing_analyzer_is_isolated(self, steady_workouts, steady_metrics, as_of):
        service = InsightService(plateau_analyzer=FailingPlateauAnalyzer())
        report = service.analyze_user_sync("user-1", steady_workouts, steady_metrics, as_of=as_of)

        assert report.plateaus == PlateauAnalyzer.default_analysis()
        # The other analyses still ran on the real data
        assert report.injury_risk.factors.training_load.acute_load > 0
        assert report.progress.strength is not None

    def test_merge_failure_returns_default_report(self, steady_workouts, steady_metrics, as_of):
        def broken_combine(*args, **kwargs):
            raise ValueError("cannot merge")

        self.service.combine = broken_combine
        report = self.service.analyze_user_sync("user-1", steady_workouts, steady_metrics, as_of=as_of)

        assert report == InsightService.default_report("user-1", as_of)
        assert report.confidence == 0.3
        assert report.recommendations.long_term == ["Focus on progressive overload"]

    @pytest.mark.parametrize("injury, plateau, priority, immediate", [
        (80, 20, Priority.CRITICAL, ["High injury risk detected - reduce training intensity"]),
        (60, 20, Priority.HIGH, ["Moderate injury risk - focus on recovery"]),
        (60, 65, Priority.HIGH, ["Moderate injury risk - focus on recovery"]),
        (20, 65, Priority.MEDIUM, []),
        (20, 20, Priority.LOW, []),
    ])
    def test_priority(self, steady_workouts, steady_metrics, as_of, injury, plateau, priority, immediate):
        service = InsightService(
            injury_risk_analyzer=FixedInjuryRiskAnalyzer(injury),
            plateau_analyzer=FixedPlateauAnalyzer(plateau),
        )
        report = service.analyze_user_sync("user-1", steady_workouts, steady_metrics, as_of=as_of)

        assert report.recommendations.priority is priority
        assert report.recommendations.immediate == immediate
        plateau_advice = "Plateau risk detected - consider exercise variation" in report.recommendations.short_term
        assert plateau_advice == (plateau > 60)

    def test_strong_progress(self, as_of):
        strength = Prediction(value=130, confidence=0.9, variance=5, factors=[], methodology="test")
        progress = replace(ProgressAnalyzer.default_report(), strength=strength, confidence=0.8)

        report = self.service.combine(
            "user-1",
            progress,
            InjuryRiskAnalyzer.default_assessment(),
            TrainingWindowAnalyzer.default_report(),
            PlateauAnalyzer.default_analysis(),
            as_of,
        )

        assert report.recommendations.long_term == ["Strong progress trajectory - continue current approach"]
        assert report.confidence == pytest.approx((0.8 + 0.5 + 0.5 + 0.5) / 4)

    def test_deterministic_and_order_independent(self, steady_workouts, steady_metrics, as_of):
        workouts = list(steady_workouts)
        metrics = list(steady_metrics)
        random.Random(11).shuffle(workouts)
        random.Random(13).shuffle(metrics)

        first = self.service.analyze_user_sync("user-1", steady_workouts, steady_metrics, as_of=as_of)
        second = self.service.analyze_user_sync("user-1", steady_workouts, steady_metrics, as_of=as_of)
        shuffled = self.service.analyze_user_sync("user-1", workouts, metrics, as_of=as_of)

        assert first == second
        assert first == shuffled

    def test_large_history(self, workout_factory, metric_factory, as_of):
        workouts = [workout_factory(as_of - timedelta(days=offset)) for offset in range(200)]
        metrics = [metric_factory(as_of.date() - timedelta(days=offset)) for offset in range(365)]
        report = self.service.analyze_user_sync("user-1", workouts, metrics, as_of=as_of)

        assert 0 <= report.confidence <= 1
        assert report.recommendations.short_term

    def test_naive_session_times(self, workout_factory, steady_metrics, as_of):
        naive_as_of = as_of.replace(tzinfo=None)
        workouts = [
            workout_factory(naive_as_of - timedelta(days=30 + 3 * i), sets=[(100, 5, 8)] * 3)
            for i in range(6)
        ]
        report = self.service.analyze_user_sync("user-1", workouts, steady_metrics, as_of=naive_as_of)

        assert report.plateaus == PlateauAnalyzer().analyze(workouts, steady_metrics, as_of=as_of)
        assert report.plateaus != PlateauAnalyzer.default_analysis()
        assert report.last_analyzed == as_of

    def test_corrupted_sets(self, steady_metrics, as_of):
        workouts = [
            WorkoutSession(
                id=f"corrupt-{day}",
                started_at=as_of.replace(day=day),
                exercises=[ExerciseRecord(id="bench_press", name="Bench Press", sets=[
                    SetRecord(weight=None, reps=None, rpe=None),
                    SetRecord(weight=80, reps=None),
                ])],
            )
            for day in range(1, 20)
        ]
        report = self.service.analyze_user_sync("user-1", workouts, steady_metrics, as_of=as_of)

        assert report.user_id == "user-1"
        assert 0 <= report.injury_risk.overall_risk <= 100
        assert 0 <= report.confidence <= 1


class TestGenerateWorkout:
    """Test workout generation through the service."""

    def test_generates_from_catalog(self, catalog, as_of):
        request = WorkoutRequest("user-1", WorkoutType.STRENGTH, 45, ["barbell", "bench"], current_readiness=70)
        workout = InsightService().generate_workout(request, catalog, [], [], as_of)

        assert workout.exercises
        assert workout.metadata.generated_at == as_of

    def test_naive_history_times(self, catalog, workout_factory, as_of):
        naive_as_of = as_of.replace(tzinfo=None)
        history = [workout_factory(naive_as_of - timedelta(days=2 * i)) for i in range(6)]
        request = WorkoutRequest("user-1", WorkoutType.STRENGTH, 45, ["barbell", "bench"], current_readiness=70)
        workout = InsightService().generate_workout(request, catalog, [], history, naive_as_of)

        assert workout.id != "default"
        assert workout.exercises
        assert workout.metadata.generated_at == as_of

    def test_failure_returns_default_workout(self, catalog, as_of):
        request = WorkoutRequest("user-1", WorkoutType.ENDURANCE, 30, [])
        workout = InsightService(workout_generator=FailingGenerator()).generate_workout(
            request, catalog, [], [], as_of
        )

        assert workout.id == "default"
        assert workout.type is WorkoutType.ENDURANCE
        assert workout.estimated_duration == 30
        assert workout.metadata.generated_at == as_of


class TestHealthCheck:
    """Test subsystem probes."""

    def test_all_operational(self):
        status = InsightService().health_check_sync()

        assert status.healthy
        assert status.workout_generation is SystemState.OPERATIONAL
        assert status.last_health_check.tzinfo is not None

    def test_failing_subsystem_is_degraded(self):
        status = asyncio.run(InsightService(plateau_analyzer=FailingPlateauAnalyzer()).health_check())

        assert status.plateau_detection is SystemState.DEGRADED
        # The default generator shares the plateau analyzer
        assert status.workout_generation is SystemState.DEGRADED
        assert status.progress is SystemState.OPERATIONAL
        assert status.injury_risk is SystemState.OPERATIONAL
        assert not status.healthy
