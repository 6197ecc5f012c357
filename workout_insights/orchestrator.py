"""Insight orchestration.

Runs the progress, injury-risk, training-window and plateau analyses
concurrently and merges them into one report. A failing analysis is
replaced by its default; a failure while merging returns the default
report. None of the public entry points raise.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Sequence, TypeVar

from .analysis.injury_risk import InjuryRiskAnalyzer, InjuryRiskAssessment
from .analysis.plateau import PlateauAnalysis, PlateauAnalyzer
from .analysis.progress import ProgressAnalyzer, ProgressReport
from .analysis.training_windows import TrainingWindowAnalyzer, TrainingWindowsReport
from .config import config
from .generator import WorkoutGenerator, default_workout
from .models import (
    DailyMetric,
    ExerciseCatalogEntry,
    ExerciseRecord,
    FitnessLevel,
    GeneratedWorkout,
    Priority,
    SetRecord,
    WorkoutRequest,
    WorkoutSession,
    WorkoutType,
    reference_time,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

START_TRACKING = "Start tracking daily metrics for personalized insights"


class SystemState(Enum):
    OPERATIONAL = "operational"
    DEGRADED = "degraded"
    ERROR = "error"


@dataclass(frozen=True)
class Recommendations:
    immediate: List[str] = field(default_factory=list)
    short_term: List[str] = field(default_factory=list)
    long_term: List[str] = field(default_factory=list)
    priority: Priority = Priority.LOW


@dataclass(frozen=True)
class InsightReport:
    """Everything known about one user, merged from all analyses."""
    user_id: str
    progress: ProgressReport
    injury_risk: InjuryRiskAssessment
    training_windows: TrainingWindowsReport
    plateaus: PlateauAnalysis
    recommendations: Recommendations
    confidence: float
    last_analyzed: datetime


@dataclass(frozen=True)
class HealthStatus:
    progress: SystemState
    injury_risk: SystemState
    training_windows: SystemState
    plateau_detection: SystemState
    workout_generation: SystemState
    last_health_check: datetime

    @property
    def healthy(self) -> bool:
        return all(
            state is SystemState.OPERATIONAL
            for state in (self.progress, self.injury_risk, self.training_windows,
                          self.plateau_detection, self.workout_generation)
        )


def _probe_data(now: datetime):
    """One workout, one metric day and one catalog exercise for health probes."""
    workout = WorkoutSession(
        id="health-check",
        started_at=now,
        user_id="health-check",
        name="Health Check Workout",
        completed_at=now,
        duration_minutes=60,
        total_volume=1000,
        average_rpe=7,
        exercises=[ExerciseRecord(
            id="health-check-exercise",
            name="Health Check Exercise",
            category="strength",
            sets=[SetRecord(weight=100, reps=10, rpe=7)],
        )],
    )
    metric = DailyMetric(date=now.date(), sleep=8, energy=8, soreness=3, stress=3)
    exercise = ExerciseCatalogEntry(
        id="health-check-exercise",
        name="Health Check Exercise",
        category="compound",
        muscle_groups=["chest"],
        equipment=["barbell"],
        instructions="Health check instructions",
        difficulty_level="intermediate",
    )
    return [workout], [metric], [exercise]


class InsightService:
    """Entry point for user analysis, workout generation and health checks.

    Holds no mutable state, so one instance can be shared or a new one built
    per request. Analyzers are injectable.
    """

    def __init__(
        self,
        progress_analyzer: Optional[ProgressAnalyzer] = None,
        injury_risk_analyzer: Optional[InjuryRiskAnalyzer] = None,
        training_window_analyzer: Optional[TrainingWindowAnalyzer] = None,
        plateau_analyzer: Optional[PlateauAnalyzer] = None,
        workout_generator: Optional[WorkoutGenerator] = None
    ):
        self.progress_analyzer = progress_analyzer or ProgressAnalyzer()
        self.injury_risk_analyzer = injury_risk_analyzer or InjuryRiskAnalyzer()
        self.training_window_analyzer = training_window_analyzer or TrainingWindowAnalyzer()
        self.plateau_analyzer = plateau_analyzer or PlateauAnalyzer()
        self.workout_generator = workout_generator or WorkoutGenerator(
            plateau_analyzer=self.plateau_analyzer,
            injury_risk_analyzer=self.injury_risk_analyzer,
        )
        self.logger = logging.getLogger(__name__)

    async def analyze_user(
        self,
        user_id: str,
        workouts: Sequence[WorkoutSession],
        metrics: Sequence[DailyMetric],
        exercises: Sequence[ExerciseCatalogEntry] = (),
        as_of: Optional[datetime] = None
    ) -> InsightReport:
        """Run every analysis for one user.

        Args:
            user_id: User identifier, echoed in the report
            workouts: Workout history in any order
            metrics: Daily metrics in any order
            exercises: Exercise catalog (not needed by the analyses themselves)
            as_of: Reference time (defaults to now, UTC)

        Returns:
            InsightReport, never raises
        """
        as_of = reference_time(as_of)
        self.logger.info(f"Starting analysis for user {user_id}")

        try:
            progress, injury_risk, training_windows, plateaus = await asyncio.gather(
                self._isolated(
                    "Progress", ProgressAnalyzer.default_report,
                    self.progress_analyzer.analyze, workouts, metrics,
                ),
                self._isolated(
                    "Injury risk", InjuryRiskAnalyzer.default_assessment,
                    self.injury_risk_analyzer.assess, workouts, metrics,
                ),
                self._isolated(
                    "Training windows", TrainingWindowAnalyzer.default_report,
                    self.training_window_analyzer.analyze, metrics, workouts,
                ),
                self._isolated(
                    "Plateau", PlateauAnalyzer.default_analysis,
                    self.plateau_analyzer.analyze, workouts, metrics, None, as_of,
                ),
            )

            report = self.combine(user_id, progress, injury_risk, training_windows, plateaus, as_of)
            if not workouts and not metrics:
                report = InsightReport(
                    user_id=report.user_id,
                    progress=report.progress,
                    injury_risk=report.injury_risk,
                    training_windows=report.training_windows,
                    plateaus=report.plateaus,
                    recommendations=Recommendations(
                        immediate=[START_TRACKING],
                        short_term=report.recommendations.short_term,
                        long_term=report.recommendations.long_term,
                        priority=report.recommendations.priority,
                    ),
                    confidence=report.confidence,
                    last_analyzed=report.last_analyzed,
                )
        except Exception:
            self.logger.error(f"Analysis failed for user {user_id}", exc_info=True)
            return self.default_report(user_id, as_of)

        self.logger.info(f"Analysis completed for user {user_id}")
        return report

    async def _isolated(self, name: str, default: Callable[[], T], analysis: Callable[..., T], *args) -> T:
        """Run one analysis in a worker thread, falling back to its default on failure."""
        try:
            return await asyncio.to_thread(analysis, *args)
        except Exception:
            self.logger.warning(f"{name} analysis failed, using defaults", exc_info=True)
            return default()

    def combine(
        self,
        user_id: str,
        progress: ProgressReport,
        injury_risk: InjuryRiskAssessment,
        training_windows: TrainingWindowsReport,
        plateaus: PlateauAnalysis,
        as_of: datetime
    ) -> InsightReport:
        """Merge the four analyses into recommendations, priority and confidence."""
        immediate = []
        short_term = []
        long_term = []
        priority = Priority.LOW

        if injury_risk.overall_risk > config.INJURY_CRITICAL_THRESHOLD:
            immediate.append("High injury risk detected - reduce training intensity")
            priority = Priority.CRITICAL
        elif injury_risk.overall_risk > config.INJURY_HIGH_THRESHOLD:
            immediate.append("Moderate injury risk - focus on recovery")
            priority = Priority.HIGH

        if plateaus.overall_risk > config.PLATEAU_RECOMMENDATION_THRESHOLD:
            short_term.append("Plateau risk detected - consider exercise variation")
            if priority is Priority.LOW:
                priority = Priority.MEDIUM

        if (
            progress.confidence > config.STRONG_PROGRESS_CONFIDENCE
            and progress.strength is not None
            and progress.strength.confidence > config.STRONG_STRENGTH_CONFIDENCE
        ):
            long_term.append("Strong progress trajectory - continue current approach")

        hour = training_windows.primary.time_of_day
        short_term.append(f"Optimal training time: {hour}:00-{hour + 2}:00")

        confidences = [
            progress.confidence,
            injury_risk.confidence,
            training_windows.primary.confidence,
            plateaus.confidence,
        ]

        return InsightReport(
            user_id=user_id,
            progress=progress,
            injury_risk=injury_risk,
            training_windows=training_windows,
            plateaus=plateaus,
            recommendations=Recommendations(
                immediate=immediate,
                short_term=short_term,
                long_term=long_term,
                priority=priority,
            ),
            confidence=sum(confidences) / len(confidences),
            last_analyzed=as_of,
        )

    def generate_workout(
        self,
        request: WorkoutRequest,
        exercises: Sequence[ExerciseCatalogEntry],
        metrics: Sequence[DailyMetric],
        history: Sequence[WorkoutSession],
        as_of: Optional[datetime] = None
    ) -> GeneratedWorkout:
        """Generate a workout, falling back to a basic one on failure."""
        self.logger.info(f"Generating {request.workout_type.value} workout for user {request.user_id}")
        try:
            workout = self.workout_generator.generate(request, exercises, metrics, history, as_of)
        except Exception:
            self.logger.warning("Workout generation failed, using default workout", exc_info=True)
            return default_workout(request, as_of)

        self.logger.info(f"Generated workout with {len(workout.exercises)} exercises")
        return workout

    async def health_check(self) -> HealthStatus:
        """Probe every subsystem with a minimal synthetic dataset."""
        self.logger.info("Performing health check")
        now = datetime.now(timezone.utc)

        try:
            workouts, metrics, exercises = _probe_data(now)
            request = WorkoutRequest(
                user_id="health-check",
                workout_type=WorkoutType.STRENGTH,
                target_duration=60,
                available_equipment=["barbell", "dumbbell"],
                fitness_level=FitnessLevel.INTERMEDIATE,
            )
            states = await asyncio.gather(
                self._probe("Progress", self.progress_analyzer.analyze, workouts, metrics),
                self._probe("Injury risk", self.injury_risk_analyzer.assess, workouts, metrics),
                self._probe("Training windows", self.training_window_analyzer.analyze, metrics, []),
                self._probe("Plateau detection", self.plateau_analyzer.analyze, workouts, metrics),
                self._probe("Workout generation", self.workout_generator.generate,
                            request, exercises, [], []),
            )
        except Exception:
            self.logger.error("Health check could not run", exc_info=True)
            states = [SystemState.ERROR] * 5

        status = HealthStatus(*states, last_health_check=now)
        self.logger.info("Health check completed")
        return status

    async def _probe(self, name: str, check: Callable[..., object], *args) -> SystemState:
        try:
            await asyncio.to_thread(check, *args)
        except Exception:
            self.logger.warning(f"{name} system degraded", exc_info=True)
            return SystemState.DEGRADED
        return SystemState.OPERATIONAL

    def analyze_user_sync(
        self,
        user_id: str,
        workouts: Sequence[WorkoutSession],
        metrics: Sequence[DailyMetric],
        exercises: Sequence[ExerciseCatalogEntry] = (),
        as_of: Optional[datetime] = None
    ) -> InsightReport:
        return asyncio.run(self.analyze_user(user_id, workouts, metrics, exercises, as_of))

    def health_check_sync(self) -> HealthStatus:
        return asyncio.run(self.health_check())

    @staticmethod
    def default_report(user_id: str, as_of: Optional[datetime] = None) -> InsightReport:
        """Last-resort report when merging the analyses fails."""
        return InsightReport(
            user_id=user_id,
            progress=ProgressAnalyzer.default_report(),
            injury_risk=InjuryRiskAnalyzer.default_assessment(),
            training_windows=TrainingWindowAnalyzer.default_report(),
            plateaus=PlateauAnalyzer.default_analysis(),
            recommendations=Recommendations(
                immediate=[START_TRACKING],
                short_term=["Maintain consistent training schedule"],
                long_term=["Focus on progressive overload"],
                priority=Priority.LOW,
            ),
            confidence=0.3,
            last_analyzed=reference_time(as_of),
        )
