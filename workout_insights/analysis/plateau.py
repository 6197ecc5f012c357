"""Training plateau detection.

Strength plateaus are scored from the weekly progress rate, the time since
the last meaningful improvement, volume trend, training age and readiness
trend. Volume plateaus are scored from capacity utilization, fatigue
accumulation and the progressive overload rate. Detected plateaus come with
evidence, interventions and risk factors.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np

from ..config import config
from ..models import (
    DailyMetric,
    Feature,
    FeatureCategory,
    Prediction,
    Priority,
    WorkoutSession,
    newest_first_workouts,
    reference_time,
)
from .features import training_age_years
from .predictors import PredictorKind, get_predictor
from .statistics import linear_regression

logger = logging.getLogger(__name__)

EXPECTED_STRENGTH_TREND = 0.015     # weekly fraction
EXPECTED_VOLUME_TREND = 0.02
VOLUME_PLATEAU_DURATION = 14        # days, volume stagnation is not dated
CAPACITY_WINDOW = 4                 # sessions
DEFAULT_OVERLOAD_RATE = 0.02

# (risk above, days until a plateau is likely)
TIME_TO_PLATEAU = ((80, 7), (60, 21), (40, 42))
TIME_TO_PLATEAU_FLOOR = 84


class PlateauSeverity(Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    CHRONIC = "chronic"


@dataclass(frozen=True)
class PlateauEvidence:
    metric: str
    description: str
    severity: str                   # low, medium, high
    data_points: int
    timeframe: str
    statistical_significance: float


@dataclass(frozen=True)
class PlateauIntervention:
    type: str                       # deload, variation, recovery, periodization
    priority: Priority
    title: str
    description: str
    duration: str
    frequency: str
    modifications: List[str]
    expected_outcome: str
    evidence_level: str             # high, moderate, limited
    success_probability: float


@dataclass(frozen=True)
class PlateauRiskFactor:
    factor: str
    impact: str
    description: str
    mitigation: str
    time_to_impact: int             # days


@dataclass(frozen=True)
class PlateauDetection:
    type: str                       # strength or volume
    severity: PlateauSeverity
    confidence: float
    duration: int                   # days without meaningful progress
    affected_exercises: List[str]
    current_trend: float
    expected_trend: float
    stagnation_period: int
    progress_deficit: float
    evidence: List[PlateauEvidence] = field(default_factory=list)
    interventions: List[PlateauIntervention] = field(default_factory=list)
    risk_factors: List[PlateauRiskFactor] = field(default_factory=list)
    last_assessed: Optional[datetime] = None


@dataclass(frozen=True)
class PlateauAnalysis:
    strength_plateaus: List[PlateauDetection] = field(default_factory=list)
    volume_plateaus: List[PlateauDetection] = field(default_factory=list)
    overall_risk: float = 20.0
    time_to_plateau_estimate: Optional[int] = None
    preventive_actions: List[PlateauIntervention] = field(default_factory=list)
    monitoring_recommendations: List[str] = field(default_factory=list)

    @property
    def detected(self) -> List[PlateauDetection]:
        return self.strength_plateaus + self.volume_plateaus

    @property
    def confidence(self) -> float:
        """Plateau outlook is trusted more once a time estimate exists."""
        return 0.8 if self.time_to_plateau_estimate else 0.5


def plateau_severity(probability: float, duration: float) -> PlateauSeverity:
    if duration > 60:
        return PlateauSeverity.CHRONIC
    if probability > 80 or duration > 30:
        return PlateauSeverity.SEVERE
    if probability > 70 or duration > 14:
        return PlateauSeverity.MODERATE
    return PlateauSeverity.MILD


def time_to_plateau(risk: float) -> int:
    for bound, days in TIME_TO_PLATEAU:
        if risk > bound:
            return days
    return TIME_TO_PLATEAU_FLOOR


def _exercises(workout: WorkoutSession, exercise_id: Optional[str]):
    return [e for e in workout.exercises if not exercise_id or e.id == exercise_id]


def _trend(values: Sequence[float]) -> float:
    """Slope over the index axis weighted by fit confidence, 0 below 3 points."""
    if len(values) < 3:
        return 0.0
    regression = linear_regression(range(len(values)), values)
    return regression.slope * regression.confidence


class PlateauAnalyzer:
    """Strength and volume plateau detection with interventions."""

    def __init__(self):
        self.strength_detector = get_predictor(PredictorKind.STRENGTH_PLATEAU)
        self.volume_detector = get_predictor(PredictorKind.VOLUME_PLATEAU)
        self.logger = logging.getLogger(__name__)

    def analyze(
        self,
        workouts: Sequence[WorkoutSession],
        metrics: Sequence[DailyMetric],
        exercise_id: Optional[str] = None,
        as_of: Optional[datetime] = None
    ) -> PlateauAnalysis:
        """Analyze plateau risk across strength and volume.

        Args:
            workouts: Workout history in any order
            metrics: Daily metrics in any order
            exercise_id: Restrict strength analysis to one exercise
            as_of: Reference time for stagnation periods (defaults to now, UTC)

        Returns:
            PlateauAnalysis; the default analysis with fewer than
            ``config.MIN_PLATEAU_WORKOUTS`` workouts
        """
        if len(workouts) < config.MIN_PLATEAU_WORKOUTS:
            self.logger.debug(f"Only {len(workouts)} workouts, plateau analysis needs {config.MIN_PLATEAU_WORKOUTS}")
            return self.default_analysis()

        as_of = reference_time(as_of)
        chronological = list(reversed(newest_first_workouts(workouts)))
        chronological_metrics = sorted(metrics, key=lambda m: m.date)

        strength_features = self.extract_strength_features(chronological, chronological_metrics, exercise_id, as_of)
        volume_features = self.extract_volume_features(chronological, chronological_metrics)

        strength = self.strength_detector.predict(strength_features)
        volume = self.volume_detector.predict(volume_features)

        strength_plateaus = self._detect_strength(chronological, strength, exercise_id, as_of)
        volume_plateaus = self._detect_volume(volume, as_of)

        overall_risk = max(strength.value, volume.value)

        return PlateauAnalysis(
            strength_plateaus=strength_plateaus,
            volume_plateaus=volume_plateaus,
            overall_risk=overall_risk,
            time_to_plateau_estimate=time_to_plateau(overall_risk),
            preventive_actions=self._preventive_actions(overall_risk),
            monitoring_recommendations=self._monitoring(strength_plateaus, volume_plateaus),
        )

    def extract_strength_features(
        self,
        workouts: Sequence[WorkoutSession],
        metrics: Sequence[DailyMetric],
        exercise_id: Optional[str] = None,
        as_of: Optional[datetime] = None
    ) -> List[Feature]:
        """Strength plateau features; empty with fewer than 3 relevant sessions."""
        relevant = [w for w in workouts if not exercise_id or w.has_exercise(exercise_id)]
        if len(relevant) < 3:
            return []

        as_of = reference_time(as_of)
        return [
            Feature("progress_rate", self.progress_rate(relevant, exercise_id), 0.35, FeatureCategory.PERFORMANCE),
            Feature("stagnation_period", self.stagnation_period(relevant, exercise_id, as_of), 0.30,
                    FeatureCategory.TEMPORAL),
            Feature("volume_trend", _trend([w.volume for w in relevant]), 0.20, FeatureCategory.PERFORMANCE),
            Feature("training_age", training_age_years(workouts), 0.15, FeatureCategory.USER),
            Feature("readiness_trend", _trend([m.readiness_score for m in metrics]), 0.10,
                    FeatureCategory.READINESS),
        ]

    def extract_volume_features(
        self,
        workouts: Sequence[WorkoutSession],
        metrics: Sequence[DailyMetric]
    ) -> List[Feature]:
        if not workouts:
            return []

        return [
            Feature("volume_capacity", self._volume_capacity(workouts), 0.30, FeatureCategory.PERFORMANCE),
            Feature("recovery_rate", self._recovery_rate(metrics), 0.25, FeatureCategory.READINESS),
            Feature("fatigue_accumulation", self._fatigue_accumulation(metrics), 0.25, FeatureCategory.READINESS),
            Feature("progressive_overload_rate", self._overload_rate(workouts), 0.20, FeatureCategory.PERFORMANCE),
        ]

    def progress_rate(self, workouts: Sequence[WorkoutSession], exercise_id: Optional[str] = None) -> float:
        """Weekly fractional change in top working weight, weighted by fit confidence."""
        if len(workouts) < 4:
            return 0.0

        weights = []
        for workout in sorted(workouts, key=lambda w: w.started_at):
            for exercise in _exercises(workout, exercise_id):
                if exercise.max_weight > 0:
                    weights.append(exercise.max_weight)

        if len(weights) < 3:
            return 0.0

        regression = linear_regression(range(len(weights)), weights)
        weekly_change = regression.slope * 7 / float(np.mean(weights))
        return weekly_change * regression.confidence

    def stagnation_period(
        self,
        workouts: Sequence[WorkoutSession],
        exercise_id: Optional[str] = None,
        as_of: Optional[datetime] = None
    ) -> int:
        """Days since the last improvement of more than the improvement threshold.

        Sessions are scanned newest to oldest against a running best. When no
        session ever improves, the number of sessions is returned instead.
        """
        if len(workouts) < 2:
            return 0

        as_of = reference_time(as_of)
        best = 0.0
        last_improvement = None
        for workout in newest_first_workouts(workouts):
            for exercise in _exercises(workout, exercise_id):
                if exercise.max_weight > best * config.IMPROVEMENT_THRESHOLD:
                    best = exercise.max_weight
                    last_improvement = workout.started_at

        if last_improvement is None:
            return len(workouts)
        return max(0, (as_of - last_improvement).days)

    def _volume_capacity(self, workouts: Sequence[WorkoutSession]) -> float:
        """Recent average session volume relative to the best session."""
        volumes = [w.volume for w in workouts]
        peak = max(volumes)
        if peak <= 0:
            return 0.5
        recent = [w.volume for w in newest_first_workouts(workouts)[:CAPACITY_WINDOW]]
        return float(np.mean(recent)) / peak

    def _recovery_rate(self, metrics: Sequence[DailyMetric]) -> float:
        if not metrics:
            return 0.8

        sleep_score = min(1.0, float(np.mean([m.sleep for m in metrics])) / config.OPTIMAL_SLEEP_HOURS)
        soreness_score = max(0.0, (10 - float(np.mean([m.soreness for m in metrics]))) / 10)
        energy_score = float(np.mean([m.energy for m in metrics])) / 10
        return (sleep_score + soreness_score + energy_score) / 3

    def _fatigue_accumulation(self, metrics: Sequence[DailyMetric]) -> float:
        if not metrics:
            return 0.3

        soreness = float(np.mean([m.soreness for m in metrics]))
        stress = float(np.mean([m.stress for m in metrics]))
        energy = float(np.mean([m.energy for m in metrics]))
        return max(0.0, min(1.0, (soreness + stress - energy) / 20))

    def _overload_rate(self, workouts: Sequence[WorkoutSession]) -> float:
        if len(workouts) < 3:
            return DEFAULT_OVERLOAD_RATE

        volumes = [w.volume for w in workouts]
        average = float(np.mean(volumes))
        return _trend(volumes) * 7 / average if average > 0 else 0.0

    def _detect_strength(
        self,
        workouts: Sequence[WorkoutSession],
        prediction: Prediction,
        exercise_id: Optional[str],
        as_of: datetime
    ) -> List[PlateauDetection]:
        if prediction.value <= config.STRENGTH_PLATEAU_THRESHOLD:
            return []

        relevant = [w for w in workouts if not exercise_id or w.has_exercise(exercise_id)]
        stagnation = self.stagnation_period(relevant, exercise_id, as_of)
        rate = self.progress_rate(relevant, exercise_id)

        return [PlateauDetection(
            type="strength",
            severity=plateau_severity(prediction.value, stagnation),
            confidence=prediction.confidence,
            duration=stagnation,
            affected_exercises=[exercise_id] if exercise_id else ["multiple"],
            current_trend=rate,
            expected_trend=EXPECTED_STRENGTH_TREND,
            stagnation_period=stagnation,
            progress_deficit=max(0.0, EXPECTED_STRENGTH_TREND - rate),
            evidence=[PlateauEvidence(
                metric="Progress Rate",
                description="Strength gains below expected rate for training level",
                severity="high" if prediction.value > 80 else "medium",
                data_points=len(relevant),
                timeframe=f"{stagnation} days",
                statistical_significance=prediction.confidence,
            )],
            interventions=self._interventions("strength", prediction.value),
            risk_factors=self._risk_factors(),
            last_assessed=as_of,
        )]

    def _detect_volume(self, prediction: Prediction, as_of: datetime) -> List[PlateauDetection]:
        if prediction.value <= config.VOLUME_PLATEAU_THRESHOLD:
            return []

        return [PlateauDetection(
            type="volume",
            severity=plateau_severity(prediction.value, VOLUME_PLATEAU_DURATION),
            confidence=prediction.confidence,
            duration=VOLUME_PLATEAU_DURATION,
            affected_exercises=["overall"],
            current_trend=0.0,
            expected_trend=EXPECTED_VOLUME_TREND,
            stagnation_period=VOLUME_PLATEAU_DURATION,
            progress_deficit=EXPECTED_VOLUME_TREND,
            evidence=[PlateauEvidence(
                metric="Volume Capacity",
                description="Training volume is near capacity while fatigue accumulates",
                severity="high" if prediction.value > 80 else "medium",
                data_points=len(prediction.factors),
                timeframe=f"{VOLUME_PLATEAU_DURATION} days",
                statistical_significance=prediction.confidence,
            )],
            interventions=self._interventions("volume", prediction.value),
            risk_factors=self._risk_factors(),
            last_assessed=as_of,
        )]

    def _interventions(self, plateau_type: str, probability: float) -> List[PlateauIntervention]:
        interventions = []

        if probability > config.DELOAD_THRESHOLD:
            interventions.append(PlateauIntervention(
                type="deload",
                priority=Priority.IMMEDIATE,
                title="Implement Deload Week",
                description="Reduce training volume by 40-50% to promote recovery",
                duration="1 week",
                frequency="immediately",
                modifications=[
                    "Reduce weight by 20-30%",
                    "Reduce sets by 30-40%",
                    "Focus on technique refinement",
                ],
                expected_outcome="Improved recovery and renewed progress after 1-2 weeks",
                evidence_level="high",
                success_probability=0.8,
            ))

        if plateau_type == "strength":
            interventions.append(PlateauIntervention(
                type="variation",
                priority=Priority.HIGH,
                title="Exercise Variation",
                description="Introduce new movement patterns to stimulate adaptation",
                duration="4-6 weeks",
                frequency="2-3 times per week",
                modifications=[
                    "Change exercise angle or grip",
                    "Add pause reps or tempo changes",
                    "Introduce unilateral variations",
                ],
                expected_outcome="Renewed strength gains through novel stimulus",
                evidence_level="high",
                success_probability=0.75,
            ))
        else:
            interventions.append(PlateauIntervention(
                type="recovery",
                priority=Priority.HIGH,
                title="Recovery Focus",
                description="Bring fatigue down before adding more training volume",
                duration="2 weeks",
                frequency="daily",
                modifications=[
                    "Hold weekly volume steady",
                    "Add one extra rest day per week",
                    "Prioritize 8+ hours of sleep",
                ],
                expected_outcome="Restored capacity to progress training volume",
                evidence_level="moderate",
                success_probability=0.7,
            ))

        return interventions

    def _risk_factors(self) -> List[PlateauRiskFactor]:
        return [
            PlateauRiskFactor(
                factor="Monotonous Training",
                impact="high",
                description="Lack of exercise variation reduces adaptation stimulus",
                mitigation="Introduce periodization and exercise rotation",
                time_to_impact=14,
            ),
            PlateauRiskFactor(
                factor="Inadequate Recovery",
                impact="medium",
                description="Poor sleep or high stress impedes adaptation",
                mitigation="Prioritize sleep hygiene and stress management",
                time_to_impact=7,
            ),
        ]

    def _preventive_actions(self, overall_risk: float) -> List[PlateauIntervention]:
        if overall_risk <= config.PREVENTIVE_ACTION_THRESHOLD:
            return []

        return [PlateauIntervention(
            type="periodization",
            priority=Priority.HIGH,
            title="Implement Periodization",
            description="Cycle through different training phases to prevent adaptation",
            duration="12 weeks",
            frequency="ongoing",
            modifications=[
                "Alternate between strength and hypertrophy phases",
                "Include planned deload weeks",
                "Vary exercise selection periodically",
            ],
            expected_outcome="Sustained progress and plateau prevention",
            evidence_level="high",
            success_probability=0.85,
        )]

    def _monitoring(
        self,
        strength_plateaus: Sequence[PlateauDetection],
        volume_plateaus: Sequence[PlateauDetection]
    ) -> List[str]:
        recommendations = [
            "Track weekly progress photos and measurements",
            "Monitor RPE trends to identify overreaching",
            "Assess sleep quality and stress levels daily",
        ]
        if strength_plateaus:
            recommendations.append("Test 1RM or 3RM every 4-6 weeks")
            recommendations.append("Video record lifts to assess technique consistency")
        if volume_plateaus:
            recommendations.append("Track training volume and recovery metrics weekly")
            recommendations.append("Monitor heart rate variability if available")
        return recommendations

    @staticmethod
    def default_analysis() -> PlateauAnalysis:
        return PlateauAnalysis(overall_risk=20.0)
