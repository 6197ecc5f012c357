"""Injury risk assessment.

Combines three independent risk models:
- Training load: acute (7 day) vs chronic (28 day) workload ratio and
  week-over-week load and intensity spikes
- Readiness: sleep deficit, stress, soreness and energy
- Movement quality: effort inconsistency, rep drop-off within exercises and
  how fast working weights are climbing

Overall risk = 40% training load + 35% readiness + 25% movement quality.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..config import config
from ..models import (
    DailyMetric,
    Feature,
    FeatureCategory,
    Priority,
    RiskLevel,
    WorkoutSession,
    newest_first_metrics,
    newest_first_workouts,
)
from .features import feature_map
from .predictors import PredictorKind, get_predictor
from .statistics import standard_deviation

logger = logging.getLogger(__name__)

OVERALL_WEIGHTS = {"training_load": 0.40, "readiness": 0.35, "movement": 0.25}

# A set is counted as form breakdown when its reps fall this far below the first set
REP_DROP_THRESHOLD = 0.30
MAX_PREVENTION_ACTIONS = 3


@dataclass(frozen=True)
class TrainingLoadFactors:
    acute_load: float = 0.0
    chronic_load: float = 0.0
    acute_chronic_ratio: float = 1.0
    load_spike: float = 0.0
    intensity_spike: float = 0.0
    risk_level: RiskLevel = RiskLevel.LOW


@dataclass(frozen=True)
class ReadinessRiskFactors:
    sleep_deficit: float = 0.0
    stress_level: float = 3.0
    soreness_level: float = 3.0
    energy_level: float = 7.0
    recovery_score: float = 100.0
    risk_level: RiskLevel = RiskLevel.LOW


@dataclass(frozen=True)
class MovementFactors:
    rpe_inconsistency: float = 0.0
    form_breakdown_frequency: float = 0.0
    weight_progression_rate: float = 0.0
    risk_level: RiskLevel = RiskLevel.LOW


@dataclass(frozen=True)
class InjuryRiskFactors:
    training_load: TrainingLoadFactors = field(default_factory=TrainingLoadFactors)
    readiness: ReadinessRiskFactors = field(default_factory=ReadinessRiskFactors)
    movement: MovementFactors = field(default_factory=MovementFactors)


@dataclass(frozen=True)
class InjuryWarning:
    type: str                   # acute_spike, poor_recovery, chronic_fatigue, movement_quality
    severity: RiskLevel
    message: str
    evidence: List[str]
    body_parts: List[str]
    urgency: str                # immediate, within_week, monitor


@dataclass(frozen=True)
class PreventionAction:
    category: str               # load_management, recovery, movement
    priority: Priority
    title: str
    description: str
    action: str
    timeframe: str
    expected_impact: float      # percent risk reduction


@dataclass(frozen=True)
class InjuryRiskAssessment:
    overall_risk: float
    risk_level: RiskLevel
    confidence: float
    factors: InjuryRiskFactors = field(default_factory=InjuryRiskFactors)
    warnings: List[InjuryWarning] = field(default_factory=list)
    recommendations: List[PreventionAction] = field(default_factory=list)
    timeframe: int = 7


def daily_volume(workouts: Sequence[WorkoutSession]) -> pd.Series:
    """Total volume per calendar day, zero-filled, ending on the latest session day."""
    if not workouts:
        return pd.Series(dtype=float)

    days = [pd.Timestamp(w.started_at.date()) for w in workouts]
    per_day = pd.Series([w.volume for w in workouts], index=days, dtype=float).groupby(level=0).sum()
    date_range = pd.date_range(start=per_day.index.min(), end=per_day.index.max(), freq='D')
    return per_day.reindex(date_range, fill_value=0.0)


def _window_rpes(workouts: Sequence[WorkoutSession], start: pd.Timestamp, end: pd.Timestamp) -> List[float]:
    """RPEs from sessions whose day falls in (start, end]."""
    return [
        rpe
        for w in workouts
        if start < pd.Timestamp(w.started_at.date()) <= end
        for rpe in w.rpes
    ]


def _relative_change(current: float, previous: float) -> float:
    return (current - previous) / previous if previous > 0 else 0.0


class InjuryRiskAnalyzer:
    """Weighted combination of the training-load, readiness and movement risk models."""

    def __init__(self):
        self.training_load_predictor = get_predictor(PredictorKind.TRAINING_LOAD_RISK)
        self.readiness_predictor = get_predictor(PredictorKind.READINESS_RISK)
        self.movement_predictor = get_predictor(PredictorKind.MOVEMENT_QUALITY_RISK)
        self.logger = logging.getLogger(__name__)

    def assess(
        self,
        workouts: Sequence[WorkoutSession],
        metrics: Sequence[DailyMetric]
    ) -> InjuryRiskAssessment:
        """Assess injury risk over the next week.

        Args:
            workouts: Workout history in any order
            metrics: Daily metrics in any order

        Returns:
            InjuryRiskAssessment; the default assessment when workouts or
            metrics are missing
        """
        if not workouts or not metrics:
            self.logger.debug("Insufficient data for injury risk assessment")
            return self.default_assessment()

        load_features = self.extract_training_load_features(workouts)
        readiness_features = self.extract_readiness_features(metrics)
        movement_features = self.extract_movement_features(workouts)

        load_risk = self.training_load_predictor.predict(load_features)
        readiness_risk = self.readiness_predictor.predict(readiness_features)
        movement_risk = self.movement_predictor.predict(movement_features)

        overall = round(
            load_risk.value * OVERALL_WEIGHTS["training_load"]
            + readiness_risk.value * OVERALL_WEIGHTS["readiness"]
            + movement_risk.value * OVERALL_WEIGHTS["movement"]
        )
        overall = max(0, min(100, overall))
        confidence = (load_risk.confidence + readiness_risk.confidence + movement_risk.confidence) / 3

        factors = self._risk_factors(load_features, readiness_features, movement_features, movement_risk.value)

        return InjuryRiskAssessment(
            overall_risk=overall,
            risk_level=RiskLevel.from_score(overall),
            confidence=confidence,
            factors=factors,
            warnings=self._warnings(factors),
            recommendations=self._prevention_actions(factors),
        )

    def extract_training_load_features(self, workouts: Sequence[WorkoutSession]) -> List[Feature]:
        """Acute/chronic load, ACWR and spikes from calendar-day windows."""
        series = daily_volume(workouts)
        if series.empty:
            return []

        acute_days = config.ACUTE_WINDOW_DAYS
        acute = float(series.iloc[-acute_days:].sum())
        chronic = float(series.iloc[-config.CHRONIC_WINDOW_DAYS:].sum()) / (config.CHRONIC_WINDOW_DAYS / acute_days)
        previous = float(series.iloc[-2 * acute_days:-acute_days].sum())

        anchor = series.index[-1]
        window = pd.Timedelta(days=acute_days)
        acute_rpes = _window_rpes(workouts, anchor - window, anchor)
        previous_rpes = _window_rpes(workouts, anchor - 2 * window, anchor - window)
        intensity_spike = 0.0
        if acute_rpes and previous_rpes:
            intensity_spike = _relative_change(float(np.mean(acute_rpes)), float(np.mean(previous_rpes)))

        return [
            Feature("acute_load", acute, 0.25, FeatureCategory.PERFORMANCE),
            Feature("chronic_load", chronic, 0.30, FeatureCategory.PERFORMANCE),
            Feature("load_spike", _relative_change(acute, previous), 0.35, FeatureCategory.TEMPORAL),
            Feature("acwr", acute / chronic if chronic > 0 else 1.0, 0.40, FeatureCategory.PERFORMANCE),
            Feature("intensity_spike", intensity_spike, 0.20, FeatureCategory.TEMPORAL),
        ]

    def extract_readiness_features(self, metrics: Sequence[DailyMetric]) -> List[Feature]:
        if not metrics:
            return []

        latest = newest_first_metrics(metrics)[0]
        return [
            Feature("sleep_deficit", max(0.0, config.OPTIMAL_SLEEP_HOURS - latest.sleep), 0.35,
                    FeatureCategory.READINESS),
            Feature("stress_level", latest.stress, 0.25, FeatureCategory.READINESS),
            Feature("soreness_level", latest.soreness, 0.25, FeatureCategory.READINESS),
            Feature("energy_level", latest.energy, 0.15, FeatureCategory.READINESS),
        ]

    def extract_movement_features(self, workouts: Sequence[WorkoutSession]) -> List[Feature]:
        """Effort consistency, rep drop-off and weight progression over recent sessions."""
        if not workouts:
            return []

        recent = newest_first_workouts(workouts)[:config.RECENT_SESSION_WINDOW]
        rpes = [rpe for w in recent for rpe in w.rpes]

        features = [
            Feature("rpe_inconsistency", standard_deviation(rpes), 0.40, FeatureCategory.PERFORMANCE),
            Feature("form_breakdown_frequency", self._form_breakdown_frequency(recent), 0.35,
                    FeatureCategory.PERFORMANCE),
        ]
        progression = self._weight_progression_rate(workouts)
        if progression is not None:
            features.append(Feature("weight_progression_rate", progression, 0.25, FeatureCategory.PERFORMANCE))
        return features

    def _form_breakdown_frequency(self, workouts: Sequence[WorkoutSession]) -> float:
        """Share of multi-set exercises whose last set lost more than 30% of the first set's reps."""
        checked = 0
        broken = 0
        for workout in workouts:
            for exercise in workout.exercises:
                reps = [s.reps for s in exercise.sets if s.reps]
                if len(reps) < 2:
                    continue
                checked += 1
                if reps[-1] < reps[0] * (1 - REP_DROP_THRESHOLD):
                    broken += 1
        return broken / checked if checked else 0.0

    def _weight_progression_rate(self, workouts: Sequence[WorkoutSession]) -> Optional[float]:
        """Mean week-over-week change in top working weight for exercises trained in both weeks."""
        series = daily_volume(workouts)
        if series.empty:
            return None

        anchor = series.index[-1]
        window = pd.Timedelta(days=config.ACUTE_WINDOW_DAYS)

        def top_weights(start: pd.Timestamp, end: pd.Timestamp) -> Dict[str, float]:
            tops: Dict[str, float] = {}
            for w in workouts:
                if start < pd.Timestamp(w.started_at.date()) <= end:
                    for exercise in w.exercises:
                        if exercise.max_weight > 0:
                            tops[exercise.id] = max(tops.get(exercise.id, 0.0), exercise.max_weight)
            return tops

        current = top_weights(anchor - window, anchor)
        previous = top_weights(anchor - 2 * window, anchor - window)
        shared = [eid for eid in current if eid in previous]
        if not shared:
            return None
        return float(np.mean([_relative_change(current[eid], previous[eid]) for eid in shared]))

    def _risk_factors(
        self,
        load_features: Sequence[Feature],
        readiness_features: Sequence[Feature],
        movement_features: Sequence[Feature],
        movement_risk: float
    ) -> InjuryRiskFactors:
        load = feature_map(load_features)
        readiness = feature_map(readiness_features)
        movement = feature_map(movement_features)

        acute = load.get("acute_load", 0.0)
        chronic = load.get("chronic_load", 0.0)
        acwr = acute / chronic if chronic > 0 else 1.0
        load_spike = load.get("load_spike", 0.0)

        sleep_deficit = readiness.get("sleep_deficit", 0.0)
        stress = readiness.get("stress_level", 3.0)
        soreness = readiness.get("soreness_level", 3.0)

        return InjuryRiskFactors(
            training_load=TrainingLoadFactors(
                acute_load=acute,
                chronic_load=chronic,
                acute_chronic_ratio=acwr,
                load_spike=load_spike,
                intensity_spike=load.get("intensity_spike", 0.0),
                risk_level=RiskLevel.from_score(max(0.0, (acwr - 1) * 50 + load_spike * 20)),
            ),
            readiness=ReadinessRiskFactors(
                sleep_deficit=sleep_deficit,
                stress_level=stress,
                soreness_level=soreness,
                energy_level=readiness.get("energy_level", 7.0),
                recovery_score=max(0.0, 100 - sleep_deficit * 10 - stress * 8 - soreness * 6),
                risk_level=RiskLevel.from_score(sleep_deficit * 15 + stress * 8 + soreness * 6),
            ),
            movement=MovementFactors(
                rpe_inconsistency=movement.get("rpe_inconsistency", 0.0),
                form_breakdown_frequency=movement.get("form_breakdown_frequency", 0.0),
                weight_progression_rate=movement.get("weight_progression_rate", 0.0),
                risk_level=RiskLevel.from_score(movement_risk),
            ),
        )

    def _warnings(self, factors: InjuryRiskFactors) -> List[InjuryWarning]:
        warnings = []
        acwr = factors.training_load.acute_chronic_ratio
        sleep_deficit = factors.readiness.sleep_deficit

        if acwr > config.ACWR_WARNING_THRESHOLD:
            warnings.append(InjuryWarning(
                type="acute_spike",
                severity=RiskLevel.CRITICAL if acwr > config.ACWR_CRITICAL_THRESHOLD else RiskLevel.HIGH,
                message=f"Acute training load is {acwr * 100:.0f}% of chronic load",
                evidence=["High acute:chronic workload ratio detected"],
                body_parts=["General"],
                urgency="immediate",
            ))

        if sleep_deficit > config.SLEEP_DEFICIT_WARNING:
            warnings.append(InjuryWarning(
                type="poor_recovery",
                severity=RiskLevel.CRITICAL if sleep_deficit > config.SLEEP_DEFICIT_CRITICAL else RiskLevel.HIGH,
                message=f"Sleep deficit of {sleep_deficit:.1f} hours detected",
                evidence=["Chronic sleep deprivation"],
                body_parts=["General"],
                urgency="within_week",
            ))

        if factors.readiness.soreness_level > config.SORENESS_WARNING:
            warnings.append(InjuryWarning(
                type="chronic_fatigue",
                severity=RiskLevel.HIGH,
                message="High soreness levels may indicate incomplete recovery",
                evidence=["Elevated muscle soreness"],
                body_parts=["Muscles"],
                urgency="monitor",
            ))

        if factors.movement.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL):
            warnings.append(InjuryWarning(
                type="movement_quality",
                severity=factors.movement.risk_level,
                message="Movement quality indicators suggest fatigue-related form breakdown",
                evidence=[
                    f"RPE variability of {factors.movement.rpe_inconsistency:.1f}",
                    f"Rep drop-off in {factors.movement.form_breakdown_frequency:.0%} of exercises",
                ],
                body_parts=["General"],
                urgency="within_week",
            ))

        return warnings

    def _prevention_actions(self, factors: InjuryRiskFactors) -> List[PreventionAction]:
        actions = []

        if factors.training_load.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL):
            actions.append(PreventionAction(
                category="load_management",
                priority=Priority.HIGH,
                title="Reduce Training Load",
                description="Current training load exceeds safe adaptation capacity",
                action="Reduce volume by 20-30% for the next week",
                timeframe="1 week",
                expected_impact=25,
            ))

        if factors.readiness.risk_level is not RiskLevel.LOW:
            actions.append(PreventionAction(
                category="recovery",
                priority=Priority.HIGH,
                title="Prioritize Recovery",
                description="Poor readiness metrics indicate inadequate recovery",
                action="Focus on sleep quality and stress management",
                timeframe="2 weeks",
                expected_impact=20,
            ))

        actions.append(PreventionAction(
            category="movement",
            priority=Priority.MEDIUM,
            title="Movement Screen",
            description="Regular movement assessment can identify risk patterns",
            action="Perform functional movement screen or video analysis",
            timeframe="1 month",
            expected_impact=15,
        ))

        return actions[:MAX_PREVENTION_ACTIONS]

    @staticmethod
    def default_assessment() -> InjuryRiskAssessment:
        return InjuryRiskAssessment(overall_risk=25, risk_level=RiskLevel.LOW, confidence=0.5)
