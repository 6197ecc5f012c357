"""Progress analysis: strength, training volume and body weight projections."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..config import config
from ..models import (
    DailyMetric,
    Feature,
    FeatureCategory,
    Prediction,
    WorkoutSession,
    newest_first_workouts,
)
from .features import (
    average_recovery_hours,
    estimate_one_rep_max,
    extract_performance_features,
    extract_readiness_features,
    feature_map,
    readiness_score,
    training_age_years,
    workout_frequency,
)
from .predictors import PredictorKind, get_predictor, project_gain, weekly_strength_rate
from .statistics import exponential_smoothing

logger = logging.getLogger(__name__)

PROJECTION_WEEKS = (1, 4, 12)
FORECAST_SESSIONS = 7


@dataclass(frozen=True)
class ProgressReport:
    """Combined progress outlook."""
    strength: Optional[Prediction] = None
    volume: Optional[Prediction] = None
    weight_loss: Optional[Prediction] = None
    strength_projection: Dict[int, float] = field(default_factory=dict)  # weeks -> projected 1RM
    volume_forecast: List[float] = field(default_factory=list)         # next sessions
    readiness_score: float = 70.0
    confidence: float = 0.3
    recommendations: List[str] = field(default_factory=list)


class ProgressAnalyzer:
    """Runs the strength, volume and weight-loss predictors over one history."""

    def __init__(self):
        self.strength_predictor = get_predictor(PredictorKind.STRENGTH_PROGRESS)
        self.volume_predictor = get_predictor(PredictorKind.VOLUME_PROGRESSION)
        self.weight_loss_predictor = get_predictor(PredictorKind.WEIGHT_LOSS)
        self.logger = logging.getLogger(__name__)

    def analyze(
        self,
        workouts: Sequence[WorkoutSession],
        metrics: Sequence[DailyMetric],
        exercise_id: Optional[str] = None,
        target_weight: Optional[float] = None
    ) -> ProgressReport:
        """Project progress over the next three months.

        Args:
            workouts: Workout history in any order
            metrics: Daily metrics in any order
            exercise_id: Restrict strength and volume analysis to one exercise
            target_weight: Body-weight goal in kg, if the user has one

        Returns:
            ProgressReport; the default report when workouts or metrics are missing
        """
        if not workouts or not metrics:
            self.logger.debug("Insufficient data for progress analysis")
            return self.default_report()

        features = self.build_features(workouts, metrics, exercise_id)
        values = feature_map(features)

        strength = self.strength_predictor.predict(features)
        volume = self.volume_predictor.predict(features)

        weight_loss = None
        if any(m.body_weight for m in metrics):
            weight_features = features + self._weight_features(workouts, metrics, target_weight)
            weight_loss = self.weight_loss_predictor.predict(weight_features)

        confidences = [c for c in (strength.confidence, volume.confidence,
                                   weight_loss.confidence if weight_loss else 0) if c > 0]
        confidence = sum(confidences) / len(confidences) if confidences else 0.0

        score = values["readiness_score"]
        return ProgressReport(
            strength=strength,
            volume=volume,
            weight_loss=weight_loss,
            strength_projection=self._strength_projection(features, values.get("current_1rm", 0)),
            volume_forecast=self._volume_forecast(workouts, exercise_id),
            readiness_score=score,
            confidence=confidence,
            recommendations=self._recommendations(strength, volume, weight_loss, score),
        )

    def build_features(
        self,
        workouts: Sequence[WorkoutSession],
        metrics: Sequence[DailyMetric],
        exercise_id: Optional[str] = None
    ) -> List[Feature]:
        """Readiness and performance features plus the derived progress inputs."""
        readiness_features = extract_readiness_features(metrics)
        performance_features = extract_performance_features(workouts, exercise_id)
        performance = feature_map(performance_features)
        relevant = [w for w in workouts if not exercise_id or w.has_exercise(exercise_id)]

        features = readiness_features + performance_features
        features.append(Feature("readiness_score", readiness_score(readiness_features), 0.20,
                                FeatureCategory.READINESS))
        features.append(Feature("training_age", training_age_years(workouts), 0.10, FeatureCategory.USER))
        features.append(Feature("frequency", workout_frequency(relevant), 0.15, FeatureCategory.TEMPORAL))
        features.append(Feature("recovery_time", average_recovery_hours(relevant), 0.05,
                                FeatureCategory.READINESS))

        one_rep_max = estimate_one_rep_max(workouts, exercise_id)
        if one_rep_max > 0:
            features.append(Feature("current_1rm", one_rep_max, 0.25, FeatureCategory.PERFORMANCE))
        if "avg_volume" in performance:
            features.append(Feature("current_volume", performance["avg_volume"], 0.20,
                                    FeatureCategory.PERFORMANCE))
        if "avg_rpe" in performance:
            features.append(Feature("intensity_load", performance["avg_rpe"], 0.10,
                                    FeatureCategory.PERFORMANCE))
        return features

    def _weight_features(
        self,
        workouts: Sequence[WorkoutSession],
        metrics: Sequence[DailyMetric],
        target_weight: Optional[float]
    ) -> List[Feature]:
        weighed = sorted((m for m in metrics if m.body_weight), key=lambda m: m.date)
        span_days = (weighed[-1].date - weighed[0].date).days + 1
        logged_days = len({m.date for m in metrics if weighed[0].date <= m.date <= weighed[-1].date})

        features = [
            Feature("current_weight", weighed[-1].body_weight, 0.30, FeatureCategory.USER),
            Feature("starting_weight", weighed[0].body_weight, 0.10, FeatureCategory.USER),
            Feature("training_volume", workout_frequency(workouts), 0.20, FeatureCategory.PERFORMANCE),
            Feature("consistency_score", min(1.0, logged_days / span_days), 0.20, FeatureCategory.TEMPORAL),
        ]
        if target_weight is not None:
            features.append(Feature("target_weight", target_weight, 0.20, FeatureCategory.USER))
        return features

    def _strength_projection(self, features: Sequence[Feature], one_rep_max: float) -> Dict[int, float]:
        if one_rep_max <= 0:
            return {}
        weekly = weekly_strength_rate(features)
        return {weeks: one_rep_max + project_gain(one_rep_max, weekly, weeks) for weeks in PROJECTION_WEEKS}

    def _volume_forecast(self, workouts: Sequence[WorkoutSession], exercise_id: Optional[str]) -> List[float]:
        relevant = [w for w in workouts if not exercise_id or w.has_exercise(exercise_id)]
        volumes = [w.volume for w in reversed(newest_first_workouts(relevant))]
        return [max(0.0, v) for v in exponential_smoothing(volumes, periods=FORECAST_SESSIONS)]

    def _recommendations(
        self,
        strength: Prediction,
        volume: Prediction,
        weight_loss: Optional[Prediction],
        score: float
    ) -> List[str]:
        recommendations = []

        if strength.confidence < 0.6:
            recommendations.append("Increase training consistency to improve strength prediction accuracy")
        if strength.contribution("training_age") < 0.01:
            recommendations.append("Consider periodization or exercise variation to break through strength plateaus")
        if volume.contribution("readiness_score") < 0:
            recommendations.append("Focus on recovery before increasing training volume")
        if weight_loss and weight_loss.contribution("consistency_score") < 0.8:
            recommendations.append("Improve consistency with nutrition and training for better weight loss results")
        if score < config.LOW_READINESS_THRESHOLD:
            recommendations.append("Prioritize sleep and stress management to optimize training adaptations")

        return recommendations[:3]

    @staticmethod
    def default_report() -> ProgressReport:
        return ProgressReport(readiness_score=config.DEFAULT_READINESS, confidence=0.3)
