"""Feature extraction from wellness metrics and workout history.

Turns raw records into named, weighted feature vectors. An empty result
means "insufficient data" and callers fall back to predictor defaults.
"""

import math
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from ..config import config
from ..models import (
    DailyMetric,
    Feature,
    FeatureCategory,
    WorkoutSession,
    newest_first_metrics,
    newest_first_workouts,
)
from .statistics import linear_regression, standard_deviation

# Features that make up the composite readiness score (all on a 0-10 scale)
READINESS_SCORE_FEATURES = ("sleep_current", "energy_current", "soreness_current", "stress_current")


def feature_map(features: Iterable[Feature]) -> Dict[str, float]:
    """Name -> value lookup. Later duplicates win."""
    return {f.name: f.value for f in features}


def bounded_trend(values: Sequence[float]) -> float:
    """Regression slope damped by confidence and squashed into [-1, 1]."""
    regression = linear_regression(range(len(values)), values)
    return math.tanh(regression.slope * regression.confidence)


def extract_readiness_features(metrics: Sequence[DailyMetric]) -> List[Feature]:
    """Build readiness features from the most recent daily metrics.

    Args:
        metrics: Daily metrics in any order

    Returns:
        Current-state features, plus trend features when at least 3 of the
        last 7 days exist and variability features when at least 5 exist.
    """
    if not metrics:
        return []

    ordered = newest_first_metrics(metrics)
    latest = ordered[0]

    features = [
        Feature("sleep_current", latest.sleep, 0.35, FeatureCategory.READINESS),
        Feature("energy_current", latest.energy, 0.25, FeatureCategory.READINESS),
        Feature("soreness_current", 10 - latest.soreness, 0.20, FeatureCategory.READINESS),
        Feature("stress_current", 10 - latest.stress, 0.15, FeatureCategory.READINESS),
    ]
    if latest.hrv is not None:
        features.append(Feature("hrv_current", latest.hrv, 0.05, FeatureCategory.READINESS))

    recent = ordered[:config.READINESS_TREND_WINDOW]
    chronological = list(reversed(recent))
    sleep_values = [m.sleep for m in chronological]
    energy_values = [m.energy for m in chronological]

    if len(recent) >= 3:
        features.append(Feature("sleep_trend", bounded_trend(sleep_values), 0.15, FeatureCategory.TEMPORAL))
        features.append(Feature("energy_trend", bounded_trend(energy_values), 0.10, FeatureCategory.TEMPORAL))

    if len(recent) >= 5:
        features.append(
            Feature("sleep_variability", standard_deviation(sleep_values), 0.08, FeatureCategory.TEMPORAL)
        )
        features.append(
            Feature("energy_variability", standard_deviation(energy_values), 0.06, FeatureCategory.TEMPORAL)
        )

    # Monday = 0
    features.append(Feature("day_of_week", latest.date.weekday(), 0.05, FeatureCategory.TEMPORAL))
    return features


def readiness_score(features: Iterable[Feature], default: Optional[float] = None) -> float:
    """Weighted mean of the core readiness features scaled to 0-100."""
    core = [f for f in features if f.name in READINESS_SCORE_FEATURES]
    total_weight = sum(f.importance for f in core)
    if total_weight <= 0:
        return config.DEFAULT_READINESS if default is None else default
    return sum(f.value * f.importance for f in core) / total_weight * 10


def workout_frequency(workouts: Sequence[WorkoutSession]) -> float:
    """Sessions per week between the earliest and latest session."""
    if len(workouts) < 2:
        return 0.0
    starts = sorted(w.started_at for w in workouts)
    weeks = (starts[-1] - starts[0]).total_seconds() / (7 * 24 * 3600)
    return len(workouts) / weeks if weeks > 0 else 0.0


def average_recovery_hours(workouts: Sequence[WorkoutSession]) -> float:
    """Mean gap in hours between consecutive sessions."""
    if len(workouts) < 2:
        return 0.0
    starts = sorted(w.started_at for w in workouts)
    gaps = [(b - a).total_seconds() / 3600 for a, b in zip(starts, starts[1:])]
    return float(np.mean(gaps))


def training_age_years(workouts: Sequence[WorkoutSession]) -> float:
    """Rough training age: one year per 52 logged sessions, capped."""
    return min(config.MAX_TRAINING_AGE_YEARS, len(workouts) / 52)


def estimate_one_rep_max(workouts: Sequence[WorkoutSession], exercise_id: Optional[str] = None) -> float:
    """Best Epley 1RM estimate across the recent sessions, 0 if no loaded sets."""
    best = 0.0
    for workout in newest_first_workouts(workouts)[:config.RECENT_SESSION_WINDOW]:
        for exercise in workout.exercises:
            if exercise_id and exercise.id != exercise_id:
                continue
            for s in exercise.sets:
                if s.weight and s.reps:
                    best = max(best, s.weight * (1 + s.reps / 30))
    return best


def extract_performance_features(
    workouts: Sequence[WorkoutSession],
    exercise_id: Optional[str] = None
) -> List[Feature]:
    """Build performance features from workout history.

    Args:
        workouts: Workout sessions in any order
        exercise_id: Restrict to sessions containing this exercise

    Returns:
        Volume, effort, frequency and recovery features; empty when there is
        no relevant history.
    """
    relevant = [w for w in workouts if not exercise_id or w.has_exercise(exercise_id)]
    if not relevant:
        return []

    recent = newest_first_workouts(relevant)[:config.RECENT_SESSION_WINDOW]
    volumes = [w.volume for w in reversed(recent)]
    rpes = [rpe for w in recent for rpe in w.rpes]

    features = [
        Feature("avg_volume", float(np.mean(volumes)), 0.30, FeatureCategory.PERFORMANCE),
        Feature(
            "volume_trend",
            bounded_trend(volumes) if len(volumes) >= 3 else 0.0,
            0.25,
            FeatureCategory.TEMPORAL,
        ),
    ]
    if rpes:
        features.append(Feature("avg_rpe", float(np.mean(rpes)), 0.20, FeatureCategory.PERFORMANCE))

    features.append(Feature("workout_frequency", workout_frequency(relevant), 0.15, FeatureCategory.TEMPORAL))
    features.append(Feature("avg_recovery_time", average_recovery_hours(relevant), 0.10, FeatureCategory.TEMPORAL))
    return features
