"""Optimal training window prediction.

Infers a chronotype from energy and recovery patterns and from the hours
workouts usually start, scores every hour of the day, and combines the
circadian peak with current readiness into primary, secondary and avoid
windows. Days are numbered like ``date.weekday()`` (Monday = 0).
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..config import config
from ..models import (
    DailyMetric,
    Feature,
    FeatureCategory,
    Prediction,
    WorkoutSession,
    newest_first_metrics,
)
from .predictors import PredictorKind, get_predictor, hourly_optimality
from .statistics import linear_regression, standard_deviation

logger = logging.getLogger(__name__)

DAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# Early-week sessions follow weekend recovery
BEST_TRAINING_DAY = 1
SECONDARY_DAY_OFFSET = 2
MIN_WINDOW_SEPARATION = 4       # hours
SECONDARY_SCORE_FACTOR = 0.8
DAY_WINDOW_MIN_SCORE = 70
AVOID_WINDOW_SCORE = 20
MIN_PATTERN_DAYS = 7

MORNING_HOURS = range(6, 11)
EVENING_HOURS = range(17, 22)

DEFAULT_TIMING_PREFERENCES = {
    6: 30, 7: 50, 8: 70, 9: 80, 10: 85, 11: 80,
    12: 60, 13: 50, 14: 60, 15: 70, 16: 75, 17: 85,
    18: 80, 19: 70, 20: 50, 21: 40, 22: 30,
}

# (chronotype, hours, preference score); hours not listed fall back per chronotype
TIMING_PREFERENCE_BANDS = {
    "morning": ((range(6, 11), 85), (range(11, 14), 70), (range(17, 20), 60)),
    "evening": ((range(17, 21), 85), (range(14, 17), 70), (range(10, 13), 60)),
    "neutral": ((range(9, 12), 80), (range(17, 20), 80), (range(14, 17), 65)),
}
TIMING_PREFERENCE_FLOOR = {"morning": 30, "evening": 30, "neutral": 40}


@dataclass(frozen=True)
class CircadianProfile:
    chronotype: str = "neutral"                 # morning, evening or neutral
    average_bedtime: int = 22
    average_wakeup: int = 6
    optimal_sleep_duration: float = 8.0
    sleep_consistency: float = 0.8
    morning_energy: float = 7.0
    afternoon_energy: float = 7.0
    evening_energy: float = 6.0
    energy_variability: float = 1.5
    best_performance_times: List[int] = field(default_factory=lambda: [9, 17])
    worst_performance_times: List[int] = field(default_factory=lambda: [6, 22])
    timing_preferences: Dict[int, float] = field(default_factory=lambda: dict(DEFAULT_TIMING_PREFERENCES))


@dataclass(frozen=True)
class TrainingWindow:
    time_of_day: int                # 0-23
    day_of_week: Optional[int]      # 0-6, Monday = 0; None for any day
    optimality_score: float         # 0-100
    confidence: float
    duration: int                   # minutes
    reasoning: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PersonalizedFactors:
    chronotype: str = "neutral"
    bedtime: int = 22
    wakeup: int = 6
    peak_performance_time: int = 18
    recovery_pattern: str = "moderate"  # fast, moderate or slow


@dataclass(frozen=True)
class TrainingWindowsReport:
    primary: TrainingWindow
    secondary: Optional[TrainingWindow] = None
    avoid: List[TrainingWindow] = field(default_factory=list)
    weekly_pattern: Dict[str, List[TrainingWindow]] = field(default_factory=dict)
    hourly_scores: List[float] = field(default_factory=list)
    personalized_factors: PersonalizedFactors = field(default_factory=PersonalizedFactors)
    timing_advice: str = "moderate_intensity"


def optimal_duration(score: float) -> int:
    """Recommended session length in minutes for a window score."""
    if score >= 85:
        return 90
    if score >= 75:
        return 75
    if score >= 65:
        return 60
    return 45


def timing_advice(readiness: float, sleep_debt: float, stress: float) -> str:
    """What kind of session the current readiness supports."""
    if sleep_debt > 2:
        return "prioritize_sleep"
    if stress > 7:
        return "light_activity_only"
    if readiness < 50:
        return "active_recovery"
    if readiness > 80:
        return "high_intensity_ok"
    return "moderate_intensity"


def timing_preferences(chronotype: str) -> Dict[int, float]:
    """Preference score (0-100) for starting a workout at each hour."""
    preferences = {}
    for hour in range(24):
        preferences[hour] = TIMING_PREFERENCE_FLOOR[chronotype]
        for hours, score in TIMING_PREFERENCE_BANDS[chronotype]:
            if hour in hours:
                preferences[hour] = score
                break
    return preferences


def window_reasoning(hour: int, chronotype: str, score: float) -> List[str]:
    reasoning = []
    if score >= 85:
        reasoning.append("Peak performance window for your chronotype")
    if 6 <= hour <= 10 and chronotype == "morning":
        reasoning.append("Optimal morning window for early chronotypes")
    if 17 <= hour <= 20 and chronotype == "evening":
        reasoning.append("Optimal evening window for late chronotypes")
    if 9 <= hour <= 11:
        reasoning.append("Good cortisol and body temperature timing")
    if 17 <= hour <= 19:
        reasoning.append("Peak body temperature and coordination")
    return reasoning


class TrainingWindowAnalyzer:
    """Predicts when in the day and week a user trains best."""

    def __init__(self):
        self.circadian_predictor = get_predictor(PredictorKind.CIRCADIAN_RHYTHM)
        self.readiness_predictor = get_predictor(PredictorKind.READINESS_WINDOW)
        self.logger = logging.getLogger(__name__)

    def analyze(
        self,
        metrics: Sequence[DailyMetric],
        workouts: Sequence[WorkoutSession] = ()
    ) -> TrainingWindowsReport:
        """Predict optimal training windows.

        Args:
            metrics: Daily metrics in any order
            workouts: Workout history, used for chronotype inference

        Returns:
            TrainingWindowsReport; the default report when there are no metrics
        """
        if not metrics:
            self.logger.debug("No daily metrics, using default training windows")
            return self.default_report()

        profile = self.build_circadian_profile(metrics, workouts)
        readiness_features = self.extract_readiness_features(metrics)

        circadian = self.circadian_predictor.predict(self.extract_circadian_features(profile))
        readiness = self.readiness_predictor.predict(readiness_features)

        primary = self._primary_window(circadian, readiness, profile)
        values = {f.name: f.value for f in readiness_features}

        return TrainingWindowsReport(
            primary=primary,
            secondary=self._secondary_window(profile, primary),
            avoid=self._avoid_windows(profile),
            weekly_pattern=self._weekly_pattern(profile),
            hourly_scores=hourly_optimality(
                profile.chronotype, profile.morning_energy, profile.afternoon_energy, profile.evening_energy
            ),
            personalized_factors=PersonalizedFactors(
                chronotype=profile.chronotype,
                bedtime=profile.average_bedtime,
                wakeup=profile.average_wakeup,
                peak_performance_time=primary.time_of_day,
                recovery_pattern=self.recovery_pattern(metrics),
            ),
            timing_advice=timing_advice(
                values["current_readiness"], values["sleep_debt"], values["stress_level"]
            ),
        )

    def build_circadian_profile(
        self,
        metrics: Sequence[DailyMetric],
        workouts: Sequence[WorkoutSession] = ()
    ) -> CircadianProfile:
        if not metrics:
            return CircadianProfile()

        slept = [m.sleep for m in metrics if m.sleep > 0]
        energies = [m.energy for m in metrics]
        average_energy = float(np.mean(energies))
        chronotype = self.infer_chronotype(metrics, workouts)

        return CircadianProfile(
            chronotype=chronotype,
            optimal_sleep_duration=float(np.mean(slept)) if slept else config.OPTIMAL_SLEEP_HOURS,
            morning_energy=average_energy * (1.2 if chronotype == "morning" else 0.8),
            afternoon_energy=average_energy,
            evening_energy=average_energy * (1.2 if chronotype == "evening" else 0.8),
            energy_variability=standard_deviation(energies),
            best_performance_times=[7, 8, 9] if chronotype == "morning" else [17, 18, 19],
            worst_performance_times=[20, 21, 22] if chronotype == "morning" else [6, 7, 8],
            timing_preferences=timing_preferences(chronotype),
        )

    def infer_chronotype(
        self,
        metrics: Sequence[DailyMetric],
        workouts: Sequence[WorkoutSession] = ()
    ) -> str:
        """Classify morning, evening or neutral from recovery and workout start hours."""
        if len(metrics) < MIN_PATTERN_DAYS:
            return "neutral"

        average_energy = float(np.mean([m.energy for m in metrics]))
        average_soreness = float(np.mean([m.soreness for m in metrics]))
        if average_energy > 7.5 and average_soreness < 3:
            return "morning"

        morning = sum(1 for w in workouts if w.started_at.hour in MORNING_HOURS)
        evening = sum(1 for w in workouts if w.started_at.hour in EVENING_HOURS)
        if morning > evening * 1.5:
            return "morning"
        if evening > morning * 1.5:
            return "evening"
        return "neutral"

    def extract_circadian_features(self, profile: CircadianProfile) -> List[Feature]:
        return [
            Feature("morning_energy", profile.morning_energy, 0.30, FeatureCategory.READINESS),
            Feature("afternoon_energy", profile.afternoon_energy, 0.25, FeatureCategory.READINESS),
            Feature("evening_energy", profile.evening_energy, 0.25, FeatureCategory.READINESS),
            Feature("sleep_timing_consistency", profile.sleep_consistency, 0.20, FeatureCategory.TEMPORAL),
        ]

    def extract_readiness_features(self, metrics: Sequence[DailyMetric]) -> List[Feature]:
        if not metrics:
            return []

        ordered = newest_first_metrics(metrics)
        latest = ordered[0]
        scores = [m.readiness_score for m in reversed(ordered[:config.READINESS_TREND_WINDOW])]

        trend = 0.0
        if len(scores) >= 3:
            regression = linear_regression(range(len(scores)), scores)
            trend = regression.slope * regression.confidence

        return [
            Feature("current_readiness", latest.readiness_score, 0.35, FeatureCategory.READINESS),
            Feature("readiness_trend", trend, 0.25, FeatureCategory.TEMPORAL),
            Feature("sleep_debt", max(0.0, config.OPTIMAL_SLEEP_HOURS - latest.sleep), 0.25,
                    FeatureCategory.READINESS),
            Feature("stress_level", latest.stress, 0.15, FeatureCategory.READINESS),
        ]

    def recovery_pattern(self, metrics: Sequence[DailyMetric]) -> str:
        if len(metrics) < MIN_PATTERN_DAYS:
            return "moderate"

        soreness = float(np.mean([m.soreness for m in metrics]))
        sleep = float(np.mean([m.sleep for m in metrics]))
        if soreness <= 3 and sleep >= 7.5:
            return "fast"
        if soreness >= 6 or sleep <= 6:
            return "slow"
        return "moderate"

    def _primary_window(
        self,
        circadian: Prediction,
        readiness: Prediction,
        profile: CircadianProfile
    ) -> TrainingWindow:
        return TrainingWindow(
            time_of_day=int(round(circadian.value)),
            day_of_week=BEST_TRAINING_DAY,
            optimality_score=min(100.0, circadian.confidence * 90 + readiness.value * 0.1),
            confidence=(circadian.confidence + readiness.confidence) / 2,
            duration=optimal_duration(readiness.value),
            reasoning=[
                f"Optimal for {profile.chronotype} chronotype",
                "Aligned with your circadian rhythm",
                "Based on historical performance patterns",
            ],
        )

    def _secondary_window(self, profile: CircadianProfile, primary: TrainingWindow) -> Optional[TrainingWindow]:
        candidates = [
            hour for hour in profile.best_performance_times
            if abs(hour - primary.time_of_day) >= MIN_WINDOW_SEPARATION
        ]
        if not candidates:
            return None

        hour = candidates[0]
        score = profile.timing_preferences.get(hour, 60) * SECONDARY_SCORE_FACTOR
        return TrainingWindow(
            time_of_day=hour,
            day_of_week=(primary.day_of_week + SECONDARY_DAY_OFFSET) % 7,
            optimality_score=score,
            confidence=0.7,
            duration=optimal_duration(score),
            reasoning=[
                "Alternative training window",
                "Good backup option for scheduling flexibility",
            ],
        )

    def _avoid_windows(self, profile: CircadianProfile) -> List[TrainingWindow]:
        return [
            TrainingWindow(
                time_of_day=hour,
                day_of_week=None,
                optimality_score=AVOID_WINDOW_SCORE,
                confidence=0.8,
                duration=0,
                reasoning=[
                    "Low performance window for your chronotype",
                    "Risk of poor workout quality",
                    "Consider active recovery instead",
                ],
            )
            for hour in profile.worst_performance_times
        ]

    def _weekly_pattern(self, profile: CircadianProfile) -> Dict[str, List[TrainingWindow]]:
        pattern = {}
        for day, name in enumerate(DAY_NAMES):
            windows = []
            for hour in profile.best_performance_times:
                score = profile.timing_preferences.get(hour, 50)
                if score >= DAY_WINDOW_MIN_SCORE:
                    windows.append(TrainingWindow(
                        time_of_day=hour,
                        day_of_week=day,
                        optimality_score=score,
                        confidence=0.8,
                        duration=optimal_duration(score),
                        reasoning=window_reasoning(hour, profile.chronotype, score),
                    ))
            pattern[name] = sorted(windows, key=lambda w: w.optimality_score, reverse=True)
        return pattern

    @staticmethod
    def default_report() -> TrainingWindowsReport:
        return TrainingWindowsReport(
            primary=TrainingWindow(
                time_of_day=18,
                day_of_week=BEST_TRAINING_DAY,
                optimality_score=70,
                confidence=0.5,
                duration=60,
                reasoning=["Default evening window for general population"],
            ),
        )
