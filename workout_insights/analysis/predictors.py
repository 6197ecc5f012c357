"""Heuristic predictors for progress, injury risk, plateaus and workout planning.

Every predictor is a closed-form scoring function, not a trained model. The
set of predictors is fixed: ``PredictorKind`` enumerates them and
``PREDICTORS`` maps each kind to its declaration (expected features and a
nominal accuracy). ``Predictor.predict`` dispatches on the kind, so adding a
kind without a scorer fails at import time.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Sequence, Tuple

from ..config import config
from ..models import Feature, FeatureAttribution, Prediction
from .features import feature_map
from .statistics import clamp

logger = logging.getLogger(__name__)


class PredictorKind(Enum):
    """All available predictors."""
    STRENGTH_PROGRESS = "strength_progress"
    WEIGHT_LOSS = "weight_loss"
    VOLUME_PROGRESSION = "volume_progression"
    TRAINING_LOAD_RISK = "training_load_risk"
    READINESS_RISK = "readiness_risk"
    MOVEMENT_QUALITY_RISK = "movement_quality_risk"
    STRENGTH_PLATEAU = "strength_plateau"
    VOLUME_PLATEAU = "volume_plateau"
    EXERCISE_SELECTION = "exercise_selection"
    VOLUME_INTENSITY = "volume_intensity"
    CIRCADIAN_RHYTHM = "circadian_rhythm"
    READINESS_WINDOW = "readiness_window"


# Band tables: (bound, result) pairs checked in order.
# "below" tables match value < bound, "at_most" value <= bound,
# "at_least" value >= bound.
PROGRESSION_RATE_BY_TRAINING_AGE = ((0.5, 0.03), (2, 0.015), (5, 0.008))        # below, else 0.004
VOLUME_RATE_BY_TRAINING_AGE = ((0.5, 0.05), (2, 0.025), (5, 0.015))             # below, else 0.01
STRENGTH_READINESS_MULTIPLIER = ((80, 1.15), (70, 1.05), (60, 1.0), (50, 0.9))  # at_least, else 0.75
VOLUME_RPE_ADJUSTMENT = ((9, 0.8), (8, 0.9), (7, 1.0))                          # at_least, else 1.1

ACWR_RISK = ((1.3, 10), (1.5, 25), (2.0, 50))               # at_most above 0.8, else 80
ACWR_DETRAINING_BOUND = 0.8
ACWR_DETRAINING_RISK = 45
SLEEP_DEFICIT_RISK = ((0, 5), (1, 15), (2, 35), (3, 60))    # at_most, else 85
STRESS_RISK = ((3, 10), (5, 20), (7, 40), (8, 60))          # at_most, else 80
SORENESS_RISK = ((3, 10), (5, 25), (7, 45), (8, 65))        # at_most, else 85
ENERGY_RISK = ((8, 5), (6, 15), (4, 30), (2, 50))           # at_least, else 75
RPE_INCONSISTENCY_RISK = ((0.5, 10), (1.0, 25), (1.5, 45))  # at_most, else 70
FORM_BREAKDOWN_RISK = ((0.1, 10), (0.2, 30), (0.3, 55))     # at_most, else 80
PROGRESSION_SPEED_RISK = ((0.02, 10), (0.04, 15), (0.06, 35))  # at_most, else 60

BASE_VOLUME_BY_TRAINING_AGE = ((0.5, 800), (2, 1200), (5, 1600))                       # below, else 2000
VOLUME_READINESS_MULTIPLIER = ((85, 1.15), (75, 1.05), (65, 1.0), (55, 0.9), (45, 0.8))  # at_least, else 0.7
RECOVERY_MULTIPLIER = ((0.9, 1.1), (0.8, 1.0), (0.7, 0.95), (0.6, 0.85))                 # at_least, else 0.75


def _below(value: float, table: Tuple[Tuple[float, float], ...], otherwise: float) -> float:
    for bound, result in table:
        if value < bound:
            return result
    return otherwise


def _at_most(value: float, table: Tuple[Tuple[float, float], ...], otherwise: float) -> float:
    for bound, result in table:
        if value <= bound:
            return result
    return otherwise


def _at_least(value: float, table: Tuple[Tuple[float, float], ...], otherwise: float) -> float:
    for bound, result in table:
        if value >= bound:
            return result
    return otherwise


def expected_strength_rate(training_age: float) -> float:
    """Expected weekly strength gain fraction for a training age in years."""
    return _below(training_age, PROGRESSION_RATE_BY_TRAINING_AGE, 0.004)


def acwr_risk(acwr: float) -> float:
    """Injury risk (0-100) for an acute:chronic workload ratio."""
    if acwr < ACWR_DETRAINING_BOUND:
        return ACWR_DETRAINING_RISK
    return _at_most(acwr, ACWR_RISK, 80)


def _factors(*rows: Tuple[str, float, float]) -> List[FeatureAttribution]:
    return [FeatureAttribution(feature, contribution, importance) for feature, contribution, importance in rows]


@dataclass(frozen=True)
class Predictor:
    """Declaration of one predictor variant."""
    kind: PredictorKind
    name: str
    accuracy: float
    expected_features: Tuple[str, ...]

    def confidence(self, features: Sequence[Feature]) -> float:
        """Confidence from feature completeness and non-zero quality, capped at 0.9."""
        if not features:
            return 0.0
        completeness = sum(f.importance for f in features) / len(self.expected_features)
        quality = sum(1 for f in features if f.value != 0) / len(features)
        return min(1.0, completeness * quality * 0.9)

    def predict(self, features: Sequence[Feature]) -> Prediction:
        """Score a feature vector.

        Args:
            features: Named features; missing ones fall back to defaults

        Returns:
            Prediction with value, confidence and per-feature attribution
        """
        scorer = _SCORERS[self.kind]
        return scorer(feature_map(features), self.confidence(features))


# Progress

def _strength_multipliers(values: Dict[str, float]) -> Tuple[float, float, float, float]:
    training_age = values.get("training_age", 1)
    volume_trend = values.get("volume_trend", 0)
    avg_rpe = values.get("avg_rpe", 7)
    readiness = values.get("readiness_score", 70)
    # A zero frequency means no data
    frequency = values.get("frequency") or 2

    base_rate = expected_strength_rate(training_age)

    if 2 <= frequency <= 3:
        frequency_factor = 1.1
    elif frequency == 1:
        frequency_factor = 0.9
    elif frequency > 3:
        frequency_factor = 0.95
    else:
        frequency_factor = 1.0
    volume_multiplier = clamp((1 + volume_trend * 0.2) * frequency_factor, 0.7, 1.3)

    if 7 <= avg_rpe <= 9:
        intensity_multiplier = 1.1
    elif 6 <= avg_rpe <= 6.5:
        intensity_multiplier = 1.0
    elif avg_rpe < 6:
        intensity_multiplier = 0.85
    elif avg_rpe > 9.5:
        intensity_multiplier = 0.8
    else:
        intensity_multiplier = 0.95

    readiness_multiplier = _at_least(readiness, STRENGTH_READINESS_MULTIPLIER, 0.75)
    return base_rate, volume_multiplier, intensity_multiplier, readiness_multiplier


def weekly_strength_rate(features: Sequence[Feature]) -> float:
    """Expected weekly 1RM gain fraction before any plateau discount."""
    product = 1.0
    for multiplier in _strength_multipliers(feature_map(features)):
        product *= multiplier
    return product


def project_gain(current: float, weekly_rate: float, weeks: int) -> float:
    """Compounded gain after ``weeks`` weeks at ``weekly_rate``."""
    return current * ((1 + weekly_rate) ** weeks - 1)


def _strength_progress(values: Dict[str, float], confidence: float) -> Prediction:
    one_rep_max = values.get("current_1rm", 100)
    volume_trend = values.get("volume_trend", 0)
    frequency = values.get("frequency") or 2

    base_rate, volume_multiplier, intensity_multiplier, readiness_multiplier = _strength_multipliers(values)
    weekly = base_rate * volume_multiplier * intensity_multiplier * readiness_multiplier
    three_month_gain = project_gain(one_rep_max, weekly, 12)

    # Flat volume with slow weekly gains discounts the projection
    if volume_trend <= 0 and weekly < 0.005:
        plateau_factor = 0.6
    elif volume_trend <= 0.1 and weekly < 0.01:
        plateau_factor = 0.8
    else:
        plateau_factor = 1.0
    gain = three_month_gain * plateau_factor

    return Prediction(
        value=one_rep_max + gain,
        confidence=confidence,
        variance=gain * 0.15,
        factors=_factors(
            ("training_age", base_rate, 0.30),
            ("volume_trend", volume_multiplier - 1, 0.25),
            ("readiness_score", readiness_multiplier - 1, 0.20),
            ("avg_rpe", intensity_multiplier - 1, 0.15),
            ("frequency", frequency / 3, 0.10),
        ),
        methodology="Training-age progression model with volume, intensity and readiness multipliers",
        timeframe=90,
    )


def _weight_loss(values: Dict[str, float], confidence: float) -> Prediction:
    current = values.get("current_weight", 70)
    target = values.get("target_weight")
    deficit = values.get("caloric_deficit", 500)
    activity = values.get("activity_level", 1.5)
    training_volume = values.get("training_volume", 3)
    consistency = values.get("consistency_score", 0.8)

    # 3500 kcal per pound
    theoretical_weekly = deficit * 7 / 3500 * 0.453592

    deficit_share = deficit / (current * 22) if current > 0 else 0
    if deficit_share > 0.25:
        metabolic = 0.7
    elif deficit_share > 0.15:
        metabolic = 0.85
    else:
        metabolic = 0.95

    training_factor = _at_least(training_volume, ((3, 1.1), (2, 1.05), (1, 1.0)), 0.9)
    # Without a goal there is no distance-to-target slowdown
    if target is None:
        plateau_factor = 1.0
    else:
        plateau_factor = _at_most(current - target, ((2, 0.6), (5, 0.8), (10, 0.9)), 1.0)

    weekly = theoretical_weekly * metabolic * training_factor * consistency * plateau_factor
    three_month_loss = weekly * 12 * 0.8
    predicted = current - three_month_loss
    if target is not None:
        predicted = min(current, max(target, predicted))

    return Prediction(
        value=predicted,
        confidence=confidence,
        variance=three_month_loss * 0.2,
        factors=_factors(
            ("caloric_deficit", deficit / 500, 0.35),
            ("consistency_score", consistency, 0.25),
            ("training_volume", training_volume / 4, 0.20),
            ("metabolic_adaptation", metabolic, 0.15),
            ("activity_level", activity / 2, 0.05),
        ),
        methodology="Caloric deficit model with metabolic adaptation and training effects",
        timeframe=90,
    )


def _volume_progression(values: Dict[str, float], confidence: float) -> Prediction:
    current = values.get("current_volume", 0)
    volume_trend = values.get("volume_trend", 0)
    readiness = values.get("readiness_score", 70)
    training_age = values.get("training_age", 1)
    intensity_load = values.get("intensity_load", 7)

    rate = _below(training_age, VOLUME_RATE_BY_TRAINING_AGE, 0.01)
    readiness_multiplier = max(0.5, readiness / 70)
    intensity_adjustment = _at_least(intensity_load, VOLUME_RPE_ADJUSTMENT, 1.1)

    weekly_increase = current * rate * readiness_multiplier * intensity_adjustment
    predicted = current + weekly_increase * 12

    return Prediction(
        value=predicted,
        confidence=confidence,
        variance=predicted * 0.25,
        factors=_factors(
            ("training_age", rate, 0.30),
            ("readiness_score", readiness_multiplier - 1, 0.25),
            ("current_volume", current / 1000, 0.20),
            ("volume_trend", volume_trend, 0.15),
            ("intensity_load", intensity_adjustment - 1, 0.10),
        ),
        methodology="Progressive overload model with recovery and adaptation factors",
        timeframe=90,
    )


# Injury risk

def _training_load_risk(values: Dict[str, float], confidence: float) -> Prediction:
    acute = values.get("acute_load", 0)
    chronic = values.get("chronic_load", 0)
    acwr = acute / chronic if chronic > 0 else 1.0
    load_spike = values.get("load_spike", 0)
    intensity_spike = values.get("intensity_spike", 0)

    spike_risk = max(
        (load_spike - config.LOAD_SPIKE_TOLERANCE) * 100,
        (intensity_spike - config.INTENSITY_SPIKE_TOLERANCE) * 100,
        0,
    )
    risk = min(100.0, acwr_risk(acwr) + spike_risk)

    return Prediction(
        value=risk,
        confidence=confidence,
        variance=risk * 0.15,
        factors=_factors(
            ("acwr", (acwr - 1) * 50, 0.40),
            ("load_spike", load_spike * 10, 0.30),
            ("intensity_spike", intensity_spike * 10, 0.20),
            ("acute_load", acute / 1000, 0.10),
        ),
        methodology="Acute:Chronic Workload Ratio with load spike detection",
        timeframe=7,
    )


def _readiness_risk(values: Dict[str, float], confidence: float) -> Prediction:
    sleep_risk = _at_most(values.get("sleep_deficit", 0), SLEEP_DEFICIT_RISK, 85)
    stress_risk = _at_most(values.get("stress_level", 3), STRESS_RISK, 80)
    soreness_risk = _at_most(values.get("soreness_level", 3), SORENESS_RISK, 85)
    energy_risk = _at_least(values.get("energy_level", 7), ENERGY_RISK, 75)

    risk = sleep_risk * 0.35 + stress_risk * 0.25 + soreness_risk * 0.25 + energy_risk * 0.15

    return Prediction(
        value=risk,
        confidence=confidence,
        variance=risk * 0.20,
        factors=_factors(
            ("sleep_deficit", sleep_risk, 0.35),
            ("stress_level", stress_risk, 0.25),
            ("soreness_level", soreness_risk, 0.25),
            ("energy_level", energy_risk, 0.15),
        ),
        methodology="Multi-factor readiness assessment with weighted risk scoring",
        timeframe=3,
    )


def _movement_quality_risk(values: Dict[str, float], confidence: float) -> Prediction:
    inconsistency_risk = _at_most(values.get("rpe_inconsistency", 0), RPE_INCONSISTENCY_RISK, 70)
    form_risk = _at_most(values.get("form_breakdown_frequency", 0), FORM_BREAKDOWN_RISK, 80)
    progression_risk = _at_most(values.get("weight_progression_rate", 0.01), PROGRESSION_SPEED_RISK, 60)

    risk = max(inconsistency_risk, form_risk, progression_risk)

    return Prediction(
        value=risk,
        confidence=confidence,
        variance=risk * 0.25,
        factors=_factors(
            ("rpe_inconsistency", inconsistency_risk, 0.40),
            ("form_breakdown_frequency", form_risk, 0.35),
            ("weight_progression_rate", progression_risk, 0.25),
        ),
        methodology="Movement pattern analysis with form breakdown detection",
        timeframe=14,
    )


# Plateaus

def _strength_plateau(values: Dict[str, float], confidence: float) -> Prediction:
    progress_rate = values.get("progress_rate", 0)
    stagnation_days = values.get("stagnation_period", 0)
    volume_trend = values.get("volume_trend", 0)
    training_age = values.get("training_age", 1)
    readiness_trend = values.get("readiness_trend", 0)

    minimum = config.MIN_WEEKLY_PROGRESS
    stagnation = 0.0
    if progress_rate < minimum:
        stagnation += 0.6
    elif progress_rate < minimum * 2:
        stagnation += 0.3
    if stagnation_days >= 28:
        stagnation += 0.4
    elif stagnation_days >= 14:
        stagnation += 0.2
    stagnation = min(1.0, stagnation)

    expected = expected_strength_rate(training_age)
    age_deficit = clamp((expected - progress_rate) / expected)

    if volume_trend <= 0 and progress_rate < 0.01:
        volume_score = 0.8
    elif volume_trend <= 0.1 and progress_rate < 0.015:
        volume_score = 0.5
    else:
        volume_score = 0.1

    if readiness_trend < -0.1:
        readiness_score = 0.7
    elif readiness_trend < 0:
        readiness_score = 0.4
    else:
        readiness_score = 0.1

    probability = stagnation * 0.40 + age_deficit * 0.25 + volume_score * 0.20 + readiness_score * 0.15

    return Prediction(
        value=probability * 100,
        confidence=confidence,
        variance=15,
        factors=_factors(
            ("stagnation_period", stagnation, 0.40),
            ("training_age", age_deficit, 0.25),
            ("volume_trend", volume_score, 0.20),
            ("readiness_trend", readiness_score, 0.15),
        ),
        methodology="Multi-factor plateau detection with training periodization analysis",
        timeframe=14,
    )


def _volume_plateau(values: Dict[str, float], confidence: float) -> Prediction:
    capacity = values.get("volume_capacity", 0.7)
    recovery_rate = values.get("recovery_rate", 0.8)
    fatigue = values.get("fatigue_accumulation", 0.3)
    overload_rate = values.get("progressive_overload_rate", 0.02)

    utilization = 0.7 if capacity > 0.85 else 0.4 if capacity > 0.75 else 0.1
    capacity_score = min(1.0, utilization + (0.3 if recovery_rate < 0.7 else 0))

    if fatigue > 0.7:
        fatigue_score = 0.8
    elif fatigue > 0.5:
        fatigue_score = 0.5
    elif fatigue > 0.3:
        fatigue_score = 0.2
    else:
        fatigue_score = 0.1

    overload_score = _below(overload_rate, ((0.01, 0.7), (0.02, 0.4)), 0.1)

    probability = capacity_score * 0.40 + fatigue_score * 0.35 + overload_score * 0.25

    return Prediction(
        value=probability * 100,
        confidence=confidence,
        variance=12,
        factors=_factors(
            ("volume_capacity", capacity_score, 0.40),
            ("fatigue_accumulation", fatigue_score, 0.35),
            ("progressive_overload_rate", overload_score, 0.25),
        ),
        methodology="Volume capacity analysis with fatigue and recovery modeling",
        timeframe=21,
    )


# Workout planning

def _exercise_selection(values: Dict[str, float], confidence: float) -> Prediction:
    muscle = values.get("muscle_group_priority", 0.5)
    equipment = values.get("equipment_availability", 1.0)
    experience = values.get("user_experience", 0.5)
    readiness = values.get("readiness_level", 0.7)
    variety = values.get("exercise_variety_score", 0.5)

    score = muscle * 0.30 + equipment * 0.25 + experience * 0.20 + readiness * 0.15 + variety * 0.10

    return Prediction(
        value=score * 100,
        confidence=confidence,
        variance=10,
        factors=_factors(
            ("muscle_group_priority", muscle, 0.30),
            ("equipment_availability", equipment, 0.25),
            ("user_experience", experience, 0.20),
            ("readiness_level", readiness, 0.15),
            ("exercise_variety_score", variety, 0.10),
        ),
        methodology="Multi-criteria exercise selection with user personalization",
        timeframe=1,
    )


def _volume_intensity(values: Dict[str, float], confidence: float) -> Prediction:
    readiness = values.get("readiness_score", 70)
    training_age = values.get("training_age", 1)
    recovery = values.get("recovery_capacity", 0.8)
    plateau_risk = values.get("plateau_risk", 0.3)

    base_volume = _below(training_age, BASE_VOLUME_BY_TRAINING_AGE, 2000) * (1 + (readiness - 70) / 100)
    readiness_multiplier = _at_least(readiness, VOLUME_READINESS_MULTIPLIER, 0.7)
    recovery_multiplier = _at_least(recovery, RECOVERY_MULTIPLIER, 0.75)
    plateau_multiplier = 1.15 if plateau_risk > 0.7 else 1.05 if plateau_risk > 0.5 else 1.0

    volume = base_volume * readiness_multiplier * recovery_multiplier * plateau_multiplier

    return Prediction(
        value=volume,
        confidence=confidence,
        variance=volume * 0.15,
        factors=_factors(
            ("readiness_score", readiness_multiplier - 1, 0.35),
            ("training_age", training_age / 3, 0.25),
            ("recovery_capacity", recovery_multiplier - 1, 0.20),
            ("plateau_risk", plateau_multiplier - 1, 0.20),
        ),
        methodology="Adaptive volume optimization with readiness and recovery modeling",
        timeframe=1,
    )


# Training windows

CHRONOTYPE_SCORES = {"morning": 0.8, "evening": 0.7, "neutral": 0.9}


def chronotype_for(morning_energy: float, evening_energy: float) -> str:
    """Classify a chronotype from the morning/evening energy gap."""
    if morning_energy - evening_energy >= 2:
        return "morning"
    if evening_energy - morning_energy >= 2:
        return "evening"
    return "neutral"


def hourly_optimality(chronotype: str, morning: float, afternoon: float, evening: float) -> List[float]:
    """Score each hour of the day (0-100) for training."""
    scores = [50.0] * 24

    if chronotype == "morning":
        for h in range(6, 11):
            scores[h] = 80 + (morning - 5) * 2
        for h in range(10, 13):
            scores[h] = 70 + (morning - 5) * 1.5
        for h in range(20, 24):
            scores[h] = 30 - (evening - 5)
    elif chronotype == "evening":
        for h in range(5, 10):
            scores[h] = 30 - (morning - 5)
        for h in range(14, 19):
            scores[h] = 70 + (afternoon - 5) * 1.5
        for h in range(18, 22):
            scores[h] = 80 + (evening - 5) * 2
    else:
        for h in range(9, 12):
            scores[h] = 75 + (morning - 5)
        for h in range(17, 20):
            scores[h] = 75 + (evening - 5)

    # Post-meal dips
    scores[8] = max(scores[8] - 10, 20)
    scores[13] = max(scores[13] - 15, 20)
    scores[20] = max(scores[20] - 10, 20)

    for h in range(0, 6):
        scores[h] = max(scores[h] - 30, 10)
    for h in range(22, 24):
        scores[h] = max(scores[h] - 20, 20)

    return [clamp(s, 0, 100) for s in scores]


def _circadian_rhythm(values: Dict[str, float], confidence: float) -> Prediction:
    morning = values.get("morning_energy", 7)
    afternoon = values.get("afternoon_energy", 7)
    evening = values.get("evening_energy", 6)
    consistency = values.get("sleep_timing_consistency", 0.8)

    chronotype = chronotype_for(morning, evening)
    scores = hourly_optimality(chronotype, morning, afternoon, evening)
    peak_hour = max(range(24), key=lambda h: scores[h])

    return Prediction(
        value=float(peak_hour),
        confidence=confidence * consistency,
        variance=2,
        factors=_factors(
            ("chronotype", CHRONOTYPE_SCORES[chronotype], 0.40),
            ("morning_energy", morning / 10, 0.25),
            ("afternoon_energy", afternoon / 10, 0.20),
            ("evening_energy", evening / 10, 0.15),
        ),
        methodology="Circadian rhythm analysis with energy pattern recognition",
        timeframe=1,
    )


def _readiness_window(values: Dict[str, float], confidence: float) -> Prediction:
    readiness = values.get("current_readiness", 70)
    trend = values.get("readiness_trend", 0)
    sleep_debt = values.get("sleep_debt", 0)
    stress = values.get("stress_level", 3)

    multiplier = readiness / 70
    if trend > 0.1:
        multiplier *= 1.1
    if trend < -0.1:
        multiplier *= 0.9
    multiplier = clamp(multiplier, 0.5, 1.5)

    stress_adjustment = _at_most(stress, ((4, 1.0), (6, 0.9), (8, 0.8)), 0.7)
    sleep_adjustment = _at_most(sleep_debt, ((0, 1.0), (1, 0.95), (2, 0.85)), 0.75)

    return Prediction(
        value=multiplier * stress_adjustment * sleep_adjustment * 100,
        confidence=confidence,
        variance=10,
        factors=_factors(
            ("current_readiness", readiness / 100, 0.35),
            ("readiness_trend", trend, 0.25),
            ("sleep_debt", -sleep_debt / 3, 0.25),
            ("stress_level", -(stress - 5) / 5, 0.15),
        ),
        methodology="Multi-factor readiness assessment with recovery forecasting",
        timeframe=1,
    )


_SCORERS: Dict[PredictorKind, Callable[[Dict[str, float], float], Prediction]] = {
    PredictorKind.STRENGTH_PROGRESS: _strength_progress,
    PredictorKind.WEIGHT_LOSS: _weight_loss,
    PredictorKind.VOLUME_PROGRESSION: _volume_progression,
    PredictorKind.TRAINING_LOAD_RISK: _training_load_risk,
    PredictorKind.READINESS_RISK: _readiness_risk,
    PredictorKind.MOVEMENT_QUALITY_RISK: _movement_quality_risk,
    PredictorKind.STRENGTH_PLATEAU: _strength_plateau,
    PredictorKind.VOLUME_PLATEAU: _volume_plateau,
    PredictorKind.EXERCISE_SELECTION: _exercise_selection,
    PredictorKind.VOLUME_INTENSITY: _volume_intensity,
    PredictorKind.CIRCADIAN_RHYTHM: _circadian_rhythm,
    PredictorKind.READINESS_WINDOW: _readiness_window,
}

PREDICTORS: Dict[PredictorKind, Predictor] = {
    PredictorKind.STRENGTH_PROGRESS: Predictor(
        PredictorKind.STRENGTH_PROGRESS, "StrengthProgressPredictor", 0.78,
        ("current_1rm", "avg_volume", "volume_trend", "frequency",
         "avg_rpe", "training_age", "readiness_score", "recovery_time"),
    ),
    PredictorKind.WEIGHT_LOSS: Predictor(
        PredictorKind.WEIGHT_LOSS, "WeightLossPredictor", 0.82,
        ("current_weight", "target_weight", "caloric_deficit", "activity_level",
         "metabolic_rate", "training_volume", "consistency_score", "starting_weight"),
    ),
    PredictorKind.VOLUME_PROGRESSION: Predictor(
        PredictorKind.VOLUME_PROGRESSION, "VolumeProgressionPredictor", 0.75,
        ("current_volume", "volume_trend", "readiness_score", "recovery_capacity",
         "training_age", "frequency", "intensity_load"),
    ),
    PredictorKind.TRAINING_LOAD_RISK: Predictor(
        PredictorKind.TRAINING_LOAD_RISK, "TrainingLoadRiskPredictor", 0.84,
        ("acute_load", "chronic_load", "acwr", "load_spike", "volume_trend",
         "intensity_spike", "frequency_change", "rpe_trend"),
    ),
    PredictorKind.READINESS_RISK: Predictor(
        PredictorKind.READINESS_RISK, "ReadinessRiskPredictor", 0.77,
        ("sleep_deficit", "stress_level", "soreness_level", "energy_level",
         "hrv_trend", "recovery_score", "readiness_trend"),
    ),
    PredictorKind.MOVEMENT_QUALITY_RISK: Predictor(
        PredictorKind.MOVEMENT_QUALITY_RISK, "MovementQualityRiskPredictor", 0.71,
        ("rpe_inconsistency", "form_breakdown_frequency", "weight_progression_rate",
         "range_of_motion", "compensation_patterns", "bilateral_asymmetry"),
    ),
    PredictorKind.STRENGTH_PLATEAU: Predictor(
        PredictorKind.STRENGTH_PLATEAU, "StrengthPlateauDetector", 0.87,
        ("progress_rate", "stagnation_period", "volume_trend", "intensity_trend",
         "training_age", "readiness_trend", "technique_consistency", "recovery_quality"),
    ),
    PredictorKind.VOLUME_PLATEAU: Predictor(
        PredictorKind.VOLUME_PLATEAU, "VolumePlateauDetector", 0.81,
        ("volume_capacity", "recovery_rate", "frequency_optimization", "intensity_distribution",
         "exercise_variation", "progressive_overload_rate", "fatigue_accumulation"),
    ),
    PredictorKind.EXERCISE_SELECTION: Predictor(
        PredictorKind.EXERCISE_SELECTION, "ExerciseSelectionScorer", 0.85,
        ("muscle_group_priority", "equipment_availability", "user_experience", "injury_history",
         "exercise_variety_score", "movement_pattern_balance", "readiness_level", "workout_phase"),
    ),
    PredictorKind.VOLUME_INTENSITY: Predictor(
        PredictorKind.VOLUME_INTENSITY, "VolumeIntensityOptimizer", 0.82,
        ("readiness_score", "training_age", "recent_volume", "recovery_capacity",
         "workout_frequency", "plateau_risk", "injury_risk", "goal_priority"),
    ),
    PredictorKind.CIRCADIAN_RHYTHM: Predictor(
        PredictorKind.CIRCADIAN_RHYTHM, "CircadianRhythmAnalyzer", 0.79,
        ("morning_energy", "afternoon_energy", "evening_energy", "sleep_timing_consistency",
         "workout_performance_by_hour", "recovery_rate", "sleep_quality_trend"),
    ),
    PredictorKind.READINESS_WINDOW: Predictor(
        PredictorKind.READINESS_WINDOW, "ReadinessWindowPredictor", 0.83,
        ("current_readiness", "readiness_trend", "sleep_debt", "stress_level",
         "recovery_time_needed", "last_workout_impact", "tomorrow_readiness_forecast"),
    ),
}

if set(_SCORERS) != set(PredictorKind) or set(PREDICTORS) != set(PredictorKind):
    raise RuntimeError("Every PredictorKind needs a scorer and a declaration")


def get_predictor(kind: PredictorKind) -> Predictor:
    return PREDICTORS[kind]


def predict(kind: PredictorKind, features: Sequence[Feature]) -> Prediction:
    """Run the predictor of the given kind on a feature vector."""
    return PREDICTORS[kind].predict(features)
