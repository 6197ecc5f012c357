"""Workout generation.

Builds a workout from the exercise catalog using current readiness,
plateau risk and injury risk:

1. Score every usable catalog exercise and pick a balanced subset
2. Size sets, reps, RPE and rest from the workout type and readiness
3. Add a warm-up matched to the selected muscle groups and a fixed cool-down
4. Run the adaptation rules (readiness, injury risk, equipment, plateau)
"""

import logging
import math
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .adaptations import AdaptationContext, apply_adaptations, routine_exercise
from .analysis.features import training_age_years
from .analysis.injury_risk import InjuryRiskAnalyzer
from .analysis.plateau import PlateauAnalyzer
from .analysis.predictors import PredictorKind, get_predictor
from .analysis.readiness import ReadinessAnalyzer
from .config import config
from .models import (
    DailyMetric,
    ExerciseAlternative,
    ExerciseCatalogEntry,
    Feature,
    FeatureCategory,
    FitnessLevel,
    GeneratedExercise,
    GeneratedWorkout,
    ProgressionPlan,
    WorkoutAdaptations,
    WorkoutMetadata,
    WorkoutRequest,
    WorkoutSession,
    WorkoutType,
    newest_first_workouts,
    reference_time,
)

logger = logging.getLogger(__name__)

EXPERIENCE_LEVELS = {"beginner": 0.3, "intermediate": 0.7, "advanced": 1.0}
RECOVERY_CAPACITY = 0.8
VARIETY_SCORE = 0.5
MIN_SETS = 2
MAX_SETS = 5
VOLUME_PER_SET = 1000
RECENT_VOLUME_SESSIONS = 5

NEXT_SESSION_PLAN = ProgressionPlan(
    type="weight",
    adjustment=2.5,
    condition="If all sets completed with good form",
    reasoning="Progressive overload through weight increase",
)
LONG_TERM_PLAN = ProgressionPlan(
    type="volume",
    adjustment=1,
    condition="After 4-6 weeks",
    reasoning="Increase training volume to drive adaptation",
)

GENERAL_MOBILITY = routine_exercise(
    "warmup_general_mobility", "General Mobility", "warmup", ["full_body"],
    "Light movement to increase heart rate: marching in place, gentle arm movements.",
    "30 seconds", 3, notes="Focus on gentle movement and breathing",
)

# muscle group -> (name, muscle groups, instructions)
WARMUP_BY_MUSCLE = {
    "chest": ("Arm Circles", ["shoulders", "chest"],
              "Stand with feet shoulder-width apart. Extend arms to sides and make small circles, "
              "gradually increasing size. Reverse direction."),
    "shoulders": ("Shoulder Rolls", ["shoulders"],
                  "Roll shoulders backwards in large circles. Focus on full range of motion."),
    "back": ("Cat-Cow Stretch", ["back", "core"],
             "On hands and knees, alternate between arching and rounding your back."),
    "arms": ("Arm Swings", ["arms", "shoulders"],
             "Swing arms across body and back out to sides in controlled motion."),
    "legs": ("Leg Swings", ["legs", "hips"],
             "Hold wall for support. Swing leg forward and back, then side to side."),
    "glutes": ("Glute Bridges", ["glutes", "core"],
               "Lie on back, knees bent. Lift hips up, squeezing glutes. Lower with control."),
    "quadriceps": ("Bodyweight Squats", ["quadriceps", "glutes"],
                   "Stand with feet shoulder-width apart. Lower into squat position and return to standing."),
    "hamstrings": ("Leg Swings", ["hamstrings", "hips"],
                   "Hold wall for support. Swing leg forward and back in controlled motion."),
}

# Substring fallbacks for muscle group names not in the map above
WARMUP_FALLBACKS = (
    (("chest", "pectorals"), "chest"),
    (("back", "lats"), "back"),
    (("shoulder", "deltoid"), "shoulders"),
    (("leg", "quad", "hamstring"), "legs"),
    (("glute",), "glutes"),
)

COOLDOWN = (
    routine_exercise(
        "cooldown_walking_or_light_movement", "Walking or Light Movement", "cooldown", ["full_body"],
        "Walk at a comfortable pace to gradually lower heart rate and promote blood flow.",
        "2-3 minutes", 2, notes="Allow heart rate to return to resting levels",
    ),
    routine_exercise(
        "cooldown_forward_fold_stretch", "Forward Fold Stretch", "cooldown", ["hamstrings", "back"],
        "Stand with feet hip-width apart. Hinge at hips and fold forward, letting arms hang. Hold for 30 seconds.",
        "30 seconds", 2, notes="Releases tension in hamstrings and lower back",
    ),
    routine_exercise(
        "cooldown_chest_doorway_stretch", "Chest Doorway Stretch", "cooldown", ["chest", "shoulders"],
        "Place forearm against doorway, step forward gently to stretch chest and shoulders.",
        "30 seconds each arm", 2, notes="Counteracts forward shoulder posture from training",
    ),
    routine_exercise(
        "cooldown_hip_flexor_stretch", "Hip Flexor Stretch", "cooldown", ["hip_flexors", "quadriceps"],
        "Step into lunge position, lower back knee toward ground, push hips forward gently.",
        "30 seconds each leg", 2, notes="Releases tight hip flexors from sitting and training",
    ),
    routine_exercise(
        "cooldown_spinal_twist", "Spinal Twist", "cooldown", ["back", "core"],
        "Sit with legs extended, cross one leg over, twist toward the bent knee. Hold and switch sides.",
        "30 seconds each side", 2, notes="Promotes spinal mobility and releases back tension",
    ),
)


def target_intensity(workout_type: WorkoutType, readiness: float) -> float:
    """Session intensity (4-10) from the type's base intensity shifted by readiness."""
    base = config.get_base_intensity(workout_type.value)
    return max(4.0, min(10.0, base + (readiness - 70) / 100))


def target_reps(workout_type: WorkoutType, intensity: float) -> str:
    if workout_type is WorkoutType.STRENGTH:
        return "3-5" if intensity > 8 else "5-8"
    if workout_type is WorkoutType.POWER:
        return "3-6"
    if workout_type is WorkoutType.ENDURANCE:
        return "12-20"
    return "8-12"


def target_rpe(intensity: float, readiness: float) -> float:
    return max(5.0, min(10.0, intensity + (readiness - 70) / 200))


def rest_time(workout_type: WorkoutType, intensity: float) -> int:
    """Rest between sets in seconds, scaled around intensity 7."""
    return int(round(config.get_base_rest(workout_type.value) * intensity / 7))


def experience_match(exercise: ExerciseCatalogEntry, fitness_level: FitnessLevel) -> float:
    """1.0 when exercise difficulty matches the user's level, lower the further apart."""
    user = EXPERIENCE_LEVELS.get(fitness_level.value, 0.5)
    required = EXPERIENCE_LEVELS.get(exercise.difficulty_level, 0.5)
    return 1 - abs(user - required)


def muscle_group_relevance(muscle_groups: Sequence[str], targets: Sequence[str]) -> float:
    if not targets:
        return 0.0
    return sum(1 for muscle in muscle_groups if muscle in targets) / len(targets)


def muscle_group_balance(exercises: Sequence[GeneratedExercise]) -> Dict[str, int]:
    """Planned sets per muscle group."""
    balance: Dict[str, int] = {}
    for ex in exercises:
        for muscle in ex.exercise.muscle_groups:
            balance[muscle] = balance.get(muscle, 0) + ex.target_sets
    return balance


def default_workout(request: WorkoutRequest, generated_at: Optional[datetime] = None) -> GeneratedWorkout:
    """Minimal workout returned when generation fails."""
    return GeneratedWorkout(
        id="default",
        name="Basic Workout",
        type=request.workout_type,
        estimated_duration=request.target_duration,
        target_intensity=6,
        exercises=[],
        warmup=[],
        cooldown=[],
        adaptations=WorkoutAdaptations(),
        confidence=0.3,
        reasoning=["Default workout due to system limitation"],
        metadata=WorkoutMetadata(
            total_volume=0,
            average_intensity=6,
            muscle_group_balance={},
            generated_at=generated_at or datetime.now(timezone.utc),
            algorithm_version=config.ALGORITHM_VERSION,
        ),
    )


class WorkoutGenerator:
    """Generates adapted workouts from the exercise catalog."""

    def __init__(
        self,
        readiness_analyzer: Optional[ReadinessAnalyzer] = None,
        plateau_analyzer: Optional[PlateauAnalyzer] = None,
        injury_risk_analyzer: Optional[InjuryRiskAnalyzer] = None
    ):
        self.readiness_analyzer = readiness_analyzer or ReadinessAnalyzer()
        self.plateau_analyzer = plateau_analyzer or PlateauAnalyzer()
        self.injury_risk_analyzer = injury_risk_analyzer or InjuryRiskAnalyzer()
        self.selection_scorer = get_predictor(PredictorKind.EXERCISE_SELECTION)
        self.volume_optimizer = get_predictor(PredictorKind.VOLUME_INTENSITY)
        self.logger = logging.getLogger(__name__)

    def generate(
        self,
        request: WorkoutRequest,
        exercises: Sequence[ExerciseCatalogEntry],
        metrics: Sequence[DailyMetric],
        history: Sequence[WorkoutSession],
        as_of: Optional[datetime] = None
    ) -> GeneratedWorkout:
        """Generate a workout.

        Args:
            request: What to generate
            exercises: Exercise catalog
            metrics: Daily metrics in any order
            history: Past workout sessions in any order
            as_of: Generation time (defaults to now, UTC)

        Returns:
            The adapted workout
        """
        as_of = reference_time(as_of)

        if request.current_readiness is not None:
            readiness = request.current_readiness
        else:
            readiness = self.readiness_analyzer.analyze(metrics, as_of=as_of.date()).overall_score
        plateau_risk = self.plateau_analyzer.analyze(history, metrics, as_of=as_of).overall_risk
        injury_risk = self.injury_risk_analyzer.assess(history, metrics).overall_risk

        selected = self.select_exercises(request, exercises, readiness)
        self.logger.debug(f"Selected {len(selected)} of {len(exercises)} catalog exercises")

        sets, total_volume = self.plan_volume(history, readiness, plateau_risk)
        intensity = target_intensity(request.workout_type, readiness)

        planned = [
            GeneratedExercise(
                exercise=exercise,
                target_sets=sets,
                target_reps=target_reps(request.workout_type, intensity),
                target_rpe=target_rpe(intensity, readiness),
                rest_time=rest_time(request.workout_type, intensity),
                alternatives=self.alternatives(exercise, exercises),
                next_session=NEXT_SESSION_PLAN,
                long_term=LONG_TERM_PLAN,
            )
            for exercise in selected
        ]

        workout = GeneratedWorkout(
            id=f"generated_{int(as_of.timestamp() * 1000)}",
            name=f"Personalized {request.workout_type.value.capitalize()} Workout",
            type=request.workout_type,
            estimated_duration=request.target_duration,
            target_intensity=intensity,
            exercises=planned,
            warmup=self.warmup(selected),
            cooldown=list(COOLDOWN),
            adaptations=WorkoutAdaptations(
                progressive_overload=(
                    ["Implement exercise variation to break plateau"]
                    if plateau_risk > config.PREVENTIVE_ACTION_THRESHOLD else []
                ),
            ),
            confidence=0.85,
            reasoning=[
                f"Workout optimized for {request.workout_type.value} training",
                f"Adjusted for readiness score of {readiness:.0f}",
                "Exercise selection based on available equipment and preferences",
            ],
            metadata=WorkoutMetadata(
                total_volume=total_volume,
                average_intensity=intensity,
                muscle_group_balance={},
                generated_at=as_of,
                algorithm_version=config.ALGORITHM_VERSION,
            ),
        )

        context = AdaptationContext(
            readiness=readiness,
            injury_risk=injury_risk,
            plateau_risk=plateau_risk,
            available_equipment=list(request.available_equipment),
        )
        adapted = apply_adaptations(workout, context)

        return replace(
            adapted,
            metadata=replace(adapted.metadata, muscle_group_balance=muscle_group_balance(adapted.exercises)),
        )

    def select_exercises(
        self,
        request: WorkoutRequest,
        exercises: Sequence[ExerciseCatalogEntry],
        readiness: float
    ) -> List[ExerciseCatalogEntry]:
        """Pick the best-scoring usable exercises, capped per target muscle group."""
        targets = request.target_muscle_groups or config.get_default_muscle_groups(request.workout_type.value)
        excluded = set(request.exclude_exercises or [])

        scored = []
        for exercise in exercises:
            if not exercise.is_available(request.available_equipment) or exercise.id in excluded:
                continue
            features = [
                Feature("muscle_group_priority", muscle_group_relevance(exercise.muscle_groups, targets), 0.30,
                        FeatureCategory.EXERCISE),
                Feature("equipment_availability", 1.0, 0.25, FeatureCategory.EXERCISE),
                Feature("user_experience", experience_match(exercise, request.fitness_level), 0.20,
                        FeatureCategory.USER),
                Feature("readiness_level", readiness / 100, 0.15, FeatureCategory.READINESS),
                Feature("exercise_variety_score", VARIETY_SCORE, 0.10, FeatureCategory.EXERCISE),
            ]
            scored.append((self.selection_scorer.predict(features).value, exercise))

        scored.sort(key=lambda pair: pair[0], reverse=True)

        per_group = math.ceil(request.target_duration / config.MINUTES_PER_MUSCLE_SLOT)
        counts: Dict[str, int] = {}
        selected = []
        for _, exercise in scored:
            if len(selected) >= config.MAX_EXERCISES:
                break
            for muscle in exercise.muscle_groups:
                if muscle in targets and counts.get(muscle, 0) < per_group:
                    counts[muscle] = counts.get(muscle, 0) + 1
                    selected.append(exercise)
                    break
        return selected

    def plan_volume(
        self,
        history: Sequence[WorkoutSession],
        readiness: float,
        plateau_risk: float
    ) -> Tuple[int, float]:
        """Sets per exercise and target session volume.

        Returns:
            (sets per exercise, target volume)
        """
        recent = newest_first_workouts(history)[:RECENT_VOLUME_SESSIONS]
        recent_volume = float(np.mean([w.volume for w in recent])) if recent else 0.0

        features = [
            Feature("readiness_score", readiness, 0.35, FeatureCategory.READINESS),
            Feature("training_age", training_age_years(history), 0.25, FeatureCategory.USER),
            Feature("recent_volume", recent_volume, 0.20, FeatureCategory.PERFORMANCE),
            Feature("recovery_capacity", RECOVERY_CAPACITY, 0.20, FeatureCategory.READINESS),
            Feature("plateau_risk", plateau_risk / 100, 0.10, FeatureCategory.PERFORMANCE),
        ]
        volume = self.volume_optimizer.predict(features).value
        sets = max(MIN_SETS, min(MAX_SETS, math.ceil(volume / VOLUME_PER_SET)))
        return sets, volume

    def alternatives(
        self,
        exercise: ExerciseCatalogEntry,
        catalog: Sequence[ExerciseCatalogEntry]
    ) -> List[ExerciseAlternative]:
        """Up to three catalog exercises sharing a muscle group."""
        similar = [
            candidate for candidate in catalog
            if candidate.id != exercise.id
            and any(muscle in exercise.muscle_groups for muscle in candidate.muscle_groups)
        ]
        return [
            ExerciseAlternative(
                exercise=candidate,
                reason="Similar muscle groups targeted",
                substitution_type="variety",
                confidence=0.8,
            )
            for candidate in similar[:config.MAX_ALTERNATIVES]
        ]

    def warmup(self, exercises: Sequence[ExerciseCatalogEntry]) -> List[GeneratedExercise]:
        """General mobility plus one item per distinct muscle-group warm-up."""
        groups = []
        for exercise in exercises:
            for group in exercise.muscle_groups:
                if group.lower() not in groups:
                    groups.append(group.lower())

        items = [GENERAL_MOBILITY]
        added = set()
        for group in groups:
            key = group if group in WARMUP_BY_MUSCLE else self._fallback_warmup_key(group)
            if key is None:
                continue
            name, muscles, instructions = WARMUP_BY_MUSCLE[key]
            if name in added:
                continue
            added.add(name)
            lower_body = any(part in group for part in ("leg", "glute", "quad"))
            items.append(routine_exercise(
                "warmup_" + name.lower().replace(" ", "_").replace("-", "_"),
                name, "warmup", muscles, instructions,
                "10-15" if lower_body else "30 seconds",
                4,
                rest_time=30,
                notes=f"Prepare {group} muscles for main workout",
            ))

        return items[:config.MAX_WARMUP_ITEMS]

    @staticmethod
    def _fallback_warmup_key(group: str) -> Optional[str]:
        for fragments, key in WARMUP_FALLBACKS:
            if any(fragment in group for fragment in fragments):
                return key
        return None
