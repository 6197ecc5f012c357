"""Adaptation rules applied to a freshly generated workout.

Rules run in a fixed order: readiness, injury risk, equipment, plateau.
Each rule takes the workout and the adaptation context and returns a new
workout; nothing is modified in place. Every rule that changes the plan
records a reason in the workout's adaptation log.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Sequence, Tuple

from .config import config
from .models import (
    ExerciseCatalogEntry,
    GeneratedExercise,
    GeneratedWorkout,
    ProgressionPlan,
)

logger = logging.getLogger(__name__)

FORM_NOTE = "Focus on controlled movement and proper form"
PLATEAU_NOTE = "Add drop sets or pause reps to break through plateau"

MIN_SETS = 1
LOW_READINESS_MIN_RPE = 5
HIGH_READINESS_MAX_RPE = 9
INJURY_MIN_RPE = 6
PLATEAU_MAX_RPE = 9


@dataclass(frozen=True)
class AdaptationContext:
    """Inputs the rules react to."""
    readiness: float
    injury_risk: float
    plateau_risk: float
    available_equipment: List[str] = field(default_factory=list)


def routine_exercise(
    exercise_id: str,
    name: str,
    category: str,
    muscle_groups: Sequence[str],
    instructions: str,
    target_reps: str,
    target_rpe: float,
    rest_time: int = 0,
    notes: Optional[str] = None
) -> GeneratedExercise:
    """Warm-up, cool-down or prevention item that stays the same every session."""
    keep = ProgressionPlan(
        type="maintain",
        adjustment=0,
        condition="Every session",
        reasoning=f"{category.capitalize()} stays consistent",
    )
    return GeneratedExercise(
        exercise=ExerciseCatalogEntry(
            id=exercise_id,
            name=name,
            category=category,
            muscle_groups=list(muscle_groups),
            equipment=[],
            instructions=instructions,
            difficulty_level="beginner",
        ),
        target_sets=1,
        target_reps=target_reps,
        target_rpe=target_rpe,
        rest_time=rest_time,
        notes=notes,
        next_session=keep,
        long_term=keep,
    )


INJURY_PREVENTION_WARMUP = (
    routine_exercise(
        "prevention_band_pull_aparts", "Band Pull-Aparts", "warmup", ["shoulders", "back"],
        "Hold a light band at shoulder height and pull it apart until it touches the chest.",
        "15 reps", 3, rest_time=15, notes="Activates the rotator cuff and upper back",
    ),
    routine_exercise(
        "prevention_hip_circles", "Hip Circles", "warmup", ["hips", "glutes"],
        "Stand on one leg and draw slow, wide circles with the opposite knee. Switch sides.",
        "10 each side", 3, rest_time=15, notes="Mobilizes the hip joint before loading",
    ),
)


def adapt_for_readiness(workout: GeneratedWorkout, context: AdaptationContext) -> GeneratedWorkout:
    """Back off on low readiness, push harder on excellent readiness."""
    readiness = context.readiness

    if readiness < config.LOW_READINESS_THRESHOLD:
        exercises = [
            replace(
                ex,
                target_sets=max(MIN_SETS, ex.target_sets - 1),
                target_rpe=max(LOW_READINESS_MIN_RPE, ex.target_rpe - 1),
                rest_time=ex.rest_time + config.LOW_READINESS_REST_BONUS,
            )
            for ex in workout.exercises
        ]
        reason = f"Reduced volume and intensity due to low readiness ({readiness:.0f})"
    elif readiness > config.HIGH_READINESS_THRESHOLD:
        exercises = [
            replace(ex, target_rpe=min(HIGH_READINESS_MAX_RPE, ex.target_rpe + 1))
            for ex in workout.exercises
        ]
        reason = f"Increased intensity due to excellent readiness ({readiness:.0f})"
    else:
        return workout

    adaptations = replace(
        workout.adaptations,
        readiness_adjustments=workout.adaptations.readiness_adjustments + [reason],
    )
    return replace(workout, exercises=exercises, adaptations=adaptations)


def adapt_for_injury_risk(workout: GeneratedWorkout, context: AdaptationContext) -> GeneratedWorkout:
    """Prepend prevention work and take one RPE point off every exercise."""
    exercises = [
        replace(
            ex,
            target_rpe=max(INJURY_MIN_RPE, ex.target_rpe - 1),
            rest_time=ex.rest_time + config.INJURY_REST_BONUS,
            notes=FORM_NOTE,
        )
        for ex in workout.exercises
    ]
    adaptations = replace(
        workout.adaptations,
        injury_prevention=workout.adaptations.injury_prevention + [
            f"Added injury prevention warm-up and extra rest (injury risk {context.injury_risk:.0f})"
        ],
    )
    return replace(
        workout,
        exercises=exercises,
        warmup=list(INJURY_PREVENTION_WARMUP) + workout.warmup,
        adaptations=adaptations,
    )


def adapt_for_equipment(workout: GeneratedWorkout, context: AdaptationContext) -> GeneratedWorkout:
    """Swap exercises whose equipment is missing for their first usable alternative."""
    available = context.available_equipment
    substitutions = []
    exercises = []

    for ex in workout.exercises:
        if ex.exercise.is_available(available):
            exercises.append(ex)
            continue

        alternative = next((alt for alt in ex.alternatives if alt.exercise.is_available(available)), None)
        if alternative is None:
            logger.debug(f"No equipment-compatible alternative for {ex.exercise.name}")
            exercises.append(ex)
            continue

        exercises.append(replace(
            ex,
            exercise=alternative.exercise,
            notes=f"Substituted due to equipment availability: {alternative.reason}",
        ))
        substitutions.append(f"Replaced {ex.exercise.name} with {alternative.exercise.name}")

    if not substitutions:
        return workout

    adaptations = replace(
        workout.adaptations,
        equipment_substitutions=workout.adaptations.equipment_substitutions + substitutions,
    )
    return replace(workout, exercises=exercises, adaptations=adaptations)


def adapt_for_plateau_risk(workout: GeneratedWorkout, context: AdaptationContext) -> GeneratedWorkout:
    """Add intensity techniques to every other exercise when a plateau looms."""
    if context.plateau_risk <= config.PLATEAU_ADAPTATION_THRESHOLD:
        return workout

    exercises = [
        replace(ex, target_rpe=min(PLATEAU_MAX_RPE, ex.target_rpe + 1), notes=PLATEAU_NOTE)
        if index % 2 == 0 else ex
        for index, ex in enumerate(workout.exercises)
    ]
    adaptations = replace(
        workout.adaptations,
        progressive_overload=workout.adaptations.progressive_overload + [
            "Added intensity techniques to combat plateau risk"
        ],
    )
    return replace(workout, exercises=exercises, adaptations=adaptations)


AdaptationRule = Callable[[GeneratedWorkout, AdaptationContext], GeneratedWorkout]

ADAPTATION_RULES: Tuple[AdaptationRule, ...] = (
    adapt_for_readiness,
    adapt_for_injury_risk,
    adapt_for_equipment,
    adapt_for_plateau_risk,
)


def apply_adaptations(
    workout: GeneratedWorkout,
    context: AdaptationContext,
    rules: Sequence[AdaptationRule] = ADAPTATION_RULES
) -> GeneratedWorkout:
    """Run ``rules`` in order, each on the previous rule's output."""
    for rule in rules:
        workout = rule(workout, context)
    return workout
