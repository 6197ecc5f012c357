"""Tests for workout adaptation rules."""

from dataclasses import replace

import pytest

from workout_insights.adaptations import (
    FORM_NOTE,
    PLATEAU_NOTE,
    AdaptationContext,
    adapt_for_equipment,
    adapt_for_injury_risk,
    adapt_for_plateau_risk,
    adapt_for_readiness,
    apply_adaptations,
)
from workout_insights.generator import default_workout
from workout_insights.models import (
    ExerciseAlternative,
    GeneratedExercise,
    WorkoutRequest,
    WorkoutType,
)

ALL_EQUIPMENT = ["barbell", "bench", "dumbbell", "pull_up_bar"]


def context(readiness=70, injury_risk=20, plateau_risk=20, equipment=ALL_EQUIPMENT):
    return AdaptationContext(
        readiness=readiness,
        injury_risk=injury_risk,
        plateau_risk=plateau_risk,
        available_equipment=list(equipment),
    )


class TestAdaptationRules:
    """Test each rule in isolation."""

    @pytest.fixture(autouse=True)
    def build_workout(self, catalog, as_of):
        self.catalog = {entry.id: entry for entry in catalog}
        request = WorkoutRequest(
            user_id="user-1",
            workout_type=WorkoutType.HYPERTROPHY,
            target_duration=60,
            available_equipment=ALL_EQUIPMENT,
        )
        exercises = [
            self.planned("bench_press", alternatives=["dumbbell_press", "push_up"]),
            self.planned("barbell_row"),
            self.planned("back_squat", rpe=6.5),
        ]
        self.workout = replace(default_workout(request, as_of), exercises=exercises)

    def planned(self, exercise_id, sets=3, rpe=8.0, rest=90, alternatives=()):
        return GeneratedExercise(
            exercise=self.catalog[exercise_id],
            target_sets=sets,
            target_reps="8-12",
            target_rpe=rpe,
            rest_time=rest,
            alternatives=[
                ExerciseAlternative(self.catalog[alt], "Similar muscle groups targeted", "variety", 0.8)
                for alt in alternatives
            ],
        )

    def test_low_readiness_backs_off(self):
        adapted = adapt_for_readiness(self.workout, context(readiness=40))
        first = adapted.exercises[0]

        assert first.target_sets == 2
        assert first.target_rpe == 7
        assert first.rest_time == 120
        assert adapted.exercises[2].target_rpe == 5.5
        assert adapted.adaptations.readiness_adjustments == [
            "Reduced volume and intensity due to low readiness (40)"
        ]
        # Rules never modify their input
        assert self.workout.exercises[0].target_sets == 3
        assert self.workout.adaptations.readiness_adjustments == []

    def test_low_readiness_floors(self):
        workout = replace(self.workout, exercises=[self.planned("push_up", sets=1, rpe=5.5)])
        adapted = adapt_for_readiness(workout, context(readiness=30))

        assert adapted.exercises[0].target_sets == 1
        assert adapted.exercises[0].target_rpe == 5

    def test_excellent_readiness_pushes_harder(self):
        workout = replace(self.workout, exercises=[self.planned("push_up", rpe=8), self.planned("pull_up", rpe=8.5)])
        adapted = adapt_for_readiness(workout, context(readiness=90))

        assert [ex.target_rpe for ex in adapted.exercises] == [9, 9]
        assert len(adapted.adaptations.readiness_adjustments) == 1

    def test_normal_readiness_is_unchanged(self):
        assert adapt_for_readiness(self.workout, context(readiness=70)) is self.workout

    def test_injury_prevention(self):
        adapted = adapt_for_injury_risk(self.workout, context(injury_risk=30))

        assert [ex.target_rpe for ex in adapted.exercises] == [7, 7, 6]
        assert all(ex.rest_time == 105 for ex in adapted.exercises)
        assert all(ex.notes == FORM_NOTE for ex in adapted.exercises)
        assert [item.exercise.name for item in adapted.warmup[:2]] == ["Band Pull-Aparts", "Hip Circles"]
        assert len(adapted.adaptations.injury_prevention) == 1

    def test_equipment_substitution(self):
        adapted = adapt_for_equipment(self.workout, context(equipment=["dumbbell", "bench"]))
        first = adapted.exercises[0]

        assert first.exercise_id == "dumbbell_press"
        assert first.notes.startswith("Substituted due to equipment availability")
        assert adapted.adaptations.equipment_substitutions == ["Replaced Bench Press with Dumbbell Press"]
        # No usable alternative: kept as planned
        assert adapted.exercises[1].exercise_id == "barbell_row"

    def test_equipment_without_substitutions_is_unchanged(self):
        assert adapt_for_equipment(self.workout, context()) is self.workout

    def test_plateau_risk_adds_intensity_techniques(self):
        adapted = adapt_for_plateau_risk(self.workout, context(plateau_risk=70))

        assert [ex.target_rpe for ex in adapted.exercises] == [9, 8, 7.5]
        assert adapted.exercises[0].notes == PLATEAU_NOTE
        assert adapted.exercises[1].notes is None
        assert adapted.adaptations.progressive_overload == ["Added intensity techniques to combat plateau risk"]

    def test_low_plateau_risk_is_unchanged(self):
        assert adapt_for_plateau_risk(self.workout, context(plateau_risk=60)) is self.workout

    def test_rules_run_in_order(self):
        adapted = apply_adaptations(self.workout, context(readiness=40, injury_risk=30, plateau_risk=70))

        # readiness 8 -> 7, injury 7 -> 6, plateau 6 -> 7 on even positions
        assert [ex.target_rpe for ex in adapted.exercises] == [7, 6, 7]
        assert len(adapted.adaptations.readiness_adjustments) == 1
        assert len(adapted.adaptations.injury_prevention) == 1
        assert len(adapted.adaptations.progressive_overload) == 1

    def test_custom_rule_sequence(self):
        adapted = apply_adaptations(self.workout, context(readiness=40), rules=[adapt_for_plateau_risk])
        assert adapted is self.workout
