"""Shared builders for workout insights tests."""

from datetime import date, datetime, timedelta, timezone

import pytest

from workout_insights.models import (
    DailyMetric,
    ExerciseCatalogEntry,
    ExerciseRecord,
    SetRecord,
    WorkoutSession,
)

AS_OF = datetime(2024, 3, 29, 20, 0, tzinfo=timezone.utc)


def build_metric(day: date, sleep=8.0, energy=8.0, soreness=1.0, stress=1.0, **kwargs) -> DailyMetric:
    return DailyMetric(date=day, sleep=sleep, energy=energy, soreness=soreness, stress=stress, **kwargs)


def build_workout(started_at: datetime, sets=None, exercise_id="bench_press", workout_id=None) -> WorkoutSession:
    """One-exercise session; ``sets`` is a list of (weight, reps, rpe) tuples."""
    if sets is None:
        sets = [(100, 10, 7)] * 3
    return WorkoutSession(
        id=workout_id or f"w-{started_at:%Y%m%d%H%M}-{exercise_id}",
        started_at=started_at,
        user_id="user-1",
        exercises=[ExerciseRecord(
            id=exercise_id,
            name=exercise_id.replace("_", " ").title(),
            category="strength",
            sets=[SetRecord(weight=w, reps=r, rpe=rpe) for w, r, rpe in sets],
        )],
    )


def daily_metrics(days, end=None, **kwargs):
    end = end or AS_OF.date()
    return [build_metric(end - timedelta(days=offset), **kwargs) for offset in range(days)]


def daily_workouts(days, end=None, hour=18, **kwargs):
    end = end or AS_OF
    last = end.replace(hour=hour, minute=0)
    return [build_workout(last - timedelta(days=offset), **kwargs) for offset in range(days)]


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def metric_factory():
    return build_metric


@pytest.fixture
def workout_factory():
    return build_workout


@pytest.fixture
def steady_metrics():
    """Four weeks of well-rested daily metrics ending on AS_OF."""
    return daily_metrics(28)


@pytest.fixture
def steady_workouts():
    """Four weeks of identical daily sessions ending on AS_OF."""
    return daily_workouts(28)


@pytest.fixture
def catalog():
    def entry(exercise_id, muscles, equipment, level="intermediate", category="compound"):
        return ExerciseCatalogEntry(
            id=exercise_id,
            name=exercise_id.replace("_", " ").title(),
            category=category,
            muscle_groups=muscles,
            equipment=equipment,
            instructions=f"Perform the {exercise_id.replace('_', ' ')} with control.",
            difficulty_level=level,
        )

    return [
        entry("bench_press", ["chest", "triceps"], ["barbell", "bench"]),
        entry("dumbbell_press", ["chest", "shoulders"], ["dumbbell", "bench"]),
        entry("push_up", ["chest", "triceps"], ["bodyweight"], level="beginner"),
        entry("barbell_row", ["back", "biceps"], ["barbell"]),
        entry("pull_up", ["back", "biceps"], ["pull_up_bar"], level="advanced"),
        entry("inverted_row", ["back"], ["bodyweight"], level="beginner"),
        entry("back_squat", ["legs", "glutes"], ["barbell"]),
        entry("bodyweight_squat", ["legs", "glutes"], ["bodyweight"], level="beginner"),
        entry("walking_lunge", ["legs"], ["bodyweight"]),
        entry("overhead_press", ["shoulders", "triceps"], ["barbell"]),
        entry("pike_push_up", ["shoulders"], ["bodyweight"]),
        entry("barbell_curl", ["arms", "biceps"], ["barbell"], category="isolation"),
        entry("bench_dip", ["arms", "triceps"], ["bodyweight"], category="isolation"),
    ]
