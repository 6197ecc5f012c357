"""Configuration management for the workout insights engine."""

import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration.

    Thresholds below are empirically chosen heuristics. They are kept here so
    they can be tuned through the environment without touching the models.
    """

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    ALGORITHM_VERSION: str = os.getenv("ALGORITHM_VERSION", "1.0.0")

    # Readiness
    DEFAULT_READINESS: float = float(os.getenv("DEFAULT_READINESS", "70"))
    OPTIMAL_SLEEP_HOURS: float = float(os.getenv("OPTIMAL_SLEEP_HOURS", "8"))
    READINESS_TREND_WINDOW: int = int(os.getenv("READINESS_TREND_WINDOW", "7"))

    # Feature extraction
    RECENT_SESSION_WINDOW: int = int(os.getenv("RECENT_SESSION_WINDOW", "5"))
    MAX_TRAINING_AGE_YEARS: float = float(os.getenv("MAX_TRAINING_AGE_YEARS", "5"))

    # Injury risk
    ACUTE_WINDOW_DAYS: int = int(os.getenv("ACUTE_WINDOW_DAYS", "7"))
    CHRONIC_WINDOW_DAYS: int = int(os.getenv("CHRONIC_WINDOW_DAYS", "28"))
    LOAD_SPIKE_TOLERANCE: float = float(os.getenv("LOAD_SPIKE_TOLERANCE", "0.10"))
    INTENSITY_SPIKE_TOLERANCE: float = float(os.getenv("INTENSITY_SPIKE_TOLERANCE", "0.15"))
    ACWR_WARNING_THRESHOLD: float = float(os.getenv("ACWR_WARNING_THRESHOLD", "1.5"))
    ACWR_CRITICAL_THRESHOLD: float = float(os.getenv("ACWR_CRITICAL_THRESHOLD", "2.0"))
    SLEEP_DEFICIT_WARNING: float = float(os.getenv("SLEEP_DEFICIT_WARNING", "2"))
    SLEEP_DEFICIT_CRITICAL: float = float(os.getenv("SLEEP_DEFICIT_CRITICAL", "3"))
    SORENESS_WARNING: float = float(os.getenv("SORENESS_WARNING", "7"))

    # Plateau detection
    IMPROVEMENT_THRESHOLD: float = float(os.getenv("IMPROVEMENT_THRESHOLD", "1.025"))
    STRENGTH_PLATEAU_THRESHOLD: float = float(os.getenv("STRENGTH_PLATEAU_THRESHOLD", "60"))
    VOLUME_PLATEAU_THRESHOLD: float = float(os.getenv("VOLUME_PLATEAU_THRESHOLD", "55"))
    DELOAD_THRESHOLD: float = float(os.getenv("DELOAD_THRESHOLD", "70"))
    PREVENTIVE_ACTION_THRESHOLD: float = float(os.getenv("PREVENTIVE_ACTION_THRESHOLD", "50"))
    MIN_WEEKLY_PROGRESS: float = float(os.getenv("MIN_WEEKLY_PROGRESS", "0.005"))

    # Orchestrator
    INJURY_CRITICAL_THRESHOLD: float = float(os.getenv("INJURY_CRITICAL_THRESHOLD", "70"))
    INJURY_HIGH_THRESHOLD: float = float(os.getenv("INJURY_HIGH_THRESHOLD", "50"))
    PLATEAU_RECOMMENDATION_THRESHOLD: float = float(os.getenv("PLATEAU_RECOMMENDATION_THRESHOLD", "60"))
    STRONG_PROGRESS_CONFIDENCE: float = float(os.getenv("STRONG_PROGRESS_CONFIDENCE", "0.7"))
    STRONG_STRENGTH_CONFIDENCE: float = float(os.getenv("STRONG_STRENGTH_CONFIDENCE", "0.8"))
    MIN_PLATEAU_WORKOUTS: int = int(os.getenv("MIN_PLATEAU_WORKOUTS", "3"))

    # Workout generation
    MAX_EXERCISES: int = int(os.getenv("MAX_EXERCISES", "8"))
    MINUTES_PER_MUSCLE_SLOT: int = int(os.getenv("MINUTES_PER_MUSCLE_SLOT", "15"))
    MAX_WARMUP_ITEMS: int = int(os.getenv("MAX_WARMUP_ITEMS", "4"))
    MAX_ALTERNATIVES: int = int(os.getenv("MAX_ALTERNATIVES", "3"))
    LOW_READINESS_THRESHOLD: float = float(os.getenv("LOW_READINESS_THRESHOLD", "60"))
    HIGH_READINESS_THRESHOLD: float = float(os.getenv("HIGH_READINESS_THRESHOLD", "85"))
    PLATEAU_ADAPTATION_THRESHOLD: float = float(os.getenv("PLATEAU_ADAPTATION_THRESHOLD", "60"))
    LOW_READINESS_REST_BONUS: int = int(os.getenv("LOW_READINESS_REST_BONUS", "30"))
    INJURY_REST_BONUS: int = int(os.getenv("INJURY_REST_BONUS", "15"))

    # Workout type tables
    BASE_INTENSITY = {
        "strength": float(os.getenv("BASE_INTENSITY_STRENGTH", "8.5")),
        "hypertrophy": float(os.getenv("BASE_INTENSITY_HYPERTROPHY", "7.5")),
        "power": float(os.getenv("BASE_INTENSITY_POWER", "8.0")),
        "endurance": float(os.getenv("BASE_INTENSITY_ENDURANCE", "6.0")),
        "recovery": float(os.getenv("BASE_INTENSITY_RECOVERY", "4.0")),
    }

    BASE_REST_SECONDS = {
        "strength": int(os.getenv("BASE_REST_STRENGTH", "180")),
        "hypertrophy": int(os.getenv("BASE_REST_HYPERTROPHY", "90")),
        "power": int(os.getenv("BASE_REST_POWER", "180")),
        "endurance": int(os.getenv("BASE_REST_ENDURANCE", "60")),
        "recovery": int(os.getenv("BASE_REST_RECOVERY", "60")),
    }

    DEFAULT_MUSCLE_GROUPS = {
        "strength": ["chest", "back", "legs", "shoulders"],
        "hypertrophy": ["chest", "back", "arms", "legs", "shoulders"],
        "power": ["legs", "back", "core"],
        "endurance": ["legs", "core", "cardio"],
        "recovery": ["core", "flexibility"],
    }

    @classmethod
    def get_base_intensity(cls, workout_type: str) -> float:
        """Get the baseline intensity (1-10) for a workout type."""
        return cls.BASE_INTENSITY.get(workout_type, 7.0)

    @classmethod
    def get_base_rest(cls, workout_type: str) -> int:
        """Get the baseline rest between sets in seconds."""
        return cls.BASE_REST_SECONDS.get(workout_type, 90)

    @classmethod
    def get_default_muscle_groups(cls, workout_type: str) -> list[str]:
        """Get the muscle groups targeted when a request names none."""
        return list(cls.DEFAULT_MUSCLE_GROUPS.get(workout_type, ["chest", "back", "legs"]))


config = Config()
