"""Workout insights: progress, injury risk, plateau and training-window analysis with adaptive workout generation."""

__version__ = "1.0.0"

from .config import Config, config
from .generator import WorkoutGenerator
from .models import (
    DailyMetric,
    DataFormatError,
    Dataset,
    ExerciseCatalogEntry,
    ExerciseRecord,
    FitnessLevel,
    GeneratedWorkout,
    SetRecord,
    WorkoutRequest,
    WorkoutSession,
    WorkoutType,
    load_dataset,
)
from .orchestrator import HealthStatus, InsightReport, InsightService, SystemState

__all__ = [
    "Config",
    "config",
    "DailyMetric",
    "DataFormatError",
    "Dataset",
    "ExerciseCatalogEntry",
    "ExerciseRecord",
    "FitnessLevel",
    "GeneratedWorkout",
    "HealthStatus",
    "InsightReport",
    "InsightService",
    "SetRecord",
    "SystemState",
    "WorkoutGenerator",
    "WorkoutRequest",
    "WorkoutSession",
    "WorkoutType",
    "load_dataset",
]
