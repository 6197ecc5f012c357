"""Core data records for workout analysis and generation.

Input records (daily metrics, workout sessions, catalog entries) are
immutable value objects built fresh per request. Numeric fields that the
upstream store left blank are kept as ``None`` and treated as zero
contribution by the analysis code rather than raising.
"""

import json
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union


class DataFormatError(ValueError):
    """Raised when an input record cannot be parsed."""


class FeatureCategory(Enum):
    """Category tag attached to every extracted feature."""
    TEMPORAL = "temporal"
    READINESS = "readiness"
    PERFORMANCE = "performance"
    USER = "user"
    EXERCISE = "exercise"


class WorkoutType(Enum):
    """Kinds of workout the generator can build."""
    STRENGTH = "strength"
    HYPERTROPHY = "hypertrophy"
    POWER = "power"
    ENDURANCE = "endurance"
    RECOVERY = "recovery"


class FitnessLevel(Enum):
    """Self-reported experience level."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class RiskLevel(Enum):
    """Bucketed injury-risk level."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def from_score(cls, risk: float) -> "RiskLevel":
        """Bucket a 0-100 risk score."""
        if risk <= 25:
            return cls.LOW
        if risk <= 50:
            return cls.MODERATE
        if risk <= 75:
            return cls.HIGH
        return cls.CRITICAL


class Priority(Enum):
    """Priority attached to recommendations and interventions."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    IMMEDIATE = "immediate"


def parse_timestamp(value: Union[str, datetime, None], field_name: str = "timestamp") -> datetime:
    """Parse an ISO-8601 timestamp into a timezone-aware UTC datetime.

    Args:
        value: ISO string (a trailing ``Z`` is accepted) or datetime
        field_name: Name used in the error message

    Returns:
        Aware datetime in UTC
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise DataFormatError(f"Invalid {field_name}: {value!r}") from e
    else:
        raise DataFormatError(f"Missing {field_name}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def reference_time(as_of: Optional[datetime] = None) -> datetime:
    """Aware UTC reference time; naive values are taken to be UTC."""
    if as_of is None:
        return datetime.now(timezone.utc)
    return parse_timestamp(as_of, "reference time")


def parse_date(value: Union[str, date, datetime, None]) -> date:
    """Parse a calendar date, accepting full timestamps as well."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError as e:
            raise DataFormatError(f"Invalid date: {value!r}") from e
    raise DataFormatError("Missing date")


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _required_float(data: Dict, key: str) -> float:
    value = _optional_float(data.get(key))
    if value is None:
        raise DataFormatError(f"Missing numeric field '{key}'")
    return value


@dataclass(frozen=True)
class DailyMetric:
    """One day of self-reported wellness data."""
    date: date
    sleep: float                        # hours
    energy: float                       # 1-10
    soreness: float                     # 1-10, higher is worse
    stress: float                       # 1-10, higher is worse
    hrv: Optional[float] = None
    resting_hr: Optional[float] = None
    body_weight: Optional[float] = None
    id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def readiness_score(self) -> float:
        """Quick composite readiness (roughly 0-100) for trend calculations."""
        return (
            self.sleep * 10
            + self.energy * 10
            + (10 - self.soreness) * 8
            + (10 - self.stress) * 7
        ) / 3.5

    @classmethod
    def from_dict(cls, data: Dict) -> "DailyMetric":
        return cls(
            date=parse_date(data.get("date")),
            sleep=_required_float(data, "sleep"),
            energy=_required_float(data, "energy"),
            soreness=_required_float(data, "soreness"),
            stress=_required_float(data, "stress"),
            hrv=_optional_float(data.get("hrv")),
            resting_hr=_optional_float(data.get("resting_hr", data.get("restingHR"))),
            body_weight=_optional_float(data.get("body_weight", data.get("bodyWeight"))),
            id=data.get("id"),
            notes=data.get("notes"),
        )


@dataclass(frozen=True)
class SetRecord:
    """A single performed set. Any numeric field may be missing."""
    weight: Optional[float] = None
    reps: Optional[float] = None
    rpe: Optional[float] = None
    rest_time: Optional[float] = None
    is_personal_record: bool = False
    id: Optional[str] = None

    @property
    def volume(self) -> float:
        """Weight x reps, or 0 when either is missing."""
        if self.weight is None or self.reps is None:
            return 0.0
        return self.weight * self.reps

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "SetRecord":
        data = data or {}
        return cls(
            weight=_optional_float(data.get("weight")),
            reps=_optional_float(data.get("reps")),
            rpe=_optional_float(data.get("rpe")),
            rest_time=_optional_float(data.get("rest_time")),
            is_personal_record=bool(data.get("is_personal_record", False)),
            id=data.get("id"),
        )


@dataclass(frozen=True)
class ExerciseRecord:
    """An exercise as performed inside a workout session."""
    id: str
    name: str
    category: str = ""
    sets: List[SetRecord] = field(default_factory=list)

    @property
    def volume(self) -> float:
        return sum(s.volume for s in self.sets)

    @property
    def max_weight(self) -> float:
        weights = [s.weight for s in self.sets if s.weight is not None]
        return max(weights) if weights else 0.0

    @classmethod
    def from_dict(cls, data: Dict) -> "ExerciseRecord":
        return cls(
            id=str(data.get("id") or data.get("exercise_id") or ""),
            name=data.get("name") or "",
            category=data.get("category") or "",
            sets=[SetRecord.from_dict(s) for s in (data.get("sets") or [])],
        )


@dataclass(frozen=True)
class WorkoutSession:
    """A completed (or in-progress) workout with its exercises and sets."""
    id: str
    started_at: datetime
    user_id: Optional[str] = None
    template_id: Optional[str] = None
    name: Optional[str] = None
    completed_at: Optional[datetime] = None
    duration_minutes: Optional[float] = None
    total_volume: Optional[float] = None
    average_rpe: Optional[float] = None
    exercises: List[ExerciseRecord] = field(default_factory=list)

    def __post_init__(self):
        object.__setattr__(self, "started_at", parse_timestamp(self.started_at, "started_at"))
        if self.completed_at is not None:
            object.__setattr__(self, "completed_at", parse_timestamp(self.completed_at, "completed_at"))

    @property
    def volume(self) -> float:
        """Total volume computed from the recorded sets."""
        return sum(e.volume for e in self.exercises)

    @property
    def rpes(self) -> List[float]:
        """All positive RPE values recorded in the session."""
        return [
            s.rpe
            for e in self.exercises
            for s in e.sets
            if s.rpe is not None and s.rpe > 0
        ]

    def has_exercise(self, exercise_id: str) -> bool:
        return any(e.id == exercise_id for e in self.exercises)

    @classmethod
    def from_dict(cls, data: Dict) -> "WorkoutSession":
        completed = data.get("completed_at")
        return cls(
            id=str(data.get("id") or ""),
            started_at=parse_timestamp(data.get("started_at"), "started_at"),
            user_id=data.get("user_id"),
            template_id=data.get("template_id"),
            name=data.get("name"),
            completed_at=parse_timestamp(completed, "completed_at") if completed else None,
            duration_minutes=_optional_float(data.get("duration_minutes")),
            total_volume=_optional_float(data.get("total_volume")),
            average_rpe=_optional_float(data.get("average_rpe")),
            exercises=[
                ExerciseRecord.from_dict(e)
                for e in (data.get("exercises") or [])
                if isinstance(e, dict)
            ],
        )


@dataclass(frozen=True)
class ExerciseCatalogEntry:
    """An exercise definition from the catalog."""
    id: str
    name: str
    category: str = ""
    muscle_groups: List[str] = field(default_factory=list)
    equipment: List[str] = field(default_factory=list)
    instructions: str = ""
    difficulty_level: str = "intermediate"

    def is_available(self, available_equipment: Iterable[str]) -> bool:
        """True when every required item is available or is bodyweight."""
        available = set(available_equipment)
        return all(eq in available or eq == "bodyweight" for eq in self.equipment)

    @classmethod
    def from_dict(cls, data: Dict) -> "ExerciseCatalogEntry":
        return cls(
            id=str(data.get("id") or ""),
            name=data.get("name") or "",
            category=data.get("category") or "",
            muscle_groups=list(data.get("muscle_groups") or []),
            equipment=list(data.get("equipment") or []),
            instructions=data.get("instructions") or "",
            difficulty_level=data.get("difficulty_level") or "intermediate",
        )


@dataclass(frozen=True)
class Feature:
    """A named, weighted input to a predictor."""
    name: str
    value: float
    importance: float
    category: FeatureCategory


@dataclass(frozen=True)
class FeatureAttribution:
    """How much one feature contributed to a prediction."""
    feature: str
    contribution: float
    importance: float


@dataclass(frozen=True)
class Prediction:
    """Output of a predictor."""
    value: float
    confidence: float
    variance: float
    factors: List[FeatureAttribution]
    methodology: str
    timeframe: Optional[int] = None

    def contribution(self, feature: str, default: float = 0.0) -> float:
        """Contribution recorded for ``feature``, or ``default``."""
        for factor in self.factors:
            if factor.feature == feature:
                return factor.contribution
        return default


@dataclass(frozen=True)
class WorkoutRequest:
    """What the caller wants generated."""
    user_id: str
    workout_type: WorkoutType
    target_duration: int                            # minutes
    available_equipment: List[str]
    target_muscle_groups: Optional[List[str]] = None
    exclude_exercises: Optional[List[str]] = None
    fitness_level: FitnessLevel = FitnessLevel.INTERMEDIATE
    current_readiness: Optional[float] = None       # 0-100, overrides tracked metrics


@dataclass(frozen=True)
class ProgressionPlan:
    type: str                   # weight, volume or maintain
    adjustment: float
    condition: str
    reasoning: str


@dataclass(frozen=True)
class ExerciseAlternative:
    exercise: ExerciseCatalogEntry
    reason: str
    substitution_type: str      # equipment, injury, difficulty or variety
    confidence: float

    @property
    def exercise_id(self) -> str:
        return self.exercise.id


@dataclass(frozen=True)
class GeneratedExercise:
    """One planned exercise with its targets."""
    exercise: ExerciseCatalogEntry
    target_sets: int
    target_reps: str                                # e.g. "8-12", "30 seconds"
    target_rpe: float
    rest_time: int                                  # seconds
    notes: Optional[str] = None
    alternatives: List[ExerciseAlternative] = field(default_factory=list)
    next_session: Optional[ProgressionPlan] = None
    long_term: Optional[ProgressionPlan] = None

    @property
    def exercise_id(self) -> str:
        return self.exercise.id


@dataclass(frozen=True)
class WorkoutAdaptations:
    """Reasons recorded by each adaptation rule."""
    readiness_adjustments: List[str] = field(default_factory=list)
    injury_prevention: List[str] = field(default_factory=list)
    equipment_substitutions: List[str] = field(default_factory=list)
    progressive_overload: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class WorkoutMetadata:
    total_volume: float
    average_intensity: float
    muscle_group_balance: Dict[str, int]            # muscle group -> planned sets
    generated_at: datetime
    algorithm_version: str


@dataclass(frozen=True)
class GeneratedWorkout:
    id: str
    name: str
    type: WorkoutType
    estimated_duration: int
    target_intensity: float                         # 1-10
    exercises: List[GeneratedExercise]
    warmup: List[GeneratedExercise]
    cooldown: List[GeneratedExercise]
    adaptations: WorkoutAdaptations
    confidence: float
    reasoning: List[str]
    metadata: WorkoutMetadata


@dataclass
class Dataset:
    """Workouts, metrics and catalog loaded together from one source."""
    workouts: List[WorkoutSession] = field(default_factory=list)
    metrics: List[DailyMetric] = field(default_factory=list)
    exercises: List[ExerciseCatalogEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict) -> "Dataset":
        if not isinstance(data, dict):
            raise DataFormatError("Dataset must be a JSON object")
        return cls(
            workouts=[WorkoutSession.from_dict(w) for w in data.get("workouts") or []],
            metrics=[DailyMetric.from_dict(m) for m in data.get("metrics") or []],
            exercises=[ExerciseCatalogEntry.from_dict(e) for e in data.get("exercises") or []],
        )


def load_dataset(path: Union[str, Path]) -> Dataset:
    """Load a dataset JSON file.

    Raises:
        DataFormatError: If the file is not valid JSON or a record is malformed
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise DataFormatError(f"Invalid JSON in {path}: {e}") from e
    return Dataset.from_dict(raw)


def newest_first_metrics(metrics: Iterable[DailyMetric]) -> List[DailyMetric]:
    return sorted(metrics, key=lambda m: m.date, reverse=True)


def newest_first_workouts(workouts: Iterable[WorkoutSession]) -> List[WorkoutSession]:
    return sorted(workouts, key=lambda w: w.started_at, reverse=True)


def to_dict(obj: Any) -> Any:
    """Convert records, enums and timestamps into JSON-serializable values."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_dict(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {str(to_dict(k)): to_dict(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_dict(v) for v in obj]
    if isinstance(obj, float):
        return round(obj, 4)
    return obj
