"""Analysis module for workout progress, risk and readiness calculations."""

from .injury_risk import InjuryRiskAnalyzer, InjuryRiskAssessment
from .plateau import PlateauAnalysis, PlateauAnalyzer
from .predictors import Predictor, PredictorKind, get_predictor, predict
from .progress import ProgressAnalyzer, ProgressReport
from .readiness import ReadinessAnalysis, ReadinessAnalyzer
from .training_windows import TrainingWindowAnalyzer, TrainingWindowsReport

__all__ = [
    "InjuryRiskAnalyzer",
    "InjuryRiskAssessment",
    "PlateauAnalysis",
    "PlateauAnalyzer",
    "Predictor",
    "PredictorKind",
    "get_predictor",
    "predict",
    "ProgressAnalyzer",
    "ProgressReport",
    "ReadinessAnalysis",
    "ReadinessAnalyzer",
    "TrainingWindowAnalyzer",
    "TrainingWindowsReport",
]
