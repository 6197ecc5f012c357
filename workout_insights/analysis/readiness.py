"""Composite training readiness from daily wellness metrics.

Scores sleep, energy, soreness and stress on a 0-100 scale, tracks whether
each factor is improving or declining, and compares the result against a
personal baseline taken from older history.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..config import config
from ..models import DailyMetric
from .statistics import analyze_trend, clamp


class ReadinessLevel(Enum):
    """Readiness classification"""
    EXCELLENT = "excellent"     # 85-100
    GOOD = "good"               # 70-84
    FAIR = "fair"               # 50-69
    POOR = "poor"               # 0-49


FACTOR_WEIGHTS = {
    "sleep": 0.35,
    "energy": 0.25,
    "soreness": 0.20,
    "stress": 0.15,
}

# Factors where a lower raw value means better readiness
INVERTED_FACTORS = ("soreness", "stress")

BASELINE_LOOKBACK_DAYS = 14
BASELINE_MAX_POINTS = 21
MIN_BASELINE_POINTS = 5
MIN_BASELINE_HISTORY = 7
DEFAULT_BASELINE = 60
RECENCY_HORIZON_DAYS = 3
FULL_HISTORY_DAYS = 21


@dataclass(frozen=True)
class ReadinessFactor:
    """One scored readiness input."""
    value: float
    weight: float
    score: float                # 0-100
    trend: str = "stable"       # improving, stable or declining


@dataclass(frozen=True)
class ReadinessAnalysis:
    overall_score: float
    level: ReadinessLevel
    factors: Dict[str, ReadinessFactor]
    recommendations: List[str] = field(default_factory=list)
    confidence: float = 0.0
    baseline: float = DEFAULT_BASELINE
    deviation: float = 0.0


def readiness_level(score: float) -> ReadinessLevel:
    if score >= 85:
        return ReadinessLevel.EXCELLENT
    if score >= 70:
        return ReadinessLevel.GOOD
    if score >= 50:
        return ReadinessLevel.FAIR
    return ReadinessLevel.POOR


def _factor_score(value: float, inverted: bool) -> float:
    return clamp((10 - value) * 10 if inverted else value * 10, 0, 100)


def _factor_values(metrics: Sequence[DailyMetric], name: str) -> List[float]:
    return [getattr(m, name) for m in metrics if getattr(m, name) > 0]


class ReadinessAnalyzer:
    """Readiness scoring with personal baseline comparison."""

    def __init__(self, trend_window: Optional[int] = None):
        self.trend_window = trend_window or config.READINESS_TREND_WINDOW
        self.logger = logging.getLogger(__name__)

    def analyze(
        self,
        metrics: Sequence[DailyMetric],
        baseline: Optional[float] = None,
        as_of: Optional[date] = None
    ) -> ReadinessAnalysis:
        """Analyze current readiness.

        Args:
            metrics: Daily metrics in any order
            baseline: Known personal baseline; derived from history when omitted
            as_of: Reference date for recency and baseline windows (defaults to today)

        Returns:
            Readiness analysis; the default analysis when there are no metrics
        """
        if not metrics:
            self.logger.debug("No daily metrics, using default readiness")
            return self.default_analysis()

        as_of = as_of or date.today()
        chronological = sorted(metrics, key=lambda m: m.date)

        factors = self._analyze_factors(chronological)
        total_weight = sum(f.weight for f in factors.values())
        score = round(sum(f.score * f.weight for f in factors.values()) / total_weight)

        if baseline is None:
            baseline = self._personal_baseline(chronological, as_of)
        deviation = score - baseline

        return ReadinessAnalysis(
            overall_score=score,
            level=readiness_level(score),
            factors=factors,
            recommendations=self._recommendations(factors, score, deviation),
            confidence=self._confidence(chronological, factors, as_of),
            baseline=baseline,
            deviation=deviation,
        )

    def _analyze_factors(self, chronological: Sequence[DailyMetric]) -> Dict[str, ReadinessFactor]:
        factors = {}
        for name, weight in FACTOR_WEIGHTS.items():
            inverted = name in INVERTED_FACTORS
            values = _factor_values(chronological, name)
            if not values:
                factors[name] = ReadinessFactor(value=0.0, weight=weight, score=50.0)
                continue

            trend = "stable"
            analysis = analyze_trend(values[-self.trend_window:])
            if analysis.confidence > 0.3 and analysis.direction != "neutral":
                rising = analysis.direction == "positive"
                trend = "improving" if rising != inverted else "declining"

            factors[name] = ReadinessFactor(
                value=values[-1],
                weight=weight,
                score=_factor_score(values[-1], inverted),
                trend=trend,
            )
        return factors

    def _personal_baseline(self, chronological: Sequence[DailyMetric], as_of: date) -> float:
        """Median factor scores from data at least two weeks old."""
        if len(chronological) < MIN_BASELINE_HISTORY:
            return DEFAULT_BASELINE

        cutoff = as_of - timedelta(days=BASELINE_LOOKBACK_DAYS)
        older = [m for m in chronological if m.date < cutoff][-BASELINE_MAX_POINTS:]
        if len(older) < MIN_BASELINE_POINTS:
            return DEFAULT_BASELINE

        weighted = 0.0
        for name, weight in FACTOR_WEIGHTS.items():
            inverted = name in INVERTED_FACTORS
            scores = [_factor_score(getattr(m, name), inverted) for m in older]
            weighted += float(np.median(scores)) * weight

        return round(clamp(weighted / sum(FACTOR_WEIGHTS.values()), 30, 90))

    def _recommendations(
        self,
        factors: Dict[str, ReadinessFactor],
        score: float,
        deviation: float
    ) -> List[str]:
        recommendations = []

        if score < 50:
            recommendations.append("Consider a rest day or light recovery session")
        elif score < 70:
            recommendations.append("Proceed with caution - reduce intensity by 10-20%")
        elif score > 85:
            recommendations.append("Excellent readiness - consider progressive overload")

        if factors["sleep"].score < 60:
            target = math.ceil(factors["sleep"].value + 1)
            recommendations.append(f"Prioritize sleep recovery - aim for {target}+ hours tonight")
        if factors["energy"].score < 60:
            recommendations.append("Focus on nutrition and hydration before training")
        if factors["soreness"].score < 60:
            recommendations.append("Include extra warm-up and mobility work")
            if factors["soreness"].value > 6:
                recommendations.append("Consider massage or foam rolling session")
        if factors["stress"].score < 60:
            recommendations.append("Practice stress management techniques (meditation, breathing)")

        if factors["sleep"].trend == "declining":
            recommendations.append("Sleep quality is declining - review sleep hygiene")
        if factors["energy"].trend == "declining" and factors["stress"].trend == "declining":
            recommendations.append("Multiple declining factors detected - consider a deload week")

        if deviation < -15:
            recommendations.append("Significantly below baseline - prioritize recovery")
        elif deviation > 15:
            recommendations.append("Above baseline - great time for challenging workouts")

        return recommendations[:4]

    def _confidence(
        self,
        chronological: Sequence[DailyMetric],
        factors: Dict[str, ReadinessFactor],
        as_of: date
    ) -> float:
        days_since_latest = (as_of - chronological[-1].date).days
        recency = clamp(1 - days_since_latest / RECENCY_HORIZON_DAYS)

        measured = sum(1 for name in FACTOR_WEIGHTS if _factor_values(chronological, name))
        completeness = measured / len(FACTOR_WEIGHTS)

        consistency = 0.0
        recent = chronological[-self.trend_window:]
        if len(recent) >= 3:
            sleep_trend = analyze_trend(_factor_values(recent, "sleep"))
            energy_trend = analyze_trend(_factor_values(recent, "energy"))
            consistency = (sleep_trend.confidence + energy_trend.confidence) / 2

        history = min(1.0, len(chronological) / FULL_HISTORY_DAYS)

        return clamp(recency * 0.3 + completeness * 0.3 + consistency * 0.2 + history * 0.2)

    @staticmethod
    def default_analysis() -> ReadinessAnalysis:
        """Readiness for a user with no tracked metrics."""
        return ReadinessAnalysis(
            overall_score=config.DEFAULT_READINESS,
            level=readiness_level(config.DEFAULT_READINESS),
            factors={
                "sleep": ReadinessFactor(value=7, weight=0.35, score=70),
                "energy": ReadinessFactor(value=7, weight=0.25, score=70),
                "soreness": ReadinessFactor(value=3, weight=0.20, score=70),
                "stress": ReadinessFactor(value=3, weight=0.15, score=70),
            },
            recommendations=[
                "Start tracking daily metrics for personalized insights",
                "Maintain consistent sleep schedule",
                "Monitor workout intensity and recovery",
            ],
            confidence=0.1,
            baseline=DEFAULT_BASELINE,
            deviation=config.DEFAULT_READINESS - DEFAULT_BASELINE,
        )
