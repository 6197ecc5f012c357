"""Statistical primitives used by feature extraction and predictors.

All functions are pure, operate on plain numeric sequences and never raise
on short or degenerate input; they return documented neutral values instead.
"""

import math
from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from ..models import Feature, FeatureCategory


@dataclass(frozen=True)
class RegressionResult:
    """Ordinary least-squares fit of y on x."""
    slope: float = 0.0
    intercept: float = 0.0
    r_squared: float = 0.0
    confidence: float = 0.0


@dataclass(frozen=True)
class TrendAnalysis:
    """Direction of a short series: positive, negative or neutral."""
    direction: str = "neutral"
    slope: float = 0.0
    confidence: float = 0.0
    volatility: float = 0.0


@dataclass(frozen=True)
class OutlierResult:
    """Values lying outside the 1.5x IQR whiskers, with their positions."""
    outliers: List[float] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class NormalizedSeries:
    values: List[float]
    min: float
    max: float


@dataclass(frozen=True)
class SeasonalityResult:
    has_seasonality: bool
    strength: float
    period: int = 0


@dataclass(frozen=True)
class Decomposition:
    """Additive decomposition: original = trend + seasonal + residual."""
    trend: List[float]
    seasonal: List[float]
    residual: List[float]
    original: List[float]


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def linear_regression(x: Sequence[float], y: Sequence[float]) -> RegressionResult:
    """Fit y = slope * x + intercept.

    Returns an all-zero result when there are fewer than two points, the
    sequences differ in length, or x has zero variance.
    """
    if len(x) != len(y) or len(x) < 2:
        return RegressionResult()

    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    if np.var(x_arr) == 0:
        return RegressionResult()

    slope, intercept = np.polyfit(x_arr, y_arr, 1)

    predicted = slope * x_arr + intercept
    ss_res = float(np.sum((y_arr - predicted) ** 2))
    ss_tot = float(np.sum((y_arr - y_arr.mean()) ** 2))
    r_squared = 1 - ss_res / ss_tot if ss_tot > 0 else 0.0

    return RegressionResult(
        slope=float(slope),
        intercept=float(intercept),
        r_squared=r_squared,
        confidence=clamp(r_squared),
    )


def trend_strength(values: Sequence[float]) -> float:
    """Slope over the index axis, damped by the fit confidence."""
    if len(values) < 3:
        return 0.0
    regression = linear_regression(range(len(values)), values)
    return regression.slope * regression.confidence


def analyze_trend(
    values: Sequence[float],
    slope_threshold: float = 0.1,
    volatility_threshold: float = 0.3
) -> TrendAnalysis:
    """Classify the direction of a series.

    A series whose coefficient of variation exceeds ``volatility_threshold``,
    or whose slope is smaller than ``slope_threshold``, is neutral.
    """
    if len(values) < 3:
        return TrendAnalysis()

    regression = linear_regression(range(len(values)), values)
    arr = np.asarray(values, dtype=float)
    mean = float(arr.mean())
    volatility = float(arr.std()) / abs(mean) if mean != 0 else 0.0

    if volatility > volatility_threshold or abs(regression.slope) < slope_threshold:
        direction = "neutral"
    elif regression.slope > 0:
        direction = "positive"
    else:
        direction = "negative"

    return TrendAnalysis(
        direction=direction,
        slope=regression.slope,
        confidence=regression.confidence,
        volatility=volatility,
    )


def moving_average(data: Sequence[float], window: int) -> List[float]:
    """Simple moving average.

    When the window covers the whole series (or more) the result collapses
    to a single global average.
    """
    if len(data) == 0:
        return []
    if window <= 0 or window >= len(data):
        return [float(np.mean(data))]
    rolling = pd.Series(data, dtype=float).rolling(window=window).mean().dropna()
    return rolling.tolist()


def exponential_moving_average(data: Sequence[float], alpha: float = 0.2) -> List[float]:
    """Exponential moving average seeded with the first observation."""
    if len(data) == 0:
        return []
    ema = pd.Series(data, dtype=float).ewm(alpha=alpha, adjust=False).mean()
    return ema.tolist()


def detect_outliers(data: Sequence[float]) -> OutlierResult:
    """Tukey fences at 1.5x IQR. Needs at least 4 points."""
    if len(data) < 4:
        return OutlierResult()

    ordered = sorted(data)
    n = len(ordered)
    q1 = ordered[int(math.floor(n * 0.25))]
    q3 = ordered[int(math.floor(n * 0.75))]
    iqr = q3 - q1
    lower = q1 - 1.5 * iqr
    upper = q3 + 1.5 * iqr

    indices = [i for i, v in enumerate(data) if v < lower or v > upper]
    return OutlierResult(outliers=[float(data[i]) for i in indices], indices=indices)


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation, 0 for mismatched, short or constant input."""
    if len(x) != len(y) or len(x) < 2:
        return 0.0
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    if np.std(x_arr) == 0 or np.std(y_arr) == 0:
        return 0.0
    r, _ = stats.pearsonr(x_arr, y_arr)
    return 0.0 if np.isnan(r) else float(r)


def standard_deviation(data: Sequence[float]) -> float:
    """Sample standard deviation (n - 1 denominator)."""
    if len(data) < 2:
        return 0.0
    return float(np.std(np.asarray(data, dtype=float), ddof=1))


def normalize(data: Sequence[float]) -> NormalizedSeries:
    """Min-max scale to [0, 1]; constant input maps to 0.5 everywhere."""
    if len(data) == 0:
        return NormalizedSeries(values=[], min=0.0, max=0.0)

    low = float(min(data))
    high = float(max(data))
    span = high - low
    if span == 0:
        return NormalizedSeries(values=[0.5] * len(data), min=low, max=high)
    return NormalizedSeries(values=[(v - low) / span for v in data], min=low, max=high)


def create_lag_features(data: Sequence[float], lags: Sequence[int]) -> List[List[Feature]]:
    """Build one feature row per position that has every lag available.

    Importance decays as 1 / (lag + 1) so recent lags weigh more.
    """
    if not lags or len(data) == 0:
        return []

    rows = []
    for i in range(max(lags), len(data)):
        rows.append([
            Feature(
                name=f"lag_{lag}",
                value=float(data[i - lag]),
                importance=1 / (lag + 1),
                category=FeatureCategory.TEMPORAL,
            )
            for lag in lags
            if i - lag >= 0
        ])
    return rows


def seasonal_correlation(values: Sequence[float], period: int) -> float:
    """Correlation between the series and itself shifted by ``period``."""
    if period <= 0 or len(values) < period * 2:
        return 0.0
    return correlation(values[:-period], values[period:])


def detect_seasonality(values: Sequence[float], period: int = 7) -> SeasonalityResult:
    """Detect weekly seasonality. Needs at least two weeks of data."""
    if len(values) < 14:
        return SeasonalityResult(has_seasonality=False, strength=0.0)

    strength = seasonal_correlation(values, period)
    if strength > 0.3:
        return SeasonalityResult(has_seasonality=True, strength=strength, period=period)
    return SeasonalityResult(has_seasonality=False, strength=strength)


def exponential_smoothing(data: Sequence[float], alpha: float = 0.3, periods: int = 7) -> List[float]:
    """Forecast ``periods`` steps ahead from the smoothed level plus trend."""
    if len(data) == 0:
        return []

    level = exponential_moving_average(data, alpha)[-1]
    trend = trend_strength(data)
    return [level + trend * step for step in range(1, periods + 1)]


def decompose(values: Sequence[float], period: int = 7) -> Decomposition:
    """Additive moving-average decomposition.

    The trend is a moving average padded at the front to the original
    length. The seasonal component averages the detrended series per phase
    of ``period`` when at least two full periods exist; otherwise it is 0.
    """
    original = [float(v) for v in values]
    if not original:
        return Decomposition(trend=[], seasonal=[], residual=[], original=[])

    window = min(period, len(original) // 3)
    trend = moving_average(original, window) if window > 0 else list(original)
    if len(trend) < len(original):
        trend = [trend[0]] * (len(original) - len(trend)) + trend

    detrended = np.asarray(original) - np.asarray(trend)
    if len(original) >= period * 2:
        phase_means = [float(detrended[phase::period].mean()) for phase in range(period)]
        seasonal = [phase_means[i % period] for i in range(len(original))]
    else:
        seasonal = [0.0] * len(original)

    residual = (detrended - np.asarray(seasonal)).tolist()
    return Decomposition(trend=trend, seasonal=seasonal, residual=residual, original=original)
