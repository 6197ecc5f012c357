"""Tests for the statistical primitives."""

import pytest

from workout_insights.analysis.statistics import (
    analyze_trend,
    correlation,
    create_lag_features,
    decompose,
    detect_outliers,
    detect_seasonality,
    exponential_moving_average,
    exponential_smoothing,
    linear_regression,
    moving_average,
    normalize,
    standard_deviation,
)


class TestLinearRegression:
    """Test least-squares fitting and its degenerate cases."""

    def test_perfect_line(self):
        result = linear_regression([0, 1, 2, 3], [1, 3, 5, 7])

        assert result.slope == pytest.approx(2.0)
        assert result.intercept == pytest.approx(1.0)
        assert result.r_squared == pytest.approx(1.0)
        assert result.confidence == pytest.approx(1.0)

    def test_too_few_points(self):
        result = linear_regression([1], [5])
        assert result.slope == 0
        assert result.intercept == 0
        assert result.r_squared == 0

    def test_mismatched_lengths(self):
        assert linear_regression([1, 2, 3], [1, 2]).slope == 0

    def test_constant_x(self):
        result = linear_regression([2, 2, 2], [1, 5, 9])
        assert result.slope == 0
        assert result.confidence == 0

    def test_constant_y_has_no_confidence(self):
        result = linear_regression([0, 1, 2, 3], [5, 5, 5, 5])
        assert result.slope == pytest.approx(0.0)
        assert result.r_squared == 0


class TestTrendAnalysis:
    """Test trend direction classification."""

    def test_rising_series(self):
        trend = analyze_trend([10, 11, 12, 13, 14])
        assert trend.direction == "positive"
        assert trend.slope == pytest.approx(1.0)
        assert trend.confidence == pytest.approx(1.0)

    def test_falling_series(self):
        assert analyze_trend([14, 13, 12, 11, 10]).direction == "negative"

    def test_volatile_series_is_neutral(self):
        # Coefficient of variation well above 0.3
        assert analyze_trend([1, 2, 3, 4, 5]).direction == "neutral"

    def test_short_series_is_neutral(self):
        trend = analyze_trend([1, 9])
        assert trend.direction == "neutral"
        assert trend.confidence == 0


class TestSmoothing:
    """Test moving averages and forecasts."""

    def test_moving_average(self):
        assert moving_average([1, 2, 3, 4], 2) == pytest.approx([1.5, 2.5, 3.5])

    def test_moving_average_window_covers_series(self):
        assert moving_average([1, 2, 3, 4], 4) == pytest.approx([2.5])
        assert moving_average([1, 2, 3], 10) == pytest.approx([2.0])

    def test_moving_average_empty(self):
        assert moving_average([], 3) == []

    def test_exponential_moving_average(self):
        assert exponential_moving_average([10, 20], alpha=0.5) == pytest.approx([10, 15])
        assert exponential_moving_average([]) == []

    def test_exponential_smoothing_flat_series(self):
        forecast = exponential_smoothing([5.0] * 10, periods=7)
        assert len(forecast) == 7
        assert forecast == pytest.approx([5.0] * 7)

    def test_exponential_smoothing_follows_trend(self):
        forecast = exponential_smoothing([10, 12, 14, 16, 18, 20], periods=3)
        assert forecast[2] > forecast[1] > forecast[0]

    def test_exponential_smoothing_empty(self):
        assert exponential_smoothing([]) == []


class TestOutliersAndSpread:
    """Test outlier detection, correlation and dispersion."""

    def test_detect_outliers(self):
        result = detect_outliers([1, 2, 3, 4, 100])
        assert result.outliers == [100]
        assert result.indices == [4]

    def test_detect_outliers_needs_four_points(self):
        result = detect_outliers([1, 2, 100])
        assert result.outliers == []
        assert result.indices == []

    def test_correlation(self):
        assert correlation([1, 2, 3, 4], [2, 4, 6, 8]) == pytest.approx(1.0)
        assert correlation([1, 2, 3, 4], [8, 6, 4, 2]) == pytest.approx(-1.0)

    def test_correlation_degenerate_input(self):
        assert correlation([1, 2, 3], [5, 5, 5]) == 0
        assert correlation([1, 2], [1, 2, 3]) == 0
        assert correlation([1], [1]) == 0

    def test_sample_standard_deviation(self):
        assert standard_deviation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.13809, rel=1e-4)
        assert standard_deviation([3]) == 0

    def test_normalize(self):
        result = normalize([2, 4, 6])
        assert result.values == pytest.approx([0.0, 0.5, 1.0])
        assert result.min == 2
        assert result.max == 6

    def test_normalize_constant(self):
        assert normalize([3, 3, 3]).values == [0.5, 0.5, 0.5]
        assert normalize([]).values == []


class TestTimeSeriesExtras:
    """Test lag features, seasonality and decomposition."""

    def test_lag_features(self):
        rows = create_lag_features([1, 2, 3, 4], [1, 2])

        assert len(rows) == 2
        first = {f.name: f for f in rows[0]}
        assert first["lag_1"].value == 2
        assert first["lag_2"].value == 1
        assert first["lag_1"].importance == pytest.approx(1 / 2)
        assert first["lag_2"].importance == pytest.approx(1 / 3)

    def test_lag_features_without_lags(self):
        assert create_lag_features([1, 2, 3], []) == []

    def test_weekly_seasonality(self):
        weekly = [1, 2, 3, 4, 5, 6, 7] * 3
        result = detect_seasonality(weekly)
        assert result.has_seasonality
        assert result.period == 7
        assert result.strength == pytest.approx(1.0)

    def test_seasonality_needs_two_weeks(self):
        assert not detect_seasonality([1, 2, 3, 4, 5, 6, 7]).has_seasonality

    def test_decomposition_is_additive(self):
        values = [10 + (i % 7) + i * 0.5 for i in range(21)]
        result = decompose(values)

        assert len(result.trend) == len(values)
        assert len(result.seasonal) == len(values)
        for i, value in enumerate(values):
            assert result.trend[i] + result.seasonal[i] + result.residual[i] == pytest.approx(value)

    def test_decomposition_short_series_has_no_seasonal_part(self):
        result = decompose([1, 2, 3, 4, 5, 6])
        assert result.seasonal == [0.0] * 6

    def test_decomposition_empty(self):
        result = decompose([])
        assert result.trend == []
        assert result.original == []
