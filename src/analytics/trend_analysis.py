"""Trend, seasonality, change-point and anomaly detection with a linear forecast."""

import logging
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from statsmodels.tsa.stattools import acf

from .base_models import Anomalies, Forecast, RegressionResult, Seasonality, TrendAnalysis, TrendType
from .config import AnalyticsConfig
from .exceptions import DimensionMismatchError
from .regression import RegressionAnalyzer
from .validation import ArrayLike, StatisticalValidator

logger = logging.getLogger(__name__)

STABLE_SLOPE = 0.001
SEASONALITY_THRESHOLD = 0.3
MAX_SEASONAL_LAG = 24
ANOMALY_Z_THRESHOLD = 2.5
CHANGE_POINT_SIGMAS = 2.0
MAX_FORECAST_PERIODS = 12
FORECAST_FRACTION = 0.2
FORECAST_BAND_SIGMAS = 2.0


class TrendAnalyzer:
    """
    Describes the shape of a univariate time series.

    The linear trend comes from a simple regression of the values on their
    timestamps; seasonality is searched for in what that trend leaves
    unexplained.
    """

    def __init__(self, config: AnalyticsConfig):
        """
        Initialize analyzer.

        Args:
            config: Configuration snapshot used for the whole call
        """
        self.config = config
        self.validator = StatisticalValidator()
        self.regression = RegressionAnalyzer(config)

    def analyze(
        self,
        data: ArrayLike,
        timestamps: Optional[ArrayLike] = None
    ) -> TrendAnalysis:
        """
        Analyze trend, seasonality, change points and anomalies.

        Args:
            data: Series values in time order
            timestamps: Numeric time of each value (defaults to 0..n-1)

        Returns:
            TrendAnalysis with a short linear forecast

        Raises:
            InvalidInputError: Empty or non-finite input
            DimensionMismatchError: timestamps and data differ in length
            InsufficientDataError: Fewer than 3 values
            SingularMatrixError: All timestamps are equal
        """
        values = self.validator.validate_sample(data, "data", min_size=3)
        n = values.size
        if timestamps is None:
            x = np.arange(n, dtype=float)
        else:
            x = self.validator.validate_sample(timestamps, "timestamps")
            if x.size != n:
                raise DimensionMismatchError(
                    f"timestamps has {x.size} values but data has {n}"
                )

        fit = self.regression.simple_linear_regression(x, values)
        slope = fit.coefficients[1]

        if abs(slope) < STABLE_SLOPE:
            trend = TrendType.STABLE
        elif slope > 0:
            trend = TrendType.INCREASING
        else:
            trend = TrendType.DECREASING

        seasonality = self.detect_seasonality(values, np.asarray(fit.residuals))
        if seasonality is not None:
            trend = TrendType.SEASONAL

        change_points = self.detect_change_points(values)
        anomalies = self.detect_anomalies(values)
        periods = min(MAX_FORECAST_PERIODS, int(np.floor(n * FORECAST_FRACTION)))
        forecast = self.forecast(x, fit, periods)

        logger.debug(
            "Trend analysis: n=%d trend=%s slope=%.4g change_points=%d anomalies=%d",
            n, trend.value, slope, len(change_points), len(anomalies.indices)
        )

        return TrendAnalysis(
            trend=trend,
            strength=abs(slope),
            slope=slope,
            seasonality=seasonality,
            change_points=change_points,
            forecast=forecast,
            anomalies=anomalies,
            visualization_data=self._create_visualization_data(x, values, fit, forecast, anomalies)
        )

    def detect_seasonality(
        self,
        values: np.ndarray,
        residuals: np.ndarray
    ) -> Optional[Seasonality]:
        """
        Find the lag with the strongest autocorrelation in the detrended series.

        Args:
            values: Original series
            residuals: Series minus its linear trend

        Returns:
            Seasonality if the best autocorrelation exceeds the threshold
        """
        n = values.size
        max_lag = min(n // 2, MAX_SEASONAL_LAG)
        if max_lag < 2:
            return None

        # A series the linear trend explains completely has nothing periodic left
        residual_ss = float(np.sum((residuals - np.mean(residuals)) ** 2))
        total_ss = float(np.sum((values - np.mean(values)) ** 2))
        if residual_ss <= self.config.tolerance * total_ss:
            return None

        autocorrelations = acf(residuals, nlags=max_lag, fft=False)

        best_period = 0
        max_correlation = 0.0
        for lag in range(2, max_lag + 1):
            correlation = float(autocorrelations[lag])
            if correlation > max_correlation:
                max_correlation = correlation
                best_period = lag

        if max_correlation > SEASONALITY_THRESHOLD:
            return Seasonality(period=best_period, amplitude=max_correlation, phase=0.0)
        return None

    def detect_change_points(self, values: np.ndarray) -> List[int]:
        """
        Flag indices where the mean of the following window departs from the
        mean of the preceding window by more than two standard deviations.
        """
        n = values.size
        window = max(5, n // 10)
        std = float(np.std(values))
        if std == 0 or n < 2 * window + 1:
            return []

        rolling = pd.Series(values).rolling(window).mean()
        mean_before = rolling.shift(1).to_numpy()
        mean_after = rolling.shift(-(window - 1)).to_numpy()

        change_points = []
        for i in range(window, n - window):
            if abs(mean_after[i] - mean_before[i]) > CHANGE_POINT_SIGMAS * std:
                change_points.append(i)
        return change_points

    def detect_anomalies(self, values: np.ndarray) -> Anomalies:
        """Points more than 2.5 population standard deviations from the mean."""
        mean = float(np.mean(values))
        std = float(np.std(values))
        if std == 0:
            return Anomalies()

        z_scores = np.abs(values - mean) / std
        indices = np.flatnonzero(z_scores > ANOMALY_Z_THRESHOLD)
        return Anomalies(
            indices=[int(i) for i in indices],
            values=[float(values[i]) for i in indices],
            scores=[float(z_scores[i]) for i in indices]
        )

    def forecast(self, x: np.ndarray, fit: RegressionResult, periods: int) -> Forecast:
        """Extrapolate the fitted line, stepping by the mean timestamp spacing."""
        if periods <= 0:
            return Forecast(periods=0)

        intercept, slope = fit.coefficients
        step = (x[-1] - x[0]) / (x.size - 1)
        if step == 0:
            step = 1.0
        margin = FORECAST_BAND_SIGMAS * float(np.std(fit.residuals))

        values = []
        intervals = []
        for i in range(1, periods + 1):
            prediction = intercept + slope * (x[-1] + i * step)
            values.append(float(prediction))
            intervals.append((float(prediction - margin), float(prediction + margin)))

        return Forecast(values=values, confidence_intervals=intervals, periods=periods)

    def _create_visualization_data(
        self,
        x: np.ndarray,
        values: np.ndarray,
        fit: RegressionResult,
        forecast: Forecast,
        anomalies: Anomalies
    ) -> Dict:
        """Create visualization data."""
        labels = [f"{t:g}" for t in x] + [f"T+{i + 1}" for i in range(forecast.periods)]
        padding = [None] * forecast.periods
        anomaly_set = set(anomalies.indices)

        return {
            'chart_type': 'line',
            'labels': labels,
            'x_label': 'Time Period',
            'y_label': 'Value',
            'datasets': [
                {
                    'label': 'Values',
                    'data': values.tolist() + padding
                },
                {
                    'label': 'Trend',
                    'data': list(fit.predictions) + padding
                },
                {
                    'label': 'Forecast',
                    'data': [None] * values.size + forecast.values
                },
                {
                    'label': 'Lower Bound',
                    'data': [None] * values.size + [ci[0] for ci in forecast.confidence_intervals],
                    'borderDash': [5, 5]
                },
                {
                    'label': 'Upper Bound',
                    'data': [None] * values.size + [ci[1] for ci in forecast.confidence_intervals],
                    'borderDash': [5, 5]
                },
                {
                    'label': 'Anomalies',
                    'data': [
                        float(v) if i in anomaly_set else None
                        for i, v in enumerate(values)
                    ] + padding,
                    'type': 'scatter',
                    'backgroundColor': '#f44336',
                    'pointRadius': 8
                }
            ]
        }
