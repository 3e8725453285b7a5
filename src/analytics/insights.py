"""Automated insight generation - turns statistical results into ranked findings."""

import logging
from itertools import combinations
from typing import Dict, List, Mapping, Sequence, Union

import numpy as np
import pandas as pd

from .base_models import (
    AutomatedInsight,
    CorrelationMethod,
    CorrelationResult,
    CorrelationStrength,
    InsightType,
    InsightVisualization,
    SignificanceTier,
    TrendAnalysis,
    TrendType,
)
from .config import AnalyticsConfig
from .correlation import CorrelationAnalyzer
from .exceptions import InvalidInputError
from .trend_analysis import TrendAnalyzer
from .validation import StatisticalValidator

logger = logging.getLogger(__name__)

NamedSeries = Union[Mapping[str, Sequence[float]], pd.DataFrame]

MIN_CORRELATION = 0.3
TIER_ORDER = {
    SignificanceTier.HIGH: 3,
    SignificanceTier.MEDIUM: 2,
    SignificanceTier.LOW: 1,
}


class InsightGenerator:
    """
    Converts correlation and trend results across named series into insights.

    Produces for each finding:
    - A title and plain English description
    - Supporting numeric evidence
    - Recommendations from fixed templates
    """

    def __init__(self, config: AnalyticsConfig):
        """
        Initialize generator.

        Args:
            config: Configuration snapshot used for the whole call
        """
        self.config = config
        self.validator = StatisticalValidator()
        self.correlation = CorrelationAnalyzer(config)
        self.trend = TrendAnalyzer(config)

    def generate(self, data: NamedSeries) -> List[AutomatedInsight]:
        """
        Generate insights across all series.

        Args:
            data: Mapping of series name to values, or a DataFrame whose
                columns are the series

        Returns:
            Insights ordered high > medium > low, discovery order within a tier

        Raises:
            InvalidInputError: No series, or a series that is empty or non-finite
            InsufficientDataError: A series with fewer than 3 values
        """
        series = self._prepare(data)
        insights: List[AutomatedInsight] = []

        for name_x, name_y in combinations(series, 2):
            x, y = series[name_x], series[name_y]
            if x.size != y.size:
                logger.debug("Skipping correlation of %s and %s: lengths differ", name_x, name_y)
                continue
            result = self.correlation.analyze(x, y, CorrelationMethod.PEARSON)
            if result.is_significant and abs(result.coefficient) > MIN_CORRELATION:
                insights.append(self.synthesize_correlation(result, name_x, name_y, x, y))

        for name, values in series.items():
            analysis = self.trend.analyze(values)
            if analysis.trend != TrendType.STABLE:
                insights.append(self.synthesize_trend(analysis, name))
            if analysis.anomalies.indices:
                insights.append(self.synthesize_anomalies(analysis, name, values.size))

        logger.debug("Generated %d insight(s) from %d series", len(insights), len(series))
        return sorted(insights, key=lambda insight: -TIER_ORDER[SignificanceTier(insight.significance)])

    def _prepare(self, data: NamedSeries) -> Dict[str, np.ndarray]:
        if isinstance(data, pd.DataFrame):
            data = {str(column): data[column] for column in data.columns}
        if not data:
            raise InvalidInputError("At least one named series is required")
        return {
            str(name): self.validator.validate_sample(values, str(name), min_size=3)
            for name, values in data.items()
        }

    def synthesize_correlation(
        self,
        result: CorrelationResult,
        name_x: str,
        name_y: str,
        x: np.ndarray,
        y: np.ndarray
    ) -> AutomatedInsight:
        """Build an insight from a significant correlation."""
        coefficient = result.coefficient
        abs_coefficient = abs(coefficient)
        if abs_coefficient > 0.7:
            tier = SignificanceTier.HIGH
        elif abs_coefficient > 0.5:
            tier = SignificanceTier.MEDIUM
        else:
            tier = SignificanceTier.LOW

        return AutomatedInsight(
            type=InsightType.CORRELATION,
            title=f"{result.strength.upper()} {result.direction} correlation between {name_x} and {name_y}",
            description=(
                f"There is a {result.strength} {result.direction} correlation "
                f"(r = {coefficient:.3f}) between {name_x} and {name_y}, which is "
                f"statistically significant (p < {self.config.significance_level})."
            ),
            significance=tier,
            confidence=max(0.0, min(1.0, 1 - result.p_value)),
            variables=[name_x, name_y],
            supporting_evidence=[
                f"Correlation coefficient: {coefficient:.3f}",
                f"P-value: {result.p_value:.4f}",
                f"Sample size: {result.sample_size}",
                f"Confidence interval: [{result.confidence_interval[0]:.3f}, {result.confidence_interval[1]:.3f}]",
            ],
            recommendations=self._correlation_recommendations(result, name_x, name_y),
            visualization=InsightVisualization(
                chart_type="scatter",
                config={
                    'x_label': name_x,
                    'y_label': name_y,
                    'data': [{'x': float(a), 'y': float(b)} for a, b in zip(x, y)],
                }
            )
        )

    def synthesize_trend(self, analysis: TrendAnalysis, name: str) -> AutomatedInsight:
        """Build an insight from a non-stable trend."""
        strength = analysis.strength
        if strength > 0.1:
            tier = SignificanceTier.HIGH
        elif strength > 0.05:
            tier = SignificanceTier.MEDIUM
        else:
            tier = SignificanceTier.LOW

        evidence = [
            f"Trend type: {analysis.trend}",
            f"Trend strength: {strength:.3f}",
            f"Change points detected: {len(analysis.change_points)}",
        ]
        if analysis.seasonality is not None:
            evidence.append(f"Seasonal period: {analysis.seasonality.period}")

        return AutomatedInsight(
            type=InsightType.TREND,
            title=f"{name} shows {analysis.trend} trend",
            description=(
                f"The variable {name} exhibits a {analysis.trend} pattern "
                f"with strength {strength:.3f}."
            ),
            significance=tier,
            confidence=min(0.95, strength * 10),
            variables=[name],
            supporting_evidence=evidence,
            recommendations=self._trend_recommendations(analysis, name),
            visualization=self._line_chart(analysis)
        )

    def synthesize_anomalies(self, analysis: TrendAnalysis, name: str, size: int) -> AutomatedInsight:
        """Build an insight from detected anomalies."""
        count = len(analysis.anomalies.indices)
        rate = count / size

        return AutomatedInsight(
            type=InsightType.ANOMALY,
            title=f"Anomalies detected in {name}",
            description=(
                f"{count} anomalies were detected in {name}, "
                f"representing {rate * 100:.1f}% of the data."
            ),
            significance=SignificanceTier.HIGH if rate > 0.1 else SignificanceTier.MEDIUM,
            confidence=0.85,
            variables=[name],
            supporting_evidence=[
                f"Number of anomalies: {count}",
                f"Anomaly rate: {rate * 100:.1f}%",
                f"Max anomaly score: {max(analysis.anomalies.scores):.2f}",
                f"Anomaly positions: {', '.join(str(i) for i in analysis.anomalies.indices)}",
            ],
            recommendations=[
                'Investigate the identified anomalies for data quality issues',
                'Consider external factors that might explain these outliers',
                'Review data collection processes around anomaly periods',
            ],
            visualization=self._line_chart(analysis)
        )

    def _correlation_recommendations(self, result: CorrelationResult, name_x: str, name_y: str) -> List[str]:
        recommendations = []

        if result.strength in (CorrelationStrength.STRONG, CorrelationStrength.VERY_STRONG):
            recommendations.append(f"Consider using {name_x} as a predictor for {name_y} in regression models")
            recommendations.append("Monitor both variables together as they show strong relationship")

        if result.direction == "negative":
            recommendations.append(f"Investigate the inverse relationship between {name_x} and {name_y}")

        recommendations.append("Collect more data to validate this relationship")
        return recommendations

    def _trend_recommendations(self, analysis: TrendAnalysis, name: str) -> List[str]:
        recommendations = []

        if analysis.trend == TrendType.INCREASING:
            recommendations.append(f"Monitor the upward trend in {name} for sustainability")
            recommendations.append("Plan for continued growth based on trend projection")
        elif analysis.trend == TrendType.DECREASING:
            recommendations.append(f"Investigate causes of declining trend in {name}")
            recommendations.append("Implement corrective measures to reverse the trend")
        elif analysis.trend == TrendType.SEASONAL:
            recommendations.append(f"Plan resources based on seasonal patterns in {name}")
            recommendations.append("Use seasonal forecasting for better predictions")

        if analysis.change_points:
            recommendations.append("Analyze events around change points for insights")

        return recommendations

    @staticmethod
    def _line_chart(analysis: TrendAnalysis) -> InsightVisualization:
        return InsightVisualization(chart_type="line", config=analysis.visualization_data or {})
