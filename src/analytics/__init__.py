"""
Advanced Analytics Layer

This module provides statistical analysis backed by proven numerical libraries.
Results are calculated with fixed code and phrased into insights from templates.

Modules:
- engine: Facade holding the configuration snapshot
- hypothesis_testing: t-tests, chi-square goodness of fit, two-proportion z-test
- correlation: Pearson, Spearman and Kendall correlation
- regression: Simple and multiple linear regression
- trend_analysis: Trend, seasonality, change points, anomalies and forecast
- insights: Automated insight generation
- linear_algebra: Matrix helpers for regression
- distributions: Tail probabilities and quantiles
- validation: Input checks
- config: Configuration snapshot and environment settings
"""

from .base_models import (
    Anomalies,
    AutomatedInsight,
    CorrelationDirection,
    CorrelationMethod,
    CorrelationResult,
    CorrelationStrength,
    Forecast,
    InsightType,
    InsightVisualization,
    RegressionResult,
    RegressionType,
    Seasonality,
    SignificanceTier,
    StatisticalTestResult,
    TrendAnalysis,
    TrendType,
    TTestMode,
)
from .config import AnalyticsConfig, AnalyticsSettings, get_settings
from .exceptions import (
    AnalyticsError,
    DimensionMismatchError,
    DomainError,
    ErrorKind,
    InsufficientDataError,
    InvalidInputError,
    SingularMatrixError,
)

from .correlation import CorrelationAnalyzer
from .engine import AdvancedAnalyticsEngine
from .hypothesis_testing import HypothesisTester
from .insights import InsightGenerator
from .regression import RegressionAnalyzer
from .trend_analysis import TrendAnalyzer
from .validation import StatisticalValidator

__all__ = [
    # Engine
    'AdvancedAnalyticsEngine',

    # Configuration
    'AnalyticsConfig',
    'AnalyticsSettings',
    'get_settings',

    # Result models
    'StatisticalTestResult',
    'CorrelationResult',
    'RegressionResult',
    'TrendAnalysis',
    'Seasonality',
    'Forecast',
    'Anomalies',
    'AutomatedInsight',
    'InsightVisualization',
    'TTestMode',
    'CorrelationMethod',
    'CorrelationStrength',
    'CorrelationDirection',
    'RegressionType',
    'TrendType',
    'InsightType',
    'SignificanceTier',

    # Errors
    'ErrorKind',
    'AnalyticsError',
    'InvalidInputError',
    'DimensionMismatchError',
    'InsufficientDataError',
    'SingularMatrixError',
    'DomainError',

    # Analyzers
    'HypothesisTester',
    'CorrelationAnalyzer',
    'RegressionAnalyzer',
    'TrendAnalyzer',
    'InsightGenerator',
    'StatisticalValidator'
]
