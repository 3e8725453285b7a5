"""
Analytics engine facade.

One engine instance holds the current configuration snapshot and hands it
to a fresh analyzer for every call. Construct it once and pass it to the
code that needs it.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .base_models import (
    AutomatedInsight,
    CorrelationMethod,
    CorrelationResult,
    RegressionResult,
    StatisticalTestResult,
    TrendAnalysis,
    TTestMode,
)
from .config import AnalyticsConfig, get_settings
from .correlation import CorrelationAnalyzer
from .hypothesis_testing import HypothesisTester
from .insights import InsightGenerator, NamedSeries
from .regression import RegressionAnalyzer
from .trend_analysis import TrendAnalyzer
from .validation import ArrayLike

logger = logging.getLogger(__name__)


class AdvancedAnalyticsEngine:
    """
    Entry point for hypothesis tests, correlation, regression, trend analysis
    and automated insights.

    Configuration is copy-on-write: update_config swaps in a new frozen
    snapshot, and every operation reads the snapshot once at entry, so an
    update never changes a computation that is already running.
    """

    def __init__(self, config: Optional[AnalyticsConfig] = None):
        """
        Initialize engine.

        Args:
            config: Initial configuration (defaults to ANALYTICS_* settings)
        """
        self._config = config if config is not None else get_settings().to_config()
        self._lock = threading.Lock()

    def get_config(self) -> AnalyticsConfig:
        """Return a copy of the current configuration snapshot."""
        return self._config.model_copy()

    def update_config(self, changes: Optional[Dict[str, Any]] = None, **kwargs: Any) -> AnalyticsConfig:
        """
        Merge changes into the configuration.

        Args:
            changes: Fields to replace
            **kwargs: Same, as keyword arguments

        Returns:
            The new snapshot

        Raises:
            InvalidInputError: Unknown field or value out of range; the
                current configuration is left untouched
        """
        updates = dict(changes or {})
        updates.update(kwargs)
        with self._lock:
            new_config = self._config.merged(updates)
            self._config = new_config
        logger.info("Analytics configuration updated: %s", sorted(updates))
        return new_config

    def t_test(
        self,
        sample1: ArrayLike,
        sample2: Optional[ArrayLike] = None,
        mode: Union[TTestMode, str] = TTestMode.TWO_SAMPLE,
        hypothesized_mean: float = 0.0
    ) -> StatisticalTestResult:
        """One-sample, two-sample or paired t-test."""
        return HypothesisTester(self._config).t_test(sample1, sample2, mode, hypothesized_mean)

    def chi_square_test(
        self,
        observed: ArrayLike,
        expected: Optional[ArrayLike] = None
    ) -> StatisticalTestResult:
        """Chi-square goodness-of-fit test."""
        return HypothesisTester(self._config).chi_square_test(observed, expected)

    def proportion_test(
        self,
        successes1: int,
        trials1: int,
        successes2: int,
        trials2: int
    ) -> StatisticalTestResult:
        """Two-proportion z-test."""
        return HypothesisTester(self._config).proportion_test(successes1, trials1, successes2, trials2)

    def correlation_analysis(
        self,
        x: ArrayLike,
        y: ArrayLike,
        method: Union[CorrelationMethod, str] = CorrelationMethod.PEARSON
    ) -> CorrelationResult:
        """Pearson, Spearman or Kendall correlation."""
        return CorrelationAnalyzer(self._config).analyze(x, y, method)

    def simple_linear_regression(self, x: ArrayLike, y: ArrayLike) -> RegressionResult:
        """Ordinary least squares fit of y on a single predictor."""
        return RegressionAnalyzer(self._config).simple_linear_regression(x, y)

    def multiple_regression(
        self,
        y: ArrayLike,
        X: Union[Sequence[Sequence[float]], np.ndarray, pd.DataFrame],
        feature_names: Optional[List[str]] = None
    ) -> RegressionResult:
        """Ordinary least squares fit of y on several predictors."""
        return RegressionAnalyzer(self._config).multiple_regression(y, X, feature_names)

    def trend_analysis(
        self,
        data: ArrayLike,
        timestamps: Optional[ArrayLike] = None
    ) -> TrendAnalysis:
        """Trend, seasonality, change points, anomalies and forecast."""
        return TrendAnalyzer(self._config).analyze(data, timestamps)

    def generate_insights(self, data: NamedSeries) -> List[AutomatedInsight]:
        """Ranked insights across named series."""
        return InsightGenerator(self._config).generate(data)
