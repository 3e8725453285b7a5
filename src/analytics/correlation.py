"""Correlation analysis with significance testing and Fisher confidence intervals."""

import logging
import math
from typing import Tuple, Union

import numpy as np
from scipy import stats

from .base_models import (
    CorrelationDirection,
    CorrelationMethod,
    CorrelationResult,
    CorrelationStrength,
)
from .config import AnalyticsConfig
from .distributions import normal_inverse, normal_two_tailed_p, t_two_tailed_p
from .exceptions import InvalidInputError
from .validation import ArrayLike, StatisticalValidator

logger = logging.getLogger(__name__)

MIN_OBSERVATIONS = 3


class CorrelationAnalyzer:
    """
    Pearson, Spearman and Kendall correlation between two variables.

    The coefficient is symmetric in its arguments for every method.
    """

    def __init__(self, config: AnalyticsConfig):
        """
        Initialize analyzer.

        Args:
            config: Configuration snapshot used for the whole call
        """
        self.config = config
        self.alpha = config.significance_level
        self.validator = StatisticalValidator()

    def analyze(
        self,
        x: ArrayLike,
        y: ArrayLike,
        method: Union[CorrelationMethod, str] = CorrelationMethod.PEARSON
    ) -> CorrelationResult:
        """
        Measure the association between x and y.

        Args:
            x: First variable
            y: Second variable, same length as x
            method: 'pearson', 'spearman' or 'kendall'

        Returns:
            CorrelationResult

        Raises:
            InvalidInputError: Unknown method, length mismatch or fewer than 3 points
        """
        try:
            method = CorrelationMethod(method)
        except ValueError:
            raise InvalidInputError(
                f"Unsupported correlation method '{method}'. Choose from {[m.value for m in CorrelationMethod]}"
            ) from None

        x_arr, y_arr = self.validator.validate_pair(x, y)
        n = x_arr.size
        if n < MIN_OBSERVATIONS:
            raise InvalidInputError(
                f"Correlation needs at least {MIN_OBSERVATIONS} paired observations, got {n}"
            )

        if method == CorrelationMethod.PEARSON:
            coefficient = self._pearson(x_arr, y_arr)
            p_value = self._pearson_p_value(coefficient, n)
        elif method == CorrelationMethod.SPEARMAN:
            coefficient = self._spearman(x_arr, y_arr)
            p_value = normal_two_tailed_p(coefficient * math.sqrt(n - 1))
        else:
            coefficient = self._kendall(x_arr, y_arr)
            variance = 2 * (2 * n + 5) / (9 * n * (n - 1))
            p_value = normal_two_tailed_p(coefficient / math.sqrt(variance))

        logger.debug("%s correlation: r=%.4f p=%.4g n=%d", method.value, coefficient, p_value, n)

        return CorrelationResult(
            coefficient=coefficient,
            p_value=p_value,
            method=method,
            strength=self.classify_strength(abs(coefficient)),
            direction=self._direction(coefficient),
            is_significant=p_value < self.alpha,
            sample_size=n,
            confidence_interval=self._confidence_interval(coefficient, n)
        )

    def _pearson(self, x: np.ndarray, y: np.ndarray) -> float:
        dx = x - np.mean(x)
        dy = y - np.mean(y)
        denominator = math.sqrt(float(np.sum(dx * dx)) * float(np.sum(dy * dy)))
        if denominator == 0:
            return 0.0
        return self._clip(float(np.sum(dx * dy)) / denominator)

    def _spearman(self, x: np.ndarray, y: np.ndarray) -> float:
        """Spearman's rho on average ranks."""
        rank_x = stats.rankdata(x, method="average")
        rank_y = stats.rankdata(y, method="average")
        has_ties = np.unique(x).size < x.size or np.unique(y).size < y.size
        if has_ties:
            # The d-squared shortcut is only exact without ties
            return self._pearson(rank_x, rank_y)

        n = x.size
        sum_d_squared = float(np.sum((rank_x - rank_y) ** 2))
        return self._clip(1 - 6 * sum_d_squared / (n * (n * n - 1)))

    def _kendall(self, x: np.ndarray, y: np.ndarray) -> float:
        """Kendall's tau-a over all pairs."""
        n = x.size
        concordant = 0
        discordant = 0
        # One row of pairs at a time keeps memory linear in n
        for i in range(n - 1):
            products = np.sign(x[i + 1:] - x[i]) * np.sign(y[i + 1:] - y[i])
            concordant += int(np.count_nonzero(products > 0))
            discordant += int(np.count_nonzero(products < 0))
        return self._clip((concordant - discordant) / (n * (n - 1) / 2))

    def _pearson_p_value(self, r: float, n: int) -> float:
        if abs(r) >= 1.0:
            return 0.0
        t_statistic = r * math.sqrt((n - 2) / (1 - r * r))
        return t_two_tailed_p(t_statistic, n - 2)

    def _confidence_interval(self, r: float, n: int) -> Tuple[float, float]:
        """Fisher z-transform interval, back-transformed with tanh."""
        if abs(r) >= 1.0:
            return (r, r)
        if n <= 3:
            return (-1.0, 1.0)

        z = math.atanh(r)
        se = 1 / math.sqrt(n - 3)
        z_crit = normal_inverse((1 + self.config.confidence_level) / 2)
        return (math.tanh(z - z_crit * se), math.tanh(z + z_crit * se))

    @staticmethod
    def classify_strength(abs_coefficient: float) -> CorrelationStrength:
        """Classify |r| into weak / moderate / strong / very strong."""
        if abs_coefficient < 0.3:
            return CorrelationStrength.WEAK
        elif abs_coefficient < 0.5:
            return CorrelationStrength.MODERATE
        elif abs_coefficient < 0.7:
            return CorrelationStrength.STRONG
        else:
            return CorrelationStrength.VERY_STRONG

    @staticmethod
    def _direction(coefficient: float) -> CorrelationDirection:
        if coefficient > 0:
            return CorrelationDirection.POSITIVE
        elif coefficient < 0:
            return CorrelationDirection.NEGATIVE
        return CorrelationDirection.NONE

    @staticmethod
    def _clip(value: float) -> float:
        return max(-1.0, min(1.0, value))
