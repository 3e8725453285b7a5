"""Hypothesis testing: t-tests, chi-square goodness of fit, two-proportion z-test."""

import logging
import math
from typing import Optional, Tuple, Union

import numpy as np

from .base_models import StatisticalTestResult, TTestMode
from .config import AnalyticsConfig
from .distributions import (
    chi_square_critical,
    chi_square_upper_p,
    normal_inverse,
    normal_two_tailed_p,
    t_quantile,
    t_two_tailed_p,
)
from .exceptions import DimensionMismatchError, InvalidInputError
from .validation import ArrayLike, StatisticalValidator

logger = logging.getLogger(__name__)


class HypothesisTester:
    """
    Parametric hypothesis tests on numeric samples.

    Significance flags use the snapshot's significance level; confidence
    intervals use its confidence level.
    """

    def __init__(self, config: AnalyticsConfig):
        """
        Initialize tester.

        Args:
            config: Configuration snapshot used for the whole call
        """
        self.config = config
        self.alpha = config.significance_level
        self.validator = StatisticalValidator()

    def t_test(
        self,
        sample1: ArrayLike,
        sample2: Optional[ArrayLike] = None,
        mode: Union[TTestMode, str] = TTestMode.TWO_SAMPLE,
        hypothesized_mean: float = 0.0
    ) -> StatisticalTestResult:
        """
        Run a one-sample, two-sample or paired t-test.

        Args:
            sample1: First sample
            sample2: Second sample (two-sample and paired modes)
            mode: 'one-sample', 'two-sample' or 'paired'
            hypothesized_mean: Null-hypothesis mean for the one-sample test

        Returns:
            StatisticalTestResult

        Raises:
            InvalidInputError: Unknown mode or missing second sample
            DimensionMismatchError: Paired samples of unequal length
            InsufficientDataError: Fewer than two observations
        """
        try:
            mode = TTestMode(mode)
        except ValueError:
            raise InvalidInputError(
                f"Unsupported t-test mode '{mode}'. Choose from {[m.value for m in TTestMode]}"
            ) from None

        if not math.isfinite(hypothesized_mean):
            raise InvalidInputError(f"hypothesized_mean must be finite, got {hypothesized_mean}")

        if mode == TTestMode.ONE_SAMPLE:
            sample = self.validator.validate_sample(sample1, "sample1", min_size=2)
            return self._one_sample(sample, hypothesized_mean, name="One-Sample t-Test", label="one-sample")

        if sample2 is None:
            raise InvalidInputError(f"{mode.value} t-test requires two samples")

        if mode == TTestMode.PAIRED:
            first = self.validator.validate_sample(sample1, "sample1")
            second = self.validator.validate_sample(sample2, "sample2")
            if first.size != second.size:
                raise DimensionMismatchError(
                    f"Paired t-test requires two samples of equal length ({first.size} != {second.size})"
                )
            differences = self.validator.validate_sample(first - second, "differences", min_size=2)
            return self._one_sample(differences, 0.0, name="Paired t-Test", label="paired")

        first = self.validator.validate_sample(sample1, "sample1", min_size=2)
        second = self.validator.validate_sample(sample2, "sample2", min_size=2)
        if self.config.robust_methods:
            return self._welch(first, second)
        return self._pooled(first, second)

    def _one_sample(
        self,
        sample: np.ndarray,
        hypothesized_mean: float,
        name: str,
        label: str
    ) -> StatisticalTestResult:
        n = sample.size
        mean = float(np.mean(sample))
        standard_error = float(np.std(sample, ddof=1)) / math.sqrt(n)
        df = n - 1

        t_statistic = self._ratio(mean - hypothesized_mean, standard_error)
        p_value = t_two_tailed_p(t_statistic, df)
        is_significant = p_value < self.alpha

        margin = t_quantile((1 + self.config.confidence_level) / 2, df) * standard_error
        logger.debug("%s: n=%d t=%.4f p=%.4g", name, n, t_statistic, p_value)

        return StatisticalTestResult(
            name=name,
            statistic=t_statistic,
            p_value=p_value,
            degrees_of_freedom=df,
            critical_value=t_quantile(1 - self.alpha / 2, df),
            is_significant=is_significant,
            interpretation=self._interpret_t_test(t_statistic, p_value, is_significant, label),
            confidence_interval=(mean - margin, mean + margin)
        )

    def _welch(self, sample1: np.ndarray, sample2: np.ndarray) -> StatisticalTestResult:
        n1, n2 = sample1.size, sample2.size
        v1 = float(np.var(sample1, ddof=1)) / n1
        v2 = float(np.var(sample2, ddof=1)) / n2
        standard_error = math.sqrt(v1 + v2)
        mean_diff = float(np.mean(sample1) - np.mean(sample2))

        # Welch-Satterthwaite
        denominator = v1 ** 2 / (n1 - 1) + v2 ** 2 / (n2 - 1)
        df = (v1 + v2) ** 2 / denominator if denominator > 0 else float(n1 + n2 - 2)

        return self._two_sample_result(
            "Two-Sample t-Test (Welch)", mean_diff, standard_error, df
        )

    def _pooled(self, sample1: np.ndarray, sample2: np.ndarray) -> StatisticalTestResult:
        n1, n2 = sample1.size, sample2.size
        df = n1 + n2 - 2
        pooled_var = (
            (n1 - 1) * float(np.var(sample1, ddof=1)) + (n2 - 1) * float(np.var(sample2, ddof=1))
        ) / df
        standard_error = math.sqrt(pooled_var * (1 / n1 + 1 / n2))
        mean_diff = float(np.mean(sample1) - np.mean(sample2))

        return self._two_sample_result(
            "Two-Sample t-Test (Pooled)", mean_diff, standard_error, df
        )

    def _two_sample_result(
        self,
        name: str,
        mean_diff: float,
        standard_error: float,
        df: float
    ) -> StatisticalTestResult:
        t_statistic = self._ratio(mean_diff, standard_error)
        p_value = t_two_tailed_p(t_statistic, df)
        is_significant = p_value < self.alpha
        logger.debug("%s: t=%.4f df=%.2f p=%.4g", name, t_statistic, df, p_value)

        return StatisticalTestResult(
            name=name,
            statistic=t_statistic,
            p_value=p_value,
            degrees_of_freedom=df,
            critical_value=t_quantile(1 - self.alpha / 2, df),
            is_significant=is_significant,
            interpretation=self._interpret_t_test(t_statistic, p_value, is_significant, "two-sample")
        )

    def chi_square_test(
        self,
        observed: ArrayLike,
        expected: Optional[ArrayLike] = None
    ) -> StatisticalTestResult:
        """
        Chi-square goodness-of-fit test.

        Args:
            observed: Observed counts per category
            expected: Expected counts; uniform (mean of observed) if omitted

        Returns:
            StatisticalTestResult with df = k - 1
        """
        obs = self.validator.validate_sample(observed, "observed", min_size=2)
        if np.any(obs < 0):
            raise InvalidInputError("observed counts must be non-negative")

        if expected is None:
            exp = np.full(obs.size, float(np.mean(obs)))
        else:
            obs, exp = self.validator.validate_pair(obs, expected, names=("observed", "expected"))
        if np.any(exp <= 0):
            raise InvalidInputError("expected counts must be positive")

        chi_square = float(np.sum((obs - exp) ** 2 / exp))
        df = obs.size - 1
        p_value = chi_square_upper_p(chi_square, df)
        is_significant = p_value < self.alpha

        return StatisticalTestResult(
            name="Chi-Square Goodness of Fit Test",
            statistic=chi_square,
            p_value=p_value,
            degrees_of_freedom=df,
            critical_value=chi_square_critical(self.alpha, df),
            is_significant=is_significant,
            interpretation=self._interpret_chi_square(chi_square, p_value, is_significant)
        )

    def proportion_test(
        self,
        successes1: int,
        trials1: int,
        successes2: int,
        trials2: int
    ) -> StatisticalTestResult:
        """
        Two-proportion z-test comparing a variation against a control.

        The statistic uses the pooled standard error; the confidence interval
        for p2 - p1 uses the unpooled one.

        Args:
            successes1: Conversions in the control group
            trials1: Size of the control group
            successes2: Conversions in the variation group
            trials2: Size of the variation group

        Returns:
            StatisticalTestResult for the difference p2 - p1
        """
        self.validator.validate_counts(successes1, trials1, "group 1")
        self.validator.validate_counts(successes2, trials2, "group 2")

        p1 = successes1 / trials1
        p2 = successes2 / trials2
        pooled = (successes1 + successes2) / (trials1 + trials2)
        pooled_se = math.sqrt(pooled * (1 - pooled) * (1 / trials1 + 1 / trials2))

        if pooled_se == 0:
            z_score, p_value = 0.0, 1.0
        else:
            z_score = (p2 - p1) / pooled_se
            p_value = normal_two_tailed_p(z_score)
        is_significant = p_value < self.alpha

        unpooled_se = math.sqrt(p1 * (1 - p1) / trials1 + p2 * (1 - p2) / trials2)
        margin = normal_inverse((1 + self.config.confidence_level) / 2) * unpooled_se
        difference = p2 - p1

        interpretation = (
            f"Two-proportion z-test result: z = {z_score:.3f}, "
            f"difference = {difference:.4f} ({p1:.2%} vs {p2:.2%}), "
            + self._verdict(p_value, is_significant, "The proportions differ significantly.",
                            "The proportions do not differ significantly.")
        )

        return StatisticalTestResult(
            name="Two-Proportion z-Test",
            statistic=z_score,
            p_value=p_value,
            critical_value=normal_inverse(1 - self.alpha / 2),
            is_significant=is_significant,
            interpretation=interpretation,
            confidence_interval=(difference - margin, difference + margin)
        )

    @staticmethod
    def _ratio(numerator: float, standard_error: float) -> float:
        """Test statistic with a zero-variance guard."""
        if standard_error == 0:
            if numerator == 0:
                return 0.0
            return math.copysign(math.inf, numerator)
        return numerator / standard_error

    @staticmethod
    def _verdict(p_value: float, is_significant: bool, reject: str, retain: str) -> str:
        if is_significant:
            return f"The test is statistically significant (p = {p_value:.4f}). {reject}"
        return f"The test is not statistically significant (p = {p_value:.4f}). {retain}"

    def _interpret_t_test(self, t_statistic: float, p_value: float, is_significant: bool, label: str) -> str:
        verdict = self._verdict(
            p_value, is_significant,
            "We reject the null hypothesis.",
            "We fail to reject the null hypothesis."
        )
        return f"{label} t-test result: t = {t_statistic:.3f}, {verdict}"

    def _interpret_chi_square(self, chi_square: float, p_value: float, is_significant: bool) -> str:
        verdict = self._verdict(
            p_value, is_significant,
            "The observed frequencies differ significantly from expected.",
            "The observed frequencies do not differ significantly from expected."
        )
        return f"Chi-square test result: chi2 = {chi_square:.3f}, {verdict}"
