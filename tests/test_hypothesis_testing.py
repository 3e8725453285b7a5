"""Tests for t-tests, chi-square and the two-proportion z-test."""

import math

import numpy as np
import pytest
from scipy import stats

from src.analytics import (
    AdvancedAnalyticsEngine,
    AnalyticsConfig,
    DimensionMismatchError,
    InsufficientDataError,
    InvalidInputError,
    TTestMode,
)

SAMPLE_A = [12.1, 11.8, 13.4, 12.9, 12.2, 13.1, 11.5, 12.7, 12.0, 13.3]
SAMPLE_B = [13.2, 14.1, 12.9, 13.8, 14.4, 13.5, 13.0, 14.8, 13.9, 12.6, 14.2, 13.7]


class TestOneSampleTTest:
    """One-sample t-test."""

    def test_hypothesized_mean_equal_to_sample_mean(self, engine):
        """Test that testing a sample against its own mean gives t = 0, p = 1."""
        result = engine.t_test(SAMPLE_A, mode=TTestMode.ONE_SAMPLE, hypothesized_mean=float(np.mean(SAMPLE_A)))
        assert result.statistic == pytest.approx(0.0, abs=1e-12)
        assert result.p_value == pytest.approx(1.0)
        assert result.is_significant is False

    def test_matches_scipy(self, engine):
        """Test against scipy.stats.ttest_1samp."""
        result = engine.t_test(SAMPLE_A, mode="one-sample", hypothesized_mean=12.0)
        expected = stats.ttest_1samp(SAMPLE_A, 12.0)
        assert result.statistic == pytest.approx(expected.statistic)
        assert result.p_value == pytest.approx(expected.pvalue)
        assert result.degrees_of_freedom == len(SAMPLE_A) - 1
        assert result.name == "One-Sample t-Test"

    def test_confidence_interval_contains_mean(self, engine):
        """Test the interval is centred on the sample mean."""
        result = engine.t_test(SAMPLE_A, mode="one-sample")
        low, high = result.confidence_interval
        assert low < np.mean(SAMPLE_A) < high
        assert (low + high) / 2 == pytest.approx(np.mean(SAMPLE_A))

    def test_zero_variance(self, engine):
        """Test constant samples."""
        same = engine.t_test([5.0, 5.0, 5.0], mode="one-sample", hypothesized_mean=5.0)
        assert same.statistic == 0.0
        assert same.p_value == 1.0

        shifted = engine.t_test([5.0, 5.0, 5.0], mode="one-sample", hypothesized_mean=4.0)
        assert math.isinf(shifted.statistic)
        assert shifted.p_value == 0.0
        assert shifted.is_significant is True

    @pytest.mark.parametrize("mean", [float("nan"), float("inf")])
    def test_non_finite_hypothesized_mean(self, engine, mean):
        """Test that a NaN or infinite null mean is rejected."""
        with pytest.raises(InvalidInputError):
            engine.t_test(SAMPLE_A, mode="one-sample", hypothesized_mean=mean)

    def test_single_observation(self, engine):
        """Test that one value is not enough."""
        with pytest.raises(InsufficientDataError):
            engine.t_test([1.0], mode="one-sample")


class TestTwoSampleTTest:
    """Welch and pooled two-sample t-tests."""

    def test_welch_matches_scipy(self, engine):
        """Test the default robust mode against scipy's Welch test."""
        result = engine.t_test(SAMPLE_A, SAMPLE_B)
        expected = stats.ttest_ind(SAMPLE_A, SAMPLE_B, equal_var=False)
        assert result.statistic == pytest.approx(expected.statistic)
        assert result.p_value == pytest.approx(expected.pvalue)
        assert result.name == "Two-Sample t-Test (Welch)"
        assert result.is_significant is True
        assert "We reject the null hypothesis" in result.interpretation

    def test_pooled_when_robust_methods_disabled(self):
        """Test the Student t-test when robust methods are off."""
        engine = AdvancedAnalyticsEngine(AnalyticsConfig(robust_methods=False))
        result = engine.t_test(SAMPLE_A, SAMPLE_B)
        expected = stats.ttest_ind(SAMPLE_A, SAMPLE_B, equal_var=True)
        assert result.statistic == pytest.approx(expected.statistic)
        assert result.p_value == pytest.approx(expected.pvalue)
        assert result.degrees_of_freedom == len(SAMPLE_A) + len(SAMPLE_B) - 2
        assert result.name == "Two-Sample t-Test (Pooled)"

    def test_critical_value(self, engine):
        """Test the two-sided critical value at the configured alpha."""
        result = engine.t_test(SAMPLE_A, SAMPLE_B)
        assert result.critical_value == pytest.approx(stats.t.ppf(0.975, result.degrees_of_freedom))

    def test_missing_second_sample(self, engine):
        """Test that two-sample mode needs two samples."""
        with pytest.raises(InvalidInputError):
            engine.t_test(SAMPLE_A)

    def test_unknown_mode(self, engine):
        """Test that an unknown mode raises."""
        with pytest.raises(InvalidInputError):
            engine.t_test(SAMPLE_A, SAMPLE_B, mode="three-sample")

    def test_non_finite_values(self, engine):
        """Test that NaN input is rejected."""
        with pytest.raises(InvalidInputError):
            engine.t_test([1.0, float("nan"), 3.0], SAMPLE_B)


class TestPairedTTest:
    """Paired t-test."""

    def test_matches_scipy(self, engine):
        """Test against scipy.stats.ttest_rel."""
        before = SAMPLE_A
        after = [v + d for v, d in zip(SAMPLE_A, [0.3, 0.1, 0.5, -0.2, 0.4, 0.2, 0.6, 0.1, 0.3, 0.0])]
        result = engine.t_test(before, after, mode=TTestMode.PAIRED)
        expected = stats.ttest_rel(before, after)
        assert result.statistic == pytest.approx(expected.statistic)
        assert result.p_value == pytest.approx(expected.pvalue)
        assert result.name == "Paired t-Test"

    def test_unequal_lengths(self, engine):
        """Test that paired samples must line up."""
        with pytest.raises(DimensionMismatchError):
            engine.t_test(SAMPLE_A, SAMPLE_B, mode="paired")


class TestChiSquareTest:
    """Chi-square goodness of fit."""

    def test_uniform_expected_matches_scipy(self, engine):
        """Test the default uniform expectation."""
        observed = [18, 22, 30, 10, 20]
        result = engine.chi_square_test(observed)
        expected = stats.chisquare(observed)
        assert result.statistic == pytest.approx(expected.statistic)
        assert result.p_value == pytest.approx(expected.pvalue)
        assert result.degrees_of_freedom == 4
        assert result.critical_value == pytest.approx(stats.chi2.isf(0.05, 4))

    def test_explicit_expected(self, engine):
        """Test with given expected counts."""
        observed = [50, 30, 20]
        expected_counts = [40, 40, 20]
        result = engine.chi_square_test(observed, expected_counts)
        expected = stats.chisquare(observed, expected_counts)
        assert result.statistic == pytest.approx(expected.statistic)
        assert result.p_value == pytest.approx(expected.pvalue)

    def test_perfect_fit(self, engine):
        """Test that observed equal to expected is not significant."""
        result = engine.chi_square_test([10, 10, 10])
        assert result.statistic == 0.0
        assert result.p_value == pytest.approx(1.0)
        assert result.is_significant is False

    def test_length_mismatch(self, engine):
        """Test mismatched observed and expected."""
        with pytest.raises(DimensionMismatchError):
            engine.chi_square_test([1, 2, 3], [1, 2])

    def test_non_positive_expected(self, engine):
        """Test that zero expected counts are rejected."""
        with pytest.raises(InvalidInputError):
            engine.chi_square_test([1, 2, 3], [1, 0, 5])

    def test_negative_observed(self, engine):
        """Test that negative counts are rejected."""
        with pytest.raises(InvalidInputError):
            engine.chi_square_test([1, -2, 3])


class TestProportionTest:
    """Two-proportion z-test."""

    def test_significant_lift(self, engine):
        """Test a 10% vs 15% conversion comparison."""
        result = engine.proportion_test(100, 1000, 150, 1000)
        pooled = 250 / 2000
        z = 0.05 / math.sqrt(pooled * (1 - pooled) * (2 / 1000))
        assert result.statistic == pytest.approx(z)
        assert result.p_value == pytest.approx(2 * stats.norm.sf(z))
        assert result.is_significant is True
        low, high = result.confidence_interval
        assert low < 0.05 < high

    def test_no_variation(self, engine):
        """Test that zero pooled variance gives z = 0, p = 1."""
        result = engine.proportion_test(0, 10, 0, 10)
        assert result.statistic == 0.0
        assert result.p_value == 1.0

    @pytest.mark.parametrize("counts", [(11, 10, 5, 10), (-1, 10, 5, 10), (1, 0, 5, 10)])
    def test_invalid_counts(self, engine, counts):
        """Test impossible success/trial counts."""
        with pytest.raises(InvalidInputError):
            engine.proportion_test(*counts)
