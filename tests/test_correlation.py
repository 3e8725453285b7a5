"""Tests for correlation analysis."""

import tracemalloc

import numpy as np
import pytest
from scipy import stats

from src.analytics import (
    AdvancedAnalyticsEngine,
    AnalyticsConfig,
    CorrelationDirection,
    CorrelationMethod,
    CorrelationStrength,
    DimensionMismatchError,
    InvalidInputError,
)
from src.analytics.correlation import CorrelationAnalyzer

X = [2.1, 3.4, 1.9, 5.6, 4.2, 6.3, 7.1, 5.9, 8.4, 9.0, 7.7, 10.2]
Y = [1.2, 2.0, 1.5, 3.9, 2.2, 4.1, 3.8, 3.1, 5.5, 5.2, 4.0, 6.8]


class TestPearson:
    """Pearson product-moment correlation."""

    def test_self_correlation(self, engine):
        """Test that a series correlates perfectly with itself."""
        result = engine.correlation_analysis(X, X)
        assert result.coefficient == pytest.approx(1.0)
        assert result.direction == CorrelationDirection.POSITIVE
        assert result.strength == CorrelationStrength.VERY_STRONG

    def test_matches_scipy(self, engine):
        """Test coefficient and p-value against scipy.stats.pearsonr."""
        result = engine.correlation_analysis(X, Y, CorrelationMethod.PEARSON)
        expected = stats.pearsonr(X, Y)
        assert result.coefficient == pytest.approx(expected[0])
        assert result.p_value == pytest.approx(expected[1], rel=1e-6)
        assert result.sample_size == len(X)
        assert result.is_significant is True

    def test_perfect_negative(self, engine):
        """Test y = -x."""
        x = np.arange(1, 11, dtype=float)
        result = engine.correlation_analysis(x, -x)
        assert result.coefficient == pytest.approx(-1.0)
        assert result.direction == CorrelationDirection.NEGATIVE
        assert result.p_value == pytest.approx(0.0, abs=1e-12)

    def test_constant_variable(self, engine):
        """Test that zero variance gives a zero coefficient."""
        result = engine.correlation_analysis([3.0, 3.0, 3.0, 3.0], [1.0, 2.0, 3.0, 4.0])
        assert result.coefficient == 0.0
        assert result.direction == CorrelationDirection.NONE
        assert result.p_value == pytest.approx(1.0)
        assert result.is_significant is False


class TestRankCorrelations:
    """Spearman and Kendall correlation."""

    def test_spearman_matches_scipy(self, engine):
        """Test Spearman's rho without ties."""
        result = engine.correlation_analysis(X, Y, "spearman")
        assert result.coefficient == pytest.approx(stats.spearmanr(X, Y)[0])

    def test_spearman_with_ties_uses_average_ranks(self, engine):
        """Test that tied values receive average ranks."""
        x = [1, 2, 2, 3, 4, 4, 4, 5]
        y = [2, 1, 4, 3, 6, 5, 7, 8]
        result = engine.correlation_analysis(x, y, "spearman")
        assert result.coefficient == pytest.approx(stats.spearmanr(x, y)[0])

    def test_spearman_monotonic_nonlinear(self, engine):
        """Test that any increasing transform gives rho = 1."""
        x = np.arange(1, 9, dtype=float)
        result = engine.correlation_analysis(x, np.exp(x), "spearman")
        assert result.coefficient == pytest.approx(1.0)

    def test_kendall_matches_scipy(self, engine):
        """Test Kendall's tau on data without ties."""
        result = engine.correlation_analysis(X, Y, "kendall")
        assert result.coefficient == pytest.approx(stats.kendalltau(X, Y)[0])
        assert result.method == CorrelationMethod.KENDALL

    def test_kendall_large_sample(self, engine, rng):
        """Test Kendall's tau on a few thousand points with bounded memory."""
        x = rng.permutation(3000).astype(float)
        y = x + rng.normal(scale=500.0, size=3000)
        tracemalloc.start()
        try:
            result = engine.correlation_analysis(x, y, "kendall")
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()
        assert result.coefficient == pytest.approx(stats.kendalltau(x, y)[0])
        assert peak < 50 * 1024 * 1024

    @pytest.mark.parametrize("method", ["pearson", "spearman", "kendall"])
    def test_symmetry(self, engine, method):
        """Test that swapping the arguments leaves the coefficient unchanged."""
        forward = engine.correlation_analysis(X, Y, method)
        backward = engine.correlation_analysis(Y, X, method)
        assert forward.coefficient == pytest.approx(backward.coefficient)
        assert forward.p_value == pytest.approx(backward.p_value)


class TestConfidenceInterval:
    """Fisher z confidence interval."""

    def test_contains_coefficient(self, engine):
        """Test that the interval brackets the estimate."""
        result = engine.correlation_analysis(X, Y)
        low, high = result.confidence_interval
        assert -1.0 <= low < result.coefficient < high <= 1.0

    def test_higher_confidence_is_wider(self):
        """Test that a 99% interval is wider than a 90% one."""
        narrow = AdvancedAnalyticsEngine(AnalyticsConfig(confidence_level=0.90)).correlation_analysis(X, Y)
        wide = AdvancedAnalyticsEngine(AnalyticsConfig(confidence_level=0.99)).correlation_analysis(X, Y)
        assert wide.confidence_interval[0] < narrow.confidence_interval[0]
        assert wide.confidence_interval[1] > narrow.confidence_interval[1]

    def test_three_points(self, engine):
        """Test that the interval is unbounded with three observations."""
        result = engine.correlation_analysis([1.0, 2.0, 3.0], [2.0, 1.0, 4.0])
        assert result.confidence_interval == (-1.0, 1.0)

    def test_perfect_correlation(self, engine):
        """Test the degenerate interval for |r| = 1."""
        result = engine.correlation_analysis([1.0, 2.0, 3.0, 4.0], [1.0, 2.0, 3.0, 4.0])
        low, high = result.confidence_interval
        assert low == pytest.approx(result.coefficient)
        assert high == pytest.approx(result.coefficient)


class TestValidation:
    """Input errors."""

    def test_too_few_points(self, engine):
        """Test that two points are not enough."""
        with pytest.raises(InvalidInputError):
            engine.correlation_analysis([1.0, 2.0], [2.0, 3.0])

    def test_length_mismatch(self, engine):
        """Test unequal lengths."""
        with pytest.raises(DimensionMismatchError):
            engine.correlation_analysis([1.0, 2.0, 3.0], [1.0, 2.0])

    def test_unknown_method(self, engine):
        """Test an unsupported method name."""
        with pytest.raises(InvalidInputError):
            engine.correlation_analysis(X, Y, "distance")


class TestClassification:
    """Strength buckets."""

    @pytest.mark.parametrize("value, strength", [
        (0.1, CorrelationStrength.WEAK),
        (0.3, CorrelationStrength.MODERATE),
        (0.55, CorrelationStrength.STRONG),
        (0.7, CorrelationStrength.VERY_STRONG),
        (0.95, CorrelationStrength.VERY_STRONG),
    ])
    def test_classify_strength(self, value, strength):
        """Test the 0.3 / 0.5 / 0.7 boundaries."""
        assert CorrelationAnalyzer.classify_strength(value) == strength
