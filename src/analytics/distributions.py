"""Probability helpers backed by scipy's incomplete beta/gamma implementations."""

import math

from scipy import stats

from .exceptions import DomainError


def normal_cdf(z: float) -> float:
    """Standard normal cumulative distribution function."""
    return float(stats.norm.cdf(z))


def normal_inverse(p: float) -> float:
    """
    Inverse of the standard normal CDF.

    Raises:
        DomainError: If p is not strictly between 0 and 1
    """
    if not (0.0 < p < 1.0) or math.isnan(p):
        raise DomainError(f"Probability must be in (0, 1), got {p}")
    return float(stats.norm.ppf(p))


def normal_two_tailed_p(z: float) -> float:
    """Two-sided p-value for a standard normal statistic."""
    if math.isinf(z):
        return 0.0
    return float(min(1.0, 2.0 * stats.norm.sf(abs(z))))


def t_two_tailed_p(t: float, df: float) -> float:
    """Two-sided p-value for a Student-t statistic."""
    if math.isinf(t):
        return 0.0
    return float(min(1.0, 2.0 * stats.t.sf(abs(t), df)))


def t_quantile(p: float, df: float) -> float:
    """Quantile of the Student-t distribution."""
    if not (0.0 < p < 1.0):
        raise DomainError(f"Probability must be in (0, 1), got {p}")
    return float(stats.t.ppf(p, df))


def chi_square_upper_p(statistic: float, df: float) -> float:
    """Upper-tail probability of the chi-square distribution."""
    return float(stats.chi2.sf(statistic, df))


def chi_square_critical(alpha: float, df: float) -> float:
    """Critical value with upper-tail area alpha."""
    if not (0.0 < alpha < 1.0):
        raise DomainError(f"Probability must be in (0, 1), got {alpha}")
    return float(stats.chi2.isf(alpha, df))


def f_upper_p(f: float, df1: float, df2: float) -> float:
    """Upper-tail probability of the F distribution."""
    if math.isinf(f):
        return 0.0
    return float(stats.f.sf(f, df1, df2))
