"""Simple and multiple linear regression by ordinary least squares."""

import logging
import math
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .base_models import RegressionResult, RegressionType
from .config import AnalyticsConfig
from .distributions import f_upper_p
from .exceptions import SingularMatrixError
from .linear_algebra import matrix_inverse, matrix_multiply, matrix_vector_multiply, transpose
from .validation import ArrayLike, StatisticalValidator

logger = logging.getLogger(__name__)

OUTLIER_THRESHOLD = 2.5


class RegressionAnalyzer:
    """
    Ordinary least squares regression.

    Simple regression uses the closed-form covariance/variance solution;
    multiple regression solves the normal equations with a general inverse.
    """

    def __init__(self, config: AnalyticsConfig):
        """
        Initialize analyzer.

        Args:
            config: Configuration snapshot used for the whole call
        """
        self.config = config
        self.alpha = config.significance_level
        self.tolerance = config.tolerance
        self.validator = StatisticalValidator()

    def simple_linear_regression(self, x: ArrayLike, y: ArrayLike) -> RegressionResult:
        """
        Fit y = intercept + slope * x.

        Args:
            x: Predictor values
            y: Response values, same length as x

        Returns:
            RegressionResult with coefficients [intercept, slope]

        Raises:
            InvalidInputError: Empty, non-finite or mismatched input
            InsufficientDataError: Fewer than 3 observations
            SingularMatrixError: x has no variance
        """
        x_arr, y_arr = self.validator.validate_pair(x, y, min_size=3)
        n = x_arr.size

        mean_x = float(np.mean(x_arr))
        mean_y = float(np.mean(y_arr))
        dx = x_arr - mean_x
        sxx = float(np.sum(dx * dx))
        # Centred sums are exact for offset predictors such as epoch timestamps
        if np.ptp(x_arr) == 0 or sxx == 0:
            raise SingularMatrixError("Predictor has no variance; slope is undefined")

        slope = float(np.sum(dx * (y_arr - mean_y))) / sxx
        intercept = mean_y - slope * mean_x
        predictions = intercept + slope * x_arr
        residuals = y_arr - predictions

        fit = self._fit_statistics(y_arr, residuals, n_predictors=1)
        mse = fit["mse"]
        standard_errors = [
            math.sqrt(mse * (1 / n + mean_x ** 2 / sxx)),
            math.sqrt(mse / sxx),
        ]

        return RegressionResult(
            type=RegressionType.LINEAR,
            coefficients=[intercept, slope],
            r_squared=fit["r_squared"],
            adjusted_r_squared=fit["adjusted_r_squared"],
            f_statistic=fit["f_statistic"],
            p_value=fit["p_value"],
            standard_errors=standard_errors,
            residuals=residuals.tolist(),
            predictions=predictions.tolist(),
            equation=self.format_equation([intercept, slope], ["x"]),
            is_significant=fit["p_value"] < self.alpha,
            outliers=self._find_outliers(residuals, fit)
        )

    def multiple_regression(
        self,
        y: ArrayLike,
        X: Union[Sequence[Sequence[float]], np.ndarray, pd.DataFrame],
        feature_names: Optional[List[str]] = None
    ) -> RegressionResult:
        """
        Fit y on several predictors plus an intercept via the normal equations.

        Args:
            y: Response values
            X: One row of predictor values per observation, or a DataFrame
            feature_names: Names used in the equation (defaults to x1..xp
                or the DataFrame columns)

        Returns:
            RegressionResult with coefficients [intercept, b1, ..., bp]

        Raises:
            InvalidInputError: Ragged or non-finite input
            DimensionMismatchError: Row count differs from len(y)
            InsufficientDataError: n <= p + 1
            SingularMatrixError: X'X not invertible within tolerance
        """
        y_arr, X_arr, names = self.validator.validate_design_matrix(y, X, feature_names)
        n, p = X_arr.shape

        design = np.hstack([np.ones((n, 1)), X_arr])
        design_t = transpose(design)
        xtx = matrix_multiply(design_t, design)
        xtx_inverse = matrix_inverse(xtx, self.tolerance)
        xty = matrix_vector_multiply(design_t, y_arr)
        coefficients = self._refine_solution(xtx, xtx_inverse, xty)

        predictions = matrix_vector_multiply(design, coefficients)
        residuals = y_arr - predictions

        fit = self._fit_statistics(y_arr, residuals, n_predictors=p)
        diagonal = np.clip(np.diag(xtx_inverse), 0.0, None)
        standard_errors = np.sqrt(fit["mse"] * diagonal)

        logger.debug(
            "Multiple regression: n=%d p=%d R2=%.4f F=%.4g",
            n, p, fit["r_squared"], fit["f_statistic"]
        )

        return RegressionResult(
            type=RegressionType.MULTIPLE,
            coefficients=coefficients.tolist(),
            r_squared=fit["r_squared"],
            adjusted_r_squared=fit["adjusted_r_squared"],
            f_statistic=fit["f_statistic"],
            p_value=fit["p_value"],
            standard_errors=standard_errors.tolist(),
            residuals=residuals.tolist(),
            predictions=predictions.tolist(),
            equation=self.format_equation(coefficients.tolist(), names),
            is_significant=fit["p_value"] < self.alpha,
            outliers=self._find_outliers(residuals, fit)
        )

    def _refine_solution(
        self,
        xtx: np.ndarray,
        xtx_inverse: np.ndarray,
        xty: np.ndarray
    ) -> np.ndarray:
        """Solve X'X b = X'y and polish the answer with iterative refinement."""
        solution = matrix_vector_multiply(xtx_inverse, xty)
        for iteration in range(self.config.max_iterations):
            correction = matrix_vector_multiply(xtx_inverse, xty - xtx @ solution)
            solution = solution + correction
            if np.linalg.norm(correction) <= self.tolerance * max(1.0, float(np.linalg.norm(solution))):
                logger.debug("Refinement converged after %d iteration(s)", iteration + 1)
                break
        return solution

    def _fit_statistics(
        self,
        y: np.ndarray,
        residuals: np.ndarray,
        n_predictors: int
    ) -> Dict[str, float]:
        """R-squared, adjusted R-squared, F-test and MSE for a fitted model."""
        n = y.size
        df_residual = n - n_predictors - 1
        tss = float(np.sum((y - np.mean(y)) ** 2))
        rss = float(np.sum(residuals ** 2))
        mse = rss / df_residual

        if np.ptp(y) == 0:
            # Constant response: nothing to explain
            return {
                "r_squared": 0.0,
                "adjusted_r_squared": 0.0,
                "f_statistic": 0.0,
                "p_value": 1.0,
                "mse": mse,
                "perfect_fit": False,
            }

        r_squared = min(1.0, max(0.0, 1 - rss / tss))
        adjusted_r_squared = 1 - (1 - r_squared) * (n - 1) / df_residual
        perfect_fit = rss <= self.tolerance * tss

        if perfect_fit:
            f_statistic = math.inf
            p_value = 0.0
        else:
            msr = (tss - rss) / n_predictors
            f_statistic = max(0.0, msr / mse)
            p_value = f_upper_p(f_statistic, n_predictors, df_residual)

        return {
            "r_squared": r_squared,
            "adjusted_r_squared": adjusted_r_squared,
            "f_statistic": f_statistic,
            "p_value": p_value,
            "mse": mse,
            "perfect_fit": perfect_fit,
        }

    def _find_outliers(self, residuals: np.ndarray, fit: Dict[str, float]) -> List[int]:
        """Indices whose standardized residual exceeds the outlier threshold."""
        if fit["perfect_fit"] or fit["mse"] <= 0:
            return []
        standardized = np.abs(residuals) / math.sqrt(fit["mse"])
        return [int(i) for i in np.flatnonzero(standardized > OUTLIER_THRESHOLD)]

    @staticmethod
    def format_equation(coefficients: List[float], names: List[str]) -> str:
        """Render 'y = c0 + c1*x1 - c2*x2 ...' with four decimals."""
        equation = f"y = {coefficients[0]:.4f}"
        for coef, name in zip(coefficients[1:], names):
            sign = "-" if coef < 0 else "+"
            equation += f" {sign} {abs(coef):.4f}*{name}"
        return equation
