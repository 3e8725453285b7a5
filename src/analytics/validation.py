"""Input validation for analytics operations."""

from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .exceptions import DimensionMismatchError, InsufficientDataError, InvalidInputError

ArrayLike = Union[Sequence[float], np.ndarray, pd.Series]


class StatisticalValidator:
    """Checks shapes, finiteness and minimum sample sizes before a computation."""

    def validate_sample(
        self,
        data: ArrayLike,
        name: str = "sample",
        min_size: int = 1
    ) -> np.ndarray:
        """
        Validate a one-dimensional numeric sample.

        Args:
            data: Values to check
            name: Label used in error messages
            min_size: Minimum number of observations the statistic needs

        Returns:
            Values as a float array

        Raises:
            InvalidInputError: If the sample is empty, not 1-D or non-finite
            InsufficientDataError: If it has fewer than min_size values
        """
        if data is None:
            raise InvalidInputError(f"{name} is required")
        try:
            arr = np.asarray(data, dtype=float)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"{name} must contain only numbers: {e}") from e

        if arr.ndim != 1:
            raise InvalidInputError(f"{name} must be one-dimensional, got shape {arr.shape}")
        if arr.size == 0:
            raise InvalidInputError(f"{name} is empty")
        if not np.all(np.isfinite(arr)):
            raise InvalidInputError(f"{name} contains NaN or infinite values")
        if arr.size < min_size:
            raise InsufficientDataError(
                f"{name} has {arr.size} observations (need at least {min_size})"
            )
        return arr

    def validate_pair(
        self,
        x: ArrayLike,
        y: ArrayLike,
        min_size: int = 1,
        names: Tuple[str, str] = ("x", "y")
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Validate two samples that must line up element by element.

        Raises:
            DimensionMismatchError: If lengths differ
        """
        x_arr = self.validate_sample(x, names[0])
        y_arr = self.validate_sample(y, names[1])
        if x_arr.size != y_arr.size:
            raise DimensionMismatchError(
                f"{names[0]} and {names[1]} must have the same length ({x_arr.size} != {y_arr.size})"
            )
        if x_arr.size < min_size:
            raise InsufficientDataError(
                f"Need at least {min_size} paired observations, got {x_arr.size}"
            )
        return x_arr, y_arr

    def validate_design_matrix(
        self,
        y: ArrayLike,
        X: Union[Sequence[Sequence[float]], np.ndarray, pd.DataFrame],
        feature_names: Optional[List[str]] = None
    ) -> Tuple[np.ndarray, np.ndarray, List[str]]:
        """
        Validate a regression target and its predictor rows.

        Args:
            y: Target values
            X: One row of predictors per observation (or a DataFrame)
            feature_names: Optional predictor names

        Returns:
            (y, X, feature_names) with X as a 2-D float array

        Raises:
            InvalidInputError: On ragged rows, empty input or bad names
            DimensionMismatchError: If row count differs from len(y)
            InsufficientDataError: If n <= p + 1
        """
        y_arr = self.validate_sample(y, "y")

        if isinstance(X, pd.DataFrame):
            if feature_names is None:
                feature_names = [str(c) for c in X.columns]
            X = X.to_numpy()

        rows = list(X) if not isinstance(X, np.ndarray) else X
        if len(rows) == 0:
            raise InvalidInputError("X is empty")
        if not isinstance(rows, np.ndarray):
            widths = {len(np.atleast_1d(row)) for row in rows}
            if len(widths) != 1:
                raise InvalidInputError(
                    f"All rows of X must have the same number of predictors, got widths {sorted(widths)}"
                )
        try:
            X_arr = np.asarray(rows, dtype=float)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"X must contain only numbers: {e}") from e

        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        if X_arr.ndim != 2 or X_arr.shape[1] == 0:
            raise InvalidInputError(f"X must be a 2-D matrix with at least one predictor, got shape {X_arr.shape}")
        if not np.all(np.isfinite(X_arr)):
            raise InvalidInputError("X contains NaN or infinite values")
        if X_arr.shape[0] != y_arr.size:
            raise DimensionMismatchError(
                f"X has {X_arr.shape[0]} rows but y has {y_arr.size} values"
            )

        n, p = X_arr.shape
        if n <= p + 1:
            raise InsufficientDataError(
                f"Multiple regression with {p} predictors needs more than {p + 1} observations, got {n}"
            )

        if feature_names is None:
            feature_names = [f"x{i + 1}" for i in range(p)]
        elif len(feature_names) != p:
            raise InvalidInputError(
                f"Got {len(feature_names)} feature names for {p} predictors"
            )
        return y_arr, X_arr, list(feature_names)

    def validate_counts(self, successes: int, trials: int, name: str) -> None:
        """Validate a binomial success/trial count."""
        if trials <= 0:
            raise InvalidInputError(f"{name}: number of trials must be positive, got {trials}")
        if successes < 0 or successes > trials:
            raise InvalidInputError(
                f"{name}: successes must be between 0 and {trials}, got {successes}"
            )
