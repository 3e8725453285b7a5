"""Dense matrix helpers used by the regression module."""

import logging
from typing import Sequence, Union

import numpy as np

from .exceptions import DimensionMismatchError, InvalidInputError, SingularMatrixError

logger = logging.getLogger(__name__)

MatrixLike = Union[np.ndarray, Sequence[Sequence[float]]]
VectorLike = Union[np.ndarray, Sequence[float]]


def _as_matrix(matrix: MatrixLike) -> np.ndarray:
    arr = np.asarray(matrix, dtype=float)
    if arr.ndim != 2 or arr.size == 0:
        raise InvalidInputError(f"Expected a non-empty 2-D matrix, got shape {arr.shape}")
    return arr


def transpose(matrix: MatrixLike) -> np.ndarray:
    """Return the transpose of a 2-D matrix."""
    return _as_matrix(matrix).T.copy()


def matrix_multiply(a: MatrixLike, b: MatrixLike) -> np.ndarray:
    """Multiply two matrices, checking inner dimensions."""
    left = _as_matrix(a)
    right = _as_matrix(b)
    if left.shape[1] != right.shape[0]:
        raise DimensionMismatchError(
            f"Cannot multiply {left.shape} by {right.shape}"
        )
    return left @ right


def matrix_vector_multiply(matrix: MatrixLike, vector: VectorLike) -> np.ndarray:
    """Multiply a matrix by a column vector."""
    m = _as_matrix(matrix)
    v = np.asarray(vector, dtype=float)
    if v.ndim != 1 or m.shape[1] != v.shape[0]:
        raise DimensionMismatchError(
            f"Cannot multiply matrix {m.shape} by vector {v.shape}"
        )
    return m @ v


def matrix_inverse(matrix: MatrixLike, tolerance: float = 1e-8) -> np.ndarray:
    """
    Invert a square matrix with Gauss-Jordan elimination.

    The matrix is first equilibrated by the square roots of its diagonal so
    that the pivot test is independent of the scale of the inputs (a design
    matrix built from epoch timestamps would otherwise look singular).

    Args:
        matrix: Square matrix of any dimension
        tolerance: Pivots smaller than this (after scaling) mean singular

    Returns:
        Inverse as a new array

    Raises:
        InvalidInputError: If the matrix is not square
        SingularMatrixError: If the matrix is singular within tolerance
    """
    a = _as_matrix(matrix)
    n, m = a.shape
    if n != m:
        raise InvalidInputError(f"Only square matrices can be inverted, got {a.shape}")
    if not np.all(np.isfinite(a)):
        raise InvalidInputError("Matrix contains non-finite values")

    diag = np.abs(np.diag(a))
    scale = np.where(diag > 0, 1.0 / np.sqrt(np.where(diag > 0, diag, 1.0)), 1.0)
    scaled = a * scale[:, None] * scale[None, :]
    threshold = tolerance * max(1.0, float(np.max(np.abs(scaled))))

    augmented = np.hstack([scaled, np.eye(n)])
    for col in range(n):
        pivot_row = col + int(np.argmax(np.abs(augmented[col:, col])))
        pivot = augmented[pivot_row, col]
        if abs(pivot) < threshold:
            raise SingularMatrixError(
                f"Matrix is singular (pivot {pivot:.3e} in column {col} below tolerance {tolerance:g})"
            )
        if pivot_row != col:
            augmented[[col, pivot_row]] = augmented[[pivot_row, col]]
        augmented[col] /= augmented[col, col]
        for row in range(n):
            if row != col:
                factor = augmented[row, col]
                if factor != 0.0:
                    augmented[row] -= factor * augmented[col]

    inverse = augmented[:, n:] * scale[:, None] * scale[None, :]
    logger.debug("Inverted %dx%d matrix", n, n)
    return inverse
