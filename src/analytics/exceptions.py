"""Error types raised by the analytics engine."""

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a computation failure."""
    INVALID_INPUT = "INVALID_INPUT"
    DIMENSION_MISMATCH = "DIMENSION_MISMATCH"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    SINGULAR_MATRIX = "SINGULAR_MATRIX"
    DOMAIN_ERROR = "DOMAIN_ERROR"


class AnalyticsError(Exception):
    """Base class for all analytics failures."""

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


class InvalidInputError(AnalyticsError, ValueError):
    """Empty, mismatched, non-finite or otherwise unusable input."""
    kind = ErrorKind.INVALID_INPUT


class DimensionMismatchError(InvalidInputError):
    """Two inputs that must line up element by element do not."""
    kind = ErrorKind.DIMENSION_MISMATCH


class InsufficientDataError(AnalyticsError):
    """Sample is below the minimum size the statistic needs."""
    kind = ErrorKind.INSUFFICIENT_DATA


class SingularMatrixError(AnalyticsError):
    """Design matrix cannot be inverted within tolerance."""
    kind = ErrorKind.SINGULAR_MATRIX


class DomainError(AnalyticsError, ValueError):
    """Argument outside the mathematical domain of a function."""
    kind = ErrorKind.DOMAIN_ERROR
