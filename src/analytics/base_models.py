"""Base models for analytics results."""

from typing import Dict, Any, Optional, List, Tuple
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum


class TTestMode(str, Enum):
    """Variant of the t-test."""
    ONE_SAMPLE = "one-sample"
    TWO_SAMPLE = "two-sample"
    PAIRED = "paired"


class CorrelationMethod(str, Enum):
    """Correlation coefficient family."""
    PEARSON = "pearson"
    SPEARMAN = "spearman"
    KENDALL = "kendall"


class CorrelationStrength(str, Enum):
    """Strength of a correlation by |coefficient|."""
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"
    VERY_STRONG = "very_strong"


class CorrelationDirection(str, Enum):
    """Sign of a correlation."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NONE = "none"


class RegressionType(str, Enum):
    """Regression model family."""
    LINEAR = "linear"
    MULTIPLE = "multiple"
    POLYNOMIAL = "polynomial"
    LOGISTIC = "logistic"


class TrendType(str, Enum):
    """Overall shape of a time series."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    SEASONAL = "seasonal"
    CYCLIC = "cyclic"


class InsightType(str, Enum):
    """Kind of automated insight."""
    CORRELATION = "correlation"
    TREND = "trend"
    ANOMALY = "anomaly"
    DISTRIBUTION = "distribution"
    COMPARISON = "comparison"


class SignificanceTier(str, Enum):
    """Importance tier of an insight."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class _ResultModel(BaseModel):
    """Immutable value object shared by all results."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class StatisticalTestResult(_ResultModel):
    """Result of a hypothesis test."""

    name: str = Field(description="Human-readable test name")
    statistic: float
    p_value: float = Field(ge=0, le=1)
    degrees_of_freedom: Optional[float] = None
    critical_value: Optional[float] = None
    is_significant: bool = Field(description="p_value < significance level")
    interpretation: str
    confidence_interval: Optional[Tuple[float, float]] = None


class CorrelationResult(_ResultModel):
    """Result of a correlation analysis."""

    coefficient: float = Field(ge=-1, le=1)
    p_value: float = Field(ge=0, le=1)
    method: CorrelationMethod
    strength: CorrelationStrength
    direction: CorrelationDirection
    is_significant: bool
    sample_size: int
    confidence_interval: Tuple[float, float]


class RegressionResult(_ResultModel):
    """Result of a regression fit. Coefficient 0 is the intercept."""

    type: RegressionType
    coefficients: List[float]
    r_squared: float
    adjusted_r_squared: float
    f_statistic: float
    p_value: float = Field(ge=0, le=1)
    standard_errors: List[float]
    residuals: List[float]
    predictions: List[float]
    equation: str
    is_significant: bool
    outliers: List[int] = Field(default_factory=list, description="Indices with |standardized residual| > 2.5")


class Seasonality(_ResultModel):
    """Dominant periodic component of a series."""

    period: int
    amplitude: float
    phase: float = 0.0


class Forecast(_ResultModel):
    """Linear-trend extrapolation with confidence bands."""

    values: List[float] = Field(default_factory=list)
    confidence_intervals: List[Tuple[float, float]] = Field(default_factory=list)
    periods: int = 0


class Anomalies(_ResultModel):
    """Points whose z-score exceeds the anomaly threshold."""

    indices: List[int] = Field(default_factory=list)
    values: List[float] = Field(default_factory=list)
    scores: List[float] = Field(default_factory=list, description="Absolute z-scores")


class TrendAnalysis(_ResultModel):
    """Result of a trend analysis."""

    trend: TrendType
    strength: float = Field(ge=0, description="|slope| of the linear trend")
    slope: float
    seasonality: Optional[Seasonality] = None
    change_points: List[int] = Field(default_factory=list)
    forecast: Forecast
    anomalies: Anomalies

    # Visualization data (for charts)
    visualization_data: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Data for creating visualizations"
    )


class InsightVisualization(_ResultModel):
    """Chart suggestion attached to an insight."""

    chart_type: str
    config: Dict[str, Any] = Field(default_factory=dict)


class AutomatedInsight(_ResultModel):
    """A ranked, phrased finding derived from one or more series."""

    type: InsightType
    title: str
    description: str
    significance: SignificanceTier
    confidence: float = Field(ge=0, le=1)
    variables: List[str] = Field(default_factory=list, description="Series the insight is about")
    supporting_evidence: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    visualization: Optional[InsightVisualization] = None
