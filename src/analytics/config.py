"""Analytics configuration management."""

from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import InvalidInputError


class AnalyticsConfig(BaseModel):
    """
    Immutable snapshot of the engine configuration.

    Every public operation reads one snapshot at entry and uses it for the
    whole computation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    significance_level: float = Field(default=0.05, gt=0, lt=1, description="Alpha for significance flags")
    confidence_level: float = Field(default=0.95, gt=0, lt=1, description="Coverage of confidence intervals")
    max_iterations: int = Field(default=1000, gt=0, description="Bound for iterative numeric refinement")
    tolerance: float = Field(default=1e-8, gt=0, description="Singularity / convergence tolerance")
    robust_methods: bool = Field(default=True, description="Prefer methods robust to unequal variances")

    def merged(self, changes: Dict[str, Any]) -> "AnalyticsConfig":
        """
        Build a new validated snapshot with `changes` applied.

        Args:
            changes: Subset of fields to replace; others keep their values

        Returns:
            New AnalyticsConfig

        Raises:
            InvalidInputError: If a field is unknown or out of range
        """
        data = self.model_dump()
        data.update(changes)
        return build_config(data)


def build_config(data: Dict[str, Any]) -> AnalyticsConfig:
    """Validate a plain mapping into an AnalyticsConfig."""
    try:
        return AnalyticsConfig(**data)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid analytics configuration: {e}") from e


class AnalyticsSettings(BaseSettings):
    """Process defaults for the analytics engine, read from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="ANALYTICS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    significance_level: float = 0.05
    confidence_level: float = 0.95
    max_iterations: int = 1000
    tolerance: float = 1e-8
    robust_methods: bool = True

    def to_config(self) -> AnalyticsConfig:
        """Convert settings into the immutable engine snapshot."""
        return build_config(self.model_dump())


@lru_cache()
def get_settings() -> AnalyticsSettings:
    """Get cached settings instance."""
    return AnalyticsSettings()
