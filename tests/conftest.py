"""Shared fixtures for the analytics test suite."""

import numpy as np
import pytest

from src.analytics import AdvancedAnalyticsEngine, AnalyticsConfig


@pytest.fixture
def config():
    """Default configuration snapshot."""
    return AnalyticsConfig()


@pytest.fixture
def engine(config):
    """Engine with an explicit default configuration."""
    return AdvancedAnalyticsEngine(config)


@pytest.fixture
def rng():
    """Seeded random generator for reproducible samples."""
    return np.random.default_rng(42)
