"""
Pytest configuration and shared fixtures for distload tests.

All async tests run under pytest-asyncio (auto mode enabled in pyproject.toml).
"""

import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

from distload.core.models import Settings  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    """Default settings (240s / 25 rps chunks, 15s time buffer)."""
    return Settings()


class FixedRng:
    """Random source whose uniform() always returns the lower bound."""

    def uniform(self, a, b):
        return a


@pytest.fixture
def fixed_rng() -> FixedRng:
    return FixedRng()
