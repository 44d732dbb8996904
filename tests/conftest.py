"""Pytest configuration and fixtures for the test suite."""

import sys
from pathlib import Path

import pytest

# Ensure project root is in path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from imageschedule import ScheduleConfig  # noqa: E402


@pytest.fixture
def overlap_config() -> ScheduleConfig:
    """Long minimum display with a short hold, so close photos overlap."""
    return ScheduleConfig(min_visible_ms=60_000, hold_ms=10_000)


@pytest.fixture
def pair_config() -> ScheduleConfig:
    """Six-second display, no hold, default composition interval."""
    return ScheduleConfig(min_visible_ms=6_000, hold_ms=0)


@pytest.fixture
def burst_times() -> list[float]:
    """A burst of photos followed by a quiet stretch and a second burst."""
    return [
        0, 400, 900, 1_500, 2_200, 2_300, 9_000,
        40_000, 40_100, 40_200, 40_300, 40_400, 41_000, 55_000,
    ]


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow"
    )
