"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from loguru import logger

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from mentalsum.core.models import User  # noqa: E402
from mentalsum.core.preferences import UserPreferences  # noqa: E402
from mentalsum.engine.problem_engine import ProblemEngine  # noqa: E402
from mentalsum.storage.memory import InMemoryStore  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FakeClock:
    """Deterministic clock: every call returns the current time, advance() moves it."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 3, 1, 9, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    """Keep per-problem DEBUG logging out of test output."""
    logger.remove()
    logger.add(sys.stderr, level="WARNING")
    yield


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def rng():
    """Seeded random source for reproducible draws."""
    return random.Random(1234)


@pytest.fixture
def engine(rng):
    """Problem engine sharing the seeded random source."""
    return ProblemEngine(rng=rng)


@pytest.fixture
def default_preferences():
    """Default preferences: all operations, beginner, 10 problems, 30 seconds."""
    return UserPreferences()


@pytest.fixture
def store():
    """Empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def sample_user():
    """Fresh learner with default preferences and empty statistics."""
    return User(name="Ada", id="user-ada")


@pytest.fixture
def clock():
    """Controllable clock for session timestamps."""
    return FakeClock()
