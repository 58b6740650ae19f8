"""
Main pytest configuration for pkgstate tests.

Fixtures and configuration shared by the unit tests.
"""

import importlib
import os

import pytest

# Set test environment variables before importing package modules
os.environ["PKGSTATE_ENVIRONMENT"] = "test"
os.environ["PKGSTATE_LOG_LEVEL"] = "DEBUG"
os.environ.pop("PKGSTATE_IDENTITY_URL", None)

from pkgstate.core.config import get_settings
from pkgstate.services.cache.process_cache import ProcessCache


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Re-read settings from the environment in every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def favorite_cache():
    """Cache seeded with the favorite letters example."""
    return ProcessCache(name="test", defaults={"favorite": ["a", "b", "c"]})


@pytest.fixture
def counting_compute():
    """Compute function that records how often it was called."""

    class Counter:
        def __init__(self):
            self.calls = 0

        def __call__(self):
            self.calls += 1
            return f"value-{self.calls}"

    return Counter()


@pytest.fixture
def fresh_state():
    """Reload the package state module so each test starts from a fresh load."""
    from pkgstate import state

    module = importlib.reload(state)
    yield module
    importlib.reload(module)


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "concurrency: tests exercising multi-threaded access"
    )
