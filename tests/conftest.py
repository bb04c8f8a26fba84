"""Shared fixtures for the fractal generator tests."""

import pytest

from fractal_generators.acceleration.executor import shutdown_executor
from fractal_generators.config import set_config


@pytest.fixture(autouse=True)
def reset_config():
    """Every test starts from the environment-derived configuration."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture(scope="session", autouse=True)
def worker_pool():
    """Shut the shared worker pool down once the session ends."""
    yield
    shutdown_executor(wait=True)
