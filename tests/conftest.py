"""Pytest configuration and shared fixtures for localopt tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Logging reset between tests
"""

import logging
import os

import numpy as np
import pytest
import torch

from localopt.logging import configure_logging


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic CPU torch RNG for tests."""
    generator = torch.Generator()
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Set global random seeds so every test starts from the same state."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


@pytest.fixture
def reset_logging():
    """Restore the default logging configuration after the test."""
    yield
    configure_logging(level=logging.WARNING)
