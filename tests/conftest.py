"""Pytest configuration and shared fixtures for qstep tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Small engine fixtures used across the engine, interpreter and history tests
"""

import os

import numpy as np
import pytest
import torch

from qstep.engine import EngineConfig, QuantumEngine


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).

    Returns:
        A seeded numpy.random.Generator instance.
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic CPU torch RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).

    Returns:
        A seeded torch.Generator instance.
    """
    generator = torch.Generator(device="cpu")
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Seed the global numpy and torch generators before every test."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


@pytest.fixture
def engine() -> QuantumEngine:
    """Two-qubit engine with a seeded sampler."""
    return QuantumEngine(2, config=EngineConfig(seed=_seed()))
