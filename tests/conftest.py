"""
Pytest configuration and shared fixtures for strip simulator tests.
"""
import pytest
import numpy as np
from fastapi.testclient import TestClient

from fhr_simulator.api import create_app
from fhr_simulator.config import SimulatorSettings
from fhr_simulator.random_variates import RandomVariate
from fhr_simulator.variability import VariabilityBand, VariabilityName


class ScriptedRandomVariate(RandomVariate):
    """Replays a fixed list of uniform [0, 1) draws, then fails loudly."""

    def __init__(self, values):
        super().__init__(seed=0)
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        if self.calls >= len(self.values):
            raise AssertionError(f"Scripted random source exhausted after {self.calls} draws")
        value = self.values[self.calls]
        self.calls += 1
        return value


class ConstantRandomVariate(RandomVariate):
    """Returns the same draw forever."""

    def __init__(self, value):
        super().__init__(seed=0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def scripted_rv():
    return ScriptedRandomVariate


@pytest.fixture
def constant_rv():
    return ConstantRandomVariate


@pytest.fixture
def seeded_rv():
    return RandomVariate(seed=12345)


@pytest.fixture
def many_seeds():
    """Seeds for property checks over many independently generated strips."""
    return list(range(200))


@pytest.fixture
def moderate_band():
    """Moderate variability, ±8 bpm."""
    return VariabilityBand(name=VariabilityName.MODERATE, amplitude=8.0, step=4.0)


@pytest.fixture
def minimal_band():
    return VariabilityBand(name=VariabilityName.MINIMAL, amplitude=2.0, step=1.2)


@pytest.fixture
def tolerance_config():
    """Standard tolerance values for numerical comparisons."""
    return {
        'float_tolerance': 1e-9,
        'pixel_tolerance': 1e-6,
        'contraction_tolerance': 1e-6,
        'walk_overshoot_bpm': 1e-9,
    }


@pytest.fixture
def test_settings():
    return SimulatorSettings(seed=2024)


@pytest.fixture
def client(test_settings):
    """Test client over a freshly seeded single-session app."""
    return TestClient(create_app(test_settings))


@pytest.fixture
def flat_trace():
    return np.full(600, 150.0)
