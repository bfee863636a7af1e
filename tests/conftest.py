"""
Pytest configuration and shared fixtures
"""

import os
import sys
import random

import pytest

# pygame draws off-screen during tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from intersection_sim.clock import VirtualClock
from intersection_sim.config import SimulationConfig
from intersection_sim.departure import DepartureScheduler
from intersection_sim.lane import make_lanes
from intersection_sim.presentation import MemorySurface, PresentationAdapter
from intersection_sim.vehicle import VehicleFactory


def pytest_configure(config):
    """Configure custom pytest markers"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "render: marks tests that draw with pygame"
    )


class FixedRandom:
    """Stand-in RNG: every Bernoulli trial succeeds, choice takes the first item."""

    def __init__(self, value: float = 0.0):
        self.value = value

    def random(self):
        return self.value

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def always_spawn():
    return FixedRandom(0.0)


@pytest.fixture
def config():
    return SimulationConfig(random_seed=7, stats_csv="stats.csv", log_file="")


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def factory():
    return VehicleFactory()


@pytest.fixture
def lanes():
    return make_lanes(5)


@pytest.fixture
def surface():
    return MemorySurface()


@pytest.fixture
def adapter(surface, lanes, clock):
    return PresentationAdapter(surface, lanes, clock)


@pytest.fixture
def departures(clock, adapter):
    return DepartureScheduler(clock, adapter, stagger_ms=160, animation_ms=2200, buffer_ms=100)
