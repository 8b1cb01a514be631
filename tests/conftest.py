"""
Pytest configuration and shared fixtures.
"""

import matplotlib
matplotlib.use("Agg")

import pytest


@pytest.fixture
def config():
    """Seeded configuration with a generous cascade bound."""
    from devsim.core import SimulationConfig
    return SimulationConfig(cascade_limit=1000, seed=42)


@pytest.fixture
def sim(config):
    """Empty simulation in the build phase."""
    from devsim.core import Simulation
    return Simulation(config)


@pytest.fixture
def unseeded_sim():
    """Simulation without randomness."""
    from devsim.core import Simulation, SimulationConfig
    return Simulation(SimulationConfig(cascade_limit=100, enable_rng=False))
