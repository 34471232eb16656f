from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from hemoflow.core.engine import SimulationEngine
from hemoflow.core.state import SimulationConfig, SimulationParameters


# Scenario A reference adult in London air.
DEFAULT_PARAMS = dict(
    hct=45.0, hr=72.0, cholesterol=180.0, vessel_radius=2.5,
    aqi=45.0, environment="London", stenosis_severity=0.0,
)


@pytest.fixture
def params():
    """Reference parameter set used across most tests."""
    return SimulationParameters(**DEFAULT_PARAMS)


@pytest.fixture
def engine_factory(params):
    """Build engines with a fixed tracer seed and optional config overrides."""
    def _make(sim_params=None, **config_kwargs):
        config_kwargs.setdefault("rng_seed", 1234)
        return SimulationEngine(sim_params or params, SimulationConfig(**config_kwargs))

    return _make


@pytest.fixture
def engine(engine_factory):
    """Running engine starting from rest."""
    sim = engine_factory()
    sim.start()
    return sim


@pytest.fixture
def advance_ticks():
    """Helper to tick an engine n times, returning every published result."""
    def _advance(sim, ticks):
        return [sim.tick() for _ in range(ticks)]

    return _advance
