"""Shared test fixtures."""

import numpy as np
import pytest

from machinesim.cli import SimulatedClock
from machinesim.config.schema import SENSOR_CONFIGS
from machinesim.engine.simulation_engine import SimulationEngine
from machinesim.engine.state import SensorReading


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def vibration_config():
    return SENSOR_CONFIGS["vibration"]


@pytest.fixture
def pressure_config():
    return SENSOR_CONFIGS["pressure"]


@pytest.fixture
def clock():
    return SimulatedClock(start=1_000.0)


@pytest.fixture
def engine(clock):
    return SimulationEngine(seed=42, clock=clock)


@pytest.fixture
def make_readings():
    """Factory for readings 0.1 s apart with value == raw_value."""
    def _make(values, start=0.0):
        return [
            SensorReading(timestamp=start + i * 0.1, value=float(v), raw_value=float(v))
            for i, v in enumerate(values)
        ]
    return _make


@pytest.fixture
def run_ticks(engine, clock):
    """Advance the simulated clock and tick the engine ``n`` times."""
    def _run(n):
        snapshots = []
        for _ in range(n):
            clock.advance()
            snapshots.append(engine.tick())
        return snapshots
    return _run
