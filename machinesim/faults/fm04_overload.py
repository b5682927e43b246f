"""FM-04: Motor overload.

Current (primary): up to +20 A with a sinusoidal instability and Gaussian
jitter. The jitter is the only stochastic fault term.
Vibration (secondary): up to +4 mm/s plus a motor harmonic.
Temperature (secondary): motor heat adds up to +15 °F.
"""

import math

import numpy as np

from machinesim.config.constants import FAULT_CATALOG
from machinesim.faults.fault_mode import FaultMode
from machinesim.simulation.noise import gaussian


def current_offset(progress: float, tick: int, rng: np.random.Generator) -> float:
    spike = progress * 20.0
    instability = math.sin(tick * 0.15) * progress * 5.0
    jitter = gaussian(rng, 0.0, progress * 2.0)
    return spike + instability + jitter


def vibration_offset(progress: float, tick: int, rng: np.random.Generator) -> float:
    return progress * 4.0 + math.sin(tick * 0.2) * progress * 1.5


def temperature_offset(progress: float, tick: int, rng: np.random.Generator) -> float:
    return progress * 15.0


MOTOR_OVERLOAD = FaultMode(
    fault_id="motor_overload",
    name=FAULT_CATALOG["motor_overload"]["name"],
    description=FAULT_CATALOG["motor_overload"]["description"],
    primary_sensor="current",
    effects={
        "current": current_offset,
        "vibration": vibration_offset,
        "temperature": temperature_offset,
    },
)
