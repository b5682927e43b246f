"""FM-03: Pressure blockage.

Pressure (primary): rises by up to 1000 PSI with a surge of up to ±100 PSI.
Current (secondary): motor works harder, up to +15 A.
Vibration (secondary): surging adds up to +1.5 mm/s.
"""

import math

import numpy as np

from machinesim.config.constants import FAULT_CATALOG
from machinesim.faults.fault_mode import FaultMode


def pressure_offset(progress: float, tick: int, rng: np.random.Generator) -> float:
    spike = progress * 1000.0
    surging = math.sin(tick * 0.08) * progress * 100.0
    return spike + surging


def current_offset(progress: float, tick: int, rng: np.random.Generator) -> float:
    return progress * 15.0


def vibration_offset(progress: float, tick: int, rng: np.random.Generator) -> float:
    return progress * 1.5


PRESSURE_BLOCKAGE = FaultMode(
    fault_id="pressure_blockage",
    name=FAULT_CATALOG["pressure_blockage"]["name"],
    description=FAULT_CATALOG["pressure_blockage"]["description"],
    primary_sensor="pressure",
    effects={
        "pressure": pressure_offset,
        "current": current_offset,
        "vibration": vibration_offset,
    },
)
