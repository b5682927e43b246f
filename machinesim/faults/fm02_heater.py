"""FM-02: Heater failure.

Temperature (primary): drops by up to 80 °F with an oscillation whose
amplitude grows from 5 to 20 °F. The 5 °F floor only shows once the
fault has started developing; the registry skips every effect at progress 0.
Pressure (secondary): melt viscosity swings pressure by up to ±200 PSI.
"""

import math

import numpy as np

from machinesim.config.constants import FAULT_CATALOG
from machinesim.faults.fault_mode import FaultMode


def temperature_offset(progress: float, tick: int, rng: np.random.Generator) -> float:
    drift = -progress * 80.0
    oscillation = math.sin(tick * 0.05) * (5.0 + progress * 15.0)
    return drift + oscillation


def pressure_offset(progress: float, tick: int, rng: np.random.Generator) -> float:
    return progress * 200.0 * math.sin(tick * 0.03)


HEATER_FAILURE = FaultMode(
    fault_id="heater_failure",
    name=FAULT_CATALOG["heater_failure"]["name"],
    description=FAULT_CATALOG["heater_failure"]["description"],
    primary_sensor="temperature",
    effects={
        "temperature": temperature_offset,
        "pressure": pressure_offset,
    },
)
