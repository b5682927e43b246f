"""FM-01: Bearing wear.

Vibration (primary): creep of up to +8 mm/s plus two harmonics whose
frequency rises from 15 to 25 and whose amplitude grows to 2 mm/s.
Current (secondary): friction adds up to +5 A.
"""

import math

import numpy as np

from machinesim.config.constants import FAULT_CATALOG
from machinesim.faults.fault_mode import FaultMode


def vibration_offset(progress: float, tick: int, rng: np.random.Generator) -> float:
    creep = progress * 8.0
    harmonic_freq = 15.0 + progress * 10.0
    harmonic_amp = progress * 2.0
    harmonic = math.sin(tick * harmonic_freq * 0.01) * harmonic_amp
    second_harmonic = math.sin(tick * harmonic_freq * 0.02) * harmonic_amp * 0.5
    return creep + harmonic + second_harmonic


def current_offset(progress: float, tick: int, rng: np.random.Generator) -> float:
    return progress * 5.0


BEARING_WEAR = FaultMode(
    fault_id="bearing_wear",
    name=FAULT_CATALOG["bearing_wear"]["name"],
    description=FAULT_CATALOG["bearing_wear"]["description"],
    primary_sensor="vibration",
    effects={
        "vibration": vibration_offset,
        "current": current_offset,
    },
)
