"""Fault dispatch table keyed by (fault kind, sensor id)."""

import logging
from typing import Dict, Optional, Tuple

import numpy as np

from machinesim.config.constants import FAULT_KINDS
from machinesim.faults.fault_mode import EffectFn, FaultMode
from machinesim.faults.fm01_bearing import BEARING_WEAR
from machinesim.faults.fm02_heater import HEATER_FAILURE
from machinesim.faults.fm03_blockage import PRESSURE_BLOCKAGE
from machinesim.faults.fm04_overload import MOTOR_OVERLOAD

logger = logging.getLogger(__name__)

FAULT_MODES: Dict[str, FaultMode] = {
    mode.fault_id: mode
    for mode in (BEARING_WEAR, HEATER_FAILURE, PRESSURE_BLOCKAGE, MOTOR_OVERLOAD)
}

assert list(FAULT_MODES) == FAULT_KINDS, "fault catalogue and fault modes out of sync"

EFFECT_TABLE: Dict[Tuple[str, str], EffectFn] = {
    (mode.fault_id, sensor_id): effect
    for mode in FAULT_MODES.values()
    for sensor_id, effect in mode.effects.items()
}


def is_known_fault(fault_kind: str) -> bool:
    return fault_kind in FAULT_MODES


def get_fault_mode(fault_kind: str) -> FaultMode:
    """Look up a fault mode, raising ValueError for unknown kinds."""
    mode = FAULT_MODES.get(fault_kind)
    if mode is None:
        raise ValueError(f"Unknown fault kind: {fault_kind}")
    return mode


def lookup_effect(fault_kind: str, sensor_id: str) -> Optional[EffectFn]:
    return EFFECT_TABLE.get((fault_kind, sensor_id))


def apply_fault_effect(
    raw_value: float,
    fault_kind: str,
    progress: float,
    tick: int,
    sensor_id: str,
    rng: np.random.Generator,
) -> float:
    """Perturb a healthy raw reading with the active fault's effect.

    Applied after generation and before range clamping and smoothing. A
    fault at progress 0 (or below) leaves every channel untouched, including
    the heater oscillation; unaffected channels always pass through.

    Args:
        raw_value: Healthy generator output.
        fault_kind: Active fault kind.
        progress: Fault development in [0, 1].
        tick: Global tick counter (drives oscillatory terms).
        sensor_id: Channel being perturbed.
        rng: Random generator for stochastic terms (motor overload jitter).

    Returns:
        Perturbed raw value (not yet clamped).
    """
    if progress <= 0.0:
        return raw_value
    effect = lookup_effect(fault_kind, sensor_id)
    if effect is None:
        return raw_value
    return raw_value + effect(progress, tick, rng)
