"""Fault mode container: per-channel perturbation functions for one fault kind."""

from dataclasses import dataclass, field
from typing import Callable, Dict

import numpy as np

# (progress in [0, 1], tick, rng) -> additive offset on the raw reading
EffectFn = Callable[[float, int, np.random.Generator], float]


@dataclass(frozen=True)
class FaultMode:
    """A fault kind and the channels it perturbs.

    effects: sensor_id -> offset function. The primary channel carries a
        strong, near-linear creep plus an oscillatory term; secondary channels
        carry a weaker coupling. Channels not listed pass through unmodified.
    """

    fault_id: str
    name: str
    description: str
    primary_sensor: str
    effects: Dict[str, EffectFn] = field(default_factory=dict)

    @property
    def affected_sensors(self) -> list:
        return list(self.effects)

    def offset(
        self, sensor_id: str, progress: float, tick: int, rng: np.random.Generator,
    ) -> float:
        """Offset added to ``sensor_id`` at ``progress``; 0.0 for unaffected channels."""
        effect = self.effects.get(sensor_id)
        if effect is None:
            return 0.0
        return effect(progress, tick, rng)
