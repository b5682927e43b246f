"""Healthy signal generator for one sensor channel.

value = center + drift * range + cycle + pink noise + occasional spike

- drift: bounded random walk, step N(0, 0.001), clamped to [-0.5, 0.5]
- cycle: slow sinusoid (process cycles), amplitude 10% of the normal range
- noise: pink noise scaled by 3x the channel noise level
- spike: with probability 2%, a one-shot N(0, 2 * noise_level) kick

The result is clamped to the normal range widened by 10% on each side.
"""

import math

import numpy as np

from machinesim.config.constants import (
    CYCLE_AMPLITUDE,
    CYCLE_RATE,
    DRIFT_LIMIT,
    DRIFT_STEP_STD,
    GENERATOR_MARGIN,
    NOISE_GAIN,
    SPIKE_GAIN,
    SPIKE_PROBABILITY,
)
from machinesim.config.schema import SensorConfig
from machinesim.simulation.noise import PinkNoiseFilter, gaussian


class SignalGenerator:
    """Stateful healthy-reading process for a single channel.

    Construct a new instance to reset drift, phase and filter state.
    """

    def __init__(self, config: SensorConfig, rng: np.random.Generator):
        self.config = config
        self.rng = rng
        self.pink_noise = PinkNoiseFilter(rng)
        self.drift = 0.0
        self.phase = float(rng.random()) * 2.0 * math.pi

    def next_value(self, tick: int) -> float:
        """Generate the healthy raw reading for ``tick``."""
        cfg = self.config
        normal_range = cfg.normal_range

        self.drift += gaussian(self.rng, 0.0, DRIFT_STEP_STD)
        self.drift = max(-DRIFT_LIMIT, min(DRIFT_LIMIT, self.drift))

        cycle = math.sin(tick * CYCLE_RATE + self.phase) * normal_range * CYCLE_AMPLITUDE
        noise = self.pink_noise.next() * cfg.noise_level * NOISE_GAIN

        spike = 0.0
        if self.rng.random() < SPIKE_PROBABILITY:
            spike = gaussian(self.rng, 0.0, cfg.noise_level * SPIKE_GAIN)

        value = cfg.center + self.drift * normal_range + cycle + noise + spike

        margin = normal_range * GENERATOR_MARGIN
        return max(cfg.normal_min - margin, min(cfg.normal_max + margin, value))
