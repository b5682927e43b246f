"""Random noise sources: Box-Muller Gaussian samples and a 1/f pink noise filter."""

import math

import numpy as np

from machinesim.config.constants import (
    PINK_NOISE_DIRECT_GAIN,
    PINK_NOISE_FEEDBACK_GAIN,
    PINK_NOISE_OUTPUT_SCALE,
    PINK_NOISE_POLES,
)


def gaussian(rng: np.random.Generator, mean: float = 0.0, std: float = 1.0) -> float:
    """Draw one normal sample with the Box-Muller transform.

    Two independent uniforms are always consumed, so the stream position does
    not depend on ``std`` (a zero std still advances the generator).
    """
    u1 = 1.0 - rng.random()  # (0, 1], keeps log() finite
    u2 = rng.random()
    z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
    return z * std + mean


class PinkNoiseFilter:
    """Six-pole IIR filter turning uniform white noise into pink (1/f) noise.

    Accumulators b0..b5 each decay with a fixed pole and are driven by the
    same white sample; b6 is a one-step feedback of the previous white sample.
    Output is roughly zero-mean with a standard deviation near 0.2.
    """

    def __init__(self, rng: np.random.Generator):
        self.rng = rng
        self._b = [0.0] * len(PINK_NOISE_POLES)
        self._b6 = 0.0

    @property
    def state(self) -> tuple:
        """Current accumulator values (b0..b6)."""
        return tuple(self._b) + (self._b6,)

    def next(self) -> float:
        white = self.rng.random() * 2.0 - 1.0
        for i, (pole, gain) in enumerate(PINK_NOISE_POLES):
            self._b[i] = pole * self._b[i] + white * gain
        pink = sum(self._b) + self._b6 + white * PINK_NOISE_DIRECT_GAIN
        self._b6 = white * PINK_NOISE_FEEDBACK_GAIN
        return pink * PINK_NOISE_OUTPUT_SCALE

    def sample(self, n: int) -> np.ndarray:
        """Draw ``n`` consecutive outputs."""
        return np.array([self.next() for _ in range(n)], dtype=np.float64)
