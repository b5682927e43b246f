"""Dataclasses for the static sensor configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from machinesim.config.constants import SENSOR_IDS, SENSOR_TABLE


@dataclass(frozen=True)
class SensorConfig:
    """Static description of one sensor channel."""

    sensor_id: str
    name: str
    unit: str
    min_value: float           # absolute hardware range
    max_value: float
    normal_min: float          # normal operating range
    normal_max: float
    warning_threshold: float   # distance from center
    critical_threshold: float  # distance from center
    noise_level: float

    @property
    def center(self) -> float:
        return (self.normal_min + self.normal_max) / 2.0

    @property
    def normal_range(self) -> float:
        return self.normal_max - self.normal_min

    def clamp(self, value: float) -> float:
        """Clamp to the absolute [min_value, max_value] range."""
        return max(self.min_value, min(self.max_value, value))

    @classmethod
    def for_sensor(cls, sensor_id: str) -> SensorConfig:
        if sensor_id not in SENSOR_TABLE:
            raise ValueError(f"Unknown sensor_id: {sensor_id}")
        return cls(sensor_id=sensor_id, **SENSOR_TABLE[sensor_id])


def create_sensor_configs() -> Dict[str, SensorConfig]:
    """Build the four channel configs, keyed by sensor id in processing order."""
    return {sensor_id: SensorConfig.for_sensor(sensor_id) for sensor_id in SENSOR_IDS}


SENSOR_CONFIGS = create_sensor_configs()
