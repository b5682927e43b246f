"""Immutable snapshot types published once per tick."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from machinesim.config.constants import STATUS_NORMAL, STATUS_RANKS
from machinesim.config.schema import SensorConfig


@dataclass(frozen=True)
class SensorReading:
    timestamp: float     # seconds since epoch
    value: float         # smoothed
    raw_value: float     # clamped, before smoothing


@dataclass(frozen=True)
class SensorState:
    """Per-channel result of one tick."""

    config: SensorConfig
    current_value: float
    status: str                       # "normal", "warning", "critical"
    z_score: float = 0.0
    rate_of_change: float = 0.0
    is_anomalous: bool = False
    confidence: float = 0.0
    predicted_days_to_failure: Optional[float] = None
    contributing_factors: Tuple[str, ...] = ()
    readings: Tuple[SensorReading, ...] = ()

    @property
    def sensor_id(self) -> str:
        return self.config.sensor_id

    @classmethod
    def initial(cls, config: SensorConfig) -> SensorState:
        """State before the first tick: centered value, normal status."""
        return cls(config=config, current_value=config.center, status=STATUS_NORMAL)


@dataclass(frozen=True)
class FaultState:
    fault_kind: str
    active: bool
    progress: float                    # [0, 1]
    start_time: Optional[float]
    days_to_failure: Optional[float] = None


@dataclass(frozen=True)
class SystemState:
    """The external snapshot. Never mutated after publication."""

    sensors: Mapping[str, SensorState]
    active_fault: Optional[FaultState]
    overall_status: str
    days_to_failure: Optional[float]
    anomaly_details: Tuple[str, ...] = ()
    tick: int = 0

    def __post_init__(self):
        if not isinstance(self.sensors, MappingProxyType):
            object.__setattr__(self, "sensors", MappingProxyType(dict(self.sensors)))

    @property
    def anomalous_sensors(self) -> List[str]:
        return [sid for sid, state in self.sensors.items() if state.is_anomalous]

    def to_dict(self, include_readings: bool = False) -> dict:
        """JSON-friendly representation for external consumers."""
        sensors = {}
        for sensor_id, state in self.sensors.items():
            entry = {
                "name": state.config.name,
                "unit": state.config.unit,
                "current_value": state.current_value,
                "status": state.status,
                "z_score": state.z_score,
                "rate_of_change": state.rate_of_change,
                "is_anomalous": state.is_anomalous,
                "confidence": state.confidence,
                "predicted_days_to_failure": state.predicted_days_to_failure,
                "contributing_factors": list(state.contributing_factors),
            }
            if include_readings:
                entry["readings"] = [
                    {"timestamp": r.timestamp, "value": r.value, "raw_value": r.raw_value}
                    for r in state.readings
                ]
            sensors[sensor_id] = entry

        fault = None
        if self.active_fault is not None:
            fault = {
                "fault_kind": self.active_fault.fault_kind,
                "active": self.active_fault.active,
                "progress": self.active_fault.progress,
                "start_time": self.active_fault.start_time,
                "days_to_failure": self.active_fault.days_to_failure,
            }

        return {
            "tick": self.tick,
            "overall_status": self.overall_status,
            "days_to_failure": self.days_to_failure,
            "anomaly_details": list(self.anomaly_details),
            "active_fault": fault,
            "sensors": sensors,
        }


def worst_status(statuses: Iterable[str]) -> str:
    """Maximum severity: critical > warning > normal."""
    worst = STATUS_NORMAL
    for status in statuses:
        if STATUS_RANKS[status] > STATUS_RANKS[worst]:
            worst = status
    return worst


def min_days_to_failure(predictions: Iterable[Optional[float]]) -> Optional[float]:
    """Smallest non-null prediction, or None."""
    values = [p for p in predictions if p is not None]
    return min(values) if values else None
