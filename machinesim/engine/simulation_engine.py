"""One-tick orchestration of the four sensor channels."""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional

import numpy as np

from machinesim.config.constants import (
    BASELINE_CAPACITY,
    EMA_ALPHA,
    HISTORY_CAPACITY,
    SENSOR_IDS,
)
from machinesim.config.schema import SENSOR_CONFIGS, SensorConfig
from machinesim.detection.anomaly_detector import (
    classify_status,
    detect_anomaly,
    exponential_moving_average,
)
from machinesim.engine.state import (
    SensorReading,
    SensorState,
    SystemState,
    min_days_to_failure,
    worst_status,
)
from machinesim.faults.fault_controller import FaultController
from machinesim.faults.fault_registry import apply_fault_effect
from machinesim.simulation.signal_generator import SignalGenerator

logger = logging.getLogger(__name__)


@dataclass
class ChannelState:
    """Mutable per-channel state, owned exclusively by the engine."""

    config: SensorConfig
    generator: SignalGenerator
    ema: float
    history: Deque[SensorReading] = field(
        default_factory=lambda: deque(maxlen=HISTORY_CAPACITY)
    )
    baseline: List[SensorReading] = field(default_factory=list)


class SimulationEngine:
    """Runs the per-tick pipeline and publishes immutable SystemState snapshots.

    Per tick: fault progress -> for each channel: generate, perturb, clamp,
    smooth, record, detect, classify -> aggregate -> publish.

    Seed flow: the master seed feeds one generator used for fault jitter and
    for drawing a fresh child seed per channel generator. Generators are
    re-created (new child seeds) whenever a fault is cleared.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        clock: Callable[[], float] = time.time,
        configs: Optional[Dict[str, SensorConfig]] = None,
    ):
        self.clock = clock
        self.rng = np.random.default_rng(seed)
        self.configs = configs or SENSOR_CONFIGS
        self.controller = FaultController(clock=clock)
        self.tick_count = 0

        self.channels: Dict[str, ChannelState] = {
            sensor_id: ChannelState(
                config=self.configs[sensor_id],
                generator=self._new_generator(self.configs[sensor_id]),
                ema=self.configs[sensor_id].center,
            )
            for sensor_id in SENSOR_IDS
        }

        self._snapshot = SystemState(
            sensors={sid: SensorState.initial(ch.config) for sid, ch in self.channels.items()},
            active_fault=None,
            overall_status=worst_status([]),
            days_to_failure=None,
        )

    def _new_generator(self, config: SensorConfig) -> SignalGenerator:
        child_seed = int(self.rng.integers(0, 2**31))
        return SignalGenerator(config, np.random.default_rng(child_seed))

    @property
    def snapshot(self) -> SystemState:
        """Latest published snapshot."""
        return self._snapshot

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def inject(self, fault_kind: str) -> bool:
        return self.controller.inject(fault_kind)

    def clear(self) -> bool:
        """Clear the active fault and restart every channel generator."""
        if not self.controller.clear():
            return False
        self.reset_generators()
        return True

    def reset_generators(self) -> None:
        for channel in self.channels.values():
            channel.generator = self._new_generator(channel.config)
        logger.debug("Signal generators reset")

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def _process_channel(
        self,
        channel: ChannelState,
        now: float,
        fault_kind: Optional[str],
        progress: Optional[float],
    ) -> SensorState:
        cfg = channel.config

        raw = channel.generator.next_value(self.tick_count)
        if fault_kind is not None:
            raw = apply_fault_effect(
                raw, fault_kind, progress, self.tick_count, cfg.sensor_id, self.rng,
            )
        raw = cfg.clamp(raw)

        smoothed = exponential_moving_average(raw, channel.ema, EMA_ALPHA)
        channel.ema = smoothed

        reading = SensorReading(timestamp=now, value=smoothed, raw_value=raw)
        channel.history.append(reading)
        if fault_kind is None and len(channel.baseline) < BASELINE_CAPACITY:
            channel.baseline.append(reading)

        history = tuple(channel.history)
        detection = detect_anomaly(smoothed, history, cfg, channel.baseline)

        return SensorState(
            config=cfg,
            current_value=smoothed,
            status=classify_status(smoothed, cfg),
            z_score=detection.z_score,
            rate_of_change=detection.rate_of_change,
            is_anomalous=detection.is_anomalous,
            confidence=detection.confidence,
            predicted_days_to_failure=detection.predicted_days_to_failure,
            contributing_factors=tuple(detection.contributing_factors),
            readings=history,
        )

    def tick(self) -> SystemState:
        """Advance one step and publish the new snapshot."""
        self.tick_count += 1
        now = self.clock()

        fault_kind = self.controller.fault_kind
        progress = self.controller.progress(now)

        sensors: Dict[str, SensorState] = {}
        details: List[str] = []
        for sensor_id in SENSOR_IDS:
            state = self._process_channel(self.channels[sensor_id], now, fault_kind, progress)
            sensors[sensor_id] = state
            if state.is_anomalous:
                details.append(f"{state.config.name}: {', '.join(state.contributing_factors)}")

        overall = worst_status(s.status for s in sensors.values())
        days = min_days_to_failure(s.predicted_days_to_failure for s in sensors.values())

        self.controller.record_prediction(days)

        previous = self._snapshot.overall_status
        if overall != previous:
            logger.info(f"Overall status {previous} -> {overall} (tick {self.tick_count})")

        self._snapshot = SystemState(
            sensors=sensors,
            active_fault=self.controller.state(now),
            overall_status=overall,
            days_to_failure=days,
            anomaly_details=tuple(details),
            tick=self.tick_count,
        )
        return self._snapshot

    def run(self, n_ticks: int) -> List[SystemState]:
        """Run ``n_ticks`` back-to-back (no pacing) and return every snapshot."""
        return [self.tick() for _ in range(n_ticks)]
