"""Integration tests for the per-tick simulation pipeline."""

import dataclasses

import pytest

from machinesim.config.constants import SENSOR_IDS, STATUS_RANKS
from machinesim.engine.simulation_engine import SimulationEngine


class TestBuffers:
    def test_history_bounded(self, engine, run_ticks):
        snapshots = run_ticks(700)
        for sensor_id in SENSOR_IDS:
            assert len(engine.channels[sensor_id].history) == 600
            assert len(snapshots[-1].sensors[sensor_id].readings) == 600
        assert max(len(s.sensors["vibration"].readings) for s in snapshots) == 600

    def test_history_evicts_oldest(self, engine, run_ticks):
        snapshots = run_ticks(610)
        readings = snapshots[-1].sensors["pressure"].readings
        assert readings[0].timestamp == snapshots[10].sensors["pressure"].readings[-1].timestamp

    def test_baseline_capped_at_fifty(self, engine, run_ticks):
        run_ticks(120)
        for channel in engine.channels.values():
            assert len(channel.baseline) == 50

    def test_baseline_not_captured_during_fault(self, engine, run_ticks):
        run_ticks(10)
        engine.inject("heater_failure")
        run_ticks(100)
        for channel in engine.channels.values():
            assert len(channel.baseline) == 10

    def test_readings_record_raw_and_smoothed(self, engine, clock, run_ticks):
        snap = run_ticks(1)[0]
        for sensor_id in SENSOR_IDS:
            cfg = engine.configs[sensor_id]
            reading = snap.sensors[sensor_id].readings[-1]
            # first EMA step from the channel center
            assert reading.value == pytest.approx(0.4 * reading.raw_value + 0.6 * cfg.center)
            assert reading.timestamp == clock.now


class TestSnapshots:
    def test_initial_snapshot(self, engine):
        snap = engine.snapshot
        assert snap.tick == 0
        assert snap.overall_status == "normal"
        assert snap.active_fault is None
        for sensor_id, state in snap.sensors.items():
            assert state.current_value == engine.configs[sensor_id].center

    def test_snapshot_is_immutable(self, engine, run_ticks):
        snap = run_ticks(1)[0]
        with pytest.raises(dataclasses.FrozenInstanceError):
            snap.overall_status = "critical"
        with pytest.raises(TypeError):
            snap.sensors["vibration"] = None

    def test_published_snapshot_not_mutated_by_later_ticks(self, engine, run_ticks):
        first = run_ticks(1)[0]
        run_ticks(50)
        assert first.tick == 1
        assert len(first.sensors["current"].readings) == 1

    def test_overall_status_is_worst_channel(self, engine, clock, run_ticks):
        run_ticks(60)
        engine.inject("pressure_blockage")
        clock.now += 20.0
        for snap in run_ticks(300):
            worst = max(STATUS_RANKS[s.status] for s in snap.sensors.values())
            assert STATUS_RANKS[snap.overall_status] == worst

    def test_days_to_failure_is_min_over_channels(self, engine, run_ticks):
        run_ticks(60)
        engine.inject("motor_overload")
        for snap in run_ticks(400):
            predictions = [
                s.predicted_days_to_failure for s in snap.sensors.values()
                if s.predicted_days_to_failure is not None
            ]
            expected = min(predictions) if predictions else None
            assert snap.days_to_failure == expected
            assert snap.active_fault.days_to_failure == expected

    def test_anomaly_details_in_channel_order(self, engine, clock, run_ticks):
        run_ticks(60)
        engine.inject("pressure_blockage")
        clock.now += 60.0
        snap = run_ticks(80)[-1]
        names = [engine.configs[sid].name for sid in SENSOR_IDS if snap.sensors[sid].is_anomalous]
        assert [d.split(":")[0] for d in snap.anomaly_details] == names
        assert "Melt Pressure" in names

    def test_deterministic_with_seed(self):
        def trace(seed):
            clock_state = {"t": 0.0}

            def clock():
                return clock_state["t"]

            engine = SimulationEngine(seed=seed, clock=clock)
            values = []
            for i in range(200):
                if i == 50:
                    engine.inject("motor_overload")
                clock_state["t"] += 0.1
                snap = engine.tick()
                values.append(tuple(s.current_value for s in snap.sensors.values()))
            return values

        assert trace(9) == trace(9)
        assert trace(9) != trace(10)


class TestFaultScenarios:
    def test_zero_progress_matches_healthy_run(self, clock):
        """With the clock frozen at activation, heater_failure stays at progress 0."""
        healthy = SimulationEngine(seed=3, clock=clock)
        faulty = SimulationEngine(seed=3, clock=clock)
        faulty.inject("heater_failure")

        for _ in range(50):
            a = healthy.tick()
            b = faulty.tick()
            assert b.active_fault.progress == 0.0
            for sensor_id in SENSOR_IDS:
                assert a.sensors[sensor_id].readings[-1].raw_value == b.sensors[sensor_id].readings[-1].raw_value

    def test_bearing_wear_full_progress(self, engine, clock, run_ticks):
        run_ticks(60)
        assert engine.inject("bearing_wear")
        clock.now += 50.0
        snapshots = run_ticks(60)
        snap = snapshots[-1]

        assert snap.active_fault.progress == 1.0
        vibration = snap.sensors["vibration"]
        assert vibration.readings[-1].raw_value <= 15.0
        assert vibration.current_value > 6.0
        assert vibration.is_anomalous
        assert any(
            "Rapid increase" in f or "Outside normal range" in f
            for f in vibration.contributing_factors
        )
        assert any(s.overall_status != "normal" for s in snapshots)

    def test_values_clamped_to_absolute_range(self, engine, clock, run_ticks):
        run_ticks(60)
        engine.inject("pressure_blockage")
        clock.now += 60.0
        for snap in run_ticks(200):
            for sensor_id, state in snap.sensors.items():
                cfg = engine.configs[sensor_id]
                raw = state.readings[-1].raw_value
                assert cfg.min_value <= raw <= cfg.max_value

    def test_heater_failure_drives_temperature_down(self, engine, clock, run_ticks):
        run_ticks(60)
        engine.inject("heater_failure")
        clock.now += 60.0
        snap = run_ticks(100)[-1]
        assert snap.sensors["temperature"].current_value < 360.0
        assert snap.sensors["temperature"].status in {"warning", "critical"}

    def test_second_inject_leaves_fault_unchanged(self, engine, clock, run_ticks):
        engine.inject("bearing_wear")
        before = run_ticks(5)[-1].active_fault
        assert not engine.inject("motor_overload")
        after = engine.controller.state(clock.now)
        assert after.fault_kind == before.fault_kind
        assert after.start_time == before.start_time


class TestClear:
    def test_clear_resets_generators(self, engine, clock, run_ticks):
        run_ticks(60)
        engine.inject("bearing_wear")
        clock.now += 50.0
        run_ticks(100)

        old_generators = {sid: ch.generator for sid, ch in engine.channels.items()}
        assert engine.clear()

        for sensor_id, channel in engine.channels.items():
            assert channel.generator is not old_generators[sensor_id]
            assert channel.generator.drift == 0.0

        snap = run_ticks(1)[0]
        assert snap.active_fault is None
        for sensor_id, channel in engine.channels.items():
            cfg = channel.config
            margin = cfg.normal_range * 0.1
            raw = snap.sensors[sensor_id].readings[-1].raw_value
            assert abs(channel.generator.drift) < 0.01
            assert cfg.normal_min - margin <= raw <= cfg.normal_max + margin

    def test_clear_when_idle_is_noop(self, engine, run_ticks):
        run_ticks(5)
        generators = [ch.generator for ch in engine.channels.values()]
        assert not engine.clear()
        assert [ch.generator for ch in engine.channels.values()] == generators

    def test_progress_undefined_after_clear(self, engine, run_ticks):
        engine.inject("heater_failure")
        run_ticks(10)
        engine.clear()
        assert engine.controller.progress() is None
        assert run_ticks(1)[0].active_fault is None
