"""Tests for the Idle/Active fault state machine."""

import pytest

from machinesim.faults.fault_controller import FaultController


class TestFaultController:
    @pytest.fixture
    def controller(self, clock):
        return FaultController(clock=clock)

    def test_starts_idle(self, controller):
        assert not controller.active
        assert controller.progress() is None
        assert controller.state() is None

    def test_inject_activates(self, controller, clock):
        assert controller.inject("bearing_wear")
        state = controller.state()
        assert state.fault_kind == "bearing_wear"
        assert state.active
        assert state.progress == 0.0
        assert state.start_time == clock.now
        assert state.days_to_failure is None

    def test_progress_follows_clock(self, controller, clock):
        controller.inject("heater_failure")
        clock.now += 22.5
        assert controller.progress() == pytest.approx(0.5)
        clock.now += 100.0
        assert controller.progress() == 1.0

    def test_progress_non_decreasing(self, controller, clock):
        controller.inject("motor_overload")
        previous = controller.progress()
        for _ in range(600):
            clock.advance()
            current = controller.progress()
            assert current >= previous
            previous = current
        assert previous == 1.0

    def test_progress_holds_when_clock_steps_back(self, controller, clock):
        controller.inject("bearing_wear")
        clock.now += 20.0
        before = controller.progress()
        clock.now -= 10.0
        assert controller.progress() == pytest.approx(before)
        assert controller.state().progress == pytest.approx(before)

        clock.now += 20.0
        assert controller.progress() == pytest.approx(30.0 / 45.0)

    def test_second_inject_is_noop(self, controller, clock):
        controller.inject("bearing_wear")
        clock.now += 10.0
        before = controller.state()

        assert not controller.inject("pressure_blockage")
        after = controller.state()
        assert after == before

    def test_unknown_fault_rejected(self, controller):
        assert not controller.inject("flux_capacitor")
        assert not controller.active

    def test_clear_returns_to_idle(self, controller, clock):
        controller.inject("pressure_blockage")
        clock.now += 5.0
        assert controller.clear()
        assert controller.progress() is None
        assert controller.state() is None
        assert not controller.clear()

    def test_reinject_after_clear_restarts_progress(self, controller, clock):
        controller.inject("bearing_wear")
        clock.now += 40.0
        controller.clear()
        assert controller.inject("heater_failure")
        assert controller.progress() == 0.0

    def test_record_prediction(self, controller):
        controller.record_prediction(3.0)
        assert controller.state() is None

        controller.inject("bearing_wear")
        controller.record_prediction(7.5)
        assert controller.state().days_to_failure == 7.5

    def test_rejected_inject_logged(self, controller, caplog):
        controller.inject("bearing_wear")
        with caplog.at_level("WARNING"):
            controller.inject("heater_failure")
        assert "already active" in caplog.text
