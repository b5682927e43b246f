"""Fixed-rate background driver for the simulation engine."""

import logging
import threading
import time
from typing import Callable, List, Optional

from machinesim.config.constants import TICK_INTERVAL_S
from machinesim.engine.simulation_engine import SimulationEngine
from machinesim.engine.state import SystemState

logger = logging.getLogger(__name__)

Subscriber = Callable[[SystemState], None]


class SimulationScheduler:
    """Ticks a SimulationEngine every 100 ms on a worker thread.

    Ticks never overlap: each runs to completion under the lock, and the
    commands (inject/clear) take the same lock, so they land between ticks.
    stop() waits for an in-flight tick to finish.
    """

    def __init__(
        self,
        engine: Optional[SimulationEngine] = None,
        interval_s: float = TICK_INTERVAL_S,
    ):
        self.engine = engine or SimulationEngine()
        self.interval_s = interval_s

        self._lock = threading.Lock()
        self._subscribers: List[Subscriber] = []
        self._stop_event = threading.Event()
        self._worker_thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._worker_thread is not None and self._worker_thread.is_alive()

    @property
    def latest(self) -> SystemState:
        return self.engine.snapshot

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._worker_thread = threading.Thread(
            target=self._run_loop, name="SimulationScheduler", daemon=True,
        )
        self._worker_thread.start()
        logger.info(f"Scheduler started (interval={self.interval_s * 1000:.0f} ms)")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        if self._worker_thread is None:
            return
        self._stop_event.set()
        self._worker_thread.join(timeout=timeout)
        if self._worker_thread.is_alive():
            # Keep the handle so start() cannot launch a second loop
            logger.warning(f"Scheduler thread still running after {timeout} s stop timeout")
            return
        self._worker_thread = None
        logger.info(f"Scheduler stopped after {self.engine.tick_count} ticks")

    def _run_loop(self) -> None:
        next_deadline = time.monotonic()
        while not self._stop_event.is_set():
            self.step()
            next_deadline += self.interval_s
            delay = next_deadline - time.monotonic()
            if delay < 0:
                # Overran; drop missed ticks instead of bursting to catch up
                logger.debug(f"Tick overran by {-delay * 1000:.1f} ms")
                next_deadline = time.monotonic()
                delay = 0.0
            self._stop_event.wait(delay)

    # -------------------------------------------------------------------------
    # Ticks, commands and subscriptions
    # -------------------------------------------------------------------------

    def step(self) -> SystemState:
        """Run one tick synchronously and notify subscribers."""
        with self._lock:
            snapshot = self.engine.tick()
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(snapshot)
            except Exception:
                logger.exception(f"Subscriber {callback!r} failed")
        return snapshot

    def inject(self, fault_kind: str) -> bool:
        with self._lock:
            return self.engine.inject(fault_kind)

    def clear(self) -> bool:
        with self._lock:
            return self.engine.clear()

    def subscribe(self, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)
