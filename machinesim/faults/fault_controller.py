"""Idle/Active state machine for the single system-wide fault."""

import logging
import time
from typing import Callable, Optional

from machinesim.config.constants import FAULT_DURATION_S
from machinesim.engine.state import FaultState
from machinesim.faults.fault_registry import is_known_fault

logger = logging.getLogger(__name__)


class FaultController:
    """Governs at most one active fault and its progress curve.

    Idle -> Active only via inject(); Active -> Idle only via clear().
    Progress is recomputed from the clock on every call and held at its
    high-water mark, so a clock stepping backwards cannot undo development.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        duration_s: float = FAULT_DURATION_S,
    ):
        self.clock = clock
        self.duration_s = duration_s
        self._fault_kind: Optional[str] = None
        self._start_time: Optional[float] = None
        self._progress_mark = 0.0
        self._days_to_failure: Optional[float] = None

    @property
    def active(self) -> bool:
        return self._fault_kind is not None

    @property
    def fault_kind(self) -> Optional[str]:
        return self._fault_kind

    def inject(self, fault_kind: str) -> bool:
        """Activate ``fault_kind``. Returns False (no-op) if rejected."""
        if not is_known_fault(fault_kind):
            logger.warning(f"Rejected inject: unknown fault kind {fault_kind!r}")
            return False
        if self.active:
            logger.warning(
                f"Rejected inject of {fault_kind}: {self._fault_kind} already active"
            )
            return False

        self._fault_kind = fault_kind
        self._start_time = self.clock()
        self._progress_mark = 0.0
        self._days_to_failure = None
        logger.info(f"Fault injected: {fault_kind}")
        return True

    def clear(self) -> bool:
        """Deactivate the current fault. Returns False if already idle."""
        if not self.active:
            logger.debug("clear() while idle ignored")
            return False

        logger.info(f"Fault cleared: {self._fault_kind}")
        self._fault_kind = None
        self._start_time = None
        self._progress_mark = 0.0
        self._days_to_failure = None
        return True

    def progress(self, now: Optional[float] = None) -> Optional[float]:
        """Fault development in [0, 1], or None when idle."""
        if not self.active:
            return None
        now = self.clock() if now is None else now
        elapsed = now - self._start_time
        progress = max(0.0, min(1.0, elapsed / self.duration_s))
        if progress < self._progress_mark:
            logger.debug(f"Clock stepped back, holding progress at {self._progress_mark:.3f}")
        self._progress_mark = max(self._progress_mark, progress)
        return self._progress_mark

    def record_prediction(self, days_to_failure: Optional[float]) -> None:
        """Store the latest system-wide days-to-failure for the fault state."""
        if self.active:
            self._days_to_failure = days_to_failure

    def state(self, now: Optional[float] = None) -> Optional[FaultState]:
        if not self.active:
            return None
        return FaultState(
            fault_kind=self._fault_kind,
            active=True,
            progress=self.progress(now),
            start_time=self._start_time,
            days_to_failure=self._days_to_failure,
        )
