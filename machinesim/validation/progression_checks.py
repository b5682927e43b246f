"""Consistency checks over a recorded trace of snapshots."""

import logging
from typing import Iterable

import numpy as np
import pandas as pd

from machinesim.config.constants import (
    HISTORY_CAPACITY,
    MAX_DAYS_TO_FAILURE,
    MIN_DAYS_TO_FAILURE,
    SENSOR_IDS,
    STATUS_RANKS,
)
from machinesim.engine.state import SystemState

logger = logging.getLogger(__name__)


def snapshots_to_frame(snapshots: Iterable[SystemState]) -> pd.DataFrame:
    """Flatten snapshots into one row per tick."""
    rows = []
    for snap in snapshots:
        fault = snap.active_fault
        row = {
            "tick": snap.tick,
            "overall_status": snap.overall_status,
            "days_to_failure": snap.days_to_failure,
            "fault_kind": fault.fault_kind if fault else None,
            "fault_progress": fault.progress if fault else np.nan,
            "fault_start_time": fault.start_time if fault else np.nan,
            "n_anomalous": len(snap.anomalous_sensors),
        }
        for sensor_id in SENSOR_IDS:
            state = snap.sensors[sensor_id]
            row[f"{sensor_id}_value"] = state.current_value
            row[f"{sensor_id}_status"] = state.status
            row[f"{sensor_id}_z_score"] = state.z_score
            row[f"{sensor_id}_anomalous"] = state.is_anomalous
            row[f"{sensor_id}_history_len"] = len(state.readings)
        rows.append(row)
    return pd.DataFrame(rows)


def validate_progression(frame: pd.DataFrame) -> bool:
    """Validate a snapshot trace.

    Checks:
    - Overall status equals the worst per-channel status on every tick
    - Fault progress never decreases within a fault episode
    - History length never exceeds capacity
    - Days-to-failure stays inside the calibrated clamp range

    Returns True if all checks pass.
    """
    if frame.empty:
        logger.warning("Empty trace, nothing to validate")
        return True

    passed = True

    # Check 1: overall status is the max severity across channels
    channel_ranks = pd.concat(
        [frame[f"{sid}_status"].map(STATUS_RANKS) for sid in SENSOR_IDS], axis=1,
    ).max(axis=1)
    overall_ranks = frame["overall_status"].map(STATUS_RANKS)
    mismatched = frame.loc[channel_ranks != overall_ranks, "tick"]
    if len(mismatched) > 0:
        logger.warning(
            f"Overall status inconsistent with channels on {len(mismatched)} ticks "
            f"(first: {int(mismatched.iloc[0])})"
        )
        passed = False

    # Check 2: progress monotone per episode (a new episode starts whenever
    # the fault kind or its start time changes, including idle gaps)
    kind_changed = frame["fault_kind"] != frame["fault_kind"].shift()
    start_changed = frame["fault_start_time"] != frame["fault_start_time"].shift()
    episode = (kind_changed | start_changed).cumsum()
    active = frame[frame["fault_kind"].notna()]
    for episode_id, group in active.groupby(episode[active.index]):
        steps = group["fault_progress"].diff().dropna()
        if (steps < 0).any():
            logger.warning(
                f"Fault progress decreased in episode {episode_id} "
                f"({group['fault_kind'].iloc[0]})"
            )
            passed = False

    # Check 3: bounded history
    for sensor_id in SENSOR_IDS:
        longest = int(frame[f"{sensor_id}_history_len"].max())
        if longest > HISTORY_CAPACITY:
            logger.warning(f"{sensor_id} history reached {longest} > {HISTORY_CAPACITY}")
            passed = False

    # Check 4: calibrated prediction range
    days = frame["days_to_failure"].dropna()
    out_of_range = days[(days < MIN_DAYS_TO_FAILURE) | (days > MAX_DAYS_TO_FAILURE)]
    if len(out_of_range) > 0:
        logger.warning(f"{len(out_of_range)} days-to-failure values outside clamp range")
        passed = False

    if passed:
        logger.info("All progression checks passed")
    else:
        logger.warning("Some progression checks failed")

    return passed


def summarize_trace(frame: pd.DataFrame) -> pd.DataFrame:
    """Ticks spent in each overall status, per fault kind ("none" when idle)."""
    if frame.empty:
        return pd.DataFrame()
    return (
        frame.assign(fault_kind=frame["fault_kind"].fillna("none"))
        .groupby(["fault_kind", "overall_status"])
        .size()
        .unstack(fill_value=0)
    )
