"""Statistical anomaly detection over a channel's reading history.

Reference window: the baseline buffer once it holds enough readings,
otherwise the earlier part of the live history. Recent window: the last
15 readings, used for the least-squares slope.

Anomaly checks (any one raises the flag):
    |z| > 2
    |value - center| / (range / 2) > 1.5
    |slope| / noise_level > 5
Threshold crossings add confidence and factors but do not raise the flag.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from machinesim.config.constants import (
    BASELINE_MIN_READINGS,
    CRITICAL_CONFIDENCE,
    DEFAULT_EMA_ALPHA,
    DEVIATION_CONFIDENCE_CAP,
    DEVIATION_RATIO_LIMIT,
    FAILURE_PREDICTION_MULTIPLIER,
    MAX_DAYS_TO_FAILURE,
    MIN_DAYS_TO_FAILURE,
    MIN_PREDICTION_SLOPE,
    MIN_RAW_DAYS_TO_FAILURE,
    NORMALIZED_RATE_LIMIT,
    RATE_CONFIDENCE_CAP,
    SECONDS_PER_DAY,
    SLOPE_WINDOW,
    STATUS_CRITICAL,
    STATUS_NORMAL,
    STATUS_WARNING,
    TICKS_PER_SECOND,
    WARNING_CONFIDENCE,
    Z_SCORE_CONFIDENCE_CAP,
    Z_SCORE_LIMIT,
)
from machinesim.config.schema import SensorConfig
from machinesim.engine.state import SensorReading


@dataclass(frozen=True)
class ReferenceStatistics:
    mean: float
    std: float
    min: float
    max: float


@dataclass(frozen=True)
class AnomalyResult:
    is_anomalous: bool
    confidence: float
    z_score: float
    rate_of_change: float
    predicted_days_to_failure: Optional[float]
    contributing_factors: List[str]


def _values(readings: Sequence[SensorReading]) -> np.ndarray:
    return np.fromiter((r.value for r in readings), dtype=np.float64, count=len(readings))


def reference_statistics(readings: Sequence[SensorReading]) -> ReferenceStatistics:
    """Mean and population std of the window; std floored to 1 when zero."""
    if len(readings) == 0:
        return ReferenceStatistics(mean=0.0, std=1.0, min=0.0, max=0.0)

    values = _values(readings)
    std = float(np.std(values))
    return ReferenceStatistics(
        mean=float(np.mean(values)),
        std=std if std > 0 else 1.0,
        min=float(values.min()),
        max=float(values.max()),
    )


def z_score(value: float, readings: Sequence[SensorReading]) -> float:
    stats = reference_statistics(readings)
    return (value - stats.mean) / stats.std


def rate_of_change(readings: Sequence[SensorReading], window: int = SLOPE_WINDOW) -> float:
    """OLS slope of value vs. index over the last ``window`` readings (per tick).

    Returns 0.0 when fewer than ``window`` readings exist.
    """
    if len(readings) < window or window < 2:
        return 0.0

    y = _values(readings[-window:])
    x = np.arange(window, dtype=np.float64)
    n = float(window)

    denominator = n * np.sum(x * x) - np.sum(x) ** 2
    slope = (n * np.sum(x * y) - np.sum(x) * np.sum(y)) / denominator
    return float(slope) if np.isfinite(slope) else 0.0


def select_reference(
    history: Sequence[SensorReading],
    baseline: Optional[Sequence[SensorReading]] = None,
) -> Sequence[SensorReading]:
    """Baseline once it is large enough, else the first max(30, n/2) of history."""
    if baseline is not None and len(baseline) >= BASELINE_MIN_READINGS:
        return baseline
    cutoff = int(max(BASELINE_MIN_READINGS, len(history) / 2))
    return history[:cutoff]


def classify_status(value: float, config: SensorConfig) -> str:
    """Pure threshold classification on distance from the normal-range center."""
    deviation = abs(value - config.center)
    if deviation > config.critical_threshold:
        return STATUS_CRITICAL
    if deviation > config.warning_threshold:
        return STATUS_WARNING
    return STATUS_NORMAL


def predict_days_to_failure(
    value: float, slope: float, config: SensorConfig,
) -> Optional[float]:
    """Extrapolate the slope to the critical threshold on its side of center.

    Raw time (ticks -> seconds at 10 Hz -> days, floored at 0.01) is scaled by
    FAILURE_PREDICTION_MULTIPLIER and clamped to [0.1, 30] days.
    """
    if abs(slope) <= MIN_PREDICTION_SLOPE:
        return None

    if slope > 0:
        target = config.center + config.critical_threshold
    else:
        target = config.center - config.critical_threshold

    ticks_to_threshold = abs(target - value) / abs(slope)
    seconds_to_threshold = ticks_to_threshold / TICKS_PER_SECOND
    raw_days = max(MIN_RAW_DAYS_TO_FAILURE, seconds_to_threshold / SECONDS_PER_DAY)

    scaled = raw_days * FAILURE_PREDICTION_MULTIPLIER
    return max(MIN_DAYS_TO_FAILURE, min(MAX_DAYS_TO_FAILURE, scaled))


def detect_anomaly(
    current_value: float,
    readings: Sequence[SensorReading],
    config: SensorConfig,
    baseline: Optional[Sequence[SensorReading]] = None,
) -> AnomalyResult:
    """Evaluate one channel.

    Args:
        current_value: Latest smoothed value.
        readings: Live history, oldest first, including the latest reading.
        config: Channel configuration.
        baseline: Baseline buffer; used as reference once it has >= 30 entries.

    Returns:
        AnomalyResult with flag, confidence (capped at 1.0), statistics,
        optional days-to-failure and factor strings in check order.
    """
    reference = select_reference(readings, baseline)
    z = z_score(current_value, reference)
    slope = rate_of_change(readings, SLOPE_WINDOW)

    factors: List[str] = []
    is_anomalous = False
    confidence = 0.0

    abs_z = abs(z)
    if abs_z > Z_SCORE_LIMIT:
        is_anomalous = True
        confidence += min(abs_z / 4.0, Z_SCORE_CONFIDENCE_CAP)
        sign = "+" if z > 0 else "-"
        factors.append(f"Z-score: {z:.2f} (>{sign}2σ)")

    distance = abs(current_value - config.center)
    deviation = distance / (config.normal_range / 2.0)
    if deviation > DEVIATION_RATIO_LIMIT:
        is_anomalous = True
        confidence += min((deviation - 1.0) * 0.2, DEVIATION_CONFIDENCE_CAP)
        factors.append(f"Outside normal range by {(deviation - 1.0) * 100:.0f}%")

    normalized_rate = abs(slope) / config.noise_level
    if normalized_rate > NORMALIZED_RATE_LIMIT:
        is_anomalous = True
        confidence += min(normalized_rate / 20.0, RATE_CONFIDENCE_CAP)
        direction = "increase" if slope > 0 else "decrease"
        factors.append(f"Rapid {direction}: {abs(slope):.3f}/tick")

    if distance > config.warning_threshold:
        factors.append("Warning threshold exceeded")
        confidence += WARNING_CONFIDENCE
    if distance > config.critical_threshold:
        factors.append("Critical threshold exceeded")
        confidence += CRITICAL_CONFIDENCE

    predicted = None
    if is_anomalous:
        predicted = predict_days_to_failure(current_value, slope, config)

    return AnomalyResult(
        is_anomalous=is_anomalous,
        confidence=min(confidence, 1.0),
        z_score=z,
        rate_of_change=slope,
        predicted_days_to_failure=predicted,
        contributing_factors=factors,
    )


def exponential_moving_average(
    new_value: float, previous: float, alpha: float = DEFAULT_EMA_ALPHA,
) -> float:
    return alpha * new_value + (1.0 - alpha) * previous
