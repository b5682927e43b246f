"""Engine constants, sensor tables and fault catalogue.

Everything here is fixed for the process lifetime; there is no runtime
reconfiguration of the engine.
"""

# =============================================================================
# Timing
# =============================================================================

TICK_INTERVAL_S = 0.1           # 10 Hz
TICKS_PER_SECOND = 10
SECONDS_PER_DAY = 86_400

# Time for an injected fault to reach full development (progress = 1.0)
FAULT_DURATION_S = 45.0

# =============================================================================
# Buffers and smoothing
# =============================================================================

HISTORY_CAPACITY = 600          # 60 s of readings at 10 Hz
BASELINE_CAPACITY = 50          # readings captured while no fault is active
BASELINE_MIN_READINGS = 30      # baseline becomes the reference at this size

EMA_ALPHA = 0.4                 # engine smoothing factor
DEFAULT_EMA_ALPHA = 0.3         # default of the standalone EMA helper

# =============================================================================
# Signal generator
# =============================================================================

DRIFT_STEP_STD = 0.001
DRIFT_LIMIT = 0.5
CYCLE_RATE = 0.001              # rad per tick
CYCLE_AMPLITUDE = 0.1           # fraction of the normal range
NOISE_GAIN = 3.0
SPIKE_PROBABILITY = 0.02
SPIKE_GAIN = 2.0
GENERATOR_MARGIN = 0.1          # healthy clamp margin, fraction of normal range

# Paul Kellet's refined Voss-McCartney pink noise filter.
# (pole, white-noise gain) for accumulators b0..b5
PINK_NOISE_POLES = (
    (0.99886, 0.0555179),
    (0.99332, 0.0750759),
    (0.96900, 0.1538520),
    (0.86650, 0.3104856),
    (0.55000, 0.5329522),
    (-0.7616, -0.0168980),
)
PINK_NOISE_DIRECT_GAIN = 0.5362
PINK_NOISE_FEEDBACK_GAIN = 0.115926
PINK_NOISE_OUTPUT_SCALE = 0.11

# =============================================================================
# Anomaly detection
# =============================================================================

SLOPE_WINDOW = 15               # readings used for the regression slope
Z_SCORE_LIMIT = 2.0
DEVIATION_RATIO_LIMIT = 1.5     # |value - center| / (range / 2)
NORMALIZED_RATE_LIMIT = 5.0     # |slope| / noise_level
MIN_PREDICTION_SLOPE = 0.001

# Confidence contributions (summed, capped at 1.0)
Z_SCORE_CONFIDENCE_CAP = 0.4
DEVIATION_CONFIDENCE_CAP = 0.3
RATE_CONFIDENCE_CAP = 0.3
WARNING_CONFIDENCE = 0.15
CRITICAL_CONFIDENCE = 0.25

# Failure prediction. The simulation develops a fault in 45 s, so raw
# extrapolated times are tiny; this multiplier maps them onto a demo-friendly
# scale of days. It is a presentation calibration, not a physical law.
MIN_RAW_DAYS_TO_FAILURE = 0.01
FAILURE_PREDICTION_MULTIPLIER = 500.0
MIN_DAYS_TO_FAILURE = 0.1
MAX_DAYS_TO_FAILURE = 30.0

# =============================================================================
# Status levels
# =============================================================================

STATUS_NORMAL = "normal"
STATUS_WARNING = "warning"
STATUS_CRITICAL = "critical"

STATUS_RANKS = {
    STATUS_NORMAL: 0,
    STATUS_WARNING: 1,
    STATUS_CRITICAL: 2,
}

# =============================================================================
# Sensor channels
# =============================================================================

# Processing order is significant: factor strings are reported in this order.
SENSOR_IDS = ["vibration", "temperature", "pressure", "current"]

SENSOR_TABLE = {
    "vibration": {
        "name": "Vibration",
        "unit": "mm/s",
        "min_value": 0.0,
        "max_value": 15.0,
        "normal_min": 2.0,
        "normal_max": 4.0,
        "warning_threshold": 6.0,
        "critical_threshold": 10.0,
        "noise_level": 0.15,
    },
    "temperature": {
        "name": "Barrel Temp",
        "unit": "°F",
        "min_value": 300.0,
        "max_value": 500.0,
        "normal_min": 380.0,
        "normal_max": 420.0,
        "warning_threshold": 40.0,
        "critical_threshold": 60.0,
        "noise_level": 2.0,
    },
    "pressure": {
        "name": "Melt Pressure",
        "unit": "PSI",
        "min_value": 2000.0,
        "max_value": 4500.0,
        "normal_min": 2800.0,
        "normal_max": 3200.0,
        "warning_threshold": 400.0,
        "critical_threshold": 700.0,
        "noise_level": 25.0,
    },
    "current": {
        "name": "Motor Current",
        "unit": "amps",
        "min_value": 30.0,
        "max_value": 80.0,
        "normal_min": 45.0,
        "normal_max": 55.0,
        "warning_threshold": 10.0,
        "critical_threshold": 18.0,
        "noise_level": 0.8,
    },
}

# =============================================================================
# Fault catalogue
# =============================================================================

FAULT_KINDS = ["bearing_wear", "heater_failure", "pressure_blockage", "motor_overload"]

FAULT_CATALOG = {
    "bearing_wear": {
        "name": "Bearing Wear",
        "description": "Gradual vibration increase with harmonic patterns",
        "primary_sensor": "vibration",
    },
    "heater_failure": {
        "name": "Heater Failure",
        "description": "Temperature drift down with oscillation",
        "primary_sensor": "temperature",
    },
    "pressure_blockage": {
        "name": "Pressure Blockage",
        "description": "Pressure spike with current increase",
        "primary_sensor": "pressure",
    },
    "motor_overload": {
        "name": "Motor Overload",
        "description": "Current spike with vibration increase",
        "primary_sensor": "current",
    },
}
