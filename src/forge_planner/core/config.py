"""
Configuration constants for the autoregulation and progression engine.

All adjustable parameters are centralized here for easy tuning.
Per-equipment step sizes live in equipment.py; user overrides are merged
from YAML by engine/config_loader.py.
"""

from dataclasses import dataclass
from typing import Final

# =============================================================================
# E1RM ESTIMATION
# =============================================================================

BRZYCKI_NUMERATOR: Final[float] = 36.0
BRZYCKI_DENOMINATOR: Final[float] = 37.0
EPLEY_DIVISOR: Final[float] = 30.0
BLEND_LOW_REPS: Final[int] = 8  # Below this: pure Brzycki
BLEND_HIGH_REPS: Final[int] = 10  # Above this: pure Epley

# =============================================================================
# SERIES TARGET PROJECTION
# =============================================================================

DEFAULT_WEIGHT_QUANTIZATION: Final[float] = 0.5  # kg
DEFAULT_MAX_REP_DROP_PER_WEEK: Final[int] = 3
DEFAULT_MAX_REP_INCREASE_PER_WEEK: Final[int] = 5
DEFAULT_MAX_REPS_SCAN: Final[int] = 30
MIN_REPS_SCAN: Final[int] = 1


@dataclass(frozen=True)
class SeriesTargetConfig:
    """Projection parameters for one equipment class."""

    tool_type: str
    step_min: float  # Smallest "normal" weight increment
    step_max: float  # Largest "normal" weight increment
    min_reps: int
    weight_quantization: float = DEFAULT_WEIGHT_QUANTIZATION
    max_rep_drop_per_week: int = DEFAULT_MAX_REP_DROP_PER_WEEK
    max_rep_increase_per_week: int = DEFAULT_MAX_REP_INCREASE_PER_WEEK
    max_intensity: float | None = None  # weight / e1RM above this is too heavy
    max_reps_scan: int = DEFAULT_MAX_REPS_SCAN
    remove_reps_if_clamped: bool = False

    def __post_init__(self) -> None:
        if self.step_min <= 0 or self.step_max < self.step_min:
            raise ValueError(
                f"Invalid steps for {self.tool_type}: step_min={self.step_min}, step_max={self.step_max}"
            )
        if self.weight_quantization <= 0:
            raise ValueError("weight_quantization must be positive")
        if self.max_reps_scan < MIN_REPS_SCAN:
            raise ValueError("max_reps_scan must be at least 1")


# =============================================================================
# WEEKLY FEEDBACK SCORES
# =============================================================================

SCORE_MIN: Final[int] = 1
SCORE_MAX: Final[int] = 5
DOMS_LOW: Final[int] = 1  # doms_week == 1 lowers effective fatigue by one
DOMS_HIGH_BASE: Final[int] = 3  # doms_week >= 4 adjusts by (doms_week - 3)

# =============================================================================
# VOLUME DELTA MATRIX (rows: fatigue_eff 1..5, columns: pump_week 1..5)
# =============================================================================

VOLUME_MATRIX: Final[tuple[tuple[int, ...], ...]] = (
    (1, 1, 1, 0, 0),
    (1, 1, 0, 0, 0),
    (1, 0, 0, 0, 0),
    (-1, -1, -1, 0, 0),
    (-1, -1, -1, -1, -1),
)

# =============================================================================
# PAIN OVERRIDE
# =============================================================================

PAIN_SEVERE: Final[int] = 5
PAIN_HIGH: Final[int] = 4
PAIN_MODERATE: Final[int] = 3
PAIN_SEVERE_DELTA: Final[int] = -2
PAIN_HIGH_DELTA: Final[int] = -1

# =============================================================================
# SMOOTHING
# =============================================================================

SMOOTHING_WEEKS_REQUIRED: Final[int] = 2  # Same-sign weeks before a delta applies

# =============================================================================
# CANDIDATE SELECTION
# =============================================================================

ROLE_RANK_INCREASE: Final[dict[str, int]] = {
    "main": 0,
    "secondary": 1,
    "isolation": 2,
}

ROLE_RANK_DECREASE: Final[dict[str, int]] = {
    "isolation": 0,
    "secondary": 1,
    "main": 2,
}

EXERCISE_ROLES: Final[tuple[str, ...]] = ("main", "secondary", "isolation")

# Default max sets per role when the exercise has no explicit bound
MAX_SETS_BY_ROLE: Final[dict[str, int]] = {
    "main": 8,
    "secondary": 6,
    "isolation": 5,
}

# =============================================================================
# MESOCYCLE RIR RAMPS (last entry is the deload week)
# =============================================================================

DELOAD_RIR: Final[int] = 5

RIR_RAMPS: Final[dict[str, tuple[int, ...]]] = {
    "THREE_ONE": (3, 2, 1, 5),
    "FOUR_ONE": (3, 2, 2, 1, 5),
    "FIVE_ONE": (3, 3, 2, 2, 1, 5),
}

# =============================================================================
# SESSION PERFORMANCE SCORE (relative change vs previous session)
# =============================================================================

PERF_BIG_DROP: Final[float] = -0.20
PERF_DROP: Final[float] = -0.10
PERF_GAIN: Final[float] = 0.10
PERF_BIG_GAIN: Final[float] = 0.20
PERF_NEUTRAL: Final[int] = 3
