"""
Data models for forge-planner.

Input records validate their ranges in ``__post_init__``; result records are
frozen so that the caller applies them explicitly (inside its own
transaction) instead of the engine mutating shared state.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

from .config import EXERCISE_ROLES

ExerciseRole = Literal["main", "secondary", "isolation"]
ToolType = Literal["DUMBBELL", "BARBELL", "MACHINE"]
MesocycleStructure = Literal["THREE_ONE", "FOUR_ONE", "FIVE_ONE"]


def _check_score(value: int, name: str) -> None:
    if not 1 <= value <= 5:
        raise ValueError(f"{name} must be between 1 and 5, got {value}")


# ---------------------------------------------------------------------------
# Weekly feedback
# ---------------------------------------------------------------------------


@dataclass
class MuscleGroupWeeklyEntry:
    """
    Subjective feedback for one muscle group from one session.

    ``sets`` is the number of sets performed and weights the entry during
    weekly aggregation.
    """

    sets: int
    fatigue: int
    doms: int
    pump: int
    tendon_pain: int

    def __post_init__(self) -> None:
        """Validate feedback scores."""
        if self.sets < 0:
            raise ValueError("sets must be non-negative")
        _check_score(self.fatigue, "fatigue")
        _check_score(self.doms, "doms")
        _check_score(self.pump, "pump")
        _check_score(self.tendon_pain, "tendon_pain")


@dataclass(frozen=True)
class WeeklyFeedback:
    """Weekly scores for one muscle group, derived at week close."""

    fatigue_week: int
    doms_week: int
    pump_week: int
    pain_week: int
    fatigue_eff: int  # fatigue adjusted by DOMS, clamped to 1..5


@dataclass(frozen=True)
class AutoVolumeState:
    """
    Smoothing streak for one (mesocycle, muscle group).

    A new value is produced on every week close, even when the delta is
    blocked, so the streak keeps building.
    """

    last_delta_sign: int = 0
    consecutive_count: int = 0

    def __post_init__(self) -> None:
        if self.last_delta_sign not in (-1, 0, 1):
            raise ValueError(f"last_delta_sign must be -1, 0 or 1, got {self.last_delta_sign}")
        if self.consecutive_count < 0:
            raise ValueError("consecutive_count must be non-negative")


@dataclass(frozen=True)
class PainOverride:
    """Delta after the tendon-pain override."""

    delta: int
    pain_override: bool = False
    freeze_increase: bool = False


@dataclass(frozen=True)
class SmoothingResult:
    """Outcome of one smoothing transition."""

    delta_final: int
    smoothing_blocked: bool
    state: AutoVolumeState


# ---------------------------------------------------------------------------
# Exercises in sessions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SessionSlot:
    """Position of a session inside every week of a mesocycle."""

    day_of_week: int
    order_in_week: int


@dataclass
class CandidateExercise:
    """
    An exercise-in-session flagged as eligible for auto-volume.

    Only the week-close step changes ``sets_target``; it does so by
    returning a SetsAdjustment, never by mutating this record.
    """

    id: str
    exercise_id: str
    order_index: int
    sets_target: int
    min_sets: int
    max_sets: int
    exercise_role: ExerciseRole
    joint_stress: int
    slot: SessionSlot
    last_adjusted_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate candidate bounds and classification."""
        if self.sets_target < 1:
            raise ValueError("sets_target must be at least 1")
        if self.min_sets > self.max_sets:
            raise ValueError(
                f"min_sets ({self.min_sets}) must not exceed max_sets ({self.max_sets})"
            )
        if self.exercise_role not in EXERCISE_ROLES:
            raise ValueError(f"Invalid exercise_role: {self.exercise_role}")
        _check_score(self.joint_stress, "joint_stress")


@dataclass
class ExerciseSlotRecord:
    """
    A planned exercise-in-session for any week of the mesocycle.

    Week close and target projection mirror their changes onto the records
    that share exercise_id, order_index and slot in later, not-completed
    weeks.
    """

    id: str
    exercise_id: str
    order_index: int
    slot: SessionSlot
    week_index: int
    sets_target: int
    completed: bool = False
    load_target: float | None = None
    reps_target_hint: int | None = None
    last_adjusted_at: datetime | None = None
    last_adjusted_direction: int | None = None

    def __post_init__(self) -> None:
        if self.week_index < 1:
            raise ValueError("week_index must be 1 or greater")
        if self.sets_target < 0:
            raise ValueError("sets_target must be non-negative")

    def same_slot_as(self, exercise_id: str, order_index: int, slot: SessionSlot) -> bool:
        """True if this record is the same exercise in the same session slot."""
        return (
            self.exercise_id == exercise_id
            and self.order_index == order_index
            and self.slot == slot
        )


@dataclass
class ScheduledSession:
    """A session of one week, as needed to order sessions inside the week."""

    id: str
    order_in_week: int
    scheduled_date: date
    completed: bool = False
    muscle_group_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PerformedSet:
    """A working set as actually performed. Either value may be missing."""

    load: float | None = None
    reps: int | None = None


@dataclass(frozen=True)
class ExercisePerformance:
    """Reference numbers of one exercise in a completed session."""

    avg_load: float
    reps_ref: int | None  # minimum reps across performed sets


@dataclass
class CompletedExercise:
    """A record completed in the current session and what was performed."""

    record: ExerciseSlotRecord
    tool_type: ToolType
    performed_sets: list[PerformedSet] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Series target projection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PreviousSet:
    """Weight and reps of the reference (previous) working set."""

    weight: float
    reps: int


@dataclass(frozen=True)
class SeriesTargetFlags:
    """
    Named conditions raised while projecting a series target.

    Every flag is always present so callers never need to guess which
    combinations can co-occur.
    """

    override_used: bool = False
    auto: bool = False
    clamped_by_min_reps: bool = False
    clamped_by_max_drop: bool = False
    clamped_by_max_increase: bool = False
    too_heavy: bool = False
    same_weight_plus_one_rep: bool = False
    under_auto_but_not_below_prev_plus_one_rep: bool = False
    in_delta_range_keep_reps: bool = False
    above_range_e1rm: bool = False
    below_prev_e1rm: bool = False
    reps_removed_out_of_bounds: bool = False

    @property
    def clamped(self) -> bool:
        """True if any rep clamp fired."""
        return self.clamped_by_min_reps or self.clamped_by_max_drop or self.clamped_by_max_increase

    def active(self) -> list[str]:
        """Names of the flags that are set."""
        return [name for name, value in vars(self).items() if value]


@dataclass(frozen=True)
class RepSearchResult:
    """Equivalent-rep search output. reps_target None means "no safe target"."""

    reps_target: int | None
    flags: SeriesTargetFlags
    e_target: float


@dataclass(frozen=True)
class SeriesTarget:
    """Next weight and rep target for a working set."""

    weight_target: float
    reps_target: int | None
    flags: SeriesTargetFlags


@dataclass(frozen=True)
class ExerciseTargets:
    """Session-level load/rep targets with an optional human-readable hint."""

    load_target: float
    reps_target_hint: int
    suggestion: str | None = None


# ---------------------------------------------------------------------------
# Week close
# ---------------------------------------------------------------------------


@dataclass
class WeekSnapshot:
    """
    Everything a week close reads.

    ``exercises`` holds every ExerciseSlotRecord of the mesocycle that may
    receive a propagated value (current and later weeks).
    """

    mesocycle_id: str
    week_index: int
    feedback: dict[str, list[MuscleGroupWeeklyEntry]] = field(default_factory=dict)
    states: dict[str, AutoVolumeState] = field(default_factory=dict)
    candidates: dict[str, list[CandidateExercise]] = field(default_factory=dict)
    exercises: list[ExerciseSlotRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.week_index < 1:
            raise ValueError("week_index must be 1 or greater")


@dataclass(frozen=True)
class ProgressionLogEntry:
    """An audit record of one target change."""

    entity_id: str
    week_index: int
    reason: str
    prev_value: dict
    new_value: dict
    muscle_group_id: str | None = None


@dataclass(frozen=True)
class SetsAdjustment:
    """The single set-count change chosen for a muscle group this week."""

    muscle_group_id: str
    candidate_id: str
    exercise_id: str
    delta: int
    prev_sets_target: int
    new_sets_target: int
    adjusted_at: datetime
    propagated_ids: tuple[str, ...] = ()

    @property
    def direction(self) -> int:
        return 1 if self.delta > 0 else -1


@dataclass(frozen=True)
class VolumeDecision:
    """Per-muscle-group trace of one week close."""

    muscle_group_id: str
    feedback: WeeklyFeedback
    delta_matrix: int
    pain: PainOverride
    smoothing: SmoothingResult
    candidate_id: str | None = None
    no_candidate: bool = False

    @property
    def delta_sets(self) -> int:
        """Value recorded on every feedback record of the week, for display."""
        return self.smoothing.delta_final


@dataclass(frozen=True)
class WeekCloseResult:
    """Everything a week close produces; applied atomically by the caller."""

    mesocycle_id: str
    week_index: int
    decisions: dict[str, VolumeDecision]
    states: dict[str, AutoVolumeState]
    adjustments: tuple[SetsAdjustment, ...] = ()
    logs: tuple[ProgressionLogEntry, ...] = ()


@dataclass(frozen=True)
class TargetUpdate:
    """New load/rep targets for one completed exercise record."""

    record_id: str
    targets: ExerciseTargets
    changed: bool
    propagated_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class TargetProjection:
    """Output of projecting targets for a completed session."""

    updates: tuple[TargetUpdate, ...] = ()
    logs: tuple[ProgressionLogEntry, ...] = ()
