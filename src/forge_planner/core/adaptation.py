"""
Weekly volume autoregulation.

Turns a week of per-session recovery feedback for one muscle group into a
set-count change for exactly one exercise:

  aggregate → matrix delta → pain override → two-week smoothing → candidate

Each step is a pure function; planner.close_week chains them and produces
the records the caller persists.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from .config import (
    DOMS_HIGH_BASE,
    DOMS_LOW,
    PAIN_HIGH,
    PAIN_HIGH_DELTA,
    PAIN_MODERATE,
    PAIN_SEVERE,
    PAIN_SEVERE_DELTA,
    ROLE_RANK_DECREASE,
    ROLE_RANK_INCREASE,
    SCORE_MAX,
    SCORE_MIN,
    SMOOTHING_WEEKS_REQUIRED,
    VOLUME_MATRIX,
)
from .metrics import round_half_up
from .models import (
    AutoVolumeState,
    CandidateExercise,
    MuscleGroupWeeklyEntry,
    PainOverride,
    SmoothingResult,
    WeeklyFeedback,
)


def _weighted_avg(values: Sequence[float], weights: Sequence[float]) -> float:
    total = sum(weights)
    if total <= 0:
        return 0.0
    return sum(v * w for v, w in zip(values, weights)) / total


def aggregate_weekly_feedback(entries: Sequence[MuscleGroupWeeklyEntry]) -> WeeklyFeedback:
    """
    Reduce a week of session feedback to weekly scores.

    fatigue/doms/pump are set-weighted means rounded to the nearest integer
    (0 when no sets were performed).  Pain is the worst session, never an
    average.  Effective fatigue is fatigue adjusted by DOMS: doms 1 lowers
    it by one, doms ≥ 4 by (doms − 3); the result is clamped to 1..5.

    Args:
        entries: One entry per session that trained the muscle group

    Returns:
        WeeklyFeedback
    """
    weights = [e.sets for e in entries]
    fatigue_week = round_half_up(_weighted_avg([e.fatigue for e in entries], weights))
    doms_week = round_half_up(_weighted_avg([e.doms for e in entries], weights))
    pump_week = round_half_up(_weighted_avg([e.pump for e in entries], weights))
    pain_week = max((e.tendon_pain for e in entries), default=0)

    if doms_week == DOMS_LOW:
        doms_mod = -1
    elif doms_week > DOMS_HIGH_BASE:
        doms_mod = -(doms_week - DOMS_HIGH_BASE)
    else:
        doms_mod = 0
    fatigue_eff = max(SCORE_MIN, min(SCORE_MAX, fatigue_week + doms_mod))

    return WeeklyFeedback(
        fatigue_week=fatigue_week,
        doms_week=doms_week,
        pump_week=pump_week,
        pain_week=pain_week,
        fatigue_eff=fatigue_eff,
    )


def compute_delta_from_matrix(fatigue_eff: int, pump_week: int) -> int:
    """Look up the raw volume delta for (fatigue_eff, pump_week); 0 out of range."""
    f_idx = fatigue_eff - 1
    p_idx = pump_week - 1
    if not (0 <= f_idx < len(VOLUME_MATRIX) and 0 <= p_idx < len(VOLUME_MATRIX[f_idx])):
        return 0
    return VOLUME_MATRIX[f_idx][p_idx]


def apply_pain_override(delta: int, pain_week: int) -> PainOverride:
    """
    Force the delta down when tendon pain is high.

    pain 5 → −2, pain 4 → −1, pain 3 blocks an increase (+1 → 0) but does
    not force a decrease.  Any override also freezes increases.
    """
    if pain_week == PAIN_SEVERE:
        return PainOverride(delta=PAIN_SEVERE_DELTA, pain_override=True, freeze_increase=True)
    if pain_week == PAIN_HIGH:
        return PainOverride(delta=PAIN_HIGH_DELTA, pain_override=True, freeze_increase=True)
    if pain_week == PAIN_MODERATE and delta == 1:
        return PainOverride(delta=0, pain_override=True, freeze_increase=True)
    return PainOverride(delta=delta)


def apply_smoothing(delta: int, state: AutoVolumeState | None) -> SmoothingResult:
    """
    Let a non-zero delta through only after two same-sign weeks in a row.

    A zero delta resets the streak.  A sign change restarts it at 1.  The
    returned state must be persisted even when the delta is blocked.

    Args:
        delta: Post-override delta
        state: Previous streak, or None for a fresh muscle group

    Returns:
        SmoothingResult with the final delta and new state
    """
    if delta == 0:
        return SmoothingResult(delta_final=0, smoothing_blocked=False, state=AutoVolumeState())

    sign = 1 if delta > 0 else -1
    prev = state or AutoVolumeState()
    consecutive = prev.consecutive_count + 1 if prev.last_delta_sign == sign else 1
    delta_final = delta if consecutive >= SMOOTHING_WEEKS_REQUIRED else 0

    return SmoothingResult(
        delta_final=delta_final,
        smoothing_blocked=delta_final == 0,
        state=AutoVolumeState(last_delta_sign=sign, consecutive_count=consecutive),
    )


def filter_candidates_for_delta(
    candidates: Sequence[CandidateExercise],
    delta: int,
) -> list[CandidateExercise]:
    """Keep candidates whose sets_target + delta stays within [min_sets, max_sets]."""
    if delta == 0:
        return []
    if delta > 0:
        return [c for c in candidates if c.sets_target + delta <= c.max_sets]
    return [c for c in candidates if c.sets_target + delta >= c.min_sets]


def _recency_key(candidate: CandidateExercise) -> tuple[int, datetime | None]:
    # Never adjusted sorts first, then oldest adjustment
    if candidate.last_adjusted_at is None:
        return (0, None)
    return (1, candidate.last_adjusted_at)


def select_auto_volume_candidate(
    candidates: Sequence[CandidateExercise],
    delta: int,
    pain_week: int,
) -> CandidateExercise | None:
    """
    Pick the one exercise that receives the volume change.

    Ranking, best first:
    1. role. Increase: main, secondary, isolation; decrease: the reverse
    2. joint stress. Increase: lowest first; decrease: highest first
    3. recency. Never auto-adjusted first, then least recently adjusted

    Joint stress breaks ties at every pain level; pain_week does not
    change the order.

    Args:
        candidates: Already filtered for the delta
        delta: Final non-zero delta
        pain_week: Weekly tendon pain

    Returns:
        The chosen candidate, or None if there is nothing to choose
    """
    if delta == 0 or not candidates:
        return None

    increase = delta > 0
    role_rank = ROLE_RANK_INCREASE if increase else ROLE_RANK_DECREASE
    stress_sign = 1 if increase else -1

    def _key(c: CandidateExercise) -> tuple:
        adjusted, when = _recency_key(c)
        return (
            role_rank[c.exercise_role],
            stress_sign * c.joint_stress,
            adjusted,
            when.timestamp() if when is not None else 0.0,
        )

    return sorted(candidates, key=_key)[0]
