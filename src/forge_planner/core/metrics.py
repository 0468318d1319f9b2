"""
Pure per-session metric functions.

Session performance scoring, the per-session set-delta rule, the
mesocycle RIR ramp and the helpers used to reduce performed sets to
reference numbers.  All functions are pure and typed for testability.
"""

import math
from typing import Sequence

from .config import (
    DELOAD_RIR,
    PERF_BIG_DROP,
    PERF_BIG_GAIN,
    PERF_DROP,
    PERF_GAIN,
    PERF_NEUTRAL,
    RIR_RAMPS,
)
from .models import ExercisePerformance, PerformedSet, ScheduledSession


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity (2.5 → 3)."""
    return math.floor(value + 0.5)


def get_rir_target(structure: str, week_index: int, is_deload: bool) -> int:
    """
    Reps-in-reserve target for a week of a mesocycle.

    Args:
        structure: THREE_ONE, FOUR_ONE or FIVE_ONE
        week_index: 1-based week index (clamped to the ramp length)
        is_deload: True for the deload week

    Returns:
        RIR target
    """
    if is_deload:
        return DELOAD_RIR

    if structure not in RIR_RAMPS:
        valid = ", ".join(RIR_RAMPS)
        raise ValueError(f"Unknown mesocycle structure '{structure}'. Valid: {valid}")

    ramp = RIR_RAMPS[structure]
    index = max(1, min(week_index, len(ramp))) - 1
    return ramp[index]


def compute_perf_session(current_score: float, prev_score: float) -> int:
    """
    Score session performance 1..5 from the change vs the previous session.

    ≤ −20% → 1, ≤ −10% → 2, < +10% → 3, ≥ +20% → 5, otherwise 4.
    Without a previous score the result is neutral (3).
    """
    if prev_score <= 0:
        return PERF_NEUTRAL

    delta_pct = (current_score - prev_score) / prev_score

    if delta_pct <= PERF_BIG_DROP:
        return 1
    if delta_pct <= PERF_DROP:
        return 2
    if delta_pct < PERF_GAIN:
        return 3
    if delta_pct >= PERF_BIG_GAIN:
        return 5
    return 4


def compute_delta_sets(
    jl: int,
    doms: int,
    pump: int,
    fat: int,
    perf: int,
    second_or_later_same_muscle: bool = False,
) -> int:
    """
    Per-session set delta for a muscle group.

    Joint load (jl) overrides everything: 5 → −2, 4 → −1, 3 → 0.  Below
    that, heavy soreness or fatigue cuts a set, a good pump with stable
    performance and low soreness/fatigue adds one, and poor performance
    with high soreness or fatigue cuts one.  A second session of the same
    muscle in a week never adds a set while still sore.

    Returns:
        One of −2, −1, 0, +1
    """
    if jl >= 5:
        return -2
    if jl == 4:
        return -1
    if jl == 3:
        return 0

    delta = 0

    if doms == 5 or fat == 5:
        delta = -1
    elif doms == 4 and fat >= 4:
        delta = -1
    elif doms == 4 and fat <= 3:
        delta = 0
    elif doms == 3 and fat == 4:
        delta = 0

    if pump >= 4 and perf >= 3 and doms <= 3 and fat <= 3:
        delta = 1
    elif perf <= 2 and (doms >= 4 or fat >= 4):
        delta = -1

    if second_or_later_same_muscle and doms >= 4 and fat >= 3:
        delta = min(delta, 0)

    return delta


def summarize_performance(
    performed_sets: Sequence[PerformedSet],
    load_target: float | None = None,
) -> ExercisePerformance:
    """
    Reduce performed sets to (avg_load, reps_ref).

    reps_ref is the minimum reps over sets with a rep count; avg_load is the
    mean load over sets with a load, falling back to load_target, then 0.
    """
    reps_values = [s.reps for s in performed_sets if s.reps is not None]
    load_values = [s.load for s in performed_sets if s.load is not None]

    reps_ref = min(reps_values) if reps_values else None
    if load_values:
        avg_load = sum(load_values) / len(load_values)
    else:
        avg_load = load_target if load_target is not None else 0.0

    return ExercisePerformance(avg_load=avg_load, reps_ref=reps_ref)


def muscle_group_score(performances: Sequence[ExercisePerformance]) -> float:
    """Mean of avg_load × reps_ref over a muscle group's exercises (0 if none)."""
    if not performances:
        return 0.0
    scores = [p.avg_load * (p.reps_ref or 0) for p in performances]
    return sum(scores) / len(scores)


def is_second_or_later_same_muscle_in_week(
    sessions: Sequence[ScheduledSession],
    session_id: str,
    muscle_group_id: str,
) -> bool:
    """
    True if a completed earlier session of the week trained the same muscle.

    Sessions are ordered by order_in_week, then scheduled date.
    """
    ordered = sorted(sessions, key=lambda s: (s.order_in_week, s.scheduled_date))

    current_index = next(
        (i for i, s in enumerate(ordered) if s.id == session_id), -1
    )
    if current_index <= 0:
        return False

    return any(
        s.completed and muscle_group_id in s.muscle_group_ids
        for s in ordered[:current_index]
    )
