"""
Load/rep target projection.

Two projections are provided:

- compute_series_target / find_reps_for_weight: per working set.  Given the
  previous set and (optionally) the weight the lifter wants to use, derive a
  rep target that keeps the e1RM demand comparable, inside the equipment's
  step range and rep-drift limits.
- compute_exercise_targets: per exercise after a completed session.  Bumps
  the load by the smallest normal step and converts any jump beyond the
  normal range into fewer target reps, with a plain-language suggestion.
"""

from __future__ import annotations

import math
from dataclasses import replace

from .config import MIN_REPS_SCAN, SeriesTargetConfig
from .equipment import get_overstep_unit, get_step_max, get_step_min
from .max_estimator import estimate_e1rm_strength_level
from .metrics import round_half_up
from .models import (
    ExerciseTargets,
    PreviousSet,
    RepSearchResult,
    SeriesTarget,
    SeriesTargetFlags,
)


def quantize_weight(value: float, step: float) -> float:
    """Round a weight to the nearest multiple of step (halves round up)."""
    return round_half_up(value / step) * step


def find_reps_for_weight(
    weight_anchor: float,
    reps_anchor: int,
    weight_user: float,
    config: SeriesTargetConfig,
) -> RepSearchResult:
    """
    Find the rep count at weight_user equivalent to (weight_anchor, reps_anchor).

    Scans 1..max_reps_scan for the reps whose e1RM at weight_user is closest
    to the anchor's e1RM; ties go to the count closest to reps_anchor.  The
    result is then clamped:

    1. heavier than anchor → never more reps than the anchor
    2. lighter than anchor → never fewer reps than the anchor
    3. at most max_rep_drop_per_week below the anchor
    4. at most max_rep_increase_per_week above the anchor
    5. never below the equipment's min_reps

    If a clamp fired and remove_reps_if_clamped is set, or the load exceeds
    max_intensity of the anchor e1RM, reps_target is None: there is no safe
    rep count and the lifter has to pick one.

    Args:
        weight_anchor: Reference weight
        reps_anchor: Reps at the reference weight
        weight_user: Weight the target is computed for
        config: Equipment-class projection parameters

    Returns:
        RepSearchResult with the target, flags and anchor e1RM
    """
    e_target = estimate_e1rm_strength_level(weight_anchor, reps_anchor)

    best_reps = MIN_REPS_SCAN
    best_diff = math.inf
    for reps in range(MIN_REPS_SCAN, config.max_reps_scan + 1):
        diff = abs(estimate_e1rm_strength_level(weight_user, reps) - e_target)
        if diff < best_diff or (
            diff == best_diff and abs(reps - reps_anchor) < abs(best_reps - reps_anchor)
        ):
            best_diff = diff
            best_reps = reps

    reps_target = best_reps
    min_reps = max_drop = max_increase = too_heavy = False

    if weight_user > weight_anchor and reps_target > reps_anchor:
        reps_target = reps_anchor
        max_increase = True
    if weight_user < weight_anchor and reps_target < reps_anchor:
        reps_target = reps_anchor
        max_drop = True

    if reps_anchor - reps_target > config.max_rep_drop_per_week:
        reps_target = reps_anchor - config.max_rep_drop_per_week
        max_drop = True

    if reps_target - reps_anchor > config.max_rep_increase_per_week:
        reps_target = reps_anchor + config.max_rep_increase_per_week
        max_increase = True

    if reps_target < config.min_reps:
        reps_target = config.min_reps
        min_reps = True

    if config.max_intensity:
        intensity = weight_user / e_target if e_target > 0 else 0.0
        if intensity > config.max_intensity:
            too_heavy = True

    flags = SeriesTargetFlags(
        override_used=True,
        clamped_by_min_reps=min_reps,
        clamped_by_max_drop=max_drop,
        clamped_by_max_increase=max_increase,
        too_heavy=too_heavy,
    )

    if (config.remove_reps_if_clamped and flags.clamped) or too_heavy:
        flags = replace(flags, reps_removed_out_of_bounds=True)
        return RepSearchResult(reps_target=None, flags=flags, e_target=e_target)

    return RepSearchResult(reps_target=reps_target, flags=flags, e_target=e_target)


def compute_series_target(
    previous_set: PreviousSet,
    desired_weight: float | None,
    config: SeriesTargetConfig,
) -> SeriesTarget:
    """
    Project the next weight and rep target for a working set.

    With no desired weight the load moves up by step_min and reps stay the
    same.  Otherwise the desired weight is quantized and classified:

    - prev ≤ w < prev+step_min        → one more rep than last time
    - prev+step_min ≤ w ≤ prev+step_max → same reps
    - prev < w < prev+step_min        → reps equivalent at prev+step_min
    - w > prev+step_max               → reps equivalent at prev+step_max
    - w < prev (deliberate drop)      → reps equivalent to one extra rep at prev

    Args:
        previous_set: Reference working set
        desired_weight: Weight chosen by the lifter, or None for auto mode
        config: Equipment-class projection parameters

    Returns:
        SeriesTarget; reps_target is None when no safe rep count exists
    """
    quant = config.weight_quantization

    prev_weight = quantize_weight(previous_set.weight, quant)
    prev_reps = previous_set.reps
    auto_weight = quantize_weight(prev_weight + config.step_min, quant)

    if desired_weight is None:
        return SeriesTarget(
            weight_target=auto_weight,
            reps_target=prev_reps,
            flags=SeriesTargetFlags(auto=True),
        )

    user_weight = quantize_weight(desired_weight, quant)
    w_low = quantize_weight(prev_weight + config.step_min, quant)
    w_high = quantize_weight(prev_weight + config.step_max, quant)

    if prev_weight <= user_weight < auto_weight:
        return SeriesTarget(
            weight_target=user_weight,
            reps_target=prev_reps + 1,
            flags=SeriesTargetFlags(
                override_used=True,
                same_weight_plus_one_rep=user_weight == prev_weight,
                under_auto_but_not_below_prev_plus_one_rep=True,
            ),
        )

    if w_low <= user_weight <= w_high:
        return SeriesTarget(
            weight_target=user_weight,
            reps_target=prev_reps,
            flags=SeriesTargetFlags(override_used=True, in_delta_range_keep_reps=True),
        )

    if prev_weight < user_weight < w_low:
        search = find_reps_for_weight(w_low, prev_reps, user_weight, config)
        flags = replace(search.flags, under_auto_but_not_below_prev_plus_one_rep=False)
    elif user_weight > w_high:
        search = find_reps_for_weight(w_high, prev_reps, user_weight, config)
        flags = replace(search.flags, above_range_e1rm=True)
    else:
        search = find_reps_for_weight(prev_weight, prev_reps + 1, user_weight, config)
        flags = replace(search.flags, below_prev_e1rm=True)

    return SeriesTarget(weight_target=user_weight, reps_target=search.reps_target, flags=flags)


def _append(existing: str | None, text: str) -> str:
    return f"{existing} {text}" if existing else text


def compute_exercise_targets(
    tool_type: str,
    load_prev: float,
    reps_ref_prev: int,
    sets_prev: int,
    load_chosen: float | None = None,
) -> ExerciseTargets:
    """
    Session-level load and rep targets for the next occurrence of an exercise.

    load_target = load_chosen (or load_prev + step_min), never below
    load_prev + step_min.  Every overstep_unit above load_prev + step_max
    costs one target rep (minimum 1).  A suggestion is attached when the
    load is beyond range or when load × reps × sets would drop.

    Args:
        tool_type: Equipment class of the exercise
        load_prev: Load used as reference
        reps_ref_prev: Reference reps (minimum reps of the last session)
        sets_prev: Target sets
        load_chosen: Load picked by the lifter, if any

    Returns:
        ExerciseTargets
    """
    step_min = get_step_min(tool_type)
    step_max = get_step_max(tool_type)
    overstep_unit = get_overstep_unit(tool_type)
    suggestion: str | None = None

    load_target = load_chosen if load_chosen is not None else load_prev + step_min
    min_target = load_prev + step_min
    if load_target < min_target:
        load_target = min_target

    max_target = load_prev + step_max
    if load_target > max_target:
        extra_steps = math.ceil((load_target - max_target) / overstep_unit)
        reps_target_hint = max(1, reps_ref_prev - extra_steps)
        suggestion = _append(suggestion, f"Load beyond range: -{extra_steps} rep(s) target.")
    else:
        reps_target_hint = reps_ref_prev

    volume_prev = load_prev * reps_ref_prev * sets_prev
    volume_new = load_target * reps_target_hint * sets_prev
    if volume_new < volume_prev:
        suggestion = _append(
            suggestion,
            "Volume decreasing: consider +1 rep on one set or a smaller load increment.",
        )

    return ExerciseTargets(
        load_target=load_target,
        reps_target_hint=reps_target_hint,
        suggestion=suggestion,
    )
