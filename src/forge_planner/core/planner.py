"""
Week-close orchestration and target propagation.

close_week() runs the volume pipeline for every muscle group of a finished
week and describes the resulting set-count changes.  project_session_targets()
computes next load/rep targets for the exercises of a completed session.

Both return immutable result records.  Nothing here writes anywhere: the
caller applies a result (apply_week_close / apply_target_projection, or its
own persistence layer) inside one transaction so the new smoothing state and
the new set counts land together.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Sequence

from .adaptation import (
    aggregate_weekly_feedback,
    apply_pain_override,
    apply_smoothing,
    compute_delta_from_matrix,
    filter_candidates_for_delta,
    select_auto_volume_candidate,
)
from .metrics import summarize_performance
from .models import (
    AutoVolumeState,
    CandidateExercise,
    CompletedExercise,
    ExerciseSlotRecord,
    ProgressionLogEntry,
    SessionSlot,
    SetsAdjustment,
    TargetProjection,
    TargetUpdate,
    VolumeDecision,
    WeekCloseResult,
    WeekSnapshot,
)
from .targets import compute_exercise_targets

logger = logging.getLogger(__name__)

REASON_AUTO_VOLUME = "auto_volume_delta"
REASON_AUTO_VOLUME_PROPAGATION = "auto_volume_propagation"
REASON_TARGETS_UPDATE = "targets_update"
REASON_TARGETS_PROPAGATION = "targets_propagation"


def future_slot_records(
    records: Sequence[ExerciseSlotRecord],
    exercise_id: str,
    order_index: int,
    slot: SessionSlot,
    after_week: int,
) -> list[ExerciseSlotRecord]:
    """Records of the same exercise-in-slot in later weeks whose session is not completed."""
    return [
        r
        for r in records
        if r.same_slot_as(exercise_id, order_index, slot)
        and r.week_index > after_week
        and not r.completed
    ]


def _adjust_candidate(
    snapshot: WeekSnapshot,
    muscle_group_id: str,
    chosen: CandidateExercise,
    delta: int,
    now: datetime,
) -> tuple[SetsAdjustment, list[ProgressionLogEntry]]:
    new_sets = chosen.sets_target + delta
    logs = [
        ProgressionLogEntry(
            entity_id=chosen.id,
            week_index=snapshot.week_index,
            reason=REASON_AUTO_VOLUME,
            prev_value={"sets_target": chosen.sets_target},
            new_value={"sets_target": new_sets},
            muscle_group_id=muscle_group_id,
        )
    ]

    future = future_slot_records(
        snapshot.exercises,
        chosen.exercise_id,
        chosen.order_index,
        chosen.slot,
        snapshot.week_index,
    )
    for record in future:
        if record.sets_target != new_sets:
            logs.append(
                ProgressionLogEntry(
                    entity_id=record.id,
                    week_index=record.week_index,
                    reason=REASON_AUTO_VOLUME_PROPAGATION,
                    prev_value={"sets_target": record.sets_target},
                    new_value={"sets_target": new_sets},
                    muscle_group_id=muscle_group_id,
                )
            )

    adjustment = SetsAdjustment(
        muscle_group_id=muscle_group_id,
        candidate_id=chosen.id,
        exercise_id=chosen.exercise_id,
        delta=delta,
        prev_sets_target=chosen.sets_target,
        new_sets_target=new_sets,
        adjusted_at=now,
        propagated_ids=tuple(r.id for r in future),
    )
    return adjustment, logs


def close_week(snapshot: WeekSnapshot, now: datetime | None = None) -> WeekCloseResult:
    """
    Close a training week: decide and describe the auto-volume changes.

    For each muscle group with feedback: aggregate the week, look up the
    matrix delta, apply the pain override and the smoothing streak.  When
    a non-zero delta survives, exactly one eligible candidate is chosen and
    its new set count is mirrored onto later, not-completed weeks.  A delta
    with no eligible candidate is dropped (no_candidate).

    Args:
        snapshot: Feedback, prior states, candidates and slot records
        now: Adjustment timestamp (defaults to the current time)

    Returns:
        WeekCloseResult; states contains every processed muscle group
    """
    if now is None:
        now = datetime.now()

    decisions: dict[str, VolumeDecision] = {}
    states: dict[str, AutoVolumeState] = {}
    adjustments: list[SetsAdjustment] = []
    logs: list[ProgressionLogEntry] = []

    for mg_id in sorted(snapshot.feedback):
        weekly = aggregate_weekly_feedback(snapshot.feedback[mg_id])
        delta_matrix = compute_delta_from_matrix(weekly.fatigue_eff, weekly.pump_week)
        pain = apply_pain_override(delta_matrix, weekly.pain_week)
        smoothing = apply_smoothing(pain.delta, snapshot.states.get(mg_id))
        states[mg_id] = smoothing.state

        logger.debug(
            "week %d %s: fatigue_eff=%d pump=%d pain=%d matrix=%d override=%d final=%d",
            snapshot.week_index,
            mg_id,
            weekly.fatigue_eff,
            weekly.pump_week,
            weekly.pain_week,
            delta_matrix,
            pain.delta,
            smoothing.delta_final,
        )

        chosen: CandidateExercise | None = None
        no_candidate = False
        if smoothing.delta_final != 0:
            eligible = filter_candidates_for_delta(
                snapshot.candidates.get(mg_id, []), smoothing.delta_final
            )
            chosen = select_auto_volume_candidate(
                eligible, smoothing.delta_final, weekly.pain_week
            )
            if chosen is None:
                no_candidate = True
                logger.info(
                    "week %d %s: delta %+d dropped, no eligible candidate",
                    snapshot.week_index,
                    mg_id,
                    smoothing.delta_final,
                )
            else:
                adjustment, adjustment_logs = _adjust_candidate(
                    snapshot, mg_id, chosen, smoothing.delta_final, now
                )
                adjustments.append(adjustment)
                logs.extend(adjustment_logs)
                logger.info(
                    "week %d %s: %s sets %d -> %d (%d future records)",
                    snapshot.week_index,
                    mg_id,
                    chosen.id,
                    adjustment.prev_sets_target,
                    adjustment.new_sets_target,
                    len(adjustment.propagated_ids),
                )

        decisions[mg_id] = VolumeDecision(
            muscle_group_id=mg_id,
            feedback=weekly,
            delta_matrix=delta_matrix,
            pain=pain,
            smoothing=smoothing,
            candidate_id=chosen.id if chosen is not None else None,
            no_candidate=no_candidate,
        )

    return WeekCloseResult(
        mesocycle_id=snapshot.mesocycle_id,
        week_index=snapshot.week_index,
        decisions=decisions,
        states=states,
        adjustments=tuple(adjustments),
        logs=tuple(logs),
    )


def apply_week_close(
    records: Sequence[ExerciseSlotRecord],
    result: WeekCloseResult,
) -> list[ExerciseSlotRecord]:
    """
    Return copies of records with the week-close adjustments applied.

    The chosen record and its propagated future records all receive the same
    absolute sets_target.  Input records are not modified.
    """
    changes: dict[str, SetsAdjustment] = {}
    for adj in result.adjustments:
        changes[adj.candidate_id] = adj
        for record_id in adj.propagated_ids:
            changes[record_id] = adj

    updated: list[ExerciseSlotRecord] = []
    for record in records:
        adj = changes.get(record.id)
        if adj is None:
            updated.append(record)
            continue
        updated.append(
            replace(
                record,
                sets_target=adj.new_sets_target,
                last_adjusted_at=adj.adjusted_at,
                last_adjusted_direction=adj.direction,
            )
        )
    return updated


def project_session_targets(
    completed: Sequence[CompletedExercise],
    exercises: Sequence[ExerciseSlotRecord],
    week_index: int,
) -> TargetProjection:
    """
    Next load/rep targets for the exercises of a completed session.

    reps_ref is the minimum reps performed (falling back to the record's
    reps_target_hint); exercises without a usable reference are skipped.
    Changed targets are mirrored onto the same exercise-in-slot in later,
    not-completed weeks, skipping records that already hold them.

    Args:
        completed: Completed exercises with their performed sets
        exercises: Slot records of the mesocycle (propagation targets)
        week_index: Week of the completed session

    Returns:
        TargetProjection with one update per projected exercise
    """
    updates: list[TargetUpdate] = []
    logs: list[ProgressionLogEntry] = []

    for item in completed:
        record = item.record
        perf = summarize_performance(item.performed_sets, record.load_target)
        reps_ref_prev = perf.reps_ref if perf.reps_ref is not None else record.reps_target_hint
        if not reps_ref_prev or reps_ref_prev <= 0:
            continue

        load_prev = record.load_target if record.load_target is not None else perf.avg_load
        targets = compute_exercise_targets(
            item.tool_type,
            load_prev,
            reps_ref_prev,
            record.sets_target,
            load_chosen=record.load_target,
        )
        changed = (
            targets.load_target != record.load_target
            or targets.reps_target_hint != record.reps_target_hint
        )

        new_value = {
            "load_target": targets.load_target,
            "reps_target_hint": targets.reps_target_hint,
        }
        propagated: list[str] = []
        if changed:
            logs.append(
                ProgressionLogEntry(
                    entity_id=record.id,
                    week_index=week_index,
                    reason=REASON_TARGETS_UPDATE,
                    prev_value={
                        "load_target": record.load_target,
                        "reps_target_hint": record.reps_target_hint,
                    },
                    new_value=new_value,
                )
            )
            future = future_slot_records(
                exercises, record.exercise_id, record.order_index, record.slot, week_index
            )
            for fut in future:
                if (
                    fut.load_target == targets.load_target
                    and fut.reps_target_hint == targets.reps_target_hint
                ):
                    continue
                propagated.append(fut.id)
                logs.append(
                    ProgressionLogEntry(
                        entity_id=fut.id,
                        week_index=fut.week_index,
                        reason=REASON_TARGETS_PROPAGATION,
                        prev_value={
                            "load_target": fut.load_target,
                            "reps_target_hint": fut.reps_target_hint,
                        },
                        new_value=new_value,
                    )
                )

        updates.append(
            TargetUpdate(
                record_id=record.id,
                targets=targets,
                changed=changed,
                propagated_ids=tuple(propagated),
            )
        )

    return TargetProjection(updates=tuple(updates), logs=tuple(logs))


def apply_target_projection(
    records: Sequence[ExerciseSlotRecord],
    projection: TargetProjection,
) -> list[ExerciseSlotRecord]:
    """Return copies of records with projected load/rep targets applied."""
    changes: dict[str, TargetUpdate] = {}
    for update in projection.updates:
        if not update.changed:
            continue
        changes[update.record_id] = update
        for record_id in update.propagated_ids:
            changes[record_id] = update

    updated: list[ExerciseSlotRecord] = []
    for record in records:
        update = changes.get(record.id)
        if update is None:
            updated.append(record)
            continue
        updated.append(
            replace(
                record,
                load_target=update.targets.load_target,
                reps_target_hint=update.targets.reps_target_hint,
            )
        )
    return updated
