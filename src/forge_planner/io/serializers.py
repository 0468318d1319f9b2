"""
JSON serialization for engine inputs and results.

Handles conversion between dataclasses and JSON-compatible dicts.
Timestamps are ISO 8601 strings.
"""

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any

from ..core.models import (
    AutoVolumeState,
    CandidateExercise,
    ExerciseSlotRecord,
    MuscleGroupWeeklyEntry,
    ProgressionLogEntry,
    SeriesTarget,
    SessionSlot,
    SetsAdjustment,
    VolumeDecision,
    WeekCloseResult,
    WeekSnapshot,
)


class ValidationError(Exception):
    """Raised when input data cannot be converted to engine records."""

    pass


def _require(data: dict[str, Any], key: str, where: str) -> Any:
    if not isinstance(data, dict):
        raise ValidationError(f"{where} must be an object, got {type(data).__name__}")
    if key not in data:
        raise ValidationError(f"{where} is missing required field '{key}'")
    return data[key]


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an ISO 8601 timestamp.

    Args:
        value: ISO string or None

    Returns:
        datetime or None

    Raises:
        ValidationError: If the string is not ISO 8601
    """
    if value is None:
        return None
    try:
        # JS toISOString() emits a trailing Z, which fromisoformat rejects before 3.11
        if isinstance(value, str) and value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid timestamp: {value!r}") from e


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


def dict_to_weekly_entry(data: dict[str, Any]) -> MuscleGroupWeeklyEntry:
    """Convert a feedback dict to MuscleGroupWeeklyEntry."""
    where = "feedback entry"
    try:
        return MuscleGroupWeeklyEntry(
            sets=int(_require(data, "sets", where)),
            fatigue=int(_require(data, "fatigue", where)),
            doms=int(_require(data, "doms", where)),
            pump=int(_require(data, "pump", where)),
            tendon_pain=int(_require(data, "tendon_pain", where)),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {where}: {e}") from e


def dict_to_slot(data: dict[str, Any]) -> SessionSlot:
    """Convert a slot dict to SessionSlot."""
    try:
        return SessionSlot(
            day_of_week=int(_require(data, "day_of_week", "slot")),
            order_in_week=int(_require(data, "order_in_week", "slot")),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid slot: {e}") from e


def dict_to_candidate(data: dict[str, Any]) -> CandidateExercise:
    """Convert a candidate dict to CandidateExercise."""
    where = "candidate"
    try:
        return CandidateExercise(
            id=str(_require(data, "id", where)),
            exercise_id=str(_require(data, "exercise_id", where)),
            order_index=int(_require(data, "order_index", where)),
            sets_target=int(_require(data, "sets_target", where)),
            min_sets=int(_require(data, "min_sets", where)),
            max_sets=int(_require(data, "max_sets", where)),
            exercise_role=_require(data, "exercise_role", where),
            joint_stress=int(_require(data, "joint_stress", where)),
            slot=dict_to_slot(_require(data, "slot", where)),
            last_adjusted_at=parse_timestamp(data.get("last_adjusted_at")),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {where}: {e}") from e


def dict_to_slot_record(data: dict[str, Any]) -> ExerciseSlotRecord:
    """Convert an exercise-in-session dict to ExerciseSlotRecord."""
    where = "exercise record"
    try:
        load = data.get("load_target")
        hint = data.get("reps_target_hint")
        return ExerciseSlotRecord(
            id=str(_require(data, "id", where)),
            exercise_id=str(_require(data, "exercise_id", where)),
            order_index=int(_require(data, "order_index", where)),
            slot=dict_to_slot(_require(data, "slot", where)),
            week_index=int(_require(data, "week_index", where)),
            sets_target=int(_require(data, "sets_target", where)),
            completed=bool(data.get("completed", False)),
            load_target=float(load) if load is not None else None,
            reps_target_hint=int(hint) if hint is not None else None,
            last_adjusted_at=parse_timestamp(data.get("last_adjusted_at")),
            last_adjusted_direction=data.get("last_adjusted_direction"),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {where}: {e}") from e


def dict_to_state(data: dict[str, Any]) -> AutoVolumeState:
    """Convert a state dict to AutoVolumeState."""
    try:
        return AutoVolumeState(
            last_delta_sign=int(data.get("last_delta_sign", 0)),
            consecutive_count=int(data.get("consecutive_count", 0)),
        )
    except (TypeError, ValueError, AttributeError) as e:
        raise ValidationError(f"Invalid auto-volume state: {e}") from e


def dict_to_week_snapshot(data: dict[str, Any]) -> WeekSnapshot:
    """
    Convert a week-close input document to WeekSnapshot.

    Raises:
        ValidationError: If a required field is missing or out of range
    """
    where = "week snapshot"
    try:
        return WeekSnapshot(
            mesocycle_id=str(_require(data, "mesocycle_id", where)),
            week_index=int(_require(data, "week_index", where)),
            feedback={
                mg: [dict_to_weekly_entry(e) for e in entries]
                for mg, entries in (data.get("feedback") or {}).items()
            },
            states={
                mg: dict_to_state(s) for mg, s in (data.get("states") or {}).items()
            },
            candidates={
                mg: [dict_to_candidate(c) for c in items]
                for mg, items in (data.get("candidates") or {}).items()
            },
            exercises=[dict_to_slot_record(r) for r in data.get("exercises") or []],
        )
    except (TypeError, ValueError, AttributeError) as e:
        raise ValidationError(f"Invalid {where}: {e}") from e


def load_week_snapshot(path: Path) -> WeekSnapshot:
    """
    Read a week snapshot JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValidationError: If the content is not a valid snapshot
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"{path}: invalid JSON ({e})") from e
    return dict_to_week_snapshot(data)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


def state_to_dict(state: AutoVolumeState) -> dict[str, int]:
    return {
        "last_delta_sign": state.last_delta_sign,
        "consecutive_count": state.consecutive_count,
    }


def decision_to_dict(decision: VolumeDecision) -> dict[str, Any]:
    """Convert VolumeDecision to a JSON-compatible dict."""
    return {
        "muscle_group_id": decision.muscle_group_id,
        "feedback": asdict(decision.feedback),
        "delta_matrix": decision.delta_matrix,
        "delta_after_pain": decision.pain.delta,
        "pain_override": decision.pain.pain_override,
        "freeze_increase": decision.pain.freeze_increase,
        "smoothing_blocked": decision.smoothing.smoothing_blocked,
        "delta_sets": decision.delta_sets,
        "candidate_id": decision.candidate_id,
        "no_candidate": decision.no_candidate,
    }


def adjustment_to_dict(adj: SetsAdjustment) -> dict[str, Any]:
    return {
        "muscle_group_id": adj.muscle_group_id,
        "candidate_id": adj.candidate_id,
        "exercise_id": adj.exercise_id,
        "delta": adj.delta,
        "prev_sets_target": adj.prev_sets_target,
        "new_sets_target": adj.new_sets_target,
        "adjusted_at": format_timestamp(adj.adjusted_at),
        "propagated_ids": list(adj.propagated_ids),
    }


def log_entry_to_dict(entry: ProgressionLogEntry) -> dict[str, Any]:
    return {
        "entity_id": entry.entity_id,
        "week_index": entry.week_index,
        "reason": entry.reason,
        "muscle_group_id": entry.muscle_group_id,
        "prev_value": entry.prev_value,
        "new_value": entry.new_value,
    }


def week_close_result_to_dict(result: WeekCloseResult) -> dict[str, Any]:
    """Convert WeekCloseResult to a JSON-compatible dict."""
    return {
        "mesocycle_id": result.mesocycle_id,
        "week_index": result.week_index,
        "decisions": {
            mg: decision_to_dict(d) for mg, d in result.decisions.items()
        },
        "states": {mg: state_to_dict(s) for mg, s in result.states.items()},
        "adjustments": [adjustment_to_dict(a) for a in result.adjustments],
        "logs": [log_entry_to_dict(e) for e in result.logs],
    }


def series_target_to_dict(target: SeriesTarget) -> dict[str, Any]:
    """Convert SeriesTarget to a JSON-compatible dict (all flags included)."""
    return {
        "weight_target": target.weight_target,
        "reps_target": target.reps_target,
        "flags": asdict(target.flags),
    }
