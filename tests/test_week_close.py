"""
Integration tests for week close and target propagation.

A small mesocycle is built by hand: bench press on Monday (slot 1/1) for
four weeks plus the same exercise in a Thursday slot, so propagation can
be checked against slot, week and completion boundaries.
"""

from datetime import datetime

import pytest

from forge_planner.core.models import (
    AutoVolumeState,
    CandidateExercise,
    CompletedExercise,
    ExerciseSlotRecord,
    MuscleGroupWeeklyEntry,
    PerformedSet,
    SessionSlot,
    WeekSnapshot,
)
from forge_planner.core.planner import (
    REASON_AUTO_VOLUME,
    REASON_AUTO_VOLUME_PROPAGATION,
    REASON_TARGETS_PROPAGATION,
    REASON_TARGETS_UPDATE,
    apply_target_projection,
    apply_week_close,
    close_week,
    future_slot_records,
    project_session_targets,
)

MONDAY = SessionSlot(day_of_week=1, order_in_week=1)
THURSDAY = SessionSlot(day_of_week=4, order_in_week=2)
NOW = datetime(2024, 5, 12, 18, 0)

# fatigue 1, doms 2, pump 1 → matrix +1
INCREASE = MuscleGroupWeeklyEntry(sets=4, fatigue=1, doms=2, pump=1, tendon_pain=1)
# fatigue 5, doms 2, pump 5 → matrix -1
DECREASE = MuscleGroupWeeklyEntry(sets=4, fatigue=5, doms=2, pump=5, tendon_pain=1)


def _record(
    rid: str,
    week: int,
    sets: int = 3,
    completed: bool = False,
    slot: SessionSlot = MONDAY,
    exercise_id: str = "bench",
    load: float | None = None,
    hint: int | None = None,
) -> ExerciseSlotRecord:
    return ExerciseSlotRecord(
        id=rid,
        exercise_id=exercise_id,
        order_index=0,
        slot=slot,
        week_index=week,
        sets_target=sets,
        completed=completed,
        load_target=load,
        reps_target_hint=hint,
    )


def _candidate(record: ExerciseSlotRecord, role: str = "main", stress: int = 4,
               min_sets: int = 2, max_sets: int = 6) -> CandidateExercise:
    return CandidateExercise(
        id=record.id,
        exercise_id=record.exercise_id,
        order_index=record.order_index,
        sets_target=record.sets_target,
        min_sets=min_sets,
        max_sets=max_sets,
        exercise_role=role,
        joint_stress=stress,
        slot=record.slot,
        last_adjusted_at=record.last_adjusted_at,
    )


@pytest.fixture
def records() -> list[ExerciseSlotRecord]:
    return [
        _record("w1-bench", 1, completed=True),
        _record("w2-bench", 2),
        _record("w3-bench", 3, completed=True),
        _record("w4-bench", 4, sets=4),
        _record("w2-bench-thu", 2, slot=THURSDAY),
        _record("w2-fly", 2, exercise_id="fly"),
    ]


class TestFutureSlotRecords:

    def test_only_later_open_records_in_same_slot(self, records):
        future = future_slot_records(records, "bench", 0, MONDAY, after_week=1)
        assert [r.id for r in future] == ["w2-bench", "w4-bench"]

    def test_nothing_after_last_week(self, records):
        assert future_slot_records(records, "bench", 0, MONDAY, after_week=4) == []


class TestCloseWeek:

    def _snapshot(self, records) -> WeekSnapshot:
        return WeekSnapshot(
            mesocycle_id="meso-1",
            week_index=1,
            feedback={
                "chest": [INCREASE],
                "back": [INCREASE],
                "biceps": [DECREASE],
            },
            states={
                "chest": AutoVolumeState(1, 1),
                "biceps": AutoVolumeState(-1, 1),
            },
            candidates={
                "chest": [
                    _candidate(records[0]),
                    _candidate(_record("w1-fly", 1, exercise_id="fly"), role="isolation", stress=2),
                ],
                "biceps": [_candidate(_record("w1-curl", 1, sets=2, exercise_id="curl"),
                                      role="isolation", stress=2, min_sets=2)],
            },
            exercises=records,
        )

    def test_increase_applies_to_main_lift(self, records):
        result = close_week(self._snapshot(records), now=NOW)

        chest = result.decisions["chest"]
        assert chest.delta_matrix == 1
        assert chest.delta_sets == 1
        assert chest.candidate_id == "w1-bench"

        (adj,) = [a for a in result.adjustments if a.muscle_group_id == "chest"]
        assert adj.prev_sets_target == 3
        assert adj.new_sets_target == 4
        assert adj.adjusted_at == NOW
        assert adj.propagated_ids == ("w2-bench", "w4-bench")

    def test_logs_skip_records_already_at_target(self, records):
        result = close_week(self._snapshot(records), now=NOW)
        reasons = [(log.entity_id, log.reason) for log in result.logs]
        assert reasons == [
            ("w1-bench", REASON_AUTO_VOLUME),
            ("w2-bench", REASON_AUTO_VOLUME_PROPAGATION),
        ]
        assert result.logs[0].prev_value == {"sets_target": 3}
        assert result.logs[0].new_value == {"sets_target": 4}

    def test_first_week_is_blocked_but_state_returned(self, records):
        result = close_week(self._snapshot(records), now=NOW)
        back = result.decisions["back"]
        assert back.delta_matrix == 1
        assert back.smoothing.smoothing_blocked
        assert back.delta_sets == 0
        assert back.candidate_id is None
        assert result.states["back"] == AutoVolumeState(1, 1)

    def test_no_candidate_drops_delta(self, records):
        result = close_week(self._snapshot(records), now=NOW)
        biceps = result.decisions["biceps"]
        assert biceps.delta_sets == -1
        assert biceps.no_candidate
        assert biceps.candidate_id is None
        assert result.states["biceps"] == AutoVolumeState(-1, 2)
        assert all(a.muscle_group_id != "biceps" for a in result.adjustments)

    def test_every_group_gets_a_state(self, records):
        result = close_week(self._snapshot(records), now=NOW)
        assert list(result.decisions) == ["back", "biceps", "chest"]
        assert set(result.states) == {"back", "biceps", "chest"}

    def test_pain_override_forces_decrease(self, records):
        snapshot = self._snapshot(records)
        snapshot.feedback = {
            "chest": [MuscleGroupWeeklyEntry(sets=4, fatigue=1, doms=2, pump=1, tendon_pain=5)]
        }
        snapshot.states = {"chest": AutoVolumeState(-1, 1)}
        snapshot.candidates = {
            "chest": [
                _candidate(records[0], min_sets=1),
                _candidate(_record("w1-fly", 1, exercise_id="fly"), role="isolation",
                           stress=2, min_sets=1),
            ]
        }
        result = close_week(snapshot, now=NOW)

        chest = result.decisions["chest"]
        assert chest.pain.pain_override
        assert chest.delta_sets == -2
        # Decrease prefers isolation work
        assert chest.candidate_id == "w1-fly"

    def test_input_records_untouched(self, records):
        close_week(self._snapshot(records), now=NOW)
        assert records[1].sets_target == 3


class TestApplyWeekClose:

    def test_round_trip_restores_sets(self, records):
        week1 = WeekSnapshot(
            mesocycle_id="meso-1",
            week_index=1,
            feedback={"chest": [INCREASE]},
            states={"chest": AutoVolumeState(1, 1)},
            candidates={"chest": [_candidate(records[0])]},
            exercises=records,
        )
        after_up = apply_week_close(records, close_week(week1, now=NOW))
        by_id = {r.id: r for r in after_up}
        assert by_id["w2-bench"].sets_target == 4
        assert by_id["w2-bench"].last_adjusted_direction == 1
        assert by_id["w2-bench-thu"].sets_target == 3

        week2 = WeekSnapshot(
            mesocycle_id="meso-1",
            week_index=2,
            feedback={"chest": [DECREASE]},
            states={"chest": AutoVolumeState(-1, 1)},
            candidates={"chest": [_candidate(by_id["w2-bench"])]},
            exercises=after_up,
        )
        after_down = apply_week_close(after_up, close_week(week2, now=NOW))
        by_id = {r.id: r for r in after_down}
        assert by_id["w2-bench"].sets_target == 3
        assert by_id["w2-bench"].last_adjusted_direction == -1
        assert by_id["w4-bench"].sets_target == 3
        # Completed and earlier records keep their values
        assert by_id["w1-bench"].sets_target == 4
        assert by_id["w3-bench"].sets_target == 3


class TestProjectSessionTargets:

    def test_targets_step_up_and_propagate(self, records):
        current = _record("w1-bench", 1, completed=True, load=100.0, hint=8)
        completed = [
            CompletedExercise(
                record=current,
                tool_type="BARBELL",
                performed_sets=[PerformedSet(100, 8), PerformedSet(100, 7), PerformedSet(100, 6)],
            )
        ]
        projection = project_session_targets(completed, records, week_index=1)

        (update,) = projection.updates
        assert update.changed
        assert update.targets.load_target == pytest.approx(102.5)
        assert update.targets.reps_target_hint == 6
        assert update.targets.suggestion is None
        assert update.propagated_ids == ("w2-bench", "w4-bench")
        assert [log.reason for log in projection.logs] == [
            REASON_TARGETS_UPDATE,
            REASON_TARGETS_PROPAGATION,
            REASON_TARGETS_PROPAGATION,
        ]

        applied = {r.id: r for r in apply_target_projection(records, projection)}
        assert applied["w2-bench"].load_target == pytest.approx(102.5)
        assert applied["w2-bench"].reps_target_hint == 6
        # Sets are owned by week close
        assert applied["w4-bench"].sets_target == 4
        assert applied["w2-bench-thu"].load_target is None

    def test_no_reference_reps_skips_exercise(self, records):
        current = _record("w1-bench", 1, completed=True, load=100.0)
        completed = [CompletedExercise(record=current, tool_type="BARBELL")]
        projection = project_session_targets(completed, records, week_index=1)
        assert projection.updates == ()
        assert projection.logs == ()

    def test_hint_used_when_no_sets_logged(self, records):
        current = _record("w1-bench", 1, completed=True, load=100.0, hint=8)
        completed = [CompletedExercise(record=current, tool_type="BARBELL")]
        (update,) = project_session_targets(completed, records, week_index=1).updates
        assert update.targets.reps_target_hint == 8
