"""Tests for JSON conversion of snapshots and timestamps."""

from datetime import datetime, timedelta, timezone

import pytest

from forge_planner.io.serializers import (
    ValidationError,
    dict_to_candidate,
    format_timestamp,
    parse_timestamp,
)


class TestTimestamps:

    def test_trailing_z_is_utc(self):
        parsed = parse_timestamp("2024-05-12T18:00:00.000Z")
        assert parsed == datetime(2024, 5, 12, 18, 0, tzinfo=timezone.utc)

    def test_offset_kept(self):
        parsed = parse_timestamp("2024-05-12T18:00:00+02:00")
        assert parsed.utcoffset() == timedelta(hours=2)

    def test_naive_round_trip(self):
        value = datetime(2024, 5, 12, 18, 0)
        assert parse_timestamp(format_timestamp(value)) == value

    def test_none_passes_through(self):
        assert parse_timestamp(None) is None

    def test_garbage_rejected(self):
        with pytest.raises(ValidationError, match="Invalid timestamp"):
            parse_timestamp("last tuesday")


class TestCandidateConversion:

    def test_js_exported_candidate(self):
        candidate = dict_to_candidate({
            "id": "w1-bench",
            "exercise_id": "bench",
            "order_index": 0,
            "sets_target": 3,
            "min_sets": 2,
            "max_sets": 6,
            "exercise_role": "main",
            "joint_stress": 4,
            "slot": {"day_of_week": 1, "order_in_week": 1},
            "last_adjusted_at": "2024-05-05T09:30:00.000Z",
        })
        assert candidate.last_adjusted_at == datetime(2024, 5, 5, 9, 30, tzinfo=timezone.utc)

    def test_missing_field(self):
        with pytest.raises(ValidationError, match="slot"):
            dict_to_candidate({
                "id": "w1-bench",
                "exercise_id": "bench",
                "order_index": 0,
                "sets_target": 3,
                "min_sets": 2,
                "max_sets": 6,
                "exercise_role": "main",
                "joint_stress": 4,
            })
