"""
Core engine for forge-planner.

Pure functions over dataclasses; nothing in this package performs I/O
except engine/config_loader, which reads YAML parameters.
"""

from .adaptation import (
    aggregate_weekly_feedback,
    apply_pain_override,
    apply_smoothing,
    compute_delta_from_matrix,
    filter_candidates_for_delta,
    select_auto_volume_candidate,
)
from .max_estimator import estimate_e1rm_strength_level
from .planner import apply_target_projection, apply_week_close, close_week, project_session_targets
from .targets import compute_exercise_targets, compute_series_target, find_reps_for_weight

__all__ = [
    "aggregate_weekly_feedback",
    "apply_pain_override",
    "apply_smoothing",
    "compute_delta_from_matrix",
    "filter_candidates_for_delta",
    "select_auto_volume_candidate",
    "estimate_e1rm_strength_level",
    "apply_target_projection",
    "apply_week_close",
    "close_week",
    "project_session_targets",
    "compute_exercise_targets",
    "compute_series_target",
    "find_reps_for_weight",
]
