"""
Equipment classes and their load increments.

Each exercise is performed with one equipment class.  The class decides how
big a "normal" weekly load jump is (step_min..step_max), how many reps a set
must keep at minimum, and how many kg above the normal range cost one rep
(overstep_unit) in session-level target projection.

Values
------
  DUMBBELL :  step 1.0–2.5 kg, min 5 reps, 1.5 kg per rep over range
  BARBELL  :  step 2.5–5.0 kg, min 3 reps, 2.5 kg per rep over range
  MACHINE  :  step 2.5–5.0 kg, min 5 reps, 2.5 kg per rep over range
"""

from __future__ import annotations

from typing import Any

from .config import SeriesTargetConfig

# ---------------------------------------------------------------------------
# Equipment catalog
# ---------------------------------------------------------------------------

TOOL_CATALOG: dict[str, dict[str, Any]] = {
    "DUMBBELL": {
        "label": "Dumbbells",
        "step_min": 1.0,
        "step_max": 2.5,
        "overstep_unit": 1.5,
        "min_reps": 5,
    },
    "BARBELL": {
        "label": "Barbell",
        "step_min": 2.5,
        "step_max": 5.0,
        "overstep_unit": 2.5,
        "min_reps": 3,
    },
    "MACHINE": {
        "label": "Machine / cable stack",
        "step_min": 2.5,
        "step_max": 5.0,
        "overstep_unit": 2.5,
        "min_reps": 5,
    },
}


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def get_tool(tool_type: str) -> dict[str, Any]:
    """
    Return the catalog entry for an equipment class.

    Raises:
        ValueError: If tool_type is not in the catalog
    """
    if tool_type not in TOOL_CATALOG:
        valid = ", ".join(TOOL_CATALOG)
        raise ValueError(f"Unknown tool type '{tool_type}'. Valid types: {valid}")
    return TOOL_CATALOG[tool_type]


def get_step_min(tool_type: str) -> float:
    return float(get_tool(tool_type)["step_min"])


def get_step_max(tool_type: str) -> float:
    return float(get_tool(tool_type)["step_max"])


def get_overstep_unit(tool_type: str) -> float:
    return float(get_tool(tool_type)["overstep_unit"])


def get_min_reps(tool_type: str) -> int:
    return int(get_tool(tool_type)["min_reps"])


def default_series_config(tool_type: str, **overrides: Any) -> SeriesTargetConfig:
    """
    Build a SeriesTargetConfig from the catalog defaults.

    Keyword overrides replace individual fields, e.g.
    ``default_series_config("BARBELL", max_intensity=0.95)``.

    Args:
        tool_type: DUMBBELL, BARBELL or MACHINE
        **overrides: SeriesTargetConfig field values

    Returns:
        SeriesTargetConfig for the class
    """
    params: dict[str, Any] = {
        "tool_type": tool_type,
        "step_min": get_step_min(tool_type),
        "step_max": get_step_max(tool_type),
        "min_reps": get_min_reps(tool_type),
    }
    params.update(overrides)
    return SeriesTargetConfig(**params)
