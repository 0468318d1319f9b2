"""
YAML → typed config loader.

Loads projection parameters from progression.yaml (bundled with the package)
and optionally merges user overrides from ~/.forge-planner/progression.yaml.

Usage:
    from forge_planner.core.engine.config_loader import series_target_config
    cfg = series_target_config("BARBELL")
    cfg.max_rep_drop_per_week  # 3 unless overridden

If a YAML file cannot be read or parsed it is skipped with a logged warning
and the Python defaults from config.py / equipment.py apply.
"""

from __future__ import annotations

import importlib.resources
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from ..config import SeriesTargetConfig
from ..equipment import default_series_config

logger = logging.getLogger(__name__)

_SERIES_FIELDS: frozenset[str] = frozenset(
    {
        "step_min",
        "step_max",
        "min_reps",
        "weight_quantization",
        "max_rep_drop_per_week",
        "max_rep_increase_per_week",
        "max_intensity",
        "max_reps_scan",
        "remove_reps_if_clamped",
    }
)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; return {} if it is unreadable or not a mapping."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring config file %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled progression.yaml, or None if not found."""
    ref = importlib.resources.files("forge_planner").joinpath("progression.yaml")
    if ref.is_file():
        return Path(str(ref))
    candidate = Path(__file__).parent.parent.parent / "progression.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.forge-planner/progression.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".forge-planner" / "progression.yaml"
    return p if p.exists() else None


def load_model_config(extra_path: Path | None = None) -> dict[str, Any]:
    """
    Load and merge model configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/forge_planner/progression.yaml
    2. User override at ~/.forge-planner/progression.yaml
    3. extra_path, if given (e.g. a --config CLI option)

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    for path in (get_bundled_yaml_path(), get_user_yaml_path(), extra_path):
        if path is not None:
            config = _deep_merge(config, _load_yaml_file(path))

    return config


def series_target_config(
    tool_type: str,
    config: dict[str, Any] | None = None,
) -> SeriesTargetConfig:
    """
    Build the SeriesTargetConfig for an equipment class.

    ``series_target.defaults`` applies to every class and
    ``series_target.tools.<TOOL>`` overrides it.  Unknown keys are ignored.

    Args:
        tool_type: DUMBBELL, BARBELL or MACHINE
        config: Merged config (loaded with load_model_config() if None)

    Returns:
        SeriesTargetConfig
    """
    if config is None:
        config = load_model_config()

    section = config.get("series_target", {}) or {}
    merged = _deep_merge(
        section.get("defaults", {}) or {},
        (section.get("tools", {}) or {}).get(tool_type, {}) or {},
    )
    overrides = {k: v for k, v in merged.items() if k in _SERIES_FIELDS}
    return default_series_config(tool_type, **overrides)
