"""
Estimated one-rep max (e1RM) used as a load-equivalence currency.

Two classic rep-max equations are blended so that the estimate is smooth
across the hypertrophy rep range:

  Brzycki 1993:  e1RM = w × 36 / (37 − r)      (accurate for low reps)
  Epley 1985:    e1RM = w × (1 + r / 30)        (accurate for high reps)

  r < 8        → Brzycki
  r > 10       → Epley
  8 ≤ r ≤ 10   → linear blend, t = (r − 8) / 2,
                 e1RM = (1 − t) × Brzycki + t × Epley

The blend keeps the estimate monotonic in reps, which the equivalent-rep
search in targets.py relies on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .config import (
    BLEND_HIGH_REPS,
    BLEND_LOW_REPS,
    BRZYCKI_DENOMINATOR,
    BRZYCKI_NUMERATOR,
    EPLEY_DIVISOR,
)


def brzycki(weight: float, reps: float) -> float:
    """Brzycki estimate: w × 36 / (37 − r)."""
    return weight * BRZYCKI_NUMERATOR / (BRZYCKI_DENOMINATOR - reps)


def epley(weight: float, reps: float) -> float:
    """Epley estimate: w × (1 + r / 30)."""
    return weight * (1 + reps / EPLEY_DIVISOR)


def estimate_e1rm_strength_level(weight: float, reps: float) -> float:
    """
    Estimate the one-rep-max strength level for a (weight, reps) set.

    Args:
        weight: Load lifted (kg)
        reps: Repetitions completed

    Returns:
        e1RM in kg, or 0.0 if weight or reps is not positive
    """
    if weight <= 0 or reps <= 0:
        return 0.0

    # Brzycki is undefined at 37 reps; only evaluate it where it is used
    if reps > BLEND_HIGH_REPS:
        return epley(weight, reps)
    if reps < BLEND_LOW_REPS:
        return brzycki(weight, reps)

    t = (reps - BLEND_LOW_REPS) / (BLEND_HIGH_REPS - BLEND_LOW_REPS)
    return (1 - t) * brzycki(weight, reps) + t * epley(weight, reps)


# ---------------------------------------------------------------------------
# Weekly best sets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggedSet:
    """A logged working set of one exercise."""

    set_id: str
    exercise_id: str
    load: float | None
    reps: int | None


@dataclass(frozen=True)
class BestSet:
    """Strongest set of an exercise within one week."""

    set_id: str
    weight: float
    reps: int
    e1rm: float


def _beats(candidate: BestSet, current: BestSet) -> bool:
    if candidate.e1rm != current.e1rm:
        return candidate.e1rm > current.e1rm
    if candidate.weight != current.weight:
        return candidate.weight > current.weight
    return candidate.reps > current.reps


def select_week_best_sets(
    sets: Iterable[LoggedSet],
    is_hard_week: bool = True,
) -> dict[str, BestSet]:
    """
    Pick the best set per exercise for a week.

    Only hard (non-deload) weeks count.  Highest e1RM wins; on equal e1RM
    the heavier load wins, then the higher rep count.  Sets with a missing
    or non-positive load, or fewer than one rep, are ignored.

    Args:
        sets: Logged sets of the week
        is_hard_week: False for deload weeks

    Returns:
        Dict exercise_id -> BestSet (empty for deload weeks)
    """
    if not is_hard_week:
        return {}

    best: dict[str, BestSet] = {}
    for s in sets:
        if s.load is None or s.reps is None:
            continue
        if s.load <= 0 or s.reps < 1:
            continue

        candidate = BestSet(
            set_id=s.set_id,
            weight=s.load,
            reps=s.reps,
            e1rm=estimate_e1rm_strength_level(s.load, s.reps),
        )
        current = best.get(s.exercise_id)
        if current is None or _beats(candidate, current):
            best[s.exercise_id] = candidate

    return best
