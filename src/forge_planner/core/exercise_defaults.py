"""
Default auto-volume classification for exercises.

When an exercise is added to a mesocycle it gets a role, a joint-stress
score and a max-sets bound derived from its equipment class and primary
muscle group.  Muscle-group names are matched in English and Italian.
"""

from .config import MAX_SETS_BY_ROLE, SCORE_MAX, SCORE_MIN
from .models import ExerciseRole

ALWAYS_ISOLATION: frozenset[str] = frozenset({"abs", "addome", "forearms", "avambracci"})

DUMBBELL_ISOLATION: frozenset[str] = frozenset({
    "biceps", "bicipiti",
    "triceps", "tricipiti",
    "calves", "polpacci",
    "lateral delts", "lateral_delts", "deltoidi laterali",
})

BARBELL_MAIN: frozenset[str] = frozenset({
    "chest", "petto",
    "back", "dorso",
    "legs", "quadricipiti", "femorali",
    "glutes", "glutei",
})

BARBELL_HIGH_STRESS: frozenset[str] = frozenset({
    "legs", "quadricipiti", "femorali",
    "back", "dorso",
    "glutes", "glutei",
    "chest", "petto",
    "shoulders", "spalle",
})


def normalize_muscle_group(name: str) -> str:
    """Trim, lowercase and collapse inner whitespace."""
    return " ".join(name.strip().lower().split())


def derive_exercise_role(tool_type: str, muscle_group: str) -> ExerciseRole:
    """
    Classify an exercise as main, secondary or isolation.

    Abs and forearms are always isolation; dumbbell arm/calf/lateral-delt
    work is isolation; barbell chest/back/leg/glute lifts are main;
    everything else is secondary.
    """
    mg = normalize_muscle_group(muscle_group)
    if mg in ALWAYS_ISOLATION:
        return "isolation"
    if tool_type == "DUMBBELL" and mg in DUMBBELL_ISOLATION:
        return "isolation"
    if tool_type == "BARBELL" and mg in BARBELL_MAIN:
        return "main"
    return "secondary"


def derive_joint_stress(tool_type: str, muscle_group: str, role: ExerciseRole) -> int:
    """
    Joint stress 1..5 for an exercise.

    Barbell compound lifts are 4, other barbell work 3, machines and
    dumbbells 2.  Isolation work is capped at 2.
    """
    mg = normalize_muscle_group(muscle_group)

    if tool_type == "BARBELL":
        stress = 4 if mg in BARBELL_HIGH_STRESS else 3
    elif tool_type in ("MACHINE", "DUMBBELL"):
        stress = 2
    else:
        stress = 3

    if role == "isolation":
        stress = min(stress, 2)

    return max(SCORE_MIN, min(SCORE_MAX, stress))


def derive_max_sets(role: ExerciseRole, current_sets: int) -> int:
    """Role default (main 8, secondary 6, isolation 5), never below current_sets."""
    return max(MAX_SETS_BY_ROLE[role], current_sets)
