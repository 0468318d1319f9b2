"""
CLI entry point using Typer.

Provides commands for the autoregulation engine:
- e1rm: Estimate a one-rep max
- series-target: Project the next weight/reps of a working set
- reps-for-weight: Equivalent reps at another weight
- exercise-targets: Next-session load target and rep hint
- aggregate: Weekly feedback → set delta for one muscle group
- close-week: Auto-volume changes for a whole week snapshot
- classify: Default role, joint stress and max sets of an exercise
- rir: Reps-in-reserve target of a mesocycle week
"""

from .app import app
from .commands import targets, volume  # noqa: F401  (registers commands)

if __name__ == "__main__":
    app()
