"""forge-planner: auto-regulated hypertrophy planning engine."""

__version__ = "0.1.0"
