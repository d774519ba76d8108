"""Smart home device catalog and house planner."""

__version__ = "0.1.0"
