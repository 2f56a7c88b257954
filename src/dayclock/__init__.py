"""dayclock: a family day planner built around a 24-hour dual-ring dial."""

from dayclock.config import VERSION as __version__

__all__ = ["__version__"]
