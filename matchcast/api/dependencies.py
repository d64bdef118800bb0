"""FastAPI dependencies for MatchCast."""

from matchcast.services.health.tracker import SourceHealthTracker, get_tracker

__all__ = ["SourceHealthTracker", "get_tracker"]
