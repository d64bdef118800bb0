"""Source health module for MatchCast."""

from matchcast.services.health.availability import DataAvailability, get_availability
from matchcast.services.health.tracker import (
    HealthEvent,
    HealthState,
    SourceHealth,
    SourceHealthTracker,
    get_tracker,
)

__all__ = [
    "DataAvailability",
    "HealthEvent",
    "HealthState",
    "SourceHealth",
    "SourceHealthTracker",
    "get_availability",
    "get_tracker",
]
