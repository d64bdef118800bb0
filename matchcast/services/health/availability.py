"""Data availability aggregation.

Turns per-source health into one flag per factor category. Categories whose
value decays quickly (xG, odds, Elo) require fresh data; the others only
need the source to be operational.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from matchcast.services.health.tracker import SourceHealthTracker


class Check(str, Enum):
    """How strictly a category's source is checked."""
    OPERATIONAL = "operational"
    FRESH = "fresh"


# category -> (source, check). Fixed; not configurable per call.
CATEGORY_SOURCES: dict[str, tuple[str, Check]] = {
    "form": ("football_data_org", Check.OPERATIONAL),
    "xg": ("understat", Check.FRESH),
    "odds": ("football_data_uk", Check.FRESH),
    "injuries": ("api_football", Check.OPERATIONAL),
    "lineups": ("football_data_org", Check.OPERATIONAL),
    "standings": ("football_data_org", Check.OPERATIONAL),
    "elo": ("club_elo", Check.FRESH),
}

EXTERNAL_CATEGORIES = ("xg", "odds", "injuries", "lineups", "elo")


@dataclass(frozen=True)
class DataAvailability:
    """Snapshot of which factor categories can be trusted right now."""

    form: bool = True
    xg: bool = False
    odds: bool = False
    injuries: bool = False
    lineups: bool = False
    standings: bool = False
    elo: bool = False

    @classmethod
    def everything(cls) -> "DataAvailability":
        return cls(**{name: True for name in CATEGORY_SOURCES})

    @property
    def has_any_external_data(self) -> bool:
        return any(getattr(self, name) for name in EXTERNAL_CATEGORIES)

    @property
    def available_count(self) -> int:
        return sum(1 for name in CATEGORY_SOURCES if getattr(self, name))

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["has_any_external_data"] = self.has_any_external_data
        data["available_count"] = self.available_count
        return data


def get_availability(tracker: SourceHealthTracker) -> DataAvailability:
    """Compute the availability snapshot from the tracker's records."""
    flags = {}
    for category, (source, check) in CATEGORY_SOURCES.items():
        if check is Check.FRESH:
            flags[category] = tracker.is_fresh(source)
        else:
            flags[category] = tracker.is_operational(source)
    return DataAvailability(**flags)
