"""Stats analyst bot configuration.

A bot's stored configuration decides how much each factor contributes to a
prediction and how expected goals are turned into a scoreline. Configurations
are immutable for the duration of a prediction run.
"""

import json
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any, Optional

import structlog

from matchcast.config.settings import get_settings

logger = structlog.get_logger(__name__)


class PredictionStyle(str, Enum):
    """How expected goals are discretised into a scoreline."""
    CONSERVATIVE = "conservative"  # floor
    MODERATE = "moderate"          # nearest integer
    BOLD = "bold"                  # ceiling


@dataclass(frozen=True)
class WeightConfig:
    """Configured factor weights plus behavioural knobs."""

    # Redistributable factor weights
    form_weight: float = 0.35
    home_advantage_weight: float = 0.25
    xg_weight: float = 0.0
    xg_defensive_weight: float = 0.0
    odds_weight: float = 0.0
    injury_weight: float = 0.0
    lineup_weight: float = 0.0
    elo_weight: float = 0.0

    # Form modifiers (applied inside the form step, never redistributed)
    goal_trend_weight: float = 0.25
    streak_weight: float = 0.15

    matches_analyzed: int = 5
    high_stakes_boost: bool = True
    late_season_matchday: int = 30

    style: PredictionStyle = PredictionStyle.MODERATE
    random_variance: float = 0.1

    use_xg_data: bool = True
    use_odds_data: bool = True
    use_injury_data: bool = True
    use_lineup_data: bool = True
    use_elo_data: bool = True

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "WeightConfig":
        """
        Build a configuration from a plain mapping.

        Unknown keys are ignored so stored configurations survive schema
        changes. Raises ValueError/TypeError for values of the wrong type.
        """
        if not data:
            return cls()

        known = {f.name: f for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, raw in data.items():
            if key not in known:
                continue
            if key == "style":
                values[key] = PredictionStyle(str(raw).lower())
            elif isinstance(raw, bool) and known[key].type in ("float", "int", float, int):
                raise TypeError(f"{key} must be numeric")
            elif known[key].type in ("float", float):
                values[key] = float(raw)
            elif known[key].type in ("int", int):
                values[key] = int(raw)
            elif known[key].type in ("bool", bool):
                if not isinstance(raw, bool):
                    raise TypeError(f"{key} must be a boolean")
                values[key] = raw
        return cls(**values)

    @classmethod
    def from_json(cls, payload: Optional[str]) -> "WeightConfig":
        """Parse a stored JSON configuration, falling back to defaults."""
        if not payload:
            return cls()
        try:
            data = json.loads(payload)
            if not isinstance(data, dict):
                raise TypeError("configuration must be a JSON object")
            return cls.from_dict(data)
        except (ValueError, TypeError) as e:
            logger.warning("invalid_weight_config_ignored", error=str(e))
            return cls()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        data = asdict(self)
        data["style"] = self.style.value
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def with_overrides(self, **overrides: Any) -> "WeightConfig":
        return replace(self, **overrides)


@dataclass(frozen=True)
class ConfigurationPreset:
    """Named configuration offered to bot owners."""
    name: str
    description: str
    config: WeightConfig


def load_presets(defaults: Optional[dict[str, Any]] = None) -> dict[str, ConfigurationPreset]:
    """Load the named presets from defaults.yaml."""
    if defaults is None:
        defaults = get_settings().load_defaults_config()

    presets: dict[str, ConfigurationPreset] = {}
    for name, raw in (defaults.get("presets") or {}).items():
        raw = dict(raw or {})
        description = raw.pop("description", "")
        presets[name] = ConfigurationPreset(
            name=name,
            description=description,
            config=WeightConfig.from_dict(raw),
        )

    if "balanced" not in presets:
        presets["balanced"] = ConfigurationPreset(
            name="balanced",
            description="All-round analysis using all available data",
            config=WeightConfig(),
        )
    return presets


def get_preset(name: str) -> WeightConfig:
    """Get a preset configuration by name. Raises KeyError if unknown."""
    return load_presets()[name].config
