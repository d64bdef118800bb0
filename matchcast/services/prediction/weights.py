"""Weight redistribution.

When a factor's data is missing for a match, its configured weight is not
simply dropped: the remaining usable factors are scaled up so the total
weight mass stays equal to what was configured.

    total_configured = sum(w for w in weights if w > 0)
    total_available  = sum(w for usable factors with w > 0)
    scale            = total_configured / total_available   (1.0 if nothing usable)
    effective(f)     = w(f) * scale if usable(f) else 0
    quality          = total_available / total_configured * 100   (100 if nothing configured)

Home advantage never depends on external data and is always usable.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import structlog

from matchcast.config.analyst import WeightConfig
from matchcast.config.settings import get_settings

logger = structlog.get_logger(__name__)


class Factor(str, Enum):
    """Scoring dimensions consumed by the engine."""
    FORM = "form"
    HOME_ADVANTAGE = "home_advantage"
    XG_OFFENSE = "xg_offense"
    XG_DEFENSE = "xg_defense"
    ODDS = "odds"
    INJURY = "injury"
    LINEUP = "lineup"
    ELO = "elo"


CONFIG_FIELDS: dict[Factor, str] = {
    Factor.FORM: "form_weight",
    Factor.HOME_ADVANTAGE: "home_advantage_weight",
    Factor.XG_OFFENSE: "xg_weight",
    Factor.XG_DEFENSE: "xg_defensive_weight",
    Factor.ODDS: "odds_weight",
    Factor.INJURY: "injury_weight",
    Factor.LINEUP: "lineup_weight",
    Factor.ELO: "elo_weight",
}

# Factors named in degradation warnings: factor -> (tier, message)
WARNING_FACTORS: dict[Factor, tuple[str, str]] = {
    Factor.XG_OFFENSE: ("primary", "xG data unavailable"),
    Factor.ODDS: ("primary", "odds data unavailable"),
    Factor.INJURY: ("secondary", "injury data unavailable"),
    Factor.LINEUP: ("secondary", "lineup data unavailable"),
    Factor.ELO: ("secondary", "Elo rating data unavailable"),
}


@dataclass(frozen=True)
class EffectiveWeights:
    """Per-factor weights after redistribution."""

    weights: dict[Factor, float]
    configured_source_count: int
    available_source_count: int
    total_configured: float
    total_available: float
    data_quality_score: float

    def __getitem__(self, factor: Factor) -> float:
        return self.weights.get(factor, 0.0)

    @property
    def total(self) -> float:
        return sum(self.weights.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "weights": {f.value: round(w, 4) for f, w in self.weights.items()},
            "configured_source_count": self.configured_source_count,
            "available_source_count": self.available_source_count,
            "data_quality_score": round(self.data_quality_score, 2),
        }


def configured_weights(config: WeightConfig) -> dict[Factor, float]:
    """Read factor weights from a config, treating negatives as zero."""
    weights = {}
    for factor, field_name in CONFIG_FIELDS.items():
        value = getattr(config, field_name)
        if value < 0:
            logger.warning("negative_weight_normalised", factor=factor.value, weight=value)
            value = 0.0
        weights[factor] = float(value)
    return weights


class WeightRedistributor:
    """Compute effective weights and the data quality gate."""

    def __init__(self, config: Optional[dict[str, Any]] = None):
        """
        Initialize the redistributor.

        Args:
            config: Optional quality configuration. If not provided,
                   loads the prediction.quality section of defaults.yaml
        """
        if config is None:
            defaults = get_settings().load_defaults_config()
            config = defaults.get("prediction", {}).get("quality", {})

        self.min_quality_score = float(config.get("min_score", 50.0))
        self.materiality = {
            "primary": float(config.get("primary_materiality", 0.15)),
            "secondary": float(config.get("secondary_materiality", 0.10)),
        }

    def redistribute(
        self,
        config: WeightConfig,
        usable: dict[Factor, bool],
        weights: Optional[dict[Factor, float]] = None,
    ) -> EffectiveWeights:
        """
        Compute effective weights for one match.

        Args:
            config: The bot's configured weights
            usable: Whether each factor's data is present for this match.
                    Missing keys count as unusable.
            weights: Already normalised configured weights, if the caller
                     has them

        Returns:
            EffectiveWeights with the quality score
        """
        if weights is None:
            weights = configured_weights(config)
        usable = {**usable, Factor.HOME_ADVANTAGE: True}

        total_configured = 0.0
        total_available = 0.0
        configured_count = 0
        available_count = 0
        for factor, weight in weights.items():
            if weight <= 0:
                continue
            total_configured += weight
            configured_count += 1
            if usable.get(factor, False):
                total_available += weight
                available_count += 1

        scale = total_configured / total_available if total_available > 0 else 1.0
        quality = (
            total_available / total_configured * 100
            if total_configured > 0
            else 100.0
        )

        effective = {
            factor: weight * scale if usable.get(factor, False) and weight > 0 else 0.0
            for factor, weight in weights.items()
        }

        return EffectiveWeights(
            weights=effective,
            configured_source_count=configured_count,
            available_source_count=available_count,
            total_configured=total_configured,
            total_available=total_available,
            data_quality_score=quality,
        )

    def can_predict(self, effective: EffectiveWeights, form_present: bool) -> bool:
        """Form must be present and enough weight mass must be backed by data."""
        if not form_present:
            return False
        return effective.data_quality_score >= self.min_quality_score

    def degradation_warning(
        self,
        config: WeightConfig,
        usable: dict[Factor, bool],
        weights: Optional[dict[Factor, float]] = None,
    ) -> Optional[str]:
        """Describe materially weighted factors that are unavailable."""
        if weights is None:
            weights = configured_weights(config)
        missing = [
            message
            for factor, (tier, message) in WARNING_FACTORS.items()
            if weights[factor] > self.materiality[tier] and not usable.get(factor, False)
        ]
        if not missing:
            return None
        return f"Degraded prediction: {', '.join(missing)}"
