"""Expected goals scoring engine.

Starts from league-average baselines and applies each usable factor as a
running update to the home and away totals. The order of the steps is fixed
so that the same inputs always produce the same expected goals:

    form -> xG offense -> xG defense -> home advantage -> odds
         -> injuries -> lineup strength -> Elo -> late-season blend

A factor only contributes when its effective weight is above zero and its
sample is present for this match.
"""

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from matchcast.config.settings import get_settings
from matchcast.models.domain import MatchOutcome
from matchcast.services.prediction.context import PredictionContext
from matchcast.services.prediction.weights import EffectiveWeights, Factor

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ExpectedGoals:
    """Expected goals pair for a match."""

    home: float
    away: float


class ScoringEngine:
    """
    Combine available factor data into expected goals.

    All constants come from the `prediction` section of defaults.yaml.
    """

    REQUIRED_SECTIONS = ["baseline", "form", "xg", "home_advantage", "odds", "elo"]

    def __init__(self, config: Optional[dict[str, Any]] = None):
        """
        Initialize scoring engine.

        Args:
            config: Optional prediction configuration. If not provided,
                   loads from defaults.yaml
        """
        if config is None:
            config = self._load_default_config()

        self.config = config
        self._validate_config()

        baseline = config["baseline"]
        self.home_baseline = float(baseline["home"])
        self.away_baseline = float(baseline["away"])

        self.form_neutral = float(config["form"].get("neutral_score", 50.0))
        self.streak_factor = float(config["form"].get("streak_factor", 0.02))
        self.defensive_reference = float(config["xg"].get("defensive_reference", 1.3))
        self.home_boost = float(config["home_advantage"].get("home_boost", 0.15))
        self.away_penalty = float(config["home_advantage"].get("away_penalty", 0.10))
        self.home_reference_confidence = float(
            config["odds"].get("home_reference_confidence", 0.4)
        )
        self.away_reference_confidence = float(
            config["odds"].get("away_reference_confidence", 0.3)
        )
        self.elo_scale = float(config["elo"].get("scale", 400.0))
        self.late_season_blend = float(config.get("late_season", {}).get("blend", 0.15))

    def _load_default_config(self) -> dict[str, Any]:
        """Load prediction config from defaults.yaml."""
        full_config = get_settings().load_defaults_config()
        return full_config.get("prediction") or self._get_fallback_config()

    def _get_fallback_config(self) -> dict[str, Any]:
        """Fallback configuration if defaults.yaml not found."""
        return {
            "baseline": {"home": 1.5, "away": 1.2},
            "form": {"neutral_score": 50.0, "streak_factor": 0.02},
            "xg": {"defensive_reference": 1.3},
            "home_advantage": {"home_boost": 0.15, "away_penalty": 0.10},
            "odds": {
                "home_reference_confidence": 0.4,
                "away_reference_confidence": 0.3,
            },
            "elo": {"scale": 400.0},
            "late_season": {"blend": 0.15},
        }

    def _validate_config(self) -> None:
        """Validate configuration has all required sections."""
        for section in self.REQUIRED_SECTIONS:
            if section not in self.config:
                raise ValueError(f"Missing prediction config section: {section}")
        for side in ("home", "away"):
            if side not in self.config["baseline"]:
                raise ValueError(f"Missing baseline: {side}")

    def apply_form(
        self, home: float, away: float, context: PredictionContext, weight: float
    ) -> tuple[float, float]:
        """Scale toward form-implied strength, then goal trend and streak."""
        home_form = context.factors.home_form
        away_form = context.factors.away_form
        config = context.config

        home_modifier = home_form.form_score / self.form_neutral
        away_modifier = away_form.form_score / self.form_neutral
        home *= 1 + (home_modifier - 1) * weight
        away *= 1 + (away_modifier - 1) * weight

        if config.goal_trend_weight > 0:
            trend = config.goal_trend_weight
            home = home * (1 - trend) + home_form.goals_per_match * trend
            away = away * (1 - trend) + away_form.goals_per_match * trend

        if config.streak_weight > 0:
            home *= 1 + home_form.current_streak * self.streak_factor * config.streak_weight
            away *= 1 + away_form.current_streak * self.streak_factor * config.streak_weight

        return home, away

    def apply_xg_offense(
        self, home: float, away: float, context: PredictionContext, weight: float
    ) -> tuple[float, float]:
        """Weighted average of the running value and each team's xG rate."""
        home = home * (1 - weight) + context.factors.home_xg.xg_per_match * weight
        away = away * (1 - weight) + context.factors.away_xg.xg_per_match * weight
        return home, away

    def apply_xg_defense(
        self, home: float, away: float, context: PredictionContext, weight: float
    ) -> tuple[float, float]:
        """Leaky opponents raise expected goals, tight ones lower them."""
        away_conceded = context.factors.away_xg.xg_against_per_match
        home_conceded = context.factors.home_xg.xg_against_per_match
        home *= 1 + (away_conceded - self.defensive_reference) * weight
        away *= 1 + (home_conceded - self.defensive_reference) * weight
        return home, away

    def apply_home_advantage(
        self, home: float, away: float, weight: float
    ) -> tuple[float, float]:
        home *= 1 + self.home_boost * weight
        away *= 1 - self.away_penalty * weight
        return home, away

    def apply_odds(
        self, home: float, away: float, context: PredictionContext, weight: float
    ) -> tuple[float, float]:
        """Boost the market favourite. A draw favourite changes nothing."""
        odds = context.factors.odds
        if odds.favorite == MatchOutcome.HOME_WIN:
            home *= 1 + (odds.favorite_confidence - self.home_reference_confidence) * weight
        elif odds.favorite == MatchOutcome.AWAY_WIN:
            away *= 1 + (odds.favorite_confidence - self.away_reference_confidence) * weight
        return home, away

    def apply_injuries(
        self, home: float, away: float, context: PredictionContext, weight: float
    ) -> tuple[float, float]:
        if context.factors.home_injuries is not None:
            home *= 1 - (context.factors.home_injuries.impact_score / 100.0) * weight
        if context.factors.away_injuries is not None:
            away *= 1 - (context.factors.away_injuries.impact_score / 100.0) * weight
        return home, away

    def apply_lineups(
        self, home: float, away: float, context: PredictionContext
    ) -> tuple[float, float]:
        if context.factors.home_lineup is not None:
            home *= context.factors.home_lineup.strength_multiplier
        if context.factors.away_lineup is not None:
            away *= context.factors.away_lineup.strength_multiplier
        return home, away

    def apply_elo(
        self, home: float, away: float, context: PredictionContext, weight: float
    ) -> tuple[float, float]:
        diff = (context.factors.home_elo.rating - context.factors.away_elo.rating) / self.elo_scale
        home *= 1 + diff * weight
        away *= 1 - diff * weight
        return home, away

    def apply_late_season(
        self, home: float, away: float, context: PredictionContext
    ) -> tuple[float, float]:
        """High-stakes run-in: pull both sides toward their mean."""
        matchday = context.match.matchday
        config = context.config
        if not config.high_stakes_boost or matchday is None:
            return home, away
        if matchday < config.late_season_matchday:
            return home, away

        average = (home + away) / 2
        blend = self.late_season_blend
        return home * (1 - blend) + average * blend, away * (1 - blend) + average * blend

    def calculate_expected_goals(
        self,
        context: PredictionContext,
        effective: EffectiveWeights,
    ) -> ExpectedGoals:
        """
        Calculate expected goals for a match.

        Args:
            context: Match, bot config, availability and factor samples
            effective: Redistributed weights for this match

        Returns:
            ExpectedGoals, never negative
        """
        home = self.home_baseline
        away = self.away_baseline

        if effective[Factor.FORM] > 0 and context.can_use_form:
            home, away = self.apply_form(home, away, context, effective[Factor.FORM])

        if context.can_use_xg:
            if effective[Factor.XG_OFFENSE] > 0:
                home, away = self.apply_xg_offense(
                    home, away, context, effective[Factor.XG_OFFENSE]
                )
            if effective[Factor.XG_DEFENSE] > 0:
                home, away = self.apply_xg_defense(
                    home, away, context, effective[Factor.XG_DEFENSE]
                )

        if effective[Factor.HOME_ADVANTAGE] > 0:
            home, away = self.apply_home_advantage(
                home, away, effective[Factor.HOME_ADVANTAGE]
            )

        if effective[Factor.ODDS] > 0 and context.can_use_odds:
            home, away = self.apply_odds(home, away, context, effective[Factor.ODDS])

        if effective[Factor.INJURY] > 0 and context.can_use_injuries:
            home, away = self.apply_injuries(home, away, context, effective[Factor.INJURY])

        if effective[Factor.LINEUP] > 0 and context.can_use_lineups:
            home, away = self.apply_lineups(home, away, context)

        if effective[Factor.ELO] > 0 and context.can_use_elo:
            home, away = self.apply_elo(home, away, context, effective[Factor.ELO])

        home, away = self.apply_late_season(home, away, context)

        result = ExpectedGoals(home=max(0.0, home), away=max(0.0, away))

        logger.debug(
            "expected_goals_calculated",
            match_id=context.match.match_id,
            home=round(result.home, 3),
            away=round(result.away, 3),
            quality=round(effective.data_quality_score, 2),
        )

        return result
