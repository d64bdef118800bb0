"""Per-match prediction context."""

from dataclasses import dataclass

from matchcast.config.analyst import WeightConfig
from matchcast.models.domain import FactorBundle, Match
from matchcast.services.health.availability import DataAvailability
from matchcast.services.prediction.weights import Factor


@dataclass(frozen=True)
class PredictionContext:
    """
    Everything known about one match at prediction time.

    A factor is usable only when the bot enables it, its source is
    available, and the sample for this match was actually obtained.
    """

    match: Match
    config: WeightConfig
    availability: DataAvailability
    factors: FactorBundle

    @property
    def can_use_form(self) -> bool:
        # Form is derived from stored results, not a live feed
        return self.factors.home_form is not None and self.factors.away_form is not None

    @property
    def can_use_xg(self) -> bool:
        return (
            self.config.use_xg_data
            and self.availability.xg
            and self.factors.home_xg is not None
            and self.factors.away_xg is not None
        )

    @property
    def can_use_odds(self) -> bool:
        return (
            self.config.use_odds_data
            and self.availability.odds
            and self.factors.odds is not None
        )

    @property
    def can_use_injuries(self) -> bool:
        return (
            self.config.use_injury_data
            and self.availability.injuries
            and (
                self.factors.home_injuries is not None
                or self.factors.away_injuries is not None
            )
        )

    @property
    def can_use_lineups(self) -> bool:
        return (
            self.config.use_lineup_data
            and self.availability.lineups
            and (
                self.factors.home_lineup is not None
                or self.factors.away_lineup is not None
            )
        )

    @property
    def can_use_elo(self) -> bool:
        return (
            self.config.use_elo_data
            and self.availability.elo
            and self.factors.home_elo is not None
            and self.factors.away_elo is not None
        )

    def usable_factors(self) -> dict[Factor, bool]:
        return {
            Factor.FORM: self.can_use_form,
            Factor.HOME_ADVANTAGE: True,
            Factor.XG_OFFENSE: self.can_use_xg,
            Factor.XG_DEFENSE: self.can_use_xg,
            Factor.ODDS: self.can_use_odds,
            Factor.INJURY: self.can_use_injuries,
            Factor.LINEUP: self.can_use_lineups,
            Factor.ELO: self.can_use_elo,
        }
