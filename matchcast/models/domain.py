"""Domain models for match predictions.

These are in-memory value objects. Collaborators that sync external feeds
build them and hand them to the prediction pipeline; a missing sample is
represented by None, never by a zeroed object.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class MatchOutcome(str, Enum):
    """1X2 outcome of a match."""
    HOME_WIN = "home_win"
    DRAW = "draw"
    AWAY_WIN = "away_win"


@dataclass(frozen=True)
class Match:
    """Match being predicted."""

    match_id: str
    home_team_id: str
    away_team_id: str
    competition_id: str
    kickoff: Optional[datetime] = None
    matchday: Optional[int] = None


@dataclass(frozen=True)
class FormSample:
    """Recent form aggregates for one team over the analysed window."""

    matches_played: int
    points_per_match: float
    goals_per_match: float
    goals_conceded_per_match: float = 0.0
    current_streak: int = 0  # positive = winning run, negative = losing run

    @property
    def form_score(self) -> float:
        """Form on a 0-100 scale, 50 when nothing has been played."""
        if self.matches_played == 0:
            return 50.0
        return (self.points_per_match / 3.0) * 100


@dataclass(frozen=True)
class XgSample:
    """Season expected-goals rates for one team."""

    xg_per_match: float
    xg_against_per_match: float


@dataclass(frozen=True)
class MarketOdds:
    """Market-implied outcome probabilities for a match."""

    home_probability: float
    draw_probability: float
    away_probability: float
    favorite: MatchOutcome
    favorite_confidence: float

    @classmethod
    def from_decimal_odds(cls, home: float, draw: float, away: float) -> "MarketOdds":
        """
        Derive normalised probabilities and the market favourite from
        decimal odds. The bookmaker margin is removed by normalising the
        implied probabilities to sum to 1.
        """
        implied = [1.0 / o if o > 0 else 0.0 for o in (home, draw, away)]
        total = sum(implied)
        if total <= 0:
            return cls(0.0, 0.0, 0.0, MatchOutcome.DRAW, 0.0)

        p_home, p_draw, p_away = (p / total for p in implied)

        if p_home >= p_draw and p_home >= p_away:
            favorite, confidence = MatchOutcome.HOME_WIN, p_home
        elif p_away >= p_draw:
            favorite, confidence = MatchOutcome.AWAY_WIN, p_away
        else:
            favorite, confidence = MatchOutcome.DRAW, p_draw

        return cls(p_home, p_draw, p_away, favorite, confidence)


@dataclass(frozen=True)
class InjurySummary:
    """Squad absence impact for one team (0 = none, 100 = decimated)."""

    impact_score: float


@dataclass(frozen=True)
class LineupStrength:
    """Strength of the announced lineup relative to the first choice XI."""

    strength_multiplier: float


@dataclass(frozen=True)
class EloRating:
    """Club Elo rating for one team."""

    rating: float


@dataclass(frozen=True)
class FactorBundle:
    """
    Per-match factor samples that the collaborators could obtain.

    Any field may be None. Only the samples a caller could actually fetch
    are passed in; the pipeline never queries a collaborator itself.
    """

    home_form: Optional[FormSample] = None
    away_form: Optional[FormSample] = None
    home_xg: Optional[XgSample] = None
    away_xg: Optional[XgSample] = None
    odds: Optional[MarketOdds] = None
    home_injuries: Optional[InjurySummary] = None
    away_injuries: Optional[InjurySummary] = None
    home_lineup: Optional[LineupStrength] = None
    away_lineup: Optional[LineupStrength] = None
    home_elo: Optional[EloRating] = None
    away_elo: Optional[EloRating] = None


@dataclass(frozen=True)
class Prediction:
    """Final scoreline prediction."""

    home_goals: int
    away_goals: int
    warning: Optional[str] = None
    used_fallback: bool = False
    data_quality_score: Optional[float] = None


def resolve_season(match_date: datetime) -> str:
    """
    Season label used by advanced-stats providers.

    European seasons start in August, so a match before August belongs to
    the season that started the previous calendar year.
    """
    if match_date.month < 8:
        return str(match_date.year - 1)
    return str(match_date.year)
