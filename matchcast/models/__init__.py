"""Domain models for MatchCast."""

from matchcast.models.domain import (
    EloRating,
    FactorBundle,
    FormSample,
    InjurySummary,
    LineupStrength,
    MarketOdds,
    Match,
    MatchOutcome,
    Prediction,
    XgSample,
    resolve_season,
)

__all__ = [
    "Match",
    "MatchOutcome",
    "FormSample",
    "XgSample",
    "MarketOdds",
    "InjurySummary",
    "LineupStrength",
    "EloRating",
    "FactorBundle",
    "Prediction",
    "resolve_season",
]
