"""Pytest configuration and fixtures for MatchCast tests."""

from datetime import datetime, timedelta, timezone

import pytest


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Clock frozen at a fixed instant until advanced."""
    return FakeClock(datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def tracker(clock):
    """Tracker with the production staleness table and a fake clock."""
    from matchcast.services.health import SourceHealthTracker

    return SourceHealthTracker(
        stale_thresholds={
            "football_data_org": timedelta(hours=6),
            "understat": timedelta(hours=48),
            "football_data_uk": timedelta(days=7),
            "api_football": timedelta(hours=24),
            "club_elo": timedelta(hours=48),
        },
        default_stale_threshold=timedelta(hours=48),
        clock=clock,
    )


@pytest.fixture
def match():
    """Mid-season fixture."""
    from matchcast.models import Match

    return Match(
        match_id="m-1001",
        home_team_id="t-ars",
        away_team_id="t-bha",
        competition_id="c-pl",
        kickoff=datetime(2026, 3, 15, 15, 0, tzinfo=timezone.utc),
        matchday=28,
    )


@pytest.fixture
def full_bundle():
    """Every factor sample present for both teams."""
    from matchcast.models import (
        EloRating,
        FactorBundle,
        FormSample,
        InjurySummary,
        LineupStrength,
        MarketOdds,
        XgSample,
    )

    return FactorBundle(
        home_form=FormSample(
            matches_played=5,
            points_per_match=2.2,
            goals_per_match=1.8,
            goals_conceded_per_match=0.8,
            current_streak=3,
        ),
        away_form=FormSample(
            matches_played=5,
            points_per_match=1.0,
            goals_per_match=1.0,
            goals_conceded_per_match=1.6,
            current_streak=-2,
        ),
        home_xg=XgSample(xg_per_match=1.9, xg_against_per_match=1.0),
        away_xg=XgSample(xg_per_match=1.1, xg_against_per_match=1.7),
        odds=MarketOdds.from_decimal_odds(1.6, 4.0, 5.5),
        home_injuries=InjurySummary(impact_score=10),
        away_injuries=InjurySummary(impact_score=35),
        home_lineup=LineupStrength(strength_multiplier=1.0),
        away_lineup=LineupStrength(strength_multiplier=0.9),
        home_elo=EloRating(rating=1850),
        away_elo=EloRating(rating=1700),
    )


@pytest.fixture
def form_only_bundle(full_bundle):
    """Only form is known."""
    from matchcast.models import FactorBundle

    return FactorBundle(home_form=full_bundle.home_form, away_form=full_bundle.away_form)
