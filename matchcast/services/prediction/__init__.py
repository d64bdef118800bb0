"""Prediction module for MatchCast."""

from matchcast.services.prediction.engine import ExpectedGoals, ScoringEngine
from matchcast.services.prediction.fallback import FallbackStrategy
from matchcast.services.prediction.predictor import StatsAnalystPredictor
from matchcast.services.prediction.scoreline import ScorelineConverter
from matchcast.services.prediction.weights import (
    EffectiveWeights,
    Factor,
    WeightRedistributor,
)

__all__ = [
    "EffectiveWeights",
    "ExpectedGoals",
    "Factor",
    "FallbackStrategy",
    "ScorelineConverter",
    "ScoringEngine",
    "StatsAnalystPredictor",
    "WeightRedistributor",
]
