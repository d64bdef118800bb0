"""Stats analyst prediction pipeline.

    availability + factor samples + bot config
        -> WeightRedistributor (effective weights, quality score)
        -> quality gate
             fail: FallbackStrategy
             pass: ScoringEngine -> ScorelineConverter

The pipeline holds no per-match state, so any number of matches can be
predicted concurrently with one instance.
"""

import random
from typing import Optional

import structlog

from matchcast.config.analyst import WeightConfig
from matchcast.models.domain import FactorBundle, Match, Prediction
from matchcast.services.health.availability import DataAvailability
from matchcast.services.prediction.context import PredictionContext
from matchcast.services.prediction.engine import ScoringEngine
from matchcast.services.prediction.fallback import FallbackStrategy
from matchcast.services.prediction.scoreline import ScorelineConverter
from matchcast.services.prediction.weights import WeightRedistributor, configured_weights

logger = structlog.get_logger(__name__)


class StatsAnalystPredictor:
    """Produce a scoreline for a match from whatever data is available."""

    def __init__(
        self,
        engine: Optional[ScoringEngine] = None,
        redistributor: Optional[WeightRedistributor] = None,
        converter: Optional[ScorelineConverter] = None,
        fallback: Optional[FallbackStrategy] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the predictor.

        Args:
            engine: Scoring engine (defaults.yaml constants if not given)
            redistributor: Weight redistributor
            converter: Scoreline converter
            fallback: Last-resort strategy
            rng: Random source shared by the converter and fallback when
                 they are not supplied
        """
        self.engine = engine or ScoringEngine()
        self.redistributor = redistributor or WeightRedistributor()
        self.converter = converter or ScorelineConverter(rng=rng)
        self.fallback = fallback or FallbackStrategy(rng=rng)

    def predict(
        self,
        match: Match,
        config: WeightConfig,
        availability: DataAvailability,
        factors: FactorBundle,
    ) -> Prediction:
        """
        Predict a scoreline.

        Args:
            match: Match being predicted
            config: The bot's weight configuration
            availability: Source availability snapshot
            factors: Factor samples the collaborators could obtain

        Returns:
            Prediction; never raises for missing data
        """
        context = PredictionContext(
            match=match,
            config=config,
            availability=availability,
            factors=factors,
        )
        usable = context.usable_factors()
        weights = configured_weights(config)
        effective = self.redistributor.redistribute(config, usable, weights)

        warning = self.redistributor.degradation_warning(config, usable, weights)
        if warning is not None:
            logger.warning("prediction_degraded", match_id=match.match_id, warning=warning)

        if not self.redistributor.can_predict(effective, context.can_use_form):
            logger.warning(
                "fallback_prediction_used",
                match_id=match.match_id,
                form_present=context.can_use_form,
                quality=round(effective.data_quality_score, 2),
            )
            home_goals, away_goals = self.fallback.generate()
            return Prediction(
                home_goals=home_goals,
                away_goals=away_goals,
                warning=warning,
                used_fallback=True,
                data_quality_score=effective.data_quality_score,
            )

        expected = self.engine.calculate_expected_goals(context, effective)
        home_goals, away_goals = self.converter.convert(
            expected.home,
            expected.away,
            style=config.style,
            variance=config.random_variance,
        )

        return Prediction(
            home_goals=home_goals,
            away_goals=away_goals,
            warning=warning,
            used_fallback=False,
            data_quality_score=effective.data_quality_score,
        )
