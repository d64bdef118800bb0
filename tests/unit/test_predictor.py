"""Unit tests for the stats analyst prediction pipeline.

CRITICAL TESTS:
- A prediction MUST always be produced, whatever data is missing
- Missing form or low data quality MUST use the fallback
- Degraded predictions MUST say which factors were missing
"""

import random
from datetime import timedelta

import pytest

from matchcast.config.analyst import PredictionStyle, WeightConfig
from matchcast.models import FactorBundle, Prediction
from matchcast.services.health import DataAvailability, HealthState, get_availability
from matchcast.services.prediction import (
    Factor,
    FallbackStrategy,
    StatsAnalystPredictor,
    WeightRedistributor,
)
from matchcast.services.prediction.context import PredictionContext

DETERMINISTIC = WeightConfig(goal_trend_weight=0.0, streak_weight=0.0, random_variance=0.0)


class TestStatsAnalystPredictor:
    """Test StatsAnalystPredictor.predict."""

    def setup_method(self):
        self.fallback = FallbackStrategy(
            config={"draw_probability": 0.0, "home_goals": {2: 1.0}, "away_goals": {0: 1.0}},
            rng=random.Random(1),
        )
        self.predictor = StatsAnalystPredictor(fallback=self.fallback, rng=random.Random(1))

    def test_form_only_prediction(self, match, form_only_bundle):
        """
        Form 0.35 + home advantage 0.25, nothing external.

        home: 1.5 * (1 + 0.4667 * 0.35) * 1.0375 = 1.81
        away: 1.2 * (1 - 0.3333 * 0.35) * 0.975  = 1.03
        """
        prediction = self.predictor.predict(
            match, DETERMINISTIC, DataAvailability(), form_only_bundle
        )

        assert isinstance(prediction, Prediction)
        assert (prediction.home_goals, prediction.away_goals) == (2, 1)
        assert prediction.used_fallback is False
        assert prediction.warning is None
        assert prediction.data_quality_score == pytest.approx(100.0)

    def test_missing_xg_degrades_but_predicts(self, match, form_only_bundle):
        config = DETERMINISTIC.with_overrides(
            form_weight=0.3, home_advantage_weight=0.3, xg_weight=0.4
        )
        prediction = self.predictor.predict(
            match, config, DataAvailability(xg=False), form_only_bundle
        )

        assert prediction.used_fallback is False
        assert prediction.data_quality_score == pytest.approx(60.0)
        assert prediction.warning is not None
        assert "xG" in prediction.warning

    def test_low_quality_uses_fallback(self, match, form_only_bundle):
        config = DETERMINISTIC.with_overrides(
            form_weight=0.2, home_advantage_weight=0.1, xg_weight=0.7
        )
        prediction = self.predictor.predict(
            match, config, DataAvailability(), form_only_bundle
        )

        assert prediction.used_fallback is True
        assert (prediction.home_goals, prediction.away_goals) == (2, 0)
        assert prediction.data_quality_score == pytest.approx(30.0)
        assert "xG" in prediction.warning

    def test_missing_away_form_uses_fallback(self, match, full_bundle):
        factors = FactorBundle(home_form=full_bundle.home_form)
        prediction = self.predictor.predict(
            match, DETERMINISTIC, DataAvailability(), factors
        )
        assert prediction.used_fallback is True

    def test_no_data_at_all_still_predicts(self, match):
        prediction = self.predictor.predict(
            match, WeightConfig(), DataAvailability(form=False), FactorBundle()
        )
        assert prediction.used_fallback is True
        assert 0 <= prediction.home_goals <= 6
        assert 0 <= prediction.away_goals <= 5

    def test_full_data_uses_everything(self, match, full_bundle):
        config = DETERMINISTIC.with_overrides(
            form_weight=0.2, home_advantage_weight=0.1, xg_weight=0.2,
            xg_defensive_weight=0.1, odds_weight=0.15, injury_weight=0.1,
            lineup_weight=0.05, elo_weight=0.1,
        )
        prediction = self.predictor.predict(
            match, config, DataAvailability.everything(), full_bundle
        )

        assert prediction.used_fallback is False
        assert prediction.warning is None
        assert prediction.data_quality_score == pytest.approx(100.0)
        assert prediction.home_goals >= prediction.away_goals

    def test_disabled_factor_flag_counts_as_missing(self, match, full_bundle):
        config = DETERMINISTIC.with_overrides(
            form_weight=0.3, home_advantage_weight=0.3, odds_weight=0.4,
            use_odds_data=False,
        )
        prediction = self.predictor.predict(
            match, config, DataAvailability.everything(), full_bundle
        )
        assert prediction.data_quality_score == pytest.approx(60.0)
        assert "odds data unavailable" in prediction.warning

    def test_style_changes_scoreline(self, match, form_only_bundle):
        bold = DETERMINISTIC.with_overrides(style=PredictionStyle.BOLD)
        conservative = DETERMINISTIC.with_overrides(style=PredictionStyle.CONSERVATIVE)

        high = self.predictor.predict(match, bold, DataAvailability(), form_only_bundle)
        low = self.predictor.predict(match, conservative, DataAvailability(), form_only_bundle)

        assert (high.home_goals, high.away_goals) == (2, 2)
        assert (low.home_goals, low.away_goals) == (1, 1)

    def test_results_stay_in_bounds_with_variance(self, match, full_bundle):
        config = WeightConfig(random_variance=0.3, style=PredictionStyle.BOLD)
        for _ in range(100):
            prediction = self.predictor.predict(
                match, config, DataAvailability.everything(), full_bundle
            )
            assert 0 <= prediction.home_goals <= 6
            assert 0 <= prediction.away_goals <= 5

    def test_configured_weights_read_once_per_prediction(
        self, match, form_only_bundle, monkeypatch
    ):
        """Negative weights are normalised (and logged) once, not per consumer."""
        from matchcast.services.prediction import predictor as predictor_module
        from matchcast.services.prediction import weights as weights_module

        calls = []
        original = weights_module.configured_weights

        def counting(config):
            calls.append(config)
            return original(config)

        monkeypatch.setattr(weights_module, "configured_weights", counting)
        monkeypatch.setattr(predictor_module, "configured_weights", counting)

        config = DETERMINISTIC.with_overrides(odds_weight=-0.2)
        self.predictor.predict(match, config, DataAvailability(), form_only_bundle)

        assert len(calls) == 1, f"Configured weights computed {len(calls)} times"


class TestPredictionFromSourceHealth:
    """End-to-end: sync outcomes -> availability -> prediction."""

    def setup_method(self):
        self.predictor = StatsAnalystPredictor(rng=random.Random(1))

    @staticmethod
    def sync_all(tracker):
        for source in tracker.known_sources:
            tracker.record_success(source, timedelta(seconds=2))

    def test_form_only_with_all_sources_healthy(self, tracker, match, full_bundle):
        """Form weight 1.0 and every other weight 0 uses form alone."""
        self.sync_all(tracker)
        config = DETERMINISTIC.with_overrides(form_weight=1.0, home_advantage_weight=0.0)
        availability = get_availability(tracker)

        effective = WeightRedistributor().redistribute(
            config, PredictionContext(match, config, availability, full_bundle).usable_factors()
        )
        prediction = self.predictor.predict(match, config, availability, full_bundle)

        assert availability == DataAvailability.everything()
        assert effective[Factor.FORM] == pytest.approx(1.0)
        assert effective.data_quality_score == pytest.approx(100.0)
        # home 1.5 * 2.2/1.5 = 2.2, away 1.2 * 1.0/1.5 = 0.8
        assert (prediction.home_goals, prediction.away_goals) == (2, 1)
        assert prediction.used_fallback is False
        assert prediction.warning is None

    def test_failed_xg_source_degrades_prediction(self, tracker, match, full_bundle):
        self.sync_all(tracker)
        for _ in range(5):
            tracker.record_failure("understat", "HTTP 500")
        assert tracker.get("understat").state == HealthState.FAILED

        availability = get_availability(tracker)
        config = DETERMINISTIC.with_overrides(
            form_weight=0.3, home_advantage_weight=0.3, xg_weight=0.4
        )
        prediction = self.predictor.predict(match, config, availability, full_bundle)

        assert availability.xg is False
        assert prediction.used_fallback is False
        assert prediction.data_quality_score == pytest.approx(60.0)
        assert prediction.warning == "Degraded prediction: xG data unavailable"
