"""Last-resort scoreline generation.

Used when there is not enough trustworthy data for the scoring engine. The
distribution is fixed and never looks at any factor, so a prediction can
always be produced.
"""

import random
from typing import Any, Optional

from matchcast.config.settings import get_settings

DEFAULT_DRAW_PROBABILITY = 0.2
DEFAULT_DRAW_SCORES = [0, 1, 1, 2]
DEFAULT_HOME_GOALS = {0: 0.15, 1: 0.35, 2: 0.30, 3: 0.15, 4: 0.05}
DEFAULT_AWAY_GOALS = {0: 0.30, 1: 0.40, 2: 0.20, 3: 0.10}


class FallbackStrategy:
    """Data-independent scoreline with a mild home bias."""

    def __init__(
        self,
        config: Optional[dict[str, Any]] = None,
        rng: Optional[random.Random] = None,
    ):
        if config is None:
            config = get_settings().load_defaults_config().get("fallback", {})

        self.draw_probability = float(
            config.get("draw_probability", DEFAULT_DRAW_PROBABILITY)
        )
        draw_scores = [int(g) for g in config.get("draw_scores") or [] if int(g) >= 0]
        self.draw_scores = draw_scores or list(DEFAULT_DRAW_SCORES)
        self.home_goals = self._distribution(config.get("home_goals"), DEFAULT_HOME_GOALS)
        self.away_goals = self._distribution(config.get("away_goals"), DEFAULT_AWAY_GOALS)
        self.rng = rng or random.Random()

    @staticmethod
    def _distribution(
        raw: Optional[dict[Any, Any]], default: dict[int, float]
    ) -> tuple[list[int], list[float]]:
        """Goals and weights, ignoring entries that cannot be sampled."""
        items = {int(k): float(v) for k, v in (raw or {}).items() if float(v) > 0 and int(k) >= 0}
        if not items:
            items = default
        goals = sorted(items)
        return goals, [items[g] for g in goals]

    def generate(self) -> tuple[int, int]:
        """Generate a basic (home_goals, away_goals) prediction."""
        if self.rng.random() < self.draw_probability:
            goals = self.rng.choice(self.draw_scores)
            return goals, goals

        home_goals = self.rng.choices(self.home_goals[0], weights=self.home_goals[1])[0]
        away_goals = self.rng.choices(self.away_goals[0], weights=self.away_goals[1])[0]
        return home_goals, away_goals
