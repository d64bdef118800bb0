"""Expected goals to scoreline conversion."""

import math
import random
from typing import Any, Optional

from matchcast.config.analyst import PredictionStyle
from matchcast.config.settings import get_settings


class ScorelineConverter:
    """
    Turn an expected goals pair into an integer scoreline.

    1. Perturb each value by a uniform +/- variance fraction (if variance > 0)
    2. Discretise per style: conservative floors, bold ceils, moderate
       rounds half up
    3. Clamp to the configured safe range
    """

    def __init__(
        self,
        config: Optional[dict[str, Any]] = None,
        rng: Optional[random.Random] = None,
    ):
        if config is None:
            defaults = get_settings().load_defaults_config()
            config = defaults.get("prediction", {}).get("bounds", {})

        self.home_max = int(config.get("home_max", 6))
        self.away_max = int(config.get("away_max", 5))
        self.rng = rng or random.Random()

    def perturb(self, value: float, variance: float) -> float:
        if variance <= 0:
            return value
        return value + (self.rng.random() - 0.5) * 2 * variance * value

    @staticmethod
    def discretise(value: float, style: PredictionStyle) -> int:
        value = max(0.0, value)
        if style == PredictionStyle.CONSERVATIVE:
            return math.floor(value)
        if style == PredictionStyle.BOLD:
            return math.ceil(value)
        return math.floor(value + 0.5)

    @staticmethod
    def clamp(value: int, min_val: int, max_val: int) -> int:
        return max(min_val, min(value, max_val))

    def convert(
        self,
        home_expected: float,
        away_expected: float,
        style: PredictionStyle = PredictionStyle.MODERATE,
        variance: float = 0.0,
    ) -> tuple[int, int]:
        """
        Convert expected goals to a scoreline.

        Returns:
            (home_goals, away_goals) within [0, home_max] and [0, away_max]
        """
        home = self.perturb(home_expected, variance)
        away = self.perturb(away_expected, variance)

        home_goals = self.clamp(self.discretise(home, style), 0, self.home_max)
        away_goals = self.clamp(self.discretise(away, style), 0, self.away_max)
        return home_goals, away_goals
