"""MatchCast: multi-source match prediction engine."""

__version__ = "0.1.0"
