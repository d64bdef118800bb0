"""API package for MatchCast."""
