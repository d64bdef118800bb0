"""API routes for MatchCast."""
