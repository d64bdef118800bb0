"""Services for MatchCast."""
