"""HTTP API for scouting sessions."""
