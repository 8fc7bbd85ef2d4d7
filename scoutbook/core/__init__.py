"""Scouting engine core: models, perception and observation sessions."""
