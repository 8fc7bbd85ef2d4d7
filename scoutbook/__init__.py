"""Scoutbook - football scouting perception and observation engine."""

__version__ = "0.1.0"
