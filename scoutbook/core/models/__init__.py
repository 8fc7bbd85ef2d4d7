"""Core data models."""

from scoutbook.core.models.observation import (
    AbilityReading,
    AttributeReading,
    Observation,
    Reading,
    ResolvedReading,
    sort_chronologically,
)
from scoutbook.core.models.player import (
    ABILITY_MAX,
    ABILITY_MIN,
    ATTRIBUTE_MAX,
    ATTRIBUTE_MIN,
    Player,
    ScoutProfile,
    find_player,
)

__all__ = [
    "ABILITY_MAX",
    "ABILITY_MIN",
    "ATTRIBUTE_MAX",
    "ATTRIBUTE_MIN",
    "AbilityReading",
    "AttributeReading",
    "Observation",
    "Player",
    "Reading",
    "ResolvedReading",
    "ScoutProfile",
    "find_player",
    "sort_chronologically",
]
