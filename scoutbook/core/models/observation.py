"""
Observations and attribute readings.

Observations are append-only history: created once per scouting activity
and never modified afterwards.

Readings come in two shapes. ``AttributeReading`` is the stored shape and
may lack range bounds (older history never stored them). ``ResolvedReading``
always carries bounds; the aggregator converts one into the other before
handing readings to callers.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from scoutbook.core.enums import ATTRIBUTE_DOMAINS, AttributeDomain, LensType, ObservationContext


@dataclass(frozen=True)
class AttributeReading:
    """One stored estimate of one attribute. Range bounds are optional."""
    attribute: str
    perceived_value: int
    confidence: float  # 0-1
    observation_count: int = 1
    range_low: Optional[int] = None
    range_high: Optional[int] = None

    @property
    def has_range(self) -> bool:
        return self.range_low is not None and self.range_high is not None

    @property
    def domain(self) -> AttributeDomain:
        return ATTRIBUTE_DOMAINS[self.attribute]

    def to_dict(self) -> dict:
        data = {
            "attribute": self.attribute,
            "perceived_value": self.perceived_value,
            "confidence": self.confidence,
            "observation_count": self.observation_count,
        }
        if self.has_range:
            data["range_low"] = self.range_low
            data["range_high"] = self.range_high
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AttributeReading":
        return cls(
            attribute=data["attribute"],
            perceived_value=data["perceived_value"],
            confidence=data["confidence"],
            observation_count=data.get("observation_count", 1),
            range_low=data.get("range_low"),
            range_high=data.get("range_high"),
        )


@dataclass(frozen=True)
class ResolvedReading:
    """A reading with its range bounds always present."""
    attribute: str
    perceived_value: int
    confidence: float
    observation_count: int
    range_low: int
    range_high: int

    @property
    def range_width(self) -> int:
        return self.range_high - self.range_low

    @property
    def domain(self) -> AttributeDomain:
        return ATTRIBUTE_DOMAINS[self.attribute]

    def to_dict(self) -> dict:
        return {
            "attribute": self.attribute,
            "perceived_value": self.perceived_value,
            "confidence": self.confidence,
            "observation_count": self.observation_count,
            "range_low": self.range_low,
            "range_high": self.range_high,
        }


Reading = Union[AttributeReading, ResolvedReading]


@dataclass(frozen=True)
class AbilityReading:
    """Current/potential ability estimate from one observation (1-200 scale)."""
    perceived_ca: int
    ca_confidence: float
    pa_low: int
    pa_high: int
    pa_confidence: float

    def to_dict(self) -> dict:
        return {
            "perceived_ca": self.perceived_ca,
            "ca_confidence": self.ca_confidence,
            "pa_low": self.pa_low,
            "pa_high": self.pa_high,
            "pa_confidence": self.pa_confidence,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AbilityReading":
        return cls(
            perceived_ca=data["perceived_ca"],
            ca_confidence=data["ca_confidence"],
            pa_low=data["pa_low"],
            pa_high=data["pa_high"],
            pa_confidence=data["pa_confidence"],
        )


@dataclass(frozen=True)
class Observation:
    """The output of one scouting activity for one player."""
    id: str
    player_id: str
    week: int
    season: int
    context: ObservationContext
    readings: tuple[AttributeReading, ...] = ()
    ability_reading: Optional[AbilityReading] = None
    notes: tuple[str, ...] = ()
    focus_lens: Optional[LensType] = None
    session_id: Optional[str] = None

    def reading_for(self, attr_name: str) -> Optional[AttributeReading]:
        for reading in self.readings:
            if reading.attribute == attr_name:
                return reading
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "player_id": self.player_id,
            "week": self.week,
            "season": self.season,
            "context": self.context.value,
            "readings": [r.to_dict() for r in self.readings],
            "ability_reading": self.ability_reading.to_dict() if self.ability_reading else None,
            "notes": list(self.notes),
            "focus_lens": self.focus_lens.value if self.focus_lens else None,
            "session_id": self.session_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Observation":
        ability = data.get("ability_reading")
        lens = data.get("focus_lens")
        return cls(
            id=data["id"],
            player_id=data["player_id"],
            week=data.get("week", 0),
            season=data.get("season", 0),
            context=ObservationContext(data.get("context", ObservationContext.LIVE_MATCH.value)),
            readings=tuple(AttributeReading.from_dict(r) for r in data.get("readings", [])),
            ability_reading=AbilityReading.from_dict(ability) if ability else None,
            notes=tuple(data.get("notes", [])),
            focus_lens=LensType(lens) if lens else None,
            session_id=data.get("session_id"),
        )


def sort_chronologically(observations: list[Observation]) -> list[Observation]:
    """Oldest first by (season, week); list order breaks ties."""
    return sorted(observations, key=lambda o: (o.season, o.week))
