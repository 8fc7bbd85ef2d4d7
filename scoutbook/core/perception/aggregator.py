"""
Observation aggregation.

Merges a player's observation history into the scout's best estimate of
each attribute and into a current/potential ability composite. Pure
read-and-derive over immutable history, safe to recompute on every
profile view.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from scoutbook.core.enums import ScoutSkill
from scoutbook.core.models import (
    ABILITY_MAX,
    ABILITY_MIN,
    AttributeReading,
    Observation,
    ResolvedReading,
    ScoutProfile,
    sort_chronologically,
)
from scoutbook.core.perception.confidence import (
    ABILITY_SCALE,
    clamp_confidence,
    confidence_range,
    range_half_width,
)

# Ability composites use this many of the most recent ability readings
ABILITY_READING_WINDOW = 3

# Young players' potential is harder to pin down
YOUTH_AGE = 21
VETERAN_AGE = 28
YOUTH_PA_WIDENING = 1.5


@dataclass(frozen=True)
class AbilityEstimate:
    """Composite current/potential ability estimate on the 1-200 scale."""
    ca: int
    ca_low: int
    ca_high: int
    ca_confidence: float
    pa_low: int
    pa_high: int
    pa_confidence: float
    observation_count: int

    def to_dict(self) -> dict:
        return {
            "ca": self.ca,
            "ca_low": self.ca_low,
            "ca_high": self.ca_high,
            "ca_confidence": self.ca_confidence,
            "pa_low": self.pa_low,
            "pa_high": self.pa_high,
            "pa_confidence": self.pa_confidence,
            "observation_count": self.observation_count,
        }


@dataclass
class PerceivedProfile:
    """Everything a scout believes about one player, ready for a report."""
    player_id: str
    readings: dict[str, ResolvedReading] = field(default_factory=dict)
    ability: Optional[AbilityEstimate] = None
    observation_count: int = 0

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "readings": {name: r.to_dict() for name, r in self.readings.items()},
            "ability": self.ability.to_dict() if self.ability else None,
            "observation_count": self.observation_count,
        }


def _for_player(observations: Iterable[Observation], player_id: Optional[str]) -> list[Observation]:
    if player_id is None:
        return list(observations)
    return [o for o in observations if o.player_id == player_id]


def resolve_reading(reading: AttributeReading, scout: ScoutProfile) -> ResolvedReading:
    """
    Produce the fully-populated reading.

    Stored bounds are kept. Readings saved before bounds were stored get
    them derived from the confidence model, using the scout's current skill
    in the domain that governs the attribute.
    """
    if reading.has_range:
        low, high = reading.range_low, reading.range_high
    else:
        low, high = confidence_range(
            reading.perceived_value,
            reading.confidence,
            scout.skill_for_attribute(reading.attribute),
            reading.observation_count,
        )
    return ResolvedReading(
        attribute=reading.attribute,
        perceived_value=reading.perceived_value,
        confidence=clamp_confidence(reading.confidence),
        observation_count=reading.observation_count,
        range_low=low,
        range_high=high,
    )


def merge_readings(
    observations: Iterable[Observation],
    scout: ScoutProfile,
    player_id: Optional[str] = None,
) -> dict[str, ResolvedReading]:
    """
    Merge a player's observations into one best reading per attribute.

    The reading backed by the most observations wins; ties go to the most
    recent observation. Readings are never averaged: the deepest single
    strand of evidence dominates.

    Args:
        observations: Observation history (any order)
        scout: Scout whose skills resolve missing range bounds
        player_id: Restrict to this player's observations

    Returns:
        Mapping of attribute name to ResolvedReading
    """
    best: dict[str, AttributeReading] = {}
    for observation in sort_chronologically(_for_player(observations, player_id)):
        for reading in observation.readings:
            current = best.get(reading.attribute)
            if current is None or reading.observation_count >= current.observation_count:
                best[reading.attribute] = reading

    return {name: resolve_reading(reading, scout) for name, reading in best.items()}


def pa_age_factor(age: int) -> float:
    """Widening applied to potential ranges by age (1.5 youth, 1.0 veteran)."""
    if age <= YOUTH_AGE:
        return YOUTH_PA_WIDENING
    if age >= VETERAN_AGE:
        return 1.0
    progress = (age - YOUTH_AGE) / (VETERAN_AGE - YOUTH_AGE)
    return YOUTH_PA_WIDENING - progress * (YOUTH_PA_WIDENING - 1.0)


def clamp_potential_range(ca: int, pa_low: int, pa_high: int) -> tuple[int, int]:
    """
    Fit a potential range onto the ability scale without starting below ca.

    A collapsed range is widened by one point, upward while there is room
    and otherwise down toward ca. When ca is already the scale maximum the
    range is the single point ABILITY_MAX.
    """
    low = max(ca, pa_low)
    high = min(ABILITY_MAX, pa_high)
    if high <= low:
        if low < ABILITY_MAX:
            high = low + 1
        else:
            low = max(ca, ABILITY_MAX - 1)
            high = ABILITY_MAX
    return low, high


def estimate_ability(
    observations: Iterable[Observation],
    scout: ScoutProfile,
    player_age: int,
    player_id: Optional[str] = None,
) -> Optional[AbilityEstimate]:
    """
    Build the current/potential ability composite.

    Uses the most recent ability readings. The CA range narrows with
    confidence and observation count. The PA range narrows at half that
    rate, is widened for young players and is never narrower than the CA
    range: potential is not knowable until development is over.

    Returns:
        AbilityEstimate, or None if no observation carries an ability reading
    """
    with_ability = [
        o for o in sort_chronologically(_for_player(observations, player_id))
        if o.ability_reading is not None
    ]
    if not with_ability:
        return None

    recent = [o.ability_reading for o in with_ability[-ABILITY_READING_WINDOW:]]
    count = len(with_ability)

    avg_ca = sum(r.perceived_ca for r in recent) / len(recent)
    ca_confidence = clamp_confidence(sum(r.ca_confidence for r in recent) / len(recent))
    avg_pa_mid = sum((r.pa_low + r.pa_high) / 2 for r in recent) / len(recent)
    pa_confidence = clamp_confidence(sum(r.pa_confidence for r in recent) / len(recent))

    ca = max(ABILITY_MIN, min(ABILITY_MAX, int(round(avg_ca))))
    judgment = scout.skill(ScoutSkill.PLAYER_JUDGMENT)
    ca_low, ca_high = confidence_range(ca, ca_confidence, judgment, count, ABILITY_SCALE)

    # Potential narrows at half the rate of current ability
    pa_count = max(1, (count + 1) // 2)
    pa_half = range_half_width(
        pa_confidence,
        scout.skill(ScoutSkill.POTENTIAL_ASSESSMENT),
        pa_count,
        ABILITY_SCALE,
    ) * pa_age_factor(player_age)
    ca_half = range_half_width(ca_confidence, judgment, count, ABILITY_SCALE)
    pa_half = max(pa_half, ca_half)

    pa_mid = max(ca, min(ABILITY_MAX, avg_pa_mid))
    pa_low, pa_high = clamp_potential_range(
        ca, int(round(pa_mid - pa_half)), int(round(pa_mid + pa_half))
    )

    return AbilityEstimate(
        ca=ca,
        ca_low=ca_low,
        ca_high=ca_high,
        ca_confidence=ca_confidence,
        pa_low=pa_low,
        pa_high=pa_high,
        pa_confidence=pa_confidence,
        observation_count=count,
    )


def build_perceived_profile(
    observations: Iterable[Observation],
    scout: ScoutProfile,
    player_id: str,
    player_age: int,
) -> PerceivedProfile:
    """Merged readings plus ability composite for one player."""
    history = _for_player(observations, player_id)
    return PerceivedProfile(
        player_id=player_id,
        readings=merge_readings(history, scout),
        ability=estimate_ability(history, scout, player_age),
        observation_count=len(history),
    )
