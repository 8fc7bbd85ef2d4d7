"""Perception: confidence ranges, noisy readings and evidence aggregation."""

from scoutbook.core.perception.aggregator import (
    AbilityEstimate,
    PerceivedProfile,
    build_perceived_profile,
    clamp_potential_range,
    estimate_ability,
    merge_readings,
    pa_age_factor,
    resolve_reading,
)
from scoutbook.core.perception.confidence import (
    ABILITY_SCALE,
    ATTRIBUTE_SCALE,
    confidence_label,
    confidence_range,
    range_half_width,
)
from scoutbook.core.perception.perception import (
    observe_session,
    perceive_ability,
    perceive_attribute,
)

__all__ = [
    "ABILITY_SCALE",
    "ATTRIBUTE_SCALE",
    "AbilityEstimate",
    "PerceivedProfile",
    "build_perceived_profile",
    "clamp_potential_range",
    "confidence_label",
    "confidence_range",
    "estimate_ability",
    "merge_readings",
    "observe_session",
    "pa_age_factor",
    "perceive_ability",
    "perceive_attribute",
    "resolve_reading",
]
