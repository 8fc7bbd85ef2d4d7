"""Scouting enumerations."""

from scoutbook.core.enums.attributes import (
    ALL_ATTRIBUTES,
    ATTRIBUTE_DOMAINS,
    DOMAIN_ATTRIBUTES,
    DOMAIN_SKILL_MAP,
    HIDDEN_ATTRIBUTES,
    AttributeDomain,
    LensType,
    Perk,
    ScoutSkill,
    get_attribute_domain,
    is_hidden_attribute,
)
from scoutbook.core.enums.session import (
    EvidenceDirection,
    HypothesisState,
    MomentType,
    ObservationContext,
    ObservationMode,
    PhaseType,
    Reaction,
    SessionState,
)

__all__ = [
    "ALL_ATTRIBUTES",
    "ATTRIBUTE_DOMAINS",
    "AttributeDomain",
    "DOMAIN_ATTRIBUTES",
    "DOMAIN_SKILL_MAP",
    "EvidenceDirection",
    "HIDDEN_ATTRIBUTES",
    "HypothesisState",
    "LensType",
    "MomentType",
    "ObservationContext",
    "ObservationMode",
    "Perk",
    "PhaseType",
    "Reaction",
    "ScoutSkill",
    "SessionState",
    "get_attribute_domain",
    "is_hidden_attribute",
]
