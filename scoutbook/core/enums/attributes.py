"""Attribute domains, scout skills and the attribute registry."""

from enum import Enum


class AttributeDomain(Enum):
    """Attribute categories. Each is governed by one scout skill."""

    TECHNICAL = "technical"
    PHYSICAL = "physical"
    MENTAL = "mental"
    TACTICAL = "tactical"
    HIDDEN = "hidden"  # Never directly observable


class LensType(Enum):
    """Domain emphasis a scout applies while focusing on a player."""

    TECHNICAL = "technical"
    PHYSICAL = "physical"
    MENTAL = "mental"
    TACTICAL = "tactical"
    GENERAL = "general"

    @property
    def domain(self) -> "AttributeDomain | None":
        """The attribute domain this lens emphasises (None for general)."""
        if self == LensType.GENERAL:
            return None
        return AttributeDomain(self.value)


class ScoutSkill(Enum):
    """Scout skills, each rated 1-20."""

    TECHNICAL_EYE = "technical_eye"
    PHYSICAL_ASSESSMENT = "physical_assessment"
    PSYCHOLOGICAL_READ = "psychological_read"
    TACTICAL_UNDERSTANDING = "tactical_understanding"
    PLAYER_JUDGMENT = "player_judgment"  # Current ability reads
    POTENTIAL_ASSESSMENT = "potential_assessment"  # Potential ability reads


class Perk(Enum):
    """Scout perks that unlock extra reflection output."""

    PA_ESTIMATE = "pa_estimate"


# Skill that governs accuracy for each domain
DOMAIN_SKILL_MAP: dict[AttributeDomain, ScoutSkill] = {
    AttributeDomain.TECHNICAL: ScoutSkill.TECHNICAL_EYE,
    AttributeDomain.PHYSICAL: ScoutSkill.PHYSICAL_ASSESSMENT,
    AttributeDomain.MENTAL: ScoutSkill.PSYCHOLOGICAL_READ,
    AttributeDomain.TACTICAL: ScoutSkill.TACTICAL_UNDERSTANDING,
    AttributeDomain.HIDDEN: ScoutSkill.PSYCHOLOGICAL_READ,
}


# Attributes by domain, ordered from most to least commonly observed
DOMAIN_ATTRIBUTES: dict[AttributeDomain, list[str]] = {
    AttributeDomain.TECHNICAL: [
        "first_touch",
        "passing",
        "dribbling",
        "crossing",
        "shooting",
        "heading",
        "tackling",
        "finishing",
    ],
    AttributeDomain.PHYSICAL: [
        "pace",
        "strength",
        "stamina",
        "agility",
        "jumping",
        "balance",
    ],
    AttributeDomain.MENTAL: [
        "composure",
        "positioning",
        "work_rate",
        "decision_making",
        "leadership",
        "anticipation",
    ],
    AttributeDomain.TACTICAL: [
        "off_the_ball",
        "pressing",
        "defensive_awareness",
        "vision",
        "marking",
        "teamwork",
    ],
    AttributeDomain.HIDDEN: [
        "injury_proneness",
        "consistency",
        "big_game_temperament",
        "professionalism",
    ],
}

ATTRIBUTE_DOMAINS: dict[str, AttributeDomain] = {
    attr: domain
    for domain, attrs in DOMAIN_ATTRIBUTES.items()
    for attr in attrs
}

ALL_ATTRIBUTES: list[str] = list(ATTRIBUTE_DOMAINS.keys())

HIDDEN_ATTRIBUTES: frozenset[str] = frozenset(DOMAIN_ATTRIBUTES[AttributeDomain.HIDDEN])


def get_attribute_domain(attr_name: str) -> AttributeDomain:
    """
    Look up the domain of an attribute.

    Raises:
        KeyError: if the attribute is not registered
    """
    return ATTRIBUTE_DOMAINS[attr_name]


def is_hidden_attribute(attr_name: str) -> bool:
    """True if the attribute can never be read directly."""
    return attr_name in HIDDEN_ATTRIBUTES
