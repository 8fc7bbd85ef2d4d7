"""Players being scouted and the scouts doing the scouting."""

from dataclasses import dataclass, field
from typing import Optional
from uuid import uuid4

from scoutbook.core.enums import (
    ATTRIBUTE_DOMAINS,
    DOMAIN_SKILL_MAP,
    AttributeDomain,
    Perk,
    ScoutSkill,
)
from scoutbook.core.errors import MalformedInputError

ATTRIBUTE_MIN = 1
ATTRIBUTE_MAX = 20
ABILITY_MIN = 1
ABILITY_MAX = 200


@dataclass
class Player:
    """
    A player with hidden true attribute values.

    Owned by the wider simulation. The engine only reads it, and only the
    perception layer ever looks at the true values.
    """
    id: str
    name: str
    position: str
    age: int
    attributes: dict[str, int] = field(default_factory=dict)
    current_ability: int = 100  # 1-200
    potential_ability: int = 120  # 1-200
    form: int = 0  # -3 to 3

    def __post_init__(self) -> None:
        for attr_name, value in self.attributes.items():
            if attr_name not in ATTRIBUTE_DOMAINS:
                raise MalformedInputError("create_player", f"unknown attribute '{attr_name}'")
            if not ATTRIBUTE_MIN <= value <= ATTRIBUTE_MAX:
                raise MalformedInputError(
                    "create_player",
                    f"{attr_name}={value} outside {ATTRIBUTE_MIN}-{ATTRIBUTE_MAX}",
                )
        for label, value in (("current_ability", self.current_ability),
                             ("potential_ability", self.potential_ability)):
            if not ABILITY_MIN <= value <= ABILITY_MAX:
                raise MalformedInputError(
                    "create_player", f"{label}={value} outside {ABILITY_MIN}-{ABILITY_MAX}"
                )

    def get(self, attr_name: str, default: int = 10) -> int:
        """True value of an attribute (perception layer only)."""
        return self.attributes.get(attr_name, default)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "position": self.position,
            "age": self.age,
            "attributes": dict(self.attributes),
            "current_ability": self.current_ability,
            "potential_ability": self.potential_ability,
            "form": self.form,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Player":
        return cls(
            id=data["id"],
            name=data["name"],
            position=data["position"],
            age=data["age"],
            attributes=dict(data.get("attributes", {})),
            current_ability=data.get("current_ability", 100),
            potential_ability=data.get("potential_ability", 120),
            form=data.get("form", 0),
        )


def _default_skills() -> dict[ScoutSkill, int]:
    return {skill: 10 for skill in ScoutSkill}


@dataclass
class ScoutProfile:
    """
    The scout's skills and perks as seen by the engine.

    Skills are 1-20. Intuition drives gut feelings during reflection.
    """
    id: str = field(default_factory=lambda: str(uuid4()))
    name: str = ""
    skills: dict[ScoutSkill, int] = field(default_factory=_default_skills)
    intuition: int = 10
    perks: frozenset[Perk] = field(default_factory=frozenset)
    pa_estimate_accuracy_bonus: float = 0.0  # 0-1, tightens perk PA ranges

    def skill(self, skill: ScoutSkill) -> int:
        """Skill level clamped to 1-20 (missing skills read as 10)."""
        return max(1, min(20, self.skills.get(skill, 10)))

    def skill_for_domain(self, domain: AttributeDomain) -> int:
        """Skill level governing accuracy for an attribute domain."""
        return self.skill(DOMAIN_SKILL_MAP[domain])

    def skill_for_attribute(self, attr_name: str) -> int:
        return self.skill_for_domain(ATTRIBUTE_DOMAINS[attr_name])

    def has_perk(self, perk: Perk) -> bool:
        return perk in self.perks

    def with_boosts(self, boosts: dict[ScoutSkill, int]) -> "ScoutProfile":
        """Copy of this scout with transient skill boosts (capped at 20)."""
        boosted = dict(self.skills)
        for skill, amount in boosts.items():
            boosted[skill] = min(20, self.skill(skill) + amount)
        return ScoutProfile(
            id=self.id,
            name=self.name,
            skills=boosted,
            intuition=self.intuition,
            perks=self.perks,
            pa_estimate_accuracy_bonus=self.pa_estimate_accuracy_bonus,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "skills": {skill.value: level for skill, level in self.skills.items()},
            "intuition": self.intuition,
            "perks": sorted(perk.value for perk in self.perks),
            "pa_estimate_accuracy_bonus": self.pa_estimate_accuracy_bonus,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScoutProfile":
        skills = _default_skills()
        for key, level in data.get("skills", {}).items():
            skills[ScoutSkill(key)] = level
        return cls(
            id=data.get("id") or str(uuid4()),
            name=data.get("name", ""),
            skills=skills,
            intuition=data.get("intuition", 10),
            perks=frozenset(Perk(p) for p in data.get("perks", [])),
            pa_estimate_accuracy_bonus=data.get("pa_estimate_accuracy_bonus", 0.0),
        )


def find_player(players: dict[str, Player], player_id: str) -> Optional[Player]:
    """Look up a player by id, tolerating a missing mapping."""
    if not players:
        return None
    return players.get(player_id)
