"""
Schemas for the observation session API.

Request bodies are validated here. Responses are either the small
summary models below or the engine's own ``to_dict`` views, so the
presentation layer never sees true attribute values.
"""

from typing import Optional

from pydantic import BaseModel, Field

from scoutbook.core.enums import (
    AttributeDomain,
    EvidenceDirection,
    LensType,
    ObservationContext,
    Reaction,
)


class PlayerInput(BaseModel):
    """A player offered to the session, with true values for perception."""
    id: str
    name: str
    position: str
    age: int = Field(default=20, ge=14, le=45)
    attributes: dict[str, int] = Field(default_factory=dict)
    current_ability: int = 100
    potential_ability: int = 120
    form: int = Field(default=0, ge=-3, le=3)


class ScoutInput(BaseModel):
    """The scout running the session."""
    id: Optional[str] = None
    name: str = ""
    skills: dict[str, int] = Field(default_factory=dict)
    intuition: int = Field(default=10, ge=1, le=20)
    perks: list[str] = Field(default_factory=list)
    pa_estimate_accuracy_bonus: float = Field(default=0.0, ge=0.0, le=1.0)


class CreateSessionRequest(BaseModel):
    """Request to create a new observation session."""
    activity_type: str = "schoolMatch"
    players: list[PlayerInput]
    seed: Optional[str] = None
    week: int = Field(default=1, ge=1)
    season: int = Field(default=1, ge=1)
    venue_type: Optional[str] = None
    target_player_id: Optional[str] = None
    activity_instance_id: Optional[str] = None
    scout: Optional[ScoutInput] = None


class FocusRequest(BaseModel):
    """Place focus on a player, or switch lens on one already focused."""
    player_id: str
    lens: LensType = LensType.GENERAL


class FlagRequest(BaseModel):
    moment_id: str
    reaction: Reaction
    note: Optional[str] = None


class HypothesisRequest(BaseModel):
    """Accept a hypothesis, usually one suggested by reflection."""
    player_id: str
    text: str
    domain: AttributeDomain
    hypothesis_id: Optional[str] = None


class EvidenceRequest(BaseModel):
    direction: EvidenceDirection
    description: str
    strength: str = Field(default="moderate", pattern="^(weak|moderate|strong)$")


class NoteRequest(BaseModel):
    note: str


class ObserveRequest(BaseModel):
    """Fold the finished session into observations."""
    context: ObservationContext = ObservationContext.LIVE_MATCH


class SessionSummary(BaseModel):
    """Compact session state for clients."""
    session_id: str
    mode: str
    state: str
    activity_type: str
    current_phase_index: int
    total_phases: int
    halftime_index: Optional[int] = None
    tokens_available: int
    tokens_total: int
    focused_player_ids: list[str]
    flag_count: int
    insight_points_earned: int


class ErrorDetail(BaseModel):
    """Body of a rejected action."""
    kind: str
    action: str
    reason: str
    session_id: Optional[str] = None
