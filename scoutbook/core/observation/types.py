"""
Observation session types.

An ObservationSession is the working state of one interactive scouting
activity. It is created in ``setup``, mutated only through the actions in
``scoutbook.core.observation.session`` and frozen once ``complete``.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from scoutbook.core.enums import (
    AttributeDomain,
    EvidenceDirection,
    HypothesisState,
    LensType,
    MomentType,
    ObservationMode,
    PhaseType,
    Reaction,
    SessionState,
)


# =============================================================================
# Phase content
# =============================================================================

@dataclass
class PlayerMoment:
    """
    A single observable event involving one player.

    What the scout sees depends on focus: the detailed description and
    attribute hints are only visible for focused players.
    """
    id: str
    player_id: str
    moment_type: MomentType
    description: str  # Shown when the player is focused
    vague_description: str  # Peripheral vision only
    attributes_hinted: list[str] = field(default_factory=list)
    quality: int = 5  # 1-10
    pressure_context: bool = False
    is_standout: bool = False

    @property
    def domain(self) -> AttributeDomain:
        return self.moment_type.domain

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "player_id": self.player_id,
            "moment_type": self.moment_type.value,
            "description": self.description,
            "vague_description": self.vague_description,
            "attributes_hinted": list(self.attributes_hinted),
            "quality": self.quality,
            "pressure_context": self.pressure_context,
            "is_standout": self.is_standout,
        }


@dataclass
class DialogueOption:
    """One choice within a dialogue node (investigation mode)."""
    id: str
    text: str
    risk_level: str = "safe"  # "safe", "moderate", "bold"
    narrative: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "risk_level": self.risk_level, "narrative": self.narrative}


@dataclass
class DialogueNode:
    """A conversational beat with one speaker (investigation mode)."""
    id: str
    speaker: str
    text: str
    options: list[DialogueOption] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "speaker": self.speaker,
            "text": self.text,
            "options": [o.to_dict() for o in self.options],
        }


@dataclass
class DataPoint:
    """A unit of data presented in analysis mode."""
    id: str
    label: str
    value: Union[float, str]
    category: str = "statistical"  # "statistical", "comparison", "trend", "anomaly"
    player_id: Optional[str] = None
    is_highlighted: bool = False
    related_attributes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "value": self.value,
            "category": self.category,
            "player_id": self.player_id,
            "is_highlighted": self.is_highlighted,
            "related_attributes": list(self.related_attributes),
        }


@dataclass
class StrategicChoice:
    """An option in a quick interaction session."""
    id: str
    text: str
    description: str = ""
    effect: str = ""
    outcome_type: str = "priority"  # "territory", "priority", "network", "technique"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "description": self.description,
            "effect": self.effect,
            "outcome_type": self.outcome_type,
        }


@dataclass
class AtmosphereEvent:
    """Something that changes observation conditions for one phase."""
    id: str
    description: str
    effect: str = "distraction"  # "amplify", "dampen", "distraction", "reveal"
    affected_attributes: list[str] = field(default_factory=list)
    noise_delta: float = 0.0  # Positive = harder to read

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "effect": self.effect,
            "affected_attributes": list(self.affected_attributes),
            "noise_delta": self.noise_delta,
        }


@dataclass
class VenueAtmosphere:
    """Session-wide conditions at the venue."""
    venue_type: str
    chaos_level: float = 0.3  # 0-1, more chaos = noisier readings
    crowd_intensity: float = 0.3  # 0-1
    amplified_attributes: list[str] = field(default_factory=list)
    dampened_attributes: list[str] = field(default_factory=list)
    weather: Optional[str] = None
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "venue_type": self.venue_type,
            "chaos_level": self.chaos_level,
            "crowd_intensity": self.crowd_intensity,
            "amplified_attributes": list(self.amplified_attributes),
            "dampened_attributes": list(self.dampened_attributes),
            "weather": self.weather,
            "description": self.description,
        }


@dataclass
class SessionPhase:
    """
    One step of a session.

    For full observation the minute is a match minute; for other modes it
    is a step counter. Which content list is populated depends on the mode.
    """
    index: int
    minute: int
    description: str = ""
    phase_type: Optional[PhaseType] = None
    moments: list[PlayerMoment] = field(default_factory=list)
    dialogue_nodes: list[DialogueNode] = field(default_factory=list)
    data_points: list[DataPoint] = field(default_factory=list)
    choices: list[StrategicChoice] = field(default_factory=list)
    atmosphere_event: Optional[AtmosphereEvent] = None
    is_halftime: bool = False

    def find_moment(self, moment_id: str) -> Optional[PlayerMoment]:
        for moment in self.moments:
            if moment.id == moment_id:
                return moment
        return None

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "minute": self.minute,
            "description": self.description,
            "phase_type": self.phase_type.value if self.phase_type else None,
            "moments": [m.to_dict() for m in self.moments],
            "dialogue_nodes": [n.to_dict() for n in self.dialogue_nodes],
            "data_points": [d.to_dict() for d in self.data_points],
            "choices": [c.to_dict() for c in self.choices],
            "atmosphere_event": self.atmosphere_event.to_dict() if self.atmosphere_event else None,
            "is_halftime": self.is_halftime,
        }


# =============================================================================
# Players and focus
# =============================================================================

@dataclass
class SessionPlayer:
    """Lightweight view of a player visible in the session."""
    player_id: str
    name: str
    position: str
    is_focused: bool = False
    focused_phases: list[int] = field(default_factory=list)
    current_lens: Optional[LensType] = None

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "position": self.position,
            "is_focused": self.is_focused,
            "focused_phases": list(self.focused_phases),
            "current_lens": self.current_lens.value if self.current_lens else None,
        }


@dataclass
class FocusAllocation:
    """One focus assignment: a player, a lens and the phases it covered."""
    player_id: str
    lens: LensType
    start_phase: int
    phases_active: int = 1

    @property
    def end_phase(self) -> int:
        """Last phase index covered (inclusive)."""
        return self.start_phase + self.phases_active - 1

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "lens": self.lens.value,
            "start_phase": self.start_phase,
            "phases_active": self.phases_active,
        }


@dataclass
class FocusTokenState:
    """Focus token budget and allocation history."""
    available: int
    total: int
    allocations: list[FocusAllocation] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "available": self.available,
            "total": self.total,
            "allocations": [a.to_dict() for a in self.allocations],
        }


# =============================================================================
# Flags and hypotheses
# =============================================================================

@dataclass
class SessionFlaggedMoment:
    """A moment the scout flagged, with their reaction."""
    id: str
    phase_index: int
    moment: PlayerMoment
    reaction: Reaction
    minute: int
    note: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "phase_index": self.phase_index,
            "moment": self.moment.to_dict(),
            "reaction": self.reaction.value,
            "minute": self.minute,
            "note": self.note,
        }


@dataclass
class HypothesisEvidence:
    """One piece of evidence for or against a hypothesis."""
    week: int
    direction: EvidenceDirection
    description: str
    strength: str = "moderate"  # "weak", "moderate", "strong"

    def to_dict(self) -> dict:
        return {
            "week": self.week,
            "direction": self.direction.value,
            "description": self.description,
            "strength": self.strength,
        }


@dataclass
class Hypothesis:
    """A working theory about a player, tested across sessions."""
    id: str
    player_id: str
    text: str
    domain: AttributeDomain
    state: HypothesisState = HypothesisState.OPEN
    created_at_week: int = 0
    evidence: list[HypothesisEvidence] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "player_id": self.player_id,
            "text": self.text,
            "domain": self.domain.value,
            "state": self.state.value,
            "created_at_week": self.created_at_week,
            "evidence": [e.to_dict() for e in self.evidence],
        }


# =============================================================================
# Session
# =============================================================================

@dataclass
class ObservationSession:
    """The owned state of one observation session."""
    id: str
    mode: ObservationMode
    activity_type: str
    phases: list[SessionPhase]
    players: list[SessionPlayer]
    focus_tokens: FocusTokenState
    state: SessionState = SessionState.SETUP
    current_phase_index: int = 0
    flagged_moments: list[SessionFlaggedMoment] = field(default_factory=list)
    hypotheses: list[Hypothesis] = field(default_factory=list)
    dismissed_hypothesis_ids: list[str] = field(default_factory=list)
    insight_points_earned: int = 0
    reflection_notes: list[str] = field(default_factory=list)
    venue_atmosphere: Optional[VenueAtmosphere] = None
    halftime_index: Optional[int] = None
    started_at_week: int = 0
    started_at_season: int = 0
    activity_instance_id: Optional[str] = None
    # Set when moments are generated as each phase is entered
    moment_venue_type: Optional[str] = None

    @property
    def current_phase(self) -> Optional[SessionPhase]:
        if 0 <= self.current_phase_index < len(self.phases):
            return self.phases[self.current_phase_index]
        return None

    @property
    def is_final_phase(self) -> bool:
        return self.current_phase_index >= len(self.phases) - 1

    def get_player(self, player_id: str) -> Optional[SessionPlayer]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def get_hypothesis(self, hypothesis_id: str) -> Optional[Hypothesis]:
        for hypothesis in self.hypotheses:
            if hypothesis.id == hypothesis_id:
                return hypothesis
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "mode": self.mode.value,
            "activity_type": self.activity_type,
            "state": self.state.value,
            "phases": [p.to_dict() for p in self.phases],
            "current_phase_index": self.current_phase_index,
            "focus_tokens": self.focus_tokens.to_dict(),
            "players": [p.to_dict() for p in self.players],
            "flagged_moments": [f.to_dict() for f in self.flagged_moments],
            "hypotheses": [h.to_dict() for h in self.hypotheses],
            "dismissed_hypothesis_ids": list(self.dismissed_hypothesis_ids),
            "insight_points_earned": self.insight_points_earned,
            "reflection_notes": list(self.reflection_notes),
            "venue_atmosphere": self.venue_atmosphere.to_dict() if self.venue_atmosphere else None,
            "halftime_index": self.halftime_index,
            "started_at_week": self.started_at_week,
            "started_at_season": self.started_at_season,
            "activity_instance_id": self.activity_instance_id,
            "moment_venue_type": self.moment_venue_type,
        }


@dataclass
class PlayerPoolEntry:
    """A player offered to a new session."""
    player_id: str
    name: str
    position: str


@dataclass
class SessionConfig:
    """Input for creating a session."""
    activity_type: str
    player_pool: list[PlayerPoolEntry]
    seed: str
    week: int = 1
    season: int = 1
    venue_type: Optional[str] = None  # Defaults to activity_type
    target_player_id: Optional[str] = None
    activity_instance_id: Optional[str] = None
    venue_atmosphere: Optional[VenueAtmosphere] = None


@dataclass
class SessionResult:
    """Resolved output of a session, consumed by reporting and progression."""
    session_id: str
    mode: ObservationMode
    activity_type: str
    flagged_moments: list[SessionFlaggedMoment]
    hypotheses: list[Hypothesis]
    insight_points_earned: int
    reflection_notes: list[str]
    quality_tier: str
    phases_completed: int
    total_phases: int
    focused_player_ids: list[str]

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "mode": self.mode.value,
            "activity_type": self.activity_type,
            "flagged_moments": [f.to_dict() for f in self.flagged_moments],
            "hypotheses": [h.to_dict() for h in self.hypotheses],
            "insight_points_earned": self.insight_points_earned,
            "reflection_notes": list(self.reflection_notes),
            "quality_tier": self.quality_tier,
            "phases_completed": self.phases_completed,
            "total_phases": self.total_phases,
            "focused_player_ids": list(self.focused_player_ids),
        }


# =============================================================================
# Read-only views for presentation
# =============================================================================

@dataclass(frozen=True)
class MomentView:
    """A moment as the scout perceives it right now."""
    moment_id: str
    player_id: Optional[str]  # None when the player is not focused
    moment_type: MomentType
    description: str
    attributes_hinted: tuple[str, ...]
    is_focused: bool
    lens: Optional[LensType]
    is_standout: bool
    pressure_context: bool

    def to_dict(self) -> dict:
        return {
            "moment_id": self.moment_id,
            "player_id": self.player_id,
            "moment_type": self.moment_type.value,
            "description": self.description,
            "attributes_hinted": list(self.attributes_hinted),
            "is_focused": self.is_focused,
            "lens": self.lens.value if self.lens else None,
            "is_standout": self.is_standout,
            "pressure_context": self.pressure_context,
        }


@dataclass(frozen=True)
class PhaseView:
    """A phase as presented to the scout."""
    index: int
    minute: int
    description: str
    is_halftime: bool
    moments: tuple[MomentView, ...]
    atmosphere_event: Optional[AtmosphereEvent]
    dialogue_nodes: tuple[DialogueNode, ...] = ()
    data_points: tuple[DataPoint, ...] = ()
    choices: tuple[StrategicChoice, ...] = ()

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "minute": self.minute,
            "description": self.description,
            "is_halftime": self.is_halftime,
            "moments": [m.to_dict() for m in self.moments],
            "atmosphere_event": self.atmosphere_event.to_dict() if self.atmosphere_event else None,
            "dialogue_nodes": [n.to_dict() for n in self.dialogue_nodes],
            "data_points": [d.to_dict() for d in self.data_points],
            "choices": [c.to_dict() for c in self.choices],
        }
