"""Interactive observation sessions: focus, moments, phases and reflection."""

from scoutbook.core.observation.attention import (
    lens_effectiveness,
    lens_skill_boosts,
    observation_quality,
    tokens_per_half,
)
from scoutbook.core.observation.reflection import (
    GutFeelingCandidate,
    ReflectionResult,
    SuggestedHypothesis,
    reflect,
)
from scoutbook.core.observation.session import (
    accept_hypothesis,
    add_reflection_note,
    advance_phase,
    allocate_focus,
    begin_session,
    build_session,
    complete_reflection,
    create_session,
    current_phase,
    dismiss_hypothesis,
    flag_moment,
    get_session_result,
    is_at_or_past_halftime,
    is_halftime_phase,
    remove_focus,
    update_hypothesis,
    view_moment,
    view_phase,
)
from scoutbook.core.observation.types import (
    FocusAllocation,
    FocusTokenState,
    Hypothesis,
    HypothesisEvidence,
    MomentView,
    ObservationSession,
    PhaseView,
    PlayerMoment,
    PlayerPoolEntry,
    SessionConfig,
    SessionFlaggedMoment,
    SessionPhase,
    SessionPlayer,
    SessionResult,
    VenueAtmosphere,
)
from scoutbook.core.observation.visibility import PHASE_VISIBLE_ATTRIBUTES, visible_attributes

__all__ = [
    "FocusAllocation",
    "FocusTokenState",
    "GutFeelingCandidate",
    "Hypothesis",
    "HypothesisEvidence",
    "MomentView",
    "ObservationSession",
    "PHASE_VISIBLE_ATTRIBUTES",
    "PhaseView",
    "PlayerMoment",
    "PlayerPoolEntry",
    "ReflectionResult",
    "SessionConfig",
    "SessionFlaggedMoment",
    "SessionPhase",
    "SessionPlayer",
    "SessionResult",
    "SuggestedHypothesis",
    "VenueAtmosphere",
    "accept_hypothesis",
    "add_reflection_note",
    "advance_phase",
    "allocate_focus",
    "begin_session",
    "build_session",
    "complete_reflection",
    "create_session",
    "current_phase",
    "dismiss_hypothesis",
    "flag_moment",
    "get_session_result",
    "is_at_or_past_halftime",
    "is_halftime_phase",
    "lens_effectiveness",
    "lens_skill_boosts",
    "observation_quality",
    "reflect",
    "remove_focus",
    "tokens_per_half",
    "update_hypothesis",
    "view_moment",
    "view_phase",
    "visible_attributes",
]
