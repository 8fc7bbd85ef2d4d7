"""Enumerations for observation sessions."""

from enum import Enum

from scoutbook.core.enums.attributes import AttributeDomain


class ObservationMode(Enum):
    """The four interactive session modes."""

    FULL_OBSERVATION = "fullObservation"  # Live watching with focus tokens
    INVESTIGATION = "investigation"  # Dialogue-driven
    ANALYSIS = "analysis"  # Data exploration
    QUICK_INTERACTION = "quickInteraction"  # Single strategic choice


class SessionState(Enum):
    """Lifecycle states of an observation session."""

    SETUP = "setup"
    ACTIVE = "active"
    REFLECTION = "reflection"
    COMPLETE = "complete"


class Reaction(Enum):
    """A scout's immediate reaction to a flagged moment."""

    PROMISING = "promising"
    CONCERNING = "concerning"
    INTERESTING = "interesting"
    NEEDS_MORE_DATA = "needs_more_data"


class MomentType(Enum):
    """Categories of observable moments."""

    TECHNICAL_ACTION = "technicalAction"
    PHYSICAL_TEST = "physicalTest"
    MENTAL_RESPONSE = "mentalResponse"
    TACTICAL_DECISION = "tacticalDecision"
    CHARACTER_REVEAL = "characterReveal"

    @property
    def domain(self) -> AttributeDomain:
        return MOMENT_TYPE_DOMAINS[self]


MOMENT_TYPE_DOMAINS: dict[MomentType, AttributeDomain] = {
    MomentType.TECHNICAL_ACTION: AttributeDomain.TECHNICAL,
    MomentType.PHYSICAL_TEST: AttributeDomain.PHYSICAL,
    MomentType.MENTAL_RESPONSE: AttributeDomain.MENTAL,
    MomentType.TACTICAL_DECISION: AttributeDomain.TACTICAL,
    MomentType.CHARACTER_REVEAL: AttributeDomain.HIDDEN,
}


class PhaseType(Enum):
    """Match phase types. Each exposes a natural set of attributes."""

    BUILD_UP = "buildUp"
    TRANSITION = "transition"
    SET_PIECE = "setPiece"
    PRESSING_SEQUENCE = "pressingSequence"
    COUNTER_ATTACK = "counterAttack"
    POSSESSION = "possession"


class ObservationContext(Enum):
    """Where an observation was made. Affects perception noise."""

    LIVE_MATCH = "liveMatch"
    VIDEO_ANALYSIS = "videoAnalysis"
    TRAINING_GROUND = "trainingGround"
    YOUTH_TOURNAMENT = "youthTournament"
    ACADEMY_VISIT = "academyVisit"


class HypothesisState(Enum):
    """Resolution state of a working hypothesis."""

    OPEN = "open"
    SUPPORTED = "supported"
    CONTRADICTED = "contradicted"
    CONFIRMED = "confirmed"
    DEBUNKED = "debunked"

    @property
    def is_resolved(self) -> bool:
        return self in (HypothesisState.CONFIRMED, HypothesisState.DEBUNKED)


class EvidenceDirection(Enum):
    """Whether evidence supports or contradicts a hypothesis."""

    FOR = "for"
    AGAINST = "against"
