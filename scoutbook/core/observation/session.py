"""
Observation session state machine.

    setup -> active -> reflection -> complete

Every action takes the owned ObservationSession explicitly and mutates it
in place. Actions validate everything before touching the session; a
rejected action raises a SessionActionError subclass and leaves the session
exactly as it was, so the caller can report the reason and carry on.

When an EventBus is passed in, successful actions publish what changed and
rejected actions publish an ActionRejectedEvent.
"""

import logging
import random
import uuid
from typing import Optional

from scoutbook.config import ObservationSettings, get_settings
from scoutbook.core.enums import (
    AttributeDomain,
    EvidenceDirection,
    HypothesisState,
    LensType,
    ObservationMode,
    Reaction,
    SessionState,
)
from scoutbook.core.errors import (
    InvalidTransitionError,
    MalformedInputError,
    NotFoundError,
    ResourceExhaustedError,
    SessionActionError,
)
from scoutbook.core.observation.attention import (
    create_focus_token_state,
    focused_player_ids,
)
from scoutbook.core.observation.content import (
    populate_analysis_phases,
    populate_investigation_phases,
    populate_quick_interaction_phases,
)
from scoutbook.core.observation.moments import create_venue_atmosphere, generate_moments, populate_phases
from scoutbook.core.observation.types import (
    FocusAllocation,
    Hypothesis,
    HypothesisEvidence,
    MomentView,
    ObservationSession,
    PhaseView,
    SessionConfig,
    SessionFlaggedMoment,
    SessionPhase,
    SessionPlayer,
    SessionResult,
    VenueAtmosphere,
)
from scoutbook.core.observation.visibility import moment_view, phase_view
from scoutbook.events import (
    ActionRejectedEvent,
    EventBus,
    FocusAllocatedEvent,
    FocusRemovedEvent,
    HypothesisAcceptedEvent,
    MomentFlaggedEvent,
    PhaseAdvancedEvent,
    SessionStateChangedEvent,
    TokensRefreshedEvent,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

ACTIVITY_MODE_MAP: dict[str, ObservationMode] = {
    # Full observation
    "schoolMatch": ObservationMode.FULL_OBSERVATION,
    "grassrootsTournament": ObservationMode.FULL_OBSERVATION,
    "streetFootball": ObservationMode.FULL_OBSERVATION,
    "academyTrialDay": ObservationMode.FULL_OBSERVATION,
    "youthFestival": ObservationMode.FULL_OBSERVATION,
    "attendMatch": ObservationMode.FULL_OBSERVATION,
    "reserveMatch": ObservationMode.FULL_OBSERVATION,
    "trainingVisit": ObservationMode.FULL_OBSERVATION,
    "trialMatch": ObservationMode.FULL_OBSERVATION,
    # Investigation
    "followUpSession": ObservationMode.INVESTIGATION,
    "parentCoachMeeting": ObservationMode.INVESTIGATION,
    "networkMeeting": ObservationMode.INVESTIGATION,
    # Analysis
    "databaseQuery": ObservationMode.ANALYSIS,
    "watchVideo": ObservationMode.ANALYSIS,
    "deepVideoAnalysis": ObservationMode.ANALYSIS,
    # Quick interaction
    "statsBriefing": ObservationMode.QUICK_INTERACTION,
    "assignTerritory": ObservationMode.QUICK_INTERACTION,
}

# (min, max) phase count per activity
VENUE_PHASE_RANGES: dict[str, tuple[int, int]] = {
    "schoolMatch": (8, 12),
    "grassrootsTournament": (10, 14),
    "streetFootball": (6, 8),
    "academyTrialDay": (8, 10),
    "youthFestival": (10, 14),
    "attendMatch": (12, 18),
    "reserveMatch": (8, 12),
    "trainingVisit": (6, 8),
    "trialMatch": (8, 12),
    "followUpSession": (4, 6),
    "parentCoachMeeting": (3, 5),
    "networkMeeting": (3, 5),
    "databaseQuery": (3, 5),
    "watchVideo": (6, 8),
    "deepVideoAnalysis": (8, 10),
    "statsBriefing": (2, 3),
    "assignTerritory": (2, 3),
}
DEFAULT_PHASE_RANGE = (4, 8)

MATCH_MINUTES = 90

# Insight points
IP_PER_FLAGGED_MOMENT = 5
IP_PER_HYPOTHESIS_RESOLVED = 10
IP_PER_REFLECTION_NOTE = 3

# Evidence needed to move a hypothesis
EVIDENCE_TO_LEAN = 2  # supported / contradicted
EVIDENCE_TO_RESOLVE = 3  # confirmed / debunked

# Minimum insight points per phase for each quality tier
QUALITY_TIERS: list[tuple[float, str]] = [
    (12, "exceptional"),
    (8, "excellent"),
    (5, "good"),
    (2, "average"),
]


# =============================================================================
# Internal helpers
# =============================================================================

def make_id(seed: str, suffix: str) -> str:
    """Deterministic id: the same seed and suffix always give the same id."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"scoutbook:{seed}:{suffix}"))


def _context(session: ObservationSession) -> dict:
    phase = session.current_phase
    return {
        "session_id": session.id,
        "phase_index": session.current_phase_index,
        "minute": phase.minute if phase else 0,
    }


def _rejection(
    session: ObservationSession,
    error: SessionActionError,
    bus: Optional[EventBus] = None,
    player_id: Optional[str] = None,
) -> SessionActionError:
    """Log and publish a rejected action. The caller raises the returned error."""
    error.session_id = session.id
    logger.debug(f"Session {session.id}: {error}")
    if bus is not None:
        bus.emit(ActionRejectedEvent(
            **_context(session),
            action=error.action,
            kind=error.kind,
            reason=error.reason,
            player_id=player_id,
        ))
    return error


def _require_state(
    session: ObservationSession,
    expected: SessionState,
    action: str,
    bus: Optional[EventBus] = None,
) -> None:
    if session.state != expected:
        raise _rejection(
            session,
            InvalidTransitionError(
                action, f"session is {session.state.value}, expected {expected.value}"
            ),
            bus,
        )


def _change_state(
    session: ObservationSession,
    new_state: SessionState,
    bus: Optional[EventBus],
) -> None:
    old_state = session.state
    session.state = new_state
    logger.debug(f"Session {session.id}: {old_state.value} -> {new_state.value}")
    if bus is not None:
        bus.emit(SessionStateChangedEvent(
            **_context(session),
            from_state=old_state.value,
            to_state=new_state.value,
        ))


def _open_allocation(session: ObservationSession, player_id: str) -> Optional[FocusAllocation]:
    """The allocation currently running for a focused player."""
    for allocation in reversed(session.focus_tokens.allocations):
        if allocation.player_id == player_id:
            return allocation
    return None


def _enter_phase(session: ObservationSession, index: int) -> None:
    """Generate a phase's moments on entry, weighted towards the current focus."""
    phase = session.phases[index]
    if session.moment_venue_type is None or phase.moments:
        return
    rng = random.Random(f"{session.id}:moments:{index}")
    phase.moments = generate_moments(
        rng,
        session.players,
        session.moment_venue_type,
        index,
        len(session.phases),
        session.venue_atmosphere,
    )
    logger.debug(f"Session {session.id}: {len(phase.moments)} moments in phase {index}")


def _phase_minute(index: int, phase_count: int, mode: ObservationMode) -> int:
    # Full observation maps onto a 90 minute match; other modes count steps
    if mode == ObservationMode.FULL_OBSERVATION:
        if phase_count <= 1:
            return 0
        return int(round(index / (phase_count - 1) * MATCH_MINUTES))
    return index + 1


def _halftime_index(phase_count: int, mode: ObservationMode) -> Optional[int]:
    """Halftime only exists in full observation sessions of 3+ phases."""
    if mode != ObservationMode.FULL_OBSERVATION or phase_count < 3:
        return None
    return phase_count // 2


def _mark_halftime(phases: list[SessionPhase], halftime_index: Optional[int]) -> None:
    for phase in phases:
        phase.is_halftime = phase.index == halftime_index


def _build_players(config: SessionConfig) -> list[SessionPlayer]:
    players = [
        SessionPlayer(player_id=entry.player_id, name=entry.name, position=entry.position)
        for entry in config.player_pool
    ]
    # Target player always leads the roster
    if config.target_player_id:
        for i, player in enumerate(players):
            if player.player_id == config.target_player_id:
                players.insert(0, players.pop(i))
                break
    return players


def _validate_roster(action: str, player_ids: list[str]) -> None:
    if len(set(player_ids)) != len(player_ids):
        raise MalformedInputError(action, "duplicate player ids in roster")


# =============================================================================
# Construction
# =============================================================================

def create_session(
    config: SessionConfig,
    rng: Optional[random.Random] = None,
) -> ObservationSession:
    """
    Create a new session in setup state.

    The phase count is drawn from the activity's range, halftime is marked
    for full observation and tokens are granted per mode. Phases are filled
    with the mode's content: dialogue for investigation, data points for
    analysis and strategic choices for quick interaction. Full observation
    phases get their type, description and atmosphere here; their moments
    are generated as each phase is entered.

    Args:
        config: Activity, roster and seed
        rng: Random source (defaults to one seeded from config.seed)

    Raises:
        MalformedInputError: empty or duplicate roster, unknown target player
    """
    if not config.player_pool:
        raise MalformedInputError("create_session", "player pool is empty")
    pool_ids = [entry.player_id for entry in config.player_pool]
    _validate_roster("create_session", pool_ids)
    if config.target_player_id and config.target_player_id not in pool_ids:
        raise MalformedInputError(
            "create_session", f"target player {config.target_player_id} is not in the pool"
        )

    rng = rng or random.Random(config.seed)
    mode = ACTIVITY_MODE_MAP.get(config.activity_type, ObservationMode.FULL_OBSERVATION)

    low, high = VENUE_PHASE_RANGES.get(config.activity_type, DEFAULT_PHASE_RANGE)
    phase_count = rng.randint(low, high)
    phases = [
        SessionPhase(index=i, minute=_phase_minute(i, phase_count, mode))
        for i in range(phase_count)
    ]
    halftime_index = _halftime_index(phase_count, mode)
    _mark_halftime(phases, halftime_index)

    if config.activity_instance_id:
        identity = f"instance-{config.activity_instance_id}"
    else:
        identity = f"session-{config.week}-{config.season}"

    session_id = make_id(config.seed, identity)
    players = _build_players(config)

    atmosphere = config.venue_atmosphere
    venue_type = None
    if mode == ObservationMode.FULL_OBSERVATION:
        venue_type = config.venue_type or config.activity_type
        if atmosphere is None:
            atmosphere = create_venue_atmosphere(rng, venue_type)
        populate_phases(rng, phases)
    elif mode == ObservationMode.INVESTIGATION:
        populate_investigation_phases(rng, phases, players, config.activity_type)
    elif mode == ObservationMode.ANALYSIS:
        populate_analysis_phases(rng, phases, players, config.activity_type)
    else:
        populate_quick_interaction_phases(rng, phases, config.activity_type, session_id)

    session = ObservationSession(
        id=session_id,
        mode=mode,
        activity_type=config.activity_type,
        phases=phases,
        players=players,
        focus_tokens=create_focus_token_state(mode),
        venue_atmosphere=atmosphere,
        halftime_index=halftime_index,
        started_at_week=config.week,
        started_at_season=config.season,
        activity_instance_id=config.activity_instance_id,
        moment_venue_type=venue_type,
    )
    logger.debug(
        f"Created session {session.id}: {mode.value}, {phase_count} phases, "
        f"{len(players)} players"
    )
    return session


def build_session(
    session_id: str,
    mode: ObservationMode,
    phases: list[SessionPhase],
    players: list[SessionPlayer],
    activity_type: str = "custom",
    venue_atmosphere: Optional[VenueAtmosphere] = None,
    week: int = 1,
    season: int = 1,
) -> ObservationSession:
    """
    Assemble a setup-state session from caller-supplied phases.

    Phases are re-indexed in list order and halftime is marked the same way
    create_session does it.
    """
    _validate_roster("build_session", [p.player_id for p in players])
    for i, phase in enumerate(phases):
        phase.index = i
    halftime_index = _halftime_index(len(phases), mode)
    _mark_halftime(phases, halftime_index)

    return ObservationSession(
        id=session_id,
        mode=mode,
        activity_type=activity_type,
        phases=phases,
        players=players,
        focus_tokens=create_focus_token_state(mode),
        venue_atmosphere=venue_atmosphere,
        halftime_index=halftime_index,
        started_at_week=week,
        started_at_season=season,
    )


# =============================================================================
# Active phase actions
# =============================================================================

def begin_session(session: ObservationSession, bus: Optional[EventBus] = None) -> None:
    """setup -> active, starting at phase 0."""
    _require_state(session, SessionState.SETUP, "begin", bus)
    if not session.phases:
        raise _rejection(session, InvalidTransitionError("begin", "session has no phases"), bus)

    session.current_phase_index = 0
    _enter_phase(session, 0)
    _change_state(session, SessionState.ACTIVE, bus)


def allocate_focus(
    session: ObservationSession,
    player_id: str,
    lens: LensType,
    bus: Optional[EventBus] = None,
) -> FocusAllocation:
    """
    Focus on a player through a lens.

    A new focus costs one token. Switching the lens on a player already
    under focus is free but restarts the lens warm-up.

    Raises:
        InvalidTransitionError: session not active, or same lens already on
        NotFoundError: player not in the roster
        ResourceExhaustedError: no tokens left for a new focus
    """
    action = "allocate_focus"
    _require_state(session, SessionState.ACTIVE, action, bus)

    player = session.get_player(player_id)
    if player is None:
        raise _rejection(
            session, NotFoundError(action, f"player {player_id} is not in the session"), bus, player_id
        )

    tokens = session.focus_tokens
    lens_switch = player.is_focused
    if lens_switch and player.current_lens == lens:
        raise _rejection(
            session,
            InvalidTransitionError(action, f"player {player_id} already focused with {lens.value} lens"),
            bus,
            player_id,
        )
    if not lens_switch and tokens.available <= 0:
        raise _rejection(
            session, ResourceExhaustedError(action, "no focus tokens available"), bus, player_id
        )

    phase_index = session.current_phase_index
    allocation = FocusAllocation(player_id=player_id, lens=lens, start_phase=phase_index)
    if not lens_switch:
        tokens.available -= 1
    tokens.allocations.append(allocation)

    player.is_focused = True
    player.current_lens = lens
    if phase_index not in player.focused_phases:
        player.focused_phases.append(phase_index)

    if bus is not None:
        bus.emit(FocusAllocatedEvent(
            **_context(session),
            player_id=player_id,
            lens=lens.value,
            tokens_remaining=tokens.available,
            lens_switch=lens_switch,
        ))
    return allocation


def remove_focus(
    session: ObservationSession,
    player_id: str,
    bus: Optional[EventBus] = None,
) -> None:
    """Take focus off a player. The token is not refunded."""
    action = "remove_focus"
    _require_state(session, SessionState.ACTIVE, action, bus)

    player = session.get_player(player_id)
    if player is None:
        raise _rejection(
            session, NotFoundError(action, f"player {player_id} is not in the session"), bus, player_id
        )
    if not player.is_focused:
        raise _rejection(
            session, InvalidTransitionError(action, f"player {player_id} is not focused"), bus, player_id
        )

    player.is_focused = False
    player.current_lens = None

    if bus is not None:
        bus.emit(FocusRemovedEvent(**_context(session), player_id=player_id))


def flag_moment(
    session: ObservationSession,
    moment_id: str,
    reaction: Reaction,
    note: Optional[str] = None,
    settings: Optional[ObservationSettings] = None,
    bus: Optional[EventBus] = None,
) -> SessionFlaggedMoment:
    """
    Flag a moment in the current phase with a reaction.

    Raises:
        InvalidTransitionError: session not active, or moment already flagged
        ResourceExhaustedError: flag limit for this phase reached
        NotFoundError: moment is not in the current phase
    """
    action = "flag_moment"
    settings = settings or get_settings()
    _require_state(session, SessionState.ACTIVE, action, bus)

    phase_index = session.current_phase_index
    flags_this_phase = [f for f in session.flagged_moments if f.phase_index == phase_index]
    if len(flags_this_phase) >= settings.flags_per_phase:
        raise _rejection(
            session,
            ResourceExhaustedError(
                action, f"already flagged {len(flags_this_phase)} moment(s) this phase"
            ),
            bus,
        )

    phase = session.phases[phase_index]
    moment = phase.find_moment(moment_id)
    if moment is None:
        raise _rejection(
            session, NotFoundError(action, f"moment {moment_id} is not in phase {phase_index}"), bus
        )
    if any(f.moment.id == moment_id for f in flags_this_phase):
        raise _rejection(
            session, InvalidTransitionError(action, f"moment {moment_id} already flagged"), bus
        )

    flagged = SessionFlaggedMoment(
        id=make_id(session.id, f"flag-{phase_index}-{moment_id}"),
        phase_index=phase_index,
        moment=moment,
        reaction=reaction,
        minute=phase.minute,
        note=note.strip() if note and note.strip() else None,
    )
    session.flagged_moments.append(flagged)
    session.insight_points_earned += IP_PER_FLAGGED_MOMENT

    if bus is not None:
        bus.emit(MomentFlaggedEvent(
            **_context(session),
            flag_id=flagged.id,
            moment_id=moment_id,
            player_id=moment.player_id,
            reaction=reaction.value,
            is_standout=moment.is_standout,
        ))
    return flagged


def advance_phase(
    session: ObservationSession,
    settings: Optional[ObservationSettings] = None,
    bus: Optional[EventBus] = None,
) -> None:
    """
    Move to the next phase, or into reflection from the final phase.

    Running focus carries into the next phase. Tokens refill on entering the
    halftime phase when settings.refill_tokens_at_halftime is on.
    """
    settings = settings or get_settings()
    _require_state(session, SessionState.ACTIVE, "advance_phase", bus)

    if session.is_final_phase:
        _change_state(session, SessionState.REFLECTION, bus)
        return

    from_phase = session.current_phase_index
    next_index = from_phase + 1
    tokens = session.focus_tokens

    for player in session.players:
        if not player.is_focused:
            continue
        allocation = _open_allocation(session, player.player_id)
        if allocation is not None:
            allocation.phases_active += 1
        if next_index not in player.focused_phases:
            player.focused_phases.append(next_index)

    session.current_phase_index = next_index
    _enter_phase(session, next_index)

    if bus is not None:
        bus.emit(PhaseAdvancedEvent(
            **_context(session),
            from_phase=from_phase,
            to_phase=next_index,
            is_halftime=is_halftime_phase(session, next_index),
        ))

    if is_halftime_phase(session, next_index) and settings.refill_tokens_at_halftime:
        tokens.available = tokens.total
        logger.debug(f"Session {session.id}: focus tokens refreshed at halftime")
        if bus is not None:
            bus.emit(TokensRefreshedEvent(
                **_context(session), available=tokens.available, total=tokens.total
            ))


# =============================================================================
# Reflection actions
# =============================================================================

def group_flags(
    session: ObservationSession,
) -> dict[tuple[str, AttributeDomain], list[SessionFlaggedMoment]]:
    """Flags grouped by (player, domain), in first-flag order."""
    groups: dict[tuple[str, AttributeDomain], list[SessionFlaggedMoment]] = {}
    for flag in session.flagged_moments:
        key = (flag.moment.player_id, flag.moment.domain)
        groups.setdefault(key, []).append(flag)
    return groups


def suggestion_id(session_id: str, player_id: str, domain: AttributeDomain) -> str:
    return make_id(session_id, f"suggest-{player_id}-{domain.value}")


def supports_suggestion(flags: list[SessionFlaggedMoment]) -> bool:
    """Two or more flags, or a single standout, back a suggested hypothesis."""
    return len(flags) >= 2 or any(f.moment.is_standout for f in flags)


def open_suggestion_ids(session: ObservationSession) -> set[str]:
    """Ids of suggestions the flags support for pairs the session does not hold yet."""
    held = {(h.player_id, h.domain) for h in session.hypotheses}
    return {
        suggestion_id(session.id, player_id, domain)
        for (player_id, domain), flags in group_flags(session).items()
        if supports_suggestion(flags) and (player_id, domain) not in held
    }


def accept_hypothesis(
    session: ObservationSession,
    player_id: str,
    text: str,
    domain: AttributeDomain,
    week: Optional[int] = None,
    hypothesis_id: Optional[str] = None,
    bus: Optional[EventBus] = None,
) -> Hypothesis:
    """
    Add a hypothesis to the session, usually one suggested by reflection.

    Pass the suggestion's id as hypothesis_id so later reflections know it
    has been taken up.
    """
    action = "accept_hypothesis"
    _require_state(session, SessionState.REFLECTION, action, bus)

    if session.get_player(player_id) is None:
        raise _rejection(
            session, NotFoundError(action, f"player {player_id} is not in the session"), bus, player_id
        )
    text = (text or "").strip()
    if not text:
        raise _rejection(session, MalformedInputError(action, "hypothesis text is empty"), bus, player_id)

    hypothesis_id = hypothesis_id or make_id(
        session.id, f"hyp-{player_id}-{len(session.hypotheses)}"
    )
    if session.get_hypothesis(hypothesis_id) is not None:
        raise _rejection(
            session,
            InvalidTransitionError(action, f"hypothesis {hypothesis_id} already accepted"),
            bus,
            player_id,
        )
    if hypothesis_id in session.dismissed_hypothesis_ids:
        raise _rejection(
            session,
            InvalidTransitionError(action, f"hypothesis {hypothesis_id} was dismissed"),
            bus,
            player_id,
        )

    hypothesis = Hypothesis(
        id=hypothesis_id,
        player_id=player_id,
        text=text,
        domain=domain,
        created_at_week=week if week is not None else session.started_at_week,
    )
    session.hypotheses.append(hypothesis)

    if bus is not None:
        bus.emit(HypothesisAcceptedEvent(
            **_context(session),
            hypothesis_id=hypothesis.id,
            player_id=player_id,
            domain=domain.value,
            text=text,
        ))
    return hypothesis


def dismiss_hypothesis(
    session: ObservationSession,
    hypothesis_id: str,
    bus: Optional[EventBus] = None,
) -> None:
    """
    Dismiss a suggested (or previously accepted) hypothesis.

    Raises:
        InvalidTransitionError: not in reflection, or already dismissed
        MalformedInputError: empty id
        NotFoundError: id is neither a held hypothesis nor a current suggestion
    """
    action = "dismiss_hypothesis"
    _require_state(session, SessionState.REFLECTION, action, bus)

    if not hypothesis_id:
        raise _rejection(session, MalformedInputError(action, "hypothesis id is empty"), bus)
    if hypothesis_id in session.dismissed_hypothesis_ids:
        raise _rejection(
            session, InvalidTransitionError(action, f"hypothesis {hypothesis_id} already dismissed"), bus
        )
    if session.get_hypothesis(hypothesis_id) is None and hypothesis_id not in open_suggestion_ids(session):
        raise _rejection(
            session, NotFoundError(action, f"no hypothesis or suggestion {hypothesis_id}"), bus
        )

    session.hypotheses = [h for h in session.hypotheses if h.id != hypothesis_id]
    session.dismissed_hypothesis_ids.append(hypothesis_id)


def update_hypothesis(
    session: ObservationSession,
    hypothesis_id: str,
    direction: EvidenceDirection,
    description: str,
    week: Optional[int] = None,
    strength: str = "moderate",
    bus: Optional[EventBus] = None,
) -> Hypothesis:
    """
    Add evidence to a hypothesis and recompute its state.

    3 for -> confirmed, 3 against -> debunked, 2 for -> supported,
    2 against -> contradicted, otherwise open. Resolving a hypothesis
    earns insight points; resolved hypotheses take no more evidence.
    """
    action = "update_hypothesis"
    _require_state(session, SessionState.REFLECTION, action, bus)

    hypothesis = session.get_hypothesis(hypothesis_id)
    if hypothesis is None:
        raise _rejection(session, NotFoundError(action, f"hypothesis {hypothesis_id} not found"), bus)
    if hypothesis.state.is_resolved:
        raise _rejection(
            session,
            InvalidTransitionError(action, f"hypothesis is already {hypothesis.state.value}"),
            bus,
        )
    description = (description or "").strip()
    if not description:
        raise _rejection(session, MalformedInputError(action, "evidence description is empty"), bus)

    hypothesis.evidence.append(HypothesisEvidence(
        week=week if week is not None else session.started_at_week,
        direction=direction,
        description=description,
        strength=strength,
    ))

    for_count = sum(1 for e in hypothesis.evidence if e.direction == EvidenceDirection.FOR)
    against_count = len(hypothesis.evidence) - for_count
    if for_count >= EVIDENCE_TO_RESOLVE:
        hypothesis.state = HypothesisState.CONFIRMED
    elif against_count >= EVIDENCE_TO_RESOLVE:
        hypothesis.state = HypothesisState.DEBUNKED
    elif for_count >= EVIDENCE_TO_LEAN:
        hypothesis.state = HypothesisState.SUPPORTED
    elif against_count >= EVIDENCE_TO_LEAN:
        hypothesis.state = HypothesisState.CONTRADICTED
    else:
        hypothesis.state = HypothesisState.OPEN

    if hypothesis.state.is_resolved:
        session.insight_points_earned += IP_PER_HYPOTHESIS_RESOLVED
    return hypothesis


def add_reflection_note(
    session: ObservationSession,
    note: str,
    bus: Optional[EventBus] = None,
) -> None:
    """Append a free-text note. Blank notes are rejected."""
    action = "add_reflection_note"
    _require_state(session, SessionState.REFLECTION, action, bus)

    trimmed = (note or "").strip()
    if not trimmed:
        raise _rejection(session, MalformedInputError(action, "note is empty"), bus)

    session.reflection_notes.append(trimmed)
    session.insight_points_earned += IP_PER_REFLECTION_NOTE


def complete_reflection(session: ObservationSession, bus: Optional[EventBus] = None) -> None:
    """reflection -> complete. The session is immutable afterwards."""
    _require_state(session, SessionState.REFLECTION, "complete_reflection", bus)
    _change_state(session, SessionState.COMPLETE, bus)


# =============================================================================
# Queries
# =============================================================================

def is_halftime_phase(session: ObservationSession, phase_index: int) -> bool:
    """True if phase_index is the session's halftime phase."""
    return session.halftime_index is not None and phase_index == session.halftime_index


def is_at_or_past_halftime(session: ObservationSession, phase_index: Optional[int] = None) -> bool:
    """
    True if the phase (default: current) is at or beyond halftime.

    Sessions without a halftime are never past it.
    """
    if session.halftime_index is None:
        return False
    if phase_index is None:
        phase_index = session.current_phase_index
    return phase_index >= session.halftime_index


def current_phase(session: ObservationSession) -> SessionPhase:
    phase = session.current_phase
    if phase is None:
        raise NotFoundError("current_phase", "session has no phases", session.id)
    return phase


def _phase_at(session: ObservationSession, phase_index: Optional[int], action: str) -> SessionPhase:
    if phase_index is None:
        return current_phase(session)
    if not 0 <= phase_index < len(session.phases):
        raise NotFoundError(action, f"phase {phase_index} out of range", session.id)
    return session.phases[phase_index]


def view_moment(
    session: ObservationSession,
    moment_id: str,
    phase_index: Optional[int] = None,
) -> MomentView:
    """
    A moment as the scout currently sees it.

    Unfocused players show the vague description and no hints; focused
    players show the detailed description and lens-driven hints.
    """
    phase = _phase_at(session, phase_index, "view_moment")
    moment = phase.find_moment(moment_id)
    if moment is None:
        raise NotFoundError("view_moment", f"moment {moment_id} is not in phase {phase.index}", session.id)
    return moment_view(moment, phase, session.get_player(moment.player_id))


def view_phase(session: ObservationSession, phase_index: Optional[int] = None) -> PhaseView:
    return phase_view(_phase_at(session, phase_index, "view_phase"), session.players)


def quality_tier(insight_points: int, phases_completed: int) -> str:
    """Session quality from insight points per completed phase."""
    per_phase = insight_points / phases_completed if phases_completed > 0 else 0.0
    for threshold, tier in QUALITY_TIERS:
        if per_phase >= threshold:
            return tier
    return "poor"


def phases_completed(session: ObservationSession) -> int:
    if session.state in (SessionState.REFLECTION, SessionState.COMPLETE):
        return len(session.phases)
    if session.state == SessionState.SETUP:
        return 0
    return session.current_phase_index + 1


def get_session_result(session: ObservationSession) -> SessionResult:
    """
    Summarise the session for reporting and progression.

    Not gated on state, so previews can be taken mid-session.
    """
    completed = phases_completed(session)
    return SessionResult(
        session_id=session.id,
        mode=session.mode,
        activity_type=session.activity_type,
        flagged_moments=list(session.flagged_moments),
        hypotheses=list(session.hypotheses),
        insight_points_earned=session.insight_points_earned,
        reflection_notes=list(session.reflection_notes),
        quality_tier=quality_tier(session.insight_points_earned, completed),
        phases_completed=completed,
        total_phases=len(session.phases),
        focused_player_ids=focused_player_ids(session.focus_tokens),
    )
