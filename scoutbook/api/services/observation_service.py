"""
Service layer for observation sessions.

Holds live sessions in memory and translates API requests into engine
actions. Every session publishes on one shared event bus; each session's
log subscribes scoped to that session, so it only records its own events. Engine errors propagate
unchanged; the router maps them onto HTTP status codes.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Optional

from scoutbook.api.schemas.observation import (
    CreateSessionRequest,
    PlayerInput,
    ScoutInput,
    SessionSummary,
)
from scoutbook.config import get_settings
from scoutbook.core.enums import (
    AttributeDomain,
    EvidenceDirection,
    LensType,
    ObservationContext,
    Reaction,
)
from scoutbook.core.errors import InvalidTransitionError, MalformedInputError, NotFoundError
from scoutbook.core.models import Observation, Player, ScoutProfile
from scoutbook.core.observation import (
    ObservationSession,
    PlayerPoolEntry,
    ReflectionResult,
    SessionConfig,
    accept_hypothesis,
    add_reflection_note,
    advance_phase,
    allocate_focus,
    begin_session,
    complete_reflection,
    create_session,
    dismiss_hypothesis,
    flag_moment,
    get_session_result,
    reflect,
    remove_focus,
    update_hypothesis,
    view_moment,
    view_phase,
)
from scoutbook.core.observation.attention import focused_player_ids
from scoutbook.core.perception import observe_session
from scoutbook.events import EventBus
from scoutbook.logging import MarkdownSessionWriter, SessionLog

logger = logging.getLogger(__name__)


@dataclass
class SessionRecord:
    """A live session plus everything the API keeps alongside it."""
    session: ObservationSession
    players: dict[str, Player]
    scout: ScoutProfile
    log: SessionLog = field(default_factory=SessionLog)
    reflection: Optional[ReflectionResult] = None
    observations: list[Observation] = field(default_factory=list)

    @property
    def bus(self) -> EventBus:
        return _bus


# In-memory storage for live sessions
_sessions: dict[str, SessionRecord] = {}
_bus = EventBus()


def _to_player(data: PlayerInput) -> Player:
    return Player(
        id=data.id,
        name=data.name,
        position=data.position,
        age=data.age,
        attributes=dict(data.attributes),
        current_ability=data.current_ability,
        potential_ability=data.potential_ability,
        form=data.form,
    )


def _to_scout(data: Optional[ScoutInput]) -> ScoutProfile:
    if data is None:
        return ScoutProfile()
    try:
        return ScoutProfile.from_dict(data.model_dump())
    except ValueError as e:
        raise MalformedInputError("create_session", f"invalid scout: {e}") from e


def get_record(session_id: str) -> SessionRecord:
    record = _sessions.get(session_id)
    if record is None:
        raise NotFoundError("get_session", f"no session {session_id}", session_id)
    return record


def list_sessions() -> list[str]:
    return list(_sessions.keys())


def discard(session_id: str) -> None:
    """Forget a live session and unhook its log from the bus."""
    get_record(session_id)
    dropped = _bus.drop_session(session_id)
    del _sessions[session_id]
    logger.info(f"Discarded session {session_id} ({dropped} subscriptions dropped)")


def bus_handler_count(session_id: Optional[str] = None) -> int:
    return _bus.handler_count(session_id=session_id)


def clear_sessions() -> None:
    """Drop every live session (shutdown and tests)."""
    _bus.clear()
    _sessions.clear()


def summarize(session: ObservationSession) -> SessionSummary:
    return SessionSummary(
        session_id=session.id,
        mode=session.mode.value,
        state=session.state.value,
        activity_type=session.activity_type,
        current_phase_index=session.current_phase_index,
        total_phases=len(session.phases),
        halftime_index=session.halftime_index,
        tokens_available=session.focus_tokens.available,
        tokens_total=session.focus_tokens.total,
        focused_player_ids=[p.player_id for p in session.players if p.is_focused],
        flag_count=len(session.flagged_moments),
        insight_points_earned=session.insight_points_earned,
    )


def create(request: CreateSessionRequest) -> SessionSummary:
    """Create a session from a roster of players with true values."""
    players = [_to_player(p) for p in request.players]
    config = SessionConfig(
        activity_type=request.activity_type,
        player_pool=[PlayerPoolEntry(p.id, p.name, p.position) for p in players],
        seed=request.seed or uuid.uuid4().hex,
        week=request.week,
        season=request.season,
        venue_type=request.venue_type,
        target_player_id=request.target_player_id,
        activity_instance_id=request.activity_instance_id,
    )
    session = create_session(config)
    if session.id in _sessions:
        raise InvalidTransitionError("create_session", f"session {session.id} already exists", session.id)

    record = SessionRecord(
        session=session,
        players={p.id: p for p in players},
        scout=_to_scout(request.scout),
        log=SessionLog(session.id),
    )
    record.log.connect_to_event_bus(record.bus)
    _sessions[session.id] = record
    logger.info(f"Created session {session.id} ({session.activity_type}, {len(session.phases)} phases)")
    return summarize(session)


def begin(session_id: str) -> SessionSummary:
    record = get_record(session_id)
    begin_session(record.session, bus=record.bus)
    return summarize(record.session)


def focus(session_id: str, player_id: str, lens: LensType) -> dict:
    record = get_record(session_id)
    allocation = allocate_focus(record.session, player_id, lens, bus=record.bus)
    return {
        "allocation": allocation.to_dict(),
        "tokens_available": record.session.focus_tokens.available,
    }


def unfocus(session_id: str, player_id: str) -> SessionSummary:
    record = get_record(session_id)
    remove_focus(record.session, player_id, bus=record.bus)
    return summarize(record.session)


def flag(session_id: str, moment_id: str, reaction: Reaction, note: Optional[str]) -> dict:
    record = get_record(session_id)
    flagged = flag_moment(record.session, moment_id, reaction, note, settings=get_settings(), bus=record.bus)
    return flagged.to_dict()


def advance(session_id: str) -> SessionSummary:
    record = get_record(session_id)
    advance_phase(record.session, settings=get_settings(), bus=record.bus)
    return summarize(record.session)


def phase(session_id: str, phase_index: Optional[int] = None) -> dict:
    return view_phase(get_record(session_id).session, phase_index).to_dict()


def moment(session_id: str, moment_id: str, phase_index: Optional[int] = None) -> dict:
    return view_moment(get_record(session_id).session, moment_id, phase_index).to_dict()


def reflection(session_id: str) -> dict:
    """Run (or re-read) reflection. Deterministic for a given session."""
    record = get_record(session_id)
    record.reflection = reflect(record.session, record.scout, record.players, get_settings())
    return record.reflection.to_dict()


def add_hypothesis(
    session_id: str,
    player_id: str,
    text: str,
    domain: AttributeDomain,
    hypothesis_id: Optional[str] = None,
) -> dict:
    record = get_record(session_id)
    hypothesis = accept_hypothesis(
        record.session, player_id, text, domain, hypothesis_id=hypothesis_id, bus=record.bus
    )
    return hypothesis.to_dict()


def drop_hypothesis(session_id: str, hypothesis_id: str) -> SessionSummary:
    record = get_record(session_id)
    dismiss_hypothesis(record.session, hypothesis_id, bus=record.bus)
    return summarize(record.session)


def add_evidence(
    session_id: str,
    hypothesis_id: str,
    direction: EvidenceDirection,
    description: str,
    strength: str,
) -> dict:
    record = get_record(session_id)
    hypothesis = update_hypothesis(
        record.session, hypothesis_id, direction, description, strength=strength, bus=record.bus
    )
    return hypothesis.to_dict()


def add_note(session_id: str, note: str) -> SessionSummary:
    record = get_record(session_id)
    add_reflection_note(record.session, note, bus=record.bus)
    return summarize(record.session)


def complete(session_id: str) -> dict:
    record = get_record(session_id)
    complete_reflection(record.session, bus=record.bus)
    return get_session_result(record.session).to_dict()


def result(session_id: str) -> dict:
    return get_session_result(get_record(session_id).session).to_dict()


def observe(session_id: str, context: ObservationContext) -> list[dict]:
    """Fold the finished session into observations for each focused player."""
    record = get_record(session_id)
    record.observations = observe_session(record.session, record.players, record.scout, context=context)
    logger.info(
        f"Session {session_id}: {len(record.observations)} observation(s) for "
        f"{len(focused_player_ids(record.session.focus_tokens))} focused player(s)"
    )
    return [o.to_dict() for o in record.observations]


def log_entries(session_id: str) -> list[dict]:
    record = get_record(session_id)
    return [
        {
            "phase_index": e.phase_index,
            "minute": e.minute,
            "event_type": e.event_type,
            "description": e.description,
            "player_id": e.player_id,
        }
        for e in record.log.entries
    ]


def markdown(session_id: str) -> str:
    record = get_record(session_id)
    return MarkdownSessionWriter().generate_summary_string(record.session, record.log, record.reflection)
