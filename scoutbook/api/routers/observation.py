"""
API Router for observation sessions.

Provides endpoints for:
- Creating, starting and discarding sessions
- Allocating focus and flagging moments while phases run
- Reflection, hypotheses and notes once phases are over
- Results, observations and the event log
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import PlainTextResponse

from scoutbook.api.schemas.observation import (
    CreateSessionRequest,
    EvidenceRequest,
    FlagRequest,
    FocusRequest,
    HypothesisRequest,
    NoteRequest,
    ObserveRequest,
    SessionSummary,
)
from scoutbook.api.services import observation_service
from scoutbook.core.errors import SessionActionError

router = APIRouter(prefix="/observation", tags=["observation"])

ERROR_STATUS: dict[str, int] = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "invalid_transition": status.HTTP_409_CONFLICT,
    "resource_exhausted": status.HTTP_409_CONFLICT,
    "malformed_input": status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def _http_error(error: SessionActionError) -> HTTPException:
    return HTTPException(
        status_code=ERROR_STATUS.get(error.kind, status.HTTP_400_BAD_REQUEST),
        detail=error.to_dict(),
    )


@router.post("/sessions", response_model=SessionSummary, status_code=status.HTTP_201_CREATED)
async def create_session(request: CreateSessionRequest):
    """
    Create a new observation session.

    The activity type picks the mode and phase count. Investigation,
    analysis and quick interaction phases are filled up front; full
    observation moments appear as each phase is entered.
    """
    try:
        return observation_service.create(request)
    except SessionActionError as e:
        raise _http_error(e)


@router.get("/sessions", response_model=list[str])
async def list_sessions():
    """List live session ids."""
    return observation_service.list_sessions()


@router.get("/sessions/{session_id}", response_model=SessionSummary)
async def get_session(session_id: str):
    try:
        return observation_service.summarize(observation_service.get_record(session_id).session)
    except SessionActionError as e:
        raise _http_error(e)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def discard_session(session_id: str):
    """Forget a live session."""
    try:
        observation_service.discard(session_id)
    except SessionActionError as e:
        raise _http_error(e)


@router.post("/sessions/{session_id}/begin", response_model=SessionSummary)
async def begin_session(session_id: str):
    try:
        return observation_service.begin(session_id)
    except SessionActionError as e:
        raise _http_error(e)


@router.post("/sessions/{session_id}/focus")
async def allocate_focus(session_id: str, request: FocusRequest) -> dict:
    """Focus a player, or switch lens on a player already focused (free)."""
    try:
        return observation_service.focus(session_id, request.player_id, request.lens)
    except SessionActionError as e:
        raise _http_error(e)


@router.delete("/sessions/{session_id}/focus/{player_id}", response_model=SessionSummary)
async def remove_focus(session_id: str, player_id: str):
    """Take focus off a player. The token is not refunded."""
    try:
        return observation_service.unfocus(session_id, player_id)
    except SessionActionError as e:
        raise _http_error(e)


@router.post("/sessions/{session_id}/flags")
async def flag_moment(session_id: str, request: FlagRequest) -> dict:
    try:
        return observation_service.flag(session_id, request.moment_id, request.reaction, request.note)
    except SessionActionError as e:
        raise _http_error(e)


@router.post("/sessions/{session_id}/advance", response_model=SessionSummary)
async def advance_phase(session_id: str):
    """Move to the next phase, or into reflection after the last one."""
    try:
        return observation_service.advance(session_id)
    except SessionActionError as e:
        raise _http_error(e)


@router.get("/sessions/{session_id}/phase")
async def get_phase(session_id: str, phase_index: Optional[int] = None) -> dict:
    """The current (or given) phase as the scout sees it."""
    try:
        return observation_service.phase(session_id, phase_index)
    except SessionActionError as e:
        raise _http_error(e)


@router.get("/sessions/{session_id}/moments/{moment_id}")
async def get_moment(session_id: str, moment_id: str, phase_index: Optional[int] = None) -> dict:
    try:
        return observation_service.moment(session_id, moment_id, phase_index)
    except SessionActionError as e:
        raise _http_error(e)


@router.post("/sessions/{session_id}/reflection")
async def reflect(session_id: str) -> dict:
    """Summary, suggested hypotheses, prompts and any gut feeling."""
    try:
        return observation_service.reflection(session_id)
    except SessionActionError as e:
        raise _http_error(e)


@router.post("/sessions/{session_id}/hypotheses")
async def accept_hypothesis(session_id: str, request: HypothesisRequest) -> dict:
    try:
        return observation_service.add_hypothesis(
            session_id, request.player_id, request.text, request.domain, request.hypothesis_id
        )
    except SessionActionError as e:
        raise _http_error(e)


@router.delete("/sessions/{session_id}/hypotheses/{hypothesis_id}", response_model=SessionSummary)
async def dismiss_hypothesis(session_id: str, hypothesis_id: str):
    try:
        return observation_service.drop_hypothesis(session_id, hypothesis_id)
    except SessionActionError as e:
        raise _http_error(e)


@router.post("/sessions/{session_id}/hypotheses/{hypothesis_id}/evidence")
async def add_evidence(session_id: str, hypothesis_id: str, request: EvidenceRequest) -> dict:
    try:
        return observation_service.add_evidence(
            session_id, hypothesis_id, request.direction, request.description, request.strength
        )
    except SessionActionError as e:
        raise _http_error(e)


@router.post("/sessions/{session_id}/notes", response_model=SessionSummary)
async def add_note(session_id: str, request: NoteRequest):
    try:
        return observation_service.add_note(session_id, request.note)
    except SessionActionError as e:
        raise _http_error(e)


@router.post("/sessions/{session_id}/complete")
async def complete_session(session_id: str) -> dict:
    """Close reflection and return the session result."""
    try:
        return observation_service.complete(session_id)
    except SessionActionError as e:
        raise _http_error(e)


@router.get("/sessions/{session_id}/result")
async def get_result(session_id: str) -> dict:
    try:
        return observation_service.result(session_id)
    except SessionActionError as e:
        raise _http_error(e)


@router.post("/sessions/{session_id}/observations")
async def observe(session_id: str, request: ObserveRequest) -> list[dict]:
    """Fold the finished session into one observation per focused player."""
    try:
        return observation_service.observe(session_id, request.context)
    except SessionActionError as e:
        raise _http_error(e)


@router.get("/sessions/{session_id}/log")
async def get_log(session_id: str) -> list[dict]:
    try:
        return observation_service.log_entries(session_id)
    except SessionActionError as e:
        raise _http_error(e)


@router.get("/sessions/{session_id}/summary.md", response_class=PlainTextResponse)
async def get_markdown(session_id: str):
    try:
        return observation_service.markdown(session_id)
    except SessionActionError as e:
        raise _http_error(e)
