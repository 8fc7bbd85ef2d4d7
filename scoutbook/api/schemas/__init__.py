"""Pydantic schemas for API request/response models."""

from scoutbook.api.schemas.observation import (
    CreateSessionRequest,
    ErrorDetail,
    EvidenceRequest,
    FlagRequest,
    FocusRequest,
    HypothesisRequest,
    NoteRequest,
    ObserveRequest,
    PlayerInput,
    ScoutInput,
    SessionSummary,
)

__all__ = [
    "CreateSessionRequest",
    "ErrorDetail",
    "EvidenceRequest",
    "FlagRequest",
    "FocusRequest",
    "HypothesisRequest",
    "NoteRequest",
    "ObserveRequest",
    "PlayerInput",
    "ScoutInput",
    "SessionSummary",
]
