"""
Errors raised by the scouting engine.

Every rejected session action raises one of these. A rejection never
mutates the session, so callers can report the reason and carry on.
"""

from typing import Optional


class SessionActionError(Exception):
    """Base exception for rejected scouting actions."""

    def __init__(self, action: str, reason: str, session_id: Optional[str] = None):
        super().__init__(f"{action} rejected: {reason}")
        self.action = action
        self.reason = reason
        self.session_id = session_id

    @property
    def kind(self) -> str:
        """Short error category used by the API layer."""
        return "session_action"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "action": self.action,
            "reason": self.reason,
            "session_id": self.session_id,
        }


class InvalidTransitionError(SessionActionError):
    """Raised when an action is not allowed in the session's current state."""

    @property
    def kind(self) -> str:
        return "invalid_transition"


class ResourceExhaustedError(SessionActionError):
    """Raised when focus tokens or per-phase flags have run out."""

    @property
    def kind(self) -> str:
        return "resource_exhausted"


class NotFoundError(SessionActionError):
    """Raised when a player, moment or hypothesis is not in the session."""

    @property
    def kind(self) -> str:
        return "not_found"


class MalformedInputError(SessionActionError):
    """Raised for input outside its valid domain."""

    @property
    def kind(self) -> str:
        return "malformed_input"
