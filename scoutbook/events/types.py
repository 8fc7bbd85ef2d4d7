"""Event types for observation sessions."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class SessionEvent:
    """Base class for all session events."""

    timestamp: datetime = field(default_factory=datetime.now)
    session_id: str = ""

    # Session context at time of event
    phase_index: int = 0
    minute: int = 0


@dataclass
class SessionStateChangedEvent(SessionEvent):
    """Fired when a session moves between lifecycle states."""

    from_state: str = ""
    to_state: str = ""


@dataclass
class FocusAllocatedEvent(SessionEvent):
    """Fired when focus is placed on a player or their lens changes."""

    player_id: str = ""
    lens: str = ""
    tokens_remaining: int = 0
    lens_switch: bool = False  # True if the player was already focused


@dataclass
class FocusRemovedEvent(SessionEvent):
    """Fired when focus is taken off a player. Tokens are not refunded."""

    player_id: str = ""


@dataclass
class MomentFlaggedEvent(SessionEvent):
    """Fired when the scout flags a moment."""

    flag_id: str = ""
    moment_id: str = ""
    player_id: str = ""
    reaction: str = ""
    is_standout: bool = False


@dataclass
class PhaseAdvancedEvent(SessionEvent):
    """Fired when the session moves to the next phase."""

    from_phase: int = 0
    to_phase: int = 0
    is_halftime: bool = False


@dataclass
class TokensRefreshedEvent(SessionEvent):
    """Fired when focus tokens are refilled at halftime."""

    available: int = 0
    total: int = 0


@dataclass
class HypothesisAcceptedEvent(SessionEvent):
    """Fired when a hypothesis is added to the session."""

    hypothesis_id: str = ""
    player_id: str = ""
    domain: str = ""
    text: str = ""


@dataclass
class ActionRejectedEvent(SessionEvent):
    """Fired when a session action is refused. The session is unchanged."""

    action: str = ""
    kind: str = ""  # "invalid_transition", "resource_exhausted", ...
    reason: str = ""
    player_id: Optional[str] = None
