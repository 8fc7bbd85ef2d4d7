"""Event system for observation sessions."""

from scoutbook.events.bus import EventBus
from scoutbook.events.types import (
    ActionRejectedEvent,
    FocusAllocatedEvent,
    FocusRemovedEvent,
    HypothesisAcceptedEvent,
    MomentFlaggedEvent,
    PhaseAdvancedEvent,
    SessionEvent,
    SessionStateChangedEvent,
    TokensRefreshedEvent,
)

__all__ = [
    "ActionRejectedEvent",
    "EventBus",
    "FocusAllocatedEvent",
    "FocusRemovedEvent",
    "HypothesisAcceptedEvent",
    "MomentFlaggedEvent",
    "PhaseAdvancedEvent",
    "SessionEvent",
    "SessionStateChangedEvent",
    "TokensRefreshedEvent",
]
