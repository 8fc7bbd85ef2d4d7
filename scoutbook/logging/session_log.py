"""In-memory session log for accumulating observation events."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

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


@dataclass
class LogEntry:
    """Single entry in the session log."""

    timestamp: datetime
    phase_index: int
    minute: int
    event_type: str  # "STATE", "FOCUS", "UNFOCUS", "FLAG", "PHASE", "REFILL", "HYPOTHESIS", "REJECTED"
    description: str
    player_id: Optional[str] = None


@dataclass
class PlayerFocusStats:
    """Accumulated attention spent on one player."""

    player_id: str
    allocations: int = 0
    lens_switches: int = 0
    removals: int = 0
    flags: int = 0
    standout_flags: int = 0
    lenses: list[str] = field(default_factory=list)


class SessionLog:
    """
    In-memory accumulator for session events.

    Subscribes to an EventBus and keeps a chronological record plus
    per-player focus statistics. Feeds the markdown writer.
    """

    def __init__(self, session_id: str = "") -> None:
        self.session_id = session_id
        self.entries: list[LogEntry] = []
        self.player_stats: dict[str, PlayerFocusStats] = {}
        self.rejections: list[ActionRejectedEvent] = []
        self.tokens_spent: int = 0
        self.refills: int = 0

    def connect_to_event_bus(self, event_bus: EventBus) -> None:
        """
        Subscribe to events from an event bus.

        A log bound to a session id only hears that session; an unbound log
        records every session on the bus.
        """
        scope = self.session_id or None
        event_bus.subscribe(SessionStateChangedEvent, self._handle_state_changed, scope)
        event_bus.subscribe(FocusAllocatedEvent, self._handle_focus_allocated, scope)
        event_bus.subscribe(FocusRemovedEvent, self._handle_focus_removed, scope)
        event_bus.subscribe(MomentFlaggedEvent, self._handle_moment_flagged, scope)
        event_bus.subscribe(PhaseAdvancedEvent, self._handle_phase_advanced, scope)
        event_bus.subscribe(TokensRefreshedEvent, self._handle_tokens_refreshed, scope)
        event_bus.subscribe(HypothesisAcceptedEvent, self._handle_hypothesis_accepted, scope)
        event_bus.subscribe(ActionRejectedEvent, self._handle_rejected, scope)

    def _stats_for(self, player_id: str) -> PlayerFocusStats:
        if player_id not in self.player_stats:
            self.player_stats[player_id] = PlayerFocusStats(player_id=player_id)
        return self.player_stats[player_id]

    def add_entry(
        self,
        phase_index: int,
        minute: int,
        event_type: str,
        description: str,
        player_id: Optional[str] = None,
    ) -> None:
        """Add a log entry manually."""
        self.entries.append(LogEntry(
            timestamp=datetime.now(),
            phase_index=phase_index,
            minute=minute,
            event_type=event_type,
            description=description,
            player_id=player_id,
        ))

    def _handle_state_changed(self, event: SessionStateChangedEvent) -> None:
        self.add_entry(
            event.phase_index, event.minute, "STATE",
            f"Session {event.from_state} -> {event.to_state}",
        )

    def _handle_focus_allocated(self, event: FocusAllocatedEvent) -> None:
        stats = self._stats_for(event.player_id)
        stats.lenses.append(event.lens)
        if event.lens_switch:
            stats.lens_switches += 1
            description = f"Switched lens on {event.player_id} to {event.lens}"
        else:
            stats.allocations += 1
            self.tokens_spent += 1
            description = (
                f"Focused {event.player_id} ({event.lens}), "
                f"{event.tokens_remaining} token(s) left"
            )
        self.add_entry(event.phase_index, event.minute, "FOCUS", description, event.player_id)

    def _handle_focus_removed(self, event: FocusRemovedEvent) -> None:
        self._stats_for(event.player_id).removals += 1
        self.add_entry(
            event.phase_index, event.minute, "UNFOCUS",
            f"Removed focus from {event.player_id}", event.player_id,
        )

    def _handle_moment_flagged(self, event: MomentFlaggedEvent) -> None:
        stats = self._stats_for(event.player_id)
        stats.flags += 1
        if event.is_standout:
            stats.standout_flags += 1
        self.add_entry(
            event.phase_index, event.minute, "FLAG",
            f"Flagged {event.moment_id} as {event.reaction}", event.player_id,
        )

    def _handle_phase_advanced(self, event: PhaseAdvancedEvent) -> None:
        suffix = " (halftime)" if event.is_halftime else ""
        self.add_entry(
            event.to_phase, event.minute, "PHASE",
            f"Phase {event.from_phase + 1} -> {event.to_phase + 1}{suffix}",
        )

    def _handle_tokens_refreshed(self, event: TokensRefreshedEvent) -> None:
        self.refills += 1
        self.add_entry(
            event.phase_index, event.minute, "REFILL",
            f"Focus tokens refilled to {event.available}/{event.total}",
        )

    def _handle_hypothesis_accepted(self, event: HypothesisAcceptedEvent) -> None:
        self.add_entry(
            event.phase_index, event.minute, "HYPOTHESIS",
            f"Hypothesis [{event.domain}]: {event.text}", event.player_id,
        )

    def _handle_rejected(self, event: ActionRejectedEvent) -> None:
        self.rejections.append(event)
        self.add_entry(
            event.phase_index, event.minute, "REJECTED",
            f"{event.action} rejected ({event.kind}): {event.reason}", event.player_id,
        )

    def get_entries_by_phase(self) -> dict[int, list[LogEntry]]:
        """Group entries by phase index."""
        by_phase: dict[int, list[LogEntry]] = {}
        for entry in self.entries:
            by_phase.setdefault(entry.phase_index, []).append(entry)
        return by_phase

    def get_entries(self, event_type: str) -> list[LogEntry]:
        return [e for e in self.entries if e.event_type == event_type]

    @property
    def flag_count(self) -> int:
        """Total number of flagged moments logged."""
        return len(self.get_entries("FLAG"))

    @property
    def rejection_count(self) -> int:
        return len(self.rejections)
