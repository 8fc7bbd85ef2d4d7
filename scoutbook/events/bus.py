"""Event bus for observation session events."""

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from scoutbook.events.types import SessionEvent

T = TypeVar("T", bound=SessionEvent)
EventHandler = Callable[[SessionEvent], None]


@dataclass(frozen=True)
class Subscription:
    """A handler, optionally scoped to one session."""

    handler: EventHandler
    session_id: Optional[str] = None

    def wants(self, event: SessionEvent) -> bool:
        return self.session_id is None or self.session_id == event.session_id


class EventBus:
    """
    Pub/sub bus carrying session events to logs and presentation.

    Several sessions can share one bus. A subscription made with a
    session_id only hears that session; one made without hears them all.
    Session actions emit when a bus is passed in and never need to know
    who is listening.

    Example:
        bus = EventBus()

        def on_flag(event: MomentFlaggedEvent):
            print(f"Flagged {event.moment_id} as {event.reaction}")

        bus.subscribe(MomentFlaggedEvent, on_flag, session_id=session.id)
        flag_moment(session, moment_id, Reaction.PROMISING, bus=bus)
    """

    def __init__(self) -> None:
        self._typed: dict[type[SessionEvent], list[Subscription]] = defaultdict(list)
        self._global: list[Subscription] = []

    def subscribe(
        self,
        event_type: type[T],
        handler: Callable[[T], None],
        session_id: Optional[str] = None,
    ) -> None:
        """
        Register a handler for one event type.

        Args:
            event_type: The type of event to handle
            handler: Callback that receives the event
            session_id: Only deliver events from this session
        """
        self._typed[event_type].append(Subscription(handler, session_id))

    def subscribe_all(self, handler: EventHandler, session_id: Optional[str] = None) -> None:
        """Register a handler for every event type."""
        self._global.append(Subscription(handler, session_id))

    def unsubscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        """Remove every subscription of handler to event_type, whatever its scope."""
        self._typed[event_type] = [s for s in self._typed[event_type] if s.handler != handler]

    def unsubscribe_all(self, handler: EventHandler) -> None:
        self._global = [s for s in self._global if s.handler != handler]

    def drop_session(self, session_id: str) -> int:
        """
        Remove every subscription scoped to a session.

        Returns:
            Number of subscriptions removed
        """
        before = self.handler_count()
        for event_type, subscriptions in self._typed.items():
            self._typed[event_type] = [s for s in subscriptions if s.session_id != session_id]
        self._global = [s for s in self._global if s.session_id != session_id]
        return before - self.handler_count()

    def emit(self, event: SessionEvent) -> None:
        """
        Deliver an event to every interested subscription.

        Type-specific handlers run first, then global handlers, each in
        subscription order.
        """
        for subscription in list(self._typed[type(event)]):
            if subscription.wants(event):
                subscription.handler(event)

        for subscription in list(self._global):
            if subscription.wants(event):
                subscription.handler(event)

    def clear(self) -> None:
        self._typed.clear()
        self._global.clear()

    def handler_count(
        self,
        event_type: Optional[type[SessionEvent]] = None,
        session_id: Optional[str] = None,
    ) -> int:
        """
        Count subscriptions.

        Args:
            event_type: Count handlers for this type only (global handlers
                excluded). If None, count everything including global.
            session_id: Count only subscriptions scoped to this session
        """
        if event_type is None:
            subscriptions = [s for subs in self._typed.values() for s in subs] + self._global
        else:
            subscriptions = self._typed[event_type]
        if session_id is not None:
            subscriptions = [s for s in subscriptions if s.session_id == session_id]
        return len(subscriptions)
