"""EventHub - synchronous publish/subscribe registry keyed by EventKind."""

import logging
from typing import Callable

from orderup.events.round_events import EventKind, RoundEvent

logger = logging.getLogger(__name__)

Subscriber = Callable[[RoundEvent], None]


class EventHub:
    """Maps each EventKind to an ordered list of subscriber callbacks.

    Delivery is synchronous: publish() calls every subscriber of the
    event's kind, in subscription order, before returning. Exceptions
    raised by a subscriber propagate to the publisher.

    Teardown contract: a subscriber must call unsubscribe() (or the owning
    component's detach()) before it is discarded, otherwise it keeps
    receiving events.

    Handlers must not call back into the mutators of the component that
    is publishing.
    """

    def __init__(self) -> None:
        self._subscribers: dict[EventKind, list[Subscriber]] = {}

    def subscribe(self, kind: EventKind, callback: Subscriber) -> None:
        """Register a callback for an event kind.

        Registering the same callback twice for one kind is ignored.
        """
        callbacks = self._subscribers.setdefault(kind, [])
        if callback in callbacks:
            logger.debug("Ignoring duplicate subscription to %s", kind.value)
            return
        callbacks.append(callback)

    def subscribe_all(self, callback: Subscriber) -> None:
        """Register a callback for every event kind."""
        for kind in EventKind:
            self.subscribe(kind, callback)

    def unsubscribe(self, kind: EventKind, callback: Subscriber) -> bool:
        """Remove a callback. Returns False if it was not subscribed."""
        callbacks = self._subscribers.get(kind)
        if not callbacks or callback not in callbacks:
            return False
        callbacks.remove(callback)
        return True

    def unsubscribe_all(self, callback: Subscriber) -> None:
        """Remove a callback from every event kind it is subscribed to."""
        for kind in EventKind:
            self.unsubscribe(kind, callback)

    def publish(self, event: RoundEvent) -> None:
        """Deliver an event to the subscribers of its kind."""
        # Copy so a handler may unsubscribe itself during delivery
        for callback in list(self._subscribers.get(event.kind, ())):
            callback(event)

    def subscriber_count(self, kind: EventKind) -> int:
        return len(self._subscribers.get(kind, ()))

    def clear(self) -> None:
        """Drop every subscription."""
        self._subscribers.clear()
