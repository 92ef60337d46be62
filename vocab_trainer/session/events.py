"""
Playback events and a small synchronous event bus.

Events are published in playback order, in the same call that performs the
state transition they describe.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from vocab_trainer.schemas import PlaybackSession, VocabularyItem

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    ITEM_STARTED = "item_started"
    ITEM_COMPLETED = "item_completed"
    SESSION_COMPLETED = "session_completed"
    SESSION_PAUSED = "session_paused"
    SESSION_RESUMED = "session_resumed"


@dataclass
class SessionEvent:
    """
    A playback event.

    `repetition` is 1-based. `item` is set for item events (the updated item
    for ITEM_COMPLETED); `error` is set when a pause was forced by a failure.
    """
    type: EventType
    session: PlaybackSession
    item: Optional[VocabularyItem] = None
    repetition: Optional[int] = None
    error: Optional[Exception] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


EventHandler = Callable[[SessionEvent], None]


class EventBus:
    """Observer registry keyed by event type."""

    def __init__(self):
        self._handlers: dict[EventType, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: EventType, handler: EventHandler) -> Callable[[], None]:
        """
        Register a handler.

        Returns:
            Callable that removes the handler again
        """
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    def subscribe_all(self, handler: EventHandler) -> Callable[[], None]:
        unsubscribers = [self.subscribe(event_type, handler) for event_type in EventType]

        def unsubscribe() -> None:
            for unsub in unsubscribers:
                unsub()

        return unsubscribe

    def emit(self, event: SessionEvent) -> None:
        """
        Call every handler for the event's type, in subscription order.

        A failing handler is logged and skipped so playback keeps going.
        """
        for handler in list(self._handlers[event.type]):
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler %r failed for %s", handler, event.type.value)
