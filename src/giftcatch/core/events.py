"""
Event bus for Grinch's Gift Catch.

The simulation core publishes what happened during a step; rendering,
audio and persistence subscribe. Dispatch is synchronous and in
subscription order, so listeners observe events in the order the
session produced them.
"""

from dataclasses import dataclass, field
from typing import Any, Callable
from enum import Enum, auto
import inspect
import logging
import time
from collections import defaultdict

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Events published by the session and its collaborators."""
    # Session lifecycle
    GAME_STARTED = auto()
    GAME_OVER = auto()
    GAME_RESUMED = auto()
    STATE_CHANGED = auto()

    # Gameplay outcomes
    SCORE_INCREASED = auto()
    HAZARD_HIT = auto()
    IMPAIRER_HIT = auto()

    # Bonus round
    BONUS_OPENED = auto()
    BONUS_SPIN_STARTED = auto()
    BONUS_RESOLVED = auto()
    COUNTDOWN_TICK = auto()

    # Persistence
    SCORE_SAVED = auto()
    SCORE_SAVE_FAILED = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: Event type (EventType enum or custom string)
        data: Event payload
        source: Component that emitted the event
        timestamp: When event was created
    """
    type: EventType | str
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.time)


Handler = Callable[[Event], None]


class EventBus:
    """
    Pub/sub hub between the session and its listeners.

    Handlers are plain callables. A listener that needs to do I/O
    schedules its own task from the handler.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType | str, list[Handler]] = defaultdict(list)
        self._global_handlers: list[Handler] = []

    def subscribe(
        self,
        event_type: EventType | str,
        handler: Handler
    ) -> Callable[[], None]:
        """
        Subscribe to an event type.

        Returns:
            Unsubscribe function, safe to call more than once
        """
        self._handlers[event_type].append(handler)
        logger.debug(f"Handler subscribed to {event_type}")

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Handler unsubscribed from {event_type}")

        return unsubscribe

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Subscribe to every event. Returns an unsubscribe function."""
        self._global_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._global_handlers:
                self._global_handlers.remove(handler)

        return unsubscribe

    def emit(self, event: Event) -> None:
        """Deliver an event to its subscribers, then to global handlers."""
        self._dispatch_sync(event)

    def _dispatch_sync(self, event: Event) -> None:
        handlers = self._handlers.get(event.type, []) + self._global_handlers

        for handler in handlers:
            if inspect.iscoroutinefunction(handler):
                logger.warning(f"Skipping coroutine handler for {event.type}")
                continue
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler: {e}")
