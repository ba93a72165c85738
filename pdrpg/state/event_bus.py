"""
Event bus for PDRPG state changes.

Provides decoupled communication between domain caches, derived views and UI.
Components subscribe to events and react without tight coupling.

Usage:
    bus = EventBus()
    bus.on(EventType.CACHE_CHANGED, my_handler)

    # Emit (in a cache when confirmed state is applied)
    bus.emit(EventType.CACHE_CHANGED, domain="tasks", version=3)

    # Handler receives event
    def my_handler(event: StateEvent):
        print(f"{event.data['domain']} changed!")

There is no global instance: each AppContext owns its bus so tests can run
isolated instances side by side.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """State events that can be published."""

    # Cache events
    CACHE_CHANGED = "cache.changed"
    CACHE_ERROR = "cache.error"
    CACHE_RESET = "cache.reset"

    # Progression events
    LEVEL_UP = "character.level_up"
    NOTIFICATION_REMOVED = "notification.removed"

    # Workflow events
    WORKFLOW_STARTED = "workflow.started"
    WORKFLOW_FINISHED = "workflow.finished"


@dataclass
class StateEvent:
    """
    Event payload for the event bus.

    Attributes:
        type: The event type (from EventType enum)
        data: Event-specific payload as dict
        timestamp: When the event was emitted
    """

    type: EventType
    data: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.data}"


# Type alias for event handlers
EventHandler = Callable[[StateEvent], None]


class EventBus:
    """
    Synchronous event bus.

    Listeners are called immediately on emit(), inside the same step of the
    event loop that applied the state change. For async work, listeners
    should use asyncio.create_task().
    """

    def __init__(self, history_limit: int = 100):
        self._listeners: dict[EventType, list[EventHandler]] = {}
        self._history: list[StateEvent] = []
        self._history_limit = history_limit  # Keep last N events for debugging

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The type of event to listen for
            handler: Callback function that receives StateEvent
        """
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        if handler not in self._listeners[event_type]:
            self._listeners[event_type].append(handler)

    def emit(self, event_type: EventType, **data) -> StateEvent:
        """
        Emit an event to all subscribers.

        Args:
            event_type: The type of event
            **data: Event-specific data

        Returns:
            The emitted StateEvent (for chaining/testing)
        """
        event = StateEvent(type=event_type, data=data)

        self._history.append(event)
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit :]

        for handler in list(self._listeners.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                # One bad listener shouldn't break the others or the cache
                logger.exception(f"Error in handler for {event_type.value}")

        return event

    def get_history(self, event_type: EventType | None = None) -> list[StateEvent]:
        """
        Get recent event history.

        Args:
            event_type: Filter by type, or None for all events
        """
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if e.type == event_type]
