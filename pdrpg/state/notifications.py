"""
Level-up notification queue.

A FIFO of ephemeral toasts with their own lifecycle: each entry removes
itself after a fixed TTL, independent of the character data that caused
it. Removal is always by id, so a timer firing after ``clear()`` or after
a manual ``remove()`` does nothing.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable
from uuid import uuid4

from .event_bus import EventBus, EventType
from .schema import LevelUpNotification

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 5000

# (delay_seconds, callback) -> handle with cancel()
Scheduler = Callable[[float, Callable[[], None]], Any]


def _loop_scheduler(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


class NotificationQueue:
    """
    TTL-expiring level-up notifications.

    Args:
        bus: Event bus for LEVEL_UP / NOTIFICATION_REMOVED
        ttl_ms: Lifetime of each entry
        scheduler: Timer factory (defaults to the running loop's call_later)
        clock: Seconds since the epoch (for the entry timestamp)
    """

    def __init__(
        self,
        bus: EventBus | None = None,
        ttl_ms: int = DEFAULT_TTL_MS,
        scheduler: Scheduler | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._bus = bus or EventBus()
        self._ttl_ms = ttl_ms
        self._schedule = scheduler or _loop_scheduler
        self._clock = clock
        self._entries: list[LevelUpNotification] = []
        self._timers: dict[str, Any] = {}
        self._version = 0

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    @property
    def entries(self) -> list[LevelUpNotification]:
        return list(self._entries)

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, level: int) -> LevelUpNotification:
        """Append a level-up toast and schedule its removal."""
        notification = LevelUpNotification(
            id=f"levelup-{str(uuid4())[:8]}",
            level=level,
            timestamp=self._clock(),
        )
        self._entries = [*self._entries, notification]
        self._version += 1
        self._timers[notification.id] = self._schedule(
            self._ttl_ms / 1000,
            lambda: self.remove(notification.id),
        )

        logger.info(f"Level up! Now level {level}")
        self._bus.emit(EventType.LEVEL_UP, id=notification.id, level=level)
        return notification

    def remove(self, notification_id: str) -> None:
        """Remove one entry. Unknown ids are ignored."""
        timer = self._timers.pop(notification_id, None)
        if timer is not None and hasattr(timer, "cancel"):
            timer.cancel()

        remaining = [n for n in self._entries if n.id != notification_id]
        if len(remaining) == len(self._entries):
            return
        self._entries = remaining
        self._version += 1
        self._bus.emit(EventType.NOTIFICATION_REMOVED, id=notification_id)

    def clear(self) -> None:
        """Empty the queue now. Pending timers for cleared entries become no-ops."""
        for timer in self._timers.values():
            if hasattr(timer, "cancel"):
                timer.cancel()
        self._timers.clear()
        if self._entries:
            self._entries = []
            self._version += 1
