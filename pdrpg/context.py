"""
Application context.

Explicitly constructed container for every piece of client state. There
are no module-level singletons: the UI (or a test) builds a context and
passes it down, so several isolated contexts can live side by side.

Usage:
    ctx = create_context(backend=MockBackend({...}))
    await ctx.orchestrator.initialize()
    ctx.views.quest_stats
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

from .config import Config, DEFAULT_CONFIG, configure_logging
from .remote import RemoteBackend, create_backend
from .state.achievements import AchievementCache
from .state.character import CharacterCache
from .state.event_bus import EventBus
from .state.habits import HabitCache
from .state.notifications import NotificationQueue, Scheduler
from .state.quests import QuestCache
from .state.tasks import TaskCache
from .systems.cascades import CascadeOrchestrator
from .views.derived import DerivedViews

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything one client instance owns."""
    config: Config
    backend: RemoteBackend
    bus: EventBus
    character: CharacterCache
    tasks: TaskCache
    habits: HabitCache
    quests: QuestCache
    achievements: AchievementCache
    notifications: NotificationQueue
    orchestrator: CascadeOrchestrator
    views: DerivedViews

    @property
    def caches(self) -> dict[str, object]:
        return {
            "character": self.character,
            "tasks": self.tasks,
            "habits": self.habits,
            "quests": self.quests,
            "achievements": self.achievements,
        }

    def reset(self) -> None:
        """Empty every cache and the notification queue."""
        for cache in self.caches.values():
            cache.reset()
        self.notifications.clear()
        self.views.invalidate()


def create_context(
    config: Config | None = None,
    backend: RemoteBackend | None = None,
    *,
    today: Callable[[], date] = date.today,
    scheduler: Scheduler | None = None,
) -> AppContext:
    """
    Wire a fresh context.

    Args:
        config: Loaded config (defaults when None)
        backend: Remote backend (built from config when None)
        today: Date provider for habit entries
        scheduler: Timer factory for notification expiry
    """
    config = {**DEFAULT_CONFIG, **(config or {})}
    configure_logging(config)
    backend = backend or create_backend(config)
    bus = EventBus()
    serialize = bool(config["serialize_writes"])

    character = CharacterCache(backend, bus, serialize_writes=serialize)
    tasks = TaskCache(backend, bus, serialize_writes=serialize)
    habits = HabitCache(backend, bus, serialize_writes=serialize, today=today)
    quests = QuestCache(backend, bus, serialize_writes=serialize)
    achievements = AchievementCache(backend, bus, serialize_writes=serialize)
    notifications = NotificationQueue(
        bus, ttl_ms=config["notification_ttl_ms"], scheduler=scheduler,
    )

    orchestrator = CascadeOrchestrator(
        character, tasks, habits, quests, achievements, notifications,
        bus=bus,
        default_class=config["default_character_class"],
    )
    views = DerivedViews(
        character, tasks, habits, quests, achievements,
        attribute_cap=config["attribute_cap"],
    )

    logger.debug(f"Context created with backend {backend.name}")
    return AppContext(
        config=config,
        backend=backend,
        bus=bus,
        character=character,
        tasks=tasks,
        habits=habits,
        quests=quests,
        achievements=achievements,
        notifications=notifications,
        orchestrator=orchestrator,
        views=views,
    )
