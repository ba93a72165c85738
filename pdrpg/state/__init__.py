"""State management for PDRPG progression."""

from .schema import (
    Achievement,
    AchievementStats,
    AchievementStatus,
    AchievementType,
    CacheError,
    Character,
    CharacterAttributes,
    CharacterClass,
    CharacterStats,
    ErrorCode,
    ExperienceResult,
    Habit,
    HabitEntry,
    HabitType,
    HabitWithEntry,
    LevelUpNotification,
    LoadingPhase,
    Quest,
    QuestStatus,
    QuestType,
    Task,
)
from .cache import CollectionCache, DomainCache, Mutation
from .character import CharacterCache, CharacterLevelMismatch
from .tasks import TaskCache
from .habits import HabitCache
from .quests import QuestCache
from .achievements import AchievementCache
from .notifications import NotificationQueue
from .event_bus import EventBus, EventType, StateEvent

__all__ = [
    # Schema
    "Achievement",
    "AchievementStats",
    "AchievementStatus",
    "AchievementType",
    "CacheError",
    "Character",
    "CharacterAttributes",
    "CharacterClass",
    "CharacterStats",
    "ErrorCode",
    "ExperienceResult",
    "Habit",
    "HabitEntry",
    "HabitType",
    "HabitWithEntry",
    "LevelUpNotification",
    "LoadingPhase",
    "Quest",
    "QuestStatus",
    "QuestType",
    "Task",
    # Caches
    "DomainCache",
    "CollectionCache",
    "Mutation",
    "CharacterCache",
    "CharacterLevelMismatch",
    "TaskCache",
    "HabitCache",
    "QuestCache",
    "AchievementCache",
    # Notifications
    "NotificationQueue",
    # Event Bus
    "EventBus",
    "EventType",
    "StateEvent",
]
