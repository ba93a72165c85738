"""Derived, read-only projections over the domain caches."""

from .derived import DerivedViews
from .projections import (
    AchievementSummary,
    AttributeInfo,
    ExperienceInfo,
    HabitStats,
    QuestStats,
    TaskStats,
    achievement_summary,
    attribute_info,
    attribute_radar,
    experience_info,
    habit_entry_status,
    habit_stats,
    habits_with_entries,
    quest_progress_percent,
    quest_stats,
    rate,
    task_stats,
)

__all__ = [
    "DerivedViews",
    "AchievementSummary",
    "AttributeInfo",
    "ExperienceInfo",
    "HabitStats",
    "QuestStats",
    "TaskStats",
    "achievement_summary",
    "attribute_info",
    "attribute_radar",
    "experience_info",
    "habit_entry_status",
    "habit_stats",
    "habits_with_entries",
    "quest_progress_percent",
    "quest_stats",
    "rate",
    "task_stats",
]
