"""
Derived projections as pure functions.

Every function here takes cache snapshots and returns a fresh value. None
of them call the backend or touch a cache, so identical snapshots always
give identical results.
"""

from __future__ import annotations

from pydantic import BaseModel

from ..rules.progression import experience_for_level, total_attribute_points
from ..state.schema import (
    ATTRIBUTE_NAMES,
    Achievement,
    AchievementStatus,
    Character,
    CharacterAttributes,
    Habit,
    HabitEntry,
    HabitType,
    HabitWithEntry,
    Quest,
    QuestStatus,
    Task,
)

DEFAULT_ATTRIBUTE_CAP = 50


# -----------------------------------------------------------------------------
# Result models
# -----------------------------------------------------------------------------

class TaskStats(BaseModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    completion_rate: float = 0.0


class HabitStats(BaseModel):
    total: int = 0
    with_streak: int = 0
    average_streak: float = 0.0  # rounded to 2 decimals
    longest_streak: int = 0


class QuestStats(BaseModel):
    total: int = 0
    active: int = 0
    completed: int = 0
    expired: int = 0
    completion_rate: float = 0.0


class AchievementSummary(BaseModel):
    total: int = 0
    earned: int = 0
    available: int = 0
    locked: int = 0
    earned_percentage: float = 0.0


class ExperienceInfo(BaseModel):
    """Experience within the current level band."""
    current: int
    needed: int
    total: int
    next_level: int
    percentage: float


class AttributeInfo(BaseModel):
    """Raw attribute values, their total, and radar percentages."""
    total: int
    values: dict[str, int]
    percents: dict[str, float]


# -----------------------------------------------------------------------------
# Arithmetic
# -----------------------------------------------------------------------------

def rate(part: int, total: int) -> float:
    """``part / total * 100``, or 0 when there is nothing to divide by."""
    return (part / total) * 100 if total > 0 else 0.0


# -----------------------------------------------------------------------------
# Filters
# -----------------------------------------------------------------------------

def quests_with_status(quests: list[Quest], status: QuestStatus) -> list[Quest]:
    return [q for q in quests if q.status == status]


def active_quests(quests: list[Quest]) -> list[Quest]:
    return quests_with_status(quests, QuestStatus.ACTIVE)


def completed_quests(quests: list[Quest]) -> list[Quest]:
    return quests_with_status(quests, QuestStatus.COMPLETED)


def expired_quests(quests: list[Quest]) -> list[Quest]:
    return quests_with_status(quests, QuestStatus.EXPIRED)


def achievements_with_status(
    achievements: list[Achievement], status: AchievementStatus,
) -> list[Achievement]:
    return [a for a in achievements if a.status == status]


def earned_achievements(achievements: list[Achievement]) -> list[Achievement]:
    return achievements_with_status(achievements, AchievementStatus.EARNED)


def available_achievements(achievements: list[Achievement]) -> list[Achievement]:
    return achievements_with_status(achievements, AchievementStatus.AVAILABLE)


def locked_achievements(achievements: list[Achievement]) -> list[Achievement]:
    return achievements_with_status(achievements, AchievementStatus.LOCKED)


def completed_tasks(tasks: list[Task]) -> list[Task]:
    return [t for t in tasks if t.completed]


def pending_tasks(tasks: list[Task]) -> list[Task]:
    return [t for t in tasks if not t.completed]


# -----------------------------------------------------------------------------
# Aggregates
# -----------------------------------------------------------------------------

def task_stats(tasks: list[Task]) -> TaskStats:
    total = len(tasks)
    completed = len(completed_tasks(tasks))
    return TaskStats(
        total=total,
        completed=completed,
        pending=total - completed,
        completion_rate=rate(completed, total),
    )


def habit_stats(habits: list[Habit]) -> HabitStats:
    total = len(habits)
    if total == 0:
        return HabitStats()
    streaks = [h.current_streak for h in habits]
    return HabitStats(
        total=total,
        with_streak=sum(1 for s in streaks if s > 0),
        average_streak=round(sum(streaks) / total, 2),
        longest_streak=max(streaks),
    )


def quest_stats(quests: list[Quest]) -> QuestStats:
    total = len(quests)
    completed = len(completed_quests(quests))
    return QuestStats(
        total=total,
        active=len(active_quests(quests)),
        completed=completed,
        expired=len(expired_quests(quests)),
        completion_rate=rate(completed, total),
    )


def achievement_summary(achievements: list[Achievement]) -> AchievementSummary:
    total = len(achievements)
    earned = len(earned_achievements(achievements))
    return AchievementSummary(
        total=total,
        earned=earned,
        available=len(available_achievements(achievements)),
        locked=len(locked_achievements(achievements)),
        earned_percentage=rate(earned, total),
    )


def quest_progress_percent(quest: Quest) -> float:
    """Progress toward the quest target, capped at 100."""
    if quest.target_value == 0:
        return 0.0
    return min(100.0, quest.current_progress / quest.target_value * 100)


# -----------------------------------------------------------------------------
# Character
# -----------------------------------------------------------------------------

def experience_info(character: Character) -> ExperienceInfo:
    current_level_exp = experience_for_level(character.level - 1)
    next_level_exp = experience_for_level(character.level)
    progress = character.experience - current_level_exp
    needed = next_level_exp - current_level_exp
    return ExperienceInfo(
        current=progress,
        needed=needed,
        total=character.experience,
        next_level=next_level_exp,
        percentage=(progress / needed * 100) if needed > 0 else 0.0,
    )


def attribute_radar(
    attributes: CharacterAttributes, cap: int = DEFAULT_ATTRIBUTE_CAP,
) -> dict[str, float]:
    """Each attribute as ``min(100, value / cap * 100)``."""
    if cap <= 0:
        raise ValueError(f"Attribute cap must be positive: {cap}")
    return {
        name: min(100.0, getattr(attributes, name) / cap * 100)
        for name in ATTRIBUTE_NAMES
    }


def attribute_info(
    attributes: CharacterAttributes, cap: int = DEFAULT_ATTRIBUTE_CAP,
) -> AttributeInfo:
    return AttributeInfo(
        total=total_attribute_points(attributes),
        values={name: getattr(attributes, name) for name in ATTRIBUTE_NAMES},
        percents=attribute_radar(attributes, cap),
    )


# -----------------------------------------------------------------------------
# Habits
# -----------------------------------------------------------------------------

def habit_entry_status(habit: Habit, entry: HabitEntry | None) -> tuple[bool, int]:
    """
    Whether a habit counts as done today, and today's counter value.

    Boolean habits read ``completed``. Counter habits compare ``value`` to
    ``target_value``, or need anything above zero when there is no target.
    """
    if entry is None:
        return False, 0
    if habit.habit_type == HabitType.BOOLEAN:
        return entry.completed, 0
    if habit.target_value:
        return entry.value >= habit.target_value, entry.value
    return entry.value > 0, entry.value


def habits_with_entries(
    habits: list[Habit], entries: list[HabitEntry],
) -> list[HabitWithEntry]:
    """Join every habit with today's entry, if it has one."""
    by_habit: dict[int, HabitEntry] = {}
    for e in entries:
        by_habit.setdefault(e.habit_id, e)
    joined = []
    for habit in habits:
        entry = by_habit.get(habit.id)
        completed_today, today_value = habit_entry_status(habit, entry)
        joined.append(HabitWithEntry(
            habit=habit,
            today_entry=entry,
            completed_today=completed_today,
            today_value=today_value,
        ))
    return joined
