"""
Memoized derived views over the domain caches.

Pull-based: a view is recomputed lazily on read, and only when the
version of one of the caches it reads has moved since the last
computation (dirty-flag invalidation). Because every projection is pure,
this is indistinguishable from recomputing on every upstream change.

Usage:
    views = DerivedViews(character, tasks, habits, quests, achievements)
    views.quest_stats.completion_rate
    views.habits_with_entries[0].completed_today

Returned values are shared between reads until invalidated; treat them as
read-only.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

from ..rules.progression import character_stats
from ..state.achievements import AchievementCache
from ..state.character import CharacterCache
from ..state.habits import HabitCache
from ..state.quests import QuestCache
from ..state.schema import Achievement, CharacterStats, HabitWithEntry, Quest, Task
from ..state.tasks import TaskCache
from . import projections as p


class Versioned(Protocol):
    @property
    def version(self) -> int: ...


class DerivedViews:
    """Read-only, memoized projections. Never calls the backend."""

    def __init__(
        self,
        character: CharacterCache,
        tasks: TaskCache,
        habits: HabitCache,
        quests: QuestCache,
        achievements: AchievementCache,
        attribute_cap: int = p.DEFAULT_ATTRIBUTE_CAP,
    ):
        self._character = character
        self._tasks = tasks
        self._habits = habits
        self._quests = quests
        self._achievements = achievements
        self._attribute_cap = attribute_cap
        self._memo: dict[str, tuple[tuple[int, ...], Any]] = {}
        self.computations = 0  # How many times any view was actually computed

    def _derive(self, key: str, sources: tuple[Versioned, ...], compute: Callable[[], Any]) -> Any:
        stamp = tuple(source.version for source in sources)
        cached = self._memo.get(key)
        if cached is not None and cached[0] == stamp:
            return cached[1]
        value = compute()
        self.computations += 1
        self._memo[key] = (stamp, value)
        return value

    def invalidate(self) -> None:
        """Forget every memo. The next read recomputes."""
        self._memo.clear()

    # ─── Tasks ───────────────────────────────────────────────

    @property
    def completed_tasks(self) -> list[Task]:
        return self._derive("completed_tasks", (self._tasks,),
                            lambda: p.completed_tasks(self._tasks.items))

    @property
    def pending_tasks(self) -> list[Task]:
        return self._derive("pending_tasks", (self._tasks,),
                            lambda: p.pending_tasks(self._tasks.items))

    @property
    def task_stats(self) -> p.TaskStats:
        return self._derive("task_stats", (self._tasks,),
                            lambda: p.task_stats(self._tasks.items))

    # ─── Habits ──────────────────────────────────────────────

    @property
    def habits_with_entries(self) -> list[HabitWithEntry]:
        return self._derive(
            "habits_with_entries", (self._habits,),
            lambda: p.habits_with_entries(self._habits.items, self._habits.today_entries),
        )

    @property
    def habit_stats(self) -> p.HabitStats:
        return self._derive("habit_stats", (self._habits,),
                            lambda: p.habit_stats(self._habits.items))

    # ─── Quests ──────────────────────────────────────────────

    @property
    def active_quests(self) -> list[Quest]:
        return self._derive("active_quests", (self._quests,),
                            lambda: p.active_quests(self._quests.items))

    @property
    def completed_quests(self) -> list[Quest]:
        return self._derive("completed_quests", (self._quests,),
                            lambda: p.completed_quests(self._quests.items))

    @property
    def expired_quests(self) -> list[Quest]:
        return self._derive("expired_quests", (self._quests,),
                            lambda: p.expired_quests(self._quests.items))

    @property
    def quest_stats(self) -> p.QuestStats:
        return self._derive("quest_stats", (self._quests,),
                            lambda: p.quest_stats(self._quests.items))

    # ─── Achievements ────────────────────────────────────────

    @property
    def earned_achievements(self) -> list[Achievement]:
        return self._derive("earned_achievements", (self._achievements,),
                            lambda: p.earned_achievements(self._achievements.items))

    @property
    def available_achievements(self) -> list[Achievement]:
        return self._derive("available_achievements", (self._achievements,),
                            lambda: p.available_achievements(self._achievements.items))

    @property
    def locked_achievements(self) -> list[Achievement]:
        return self._derive("locked_achievements", (self._achievements,),
                            lambda: p.locked_achievements(self._achievements.items))

    @property
    def achievement_summary(self) -> p.AchievementSummary:
        return self._derive("achievement_summary", (self._achievements,),
                            lambda: p.achievement_summary(self._achievements.items))

    # ─── Character ───────────────────────────────────────────

    @property
    def is_character_loaded(self) -> bool:
        return self._character.is_loaded

    @property
    def character_stats(self) -> CharacterStats | None:
        def compute():
            character = self._character.character
            return character_stats(character) if character is not None else None
        return self._derive("character_stats", (self._character,), compute)

    @property
    def level_progress(self) -> float:
        stats = self.character_stats
        return stats.level_progress if stats is not None else 0.0

    @property
    def experience_info(self) -> p.ExperienceInfo | None:
        def compute():
            character = self._character.character
            return p.experience_info(character) if character is not None else None
        return self._derive("experience_info", (self._character,), compute)

    @property
    def attribute_info(self) -> p.AttributeInfo | None:
        def compute():
            character = self._character.character
            if character is None:
                return None
            return p.attribute_info(character.attributes, self._attribute_cap)
        return self._derive("attribute_info", (self._character,), compute)
