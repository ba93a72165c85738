"""
Cascade orchestrator for PDRPG's cross-domain workflows.

One user action often has to ripple through several domains: marking a
habit done changes its streak on the server, may grant experience, and may
level the character up. The orchestrator owns those sequences so that no
cache ever calls another cache.

Each workflow is a fixed list of awaited steps. Two failure policies exist
and are kept deliberately distinct:

- Hard abort: the habit-completion and quest-completion workflows stop if
  their first (write) step fails. Nothing downstream is touched.
- Best effort: once the write succeeds, and throughout system
  initialization, every later step runs even if an earlier one failed.
  Each step reports into its own domain's error slot.

Between awaits each step runs to completion, so a cache's error slot read
right after its call reflects that call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable

from ..state.achievements import AchievementCache
from ..state.cache import DomainCache
from ..state.character import CharacterCache
from ..state.event_bus import EventBus, EventType
from ..state.habits import HabitCache
from ..state.notifications import NotificationQueue
from ..state.quests import QuestCache
from ..state.schema import CacheError, CharacterClass
from ..state.tasks import TaskCache

logger = logging.getLogger(__name__)


# ─── Data Structures ────────────────────────────────────────

class Workflow(str, Enum):
    """Named cascades."""
    HABIT_COMPLETION = "habit_completion"
    QUEST_COMPLETION = "quest_completion"
    QUEST_SYSTEM_INIT = "quest_system_init"
    CHARACTER_REFRESH = "character_refresh"
    AWARD_EXPERIENCE = "award_experience"
    GENERATE_QUESTS = "generate_quests"
    EXPIRE_QUESTS = "expire_quests"
    UPDATE_QUEST_PROGRESS = "update_quest_progress"
    APP_INIT = "app_init"


@dataclass
class StepOutcome:
    """One awaited step of a workflow."""
    name: str
    domain: str
    ok: bool
    error: CacheError | None = None


@dataclass
class WorkflowResult:
    """
    What a workflow did.

    ``steps`` lists every step that actually ran, in order. ``aborted`` is
    set when a hard-abort step failed. ``value`` carries the workflow's
    primary result (written entry, completed quest, expired count, ...).
    """
    workflow: Workflow
    steps: list[StepOutcome] = field(default_factory=list)
    aborted: bool = False
    new_level: int | None = None
    value: Any = None

    @property
    def succeeded(self) -> bool:
        return not self.aborted and all(s.ok for s in self.steps)

    @property
    def failed_steps(self) -> list[StepOutcome]:
        return [s for s in self.steps if not s.ok]

    @property
    def step_names(self) -> list[str]:
        return [s.name for s in self.steps]


# ─── Orchestrator ───────────────────────────────────────────

class CascadeOrchestrator:
    """
    Sequences cross-domain workflows. Depends on cache interfaces only;
    caches never know about each other or about the orchestrator.
    """

    def __init__(
        self,
        character: CharacterCache,
        tasks: TaskCache,
        habits: HabitCache,
        quests: QuestCache,
        achievements: AchievementCache,
        notifications: NotificationQueue,
        bus: EventBus | None = None,
        default_class: CharacterClass | str = CharacterClass.WARRIOR,
    ):
        self._character = character
        self._tasks = tasks
        self._habits = habits
        self._quests = quests
        self._achievements = achievements
        self._notifications = notifications
        self._bus = bus or EventBus()
        self._default_class = CharacterClass(default_class)

    # ─── Step plumbing ───────────────────────────────────────

    async def _step(
        self,
        result: WorkflowResult,
        name: str,
        cache: DomainCache,
        call: Awaitable[Any],
    ) -> Any:
        """Await one cache call and record whether it landed in the error slot."""
        value = await call
        error = cache.error
        result.steps.append(StepOutcome(
            name=name,
            domain=cache.domain,
            ok=error is None,
            error=error,
        ))
        if error is not None:
            logger.warning(f"{result.workflow.value}: step {name} failed: {error}")
        return value

    def _start(self, workflow: Workflow, **data) -> WorkflowResult:
        self._bus.emit(EventType.WORKFLOW_STARTED, workflow=workflow.value, **data)
        return WorkflowResult(workflow=workflow)

    def _finish(self, result: WorkflowResult) -> WorkflowResult:
        self._bus.emit(
            EventType.WORKFLOW_FINISHED,
            workflow=result.workflow.value,
            aborted=result.aborted,
            failed=[s.name for s in result.failed_steps],
        )
        return result

    def _notify_if_leveled(self, result: WorkflowResult, before: int | None) -> None:
        after = self._character.level
        if before is not None and after is not None and after > before:
            self._notifications.add(after)
            result.new_level = after

    async def _refresh_character(self, result: WorkflowResult) -> None:
        # Compare against whatever was cached right before this reload
        before = self._character.level
        await self._step(result, "reload_character", self._character, self._character.load())
        self._notify_if_leveled(result, before)

    # ─── Character ───────────────────────────────────────────

    async def refresh_character(self) -> WorkflowResult:
        """Reload the character and announce a level-up if its level rose."""
        result = self._start(Workflow.CHARACTER_REFRESH)
        await self._refresh_character(result)
        return self._finish(result)

    async def award_experience(self, points: int) -> WorkflowResult:
        """Grant experience; announce the level-up the server reports."""
        result = self._start(Workflow.AWARD_EXPERIENCE, points=points)
        before = self._character.level
        outcome = await self._step(
            result, "add_experience", self._character,
            self._character.add_experience(points),
        )
        result.value = outcome
        if outcome is not None and outcome.level_up and before is not None:
            self._notifications.add(outcome.character.level)
            result.new_level = outcome.character.level
        return self._finish(result)

    # ─── Habits ──────────────────────────────────────────────

    async def mark_habit_today(
        self,
        habit_id: int,
        completed: bool | None = None,
        value: int | None = None,
    ) -> WorkflowResult:
        """
        Habit-completion workflow.

        1. Write today's entry (hard abort on failure)
        2. Reload habits for the server-computed streak
        3. Merge the entry into today's entries
        4. Reload the character
        5. Announce a level-up if the level rose
        """
        result = self._start(Workflow.HABIT_COMPLETION, habit_id=habit_id)

        entry = await self._step(
            result, "write_entry", self._habits,
            self._habits.write_entry(habit_id, completed=completed, value=value),
        )
        if entry is None:
            result.aborted = True
            logger.info(f"Habit {habit_id}: entry write failed, cascade aborted")
            return self._finish(result)
        result.value = entry

        await self._step(result, "reload_habits", self._habits, self._habits.load())

        self._habits.merge_today_entry(entry)
        result.steps.append(StepOutcome(name="merge_entry", domain=self._habits.domain, ok=True))

        await self._refresh_character(result)
        logger.debug(f"Habit {habit_id}: character refreshed after completion")
        return self._finish(result)

    # ─── Quests & Achievements ───────────────────────────────

    async def complete_quest(self, quest_id: int) -> WorkflowResult:
        """
        Quest-completion workflow.

        1. Complete the quest (hard abort on failure); the cache replaces it by id
        2. Ask the server to re-evaluate achievements
        3. Reload achievements whatever step 2 did
        """
        result = self._start(Workflow.QUEST_COMPLETION, quest_id=quest_id)

        quest = await self._step(
            result, "complete_quest", self._quests,
            self._quests.complete_quest(quest_id),
        )
        if quest is None:
            result.aborted = True
            return self._finish(result)
        result.value = quest

        await self._step(
            result, "check_achievements", self._achievements,
            self._achievements.check_and_update(),
        )
        await self._step(result, "reload_achievements", self._achievements, self._achievements.load())
        return self._finish(result)

    async def generate_weekly_quests(self) -> WorkflowResult:
        """Generate this week's quests, then reload the active set."""
        result = self._start(Workflow.GENERATE_QUESTS)
        result.value = await self._step(
            result, "generate_quests", self._quests, self._quests.generate_weekly(),
        )
        if result.steps[-1].ok:
            await self._step(result, "reload_active_quests", self._quests, self._quests.load_active())
        return self._finish(result)

    async def expire_overdue_quests(self) -> WorkflowResult:
        """Expire overdue quests, then reload the active set."""
        result = self._start(Workflow.EXPIRE_QUESTS)
        result.value = await self._step(
            result, "expire_quests", self._quests, self._quests.expire_overdue(),
        )
        if result.steps[-1].ok:
            await self._step(result, "reload_active_quests", self._quests, self._quests.load_active())
        return self._finish(result)

    async def update_quest_progress(self) -> WorkflowResult:
        """Recompute quest progress on the server, then reload the active set."""
        result = self._start(Workflow.UPDATE_QUEST_PROGRESS)
        result.value = await self._step(
            result, "update_progress", self._quests, self._quests.update_progress(),
        )
        if result.steps[-1].ok:
            await self._step(result, "reload_active_quests", self._quests, self._quests.load_active())
        return self._finish(result)

    async def initialize_quest_system(self) -> WorkflowResult:
        """
        Quest subsystem start-up, best effort.

        Order matters: expiry before progress (an expired quest must not
        count as active), progress before achievements (achievements read
        the period's final quest states). A failed step is logged and the
        sequence carries on.
        """
        result = self._start(Workflow.QUEST_SYSTEM_INIT)

        result.value = await self._step(
            result, "expire_quests", self._quests, self._quests.expire_overdue(),
        )
        await self._step(result, "load_active_quests", self._quests, self._quests.load_active())
        await self._step(result, "update_progress", self._quests, self._quests.update_progress())
        await self._step(result, "reload_active_quests", self._quests, self._quests.load_active())
        await self._step(result, "load_achievements", self._achievements, self._achievements.load())
        await self._step(
            result, "check_achievements", self._achievements,
            self._achievements.check_and_update(),
        )
        if result.steps[-1].ok:
            await self._step(
                result, "reload_achievements", self._achievements, self._achievements.load(),
            )

        if result.failed_steps:
            logger.warning(
                f"Quest system initialized with failures: "
                f"{', '.join(s.name for s in result.failed_steps)}"
            )
        return self._finish(result)

    # ─── Start-up ────────────────────────────────────────────

    async def initialize(self) -> WorkflowResult:
        """Bring every domain up, best effort."""
        result = self._start(Workflow.APP_INIT)

        await self._step(
            result, "initialize_character", self._character,
            self._character.initialize(self._default_class),
        )
        await self._step(result, "load_tasks", self._tasks, self._tasks.load())
        await self._step(result, "initialize_habits", self._habits, self._habits.initialize())

        quest_init = await self.initialize_quest_system()
        result.steps.extend(quest_init.steps)
        return self._finish(result)
