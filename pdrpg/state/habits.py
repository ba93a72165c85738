"""
Habit cache.

Holds two confirmed collections: every habit, and today's entries. Streaks
are never computed here; after an entry is written the habit list is
reloaded so the server's streak shows up.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Callable

from ..remote.base import RemoteBackend
from .cache import CollectionCache, Mutation
from .event_bus import EventBus
from .schema import ErrorCode, Habit, HabitEntry, HabitType, format_date

logger = logging.getLogger(__name__)


class HabitCache(CollectionCache[Habit]):
    """Confirmed habits plus today's entries (one per habit)."""

    domain = "habits"
    model = Habit
    LOAD_COMMAND = "get_all_habits"
    LOAD_ERROR = ErrorCode.LOAD_HABITS_ERROR
    LOAD_FAILURE = "Failed to load habits"
    ID_KEY = "id"
    MUTATIONS = {
        Mutation.CREATE: ("add_habit", ErrorCode.ADD_HABIT_ERROR, "Failed to add habit"),
        Mutation.UPDATE: ("update_habit", ErrorCode.UPDATE_HABIT_ERROR, "Failed to update habit"),
        Mutation.DELETE: ("delete_habit", ErrorCode.DELETE_HABIT_ERROR, "Failed to delete habit"),
    }

    def __init__(
        self,
        backend: RemoteBackend,
        bus: EventBus | None = None,
        *,
        serialize_writes: bool = False,
        today: Callable[[], date] = date.today,
    ):
        self._today_entries: list[HabitEntry] = []
        self._today = today
        super().__init__(backend, bus, serialize_writes=serialize_writes)

    @property
    def habits(self) -> list[Habit]:
        return self.items

    @property
    def today_entries(self) -> list[HabitEntry]:
        return list(self._today_entries)

    def today(self) -> str:
        """Today's date key (YYYY-MM-DD)."""
        return format_date(self._today())

    def reset(self) -> None:
        self._today_entries = []
        super().reset()

    # ─── Loads ───────────────────────────────────────────────────

    async def load_today_entries(self) -> bool:
        """Replace today's entries with the server's list for today."""

        def apply(entries: list[HabitEntry]) -> list[HabitEntry]:
            self._today_entries = entries
            return entries

        result = await self._confirm(
            "get_habit_entries_for_date",
            {"date": self.today()},
            code=ErrorCode.LOAD_ENTRIES_ERROR,
            failure="Failed to load today entries",
            parse=lambda raw: [HabitEntry.model_validate(e) for e in raw or []],
            apply=apply,
            track_phase=False,
        )
        return result is not None

    async def initialize(self) -> None:
        """Load habits and today's entries concurrently."""
        await asyncio.gather(self.load(), self.load_today_entries())

    async def get_habit_entries(self, habit_id: int) -> list[HabitEntry]:
        """Full entry history for one habit. Returned, not cached."""
        entries = await self._confirm(
            "get_habit_entries_for_habit",
            {"habit_id": habit_id},
            code=ErrorCode.GET_ENTRIES_ERROR,
            failure="Failed to get habit entries",
            parse=lambda raw: [HabitEntry.model_validate(e) for e in raw or []],
            track_phase=False,
        )
        return entries or []

    # ─── Writes ──────────────────────────────────────────────────

    async def add_habit(
        self,
        title: str,
        habit_type: HabitType | str = HabitType.BOOLEAN,
        target_value: int | None = None,
    ) -> Habit | None:
        """Create a habit. Blank titles are rejected without a remote call."""
        title = title.strip()
        if not title:
            self.fail_validation("Habit title cannot be empty", ErrorCode.EMPTY_TITLE)
            return None

        kind = self._coerce(HabitType, habit_type, "habit type")
        if kind is None:
            return None

        payload = {"title": title, "habit_type": kind.value}
        if target_value is not None:
            payload["target_value"] = target_value
        return await self.mutate(Mutation.CREATE, payload)

    async def update_habit(
        self,
        habit_id: int,
        title: str | None = None,
        target_value: int | None = None,
    ) -> Habit | None:
        payload: dict = {"habit_id": habit_id}
        if title is not None:
            payload["title"] = title
        if target_value is not None:
            payload["target_value"] = target_value
        return await self.mutate(Mutation.UPDATE, payload)

    async def delete_habit(self, habit_id: int) -> bool:
        """Delete a habit and drop its cached entries for today."""
        return await self.mutate(Mutation.DELETE, {"id": habit_id}) is not None

    def _remove(self, entity_id: int) -> int:
        self._today_entries = [e for e in self._today_entries if e.habit_id != entity_id]
        return super()._remove(entity_id)

    async def write_entry(
        self,
        habit_id: int,
        completed: bool | None = None,
        value: int | None = None,
        day: str | None = None,
    ) -> HabitEntry | None:
        """
        Create or update the entry for (habit_id, day).

        Only confirms the write; merging it into today's entries is the
        caller's job (see CascadeOrchestrator.mark_habit_today).
        """
        payload: dict = {"habit_id": habit_id, "date": day or self.today()}
        if completed is not None:
            payload["completed"] = completed
        if value is not None:
            payload["value"] = value

        return await self._confirm(
            "add_habit_entry",
            payload,
            code=ErrorCode.MARK_HABIT_ERROR,
            failure="Failed to mark habit",
            parse=HabitEntry.model_validate,
        )

    def merge_today_entry(self, entry: HabitEntry) -> None:
        """Put a confirmed entry into today's entries, replacing the habit's old one."""
        self._today_entries = [
            e for e in self._today_entries if e.habit_id != entry.habit_id
        ] + [entry]
        self._touch()
