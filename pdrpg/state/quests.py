"""
Quest cache.

Quests are generated, progressed and expired on the server. The cache
mirrors either the active set or one week's quests, whichever was loaded
last.
"""

from __future__ import annotations

import logging

from .cache import CollectionCache, Mutation
from .schema import ErrorCode, Quest

logger = logging.getLogger(__name__)


def _parse_count(raw) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise TypeError(f"Expected a count, got {raw!r}")
    return int(raw)


class QuestCache(CollectionCache[Quest]):
    """Confirmed quests."""

    domain = "quests"
    model = Quest
    LOAD_COMMAND = "get_active_quests"
    LOAD_ERROR = ErrorCode.LOAD_ACTIVE_QUESTS_ERROR
    LOAD_FAILURE = "Failed to load active quests"
    ID_KEY = "questId"
    MUTATIONS = {
        Mutation.UPDATE: ("complete_quest", ErrorCode.COMPLETE_QUEST_ERROR, "Failed to complete quest"),
    }

    @property
    def quests(self) -> list[Quest]:
        return self.items

    async def load_active(self) -> bool:
        """Replace the cache with the server's active quests."""
        return await self.load()

    async def load_for_week(self, week: str | None = None) -> bool:
        """Replace the cache with one week's quests (current week when None)."""
        result = await self._confirm(
            "get_quests_for_week",
            {"week": week} if week else {},
            code=ErrorCode.LOAD_QUESTS_ERROR,
            failure="Failed to load quests for week",
            parse=self._parse_list,
            apply=self._replace,
        )
        return result is not None

    async def generate_weekly(self) -> list[Quest]:
        """Ask the server to generate this week's quests. Returned, not cached."""
        quests = await self._confirm(
            "generate_weekly_quests",
            None,
            code=ErrorCode.GENERATE_QUESTS_ERROR,
            failure="Failed to generate weekly quests",
            parse=self._parse_list,
        )
        return quests or []

    async def update_progress(self) -> list[Quest]:
        """Ask the server to recompute progress. Returns the quests it touched."""
        quests = await self._confirm(
            "update_quest_progress",
            None,
            code=ErrorCode.UPDATE_QUEST_PROGRESS_ERROR,
            failure="Failed to update quest progress",
            parse=self._parse_list,
            track_phase=False,
        )
        return quests or []

    async def expire_overdue(self) -> int:
        """Expire quests past their deadline. Returns how many expired."""
        count = await self._confirm(
            "expire_overdue_quests",
            None,
            code=ErrorCode.EXPIRE_QUESTS_ERROR,
            failure="Failed to expire overdue quests",
            parse=_parse_count,
            track_phase=False,
        )
        return count or 0

    async def complete_quest(self, quest_id: int) -> Quest | None:
        """Complete a quest and replace it in the cache by id."""
        return await self.mutate(Mutation.UPDATE, {"questId": quest_id})
