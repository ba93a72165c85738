"""
Achievement cache.

Achievement status only moves forward (Locked -> Available -> Earned).
The server enforces that; the cache refuses to show a regression if one
ever arrives and keeps the previously confirmed entity instead.
"""

from __future__ import annotations

import logging
from typing import Any

from .cache import CollectionCache, Mutation
from .schema import Achievement, AchievementStats, AchievementStatus, ErrorCode

logger = logging.getLogger(__name__)


def _parse_stats(raw: Any) -> AchievementStats:
    """Accept the server's ``(earned, available, locked)`` tuple or a dict."""
    if isinstance(raw, (list, tuple)):
        earned, available, locked = raw
        return AchievementStats(earned=earned, available=available, locked=locked)
    return AchievementStats.model_validate(raw)


class AchievementCache(CollectionCache[Achievement]):
    """Confirmed achievements."""

    domain = "achievements"
    model = Achievement
    LOAD_COMMAND = "get_all_achievements"
    LOAD_ERROR = ErrorCode.LOAD_ACHIEVEMENTS_ERROR
    LOAD_FAILURE = "Failed to load achievements"
    ID_KEY = "achievementId"
    MUTATIONS = {
        Mutation.UPDATE: ("earn_achievement", ErrorCode.EARN_ACHIEVEMENT_ERROR, "Failed to earn achievement"),
    }

    @property
    def achievements(self) -> list[Achievement]:
        return self.items

    async def load_by_status(self, status: AchievementStatus | str) -> list[Achievement]:
        """Achievements with one status. Returned, not cached."""
        wanted = self._coerce(AchievementStatus, status, "achievement status")
        if wanted is None:
            return []
        achievements = await self._confirm(
            "get_achievements_by_status",
            {"status": wanted.value},
            code=ErrorCode.LOAD_ACHIEVEMENTS_BY_STATUS_ERROR,
            failure="Failed to load achievements by status",
            parse=self._parse_list,
            track_phase=False,
        )
        return achievements or []

    async def check_and_update(self) -> list[Achievement] | None:
        """
        Ask the server to re-evaluate eligibility.

        Returns:
            The achievements whose status changed, or None on failure.
            The cache itself is refreshed by a separate load().
        """
        return await self._confirm(
            "check_and_update_achievements",
            None,
            code=ErrorCode.CHECK_ACHIEVEMENTS_ERROR,
            failure="Failed to check achievements",
            parse=self._parse_list,
            track_phase=False,
        )

    async def earn(self, achievement_id: int) -> Achievement | None:
        """Claim an available achievement and replace it in the cache."""
        return await self.mutate(Mutation.UPDATE, {"achievementId": achievement_id})

    async def get_stats(self) -> AchievementStats | None:
        return await self._confirm(
            "get_achievement_stats",
            None,
            code=ErrorCode.ACHIEVEMENT_STATS_ERROR,
            failure="Failed to get achievement stats",
            parse=_parse_stats,
            track_phase=False,
        )

    # ─── Monotonic merges ────────────────────────────────────────

    def _forward_only(self, incoming: Achievement) -> Achievement:
        prior = self.get(incoming.id)
        if prior is not None and incoming.status.rank < prior.status.rank:
            logger.warning(
                f"Ignoring achievement {incoming.id} regression "
                f"{prior.status.value} -> {incoming.status.value}"
            )
            return prior
        return incoming

    def _replace(self, value: list[Achievement]) -> list[Achievement]:
        return super()._replace([self._forward_only(a) for a in value])

    def _replace_by_id(self, entity: Achievement) -> Achievement:
        return super()._replace_by_id(self._forward_only(entity))
