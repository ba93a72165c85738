"""
Character cache.

Single-slot cache for the one player character. Every confirmed Character
must satisfy ``level == level_for_experience(experience)``; results that
don't are refused and the slot keeps its previous value.
"""

from __future__ import annotations

import logging
from typing import Any

from ..rules.progression import is_level_consistent
from .cache import DomainCache
from .schema import (
    ATTRIBUTE_NAMES,
    Character,
    CharacterClass,
    ErrorCode,
    ExperienceResult,
)

logger = logging.getLogger(__name__)


class CharacterLevelMismatch(ValueError):
    """Server returned a character whose level doesn't match its experience."""

    error_code = ErrorCode.CHARACTER_LEVEL_MISMATCH

    def __init__(self, character: Character):
        self.character = character
        super().__init__(
            f"Character level {character.level} does not match "
            f"experience {character.experience}"
        )


def _check_level(character: Character) -> Character:
    if not is_level_consistent(character):
        raise CharacterLevelMismatch(character)
    return character


def _validated_character(raw: Any) -> Character:
    return _check_level(Character.model_validate(raw))


class CharacterCache(DomainCache[Character | None]):
    """Confirmed player character (or None before the first load)."""

    domain = "character"
    LOAD_COMMAND = "get_character"
    LOAD_ERROR = ErrorCode.GET_CHARACTER_ERROR
    LOAD_FAILURE = "Failed to get character"

    def _empty(self) -> Character | None:
        return None

    def _parse_snapshot(self, raw: Any) -> Character:
        return _validated_character(raw)

    @property
    def character(self) -> Character | None:
        return self._data

    @property
    def level(self) -> int | None:
        return self._data.level if self._data is not None else None

    @property
    def is_loaded(self) -> bool:
        return self._data is not None

    async def _confirm_character(
        self,
        command: str,
        payload: dict | None,
        code: ErrorCode,
        failure: str,
    ) -> Character | None:
        return await self._confirm(
            command, payload,
            code=code, failure=failure,
            parse=_validated_character,
            apply=self._replace,
        )

    async def create(self, character_class: CharacterClass | str) -> Character | None:
        """
        Provision the character.

        Refused locally if one is already cached: there is only one character.
        """
        if self._data is not None:
            self.fail_validation("Character already exists", ErrorCode.CHARACTER_EXISTS)
            return None
        chosen = self._coerce(CharacterClass, character_class, "character class")
        if chosen is None:
            return None
        return await self._confirm_character(
            "create_character",
            {"character_class": chosen.value},
            ErrorCode.CREATE_CHARACTER_ERROR,
            "Failed to create character",
        )

    async def update(self, character_class: CharacterClass | str | None = None) -> Character | None:
        payload: dict = {}
        if character_class is not None:
            chosen = self._coerce(CharacterClass, character_class, "character class")
            if chosen is None:
                return None
            payload["character_class"] = chosen.value
        return await self._confirm_character(
            "update_character",
            payload,
            ErrorCode.UPDATE_CHARACTER_ERROR,
            "Failed to update character",
        )

    async def add_experience(self, points: int) -> ExperienceResult | None:
        """
        Grant experience. The server decides the new level.

        Returns:
            ExperienceResult with the confirmed character and level-up flag,
            or None on failure
        """

        def parse(raw: Any) -> ExperienceResult:
            result = ExperienceResult.model_validate(raw)
            _check_level(result.character)
            return result

        def apply(result: ExperienceResult) -> ExperienceResult:
            self._data = result.character
            return result

        return await self._confirm(
            "add_experience",
            {"expPoints": points},
            code=ErrorCode.ADD_EXPERIENCE_ERROR,
            failure="Failed to add experience",
            parse=parse,
            apply=apply,
        )

    async def add_attribute_points(self, attribute: str, points: int) -> Character | None:
        if attribute not in ATTRIBUTE_NAMES:
            self.fail_validation(f"Unknown attribute: {attribute}")
            return None
        return await self._confirm_character(
            "add_attribute_points",
            {"attribute": attribute, "points": points},
            ErrorCode.ADD_ATTRIBUTE_POINTS_ERROR,
            "Failed to add attribute points",
        )

    async def initialize(self, default_class: CharacterClass | str = CharacterClass.WARRIOR) -> bool:
        """
        Load the character, provisioning a default one if none exists.

        Returns:
            True if a character is cached afterwards
        """
        if await self.load():
            return True
        if self._data is not None:
            # Reload failed but a character exists; keep the load error
            return False

        chosen = self._coerce(CharacterClass, default_class, "character class")
        if chosen is None:
            return False
        logger.info(f"Character not found, creating default {chosen.value}")
        return await self.create(chosen) is not None
