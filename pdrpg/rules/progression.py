"""
Progression rules as pure functions.

Level and experience math plus attribute aggregation. Nothing here touches
a cache or the remote boundary, so every function is safe to memoize.

Leveling Curve
--------------
    level = floor(sqrt(experience / 100)) + 1
    experience needed for level L = L^2 * 100

The server applies the same curve; the client only reads it back to show
progress and to check that a confirmed Character is self-consistent.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..state.schema import Character, CharacterAttributes

from ..state.schema import CharacterStats, CLASS_DESCRIPTIONS, ATTRIBUTE_NAMES


EXPERIENCE_PER_LEVEL_UNIT = 100


def level_for_experience(experience: int | float) -> int:
    """
    Level reached with the given cumulative experience.

    Raises:
        ValueError: If experience is negative
    """
    if experience < 0:
        raise ValueError(f"Experience cannot be negative: {experience}")
    return math.floor(math.sqrt(experience / EXPERIENCE_PER_LEVEL_UNIT)) + 1


def experience_for_level(level: int) -> int:
    """Experience threshold that closes the given level (``level^2 * 100``)."""
    return level * level * EXPERIENCE_PER_LEVEL_UNIT


def level_progress(level: int, experience: int | float) -> float:
    """
    Fraction of the current level already earned, in [0, 1].

    Args:
        level: Current level
        experience: Cumulative experience

    Returns:
        0.0 when the level band is empty, otherwise the clamped ratio
    """
    lo = experience_for_level(level - 1)
    hi = experience_for_level(level)
    if hi > lo:
        return min(1.0, max(0.0, (experience - lo) / (hi - lo)))
    return 0.0


def experience_to_next_level(level: int, experience: int | float) -> int | float:
    """Experience still missing before the next level (never negative)."""
    return max(0, experience_for_level(level) - experience)


def total_attribute_points(attributes: "CharacterAttributes") -> int:
    """Sum of all six attribute counters."""
    return sum(getattr(attributes, name) for name in ATTRIBUTE_NAMES)


def is_level_consistent(character: "Character") -> bool:
    """Whether a character's level matches its experience."""
    if character.experience < 0:
        return False
    return character.level == level_for_experience(character.experience)


def character_stats(character: "Character") -> CharacterStats:
    """Build the UI summary for a character."""
    return CharacterStats(
        current_level=character.level,
        current_experience=character.experience,
        experience_to_next_level=experience_to_next_level(
            character.level, character.experience,
        ),
        level_progress=level_progress(character.level, character.experience),
        total_attribute_points=total_attribute_points(character.attributes),
        class_name=character.character_class.value,
        class_description=CLASS_DESCRIPTIONS[character.character_class],
    )
