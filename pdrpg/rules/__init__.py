"""
Progression rules as pure functions.

Separates level math from data models for easier testing.
"""

from .progression import (
    level_for_experience,
    experience_for_level,
    level_progress,
    experience_to_next_level,
    total_attribute_points,
    is_level_consistent,
    character_stats,
)

__all__ = [
    "level_for_experience",
    "experience_for_level",
    "level_progress",
    "experience_to_next_level",
    "total_attribute_points",
    "is_level_consistent",
    "character_stats",
]
