"""
Pydantic models for PDRPG progression state.

Every entity mirrors a result of the authoritative remote boundary.
Designed to validate JSON payloads as they arrive; timestamps are seconds
since the Unix epoch, dates are ``YYYY-MM-DD`` and week keys ``YYYY-WW``.
"""

from datetime import date, datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class CharacterClass(str, Enum):
    WARRIOR = "Warrior"  # Physical growth, sport, health
    MAGE = "Mage"        # Intellect, study, skills
    BARD = "Bard"        # Creativity, social skills, communication
    ROGUE = "Rogue"      # Finances, enterprise, practical skills


CLASS_DESCRIPTIONS: dict[CharacterClass, str] = {
    CharacterClass.WARRIOR: "Focuses on physical growth, sport and health",
    CharacterClass.MAGE: "Builds intellect through study and knowledge",
    CharacterClass.BARD: "Leans on creativity and social skills",
    CharacterClass.ROGUE: "Concentrates on finances and practical skills",
}


# Attribute key -> display name, in radar chart order
ATTRIBUTE_NAMES: dict[str, str] = {
    "strength": "Strength",
    "intelligence": "Intelligence",
    "charisma": "Charisma",
    "dexterity": "Dexterity",
    "wisdom": "Wisdom",
    "constitution": "Constitution",
}


class HabitType(str, Enum):
    BOOLEAN = "Boolean"  # Done / not done
    COUNTER = "Counter"  # Numeric value against an optional target


class QuestType(str, Enum):
    TASK = "Task"
    HABIT = "Habit"
    CHARACTER = "Character"


class QuestStatus(str, Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    EXPIRED = "Expired"


class AchievementType(str, Enum):
    HABIT_STREAK = "HabitStreak"
    TASK_COUNT = "TaskCount"
    CHARACTER_LEVEL = "CharacterLevel"
    QUEST_COUNT = "QuestCount"


class AchievementStatus(str, Enum):
    LOCKED = "Locked"
    AVAILABLE = "Available"
    EARNED = "Earned"

    @property
    def rank(self) -> int:
        """Position in the one-way Locked -> Available -> Earned ladder."""
        return list(AchievementStatus).index(self)


class LoadingPhase(str, Enum):
    """Phase of a domain cache's most recent round trip."""
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class ErrorCode(str, Enum):
    """Failure codes recorded in a cache's error slot, one per step."""
    # Validation (raised locally, no remote call)
    EMPTY_TITLE = "EMPTY_TITLE"
    INVALID_INPUT = "INVALID_INPUT"
    CHARACTER_EXISTS = "CHARACTER_EXISTS"
    CHARACTER_LEVEL_MISMATCH = "CHARACTER_LEVEL_MISMATCH"

    # Character
    GET_CHARACTER_ERROR = "GET_CHARACTER_ERROR"
    CREATE_CHARACTER_ERROR = "CREATE_CHARACTER_ERROR"
    UPDATE_CHARACTER_ERROR = "UPDATE_CHARACTER_ERROR"
    ADD_EXPERIENCE_ERROR = "ADD_EXPERIENCE_ERROR"
    ADD_ATTRIBUTE_POINTS_ERROR = "ADD_ATTRIBUTE_POINTS_ERROR"

    # Tasks
    LOAD_TASKS_ERROR = "LOAD_TASKS_ERROR"
    ADD_TASK_ERROR = "ADD_TASK_ERROR"
    TOGGLE_TASK_ERROR = "TOGGLE_TASK_ERROR"
    DELETE_TASK_ERROR = "DELETE_TASK_ERROR"

    # Habits
    LOAD_HABITS_ERROR = "LOAD_HABITS_ERROR"
    LOAD_ENTRIES_ERROR = "LOAD_ENTRIES_ERROR"
    ADD_HABIT_ERROR = "ADD_HABIT_ERROR"
    UPDATE_HABIT_ERROR = "UPDATE_HABIT_ERROR"
    DELETE_HABIT_ERROR = "DELETE_HABIT_ERROR"
    MARK_HABIT_ERROR = "MARK_HABIT_ERROR"
    GET_ENTRIES_ERROR = "GET_ENTRIES_ERROR"

    # Quests
    GENERATE_QUESTS_ERROR = "GENERATE_QUESTS_ERROR"
    LOAD_QUESTS_ERROR = "LOAD_QUESTS_ERROR"
    LOAD_ACTIVE_QUESTS_ERROR = "LOAD_ACTIVE_QUESTS_ERROR"
    UPDATE_QUEST_PROGRESS_ERROR = "UPDATE_QUEST_PROGRESS_ERROR"
    COMPLETE_QUEST_ERROR = "COMPLETE_QUEST_ERROR"
    EXPIRE_QUESTS_ERROR = "EXPIRE_QUESTS_ERROR"

    # Achievements
    LOAD_ACHIEVEMENTS_ERROR = "LOAD_ACHIEVEMENTS_ERROR"
    LOAD_ACHIEVEMENTS_BY_STATUS_ERROR = "LOAD_ACHIEVEMENTS_BY_STATUS_ERROR"
    CHECK_ACHIEVEMENTS_ERROR = "CHECK_ACHIEVEMENTS_ERROR"
    EARN_ACHIEVEMENT_ERROR = "EARN_ACHIEVEMENT_ERROR"
    ACHIEVEMENT_STATS_ERROR = "ACHIEVEMENT_STATS_ERROR"


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def now_timestamp() -> int:
    return int(datetime.now().timestamp())


def format_date(day: date) -> str:
    """Day key used by habit entries (``YYYY-MM-DD``)."""
    return day.strftime("%Y-%m-%d")


def format_week(day: date) -> str:
    """ISO week key used by quests (``YYYY-WW``)."""
    year, week, _ = day.isocalendar()
    return f"{year}-{week:02d}"


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------

class CacheError(BaseModel):
    """Structured failure stored in a domain cache's error slot."""
    message: str
    code: ErrorCode

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


# -----------------------------------------------------------------------------
# Character
# -----------------------------------------------------------------------------

class CharacterAttributes(BaseModel):
    """Six counters shown on the attribute radar."""
    strength: int = 0       # Sport, training, health
    intelligence: int = 0   # Study, reading, courses
    charisma: int = 0       # Social contact, presentations
    dexterity: int = 0      # Practical skills, hobbies
    wisdom: int = 0         # Meditation, reflection
    constitution: int = 0   # Sleep, diet, health habits


class Character(BaseModel):
    """
    The player character. There is only ever one (id is always 1).

    ``level`` is authoritative but must always equal
    ``level_for_experience(experience)``; caches reject results that don't.
    """
    id: int = 1
    level: int = 1
    experience: int = 0
    character_class: CharacterClass = CharacterClass.WARRIOR
    attributes: CharacterAttributes = Field(default_factory=CharacterAttributes)
    created_at: int = Field(default_factory=now_timestamp)
    updated_at: int = Field(default_factory=now_timestamp)


class ExperienceResult(BaseModel):
    """Result of ``add_experience``."""
    model_config = ConfigDict(populate_by_name=True)

    character: Character
    level_up: bool = Field(default=False, alias="levelUp")


class CharacterStats(BaseModel):
    """Character summary for display."""
    current_level: int
    current_experience: int
    experience_to_next_level: int
    level_progress: float  # 0.0 - 1.0
    total_attribute_points: int
    class_name: str
    class_description: str


# -----------------------------------------------------------------------------
# Tasks
# -----------------------------------------------------------------------------

class Task(BaseModel):
    id: int
    title: str
    completed: bool = False
    created_at: int = Field(default_factory=now_timestamp)
    updated_at: int = Field(default_factory=now_timestamp)


# -----------------------------------------------------------------------------
# Habits
# -----------------------------------------------------------------------------

class Habit(BaseModel):
    """A recurring habit. ``current_streak`` is computed by the server only."""
    id: int
    title: str
    habit_type: HabitType = HabitType.BOOLEAN
    target_value: int | None = None  # Counter habits only, e.g. 8 glasses of water
    current_streak: int = 0
    created_at: int = Field(default_factory=now_timestamp)
    updated_at: int = Field(default_factory=now_timestamp)


class HabitEntry(BaseModel):
    """One day's record for a habit. Unique per (habit_id, date)."""
    id: int
    habit_id: int
    date: str  # YYYY-MM-DD
    completed: bool = False  # Boolean habits
    value: int = 0           # Counter habits
    created_at: int = Field(default_factory=now_timestamp)


class HabitWithEntry(BaseModel):
    """A habit joined with today's entry, if any."""
    habit: Habit
    today_entry: HabitEntry | None = None
    completed_today: bool = False
    today_value: int = 0


# -----------------------------------------------------------------------------
# Quests & Achievements
# -----------------------------------------------------------------------------

class Quest(BaseModel):
    """
    Weekly quest.

    Status moves one way in normal operation: Active -> Completed or
    Active -> Expired.
    """
    id: int
    title: str
    description: str = ""
    quest_type: QuestType = QuestType.TASK
    target_value: int = 0
    current_progress: int = 0
    category: str | None = None
    habit_id: int | None = None
    status: QuestStatus = QuestStatus.ACTIVE
    reward_exp: int = 0
    deadline: int | None = None  # Unix timestamp
    week: str = ""               # YYYY-WW
    created_at: int = Field(default_factory=now_timestamp)
    updated_at: int = Field(default_factory=now_timestamp)


class Achievement(BaseModel):
    """Achievement badge. Status is monotonic: Locked -> Available -> Earned."""
    id: int
    name: str
    description: str = ""
    achievement_type: AchievementType = AchievementType.TASK_COUNT
    required_value: int = 0
    icon: str = ""
    status: AchievementStatus = AchievementStatus.LOCKED
    earned_at: int | None = None
    created_at: int = Field(default_factory=now_timestamp)
    updated_at: int = Field(default_factory=now_timestamp)


class AchievementStats(BaseModel):
    """Server-side achievement counts."""
    earned: int = 0
    available: int = 0
    locked: int = 0


# -----------------------------------------------------------------------------
# Notifications
# -----------------------------------------------------------------------------

class LevelUpNotification(BaseModel):
    """Ephemeral level-up toast."""
    id: str
    level: int
    timestamp: float  # seconds since the epoch
