"""
Remote call boundary.

Defines the interface every authoritative backend must implement. The
client never computes game rules itself; it names a command, sends a
payload and waits for a typed result or a rejection.
"""

from abc import ABC, abstractmethod
from typing import Any


# Every command the progression client issues, grouped by domain
COMMANDS: dict[str, tuple[str, ...]] = {
    "character": (
        "get_character",
        "create_character",
        "update_character",
        "add_experience",
        "add_attribute_points",
    ),
    "habits": (
        "get_all_habits",
        "get_habit_entries_for_date",
        "add_habit",
        "update_habit",
        "delete_habit",
        "add_habit_entry",
        "get_habit_entries_for_habit",
    ),
    "tasks": (
        "get_all_tasks",
        "add_task",
        "toggle_task_status",
        "delete_task",
    ),
    "quests": (
        "generate_weekly_quests",
        "get_quests_for_week",
        "get_active_quests",
        "update_quest_progress",
        "complete_quest",
        "expire_overdue_quests",
    ),
    "achievements": (
        "get_all_achievements",
        "get_achievements_by_status",
        "check_and_update_achievements",
        "earn_achievement",
        "get_achievement_stats",
    ),
}

# Flat set of every command name
KNOWN_COMMANDS: frozenset[str] = frozenset(
    command for commands in COMMANDS.values() for command in commands
)


class RemoteCallError(Exception):
    """
    Rejection from the remote boundary.

    The server may reject with a bare string or with a structured
    ``{"message": ..., "code": ...}`` error; both land here.
    """

    def __init__(self, message: str, code: str | None = None, command: str | None = None):
        self.message = message
        self.code = code
        self.command = command
        super().__init__(message)

    @classmethod
    def from_payload(cls, error: Any, command: str | None = None) -> "RemoteCallError":
        """Build from whatever the server put in its error slot."""
        if isinstance(error, dict):
            return cls(
                str(error.get("message", "")),
                code=error.get("code"),
                command=command,
            )
        return cls(str(error) if error is not None else "", command=command)


class RemoteBackend(ABC):
    """
    Abstract base class for authoritative backends.

    All backends must implement:
    - invoke(): issue a named command and await its result
    - name: identifier for logs
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier."""
        pass

    @abstractmethod
    async def invoke(self, command: str, payload: dict | None = None) -> Any:
        """
        Issue a remote command.

        This is the only suspension point in the client: the caller yields
        until the server answers.

        Args:
            command: Command name, e.g. "get_all_tasks"
            payload: Structured request (omitted for parameterless commands)

        Returns:
            The decoded result (dict, list, number, or None)

        Raises:
            RemoteCallError: If the server rejects the call
        """
        pass
