"""
Mock backend for testing.

Allows scripting responses per command without a server. Handlers can be
plain values, exceptions to raise, or callables (sync or async) that take
the payload and return a result.
"""

import asyncio
import copy
import inspect
from typing import Any

from .base import KNOWN_COMMANDS, RemoteBackend, RemoteCallError


class MockBackend(RemoteBackend):
    """
    Scripted backend.

    Example:
        backend = MockBackend({"get_all_tasks": [{"id": 1, "title": "Read"}]})
        backend.fail("add_task", "database locked")
        backend.set_delay("get_all_tasks", 0.05)
    """

    def __init__(self, handlers: dict[str, Any] | None = None, name: str = "mock"):
        """
        Initialize mock backend.

        Args:
            handlers: Command name -> value, exception, or callable
            name: Name to report in logs
        """
        self._handlers: dict[str, Any] = dict(handlers or {})
        self._delays: dict[str, float] = {}
        self._name = name
        self.calls: list[dict] = []  # Record of all calls made

    @property
    def name(self) -> str:
        return self._name

    def set_response(self, command: str, response: Any) -> None:
        """Script the result (or handler) for a command."""
        self._handlers[command] = response

    def fail(self, command: str, error: str | dict | Exception = "remote failure") -> None:
        """Make a command reject."""
        if isinstance(error, Exception):
            self._handlers[command] = error
        else:
            self._handlers[command] = RemoteCallError.from_payload(error, command)

    def set_delay(self, command: str, seconds: float) -> None:
        """Delay a command's answer to control completion order."""
        self._delays[command] = seconds

    def called(self, command: str) -> list[dict]:
        """Calls made for one command, in issuance order."""
        return [c for c in self.calls if c["command"] == command]

    def command_log(self) -> list[str]:
        """Command names in issuance order."""
        return [c["command"] for c in self.calls]

    async def invoke(self, command: str, payload: dict | None = None) -> Any:
        """Record the call, wait out any delay, then answer from the script."""
        self.calls.append({"command": command, "payload": payload})

        delay = self._delays.get(command)
        if delay:
            await asyncio.sleep(delay)

        if command not in KNOWN_COMMANDS:
            raise RemoteCallError(f"Unknown command: {command}", command=command)
        if command not in self._handlers:
            raise RemoteCallError(f"No response scripted for {command}", command=command)

        handler = self._handlers[command]
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            result = handler(payload)
            if inspect.isawaitable(result):
                result = await result
            return result
        # Hand out copies so callers can't alias the script
        return copy.deepcopy(handler)
