"""
Pytest fixtures for PDRPG client tests.

Provides a scripted backend, a deterministic notification scheduler and a
fully wired context.
"""

from datetime import date

import pytest

from pdrpg.context import create_context
from pdrpg.remote import MockBackend
from pdrpg.state import EventBus

from factories import (
    achievement_data,
    character_data,
    habit_data,
    quest_data,
    task_data,
)


TODAY = date(2026, 10, 19)


class FakeTimer:
    """Handle returned by FakeScheduler."""

    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Manual clock for notification expiry. Call advance() to fire timers."""

    def __init__(self):
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def __call__(self, delay, callback):
        timer = FakeTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def clock(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds
        due = sorted(
            (t for t in self.timers if t.when <= self.now and not t.cancelled),
            key=lambda t: t.when,
        )
        for timer in due:
            self.timers.remove(timer)
            timer.callback()

    def fire_all(self):
        """Run every callback, including cancelled ones."""
        timers, self.timers = self.timers, []
        for timer in timers:
            timer.callback()


def default_handlers():
    """A healthy server with one of everything."""
    return {
        "get_character": character_data(level=1, experience=50),
        "create_character": character_data(),
        "update_character": character_data(level=1, experience=50, character_class="Mage"),
        "get_all_tasks": [task_data(2, "Write report"), task_data(1, "Read", completed=True)],
        "get_all_habits": [
            habit_data(1, "Meditate", streak=3),
            habit_data(2, "Water", habit_type="Counter", target_value=8),
        ],
        "get_habit_entries_for_date": [],
        "add_habit_entry": lambda payload: {
            "id": 10,
            "habit_id": payload["habit_id"],
            "date": payload["date"],
            "completed": payload.get("completed", False),
            "value": payload.get("value", 0),
            "created_at": 1700000000,
        },
        "get_active_quests": [quest_data(1, "Finish 5 tasks")],
        "get_quests_for_week": [
            quest_data(1, "Finish 5 tasks"),
            quest_data(2, "Old quest", status="Completed", progress=5),
        ],
        "generate_weekly_quests": [quest_data(3, "New quest")],
        "update_quest_progress": [],
        "expire_overdue_quests": 0,
        "complete_quest": quest_data(1, "Finish 5 tasks", status="Completed", progress=5),
        "get_all_achievements": [
            achievement_data(1, "First Steps", status="Available"),
            achievement_data(2, "Marathon"),
        ],
        "check_and_update_achievements": [],
        "earn_achievement": achievement_data(1, "First Steps", status="Earned"),
        "get_achievements_by_status": [achievement_data(2, "Marathon")],
        "get_achievement_stats": [0, 1, 1],
    }


@pytest.fixture
def backend():
    """Scripted backend with healthy default responses."""
    return MockBackend(default_handlers())


@pytest.fixture
def empty_backend():
    """Backend that knows no commands."""
    return MockBackend()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def ctx(backend, scheduler):
    """Fully wired context on the scripted backend."""
    return create_context(
        {"backend": "mock"},
        backend,
        today=lambda: TODAY,
        scheduler=scheduler,
    )
