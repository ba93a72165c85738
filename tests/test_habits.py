"""Tests for the habit cache."""

import asyncio
from datetime import date

from pdrpg.state import ErrorCode, HabitCache, HabitEntry, HabitType, LoadingPhase

from factories import entry_data, habit_data


TODAY = date(2026, 10, 19)


def make_cache(backend):
    return HabitCache(backend, today=lambda: TODAY)


class TestHabitLoads:
    """Test loading habits and today's entries."""

    def test_initialize_loads_both(self, backend):
        backend.set_response("get_habit_entries_for_date", [entry_data(5, 1, completed=True)])
        cache = make_cache(backend)

        asyncio.run(cache.initialize())

        assert [h.id for h in cache.habits] == [1, 2]
        assert [e.habit_id for e in cache.today_entries] == [1]
        assert backend.called("get_habit_entries_for_date")[0]["payload"] == {"date": "2026-10-19"}

    def test_entries_failure_keeps_habits(self, backend):
        backend.fail("get_habit_entries_for_date", "nope")
        cache = make_cache(backend)

        asyncio.run(cache.initialize())

        assert len(cache) == 2
        assert cache.today_entries == []
        assert cache.error.code == ErrorCode.LOAD_ENTRIES_ERROR

    def test_history_not_cached(self, backend):
        backend.set_response("get_habit_entries_for_habit", [
            entry_data(1, 1, date="2026-10-17", completed=True),
            entry_data(2, 1, date="2026-10-18", completed=True),
        ])
        cache = make_cache(backend)

        entries = asyncio.run(cache.get_habit_entries(1))

        assert len(entries) == 2
        assert cache.today_entries == []
        assert cache.phase == LoadingPhase.IDLE

    def test_history_failure_returns_empty(self, backend):
        backend.fail("get_habit_entries_for_habit")
        cache = make_cache(backend)

        assert asyncio.run(cache.get_habit_entries(1)) == []
        assert cache.error.code == ErrorCode.GET_ENTRIES_ERROR


class TestHabitMutations:
    """Test habit create / update / delete."""

    def test_add_counter_habit(self, backend):
        backend.set_response(
            "add_habit",
            lambda p: habit_data(3, p["title"], p["habit_type"], p.get("target_value")),
        )
        cache = make_cache(backend)
        asyncio.run(cache.load())

        habit = asyncio.run(cache.add_habit("Pushups", HabitType.COUNTER, 20))

        assert habit.target_value == 20
        assert cache.habits[0].id == 3
        assert backend.called("add_habit")[0]["payload"] == {
            "title": "Pushups", "habit_type": "Counter", "target_value": 20,
        }

    def test_empty_title_rejected(self, backend):
        cache = make_cache(backend)

        assert asyncio.run(cache.add_habit("")) is None
        assert cache.error.code == ErrorCode.EMPTY_TITLE
        assert cache.error.message == "Habit title cannot be empty"
        assert backend.called("add_habit") == []

    def test_update_habit(self, backend):
        backend.set_response("update_habit", habit_data(1, "Meditate 20m", streak=3))
        cache = make_cache(backend)
        asyncio.run(cache.load())

        asyncio.run(cache.update_habit(1, title="Meditate 20m"))

        assert cache.get(1).title == "Meditate 20m"
        assert backend.called("update_habit")[0]["payload"] == {"habit_id": 1, "title": "Meditate 20m"}

    def test_delete_drops_today_entry(self, backend):
        backend.set_response("get_habit_entries_for_date", [entry_data(5, 1), entry_data(6, 2, value=3)])
        backend.set_response("delete_habit", None)
        cache = make_cache(backend)
        asyncio.run(cache.initialize())

        assert asyncio.run(cache.delete_habit(1)) is True

        assert [h.id for h in cache.habits] == [2]
        assert [e.habit_id for e in cache.today_entries] == [2]


class TestHabitEntries:
    """Test entry writes and merging."""

    def test_write_entry_does_not_merge(self, backend):
        """write_entry only confirms; the orchestrator merges."""
        cache = make_cache(backend)

        entry = asyncio.run(cache.write_entry(1, completed=True))

        assert entry.habit_id == 1
        assert entry.date == "2026-10-19"
        assert cache.today_entries == []

    def test_merge_replaces_habit_entry(self, backend):
        cache = make_cache(backend)
        cache.merge_today_entry(HabitEntry(id=1, habit_id=2, date="2026-10-19", value=3))
        cache.merge_today_entry(HabitEntry(id=1, habit_id=2, date="2026-10-19", value=4))

        assert len(cache.today_entries) == 1
        assert cache.today_entries[0].value == 4

    def test_write_failure(self, backend):
        backend.fail("add_habit_entry", "locked")
        cache = make_cache(backend)

        assert asyncio.run(cache.write_entry(1, completed=True)) is None
        assert cache.error.code == ErrorCode.MARK_HABIT_ERROR
        assert cache.phase == LoadingPhase.ERROR

    def test_unknown_habit_type_rejected(self, backend):
        cache = make_cache(backend)

        assert asyncio.run(cache.add_habit("Run", habit_type="Daily")) is None
        assert cache.error.code == ErrorCode.INVALID_INPUT
        assert backend.called("add_habit") == []
