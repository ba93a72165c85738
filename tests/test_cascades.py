"""Tests for the cross-domain cascade orchestrator."""

import asyncio

from pdrpg.state import ErrorCode, EventType
from pdrpg.systems import Workflow

from factories import character_data, entry_data, habit_data


def run(coro):
    return asyncio.run(coro)


class TestHabitCompletion:
    """Test the habit-completion workflow."""

    def test_happy_path(self, ctx, backend):
        run(ctx.character.load())
        run(ctx.habits.load())
        backend.set_response("get_all_habits", [
            habit_data(1, "Meditate", streak=4),
            habit_data(2, "Water", habit_type="Counter", target_value=8),
        ])
        backend.calls.clear()

        result = run(ctx.orchestrator.mark_habit_today(1, completed=True))

        assert result.succeeded
        assert result.step_names == ["write_entry", "reload_habits", "merge_entry", "reload_character"]
        assert backend.command_log() == ["add_habit_entry", "get_all_habits", "get_character"]
        assert ctx.habits.get(1).current_streak == 4
        assert [e.habit_id for e in ctx.habits.today_entries] == [1]
        assert result.new_level is None
        assert len(ctx.notifications) == 0

    def test_write_failure_aborts(self, ctx, backend):
        """A failed entry write touches nothing downstream."""
        run(ctx.character.load())
        run(ctx.habits.initialize())
        habits_before = ctx.habits.habits
        character_before = ctx.character.character
        backend.fail("add_habit_entry", "database locked")
        backend.calls.clear()

        result = run(ctx.orchestrator.mark_habit_today(1, completed=True))

        assert result.aborted
        assert result.step_names == ["write_entry"]
        assert backend.command_log() == ["add_habit_entry"]
        assert ctx.habits.error.code == ErrorCode.MARK_HABIT_ERROR
        assert ctx.habits.habits == habits_before
        assert ctx.habits.today_entries == []
        assert ctx.character.character == character_before
        assert len(ctx.notifications) == 0

    def test_reload_failure_continues(self, ctx, backend):
        """Once the write lands, later steps run even if one fails."""
        run(ctx.character.load())
        backend.fail("get_all_habits", "timeout")
        backend.set_response("get_character", character_data(level=2, experience=120))
        backend.calls.clear()

        result = run(ctx.orchestrator.mark_habit_today(2, value=8))

        assert not result.aborted
        assert not result.succeeded
        assert [s.name for s in result.failed_steps] == ["reload_habits"]
        assert ctx.habits.error.code == ErrorCode.LOAD_HABITS_ERROR
        assert [e.value for e in ctx.habits.today_entries] == [8]
        assert ctx.character.level == 2
        assert backend.called("add_habit_entry")[0]["payload"] == {
            "habit_id": 2, "date": "2026-10-19", "value": 8,
        }

    def test_level_up_notifies(self, ctx, backend):
        run(ctx.character.load())
        backend.set_response("get_character", character_data(level=2, experience=110))

        result = run(ctx.orchestrator.mark_habit_today(1, completed=True))

        assert result.new_level == 2
        assert [n.level for n in ctx.notifications.entries] == [2]

    def test_multi_level_jump_single_notification(self, ctx, backend):
        run(ctx.character.load())
        backend.set_response("get_character", character_data(level=4, experience=950))

        run(ctx.orchestrator.mark_habit_today(1, completed=True))

        assert [n.level for n in ctx.notifications.entries] == [4]

    def test_no_notification_without_prior_character(self, ctx, backend):
        """Nothing to compare against on the first load."""
        run(ctx.orchestrator.mark_habit_today(1, completed=True))

        assert ctx.character.is_loaded
        assert len(ctx.notifications) == 0

    def test_merge_replaces_previous_entry(self, ctx, backend):
        backend.set_response("get_habit_entries_for_date", [entry_data(9, 2, value=3)])
        run(ctx.habits.initialize())

        run(ctx.orchestrator.mark_habit_today(2, value=5))

        assert [(e.habit_id, e.value) for e in ctx.habits.today_entries] == [(2, 5)]


class TestQuestCompletion:
    """Test the quest-completion workflow."""

    def test_happy_path(self, ctx, backend):
        run(ctx.quests.load_active())
        backend.calls.clear()

        result = run(ctx.orchestrator.complete_quest(1))

        assert result.succeeded
        assert backend.command_log() == [
            "complete_quest", "check_and_update_achievements", "get_all_achievements",
        ]
        assert ctx.quests.get(1).status.value == "Completed"
        assert len(ctx.achievements) == 2

    def test_complete_failure_aborts(self, ctx, backend):
        backend.fail("complete_quest", "Quest not found")

        result = run(ctx.orchestrator.complete_quest(99))

        assert result.aborted
        assert backend.command_log() == ["complete_quest"]
        assert ctx.quests.error.code == ErrorCode.COMPLETE_QUEST_ERROR

    def test_check_failure_still_reloads(self, ctx, backend):
        backend.fail("check_and_update_achievements", "boom")

        result = run(ctx.orchestrator.complete_quest(1))

        assert result.step_names == ["complete_quest", "check_achievements", "reload_achievements"]
        assert [s.name for s in result.failed_steps] == ["check_achievements"]
        assert len(ctx.achievements) == 2


class TestQuestSystemInit:
    """Test quest subsystem start-up ordering."""

    EXPECTED = [
        "expire_overdue_quests",
        "get_active_quests",
        "update_quest_progress",
        "get_active_quests",
        "get_all_achievements",
        "check_and_update_achievements",
        "get_all_achievements",
    ]

    def test_order(self, ctx, backend):
        result = run(ctx.orchestrator.initialize_quest_system())

        assert result.succeeded
        assert backend.command_log() == self.EXPECTED

    def test_failures_do_not_stop(self, ctx, backend):
        backend.fail("expire_overdue_quests", "boom")
        backend.fail("update_quest_progress", "boom")

        result = run(ctx.orchestrator.initialize_quest_system())

        assert backend.command_log() == self.EXPECTED
        assert [s.name for s in result.failed_steps] == ["expire_quests", "update_progress"]
        assert len(ctx.quests) == 1
        assert len(ctx.achievements) == 2

    def test_check_failure_skips_second_reload(self, ctx, backend):
        backend.fail("check_and_update_achievements", "boom")

        result = run(ctx.orchestrator.initialize_quest_system())

        assert backend.command_log() == self.EXPECTED[:-1]
        assert result.workflow == Workflow.QUEST_SYSTEM_INIT


class TestOtherWorkflows:
    """Test the smaller cascades."""

    def test_generate_reloads_active(self, ctx, backend):
        result = run(ctx.orchestrator.generate_weekly_quests())

        assert [q.id for q in result.value] == [3]
        assert backend.command_log() == ["generate_weekly_quests", "get_active_quests"]

    def test_expire_failure_skips_reload(self, ctx, backend):
        backend.fail("expire_overdue_quests")

        result = run(ctx.orchestrator.expire_overdue_quests())

        assert backend.command_log() == ["expire_overdue_quests"]
        assert result.failed_steps[0].error.code == ErrorCode.EXPIRE_QUESTS_ERROR

    def test_update_progress_reloads(self, ctx, backend):
        run(ctx.orchestrator.update_quest_progress())
        assert backend.command_log() == ["update_quest_progress", "get_active_quests"]

    def test_award_experience_level_up(self, ctx, backend):
        run(ctx.character.load())
        backend.set_response("add_experience", {
            "character": character_data(level=2, experience=150),
            "levelUp": True,
        })

        result = run(ctx.orchestrator.award_experience(100))

        assert result.new_level == 2
        assert [n.level for n in ctx.notifications.entries] == [2]

    def test_refresh_character_without_change(self, ctx, backend):
        run(ctx.character.load())

        result = run(ctx.orchestrator.refresh_character())

        assert result.new_level is None
        assert len(ctx.notifications) == 0


class TestAppInit:
    """Test full start-up."""

    def test_initialize(self, ctx, backend):
        result = run(ctx.orchestrator.initialize())

        assert result.succeeded
        assert ctx.character.is_loaded
        assert len(ctx.tasks) == 2
        assert len(ctx.habits) == 2
        assert len(ctx.quests) == 1
        assert len(ctx.achievements) == 2
        assert backend.called("create_character") == []

    def test_initialize_creates_character(self, ctx, backend):
        backend.fail("get_character", "Character not found")

        result = run(ctx.orchestrator.initialize())

        assert backend.called("create_character")[0]["payload"] == {"character_class": "Warrior"}
        assert ctx.character.is_loaded
        assert result.steps[0].ok

    def test_initialize_best_effort(self, ctx, backend):
        backend.fail("get_all_tasks", "boom")

        result = run(ctx.orchestrator.initialize())

        assert [s.name for s in result.failed_steps] == ["load_tasks"]
        assert len(ctx.quests) == 1

    def test_workflow_events(self, ctx):
        run(ctx.orchestrator.refresh_character())

        started = ctx.bus.get_history(EventType.WORKFLOW_STARTED)
        finished = ctx.bus.get_history(EventType.WORKFLOW_FINISHED)
        assert started[0].data["workflow"] == "character_refresh"
        assert finished[0].data["aborted"] is False
