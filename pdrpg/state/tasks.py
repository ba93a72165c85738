"""Task cache: the simplest domain."""

from __future__ import annotations

from .cache import CollectionCache, Mutation
from .schema import ErrorCode, Task


class TaskCache(CollectionCache[Task]):
    """Confirmed list of tasks, newest first."""

    domain = "tasks"
    model = Task
    LOAD_COMMAND = "get_all_tasks"
    LOAD_ERROR = ErrorCode.LOAD_TASKS_ERROR
    LOAD_FAILURE = "Failed to load tasks"
    ID_KEY = "taskId"
    MUTATIONS = {
        Mutation.CREATE: ("add_task", ErrorCode.ADD_TASK_ERROR, "Failed to add task"),
        Mutation.UPDATE: ("toggle_task_status", ErrorCode.TOGGLE_TASK_ERROR, "Failed to toggle task status"),
        Mutation.DELETE: ("delete_task", ErrorCode.DELETE_TASK_ERROR, "Failed to delete task"),
    }

    @property
    def tasks(self) -> list[Task]:
        return self.items

    async def add_task(self, title: str) -> Task | None:
        """Create a task. Blank titles are rejected without a remote call."""
        title = title.strip()
        if not title:
            self.fail_validation("Task title cannot be empty", ErrorCode.EMPTY_TITLE)
            return None
        return await self.mutate(Mutation.CREATE, {"title": title})

    async def toggle_task(self, task_id: int) -> Task | None:
        """Flip a task's completed flag."""
        return await self.mutate(Mutation.UPDATE, {"taskId": task_id})

    async def delete_task(self, task_id: int) -> bool:
        return await self.mutate(Mutation.DELETE, {"taskId": task_id}) is not None
