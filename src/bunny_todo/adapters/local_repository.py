"""Local storage implementation of TaskRepository.

Serves as the stand-alone "local" backend and as the fallback target of the
sync adapter when a remote store is unavailable.
"""

from __future__ import annotations

from bunny_todo.adapters.local_storage import LocalTaskStore
from bunny_todo.adapters.utils import generate_local_id, now_utc
from bunny_todo.models import Task, TaskCreate, TaskNotFoundError, TaskUpdate
from bunny_todo.repositories import TaskRepository
from bunny_todo.utils.logger import get_logger


def _same_id(a: int | str, b: int | str) -> bool:
    # ids arrive from the command line as strings
    return str(a) == str(b)


class LocalTaskRepository(TaskRepository):
    """Task repository over the Local Task Store."""

    storage_type = "local"

    def __init__(self, store: LocalTaskStore, device_id: str | None = None):
        self.store = store
        self.device_id = device_id

    async def list_all(self) -> list[Task]:
        return self.store.load_all()

    async def add(self, task_data: TaskCreate) -> Task:
        tasks = self.store.load_all()
        task = Task(
            id=generate_local_id(),
            task=task_data.task,
            category=task_data.category,
            completed=False,
            created_at=now_utc(),
            device_id=self.device_id,
        )
        tasks.insert(0, task)
        self.store.save_all(tasks)
        get_logger().info("saved task %s to local storage", task.id)
        return task

    async def update(self, task_id: int | str, updates: TaskUpdate) -> Task:
        tasks = self.store.load_all()
        for index, task in enumerate(tasks):
            if _same_id(task.id, task_id):
                updated = task.model_copy(update=updates.changes())
                tasks[index] = updated
                self.store.save_all(tasks)
                get_logger().info("updated task %s in local storage", task_id)
                return updated
        raise TaskNotFoundError(task_id)

    async def delete(self, task_id: int | str) -> bool:
        tasks = self.store.load_all()
        remaining = [task for task in tasks if not _same_id(task.id, task_id)]
        if len(remaining) == len(tasks):
            raise TaskNotFoundError(task_id)
        self.store.save_all(remaining)
        get_logger().info("deleted task %s from local storage", task_id)
        return True
