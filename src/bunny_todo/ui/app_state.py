"""In-memory application state for the task view.

The state object is passed explicitly to rendering and update functions;
nothing here is module-global.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from bunny_todo.models import Progress, SyncStatus, Task, TaskFilter


def filter_tasks(tasks: list[Task], task_filter: TaskFilter) -> list[Task]:
    """Project the task list through a filter (all, pending or completed)."""
    if task_filter == "pending":
        return [task for task in tasks if not task.completed]
    if task_filter == "completed":
        return [task for task in tasks if task.completed]
    return list(tasks)


def _same_id(a: int | str, b: int | str) -> bool:
    return str(a) == str(b)


@dataclass
class TentativeUpdate:
    """An optimistic change applied before the store confirms it.

    Holds the record as it was so the change can be rolled back.
    """

    task_id: int | str
    before: Task
    after: Task


@dataclass
class AppState:
    """Last known task list plus the view settings."""

    tasks: list[Task] = field(default_factory=list)
    filter: TaskFilter = "all"
    sync_status: SyncStatus = SyncStatus.SYNCED

    @property
    def visible_tasks(self) -> list[Task]:
        return filter_tasks(self.tasks, self.filter)

    @property
    def progress(self) -> Progress:
        return Progress.from_tasks(self.tasks)

    def find(self, task_id: int | str) -> Task | None:
        for task in self.tasks:
            if _same_id(task.id, task_id):
                return task
        return None

    def replace_all(self, tasks: list[Task]) -> None:
        """Replace the whole list (snapshot pushes are full-list, not patches)."""
        self.tasks = list(tasks)

    def upsert(self, task: Task) -> None:
        """Replace a task with the same id, or add it at the top."""
        for index, existing in enumerate(self.tasks):
            if _same_id(existing.id, task.id):
                self.tasks[index] = task
                return
        self.tasks.insert(0, task)

    def remove(self, task_id: int | str) -> Task | None:
        task = self.find(task_id)
        if task is not None:
            self.tasks = [t for t in self.tasks if not _same_id(t.id, task_id)]
        return task

    def apply_tentative(self, task_id: int | str, **changes) -> TentativeUpdate:
        """Apply an optimistic change and return what is needed to undo it.

        Raises:
            KeyError: If the task is not in the list
        """
        before = self.find(task_id)
        if before is None:
            raise KeyError(task_id)
        after = before.model_copy(update=changes)
        self.upsert(after)
        return TentativeUpdate(task_id=task_id, before=before, after=after)

    def confirm(self, update: TentativeUpdate, stored: Task | None) -> None:
        """Settle a tentative change with the store's record, when one came back."""
        if stored is not None and self.find(update.task_id) is not None:
            self.upsert(stored)

    def rollback(self, update: TentativeUpdate) -> None:
        """Restore the record as it was before the tentative change."""
        if self.find(update.task_id) is not None:
            self.upsert(update.before)
