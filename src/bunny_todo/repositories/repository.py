"""Repository abstraction layer for Bunny Todo.

This module defines the abstract base classes (interfaces) for task stores,
following the Ports & Adapters pattern. The sync adapter and the view layer
only see these interfaces, so the REST, document and local backends are
interchangeable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime

from bunny_todo.models import (
    ExportDocument,
    ImportResult,
    Progress,
    Task,
    TaskCreate,
    TaskUpdate,
)

SnapshotCallback = Callable[[list[Task]], None]
Unsubscribe = Callable[[], None]


class TaskRepository(ABC):
    """Abstract base class for task persistence operations.

    Every operation is all-or-nothing for a single record.
    """

    storage_type: str = "unknown"

    @abstractmethod
    async def list_all(self) -> list[Task]:
        """List all tasks, newest first.

        Raises:
            StoreUnavailableError: If the store cannot be reached
        """
        raise NotImplementedError(
            "TaskRepository.list_all() must be implemented by adapter"
        )

    @abstractmethod
    async def add(self, task_data: TaskCreate) -> Task:
        """Create a new task.

        Args:
            task_data: Validated TaskCreate

        Returns:
            Created Task with store-assigned id and created_at

        Raises:
            TaskValidationError: If the store rejects the data
            StoreUnavailableError: If the store cannot be reached
        """
        raise NotImplementedError("TaskRepository.add() must be implemented by adapter")

    @abstractmethod
    async def update(self, task_id: int | str, updates: TaskUpdate) -> Task:
        """Update the supplied fields of an existing task.

        Raises:
            TaskNotFoundError: If task does not exist
            StoreUnavailableError: If the store cannot be reached
        """
        raise NotImplementedError(
            "TaskRepository.update() must be implemented by adapter"
        )

    @abstractmethod
    async def delete(self, task_id: int | str) -> bool:
        """Delete a task.

        Raises:
            TaskNotFoundError: If task does not exist
            StoreUnavailableError: If the store cannot be reached
        """
        raise NotImplementedError(
            "TaskRepository.delete() must be implemented by adapter"
        )

    async def progress(self) -> Progress:
        """Completion statistics over all tasks."""
        return Progress.from_tasks(await self.list_all())

    async def export(self, device_id: str | None = None) -> ExportDocument:
        """Serialize the whole collection for download."""
        tasks = await self.list_all()
        return ExportDocument(
            exported_at=datetime.now(UTC),
            device_id=device_id,
            backend=self.storage_type,
            count=len(tasks),
            todos=tasks,
        )

    async def close(self) -> None:
        """Release connections held by the repository."""


class LiveTaskRepository(TaskRepository):
    """Task repository that pushes list snapshots to subscribers."""

    @abstractmethod
    def subscribe(self, callback: SnapshotCallback) -> Unsubscribe:
        """Deliver the full ordered list now and after every change.

        Returns:
            Handle that cancels the subscription when called
        """
        raise NotImplementedError(
            "LiveTaskRepository.subscribe() must be implemented by adapter"
        )

    @abstractmethod
    async def import_from_local(self) -> ImportResult:
        """Copy locally stored tasks into this store and clear local storage."""
        raise NotImplementedError(
            "LiveTaskRepository.import_from_local() must be implemented by adapter"
        )
