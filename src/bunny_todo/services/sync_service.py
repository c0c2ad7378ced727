"""Sync adapter between the primary task store and local storage.

Every mutating call validates its input, marks the sync status as syncing and
tries the primary store. When the primary store is unavailable the write
lands in local storage instead and the result is tagged ``is_local``. Nothing
is retried and nothing is merged: a write that landed locally stays local
until the user imports it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from bunny_todo.adapters.local_repository import LocalTaskRepository
from bunny_todo.models import (
    BunnyTodoError,
    ExportDocument,
    ImportResult,
    Progress,
    StoreUnavailableError,
    SyncStatus,
    Task,
    TaskCreate,
    TaskNotFoundError,
    TaskUpdate,
    TaskValidationError,
    WriteResult,
)
from bunny_todo.repositories import (
    LiveTaskRepository,
    SnapshotCallback,
    TaskRepository,
    Unsubscribe,
)
from bunny_todo.utils.logger import get_logger

StatusListener = Callable[[SyncStatus], None]


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    cause = first.get("ctx", {}).get("error")
    return str(cause) if cause is not None else first["msg"]


def build_task_create(text: str | None, category: str | None = None) -> TaskCreate:
    """Validate add-intent input.

    Raises:
        TaskValidationError: If the text is empty, too long or the category unknown
    """
    try:
        return TaskCreate(task=text, category=category)
    except ValidationError as e:
        raise TaskValidationError(_validation_message(e)) from e


def build_task_update(**fields: Any) -> TaskUpdate:
    """Validate edit-intent input, ignoring fields passed as None.

    Raises:
        TaskValidationError: If no field is supplied or a value is invalid
    """
    try:
        return TaskUpdate(**{k: v for k, v in fields.items() if v is not None})
    except ValidationError as e:
        raise TaskValidationError(_validation_message(e)) from e


class SyncService:
    """Routes task operations to the primary store with local fallback."""

    def __init__(self, primary: TaskRepository, local: LocalTaskRepository):
        """Initialize sync service.

        Args:
            primary: Repository for the configured backend
            local: Local repository used when the primary store is unavailable
        """
        self.primary = primary
        self.local = local
        self.status = SyncStatus.SYNCED if self.is_remote else SyncStatus.LOCAL
        self._status_listeners: list[StatusListener] = []

    @property
    def is_remote(self) -> bool:
        return self.primary is not self.local

    @property
    def is_live(self) -> bool:
        return isinstance(self.primary, LiveTaskRepository)

    def on_status_change(self, listener: StatusListener) -> Unsubscribe:
        """Register a listener called on every sync status transition."""
        self._status_listeners.append(listener)

        def remove() -> None:
            if listener in self._status_listeners:
                self._status_listeners.remove(listener)

        return remove

    def _set_status(self, status: SyncStatus) -> None:
        if status == self.status:
            return
        self.status = status
        for listener in list(self._status_listeners):
            listener(status)

    def _settled_status(self) -> SyncStatus:
        return SyncStatus.SYNCED if self.is_remote else SyncStatus.LOCAL

    async def _commit(
        self,
        action: str,
        task_id: int | str | None,
        remote: Callable[[], Awaitable[Any]],
        fallback: Callable[[], Awaitable[Any]],
    ) -> WriteResult:
        """Run one write: Pending -> Committed(remote | local) or Failed."""
        logger = get_logger()
        previous = self.status
        self._set_status(SyncStatus.SYNCING)
        try:
            outcome = await remote()
        except StoreUnavailableError as e:
            logger.warning("%s of %s fell back to local storage: %s", action, task_id, e)
            self._set_status(SyncStatus.LOCAL)
            try:
                outcome = await fallback()
            except TaskNotFoundError:
                # The record only exists remotely; the local write is a no-op.
                logger.info("%s of %s: not in local storage", action, task_id)
                outcome = None
            task = outcome if isinstance(outcome, Task) else None
            return WriteResult(
                success=True,
                task=task,
                task_id=task.id if task is not None else task_id,
                is_local=True,
            )
        except Exception:
            self._set_status(previous)
            raise

        self._set_status(self._settled_status())
        task = outcome if isinstance(outcome, Task) else None
        return WriteResult(
            success=True,
            task=task,
            task_id=task.id if task is not None else task_id,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def load(self) -> list[Task]:
        """List tasks from the primary store, or local storage if it is down."""
        try:
            tasks = await self.primary.list_all()
        except StoreUnavailableError as e:
            get_logger().warning("loading from local storage: %s", e)
            self._set_status(SyncStatus.LOCAL)
            return await self.local.list_all()
        self._set_status(self._settled_status())
        return tasks

    async def subscribe(self, callback: SnapshotCallback) -> Unsubscribe:
        """Subscribe to list snapshots.

        Live stores push on every change; other stores deliver one snapshot.
        """
        if isinstance(self.primary, LiveTaskRepository):
            return self.primary.subscribe(callback)
        callback(await self.load())
        return lambda: None

    async def progress(self) -> Progress:
        try:
            return await self.primary.progress()
        except StoreUnavailableError as e:
            get_logger().warning("progress from local storage: %s", e)
            self._set_status(SyncStatus.LOCAL)
            return await self.local.progress()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add_task(self, text: str | None, category: str | None = None) -> WriteResult:
        """Create a task.

        Raises:
            TaskValidationError: Before any store call, if the input is invalid
        """
        task_data = build_task_create(text, category)
        return await self._commit(
            "add",
            None,
            lambda: self.primary.add(task_data),
            lambda: self.local.add(task_data),
        )

    async def update_task(self, task_id: int | str, **fields: Any) -> WriteResult:
        """Update the supplied fields of a task.

        Raises:
            TaskValidationError: If no field is supplied or a value is invalid
            TaskNotFoundError: If the primary store has no such task
        """
        updates = build_task_update(**fields)
        return await self._commit(
            "update",
            task_id,
            lambda: self.primary.update(task_id, updates),
            lambda: self.local.update(task_id, updates),
        )

    async def toggle_task(self, task: Task) -> WriteResult:
        """Flip the completion flag of a task."""
        return await self.update_task(task.id, completed=not task.completed)

    async def delete_task(self, task_id: int | str) -> WriteResult:
        """Delete a task.

        Raises:
            TaskNotFoundError: If the primary store has no such task
        """
        return await self._commit(
            "delete",
            task_id,
            lambda: self.primary.delete(task_id),
            lambda: self.local.delete(task_id),
        )

    # ------------------------------------------------------------------
    # Manual reconciliation
    # ------------------------------------------------------------------

    async def import_from_local(self) -> ImportResult:
        """Move locally stored tasks into the live remote store.

        Raises:
            BunnyTodoError: If the primary store does not support import
        """
        if not isinstance(self.primary, LiveTaskRepository):
            raise BunnyTodoError(
                f"Import is not supported by the '{self.primary.storage_type}' backend"
            )
        self._set_status(SyncStatus.SYNCING)
        try:
            result = await self.primary.import_from_local()
        except StoreUnavailableError:
            self._set_status(SyncStatus.LOCAL)
            raise
        self._set_status(SyncStatus.SYNCED)
        return result

    async def export(self, device_id: str | None = None) -> ExportDocument:
        """Serialize the primary store's collection, tagged with this device."""
        return await self.primary.export(device_id or self.local.device_id)

    async def close(self) -> None:
        await self.primary.close()


def get_sync_service() -> SyncService:
    """Build a SyncService for the configured backend."""
    from bunny_todo.services.context_manager import get_strategy_context

    context = get_strategy_context()
    return SyncService(context.task_repository, context.local_repository)
