"""Document store adapter - live TaskRepository scoped to one device.

Tasks live in the ``devices/<device_id>/todos`` collection. Each document
holds the task fields, server timestamps and the owning device id.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from bunny_todo.adapters.docstore import (
    READ_ERRORS,
    SERVER_TIMESTAMP,
    CollectionReference,
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
)
from bunny_todo.adapters.local_storage import LocalTaskStore
from bunny_todo.models import (
    ImportResult,
    StoreUnavailableError,
    Task,
    TaskCreate,
    TaskNotFoundError,
    TaskUpdate,
)
from bunny_todo.repositories import LiveTaskRepository, SnapshotCallback, Unsubscribe
from bunny_todo.utils.logger import get_logger

STORE_ERRORS = (*READ_ERRORS, OSError)


def _to_task(doc: DocumentSnapshot) -> Task:
    try:
        return Task(**doc.to_dict())
    except ValidationError as e:
        raise StoreUnavailableError(f"Malformed document {doc.id}: {e}") from e


class RealtimeTaskRepository(LiveTaskRepository):
    """Task repository on the document store with snapshot subscriptions."""

    storage_type = "document"

    def __init__(
        self,
        store: DocumentStore,
        device_id: str,
        local_store: LocalTaskStore,
    ):
        self.store = store
        self.device_id = device_id
        self.local_store = local_store

    @property
    def todos(self) -> CollectionReference:
        return self.store.collection(f"devices/{self.device_id}/todos")

    def _store_call(self, action: str, func, *args: Any):
        try:
            return func(*args)
        except STORE_ERRORS as e:
            get_logger().error("document store %s failed: %s", action, e)
            raise StoreUnavailableError(f"Document store {action} failed: {e}") from e

    def subscribe(self, callback: SnapshotCallback) -> Unsubscribe:
        """Push the ordered task list to callback on every change.

        If the listener fails, callback receives the locally stored tasks once
        and the subscription is not live.
        """
        logger = get_logger()

        def on_snapshot(docs: list[DocumentSnapshot]) -> None:
            logger.debug("snapshot received: %d items", len(docs))
            try:
                tasks = [_to_task(doc) for doc in docs]
            except StoreUnavailableError as e:
                on_error(e)
                return
            callback(tasks)

        def on_error(error: Exception) -> None:
            logger.warning("subscription failed, using local storage: %s", error)
            callback(self.local_store.load_all())

        try:
            return self.todos.on_snapshot(on_snapshot, on_error)
        except STORE_ERRORS as e:
            on_error(e)
            return lambda: None

    async def list_all(self) -> list[Task]:
        docs = self._store_call(
            "list", lambda: self.todos.stream(order_by="created_at", descending=True)
        )
        return [_to_task(doc) for doc in docs]

    async def add(self, task_data: TaskCreate) -> Task:
        data = {
            "task": task_data.task,
            "category": task_data.category,
            "completed": False,
            "created_at": SERVER_TIMESTAMP,
            "updated_at": SERVER_TIMESTAMP,
            "device_id": self.device_id,
        }
        ref = self.todos.document()
        stored = self._store_call("add", ref.set, data)
        get_logger().info("todo added with id %s", ref.id)
        return Task(id=ref.id, **stored)

    async def update(self, task_id: int | str, updates: TaskUpdate) -> Task:
        ref = self.todos.document(str(task_id))
        fields = {**updates.changes(), "updated_at": SERVER_TIMESTAMP}
        try:
            stored = self._store_call("update", ref.update, fields)
        except DocumentNotFoundError as e:
            raise TaskNotFoundError(task_id) from e
        return Task(id=ref.id, **stored)

    async def delete(self, task_id: int | str) -> bool:
        ref = self.todos.document(str(task_id))
        if not self._store_call("delete", ref.delete):
            raise TaskNotFoundError(task_id)
        return True

    async def import_from_local(self) -> ImportResult:
        """Copy local tasks into the collection, then clear local storage.

        Tasks whose id already appears as an ``original_id`` remotely are
        skipped.
        """
        logger = get_logger()
        local_tasks = self.local_store.load_all()
        result = ImportResult()
        if not local_tasks:
            return result

        existing = {
            str(doc.data["original_id"])
            for doc in self._store_call("list", self.todos.stream)
            if doc.data.get("original_id") is not None
        }

        for task in local_tasks:
            if str(task.id) in existing:
                result.skipped += 1
                continue
            data = {
                "task": task.task,
                "category": task.category,
                "completed": task.completed,
                "created_at": task.created_at.isoformat(),
                "updated_at": SERVER_TIMESTAMP,
                "device_id": self.device_id,
                "original_id": str(task.id),
            }
            ref = self.todos.document()
            stored = self._store_call("import", ref.set, data)
            result.tasks.append(Task(id=ref.id, **stored))
            result.imported += 1

        self.local_store.clear()
        logger.info(
            "imported %d local tasks (%d skipped)", result.imported, result.skipped
        )
        return result
