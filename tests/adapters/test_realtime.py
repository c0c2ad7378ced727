"""Tests for RealtimeTaskRepository on the document store."""

from __future__ import annotations

import sqlite3
from unittest.mock import patch

import pytest

from bunny_todo.adapters.docstore import DocumentStore
from bunny_todo.adapters.realtime import RealtimeTaskRepository
from bunny_todo.models import (
    StoreUnavailableError,
    TaskCreate,
    TaskNotFoundError,
    TaskUpdate,
)

DEVICE = "device_1718441000000_abc123xyz"


@pytest.fixture()
def repo(doc_store, local_store):
    return RealtimeTaskRepository(doc_store, DEVICE, local_store)


class TestWrites:
    @pytest.mark.asyncio
    async def test_add_writes_device_document(self, repo, doc_store):
        task = await repo.add(TaskCreate(task="Buy milk", category="shopping"))

        assert task.completed is False
        assert task.device_id == DEVICE
        assert task.created_at is not None
        assert task.updated_at is not None

        (doc,) = doc_store.collection(f"devices/{DEVICE}/todos").stream()
        assert doc.id == task.id
        assert doc.data["task"] == "Buy milk"
        assert doc.data["device_id"] == DEVICE

    @pytest.mark.asyncio
    async def test_update_and_delete(self, repo):
        task = await repo.add(TaskCreate(task="Walk"))

        updated = await repo.update(task.id, TaskUpdate(completed=True))
        assert updated.completed is True
        assert updated.created_at == task.created_at

        assert await repo.delete(task.id) is True
        assert await repo.list_all() == []

    @pytest.mark.asyncio
    async def test_unknown_ids_raise_not_found(self, repo):
        with pytest.raises(TaskNotFoundError):
            await repo.update("missing", TaskUpdate(completed=True))
        with pytest.raises(TaskNotFoundError):
            await repo.delete("missing")

    @pytest.mark.asyncio
    async def test_store_failure_is_unavailable(self, repo):
        with patch.object(
            DocumentStore, "_write", side_effect=sqlite3.OperationalError("database is locked")
        ):
            with pytest.raises(StoreUnavailableError):
                await repo.add(TaskCreate(task="Walk"))

    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, repo):
        first = await repo.add(TaskCreate(task="First"))
        second = await repo.add(TaskCreate(task="Second"))
        assert [t.id for t in await repo.list_all()] == [second.id, first.id]


class TestSubscribe:
    @pytest.mark.asyncio
    async def test_push_after_add(self, repo):
        snapshots = []
        unsubscribe = repo.subscribe(snapshots.append)
        assert snapshots == [[]]

        await repo.add(TaskCreate(task="Buy milk", category="shopping"))

        latest = snapshots[-1]
        assert len(latest) == 1
        assert latest[0].task == "Buy milk"
        assert latest[0].category == "shopping"
        assert latest[0].completed is False
        unsubscribe()

    def test_listener_error_falls_back_to_local(self, repo, local_store, make_task):
        local_store.save_all([make_task("local-1", "Offline task")])
        snapshots = []

        with patch.object(
            DocumentStore, "_query", side_effect=sqlite3.OperationalError("disk I/O error")
        ):
            repo.subscribe(snapshots.append)

        assert len(snapshots) == 1
        assert [t.task for t in snapshots[0]] == ["Offline task"]


class TestImportFromLocal:
    @pytest.mark.asyncio
    async def test_moves_local_tasks_and_clears_storage(self, repo, local_store, make_task):
        local_store.save_all(
            [
                make_task("local-2", "Second", category="work"),
                make_task("local-1", "First", completed=True),
            ]
        )

        result = await repo.import_from_local()

        assert (result.imported, result.skipped) == (2, 0)
        assert local_store.load_all() == []

        remote = await repo.list_all()
        assert sorted(t.original_id for t in remote) == ["local-1", "local-2"]
        by_text = {t.task: t for t in remote}
        assert by_text["First"].completed is True
        assert by_text["Second"].category == "work"

    @pytest.mark.asyncio
    async def test_skips_already_imported(self, repo, local_store, make_task):
        local_store.save_all([make_task("local-1", "First")])
        await repo.import_from_local()

        local_store.save_all([make_task("local-1", "First"), make_task("local-3", "Third")])
        result = await repo.import_from_local()

        assert (result.imported, result.skipped) == (1, 1)
        assert len(await repo.list_all()) == 2

    @pytest.mark.asyncio
    async def test_nothing_to_import(self, repo):
        result = await repo.import_from_local()
        assert (result.imported, result.skipped) == (0, 0)


class TestFailures:
    def test_poll_failure_falls_back_to_local(self, repo, doc_store, local_store, make_task):
        snapshots = []
        repo.subscribe(snapshots.append)
        local_store.save_all([make_task("local-1", "Offline task")])

        with patch.object(
            DocumentStore,
            "_read_data_version",
            side_effect=sqlite3.OperationalError("disk I/O error"),
        ):
            assert doc_store.poll() is False

        assert [t.task for t in snapshots[-1]] == ["Offline task"]

    @pytest.mark.asyncio
    async def test_corrupt_document_falls_back_to_local(
        self, repo, doc_store, local_store, make_task
    ):
        local_store.save_all([make_task("local-1", "Offline task")])
        snapshots = []
        repo.subscribe(snapshots.append)

        doc_store.collection(f"devices/{DEVICE}/todos").document("bad").set({"n": 1})

        assert [t.task for t in snapshots[-1]] == ["Offline task"]
        with pytest.raises(StoreUnavailableError, match="Malformed"):
            await repo.list_all()
