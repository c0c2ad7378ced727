"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from real filesystem/API state.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from bunny_todo.adapters.docstore import DocumentStore
from bunny_todo.adapters.local_repository import LocalTaskRepository
from bunny_todo.adapters.local_storage import LocalStorage, LocalTaskStore
from bunny_todo.models import Task

NOW = datetime(2024, 6, 15, 9, 0, 0, tzinfo=UTC)


def _make_task(task_id="local-1", text="Test task", **kwargs) -> Task:
    """Build a Task with sensible defaults."""
    data = {
        "id": task_id,
        "task": text,
        "category": "general",
        "completed": False,
        "created_at": NOW,
    }
    data.update(kwargs)
    return Task(**data)


# ---------------------------------------------------------------------------
# Log isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True, scope="session")
def isolated_log_dir(tmp_path_factory):
    """Send the application log to a temporary directory."""
    log_dir = tmp_path_factory.mktemp("logs")
    previous = os.environ.get("BUNNY_TODO_LOG_DIR")
    os.environ["BUNNY_TODO_LOG_DIR"] = str(log_dir)
    yield log_dir
    if previous is None:
        os.environ.pop("BUNNY_TODO_LOG_DIR", None)
    else:
        os.environ["BUNNY_TODO_LOG_DIR"] = previous


# ---------------------------------------------------------------------------
# Config isolation helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def tmp_config(tmp_path, monkeypatch):
    """Provide the real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only.
    Also clears the lru_caches so each test gets fresh service instances.
    """
    from bunny_todo.services.config_service import get_config_service
    from bunny_todo.services.context_manager import get_strategy_context

    monkeypatch.delenv("BUNNY_TODO_BACKEND", raising=False)
    tmpdir = str(tmp_path)
    get_config_service.cache_clear()
    get_strategy_context.cache_clear()
    with patch("bunny_todo.services.config_service.user_config_dir", return_value=tmpdir):
        with patch("bunny_todo.services.config_service.user_data_dir", return_value=tmpdir):
            yield get_config_service()
    get_config_service.cache_clear()
    get_strategy_context.cache_clear()


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


@pytest.fixture()
def local_storage(tmp_path) -> LocalStorage:
    return LocalStorage(tmp_path / "storage")


@pytest.fixture()
def local_store(local_storage) -> LocalTaskStore:
    return LocalTaskStore(local_storage)


@pytest.fixture()
def local_repo(local_store) -> LocalTaskRepository:
    return LocalTaskRepository(local_store, device_id="device_test")


@pytest.fixture()
def doc_store(tmp_path):
    store = DocumentStore(tmp_path / "documents.db")
    yield store
    store.close()


@pytest.fixture()
def make_task():
    """Factory building Task objects with sensible defaults."""
    return _make_task
