"""Tests for the data import/export commands."""

from __future__ import annotations

import json
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from bunny_todo.adapters.local_storage import LocalStorage, LocalTaskStore
from bunny_todo.commands.data import app, default_export_path
from bunny_todo.utils import exit_codes

runner = CliRunner()


@pytest.fixture()
def store(tmp_config) -> LocalTaskStore:
    return LocalTaskStore(LocalStorage(tmp_config.storage_dir))


def test_default_export_name():
    today = datetime.now().strftime("%Y-%m-%d")
    assert default_export_path().name == f"bunny-todos-export-{today}.json"


class TestExport:
    def test_writes_json_file(self, store, make_task, tmp_path):
        store.save_all([make_task("local-1", "Buy milk"), make_task("local-2", "Walk")])
        target = tmp_path / "out" / "backup.json"

        result = runner.invoke(app, ["export", "--output", str(target)])

        assert result.exit_code == 0, result.output
        assert "Exported 2 tasks" in result.output
        data = json.loads(target.read_text())
        assert data["count"] == 2
        assert data["backend"] == "local"
        assert data["device_id"].startswith("device_")
        assert [t["task"] for t in data["todos"]] == ["Buy milk", "Walk"]


class TestImport:
    def test_nothing_to_import(self, store):
        result = runner.invoke(app, ["import"])
        assert result.exit_code == 0
        assert "No local tasks" in result.output

    def test_nothing_to_import_still_closes_the_store(self, store):
        sync = MagicMock()
        sync.local.list_all = AsyncMock(return_value=[])
        sync.close = AsyncMock()
        with patch("bunny_todo.commands.data.get_sync_service", return_value=sync):
            result = runner.invoke(app, ["import"])

        assert result.exit_code == 0
        sync.close.assert_awaited_once()
        sync.import_from_local.assert_not_called()

    def test_local_backend_cannot_import(self, store, make_task):
        store.save_all([make_task("local-1", "Buy milk")])
        result = runner.invoke(app, ["import"])
        assert result.exit_code == exit_codes.ERROR_GENERAL
        assert "not supported" in result.output

    def test_document_backend_import(self, store, make_task, monkeypatch):
        monkeypatch.setenv("BUNNY_TODO_BACKEND", "document")
        store.save_all([make_task("local-1", "Buy milk"), make_task("local-2", "Walk")])

        result = runner.invoke(app, ["import"])

        assert result.exit_code == 0, result.output
        assert "Imported 2 tasks" in result.output
        assert store.load_all() == []
