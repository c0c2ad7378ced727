"""Tests for the top-level task commands (add, list, toggle, edit, delete, ...)."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from bunny_todo.adapters.local_storage import LocalStorage, LocalTaskStore
from bunny_todo.main import app
from bunny_todo.utils import exit_codes

runner = CliRunner()


@pytest.fixture()
def store(tmp_config) -> LocalTaskStore:
    """The Local Task Store the commands will use."""
    return LocalTaskStore(LocalStorage(tmp_config.storage_dir))


@pytest.fixture()
def seeded(store, make_task):
    store.save_all(
        [
            make_task("local-2-bbb", "Buy milk", category="shopping"),
            make_task("local-1-aaa", "Walk the dog", completed=True),
        ]
    )
    return store


# ---------------------------------------------------------------------------
# Help flags
# ---------------------------------------------------------------------------


class TestHelpFlags:
    def test_app_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("add", "list", "toggle", "delete", "watch", "serve"):
            assert command in result.output

    def test_version(self, tmp_config):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "Bunny Todo" in result.output
        assert "local" in result.output


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------


class TestAdd:
    def test_add(self, store):
        result = runner.invoke(app, ["add", "Buy milk", "-c", "shopping"])
        assert result.exit_code == 0, result.output
        assert "Task added successfully" in result.output

        tasks = store.load_all()
        assert [(t.task, t.category) for t in tasks] == [("Buy milk", "shopping")]

    def test_empty_text_is_rejected(self, store):
        result = runner.invoke(app, ["add", "   "])
        assert result.exit_code == exit_codes.ERROR_INVALID_ARGS
        assert "Task cannot be empty" in result.output
        assert store.load_all() == []

    def test_too_long_text_is_rejected(self, store):
        result = runner.invoke(app, ["add", "a" * 101])
        assert result.exit_code == exit_codes.ERROR_INVALID_ARGS
        assert store.load_all() == []

    def test_unknown_category(self, store):
        result = runner.invoke(app, ["add", "Chores", "--category", "home"])
        assert result.exit_code == exit_codes.ERROR_INVALID_ARGS


# ---------------------------------------------------------------------------
# list / progress
# ---------------------------------------------------------------------------


class TestList:
    def test_list_all(self, seeded):
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0, result.output
        assert "Buy milk" in result.output
        assert "Walk the dog" in result.output
        assert "1/2 completed" in result.output

    def test_list_json_pending(self, seeded):
        result = runner.invoke(app, ["list", "--filter", "pending", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [item["task"] for item in data] == ["Buy milk"]

    def test_unknown_filter(self, seeded):
        result = runner.invoke(app, ["list", "-f", "done"])
        assert result.exit_code == exit_codes.ERROR_INVALID_ARGS

    def test_empty_list(self, store):
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0
        assert "No tasks!" in result.output

    def test_progress_json(self, seeded):
        result = runner.invoke(app, ["progress", "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"total": 2, "completed": 1, "progress": 50}


# ---------------------------------------------------------------------------
# toggle / edit / delete
# ---------------------------------------------------------------------------


class TestToggle:
    def test_toggle_by_prefix(self, seeded):
        result = runner.invoke(app, ["toggle", "local-2"])
        assert result.exit_code == 0, result.output
        assert "completed" in result.output
        assert seeded.load_all()[0].completed is True

    def test_toggle_back_to_pending(self, seeded):
        result = runner.invoke(app, ["toggle", "local-1-aaa"])
        assert result.exit_code == 0, result.output
        assert "pending" in result.output
        assert seeded.load_all()[1].completed is False

    def test_unknown_id(self, seeded):
        result = runner.invoke(app, ["toggle", "nope"])
        assert result.exit_code == exit_codes.ERROR_NOT_FOUND
        assert "Todo not found" in result.output


class TestEdit:
    def test_edit_text(self, seeded):
        result = runner.invoke(app, ["edit", "local-2-bbb", "--text", "Buy oat milk"])
        assert result.exit_code == 0, result.output
        assert seeded.load_all()[0].task == "Buy oat milk"

    def test_edit_needs_a_field(self, seeded):
        result = runner.invoke(app, ["edit", "local-2-bbb"])
        assert result.exit_code == exit_codes.ERROR_INVALID_ARGS
        assert "No fields to update" in result.output


class TestDelete:
    def test_delete_confirmed(self, seeded):
        result = runner.invoke(app, ["delete", "local-2-bbb"], input="y\n")
        assert result.exit_code == 0, result.output
        assert 'Delete "Buy milk"?' in result.output
        assert [t.id for t in seeded.load_all()] == ["local-1-aaa"]

    def test_delete_cancelled(self, seeded):
        result = runner.invoke(app, ["delete", "local-2-bbb"], input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert len(seeded.load_all()) == 2

    def test_delete_forced(self, seeded):
        result = runner.invoke(app, ["delete", "local-2-bbb", "--force"])
        assert result.exit_code == 0, result.output
        assert len(seeded.load_all()) == 1

    def test_delete_unknown(self, seeded):
        result = runner.invoke(app, ["delete", "nope", "--force"])
        assert result.exit_code == exit_codes.ERROR_NOT_FOUND
        assert len(seeded.load_all()) == 2


# ---------------------------------------------------------------------------
# watch / serve
# ---------------------------------------------------------------------------


class TestWatch:
    def test_needs_document_backend(self, store):
        result = runner.invoke(app, ["watch", "--duration", "0"])
        assert result.exit_code == exit_codes.ERROR_INVALID_ARGS
        assert "document backend" in result.output

    def test_renders_live_list(self, tmp_config, monkeypatch):
        monkeypatch.setenv("BUNNY_TODO_BACKEND", "document")
        assert runner.invoke(app, ["add", "Buy milk"]).exit_code == 0

        result = runner.invoke(app, ["watch", "--duration", "0"])

        assert result.exit_code == 0, result.output
        assert "Buy milk" in result.output
        assert "Synced" in result.output


class TestServe:
    def test_serve_uses_config_defaults(self, tmp_config):
        with patch("bunny_todo.commands.server.uvicorn.run") as run:
            result = runner.invoke(app, ["serve"])
        assert result.exit_code == 0, result.output
        _, kwargs = run.call_args
        assert (kwargs["host"], kwargs["port"]) == ("127.0.0.1", 5000)

    def test_serve_options(self, tmp_config, tmp_path):
        with patch("bunny_todo.commands.server.uvicorn.run") as run:
            result = runner.invoke(
                app, ["serve", "--port", "8123", "--db", str(tmp_path / "x.db")]
            )
        assert result.exit_code == 0, result.output
        assert run.call_args.kwargs["port"] == 8123
