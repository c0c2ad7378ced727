"""Unit tests for task models and validation rules."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from bunny_todo.models import (
    MAX_TASK_LENGTH,
    Progress,
    Task,
    TaskCreate,
    TaskNotFoundError,
    TaskUpdate,
    compute_percentage,
)
from bunny_todo.models.core import normalize_category, normalize_task_text


class TestNormalizeTaskText:
    def test_trims_whitespace(self):
        assert normalize_task_text("  Buy milk  ") == "Buy milk"

    @pytest.mark.parametrize("text", ["", "   ", "\t\n", None])
    def test_rejects_empty(self, text):
        with pytest.raises(ValueError, match="Task cannot be empty"):
            normalize_task_text(text)

    def test_accepts_exactly_max_length(self):
        text = "a" * MAX_TASK_LENGTH
        assert normalize_task_text(text) == text

    def test_rejects_one_over_max_length(self):
        with pytest.raises(ValueError, match="too long"):
            normalize_task_text("a" * (MAX_TASK_LENGTH + 1))

    def test_length_is_checked_after_trimming(self):
        text = "  " + "a" * MAX_TASK_LENGTH + "  "
        assert len(normalize_task_text(text)) == MAX_TASK_LENGTH


class TestNormalizeCategory:
    def test_defaults_to_general(self):
        assert normalize_category(None) == "general"
        assert normalize_category("  ") == "general"

    def test_lowercases_known_category(self):
        assert normalize_category("Shopping") == "shopping"

    def test_rejects_unknown_category(self):
        with pytest.raises(ValueError, match="Unknown category"):
            normalize_category("chores")


class TestTaskCreate:
    def test_valid(self):
        data = TaskCreate(task=" Buy milk ", category="shopping")
        assert data.task == "Buy milk"
        assert data.category == "shopping"

    def test_category_defaults(self):
        assert TaskCreate(task="Read").category == "general"
        assert TaskCreate(task="Read", category=None).category == "general"

    def test_empty_text_raises(self):
        with pytest.raises(ValidationError):
            TaskCreate(task="   ")

    def test_non_string_text_raises(self):
        with pytest.raises(ValidationError):
            TaskCreate(task=None)


class TestTaskUpdate:
    def test_requires_a_field(self):
        with pytest.raises(ValidationError, match="No fields to update"):
            TaskUpdate()

    def test_changes_only_supplied_fields(self):
        assert TaskUpdate(completed=True).changes() == {"completed": True}

    def test_completed_false_counts_as_supplied(self):
        assert TaskUpdate(completed=False).changes() == {"completed": False}

    def test_validates_text(self):
        with pytest.raises(ValidationError):
            TaskUpdate(task="a" * 101)


class TestTask:
    def test_parses_server_record(self):
        task = Task(
            id=3,
            task="Walk",
            completed=1,
            category="health",
            created_at="2024-06-15T09:00:00+00:00",
        )
        assert task.id == 3
        assert task.completed is True
        assert task.created_at.year == 2024

    def test_ignores_unknown_fields(self):
        task = Task(id="x", task="Walk", created_at="2024-06-15T09:00:00Z", extra="y")
        assert not hasattr(task, "extra")

    def test_to_storage_drops_empty_optionals(self, make_task):
        data = make_task().to_storage()
        assert "updated_at" not in data
        assert "original_id" not in data
        assert data["created_at"].startswith("2024-06-15T09:00:00")


class TestProgress:
    def test_empty_list_is_zero(self):
        progress = Progress.from_counts(0, 0)
        assert progress.percentage == 0

    def test_one_of_four_is_25(self):
        progress = Progress.from_counts(4, 1)
        assert (progress.total, progress.completed, progress.percentage) == (4, 1, 25)

    @pytest.mark.parametrize(
        "total,completed,expected",
        [(3, 1, 33), (3, 2, 67), (8, 1, 13), (2, 1, 50), (5, 5, 100)],
    )
    def test_rounding(self, total, completed, expected):
        assert compute_percentage(total, completed) == expected

    def test_wire_name_is_progress(self):
        progress = Progress.from_counts(4, 1)
        assert progress.model_dump(by_alias=True) == {
            "total": 4,
            "completed": 1,
            "progress": 25,
        }
        assert Progress.model_validate({"total": 4, "completed": 1, "progress": 25}) == progress

    def test_from_tasks(self, make_task):
        tasks = [
            make_task("a", completed=True),
            make_task("b"),
            make_task("c"),
            make_task("d"),
        ]
        assert Progress.from_tasks(tasks).percentage == 25


def test_not_found_message():
    error = TaskNotFoundError(42)
    assert str(error) == "Todo not found: 42"
    assert error.task_id == 42
