"""Task data models."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MAX_TASK_LENGTH = 100

CATEGORIES = ("general", "work", "personal", "shopping", "health")
DEFAULT_CATEGORY = "general"

TaskFilter = Literal["all", "pending", "completed"]
TASK_FILTERS: tuple[str, ...] = ("all", "pending", "completed")


def normalize_task_text(text: str | None) -> str:
    """Trim task text and check it against the length rules.

    Raises:
        ValueError: If the text is empty after trimming or too long
    """
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValueError("Task cannot be empty")
    if len(cleaned) > MAX_TASK_LENGTH:
        raise ValueError(f"Task is too long (max {MAX_TASK_LENGTH} characters)")
    return cleaned


def normalize_category(category: str | None) -> str:
    """Return a known category, defaulting to 'general' when omitted."""
    if category is None or not category.strip():
        return DEFAULT_CATEGORY
    value = category.strip().lower()
    if value not in CATEGORIES:
        raise ValueError(
            f"Unknown category '{category}'. Choose from: {', '.join(CATEGORIES)}"
        )
    return value


def compute_percentage(total: int, completed: int) -> int:
    """Completion percentage, rounding halves up."""
    if total <= 0:
        return 0
    return int(math.floor(completed * 100 / total + 0.5))


class Task(BaseModel):
    """Task model representing one to-do item.

    Attributes:
        id: Store-issued identifier (server integer, document id or local id)
        task: Task text, trimmed, at most 100 characters
        category: Category label
        completed: Completion flag
        created_at: Creation timestamp, immutable
        updated_at: Last update timestamp (document store only)
        device_id: Owning device identity
        original_id: Local id this record was imported from
    """

    model_config = ConfigDict(extra="ignore")

    id: int | str
    task: str
    category: str = DEFAULT_CATEGORY
    completed: bool = False
    created_at: datetime
    updated_at: datetime | None = None
    device_id: str | None = None
    original_id: str | None = None

    def to_storage(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict, dropping empty optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


class TaskCreate(BaseModel):
    """Model for creating a new task.

    Text is trimmed and checked here, so an invalid TaskCreate never exists.
    """

    task: str
    category: str = DEFAULT_CATEGORY

    @field_validator("task", mode="before")
    @classmethod
    def validate_task(cls, v: Any) -> str:
        return normalize_task_text(v if isinstance(v, str) else None)

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: Any) -> str:
        return normalize_category(v)


class TaskUpdate(BaseModel):
    """Model for updating an existing task.

    All fields are optional - only provided fields will be updated, but at
    least one must be provided.
    """

    completed: bool | None = None
    task: str | None = None
    category: str | None = None

    @field_validator("task", mode="before")
    @classmethod
    def validate_task(cls, v: Any) -> str | None:
        if v is None:
            return None
        return normalize_task_text(v if isinstance(v, str) else None)

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: Any) -> str | None:
        if v is None:
            return None
        return normalize_category(v)

    @model_validator(mode="after")
    def require_fields(self) -> TaskUpdate:
        if self.completed is None and self.task is None and self.category is None:
            raise ValueError("No fields to update")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields that were supplied."""
        return self.model_dump(exclude_none=True)


class Progress(BaseModel):
    """Completion statistics.

    On the wire the percentage is named ``progress``.
    """

    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    completed: int = 0
    percentage: int = Field(default=0, alias="progress")

    @classmethod
    def from_counts(cls, total: int, completed: int) -> Progress:
        return cls(
            total=total,
            completed=completed,
            percentage=compute_percentage(total, completed),
        )

    @classmethod
    def from_tasks(cls, tasks: list[Task]) -> Progress:
        return cls.from_counts(len(tasks), sum(1 for t in tasks if t.completed))


class ExportDocument(BaseModel):
    """Downloadable snapshot of a task collection."""

    exported_at: datetime
    device_id: str | None = None
    backend: str
    count: int
    todos: list[Task] = Field(default_factory=list)


class ImportResult(BaseModel):
    """Outcome of copying locally stored tasks into the remote store."""

    imported: int = 0
    skipped: int = 0
    tasks: list[Task] = Field(default_factory=list)
