"""Result types returned by the sync adapter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from bunny_todo.models.core import Task


class SyncStatus(str, Enum):
    """Sync indicator shown next to the task list."""

    SYNCED = "synced"
    SYNCING = "syncing"
    LOCAL = "local"


@dataclass
class WriteResult:
    """Result of a mutating store operation.

    Attributes:
        success: Whether the write landed in some store
        task: Record as persisted, when the store returns one
        task_id: Identifier the write applied to
        is_local: True when the write degraded to local storage
        error: Error message for failed writes
    """

    success: bool
    task: Task | None = None
    task_id: int | str | None = None
    is_local: bool = False
    error: str | None = None
