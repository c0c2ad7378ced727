"""Repository interfaces for Bunny Todo."""

from .repository import (
    LiveTaskRepository,
    SnapshotCallback,
    TaskRepository,
    Unsubscribe,
)

__all__ = [
    "TaskRepository",
    "LiveTaskRepository",
    "SnapshotCallback",
    "Unsubscribe",
]
