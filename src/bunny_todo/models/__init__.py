"""Bunny Todo domain models.

This package contains the Pydantic models and result types shared by the
stores, the sync adapter and the view layer.
"""

from .config_models import AppConfig
from .core import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    MAX_TASK_LENGTH,
    TASK_FILTERS,
    ExportDocument,
    ImportResult,
    Progress,
    Task,
    TaskCreate,
    TaskFilter,
    TaskUpdate,
    compute_percentage,
)
from .exceptions import (
    BunnyTodoError,
    StoreUnavailableError,
    TaskNotFoundError,
    TaskValidationError,
)
from .results import SyncStatus, WriteResult

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskFilter",
    "Progress",
    "ExportDocument",
    "ImportResult",
    "compute_percentage",
    "CATEGORIES",
    "DEFAULT_CATEGORY",
    "MAX_TASK_LENGTH",
    "TASK_FILTERS",
    # Results
    "SyncStatus",
    "WriteResult",
    # Errors
    "BunnyTodoError",
    "TaskValidationError",
    "TaskNotFoundError",
    "StoreUnavailableError",
    # Config models
    "AppConfig",
]
