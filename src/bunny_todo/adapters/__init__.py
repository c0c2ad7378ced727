"""Adapters module - Repository implementations for different storage backends.

- local_repository: tasks in local key/value storage
- rest_api: Bunny Todo REST API
- realtime: document store with snapshot subscriptions
"""

from .local_repository import LocalTaskRepository
from .local_storage import LocalStorage, LocalTaskStore, get_device_id
from .realtime import RealtimeTaskRepository
from .rest_api import RestApiTaskRepository

__all__ = [
    "LocalStorage",
    "LocalTaskStore",
    "get_device_id",
    "LocalTaskRepository",
    "RestApiTaskRepository",
    "RealtimeTaskRepository",
]
