"""
Strategy Pattern: Storage Strategy Container

Each strategy builds the primary task repository for one backend (REST API,
document store or local storage). Every strategy shares the same local
storage, which holds the device identity and serves as the fallback store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from bunny_todo.adapters.local_repository import LocalTaskRepository
from bunny_todo.adapters.local_storage import LocalStorage, LocalTaskStore, get_device_id
from bunny_todo.repositories import TaskRepository


class StorageStrategy(ABC):
    """
    Abstract base class for storage strategies.

    A strategy encapsulates the repositories for a given backend. Services
    never know which strategy they're using.
    """

    def __init__(self, storage_dir: str | Path | None = None):
        self.local_storage = LocalStorage(storage_dir)
        self.local_store = LocalTaskStore(self.local_storage)
        self.device_id = get_device_id(self.local_storage)
        self._local_repo = LocalTaskRepository(self.local_store, device_id=self.device_id)

    @abstractmethod
    def get_task_repository(self) -> TaskRepository:
        """Get the primary task repository for this strategy."""

    def get_local_repository(self) -> LocalTaskRepository:
        """Get the local repository used as fallback."""
        return self._local_repo

    @property
    @abstractmethod
    def storage_type(self) -> str:
        """Get storage type identifier (for logging/debugging)."""


class LocalStorageStrategy(StorageStrategy):
    """
    Local storage strategy.

    The primary repository is the local one, so writes never degrade.
    """

    def get_task_repository(self) -> TaskRepository:
        return self._local_repo

    @property
    def storage_type(self) -> str:
        return "local"


class RestStorageStrategy(StorageStrategy):
    """
    REST API storage strategy.

    Tasks live on the Bunny Todo server, scoped by device identity.
    """

    def __init__(
        self,
        storage_dir: str | Path | None = None,
        endpoint: str | None = None,
        timeout: float | None = None,
    ):
        super().__init__(storage_dir)

        # Import here to keep httpx out of local-only startup
        from bunny_todo.adapters.rest_api import RestApiTaskRepository
        from bunny_todo.services.api.client import APIClient

        client = APIClient(endpoint, timeout=timeout, device_id=self.device_id)
        self._task_repo = RestApiTaskRepository(client, device_id=self.device_id)

    def get_task_repository(self) -> TaskRepository:
        return self._task_repo

    @property
    def storage_type(self) -> str:
        return "rest"


class DocumentStorageStrategy(StorageStrategy):
    """
    Document store strategy.

    Tasks live in a per-device collection with live snapshot subscriptions.
    """

    def __init__(
        self,
        storage_dir: str | Path | None = None,
        db_path: str | Path | None = None,
    ):
        super().__init__(storage_dir)

        from bunny_todo.adapters.docstore import DocumentStore
        from bunny_todo.adapters.realtime import RealtimeTaskRepository

        self.document_store = DocumentStore(db_path)
        self._task_repo = RealtimeTaskRepository(
            self.document_store, self.device_id, self.local_store
        )

    def get_task_repository(self) -> TaskRepository:
        return self._task_repo

    @property
    def storage_type(self) -> str:
        return "document"


class StorageStrategyContext:
    """
    Strategy context that provides access to the repositories.

    Usage:
        strategy = RestStorageStrategy(storage_dir="/path/to/storage")
        context = StorageStrategyContext(strategy)

        task_repo = context.task_repository
        await task_repo.add(task)  # Works regardless of strategy
    """

    def __init__(self, strategy: StorageStrategy):
        """
        Initialize strategy context.

        Args:
            strategy: Storage strategy (Rest, Document or Local)
        """
        self._strategy = strategy

    @property
    def strategy(self) -> StorageStrategy:
        return self._strategy

    @property
    def task_repository(self) -> TaskRepository:
        """Get primary task repository from current strategy."""
        return self._strategy.get_task_repository()

    @property
    def local_repository(self) -> LocalTaskRepository:
        """Get the local fallback repository."""
        return self._strategy.get_local_repository()

    @property
    def device_id(self) -> str:
        return self._strategy.device_id

    @property
    def storage_type(self) -> str:
        """Get storage type (for logging/debugging only)."""
        return self._strategy.storage_type


def create_strategy(config_service) -> StorageStrategy:
    """Build the strategy for the configured backend."""
    backend = config_service.backend
    storage_dir = config_service.storage_dir
    if backend == "rest":
        config = config_service.config
        return RestStorageStrategy(
            storage_dir, endpoint=config.api.endpoint, timeout=config.api.timeout
        )
    if backend == "document":
        return DocumentStorageStrategy(storage_dir, db_path=config_service.document_db_path)
    return LocalStorageStrategy(storage_dir)
