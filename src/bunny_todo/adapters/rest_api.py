"""REST API adapter - TaskRepository implementation using the Bunny Todo REST API.

This adapter wraps the API client and translates HTTP failures into the
domain exceptions the sync adapter understands. Only a 400 is an input error
and only a 404 for a known id is a missing task; any other failed or
unreadable response means the store is unavailable.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from bunny_todo.models import (
    Progress,
    StoreUnavailableError,
    Task,
    TaskCreate,
    TaskNotFoundError,
    TaskUpdate,
    TaskValidationError,
)
from bunny_todo.repositories import TaskRepository
from bunny_todo.services.api.client import APIClient, get_client
from bunny_todo.services.api.todos import TodosAPI

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or body)
    return str(body)


def _parse(model: type[M], data: Any) -> M:
    """Validate one record from the API."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise StoreUnavailableError(f"Malformed {model.__name__} from API: {e}") from e


class RestApiTaskRepository(TaskRepository):
    """Task repository implementation using the REST API."""

    storage_type = "rest"

    def __init__(self, client: APIClient | None = None, device_id: str | None = None):
        """Initialize REST API task repository.

        Args:
            client: Optional preconfigured APIClient
            device_id: Device identity sent with every request
        """
        self._client = client
        self.device_id = device_id
        self._todos_api: TodosAPI | None = None

    @property
    def todos_api(self) -> TodosAPI:
        """Get or create TodosAPI instance."""
        if self._todos_api is None:
            if self._client is None:
                self._client = get_client(self.device_id)
            self._todos_api = TodosAPI(self._client)
        return self._todos_api

    async def _call(self, call: Awaitable[T], task_id: int | str | None = None) -> T:
        """Await an API call, translating HTTP errors to domain errors."""
        try:
            return await call
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 400:
                raise TaskValidationError(_error_message(e.response)) from e
            if status == 404 and task_id is not None:
                raise TaskNotFoundError(task_id) from e
            raise StoreUnavailableError(
                f"API error {status}: {_error_message(e.response)}"
            ) from e
        except httpx.RequestError as e:
            raise StoreUnavailableError(f"Cannot reach API: {e}") from e
        except ValueError as e:
            # Body was not JSON
            raise StoreUnavailableError(f"Unreadable API response: {e}") from e

    async def list_all(self) -> list[Task]:
        """List all tasks."""
        result = await self._call(self.todos_api.list_todos())
        tasks_data = result.get("todos", []) if isinstance(result, dict) else result
        if not isinstance(tasks_data, list):
            raise StoreUnavailableError("Malformed task list from API")
        return [_parse(Task, task_dict) for task_dict in tasks_data]

    async def add(self, task_data: TaskCreate) -> Task:
        """Create a new task."""
        result = await self._call(
            self.todos_api.create_todo(task_data.task, category=task_data.category)
        )
        return _parse(Task, result)

    async def update(self, task_id: int | str, updates: TaskUpdate) -> Task:
        """Update an existing task."""
        result = await self._call(
            self.todos_api.update_todo(task_id, **updates.changes()), task_id
        )
        return _parse(Task, result)

    async def delete(self, task_id: int | str) -> bool:
        """Delete a task."""
        await self._call(self.todos_api.delete_todo(task_id), task_id)
        return True

    async def progress(self) -> Progress:
        """Server-side completion statistics."""
        result = await self._call(self.todos_api.get_progress())
        return _parse(Progress, result)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
