"""Todos API endpoints."""

from typing import Any, Optional

from bunny_todo.services.api.client import APIClient


class TodosAPI:
    """Todos API client."""

    def __init__(self, client: APIClient):
        self.client = client

    async def list_todos(self) -> list[dict]:
        """List all todos, newest first."""
        response = await self.client.get("/api/todos")
        return response.json()

    async def create_todo(self, task: str, *, category: Optional[str] = None) -> dict:
        """Create a new todo."""
        data: dict[str, Any] = {"task": task}
        if category:
            data["category"] = category

        response = await self.client.post("/api/todos", json=data)
        return response.json()

    async def update_todo(self, todo_id: int | str, **updates: Any) -> dict:
        """Update the supplied fields of a todo."""
        response = await self.client.put(f"/api/todos/{todo_id}", json=updates)
        return response.json()

    async def delete_todo(self, todo_id: int | str) -> dict:
        """Delete a todo."""
        response = await self.client.delete(f"/api/todos/{todo_id}")
        return response.json()

    async def get_progress(self) -> dict:
        """Get completion statistics."""
        response = await self.client.get("/api/progress")
        return response.json()
