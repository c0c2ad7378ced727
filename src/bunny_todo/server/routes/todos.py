"""Todo CRUD and progress routes."""

from typing import Any

from fastapi import APIRouter, Header, HTTPException, Request
from pydantic import BaseModel

from bunny_todo.models.core import normalize_category, normalize_task_text
from bunny_todo.server.database import TodoDatabase
from bunny_todo.utils.logger import get_logger

router = APIRouter(prefix="/api", tags=["todos"])


# ═══════════════════════════════════════════════════════════════
# REQUEST MODELS
# ═══════════════════════════════════════════════════════════════


class CreateTodoRequest(BaseModel):
    task: str | None = None
    category: str | None = None


class UpdateTodoRequest(BaseModel):
    completed: bool | None = None
    task: str | None = None
    category: str | None = None


def _db(request: Request) -> TodoDatabase:
    return request.app.state.db


def _bad_request(error: ValueError) -> HTTPException:
    return HTTPException(status_code=400, detail=str(error))


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Todo not found")


def _parse_id(todo_id: str) -> int:
    """Parse a row id, answering 404 when it is not an integer."""
    try:
        return int(todo_id)
    except ValueError:
        raise _not_found() from None


# ═══════════════════════════════════════════════════════════════
# TODO ROUTES
# ═══════════════════════════════════════════════════════════════


@router.get("/todos")
async def list_todos(
    request: Request, x_device_id: str | None = Header(default=None)
) -> list[dict[str, Any]]:
    """Get all todos, newest first."""
    return _db(request).list_todos(x_device_id)


@router.post("/todos", status_code=201)
async def create_todo(
    body: CreateTodoRequest,
    request: Request,
    x_device_id: str | None = Header(default=None),
) -> dict[str, Any]:
    """Create a new todo."""
    try:
        task = normalize_task_text(body.task)
        category = normalize_category(body.category)
    except ValueError as e:
        raise _bad_request(e) from e

    todo = _db(request).create_todo(task, category, x_device_id)
    get_logger().info("created todo %s", todo["id"])
    return todo


@router.put("/todos/{todo_id}")
async def update_todo(
    todo_id: str,
    body: UpdateTodoRequest,
    request: Request,
    x_device_id: str | None = Header(default=None),
) -> dict[str, Any]:
    """Update the supplied fields of a todo."""
    row_id = _parse_id(todo_id)
    updates = body.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    try:
        if "task" in updates:
            updates["task"] = normalize_task_text(updates["task"])
        if "category" in updates:
            updates["category"] = normalize_category(updates["category"])
    except ValueError as e:
        raise _bad_request(e) from e

    todo = _db(request).update_todo(row_id, updates, x_device_id)
    if todo is None:
        raise _not_found()
    return todo


@router.delete("/todos/{todo_id}")
async def delete_todo(
    todo_id: str,
    request: Request,
    x_device_id: str | None = Header(default=None),
) -> dict[str, Any]:
    """Delete a todo."""
    row_id = _parse_id(todo_id)
    if not _db(request).delete_todo(row_id, x_device_id):
        raise _not_found()
    return {"message": "Todo deleted successfully", "id": row_id}


@router.get("/progress")
async def get_progress(
    request: Request, x_device_id: str | None = Header(default=None)
) -> dict[str, Any]:
    """Get completion statistics."""
    return _db(request).progress(x_device_id).model_dump(by_alias=True)
