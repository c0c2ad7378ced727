"""SQLite persistence for the REST server."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from bunny_todo.adapters.utils import build_update_clause, now_iso, row_to_dict
from bunny_todo.models import DEFAULT_CATEGORY, Progress
from bunny_todo.utils.logger import get_logger

SCHEMA = """
CREATE TABLE IF NOT EXISTS todos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    task TEXT NOT NULL,
    completed BOOLEAN DEFAULT 0,
    category TEXT DEFAULT 'general',
    created_at TEXT NOT NULL,
    device_id TEXT
)
"""


def _to_todo(row: sqlite3.Row | None) -> dict[str, Any] | None:
    if row is None:
        return None
    todo = row_to_dict(row)
    todo["completed"] = bool(todo["completed"])
    if todo.get("device_id") is None:
        todo.pop("device_id", None)
    return todo


class TodoDatabase:
    """Todo table access. Each method is one statement or one transaction.

    When a device id is given, reads and writes only touch that device's rows.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._connection = sqlite3.connect(self.db_path, check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._connection.execute(SCHEMA)
        self._connection.commit()
        get_logger().info("todos table ready in %s", self.db_path)

    def close(self) -> None:
        self._connection.close()

    @staticmethod
    def _scope(device_id: str | None) -> tuple[str, list[Any]]:
        if device_id is None:
            return "", []
        return " AND device_id = ?", [device_id]

    def list_todos(self, device_id: str | None = None) -> list[dict[str, Any]]:
        scope, params = self._scope(device_id)
        rows = self._connection.execute(
            f"SELECT * FROM todos WHERE 1=1{scope} ORDER BY created_at DESC, id DESC",
            params,
        ).fetchall()
        return [_to_todo(row) for row in rows]

    def get_todo(self, todo_id: int, device_id: str | None = None) -> dict[str, Any] | None:
        scope, params = self._scope(device_id)
        row = self._connection.execute(
            f"SELECT * FROM todos WHERE id = ?{scope}", [todo_id, *params]
        ).fetchone()
        return _to_todo(row)

    def create_todo(
        self, task: str, category: str = DEFAULT_CATEGORY, device_id: str | None = None
    ) -> dict[str, Any]:
        with self._connection:
            cursor = self._connection.execute(
                "INSERT INTO todos (task, category, created_at, device_id) VALUES (?, ?, ?, ?)",
                (task, category, now_iso(), device_id),
            )
        return self.get_todo(cursor.lastrowid)

    def update_todo(
        self, todo_id: int, updates: dict[str, Any], device_id: str | None = None
    ) -> dict[str, Any] | None:
        """Update the given columns. Returns None if no row matched."""
        values = dict(updates)
        if "completed" in values:
            values["completed"] = 1 if values["completed"] else 0
        set_clause, params = build_update_clause(values)
        scope, scope_params = self._scope(device_id)
        with self._connection:
            cursor = self._connection.execute(
                f"UPDATE todos SET {set_clause} WHERE id = ?{scope}",
                [*params, todo_id, *scope_params],
            )
        if cursor.rowcount == 0:
            return None
        return self.get_todo(todo_id)

    def delete_todo(self, todo_id: int, device_id: str | None = None) -> bool:
        scope, params = self._scope(device_id)
        with self._connection:
            cursor = self._connection.execute(
                f"DELETE FROM todos WHERE id = ?{scope}", [todo_id, *params]
            )
        return cursor.rowcount > 0

    def progress(self, device_id: str | None = None) -> Progress:
        scope, params = self._scope(device_id)
        row = self._connection.execute(
            f"SELECT COUNT(*) AS total, COALESCE(SUM(completed = 1), 0) AS completed "
            f"FROM todos WHERE 1=1{scope}",
            params,
        ).fetchone()
        return Progress.from_counts(row["total"] or 0, row["completed"] or 0)
