"""Utility functions shared by the storage adapters."""

from __future__ import annotations

import secrets
import string
import time
from datetime import UTC, datetime
from typing import Any

_DOC_ID_ALPHABET = string.ascii_letters + string.digits
_BASE36_ALPHABET = string.digits + string.ascii_lowercase


def now_utc() -> datetime:
    """Current UTC time as an aware datetime."""
    return datetime.now(UTC)


def now_iso() -> str:
    """Get current timestamp in ISO format.

    Returns:
        ISO format datetime string
    """
    return now_utc().isoformat()


def generate_document_id(length: int = 20) -> str:
    """Generate a random document id (e.g., "Xk3b9QfT0aLmZ2pR8sVc")."""
    return "".join(secrets.choice(_DOC_ID_ALPHABET) for _ in range(length))


def generate_local_id() -> str:
    """Generate a timestamp-derived id for tasks written to local storage.

    Returns:
        Id such as "local-1718441000123-a1b2c3"
    """
    return f"local-{int(time.time() * 1000)}-{secrets.token_hex(3)}"


def random_base36(length: int) -> str:
    """Random lowercase base36 string."""
    return "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(length))


def row_to_dict(row: Any) -> dict[str, Any]:
    """Convert sqlite3.Row to dictionary.

    Args:
        row: sqlite3.Row object

    Returns:
        Dictionary with column names as keys
    """
    if row is None:
        return {}
    return dict(row)


def build_update_clause(updates: dict[str, Any]) -> tuple[str, list[Any]]:
    """Build SQL UPDATE SET clause from updates dictionary.

    Args:
        updates: Dictionary of field names to new values

    Returns:
        Tuple of (SET clause string, parameters list)
    """
    set_parts = []
    params = []

    for key, value in updates.items():
        set_parts.append(f"{key} = ?")
        params.append(value)

    return ", ".join(set_parts), params
