"""Local key/value storage and the Local Task Store.

Local storage is a directory holding one file per key, each file containing a
single string value. Every backend shares it: the task list lives under
``bunny-todos`` and the device identity under ``bunny_device_id``. Concurrent
processes race on the same key with last-write-wins.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
import time
from pathlib import Path

from platformdirs import user_data_dir
from pydantic import TypeAdapter, ValidationError

from bunny_todo.adapters.utils import random_base36
from bunny_todo.models import Task
from bunny_todo.utils.logger import get_logger

TODOS_KEY = "bunny-todos"
DEVICE_ID_KEY = "bunny_device_id"

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")
_TASK_LIST = TypeAdapter(list[Task])


def default_storage_dir() -> Path:
    return Path(user_data_dir("bunny_todo")) / "storage"


class LocalStorage:
    """String key/value store backed by files in a directory."""

    def __init__(self, directory: str | Path | None = None):
        self.directory = Path(directory) if directory else default_storage_dir()

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / key

    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing the previous one atomically.

        Raises:
            OSError: If the value cannot be written
        """
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class LocalTaskStore:
    """The task list persisted under one fixed storage key.

    There is no partial update: every write re-serializes the whole list.
    Failures are logged and never raised.
    """

    def __init__(self, storage: LocalStorage | None = None, key: str = TODOS_KEY):
        self.storage = storage or LocalStorage()
        self.key = key

    def load_all(self) -> list[Task]:
        """Load every stored task, or an empty list if the key is unreadable."""
        logger = get_logger()
        try:
            raw = self.storage.get_item(self.key)
            if not raw:
                return []
            tasks = _TASK_LIST.validate_python(json.loads(raw))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.error("failed to load local tasks from %s: %s", self.key, e)
            return []
        logger.debug("loaded %d local tasks", len(tasks))
        return tasks

    def save_all(self, tasks: list[Task]) -> bool:
        """Replace the stored list. Returns False if the write failed."""
        logger = get_logger()
        try:
            payload = json.dumps([task.to_storage() for task in tasks])
            self.storage.set_item(self.key, payload)
        except (OSError, TypeError, ValueError) as e:
            logger.error("failed to save local tasks to %s: %s", self.key, e)
            return False
        logger.debug("saved %d local tasks", len(tasks))
        return True

    def clear(self) -> bool:
        return self.save_all([])


def get_device_id(storage: LocalStorage) -> str:
    """Return the persisted device identity, creating it on first use."""
    logger = get_logger()
    device_id = storage.get_item(DEVICE_ID_KEY)
    if device_id:
        return device_id.strip()

    device_id = f"device_{int(time.time() * 1000)}_{random_base36(9)}"
    storage.set_item(DEVICE_ID_KEY, device_id)
    logger.info("created new device id: %s", device_id)
    return device_id
