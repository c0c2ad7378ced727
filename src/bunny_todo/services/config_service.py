"""Configuration service for managing Bunny Todo configuration.

This module provides the ConfigService class, the single source of truth for
configuration. It handles:

- Loading and saving config.json
- Dotted-key access for the ``config`` command
- Resolving default paths for local storage and the SQLite files
- Resolving the active backend, with the BUNNY_TODO_BACKEND override

``create_strategy`` in ``bunny_todo.models.storage_strategy`` turns the
active backend into a storage strategy.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import BaseModel, ValidationError

from bunny_todo.models.config_models import AppConfig

BACKEND_ENV_VAR = "BUNNY_TODO_BACKEND"


class ConfigService:
    """Service for managing application configuration.

    The configuration lives in ``config.json`` under the user config dir and
    is created with defaults on first run.
    """

    def __init__(self):
        """Initialize the config service."""

        self.config_dir = Path(user_config_dir("bunny_todo"))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(user_data_dir("bunny_todo"))

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from storage."""
        if self._config is not None:
            return self._config  # Return cached config if already loaded

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # Config file doesn't exist yet - expected on first run
            self._config = AppConfig()
            self.save_config()
        except (OSError, ValidationError) as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self):
        """Save the current configuration to storage."""
        if self._config is None:
            raise RuntimeError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))

            # Set file permissions
            self.config_path.chmod(0o600)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def reset_config(self, key: str | None = None):
        """Reset the whole configuration, or a single key, to defaults."""
        if key is not None:
            self.set_value(key, self.get_value(key, config=AppConfig()))
            return
        self._config = AppConfig()
        self.save_config()

    @property
    def backend(self) -> str:
        """Active backend, honouring the BUNNY_TODO_BACKEND override."""
        override = os.environ.get(BACKEND_ENV_VAR)
        if override:
            if override not in ("rest", "document", "local"):
                raise ValueError(
                    f"{BACKEND_ENV_VAR} must be one of rest, document, local"
                )
            return override
        return self.config.backend

    def get_value(self, key: str, config: BaseModel | None = None) -> Any:
        """Get a configuration value by dotted key (e.g., ``api.endpoint``).

        Raises:
            KeyError: If the key does not exist
        """
        node: Any = config if config is not None else self.config
        for part in key.split("."):
            if not isinstance(node, BaseModel) or part not in type(node).model_fields:
                raise KeyError(key)
            node = getattr(node, part)
        if isinstance(node, BaseModel):
            return node.model_dump()
        return node

    def set_value(self, key: str, value: Any) -> None:
        """Set a configuration value by dotted key and save.

        The whole config is re-validated so invalid values are rejected.

        Raises:
            KeyError: If the key does not exist
            ValueError: If the value is invalid for the key
        """
        self.get_value(key)
        data = self.config.model_dump()
        parts = key.split(".")
        node = data
        for part in parts[:-1]:
            node = node[part]
        node[parts[-1]] = value
        try:
            self._config = AppConfig.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid value for '{key}': {value}") from e
        self.save_config()

    # ------------------------------------------------------------------
    # Resolved paths
    # ------------------------------------------------------------------

    @property
    def storage_dir(self) -> Path:
        if self.config.storage.dir:
            return Path(self.config.storage.dir)
        return self.data_dir / "storage"

    @property
    def document_db_path(self) -> Path:
        if self.config.document.db_path:
            return Path(self.config.document.db_path)
        return self.data_dir / "documents.db"

    @property
    def server_db_path(self) -> Path:
        if self.config.server.db_path:
            return Path(self.config.server.db_path)
        return self.data_dir / "todos.db"


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
