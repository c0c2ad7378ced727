"""Configuration models.

Defines the settings persisted in config.json, including which storage
backend the task list is served from.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

BackendType = Literal["rest", "document", "local"]


class APIConfig(BaseModel):
    """REST API client configuration."""

    endpoint: str = Field(default="http://localhost:5000")
    timeout: float = Field(default=10.0)

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("endpoint cannot be empty")
        return v.strip().rstrip("/")


class ServerConfig(BaseModel):
    """REST server configuration."""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=5000)
    db_path: str | None = Field(default=None, description="SQLite file for the server")


class StorageConfig(BaseModel):
    """Local key/value storage configuration."""

    dir: str | None = Field(default=None, description="Directory holding local keys")


class DocumentConfig(BaseModel):
    """Document store configuration."""

    db_path: str | None = Field(default=None, description="SQLite file for documents")
    poll_interval: float = Field(default=1.0)


class OutputConfig(BaseModel):
    """Output configuration."""

    icons: bool = Field(default=True)


class AppConfig(BaseModel):
    """Main Bunny Todo configuration"""

    backend: BackendType = Field(default="local", description="Active storage backend")

    api: APIConfig = Field(default_factory=APIConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    document: DocumentConfig = Field(default_factory=DocumentConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
