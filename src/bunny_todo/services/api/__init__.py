"""HTTP client for the Bunny Todo REST API."""

from .client import APIClient, get_client
from .todos import TodosAPI

__all__ = ["APIClient", "TodosAPI", "get_client"]
