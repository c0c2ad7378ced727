"""REST server for the Bunny Todo backing store."""

from .main import create_app

__all__ = ["create_app"]
