"""Bootstrap of the storage strategy for the running process.

Usage Pattern:
    from bunny_todo.services.context_manager import get_strategy_context

    context = get_strategy_context()
    tasks = await context.task_repository.list_all()
"""

from __future__ import annotations

from functools import lru_cache

from bunny_todo.models.storage_strategy import StorageStrategyContext, create_strategy
from bunny_todo.services.config_service import get_config_service
from bunny_todo.utils.logger import get_logger


@lru_cache(maxsize=1)
def get_strategy_context() -> StorageStrategyContext:
    """Get a cached StorageStrategyContext for the configured backend."""
    config_service = get_config_service()
    strategy = create_strategy(config_service)
    get_logger().info(
        "storage backend: %s (device %s)", strategy.storage_type, strategy.device_id
    )
    return StorageStrategyContext(strategy)
