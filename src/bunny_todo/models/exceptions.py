"""Custom exceptions for Bunny Todo."""


class BunnyTodoError(Exception):
    """Base exception for all Bunny Todo errors."""


class TaskValidationError(BunnyTodoError):
    """Raised when task input is rejected before reaching a store."""


class TaskNotFoundError(BunnyTodoError):
    """Raised when a task id does not exist in the store."""

    def __init__(self, task_id: int | str):
        super().__init__(f"Todo not found: {task_id}")
        self.task_id = task_id


class StoreUnavailableError(BunnyTodoError):
    """Raised when a backing store cannot be reached or fails to commit."""
