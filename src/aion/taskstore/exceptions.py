__all__ = [
    "TaskStoreError",
    "InvalidArgumentError",
    "SerializationError",
    "DeserializationError",
    "StorageError",
]


class TaskStoreError(Exception):
    """Base task store exception"""
    pass


class InvalidArgumentError(TaskStoreError, ValueError):
    """Raised for a missing task or a blank task id"""
    pass


class SerializationError(TaskStoreError):
    """A value could not be turned into a JSON tree"""
    pass


class DeserializationError(TaskStoreError):
    """A stored JSON payload could not be read back"""
    pass


class StorageError(TaskStoreError):
    """Underlying connection or transaction failure"""

    def __init__(self, operation: str, task_id: str | None = None):
        self.operation = operation
        self.task_id = task_id
        if task_id:
            message = f"Failed to {operation} task '{task_id}'"
        else:
            message = f"Failed to {operation}"
        super().__init__(message)
