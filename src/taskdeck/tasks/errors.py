"""Task store errors: one exception class per error kind."""


class TaskStoreError(Exception):
    """Base exception for rejected task store operations."""

    kind = "task_store_error"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class NotFoundError(TaskStoreError):
    """Raised when the referenced id is not in the store."""

    kind = "not_found"


class InvalidReferenceError(TaskStoreError):
    """Raised when a subtask names an epic that does not exist."""

    kind = "invalid_reference"


class SelfReferenceError(TaskStoreError):
    """Raised when an item would reference itself as its own epic or subtask."""

    kind = "self_reference"


class TimeConflictError(TaskStoreError):
    """Raised when a planned window overlaps an already admitted one."""

    kind = "time_conflict"

    def __init__(self, detail: str, conflicting_id: int | None = None):
        self.conflicting_id = conflicting_id
        super().__init__(detail)
