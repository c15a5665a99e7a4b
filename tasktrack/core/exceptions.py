"""
Domain exceptions raised by the service layer
Routes translate them into HTTP responses (see api/v1/errors.py)
"""


class TaskTrackError(Exception):
    """
    Base exception for operations rejected by the core
    """
    def __init__(self, message: str = "Operation failed"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(TaskTrackError):
    """
    Entity id does not resolve under the requested visibility
    (active, soft-deleted or either)
    """
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class ConflictError(TaskTrackError):
    """
    Operation is illegal given the entity's current state
    (editing a deleted/completed task, double delete, double completion)
    """
    def __init__(self, message: str = "Operation conflicts with current state"):
        super().__init__(message)


class InvalidArgumentError(TaskTrackError):
    """
    Malformed input reached the core
    (empty tag id list, out-of-range status, invalid title)
    """
    def __init__(self, message: str = "Invalid argument"):
        super().__init__(message)
