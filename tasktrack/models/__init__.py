"""
Database models
All SQLAlchemy models should be defined here or imported here
"""

# Import Base for models to inherit from
from tasktrack.core.database import Base

# Import models here as they are created
from tasktrack.models.tag import Tag
from tasktrack.models.task import Task, TaskStatus
from tasktrack.models.task_tag import TaskTag
from tasktrack.models.user import User

# Export all models for easy imports
__all__ = [
    "Base",
    "Tag",
    "Task",
    "TaskStatus",
    "TaskTag",
    "User",
]
