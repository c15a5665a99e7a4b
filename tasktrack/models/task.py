"""
Task database model
SQLAlchemy model for tasks
Reference: https://docs.sqlalchemy.org/en/20/orm/declarative_styles.html
"""
from datetime import datetime
from enum import IntEnum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, SmallInteger, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tasktrack.core.database import Base

if TYPE_CHECKING:
    from tasktrack.models.tag import Tag
    from tasktrack.models.user import User


class TaskStatus(IntEnum):
    """Task lifecycle status (stored as a small integer)."""

    PENDING = 0
    IN_PROGRESS = 1
    COMPLETED = 2

    @property
    def label(self) -> str:
        return self.name.lower()


class Task(Base):
    """
    Task model representing a task in the database

    Attributes:
        id: Primary key, auto-incrementing integer
        user_id: Owner of the task (fixed at creation)
        title: Task title (required, at most 255 characters)
        description: Optional free text
        status: TaskStatus value (0 pending, 1 in progress, 2 completed)
        due_date: Optional deadline
        completed_at: Set iff status is COMPLETED
        deleted_at: Soft-delete tombstone, NULL while the task is active
        updated_by: Last actor that modified the task
        created_at: Timestamp when task was created (auto-generated)
        updated_at: Timestamp when task was last updated (auto-generated)

    Reference: https://docs.sqlalchemy.org/en/20/orm/mapped_sql_expressions.html
    """
    __tablename__ = "tasks"

    # Indexes for the listing filters and the per-user group-by
    __table_args__ = (
        Index("ix_tasks_status", "status"),
        Index("ix_tasks_deleted_at", "deleted_at"),
        Index("ix_tasks_created_at", "created_at"),
        Index("ix_tasks_due_date", "due_date"),
        Index("ix_tasks_user_id", "user_id"),
        Index("ix_tasks_user_deleted_created", "user_id", "deleted_at", "created_at"),
        Index("ix_tasks_user_status_deleted", "user_id", "status", "deleted_at"),
        Index("ix_tasks_deleted_due_date", "deleted_at", "due_date"),
    )

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Ownership
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Task fields
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[int] = mapped_column(
        SmallInteger,
        nullable=False,
        default=TaskStatus.PENDING.value,
    )
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Soft delete
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    updated_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Timestamps
    # Using server_default with func.now() for automatic timestamp generation
    # Reference: https://docs.sqlalchemy.org/en/20/core/defaults.html#server-side-defaults
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Relationships are loaded eagerly: lazy loads are not allowed under AsyncSession
    # Reference: https://docs.sqlalchemy.org/en/20/orm/extensions/asyncio.html#preventing-implicit-io-when-using-asyncsession
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id], lazy="selectin")
    updater: Mapped[Optional["User"]] = relationship("User", foreign_keys=[updated_by], lazy="selectin")

    # Soft-deleted tags are hidden from a task's tag set
    tags: Mapped[list["Tag"]] = relationship(
        "Tag",
        secondary="task_tags",
        primaryjoin="Task.id == TaskTag.task_id",
        secondaryjoin="and_(Tag.id == TaskTag.tag_id, Tag.deleted_at.is_(None))",
        order_by="Tag.id",
        viewonly=True,
        lazy="selectin",
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    def __repr__(self) -> str:
        """String representation of Task"""
        return f"<Task(id={self.id}, title='{self.title}', status={self.status}, deleted={self.is_deleted})>"
