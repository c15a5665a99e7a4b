"""
User database model
Users own tasks and tags; registration and login live outside this service
Reference: https://docs.sqlalchemy.org/en/20/orm/basic_relationships.html#one-to-many
"""
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from tasktrack.core.database import Base


class User(Base):
    """
    User model representing a user in the database

    Attributes:
        id: Primary key, auto-incrementing integer
        name: Display name
        email: User email (unique)
        password_hash: Hashed password, never exposed through the API
        created_at: Timestamp when user was created (auto-generated)
        updated_at: Timestamp when user was last updated (auto-generated)
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),  # Server-side default for creation time
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation of User"""
        return f"<User(id={self.id}, email='{self.email}')>"
