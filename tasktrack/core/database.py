"""
Database connection and session management
Uses SQLAlchemy async engine (asyncpg for PostgreSQL)
Reference: https://docs.sqlalchemy.org/en/20/orm/extensions/asyncio.html
"""
import logging
from typing import AsyncIterator, Awaitable, Callable

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from tasktrack.core.config import settings

logger = logging.getLogger(__name__)


# Validate DATABASE_URL is set
if not settings.DATABASE_URL:
    raise ValueError(
        "DATABASE_URL environment variable is not set. "
        "Please set it in your .env file or environment."
    )


def _connect_args(database_url: str) -> dict:
    """
    Driver-specific connection arguments.

    asyncpg accepts a command timeout and server settings; other drivers
    (aiosqlite in tests) reject unknown keyword arguments.
    Reference: https://magicstack.github.io/asyncpg/current/api/index.html#connection
    """
    if database_url.startswith("postgresql+asyncpg://"):
        return {
            "command_timeout": 60,
            "server_settings": {
                "application_name": "tasktrack_api",
            },
        }
    return {}


# Create async engine
# pool_pre_ping drops dead connections before handing them out
# Reference: https://docs.sqlalchemy.org/en/20/core/pooling.html#disconnect-handling-pessimistic
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,  # Set to True for SQL query logging (useful for debugging)
    pool_pre_ping=True,
    connect_args=_connect_args(settings.DATABASE_URL),
)


# Create async session factory
# This is used to create database sessions throughout the application
# Reference: https://docs.sqlalchemy.org/en/20/orm/extensions/asyncio.html#session-basics
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Keep objects accessible after commit
    autoflush=False,
)


# Base class for all database models
# All models should inherit from this class
# Reference: https://docs.sqlalchemy.org/en/20/orm/declarative_styles.html
class Base(DeclarativeBase):
    """Base class for SQLAlchemy declarative models"""
    pass


# Callbacks queued on a session, awaited once its transaction has committed
AFTER_COMMIT_KEY = "after_commit"


def after_commit(session: AsyncSession, callback: Callable[[], Awaitable[None]]) -> None:
    """Queue `callback` to run after `session` commits; dropped on rollback."""
    session.info.setdefault(AFTER_COMMIT_KEY, []).append(callback)


async def run_after_commit(session: AsyncSession) -> None:
    """Await and clear the callbacks queued with after_commit()"""
    callbacks = session.info.pop(AFTER_COMMIT_KEY, [])
    for callback in callbacks:
        try:
            await callback()
        except Exception as e:
            logger.warning(f"After-commit callback failed: {type(e).__name__}: {e}", exc_info=True)


# Dependency to get database session
# Used in FastAPI route handlers via dependency injection
# Reference: https://fastapi.tiangolo.com/tutorial/dependencies/
async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Dependency function that provides a database session

    Transaction handling:
    - Commits on success
    - Rolls back on error
    - Always closes the session

    Services only flush; this is the single place a request's work is committed.
    Callbacks queued with after_commit() run once the commit succeeds.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            logger.debug("Rolling back database session", exc_info=True)
            session.info.pop(AFTER_COMMIT_KEY, None)
            await session.rollback()
            # Re-raise the original exception so FastAPI can handle it properly
            raise
        await run_after_commit(session)
