"""
Async database session management with connection pooling
"""

import os
from typing import AsyncGenerator
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from gamearena.core.config import settings

# Pool configuration with environment variable overrides
POOL_SIZE = int(os.getenv("DB_POOL_SIZE", settings.db_pool_size))
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", settings.db_max_overflow))


def configure_sqlite_locking(engine: AsyncEngine) -> AsyncEngine:
    """
    Make every SQLite transaction take the write lock up front.

    SQLite has no SELECT ... FOR UPDATE, so settlement transactions would
    otherwise read under a shared lock and fail on upgrade. BEGIN IMMEDIATE
    makes concurrent writers queue on the busy timeout instead, which gives
    the same serial ordering Postgres row locks give.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def create_engine_for_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with pooling suited to the backend."""
    if database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"timeout": 30},
        )
        return configure_sqlite_locking(engine)

    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_timeout=30,
    )


# Create async engine with optimized pooling
async_engine = create_engine_for_url(settings.database_url, echo=settings.debug)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Export for use in Celery tasks
async_session = AsyncSessionLocal


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get a database session for FastAPI dependency injection.
    Provides proper session lifecycle management with connection pooling.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_session_factory() -> async_sessionmaker:
    """
    Session factory dependency for services that manage their own
    transaction boundaries (one fresh session per attempt).
    """
    return AsyncSessionLocal
