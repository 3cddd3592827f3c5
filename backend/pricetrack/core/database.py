"""Database connection and session management"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from pricetrack.core.config import settings

logger = logging.getLogger(__name__)


def async_database_url(url: str) -> str:
    """Map a plain database URL onto its async driver."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    database_url = async_database_url(url)
    engine = create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True if "postgresql" in database_url else False,
    )

    if database_url.startswith("sqlite"):
        # SQLite leaves foreign keys off unless asked per connection
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            # built-in lower() only folds ASCII; ilike compiles to lower() on SQLite
            dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)

    return engine


engine = build_engine(settings.DATABASE_URL, echo=settings.ENVIRONMENT == "development")

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def unit_of_work(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Scoped transaction over a session.

    Commits when the block exits normally and rolls back on every other exit,
    including task cancellation, so partial writes never become visible.
    """
    try:
        yield session
        await session.commit()
    except BaseException:
        await session.rollback()
        logger.debug("Unit of work rolled back")
        raise


async def init_db(bind: AsyncEngine = engine):
    """Initialize database tables"""
    import pricetrack.models  # noqa: F401  registers every table on Base

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
