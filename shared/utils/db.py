"""Database session management with async SQLAlchemy."""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

# Global engine and session factory
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def init_db(
    database_url: str,
    pool_size: int = 5,
    max_overflow: int = 10,
    echo: bool = False,
) -> None:
    """Initialize the database engine and session factory.

    Pool sizing only applies to server databases; SQLite engines use the
    dialect's default pool.

    Args:
        database_url: Async connection URL (postgresql+asyncpg://, sqlite+aiosqlite://)
        pool_size: Number of connections to keep in pool
        max_overflow: Maximum overflow connections beyond pool_size
        echo: Whether to log SQL statements
    """
    global _engine, _session_factory

    engine_kwargs: dict[str, Any] = {"echo": echo}
    if not database_url.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
        )

    _engine = create_async_engine(database_url, **engine_kwargs)

    _session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_engine() -> AsyncEngine:
    """Get the database engine."""
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory."""
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory


async def create_tables(metadata: MetaData) -> None:
    """Create all tables of ``metadata`` that do not exist yet."""
    async with get_engine().begin() as conn:
        await conn.run_sync(metadata.create_all)


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session as an async context manager.

    The session is rolled back when the block raises. Committing is left to
    the caller so that one call maps to exactly one transaction.

    Usage:
        async with get_db_session() as session:
            result = await session.execute(query)
            await session.commit()
    """
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def close_db() -> None:
    """Close the database engine and all connections."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
