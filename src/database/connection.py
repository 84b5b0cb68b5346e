"""
Database Access

Async engine and sessions over the restaurant sales database (SQLAlchemy 2.0).
Report handlers only read; the seeding tool is the one writer.
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.config import get_settings
from src.config.settings import DatabaseSettings

logger = structlog.get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def engine_options(url: str, db_settings: DatabaseSettings) -> Dict[str, Any]:
    """
    Keyword arguments for ``create_async_engine``.

    Server databases get a sized, pre-pinged pool; SQLite keeps the
    default pool.
    """
    options: Dict[str, Any] = {"echo": db_settings.echo}

    if make_url(url).get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        return options

    options.update(
        pool_size=db_settings.pool_size,
        max_overflow=db_settings.max_overflow,
        pool_timeout=db_settings.pool_timeout,
        pool_pre_ping=True,
    )
    return options


async def init_database(url: Optional[str] = None) -> AsyncEngine:
    """
    Create the engine and verify the database answers.

    Args:
        url: SQLAlchemy async URL, defaults to the POSTGRES_* settings

    Returns:
        AsyncEngine: The initialized engine

    Raises:
        Exception: The driver error when the first connection fails; the
            module stays uninitialized in that case
    """
    global _engine, _async_session_factory

    if _engine is not None:
        logger.warning("Database already initialized")
        return _engine

    db_settings = get_settings().database
    database_url = url or db_settings.async_url
    engine = create_async_engine(database_url, **engine_options(database_url, db_settings))

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(
            "Failed to connect to database",
            backend=engine.url.get_backend_name(),
            error=str(e),
        )
        await engine.dispose()
        raise

    _engine = engine
    _async_session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    logger.info(
        "Database connection established",
        backend=engine.url.get_backend_name(),
        host=engine.url.host,
        database=engine.url.database,
    )
    return engine


async def close_database() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _async_session_factory

    if _engine is None:
        return

    await _engine.dispose()
    _engine = None
    _async_session_factory = None
    logger.info("Database connection pool closed")


def get_engine() -> AsyncEngine:
    """
    Get the database engine.

    Raises:
        RuntimeError: If database is not initialized
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _engine


@asynccontextmanager
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Open a session.

    Nothing is committed implicitly: writers call ``commit()`` themselves and
    any error rolls the session back.

    Example:
        async with get_db() as db:
            overview = await get_overview(db, filters)
    """
    if _async_session_factory is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")

    async with _async_session_factory() as session:
        try:
            yield session
        except Exception as e:
            logger.error("Database session error, rolling back", error_type=type(e).__name__)
            await session.rollback()
            raise


async def get_db_dependency() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with get_db() as session:
        yield session


async def check_database_health() -> Dict[str, Any]:
    """
    Run ``SELECT 1`` against the engine.

    Returns:
        ``{"status": "healthy", "latency_ms": ...}`` or
        ``{"status": "unhealthy", "error": ...}``
    """
    if _engine is None:
        return {"status": "unhealthy", "error": "Database not initialized"}

    start = time.perf_counter()
    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database health check failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}

    return {
        "status": "healthy",
        "latency_ms": round((time.perf_counter() - start) * 1000, 2),
    }
