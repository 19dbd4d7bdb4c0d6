"""Async database engine and session lifecycle management.

A single engine and session factory are created lazily by
``_DatabaseManager``. ``get_async_session`` wraps one unit of work: commit on
success, rollback on error. When SQL logging is enabled, cursor event
listeners report queries slower than ``slow_query_threshold_ms``.
Cache invalidations requested through ``invalidate_on_commit`` run only
after the session commits.
"""

import threading
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from weakref import WeakKeyDictionary

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.engine.interfaces import DBAPICursor, ExecutionContext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Session

from coretax.core.cache import get_response_cache
from coretax.core.config import get_settings
from coretax.core.constants import MILLISECONDS_PER_SECOND
from coretax.core.error_context import sanitize_dict

POOL_RECYCLE_SECONDS = 3600
COMMAND_TIMEOUT_SECONDS = 60
MAX_LOGGED_STATEMENT_LENGTH = 500
PENDING_CACHE_PREFIXES = "pending_cache_prefixes"

_query_start_times: WeakKeyDictionary[ExecutionContext, float] = WeakKeyDictionary()


def _before_cursor_execute(
    _conn: Connection,
    _cursor: DBAPICursor,
    _statement: str,
    _parameters: object,
    context: ExecutionContext,
    _executemany: bool,
) -> None:
    _query_start_times[context] = time.perf_counter()


def _after_cursor_execute(
    _conn: Connection,
    cursor: DBAPICursor,
    statement: str,
    parameters: object,
    context: ExecutionContext,
    _executemany: bool,
) -> None:
    start_time = _query_start_times.pop(context, None)
    if start_time is None:
        return

    duration_ms = (time.perf_counter() - start_time) * MILLISECONDS_PER_SECOND
    threshold_ms = get_settings().log_config.slow_query_threshold_ms
    if duration_ms < threshold_ms:
        return

    logger.warning(
        "Slow query detected ({:.2f}ms)",
        duration_ms,
        query=" ".join(statement.split())[:MAX_LOGGED_STATEMENT_LENGTH],
        parameters=sanitize_dict(parameters) if isinstance(parameters, dict) else None,
        rows_affected=getattr(cursor, "rowcount", -1),
        threshold_ms=threshold_ms,
    )


def invalidate_on_commit(session: AsyncSession, *prefixes: str) -> None:
    """Drop cached entries under ``prefixes`` once ``session`` commits.

    Nothing is dropped if the session rolls back instead.
    """
    session.info.setdefault(PENDING_CACHE_PREFIXES, set()).update(prefixes)


def _invalidate_committed(session: Session) -> None:
    prefixes: set[str] = session.info.pop(PENDING_CACHE_PREFIXES, set())
    cache = get_response_cache()
    for prefix in sorted(prefixes):
        cache.invalidate_prefix(prefix)


def _discard_pending(session: Session) -> None:
    session.info.pop(PENDING_CACHE_PREFIXES, None)


event.listen(Session, "after_commit", _invalidate_committed)
event.listen(Session, "after_rollback", _discard_pending)


def create_database_engine(database_url: str | None = None) -> AsyncEngine:
    """Create an async engine with the configured connection pool.

    Args:
        database_url: Optional URL overriding ``database_config.database_url``.

    Returns:
        AsyncEngine: Configured async engine instance.
    """
    settings = get_settings()
    db_config = settings.database_config

    engine = create_async_engine(
        database_url or db_config.database_url,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=db_config.pool_pre_ping,
        echo=db_config.echo,
        pool_recycle=POOL_RECYCLE_SECONDS,
        connect_args={
            "server_settings": {"jit": "off"},
            "command_timeout": COMMAND_TIMEOUT_SECONDS,
        },
    )

    if settings.log_config.enable_sql_logging:
        event.listen(engine.sync_engine, "before_cursor_execute", _before_cursor_execute)
        event.listen(engine.sync_engine, "after_cursor_execute", _after_cursor_execute)

    logger.info(
        "Created database engine - pool_size: {}, max_overflow: {}, sql_logging: {}",
        db_config.pool_size,
        db_config.max_overflow,
        settings.log_config.enable_sql_logging,
    )

    return engine


class _DatabaseManager:
    """Lazily created engine and session factory shared by the process."""

    def __init__(self) -> None:
        self._engine: AsyncEngine | None = None
        self._async_session_factory: async_sessionmaker[AsyncSession] | None = None
        self._lock = threading.Lock()

    def get_engine(self) -> AsyncEngine:
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    self._engine = create_database_engine()
        return self._engine

    def get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._async_session_factory is None:
            with self._lock:
                if self._async_session_factory is None:
                    self._async_session_factory = async_sessionmaker(
                        self.get_engine(),
                        class_=AsyncSession,
                        expire_on_commit=False,
                    )
                    logger.info("Created async session factory")
        return self._async_session_factory

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database engine disposed")
        self.reset()

    def reset(self) -> None:
        self._engine = None
        self._async_session_factory = None


_db_manager = _DatabaseManager()


def get_engine() -> AsyncEngine:
    """Get or create the global async engine instance."""
    return _db_manager.get_engine()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the global async session factory."""
    return _db_manager.get_session_factory()


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Open a session that commits on success and rolls back on error.

    Example:
        async with get_async_session() as session:
            integration = await session.get(BankIntegration, 42)
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            logger.debug("Database session rolled back due to error")
            raise


async def close_database() -> None:
    """Dispose of the engine; called on application shutdown."""
    await _db_manager.close()


async def check_database_connection() -> tuple[bool, str | None]:
    """Run ``SELECT 1`` and report whether the database answered.

    Returns:
        tuple[bool, str | None]: Health flag and the error message on failure.
    """
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return False, str(e)
    except OSError as e:
        return False, str(e)
    else:
        return True, None


def pool_metrics() -> dict[str, Any]:
    """Snapshot of the connection pool for the health endpoint."""
    pool: Any = get_engine().pool
    return {
        "size": pool.size(),
        "checked_out": pool.checkedout(),
        "overflow": pool.overflow(),
    }
