"""Project-wide fixtures: an in-memory database and isolated process state.

Tests run against SQLite through aiosqlite. ``StaticPool`` keeps a single
connection so every session in a test, including the ones opened by
deferred sync work and by the API, sees the same in-memory schema.
"""

import os
import random
from collections.abc import AsyncGenerator, Generator
from itertools import count
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from coretax.core.cache import get_response_cache
from coretax.core.config import SyncConfig, get_settings
from coretax.core.context import RequestContext
from coretax.domain.enums import Role
from coretax.infrastructure.database.base import Base
from coretax.infrastructure.database.models import User
from coretax.infrastructure.sync import SyncScheduler, get_sync_scheduler
from tests.support import UserFactory

TEST_DATABASE_URL = "sqlite+aiosqlite://"

# Application settings the developer's shell might export
ENV_PREFIXES = (
    "APP_",
    "API_",
    "ENVIRONMENT",
    "DEBUG",
    "PORT",
    "LOG_CONFIG__",
    "OBSERVABILITY_CONFIG__",
    "DATABASE_CONFIG__",
    "AUTH_CONFIG__",
    "CACHE_CONFIG__",
    "SYNC_CONFIG__",
    "PAGINATION_CONFIG__",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove application env vars; monkeypatch restores them afterwards."""
    for key in list(os.environ):
        if key.startswith(ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture(autouse=True)
def clean_process_state() -> Generator[None]:
    """Reset cached settings, the response cache, the scheduler and the context."""

    def reset() -> None:
        get_settings.cache_clear()
        get_response_cache.cache_clear()
        get_sync_scheduler.cache_clear()
        RequestContext.clear()

    reset()
    yield
    reset()


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        # Sessions share one connection; a checkin must not roll back another
        # session's pending work. Each session ends its own transaction.
        pool_reset_on_return=None,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db_session: AsyncSession) -> UserFactory:
    """Create and commit users; emails are unique per test.

    Passwords are not hashed; use the auth endpoints for login flows.
    """
    sequence = count(1)

    async def factory(role: Role = Role.WAJIB_PAJAK, **fields: Any) -> User:
        n = next(sequence)
        defaults: dict[str, Any] = {
            "email": f"user{n}@coretax.id",
            "password_hash": "not-a-bcrypt-hash",
            "name": f"User {n}",
            "is_active": True,
        }
        user = User(role=role, **{**defaults, **fields})
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return factory


@pytest.fixture
def scheduler(session_factory: async_sessionmaker[AsyncSession]) -> SyncScheduler:
    """Deterministic scheduler: no delays, seeded outcomes, test database."""
    config = SyncConfig(
        balance_delay_seconds=0,
        transactions_delay_seconds=0,
        connection_test_delay_seconds=0,
        bulk_sync_delay_seconds=0,
        connection_success_rate=1.0,
    )
    return SyncScheduler(config, lambda: session_factory, random.Random(0))
