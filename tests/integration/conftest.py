"""HTTP-level fixtures: the app wired to the test database and scheduler."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from coretax.api.main import app
from coretax.core.config import get_settings
from coretax.infrastructure.database.dependencies import get_db
from coretax.infrastructure.sync import SyncScheduler, get_sync_scheduler


@pytest.fixture(autouse=True)
def fast_hashing(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("AUTH_CONFIG__BCRYPT_ROUNDS", "4")
    get_settings.cache_clear()


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession], scheduler: SyncScheduler
) -> AsyncGenerator[AsyncClient]:
    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sync_scheduler] = lambda: scheduler
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
