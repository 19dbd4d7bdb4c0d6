"""Unit tests for the deferred sync scheduler."""

import pytest
from pytest_mock import MockerFixture
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.infrastructure.database.models import User
from coretax.infrastructure.sync import SyncScheduler, get_sync_scheduler
from tests.support import UserFactory


@pytest.mark.unit
class TestSyncScheduler:
    async def test_operation_runs_in_own_session_and_commits(
        self, scheduler: SyncScheduler, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        user = await make_user()

        async def rename(session: AsyncSession) -> None:
            target = await session.get(User, user.id)
            assert target is not None
            target.name = "Renamed"

        scheduler.schedule("rename", 0, rename)
        assert scheduler.pending == 1

        await scheduler.drain()

        assert scheduler.pending == 0
        db_session.expunge_all()
        name = await db_session.scalar(select(User.name).where(User.id == user.id))
        assert name == "Renamed"

    async def test_failure_is_logged_and_rolled_back(
        self,
        scheduler: SyncScheduler,
        make_user: UserFactory,
        db_session: AsyncSession,
        mocker: MockerFixture,
    ) -> None:
        mock_logger = mocker.patch("coretax.infrastructure.sync.logger")
        user = await make_user()

        async def explode(session: AsyncSession) -> None:
            target = await session.get(User, user.id)
            assert target is not None
            target.name = "Never saved"
            await session.flush()
            raise RuntimeError("bank offline")

        task = scheduler.schedule("explode", 0, explode)
        await scheduler.drain()

        assert task.exception() is None
        mock_logger.exception.assert_called_once_with(
            "Deferred operation {} failed", "explode"
        )
        db_session.expunge_all()
        name = await db_session.scalar(select(User.name).where(User.id == user.id))
        assert name == user.name

    def test_process_wide_instance(self) -> None:
        assert get_sync_scheduler() is get_sync_scheduler()
