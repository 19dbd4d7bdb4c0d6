"""Deferred, in-memory state changes for the simulated bank synchronization.

``SyncScheduler.schedule`` runs an operation in its own database session after
a delay. Nothing is persisted: pending work is lost on restart and there is
no cancellation hook. The scheduler keeps a strong reference to each task
until it finishes so the event loop cannot garbage-collect it, and logs
failures since no caller is waiting on the result.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from functools import lru_cache

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from coretax.core.config import SyncConfig, get_settings
from coretax.infrastructure.database.session import get_session_factory

type DeferredOperation = Callable[[AsyncSession], Awaitable[None]]
type SessionFactoryProvider = Callable[[], async_sessionmaker[AsyncSession]]


class SyncScheduler:
    """Fire-and-forget runner for deferred database updates.

    Args:
        config: Delays and odds used by the bank sync simulation.
        session_factory: Returns the session factory deferred work opens
            sessions from. Resolved when the work runs, not at construction.
        rng: Random source for simulated outcomes; seed it in tests.
    """

    def __init__(
        self,
        config: SyncConfig,
        session_factory: SessionFactoryProvider = get_session_factory,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self.rng = rng or random.Random()
        self._session_factory = session_factory
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(
        self, name: str, delay_seconds: float, operation: DeferredOperation
    ) -> asyncio.Task[None]:
        """Run ``operation`` in a fresh session after ``delay_seconds``."""
        task = asyncio.create_task(self._run(name, delay_seconds, operation), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("Scheduled {} in {}s", name, delay_seconds)
        return task

    async def _run(
        self, name: str, delay_seconds: float, operation: DeferredOperation
    ) -> None:
        await asyncio.sleep(delay_seconds)
        try:
            async with self._session_factory()() as session:
                try:
                    await operation(session)
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
        except Exception:
            logger.exception("Deferred operation {} failed", name)
        else:
            logger.info("Deferred operation {} completed", name)

    async def drain(self) -> None:
        """Wait for every pending operation to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


@lru_cache
def get_sync_scheduler() -> SyncScheduler:
    """Process-wide scheduler, also used as a FastAPI dependency."""
    return SyncScheduler(get_settings().sync_config)
