"""FastAPI dependency providing a request-scoped database session."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.infrastructure.database.session import get_async_session


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Yield a session committed after the handler succeeds.

    Example:
        @router.get("/audits")
        async def list_audits(db: DatabaseSession): ...
    """
    async with get_async_session() as session:
        yield session


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
