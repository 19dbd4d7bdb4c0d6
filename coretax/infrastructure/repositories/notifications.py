from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.infrastructure.database.models import Notification, NotificationSettings
from coretax.infrastructure.database.repository import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Notification)

    async def owned_ids(self, owner_id: int, ids: Sequence[int]) -> list[int]:
        """The subset of ``ids`` belonging to ``owner_id``."""
        if not ids:
            return []
        stmt = select(Notification.id).where(
            Notification.user_id == owner_id, Notification.id.in_(ids)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def unread_count(self, owner_id: int) -> int:
        return await self.count(
            Notification.user_id == owner_id, Notification.is_read.is_(False)
        )


class NotificationSettingsRepository(BaseRepository[NotificationSettings]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, NotificationSettings)

    async def for_user(self, user_id: int) -> NotificationSettings | None:
        return await self.find_one_by(user_id=user_id)
