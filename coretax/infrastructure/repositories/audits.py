from sqlalchemy.ext.asyncio import AsyncSession

from coretax.infrastructure.database.models import Audit, AuditItem
from coretax.infrastructure.database.repository import BaseRepository


class AuditRepository(BaseRepository[Audit]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Audit)


class AuditItemRepository(BaseRepository[AuditItem]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AuditItem)

    async def for_audit(self, audit_id: int) -> list[AuditItem]:
        return await self.filter_by(audit_id=audit_id)
