from sqlalchemy.ext.asyncio import AsyncSession

from coretax.infrastructure.database.models import ComplianceRecord
from coretax.infrastructure.database.repository import BaseRepository


class ComplianceRecordRepository(BaseRepository[ComplianceRecord]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ComplianceRecord)
