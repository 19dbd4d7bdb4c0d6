from sqlalchemy.ext.asyncio import AsyncSession

from coretax.infrastructure.database.models import Consultation
from coretax.infrastructure.database.repository import BaseRepository


class ConsultationRepository(BaseRepository[Consultation]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Consultation)
