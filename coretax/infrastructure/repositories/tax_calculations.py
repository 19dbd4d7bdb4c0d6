from sqlalchemy.ext.asyncio import AsyncSession

from coretax.infrastructure.database.models import TaxCalculation
from coretax.infrastructure.database.repository import BaseRepository


class TaxCalculationRepository(BaseRepository[TaxCalculation]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, TaxCalculation)
