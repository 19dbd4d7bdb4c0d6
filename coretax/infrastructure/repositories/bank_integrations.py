from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.infrastructure.database.models import BankIntegration
from coretax.infrastructure.database.repository import BaseRepository


class BankIntegrationRepository(BaseRepository[BankIntegration]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, BankIntegration)

    async def account_taken(
        self, owner_id: int, account_number: str, *, exclude_id: int | None = None
    ) -> bool:
        conditions = [
            BankIntegration.user_id == owner_id,
            BankIntegration.account_number == account_number,
        ]
        if exclude_id is not None:
            conditions.append(BankIntegration.id != exclude_id)
        return await self.exists(*conditions)

    async def has_any(self, owner_id: int) -> bool:
        return await self.exists(BankIntegration.user_id == owner_id)

    async def clear_primary(self, owner_id: int, *, keep_id: int | None = None) -> int:
        """Unset ``is_primary`` on every other account of ``owner_id``."""
        stmt = update(BankIntegration).where(
            BankIntegration.user_id == owner_id,
            BankIntegration.is_primary.is_(True),
        )
        if keep_id is not None:
            stmt = stmt.where(BankIntegration.id != keep_id)
        stmt = stmt.values(is_primary=False).execution_options(
            synchronize_session="fetch"
        )
        result = await self.session.execute(stmt)
        return result.rowcount
