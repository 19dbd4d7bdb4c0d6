from sqlalchemy.ext.asyncio import AsyncSession

from coretax.domain.enums import TaxType
from coretax.infrastructure.database.models import UserProfile
from coretax.infrastructure.database.repository import BaseRepository


class UserProfileRepository(BaseRepository[UserProfile]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UserProfile)

    async def for_owner_and_type(self, owner_id: int, tax_type: TaxType) -> UserProfile | None:
        return await self.find_one_by(user_id=owner_id, tax_type=tax_type)

    async def npwp_taken(self, npwp: str, *, exclude_id: int | None = None) -> bool:
        conditions = [UserProfile.npwp == npwp]
        if exclude_id is not None:
            conditions.append(UserProfile.id != exclude_id)
        return await self.exists(*conditions)
