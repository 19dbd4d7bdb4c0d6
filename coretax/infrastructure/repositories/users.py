from sqlalchemy.ext.asyncio import AsyncSession

from coretax.infrastructure.database.models import User
from coretax.infrastructure.database.repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        return await self.find_one_by(email=email.strip().lower())

    async def identity_taken(
        self, *, email: str, npwp: str | None = None, nik: str | None = None
    ) -> str | None:
        """Name of the first unique identity field already in use, if any."""
        if await self.get_by_email(email) is not None:
            return "email"
        if npwp is not None and await self.find_one_by(npwp=npwp) is not None:
            return "npwp"
        if nik is not None and await self.find_one_by(nik=nik) is not None:
            return "nik"
        return None
