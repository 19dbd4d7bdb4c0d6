from sqlalchemy.ext.asyncio import AsyncSession

from coretax.infrastructure.database.models import Document
from coretax.infrastructure.database.repository import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Document)
