"""Document metadata. File bytes are not stored; uploads get a synthetic URL."""

import time
from typing import Final, assert_never

from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.exceptions import NotFoundError, ValidationError
from coretax.domain.access import DOCUMENTS, Actor
from coretax.domain.bulk import BulkOutcome, DocumentAction, parse_action, require_full_scope
from coretax.domain.enums import DocumentCategory, DocumentStatus
from coretax.domain.transitions import DOCUMENT
from coretax.infrastructure.database.models import Document
from coretax.infrastructure.database.repository import Page
from coretax.infrastructure.repositories import DocumentRepository, search_any
from coretax.services.common import sparse_changes
from coretax.services.inputs.common import BulkRequest
from coretax.services.inputs.documents import DocumentUpdate

NULLABLE_FIELDS: Final = frozenset({"description", "tags"})

_BULK_STATUS: Final = {
    DocumentAction.ARCHIVE: DocumentStatus.ARCHIVED,
    DocumentAction.RESTORE: DocumentStatus.ACTIVE,
    DocumentAction.DELETE: DocumentStatus.DELETED,
}


def upload_url(file_name: str, now_ms: int | None = None) -> str:
    """Synthetic storage URL: ``/uploads/<epoch ms>_<name>``."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"/uploads/{stamp}_{file_name}"


class DocumentService:
    def __init__(self, session: AsyncSession) -> None:
        self.documents = DocumentRepository(session)

    async def list_page(
        self,
        actor: Actor,
        *,
        category: DocumentCategory | None = None,
        status: DocumentStatus | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[Document]:
        conditions: list[ColumnElement[bool]] = [
            Document.user_id == actor.id,
            Document.status != DocumentStatus.DELETED,
        ]
        if category is not None:
            conditions.append(Document.category == category)
        if status is not None:
            conditions.append(Document.status == status)
        if search:
            conditions.append(
                search_any(
                    search,
                    Document.title,
                    Document.description,
                    Document.file_name,
                    Document.tags,
                )
            )
        return await self.documents.list_page(*conditions, page=page, limit=limit)

    async def upload(
        self,
        actor: Actor,
        *,
        title: str,
        category: DocumentCategory,
        file_name: str,
        file_size: int,
        file_type: str | None = None,
        description: str | None = None,
        tags: str | None = None,
        is_public: bool = False,
    ) -> Document:
        if not title.strip():
            raise ValidationError("Title is required")
        if not file_name:
            raise ValidationError("File is required")
        return await self.documents.create(
            Document(
                user_id=actor.id,
                title=title.strip(),
                description=description,
                file_name=file_name,
                file_url=upload_url(file_name),
                file_size=file_size,
                file_type=file_type,
                category=category,
                tags=tags,
                is_public=is_public,
                status=DocumentStatus.ACTIVE,
            )
        )

    async def get(self, actor: Actor, document_id: int) -> Document:
        """Owner-only lookup; soft-deleted documents are reported as missing."""
        document = await self.documents.get_by_id(document_id)
        if document is None or document.status == DocumentStatus.DELETED:
            raise NotFoundError("Document not found", context={"id": document_id})
        DOCUMENTS.require_read(actor, document.user_id)
        return document

    async def update(self, actor: Actor, document_id: int, data: DocumentUpdate) -> Document:
        document = await self.get(actor, document_id)
        changes = sparse_changes(data, NULLABLE_FIELDS)
        if "status" in changes:
            DOCUMENT.check(document.status, changes["status"])
        return await self.documents.update(document, changes)

    async def delete(self, actor: Actor, document_id: int) -> None:
        document = await self.get(actor, document_id)
        DOCUMENTS.require_delete(actor, document.user_id)
        await self.documents.update(document, {"status": DocumentStatus.DELETED})

    async def bulk(self, actor: Actor, request: BulkRequest) -> BulkOutcome:
        action = parse_action(DocumentAction, request.action)
        found = await self.documents.get_many(request.ids)
        require_full_scope(
            request.ids, [d.id for d in found if DOCUMENTS.can_manage(actor, d.user_id)]
        )
        ids = [d.id for d in found]

        match action:
            case DocumentAction.ARCHIVE | DocumentAction.RESTORE | DocumentAction.DELETE:
                target = _BULK_STATUS[action]
                for document in found:
                    DOCUMENT.check(document.status, target)
                affected = await self.documents.update_many(ids, {"status": target})
            case DocumentAction.SET_PUBLIC:
                affected = await self.documents.update_many(ids, {"is_public": True})
            case DocumentAction.SET_PRIVATE:
                affected = await self.documents.update_many(ids, {"is_public": False})
            case _:
                assert_never(action)

        return BulkOutcome(action, affected, f"Bulk {action} completed successfully")
