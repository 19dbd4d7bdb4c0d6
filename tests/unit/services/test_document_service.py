"""Service tests for document metadata."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from coretax.domain.access import Actor
from coretax.domain.enums import DocumentCategory, DocumentStatus, Role
from coretax.infrastructure.database.models import Document
from coretax.services.documents import DocumentService, upload_url
from coretax.services.inputs.common import BulkRequest
from coretax.services.inputs.documents import DocumentUpdate
from tests.support import UserFactory, actor_of


@pytest.fixture
def service(db_session: AsyncSession) -> DocumentService:
    return DocumentService(db_session)


async def upload(service: DocumentService, actor: Actor, title: str = "SPT 2024") -> Document:
    return await service.upload(
        actor,
        title=f"  {title} ",
        category=DocumentCategory.SPT_TAHUNAN,
        file_name="spt.pdf",
        file_size=2048,
        file_type="application/pdf",
        tags="spt,2024",
    )


@pytest.mark.unit
def test_upload_url() -> None:
    assert upload_url("spt.pdf", now_ms=1718000000000) == "/uploads/1718000000000_spt.pdf"


@pytest.mark.unit
class TestDocuments:
    async def test_upload(self, service: DocumentService, make_user: UserFactory) -> None:
        owner = actor_of(await make_user())

        document = await upload(service, owner)

        assert document.title == "SPT 2024"
        assert document.status == DocumentStatus.ACTIVE
        assert document.file_url.startswith("/uploads/")
        assert document.file_url.endswith("_spt.pdf")

    async def test_blank_title_rejected(
        self, service: DocumentService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())

        with pytest.raises(ValidationError, match="Title is required"):
            await upload(service, owner, title="   ")

    async def test_private_even_to_admins(
        self, service: DocumentService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        admin = actor_of(await make_user(Role.ADMIN))
        document = await upload(service, owner)

        with pytest.raises(AuthorizationError):
            await service.get(admin, document.id)
        assert (await service.list_page(admin)).total == 0

    async def test_delete_is_soft(
        self, service: DocumentService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        document = await upload(service, owner)

        await service.delete(owner, document.id)

        stored = await db_session.get(Document, document.id)
        assert stored is not None
        assert stored.status == DocumentStatus.DELETED
        with pytest.raises(NotFoundError):
            await service.get(owner, document.id)
        assert (await service.list_page(owner)).total == 0

    async def test_search_and_filters(
        self, service: DocumentService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        await upload(service, owner, "Faktur Mei")
        await upload(service, owner, "Laporan Juni")

        found = await service.list_page(owner, search="faktur")

        assert [d.title for d in found.items] == ["Faktur Mei"]

    async def test_update(self, service: DocumentService, make_user: UserFactory) -> None:
        owner = actor_of(await make_user())
        document = await upload(service, owner)

        archived = await service.update(
            owner,
            document.id,
            DocumentUpdate(status=DocumentStatus.ARCHIVED, description=None, is_public=True),
        )

        assert archived.status == DocumentStatus.ARCHIVED
        assert archived.is_public is True


@pytest.mark.unit
class TestDocumentBulk:
    async def test_archive_then_restore(
        self, service: DocumentService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        ids = [(await upload(service, owner)).id for _ in range(2)]

        archived = await service.bulk(owner, BulkRequest(action="archive", ids=ids))
        restored = await service.bulk(owner, BulkRequest(action="restore", ids=ids))

        assert (archived.affected, restored.affected) == (2, 2)
        assert restored.message == "Bulk restore completed successfully"
        statuses = await db_session.scalars(select(Document.status).where(Document.id.in_(ids)))
        assert set(statuses) == {DocumentStatus.ACTIVE}

    async def test_deleted_documents_cannot_be_archived(
        self, service: DocumentService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        document = await upload(service, owner)
        await service.bulk(owner, BulkRequest(action="delete", ids=[document.id]))

        with pytest.raises(ConflictError):
            await service.bulk(owner, BulkRequest(action="archive", ids=[document.id]))

    async def test_admin_cannot_touch_others_documents(
        self, service: DocumentService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        admin = actor_of(await make_user(Role.ADMIN))
        document = await upload(service, owner)

        with pytest.raises(AuthorizationError):
            await service.bulk(admin, BulkRequest(action="setPublic", ids=[document.id]))
