"""Document metadata; uploads are multipart and only the file's name and size are kept."""

from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile

from coretax.api.dependencies import CurrentActor, Documents
from coretax.api.schemas.common import BulkResponse, MessageResponse, Paginated
from coretax.api.schemas.documents import DocumentOut
from coretax.api.utils.pagination import Paging
from coretax.domain.enums import DocumentCategory, DocumentStatus
from coretax.services.inputs.common import BulkRequest
from coretax.services.inputs.documents import DocumentUpdate

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("", response_model=Paginated[DocumentOut])
async def list_documents(
    actor: CurrentActor,
    service: Documents,
    paging: Paging,
    category: DocumentCategory | None = None,
    status: DocumentStatus | None = None,
) -> Paginated[DocumentOut]:
    page = await service.list_page(
        actor,
        category=category,
        status=status,
        search=paging.search,
        page=paging.page,
        limit=paging.limit,
    )
    return Paginated[DocumentOut].from_page(page)


@router.post("", response_model=DocumentOut, status_code=HTTPStatus.CREATED)
async def upload_document(
    actor: CurrentActor,
    service: Documents,
    file: Annotated[UploadFile, File()],
    title: Annotated[str, Form()],
    category: Annotated[DocumentCategory, Form()],
    description: Annotated[str | None, Form()] = None,
    tags: Annotated[str | None, Form()] = None,
    is_public: Annotated[bool, Form(alias="isPublic")] = False,
) -> DocumentOut:
    size = file.size
    if size is None:
        size = len(await file.read())
    document = await service.upload(
        actor,
        title=title,
        category=category,
        file_name=file.filename or "",
        file_size=size,
        file_type=file.content_type,
        description=description,
        tags=tags,
        is_public=is_public,
    )
    return DocumentOut.model_validate(document)


@router.post("/bulk", response_model=BulkResponse)
async def bulk_documents(
    body: BulkRequest, actor: CurrentActor, service: Documents
) -> BulkResponse:
    return BulkResponse.from_outcome(await service.bulk(actor, body))


@router.get("/{document_id}", response_model=DocumentOut)
async def get_document(
    document_id: int, actor: CurrentActor, service: Documents
) -> DocumentOut:
    return DocumentOut.model_validate(await service.get(actor, document_id))


@router.put("/{document_id}", response_model=DocumentOut)
async def update_document(
    document_id: int, body: DocumentUpdate, actor: CurrentActor, service: Documents
) -> DocumentOut:
    return DocumentOut.model_validate(await service.update(actor, document_id, body))


@router.delete("/{document_id}", response_model=MessageResponse)
async def delete_document(
    document_id: int, actor: CurrentActor, service: Documents
) -> MessageResponse:
    """Soft delete: the document is marked ``DELETED`` and hidden from lists."""
    await service.delete(actor, document_id)
    return MessageResponse(message="Document deleted successfully")
