from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Query

from coretax.api.dependencies import Consultations, CurrentActor
from coretax.api.schemas.common import BulkResponse, MessageResponse, Paginated
from coretax.api.schemas.consultations import ConsultationOut
from coretax.api.utils.pagination import Paging
from coretax.domain.enums import ConsultationStatus, Priority
from coretax.services.inputs.common import BulkRequest
from coretax.services.inputs.consultations import ConsultationCreate, ConsultationUpdate

router = APIRouter(prefix="/consultations", tags=["consultations"])


@router.get("", response_model=Paginated[ConsultationOut])
async def list_consultations(
    actor: CurrentActor,
    service: Consultations,
    paging: Paging,
    category: str | None = None,
    status: ConsultationStatus | None = None,
    priority: Priority | None = None,
    user_id: Annotated[int | None, Query(alias="userId")] = None,
) -> Paginated[ConsultationOut]:
    page = await service.list_page(
        actor,
        search=paging.search,
        category=category,
        status=status,
        priority=priority,
        user_id=user_id,
        page=paging.page,
        limit=paging.limit,
    )
    return Paginated[ConsultationOut].from_page(page)


@router.post("", response_model=ConsultationOut, status_code=HTTPStatus.CREATED)
async def create_consultation(
    body: ConsultationCreate, actor: CurrentActor, service: Consultations
) -> ConsultationOut:
    return ConsultationOut.model_validate(await service.create(actor, body))


@router.post("/bulk", response_model=BulkResponse)
async def bulk_consultations(
    body: BulkRequest, actor: CurrentActor, service: Consultations
) -> BulkResponse:
    return BulkResponse.from_outcome(await service.bulk(actor, body))


@router.get("/{consultation_id}", response_model=ConsultationOut)
async def get_consultation(
    consultation_id: int, actor: CurrentActor, service: Consultations
) -> ConsultationOut:
    return ConsultationOut.model_validate(await service.get(actor, consultation_id))


@router.put("/{consultation_id}", response_model=ConsultationOut)
async def update_consultation(
    consultation_id: int,
    body: ConsultationUpdate,
    actor: CurrentActor,
    service: Consultations,
) -> ConsultationOut:
    """Only the fields present in the body are changed."""
    return ConsultationOut.model_validate(
        await service.update(actor, consultation_id, body)
    )


@router.delete("/{consultation_id}", response_model=MessageResponse)
async def delete_consultation(
    consultation_id: int, actor: CurrentActor, service: Consultations
) -> MessageResponse:
    await service.delete(actor, consultation_id)
    return MessageResponse(message="Consultation deleted successfully")
