from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Query

from coretax.api.dependencies import Audits, CurrentActor
from coretax.api.schemas.audits import AuditItemOut, AuditOut
from coretax.api.schemas.common import MessageResponse, Paginated
from coretax.api.utils.pagination import Paging
from coretax.domain.enums import AuditStatus, AuditType, RiskLevel
from coretax.services.inputs.audits import (
    AuditCreate,
    AuditItemCreate,
    AuditItemUpdate,
    AuditUpdate,
)

router = APIRouter(prefix="/audits", tags=["audits"])


@router.get("", response_model=Paginated[AuditOut])
async def list_audits(
    actor: CurrentActor,
    service: Audits,
    paging: Paging,
    audit_type: Annotated[AuditType | None, Query(alias="auditType")] = None,
    status: AuditStatus | None = None,
    risk_level: Annotated[RiskLevel | None, Query(alias="riskLevel")] = None,
    user_id: Annotated[int | None, Query(alias="userId")] = None,
) -> Paginated[AuditOut]:
    page = await service.list_page(
        actor,
        search=paging.search,
        audit_type=audit_type,
        status=status,
        risk_level=risk_level,
        user_id=user_id,
        page=paging.page,
        limit=paging.limit,
    )
    return Paginated[AuditOut].from_page(page)


@router.post("", response_model=AuditOut, status_code=HTTPStatus.CREATED)
async def create_audit(body: AuditCreate, actor: CurrentActor, service: Audits) -> AuditOut:
    return AuditOut.model_validate(await service.create(actor, body))


@router.get("/{audit_id}", response_model=AuditOut)
async def get_audit(audit_id: int, actor: CurrentActor, service: Audits) -> AuditOut:
    return AuditOut.model_validate(await service.get(actor, audit_id))


@router.patch("/{audit_id}", response_model=AuditOut)
async def update_audit(
    audit_id: int, body: AuditUpdate, actor: CurrentActor, service: Audits
) -> AuditOut:
    return AuditOut.model_validate(await service.update(actor, audit_id, body))


@router.delete("/{audit_id}", response_model=MessageResponse)
async def delete_audit(
    audit_id: int, actor: CurrentActor, service: Audits
) -> MessageResponse:
    """Only ``PLANNED`` audits can be removed."""
    await service.delete(actor, audit_id)
    return MessageResponse(message="Audit deleted successfully")


@router.get("/{audit_id}/items", response_model=list[AuditItemOut])
async def list_audit_items(
    audit_id: int, actor: CurrentActor, service: Audits
) -> list[AuditItemOut]:
    items = await service.list_items(actor, audit_id)
    return [AuditItemOut.model_validate(item) for item in items]


@router.post(
    "/{audit_id}/items", response_model=AuditItemOut, status_code=HTTPStatus.CREATED
)
async def create_audit_item(
    audit_id: int, body: AuditItemCreate, actor: CurrentActor, service: Audits
) -> AuditItemOut:
    return AuditItemOut.model_validate(await service.add_item(actor, audit_id, body))


@router.patch("/{audit_id}/items/{item_id}", response_model=AuditItemOut)
async def update_audit_item(
    audit_id: int,
    item_id: int,
    body: AuditItemUpdate,
    actor: CurrentActor,
    service: Audits,
) -> AuditItemOut:
    return AuditItemOut.model_validate(
        await service.update_item(actor, audit_id, item_id, body)
    )
