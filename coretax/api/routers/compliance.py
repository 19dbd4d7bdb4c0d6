from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Query

from coretax.api.dependencies import ComplianceRecords, CurrentActor
from coretax.api.schemas.common import MessageResponse, Paginated
from coretax.api.schemas.compliance import ComplianceRecordOut
from coretax.api.utils.pagination import Paging
from coretax.domain.enums import ComplianceStatus, Priority, RegulationType, RiskLevel
from coretax.services.inputs.compliance import ComplianceRecordCreate, ComplianceRecordUpdate

router = APIRouter(prefix="/compliance-records", tags=["compliance-records"])


@router.get("", response_model=Paginated[ComplianceRecordOut])
async def list_compliance_records(
    actor: CurrentActor,
    service: ComplianceRecords,
    paging: Paging,
    regulation_type: Annotated[
        RegulationType | None, Query(alias="regulationType")
    ] = None,
    status: ComplianceStatus | None = None,
    priority: Priority | None = None,
    risk_level: Annotated[RiskLevel | None, Query(alias="riskLevel")] = None,
    user_id: Annotated[int | None, Query(alias="userId")] = None,
) -> Paginated[ComplianceRecordOut]:
    page = await service.list_page(
        actor,
        search=paging.search,
        regulation_type=regulation_type,
        status=status,
        priority=priority,
        risk_level=risk_level,
        user_id=user_id,
        page=paging.page,
        limit=paging.limit,
    )
    return Paginated[ComplianceRecordOut].from_page(page)


@router.post("", response_model=ComplianceRecordOut, status_code=HTTPStatus.CREATED)
async def create_compliance_record(
    body: ComplianceRecordCreate, actor: CurrentActor, service: ComplianceRecords
) -> ComplianceRecordOut:
    return ComplianceRecordOut.model_validate(await service.create(actor, body))


@router.get("/{record_id}", response_model=ComplianceRecordOut)
async def get_compliance_record(
    record_id: int, actor: CurrentActor, service: ComplianceRecords
) -> ComplianceRecordOut:
    return ComplianceRecordOut.model_validate(await service.get(actor, record_id))


@router.patch("/{record_id}", response_model=ComplianceRecordOut)
async def update_compliance_record(
    record_id: int,
    body: ComplianceRecordUpdate,
    actor: CurrentActor,
    service: ComplianceRecords,
) -> ComplianceRecordOut:
    return ComplianceRecordOut.model_validate(
        await service.update(actor, record_id, body)
    )


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_compliance_record(
    record_id: int, actor: CurrentActor, service: ComplianceRecords
) -> MessageResponse:
    await service.delete(actor, record_id)
    return MessageResponse(message="Compliance record deleted successfully")
