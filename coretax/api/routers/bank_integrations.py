from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Query

from coretax.api.dependencies import BankIntegrations, CurrentActor
from coretax.api.schemas.bank_integrations import BankIntegrationOut, SyncResponse
from coretax.api.schemas.common import BulkResponse, MessageResponse, Paginated
from coretax.api.utils.pagination import Paging
from coretax.domain.enums import BankAccountType, BankStatus
from coretax.services.inputs.bank_integrations import (
    BankIntegrationCreate,
    BankIntegrationUpdate,
    SyncRequest,
)
from coretax.services.inputs.common import BulkRequest

router = APIRouter(prefix="/bank-integrations", tags=["bank-integrations"])


@router.get("", response_model=Paginated[BankIntegrationOut])
async def list_bank_integrations(
    actor: CurrentActor,
    service: BankIntegrations,
    paging: Paging,
    bank_name: Annotated[str | None, Query(alias="bankName")] = None,
    status: BankStatus | None = None,
    account_type: Annotated[BankAccountType | None, Query(alias="accountType")] = None,
    is_active: Annotated[bool | None, Query(alias="isActive")] = None,
    user_id: Annotated[int | None, Query(alias="userId")] = None,
) -> Paginated[BankIntegrationOut]:
    page = await service.list_page(
        actor,
        bank_name=bank_name,
        status=status,
        account_type=account_type,
        is_active=is_active,
        search=paging.search,
        user_id=user_id,
        page=paging.page,
        limit=paging.limit,
    )
    return Paginated[BankIntegrationOut].from_page(page)


@router.post("", response_model=BankIntegrationOut, status_code=HTTPStatus.CREATED)
async def create_bank_integration(
    body: BankIntegrationCreate, actor: CurrentActor, service: BankIntegrations
) -> BankIntegrationOut:
    return BankIntegrationOut.model_validate(await service.create(actor, body))


@router.post("/bulk", response_model=BulkResponse)
async def bulk_bank_integrations(
    body: BulkRequest, actor: CurrentActor, service: BankIntegrations
) -> BulkResponse:
    return BulkResponse.from_outcome(await service.bulk(actor, body))


@router.post("/sync", response_model=SyncResponse)
async def sync_bank_integration(
    body: SyncRequest, actor: CurrentActor, service: BankIntegrations
) -> SyncResponse:
    """Start a simulated sync; the result lands on the record after a delay."""
    outcome = await service.sync(actor, body)
    return SyncResponse(
        message=outcome.message,
        sync_status=outcome.sync_status,
        webhook_url=outcome.webhook_url,
    )


@router.get("/{integration_id}", response_model=BankIntegrationOut)
async def get_bank_integration(
    integration_id: int, actor: CurrentActor, service: BankIntegrations
) -> BankIntegrationOut:
    return BankIntegrationOut.model_validate(await service.get(actor, integration_id))


@router.patch("/{integration_id}", response_model=BankIntegrationOut)
async def update_bank_integration(
    integration_id: int,
    body: BankIntegrationUpdate,
    actor: CurrentActor,
    service: BankIntegrations,
) -> BankIntegrationOut:
    return BankIntegrationOut.model_validate(
        await service.update(actor, integration_id, body)
    )


@router.delete("/{integration_id}", response_model=MessageResponse)
async def delete_bank_integration(
    integration_id: int, actor: CurrentActor, service: BankIntegrations
) -> MessageResponse:
    await service.delete(actor, integration_id)
    return MessageResponse(message="Bank integration deleted successfully")
