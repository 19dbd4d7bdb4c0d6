from http import HTTPStatus
from typing import Annotated, cast

from fastapi import APIRouter, Query

from coretax.api.dependencies import CurrentActor, TaxCalculations
from coretax.api.schemas.common import BulkResponse, MessageResponse, Paginated
from coretax.api.schemas.tax_calculations import TaxCalculationOut
from coretax.api.utils.pagination import Paging
from coretax.core.cache import CacheProfile, cache_key, get_response_cache
from coretax.domain.enums import CalculationType, TaxCalculationStatus, TaxType
from coretax.services.inputs.common import BulkRequest
from coretax.services.inputs.tax_calculations import TaxCalculationCreate, TaxCalculationUpdate
from coretax.services.tax_calculations import CACHE_PREFIX

router = APIRouter(prefix="/tax-calculations", tags=["tax-calculations"])


@router.get("", response_model=Paginated[TaxCalculationOut])
async def list_tax_calculations(
    actor: CurrentActor,
    service: TaxCalculations,
    paging: Paging,
    tax_type: Annotated[TaxType | None, Query(alias="taxType")] = None,
    status: TaxCalculationStatus | None = None,
    year: int | None = None,
    calculation_type: Annotated[
        CalculationType | None, Query(alias="calculationType")
    ] = None,
    user_id: Annotated[int | None, Query(alias="userId")] = None,
) -> Paginated[TaxCalculationOut]:
    """List calculations; cached per caller and query until a write."""
    cache = get_response_cache()
    key = cache_key(
        CACHE_PREFIX,
        actor.id,
        actor.role,
        paging.cache_part,
        tax_type,
        status,
        year,
        calculation_type,
        user_id,
    )
    if (cached := cache.get(key)) is not None:
        return cast("Paginated[TaxCalculationOut]", cached)

    page = await service.list_page(
        actor,
        tax_type=tax_type,
        status=status,
        year=year,
        calculation_type=calculation_type,
        search=paging.search,
        user_id=user_id,
        page=paging.page,
        limit=paging.limit,
    )
    result = Paginated[TaxCalculationOut].from_page(page)
    cache.set(key, result, CacheProfile.USER)
    return result


@router.post("", response_model=TaxCalculationOut, status_code=HTTPStatus.CREATED)
async def create_tax_calculation(
    body: TaxCalculationCreate, actor: CurrentActor, service: TaxCalculations
) -> TaxCalculationOut:
    return TaxCalculationOut.model_validate(await service.create(actor, body))


@router.post("/bulk", response_model=BulkResponse)
async def bulk_tax_calculations(
    body: BulkRequest, actor: CurrentActor, service: TaxCalculations
) -> BulkResponse:
    return BulkResponse.from_outcome(await service.bulk(actor, body))


@router.get("/{calculation_id}", response_model=TaxCalculationOut)
async def get_tax_calculation(
    calculation_id: int, actor: CurrentActor, service: TaxCalculations
) -> TaxCalculationOut:
    return TaxCalculationOut.model_validate(await service.get(actor, calculation_id))


@router.patch("/{calculation_id}", response_model=TaxCalculationOut)
async def update_tax_calculation(
    calculation_id: int,
    body: TaxCalculationUpdate,
    actor: CurrentActor,
    service: TaxCalculations,
) -> TaxCalculationOut:
    return TaxCalculationOut.model_validate(
        await service.update(actor, calculation_id, body)
    )


@router.delete("/{calculation_id}", response_model=MessageResponse)
async def delete_tax_calculation(
    calculation_id: int, actor: CurrentActor, service: TaxCalculations
) -> MessageResponse:
    await service.delete(actor, calculation_id)
    return MessageResponse(message="Tax calculation deleted successfully")
