from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Query

from coretax.api.dependencies import CurrentActor, Profiles
from coretax.api.schemas.common import MessageResponse, Paginated
from coretax.api.schemas.profiles import ProfileOut
from coretax.api.utils.pagination import Paging
from coretax.domain.enums import CompanyType, ProfileStatus
from coretax.services.inputs.profiles import ProfileCreate, ProfileUpdate, ProfileVerifyRequest

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("", response_model=Paginated[ProfileOut])
async def list_profiles(
    actor: CurrentActor,
    service: Profiles,
    paging: Paging,
    company_type: Annotated[CompanyType | None, Query(alias="companyType")] = None,
    status: ProfileStatus | None = None,
) -> Paginated[ProfileOut]:
    page = await service.list_page(
        actor,
        search=paging.search,
        company_type=company_type,
        status=status,
        page=paging.page,
        limit=paging.limit,
    )
    return Paginated[ProfileOut].from_page(page)


@router.post("", response_model=ProfileOut, status_code=HTTPStatus.CREATED)
async def create_profile(
    body: ProfileCreate, actor: CurrentActor, service: Profiles
) -> ProfileOut:
    return ProfileOut.model_validate(await service.create(actor, body))


@router.post("/verify", response_model=ProfileOut)
async def verify_profile(
    body: ProfileVerifyRequest, actor: CurrentActor, service: Profiles
) -> ProfileOut:
    """Staff decision: ``verify``, ``reject``, ``suspend`` or ``activate``."""
    return ProfileOut.model_validate(await service.verify(actor, body))


@router.get("/{profile_id}", response_model=ProfileOut)
async def get_profile(
    profile_id: int, actor: CurrentActor, service: Profiles
) -> ProfileOut:
    return ProfileOut.model_validate(await service.get(actor, profile_id))


@router.patch("/{profile_id}", response_model=ProfileOut)
async def update_profile(
    profile_id: int, body: ProfileUpdate, actor: CurrentActor, service: Profiles
) -> ProfileOut:
    return ProfileOut.model_validate(await service.update(actor, profile_id, body))


@router.delete("/{profile_id}", response_model=MessageResponse)
async def delete_profile(
    profile_id: int, actor: CurrentActor, service: Profiles
) -> MessageResponse:
    await service.delete(actor, profile_id)
    return MessageResponse(message="Profile deleted successfully")
