"""Taxpayer profiles, one per tax type, and their verification by staff."""

import time
from typing import Final, assert_never

from loguru import logger
from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.exceptions import ConflictError
from coretax.domain.access import PROFILES, Actor, require_role
from coretax.domain.bulk import ProfileVerificationAction, parse_action
from coretax.domain.enums import (
    STAFF_ROLES,
    CompanyType,
    NotificationType,
    ProfileStatus,
    TaxType,
)
from coretax.domain.transitions import PROFILE
from coretax.infrastructure.database.models import UserProfile
from coretax.infrastructure.database.repository import Page
from coretax.infrastructure.repositories import UserProfileRepository, search_any
from coretax.services.common import load, owner_scope, sparse_changes, utcnow
from coretax.services.inputs.profiles import ProfileCreate, ProfileUpdate, ProfileVerifyRequest
from coretax.services.notifications import notify

NULLABLE_FIELDS: Final = frozenset(
    {
        "company_name",
        "company_type",
        "npwp",
        "address",
        "city",
        "province",
        "postal_code",
        "phone_number",
        "email",
        "website",
        "business_field",
        "notes",
    }
)

TAX_ID_CODES: Final[dict[TaxType, str]] = {
    TaxType.PPH_21: "21",
    TaxType.PPH_23: "23",
    TaxType.PPH_25: "25",
    TaxType.PPN: "PN",
    TaxType.PBB: "BB",
    TaxType.BPHTB: "HT",
    TaxType.PAJAK_KENDARAAN: "KN",
}
UNKNOWN_TAX_ID_CODE: Final = "XX"


def generate_tax_id(tax_type: TaxType, user_id: int, now_ms: int | None = None) -> str:
    """``TAX`` + tax type code + last 4 of the user id + last 6 of the epoch ms.

    Examples:
        >>> generate_tax_id(TaxType.PPN, 42, now_ms=1718000123456)
        'TAXPN0042123456'
    """
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    code = TAX_ID_CODES.get(tax_type, UNKNOWN_TAX_ID_CODE)
    return f"TAX{code}{f'{user_id:04d}'[-4:]}{str(stamp)[-6:]}"


class ProfileService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.profiles = UserProfileRepository(session)

    async def list_page(
        self,
        actor: Actor,
        *,
        search: str | None = None,
        company_type: CompanyType | None = None,
        status: ProfileStatus | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[UserProfile]:
        conditions: list[ColumnElement[bool]] = owner_scope(
            PROFILES, actor, UserProfile.user_id
        )
        if search:
            conditions.append(
                search_any(
                    search,
                    UserProfile.company_name,
                    UserProfile.tax_id,
                    UserProfile.npwp,
                    UserProfile.email,
                )
            )
        if company_type is not None:
            conditions.append(UserProfile.company_type == company_type)
        if status is not None:
            conditions.append(UserProfile.status == status)
        return await self.profiles.list_page(*conditions, page=page, limit=limit)

    async def create(self, actor: Actor, data: ProfileCreate) -> UserProfile:
        """Create the caller's profile for one tax type.

        Raises:
            ConflictError: If the caller already has a profile for the tax
                type, or the NPWP is registered on another profile.
        """
        if await self.profiles.for_owner_and_type(actor.id, data.tax_type) is not None:
            raise ConflictError("Profile for this tax type already exists")
        if data.npwp is not None and await self.profiles.npwp_taken(data.npwp):
            raise ConflictError("NPWP already registered")

        return await self.profiles.create(
            UserProfile(
                user_id=actor.id,
                tax_id=generate_tax_id(data.tax_type, actor.id),
                status=ProfileStatus.PENDING_VERIFICATION,
                is_verified=False,
                **data.model_dump(),
            )
        )

    async def get(self, actor: Actor, profile_id: int) -> UserProfile:
        profile = await load(self.profiles, profile_id, "Profile")
        PROFILES.require_read(actor, profile.user_id)
        return profile

    async def update(self, actor: Actor, profile_id: int, data: ProfileUpdate) -> UserProfile:
        profile = await load(self.profiles, profile_id, "Profile")
        PROFILES.require_manage(actor, profile.user_id)

        changes = sparse_changes(data, NULLABLE_FIELDS)
        npwp = changes.get("npwp")
        if npwp is not None and await self.profiles.npwp_taken(npwp, exclude_id=profile.id):
            raise ConflictError("NPWP already registered")
        if "status" in changes:
            require_role(actor, *STAFF_ROLES)
            PROFILE.check(profile.status, changes["status"])
        return await self.profiles.update(profile, changes)

    async def delete(self, actor: Actor, profile_id: int) -> None:
        profile = await load(self.profiles, profile_id, "Profile")
        PROFILES.require_delete(actor, profile.user_id)
        await self.profiles.delete(profile)

    async def verify(self, actor: Actor, request: ProfileVerifyRequest) -> UserProfile:
        """Staff decision on a profile; verify and reject notify the owner."""
        require_role(actor, *STAFF_ROLES)
        action = parse_action(ProfileVerificationAction, request.action)
        profile = await load(self.profiles, request.profile_id, "Profile")

        match action:
            case ProfileVerificationAction.VERIFY:
                target, changes = ProfileStatus.ACTIVE, {
                    "is_verified": True,
                    "verified_at": utcnow(),
                }
            case ProfileVerificationAction.REJECT:
                target, changes = ProfileStatus.SUSPENDED, {
                    "is_verified": False,
                    "verified_at": None,
                }
            case ProfileVerificationAction.SUSPEND:
                target, changes = ProfileStatus.SUSPENDED, {}
            case ProfileVerificationAction.ACTIVATE:
                target, changes = ProfileStatus.ACTIVE, {}
            case _:
                assert_never(action)

        PROFILE.check(profile.status, target)
        changes["status"] = target
        if request.notes is not None:
            changes["notes"] = request.notes
        updated = await self.profiles.update(profile, changes)

        if action is ProfileVerificationAction.VERIFY:
            await notify(
                self.session,
                profile.user_id,
                "Profil Terverifikasi",
                f"Profil pajak {profile.tax_type} Anda telah diverifikasi",
                NotificationType.SUCCESS,
            )
        elif action is ProfileVerificationAction.REJECT:
            await notify(
                self.session,
                profile.user_id,
                "Profil Ditolak",
                (
                    f"Profil pajak {profile.tax_type} Anda ditolak. "
                    f"Catatan: {request.notes or '-'}"
                ),
                NotificationType.ERROR,
            )

        logger.info("Profile {} {} by staff", profile.id, action)
        return updated
