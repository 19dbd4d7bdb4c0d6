"""Service tests for taxpayer profiles."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.exceptions import AuthorizationError, ConflictError, InvalidActionError
from coretax.domain.enums import ProfileStatus, Role, TaxType
from coretax.infrastructure.database.models import Notification
from coretax.services.inputs.profiles import ProfileCreate, ProfileUpdate, ProfileVerifyRequest
from coretax.services.profiles import ProfileService, generate_tax_id
from tests.support import UserFactory, actor_of


@pytest.fixture
def service(db_session: AsyncSession) -> ProfileService:
    return ProfileService(db_session)


@pytest.mark.unit
class TestGenerateTaxId:
    @pytest.mark.parametrize(
        ("tax_type", "user_id", "expected"),
        [
            (TaxType.PPN, 42, "TAXPN0042123456"),
            (TaxType.PPH_21, 123456, "TAX213456123456"),
            (TaxType.PPH_29, 7, "TAXXX0007123456"),
        ],
    )
    def test_format(self, tax_type: TaxType, user_id: int, expected: str) -> None:
        assert generate_tax_id(tax_type, user_id, now_ms=1718000123456) == expected


@pytest.mark.unit
class TestProfiles:
    async def test_create_pending(self, service: ProfileService, make_user: UserFactory) -> None:
        owner = actor_of(await make_user())

        profile = await service.create(
            owner, ProfileCreate(tax_type=TaxType.PPN, npwp="01.234.567.8-901.000")
        )

        assert profile.status == ProfileStatus.PENDING_VERIFICATION
        assert profile.is_verified is False
        assert profile.tax_id.startswith(f"TAXPN{owner.id:04d}")
        assert profile.country == "Indonesia"

    async def test_one_profile_per_tax_type(
        self, service: ProfileService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        await service.create(owner, ProfileCreate(tax_type=TaxType.PPN))

        with pytest.raises(ConflictError, match="already exists"):
            await service.create(owner, ProfileCreate(tax_type=TaxType.PPN))

    async def test_npwp_unique_across_owners(
        self, service: ProfileService, make_user: UserFactory
    ) -> None:
        first = actor_of(await make_user())
        second = actor_of(await make_user())
        await service.create(first, ProfileCreate(tax_type=TaxType.PPN, npwp="123"))

        with pytest.raises(ConflictError, match="NPWP already registered"):
            await service.create(second, ProfileCreate(tax_type=TaxType.PPN, npwp="123"))

    async def test_officer_reads_but_cannot_edit(
        self, service: ProfileService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        officer = actor_of(await make_user(Role.TAX_OFFICER))
        profile = await service.create(owner, ProfileCreate(tax_type=TaxType.PPN))

        assert (await service.get(officer, profile.id)).id == profile.id
        with pytest.raises(AuthorizationError):
            await service.update(officer, profile.id, ProfileUpdate(city="Bandung"))

    async def test_owner_cannot_change_status(
        self, service: ProfileService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        profile = await service.create(owner, ProfileCreate(tax_type=TaxType.PPN))

        updated = await service.update(owner, profile.id, ProfileUpdate(city="Bandung"))
        assert updated.city == "Bandung"

        with pytest.raises(AuthorizationError, match="Insufficient permissions"):
            await service.update(owner, profile.id, ProfileUpdate(status=ProfileStatus.ACTIVE))


@pytest.mark.unit
class TestVerification:
    async def test_verify_notifies_owner(
        self, service: ProfileService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        officer = actor_of(await make_user(Role.TAX_OFFICER))
        profile = await service.create(owner, ProfileCreate(tax_type=TaxType.PPN))

        verified = await service.verify(
            officer, ProfileVerifyRequest(profile_id=profile.id, action="verify")
        )

        assert verified.status == ProfileStatus.ACTIVE
        assert verified.is_verified is True
        assert verified.verified_at is not None
        titles = (
            await db_session.scalars(
                select(Notification.title).where(Notification.user_id == owner.id)
            )
        ).all()
        assert titles == ["Profil Terverifikasi"]

    async def test_reject_keeps_notes(
        self, service: ProfileService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        admin = actor_of(await make_user(Role.ADMIN))
        profile = await service.create(owner, ProfileCreate(tax_type=TaxType.PPN))

        rejected = await service.verify(
            admin,
            ProfileVerifyRequest(profile_id=profile.id, action="reject", notes="NPWP mismatch"),
        )

        assert rejected.status == ProfileStatus.SUSPENDED
        assert rejected.notes == "NPWP mismatch"
        message = await db_session.scalar(
            select(Notification.message).where(Notification.user_id == owner.id)
        )
        assert message is not None
        assert message.endswith("Catatan: NPWP mismatch")

    async def test_taxpayer_cannot_verify(
        self, service: ProfileService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        profile = await service.create(owner, ProfileCreate(tax_type=TaxType.PPN))

        with pytest.raises(AuthorizationError):
            await service.verify(
                owner, ProfileVerifyRequest(profile_id=profile.id, action="verify")
            )

    async def test_unknown_action(self, service: ProfileService, make_user: UserFactory) -> None:
        admin = actor_of(await make_user(Role.ADMIN))

        with pytest.raises(InvalidActionError):
            await service.verify(admin, ProfileVerifyRequest(profile_id=1, action="approve"))
