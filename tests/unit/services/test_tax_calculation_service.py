"""Service tests for tax calculations against an in-memory database."""

from decimal import Decimal

import pytest
import pytest_check as check
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.cache import CacheProfile, cache_key, get_response_cache
from coretax.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidActionError,
    NotFoundError,
    ValidationError,
)
from coretax.domain.enums import Role, TaxCalculationStatus, TaxType
from coretax.infrastructure.database.models import Notification, TaxCalculation
from coretax.services.inputs.common import BulkRequest
from coretax.services.inputs.tax_calculations import TaxCalculationCreate, TaxCalculationUpdate
from coretax.services.tax_calculations import CACHE_PREFIX, TaxCalculationService
from tests.support import UserFactory, actor_of


def ppn_request(**overrides: object) -> TaxCalculationCreate:
    fields: dict[str, object] = {
        "taxType": "PPN",
        "calculationType": "MONTHLY",
        "period": "5",
        "year": 2025,
        "grossIncome": "100000000",
        "deductibleExpenses": "20000000",
    }
    return TaxCalculationCreate.model_validate(fields | overrides)


@pytest.fixture
def service(db_session: AsyncSession) -> TaxCalculationService:
    return TaxCalculationService(db_session)


@pytest.mark.unit
class TestCreateAndRead:
    async def test_create_computes_result(
        self, service: TaxCalculationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())

        calculation = await service.create(owner, ppn_request())

        check.equal(calculation.user_id, owner.id)
        check.equal(calculation.status, TaxCalculationStatus.CALCULATED)
        check.equal(calculation.taxable_income, Decimal("80000000.00"))
        check.equal(calculation.tax_rate, Decimal("0.11"))
        check.equal(calculation.final_tax_amount, Decimal("8800000.00"))
        check.equal(calculation.calculation_data["method"], "flat")

    async def test_taxpayers_only_list_their_own(
        self, service: TaxCalculationService, make_user: UserFactory
    ) -> None:
        first = actor_of(await make_user())
        second = actor_of(await make_user())
        consultant = actor_of(await make_user(Role.CONSULTANT))
        await service.create(first, ppn_request())
        await service.create(second, ppn_request(taxType="PBB"))

        own = await service.list_page(first, user_id=second.id)
        everything = await service.list_page(consultant)
        narrowed = await service.list_page(consultant, user_id=second.id)

        assert [c.user_id for c in own.items] == [first.id]
        assert everything.total == 2
        assert [c.tax_type for c in narrowed.items] == [TaxType.PBB]

    async def test_other_taxpayer_is_denied(
        self, service: TaxCalculationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        stranger = actor_of(await make_user())
        calculation = await service.create(owner, ppn_request())

        with pytest.raises(AuthorizationError):
            await service.get(stranger, calculation.id)

    async def test_missing(self, service: TaxCalculationService, make_user: UserFactory) -> None:
        owner = actor_of(await make_user())

        with pytest.raises(NotFoundError, match="Tax calculation not found"):
            await service.get(owner, 999)

    async def test_cached_lists_dropped_when_create_commits(
        self, service: TaxCalculationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        cache = get_response_cache()
        key = cache_key(CACHE_PREFIX, owner.id, "page=1")
        cache.set(key, ["stale"], CacheProfile.USER)

        await service.create(owner, ppn_request())
        cached_before_commit = cache.get(key)
        await db_session.commit()

        assert cached_before_commit == ["stale"]
        assert cache.get(key) is None


@pytest.mark.unit
class TestUpdate:
    async def test_input_change_recomputes(
        self, service: TaxCalculationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        calculation = await service.create(owner, ppn_request())

        updated = await service.update(
            owner,
            calculation.id,
            TaxCalculationUpdate(tax_credits=Decimal(800000), notes="credit applied"),
        )

        assert updated.final_tax_amount == Decimal("8000000.00")
        assert updated.status == TaxCalculationStatus.CALCULATED
        assert updated.notes == "credit applied"

    async def test_taxpayer_cannot_review(
        self, service: TaxCalculationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        calculation = await service.create(owner, ppn_request())

        with pytest.raises(AuthorizationError, match="review status"):
            await service.update(
                owner, calculation.id, TaxCalculationUpdate(status=TaxCalculationStatus.VERIFIED)
            )

    async def test_officer_verification_notifies_owner(
        self,
        service: TaxCalculationService,
        make_user: UserFactory,
        db_session: AsyncSession,
    ) -> None:
        owner = actor_of(await make_user())
        officer = actor_of(await make_user(Role.TAX_OFFICER))
        calculation = await service.create(owner, ppn_request())

        verified = await service.update(
            officer, calculation.id, TaxCalculationUpdate(status=TaxCalculationStatus.VERIFIED)
        )

        assert verified.verified_at is not None
        titles = (
            await db_session.scalars(
                select(Notification.title).where(Notification.user_id == owner.id)
            )
        ).all()
        assert titles == ["Perhitungan Pajak Diverifikasi"]

    async def test_illegal_transition(
        self, service: TaxCalculationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        admin = actor_of(await make_user(Role.ADMIN))
        calculation = await service.create(owner, ppn_request())

        with pytest.raises(ConflictError) as exc_info:
            await service.update(
                admin, calculation.id, TaxCalculationUpdate(status=TaxCalculationStatus.APPROVED)
            )

        assert exc_info.value.context == {"from": "CALCULATED", "to": "APPROVED"}

    async def test_only_admin_deletes(
        self, service: TaxCalculationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        admin = actor_of(await make_user(Role.ADMIN))
        calculation = await service.create(owner, ppn_request())

        with pytest.raises(AuthorizationError):
            await service.delete(owner, calculation.id)
        await service.delete(admin, calculation.id)

        assert await db_session.get(TaxCalculation, calculation.id) is None


@pytest.mark.unit
class TestBulk:
    async def test_rejects_records_outside_scope(
        self, service: TaxCalculationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        stranger = actor_of(await make_user())
        mine = await service.create(owner, ppn_request())
        theirs = await service.create(stranger, ppn_request())

        with pytest.raises(AuthorizationError) as exc_info:
            await service.bulk(
                owner, BulkRequest(action="EXPORT", ids=[mine.id, theirs.id])
            )

        assert exc_info.value.context == {"denied_ids": [theirs.id]}

    async def test_unknown_action(
        self, service: TaxCalculationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())

        with pytest.raises(InvalidActionError):
            await service.bulk(owner, BulkRequest(action="ARCHIVE", ids=[1]))

    async def test_export(self, service: TaxCalculationService, make_user: UserFactory) -> None:
        owner = actor_of(await make_user(name="Budi"))
        calculation = await service.create(owner, ppn_request())

        outcome = await service.bulk(owner, BulkRequest(action="EXPORT", ids=[calculation.id]))

        assert outcome.affected == 1
        assert outcome.filename is not None
        assert outcome.filename.startswith("tax_calculations_export_")
        assert outcome.data is not None
        row = outcome.data[0]
        check.equal(row["Jenis Pajak"], "PPN")
        check.equal(row["Tarif Pajak"], "11.00%")
        check.equal(row["Jumlah Akhir"], 8800000.0)
        check.equal(row["Dibuat Oleh"], "Budi")
        check.equal(row["Catatan"], "-")

    async def test_status_update_requires_status(
        self, service: TaxCalculationService, make_user: UserFactory
    ) -> None:
        officer = actor_of(await make_user(Role.TAX_OFFICER))
        calculation = await service.create(officer, ppn_request())

        with pytest.raises(ValidationError, match="Status is required"):
            await service.bulk(
                officer, BulkRequest(action="UPDATE_STATUS", ids=[calculation.id])
            )

    async def test_status_update_checks_every_record(
        self, service: TaxCalculationService, make_user: UserFactory
    ) -> None:
        officer = actor_of(await make_user(Role.TAX_OFFICER))
        calculation = await service.create(officer, ppn_request())

        with pytest.raises(ConflictError):
            await service.bulk(
                officer,
                BulkRequest(
                    action="UPDATE_STATUS", ids=[calculation.id], data={"status": "APPROVED"}
                ),
            )

    async def test_status_update(
        self, service: TaxCalculationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        officer = actor_of(await make_user(Role.TAX_OFFICER))
        ids = [(await service.create(owner, ppn_request())).id for _ in range(2)]

        outcome = await service.bulk(
            officer, BulkRequest(action="UPDATE_STATUS", ids=ids, data={"status": "VERIFIED"})
        )

        assert outcome.affected == 2
        statuses = (
            await db_session.scalars(select(TaxCalculation.status).order_by(TaxCalculation.id))
        ).all()
        assert statuses == [TaxCalculationStatus.VERIFIED] * 2

    async def test_delete_needs_admin(
        self, service: TaxCalculationService, make_user: UserFactory
    ) -> None:
        officer = actor_of(await make_user(Role.TAX_OFFICER))
        calculation = await service.create(officer, ppn_request())

        with pytest.raises(AuthorizationError, match="Insufficient permissions"):
            await service.bulk(officer, BulkRequest(action="DELETE", ids=[calculation.id]))
