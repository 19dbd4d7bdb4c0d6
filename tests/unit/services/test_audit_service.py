"""Service tests for audits and audit items."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from coretax.domain.access import Actor
from coretax.domain.enums import (
    AuditItemStatus,
    AuditScope,
    AuditStatus,
    AuditType,
    Role,
)
from coretax.services.audits import AuditService
from coretax.services.inputs.audits import (
    AuditCreate,
    AuditItemCreate,
    AuditItemUpdate,
    AuditUpdate,
)
from tests.support import UserFactory, actor_of


def audit_request(**fields: object) -> AuditCreate:
    return AuditCreate(
        title="Pemeriksaan PPN 2024",
        description="Annual VAT review",
        audit_type=AuditType.TAX_COMPLIANCE,
        scope=AuditScope.FULL,
        **fields,
    )


@pytest.fixture
def service(db_session: AsyncSession) -> AuditService:
    return AuditService(db_session)


@pytest.mark.unit
class TestAudits:
    async def test_taxpayer_owns_new_audit(
        self, service: AuditService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        other = await make_user()

        audit = await service.create(owner, audit_request(user_id=other.id))

        assert audit.user_id == owner.id
        assert audit.status == AuditStatus.PLANNED

    async def test_staff_opens_audit_for_taxpayer(
        self, service: AuditService, make_user: UserFactory
    ) -> None:
        officer = actor_of(await make_user(Role.TAX_OFFICER))
        taxpayer = await make_user()

        audit = await service.create(
            officer, audit_request(user_id=taxpayer.id, auditor_id=officer.id)
        )

        assert audit.user_id == taxpayer.id
        assert audit.auditor_id == officer.id

    async def test_auditor_must_be_staff(
        self, service: AuditService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        consultant = await make_user(Role.CONSULTANT)

        with pytest.raises(ValidationError, match="Invalid auditor"):
            await service.create(owner, audit_request(auditor_id=consultant.id))

    async def test_assigned_auditor_can_read_and_list(
        self, service: AuditService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        admin = actor_of(await make_user(Role.ADMIN))
        officer = await make_user(Role.TAX_OFFICER)
        audit = await service.create(owner, audit_request())
        await service.update(admin, audit.id, AuditUpdate(auditor_id=officer.id))

        # Same user without the staff role: access comes from the assignment alone
        assignee = Actor(id=officer.id, role=Role.CONSULTANT)

        assert (await service.get(assignee, audit.id)).id == audit.id
        assert [a.id for a in (await service.list_page(assignee)).items] == [audit.id]

    async def test_stranger_denied(self, service: AuditService, make_user: UserFactory) -> None:
        owner = actor_of(await make_user())
        stranger = actor_of(await make_user())
        audit = await service.create(owner, audit_request())

        with pytest.raises(AuthorizationError):
            await service.get(stranger, audit.id)
        assert (await service.list_page(stranger)).total == 0

    async def test_owner_cannot_assign_auditor(
        self, service: AuditService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        officer = await make_user(Role.TAX_OFFICER)
        audit = await service.create(owner, audit_request())

        with pytest.raises(AuthorizationError, match="assign auditors"):
            await service.update(owner, audit.id, AuditUpdate(auditor_id=officer.id))

    async def test_status_follows_lifecycle(
        self, service: AuditService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        audit = await service.create(owner, audit_request())

        started = await service.update(
            owner, audit.id, AuditUpdate(status=AuditStatus.IN_PROGRESS, compliance_score=80)
        )
        assert started.status == AuditStatus.IN_PROGRESS
        assert started.compliance_score == 80

        with pytest.raises(ConflictError):
            await service.update(owner, audit.id, AuditUpdate(status=AuditStatus.PLANNED))

    async def test_only_planned_audits_are_deleted(
        self, service: AuditService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        started = await service.create(owner, audit_request())
        await service.update(owner, started.id, AuditUpdate(status=AuditStatus.IN_PROGRESS))
        planned = await service.create(owner, audit_request())

        with pytest.raises(ConflictError, match="Only planned audits"):
            await service.delete(owner, started.id)
        await service.delete(owner, planned.id)

        with pytest.raises(NotFoundError):
            await service.get(owner, planned.id)


@pytest.mark.unit
class TestAuditItems:
    async def test_add_list_and_update(
        self, service: AuditService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        audit = await service.create(owner, audit_request())

        item = await service.add_item(
            owner,
            audit.id,
            AuditItemCreate(category="PPN", title="Faktur", description="Missing invoices"),
        )
        initial_status = item.status
        resolved = await service.update_item(
            owner,
            audit.id,
            item.id,
            AuditItemUpdate(status=AuditItemStatus.RESOLVED, finding="Found them"),
        )

        assert initial_status == AuditItemStatus.OPEN
        assert resolved.status == AuditItemStatus.RESOLVED
        assert resolved.finding == "Found them"
        assert [i.id for i in await service.list_items(owner, audit.id)] == [item.id]

    async def test_item_must_belong_to_audit(
        self, service: AuditService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        first = await service.create(owner, audit_request())
        second = await service.create(owner, audit_request())
        item = await service.add_item(
            owner,
            first.id,
            AuditItemCreate(category="PPN", title="Faktur", description="Missing invoices"),
        )

        with pytest.raises(NotFoundError, match="Audit item not found"):
            await service.update_item(owner, second.id, item.id, AuditItemUpdate(notes="x"))
