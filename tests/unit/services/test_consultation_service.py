"""Service tests for consultations."""

import pytest
import pytest_check as check
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.exceptions import AuthorizationError, ValidationError
from coretax.domain.enums import ConsultationStatus, Priority, Role
from coretax.infrastructure.database.models import Consultation, Notification
from coretax.services.consultations import ConsultationService
from coretax.services.inputs.common import BulkRequest
from coretax.services.inputs.consultations import ConsultationCreate, ConsultationUpdate
from tests.support import UserFactory, actor_of


def question(title: str = "Restitusi PPN") -> ConsultationCreate:
    return ConsultationCreate(title=title, description="How do I claim?", category="PPN")


@pytest.fixture
def service(db_session: AsyncSession) -> ConsultationService:
    return ConsultationService(db_session)


@pytest.mark.unit
class TestConsultations:
    async def test_create_is_pending(
        self, service: ConsultationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())

        consultation = await service.create(owner, question())

        assert consultation.status == ConsultationStatus.PENDING
        assert consultation.priority == Priority.MEDIUM
        assert consultation.consultant_id is None

    async def test_admin_assigns_and_owner_is_notified(
        self, service: ConsultationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        admin = actor_of(await make_user(Role.ADMIN))
        consultant = await make_user(Role.CONSULTANT)
        consultation = await service.create(owner, question())

        updated = await service.update(
            admin,
            consultation.id,
            ConsultationUpdate(consultant_id=consultant.id, status=ConsultationStatus.ASSIGNED),
        )

        assert updated.consultant_id == consultant.id
        notices = await db_session.scalar(
            select(func.count()).select_from(Notification).where(Notification.user_id == owner.id)
        )
        assert notices == 1

    async def test_assignee_must_be_consultant(
        self, service: ConsultationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        admin = actor_of(await make_user(Role.ADMIN))
        officer = await make_user(Role.TAX_OFFICER)
        consultation = await service.create(owner, question())

        with pytest.raises(ValidationError, match="Invalid consultant"):
            await service.update(
                admin, consultation.id, ConsultationUpdate(consultant_id=officer.id)
            )

    async def test_owner_cannot_assign(
        self, service: ConsultationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        consultant = await make_user(Role.CONSULTANT)
        consultation = await service.create(owner, question())

        with pytest.raises(AuthorizationError):
            await service.update(
                owner, consultation.id, ConsultationUpdate(consultant_id=consultant.id)
            )

    async def test_assigned_consultant_works_the_case(
        self, service: ConsultationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        admin = actor_of(await make_user(Role.ADMIN))
        consultant = actor_of(await make_user(Role.CONSULTANT))
        other = actor_of(await make_user(Role.CONSULTANT))
        consultation = await service.create(owner, question())
        await service.create(owner, question("Unassigned"))
        await service.update(
            admin,
            consultation.id,
            ConsultationUpdate(consultant_id=consultant.id, status=ConsultationStatus.ASSIGNED),
        )

        listed = await service.list_page(consultant)
        await service.update(
            consultant, consultation.id, ConsultationUpdate(status=ConsultationStatus.IN_PROGRESS)
        )
        done = await service.update(
            consultant,
            consultation.id,
            ConsultationUpdate(status=ConsultationStatus.COMPLETED, response="Use form 1111"),
        )

        assert [c.id for c in listed.items] == [consultation.id]
        assert done.completed_at is not None
        assert done.response == "Use form 1111"
        with pytest.raises(AuthorizationError):
            await service.get(other, consultation.id)

    async def test_owner_deletes_own(
        self, service: ConsultationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        consultation = await service.create(owner, question())

        await service.delete(owner, consultation.id)

        assert (await service.list_page(owner)).total == 0


@pytest.mark.unit
class TestConsultationBulk:
    async def test_assign(
        self, service: ConsultationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        admin = actor_of(await make_user(Role.ADMIN))
        consultant = await make_user(Role.CONSULTANT)
        ids = [(await service.create(owner, question())).id for _ in range(2)]

        outcome = await service.bulk(
            admin,
            BulkRequest(action="assign", ids=ids, data={"consultantId": consultant.id}),
        )

        check.equal(outcome.affected, 2)
        check.equal(outcome.message, "Bulk assign completed successfully")
        rows = (
            await db_session.execute(select(Consultation.consultant_id, Consultation.status))
        ).all()
        check.equal({tuple(r) for r in rows}, {(consultant.id, ConsultationStatus.ASSIGNED)})

    async def test_assign_requires_consultant_id(
        self, service: ConsultationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        admin = actor_of(await make_user(Role.ADMIN))
        consultation = await service.create(owner, question())

        with pytest.raises(ValidationError, match="Consultant ID is required"):
            await service.bulk(admin, BulkRequest(action="assign", ids=[consultation.id]))

    async def test_owner_changes_priority_and_visibility(
        self, service: ConsultationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        consultation = await service.create(owner, question())

        await service.bulk(
            owner,
            BulkRequest(
                action="updatePriority", ids=[consultation.id], data={"priority": "URGENT"}
            ),
        )
        await service.bulk(owner, BulkRequest(action="setPublic", ids=[consultation.id]))

        await db_session.refresh(consultation)
        assert consultation.priority == Priority.URGENT
        assert consultation.is_public is True

    async def test_schedule_parses_iso_date(
        self, service: ConsultationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        consultation = await service.create(owner, question())

        await service.bulk(
            owner,
            BulkRequest(
                action="schedule",
                ids=[consultation.id],
                data={"scheduledAt": "2025-07-01T10:00:00+07:00"},
            ),
        )

        await db_session.refresh(consultation)
        assert consultation.status == ConsultationStatus.ASSIGNED
        assert consultation.scheduled_at is not None

    async def test_bad_schedule_date(
        self, service: ConsultationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        consultation = await service.create(owner, question())

        with pytest.raises(ValidationError, match="Invalid scheduledAt"):
            await service.bulk(
                owner,
                BulkRequest(
                    action="schedule", ids=[consultation.id], data={"scheduledAt": "next week"}
                ),
            )

    async def test_other_owners_records_rejected(
        self, service: ConsultationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        stranger = actor_of(await make_user())
        consultation = await service.create(owner, question())

        with pytest.raises(AuthorizationError) as exc_info:
            await service.bulk(stranger, BulkRequest(action="delete", ids=[consultation.id]))

        assert exc_info.value.context == {"denied_ids": [consultation.id]}
