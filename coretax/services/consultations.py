"""Consultations between taxpayers and consultants."""

from datetime import datetime
from typing import Any, Final, assert_never

from loguru import logger
from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.exceptions import AuthorizationError
from coretax.core.observability import trace_operation
from coretax.domain.access import CONSULTATIONS, Actor, require_role
from coretax.domain.bulk import BulkOutcome, ConsultationAction, parse_action, require_full_scope
from coretax.domain.enums import ConsultationStatus, NotificationType, Priority, Role
from coretax.domain.transitions import CONSULTATION
from coretax.infrastructure.database.models import Consultation
from coretax.infrastructure.database.repository import Page
from coretax.infrastructure.repositories import ConsultationRepository, UserRepository, search_any
from coretax.services.common import (
    data_field,
    load,
    owner_scope,
    require_user,
    sparse_changes,
    utcnow,
)
from coretax.services.inputs.common import BulkRequest
from coretax.services.inputs.consultations import ConsultationCreate, ConsultationUpdate
from coretax.services.notifications import notify

NULLABLE_FIELDS: Final = frozenset(
    {"tax_type", "consultant_id", "scheduled_at", "response", "tags"}
)
ASSIGNER_ROLES: Final = (Role.CONSULTANT, Role.ADMIN)


class ConsultationService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.consultations = ConsultationRepository(session)
        self.users = UserRepository(session)

    async def list_page(
        self,
        actor: Actor,
        *,
        search: str | None = None,
        category: str | None = None,
        status: ConsultationStatus | None = None,
        priority: Priority | None = None,
        user_id: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[Consultation]:
        conditions: list[ColumnElement[bool]] = owner_scope(
            CONSULTATIONS,
            actor,
            Consultation.user_id,
            user_id,
            assignee_column=Consultation.consultant_id,
        )
        if search:
            conditions.append(
                search_any(
                    search,
                    Consultation.title,
                    Consultation.description,
                    Consultation.response,
                )
            )
        if category:
            conditions.append(Consultation.category == category)
        if status is not None:
            conditions.append(Consultation.status == status)
        if priority is not None:
            conditions.append(Consultation.priority == priority)
        return await self.consultations.list_page(*conditions, page=page, limit=limit)

    async def create(self, actor: Actor, data: ConsultationCreate) -> Consultation:
        return await self.consultations.create(
            Consultation(
                user_id=actor.id,
                status=ConsultationStatus.PENDING,
                **data.model_dump(),
            )
        )

    async def get(self, actor: Actor, consultation_id: int) -> Consultation:
        consultation = await load(self.consultations, consultation_id, "Consultation")
        CONSULTATIONS.require_read(actor, consultation.user_id, consultation.consultant_id)
        return consultation

    async def update(
        self, actor: Actor, consultation_id: int, data: ConsultationUpdate
    ) -> Consultation:
        """Sparse update by the owner, the assigned consultant or an admin.

        Only consultants and admins may (re)assign; the assignee must hold the
        ``CONSULTANT`` role. Completing stamps ``completed_at``.
        """
        consultation = await load(self.consultations, consultation_id, "Consultation")
        CONSULTATIONS.require_manage(actor, consultation.user_id, consultation.consultant_id)

        changes = sparse_changes(data, NULLABLE_FIELDS)
        newly_assigned: int | None = None
        if "consultant_id" in changes:
            if actor.role not in ASSIGNER_ROLES:
                raise AuthorizationError("Only consultants and admins can assign consultations")
            consultant_id = changes["consultant_id"]
            if consultant_id is not None:
                await require_user(self.users, consultant_id, "consultant", Role.CONSULTANT)
                if consultant_id != consultation.consultant_id:
                    newly_assigned = consultant_id

        if "status" in changes:
            status = changes["status"]
            CONSULTATION.check(consultation.status, status)
            changes["completed_at"] = utcnow() if status == ConsultationStatus.COMPLETED else None

        updated = await self.consultations.update(consultation, changes)
        if newly_assigned is not None:
            await self._notify_assigned(updated)
        return updated

    async def delete(self, actor: Actor, consultation_id: int) -> None:
        consultation = await load(self.consultations, consultation_id, "Consultation")
        CONSULTATIONS.require_delete(actor, consultation.user_id)
        await self.consultations.delete(consultation)

    async def bulk(self, actor: Actor, request: BulkRequest) -> BulkOutcome:
        action = parse_action(ConsultationAction, request.action)
        with trace_operation("bulk.consultations", action=str(action), count=len(request.ids)):
            found = await self.consultations.get_many(request.ids)
            require_full_scope(
                request.ids,
                [
                    c.id
                    for c in found
                    if CONSULTATIONS.can_manage(actor, c.user_id, c.consultant_id)
                ],
                unrestricted=CONSULTATIONS.manages_everything(actor),
            )
            affected = await self._apply(actor, action, found, request.data)

        logger.info("Bulk {} on consultations", action, affected=affected)
        return BulkOutcome(action, affected, f"Bulk {action} completed successfully")

    async def _apply(
        self,
        actor: Actor,
        action: ConsultationAction,
        consultations: list[Consultation],
        data: dict[str, Any],
    ) -> int:
        ids = [c.id for c in consultations]
        match action:
            case ConsultationAction.ASSIGN:
                require_role(actor, *ASSIGNER_ROLES)
                consultant_id = data_field(
                    data, "consultantId", int, "Consultant ID is required for assign action"
                )
                await require_user(self.users, consultant_id, "consultant", Role.CONSULTANT)
                self._check_all(consultations, ConsultationStatus.ASSIGNED)
                affected = await self.consultations.update_many(
                    ids,
                    {"consultant_id": consultant_id, "status": ConsultationStatus.ASSIGNED},
                )
                for consultation in consultations:
                    await self._notify_assigned(consultation)
                return affected
            case ConsultationAction.UPDATE_STATUS:
                status = data_field(
                    data, "status", ConsultationStatus, "Status is required for updateStatus action"
                )
                self._check_all(consultations, status)
                completed_at = utcnow() if status == ConsultationStatus.COMPLETED else None
                return await self.consultations.update_many(
                    ids, {"status": status, "completed_at": completed_at}
                )
            case ConsultationAction.UPDATE_PRIORITY:
                priority = data_field(
                    data, "priority", Priority, "Priority is required for updatePriority action"
                )
                return await self.consultations.update_many(ids, {"priority": priority})
            case ConsultationAction.SET_PUBLIC:
                return await self.consultations.update_many(ids, {"is_public": True})
            case ConsultationAction.SET_PRIVATE:
                return await self.consultations.update_many(ids, {"is_public": False})
            case ConsultationAction.SCHEDULE:
                scheduled_at = data_field(
                    data,
                    "scheduledAt",
                    datetime.fromisoformat,
                    "Scheduled date is required for schedule action",
                )
                self._check_all(consultations, ConsultationStatus.ASSIGNED)
                return await self.consultations.update_many(
                    ids,
                    {"scheduled_at": scheduled_at, "status": ConsultationStatus.ASSIGNED},
                )
            case ConsultationAction.DELETE:
                return await self.consultations.delete_many(ids)
            case _:
                assert_never(action)

    @staticmethod
    def _check_all(consultations: list[Consultation], target: ConsultationStatus) -> None:
        for consultation in consultations:
            CONSULTATION.check(consultation.status, target)

    async def _notify_assigned(self, consultation: Consultation) -> None:
        await notify(
            self.session,
            consultation.user_id,
            "Konsultasi Ditugaskan",
            f'Konsultasi "{consultation.title}" telah ditugaskan ke konsultan',
            NotificationType.INFO,
        )
