"""Regulatory compliance records."""

from typing import Final

from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.exceptions import AuthorizationError
from coretax.domain.access import COMPLIANCE_RECORDS, Actor
from coretax.domain.enums import (
    STAFF_ROLES,
    ComplianceStatus,
    Priority,
    RegulationType,
    RiskLevel,
)
from coretax.domain.transitions import COMPLIANCE
from coretax.infrastructure.database.models import ComplianceRecord
from coretax.infrastructure.database.repository import Page
from coretax.infrastructure.repositories import (
    ComplianceRecordRepository,
    UserRepository,
    search_any,
)
from coretax.services.common import load, owner_scope, require_user, sparse_changes, utcnow
from coretax.services.inputs.compliance import ComplianceRecordCreate, ComplianceRecordUpdate

NULLABLE_FIELDS: Final = frozenset(
    {
        "evidence",
        "last_verified",
        "next_review",
        "score",
        "action_plan",
        "implementation_date",
        "assigned_to_id",
        "notes",
    }
)


class ComplianceService:
    def __init__(self, session: AsyncSession) -> None:
        self.records = ComplianceRecordRepository(session)
        self.users = UserRepository(session)

    async def list_page(
        self,
        actor: Actor,
        *,
        search: str | None = None,
        regulation_type: RegulationType | None = None,
        status: ComplianceStatus | None = None,
        priority: Priority | None = None,
        risk_level: RiskLevel | None = None,
        user_id: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[ComplianceRecord]:
        conditions: list[ColumnElement[bool]] = owner_scope(
            COMPLIANCE_RECORDS,
            actor,
            ComplianceRecord.user_id,
            user_id,
            assignee_column=ComplianceRecord.assigned_to_id,
        )
        if search:
            conditions.append(
                search_any(
                    search,
                    ComplianceRecord.title,
                    ComplianceRecord.description,
                    ComplianceRecord.requirement,
                )
            )
        if regulation_type is not None:
            conditions.append(ComplianceRecord.regulation_type == regulation_type)
        if status is not None:
            conditions.append(ComplianceRecord.status == status)
        if priority is not None:
            conditions.append(ComplianceRecord.priority == priority)
        if risk_level is not None:
            conditions.append(ComplianceRecord.risk_level == risk_level)
        return await self.records.list_page(*conditions, page=page, limit=limit)

    async def create(self, actor: Actor, data: ComplianceRecordCreate) -> ComplianceRecord:
        owner_id = actor.id
        if data.user_id is not None and actor.role in STAFF_ROLES:
            owner_id = (await require_user(self.users, data.user_id, "user")).id
        if data.assigned_to_id is not None:
            await require_user(self.users, data.assigned_to_id, "assignee", *STAFF_ROLES)

        fields = data.model_dump(exclude={"user_id"})
        return await self.records.create(
            ComplianceRecord(
                user_id=owner_id,
                status=ComplianceStatus.NOT_COMPLIANT,
                **fields,
            )
        )

    async def get(self, actor: Actor, record_id: int) -> ComplianceRecord:
        record = await load(self.records, record_id, "Compliance record")
        COMPLIANCE_RECORDS.require_read(actor, record.user_id, record.assigned_to_id)
        return record

    async def update(
        self, actor: Actor, record_id: int, data: ComplianceRecordUpdate
    ) -> ComplianceRecord:
        """Sparse update; reaching ``COMPLIANT`` stamps ``last_verified``."""
        record = await load(self.records, record_id, "Compliance record")
        COMPLIANCE_RECORDS.require_manage(actor, record.user_id, record.assigned_to_id)

        changes = sparse_changes(data, NULLABLE_FIELDS)
        if "assigned_to_id" in changes:
            if actor.role not in STAFF_ROLES:
                raise AuthorizationError("Only staff can assign compliance records")
            if changes["assigned_to_id"] is not None:
                await require_user(
                    self.users, changes["assigned_to_id"], "assignee", *STAFF_ROLES
                )
        if "status" in changes:
            COMPLIANCE.check(record.status, changes["status"])
            if (
                changes["status"] == ComplianceStatus.COMPLIANT
                and "last_verified" not in changes
            ):
                changes["last_verified"] = utcnow()

        return await self.records.update(record, changes)

    async def delete(self, actor: Actor, record_id: int) -> None:
        record = await load(self.records, record_id, "Compliance record")
        COMPLIANCE_RECORDS.require_delete(actor, record.user_id)
        await self.records.delete(record)
