"""Audits and audit items."""

from typing import Final

from loguru import logger
from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from coretax.domain.access import AUDITS, Actor
from coretax.domain.enums import STAFF_ROLES, AuditItemStatus, AuditStatus, AuditType, RiskLevel
from coretax.domain.transitions import AUDIT, AUDIT_ITEM
from coretax.infrastructure.database.models import Audit, AuditItem
from coretax.infrastructure.database.repository import Page
from coretax.infrastructure.repositories import (
    AuditItemRepository,
    AuditRepository,
    UserRepository,
    search_any,
)
from coretax.services.common import load, owner_scope, require_user, sparse_changes
from coretax.services.inputs.audits import (
    AuditCreate,
    AuditItemCreate,
    AuditItemUpdate,
    AuditUpdate,
)

NULLABLE_FIELDS: Final = frozenset(
    {"start_date", "end_date", "compliance_score", "report_url", "auditor_id", "notes"}
)
ITEM_NULLABLE_FIELDS: Final = frozenset(
    {"finding", "recommendation", "evidence", "due_date", "notes"}
)


class AuditService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.audits = AuditRepository(session)
        self.items = AuditItemRepository(session)
        self.users = UserRepository(session)

    async def list_page(
        self,
        actor: Actor,
        *,
        search: str | None = None,
        audit_type: AuditType | None = None,
        status: AuditStatus | None = None,
        risk_level: RiskLevel | None = None,
        user_id: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[Audit]:
        conditions: list[ColumnElement[bool]] = owner_scope(
            AUDITS, actor, Audit.user_id, user_id, assignee_column=Audit.auditor_id
        )
        if search:
            conditions.append(search_any(search, Audit.title, Audit.description))
        if audit_type is not None:
            conditions.append(Audit.audit_type == audit_type)
        if status is not None:
            conditions.append(Audit.status == status)
        if risk_level is not None:
            conditions.append(Audit.risk_level == risk_level)
        return await self.audits.list_page(*conditions, page=page, limit=limit)

    async def create(self, actor: Actor, data: AuditCreate) -> Audit:
        """Create a planned audit.

        Staff may open an audit on behalf of another user via ``userId``;
        for everyone else the caller is the owner.
        """
        owner_id = actor.id
        if data.user_id is not None and actor.role in STAFF_ROLES:
            owner_id = (await require_user(self.users, data.user_id, "user")).id
        if data.auditor_id is not None:
            await require_user(self.users, data.auditor_id, "auditor", *STAFF_ROLES)

        audit = await self.audits.create(
            Audit(
                user_id=owner_id,
                auditor_id=data.auditor_id,
                title=data.title,
                description=data.description,
                audit_type=data.audit_type,
                scope=data.scope,
                start_date=data.start_date,
                end_date=data.end_date,
                status=AuditStatus.PLANNED,
                risk_level=data.risk_level,
                notes=data.notes,
            )
        )
        logger.info("Audit {} opened for user {}", audit.id, owner_id)
        return audit

    async def get(self, actor: Actor, audit_id: int) -> Audit:
        audit = await load(self.audits, audit_id, "Audit")
        AUDITS.require_read(actor, audit.user_id, audit.auditor_id)
        return audit

    async def update(self, actor: Actor, audit_id: int, data: AuditUpdate) -> Audit:
        audit = await load(self.audits, audit_id, "Audit")
        AUDITS.require_manage(actor, audit.user_id, audit.auditor_id)

        changes = sparse_changes(data, NULLABLE_FIELDS)
        if "auditor_id" in changes:
            if actor.role not in STAFF_ROLES:
                raise AuthorizationError("Only staff can assign auditors")
            if changes["auditor_id"] is not None:
                await require_user(self.users, changes["auditor_id"], "auditor", *STAFF_ROLES)
        if "status" in changes:
            AUDIT.check(audit.status, changes["status"])

        return await self.audits.update(audit, changes)

    async def delete(self, actor: Actor, audit_id: int) -> None:
        """Delete an audit that has not started yet.

        Raises:
            ConflictError: If the audit is no longer ``PLANNED``.
        """
        audit = await load(self.audits, audit_id, "Audit")
        AUDITS.require_delete(actor, audit.user_id)
        if audit.status != AuditStatus.PLANNED:
            raise ConflictError(
                "Only planned audits can be deleted",
                context={"status": str(audit.status)},
            )
        await self.audits.delete(audit)

    async def list_items(self, actor: Actor, audit_id: int) -> list[AuditItem]:
        audit = await self.get(actor, audit_id)
        return await self.items.for_audit(audit.id)

    async def add_item(self, actor: Actor, audit_id: int, data: AuditItemCreate) -> AuditItem:
        audit = await self.get(actor, audit_id)
        return await self.items.create(
            AuditItem(
                audit_id=audit.id,
                status=AuditItemStatus.OPEN,
                **data.model_dump(),
            )
        )

    async def update_item(
        self, actor: Actor, audit_id: int, item_id: int, data: AuditItemUpdate
    ) -> AuditItem:
        audit = await load(self.audits, audit_id, "Audit")
        AUDITS.require_manage(actor, audit.user_id, audit.auditor_id)
        item = await load(self.items, item_id, "Audit item")
        if item.audit_id != audit.id:
            raise NotFoundError("Audit item not found", context={"id": item_id})

        changes = sparse_changes(data, ITEM_NULLABLE_FIELDS)
        if "status" in changes:
            AUDIT_ITEM.check(item.status, changes["status"])
        return await self.items.update(item, changes)
