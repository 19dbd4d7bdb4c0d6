"""Bank account integrations and the simulated synchronization."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Final, assert_never

from loguru import logger
from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.exceptions import ConflictError, ValidationError
from coretax.core.observability import trace_operation
from coretax.domain.access import BANK_INTEGRATIONS, Actor, require_role
from coretax.domain.bulk import (
    BankIntegrationAction,
    BankSyncAction,
    BulkOutcome,
    parse_action,
    require_full_scope,
)
from coretax.domain.enums import (
    STAFF_ROLES,
    BankAccountType,
    BankStatus,
    Role,
    SyncStatus,
)
from coretax.domain.transitions import BANK, SYNC
from coretax.infrastructure.database.models import BankIntegration
from coretax.infrastructure.database.repository import Page
from coretax.infrastructure.repositories import BankIntegrationRepository, search_any
from coretax.infrastructure.sync import DeferredOperation, SyncScheduler
from coretax.services.common import (
    as_number,
    export_filename,
    load,
    owner_scope,
    sparse_changes,
    utcnow,
    yes_no,
)
from coretax.services.inputs.bank_integrations import (
    BankIntegrationCreate,
    BankIntegrationUpdate,
    SyncRequest,
)
from coretax.services.inputs.common import BulkRequest

NULLABLE_FIELDS: Final = frozenset({"bank_code", "branch", "webhook_url", "notes"})
NOUN: Final = "bank integrations"


@dataclass(frozen=True, slots=True)
class SyncOutcome:
    message: str
    sync_status: SyncStatus | None = None
    webhook_url: str | None = None


def export_row(integration: BankIntegration) -> dict[str, Any]:
    return {
        "ID": integration.id,
        "Nama Bank": integration.bank_name,
        "Nomor Rekening": integration.account_number,
        "Nama Pemilik": integration.account_name,
        "Kode Bank": integration.bank_code or "-",
        "Cabang": integration.branch or "-",
        "Tipe Akun": integration.account_type,
        "Mata Uang": integration.currency,
        "Saldo": as_number(integration.balance),
        "Status": integration.status,
        "Aktif": yes_no(integration.is_active),
        "Utama": yes_no(integration.is_primary),
        "Sinkronisasi": integration.sync_status,
        "Terakhir Sinkron": (
            integration.last_sync_at.isoformat() if integration.last_sync_at else "-"
        ),
        "Dibuat Oleh": integration.user.name or integration.user.email,
        "Tanggal Dibuat": integration.created_at.isoformat(),
        "Diperbarui": integration.updated_at.isoformat(),
        "Catatan": integration.notes or "-",
    }


def finish_sync(
    integration_id: int,
    *,
    succeeded: bool = True,
    balance: Decimal | None = None,
    status: BankStatus | None = None,
) -> DeferredOperation:
    """Deferred completion of a sync started earlier."""

    async def operation(session: AsyncSession) -> None:
        integration = await session.get(BankIntegration, integration_id)
        if integration is None:
            logger.warning("Bank integration {} vanished before sync finished", integration_id)
            return
        integration.sync_status = SyncStatus.SYNCED if succeeded else SyncStatus.FAILED
        integration.last_sync_at = utcnow()
        if balance is not None:
            integration.balance = balance
        if status is not None and BANK.allows(integration.status, status):
            integration.status = status

    return operation


class BankIntegrationService:
    def __init__(self, session: AsyncSession, scheduler: SyncScheduler) -> None:
        self.integrations = BankIntegrationRepository(session)
        self.scheduler = scheduler

    async def list_page(
        self,
        actor: Actor,
        *,
        bank_name: str | None = None,
        status: BankStatus | None = None,
        account_type: BankAccountType | None = None,
        is_active: bool | None = None,
        search: str | None = None,
        user_id: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[BankIntegration]:
        conditions: list[ColumnElement[bool]] = owner_scope(
            BANK_INTEGRATIONS, actor, BankIntegration.user_id, user_id
        )
        if bank_name:
            conditions.append(search_any(bank_name, BankIntegration.bank_name))
        if status is not None:
            conditions.append(BankIntegration.status == status)
        if account_type is not None:
            conditions.append(BankIntegration.account_type == account_type)
        if is_active is not None:
            conditions.append(BankIntegration.is_active.is_(is_active))
        if search:
            conditions.append(
                search_any(
                    search,
                    BankIntegration.account_number,
                    BankIntegration.account_name,
                    BankIntegration.bank_name,
                    BankIntegration.notes,
                )
            )
        return await self.integrations.list_page(*conditions, page=page, limit=limit)

    async def create(self, actor: Actor, data: BankIntegrationCreate) -> BankIntegration:
        """Link an account; the owner's first account becomes primary.

        Raises:
            ConflictError: If the owner already linked this account number.
        """
        if await self.integrations.account_taken(actor.id, data.account_number):
            raise ConflictError("Account number already exists")
        is_first = not await self.integrations.has_any(actor.id)
        return await self.integrations.create(
            BankIntegration(
                user_id=actor.id,
                is_primary=is_first,
                is_active=True,
                status=BankStatus.PENDING_VERIFICATION,
                sync_status=SyncStatus.NOT_SYNCED,
                **data.model_dump(),
            )
        )

    async def get(self, actor: Actor, integration_id: int) -> BankIntegration:
        integration = await load(self.integrations, integration_id, "Bank integration")
        BANK_INTEGRATIONS.require_read(actor, integration.user_id)
        return integration

    async def update(
        self, actor: Actor, integration_id: int, data: BankIntegrationUpdate
    ) -> BankIntegration:
        integration = await load(self.integrations, integration_id, "Bank integration")
        BANK_INTEGRATIONS.require_manage(actor, integration.user_id)

        changes = sparse_changes(data, NULLABLE_FIELDS)
        number = changes.get("account_number")
        if number is not None and await self.integrations.account_taken(
            integration.user_id, number, exclude_id=integration.id
        ):
            raise ConflictError("Account number already exists")
        if "status" in changes:
            BANK.check(integration.status, changes["status"])
        if changes.get("is_primary"):
            await self.integrations.clear_primary(integration.user_id, keep_id=integration.id)

        return await self.integrations.update(integration, changes)

    async def delete(self, actor: Actor, integration_id: int) -> None:
        integration = await load(self.integrations, integration_id, "Bank integration")
        BANK_INTEGRATIONS.require_delete(actor, integration.user_id)
        await self.integrations.delete(integration)

    async def bulk(self, actor: Actor, request: BulkRequest) -> BulkOutcome:
        action = parse_action(BankIntegrationAction, request.action)
        with trace_operation("bulk.bank_integrations", action=str(action), count=len(request.ids)):
            found = await self.integrations.get_many(request.ids)
            require_full_scope(
                request.ids,
                [i.id for i in found if BANK_INTEGRATIONS.can_manage(actor, i.user_id)],
                unrestricted=BANK_INTEGRATIONS.manages_everything(actor),
            )
            outcome = await self._apply(actor, action, found)

        logger.info("Bulk {} on bank integrations", action, affected=outcome.affected)
        return outcome

    async def _apply(
        self, actor: Actor, action: BankIntegrationAction, integrations: list[BankIntegration]
    ) -> BulkOutcome:
        ids = [i.id for i in integrations]
        match action:
            case BankIntegrationAction.DELETE:
                require_role(actor, Role.ADMIN)
                affected = await self.integrations.delete_many(ids)
                return BulkOutcome(action, affected, f"Successfully deleted {affected} {NOUN}")
            case BankIntegrationAction.ACTIVATE:
                require_role(actor, *STAFF_ROLES)
                for integration in integrations:
                    BANK.check(integration.status, BankStatus.ACTIVE)
                affected = await self.integrations.update_many(
                    ids, {"is_active": True, "status": BankStatus.ACTIVE}
                )
                return BulkOutcome(action, affected, f"Successfully activated {affected} {NOUN}")
            case BankIntegrationAction.DEACTIVATE:
                # Owners may deactivate their own accounts; scope is already checked
                for integration in integrations:
                    BANK.check(integration.status, BankStatus.INACTIVE)
                affected = await self.integrations.update_many(
                    ids, {"is_active": False, "status": BankStatus.INACTIVE}
                )
                return BulkOutcome(
                    action, affected, f"Successfully deactivated {affected} {NOUN}"
                )
            case BankIntegrationAction.SET_PRIMARY:
                if len(integrations) != 1:
                    raise ValidationError("Only one integration can be set as primary")
                (integration,) = integrations
                await self.integrations.clear_primary(integration.user_id, keep_id=integration.id)
                affected = await self.integrations.update_many(ids, {"is_primary": True})
                return BulkOutcome(action, affected, "Successfully set primary bank integration")
            case BankIntegrationAction.SYNC:
                require_role(actor, *STAFF_ROLES)
                affected = await self._start_sync(integrations)
                return BulkOutcome(action, affected, f"Sync initiated for {affected} {NOUN}")
            case BankIntegrationAction.EXPORT:
                rows = [export_row(i) for i in integrations]
                return BulkOutcome(
                    action,
                    len(rows),
                    f"Exported {len(rows)} {NOUN}",
                    data=rows,
                    filename=export_filename("bank_integrations"),
                )
            case _:
                assert_never(action)

    async def _start_sync(self, integrations: list[BankIntegration]) -> int:
        for integration in integrations:
            SYNC.check(integration.sync_status, SyncStatus.SYNCING)
        affected = await self.integrations.update_many(
            [i.id for i in integrations],
            {"sync_status": SyncStatus.SYNCING, "last_sync_at": utcnow()},
        )
        delay = self.scheduler.config.bulk_sync_delay_seconds
        for integration in integrations:
            self.scheduler.schedule(
                f"bank-sync-{integration.id}", delay, finish_sync(integration.id)
            )
        return affected

    async def sync(self, actor: Actor, request: SyncRequest) -> SyncOutcome:
        """Start one simulated sync action on an integration.

        Balance, transaction and connection actions mark the account
        ``SYNCING`` now and finish later in the background.
        """
        action = parse_action(BankSyncAction, request.action)
        integration = await load(self.integrations, request.integration_id, "Bank integration")
        BANK_INTEGRATIONS.require_manage(actor, integration.user_id)
        config = self.scheduler.config

        match action:
            case BankSyncAction.SET_WEBHOOK:
                if not request.webhook_url:
                    raise ValidationError("Webhook URL is required")
                await self.integrations.update(integration, {"webhook_url": request.webhook_url})
                return SyncOutcome(
                    "Webhook URL updated successfully", webhook_url=request.webhook_url
                )
            case BankSyncAction.SYNC_BALANCE:
                balance = Decimal(
                    self.scheduler.rng.randrange(config.min_mock_balance, config.max_mock_balance)
                )
                operation = finish_sync(integration.id, balance=balance)
                delay = config.balance_delay_seconds
                message = "Balance synchronization initiated"
            case BankSyncAction.SYNC_TRANSACTIONS:
                operation = finish_sync(integration.id)
                delay = config.transactions_delay_seconds
                message = "Transaction synchronization initiated"
            case BankSyncAction.TEST_CONNECTION:
                succeeded = self.scheduler.rng.random() < config.connection_success_rate
                operation = finish_sync(
                    integration.id,
                    succeeded=succeeded,
                    status=BankStatus.ACTIVE if succeeded else BankStatus.ERROR,
                )
                delay = config.connection_test_delay_seconds
                message = "Connection test initiated"
            case _:
                assert_never(action)

        SYNC.check(integration.sync_status, SyncStatus.SYNCING)
        await self.integrations.update(integration, {"sync_status": SyncStatus.SYNCING})
        self.scheduler.schedule(f"bank-{action.lower()}-{integration.id}", delay, operation)
        return SyncOutcome(message, sync_status=SyncStatus.SYNCING)
