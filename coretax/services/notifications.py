"""Notifications, derived reminders and notification preferences."""

import copy
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Final, assert_never

from loguru import logger
from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.cache import cache_key
from coretax.core.exceptions import NotFoundError
from coretax.domain.access import NOTIFICATIONS, Actor
from coretax.domain.bulk import BulkOutcome, NotificationAction, parse_action
from coretax.domain.enums import STAFF_ROLES, NotificationType, TaxType
from coretax.domain.reminders import (
    ANNUAL_TYPES,
    MONTHLY_TYPES,
    Reminder,
    payment_reminder,
    spt_reminder,
)
from coretax.infrastructure.database.models import Notification, NotificationSettings
from coretax.infrastructure.database.repository import Page
from coretax.infrastructure.database.session import invalidate_on_commit
from coretax.infrastructure.repositories import (
    NotificationRepository,
    NotificationSettingsRepository,
    PaymentRepository,
    TaxReportRepository,
    UserRepository,
)
from coretax.services.dashboard import CACHE_PREFIX as DASHBOARD_PREFIX
from coretax.services.inputs.common import BulkRequest
from coretax.services.inputs.notifications import NotificationCreate

CACHE_PREFIX: Final = "notifications"

DEFAULT_SETTINGS: Final[dict[str, Any]] = {
    "emailNotifications": {
        "sptDue": True,
        "paymentDue": True,
        "paymentSuccess": True,
        "paymentFailed": True,
        "reportVerified": True,
        "systemUpdates": False,
    },
    "pushNotifications": {
        "sptDue": True,
        "paymentDue": True,
        "paymentSuccess": True,
        "paymentFailed": True,
        "reportVerified": True,
        "systemUpdates": True,
    },
    "reminderSettings": {
        "sptReminderDays": 3,
        "paymentReminderDays": 2,
        "dailyDigest": False,
        "weeklyDigest": True,
    },
}


def invalidate_for(session: AsyncSession, user_id: int) -> None:
    """Drop cached notification lists and dashboard stats of one user on commit."""
    invalidate_on_commit(
        session,
        cache_key(CACHE_PREFIX, user_id, ""),
        cache_key(DASHBOARD_PREFIX, user_id, ""),
    )


async def notify(
    session: AsyncSession,
    user_id: int,
    title: str,
    message: str,
    type_: NotificationType = NotificationType.INFO,
) -> Notification:
    """Create a notification as a side effect of another operation."""
    notification = await NotificationRepository(session).create(
        Notification(user_id=user_id, title=title, message=message, type=type_)
    )
    invalidate_for(session, user_id)
    return notification


def merge_settings(base: Mapping[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge ``patch`` into a copy of ``base``; nested dicts merge key by key."""
    merged = copy.deepcopy(dict(base))
    for key, value in patch.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = merge_settings(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class NotificationService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.notifications = NotificationRepository(session)
        self.settings = NotificationSettingsRepository(session)

    async def list_page(
        self,
        actor: Actor,
        *,
        type_: NotificationType | None = None,
        is_read: bool | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[Page[Notification], int]:
        """The caller's notifications plus their total unread count."""
        conditions: list[ColumnElement[bool]] = [Notification.user_id == actor.id]
        if type_ is not None:
            conditions.append(Notification.type == type_)
        if is_read is not None:
            conditions.append(Notification.is_read.is_(is_read))

        result = await self.notifications.list_page(*conditions, page=page, limit=limit)
        unread = await self.notifications.unread_count(actor.id)
        return result, unread

    async def create(self, actor: Actor, data: NotificationCreate) -> Notification:
        """Create a notification for the caller, or for ``targetUserId`` when staff."""
        recipient = actor.id
        if data.target_user_id is not None and actor.role in STAFF_ROLES:
            if await UserRepository(self.session).get_by_id(data.target_user_id) is None:
                raise NotFoundError("Target user not found")
            recipient = data.target_user_id
        return await notify(self.session, recipient, data.title, data.message, data.type)

    async def _owned(self, actor: Actor, notification_id: int) -> Notification:
        notification = await self.notifications.get_by_id(notification_id)
        if notification is None or not NOTIFICATIONS.can_manage(actor, notification.user_id):
            raise NotFoundError("Notification not found")
        return notification

    async def mark(
        self, actor: Actor, notification_id: int, *, is_read: bool = True
    ) -> Notification:
        notification = await self._owned(actor, notification_id)
        updated = await self.notifications.update(notification, {"is_read": is_read})
        invalidate_for(self.session, actor.id)
        return updated

    async def delete(self, actor: Actor, notification_id: int) -> None:
        notification = await self._owned(actor, notification_id)
        await self.notifications.delete(notification)
        invalidate_for(self.session, actor.id)

    async def bulk(self, actor: Actor, request: BulkRequest) -> BulkOutcome:
        """Apply a bulk action to the caller's own notifications among ``ids``.

        Ids the caller does not own are ignored rather than rejected, so the
        affected count may be lower than requested, or zero.
        """
        action = parse_action(NotificationAction, request.action)
        owned = await self.notifications.owned_ids(actor.id, request.ids)

        match action:
            case NotificationAction.MARK_READ:
                affected = await self.notifications.update_many(owned, {"is_read": True})
                message = f"{affected} notifications marked as read"
            case NotificationAction.MARK_UNREAD:
                affected = await self.notifications.update_many(owned, {"is_read": False})
                message = f"{affected} notifications marked as unread"
            case NotificationAction.DELETE:
                affected = await self.notifications.delete_many(owned)
                message = f"{affected} notifications deleted"
            case _:
                assert_never(action)

        invalidate_for(self.session, actor.id)
        logger.info(
            "Bulk {} on notifications",
            action,
            requested=len(request.ids),
            affected=affected,
        )
        return BulkOutcome(action=action, affected=affected, message=message)

    async def reminders(
        self, actor: Actor, *, category: str | None = None, now: datetime | None = None
    ) -> list[Reminder]:
        """SPT deadline and pending payment reminders for the caller."""
        now = now or datetime.now(UTC)
        reminders: list[Reminder] = []

        if category in (None, "spt"):
            for report in await TaxReportRepository(self.session).open_for_owner(actor.id):
                if not _reminder_applies(report.tax_type, report.period, report.year, now):
                    continue
                reminder = spt_reminder(
                    report.id, report.tax_type, report.period, report.year, now
                )
                if reminder is not None:
                    reminders.append(reminder)

        if category in (None, "payment"):
            payments = await PaymentRepository(self.session).pending_for_owner(actor.id, now)
            for payment in payments:
                reminder = payment_reminder(
                    payment.id, payment.amount, _aware(payment.created_at), now
                )
                if reminder is not None:
                    reminders.append(reminder)

        return reminders

    async def get_settings(self, actor: Actor) -> dict[str, Any]:
        stored = await self.settings.for_user(actor.id)
        if stored is None:
            return copy.deepcopy(DEFAULT_SETTINGS)
        return merge_settings(DEFAULT_SETTINGS, stored.preferences)

    async def update_settings(self, actor: Actor, patch: Mapping[str, Any]) -> dict[str, Any]:
        """Merge ``patch`` into the caller's stored preferences and return the result."""
        stored = await self.settings.for_user(actor.id)
        if stored is None:
            preferences = merge_settings(DEFAULT_SETTINGS, patch)
            await self.settings.create(
                NotificationSettings(user_id=actor.id, preferences=preferences)
            )
        else:
            preferences = merge_settings(
                merge_settings(DEFAULT_SETTINGS, stored.preferences), patch
            )
            await self.settings.update(stored, {"preferences": preferences})
        logger.info("Updated notification settings", keys=sorted(patch))
        return preferences


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _reminder_applies(tax_type: TaxType, period: str, year: int, now: datetime) -> bool:
    """Only current-year monthly returns up to this month, and last year's PPh 25."""
    if tax_type in MONTHLY_TYPES:
        return year == now.year and period.isdigit() and 1 <= int(period) <= now.month
    if tax_type in ANNUAL_TYPES:
        return year == now.year - 1
    return False
