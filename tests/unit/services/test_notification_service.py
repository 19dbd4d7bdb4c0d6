"""Service tests for notifications, reminders and preferences."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.cache import CacheProfile, cache_key, get_response_cache
from coretax.core.exceptions import NotFoundError
from coretax.domain.access import Actor
from coretax.domain.enums import NotificationType, Role, TaxReportStatus, TaxType
from coretax.infrastructure.database.models import Payment, TaxReport
from coretax.services.inputs.common import BulkRequest
from coretax.services.inputs.notifications import NotificationCreate
from coretax.services.notifications import (
    DEFAULT_SETTINGS,
    NotificationService,
    merge_settings,
    notify,
)
from tests.support import UserFactory, actor_of

NOW = datetime(2025, 6, 15, 9, 0, tzinfo=UTC)


@pytest.fixture
def service(db_session: AsyncSession) -> NotificationService:
    return NotificationService(db_session)


async def notify_many(db_session: AsyncSession, actor: Actor, count: int) -> list[int]:
    return [
        (await notify(db_session, actor.id, f"Notice {n}", "Body")).id for n in range(count)
    ]


@pytest.mark.unit
class TestMergeSettings:
    def test_nested_merge_keeps_siblings(self) -> None:
        merged = merge_settings(
            DEFAULT_SETTINGS, {"reminderSettings": {"sptReminderDays": 7}, "theme": "dark"}
        )

        assert merged["reminderSettings"]["sptReminderDays"] == 7
        assert merged["reminderSettings"]["weeklyDigest"] is True
        assert merged["theme"] == "dark"
        assert DEFAULT_SETTINGS["reminderSettings"]["sptReminderDays"] == 3

    def test_scalar_replaces_mapping(self) -> None:
        assert merge_settings({"a": {"b": 1}}, {"a": None}) == {"a": None}


@pytest.mark.unit
class TestNotifications:
    async def test_list_with_unread_count(
        self, service: NotificationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        other = actor_of(await make_user())
        first, _ = await notify_many(db_session, owner, 2)
        await notify_many(db_session, other, 1)
        await service.mark(owner, first)

        page, unread = await service.list_page(owner)
        unread_only, _ = await service.list_page(owner, is_read=False)

        assert page.total == 2
        assert unread == 1
        assert unread_only.total == 1

    async def test_staff_can_notify_others(
        self, service: NotificationService, make_user: UserFactory
    ) -> None:
        officer = actor_of(await make_user(Role.TAX_OFFICER))
        taxpayer = await make_user()

        notification = await service.create(
            officer,
            NotificationCreate(
                title="Audit",
                message="Scheduled",
                type=NotificationType.WARNING,
                target_user_id=taxpayer.id,
            ),
        )

        assert notification.user_id == taxpayer.id
        assert notification.type == NotificationType.WARNING

    async def test_taxpayer_target_is_ignored(
        self, service: NotificationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())
        other = await make_user()

        notification = await service.create(
            owner, NotificationCreate(title="Note", message="Self", target_user_id=other.id)
        )

        assert notification.user_id == owner.id

    async def test_unknown_target(
        self, service: NotificationService, make_user: UserFactory
    ) -> None:
        admin = actor_of(await make_user(Role.ADMIN))

        with pytest.raises(NotFoundError, match="Target user not found"):
            await service.create(
                admin, NotificationCreate(title="x", message="y", target_user_id=999)
            )

    async def test_foreign_notification_looks_missing(
        self, service: NotificationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        admin = actor_of(await make_user(Role.ADMIN))
        (notification_id,) = await notify_many(db_session, owner, 1)

        with pytest.raises(NotFoundError):
            await service.delete(admin, notification_id)

    async def test_changes_invalidate_cached_lists(
        self, service: NotificationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        (notification_id,) = await notify_many(db_session, owner, 1)
        await db_session.commit()
        cache = get_response_cache()
        key = cache_key("notifications", owner.id, "page=1")
        cache.set(key, {"data": []}, CacheProfile.REALTIME)

        await service.mark(owner, notification_id)
        cached_before_commit = cache.get(key)
        await db_session.commit()

        assert cached_before_commit == {"data": []}
        assert cache.get(key) is None

    async def test_rolled_back_change_keeps_cached_lists(
        self, service: NotificationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        (notification_id,) = await notify_many(db_session, owner, 1)
        await db_session.commit()
        cache = get_response_cache()
        key = cache_key("notifications", owner.id, "page=1")
        cache.set(key, {"data": []}, CacheProfile.REALTIME)

        await service.mark(owner, notification_id)
        await db_session.rollback()
        await db_session.commit()

        assert cache.get(key) == {"data": []}


@pytest.mark.unit
class TestNotificationBulk:
    async def test_foreign_ids_are_skipped(
        self, service: NotificationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        other = actor_of(await make_user())
        mine = await notify_many(db_session, owner, 2)
        theirs = await notify_many(db_session, other, 1)

        outcome = await service.bulk(
            owner, BulkRequest(action="mark_read", ids=[*mine, *theirs])
        )
        _, unread_other = await service.list_page(other)

        assert outcome.affected == 2
        assert outcome.message == "2 notifications marked as read"
        assert unread_other == 1

    async def test_nothing_owned_affects_nothing(
        self, service: NotificationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = actor_of(await make_user())
        other = actor_of(await make_user())
        theirs = await notify_many(db_session, other, 1)

        outcome = await service.bulk(owner, BulkRequest(action="delete", ids=theirs))

        assert outcome.affected == 0


@pytest.mark.unit
class TestReminders:
    async def test_spt_and_payment_reminders(
        self, service: NotificationService, make_user: UserFactory, db_session: AsyncSession
    ) -> None:
        owner = await make_user()
        db_session.add_all(
            [
                TaxReport(user_id=owner.id, tax_type=TaxType.PPN, period="5", year=2025),
                # Next month's return is not due yet
                TaxReport(user_id=owner.id, tax_type=TaxType.PPN, period="7", year=2025),
                TaxReport(
                    user_id=owner.id,
                    tax_type=TaxType.PPH_21,
                    period="5",
                    year=2025,
                    status=TaxReportStatus.ACCEPTED,
                ),
                Payment(
                    user_id=owner.id,
                    amount=Decimal(1250000),
                    created_at=NOW - timedelta(days=3),
                ),
            ]
        )
        await db_session.commit()

        reminders = await service.reminders(actor_of(owner), now=NOW)
        spt_only = await service.reminders(actor_of(owner), category="spt", now=NOW)

        assert [r.category for r in reminders] == ["spt", "payment"]
        spt, payment = reminders
        assert spt.days_until_due == 5
        assert spt.priority == "medium"
        assert payment.days_pending == 3
        assert payment.priority == "high"
        assert "Rp1.250.000" in payment.message
        assert spt_only == [spt]


@pytest.mark.unit
class TestNotificationSettings:
    async def test_defaults_then_merge(
        self, service: NotificationService, make_user: UserFactory
    ) -> None:
        owner = actor_of(await make_user())

        assert await service.get_settings(owner) == DEFAULT_SETTINGS

        await service.update_settings(owner, {"emailNotifications": {"systemUpdates": True}})
        await service.update_settings(owner, {"reminderSettings": {"dailyDigest": True}})
        stored = await service.get_settings(owner)

        assert stored["emailNotifications"]["systemUpdates"] is True
        assert stored["emailNotifications"]["sptDue"] is True
        assert stored["reminderSettings"]["dailyDigest"] is True
