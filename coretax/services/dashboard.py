"""Headline figures for the dashboard."""

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Final

from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.domain.access import Actor
from coretax.domain.enums import Role, TaxReportStatus
from coretax.infrastructure.database.models import Payment, TaxReport
from coretax.infrastructure.repositories import (
    NotificationRepository,
    PaymentRepository,
    TaxReportRepository,
)
from coretax.services.common import utcnow

CACHE_PREFIX: Final = "dashboard"
OVERDUE_AFTER: Final = timedelta(days=30)


@dataclass(frozen=True, slots=True)
class DashboardFigures:
    total_tax_paid: Decimal
    this_month_tax: Decimal
    pending_reports: int
    overdue_reports: int
    total_reports: int
    unread_notifications: int
    compliance_rate: int


def compliance_rate(total_reports: int, overdue_reports: int) -> int:
    """Share of reports that are not overdue, as a whole percentage.

    Examples:
        >>> compliance_rate(4, 1)
        75
        >>> compliance_rate(0, 0)
        100
    """
    if total_reports <= 0:
        return 100
    return round((total_reports - overdue_reports) / total_reports * 100)


class DashboardService:
    def __init__(self, session: AsyncSession) -> None:
        self.reports = TaxReportRepository(session)
        self.payments = PaymentRepository(session)
        self.notifications = NotificationRepository(session)

    async def stats(self, actor: Actor) -> DashboardFigures:
        """Taxpayers see their own figures; every other role sees the whole system.

        Unread notifications are always the caller's own.
        """
        now = utcnow()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        payment_scope: list[ColumnElement[bool]] = []
        report_scope: list[ColumnElement[bool]] = []
        if actor.role is Role.WAJIB_PAJAK:
            payment_scope.append(Payment.user_id == actor.id)
            report_scope.append(TaxReport.user_id == actor.id)

        submitted = TaxReport.status == TaxReportStatus.SUBMITTED
        total_reports = await self.reports.count(*report_scope)
        overdue_reports = await self.reports.count(
            *report_scope, submitted, TaxReport.created_at < now - OVERDUE_AFTER
        )

        return DashboardFigures(
            total_tax_paid=await self.payments.total_paid(*payment_scope),
            this_month_tax=await self.payments.total_paid(
                *payment_scope, since=month_start
            ),
            pending_reports=await self.reports.count(*report_scope, submitted),
            overdue_reports=overdue_reports,
            total_reports=total_reports,
            unread_notifications=await self.notifications.unread_count(actor.id),
            compliance_rate=compliance_rate(total_reports, overdue_reports),
        )
