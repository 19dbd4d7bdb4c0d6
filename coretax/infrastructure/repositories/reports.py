"""Read-side access to filed returns and payments."""

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.domain.enums import PaymentStatus, TaxReportStatus
from coretax.infrastructure.database.models import Payment, TaxReport
from coretax.infrastructure.database.repository import BaseRepository


class TaxReportRepository(BaseRepository[TaxReport]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, TaxReport)

    async def open_for_owner(self, owner_id: int) -> list[TaxReport]:
        """Draft and submitted returns, the ones that can still be due."""
        stmt = (
            select(TaxReport)
            .where(
                TaxReport.user_id == owner_id,
                TaxReport.status.in_([TaxReportStatus.DRAFT, TaxReportStatus.SUBMITTED]),
            )
            .order_by(TaxReport.year, TaxReport.period, TaxReport.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class PaymentRepository(BaseRepository[Payment]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Payment)

    async def total_paid(
        self, *conditions: ColumnElement[bool], since: datetime | None = None
    ) -> Decimal:
        """Sum of successful payments, optionally only those paid since ``since``."""
        stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.status == PaymentStatus.SUCCESS, *conditions
        )
        if since is not None:
            stmt = stmt.where(Payment.paid_at >= since)
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))

    async def pending_for_owner(self, owner_id: int, created_before: datetime) -> Sequence[Payment]:
        stmt = (
            select(Payment)
            .where(
                Payment.user_id == owner_id,
                Payment.status == PaymentStatus.PENDING,
                Payment.created_at <= created_before,
            )
            .order_by(Payment.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
