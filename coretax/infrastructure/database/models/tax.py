"""Tax calculations, filed returns (SPT) and payments."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from coretax.domain.enums import (
    CalculationType,
    PaymentStatus,
    TaxCalculationStatus,
    TaxReportStatus,
    TaxType,
)
from coretax.infrastructure.database.base import (
    BaseModel,
    BigIntegerId,
    Money,
    Rate,
    enum_column,
)
from coretax.infrastructure.database.models._owned import OwnedMixin


class TaxCalculation(OwnedMixin, BaseModel):
    __tablename__ = "tax_calculations"

    tax_type: Mapped[TaxType] = mapped_column(enum_column(TaxType))
    calculation_type: Mapped[CalculationType] = mapped_column(
        enum_column(CalculationType)
    )
    period: Mapped[str] = mapped_column(String(16))
    year: Mapped[int] = mapped_column(Integer, index=True)
    gross_income: Mapped[Decimal] = mapped_column(Money)
    deductible_expenses: Mapped[Decimal] = mapped_column(Money, default=Decimal(0))
    tax_deductions: Mapped[Decimal] = mapped_column(Money, default=Decimal(0))
    tax_credits: Mapped[Decimal] = mapped_column(Money, default=Decimal(0))
    previous_tax_paid: Mapped[Decimal] = mapped_column(Money, default=Decimal(0))
    taxable_income: Mapped[Decimal] = mapped_column(Money)
    tax_rate: Mapped[Decimal] = mapped_column(Rate)
    calculated_tax: Mapped[Decimal] = mapped_column(Money)
    final_tax_amount: Mapped[Decimal] = mapped_column(Money)
    calculation_data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    status: Mapped[TaxCalculationStatus] = mapped_column(
        enum_column(TaxCalculationStatus), default=TaxCalculationStatus.CALCULATED
    )
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notes: Mapped[str | None] = mapped_column(Text)


class TaxReport(OwnedMixin, BaseModel):
    """A periodic return (SPT). Read by dashboard statistics and reminders."""

    __tablename__ = "tax_reports"

    tax_type: Mapped[TaxType] = mapped_column(enum_column(TaxType))
    period: Mapped[str] = mapped_column(String(16))
    year: Mapped[int] = mapped_column(Integer)
    status: Mapped[TaxReportStatus] = mapped_column(
        enum_column(TaxReportStatus), default=TaxReportStatus.DRAFT
    )
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class Payment(OwnedMixin, BaseModel):
    __tablename__ = "payments"

    tax_report_id: Mapped[int | None] = mapped_column(
        BigIntegerId, ForeignKey("tax_reports.id", ondelete="SET NULL")
    )
    amount: Mapped[Decimal] = mapped_column(Money)
    status: Mapped[PaymentStatus] = mapped_column(
        enum_column(PaymentStatus), default=PaymentStatus.PENDING
    )
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
