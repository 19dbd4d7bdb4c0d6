"""Regulatory compliance tracking."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coretax.domain.enums import ComplianceStatus, Priority, RegulationType, RiskLevel
from coretax.infrastructure.database.base import BaseModel, enum_column
from coretax.infrastructure.database.models._owned import OwnedMixin, user_fk

if TYPE_CHECKING:
    from coretax.infrastructure.database.models.user import User


class ComplianceRecord(OwnedMixin, BaseModel):
    __tablename__ = "compliance_records"

    assigned_to_id: Mapped[int | None] = user_fk(nullable=True, ondelete="SET NULL")
    regulation_type: Mapped[RegulationType] = mapped_column(enum_column(RegulationType))
    regulation_id: Mapped[str] = mapped_column(String(100))
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text)
    requirement: Mapped[str] = mapped_column(Text)
    status: Mapped[ComplianceStatus] = mapped_column(
        enum_column(ComplianceStatus), default=ComplianceStatus.NOT_COMPLIANT
    )
    evidence: Mapped[str | None] = mapped_column(Text)
    last_verified: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    next_review: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    priority: Mapped[Priority] = mapped_column(
        enum_column(Priority), default=Priority.MEDIUM
    )
    risk_level: Mapped[RiskLevel] = mapped_column(
        enum_column(RiskLevel), default=RiskLevel.LOW
    )
    score: Mapped[int | None] = mapped_column(Integer)
    action_plan: Mapped[str | None] = mapped_column(Text)
    implementation_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True)
    )
    notes: Mapped[str | None] = mapped_column(Text)

    assigned_to: Mapped["User | None"] = relationship(
        foreign_keys=[assigned_to_id], lazy="selectin"
    )
