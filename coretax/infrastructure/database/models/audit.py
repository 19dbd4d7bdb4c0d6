"""Audits and their findings."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coretax.domain.enums import AuditItemStatus, AuditScope, AuditStatus, AuditType, RiskLevel
from coretax.infrastructure.database.base import BaseModel, BigIntegerId, enum_column
from coretax.infrastructure.database.models._owned import OwnedMixin, user_fk

if TYPE_CHECKING:
    from coretax.infrastructure.database.models.user import User


class Audit(OwnedMixin, BaseModel):
    __tablename__ = "audits"

    auditor_id: Mapped[int | None] = user_fk(nullable=True, ondelete="SET NULL")
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text)
    audit_type: Mapped[AuditType] = mapped_column(enum_column(AuditType))
    scope: Mapped[AuditScope] = mapped_column(enum_column(AuditScope))
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    status: Mapped[AuditStatus] = mapped_column(
        enum_column(AuditStatus), default=AuditStatus.PLANNED
    )
    risk_level: Mapped[RiskLevel] = mapped_column(
        enum_column(RiskLevel), default=RiskLevel.LOW
    )
    compliance_score: Mapped[int | None] = mapped_column(Integer)
    report_url: Mapped[str | None] = mapped_column(String(500))
    notes: Mapped[str | None] = mapped_column(Text)

    auditor: Mapped["User | None"] = relationship(
        foreign_keys=[auditor_id], lazy="selectin"
    )
    items: Mapped[list["AuditItem"]] = relationship(
        back_populates="audit",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="AuditItem.id",
    )


class AuditItem(BaseModel):
    __tablename__ = "audit_items"

    audit_id: Mapped[int] = mapped_column(
        BigIntegerId, ForeignKey("audits.id", ondelete="CASCADE"), index=True
    )
    category: Mapped[str] = mapped_column(String(100))
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text)
    severity: Mapped[RiskLevel] = mapped_column(
        enum_column(RiskLevel), default=RiskLevel.LOW
    )
    status: Mapped[AuditItemStatus] = mapped_column(
        enum_column(AuditItemStatus), default=AuditItemStatus.OPEN
    )
    finding: Mapped[str | None] = mapped_column(Text)
    recommendation: Mapped[str | None] = mapped_column(Text)
    evidence: Mapped[str | None] = mapped_column(Text)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notes: Mapped[str | None] = mapped_column(Text)

    audit: Mapped[Audit] = relationship(back_populates="items")
