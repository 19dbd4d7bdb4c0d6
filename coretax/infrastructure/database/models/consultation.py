"""Consultations between taxpayers and consultants."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coretax.domain.enums import ConsultationStatus, Priority, TaxType
from coretax.infrastructure.database.base import BaseModel, enum_column
from coretax.infrastructure.database.models._owned import OwnedMixin, user_fk

if TYPE_CHECKING:
    from coretax.infrastructure.database.models.user import User


class Consultation(OwnedMixin, BaseModel):
    __tablename__ = "consultations"

    consultant_id: Mapped[int | None] = user_fk(nullable=True, ondelete="SET NULL")
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text)
    tax_type: Mapped[TaxType | None] = mapped_column(enum_column(TaxType))
    category: Mapped[str] = mapped_column(String(100))
    priority: Mapped[Priority] = mapped_column(
        enum_column(Priority), default=Priority.MEDIUM
    )
    status: Mapped[ConsultationStatus] = mapped_column(
        enum_column(ConsultationStatus), default=ConsultationStatus.PENDING
    )
    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    response: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[str | None] = mapped_column(String(500))
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)

    consultant: Mapped["User | None"] = relationship(
        foreign_keys=[consultant_id], lazy="selectin"
    )
