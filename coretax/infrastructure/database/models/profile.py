"""Per tax type taxpayer profiles, verified by staff."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from coretax.domain.enums import CompanyType, ProfileStatus, TaxType
from coretax.infrastructure.database.base import BaseModel, enum_column
from coretax.infrastructure.database.models._owned import OwnedMixin


class UserProfile(OwnedMixin, BaseModel):
    __tablename__ = "user_profiles"
    __table_args__ = (
        UniqueConstraint("user_id", "tax_type", name="uq_profile_owner_tax_type"),
    )

    tax_type: Mapped[TaxType] = mapped_column(enum_column(TaxType))
    tax_id: Mapped[str] = mapped_column(String(32), unique=True)
    company_name: Mapped[str | None] = mapped_column(String(255))
    company_type: Mapped[CompanyType | None] = mapped_column(enum_column(CompanyType))
    npwp: Mapped[str | None] = mapped_column(String(32), unique=True)
    address: Mapped[str | None] = mapped_column(Text)
    city: Mapped[str | None] = mapped_column(String(100))
    province: Mapped[str | None] = mapped_column(String(100))
    postal_code: Mapped[str | None] = mapped_column(String(10))
    country: Mapped[str] = mapped_column(String(100), default="Indonesia")
    phone_number: Mapped[str | None] = mapped_column(String(32))
    email: Mapped[str | None] = mapped_column(String(255))
    website: Mapped[str | None] = mapped_column(String(255))
    business_field: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[ProfileStatus] = mapped_column(
        enum_column(ProfileStatus), default=ProfileStatus.PENDING_VERIFICATION
    )
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notes: Mapped[str | None] = mapped_column(Text)
