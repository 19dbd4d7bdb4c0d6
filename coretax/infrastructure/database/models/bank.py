"""Linked bank accounts and their (simulated) sync state."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from coretax.domain.enums import BankAccountType, BankStatus, SyncStatus
from coretax.infrastructure.database.base import BaseModel, Money, enum_column
from coretax.infrastructure.database.models._owned import OwnedMixin


class BankIntegration(OwnedMixin, BaseModel):
    __tablename__ = "bank_integrations"
    __table_args__ = (
        UniqueConstraint("user_id", "account_number", name="uq_bank_owner_account"),
    )

    bank_name: Mapped[str] = mapped_column(String(255))
    account_number: Mapped[str] = mapped_column(String(64))
    account_name: Mapped[str] = mapped_column(String(255))
    bank_code: Mapped[str | None] = mapped_column(String(16))
    branch: Mapped[str | None] = mapped_column(String(255))
    account_type: Mapped[BankAccountType] = mapped_column(enum_column(BankAccountType))
    currency: Mapped[str] = mapped_column(String(3), default="IDR")
    balance: Mapped[Decimal | None] = mapped_column(Money)
    status: Mapped[BankStatus] = mapped_column(
        enum_column(BankStatus), default=BankStatus.PENDING_VERIFICATION
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)
    sync_status: Mapped[SyncStatus] = mapped_column(
        enum_column(SyncStatus), default=SyncStatus.NOT_SYNCED
    )
    last_sync_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    webhook_url: Mapped[str | None] = mapped_column(String(500))
    notes: Mapped[str | None] = mapped_column(Text)
