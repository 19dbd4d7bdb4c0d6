"""In-app notifications and per-user notification preferences."""

from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from coretax.domain.enums import NotificationType
from coretax.infrastructure.database.base import BaseModel, BigIntegerId, enum_column
from coretax.infrastructure.database.models._owned import OwnedMixin


class Notification(OwnedMixin, BaseModel):
    __tablename__ = "notifications"

    title: Mapped[str] = mapped_column(String(255))
    message: Mapped[str] = mapped_column(Text)
    type: Mapped[NotificationType] = mapped_column(
        enum_column(NotificationType), default=NotificationType.INFO
    )
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, index=True)


class NotificationSettings(BaseModel):
    __tablename__ = "notification_settings"

    user_id: Mapped[int] = mapped_column(
        BigIntegerId, ForeignKey("users.id", ondelete="CASCADE"), unique=True
    )
    preferences: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
