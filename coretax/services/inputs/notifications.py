from pydantic import Field

from coretax.core.schema import CamelModel
from coretax.domain.enums import NotificationType


class NotificationCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.INFO
    target_user_id: int | None = Field(
        default=None, description="Recipient; honored for ADMIN and TAX_OFFICER"
    )


class NotificationUpdate(CamelModel):
    is_read: bool = True
