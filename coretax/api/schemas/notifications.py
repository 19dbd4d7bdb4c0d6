from datetime import datetime

from coretax.api.schemas.common import CamelModel, Paginated, RecordOut
from coretax.domain.enums import NotificationType


class NotificationOut(RecordOut):
    user_id: int
    title: str
    message: str
    type: NotificationType
    is_read: bool


class NotificationPage(Paginated[NotificationOut]):
    unread_count: int


class ReminderOut(CamelModel):
    id: str
    title: str
    message: str
    type: str
    category: str
    priority: str
    reference_id: int
    due_date: datetime | None = None
    days_until_due: int | None = None
    days_pending: int | None = None


class RemindersResponse(CamelModel):
    reminders: list[ReminderOut]
    total: int
