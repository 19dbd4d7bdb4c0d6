from datetime import datetime

from coretax.api.schemas.common import RecordOut, UserSummary
from coretax.domain.enums import ConsultationStatus, Priority, TaxType


class ConsultationOut(RecordOut):
    user_id: int
    consultant_id: int | None
    title: str
    description: str
    tax_type: TaxType | None
    category: str
    priority: Priority
    status: ConsultationStatus
    scheduled_at: datetime | None
    completed_at: datetime | None
    response: str | None
    tags: str | None
    is_public: bool
    user: UserSummary
    consultant: UserSummary | None
