from datetime import datetime

from pydantic import Field

from coretax.core.schema import CamelModel
from coretax.domain.enums import ConsultationStatus, Priority, TaxType


class ConsultationCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    tax_type: TaxType | None = None
    priority: Priority = Priority.MEDIUM
    tags: str | None = Field(default=None, max_length=500)
    is_public: bool = False


class ConsultationUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    category: str | None = None
    tax_type: TaxType | None = None
    priority: Priority | None = None
    status: ConsultationStatus | None = None
    consultant_id: int | None = None
    scheduled_at: datetime | None = None
    response: str | None = None
    tags: str | None = Field(default=None, max_length=500)
    is_public: bool | None = None
