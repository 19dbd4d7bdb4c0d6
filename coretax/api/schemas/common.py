"""Building blocks shared by the response schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import PlainSerializer

from coretax.core.schema import CamelModel
from coretax.domain.bulk import BulkOutcome
from coretax.domain.enums import Role
from coretax.infrastructure.database.repository import Page

# Decimal in Python, a JSON number on the wire
MoneyValue = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class RecordOut(CamelModel):
    id: int
    created_at: datetime
    updated_at: datetime


class UserSummary(CamelModel):
    """The owner or assignee of a record, as embedded in responses."""

    id: int
    name: str
    email: str
    role: Role


class PaginationMeta(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class Paginated[T](CamelModel):
    """List envelope: ``{"data": [...], "pagination": {...}}``."""

    data: list[T]
    pagination: PaginationMeta

    @classmethod
    def from_page(cls, page: Page[Any]) -> "Paginated[T]":
        return cls(
            data=page.items,
            pagination=PaginationMeta(
                page=page.page, limit=page.limit, total=page.total, pages=page.pages
            ),
        )


class MessageResponse(CamelModel):
    message: str


class BulkResponse(CamelModel):
    action: str
    message: str
    affected_count: int
    data: list[dict[str, Any]] | None = None
    filename: str | None = None

    @classmethod
    def from_outcome(cls, outcome: BulkOutcome) -> "BulkResponse":
        return cls(
            action=outcome.action,
            message=outcome.message,
            affected_count=outcome.affected,
            data=outcome.data,
            filename=outcome.filename,
        )
