from typing import Any

from pydantic import AliasChoices, Field

from coretax.core.schema import CamelModel


class BulkRequest(CamelModel):
    """Bulk action request.

    Target ids are accepted under ``ids`` or under the resource specific key
    older clients send (``calculationIds``, ``integrationIds`` and so on).
    """

    action: str = Field(..., min_length=1, examples=["DELETE", "mark_read"])
    ids: list[int] = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices(
            "ids",
            "calculationIds",
            "integrationIds",
            "consultationIds",
            "documentIds",
            "notificationIds",
        ),
    )
    data: dict[str, Any] = Field(default_factory=dict)
