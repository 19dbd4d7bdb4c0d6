from pydantic import Field

from coretax.core.schema import CamelModel
from coretax.domain.enums import DocumentCategory, DocumentStatus


class DocumentUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    category: DocumentCategory | None = None
    tags: str | None = Field(default=None, max_length=500)
    is_public: bool | None = None
    status: DocumentStatus | None = None
