from coretax.api.schemas.common import RecordOut, UserSummary
from coretax.domain.enums import DocumentCategory, DocumentStatus


class DocumentOut(RecordOut):
    user_id: int
    title: str
    description: str | None
    file_name: str
    file_url: str
    file_size: int
    file_type: str | None
    category: DocumentCategory
    tags: str | None
    is_public: bool
    status: DocumentStatus
    user: UserSummary
