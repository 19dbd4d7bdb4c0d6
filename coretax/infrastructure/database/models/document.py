"""Uploaded document metadata (file contents live outside the database)."""

from sqlalchemy import BigInteger, Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from coretax.domain.enums import DocumentCategory, DocumentStatus
from coretax.infrastructure.database.base import BaseModel, enum_column
from coretax.infrastructure.database.models._owned import OwnedMixin


class Document(OwnedMixin, BaseModel):
    __tablename__ = "documents"

    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    file_name: Mapped[str] = mapped_column(String(255))
    file_url: Mapped[str] = mapped_column(String(500))
    file_size: Mapped[int] = mapped_column(BigInteger, default=0)
    file_type: Mapped[str | None] = mapped_column(String(100))
    category: Mapped[DocumentCategory] = mapped_column(enum_column(DocumentCategory))
    tags: Mapped[str | None] = mapped_column(String(500))
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[DocumentStatus] = mapped_column(
        enum_column(DocumentStatus), default=DocumentStatus.ACTIVE
    )
