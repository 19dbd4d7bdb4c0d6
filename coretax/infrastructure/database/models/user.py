"""User accounts: the actors of the system."""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from coretax.domain.enums import Role
from coretax.infrastructure.database.base import BaseModel, enum_column


class User(BaseModel):
    """An account; ``role`` is the only authorization axis."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    name: Mapped[str] = mapped_column(String(255))
    role: Mapped[Role] = mapped_column(enum_column(Role), default=Role.WAJIB_PAJAK)
    npwp: Mapped[str | None] = mapped_column(String(32), unique=True)
    nik: Mapped[str | None] = mapped_column(String(32), unique=True)
    phone_number: Mapped[str | None] = mapped_column(String(32))
    address: Mapped[str | None] = mapped_column(Text)
    company: Mapped[str | None] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
