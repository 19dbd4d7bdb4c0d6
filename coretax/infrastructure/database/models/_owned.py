"""Owner foreign key shared by case-like records."""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

from coretax.infrastructure.database.base import BigIntegerId

if TYPE_CHECKING:
    from coretax.infrastructure.database.models.user import User


def user_fk(*, nullable: bool = False, ondelete: str = "CASCADE") -> Mapped[int]:
    return mapped_column(
        BigIntegerId,
        ForeignKey("users.id", ondelete=ondelete),
        index=True,
        nullable=nullable,
    )


class OwnedMixin:
    """Adds ``user_id`` and an eagerly loaded ``user`` relationship."""

    @declared_attr
    def user_id(cls) -> Mapped[int]:
        return user_fk()

    @declared_attr
    def user(cls) -> Mapped["User"]:
        return relationship("User", foreign_keys=[cls.user_id], lazy="selectin")
