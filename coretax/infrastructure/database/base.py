"""SQLAlchemy declarative base and common model fields.

Every table gets a BigInteger ``id`` plus timezone-aware ``created_at`` and
``updated_at`` columns filled by the database. Constraint names follow
``NAMING_CONVENTION`` so Alembic autogenerate produces stable migrations.
"""

from datetime import datetime
from enum import StrEnum

from sqlalchemy import BigInteger, DateTime, Integer, MetaData, Numeric, func
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# SQLite only autoincrements INTEGER PRIMARY KEY columns
BigIntegerId = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Declarative base with the project's constraint naming convention."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class BaseModel(Base):
    """Abstract model with an id and database-maintained timestamps."""

    __abstract__ = True

    id: Mapped[int] = mapped_column(
        BigIntegerId,
        primary_key=True,
        autoincrement=True,
        doc="Primary key with auto-incrementing BigInteger ID",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when the record was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        doc="Timestamp when the record was last updated (UTC)",
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"


def enum_column[E: StrEnum](enum_type: type[E]) -> SAEnum:
    """String-backed column type for a StrEnum (no native database enum)."""
    return SAEnum(
        enum_type,
        native_enum=False,
        length=32,
        validate_strings=True,
        values_callable=lambda members: [m.value for m in members],
    )


# Money columns: 16 integer digits, 2 decimals
Money = Numeric(18, 2)
Rate = Numeric(6, 4)
