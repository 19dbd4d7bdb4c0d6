"""Generic async repository.

``BaseRepository`` covers the operations every entity needs: fetch by id,
paged listing with arbitrary filter expressions, sparse updates and the
batch helpers used by bulk actions. Entity repositories subclass it and add
their own queries.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from loguru import logger
from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy import delete as sql_delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import UnaryExpression

from coretax.core.exceptions import ConflictError
from coretax.infrastructure.database.base import BaseModel


@dataclass(frozen=True, slots=True)
class Page[T]:
    """One page of results plus the numbers needed for pagination metadata."""

    items: list[T]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class BaseRepository[T: BaseModel]:
    """Base repository class providing common CRUD operations.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class AuditRepository(BaseRepository[Audit]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Audit)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    @property
    def name(self) -> str:
        return self.model_class.__name__

    async def get_by_id(self, entity_id: int) -> T | None:
        """Retrieve a model instance by its ID."""
        stmt = select(self.model_class).where(self.model_class.id == entity_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, entity_ids: Sequence[int]) -> list[T]:
        """Retrieve every instance whose id is in ``entity_ids``."""
        if not entity_ids:
            return []
        stmt = (
            select(self.model_class)
            .where(self.model_class.id.in_(entity_ids))
            .order_by(self.model_class.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_page(
        self,
        *conditions: ColumnElement[bool],
        page: int = 1,
        limit: int = 10,
        order_by: Sequence[UnaryExpression[object]] | None = None,
    ) -> Page[T]:
        """Return one page of instances matching all ``conditions``.

        Args:
            *conditions: SQLAlchemy boolean expressions, combined with AND.
            page: 1-based page number.
            limit: Page size.
            order_by: Sort clauses; newest first when omitted.

        Returns:
            Page[T]: The page of instances and the unpaged total.
        """
        total = await self.count(*conditions)

        stmt = select(self.model_class).where(*conditions)
        stmt = stmt.order_by(
            *(order_by or (self.model_class.created_at.desc(), self.model_class.id.desc()))
        )
        stmt = stmt.offset((page - 1) * limit).limit(limit)

        result = await self.session.execute(stmt)
        items = list(result.scalars().all())

        logger.debug(
            "Listed {} page {} ({} of {})", self.name, page, len(items), total
        )
        return Page(items=items, page=page, limit=limit, total=total)

    async def create(self, obj: T) -> T:
        """Persist a new instance and load its server-generated values."""
        self.session.add(obj)
        await self._flush()
        await self.session.refresh(obj)

        logger.info("Created {} with ID: {}", self.name, obj.id)
        return obj

    async def update(self, instance: T, data: Mapping[str, object]) -> T:
        """Apply only the fields present in ``data`` to ``instance``.

        Unknown keys are ignored with a warning.
        """
        for key, value in data.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
            else:
                logger.warning(
                    "Attempted to update non-existent field '{}' on {}", key, self.name
                )

        await self._flush()
        await self.session.refresh(instance)

        logger.info(
            "Updated {} ID {} - fields: {}", self.name, instance.id, list(data.keys())
        )
        return instance

    async def _flush(self) -> None:
        """Flush pending changes; a violated constraint surfaces as ``ConflictError``.

        The session must be rolled back afterwards, which the request-scoped
        session dependency does for any exception.
        """
        try:
            await self.session.flush()
        except IntegrityError as e:
            logger.warning("{} write rejected by the database: {}", self.name, e.orig)
            raise ConflictError(
                f"{self.name} conflicts with an existing record",
                context={"entity": self.name},
                cause=e,
            ) from e

    async def update_many(
        self, entity_ids: Sequence[int], data: Mapping[str, object]
    ) -> int:
        """Apply ``data`` to every listed id and return the affected count."""
        if not entity_ids:
            return 0
        stmt = (
            update(self.model_class)
            .where(self.model_class.id.in_(entity_ids))
            .values(**data)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        logger.info("Updated {} {} rows", result.rowcount, self.name)
        return result.rowcount

    async def delete(self, instance: T) -> None:
        """Hard-delete an instance."""
        await self.session.delete(instance)
        await self.session.flush()
        logger.info("Deleted {} with ID: {}", self.name, instance.id)

    async def delete_many(self, entity_ids: Sequence[int]) -> int:
        """Hard-delete every listed id and return the affected count."""
        if not entity_ids:
            return 0
        stmt = (
            sql_delete(self.model_class)
            .where(self.model_class.id.in_(entity_ids))
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        logger.info("Deleted {} {} rows", result.rowcount, self.name)
        return result.rowcount

    async def count(self, *conditions: ColumnElement[bool]) -> int:
        """Count instances matching all ``conditions``."""
        stmt = select(func.count()).select_from(self.model_class).where(*conditions)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def exists(self, *conditions: ColumnElement[bool]) -> bool:
        return await self.count(*conditions) > 0

    async def find_one_by(self, **kwargs: object) -> T | None:
        """Find the first instance whose columns equal the given values."""
        stmt = select(self.model_class).filter_by(**kwargs)
        stmt = stmt.order_by(self.model_class.id).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def filter_by(self, **kwargs: object) -> list[T]:
        """Return every instance whose columns equal the given values."""
        stmt = select(self.model_class).filter_by(**kwargs)
        stmt = stmt.order_by(self.model_class.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
