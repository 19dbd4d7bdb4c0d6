"""Helpers shared by the resource services."""

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel as PydanticModel
from sqlalchemy import ColumnElement, or_
from sqlalchemy.orm import InstrumentedAttribute

from coretax.core.exceptions import NotFoundError, ValidationError
from coretax.domain.access import AccessPolicy, Actor
from coretax.domain.enums import Role
from coretax.infrastructure.database.base import BaseModel
from coretax.infrastructure.database.models import User
from coretax.infrastructure.database.repository import BaseRepository
from coretax.infrastructure.repositories import UserRepository


async def load[T: BaseModel](repository: BaseRepository[T], entity_id: int, label: str) -> T:
    """Fetch by id or raise ``NotFoundError("<label> not found")``."""
    instance = await repository.get_by_id(entity_id)
    if instance is None:
        raise NotFoundError(f"{label} not found", context={"id": entity_id})
    return instance


def owner_scope(
    policy: AccessPolicy,
    actor: Actor,
    owner_column: InstrumentedAttribute[int],
    requested_owner: int | None = None,
    assignee_column: InstrumentedAttribute[int | None] | None = None,
) -> list[ColumnElement[bool]]:
    """Filters limiting a list to what the caller may see.

    Callers outside ``policy.read_all`` only ever see their own records (and,
    when ``assignee_column`` is given, records assigned to them), whatever
    owner they ask for. Privileged callers may narrow to one owner.
    """
    if not policy.sees_everything(actor):
        if assignee_column is not None and policy.assignee_access:
            return [or_(owner_column == actor.id, assignee_column == actor.id)]
        return [owner_column == actor.id]
    if requested_owner is not None:
        return [owner_column == requested_owner]
    return []


def utcnow() -> datetime:
    return datetime.now(UTC)


def export_filename(resource: str) -> str:
    return f"{resource}_export_{utcnow().date().isoformat()}.csv"


def yes_no(value: bool) -> str:
    return "Ya" if value else "Tidak"


def as_number(value: Decimal | None) -> float:
    return float(value) if value is not None else 0.0


def sparse_changes(
    data: PydanticModel, nullable: frozenset[str] = frozenset()
) -> dict[str, Any]:
    """Fields the client actually sent.

    An explicit ``null`` is kept only for ``nullable`` fields; for the rest
    it is treated as "not sent" since the column cannot hold it.
    """
    return {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key in nullable
    }


async def require_user(
    users: UserRepository, user_id: int, label: str, *roles: Role
) -> User:
    """Load a referenced user, optionally insisting on one of ``roles``.

    Raises:
        ValidationError: If the user does not exist or has another role.
    """
    user = await users.get_by_id(user_id)
    if user is None or (roles and user.role not in roles):
        raise ValidationError(f"Invalid {label}", context={f"{label}_id": user_id})
    return user


def data_field[V](
    data: Mapping[str, Any], key: str, parse: Callable[[Any], V], message: str
) -> V:
    """Read a required value from a bulk action's ``data`` object.

    Raises:
        ValidationError: If the value is missing or ``parse`` rejects it.
    """
    raw = data.get(key)
    if raw is None or raw == "":
        raise ValidationError(message, context={"field": key})
    try:
        return parse(raw)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {key}", context={"field": key}, cause=e) from e
