"""Helpers shared by test modules."""

from collections.abc import Awaitable, Callable

from coretax.core.config import get_settings
from coretax.core.security import create_access_token
from coretax.domain.access import Actor
from coretax.infrastructure.database.models import User

type UserFactory = Callable[..., Awaitable[User]]


def actor_of(user: User) -> Actor:
    return Actor(id=user.id, role=user.role)


def auth_headers(user: User) -> dict[str, str]:
    """Bearer header for ``user`` signed with the current settings."""
    token, _ = create_access_token(user.id, user.role, get_settings().auth_config)
    return {"Authorization": f"Bearer {token}"}
