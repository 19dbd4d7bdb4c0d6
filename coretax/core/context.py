"""Request-scoped context: correlation ids and the acting user."""

import uuid
from contextvars import ContextVar
from dataclasses import dataclass

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_actor_var: ContextVar["ActorContext | None"] = ContextVar("actor", default=None)


@dataclass(frozen=True, slots=True)
class ActorContext:
    """Who is acting in the current request, for logs and spans."""

    user_id: int
    role: str


class RequestContext:
    """Async-safe storage for request-scoped values.

    The correlation id is set by the request context middleware; the actor
    is set by the authorization dependency once the bearer token has been
    verified.
    """

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        return _correlation_id_var.get()

    @staticmethod
    def set_actor(user_id: int, role: str) -> None:
        _actor_var.set(ActorContext(user_id=user_id, role=role))

    @staticmethod
    def get_actor() -> ActorContext | None:
        return _actor_var.get()

    @staticmethod
    def clear() -> None:
        """Reset all values; called when a request finishes."""
        _correlation_id_var.set(None)
        _actor_var.set(None)


def generate_correlation_id() -> str:
    """Generate a UUID4 correlation id.

    Examples:
        >>> len(generate_correlation_id())
        36
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a request id in the form ``req-<uuid4>``.

    Examples:
        >>> generate_request_id().startswith("req-")
        True
    """
    return f"req-{uuid.uuid4()}"
