"""Bulk action vocabularies and the scope rule shared by every bulk endpoint.

Each resource accepts a closed set of action tags. Request bodies carry the
tag as a string; ``parse_action`` turns it into the resource's enum or
raises ``InvalidActionError``, and services dispatch on the enum with a
single exhaustive ``match``.
"""

from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from coretax.core.exceptions import AuthorizationError, InvalidActionError


class TaxCalculationAction(StrEnum):
    DELETE = "DELETE"
    UPDATE_STATUS = "UPDATE_STATUS"
    EXPORT = "EXPORT"


class BankIntegrationAction(StrEnum):
    DELETE = "DELETE"
    ACTIVATE = "ACTIVATE"
    DEACTIVATE = "DEACTIVATE"
    SET_PRIMARY = "SET_PRIMARY"
    SYNC = "SYNC"
    EXPORT = "EXPORT"


class BankSyncAction(StrEnum):
    SYNC_BALANCE = "SYNC_BALANCE"
    SYNC_TRANSACTIONS = "SYNC_TRANSACTIONS"
    TEST_CONNECTION = "TEST_CONNECTION"
    SET_WEBHOOK = "SET_WEBHOOK"


class ConsultationAction(StrEnum):
    ASSIGN = "assign"
    UPDATE_STATUS = "updateStatus"
    UPDATE_PRIORITY = "updatePriority"
    SET_PUBLIC = "setPublic"
    SET_PRIVATE = "setPrivate"
    SCHEDULE = "schedule"
    DELETE = "delete"


class DocumentAction(StrEnum):
    ARCHIVE = "archive"
    RESTORE = "restore"
    DELETE = "delete"
    SET_PUBLIC = "setPublic"
    SET_PRIVATE = "setPrivate"


class NotificationAction(StrEnum):
    MARK_READ = "mark_read"
    MARK_UNREAD = "mark_unread"
    DELETE = "delete"


class ProfileVerificationAction(StrEnum):
    VERIFY = "verify"
    REJECT = "reject"
    SUSPEND = "suspend"
    ACTIVATE = "activate"


@dataclass(frozen=True, slots=True)
class BulkOutcome:
    """Result of one bulk action."""

    action: str
    affected: int
    message: str
    data: list[dict[str, Any]] | None = field(default=None)
    filename: str | None = None


def parse_action[A: StrEnum](action_type: type[A], raw: str) -> A:
    """Parse an action tag into ``action_type``.

    Raises:
        InvalidActionError: If ``raw`` is not one of the enum's values.
    """
    try:
        return action_type(raw)
    except ValueError as e:
        raise InvalidActionError(raw, [a.value for a in action_type]) from e


def require_full_scope(
    requested: Sequence[int],
    in_scope: Collection[int],
    *,
    unrestricted: bool = False,
) -> None:
    """Reject the whole batch unless every requested id is in the caller's scope.

    Args:
        requested: Ids named in the request.
        in_scope: Ids among them the caller may act on.
        unrestricted: Whether the caller's role bypasses the check.

    Raises:
        AuthorizationError: If any requested id is outside ``in_scope``.
    """
    if unrestricted:
        return
    outside = sorted(set(requested) - set(in_scope))
    if outside:
        raise AuthorizationError(
            "Access denied for some records",
            context={"denied_ids": outside},
        )
