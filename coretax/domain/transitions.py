"""Allowed status transitions per entity.

Every status field is a closed enumeration and only the moves listed here
are accepted. Re-setting the current status is always allowed so sparse
updates can echo it back.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from coretax.core.exceptions import ConflictError
from coretax.domain.enums import (
    AuditItemStatus,
    AuditStatus,
    BankStatus,
    ComplianceStatus,
    ConsultationStatus,
    DocumentStatus,
    ProfileStatus,
    SyncStatus,
    TaxCalculationStatus,
)


@dataclass(frozen=True, slots=True)
class TransitionTable[S: StrEnum]:
    """Directed graph of permitted status changes for one entity."""

    entity: str
    edges: Mapping[S, frozenset[S]]

    def allows(self, current: S, target: S) -> bool:
        return current == target or target in self.edges.get(current, frozenset())

    def check(self, current: S, target: S) -> None:
        """Raise ConflictError if ``current`` may not move to ``target``."""
        if not self.allows(current, target):
            raise ConflictError(
                f"Cannot change {self.entity} status from {current} to {target}",
                context={"from": str(current), "to": str(target)},
            )


def _table[S: StrEnum](entity: str, edges: dict[S, set[S]]) -> TransitionTable[S]:
    return TransitionTable(entity, {k: frozenset(v) for k, v in edges.items()})


_A = AuditStatus
AUDIT = _table(
    "audit",
    {
        _A.PLANNED: {_A.IN_PROGRESS, _A.ON_HOLD, _A.CANCELLED},
        _A.IN_PROGRESS: {_A.ON_HOLD, _A.COMPLETED, _A.CANCELLED},
        _A.ON_HOLD: {_A.IN_PROGRESS, _A.CANCELLED},
        _A.COMPLETED: set(),
        _A.CANCELLED: {_A.PLANNED},
    },
)

_I = AuditItemStatus
AUDIT_ITEM = _table(
    "audit item",
    {
        _I.OPEN: {_I.IN_PROGRESS, _I.RESOLVED, _I.CLOSED},
        _I.IN_PROGRESS: {_I.OPEN, _I.RESOLVED, _I.CLOSED},
        _I.RESOLVED: {_I.CLOSED, _I.OPEN},
        _I.CLOSED: {_I.OPEN},
    },
)

_C = ConsultationStatus
CONSULTATION = _table(
    "consultation",
    {
        _C.PENDING: {_C.ASSIGNED, _C.CANCELLED},
        _C.ASSIGNED: {_C.IN_PROGRESS, _C.PENDING, _C.CANCELLED, _C.COMPLETED},
        _C.IN_PROGRESS: {_C.COMPLETED, _C.CANCELLED},
        _C.COMPLETED: set(),
        _C.CANCELLED: {_C.PENDING},
    },
)

_D = DocumentStatus
DOCUMENT = _table(
    "document",
    {
        _D.ACTIVE: {_D.ARCHIVED, _D.PENDING_REVIEW, _D.DELETED},
        _D.PENDING_REVIEW: {_D.ACTIVE, _D.ARCHIVED, _D.DELETED},
        _D.ARCHIVED: {_D.ACTIVE, _D.DELETED},
        _D.DELETED: {_D.ACTIVE},
    },
)

_B = BankStatus
BANK = _table(
    "bank integration",
    {
        _B.PENDING_VERIFICATION: {_B.ACTIVE, _B.INACTIVE, _B.ERROR, _B.SUSPENDED},
        _B.ACTIVE: {_B.INACTIVE, _B.ERROR, _B.SUSPENDED},
        _B.INACTIVE: {_B.ACTIVE, _B.SUSPENDED},
        _B.ERROR: {_B.ACTIVE, _B.INACTIVE, _B.SUSPENDED},
        _B.SUSPENDED: {_B.ACTIVE, _B.INACTIVE},
    },
)

_S = SyncStatus
SYNC = _table(
    "sync",
    {
        _S.NOT_SYNCED: {_S.SYNCING, _S.SYNCED},
        _S.SYNCING: {_S.SYNCED, _S.FAILED},
        _S.SYNCED: {_S.SYNCING},
        _S.FAILED: {_S.SYNCING, _S.SYNCED},
    },
)

_T = TaxCalculationStatus
TAX_CALCULATION = _table(
    "tax calculation",
    {
        _T.DRAFT: {_T.CALCULATED},
        _T.CALCULATED: {_T.VERIFIED, _T.REJECTED, _T.DRAFT},
        _T.VERIFIED: {_T.APPROVED, _T.REJECTED, _T.CALCULATED},
        _T.APPROVED: set(),
        _T.REJECTED: {_T.CALCULATED, _T.DRAFT},
    },
)

_R = ComplianceStatus
COMPLIANCE = _table(
    "compliance record",
    {
        _R.NOT_COMPLIANT: {_R.UNDER_REVIEW, _R.PARTIALLY_COMPLIANT, _R.COMPLIANT, _R.EXEMPTED},
        _R.UNDER_REVIEW: {_R.NOT_COMPLIANT, _R.PARTIALLY_COMPLIANT, _R.COMPLIANT, _R.EXEMPTED},
        _R.PARTIALLY_COMPLIANT: {_R.UNDER_REVIEW, _R.COMPLIANT, _R.NOT_COMPLIANT},
        _R.COMPLIANT: {_R.UNDER_REVIEW, _R.NOT_COMPLIANT},
        _R.EXEMPTED: {_R.UNDER_REVIEW},
    },
)

_P = ProfileStatus
PROFILE = _table(
    "profile",
    {
        _P.PENDING_VERIFICATION: {_P.ACTIVE, _P.SUSPENDED},
        _P.ACTIVE: {_P.SUSPENDED, _P.INACTIVE},
        _P.SUSPENDED: {_P.ACTIVE},
        _P.INACTIVE: {_P.ACTIVE},
    },
)
