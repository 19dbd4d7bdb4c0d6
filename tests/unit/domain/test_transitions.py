"""Unit tests for the status transition tables."""

import pytest

from coretax.core.exceptions import ConflictError
from coretax.domain.enums import (
    AuditStatus,
    BankStatus,
    ConsultationStatus,
    DocumentStatus,
    SyncStatus,
    TaxCalculationStatus,
)
from coretax.domain.transitions import (
    AUDIT,
    BANK,
    CONSULTATION,
    DOCUMENT,
    SYNC,
    TAX_CALCULATION,
)


@pytest.mark.unit
class TestTransitionTable:
    @pytest.mark.parametrize("status", list(TaxCalculationStatus))
    def test_same_status_is_always_allowed(self, status: TaxCalculationStatus) -> None:
        assert TAX_CALCULATION.allows(status, status)

    @pytest.mark.parametrize(
        ("table", "current", "target"),
        [
            (TAX_CALCULATION, TaxCalculationStatus.CALCULATED, TaxCalculationStatus.VERIFIED),
            (TAX_CALCULATION, TaxCalculationStatus.VERIFIED, TaxCalculationStatus.APPROVED),
            (AUDIT, AuditStatus.PLANNED, AuditStatus.IN_PROGRESS),
            (AUDIT, AuditStatus.CANCELLED, AuditStatus.PLANNED),
            (CONSULTATION, ConsultationStatus.ASSIGNED, ConsultationStatus.COMPLETED),
            (DOCUMENT, DocumentStatus.DELETED, DocumentStatus.ACTIVE),
            (BANK, BankStatus.PENDING_VERIFICATION, BankStatus.ACTIVE),
            (SYNC, SyncStatus.SYNCING, SyncStatus.FAILED),
        ],
    )
    def test_allowed_moves(self, table, current, target) -> None:
        table.check(current, target)

    @pytest.mark.parametrize(
        ("table", "current", "target"),
        [
            (TAX_CALCULATION, TaxCalculationStatus.APPROVED, TaxCalculationStatus.DRAFT),
            (TAX_CALCULATION, TaxCalculationStatus.DRAFT, TaxCalculationStatus.APPROVED),
            (AUDIT, AuditStatus.COMPLETED, AuditStatus.IN_PROGRESS),
            (CONSULTATION, ConsultationStatus.PENDING, ConsultationStatus.COMPLETED),
            (SYNC, SyncStatus.SYNCING, SyncStatus.NOT_SYNCED),
        ],
    )
    def test_disallowed_moves_raise_conflict(self, table, current, target) -> None:
        with pytest.raises(ConflictError) as exc_info:
            table.check(current, target)

        assert exc_info.value.context == {"from": str(current), "to": str(target)}
        assert str(current) in exc_info.value.message

    def test_approved_calculation_is_final(self) -> None:
        approved = TaxCalculationStatus.APPROVED
        others = [s for s in TaxCalculationStatus if s != approved]
        assert not any(TAX_CALCULATION.allows(approved, s) for s in others)
