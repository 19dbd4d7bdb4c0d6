"""Tax calculations: compute, review and export."""

from decimal import Decimal
from typing import Any, Final, assert_never

from loguru import logger
from sqlalchemy import ColumnElement, or_
from sqlalchemy.ext.asyncio import AsyncSession

from coretax.core.exceptions import AuthorizationError, ValidationError
from coretax.core.observability import trace_operation
from coretax.domain.access import TAX_CALCULATIONS, Actor, require_role
from coretax.domain.bulk import (
    BulkOutcome,
    TaxCalculationAction,
    parse_action,
    require_full_scope,
)
from coretax.domain.enums import (
    STAFF_ROLES,
    CalculationType,
    NotificationType,
    Role,
    TaxCalculationStatus,
    TaxType,
)
from coretax.domain.tax import TaxInputs, TaxResult, calculate_tax
from coretax.domain.transitions import TAX_CALCULATION
from coretax.infrastructure.database.models import TaxCalculation, User
from coretax.infrastructure.database.repository import Page
from coretax.infrastructure.database.session import invalidate_on_commit
from coretax.infrastructure.repositories import TaxCalculationRepository, search_any
from coretax.services.common import (
    as_number,
    export_filename,
    load,
    owner_scope,
    sparse_changes,
    utcnow,
)
from coretax.services.inputs.common import BulkRequest
from coretax.services.inputs.tax_calculations import TaxCalculationCreate, TaxCalculationUpdate
from coretax.services.notifications import notify

CACHE_PREFIX: Final = "tax-calculations"

# Changing any of these recomputes the result
CALCULATION_INPUTS: Final = frozenset(
    {
        "tax_type",
        "gross_income",
        "deductible_expenses",
        "tax_deductions",
        "tax_credits",
        "previous_tax_paid",
    }
)
REVIEW_STATUSES: Final = frozenset(
    {TaxCalculationStatus.VERIFIED, TaxCalculationStatus.APPROVED, TaxCalculationStatus.REJECTED}
)

_REVIEW_NOTICES: Final[dict[TaxCalculationStatus, tuple[str, NotificationType]]] = {
    TaxCalculationStatus.VERIFIED: ("Perhitungan Pajak Diverifikasi", NotificationType.SUCCESS),
    TaxCalculationStatus.APPROVED: ("Perhitungan Pajak Disetujui", NotificationType.SUCCESS),
    TaxCalculationStatus.REJECTED: ("Perhitungan Pajak Ditolak", NotificationType.ERROR),
}


def run_calculation(
    tax_type: TaxType,
    gross_income: Decimal,
    deductible_expenses: Decimal,
    tax_deductions: Decimal,
    tax_credits: Decimal,
    previous_tax_paid: Decimal,
) -> TaxResult:
    with trace_operation("tax.calculate", tax_type=str(tax_type)):
        return calculate_tax(
            TaxInputs(
                gross_income=gross_income,
                tax_type=tax_type,
                deductible_expenses=deductible_expenses,
                tax_deductions=tax_deductions,
                tax_credits=tax_credits,
                previous_tax_paid=previous_tax_paid,
            )
        )


def result_fields(result: TaxResult) -> dict[str, Any]:
    return {
        "taxable_income": result.taxable_income,
        "tax_rate": result.tax_rate,
        "calculated_tax": result.calculated_tax,
        "final_tax_amount": result.final_tax_amount,
        "calculation_data": result.breakdown,
    }


def export_row(calculation: TaxCalculation) -> dict[str, Any]:
    return {
        "ID": calculation.id,
        "Jenis Pajak": calculation.tax_type,
        "Tipe Perhitungan": calculation.calculation_type,
        "Periode": calculation.period,
        "Tahun": calculation.year,
        "Penghasilan Kotor": as_number(calculation.gross_income),
        "Penghasilan Kena Pajak": as_number(calculation.taxable_income),
        "Tarif Pajak": f"{calculation.tax_rate * 100:.2f}%",
        "Pajak Dihitung": as_number(calculation.calculated_tax),
        "Jumlah Akhir": as_number(calculation.final_tax_amount),
        "Status": calculation.status,
        "Dibuat Oleh": calculation.user.name or calculation.user.email,
        "Tanggal Dibuat": calculation.created_at.isoformat(),
        "Diperbarui": calculation.updated_at.isoformat(),
        "Catatan": calculation.notes or "-",
    }


def invalidate(session: AsyncSession) -> None:
    """Drop every cached calculation list once ``session`` commits."""
    invalidate_on_commit(session, f"{CACHE_PREFIX}:")


class TaxCalculationService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.calculations = TaxCalculationRepository(session)

    async def list_page(
        self,
        actor: Actor,
        *,
        tax_type: TaxType | None = None,
        status: TaxCalculationStatus | None = None,
        year: int | None = None,
        calculation_type: CalculationType | None = None,
        search: str | None = None,
        user_id: int | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page[TaxCalculation]:
        conditions: list[ColumnElement[bool]] = owner_scope(
            TAX_CALCULATIONS, actor, TaxCalculation.user_id, user_id
        )
        if tax_type is not None:
            conditions.append(TaxCalculation.tax_type == tax_type)
        if status is not None:
            conditions.append(TaxCalculation.status == status)
        if year is not None:
            conditions.append(TaxCalculation.year == year)
        if calculation_type is not None:
            conditions.append(TaxCalculation.calculation_type == calculation_type)
        if search:
            conditions.append(
                or_(
                    search_any(search, TaxCalculation.notes),
                    TaxCalculation.user.has(search_any(search, User.name)),
                )
            )
        return await self.calculations.list_page(*conditions, page=page, limit=limit)

    async def create(self, actor: Actor, data: TaxCalculationCreate) -> TaxCalculation:
        result = run_calculation(
            data.tax_type,
            data.gross_income,
            data.deductible_expenses,
            data.tax_deductions,
            data.tax_credits,
            data.previous_tax_paid,
        )
        calculation = await self.calculations.create(
            TaxCalculation(
                user_id=actor.id,
                tax_type=data.tax_type,
                calculation_type=data.calculation_type,
                period=data.period,
                year=data.year,
                gross_income=data.gross_income,
                deductible_expenses=data.deductible_expenses,
                tax_deductions=data.tax_deductions,
                tax_credits=data.tax_credits,
                previous_tax_paid=data.previous_tax_paid,
                status=TaxCalculationStatus.CALCULATED,
                notes=data.notes,
                **result_fields(result),
            )
        )
        invalidate(self.session)
        logger.info(
            "Tax calculated",
            calculation_id=calculation.id,
            tax_type=str(data.tax_type),
            final_tax_amount=str(result.final_tax_amount),
        )
        return calculation

    async def get(self, actor: Actor, calculation_id: int) -> TaxCalculation:
        calculation = await load(self.calculations, calculation_id, "Tax calculation")
        TAX_CALCULATIONS.require_read(actor, calculation.user_id)
        return calculation

    async def update(
        self, actor: Actor, calculation_id: int, data: TaxCalculationUpdate
    ) -> TaxCalculation:
        """Apply a sparse update.

        A change to any calculation input recomputes the result and puts the
        record back to ``CALCULATED``; review statuses need a staff role.
        """
        calculation = await load(self.calculations, calculation_id, "Tax calculation")
        TAX_CALCULATIONS.require_manage(actor, calculation.user_id)

        changes = sparse_changes(data, nullable=frozenset({"notes"}))
        target = changes.get("status")
        if target in REVIEW_STATUSES and actor.role not in STAFF_ROLES:
            raise AuthorizationError(
                "Insufficient permissions to change review status",
                context={"status": str(target)},
            )

        if CALCULATION_INPUTS & changes.keys():
            merged = {
                field: changes.get(field, getattr(calculation, field))
                for field in CALCULATION_INPUTS
            }
            result = run_calculation(**merged)
            changes.update(result_fields(result))
            target = TaxCalculationStatus.CALCULATED
            changes["status"] = target

        previous = calculation.status
        if target is not None:
            TAX_CALCULATION.check(previous, target)
            if target is TaxCalculationStatus.VERIFIED:
                changes["verified_at"] = utcnow()

        updated = await self.calculations.update(calculation, changes)
        invalidate(self.session)

        if target in REVIEW_STATUSES and target != previous:
            await self._notify_review(updated, target)
        return updated

    async def delete(self, actor: Actor, calculation_id: int) -> None:
        calculation = await load(self.calculations, calculation_id, "Tax calculation")
        TAX_CALCULATIONS.require_delete(actor, calculation.user_id)
        await self.calculations.delete(calculation)
        invalidate(self.session)

    async def bulk(self, actor: Actor, request: BulkRequest) -> BulkOutcome:
        action = parse_action(TaxCalculationAction, request.action)
        with trace_operation("bulk.tax_calculations", action=str(action), count=len(request.ids)):
            found = await self.calculations.get_many(request.ids)
            require_full_scope(
                request.ids,
                [c.id for c in found if TAX_CALCULATIONS.can_read(actor, c.user_id)],
                unrestricted=TAX_CALCULATIONS.sees_everything(actor),
            )

            match action:
                case TaxCalculationAction.DELETE:
                    require_role(actor, Role.ADMIN)
                    affected = await self.calculations.delete_many(request.ids)
                    outcome = BulkOutcome(
                        action, affected, f"Successfully deleted {affected} tax calculations"
                    )
                case TaxCalculationAction.UPDATE_STATUS:
                    require_role(actor, Role.ADMIN, Role.TAX_OFFICER)
                    outcome = await self._bulk_status(found, request.data)
                case TaxCalculationAction.EXPORT:
                    rows = [export_row(c) for c in found]
                    outcome = BulkOutcome(
                        action,
                        len(rows),
                        f"Exported {len(rows)} tax calculations",
                        data=rows,
                        filename=export_filename("tax_calculations"),
                    )
                case _:
                    assert_never(action)

        if action is not TaxCalculationAction.EXPORT:
            invalidate(self.session)
        return outcome

    async def _bulk_status(
        self, calculations: list[TaxCalculation], data: dict[str, Any]
    ) -> BulkOutcome:
        raw = data.get("status")
        if not raw:
            raise ValidationError("Status is required for bulk update")
        try:
            target = TaxCalculationStatus(raw)
        except ValueError as e:
            raise ValidationError("Invalid status", context={"status": raw}, cause=e) from e

        for calculation in calculations:
            TAX_CALCULATION.check(calculation.status, target)

        changes: dict[str, Any] = {"status": target}
        if target is TaxCalculationStatus.VERIFIED:
            changes["verified_at"] = utcnow()

        affected = await self.calculations.update_many([c.id for c in calculations], changes)
        if target in REVIEW_STATUSES:
            for calculation in calculations:
                await self._notify_review(calculation, target)
        return BulkOutcome(
            TaxCalculationAction.UPDATE_STATUS,
            affected,
            f"Successfully updated status for {affected} tax calculations",
        )

    async def _notify_review(
        self, calculation: TaxCalculation, status: TaxCalculationStatus
    ) -> None:
        title, kind = _REVIEW_NOTICES[status]
        await notify(
            self.session,
            calculation.user_id,
            title,
            (
                f"Perhitungan {calculation.tax_type} periode "
                f"{calculation.period}/{calculation.year} berstatus {status}"
            ),
            kind,
        )
