from datetime import datetime
from typing import Any

from coretax.api.schemas.common import MoneyValue, RecordOut, UserSummary
from coretax.domain.enums import CalculationType, TaxCalculationStatus, TaxType


class TaxCalculationOut(RecordOut):
    user_id: int
    tax_type: TaxType
    calculation_type: CalculationType
    period: str
    year: int
    gross_income: MoneyValue
    deductible_expenses: MoneyValue
    tax_deductions: MoneyValue
    tax_credits: MoneyValue
    previous_tax_paid: MoneyValue
    taxable_income: MoneyValue
    tax_rate: MoneyValue
    calculated_tax: MoneyValue
    final_tax_amount: MoneyValue
    calculation_data: dict[str, Any]
    status: TaxCalculationStatus
    verified_at: datetime | None
    notes: str | None
    user: UserSummary
