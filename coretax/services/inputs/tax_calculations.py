from decimal import Decimal
from typing import Annotated

from pydantic import Field

from coretax.core.schema import CamelModel
from coretax.domain.enums import CalculationType, TaxCalculationStatus, TaxType

NonNegativeMoney = Annotated[Decimal, Field(ge=0, max_digits=18, decimal_places=2)]


class TaxCalculationCreate(CamelModel):
    tax_type: TaxType
    calculation_type: CalculationType
    period: str = Field(..., min_length=1, max_length=16)
    year: int = Field(..., ge=1900, le=9999)
    gross_income: NonNegativeMoney
    deductible_expenses: NonNegativeMoney = Decimal(0)
    tax_deductions: NonNegativeMoney = Decimal(0)
    tax_credits: NonNegativeMoney = Decimal(0)
    previous_tax_paid: NonNegativeMoney = Decimal(0)
    notes: str | None = None


class TaxCalculationUpdate(CamelModel):
    tax_type: TaxType | None = None
    calculation_type: CalculationType | None = None
    period: str | None = Field(default=None, min_length=1, max_length=16)
    year: int | None = Field(default=None, ge=1900, le=9999)
    gross_income: NonNegativeMoney | None = None
    deductible_expenses: NonNegativeMoney | None = None
    tax_deductions: NonNegativeMoney | None = None
    tax_credits: NonNegativeMoney | None = None
    previous_tax_paid: NonNegativeMoney | None = None
    status: TaxCalculationStatus | None = None
    notes: str | None = None
