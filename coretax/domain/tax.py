"""Tax amount calculation.

``calculate_tax`` is a pure function of its inputs. Bracketed tax types use a
single bracket lookup: the rate of the band the taxable income falls in is
applied to the whole amount, not summed band by band. The breakdown records
this as ``method: "single_bracket"`` so stored calculations say how they were
produced.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Final

from coretax.domain.enums import TaxType

CENT: Final = Decimal("0.01")
ZERO: Final = Decimal(0)
MONTHS_PER_YEAR: Final = 12


@dataclass(frozen=True, slots=True)
class Bracket:
    """Upper bound (inclusive) of a band and its rate; ``None`` means unbounded."""

    upper: Decimal | None
    rate: Decimal


PPH_21_BRACKETS: Final = (
    Bracket(Decimal(60_000_000), Decimal("0.05")),
    Bracket(Decimal(250_000_000), Decimal("0.15")),
    Bracket(Decimal(500_000_000), Decimal("0.25")),
    Bracket(Decimal(5_000_000_000), Decimal("0.30")),
    Bracket(None, Decimal("0.35")),
)

VEHICLE_BRACKETS: Final = (
    Bracket(Decimal(100_000_000), Decimal("0.01")),
    Bracket(Decimal(250_000_000), Decimal("0.015")),
    Bracket(Decimal(500_000_000), Decimal("0.02")),
    Bracket(None, Decimal("0.025")),
)

FLAT_RATES: Final[dict[TaxType, tuple[Decimal, str]]] = {
    TaxType.PPN: (Decimal("0.11"), "PPN 11%"),
    TaxType.PPH_23: (Decimal("0.02"), "PPh Pasal 23 2% (jasa)"),
    TaxType.PBB: (Decimal("0.005"), "PBB 0.5%"),
    TaxType.BPHTB: (Decimal("0.05"), "BPHTB 5%"),
}

PPH_25_ANNUAL_RATE: Final = Decimal("0.25")
DEFAULT_RATE: Final = Decimal("0.10")


@dataclass(frozen=True, slots=True)
class TaxInputs:
    gross_income: Decimal
    tax_type: TaxType | str
    deductible_expenses: Decimal = ZERO
    tax_deductions: Decimal = ZERO
    tax_credits: Decimal = ZERO
    previous_tax_paid: Decimal = ZERO


@dataclass(frozen=True, slots=True)
class TaxResult:
    taxable_income: Decimal
    tax_rate: Decimal
    calculated_tax: Decimal
    final_tax_amount: Decimal
    breakdown: dict[str, Any]


def money(value: Decimal | int | float | str) -> Decimal:
    """Quantise to cents, rounding half up."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def bracket_rate(amount: Decimal, brackets: tuple[Bracket, ...]) -> Decimal:
    """Rate of the single band ``amount`` falls in."""
    for bracket in brackets:
        if bracket.upper is None or amount <= bracket.upper:
            return bracket.rate
    return brackets[-1].rate


def _describe(brackets: tuple[Bracket, ...]) -> list[dict[str, float]]:
    described: list[dict[str, float]] = []
    previous: Decimal | None = None
    for bracket in brackets:
        if bracket.upper is None:
            described.append({"above": float(previous or 0), "rate": float(bracket.rate)})
        else:
            described.append({"max": float(bracket.upper), "rate": float(bracket.rate)})
            previous = bracket.upper
    return described


def _rate_for(tax_type: TaxType | str, taxable: Decimal) -> tuple[Decimal, Decimal, dict[str, Any]]:
    """Return (rate, calculated tax, breakdown head) for one tax type."""
    match tax_type:
        case TaxType.PPH_21:
            rate = bracket_rate(taxable, PPH_21_BRACKETS)
            head = {"method": "single_bracket", "brackets": _describe(PPH_21_BRACKETS)}
            return rate, taxable * rate, head
        case TaxType.PAJAK_KENDARAAN:
            rate = bracket_rate(taxable, VEHICLE_BRACKETS)
            head = {"method": "single_bracket", "brackets": _describe(VEHICLE_BRACKETS)}
            return rate, taxable * rate, head
        case TaxType.PPH_25:
            head = {
                "method": "monthly_installment",
                "annualRate": float(PPH_25_ANNUAL_RATE),
                "description": "PPh Pasal 25 - Angsuran bulanan",
            }
            return PPH_25_ANNUAL_RATE, taxable * PPH_25_ANNUAL_RATE / MONTHS_PER_YEAR, head
        case flat if flat in FLAT_RATES:
            rate, description = FLAT_RATES[TaxType(flat)]
            head = {"method": "flat", "rate": float(rate), "description": description}
            return rate, taxable * rate, head
        case _:
            head = {
                "method": "default",
                "rate": float(DEFAULT_RATE),
                "description": "Default tax rate 10%",
            }
            return DEFAULT_RATE, taxable * DEFAULT_RATE, head


def calculate_tax(inputs: TaxInputs) -> TaxResult:
    """Compute taxable income, rate, pre-deduction tax and final amount.

    Deductions, credits and previous payments are subtracted in that order
    and the running amount is floored at zero after each step, so the final
    amount is never negative.

    Example:
        >>> result = calculate_tax(TaxInputs(Decimal(70_000_000), TaxType.PPH_21))
        >>> result.tax_rate, result.final_tax_amount
        (Decimal('0.15'), Decimal('10500000.00'))
    """
    gross = money(inputs.gross_income)
    expenses = money(inputs.deductible_expenses)
    deductions = money(inputs.tax_deductions)
    credits = money(inputs.tax_credits)
    previous = money(inputs.previous_tax_paid)

    taxable = max(ZERO, gross - expenses)
    rate, raw_tax, head = _rate_for(inputs.tax_type, taxable)
    calculated = money(raw_tax)

    remaining = max(ZERO, calculated - deductions)
    remaining = max(ZERO, remaining - credits)
    final = max(ZERO, remaining - previous)

    breakdown = {
        **head,
        "grossIncome": float(gross),
        "deductibleExpenses": float(expenses),
        "taxDeductions": float(deductions),
        "taxCredits": float(credits),
        "previousTaxPaid": float(previous),
        "calculatedTaxBeforeDeductions": float(calculated),
        "finalTaxAmount": float(final),
    }

    return TaxResult(
        taxable_income=money(taxable),
        tax_rate=rate,
        calculated_tax=calculated,
        final_tax_amount=money(final),
        breakdown=breakdown,
    )
