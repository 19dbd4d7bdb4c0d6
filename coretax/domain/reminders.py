"""SPT deadline and pending payment reminders.

Reminders are derived on request from tax reports and payments; nothing is
stored. Due dates:

- monthly returns (PPN, PPh 21, PPh 23) are due on the 20th of the month
  after the period;
- PPh 25 annual returns are due on 31 March of the following year;
- anything else is treated as due 30 days from now.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Final, Literal

from coretax.domain.enums import TaxType

MONTHLY_TYPES: Final = frozenset({TaxType.PPN, TaxType.PPH_21, TaxType.PPH_23})
ANNUAL_TYPES: Final = frozenset({TaxType.PPH_25})
REMINDER_WINDOW_DAYS: Final = 7
HIGH_PRIORITY_DAYS: Final = 3
MONTHLY_DUE_DAY: Final = 20
DEFAULT_DUE_DAYS: Final = 30
SECONDS_PER_DAY: Final = 86_400

type ReminderCategory = Literal["spt", "payment"]
type ReminderPriority = Literal["high", "medium"]


@dataclass(frozen=True, slots=True)
class Reminder:
    id: str
    title: str
    message: str
    category: ReminderCategory
    priority: ReminderPriority
    reference_id: int
    due_date: datetime | None = None
    days_until_due: int | None = None
    days_pending: int | None = None
    type: str = "REMINDER"


def _ceil_days(delta: timedelta) -> int:
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def spt_due_date(tax_type: str, period: str, year: int, now: datetime) -> datetime:
    """Filing deadline for a return of ``tax_type`` covering ``period``/``year``."""
    if tax_type in MONTHLY_TYPES:
        month = int(period)
        due_year, due_month = (year + 1, 1) if month >= 12 else (year, month + 1)
        return now.replace(year=due_year, month=due_month, day=MONTHLY_DUE_DAY)
    if tax_type in ANNUAL_TYPES:
        return now.replace(year=year + 1, month=3, day=31)
    return now + timedelta(days=DEFAULT_DUE_DAYS)


def spt_reminder(
    report_id: int, tax_type: str, period: str, year: int, now: datetime
) -> Reminder | None:
    """Reminder for a return due within the next week, else None."""
    due = spt_due_date(tax_type, period, year, now)
    days = _ceil_days(due - now)
    if not 0 <= days <= REMINDER_WINDOW_DAYS:
        return None
    return Reminder(
        id=f"SPT_REMINDER_{report_id}",
        title=f"Jatuh Tempo SPT {tax_type}",
        message=(
            f"SPT {tax_type} periode {period}/{year} akan jatuh tempo "
            f"dalam {days} hari"
        ),
        category="spt",
        priority="high" if days <= HIGH_PRIORITY_DAYS else "medium",
        reference_id=report_id,
        due_date=due,
        days_until_due=days,
    )


def format_rupiah(amount: Decimal) -> str:
    """Format an amount the Indonesian way: ``1.250.000``."""
    return f"{int(amount):,}".replace(",", ".")


def payment_reminder(
    payment_id: int, amount: Decimal, created_at: datetime, now: datetime
) -> Reminder | None:
    """Reminder for a payment pending at least one day, else None."""
    days = _ceil_days(now - created_at)
    if days < 1:
        return None
    return Reminder(
        id=f"PAYMENT_REMINDER_{payment_id}",
        title="Pembayaran Tertunda",
        message=(
            f"Pembayaran sebesar Rp{format_rupiah(amount)} telah tertunda "
            f"selama {days} hari"
        ),
        category="payment",
        priority="high" if days >= HIGH_PRIORITY_DAYS else "medium",
        reference_id=payment_id,
        days_pending=days,
    )
