"""
Dues Reconciliation Engine.

Turns a member's membership-due ledger entries for one year into a
month-by-month due/paid/status schedule. Read-only and stateless: the
schedule is rebuilt from the full payment list on every call because
allocation depends on payment order.

Allocation rule, applied to payments in ascending entry_date order:
    1. top up months that are due (oldest first) until the payment runs out;
    2. pre-pay upcoming months, oldest first, up to the monthly pledge each;
    3. anything still left is credited to the payment's own month.
A negative amount (refund/debit) withdraws credit from the latest credited
months first, which can turn a paid month back into a due one.
"""

import enum
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from functools import reduce
from typing import Iterable, Optional, Sequence, Tuple

from backend.app.models.ledger_enums import LedgerCategory

MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

ZERO = Decimal("0")
CENTS = Decimal("0.01")


class MonthState(str, enum.Enum):
    PAID = "paid"
    DUE = "due"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class Payment:
    entry_date: date
    amount: Decimal


@dataclass(frozen=True)
class MonthStatus:
    month: int
    due: Decimal
    paid: Decimal
    status: MonthState

    @property
    def name(self) -> str:
        return MONTH_NAMES[self.month - 1]

    @property
    def is_future_month(self) -> bool:
        return self.status == MonthState.UPCOMING


@dataclass(frozen=True)
class MemberDuesSchedule:
    member_id: int
    year: int
    monthly_pledge: Decimal
    month_statuses: Tuple[MonthStatus, ...]
    total_amount_due: Decimal
    total_collected: Decimal
    balance_due: Decimal
    future_dues: Decimal

    @property
    def dues_progress(self) -> Decimal:
        """Collected as a percentage of what is due so far."""
        if self.total_amount_due <= 0:
            return ZERO
        return (self.total_collected * 100 / self.total_amount_due).quantize(CENTS, rounding=ROUND_HALF_UP)


def month_status(due: Decimal, paid: Decimal) -> MonthState:
    if due <= 0:
        return MonthState.UPCOMING
    if paid >= due:
        return MonthState.PAID
    return MonthState.DUE


def monthly_dues(year: int, monthly_pledge: Decimal, today: date) -> Tuple[Decimal, ...]:
    """Months up to and including today's month owe the pledge; later months owe nothing yet."""
    return tuple(
        monthly_pledge if monthly_pledge > 0 and (year, month) <= (today.year, today.month) else ZERO
        for month in range(1, 13)
    )


def _credit(paid: Sequence[Decimal], payment: Payment, dues: Sequence[Decimal], pledge: Decimal) -> Tuple[Decimal, ...]:
    months = list(paid)
    remaining = payment.amount

    for i in range(12):
        if remaining <= 0:
            break
        if dues[i] > 0 and months[i] < dues[i]:
            take = min(remaining, dues[i] - months[i])
            months[i] += take
            remaining -= take

    if pledge > 0:
        for i in range(12):
            if remaining <= 0:
                break
            if dues[i] == 0 and months[i] < pledge:
                take = min(remaining, pledge - months[i])
                months[i] += take
                remaining -= take

    if remaining > 0:
        months[payment.entry_date.month - 1] += remaining
    return tuple(months)


def _debit(paid: Sequence[Decimal], payment: Payment) -> Tuple[Decimal, ...]:
    months = list(paid)
    remaining = -payment.amount

    for i in reversed(range(12)):
        if remaining <= 0:
            break
        if months[i] > 0:
            take = min(remaining, months[i])
            months[i] -= take
            remaining -= take

    if remaining > 0:
        months[payment.entry_date.month - 1] -= remaining
    return tuple(months)


def allocate_payments(
    payments: Iterable[Payment],
    dues: Sequence[Decimal],
    monthly_pledge: Decimal = ZERO,
) -> Tuple[Decimal, ...]:
    """Fold payments (sorted by date) into a 12-month paid vector."""
    def step(paid: Tuple[Decimal, ...], payment: Payment) -> Tuple[Decimal, ...]:
        if payment.amount >= 0:
            return _credit(paid, payment, dues, monthly_pledge)
        return _debit(paid, payment)

    ordered = sorted(payments, key=lambda p: p.entry_date)
    return reduce(step, ordered, (ZERO,) * 12)


def dues_payments(ledger_entries: Iterable, member_id: int, year: int) -> Tuple[Payment, ...]:
    """Membership-due entries of one member dated within ``year``."""
    return tuple(
        Payment(entry.entry_date, Decimal(entry.amount))
        for entry in ledger_entries
        if entry.member_id == member_id
        and entry.entry_date.year == year
        and LedgerCategory(entry.category) == LedgerCategory.MEMBERSHIP_DUE
    )


def compute_schedule(
    member_id: int,
    year: int,
    monthly_pledge: Optional[Decimal],
    ledger_entries: Iterable,
    today: Optional[date] = None,
) -> MemberDuesSchedule:
    """
    Build the dues schedule for one member and year.

    ``ledger_entries`` may contain other members, years and categories;
    only matching membership dues are considered. ``today`` decides which
    months are already due and defaults to the real current date.
    """
    today = today or date.today()
    pledge = Decimal(monthly_pledge) if monthly_pledge else ZERO

    dues = monthly_dues(year, pledge, today)
    paid = allocate_payments(dues_payments(ledger_entries, member_id, year), dues, pledge)

    statuses = tuple(
        MonthStatus(month=i + 1, due=dues[i], paid=paid[i], status=month_status(dues[i], paid[i]))
        for i in range(12)
    )
    total_due = sum(dues, ZERO)
    total_collected = sum(paid, ZERO)

    return MemberDuesSchedule(
        member_id=member_id,
        year=year,
        monthly_pledge=pledge,
        month_statuses=statuses,
        total_amount_due=total_due,
        total_collected=total_collected,
        balance_due=max(ZERO, total_due - total_collected),
        # Upcoming months carry no due yet; kept for a future pre-billing policy
        future_dues=sum((s.due for s in statuses if s.status == MonthState.UPCOMING), ZERO),
    )
