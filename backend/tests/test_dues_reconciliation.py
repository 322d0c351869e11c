"""
Dues Reconciliation Tests.

Pure allocation logic, no database.
"""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from backend.app.domain.dues.reconciliation import (
    MonthState, Payment, allocate_payments, compute_schedule, monthly_dues,
)
from backend.app.models.ledger_enums import LedgerCategory

MEMBER_ID = 7


def due(entry_date, amount, member_id=MEMBER_ID, category=LedgerCategory.MEMBERSHIP_DUE):
    return SimpleNamespace(member_id=member_id, entry_date=entry_date, amount=Decimal(amount), category=category)


def paid_by_month(schedule):
    return [s.paid for s in schedule.month_statuses]


def test_payment_covers_oldest_months_first():
    """One 350 payment in March with a 100 pledge, viewed in June."""
    schedule = compute_schedule(
        MEMBER_ID, 2025, Decimal("100"), [due(date(2025, 3, 10), "350")], today=date(2025, 6, 15)
    )
    months = schedule.month_statuses

    for month in months[:3]:
        assert month.status == MonthState.PAID
        assert month.due == Decimal("100")
        assert month.paid == Decimal("100")

    assert months[3].status == MonthState.DUE
    assert months[3].paid == Decimal("50")
    assert [m.status for m in months[4:6]] == [MonthState.DUE, MonthState.DUE]
    assert all(m.status == MonthState.UPCOMING and m.paid == 0 for m in months[6:])

    assert schedule.total_collected == Decimal("350")
    assert schedule.total_amount_due == Decimal("600")
    assert schedule.balance_due == Decimal("250")
    assert schedule.dues_progress == Decimal("58.33")
    assert months[0].name == "january"


def test_surplus_prepays_upcoming_months():
    schedule = compute_schedule(
        MEMBER_ID, 2025, Decimal("100"), [due(date(2025, 2, 1), "500")], today=date(2025, 2, 10)
    )
    paid = paid_by_month(schedule)

    assert paid[:5] == [Decimal("100")] * 5
    assert paid[5:] == [Decimal("0")] * 7
    # Pre-paid months are still upcoming: nothing is due for them yet
    assert schedule.month_statuses[2].status == MonthState.UPCOMING
    assert schedule.month_statuses[2].is_future_month
    assert schedule.balance_due == 0


def test_overpayment_is_credited_to_payment_month():
    schedule = compute_schedule(
        MEMBER_ID, 2025, Decimal("10"), [due(date(2025, 3, 5), "200")], today=date(2025, 12, 31)
    )
    paid = paid_by_month(schedule)

    assert paid[2] == Decimal("90")
    assert sum(paid) == Decimal("200")
    assert all(s.status == MonthState.PAID for s in schedule.month_statuses)
    assert schedule.balance_due == 0


def test_refund_withdraws_from_latest_months():
    entries = [due(date(2025, 1, 10), "300"), due(date(2025, 2, 1), "-150")]
    schedule = compute_schedule(MEMBER_ID, 2025, Decimal("100"), entries, today=date(2025, 6, 1))
    paid = paid_by_month(schedule)

    assert paid[:3] == [Decimal("100"), Decimal("50"), Decimal("0")]
    assert schedule.month_statuses[0].status == MonthState.PAID
    assert schedule.month_statuses[1].status == MonthState.DUE
    assert schedule.total_collected == Decimal("150")


def test_payments_are_applied_in_date_order():
    """A refund dated before the payment it offsets still nets out."""
    entries = [due(date(2025, 4, 1), "200"), due(date(2025, 1, 5), "-50")]
    schedule = compute_schedule(MEMBER_ID, 2025, Decimal("100"), entries, today=date(2025, 4, 30))

    assert schedule.total_collected == Decimal("150")
    assert sum(paid_by_month(schedule)) == Decimal("150")


def test_zero_pledge_never_has_balance():
    entries = [due(date(2025, 3, 1), "50"), due(date(2025, 5, 1), "-20")]
    schedule = compute_schedule(MEMBER_ID, 2025, Decimal("0"), entries, today=date(2025, 12, 1))

    assert schedule.balance_due == 0
    assert schedule.total_amount_due == 0
    assert schedule.total_collected == Decimal("30")
    assert schedule.dues_progress == 0
    assert all(s.status == MonthState.UPCOMING for s in schedule.month_statuses)


def test_missing_pledge_is_zero():
    schedule = compute_schedule(MEMBER_ID, 2025, None, [], today=date(2025, 6, 1))
    assert schedule.monthly_pledge == 0
    assert schedule.balance_due == 0


def test_future_year_has_nothing_due():
    schedule = compute_schedule(
        MEMBER_ID, 2026, Decimal("100"), [due(date(2026, 1, 3), "100")], today=date(2025, 11, 1)
    )
    assert schedule.total_amount_due == 0
    assert schedule.month_statuses[0].paid == Decimal("100")
    assert all(s.status == MonthState.UPCOMING for s in schedule.month_statuses)


def test_only_members_dues_for_the_year_count():
    entries = [
        due(date(2025, 1, 5), "100"),
        due(date(2025, 1, 6), "999", member_id=8),
        due(date(2024, 12, 30), "999"),
        due(date(2025, 2, 1), "40", category=LedgerCategory.TITHE),
        due(date(2025, 2, 2), "25", category="donation"),
    ]
    schedule = compute_schedule(MEMBER_ID, 2025, Decimal("100"), entries, today=date(2025, 2, 28))

    assert schedule.total_collected == Decimal("100")
    assert schedule.month_statuses[0].status == MonthState.PAID
    assert schedule.month_statuses[1].status == MonthState.DUE


@pytest.mark.parametrize("pledge,amounts", [
    ("100", ["350", "20", "-75", "1000"]),
    ("83.33", ["83.33", "83.33", "-200", "12.5"]),
    ("0", ["10", "-40", "15"]),
    ("250", ["-10"]),
])
def test_allocation_conserves_money(pledge, amounts):
    payments = [Payment(date(2025, i % 12 + 1, 1), Decimal(a)) for i, a in enumerate(amounts)]
    dues = monthly_dues(2025, Decimal(pledge), date(2025, 7, 1))

    paid = allocate_payments(payments, dues, Decimal(pledge))

    assert sum(paid) == sum(Decimal(a) for a in amounts)


def test_status_matches_due_and_paid():
    entries = [due(date(2025, 1, 1), "130"), due(date(2025, 3, 1), "-30"), due(date(2025, 5, 1), "400")]
    schedule = compute_schedule(MEMBER_ID, 2025, Decimal("100"), entries, today=date(2025, 5, 20))

    for s in schedule.month_statuses:
        assert (s.status == MonthState.PAID) == (s.due > 0 and s.paid >= s.due)
        assert (s.status == MonthState.UPCOMING) == (s.due == 0)
