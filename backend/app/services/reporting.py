"""
Reporting Service.

Read-only projections of the ledger: the per-member dues view, the member
roster CSV and the post-import verification counts. Nothing is cached;
every call reads the store again.
"""

import csv
import io
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import extract, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.domain.dues.reconciliation import ZERO, compute_schedule
from backend.app.models.ledger_entry import LedgerEntry
from backend.app.models.ledger_enums import LedgerCategory
from backend.app.models.transaction import Transaction
from backend.app.services import ledger_store
from backend.app.services import members as member_service
from backend.app.services.audit import IMPORT_ACTIONS, get_audit_trail
from backend.app.schemas.dues import (
    MemberDuesResponse, MemberInfo, MemberTransaction, MonthStatusResponse,
    OtherContributions, PaymentSummary,
)
from backend.app.schemas.ledger import ImportRun, LedgerEntrySample, LedgerVerification

ROSTER_COLUMNS = ("phone_number", "member_id", "first_name", "last_name", "spouse_name")

# Legacy ACH payments settle days later
PENDING_METHODS = frozenset({"ach"})


def display_status(payment_method: Optional[str]) -> str:
    if (payment_method or "").strip().lower() in PENDING_METHODS:
        return "Pending"
    return "Succeeded"


def roster_row(member) -> List:
    return [
        member.phone_number or "",
        member.id,
        member.first_name or "",
        member.last_name or "",
        member.spouse_name or "",
    ]


def write_roster_csv(members, stream) -> int:
    """Write the roster to ``stream``; returns the number of member rows."""
    writer = csv.writer(stream, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(ROSTER_COLUMNS)
    count = 0
    for member in members:
        writer.writerow(roster_row(member))
        count += 1
    return count


def _category_value(category) -> str:
    return getattr(category, "value", category)


def member_transactions(transactions, entries) -> List[MemberTransaction]:
    """
    Legacy transactions plus the ledger entries that did not come from one
    (bank CSV and Zelle imports, manual entries), newest first.
    """
    rows = [
        MemberTransaction(
            id=tx.id,
            payment_date=tx.payment_date,
            amount=float(tx.amount),
            payment_type=tx.payment_type,
            payment_method=tx.payment_method,
            status=display_status(tx.payment_method),
            receipt_number=tx.receipt_number,
            note=tx.note,
        )
        for tx in transactions
    ]
    rows.extend(
        MemberTransaction(
            id=entry.id,
            source="ledger",
            payment_date=entry.entry_date,
            amount=float(entry.amount),
            payment_type=_category_value(entry.category),
            payment_method=_category_value(entry.payment_method),
            status=_category_value(entry.status).capitalize(),
            receipt_number=entry.receipt_number,
            note=entry.note,
        )
        for entry in entries
        if entry.transaction_id is None
    )
    rows.sort(key=lambda row: row.payment_date, reverse=True)
    return rows


class ReportingService:

    @staticmethod
    async def get_member_dues(
        db: AsyncSession,
        member_id: int,
        year: int,
        monthly_pledge: Optional[Decimal] = None,
        today: Optional[date] = None,
    ) -> MemberDuesResponse:
        """Dues schedule, other giving and the payment list for one member-year."""
        member = await member_service.get_member(db, member_id)
        if member is None:
            raise ResourceNotFoundError("Member", member_id)

        pledge = monthly_pledge if monthly_pledge is not None else member.monthly_pledge
        entries = await ledger_store.entries_for_member_year(db, member_id, year)
        schedule = compute_schedule(member_id, year, pledge, entries, today=today)

        # Everything that is not a membership due
        by_category = defaultdict(lambda: ZERO)
        for entry in entries:
            if LedgerCategory(entry.category) != LedgerCategory.MEMBERSHIP_DUE:
                by_category[_category_value(entry.category)] += Decimal(entry.amount)
        total_other = sum(by_category.values(), ZERO)

        tx_query = (
            select(Transaction)
            .where(Transaction.member_id == member_id, extract("year", Transaction.payment_date) == year)
            .order_by(Transaction.payment_date.desc(), Transaction.id.desc())
        )
        transactions = (await db.execute(tx_query)).scalars().all()

        summary = PaymentSummary(
            year=year,
            annual_pledge=float(schedule.monthly_pledge * 12),
            monthly_payment=float(schedule.monthly_pledge),
            total_amount_due=float(schedule.total_amount_due),
            dues_collected=float(schedule.total_collected),
            outstanding_dues=float(schedule.balance_due),
            dues_progress=float(schedule.dues_progress),
            future_dues=float(schedule.future_dues),
            month_statuses=[
                MonthStatusResponse(
                    month=status.month,
                    name=status.name,
                    due=float(status.due),
                    paid=float(status.paid),
                    status=status.status.value,
                    is_future_month=status.is_future_month,
                )
                for status in schedule.month_statuses
            ],
            other_contributions=OtherContributions(
                by_category={category: float(amount) for category, amount in by_category.items()},
                total_other_contributions=float(total_other),
                grand_total=float(schedule.total_collected + total_other),
            ),
        )

        return MemberDuesResponse(
            member=MemberInfo(
                id=member.id,
                first_name=member.first_name,
                last_name=member.last_name,
                full_name=member.full_name,
                email=member.email,
                phone_number=member.phone_number,
            ),
            payment_summary=summary,
            transactions=member_transactions(transactions, entries),
        )

    @staticmethod
    async def export_roster_csv(db: AsyncSession) -> str:
        buffer = io.StringIO()
        write_roster_csv(await member_service.list_members(db), buffer)
        return buffer.getvalue()

    @staticmethod
    async def verify_ledger(db: AsyncSession, sample: int = 5) -> LedgerVerification:
        """Row counts used to confirm expected volumes after an import."""
        rows = await ledger_store.sample_entries(db, sample)
        return LedgerVerification(
            total_entries=await ledger_store.count_entries(db),
            with_external_id=await ledger_store.count_with_external_id(db),
            by_source_system=await ledger_store.count_by(db, LedgerEntry.source_system),
            by_category=await ledger_store.count_by(db, LedgerEntry.category),
            sample=[
                LedgerEntrySample(
                    id=row.id,
                    entry_date=row.entry_date,
                    amount=float(row.amount),
                    category=_category_value(row.category),
                    source_system=_category_value(row.source_system),
                    payment_method=_category_value(row.payment_method),
                    external_id=row.external_id,
                    member_id=row.member_id,
                    note=row.note,
                )
                for row in rows
            ],
        )

    @staticmethod
    async def list_import_runs(db: AsyncSession, limit: int = 50) -> List[ImportRun]:
        logs = await get_audit_trail(db, actions=IMPORT_ACTIONS, limit=limit)
        return [
            ImportRun(
                id=log.id,
                action=log.action,
                actor_id=log.actor_id,
                source=log.source,
                summary=log.meta_data,
                timestamp=log.timestamp,
            )
            for log in logs
        ]
