"""
Ledger store access.

All reads and writes of ledger_entries used by the importers and the
reporting surface go through here.
"""

import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy import exists, extract, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.domain.ledger.candidate import CandidateEntry
from backend.app.domain.ledger.gate import LedgerSnapshot
from backend.app.models.ledger_entry import LedgerEntry
from backend.app.models.transaction import Transaction

logger = logging.getLogger("church_ledger")


async def existing_keys(db: AsyncSession, candidates: Sequence[CandidateEntry]) -> LedgerSnapshot:
    """Fresh snapshot of the dedup keys of ``candidates`` that are already stored."""
    external_ids = {c.external_id for c in candidates if c.external_id}
    transaction_ids = {c.transaction_id for c in candidates if c.transaction_id is not None}

    found_external = []
    if external_ids:
        result = await db.execute(
            select(LedgerEntry.external_id).where(LedgerEntry.external_id.in_(external_ids))
        )
        found_external = result.scalars().all()

    found_transactions = []
    if transaction_ids:
        result = await db.execute(
            select(LedgerEntry.transaction_id).where(LedgerEntry.transaction_id.in_(transaction_ids))
        )
        found_transactions = result.scalars().all()

    return LedgerSnapshot.of(found_external, found_transactions)


def build_ledger_entry(candidate: CandidateEntry) -> LedgerEntry:
    entry = LedgerEntry(
        entry_date=candidate.entry_date,
        type=candidate.entry_type,
        amount=candidate.amount,
        currency=candidate.currency,
        fund=candidate.fund,
        category=candidate.category,
        member_id=candidate.member_id,
        collected_by=candidate.collected_by,
        transaction_id=candidate.transaction_id,
        source_system=candidate.source_system,
        external_id=candidate.external_id,
        payment_method=candidate.payment_method,
        status=candidate.status,
        receipt_number=candidate.receipt_number,
        note=candidate.note,
    )
    # Migrated rows keep their original audit timestamps
    if candidate.created_at is not None:
        entry.created_at = candidate.created_at
    if candidate.updated_at is not None:
        entry.updated_at = candidate.updated_at
    return entry


async def external_id_stored(db: AsyncSession, external_id: Optional[str]) -> bool:
    if not external_id:
        return False
    query = select(exists().where(LedgerEntry.external_id == external_id))
    return bool((await db.execute(query)).scalar())


async def insert_entry(db: AsyncSession, candidate: CandidateEntry) -> bool:
    """
    Insert one entry as its own unit of work.

    Returns False when the unique external_id index rejects the row
    (another writer stored the same event after the snapshot was taken).
    Any other integrity error is re-raised.
    """
    db.add(build_ledger_entry(candidate))
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        if not await external_id_stored(db, candidate.external_id):
            raise
        logger.warning("external_id %s already stored by another writer", candidate.external_id)
        return False
    return True


async def fetch_transactions(db: AsyncSession) -> List[Transaction]:
    """All legacy rows; already migrated ones are weeded out by the gate."""
    result = await db.execute(select(Transaction).order_by(Transaction.id))
    return list(result.scalars().all())


async def count_entries(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(LedgerEntry.id)))).scalar() or 0


async def count_with_external_id(db: AsyncSession) -> int:
    query = select(func.count(LedgerEntry.id)).where(LedgerEntry.external_id.isnot(None))
    return (await db.execute(query)).scalar() or 0


async def count_by(db: AsyncSession, column) -> Dict[str, int]:
    result = await db.execute(select(column, func.count(LedgerEntry.id)).group_by(column))
    return {getattr(key, "value", key): count for key, count in result.all()}


async def sample_entries(db: AsyncSession, limit: int = 5) -> List[LedgerEntry]:
    result = await db.execute(
        select(LedgerEntry).order_by(LedgerEntry.created_at.desc(), LedgerEntry.entry_date.desc()).limit(limit)
    )
    return list(result.scalars().all())


async def entries_for_member_year(db: AsyncSession, member_id: int, year: int) -> List[LedgerEntry]:
    result = await db.execute(
        select(LedgerEntry)
        .where(
            LedgerEntry.member_id == member_id,
            extract("year", LedgerEntry.entry_date) == year,
        )
        .order_by(LedgerEntry.entry_date)
    )
    return list(result.scalars().all())
