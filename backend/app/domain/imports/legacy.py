"""
Legacy transaction migration adapter.

Copies rows of the old ``transactions`` table into the ledger. Refunds
(negative amounts) are carried over; zero amounts are not.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.domain.imports.base import ImportAdapter
from backend.app.domain.ledger.candidate import CandidateEntry, RowRejected, SkipReason
from backend.app.domain.ledger.mapping import (
    derive_fund, infer_source_system, map_category, map_payment_method, receipt_number_for
)
from backend.app.models.ledger_enums import PaymentStatus
from backend.app.services import ledger_store
from backend.app.services.audit import AuditAction

PAYMENT_STATUSES = {status.value: status for status in PaymentStatus}


class LegacyTransactionAdapter(ImportAdapter):
    source_name = "transactions"
    audit_action = AuditAction.LEDGER_BACKFILL_COMPLETED

    def __init__(self, operator_id: Optional[int] = None):
        self.operator_id = operator_id if operator_id is not None else settings.import_operator_id

    async def load(self, db: AsyncSession):
        return await ledger_store.fetch_transactions(db)

    def parse(self, raw_row: Any) -> Optional[CandidateEntry]:
        if raw_row.payment_date is None:
            raise RowRejected(SkipReason.BAD_DATE, f"transaction {raw_row.id}")
        try:
            amount = Decimal(str(raw_row.amount))
        except (InvalidOperation, TypeError):
            raise RowRejected(SkipReason.INVALID_AMOUNT, f"transaction {raw_row.id}")

        external_id = (raw_row.external_id or "").strip() or None
        status = PAYMENT_STATUSES.get((raw_row.status or "").lower(), PaymentStatus.SUCCEEDED)

        return CandidateEntry(
            entry_date=raw_row.payment_date,
            amount=amount,
            category=map_category(raw_row.payment_type),
            payment_method=map_payment_method(raw_row.payment_method),
            source_system=infer_source_system(external_id),
            fund=derive_fund(raw_row.payment_type),
            status=status,
            external_id=external_id,
            member_id=raw_row.member_id,
            collected_by=raw_row.collected_by or self.operator_id,
            transaction_id=raw_row.id,
            receipt_number=receipt_number_for(raw_row.payment_method, raw_row.receipt_number),
            note=raw_row.note,
            created_at=raw_row.created_at,
            updated_at=raw_row.updated_at,
            line=raw_row.id,
        )
