"""
Candidate ledger entries produced by the import adapters.
"""

import enum
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from backend.app.models.ledger_enums import (
    Fund, LedgerCategory, LedgerEntryType, PaymentMethod, PaymentStatus, SourceSystem
)


class SkipReason(str, enum.Enum):
    """Why a source row did not become a ledger entry."""
    DUPLICATE = "duplicate"
    MISSING_EXTERNAL_ID = "missing_external_id"
    INVALID_EXTERNAL_ID = "invalid_external_id"
    INVALID_AMOUNT = "invalid_amount"
    BAD_DATE = "bad_date"
    MISSING_PHONE = "missing_phone"
    UNMATCHED_MEMBER = "unmatched_member"
    INELIGIBLE = "ineligible"
    MALFORMED_ROW = "malformed_row"


class RowRejected(Exception):
    """A single malformed source row. Never aborts a batch."""

    def __init__(self, reason: SkipReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


@dataclass(frozen=True)
class CandidateEntry:
    entry_date: Optional[date]
    amount: Decimal
    category: LedgerCategory
    payment_method: PaymentMethod
    source_system: SourceSystem
    fund: Fund = Fund.GENERAL
    entry_type: LedgerEntryType = LedgerEntryType.INCOME
    currency: str = "USD"
    status: PaymentStatus = PaymentStatus.SUCCEEDED
    external_id: Optional[str] = None
    member_id: Optional[int] = None
    collected_by: Optional[int] = None
    transaction_id: Optional[int] = None
    receipt_number: Optional[str] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Source bookkeeping, not persisted
    line: Optional[int] = None
    phone: Optional[str] = None
    sender: Optional[str] = None
