"""
Bank-exported Zelle activity CSV adapter.

The bank export is not proper CSV: the sender name column may contain
unquoted commas. Lines are therefore split naively and read from both
ends. The last six columns are the ones we append when matching a line
to a member:

    member_id, phone_number, first_name, middle_name, last_name, match_source

Everything before them is the bank's own row, of which we need
the posting date (first), the confirmation number (second to last) and
the amount (last). The sender name is whatever lies in between.
"""

import os
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import ImportSourceError
from backend.app.domain.imports.base import ImportAdapter, logger
from backend.app.domain.ledger.batch import BatchResult
from backend.app.domain.ledger.candidate import CandidateEntry, RowRejected, SkipReason
from backend.app.domain.ledger.gate import GatePolicy
from backend.app.models.ledger_enums import LedgerCategory, PaymentMethod, PaymentStatus, SourceSystem
from backend.app.services import members as member_service
from backend.app.services.audit import AuditAction

MIN_COLUMNS = 10
MATCH_COLUMNS = 6
MIN_BANK_COLUMNS = 4

POSTING_DATE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")

BANK_RECEIPT_NUMBER = "imported"
BANK_NOTE = "imported from bank csv"
NOT_A_NUMBER = Decimal("NaN")


def parse_posting_date(value: str) -> Optional[date]:
    """MM/DD/YYYY, or None when unreadable."""
    match = POSTING_DATE.match(value.strip())
    if not match:
        return None
    month, day, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_amount(value: str) -> Decimal:
    """The amount, or NaN when unreadable."""
    try:
        return Decimal(value.strip())
    except InvalidOperation:
        return NOT_A_NUMBER


def split_line(line: str) -> Optional[Tuple[List[str], List[str]]]:
    """Split into (bank columns, match columns) or None when the line is too short."""
    parts = line.split(",")
    if len(parts) < MIN_COLUMNS:
        return None
    bank, matched = parts[:-MATCH_COLUMNS], parts[-MATCH_COLUMNS:]
    if len(bank) < MIN_BANK_COLUMNS:
        return None
    return bank, matched


class BankCsvZelleAdapter(ImportAdapter):
    source_name = "bank_csv"
    audit_action = AuditAction.BANK_CSV_IMPORT_COMPLETED

    def __init__(self, path: Optional[str] = None, operator_id: Optional[int] = None,
                 min_confirmation_length: Optional[int] = None):
        self.path = path or settings.bank_csv_path
        self.operator_id = operator_id if operator_id is not None else settings.import_operator_id
        self.policy = GatePolicy(
            require_external_id=True,
            min_external_id_length=min_confirmation_length or settings.min_confirmation_length,
            positive_only=True,
        )

    def describe_source(self) -> str:
        return self.path

    async def load(self, db: AsyncSession):
        return self.read_lines()

    def read_lines(self) -> List[Tuple[int, str]]:
        """Non-empty data lines with their 1-based line numbers, header dropped."""
        if not os.path.exists(self.path):
            raise ImportSourceError(f"Bank CSV not found: {self.path}", path=self.path)
        with open(self.path, "r", encoding="utf-8-sig") as f:
            lines = [(number, line.rstrip("\r\n")) for number, line in enumerate(f, start=1)]
        lines = [(number, line) for number, line in lines if line.strip()]
        if len(lines) <= 1:
            raise ImportSourceError(f"Bank CSV has no data rows: {self.path}", path=self.path)
        return lines[1:]

    def parse(self, raw_row: Tuple[int, str]) -> Optional[CandidateEntry]:
        number, line = raw_row
        split = split_line(line)
        if split is None:
            return None
        bank, matched = split

        member_ref = matched[0].strip()
        phone = matched[1].strip()
        if not member_ref or not phone:
            raise RowRejected(SkipReason.INELIGIBLE, f"line {number}: no member match")
        try:
            member_id = int(member_ref)
        except ValueError:
            raise RowRejected(SkipReason.INELIGIBLE, f"line {number}: member_id {member_ref!r}")

        # Unreadable amounts and dates are rejected by the gate, after the
        # confirmation number checks
        amount = parse_amount(bank[-1])
        entry_date = parse_posting_date(bank[0])
        confirmation = bank[-2].strip()

        return CandidateEntry(
            entry_date=entry_date,
            amount=amount,
            category=LedgerCategory.MEMBERSHIP_DUE,
            payment_method=PaymentMethod.ZELLE,
            source_system=SourceSystem.ZELLE,
            status=PaymentStatus.SUCCEEDED,
            external_id=confirmation or None,
            member_id=member_id,
            collected_by=self.operator_id,
            receipt_number=BANK_RECEIPT_NUMBER,
            note=BANK_NOTE,
            line=number,
            phone=phone,
            sender=",".join(bank[1:-2]).strip(),
        )

    async def resolve(self, db: AsyncSession, candidates: List[CandidateEntry], result: BatchResult):
        known = await member_service.existing_member_ids(db, (c.member_id for c in candidates))
        resolved = []
        for candidate in candidates:
            if candidate.member_id in known:
                resolved.append(candidate)
                continue
            logger.info("line %s: member %s not found", candidate.line, candidate.member_id)
            result = result.record_skip(SkipReason.UNMATCHED_MEMBER, phone=candidate.phone)
        return resolved, result

