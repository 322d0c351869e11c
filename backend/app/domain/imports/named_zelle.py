"""
Named Zelle payments CSV adapter.

A hand-maintained sheet with a header row:

    Month, Date, Sender, Code, Amount, Matched Name, Phone, ...

Date is M/D without a year; the year is supplied by the operator.
Members are resolved by exact match on the normalized phone.
"""

import csv
import os
import re
from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import ImportSourceError
from backend.app.domain.imports.base import ImportAdapter, logger
from backend.app.domain.ledger.batch import BatchResult
from backend.app.domain.ledger.candidate import CandidateEntry, RowRejected, SkipReason
from backend.app.domain.ledger.gate import GatePolicy
from backend.app.domain.phones import normalize_to_e164
from backend.app.models.ledger_enums import LedgerCategory, PaymentMethod, PaymentStatus, SourceSystem
from backend.app.services import members as member_service
from backend.app.services.audit import AuditAction

MONTH_DAY = re.compile(r"^(\d{1,2})/(\d{1,2})$")


class NamedZelleCsvAdapter(ImportAdapter):
    source_name = "named_zelle_csv"
    audit_action = AuditAction.NAMED_ZELLE_IMPORT_COMPLETED
    policy = GatePolicy(require_external_id=True, positive_only=True)

    def __init__(self, path: Optional[str] = None, year: Optional[int] = None,
                 operator_id: Optional[int] = None):
        self.path = path or settings.named_zelle_csv_path
        self.year = year or settings.named_zelle_year or date.today().year
        self.operator_id = operator_id if operator_id is not None else settings.import_operator_id

    def describe_source(self) -> str:
        return self.path

    async def load(self, db: AsyncSession):
        return self.read_rows()

    def read_rows(self) -> List[Tuple[int, Dict[str, str]]]:
        if not os.path.exists(self.path):
            raise ImportSourceError(f"Zelle CSV not found: {self.path}", path=self.path)
        with open(self.path, newline="", encoding="utf-8-sig") as f:
            # Line 1 is the header
            rows = [(number, row) for number, row in enumerate(csv.DictReader(f), start=2)]
        if not rows:
            raise ImportSourceError(f"Zelle CSV has no data rows: {self.path}", path=self.path)
        return rows

    def parse_date(self, value: str) -> date:
        match = MONTH_DAY.match((value or "").strip())
        if not match:
            raise RowRejected(SkipReason.BAD_DATE, value or "")
        month, day = (int(part) for part in match.groups())
        try:
            return date(self.year, month, day)
        except ValueError:
            raise RowRejected(SkipReason.BAD_DATE, value)

    def parse(self, raw_row: Tuple[int, Dict[str, str]]) -> Optional[CandidateEntry]:
        number, row = raw_row
        # DictReader files surplus fields under None, e.g. an unquoted 1,250.00
        if None in row:
            raise RowRejected(SkipReason.MALFORMED_ROW, f"line {number}: more fields than the header")
        if not any((value or "").strip() for value in row.values()):
            return None

        sender = (row.get("Sender") or "").strip()
        phone = (row.get("Phone") or "").strip()
        if not phone:
            logger.info("line %s: no phone provided for sender %s", number, sender)
            raise RowRejected(SkipReason.MISSING_PHONE, f"line {number}")

        entry_date = self.parse_date(row.get("Date"))
        try:
            amount = Decimal((row.get("Amount") or "").replace("$", "").replace(",", "").strip())
        except InvalidOperation:
            raise RowRejected(SkipReason.INVALID_AMOUNT, f"line {number}")
        if not amount.is_finite():
            raise RowRejected(SkipReason.INVALID_AMOUNT, f"line {number}")

        return CandidateEntry(
            entry_date=entry_date,
            amount=amount,
            category=LedgerCategory.MEMBERSHIP_DUE,
            payment_method=PaymentMethod.ZELLE,
            source_system=SourceSystem.ZELLE,
            status=PaymentStatus.SUCCEEDED,
            external_id=(row.get("Code") or "").strip() or None,
            collected_by=self.operator_id,
            note=f"Imported from Zelle: {sender}",
            line=number,
            phone=phone,
            sender=sender,
        )

    async def resolve(self, db: AsyncSession, candidates: List[CandidateEntry], result: BatchResult):
        normalized = {c.phone: normalize_to_e164(c.phone) for c in candidates}
        by_phone = await member_service.member_ids_by_phone(db, normalized.values())

        resolved = []
        for candidate in candidates:
            member_id = by_phone.get(normalized[candidate.phone])
            if member_id is None:
                logger.info("line %s: no member with phone %s", candidate.line, candidate.phone)
                result = result.record_skip(SkipReason.UNMATCHED_MEMBER, phone=candidate.phone)
                continue
            resolved.append(replace(candidate, member_id=member_id))
        return resolved, result
