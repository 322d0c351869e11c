"""
Ledger Entry database model.

The canonical record of money received by the church.
"""

import uuid
from sqlalchemy import Column, Integer, Numeric, ForeignKey, Date, DateTime, Enum, Index, String, Text, Uuid, text
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.ledger_enums import (
    LedgerEntryType, Fund, LedgerCategory, PaymentMethod, SourceSystem, PaymentStatus, enum_values
)


def _enum(enum_cls, name: str) -> Enum:
    return Enum(enum_cls, name=name, values_callable=enum_values, native_enum=False, length=32)


class LedgerEntry(Base):
    """
    Ledger Entry model.

    Append-mostly record of a financial event attributed to a member (or the
    church when member_id is null). external_id, when present, identifies the
    originating payment-system event and is unique across the whole table;
    it is the deduplication key for every importer.
    """
    __tablename__ = "ledger_entries"
    __table_args__ = (
        Index(
            "uq_ledger_entries_external_id",
            "external_id",
            unique=True,
            postgresql_where=text("external_id IS NOT NULL"),
            sqlite_where=text("external_id IS NOT NULL"),
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    entry_date = Column(Date, nullable=False, index=True)
    type = Column(_enum(LedgerEntryType, "ledger_entry_type"), nullable=False, default=LedgerEntryType.INCOME)

    # Financials (signed: debits negative, credits positive)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    fund = Column(_enum(Fund, "ledger_fund"), nullable=False, default=Fund.GENERAL)
    category = Column(_enum(LedgerCategory, "ledger_category"), nullable=False, index=True)

    # Linkage
    member_id = Column(Integer, ForeignKey("members.id", ondelete="SET NULL"), nullable=True, index=True)
    collected_by = Column(Integer, nullable=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True, index=True)

    # Provenance / reconciliation
    source_system = Column(_enum(SourceSystem, "ledger_source_system"), nullable=False, default=SourceSystem.MANUAL)
    external_id = Column(String(191), nullable=True)
    payment_method = Column(_enum(PaymentMethod, "ledger_payment_method"), nullable=False, default=PaymentMethod.OTHER)
    status = Column(_enum(PaymentStatus, "ledger_payment_status"), nullable=False, default=PaymentStatus.SUCCEEDED)
    receipt_number = Column(String(100), nullable=True)
    bank_txn_id = Column(String(191), nullable=True, index=True)
    note = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<LedgerEntry(id={self.id}, category='{self.category.value}', amount={self.amount})>"
