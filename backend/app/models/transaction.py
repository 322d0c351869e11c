"""
Legacy Transaction database model.

The flat one-row-per-payment table that predates the ledger. It is the
source of the ledger backfill and of the per-member transaction list in
the dues view. Payment type and method are kept as plain strings because
the legacy data holds values the ledger enumerations do not (e.g. 'ach').
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Numeric, Text
from sqlalchemy.sql import func
from backend.app.db.session import Base


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    member_id = Column(Integer, ForeignKey("members.id", ondelete="SET NULL"), nullable=True, index=True)
    collected_by = Column(Integer, nullable=True)

    payment_date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_type = Column(String(50), nullable=False)
    payment_method = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="succeeded")

    receipt_number = Column(String(100), nullable=True)
    note = Column(Text, nullable=True)
    external_id = Column(String(191), unique=True, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Transaction(id={self.id}, type='{self.payment_type}', amount={self.amount})>"
