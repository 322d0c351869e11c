"""
Audit Log Database Model.

Records operator-run batch jobs (ledger imports, phone normalizations)
together with their summary counts.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from backend.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model for batch job runs.

    Events logged:
    - LEDGER_BACKFILL_COMPLETED
    - BANK_CSV_IMPORT_COMPLETED / NAMED_ZELLE_IMPORT_COMPLETED
    - DEPENDENT_PHONES_NORMALIZED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Operator who ran the job (None for system actions)
    actor_id = Column(Integer, index=True, nullable=True)

    action = Column(String(100), nullable=False, index=True)

    # Source file or table the job read
    source = Column(String(255), nullable=True)

    # Summary counts (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_id})>"
