"""
Audit logging service for operator batch jobs.

Every import or normalization that writes to the database leaves one
audit row carrying its summary counts.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from backend.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    LEDGER_BACKFILL_COMPLETED = "LEDGER_BACKFILL_COMPLETED"
    BANK_CSV_IMPORT_COMPLETED = "BANK_CSV_IMPORT_COMPLETED"
    NAMED_ZELLE_IMPORT_COMPLETED = "NAMED_ZELLE_IMPORT_COMPLETED"
    DEPENDENT_PHONES_NORMALIZED = "DEPENDENT_PHONES_NORMALIZED"


IMPORT_ACTIONS = (
    AuditAction.LEDGER_BACKFILL_COMPLETED,
    AuditAction.BANK_CSV_IMPORT_COMPLETED,
    AuditAction.NAMED_ZELLE_IMPORT_COMPLETED,
)


async def log_event(
    db: AsyncSession,
    action: str,
    actor_id: Optional[int] = None,
    source: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """
    Record a batch job run.

    Args:
        db: Database session
        action: Action performed (use AuditAction constants)
        actor_id: Operator the job ran as
        source: File path or table the job read
        metadata: Summary counts as JSON

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        action=action,
        source=source,
        meta_data=metadata,
    )

    db.add(audit_log)
    await db.commit()
    await db.refresh(audit_log)

    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    actions: Optional[tuple] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail, most recent first.

    Args:
        db: Database session
        actions: Only return these action types
        limit: Maximum number of records to return
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if actions:
        query = query.where(AuditLog.action.in_(actions))

    query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())
