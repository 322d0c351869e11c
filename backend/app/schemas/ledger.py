"""
Ledger verification and import history schemas.
"""

from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Optional
from datetime import date, datetime
from uuid import UUID


class LedgerEntrySample(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    entry_date: date
    amount: float
    category: str
    source_system: str
    payment_method: str
    external_id: Optional[str] = None
    member_id: Optional[int] = None
    note: Optional[str] = None


class LedgerVerification(BaseModel):
    """Counts operators check after a batch import."""
    total_entries: int
    with_external_id: int
    by_source_system: Dict[str, int]
    by_category: Dict[str, int]
    sample: List[LedgerEntrySample]


class ImportRun(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    actor_id: Optional[int] = None
    source: Optional[str] = None
    summary: Optional[Dict[str, Any]] = None
    timestamp: datetime
