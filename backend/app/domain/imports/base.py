"""
Import adapter contract.

An adapter turns one kind of source row (legacy transaction, bank CSV
line, named Zelle CSV record) into CandidateEntry values. Adapters only
parse and resolve; deduplication and persistence belong to ImportRunner.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.domain.ledger.batch import BatchResult
from backend.app.domain.ledger.candidate import CandidateEntry, RowRejected
from backend.app.domain.ledger.gate import DEFAULT_POLICY, GatePolicy, LedgerSnapshot, Rejected, admit

logger = logging.getLogger("church_ledger")


class ImportAdapter(ABC):
    source_name: str = "unknown"
    audit_action: str = ""
    policy: GatePolicy = DEFAULT_POLICY

    @abstractmethod
    async def load(self, db: AsyncSession) -> Iterable[Any]:
        """Return the raw rows of this source."""

    @abstractmethod
    def parse(self, raw_row: Any) -> Optional[CandidateEntry]:
        """
        Map one raw row to a candidate.

        Returns None for rows that are not data (headers, blank or short
        lines). Raises RowRejected for data rows that cannot be imported.
        """

    def validate(self, candidate: CandidateEntry) -> bool:
        """Source-level checks only; the store is not consulted."""
        return not isinstance(admit(candidate, LedgerSnapshot(), self.policy), Rejected)

    async def resolve(
        self, db: AsyncSession, candidates: List[CandidateEntry], result: BatchResult
    ) -> Tuple[List[CandidateEntry], BatchResult]:
        """Attach or verify member references. Default: nothing to resolve."""
        return candidates, result

    def describe_source(self) -> str:
        return self.source_name

    def parse_all(self, raw_rows: Iterable[Any], result: BatchResult) -> Tuple[List[CandidateEntry], BatchResult]:
        candidates = []
        for raw_row in raw_rows:
            try:
                candidate = self.parse(raw_row)
            except RowRejected as exc:
                logger.info("%s row skipped (%s)", self.source_name, exc)
                result = result.record_parsed().record_skip(exc.reason)
                continue
            if candidate is None:
                continue
            result = result.record_parsed()
            candidates.append(candidate)
        return candidates, result
