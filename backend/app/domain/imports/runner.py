"""
Import runner.

Drives one adapter through load -> parse -> resolve -> gate -> insert.
Rows are gated in sub-batches; before each sub-batch the dedup keys are
re-read from the store and merged with those admitted earlier in the
run, so re-running an import inserts nothing new.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from backend.app.core.config import settings
from backend.app.db.session import AsyncSessionLocal
from backend.app.domain.imports.base import ImportAdapter
from backend.app.domain.ledger.batch import BatchResult, admit_batch
from backend.app.domain.ledger.candidate import CandidateEntry, SkipReason
from backend.app.domain.ledger.gate import LedgerSnapshot
from backend.app.services import ledger_store
from backend.app.services.audit import log_event

logger = logging.getLogger("church_ledger")


@dataclass(frozen=True)
class ImportReport:
    result: BatchResult
    entries: Tuple[CandidateEntry, ...] = ()

    @property
    def would_insert(self) -> int:
        return len(self.entries)


def chunked(items: Sequence, size: int) -> List[Sequence]:
    return [items[start:start + size] for start in range(0, len(items), size)]


class ImportRunner:
    def __init__(self, session_factory=AsyncSessionLocal, batch_size: int = None):
        self.session_factory = session_factory
        self.batch_size = batch_size or settings.import_batch_size

    async def run(self, adapter: ImportAdapter, dry_run: bool = False) -> ImportReport:
        """
        Import every row of ``adapter``.

        In dry-run mode the gate still runs against the store, but nothing
        is written: ``entries`` lists what would have been inserted.
        """
        result = BatchResult(source=adapter.describe_source(), dry_run=dry_run)

        async with self.session_factory() as db:
            raw_rows = await adapter.load(db)
            candidates, result = adapter.parse_all(raw_rows, result)
            candidates, result = await adapter.resolve(db, candidates, result)

            batches = chunked(candidates, self.batch_size)
            seen = LedgerSnapshot()
            entries: List[CandidateEntry] = []

            for number, batch in enumerate(batches, start=1):
                stored = await ledger_store.existing_keys(db, batch)
                outcome = admit_batch(batch, stored.merge(seen), result, adapter.policy)
                result, seen = outcome.result, outcome.snapshot
                for candidate, reason in outcome.rejected:
                    logger.info(
                        "%s line %s skipped (%s) external_id=%s",
                        adapter.source_name, candidate.line, reason.value, candidate.external_id,
                    )

                if dry_run:
                    entries.extend(outcome.admitted)
                    continue

                for candidate in outcome.admitted:
                    if await ledger_store.insert_entry(db, candidate):
                        result = result.record_inserted()
                        entries.append(candidate)
                    else:
                        result = result.record_skip(SkipReason.DUPLICATE)
                logger.info(
                    "%s: batch %d/%d done, %d inserted so far",
                    adapter.source_name, number, len(batches), result.inserted,
                )

            if not dry_run:
                await log_event(
                    db,
                    action=adapter.audit_action,
                    actor_id=getattr(adapter, "operator_id", None),
                    source=adapter.describe_source(),
                    metadata=result.as_dict(),
                )

        logger.info(
            "%s import finished: parsed=%d inserted=%d skipped=%d dry_run=%s",
            adapter.source_name, result.parsed, result.inserted, result.total_skipped, dry_run,
        )
        return ImportReport(result=result, entries=tuple(entries))
