"""
Backfill ledger_entries from the legacy transactions table.

Safe to re-run: rows already in the ledger (same external id or same
source transaction) are skipped.

Usage:
    python -m backend.scripts.backfill_ledger_entries [--dry-run]
"""

import argparse
import sys

from backend.app.core.cli import run_script
from backend.app.db.session import AsyncSessionLocal
from backend.app.domain.imports.legacy import LegacyTransactionAdapter
from backend.app.domain.imports.runner import ImportReport, ImportRunner
from backend.app.services import ledger_store


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Copy legacy transactions into the ledger")
    parser.add_argument("-d", "--dry-run", action="store_true", help="report what would be inserted, write nothing")
    parser.add_argument("--batch-size", type=int, default=None, help="rows per dedup sub-batch")
    return parser.parse_args(argv)


async def main(args: argparse.Namespace, session_factory=AsyncSessionLocal) -> ImportReport:
    async with session_factory() as db:
        before = await ledger_store.count_entries(db)
    print(f"📒 Ledger entries before: {before}")

    runner = ImportRunner(session_factory=session_factory, batch_size=args.batch_size)
    report = await runner.run(LegacyTransactionAdapter(), dry_run=args.dry_run)

    for line in report.result.summary_lines():
        print(line)

    if args.dry_run:
        print(f"Would insert: {report.would_insert}")
        for entry in report.entries[:10]:
            print(f"  - tx {entry.transaction_id} {entry.entry_date} {entry.amount} {entry.category.value}")
        return report

    async with session_factory() as db:
        after = await ledger_store.count_entries(db)
        sample = await ledger_store.sample_entries(db, 5)
    print(f"📒 Ledger entries after: {after} (+{after - before})")
    for row in sample:
        print(f"  - {row.entry_date} {row.amount} {row.category.value} {row.source_system.value} {row.external_id or '-'}")
    print("✅ Backfill completed")
    return report


def run(argv=None) -> int:
    args = parse_args(argv)
    return run_script(lambda: main(args))


if __name__ == "__main__":
    sys.exit(run())
