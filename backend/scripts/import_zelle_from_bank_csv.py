"""
Import Zelle payments from the bank activity export.

Each line must already carry the matched member columns at the end
(see BankCsvZelleAdapter). Every admitted row is recorded as a
membership due.

Usage:
    python -m backend.scripts.import_zelle_from_bank_csv [--file=PATH] [--dry-run]
"""

import argparse
import sys

from backend.app.core.cli import run_script
from backend.app.db.session import AsyncSessionLocal
from backend.app.domain.imports.bank_csv import BankCsvZelleAdapter
from backend.app.domain.imports.runner import ImportReport, ImportRunner
from backend.app.domain.ledger.candidate import SkipReason

SAMPLE_ROWS = 10


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import Zelle payments from a bank CSV export")
    parser.add_argument("--file", dest="file", default=None, help="CSV path (defaults to BANK_CSV_PATH)")
    parser.add_argument("-d", "--dry-run", action="store_true", help="report what would be inserted, write nothing")
    return parser.parse_args(argv)


async def main(args: argparse.Namespace, session_factory=AsyncSessionLocal) -> ImportReport:
    adapter = BankCsvZelleAdapter(path=args.file)
    print(f"📄 Reading {adapter.path}")

    report = await ImportRunner(session_factory=session_factory).run(adapter, dry_run=args.dry_run)
    result = report.result

    eligible = result.parsed - result.count(SkipReason.INELIGIBLE)
    print(f"Parsed rows: {result.parsed}")
    print(f"Eligible rows (member_id and phone present): {eligible}")
    print(f"Eligible rows with valid member: {eligible - result.count(SkipReason.UNMATCHED_MEMBER)}")

    if args.dry_run:
        print(f"Would insert: {report.would_insert}")
        for entry in report.entries[:SAMPLE_ROWS]:
            print(f"  - line {entry.line}: {entry.entry_date} member {entry.member_id} "
                  f"{entry.amount} {entry.external_id} ({entry.sender})")

    for line in result.summary_lines():
        print(line)
    if not args.dry_run:
        print(f"✅ Inserted {result.inserted} ledger entries")
    return report


def run(argv=None) -> int:
    args = parse_args(argv)
    return run_script(lambda: main(args))


if __name__ == "__main__":
    sys.exit(run())
