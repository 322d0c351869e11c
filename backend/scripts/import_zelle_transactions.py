"""
Import Zelle payments from the named payments sheet.

Senders are matched to members by phone number. Phones that match no
member are listed at the end so they can be fixed by hand.

Usage:
    python -m backend.scripts.import_zelle_transactions [--file=PATH] [--year=YYYY] [--dry-run]
"""

import argparse
import sys

from backend.app.core.cli import run_script
from backend.app.db.session import AsyncSessionLocal
from backend.app.domain.imports.named_zelle import NamedZelleCsvAdapter
from backend.app.domain.imports.runner import ImportReport, ImportRunner


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import Zelle payments from the named payments CSV")
    parser.add_argument("--file", dest="file", default=None, help="CSV path (defaults to NAMED_ZELLE_CSV_PATH)")
    parser.add_argument("--year", type=int, default=None, help="year of the M/D dates (defaults to NAMED_ZELLE_YEAR or this year)")
    parser.add_argument("-d", "--dry-run", action="store_true", help="report what would be inserted, write nothing")
    return parser.parse_args(argv)


async def main(args: argparse.Namespace, session_factory=AsyncSessionLocal) -> ImportReport:
    adapter = NamedZelleCsvAdapter(path=args.file, year=args.year)
    print(f"📄 Reading {adapter.path} (year {adapter.year})")

    report = await ImportRunner(session_factory=session_factory).run(adapter, dry_run=args.dry_run)
    result = report.result

    print(f"Processed: {result.parsed}")
    print(f"{'Would insert' if args.dry_run else 'Inserted'}: "
          f"{report.would_insert if args.dry_run else result.inserted}")
    print(f"Skipped: {result.total_skipped}")
    for line in result.summary_lines():
        print(line)
    return report


def run(argv=None) -> int:
    args = parse_args(argv)
    return run_script(lambda: main(args))


if __name__ == "__main__":
    sys.exit(run())
