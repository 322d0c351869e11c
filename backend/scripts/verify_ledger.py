"""
Print ledger verification counts after an import.

Usage:
    python -m backend.scripts.verify_ledger [--sample=N]
"""

import argparse
import sys

from backend.app.core.cli import run_script
from backend.app.db.session import AsyncSessionLocal
from backend.app.schemas.ledger import LedgerVerification
from backend.app.services.reporting import ReportingService


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show ledger_entries counts and sample rows")
    parser.add_argument("--sample", type=int, default=5, help="number of sample rows")
    return parser.parse_args(argv)


async def main(args: argparse.Namespace, session_factory=AsyncSessionLocal) -> LedgerVerification:
    async with session_factory() as db:
        report = await ReportingService.verify_ledger(db, args.sample)

    print(f"📒 Total ledger entries: {report.total_entries}")
    print(f"🔑 With external_id: {report.with_external_id}")
    print("By source system:")
    for source, count in sorted(report.by_source_system.items()):
        print(f"  - {source}: {count}")
    print("By category:")
    for category, count in sorted(report.by_category.items()):
        print(f"  - {category}: {count}")
    print("Sample rows:")
    for row in report.sample:
        print(f"  - {row.entry_date} {row.amount:.2f} {row.category} {row.source_system} "
              f"member={row.member_id} ext={row.external_id or '-'}")
    return report


def run(argv=None) -> int:
    args = parse_args(argv)
    return run_script(lambda: main(args))


if __name__ == "__main__":
    sys.exit(run())
