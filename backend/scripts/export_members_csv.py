"""
Export the member roster to CSV.

Usage:
    python -m backend.scripts.export_members_csv [--out=PATH]
"""

import argparse
import sys
from datetime import date

from backend.app.core.cli import run_script
from backend.app.db.session import AsyncSessionLocal
from backend.app.services import members as member_service
from backend.app.services.reporting import write_roster_csv


def default_filename(today: date = None) -> str:
    return f"members-info-{(today or date.today()).isoformat()}.csv"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Export the member roster as CSV")
    parser.add_argument("--out", dest="out_path", default=None, help="output path (defaults to members-info-YYYY-MM-DD.csv)")
    return parser.parse_args(argv)


async def main(args: argparse.Namespace, session_factory=AsyncSessionLocal) -> int:
    out_path = args.out_path or default_filename()
    async with session_factory() as db:
        roster = await member_service.list_members(db)
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        count = write_roster_csv(roster, f)
    print(f"✅ Exported {count} members to {out_path}")
    return count


def run(argv=None) -> int:
    args = parse_args(argv)
    return run_script(lambda: main(args))


if __name__ == "__main__":
    sys.exit(run())
