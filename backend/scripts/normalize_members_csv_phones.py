"""
Normalize phone columns of a members CSV to E.164.

Rewrites ``phone_number`` and ``spouse_phone`` in place (or into --out),
keeping every other column and the row order. Missing phone columns are
appended. Overwriting the input leaves a .bak copy next to it.

Usage:
    python -m backend.scripts.normalize_members_csv_phones --in members.csv [--out cleaned.csv]
"""

import argparse
import csv
import logging
import os
import shutil
import sys
from dataclasses import dataclass
from typing import Optional

from backend.app.core.cli import run_script
from backend.app.core.exceptions import ImportSourceError
from backend.app.domain.phones import normalize_to_e164

logger = logging.getLogger("church_ledger")

PHONE_COLUMNS = ("phone_number", "spouse_phone")


@dataclass(frozen=True)
class NormalizeResult:
    rows: int
    changed_rows: int
    out_path: str
    backup_path: Optional[str] = None


def normalize_members_csv(in_path: str, out_path: Optional[str] = None) -> NormalizeResult:
    if not os.path.exists(in_path):
        raise ImportSourceError(f"Members CSV not found: {in_path}", path=in_path)
    out_path = out_path or in_path

    with open(in_path, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        fieldnames = list(reader.fieldnames or [])
        rows = list(reader)
    if not fieldnames:
        raise ImportSourceError(f"Members CSV is empty: {in_path}", path=in_path)

    for column in PHONE_COLUMNS:
        if column not in fieldnames:
            fieldnames.append(column)

    changed = 0
    for row in rows:
        row_changed = False
        for column in PHONE_COLUMNS:
            before = row.get(column) or ""
            after = normalize_to_e164(before) or ""
            if after != before:
                row[column] = after
                row_changed = True
            else:
                row[column] = before
        changed += row_changed

    backup_path = None
    if os.path.abspath(out_path) == os.path.abspath(in_path):
        backup_path = in_path + ".bak"
        shutil.copyfile(in_path, backup_path)

    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writeheader()
        writer.writerows(rows)

    return NormalizeResult(rows=len(rows), changed_rows=changed, out_path=out_path, backup_path=backup_path)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Normalize phone columns of a members CSV")
    parser.add_argument("--in", dest="in_path", required=True, help="input CSV")
    parser.add_argument("--out", dest="out_path", default=None, help="output CSV (defaults to overwriting --in)")
    return parser.parse_args(argv)


async def main(args: argparse.Namespace) -> NormalizeResult:
    result = normalize_members_csv(args.in_path, args.out_path)
    if result.backup_path:
        print(f"💾 Backup written to {result.backup_path}")
    print(f"✅ Normalized {result.out_path}: {result.rows} rows, {result.changed_rows} changed")
    return result


def run(argv=None) -> int:
    args = parse_args(argv)
    return run_script(lambda: main(args), requires_database=False)


if __name__ == "__main__":
    sys.exit(run())
