"""
Normalize dependents.phone to E.164.

Pages through dependents ordered by id. Phones with no digits become
NULL. In dry-run mode a sample of the changes is printed and nothing is
written.

Usage:
    python -m backend.scripts.normalize_dependent_phones [--dry-run]
"""

import argparse
import sys
from dataclasses import dataclass, field
from typing import List, Tuple

from sqlalchemy import select

from backend.app.core.cli import run_script
from backend.app.core.config import settings
from backend.app.db.session import AsyncSessionLocal
from backend.app.domain.phones import normalize_to_e164
from backend.app.models.dependent import Dependent
from backend.app.services.audit import AuditAction, log_event

SAMPLE_SIZE = 20


@dataclass
class PhoneBackfillStats:
    scanned: int = 0
    changed: int = 0
    nullified: int = 0
    samples: List[Tuple[int, str, str]] = field(default_factory=list)


async def normalize_dependent_phones(session_factory=AsyncSessionLocal, dry_run: bool = False,
                                     batch_size: int = None) -> PhoneBackfillStats:
    batch_size = batch_size or settings.backfill_batch_size
    stats = PhoneBackfillStats()
    last_id = 0

    async with session_factory() as db:
        while True:
            result = await db.execute(
                select(Dependent).where(Dependent.id > last_id).order_by(Dependent.id).limit(batch_size)
            )
            page = result.scalars().all()
            if not page:
                break

            for dependent in page:
                stats.scanned += 1
                normalized = normalize_to_e164(dependent.phone)
                if normalized == dependent.phone:
                    continue
                stats.changed += 1
                if normalized is None:
                    stats.nullified += 1
                if len(stats.samples) < SAMPLE_SIZE:
                    stats.samples.append((dependent.id, dependent.phone, normalized))
                if not dry_run:
                    dependent.phone = normalized

            last_id = page[-1].id
            if not dry_run:
                await db.commit()

        if not dry_run:
            await log_event(
                db,
                action=AuditAction.DEPENDENT_PHONES_NORMALIZED,
                actor_id=settings.import_operator_id,
                source="dependents",
                metadata={"scanned": stats.scanned, "changed": stats.changed, "nullified": stats.nullified},
            )

    return stats


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Normalize dependent phone numbers to E.164")
    parser.add_argument("-n", "--dry-run", action="store_true", help="print sample changes, write nothing")
    return parser.parse_args(argv)


async def main(args: argparse.Namespace, session_factory=AsyncSessionLocal) -> PhoneBackfillStats:
    stats = await normalize_dependent_phones(session_factory, dry_run=args.dry_run)
    if args.dry_run:
        print(f"Sample changes (up to {SAMPLE_SIZE}):")
        for dependent_id, before, after in stats.samples:
            print(f"  - dependent {dependent_id}: {before!r} -> {after!r}")
    print(f"Scanned: {stats.scanned}  Changed: {stats.changed}  Nullified: {stats.nullified}")
    return stats


def run(argv=None) -> int:
    args = parse_args(argv)
    return run_script(lambda: main(args))


if __name__ == "__main__":
    sys.exit(run())
