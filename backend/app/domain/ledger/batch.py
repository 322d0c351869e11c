"""
Batch accounting for the importers.

BatchResult is an immutable tally: every operation returns a new value,
so a batch is a fold over its rows and can be tested without a database.
"""

from dataclasses import dataclass, field, replace
from functools import reduce
from typing import Dict, Iterable, List, Optional, Tuple

from backend.app.domain.ledger.candidate import CandidateEntry, SkipReason
from backend.app.domain.ledger.gate import DEFAULT_POLICY, GatePolicy, LedgerSnapshot, Rejected, admit


@dataclass(frozen=True)
class BatchResult:
    source: str = ""
    dry_run: bool = False
    parsed: int = 0
    attempted: int = 0
    admitted: int = 0
    inserted: int = 0
    skipped: Dict[SkipReason, int] = field(default_factory=dict)
    unmatched_phones: Tuple[str, ...] = ()

    def record_parsed(self, count: int = 1) -> "BatchResult":
        return replace(self, parsed=self.parsed + count)

    def record_attempted(self, count: int = 1) -> "BatchResult":
        return replace(self, attempted=self.attempted + count)

    def record_admitted(self) -> "BatchResult":
        return replace(self, admitted=self.admitted + 1)

    def record_inserted(self) -> "BatchResult":
        return replace(self, inserted=self.inserted + 1)

    def record_skip(self, reason: SkipReason, phone: Optional[str] = None) -> "BatchResult":
        skipped = dict(self.skipped)
        skipped[reason] = skipped.get(reason, 0) + 1
        unmatched = self.unmatched_phones
        if phone and reason == SkipReason.UNMATCHED_MEMBER and phone not in unmatched:
            unmatched = unmatched + (phone,)
        return replace(self, skipped=skipped, unmatched_phones=unmatched)

    def count(self, reason: SkipReason) -> int:
        return self.skipped.get(reason, 0)

    @property
    def skipped_dup(self) -> int:
        return self.count(SkipReason.DUPLICATE)

    @property
    def skipped_missing_ext(self) -> int:
        return self.count(SkipReason.MISSING_EXTERNAL_ID)

    @property
    def skipped_invalid_amt(self) -> int:
        return self.count(SkipReason.INVALID_AMOUNT)

    @property
    def skipped_bad_date(self) -> int:
        return self.count(SkipReason.BAD_DATE)

    @property
    def skipped_bad_ext(self) -> int:
        return self.count(SkipReason.INVALID_EXTERNAL_ID)

    @property
    def total_skipped(self) -> int:
        return sum(self.skipped.values())

    def as_dict(self) -> dict:
        return {
            "source": self.source,
            "dry_run": self.dry_run,
            "parsed": self.parsed,
            "attempted": self.attempted,
            "admitted": self.admitted,
            "inserted": self.inserted,
            "skipped": {reason.value: count for reason, count in self.skipped.items()},
            "unmatched_phones": list(self.unmatched_phones),
        }

    def summary_lines(self) -> List[str]:
        mode = "Dry Run" if self.dry_run else "Execute"
        lines = [
            f"--- {mode} Summary ({self.source}) ---",
            f"Parsed rows: {self.parsed}",
            f"Attempted: {self.attempted}",
            f"Admitted: {self.admitted}",
            f"Inserted: {self.inserted}",
            "Skipped -> dup: {} missing_ext: {} bad_ext: {} bad_amount: {} bad_date: {}".format(
                self.skipped_dup, self.skipped_missing_ext, self.skipped_bad_ext,
                self.skipped_invalid_amt, self.skipped_bad_date,
            ),
        ]
        other = {
            reason: count for reason, count in self.skipped.items()
            if reason in (
                SkipReason.MISSING_PHONE, SkipReason.UNMATCHED_MEMBER, SkipReason.INELIGIBLE, SkipReason.MALFORMED_ROW
            )
        }
        if other:
            lines.append("Skipped -> " + " ".join(f"{r.value}: {c}" for r, c in other.items()))
        if self.unmatched_phones:
            lines.append(f"Unmatched phones ({len(self.unmatched_phones)}):")
            lines.extend(f"  - {phone}" for phone in self.unmatched_phones)
        return lines


@dataclass(frozen=True)
class GateOutcome:
    admitted: Tuple[CandidateEntry, ...]
    snapshot: LedgerSnapshot
    result: BatchResult
    rejected: Tuple[Tuple[CandidateEntry, SkipReason], ...] = ()


def admit_batch(
    candidates: Iterable[CandidateEntry],
    snapshot: LedgerSnapshot,
    result: BatchResult,
    policy: GatePolicy = DEFAULT_POLICY,
) -> GateOutcome:
    """
    Run candidates through the gate in input order.

    Each admitted candidate's keys join the snapshot, so a repeated
    external id inside one batch is admitted only the first time.
    """
    def step(outcome: GateOutcome, candidate: CandidateEntry) -> GateOutcome:
        decision = admit(candidate, outcome.snapshot, policy)
        tally = outcome.result.record_attempted()
        if isinstance(decision, Rejected):
            return replace(
                outcome,
                result=tally.record_skip(decision.reason),
                rejected=outcome.rejected + ((candidate, decision.reason),),
            )
        return replace(
            outcome,
            admitted=outcome.admitted + (candidate,),
            snapshot=outcome.snapshot.including(candidate),
            result=tally.record_admitted(),
        )

    return reduce(step, candidates, GateOutcome((), snapshot, result))
