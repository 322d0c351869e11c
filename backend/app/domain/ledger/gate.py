"""
Deduplication Gate.

Pure admission check applied to every candidate before it is written.
The gate never performs I/O: callers pass a LedgerSnapshot of the keys
already in the store and refresh it between sub-batches.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Union

from backend.app.domain.ledger.candidate import CandidateEntry, SkipReason


@dataclass(frozen=True)
class GatePolicy:
    """Source-specific admission rules."""
    require_external_id: bool = False
    min_external_id_length: Optional[int] = None
    positive_only: bool = False


DEFAULT_POLICY = GatePolicy()


@dataclass(frozen=True)
class LedgerSnapshot:
    """Deduplication keys known to exist in the ledger."""
    external_ids: FrozenSet[str] = frozenset()
    transaction_ids: FrozenSet[int] = frozenset()

    @classmethod
    def of(cls, external_ids: Iterable[str] = (), transaction_ids: Iterable[int] = ()) -> "LedgerSnapshot":
        return cls(frozenset(external_ids), frozenset(transaction_ids))

    def including(self, candidate: CandidateEntry) -> "LedgerSnapshot":
        external_ids = self.external_ids
        transaction_ids = self.transaction_ids
        if candidate.external_id:
            external_ids = external_ids | {candidate.external_id}
        if candidate.transaction_id is not None:
            transaction_ids = transaction_ids | {candidate.transaction_id}
        return LedgerSnapshot(external_ids, transaction_ids)

    def merge(self, other: "LedgerSnapshot") -> "LedgerSnapshot":
        return LedgerSnapshot(self.external_ids | other.external_ids, self.transaction_ids | other.transaction_ids)


@dataclass(frozen=True)
class Admitted:
    pass


@dataclass(frozen=True)
class Rejected:
    reason: SkipReason


Admission = Union[Admitted, Rejected]

ADMITTED = Admitted()


def admit(candidate: CandidateEntry, snapshot: LedgerSnapshot, policy: GatePolicy = DEFAULT_POLICY) -> Admission:
    """
    Decide whether ``candidate`` may be inserted.

    Checks, in order: external id presence and length (when the policy asks
    for them), duplicate external id, duplicate legacy transaction, amount,
    entry date. Sources may leave an unreadable amount as NaN and an
    unreadable date as None so these are judged after the identity checks.
    A zero amount is never admitted; non-positive amounts are rejected for
    positive-only sources.
    """
    external_id = candidate.external_id

    if policy.require_external_id and not external_id:
        return Rejected(SkipReason.MISSING_EXTERNAL_ID)

    if external_id and policy.min_external_id_length and len(external_id) < policy.min_external_id_length:
        return Rejected(SkipReason.INVALID_EXTERNAL_ID)

    if external_id and external_id in snapshot.external_ids:
        return Rejected(SkipReason.DUPLICATE)

    if candidate.transaction_id is not None and candidate.transaction_id in snapshot.transaction_ids:
        return Rejected(SkipReason.DUPLICATE)

    amount = candidate.amount
    if not amount.is_finite() or amount == 0 or (policy.positive_only and amount < 0):
        return Rejected(SkipReason.INVALID_AMOUNT)

    if candidate.entry_date is None:
        return Rejected(SkipReason.BAD_DATE)

    return ADMITTED
