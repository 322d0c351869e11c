"""
Deduplication Gate and batch tally tests.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from backend.app.domain.ledger.batch import BatchResult, admit_batch
from backend.app.domain.ledger.candidate import CandidateEntry, SkipReason
from backend.app.domain.ledger.gate import (
    Admitted, GatePolicy, LedgerSnapshot, Rejected, admit,
)
from backend.app.models.ledger_enums import LedgerCategory, PaymentMethod, SourceSystem

ZELLE_POLICY = GatePolicy(require_external_id=True, min_external_id_length=6, positive_only=True)


def candidate(external_id=None, amount="50", transaction_id=None):
    return CandidateEntry(
        entry_date=date(2025, 3, 1),
        amount=Decimal(amount),
        category=LedgerCategory.MEMBERSHIP_DUE,
        payment_method=PaymentMethod.ZELLE,
        source_system=SourceSystem.ZELLE,
        external_id=external_id,
        transaction_id=transaction_id,
    )


def test_manual_entry_without_external_id_is_admitted():
    assert isinstance(admit(candidate(), LedgerSnapshot()), Admitted)


def test_known_external_id_is_duplicate():
    snapshot = LedgerSnapshot.of(["zelle_1"])
    assert admit(candidate("zelle_1"), snapshot) == Rejected(SkipReason.DUPLICATE)


def test_known_legacy_transaction_is_duplicate():
    snapshot = LedgerSnapshot.of(transaction_ids=[42])
    assert admit(candidate(transaction_id=42), snapshot) == Rejected(SkipReason.DUPLICATE)


def test_confirmation_number_length_rule():
    assert admit(candidate("ABC12"), LedgerSnapshot(), ZELLE_POLICY) == Rejected(SkipReason.INVALID_EXTERNAL_ID)
    assert isinstance(admit(candidate("ABC123"), LedgerSnapshot(), ZELLE_POLICY), Admitted)


def test_required_external_id_missing():
    assert admit(candidate(None), LedgerSnapshot(), ZELLE_POLICY) == Rejected(SkipReason.MISSING_EXTERNAL_ID)


def test_amount_rules():
    assert admit(candidate(amount="0"), LedgerSnapshot()) == Rejected(SkipReason.INVALID_AMOUNT)
    # Refunds are fine for sources that carry signed amounts
    assert isinstance(admit(candidate(amount="-20"), LedgerSnapshot()), Admitted)
    assert admit(candidate("ABC123", amount="-20"), LedgerSnapshot(), ZELLE_POLICY) == Rejected(SkipReason.INVALID_AMOUNT)
    assert admit(candidate(amount="NaN"), LedgerSnapshot()) == Rejected(SkipReason.INVALID_AMOUNT)


def test_unreadable_date_is_judged_after_identity_and_amount():
    undated = replace(candidate("ABC123"), entry_date=None)
    assert admit(undated, LedgerSnapshot(), ZELLE_POLICY) == Rejected(SkipReason.BAD_DATE)
    assert admit(replace(undated, external_id="ABC12"), LedgerSnapshot(), ZELLE_POLICY) == Rejected(
        SkipReason.INVALID_EXTERNAL_ID
    )
    assert admit(undated, LedgerSnapshot.of(["ABC123"]), ZELLE_POLICY) == Rejected(SkipReason.DUPLICATE)
    assert admit(replace(undated, amount=Decimal("0")), LedgerSnapshot(), ZELLE_POLICY) == Rejected(
        SkipReason.INVALID_AMOUNT
    )


def test_first_seen_wins_within_batch():
    rows = [candidate("CONF001", "10"), candidate("CONF001", "99"), candidate("CONF002", "20")]

    outcome = admit_batch(rows, LedgerSnapshot(), BatchResult(), ZELLE_POLICY)

    assert [c.amount for c in outcome.admitted] == [Decimal("10"), Decimal("20")]
    assert outcome.result.attempted == 3
    assert outcome.result.admitted == 2
    assert outcome.result.skipped_dup == 1
    assert outcome.snapshot.external_ids == frozenset({"CONF001", "CONF002"})
    assert outcome.rejected == ((rows[1], SkipReason.DUPLICATE),)


def test_batch_tally_by_reason():
    rows = [
        candidate("ABC12"),
        candidate(None),
        candidate("CONF003", amount="0"),
        candidate("EXISTING"),
        candidate("CONF004"),
    ]
    outcome = admit_batch(rows, LedgerSnapshot.of(["EXISTING"]), BatchResult(source="test"), ZELLE_POLICY)
    result = outcome.result

    assert result.skipped_bad_ext == 1
    assert result.skipped_missing_ext == 1
    assert result.skipped_invalid_amt == 1
    assert result.skipped_dup == 1
    assert result.admitted == 1
    assert result.total_skipped == 4
    assert result.as_dict()["skipped"]["invalid_external_id"] == 1


def test_batch_result_is_immutable_value():
    start = BatchResult()
    after = start.record_skip(SkipReason.UNMATCHED_MEMBER, phone="+15125550000")
    after = after.record_skip(SkipReason.UNMATCHED_MEMBER, phone="+15125550000")

    assert start.total_skipped == 0
    assert after.count(SkipReason.UNMATCHED_MEMBER) == 2
    assert after.unmatched_phones == ("+15125550000",)
    assert any("Unmatched phones (1)" in line for line in after.summary_lines())
