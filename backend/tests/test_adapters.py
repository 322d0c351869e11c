"""
Import adapter parsing tests (no database).
"""

from datetime import date
from decimal import Decimal

import pytest

from backend.app.core.exceptions import ImportSourceError
from backend.app.domain.imports.bank_csv import BankCsvZelleAdapter, split_line
from backend.app.domain.imports.named_zelle import NamedZelleCsvAdapter
from backend.app.domain.ledger.batch import BatchResult
from backend.app.domain.ledger.candidate import RowRejected, SkipReason
from backend.app.domain.ledger.gate import LedgerSnapshot, Rejected, admit
from backend.app.models.ledger_enums import LedgerCategory, PaymentMethod, SourceSystem

BANK_HEADER = "Posting Date,Description,Confirmation,Amount,member_id,phone_number,first_name,middle_name,last_name,match_source"


def bank_line(posting="03/14/2025", name="ABEBE KEBEDE", confirmation="CONF12345", amount="100.00",
              member_id="1", phone="+15125550101"):
    return f"{posting},{name},{confirmation},{amount},{member_id},{phone},Abebe,,Kebede,phone"


def named_row(**overrides):
    row = {
        "Month": "March", "Date": "3/14", "Sender": "Abebe Kebede", "Code": "ZL0001",
        "Amount": "100", "Matched Name": "Abebe Kebede", "Phone": "(512) 555-0101",
        "First Name": "Abebe", "Middle Name": "", "Last Name": "Kebede",
    }
    row.update(overrides)
    return row


class TestBankCsvZelleAdapter:

    def setup_method(self):
        self.adapter = BankCsvZelleAdapter(path="unused.csv", operator_id=3, min_confirmation_length=6)

    def test_parses_fixed_fields(self):
        entry = self.adapter.parse((2, bank_line()))

        assert entry.entry_date == date(2025, 3, 14)
        assert entry.amount == Decimal("100.00")
        assert entry.external_id == "CONF12345"
        assert entry.member_id == 1
        assert entry.category == LedgerCategory.MEMBERSHIP_DUE
        assert entry.payment_method == PaymentMethod.ZELLE
        assert entry.source_system == SourceSystem.ZELLE
        assert entry.collected_by == 3
        assert entry.receipt_number == "imported"
        assert entry.note == "imported from bank csv"

    def test_sender_name_may_contain_commas(self):
        entry = self.adapter.parse((2, bank_line(name="KEBEDE, ABEBE, JR")))

        assert entry.sender == "KEBEDE, ABEBE, JR"
        assert entry.external_id == "CONF12345"
        assert entry.amount == Decimal("100.00")

    def test_short_lines_are_not_rows(self):
        assert split_line("a,b,c") is None
        assert self.adapter.parse((2, "03/14/2025,x,y,1,2,3,4,5,6")) is None

    @pytest.mark.parametrize("kwargs,reason", [
        ({"member_id": ""}, SkipReason.INELIGIBLE),
        ({"phone": ""}, SkipReason.INELIGIBLE),
        ({"member_id": "abc"}, SkipReason.INELIGIBLE),
    ])
    def test_rejects_unmatched_rows(self, kwargs, reason):
        with pytest.raises(RowRejected) as exc:
            self.adapter.parse((2, bank_line(**kwargs)))
        assert exc.value.reason == reason

    @pytest.mark.parametrize("kwargs,reason", [
        ({"amount": "ten"}, SkipReason.INVALID_AMOUNT),
        ({"amount": "-5.00"}, SkipReason.INVALID_AMOUNT),
        ({"posting": "2025-03-14"}, SkipReason.BAD_DATE),
        ({"posting": "02/30/2025"}, SkipReason.BAD_DATE),
        ({"posting": "2025-03-14", "confirmation": "ABC12"}, SkipReason.INVALID_EXTERNAL_ID),
        ({"amount": "ten", "confirmation": ""}, SkipReason.MISSING_EXTERNAL_ID),
        ({"amount": "ten", "posting": "bad"}, SkipReason.INVALID_AMOUNT),
    ])
    def test_amount_and_date_are_checked_after_confirmation(self, kwargs, reason):
        entry = self.adapter.parse((2, bank_line(**kwargs)))

        assert admit(entry, LedgerSnapshot(), self.adapter.policy) == Rejected(reason)

    def test_duplicate_wins_over_bad_date(self):
        entry = self.adapter.parse((2, bank_line(posting="bad")))

        assert admit(entry, LedgerSnapshot.of(["CONF12345"]), self.adapter.policy) == Rejected(SkipReason.DUPLICATE)

    def test_confirmation_length_is_validated(self):
        assert not self.adapter.validate(self.adapter.parse((2, bank_line(confirmation="ABC12"))))
        assert self.adapter.validate(self.adapter.parse((2, bank_line(confirmation="ABC123"))))

    def test_parse_all_counts_rejections(self):
        rows = [(2, bank_line()), (3, bank_line(member_id="")), (4, "too,short")]
        candidates, result = self.adapter.parse_all(rows, BatchResult())

        assert len(candidates) == 1
        assert result.parsed == 2
        assert result.count(SkipReason.INELIGIBLE) == 1

    def test_read_lines_skips_header_and_blank_lines(self, tmp_path):
        path = tmp_path / "bank.csv"
        path.write_text(f"{BANK_HEADER}\n\n{bank_line()}\n")

        lines = BankCsvZelleAdapter(path=str(path)).read_lines()

        assert lines == [(3, bank_line())]

    def test_missing_file_is_fatal(self, tmp_path):
        with pytest.raises(ImportSourceError):
            BankCsvZelleAdapter(path=str(tmp_path / "nope.csv")).read_lines()


class TestNamedZelleCsvAdapter:

    def setup_method(self):
        self.adapter = NamedZelleCsvAdapter(path="unused.csv", year=2025, operator_id=3)

    def test_parses_row(self):
        entry = self.adapter.parse((2, named_row()))

        assert entry.entry_date == date(2025, 3, 14)
        assert entry.amount == Decimal("100")
        assert entry.external_id == "ZL0001"
        assert entry.note == "Imported from Zelle: Abebe Kebede"
        assert entry.member_id is None
        assert entry.phone == "(512) 555-0101"

    def test_missing_phone_is_skipped(self):
        with pytest.raises(RowRejected) as exc:
            self.adapter.parse((2, named_row(Phone="  ")))
        assert exc.value.reason == SkipReason.MISSING_PHONE

    @pytest.mark.parametrize("overrides,reason", [
        ({"Date": "March 14"}, SkipReason.BAD_DATE),
        ({"Date": "2/30"}, SkipReason.BAD_DATE),
        ({"Amount": "n/a"}, SkipReason.INVALID_AMOUNT),
    ])
    def test_rejects_bad_rows(self, overrides, reason):
        with pytest.raises(RowRejected) as exc:
            self.adapter.parse((2, named_row(**overrides)))
        assert exc.value.reason == reason

    def test_non_positive_amount_fails_validation(self):
        assert not self.adapter.validate(self.adapter.parse((2, named_row(Amount="0"))))
        assert not self.adapter.validate(self.adapter.parse((2, named_row(Amount="-5"))))
        assert self.adapter.validate(self.adapter.parse((2, named_row(Amount="$1,250.00"))))

    def test_blank_row_is_ignored(self):
        assert self.adapter.parse((5, {key: "" for key in named_row()})) is None

    def test_read_rows(self, tmp_path):
        path = tmp_path / "named.csv"
        path.write_text(
            "Month,Date,Sender,Code,Amount,Matched Name,Phone,First Name,Middle Name,Last Name\n"
            'March,3/14,"Kebede, Abebe",ZL0001,100,Abebe Kebede,5125550101,Abebe,,Kebede\n'
        )

        rows = NamedZelleCsvAdapter(path=str(path), year=2025).read_rows()

        assert rows[0][0] == 2
        assert rows[0][1]["Sender"] == "Kebede, Abebe"

    def test_row_with_surplus_fields_is_malformed(self):
        row = named_row(Amount="1")
        row[None] = ["250.00"]

        with pytest.raises(RowRejected) as exc:
            self.adapter.parse((2, row))
        assert exc.value.reason == SkipReason.MALFORMED_ROW

    def test_unquoted_thousands_separator_is_not_shifted(self, tmp_path):
        path = tmp_path / "named.csv"
        path.write_text(
            "Month,Date,Sender,Code,Amount,Matched Name,Phone,First Name,Middle Name,Last Name\n"
            "March,3/2,Sara T,ZL0002,1,250.00,Sara T,5125550102,Sara,,T\n"
            "March,3/3,Sara T,ZL0003,\"1,250.00\",Sara T,5125550102,Sara,,T\n"
        )
        adapter = NamedZelleCsvAdapter(path=str(path), year=2025)

        candidates, result = adapter.parse_all(adapter.read_rows(), BatchResult())

        assert result.count(SkipReason.MALFORMED_ROW) == 1
        assert [(c.external_id, c.amount, c.phone) for c in candidates] == [
            ("ZL0003", Decimal("1250.00"), "5125550102"),
        ]
