"""
Ledger enumerations.

Values are the lowercase strings persisted in the ledger_entries table.
"""

import enum


class LedgerEntryType(str, enum.Enum):
    """Direction of a ledger entry. Current adapters only produce INCOME."""
    INCOME = "income"
    EXPENSE = "expense"


class Fund(str, enum.Enum):
    GENERAL = "general"
    BUILDING = "building"


class LedgerCategory(str, enum.Enum):
    """Purpose of the funds."""
    MEMBERSHIP_DUE = "membership_due"
    TITHE = "tithe"
    DONATION = "donation"
    EVENT_INCOME = "event_income"
    BUILDING_FUND = "building_fund"
    OTHER_INCOME = "other_income"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CHECK = "check"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    BANK_TRANSFER = "bank_transfer"
    ZELLE = "zelle"
    VENMO = "venmo"
    PAYPAL = "paypal"
    OTHER = "other"


class SourceSystem(str, enum.Enum):
    """System the entry originated from."""
    MANUAL = "manual"
    STRIPE = "stripe"
    ZELLE = "zelle"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"


def enum_values(enum_cls):
    """values_callable for SQLAlchemy Enum columns so the lowercase value is stored."""
    return [member.value for member in enum_cls]
