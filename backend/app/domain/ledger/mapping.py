"""
Field mapping from external payment vocabularies to ledger enumerations.

Every lookup has an explicit default arm so unknown source values are
classified instead of failing the import.
"""

from typing import Optional

from backend.app.models.ledger_enums import Fund, LedgerCategory, PaymentMethod, SourceSystem

PAYMENT_TYPE_TO_CATEGORY = {
    "membership_due": LedgerCategory.MEMBERSHIP_DUE,
    "tithe": LedgerCategory.TITHE,
    "donation": LedgerCategory.DONATION,
    "event": LedgerCategory.EVENT_INCOME,
    "building_fund": LedgerCategory.BUILDING_FUND,
}
DEFAULT_CATEGORY = LedgerCategory.OTHER_INCOME

PAYMENT_METHODS = {method.value: method for method in PaymentMethod}
DEFAULT_PAYMENT_METHOD = PaymentMethod.OTHER

EXTERNAL_ID_PREFIXES = (
    ("stripe_", SourceSystem.STRIPE),
    ("zelle_", SourceSystem.ZELLE),
)

# Receipt numbers are only meaningful for paper payments
RECEIPTED_METHODS = frozenset({"cash", "check"})


def map_category(payment_type: Optional[str]) -> LedgerCategory:
    return PAYMENT_TYPE_TO_CATEGORY.get((payment_type or "").strip().lower(), DEFAULT_CATEGORY)


def map_payment_method(method: Optional[str]) -> PaymentMethod:
    return PAYMENT_METHODS.get((method or "").strip().lower(), DEFAULT_PAYMENT_METHOD)


def derive_fund(payment_type: Optional[str]) -> Fund:
    if (payment_type or "").strip().lower() == "building_fund":
        return Fund.BUILDING
    return Fund.GENERAL


def infer_source_system(external_id: Optional[str]) -> SourceSystem:
    """Classify an entry by the shape of its external id; no id means manual."""
    if external_id:
        for prefix, source in EXTERNAL_ID_PREFIXES:
            if external_id.startswith(prefix):
                return source
    return SourceSystem.MANUAL


def receipt_number_for(method: Optional[str], receipt_number: Optional[str]) -> Optional[str]:
    if (method or "").strip().lower() in RECEIPTED_METHODS:
        return receipt_number or None
    return None
