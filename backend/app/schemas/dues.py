"""
Member dues view schemas.

Field names are serialized in camelCase for the UI.
"""

from datetime import date
from typing import Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MonthStatusResponse(CamelModel):
    month: int
    name: str
    due: float
    paid: float
    status: str
    is_future_month: bool


class OtherContributions(CamelModel):
    by_category: Dict[str, float]
    total_other_contributions: float
    grand_total: float


class PaymentSummary(CamelModel):
    year: int
    annual_pledge: float
    monthly_payment: float
    total_amount_due: float
    dues_collected: float
    outstanding_dues: float
    dues_progress: float
    future_dues: float
    month_statuses: List[MonthStatusResponse]
    other_contributions: OtherContributions


class MemberTransaction(CamelModel):
    id: Union[int, UUID]
    source: str = "transactions"
    payment_date: date
    amount: float
    payment_type: str
    payment_method: str
    status: str
    receipt_number: Optional[str] = None
    note: Optional[str] = None


class MemberInfo(CamelModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None


class MemberDuesResponse(CamelModel):
    member: MemberInfo
    payment_summary: PaymentSummary
    transactions: List[MemberTransaction]
