"""
Member database model.

A registered church member (household head). Phone numbers are stored in
E.164 form and are the lookup key for Zelle sender matching.
"""

from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from backend.app.db.session import Base

CENTS = Decimal("0.01")


class Member(Base):
    """
    Member model.

    Only the fields the ledger, dues and roster views need are mapped here.
    """
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    middle_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    phone_number = Column(String(20), unique=True, index=True, nullable=True)
    spouse_name = Column(String(200), nullable=True)

    # Annual dues pledge; the monthly dues obligation is derived from it
    yearly_pledge = Column(Numeric(10, 2), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    dependents = relationship("Dependent", back_populates="member")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.middle_name, self.last_name) if part)

    @property
    def monthly_pledge(self) -> Decimal:
        if not self.yearly_pledge:
            return Decimal("0")
        return (Decimal(self.yearly_pledge) / 12).quantize(CENTS, rounding=ROUND_HALF_UP)

    def __repr__(self):
        return f"<Member(id={self.id}, name='{self.full_name}', phone='{self.phone_number}')>"
