"""
Database seeding script for local development.

Creates a few members (with pledges and phones in E.164 form), a
dependent and some legacy transactions so the backfill and the dues view
have something to work on.
"""

import asyncio
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.app.db.session import AsyncSessionLocal, engine
from backend.app.db.base import Base
from backend.app.models.member import Member
from backend.app.models.dependent import Dependent
from backend.app.models.transaction import Transaction
from sqlalchemy import select


async def seed_members():
    """
    Seed development data.

    Creates:
    - 3 members with yearly pledges
    - 1 dependent
    - 4 legacy transactions (dues, tithe, building fund, ach)
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting member seeding...")

        result = await db.execute(select(Member).where(Member.phone_number == "+15125550101"))
        if result.scalar_one_or_none():
            print("ℹ️  Members already exist, skipping seeding")
            return

        abebe = Member(
            first_name="Abebe",
            last_name="Kebede",
            email="abebe@example.org",
            phone_number="+15125550101",
            spouse_name="Almaz Kebede",
            yearly_pledge=Decimal("1200.00"),
        )
        sara = Member(
            first_name="Sara",
            last_name="Tesfaye",
            phone_number="+15125550102",
            yearly_pledge=Decimal("600.00"),
        )
        daniel = Member(
            first_name="Daniel",
            middle_name="G",
            last_name="Haile",
            phone_number="+15125550103",
        )
        db.add_all([abebe, sara, daniel])
        await db.flush()
        print("✅ Created 3 members")

        db.add(Dependent(member_id=abebe.id, first_name="Liya", last_name="Kebede",
                         relationship_type="child", phone="(512) 555-0199"))
        print("✅ Created 1 dependent (phone left un-normalized on purpose)")

        year = date.today().year
        db.add_all([
            Transaction(member_id=abebe.id, collected_by=3, payment_date=date(year, 1, 15),
                        amount=Decimal("250.00"), payment_type="membership_due", payment_method="cash",
                        receipt_number="R-1001", note="January dues"),
            Transaction(member_id=abebe.id, collected_by=3, payment_date=date(year, 2, 2),
                        amount=Decimal("40.00"), payment_type="tithe", payment_method="zelle",
                        external_id=f"zelle_seed_{year}_1"),
            Transaction(member_id=sara.id, collected_by=3, payment_date=date(year, 1, 20),
                        amount=Decimal("75.00"), payment_type="building_fund", payment_method="credit_card",
                        external_id=f"stripe_seed_{year}_1"),
            Transaction(member_id=sara.id, collected_by=3, payment_date=date(year, 3, 1),
                        amount=Decimal("50.00"), payment_type="membership_due", payment_method="ach"),
        ])
        await db.commit()
        print("✅ Created 4 legacy transactions")

        print("\n🎉 Member seeding completed successfully!")
        print("\nNext: python -m backend.scripts.backfill_ledger_entries --dry-run")


if __name__ == "__main__":
    asyncio.run(seed_members())
