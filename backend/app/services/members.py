"""
Member lookups used by the importers and the reporting surface.
"""

from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.models.member import Member


async def existing_member_ids(db: AsyncSession, member_ids: Iterable[int]) -> Set[int]:
    """Single existence query for a whole batch of member ids."""
    ids = set(member_ids)
    if not ids:
        return set()
    result = await db.execute(select(Member.id).where(Member.id.in_(ids)))
    return set(result.scalars().all())


async def member_ids_by_phone(db: AsyncSession, phones: Iterable[str]) -> Dict[str, int]:
    """Exact-match lookup of normalized phone numbers."""
    wanted = {phone for phone in phones if phone}
    if not wanted:
        return {}
    result = await db.execute(select(Member.phone_number, Member.id).where(Member.phone_number.in_(wanted)))
    return {phone: member_id for phone, member_id in result.all()}


async def get_member(db: AsyncSession, member_id: int) -> Optional[Member]:
    return await db.get(Member, member_id)


async def list_members(db: AsyncSession) -> List[Member]:
    result = await db.execute(select(Member).order_by(Member.id))
    return list(result.scalars().all())
