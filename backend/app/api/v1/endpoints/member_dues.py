"""
Member Dues API Endpoints.

Per-member dues schedule, recomputed from the ledger on every request.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.schemas.dues import MemberDuesResponse
from backend.app.services.reporting import ReportingService

router = APIRouter(prefix="/members", tags=["Members - Dues"])


@router.get("/{member_id}/dues", response_model=MemberDuesResponse)
async def get_member_dues(
    member_id: int = Path(..., description="Member ID"),
    year: Optional[int] = Query(None, ge=1900, le=9999, description="Dues year (defaults to the current year)"),
    monthly_pledge: Optional[Decimal] = Query(None, ge=0, description="Override the member's monthly pledge"),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the month-by-month dues status for a member.

    Payments are allocated oldest month first; see the reconciliation
    engine for the exact rule.
    """
    return await ReportingService.get_member_dues(
        db, member_id, year or date.today().year, monthly_pledge=monthly_pledge
    )
