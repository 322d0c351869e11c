"""
Admin Reporting API Endpoints.

Roster export and ledger verification used by operators after imports.
"""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.session import get_db
from backend.app.schemas.ledger import ImportRun, LedgerVerification
from backend.app.services.reporting import ReportingService

router = APIRouter(prefix="/admin", tags=["Admin - Reports"])


@router.get("/reports/members.csv")
async def export_members_csv(db: AsyncSession = Depends(get_db)):
    """Download the member roster as CSV."""
    content = await ReportingService.export_roster_csv(db)
    filename = f"members-info-{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/ledger/verification", response_model=LedgerVerification)
async def verify_ledger(
    sample: int = Query(5, ge=0, le=100, description="Number of sample rows"),
    db: AsyncSession = Depends(get_db)
):
    """Ledger row counts by source and category."""
    return await ReportingService.verify_ledger(db, sample)


@router.get("/ledger/imports", response_model=List[ImportRun])
async def list_import_runs(
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db)
):
    """Recent import runs, most recent first."""
    return await ReportingService.list_import_runs(db, limit)
