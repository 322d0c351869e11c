"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import member_dues, admin_reports

router = APIRouter()

# Member dues view
router.include_router(member_dues.router)

# Operator reports
router.include_router(admin_reports.router)
