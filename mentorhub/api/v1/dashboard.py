"""
Dashboard endpoints
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from mentorhub.core.dependencies import get_current_user, get_dashboard_service
from mentorhub.db.models.user import User
from mentorhub.schemas.dashboard import DashboardStats, ActivityItem
from mentorhub.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    current_user: User = Depends(get_current_user),
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    """Session count, distinct counterparts, hours and average rating"""
    return dashboard_service.get_stats(current_user.id, current_user.role)


@router.get("/activity", response_model=List[ActivityItem])
async def get_recent_activity(
    limit: Optional[int] = Query(None, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    return dashboard_service.get_recent_activity(current_user.id, current_user.role, limit=limit)
