"""
Pydantic schemas for dashboard projections
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from mentorhub.db.models.booking import BookingStatus
from mentorhub.db.models.user import UserRole


class DashboardStats(BaseModel):
    """Aggregate numbers shown on a user's dashboard"""
    total_sessions: int = 0
    active_connections: int = 0
    total_hours: float = 0.0
    average_rating: float = 0.0
    role: UserRole = UserRole.MENTEE


class ActivityItem(BaseModel):
    """One recent booking in the activity feed"""
    id: int
    type: str = "session"
    title: str
    date: datetime
    status: BookingStatus
    with_name: Optional[str] = None
