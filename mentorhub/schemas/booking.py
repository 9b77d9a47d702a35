"""
Pydantic schemas for bookings
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

from mentorhub.db.models.booking import BookingStatus


class BookingListFilter(str, Enum):
    """Booking list views"""
    ALL = "all"
    UPCOMING = "upcoming"
    PAST = "past"
    PENDING = "pending"


class BookingRole(str, Enum):
    """Side of the booking the caller is listing as"""
    MENTOR = "mentor"
    MENTEE = "mentee"


class SchedulerOutcome(str, Enum):
    """Outcomes the session scheduler may report"""
    COMPLETED = "completed"
    NO_SHOW = "no_show"


class BookingRequest(BaseModel):
    """Schema for requesting a slot against an offering"""
    offering_id: int
    starts_at: datetime
    notes: Optional[str] = Field(None, max_length=1000)

    class Config:
        extra = "forbid"


class DirectBookingRequest(BaseModel):
    """Schema for booking a mentor without a catalog offering"""
    mentor_id: int
    starts_at: datetime
    duration_minutes: int = 60
    notes: Optional[str] = Field(None, max_length=1000)

    class Config:
        extra = "forbid"


class BookingStatusUpdate(BaseModel):
    """Schema for a participant-driven status change"""
    status: BookingStatus
    reason: Optional[str] = Field(None, max_length=500)
    meeting_url: Optional[str] = Field(None, max_length=500)

    @field_validator("meeting_url")
    @classmethod
    def validate_meeting_url(cls, v):
        if v and not (v.startswith("http://") or v.startswith("https://")):
            raise ValueError("URL must be a valid HTTP(S) URL")
        return v

    class Config:
        extra = "forbid"


class SchedulerSignal(BaseModel):
    """Schema for the session scheduler's outcome report"""
    outcome: SchedulerOutcome

    class Config:
        extra = "forbid"


class BookingResponse(BaseModel):
    """Schema for booking response"""
    id: int
    offering_id: Optional[int]
    mentor_id: int
    mentee_id: int
    starts_at: datetime
    ends_at: datetime
    duration_minutes: int
    status: BookingStatus
    price_cents: int
    currency: str
    meeting_url: Optional[str] = None
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[int] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BookingPage(BaseModel):
    """Paginated booking list"""
    items: List[BookingResponse]
    total: int
    limit: int
    offset: int
    has_more: bool
