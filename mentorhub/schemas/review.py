"""
Pydantic schemas for reviews
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class ReviewDirection(str, Enum):
    GIVEN = "given"
    RECEIVED = "received"


class ReviewCreate(BaseModel):
    """Schema for submitting a review"""
    booking_id: int
    rating: int
    comment: Optional[str] = Field(None, max_length=2000)

    class Config:
        extra = "forbid"


class ReviewUpdate(BaseModel):
    """Edit of an unmoderated review"""
    rating: Optional[int] = None
    comment: Optional[str] = Field(None, max_length=2000)

    class Config:
        extra = "forbid"


class ReviewResponse(BaseModel):
    """Schema for review response"""
    id: int
    booking_id: int
    rater_id: int
    ratee_id: int
    rating: int
    comment: Optional[str]
    is_moderated: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReviewPage(BaseModel):
    items: List[ReviewResponse]
    total: int
    limit: int
    offset: int
    has_more: bool
