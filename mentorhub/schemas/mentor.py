"""
Pydantic schemas for public mentor pages
"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from mentorhub.schemas.offering import OfferingResponse
from mentorhub.schemas.user import ProfileResponse, MentorProfileResponse


class MentorSkill(BaseModel):
    name: str
    category: str
    level: int
    is_verified: bool


class MentorReview(BaseModel):
    id: int
    rating: int
    comment: Optional[str]
    created_at: datetime
    rater_id: int
    rater_name: Optional[str]


class MentorDetailResponse(BaseModel):
    """Schema for the public mentor detail page"""
    id: int
    profile: ProfileResponse
    mentor_profile: MentorProfileResponse
    skills: List[MentorSkill] = Field(default_factory=list)
    offerings: List[OfferingResponse] = Field(default_factory=list)
    reviews: List[MentorReview] = Field(default_factory=list)


class MentorFilter(BaseModel):
    """Mentor directory filters"""
    search: Optional[str] = None
    skills: List[str] = Field(default_factory=list)  # skill slugs or names
    min_experience_years: Optional[int] = Field(None, ge=0)
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)

    class Config:
        extra = "forbid"


class MentorListItem(BaseModel):
    """Directory card for one mentor"""
    id: int
    display_name: str
    avatar_url: Optional[str]
    headline: Optional[str]
    specializations: List[str] = Field(default_factory=list)
    experience_years: int
    hourly_rate_cents: int
    rating: float
    total_reviews: int
    total_sessions: int


class MentorPage(BaseModel):
    """Paginated mentor directory"""
    items: List[MentorListItem]
    total: int
    limit: int
    offset: int
    has_more: bool
