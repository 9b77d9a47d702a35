"""
Pydantic schemas for the offering catalog
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from mentorhub.db.models.offering import OfferingType


def _normalize_tags(v):
    if v is None:
        return v
    seen = []
    for tag in v:
        tag = tag.strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class OfferingCreate(BaseModel):
    """Schema for creating an offering"""
    title: str = Field(..., max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    type: OfferingType = OfferingType.ONE_ON_ONE
    duration_minutes: int
    price_cents: int = 0
    currency: str = "USD"
    max_participants: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    skill_ids: List[int] = Field(default_factory=list)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v):
        return v.strip().upper()

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return _normalize_tags(v)

    class Config:
        extra = "forbid"


class OfferingUpdate(BaseModel):
    """Partial update for an offering; unknown keys are rejected"""
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    type: Optional[OfferingType] = None
    duration_minutes: Optional[int] = None
    price_cents: Optional[int] = None
    currency: Optional[str] = None
    max_participants: Optional[int] = None
    tags: Optional[List[str]] = None
    skill_ids: Optional[List[int]] = None

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v):
        return v.strip().upper() if v is not None else v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return _normalize_tags(v)

    class Config:
        extra = "forbid"


class OfferingFilter(BaseModel):
    """Discovery filters for active offerings"""
    search: Optional[str] = None
    skills: List[str] = Field(default_factory=list)  # skill slugs
    max_price_cents: Optional[int] = Field(None, ge=0)
    min_experience_years: Optional[int] = Field(None, ge=0)
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)

    class Config:
        extra = "forbid"


class OfferingSkill(BaseModel):
    id: int
    slug: str
    name: str

    class Config:
        from_attributes = True


class OfferingResponse(BaseModel):
    """Schema for offering response"""
    id: int
    mentor_id: int
    title: str
    description: Optional[str]
    type: OfferingType
    duration_minutes: int
    price_cents: int
    currency: str
    max_participants: int
    is_group: bool
    tags: List[str] = Field(default_factory=list)
    skills: List[OfferingSkill] = Field(default_factory=list)
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @field_validator("tags", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or []

    class Config:
        from_attributes = True


class OfferingListItem(OfferingResponse):
    """Offering with the mentor summary used in discovery"""
    mentor_name: str
    mentor_headline: Optional[str] = None
    mentor_experience_years: int = 0
    mentor_rating: float = 0.0
    mentor_total_sessions: int = 0


class OfferingPage(BaseModel):
    """Paginated discovery results"""
    items: List[OfferingListItem]
    total: int
    limit: int
    offset: int
    has_more: bool
