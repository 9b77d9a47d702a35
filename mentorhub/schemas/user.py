"""
Pydantic schemas for users and profiles
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict
from datetime import datetime

from mentorhub.db.models.user import UserRole, UserStatus


def _check_url(v):
    if v and not (v.startswith('http://') or v.startswith('https://')):
        raise ValueError('URL must be a valid HTTP(S) URL')
    return v


class UserCreate(BaseModel):
    """Schema for provisioning a user (admin and seed tooling)"""
    email: str = Field(..., max_length=255)
    display_name: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.MENTEE
    status: UserStatus = UserStatus.ACTIVE
    timezone: str = "UTC"

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        v = v.strip().lower()
        if '@' not in v or v.startswith('@') or v.endswith('@'):
            raise ValueError('Please enter a valid email address')
        return v

    class Config:
        extra = "forbid"


class UserStatusUpdate(BaseModel):
    status: UserStatus

    class Config:
        extra = "forbid"


class VisibilityUpdate(BaseModel):
    is_public: bool

    class Config:
        extra = "forbid"


class SocialLinks(BaseModel):
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    github: Optional[str] = None

    @field_validator('linkedin', 'twitter', 'github')
    @classmethod
    def validate_urls(cls, v):
        return _check_url(v)

    class Config:
        extra = "forbid"


class ProfileUpdate(BaseModel):
    """Partial update of the general profile"""
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    avatar_url: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = Field(None, max_length=1000)
    languages: Optional[List[str]] = None
    timezone: Optional[str] = Field(None, max_length=64)
    country: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    website: Optional[str] = Field(None, max_length=500)
    social_links: Optional[SocialLinks] = None

    @field_validator('avatar_url', 'website')
    @classmethod
    def validate_urls(cls, v):
        return _check_url(v)

    @field_validator('languages')
    @classmethod
    def validate_languages(cls, v):
        if v is None:
            return v
        codes = [code.strip().lower() for code in v]
        if any(len(code) != 2 or not code.isalpha() for code in codes):
            raise ValueError('Languages must be two-letter ISO codes')
        return codes

    class Config:
        extra = "forbid"


class MentorProfileUpdate(BaseModel):
    """Partial update of the mentor profile"""
    headline: Optional[str] = Field(None, min_length=10, max_length=200)
    hourly_rate_cents: Optional[int] = Field(None, ge=0)
    experience_years: Optional[int] = Field(None, ge=0, le=100)
    intro_video_url: Optional[str] = Field(None, max_length=500)
    specializations: Optional[List[str]] = None
    response_time_hours: Optional[int] = Field(None, ge=0)

    @field_validator('intro_video_url')
    @classmethod
    def validate_video_url(cls, v):
        return _check_url(v)

    class Config:
        extra = "forbid"


class MatchPreferencesUpdate(BaseModel):
    """Partial update of mentee preferences"""
    goals: Optional[List[str]] = None
    preferred_languages: Optional[List[str]] = None
    budget_cents: Optional[int] = Field(None, ge=0)
    time_commitment: Optional[str] = Field(None, max_length=100)
    preferred_mentoring_style: Optional[str] = Field(None, max_length=100)
    current_role: Optional[str] = Field(None, max_length=200)
    skills_to_develop: Optional[List[str]] = None

    class Config:
        extra = "forbid"


class ProfilePatch(BaseModel):
    """
    Closed patch over a user's profiles.
    Each section is optional; sections that don't apply to the user's role are rejected.
    """
    profile: Optional[ProfileUpdate] = None
    mentor: Optional[MentorProfileUpdate] = None
    preferences: Optional[MatchPreferencesUpdate] = None

    class Config:
        extra = "forbid"


class ProfileResponse(BaseModel):
    display_name: str
    avatar_url: Optional[str]
    bio: Optional[str]
    languages: List[str] = Field(default_factory=list)
    timezone: str
    country: Optional[str]
    city: Optional[str]
    website: Optional[str]
    social_links: Dict[str, Optional[str]] = Field(default_factory=dict)
    rating: float
    total_reviews: int

    @field_validator('languages', 'social_links', mode='before')
    @classmethod
    def none_to_empty(cls, v, info):
        if v is None:
            return [] if info.field_name == 'languages' else {}
        return v

    class Config:
        from_attributes = True


class MentorProfileResponse(BaseModel):
    headline: Optional[str]
    hourly_rate_cents: int
    experience_years: int
    intro_video_url: Optional[str]
    is_public: bool
    specializations: List[str] = Field(default_factory=list)
    response_time_hours: int
    total_sessions: int

    @field_validator('specializations', mode='before')
    @classmethod
    def none_to_empty(cls, v):
        return v or []

    class Config:
        from_attributes = True


class MatchPreferencesResponse(BaseModel):
    goals: List[str] = Field(default_factory=list)
    preferred_languages: List[str] = Field(default_factory=list)
    budget_cents: Optional[int]
    time_commitment: Optional[str]
    preferred_mentoring_style: Optional[str]
    current_role: Optional[str]
    skills_to_develop: List[str] = Field(default_factory=list)

    @field_validator('goals', 'preferred_languages', 'skills_to_develop', mode='before')
    @classmethod
    def none_to_empty(cls, v):
        return v or []

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    id: int
    email: str
    role: UserRole
    status: UserStatus
    email_verified: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UserProfileResponse(UserResponse):
    """User with all profile sections"""
    profile: Optional[ProfileResponse] = None
    mentor_profile: Optional[MentorProfileResponse] = None
    match_preferences: Optional[MatchPreferencesResponse] = None
