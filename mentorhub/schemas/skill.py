"""
Pydantic schemas for skills
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


class SkillCreate(BaseModel):
    """Schema for creating a skill"""
    name: str = Field(..., min_length=2, max_length=100)
    slug: str = Field(..., min_length=2, max_length=100)
    category: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v):
        if not v.replace('-', '').replace('_', '').isalnum():
            raise ValueError('Slug must contain only letters, numbers, hyphens, and underscores')
        return v.lower()

    class Config:
        extra = "forbid"


class SkillResponse(BaseModel):
    id: int
    slug: str
    name: str
    category: str
    description: Optional[str]

    class Config:
        from_attributes = True


class UserSkillCreate(BaseModel):
    """Schema for adding a skill to the caller's profile"""
    skill_id: int
    level: int = 1
    years_of_experience: int = 0

    class Config:
        extra = "forbid"


class UserSkillResponse(BaseModel):
    id: int
    user_id: int
    skill: SkillResponse
    level: int
    years_of_experience: int
    is_verified: bool
    verified_at: Optional[datetime] = None

    class Config:
        from_attributes = True
