"""
User API endpoints
The caller's own profile, visibility and skills
"""
from fastapi import APIRouter, Depends, status
from typing import List

from mentorhub.core.dependencies import (
    get_current_user,
    get_current_mentor,
    get_user_service,
    get_skill_service
)
from mentorhub.db.models.user import User
from mentorhub.schemas.user import ProfilePatch, UserProfileResponse, VisibilityUpdate
from mentorhub.schemas.skill import UserSkillCreate, UserSkillResponse
from mentorhub.services.user_service import UserService
from mentorhub.services.skill_service import SkillService

router = APIRouter()


@router.get("/me", response_model=UserProfileResponse)
async def get_my_profile(
    current_user: User = Depends(get_current_user)
):
    """Get the caller's user record with all profile sections"""
    return current_user


@router.patch("/me", response_model=UserProfileResponse)
async def update_my_profile(
    patch: ProfilePatch,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service)
):
    """
    Update the caller's profile

    - `profile` applies to everyone
    - `mentor` only to mentors, `preferences` only to mentees
    """
    return user_service.update_profile(current_user.id, patch)


@router.put("/me/visibility", response_model=UserProfileResponse)
async def set_my_visibility(
    data: VisibilityUpdate,
    current_user: User = Depends(get_current_mentor),
    user_service: UserService = Depends(get_user_service)
):
    """Publish or hide the caller's mentor profile"""
    return user_service.set_profile_visibility(current_user.id, data.is_public)


@router.get("/me/skills", response_model=List[UserSkillResponse])
async def list_my_skills(
    current_user: User = Depends(get_current_user),
    skill_service: SkillService = Depends(get_skill_service)
):
    return skill_service.list_user_skills(current_user.id)


@router.post("/me/skills", response_model=UserSkillResponse, status_code=status.HTTP_201_CREATED)
async def add_my_skill(
    data: UserSkillCreate,
    current_user: User = Depends(get_current_user),
    skill_service: SkillService = Depends(get_skill_service)
):
    """Add a catalog skill to the caller's profile"""
    return skill_service.add_user_skill(current_user.id, data)


@router.delete("/me/skills/{skill_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_my_skill(
    skill_id: int,
    current_user: User = Depends(get_current_user),
    skill_service: SkillService = Depends(get_skill_service)
):
    skill_service.remove_user_skill(current_user.id, skill_id)
