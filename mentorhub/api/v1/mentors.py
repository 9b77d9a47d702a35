"""
Mentor API endpoints
Mentor directory and public mentor pages
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from mentorhub.core.dependencies import get_user_service, get_offering_service
from mentorhub.schemas.mentor import MentorDetailResponse, MentorFilter, MentorPage
from mentorhub.schemas.offering import OfferingResponse
from mentorhub.services.user_service import UserService
from mentorhub.services.offering_service import OfferingService

router = APIRouter()


@router.get("/", response_model=MentorPage)
async def list_mentors(
    search: Optional[str] = None,
    skills: List[str] = Query(default=[]),
    min_experience_years: Optional[int] = Query(None, ge=0),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_service: UserService = Depends(get_user_service)
):
    """
    Browse mentors

    - Public endpoint
    - Search by name, headline or specialization; filter by skills and experience
    - Ordered by rating, then completed sessions
    """
    filters = MentorFilter(
        search=search,
        skills=skills,
        min_experience_years=min_experience_years,
        limit=limit,
        offset=offset
    )
    return user_service.search_mentors(filters)


@router.get("/{mentor_id}", response_model=MentorDetailResponse)
async def get_mentor(
    mentor_id: int,
    user_service: UserService = Depends(get_user_service)
):
    """
    Get mentor details

    - Public endpoint
    - Profile, skills, active offerings and the latest reviews
    """
    return user_service.get_mentor(mentor_id)


@router.get("/{mentor_id}/offerings", response_model=List[OfferingResponse])
async def list_mentor_offerings(
    mentor_id: int,
    offering_service: OfferingService = Depends(get_offering_service)
):
    """Active offerings of one mentor"""
    return offering_service.list_mentor_offerings(mentor_id)
