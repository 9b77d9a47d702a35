"""
Offering API endpoints
Discovery for everyone, authoring for mentors
"""
from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from mentorhub.core.dependencies import get_current_mentor, get_offering_service
from mentorhub.db.models.user import User
from mentorhub.schemas.offering import (
    OfferingCreate,
    OfferingUpdate,
    OfferingFilter,
    OfferingPage,
    OfferingResponse
)
from mentorhub.services.offering_service import OfferingService

router = APIRouter()


@router.get("/", response_model=OfferingPage)
async def list_offerings(
    search: Optional[str] = None,
    skills: List[str] = Query(default=[]),
    max_price_cents: Optional[int] = Query(None, ge=0),
    min_experience_years: Optional[int] = Query(None, ge=0),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    offering_service: OfferingService = Depends(get_offering_service)
):
    """
    Browse offerings

    - Public endpoint
    - Only active offerings of active mentors with a public profile
    - Ordered by mentor rating, then completed sessions
    """
    filters = OfferingFilter(
        search=search,
        skills=skills,
        max_price_cents=max_price_cents,
        min_experience_years=min_experience_years,
        limit=limit,
        offset=offset
    )
    return offering_service.list_offerings(filters)


@router.post("/", response_model=OfferingResponse, status_code=status.HTTP_201_CREATED)
async def create_offering(
    data: OfferingCreate,
    current_user: User = Depends(get_current_mentor),
    offering_service: OfferingService = Depends(get_offering_service)
):
    return offering_service.create_offering(current_user.id, data)


@router.get("/mine", response_model=List[OfferingResponse])
async def list_my_offerings(
    include_inactive: bool = False,
    current_user: User = Depends(get_current_mentor),
    offering_service: OfferingService = Depends(get_offering_service)
):
    return offering_service.list_mentor_offerings(current_user.id, include_inactive=include_inactive)


@router.get("/{offering_id}", response_model=OfferingResponse)
async def get_offering(
    offering_id: int,
    offering_service: OfferingService = Depends(get_offering_service)
):
    return offering_service.get_offering(offering_id)


@router.patch("/{offering_id}", response_model=OfferingResponse)
async def update_offering(
    offering_id: int,
    patch: OfferingUpdate,
    current_user: User = Depends(get_current_mentor),
    offering_service: OfferingService = Depends(get_offering_service)
):
    """Update an offering the caller owns; the merged result is revalidated"""
    return offering_service.update_offering(offering_id, current_user.id, patch)


@router.delete("/{offering_id}", response_model=OfferingResponse)
async def deactivate_offering(
    offering_id: int,
    current_user: User = Depends(get_current_mentor),
    offering_service: OfferingService = Depends(get_offering_service)
):
    """Deactivate (never delete) an offering"""
    return offering_service.deactivate_offering(offering_id, current_user.id)
