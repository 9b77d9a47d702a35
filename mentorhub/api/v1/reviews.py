"""
Review API endpoints
"""
from fastapi import APIRouter, Depends, status

from mentorhub.core.dependencies import (
    Pagination,
    get_current_user,
    get_review_service,
    get_pagination
)
from mentorhub.db.models.user import User
from mentorhub.schemas.review import (
    ReviewCreate,
    ReviewDirection,
    ReviewPage,
    ReviewResponse,
    ReviewUpdate
)
from mentorhub.services.review_service import ReviewService

router = APIRouter()


@router.post("/", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def submit_review(
    data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
):
    """
    Review the other party of a completed booking

    - One review per participant per booking
    """
    return review_service.submit_review(
        booking_id=data.booking_id,
        rater_id=current_user.id,
        rating=data.rating,
        comment=data.comment
    )


@router.patch("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: int,
    data: ReviewUpdate,
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
):
    return review_service.update_review(
        review_id,
        current_user.id,
        rating=data.rating,
        comment=data.comment
    )


@router.get("/", response_model=ReviewPage)
async def list_my_reviews(
    direction: ReviewDirection = ReviewDirection.RECEIVED,
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
):
    """Reviews the caller received (default) or gave"""
    return review_service.list_reviews(
        current_user.id,
        direction,
        limit=pagination.limit,
        offset=pagination.offset
    )
