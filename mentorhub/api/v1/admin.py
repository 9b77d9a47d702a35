"""
Admin API endpoints
User provisioning and status, skill catalog, booking overrides,
scheduler outcomes and review moderation
"""
from fastapi import APIRouter, Depends, status

from mentorhub.core.dependencies import (
    get_current_user,
    get_current_admin,
    get_booking_service,
    get_review_service,
    get_skill_service,
    get_user_service
)
from mentorhub.db.models.user import User
from mentorhub.schemas.booking import BookingResponse, BookingStatusUpdate, SchedulerSignal
from mentorhub.schemas.review import ReviewResponse
from mentorhub.schemas.skill import SkillCreate, SkillResponse, UserSkillResponse
from mentorhub.schemas.user import UserCreate, UserProfileResponse, UserStatusUpdate
from mentorhub.services.booking_service import BookingService
from mentorhub.services.review_service import ReviewService
from mentorhub.services.skill_service import SkillService
from mentorhub.services.user_service import UserService

router = APIRouter()


# =============================================================================
# Users
# =============================================================================

@router.post("/users", response_model=UserProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    admin: User = Depends(get_current_admin),
    user_service: UserService = Depends(get_user_service)
):
    """Provision a user with a profile and the role's profile section"""
    return user_service.create_user(data)


@router.put("/users/{user_id}/status", response_model=UserProfileResponse)
async def set_user_status(
    user_id: int,
    data: UserStatusUpdate,
    admin: User = Depends(get_current_admin),
    user_service: UserService = Depends(get_user_service)
):
    """Activate, deactivate or suspend a user"""
    return user_service.set_user_status(user_id, admin.id, data.status)


# =============================================================================
# Skills
# =============================================================================

@router.post("/skills", response_model=SkillResponse, status_code=status.HTTP_201_CREATED)
async def create_skill(
    data: SkillCreate,
    admin: User = Depends(get_current_admin),
    skill_service: SkillService = Depends(get_skill_service)
):
    return skill_service.create_skill(data)


@router.post("/user-skills/{user_skill_id}/verify", response_model=UserSkillResponse)
async def verify_user_skill(
    user_skill_id: int,
    admin: User = Depends(get_current_admin),
    skill_service: SkillService = Depends(get_skill_service)
):
    return skill_service.verify_user_skill(user_skill_id, admin.id)


# =============================================================================
# Bookings
# =============================================================================

@router.patch("/bookings/{booking_id}/status", response_model=BookingResponse)
async def override_booking_status(
    booking_id: int,
    data: BookingStatusUpdate,
    admin: User = Depends(get_current_admin),
    booking_service: BookingService = Depends(get_booking_service)
):
    """
    Override a booking's status

    - Must still be an edge of the booking lifecycle
    - Participant and start-time guards do not apply
    """
    return booking_service.admin_set_status(booking_id, admin.id, data.status, reason=data.reason)


@router.post("/bookings/{booking_id}/outcome", response_model=BookingResponse)
async def record_session_outcome(
    booking_id: int,
    data: SchedulerSignal,
    admin: User = Depends(get_current_admin),
    booking_service: BookingService = Depends(get_booking_service)
):
    """
    Record completed / no_show for a confirmed booking whose start has passed

    Called by the session scheduler with an admin credential.
    """
    return booking_service.apply_scheduler_signal(booking_id, data.outcome)


# =============================================================================
# Reviews
# =============================================================================

@router.post("/reviews/{review_id}/moderate", response_model=ReviewResponse)
async def moderate_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    review_service: ReviewService = Depends(get_review_service)
):
    """Mark a review as moderated (admins and moderators)"""
    return review_service.moderate_review(review_id, current_user.id)
