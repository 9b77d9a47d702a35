"""
Booking API endpoints
Slot requests, listings and participant status changes
"""
from fastapi import APIRouter, Depends, status
from typing import Optional

from mentorhub.core.dependencies import (
    Pagination,
    get_current_user,
    get_booking_service,
    get_pagination
)
from mentorhub.db.models.user import User, UserRole
from mentorhub.schemas.booking import (
    BookingListFilter,
    BookingPage,
    BookingRequest,
    BookingResponse,
    BookingRole,
    BookingStatusUpdate,
    DirectBookingRequest
)
from mentorhub.services.booking_service import BookingService

router = APIRouter()


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def request_booking(
    data: BookingRequest,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
):
    """
    Request a slot against an offering

    - Starts pending; the mentor confirms
    - 409 if the mentor already has an active booking in the window
    """
    return booking_service.request_booking(
        offering_id=data.offering_id,
        mentee_id=current_user.id,
        starts_at=data.starts_at,
        notes=data.notes
    )


@router.post("/direct", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def request_direct_booking(
    data: DirectBookingRequest,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
):
    """Book a mentor directly, priced from their hourly rate"""
    return booking_service.request_direct_booking(
        mentor_id=data.mentor_id,
        mentee_id=current_user.id,
        starts_at=data.starts_at,
        duration_minutes=data.duration_minutes,
        notes=data.notes
    )


@router.get("/", response_model=BookingPage)
async def list_bookings(
    role: Optional[BookingRole] = None,
    view: BookingListFilter = BookingListFilter.ALL,
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
):
    """
    List the caller's bookings

    - `role` defaults to the caller's own role
    - `view`: all, upcoming, past or pending
    """
    if role is None:
        role = BookingRole.MENTOR if current_user.role == UserRole.MENTOR else BookingRole.MENTEE

    return booking_service.list_bookings(
        current_user.id,
        role,
        view=view,
        limit=pagination.limit,
        offset=pagination.offset
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
):
    return booking_service.get_booking(booking_id, current_user.id)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: int,
    data: BookingStatusUpdate,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service)
):
    """
    Change a booking's status as one of its participants

    - pending -> confirmed (mentor), optionally with the meeting link
    - pending/confirmed -> cancelled (either party, confirmed only before start)
    - confirmed -> rescheduled (either party, before start)
    """
    return booking_service.set_status(
        booking_id,
        current_user.id,
        data.status,
        reason=data.reason,
        meeting_url=data.meeting_url
    )
