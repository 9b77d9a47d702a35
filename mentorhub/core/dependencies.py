"""
FastAPI dependencies for caller identity, pagination and service construction.
"""
from typing import Optional
from fastapi import Depends, Query, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from mentorhub.core.config import Settings
from mentorhub.core.exceptions import (
    AccountInactiveError,
    AuthenticationError,
    InsufficientPermissionsError
)
from mentorhub.core.security import decode_token, get_subject
from mentorhub.db.session import get_db
from mentorhub.db.models.user import User, UserRole
from mentorhub.services.booking_service import BookingService
from mentorhub.services.dashboard_service import DashboardService
from mentorhub.services.offering_service import OfferingService
from mentorhub.services.review_service import ReviewService
from mentorhub.services.skill_service import SkillService
from mentorhub.services.user_service import UserService

# Security scheme
security_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    """Settings the running application was created with"""
    return request.app.state.settings


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings)
) -> User:
    """
    Resolve the caller from the bearer token issued by the auth service.

    Raises:
        AuthenticationError: If the token is missing or invalid, or the user is unknown
        AccountInactiveError: If the user's status is not active
    """
    if credentials is None:
        raise AuthenticationError(message="Not authenticated", error_code="NOT_AUTHENTICATED")

    payload = decode_token(credentials.credentials, app_settings)
    user_id = get_subject(payload)

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise AuthenticationError()

    if not user.is_active:
        raise AccountInactiveError(user.status.value)

    return user


async def get_current_mentor(
    current_user: User = Depends(get_current_user)
) -> User:
    """Require the caller to be a mentor"""
    if current_user.role != UserRole.MENTOR:
        raise InsufficientPermissionsError(required_role=UserRole.MENTOR.value)
    return current_user


async def get_current_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Require the caller to be an admin"""
    if current_user.role != UserRole.ADMIN:
        raise InsufficientPermissionsError(required_role=UserRole.ADMIN.value)
    return current_user


class Pagination:
    """Limit/offset pagination dependency."""

    def __init__(
        self,
        limit: int = 20,
        offset: int = 0,
        max_limit: int = 100
    ):
        self.limit = max(1, min(limit, max_limit))
        self.offset = max(0, offset)


def get_pagination(
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    app_settings: Settings = Depends(get_settings)
) -> Pagination:
    """Get pagination parameters, capped by MAX_PAGE_SIZE."""
    return Pagination(
        limit=limit or app_settings.DEFAULT_PAGE_SIZE,
        offset=offset,
        max_limit=app_settings.MAX_PAGE_SIZE
    )


# =============================================================================
# Services (one per request, bound to the request's session)
# =============================================================================

def get_offering_service(db: Session = Depends(get_db)) -> OfferingService:
    return OfferingService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings)
) -> BookingService:
    return BookingService(db, app_settings=app_settings)


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


def get_dashboard_service(
    db: Session = Depends(get_db),
    app_settings: Settings = Depends(get_settings)
) -> DashboardService:
    return DashboardService(db, recent_activity_limit=app_settings.DASHBOARD_RECENT_ACTIVITY_LIMIT)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_skill_service(db: Session = Depends(get_db)) -> SkillService:
    return SkillService(db)
