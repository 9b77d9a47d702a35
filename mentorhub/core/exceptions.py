"""
Custom Exception Classes for MentorHub
Provides structured error responses with error codes for frontend handling
"""
from typing import Optional, Dict, Any


class AppException(Exception):
    """Base exception class for application errors"""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response"""
        response = {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response


# =============================================================================
# Authentication Exceptions
# =============================================================================

class AuthenticationError(AppException):
    """Missing, invalid or expired credentials"""

    def __init__(
        self,
        message: str = "Could not validate credentials",
        error_code: str = "AUTH_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=401,
            details=details
        )


class AccountInactiveError(AuthenticationError):
    """User account is not active"""

    def __init__(self, status: Optional[str] = None):
        super().__init__(
            message="Your account is not active. Please contact support.",
            error_code="ACCOUNT_INACTIVE",
            details={"status": status} if status else None
        )


# =============================================================================
# Authorization Exceptions
# =============================================================================

class AuthorizationError(AppException):
    """Caller lacks rights over the target entity"""

    def __init__(
        self,
        message: str = "You don't have permission to perform this action",
        error_code: str = "FORBIDDEN",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=403,
            details=details
        )


class InsufficientPermissionsError(AuthorizationError):
    """User lacks required role"""

    def __init__(self, required_role: Optional[str] = None):
        details = {"required_role": required_role} if required_role else None
        super().__init__(
            message="You don't have the required permissions for this action",
            error_code="INSUFFICIENT_PERMISSIONS",
            details=details
        )


class NotBookingParticipantError(AuthorizationError):
    """Actor is neither the mentor nor the mentee on a booking"""

    def __init__(self, booking_id: Optional[int] = None):
        super().__init__(
            message="You are not a participant in this booking",
            error_code="NOT_BOOKING_PARTICIPANT",
            details={"booking_id": booking_id} if booking_id else None
        )


# =============================================================================
# Validation Exceptions
# =============================================================================

class ValidationError(AppException):
    """Malformed or out-of-range input"""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: str = "VALIDATION_ERROR",
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if field and not details:
            details = {"field": field}
        elif field and details:
            details["field"] = field

        super().__init__(
            message=message,
            error_code=error_code,
            status_code=422,
            details=details
        )


# =============================================================================
# Resource Exceptions
# =============================================================================

class NotFoundError(AppException):
    """Referenced entity missing or inactive"""

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[Any] = None
    ):
        details = {"resource_id": resource_id} if resource_id is not None else None
        super().__init__(
            message=f"{resource} not found",
            error_code="RESOURCE_NOT_FOUND",
            status_code=404,
            details=details
        )


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: Optional[int] = None):
        super().__init__(resource="User", resource_id=user_id)


class MentorNotFoundError(NotFoundError):
    def __init__(self, mentor_id: Optional[int] = None):
        super().__init__(resource="Mentor", resource_id=mentor_id)


class OfferingNotFoundError(NotFoundError):
    def __init__(self, offering_id: Optional[int] = None):
        super().__init__(resource="Offering", resource_id=offering_id)


class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: Optional[int] = None):
        super().__init__(resource="Booking", resource_id=booking_id)


class ReviewNotFoundError(NotFoundError):
    def __init__(self, review_id: Optional[int] = None):
        super().__init__(resource="Review", resource_id=review_id)


class SkillNotFoundError(NotFoundError):
    def __init__(self, skill_id: Optional[Any] = None):
        super().__init__(resource="Skill", resource_id=skill_id)


# =============================================================================
# Conflict Exceptions
# =============================================================================

class ConflictError(AppException):
    """Uniqueness or overlap violation"""

    def __init__(
        self,
        message: str = "The request conflicts with existing data",
        error_code: str = "CONFLICT",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=409,
            details=details
        )


class BookingOverlapError(ConflictError):
    """Requested slot overlaps an active booking of the same mentor"""

    def __init__(self, mentor_id: int, conflicting_booking_id: Optional[int] = None):
        details = {"mentor_id": mentor_id}
        if conflicting_booking_id is not None:
            details["conflicting_booking_id"] = conflicting_booking_id
        super().__init__(
            message="The mentor already has a session booked at this time",
            error_code="BOOKING_OVERLAP",
            details=details
        )


class DuplicateReviewError(ConflictError):
    """A review already exists for this booking and rater"""

    def __init__(self, booking_id: int):
        super().__init__(
            message="You have already reviewed this booking",
            error_code="DUPLICATE_REVIEW",
            details={"booking_id": booking_id}
        )


# =============================================================================
# Lifecycle Exceptions
# =============================================================================

class InvalidTransitionError(AppException):
    """Booking status change not allowed by the state machine"""

    def __init__(
        self,
        from_status: str,
        to_status: str,
        reason: Optional[str] = None
    ):
        details = {"from_status": from_status, "to_status": to_status}
        if reason:
            details["reason"] = reason
        super().__init__(
            message=f"Cannot change booking status from {from_status} to {to_status}",
            error_code="INVALID_TRANSITION",
            status_code=409,
            details=details
        )


class InvalidStateError(AppException):
    """Entity is not in the lifecycle stage the operation requires"""

    def __init__(
        self,
        message: str,
        error_code: str = "INVALID_STATE",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=409,
            details=details
        )
