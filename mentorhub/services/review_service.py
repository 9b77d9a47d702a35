"""
Review ledger service
Post-session reviews and the ratee's aggregate rating
"""
from datetime import datetime
from typing import Callable, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import update, literal
import logging

from mentorhub.core.exceptions import (
    AuthorizationError,
    BookingNotFoundError,
    DuplicateReviewError,
    InvalidStateError,
    NotBookingParticipantError,
    ReviewNotFoundError,
    ValidationError
)
from mentorhub.core.timezone import utcnow
from mentorhub.db.models.user import User, Profile, UserRole
from mentorhub.db.models.booking import Booking, BookingStatus
from mentorhub.db.models.review import Review
from mentorhub.schemas.review import ReviewDirection, ReviewPage, ReviewResponse

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5

MODERATOR_ROLES = frozenset({UserRole.ADMIN, UserRole.MODERATOR})


def validate_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(
            message=f"Rating must be a whole number between {MIN_RATING} and {MAX_RATING}",
            field="rating"
        )
    return rating


class ReviewService:
    """Service for submitting, editing and listing reviews"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def _has_reviewed(self, booking_id: int, rater_id: int) -> bool:
        return self.db.query(Review.id).filter(
            Review.booking_id == booking_id,
            Review.rater_id == rater_id
        ).first() is not None

    def submit_review(
        self,
        booking_id: int,
        rater_id: int,
        rating: int,
        comment: Optional[str] = None
    ) -> Review:
        """
        Review the other party of a completed booking

        The ratee's average and count are updated in the same transaction with
        a single UPDATE, so concurrent reviews of one user never lose a write.

        Raises:
            ValidationError: If rating is outside 1..5
            BookingNotFoundError: If the booking doesn't exist
            NotBookingParticipantError: If the rater isn't on the booking
            InvalidStateError: If the booking is not completed
            DuplicateReviewError: If the rater already reviewed this booking
        """
        rating = validate_rating(rating)

        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if booking is None:
            raise BookingNotFoundError(booking_id)

        if not booking.is_participant(rater_id):
            raise NotBookingParticipantError(booking_id)

        if booking.status != BookingStatus.COMPLETED:
            raise InvalidStateError(
                message="Only completed sessions can be reviewed",
                error_code="BOOKING_NOT_COMPLETED",
                details={"booking_id": booking_id, "status": booking.status.value}
            )

        if self._has_reviewed(booking_id, rater_id):
            raise DuplicateReviewError(booking_id)

        ratee_id = booking.counterpart_id(rater_id)
        review = Review(
            booking_id=booking_id,
            rater_id=rater_id,
            ratee_id=ratee_id,
            rating=rating,
            comment=comment
        )
        self.db.add(review)

        try:
            self.db.flush()
            self.db.execute(
                update(Profile)
                .where(Profile.user_id == ratee_id)
                .values(
                    rating=(Profile.rating * Profile.total_reviews + literal(float(rating)))
                    / (Profile.total_reviews + 1),
                    total_reviews=Profile.total_reviews + 1
                )
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateReviewError(booking_id)

        self.db.refresh(review)
        logger.info(
            f"Review {review.id} submitted for booking {booking_id}: "
            f"user {rater_id} rated user {ratee_id} {rating}/5",
            extra={'booking_id': booking_id, 'user_id': rater_id}
        )
        return review

    def update_review(
        self,
        review_id: int,
        rater_id: int,
        rating: Optional[int] = None,
        comment: Optional[str] = None
    ) -> Review:
        """
        Edit a review before it is moderated

        Raises:
            ReviewNotFoundError: If the review doesn't exist
            AuthorizationError: If the caller didn't write it
            InvalidStateError: If it has been moderated
            ValidationError: If the new rating is outside 1..5
        """
        review = self.db.query(Review).filter(Review.id == review_id).with_for_update().first()
        if review is None:
            self.db.rollback()
            raise ReviewNotFoundError(review_id)

        if review.rater_id != rater_id:
            self.db.rollback()
            raise AuthorizationError(message="You can only edit your own reviews")

        if review.is_moderated:
            self.db.rollback()
            raise InvalidStateError(
                message="Moderated reviews can no longer be edited",
                error_code="REVIEW_MODERATED",
                details={"review_id": review_id}
            )

        if rating is not None:
            rating = validate_rating(rating)
            delta = rating - review.rating
            if delta:
                self.db.execute(
                    update(Profile)
                    .where(Profile.user_id == review.ratee_id, Profile.total_reviews > 0)
                    .values(rating=Profile.rating + literal(float(delta)) / Profile.total_reviews)
                )
                review.rating = rating

        if comment is not None:
            review.comment = comment

        self.db.commit()
        self.db.refresh(review)

        logger.info(f"Review {review.id} updated by user {rater_id}")
        return review

    def moderate_review(self, review_id: int, moderator_id: int) -> Review:
        """Mark a review as moderated; it becomes immutable"""
        moderator = self.db.query(User).filter(User.id == moderator_id).first()
        if moderator is None or moderator.role not in MODERATOR_ROLES or not moderator.is_active:
            raise AuthorizationError(
                message="Moderator access required",
                error_code="INSUFFICIENT_PERMISSIONS"
            )

        review = self.db.query(Review).filter(Review.id == review_id).first()
        if review is None:
            raise ReviewNotFoundError(review_id)

        if not review.is_moderated:
            review.moderated_at = self.clock()
            review.moderated_by = moderator_id
            self.db.commit()
            self.db.refresh(review)
            logger.info(f"Review {review.id} moderated by user {moderator_id}")

        return review

    def list_reviews(
        self,
        user_id: int,
        direction: ReviewDirection,
        limit: int = 20,
        offset: int = 0
    ) -> ReviewPage:
        """Reviews a user gave or received, newest first"""
        if direction == ReviewDirection.GIVEN:
            query = self.db.query(Review).filter(Review.rater_id == user_id)
        else:
            query = self.db.query(Review).filter(Review.ratee_id == user_id)

        total = query.count()
        reviews = query.order_by(
            Review.created_at.desc(),
            Review.id.desc()
        ).offset(offset).limit(limit).all()

        return ReviewPage(
            items=[ReviewResponse.model_validate(r) for r in reviews],
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + limit < total
        )
