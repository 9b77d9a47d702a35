"""
Booking ledger service
Slot reservation with double-booking protection and the booking status lifecycle
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Dict, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import update
import logging

from mentorhub.core.config import Settings, settings as default_settings
from mentorhub.core.exceptions import (
    AuthorizationError,
    BookingNotFoundError,
    BookingOverlapError,
    InvalidTransitionError,
    MentorNotFoundError,
    NotBookingParticipantError,
    OfferingNotFoundError,
    UserNotFoundError,
    ValidationError
)
from mentorhub.core.logging import log_status_change
from mentorhub.core.timezone import utcnow, to_naive_utc
from mentorhub.db.models.user import User, MentorProfile, UserRole, UserStatus
from mentorhub.db.models.offering import (
    Offering,
    MIN_DURATION_MINUTES,
    MAX_DURATION_MINUTES
)
from mentorhub.db.models.booking import Booking, BookingStatus, ACTIVE_STATUSES
from mentorhub.schemas.booking import (
    BookingListFilter,
    BookingPage,
    BookingResponse,
    BookingRole,
    SchedulerOutcome
)

logger = logging.getLogger(__name__)


class TransitionActor(str, Enum):
    """Who may trigger a transition"""
    MENTOR = "mentor"
    PARTICIPANT = "participant"
    SCHEDULER = "scheduler"


@dataclass(frozen=True)
class TransitionRule:
    actor: TransitionActor
    before_start: bool = False


TRANSITIONS: Dict[BookingStatus, Dict[BookingStatus, TransitionRule]] = {
    BookingStatus.PENDING: {
        BookingStatus.CONFIRMED: TransitionRule(TransitionActor.MENTOR),
        BookingStatus.CANCELLED: TransitionRule(TransitionActor.PARTICIPANT),
    },
    BookingStatus.CONFIRMED: {
        BookingStatus.CANCELLED: TransitionRule(TransitionActor.PARTICIPANT, before_start=True),
        BookingStatus.COMPLETED: TransitionRule(TransitionActor.SCHEDULER),
        BookingStatus.NO_SHOW: TransitionRule(TransitionActor.SCHEDULER),
        BookingStatus.RESCHEDULED: TransitionRule(TransitionActor.PARTICIPANT, before_start=True),
    },
    BookingStatus.COMPLETED: {},
    BookingStatus.CANCELLED: {},
    BookingStatus.NO_SHOW: {},
    BookingStatus.RESCHEDULED: {},
}

if set(TRANSITIONS) != set(BookingStatus):
    raise RuntimeError(
        f"Booking transition table is missing statuses: {set(BookingStatus) - set(TRANSITIONS)}"
    )


class BookingService:
    """Service for booking requests and status changes"""

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = utcnow,
        app_settings: Optional[Settings] = None
    ):
        cfg = app_settings or default_settings
        self.db = db
        self.clock = clock
        self.buffer = timedelta(minutes=cfg.BOOKING_BUFFER_MINUTES)
        self.default_currency = cfg.DEFAULT_CURRENCY

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _get_requester(self, mentee_id: int) -> User:
        mentee = self.db.query(User).filter(User.id == mentee_id).first()
        if mentee is None:
            raise UserNotFoundError(mentee_id)
        if mentee.status != UserStatus.ACTIVE:
            raise AuthorizationError(
                message="Only active users can request bookings",
                error_code="ACCOUNT_INACTIVE"
            )
        return mentee

    def _validate_start(self, starts_at: datetime) -> datetime:
        starts_at = to_naive_utc(starts_at)
        if starts_at <= self.clock():
            raise ValidationError(
                message="Bookings must start in the future",
                field="starts_at"
            )
        return starts_at

    def find_overlap(
        self,
        mentor_id: int,
        starts_at: datetime,
        ends_at: datetime
    ) -> Optional[Booking]:
        """First active booking of the mentor overlapping [starts_at, ends_at) plus buffer"""
        return self.db.query(Booking).filter(
            Booking.mentor_id == mentor_id,
            Booking.status.in_(list(ACTIVE_STATUSES)),
            Booking.starts_at < ends_at + self.buffer,
            Booking.ends_at > starts_at - self.buffer
        ).order_by(Booking.starts_at).first()

    def _insert_booking(self, booking: Booking) -> Booking:
        """
        Check-then-insert under a lock on the mentor's row.

        Concurrent requests for the same mentor queue on the row lock
        (on SQLite, on the database write lock taken by BEGIN IMMEDIATE);
        the PostgreSQL exclusion constraint rejects anything that slips past.
        """
        self.db.query(User).filter(User.id == booking.mentor_id).with_for_update().one()

        conflict = self.find_overlap(booking.mentor_id, booking.starts_at, booking.ends_at)
        if conflict is not None:
            self.db.rollback()
            raise BookingOverlapError(booking.mentor_id, conflict.id)

        self.db.add(booking)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise BookingOverlapError(booking.mentor_id)

        self.db.refresh(booking)
        logger.info(
            f"Booking {booking.id} requested: mentor {booking.mentor_id}, "
            f"mentee {booking.mentee_id}, starts {booking.starts_at.isoformat()}",
            extra={'booking_id': booking.id, 'user_id': booking.mentee_id}
        )
        return booking

    def request_booking(
        self,
        offering_id: int,
        mentee_id: int,
        starts_at: datetime,
        notes: Optional[str] = None
    ) -> Booking:
        """
        Reserve a slot against an offering

        The offering's price and currency are copied onto the booking.

        Raises:
            OfferingNotFoundError: If the offering is missing or inactive
            ValidationError: If the start is not in the future or the mentee owns the offering
            BookingOverlapError: If the mentor already has an active booking in the window
        """
        offering = self.db.query(Offering).filter(Offering.id == offering_id).first()
        if offering is None or not offering.is_active:
            raise OfferingNotFoundError(offering_id)

        mentor = offering.mentor
        if mentor is None or mentor.status != UserStatus.ACTIVE:
            raise OfferingNotFoundError(offering_id)

        self._get_requester(mentee_id)
        if mentee_id == offering.mentor_id:
            raise ValidationError(
                message="You cannot book your own offering",
                field="offering_id"
            )

        starts_at = self._validate_start(starts_at)
        booking = Booking(
            offering_id=offering.id,
            mentor_id=offering.mentor_id,
            mentee_id=mentee_id,
            starts_at=starts_at,
            ends_at=starts_at + timedelta(minutes=offering.duration_minutes),
            duration_minutes=offering.duration_minutes,
            status=BookingStatus.PENDING,
            price_cents=offering.price_cents,
            currency=offering.currency,
            notes=notes
        )
        return self._insert_booking(booking)

    def request_direct_booking(
        self,
        mentor_id: int,
        mentee_id: int,
        starts_at: datetime,
        duration_minutes: int = 60,
        notes: Optional[str] = None
    ) -> Booking:
        """
        Book a mentor without a catalog offering, priced from the hourly rate

        Raises:
            MentorNotFoundError: If the mentor is missing, inactive or has no mentor profile
            ValidationError: If duration or start time are invalid
            BookingOverlapError: If the slot overlaps an active booking
        """
        mentor = self.db.query(User).filter(User.id == mentor_id).first()
        if (
            mentor is None
            or mentor.role != UserRole.MENTOR
            or mentor.status != UserStatus.ACTIVE
            or mentor.mentor_profile is None
        ):
            raise MentorNotFoundError(mentor_id)

        self._get_requester(mentee_id)
        if mentee_id == mentor_id:
            raise ValidationError(message="You cannot book yourself", field="mentor_id")

        if not MIN_DURATION_MINUTES <= duration_minutes <= MAX_DURATION_MINUTES:
            raise ValidationError(
                message=(
                    f"Duration must be between {MIN_DURATION_MINUTES} "
                    f"and {MAX_DURATION_MINUTES} minutes"
                ),
                field="duration_minutes"
            )

        starts_at = self._validate_start(starts_at)
        rate = mentor.mentor_profile.hourly_rate_cents
        booking = Booking(
            offering_id=None,
            mentor_id=mentor_id,
            mentee_id=mentee_id,
            starts_at=starts_at,
            ends_at=starts_at + timedelta(minutes=duration_minutes),
            duration_minutes=duration_minutes,
            status=BookingStatus.PENDING,
            price_cents=(rate * duration_minutes + 30) // 60,
            currency=self.default_currency,
            notes=notes
        )
        return self._insert_booking(booking)

    # ------------------------------------------------------------------
    # Status lifecycle
    # ------------------------------------------------------------------

    def _get_for_update(self, booking_id: int) -> Booking:
        booking = self.db.query(Booking).filter(
            Booking.id == booking_id
        ).with_for_update().first()
        if booking is None:
            self.db.rollback()
            raise BookingNotFoundError(booking_id)
        return booking

    def _reject(self, booking: Booking, new_status: BookingStatus, reason: Optional[str] = None):
        current = booking.status
        self.db.rollback()
        raise InvalidTransitionError(current.value, new_status.value, reason)

    def _apply_transition(
        self,
        booking: Booking,
        new_status: BookingStatus,
        actor_id: Optional[int],
        reason: Optional[str]
    ) -> Booking:
        previous = booking.status
        booking.status = new_status

        if new_status == BookingStatus.CANCELLED:
            booking.cancelled_by = actor_id
            booking.cancelled_at = self.clock()
            booking.cancellation_reason = reason
        elif new_status == BookingStatus.COMPLETED:
            self.db.execute(
                update(MentorProfile)
                .where(MentorProfile.user_id == booking.mentor_id)
                .values(total_sessions=MentorProfile.total_sessions + 1)
            )

        self.db.commit()
        self.db.refresh(booking)

        log_status_change(
            logger,
            booking_id=booking.id,
            from_status=previous.value,
            to_status=new_status.value,
            actor_id=actor_id,
            reason=reason
        )
        return booking

    def set_status(
        self,
        booking_id: int,
        actor_id: int,
        new_status: BookingStatus,
        reason: Optional[str] = None,
        meeting_url: Optional[str] = None
    ) -> Booking:
        """
        Participant-driven status change

        The mentor may attach the session's meeting link when confirming.

        Raises:
            ValidationError: If a meeting link accompanies anything but a confirmation
            BookingNotFoundError: If the booking doesn't exist
            NotBookingParticipantError: If the actor is neither mentor nor mentee
            InvalidTransitionError: If the edge is not in the table or its guard fails
        """
        if meeting_url is not None and new_status != BookingStatus.CONFIRMED:
            raise ValidationError(
                message="A meeting link can only be set when confirming",
                field="meeting_url"
            )

        booking = self._get_for_update(booking_id)

        if not booking.is_participant(actor_id):
            self.db.rollback()
            raise NotBookingParticipantError(booking_id)

        rule = TRANSITIONS[booking.status].get(new_status)
        if rule is None:
            self._reject(booking, new_status)

        if rule.actor == TransitionActor.SCHEDULER:
            self._reject(booking, new_status, "Only the session scheduler can record this outcome")
        if rule.actor == TransitionActor.MENTOR and actor_id != booking.mentor_id:
            self._reject(booking, new_status, "Only the mentor can make this change")
        if rule.before_start and self.clock() >= booking.starts_at:
            self._reject(booking, new_status, "The session has already started")

        if meeting_url is not None:
            booking.meeting_url = meeting_url

        return self._apply_transition(booking, new_status, actor_id, reason)

    def apply_scheduler_signal(self, booking_id: int, outcome: SchedulerOutcome) -> Booking:
        """
        Record the outcome of a session once its start time has passed

        Raises:
            BookingNotFoundError: If the booking doesn't exist
            InvalidTransitionError: If the booking is not confirmed or hasn't started
        """
        new_status = BookingStatus(outcome.value)
        booking = self._get_for_update(booking_id)

        rule = TRANSITIONS[booking.status].get(new_status)
        if rule is None or rule.actor != TransitionActor.SCHEDULER:
            self._reject(booking, new_status)
        if self.clock() < booking.starts_at:
            self._reject(booking, new_status, "The session has not started yet")

        return self._apply_transition(booking, new_status, None, None)

    def admin_set_status(
        self,
        booking_id: int,
        admin_id: int,
        new_status: BookingStatus,
        reason: Optional[str] = None
    ) -> Booking:
        """
        Privileged override: follows the transition table, skips party and time guards
        """
        admin = self.db.query(User).filter(User.id == admin_id).first()
        if admin is None or not admin.is_admin or not admin.is_active:
            raise AuthorizationError(
                message="Admin access required",
                error_code="INSUFFICIENT_PERMISSIONS"
            )

        booking = self._get_for_update(booking_id)
        if TRANSITIONS[booking.status].get(new_status) is None:
            self._reject(booking, new_status)

        return self._apply_transition(booking, new_status, admin_id, reason or "admin override")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_booking(self, booking_id: int, actor_id: int) -> Booking:
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if booking is None:
            raise BookingNotFoundError(booking_id)

        if not booking.is_participant(actor_id):
            actor = self.db.query(User).filter(User.id == actor_id).first()
            if actor is None or not actor.is_staff:
                raise NotBookingParticipantError(booking_id)

        return booking

    def list_bookings(
        self,
        user_id: int,
        role: BookingRole,
        view: BookingListFilter = BookingListFilter.ALL,
        limit: int = 20,
        offset: int = 0
    ) -> BookingPage:
        """
        List a user's bookings as mentor or mentee

        - upcoming: starts in the future and not cancelled, soonest first
        - past: started before now, any status
        - pending: awaiting mentor confirmation
        """
        if role == BookingRole.MENTOR:
            query = self.db.query(Booking).filter(Booking.mentor_id == user_id)
        else:
            query = self.db.query(Booking).filter(Booking.mentee_id == user_id)

        now = self.clock()
        order = Booking.starts_at.desc()

        if view == BookingListFilter.UPCOMING:
            query = query.filter(
                Booking.starts_at > now,
                Booking.status != BookingStatus.CANCELLED
            )
            order = Booking.starts_at.asc()
        elif view == BookingListFilter.PAST:
            query = query.filter(Booking.starts_at < now)
        elif view == BookingListFilter.PENDING:
            query = query.filter(Booking.status == BookingStatus.PENDING)

        total = query.count()
        bookings = query.order_by(order, Booking.id.asc()).offset(offset).limit(limit).all()

        return BookingPage(
            items=[BookingResponse.model_validate(b) for b in bookings],
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + limit < total
        )
