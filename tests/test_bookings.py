"""
Booking ledger: slot reservation, double-booking protection and the status lifecycle.
"""
from datetime import timedelta

import pytest
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import IntegrityError

from mentorhub.core.config import Settings
from mentorhub.core.exceptions import (
    AuthorizationError,
    BookingOverlapError,
    ConflictError,
    InvalidTransitionError,
    MentorNotFoundError,
    NotBookingParticipantError,
    OfferingNotFoundError,
    ValidationError
)
from mentorhub.db.models import Booking, BookingStatus, MentorProfile, UserRole, TERMINAL_STATUSES
from mentorhub.schemas.booking import BookingListFilter, BookingRole, BookingStatusUpdate, SchedulerOutcome
from mentorhub.schemas.offering import OfferingUpdate
from mentorhub.services.booking_service import TRANSITIONS, BookingService
from mentorhub.services.offering_service import OfferingService


@pytest.fixture
def service(db, clock):
    return BookingService(db, clock=clock)


@pytest.fixture
def tomorrow(clock):
    return clock() + timedelta(days=1)


@pytest.fixture
def pending(service, offering, mentee, tomorrow):
    return service.request_booking(offering.id, mentee.id, tomorrow, notes="Career change")


@pytest.fixture
def confirmed(service, pending, mentor):
    return service.set_status(pending.id, mentor.id, BookingStatus.CONFIRMED)


# =============================================================================
# Requesting
# =============================================================================

def test_request_snapshots_offering_terms(pending, offering, mentor, mentee, tomorrow):
    assert pending.status == BookingStatus.PENDING
    assert pending.mentor_id == mentor.id
    assert pending.mentee_id == mentee.id
    assert pending.starts_at == tomorrow
    assert pending.ends_at == tomorrow + timedelta(minutes=60)
    assert pending.duration_minutes == 60
    assert pending.price_cents == 5000
    assert pending.currency == "USD"
    assert pending.notes == "Career change"


def test_price_snapshot_survives_offering_edit(db, pending, offering, mentor):
    OfferingService(db).update_offering(offering.id, mentor.id, OfferingUpdate(price_cents=9900))
    db.refresh(pending)

    assert pending.price_cents == 5000


def test_start_must_be_in_future(service, offering, mentee, clock):
    with pytest.raises(ValidationError):
        service.request_booking(offering.id, mentee.id, clock())
    with pytest.raises(ValidationError):
        service.request_booking(offering.id, mentee.id, clock() - timedelta(hours=1))


def test_missing_or_inactive_offering(db, service, offering, mentor, mentee, tomorrow):
    with pytest.raises(OfferingNotFoundError):
        service.request_booking(9999, mentee.id, tomorrow)

    OfferingService(db).deactivate_offering(offering.id, mentor.id)
    with pytest.raises(OfferingNotFoundError):
        service.request_booking(offering.id, mentee.id, tomorrow)


def test_mentor_cannot_book_own_offering(service, offering, mentor, tomorrow):
    with pytest.raises(ValidationError):
        service.request_booking(offering.id, mentor.id, tomorrow)


def test_same_slot_conflicts_while_pending(service, pending, offering, make_user, tomorrow):
    other = make_user()
    with pytest.raises(BookingOverlapError) as exc_info:
        service.request_booking(offering.id, other.id, tomorrow)

    assert isinstance(exc_info.value, ConflictError)
    assert exc_info.value.details["conflicting_booking_id"] == pending.id


def test_partial_overlap_conflicts(service, pending, offering, make_user, tomorrow):
    other = make_user()
    with pytest.raises(BookingOverlapError):
        service.request_booking(offering.id, other.id, tomorrow + timedelta(minutes=30))
    with pytest.raises(BookingOverlapError):
        service.request_booking(offering.id, other.id, tomorrow - timedelta(minutes=30))


def test_back_to_back_slots_allowed(service, pending, offering, make_user, tomorrow):
    other = make_user()
    after = service.request_booking(offering.id, other.id, tomorrow + timedelta(minutes=60))
    before = service.request_booking(offering.id, other.id, tomorrow - timedelta(minutes=60))

    assert after.status == BookingStatus.PENDING
    assert before.status == BookingStatus.PENDING


def test_overlap_spans_all_offerings_of_mentor(service, pending, make_offering, mentor, make_user, tomorrow):
    other_offering = make_offering(mentor, title="Resume review", duration_minutes=30)
    with pytest.raises(BookingOverlapError):
        service.request_booking(other_offering.id, make_user().id, tomorrow + timedelta(minutes=15))


def test_cancelled_booking_frees_the_slot(service, pending, offering, mentee, make_user, tomorrow):
    service.set_status(pending.id, mentee.id, BookingStatus.CANCELLED)

    rebooked = service.request_booking(offering.id, make_user().id, tomorrow)
    assert rebooked.status == BookingStatus.PENDING


def test_store_rejection_maps_to_overlap(db, service, pending, offering, make_user, tomorrow, monkeypatch):
    other = make_user()

    def exclusion_violation():
        raise IntegrityError("INSERT INTO bookings", {}, Exception("ex_bookings_mentor_overlap"))

    # A racing request that passed the overlap check before the first one committed
    monkeypatch.setattr(service, "find_overlap", lambda *args: None)
    monkeypatch.setattr(db, "commit", exclusion_violation)

    with pytest.raises(BookingOverlapError):
        service.request_booking(offering.id, other.id, tomorrow)

    monkeypatch.undo()
    assert db.query(Booking).filter(Booking.mentor_id == offering.mentor_id).count() == 1


def test_buffer_setting_widens_the_window(db, clock, offering, pending, make_user, tomorrow):
    buffered = BookingService(
        db,
        clock=clock,
        app_settings=Settings(DATABASE_URL="sqlite://", BOOKING_BUFFER_MINUTES=15)
    )
    with pytest.raises(BookingOverlapError):
        buffered.request_booking(offering.id, make_user().id, tomorrow + timedelta(minutes=70))

    later = buffered.request_booking(offering.id, make_user().id, tomorrow + timedelta(minutes=75))
    assert later.status == BookingStatus.PENDING


def test_buffer_setting_is_bounded():
    with pytest.raises(SchemaValidationError):
        Settings(BOOKING_BUFFER_MINUTES=500)


def test_settings_ignore_unknown_keys():
    cfg = Settings(DATABASE_URL="sqlite://", STRIPE_SECRET_KEY="unused")

    assert not hasattr(cfg, "STRIPE_SECRET_KEY")
    assert cfg.is_sqlite


# =============================================================================
# Direct bookings
# =============================================================================

def test_direct_booking_priced_from_hourly_rate(db, service, mentor, mentee, tomorrow):
    mentor.mentor_profile.hourly_rate_cents = 1001
    db.commit()

    booking = service.request_direct_booking(mentor.id, mentee.id, tomorrow, duration_minutes=30)

    assert booking.offering_id is None
    assert booking.price_cents == 501
    assert booking.currency == "USD"
    assert booking.ends_at == tomorrow + timedelta(minutes=30)


def test_direct_booking_checks_overlap(service, pending, mentor, make_user, tomorrow):
    with pytest.raises(BookingOverlapError):
        service.request_direct_booking(mentor.id, make_user().id, tomorrow)


def test_direct_booking_requires_mentor(service, make_user, mentee, tomorrow):
    with pytest.raises(MentorNotFoundError):
        service.request_direct_booking(make_user().id, mentee.id, tomorrow)


def test_direct_booking_duration_bounds(service, mentor, mentee, tomorrow):
    with pytest.raises(ValidationError):
        service.request_direct_booking(mentor.id, mentee.id, tomorrow, duration_minutes=10)


# =============================================================================
# Status lifecycle
# =============================================================================

def test_transition_table_covers_every_status():
    assert set(TRANSITIONS) == set(BookingStatus)
    assert all(TRANSITIONS[status] == {} for status in TERMINAL_STATUSES)


def test_mentor_confirms(confirmed):
    assert confirmed.status == BookingStatus.CONFIRMED
    assert confirmed.meeting_url is None


def test_confirmation_carries_meeting_link(service, pending, mentor):
    booking = service.set_status(
        pending.id, mentor.id, BookingStatus.CONFIRMED, meeting_url="https://meet.example.com/abc"
    )

    assert booking.meeting_url == "https://meet.example.com/abc"


def test_meeting_link_only_on_confirmation(service, pending, mentee):
    with pytest.raises(ValidationError):
        service.set_status(pending.id, mentee.id, BookingStatus.CANCELLED, meeting_url="https://meet.example.com/x")

    with pytest.raises(SchemaValidationError):
        BookingStatusUpdate(status=BookingStatus.CONFIRMED, meeting_url="ftp://meet.example.com")


def test_mentee_cannot_confirm(service, pending, mentee):
    with pytest.raises(InvalidTransitionError):
        service.set_status(pending.id, mentee.id, BookingStatus.CONFIRMED)


def test_outsider_cannot_change_status(service, pending, make_user):
    with pytest.raises(NotBookingParticipantError) as exc_info:
        service.set_status(pending.id, make_user().id, BookingStatus.CANCELLED)
    assert isinstance(exc_info.value, AuthorizationError)


@pytest.mark.parametrize("actor", ["mentor", "mentee"])
def test_either_party_cancels_pending(service, pending, mentor, mentee, clock, actor):
    actor_id = mentor.id if actor == "mentor" else mentee.id

    cancelled = service.set_status(pending.id, actor_id, BookingStatus.CANCELLED, reason="Conflict")

    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.cancelled_by == actor_id
    assert cancelled.cancelled_at == clock()
    assert cancelled.cancellation_reason == "Conflict"


def test_confirmed_cancellable_only_before_start(service, confirmed, mentee, clock):
    clock.advance(days=1)
    with pytest.raises(InvalidTransitionError) as exc_info:
        service.set_status(confirmed.id, mentee.id, BookingStatus.CANCELLED)
    assert exc_info.value.details["from_status"] == "confirmed"


def test_reschedule_before_start(service, confirmed, mentee):
    assert service.set_status(confirmed.id, mentee.id, BookingStatus.RESCHEDULED).status == BookingStatus.RESCHEDULED


def test_participants_cannot_record_outcomes(service, confirmed, mentor, clock):
    clock.advance(days=2)
    with pytest.raises(InvalidTransitionError):
        service.set_status(confirmed.id, mentor.id, BookingStatus.COMPLETED)
    with pytest.raises(InvalidTransitionError):
        service.set_status(confirmed.id, mentor.id, BookingStatus.NO_SHOW)


def test_edges_outside_table_rejected(service, pending, mentor):
    with pytest.raises(InvalidTransitionError):
        service.set_status(pending.id, mentor.id, BookingStatus.COMPLETED)
    with pytest.raises(InvalidTransitionError):
        service.set_status(pending.id, mentor.id, BookingStatus.RESCHEDULED)
    with pytest.raises(InvalidTransitionError):
        service.set_status(pending.id, mentor.id, BookingStatus.PENDING)


@pytest.mark.parametrize("target", list(BookingStatus))
def test_terminal_statuses_have_no_exits(service, pending, mentee, mentor, target):
    service.set_status(pending.id, mentee.id, BookingStatus.CANCELLED)
    assert pending.is_terminal
    with pytest.raises(InvalidTransitionError):
        service.set_status(pending.id, mentor.id, target)


def test_failed_transition_leaves_booking_unchanged(db, service, pending, mentee):
    with pytest.raises(InvalidTransitionError):
        service.set_status(pending.id, mentee.id, BookingStatus.CONFIRMED)

    db.refresh(pending)
    assert pending.status == BookingStatus.PENDING


# =============================================================================
# Scheduler and admin paths
# =============================================================================

def test_scheduler_waits_for_start(service, confirmed):
    with pytest.raises(InvalidTransitionError):
        service.apply_scheduler_signal(confirmed.id, SchedulerOutcome.COMPLETED)


def test_scheduler_completes_and_counts_session(db, service, confirmed, mentor, clock):
    clock.advance(days=1, hours=1)

    completed = service.apply_scheduler_signal(confirmed.id, SchedulerOutcome.COMPLETED)

    assert completed.status == BookingStatus.COMPLETED
    profile = db.query(MentorProfile).filter(MentorProfile.user_id == mentor.id).one()
    db.refresh(profile)
    assert profile.total_sessions == 1


def test_scheduler_records_no_show(service, confirmed, clock):
    clock.advance(days=1, hours=1)
    assert service.apply_scheduler_signal(confirmed.id, SchedulerOutcome.NO_SHOW).status == BookingStatus.NO_SHOW


def test_scheduler_ignores_unconfirmed(service, pending, clock):
    clock.advance(days=2)
    with pytest.raises(InvalidTransitionError):
        service.apply_scheduler_signal(pending.id, SchedulerOutcome.COMPLETED)


def test_admin_override_skips_time_guard(service, confirmed, admin, clock):
    clock.advance(days=2)

    cancelled = service.admin_set_status(confirmed.id, admin.id, BookingStatus.CANCELLED)

    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.cancelled_by == admin.id
    assert cancelled.cancellation_reason == "admin override"


def test_admin_override_still_follows_table(service, pending, admin):
    with pytest.raises(InvalidTransitionError):
        service.admin_set_status(pending.id, admin.id, BookingStatus.COMPLETED)


def test_admin_override_requires_admin(service, pending, mentor):
    with pytest.raises(AuthorizationError):
        service.admin_set_status(pending.id, mentor.id, BookingStatus.CANCELLED)


# =============================================================================
# Queries
# =============================================================================

def test_get_booking_visibility(service, pending, mentor, mentee, make_user):
    assert service.get_booking(pending.id, mentor.id).id == pending.id
    assert service.get_booking(pending.id, mentee.id).id == pending.id
    assert service.get_booking(pending.id, make_user(role=UserRole.SUPPORT).id).id == pending.id

    with pytest.raises(NotBookingParticipantError):
        service.get_booking(pending.id, make_user().id)


def test_list_views(service, offering, mentor, mentee, clock):
    first = service.request_booking(offering.id, mentee.id, clock() + timedelta(days=1))
    second = service.request_booking(offering.id, mentee.id, clock() + timedelta(days=2))
    third = service.request_booking(offering.id, mentee.id, clock() + timedelta(days=3))
    service.set_status(first.id, mentor.id, BookingStatus.CONFIRMED)
    service.set_status(third.id, mentee.id, BookingStatus.CANCELLED)

    upcoming = service.list_bookings(mentee.id, BookingRole.MENTEE, BookingListFilter.UPCOMING)
    assert [b.id for b in upcoming.items] == [first.id, second.id]

    pending_view = service.list_bookings(mentor.id, BookingRole.MENTOR, BookingListFilter.PENDING)
    assert [b.id for b in pending_view.items] == [second.id]

    everything = service.list_bookings(mentor.id, BookingRole.MENTOR)
    assert everything.total == 3
    assert [b.id for b in everything.items] == [third.id, second.id, first.id]

    clock.advance(days=1, hours=2)
    past = service.list_bookings(mentee.id, BookingRole.MENTEE, BookingListFilter.PAST)
    assert [b.id for b in past.items] == [first.id]

    assert service.list_bookings(mentee.id, BookingRole.MENTOR).total == 0
