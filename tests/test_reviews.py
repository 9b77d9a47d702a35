"""
Review ledger: submission rules, the ratee's aggregate rating, edits and moderation.
"""
from datetime import timedelta

import pytest

from mentorhub.core.exceptions import (
    AuthorizationError,
    BookingNotFoundError,
    ConflictError,
    DuplicateReviewError,
    InvalidStateError,
    NotBookingParticipantError,
    ValidationError
)
from mentorhub.db.models import BookingStatus, Profile, UserRole
from mentorhub.schemas.booking import SchedulerOutcome
from mentorhub.schemas.review import ReviewDirection
from mentorhub.services.booking_service import BookingService
from mentorhub.services.review_service import ReviewService


@pytest.fixture
def bookings(db, clock):
    return BookingService(db, clock=clock)


@pytest.fixture
def reviews(db, clock):
    return ReviewService(db, clock=clock)


@pytest.fixture
def complete_session(bookings, clock):
    """Book, confirm and complete a session, returning the booking"""
    def _complete(offering, mentee, days_ahead=1):
        booking = bookings.request_booking(offering.id, mentee.id, clock() + timedelta(days=days_ahead))
        bookings.set_status(booking.id, offering.mentor_id, BookingStatus.CONFIRMED)
        clock.advance(days=days_ahead, hours=1)
        return bookings.apply_scheduler_signal(booking.id, SchedulerOutcome.COMPLETED)

    return _complete


def aggregate(db, user_id):
    db.expire_all()
    profile = db.query(Profile).filter(Profile.user_id == user_id).one()
    return profile.rating, profile.total_reviews


def test_marketplace_happy_path(db, bookings, reviews, offering, mentor, mentee, make_user, clock):
    start = clock() + timedelta(days=1)
    booking = bookings.request_booking(offering.id, mentee.id, start)
    assert booking.status == BookingStatus.PENDING

    with pytest.raises(ConflictError):
        bookings.request_booking(offering.id, make_user().id, start)

    assert bookings.set_status(booking.id, mentor.id, BookingStatus.CONFIRMED).status == BookingStatus.CONFIRMED

    with pytest.raises(ConflictError):
        bookings.request_booking(offering.id, make_user().id, start)

    clock.advance(days=1, hours=2)
    assert bookings.apply_scheduler_signal(booking.id, SchedulerOutcome.COMPLETED).status == BookingStatus.COMPLETED

    review = reviews.submit_review(booking.id, mentee.id, 5, "great")
    assert review.ratee_id == mentor.id
    assert aggregate(db, mentor.id) == (5.0, 1)

    with pytest.raises(ConflictError):
        reviews.submit_review(booking.id, mentee.id, 4, "changed my mind")
    assert aggregate(db, mentor.id) == (5.0, 1)


def test_aggregate_is_running_average(db, reviews, complete_session, offering, mentor, make_user):
    for rating in (5, 4, 3):
        booking = complete_session(offering, make_user())
        reviews.submit_review(booking.id, booking.mentee_id, rating)

    rating, count = aggregate(db, mentor.id)
    assert count == 3
    assert rating == pytest.approx(4.0)


def test_both_parties_review_each_other(db, reviews, complete_session, offering, mentor, mentee):
    booking = complete_session(offering, mentee)

    reviews.submit_review(booking.id, mentee.id, 5)
    mentor_review = reviews.submit_review(booking.id, mentor.id, 3)

    assert mentor_review.ratee_id == mentee.id
    assert aggregate(db, mentee.id) == (3.0, 1)
    assert aggregate(db, mentor.id) == (5.0, 1)


@pytest.mark.parametrize("rating", [0, 6, -1, 2.5, True])
def test_rating_must_be_whole_number_in_range(reviews, complete_session, offering, mentee, rating):
    booking = complete_session(offering, mentee)
    with pytest.raises(ValidationError):
        reviews.submit_review(booking.id, mentee.id, rating)


def test_only_completed_bookings_reviewable(bookings, reviews, offering, mentee, clock):
    booking = bookings.request_booking(offering.id, mentee.id, clock() + timedelta(days=1))

    with pytest.raises(InvalidStateError) as exc_info:
        reviews.submit_review(booking.id, mentee.id, 5)
    assert exc_info.value.error_code == "BOOKING_NOT_COMPLETED"


def test_outsider_cannot_review(reviews, complete_session, offering, mentee, make_user):
    booking = complete_session(offering, mentee)
    with pytest.raises(NotBookingParticipantError):
        reviews.submit_review(booking.id, make_user().id, 5)


def test_missing_booking(reviews, mentee):
    with pytest.raises(BookingNotFoundError):
        reviews.submit_review(4242, mentee.id, 5)


def test_duplicate_is_conflict(reviews, complete_session, offering, mentee):
    booking = complete_session(offering, mentee)
    reviews.submit_review(booking.id, mentee.id, 4)

    with pytest.raises(DuplicateReviewError):
        reviews.submit_review(booking.id, mentee.id, 4)


def test_duplicate_past_precheck_rejected_by_store(db, reviews, complete_session, offering, mentor, mentee, monkeypatch):
    booking = complete_session(offering, mentee)
    reviews.submit_review(booking.id, mentee.id, 4)

    # Second submission that read "not yet reviewed" before the first committed
    monkeypatch.setattr(reviews, "_has_reviewed", lambda *args: False)

    with pytest.raises(DuplicateReviewError):
        reviews.submit_review(booking.id, mentee.id, 1)

    assert aggregate(db, mentor.id) == (4.0, 1)


def test_rater_edits_and_aggregate_follows(db, reviews, complete_session, offering, mentor, make_user):
    first = complete_session(offering, make_user())
    second = complete_session(offering, make_user())
    review = reviews.submit_review(first.id, first.mentee_id, 2)
    reviews.submit_review(second.id, second.mentee_id, 4)

    updated = reviews.update_review(review.id, first.mentee_id, rating=4, comment="Better on reflection")

    assert updated.rating == 4
    assert updated.comment == "Better on reflection"
    rating, count = aggregate(db, mentor.id)
    assert count == 2
    assert rating == pytest.approx(4.0)


def test_only_rater_can_edit(reviews, complete_session, offering, mentor, mentee):
    booking = complete_session(offering, mentee)
    review = reviews.submit_review(booking.id, mentee.id, 4)

    with pytest.raises(AuthorizationError):
        reviews.update_review(review.id, mentor.id, rating=1)


def test_moderated_reviews_are_immutable(reviews, complete_session, offering, mentee, make_user):
    booking = complete_session(offering, mentee)
    review = reviews.submit_review(booking.id, mentee.id, 4)
    moderator = make_user(role=UserRole.MODERATOR)

    moderated = reviews.moderate_review(review.id, moderator.id)
    assert moderated.is_moderated is True
    assert moderated.moderated_by == moderator.id

    with pytest.raises(InvalidStateError):
        reviews.update_review(review.id, mentee.id, comment="edit")


def test_moderation_requires_moderator(reviews, complete_session, offering, mentee):
    booking = complete_session(offering, mentee)
    review = reviews.submit_review(booking.id, mentee.id, 4)

    with pytest.raises(AuthorizationError):
        reviews.moderate_review(review.id, mentee.id)


def test_list_given_and_received(reviews, complete_session, offering, mentor, mentee):
    first = complete_session(offering, mentee)
    second = complete_session(offering, mentee)
    older = reviews.submit_review(first.id, mentee.id, 4)
    newer = reviews.submit_review(second.id, mentee.id, 5)

    given = reviews.list_reviews(mentee.id, ReviewDirection.GIVEN)
    received = reviews.list_reviews(mentor.id, ReviewDirection.RECEIVED)

    assert given.total == 2
    assert {r.id for r in given.items} == {older.id, newer.id}
    assert [r.id for r in received.items] == [r.id for r in given.items]
    assert reviews.list_reviews(mentor.id, ReviewDirection.GIVEN).total == 0
