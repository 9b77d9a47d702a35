"""
Dashboard projections over the booking and review ledgers.
"""
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from mentorhub.core.exceptions import UserNotFoundError
from mentorhub.db.models import BookingStatus, UserRole
from mentorhub.schemas.booking import SchedulerOutcome
from mentorhub.services.booking_service import BookingService
from mentorhub.services.dashboard_service import DashboardService
from mentorhub.services.review_service import ReviewService


@pytest.fixture
def dashboard(db):
    return DashboardService(db)


def test_new_user_gets_zero_stats(dashboard, mentee):
    stats = dashboard.get_stats(mentee.id)

    assert stats.total_sessions == 0
    assert stats.active_connections == 0
    assert stats.total_hours == 0.0
    assert stats.average_rating == 0.0
    assert stats.role == UserRole.MENTEE


def test_unknown_user(dashboard):
    with pytest.raises(UserNotFoundError):
        dashboard.get_stats(999)


def test_stats_for_both_roles(db, dashboard, clock, make_offering, mentor, mentee, make_user):
    bookings = BookingService(db, clock=clock)
    reviews = ReviewService(db, clock=clock)
    other = make_user()
    hour = make_offering(mentor, title="Deep dive", duration_minutes=60)
    short = make_offering(mentor, title="Quick sync", duration_minutes=20)

    first = bookings.request_booking(hour.id, mentee.id, clock() + timedelta(days=1))
    bookings.request_booking(short.id, mentee.id, clock() + timedelta(days=2))
    bookings.request_booking(hour.id, other.id, clock() + timedelta(days=3))

    bookings.set_status(first.id, mentor.id, BookingStatus.CONFIRMED)
    clock.advance(days=1, hours=2)
    bookings.apply_scheduler_signal(first.id, SchedulerOutcome.COMPLETED)
    reviews.submit_review(first.id, mentee.id, 5)
    reviews.submit_review(first.id, mentor.id, 4)

    mentor_stats = dashboard.get_stats(mentor.id)
    assert mentor_stats.role == UserRole.MENTOR
    assert mentor_stats.total_sessions == 3
    assert mentor_stats.active_connections == 2
    assert mentor_stats.total_hours == pytest.approx(2.33)
    assert mentor_stats.average_rating == 5.0

    mentee_stats = dashboard.get_stats(mentee.id)
    assert mentee_stats.total_sessions == 2
    assert mentee_stats.active_connections == 1
    assert mentee_stats.total_hours == pytest.approx(1.33)
    assert mentee_stats.average_rating == 4.0


def test_average_rounded_to_one_decimal(db, dashboard, clock, offering, mentor, make_user):
    bookings = BookingService(db, clock=clock)
    reviews = ReviewService(db, clock=clock)
    for rating in (5, 4, 4):
        mentee = make_user()
        booking = bookings.request_booking(offering.id, mentee.id, clock() + timedelta(days=1))
        bookings.set_status(booking.id, mentor.id, BookingStatus.CONFIRMED)
        clock.advance(days=1, hours=1)
        bookings.apply_scheduler_signal(booking.id, SchedulerOutcome.COMPLETED)
        reviews.submit_review(booking.id, mentee.id, rating)

    assert dashboard.get_stats(mentor.id).average_rating == 4.3


def test_store_failure_falls_back_to_zeros(db, dashboard, mentor, monkeypatch):
    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "query", broken_query)

    stats = dashboard.get_stats(mentor.id, UserRole.MENTOR)

    assert stats.total_sessions == 0
    assert stats.average_rating == 0.0
    assert stats.role == UserRole.MENTOR
    assert dashboard.get_recent_activity(mentor.id, UserRole.MENTOR) == []


def test_recent_activity_newest_first(db, clock, offering, mentor, mentee, make_user):
    bookings = BookingService(db, clock=clock)
    direct = bookings.request_direct_booking(mentor.id, mentee.id, clock() + timedelta(days=5))
    for day in range(1, 4):
        bookings.request_booking(offering.id, make_user().id, clock() + timedelta(days=day))

    activity = DashboardService(db, recent_activity_limit=2).get_recent_activity(mentor.id)

    assert len(activity) == 2
    assert all(item.title == "Career coaching" for item in activity)
    assert activity[0].id > activity[1].id

    mentee_activity = DashboardService(db).get_recent_activity(mentee.id)
    assert mentee_activity[0].id == direct.id
    assert mentee_activity[0].title == "Direct session"
    assert mentee_activity[0].with_name == "Grace Mentor"
    assert mentee_activity[0].status == BookingStatus.PENDING
