"""
Offering catalog: authoring rules, ownership and discovery.
"""
from datetime import timedelta

import pytest
from pydantic import ValidationError as SchemaValidationError

from mentorhub.core.exceptions import (
    AuthorizationError,
    OfferingNotFoundError,
    ValidationError
)
from mentorhub.db.models import Booking, OfferingType, UserRole, UserStatus
from mentorhub.schemas.offering import OfferingCreate, OfferingFilter, OfferingUpdate
from mentorhub.services.booking_service import BookingService
from mentorhub.services.offering_service import OfferingService, resolve_max_participants


def test_create_one_on_one_defaults_to_single_participant(offering, mentor):
    assert offering.mentor_id == mentor.id
    assert offering.type == OfferingType.ONE_ON_ONE
    assert offering.max_participants == 1
    assert offering.is_active is True
    assert offering.is_group is False


@pytest.mark.parametrize("duration", [14, 481, 0])
def test_duration_out_of_range_rejected(make_offering, mentor, duration):
    with pytest.raises(ValidationError) as exc_info:
        make_offering(mentor, duration_minutes=duration)
    assert exc_info.value.details["field"] == "duration_minutes"


@pytest.mark.parametrize("duration", [15, 480])
def test_duration_bounds_accepted(make_offering, mentor, duration):
    assert make_offering(mentor, duration_minutes=duration).duration_minutes == duration


def test_negative_price_rejected(make_offering, mentor):
    with pytest.raises(ValidationError):
        make_offering(mentor, price_cents=-1)


def test_free_offering_allowed(make_offering, mentor):
    assert make_offering(mentor, price_cents=0).price_cents == 0


@pytest.mark.parametrize("currency", ["US", "USDX", "12A"])
def test_invalid_currency_rejected(make_offering, mentor, currency):
    with pytest.raises(ValidationError):
        make_offering(mentor, currency=currency)


def test_currency_is_upper_cased(make_offering, mentor):
    assert make_offering(mentor, currency="eur").currency == "EUR"


def test_participant_rules_per_type():
    assert resolve_max_participants(OfferingType.ONE_ON_ONE, None) == 1
    assert resolve_max_participants(OfferingType.GROUP, 10) == 10
    assert resolve_max_participants(OfferingType.OFFICE_HOURS, None) == 50

    with pytest.raises(ValidationError):
        resolve_max_participants(OfferingType.ONE_ON_ONE, 3)
    with pytest.raises(ValidationError):
        resolve_max_participants(OfferingType.COHORT, None)
    with pytest.raises(ValidationError):
        resolve_max_participants(OfferingType.GROUP, 1)
    with pytest.raises(ValidationError):
        resolve_max_participants(OfferingType.GROUP, 51)


def test_mentee_cannot_create_offering(db, mentee):
    with pytest.raises(AuthorizationError):
        OfferingService(db).create_offering(
            mentee.id,
            OfferingCreate(title="Nope", duration_minutes=60)
        )


def test_unknown_skill_ids_rejected(make_offering, mentor):
    with pytest.raises(ValidationError) as exc_info:
        make_offering(mentor, skill_ids=[999])
    assert exc_info.value.details["missing"] == [999]


def test_update_by_owner_revalidates_merged_values(db, offering, mentor):
    service = OfferingService(db)

    updated = service.update_offering(offering.id, mentor.id, OfferingUpdate(price_cents=7500))
    assert updated.price_cents == 7500

    with pytest.raises(ValidationError):
        service.update_offering(offering.id, mentor.id, OfferingUpdate(duration_minutes=500))


def test_switching_to_group_requires_participants(db, offering, mentor):
    service = OfferingService(db)

    with pytest.raises(ValidationError):
        service.update_offering(offering.id, mentor.id, OfferingUpdate(type=OfferingType.GROUP))

    updated = service.update_offering(
        offering.id,
        mentor.id,
        OfferingUpdate(type=OfferingType.GROUP, max_participants=8)
    )
    assert updated.max_participants == 8
    assert updated.is_group is True


def test_only_owner_can_update(db, offering, make_user):
    other_mentor = make_user(role=UserRole.MENTOR)
    with pytest.raises(OfferingNotFoundError):
        OfferingService(db).update_offering(offering.id, other_mentor.id, OfferingUpdate(title="Mine now"))


def test_update_rejects_unknown_keys():
    with pytest.raises(SchemaValidationError):
        OfferingUpdate(mentor_id=5)


def test_deactivate_hides_from_discovery_but_keeps_bookings(db, offering, mentor, mentee, clock):
    booking = BookingService(db, clock=clock).request_booking(
        offering.id, mentee.id, clock() + timedelta(days=1)
    )
    service = OfferingService(db)
    service.deactivate_offering(offering.id, mentor.id)

    page = service.list_offerings()
    assert page.total == 0
    assert db.query(Booking).filter(Booking.id == booking.id).one().offering_id == offering.id


def test_discovery_lists_only_public_active_mentors(db, make_user, make_offering):
    visible = make_user(role=UserRole.MENTOR, display_name="Visible")
    hidden = make_user(role=UserRole.MENTOR, display_name="Hidden", is_public=False)
    suspended = make_user(role=UserRole.MENTOR, display_name="Suspended")
    make_offering(visible)
    make_offering(hidden)
    make_offering(suspended)
    suspended.status = UserStatus.SUSPENDED
    db.commit()

    page = OfferingService(db).list_offerings()

    assert page.total == 1
    assert page.items[0].mentor_name == "Visible"


def test_discovery_ordered_by_rating_then_sessions(db, make_user, make_offering):
    low = make_user(role=UserRole.MENTOR, display_name="Low")
    high = make_user(role=UserRole.MENTOR, display_name="High")
    busy = make_user(role=UserRole.MENTOR, display_name="Busy")
    for user in (low, high, busy):
        make_offering(user)
    low.profile.rating = 3.0
    high.profile.rating = 4.8
    busy.profile.rating = 3.0
    busy.mentor_profile.total_sessions = 40
    db.commit()

    page = OfferingService(db).list_offerings()

    assert [item.mentor_name for item in page.items] == ["High", "Busy", "Low"]


def test_discovery_filters(db, make_user, make_offering, make_skill):
    python = make_skill("python")
    junior = make_user(role=UserRole.MENTOR, display_name="Junior", experience_years=1)
    senior = make_user(role=UserRole.MENTOR, display_name="Senior", experience_years=12)
    make_offering(junior, title="Python basics", price_cents=2000, skill_ids=[python.id])
    make_offering(senior, title="System design review", price_cents=15000)

    service = OfferingService(db)

    assert service.list_offerings(OfferingFilter(search="python")).total == 1
    assert service.list_offerings(OfferingFilter(skills=["python"])).items[0].mentor_name == "Junior"
    assert service.list_offerings(OfferingFilter(max_price_cents=5000)).items[0].title == "Python basics"
    assert service.list_offerings(OfferingFilter(min_experience_years=10)).items[0].mentor_name == "Senior"


def test_skill_filter_matches_free_form_tags(db, mentor, make_offering):
    make_offering(mentor, title="Salary negotiation", tags=["Negotiation", "career"])
    make_offering(mentor, title="Career pivots", tags=["career-change"])

    service = OfferingService(db)

    assert [i.title for i in service.list_offerings(OfferingFilter(skills=["negotiation"])).items] == [
        "Salary negotiation"
    ]
    assert [i.title for i in service.list_offerings(OfferingFilter(skills=["career"])).items] == [
        "Salary negotiation"
    ]


def test_discovery_pagination(db, mentor, make_offering):
    for i in range(5):
        make_offering(mentor, title=f"Session {i}")

    page = OfferingService(db).list_offerings(OfferingFilter(limit=2, offset=2))

    assert page.total == 5
    assert len(page.items) == 2
    assert page.has_more is True
