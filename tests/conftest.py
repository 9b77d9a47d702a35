"""
Shared fixtures: in-memory store, a controllable clock, factories and an API client.
"""
import itertools
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from mentorhub.core.config import Settings
from mentorhub.core.security import create_access_token
from mentorhub.db.session import create_engine_from_settings, create_session_factory, init_db
from mentorhub.db.models import User, Profile, MentorProfile, MatchPreferences, Skill, UserRole, UserStatus
from mentorhub.schemas.offering import OfferingCreate
from mentorhub.services.offering_service import OfferingService

NOW = datetime(2030, 1, 6, 9, 0)


class FakeClock:
    """Callable clock the tests can move forward"""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def test_settings():
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET_KEY="test-secret",
        DEBUG=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def engine(test_settings):
    engine = create_engine_from_settings(test_settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = create_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(
        role=UserRole.MENTEE,
        status=UserStatus.ACTIVE,
        display_name=None,
        is_public=True,
        hourly_rate_cents=6000,
        experience_years=5,
        headline=None
    ):
        n = next(counter)
        user = User(email=f"{role.value}{n}@example.com", role=role, status=status)
        user.profile = Profile(
            display_name=display_name or f"{role.value.title()} {n}",
            languages=[],
            rating=0.0,
            total_reviews=0
        )
        if role == UserRole.MENTOR:
            user.mentor_profile = MentorProfile(
                is_public=is_public,
                hourly_rate_cents=hourly_rate_cents,
                experience_years=experience_years,
                headline=headline,
                specializations=[]
            )
        elif role == UserRole.MENTEE:
            user.match_preferences = MatchPreferences(goals=[], skills_to_develop=[])
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def mentor(make_user):
    return make_user(role=UserRole.MENTOR, display_name="Grace Mentor", headline="Staff engineer and coach")


@pytest.fixture
def mentee(make_user):
    return make_user(display_name="Alice Mentee")


@pytest.fixture
def admin(make_user):
    return make_user(role=UserRole.ADMIN, display_name="Admin")


@pytest.fixture
def make_skill(db):
    def _make(slug="python", name=None, category="Engineering"):
        skill = Skill(slug=slug, name=name or slug.title(), category=category)
        db.add(skill)
        db.commit()
        db.refresh(skill)
        return skill

    return _make


@pytest.fixture
def make_offering(db):
    def _make(mentor, **overrides):
        fields = {
            "title": "Career coaching",
            "duration_minutes": 60,
            "price_cents": 5000,
            "currency": "USD",
        }
        fields.update(overrides)
        return OfferingService(db).create_offering(mentor.id, OfferingCreate(**fields))

    return _make


@pytest.fixture
def offering(make_offering, mentor):
    return make_offering(mentor)


# =============================================================================
# API
# =============================================================================

@pytest.fixture
def app(test_settings, engine):
    from mentorhub.main import create_app

    application = create_app(test_settings)
    application.state.engine = engine
    application.state.session_factory = create_session_factory(engine)
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers(test_settings):
    def _headers(user):
        token = create_access_token({"sub": str(user.id)}, app_settings=test_settings)
        return {"Authorization": f"Bearer {token}"}

    return _headers
