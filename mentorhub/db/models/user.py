"""
User model - Core user entity with profiles
"""
from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, Float,
    ForeignKey, Text, JSON, CheckConstraint
)
from sqlalchemy.orm import relationship
from enum import Enum

from mentorhub.db.base import Base, TimestampMixin, enum_column


class UserRole(str, Enum):
    """User role enumeration"""
    MENTEE = "mentee"
    MENTOR = "mentor"
    ADMIN = "admin"
    MODERATOR = "moderator"
    FINANCE = "finance"
    SUPPORT = "support"


class UserStatus(str, Enum):
    """User account status enumeration"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    PENDING = "pending"


STAFF_ROLES = frozenset({UserRole.ADMIN, UserRole.MODERATOR, UserRole.SUPPORT})


class User(TimestampMixin, Base):
    """User model representing platform users"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=True)
    role = Column(
        enum_column(UserRole, "user_role"),
        default=UserRole.MENTEE,
        nullable=False
    )
    status = Column(
        enum_column(UserStatus, "user_status"),
        default=UserStatus.PENDING,
        nullable=False,
        index=True
    )
    email_verified = Column(Boolean, default=False, nullable=False)
    last_login_at = Column(DateTime, nullable=True)

    # Relationships
    profile = relationship(
        "Profile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan"
    )
    mentor_profile = relationship(
        "MentorProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan"
    )
    match_preferences = relationship(
        "MatchPreferences",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan"
    )
    skills = relationship(
        "UserSkill",
        back_populates="user",
        foreign_keys="UserSkill.user_id",
        cascade="all, delete-orphan"
    )
    offerings = relationship("Offering", back_populates="mentor")

    @property
    def is_active(self) -> bool:
        """Check if user account is active"""
        return self.status == UserStatus.ACTIVE

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def display_name(self) -> str:
        if self.profile and self.profile.display_name:
            return self.profile.display_name
        return self.email

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class Profile(Base):
    """General profile owned by every user, plus the received-review aggregate"""

    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )
    display_name = Column(String(100), nullable=False)
    avatar_url = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)
    languages = Column(JSON, nullable=True)  # ISO 639-1 codes
    timezone = Column(String(64), default="UTC", nullable=False)
    country = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)
    website = Column(String(500), nullable=True)
    social_links = Column(JSON, nullable=True)

    # Maintained by the review ledger with single-statement updates
    rating = Column(Float, default=0.0, nullable=False)
    total_reviews = Column(Integer, default=0, nullable=False)

    updated_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="profile")

    __table_args__ = (
        CheckConstraint("rating >= 0", name="ck_profiles_rating"),
        CheckConstraint("total_reviews >= 0", name="ck_profiles_total_reviews"),
    )

    def __repr__(self):
        return f"<Profile(user_id={self.user_id}, display_name={self.display_name})>"


class MentorProfile(Base):
    """Mentor-specific profile"""

    __tablename__ = "mentor_profiles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )
    headline = Column(String(200), nullable=True)
    hourly_rate_cents = Column(Integer, default=0, nullable=False)
    experience_years = Column(Integer, default=0, nullable=False)
    intro_video_url = Column(String(500), nullable=True)
    is_public = Column(Boolean, default=False, nullable=False)
    specializations = Column(JSON, nullable=True)
    response_time_hours = Column(Integer, default=24, nullable=False)
    total_sessions = Column(Integer, default=0, nullable=False)

    user = relationship("User", back_populates="mentor_profile")

    __table_args__ = (
        CheckConstraint("hourly_rate_cents >= 0", name="ck_mentor_profiles_rate"),
        CheckConstraint("experience_years >= 0", name="ck_mentor_profiles_experience"),
    )

    def __repr__(self):
        return f"<MentorProfile(user_id={self.user_id}, is_public={self.is_public})>"


class MatchPreferences(Base):
    """Mentee preferences used for discovery"""

    __tablename__ = "match_preferences"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )
    goals = Column(JSON, nullable=True)
    preferred_languages = Column(JSON, nullable=True)
    budget_cents = Column(Integer, nullable=True)
    time_commitment = Column(String(100), nullable=True)
    preferred_mentoring_style = Column(String(100), nullable=True)
    current_role = Column(String(200), nullable=True)
    skills_to_develop = Column(JSON, nullable=True)

    user = relationship("User", back_populates="match_preferences")

    def __repr__(self):
        return f"<MatchPreferences(user_id={self.user_id})>"
