"""
Database models package
Exports all models for easy importing
"""
from mentorhub.db.models.user import (
    User,
    Profile,
    MentorProfile,
    MatchPreferences,
    UserRole,
    UserStatus
)
from mentorhub.db.models.skill import Skill, UserSkill
from mentorhub.db.models.offering import Offering, OfferingType, offering_skills
from mentorhub.db.models.booking import (
    Booking,
    BookingStatus,
    ACTIVE_STATUSES,
    TERMINAL_STATUSES
)
from mentorhub.db.models.review import Review

__all__ = [
    # User models
    "User",
    "Profile",
    "MentorProfile",
    "MatchPreferences",
    "UserRole",
    "UserStatus",

    # Skill models
    "Skill",
    "UserSkill",

    # Offering models
    "Offering",
    "OfferingType",
    "offering_skills",

    # Booking models
    "Booking",
    "BookingStatus",
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",

    # Review models
    "Review",
]
